from __future__ import annotations

import logging
from typing import Any, Optional

from flask import jsonify, request
from werkzeug.exceptions import HTTPException

api_logger = logging.getLogger("siscont.api")


class SiscontError(RuntimeError):
    """Base error surfaced to API clients as ``{"error": message}``."""

    status_code = 500

    def __init__(self, message: str, *, status_code: Optional[int] = None, **extra: Any) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.extra = extra

    def to_dict(self) -> dict:
        payload = {"error": self.message}
        payload.update(self.extra)
        return payload


class ValidationError(SiscontError):
    status_code = 400

    def __init__(self, message: str, *, fields: Optional[dict[str, str]] = None) -> None:
        if fields:
            super().__init__(message, fields=fields)
        else:
            super().__init__(message)
        self.fields = fields or {}


class ParseError(SiscontError):
    """The uploaded spreadsheet could not be opened or has no header row."""

    status_code = 500


class ReconciliationError(SiscontError):
    """A row failed during Distribute; earlier rows may already be committed."""

    status_code = 500

    def __init__(self, message: str, *, row_number: int, committed_rows: int) -> None:
        super().__init__(message, row=row_number, committedRows=committed_rows)
        self.row_number = row_number
        self.committed_rows = committed_rows


class NotFoundError(SiscontError):
    status_code = 404


def _is_api_request() -> bool:
    return request.path.startswith("/api/")


def register_error_handlers(app) -> None:
    @app.errorhandler(SiscontError)
    def _handle_siscont_error(exc: SiscontError):
        if exc.status_code >= 500:
            api_logger.error(
                "event=api.error kind=%s path=%s err=%s", type(exc).__name__, request.path, exc.message
            )
        return jsonify(exc.to_dict()), exc.status_code

    @app.errorhandler(HTTPException)
    def _handle_http_error(exc: HTTPException):
        if not _is_api_request():
            return exc
        return jsonify({"error": exc.description or exc.name}), exc.code

    @app.errorhandler(Exception)
    def _handle_unexpected(exc: Exception):
        if isinstance(exc, HTTPException):
            return _handle_http_error(exc)
        api_logger.exception("event=api.unhandled path=%s err=%s", request.path, str(exc))
        return jsonify({"error": "Error interno del servidor"}), 500

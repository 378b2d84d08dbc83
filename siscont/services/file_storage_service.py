from __future__ import annotations

import hashlib
import os
import time
import uuid
from dataclasses import dataclass

from flask import current_app
from werkzeug.utils import secure_filename

from ..errors import ParseError

# openpyxl reads the OOXML family only; legacy .xls is rejected up front.
ALLOWED_EXTENSIONS = {"xlsx", "xlsm"}


@dataclass(frozen=True)
class StoredFile:
    rel_path: str
    abs_path: str
    original_filename: str
    size_bytes: int
    sha256: str


def _upload_root() -> str:
    return current_app.config.get("UPLOAD_FOLDER") or os.path.join(current_app.instance_path, "uploads")


def ensure_upload_root() -> str:
    root = _upload_root()
    os.makedirs(root, exist_ok=True)
    return root


def _ext_from_filename(filename: str) -> str:
    filename = (filename or "").lower()
    if "." not in filename:
        return ""
    return filename.rsplit(".", 1)[-1]


def validate_extension(filename: str) -> str:
    ext = _ext_from_filename(filename)
    if ext not in ALLOWED_EXTENSIONS:
        raise ParseError(f"Extensión no soportada: {ext or '(vacía)'}")
    return ext


def _sha256_file(path: str) -> str:
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def _stored_name(original: str) -> str:
    # "<epoch ms>-<rand>-<name>": sortable by upload time, never colliding
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}-{original}"


def store_upload(file_storage, *, folder_rel: str | None = "importacion") -> StoredFile:
    """Store an uploaded spreadsheet under UPLOAD_FOLDER.

    Files are kept indefinitely; there is no cleanup policy.
    """
    if not file_storage or not getattr(file_storage, "filename", None):
        raise ParseError("No se encontró ningún archivo")

    original = secure_filename(file_storage.filename)
    if not original:
        raise ParseError("Nombre de archivo inválido")
    validate_extension(original)

    root = ensure_upload_root()
    folder_rel = (folder_rel or "").strip().strip("/")
    abs_folder = os.path.join(root, folder_rel) if folder_rel else root
    os.makedirs(abs_folder, exist_ok=True)

    abs_path = os.path.join(abs_folder, _stored_name(original))
    file_storage.save(abs_path)

    return StoredFile(
        rel_path=os.path.relpath(abs_path, root),
        abs_path=abs_path,
        original_filename=original,
        size_bytes=os.path.getsize(abs_path),
        sha256=_sha256_file(abs_path),
    )


def store_path(path: str, *, folder_rel: str | None = "importacion") -> StoredFile:
    """Copy a local file into the upload area (used by the CLI importer)."""
    original = secure_filename(os.path.basename(path or ""))
    if not original:
        raise ParseError("Nombre de archivo inválido")
    validate_extension(original)
    if not os.path.isfile(path):
        raise ParseError(f"No se encontró el archivo: {path}")

    root = ensure_upload_root()
    folder_rel = (folder_rel or "").strip().strip("/")
    abs_folder = os.path.join(root, folder_rel) if folder_rel else root
    os.makedirs(abs_folder, exist_ok=True)

    abs_path = os.path.join(abs_folder, _stored_name(original))
    with open(path, "rb") as src, open(abs_path, "wb") as dst:
        for chunk in iter(lambda: src.read(1024 * 1024), b""):
            dst.write(chunk)

    return StoredFile(
        rel_path=os.path.relpath(abs_path, root),
        abs_path=abs_path,
        original_filename=original,
        size_bytes=os.path.getsize(abs_path),
        sha256=_sha256_file(abs_path),
    )


def resolve_abs_path(rel_path: str) -> str:
    root = ensure_upload_root()
    # prevent path traversal
    rel_path = (rel_path or "").replace("\\", "/").lstrip("/")
    abs_path = os.path.abspath(os.path.join(root, rel_path))
    if not abs_path.startswith(os.path.abspath(root) + os.sep):
        raise ParseError("Ruta de archivo inválida")
    return abs_path

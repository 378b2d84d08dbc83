from __future__ import annotations

import uuid
from datetime import datetime

from ..extensions import db


class ImportSession(db.Model):
    """Tracks one uploaded workbook between preview and Distribute.

    Clients get ``token`` back as ``importId`` and must send it to Distribute,
    so the rows committed are always the ones that were previewed.
    """

    __tablename__ = "sisevo_importaciones"

    STATUS_UPLOADED = "uploaded"
    STATUS_DISTRIBUTED = "distributed"
    STATUS_FAILED = "failed"

    id = db.Column(db.Integer, primary_key=True)
    token = db.Column(db.String(32), nullable=False, unique=True, index=True, default=lambda: uuid.uuid4().hex)

    storage_path = db.Column(db.String(512), nullable=False)
    original_filename = db.Column(db.String(255), nullable=True)
    size_bytes = db.Column(db.Integer, nullable=False, default=0)
    sha256 = db.Column(db.String(64), nullable=True)

    headers_json = db.Column(db.JSON, nullable=False, default=list)
    row_count = db.Column(db.Integer, nullable=False, default=0)

    status = db.Column(db.String(16), nullable=False, default=STATUS_UPLOADED)  # uploaded|distributed|failed
    created_rows = db.Column(db.Integer, nullable=False, default=0)
    updated_rows = db.Column(db.Integer, nullable=False, default=0)
    skipped_rows = db.Column(db.Integer, nullable=False, default=0)
    error = db.Column(db.Text, nullable=True)

    user_id = db.Column(db.Integer, db.ForeignKey("sisevo_users.id", ondelete="SET NULL"), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    distributed_at = db.Column(db.DateTime, nullable=True)

    def to_dict(self) -> dict:
        return {
            "importId": self.token,
            "filename": self.original_filename,
            "headers": list(self.headers_json or []),
            "rowCount": self.row_count,
            "status": self.status,
            "created": self.created_rows,
            "updated": self.updated_rows,
            "skipped": self.skipped_rows,
            "error": self.error,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "distributedAt": self.distributed_at.isoformat() if self.distributed_at else None,
        }

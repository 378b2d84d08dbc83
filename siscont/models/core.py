from __future__ import annotations

from datetime import datetime

from flask_login import UserMixin
from werkzeug.security import check_password_hash, generate_password_hash

from ..extensions import db


class UserRole:
    ADMIN = "admin"
    EMPRESA = "empresa"
    ASISTENTE = "asistente"


class Empresa(db.Model):
    """The reporting company (RUC + razón social). Only the first row is used."""

    __tablename__ = "sisevo_empresa"

    id = db.Column(db.Integer, primary_key=True)
    ruc = db.Column(db.String(20), nullable=False, unique=True)
    razon_social = db.Column(db.String(255), nullable=False)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    @classmethod
    def current(cls) -> "Empresa | None":
        return cls.query.order_by(cls.id.asc()).first()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "ruc": self.ruc,
            "razonSocial": self.razon_social,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


class User(UserMixin, db.Model):
    __tablename__ = "sisevo_users"

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), nullable=False, unique=True, index=True)
    password_hash = db.Column(db.String(255), nullable=True)
    role = db.Column(db.String(32), nullable=False, default=UserRole.ASISTENTE)
    nombre = db.Column(db.String(160), nullable=False)
    email = db.Column(db.String(255), nullable=False)
    empresa_id = db.Column(db.Integer, db.ForeignKey("sisevo_empresa.id", ondelete="SET NULL"), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_login_at = db.Column(db.DateTime, nullable=True)

    empresa = db.relationship("Empresa", backref=db.backref("users", lazy="dynamic"))

    def set_password(self, password: str) -> None:
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def has_role(self, code: str) -> bool:
        return self.role == code

    def to_dict(self) -> dict:
        # never expose the password hash
        return {
            "id": self.id,
            "username": self.username,
            "role": self.role,
            "nombre": self.nombre,
            "email": self.email,
            "empresaId": self.empresa_id,
        }

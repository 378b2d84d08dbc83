from flask import Blueprint

bp = Blueprint("reportes", __name__, url_prefix="/api/reportes")

from . import routes  # noqa: E402,F401

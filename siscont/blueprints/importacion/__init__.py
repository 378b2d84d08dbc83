from flask import Blueprint

bp = Blueprint("importacion", __name__, url_prefix="/api/importacion")

from . import routes  # noqa: E402,F401

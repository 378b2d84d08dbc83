import os
from urllib.parse import quote_plus


def _project_root() -> str:
    return os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))


def _sqlite_db_uri(db_filename: str = "siscont.db") -> str:
    """Return a SQLite URI that points to a writable location.

    The database lives in the project's "instance" directory rather than next
    to the source code, which is often mounted read-only.
    """
    instance_dir = os.path.join(_project_root(), "instance")
    os.makedirs(instance_dir, exist_ok=True)
    db_path = os.path.join(instance_dir, db_filename)
    # SQLAlchemy expects forward slashes in SQLite URIs.
    db_path = db_path.replace("\\", "/")
    return f"sqlite:///{db_path}"


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-change-me")

    if os.environ.get("DATABASE_URL"):
        SQLALCHEMY_DATABASE_URI = os.environ["DATABASE_URL"]
    else:
        db_host = os.environ.get("DB_HOST")
        db_user = os.environ.get("DB_USER")
        db_password = os.environ.get("DB_PASSWORD")
        db_name = os.environ.get("DB_NAME", "siscont")
        db_port = os.environ.get("DB_PORT", "5432")

        if all([db_host, db_user, db_password]):
            SQLALCHEMY_DATABASE_URI = (
                "postgresql+psycopg2://"
                f"{quote_plus(db_user)}:{quote_plus(db_password)}"
                f"@{db_host}:{db_port}/{quote_plus(db_name)}"
            )
        else:
            # local dev fallback
            SQLALCHEMY_DATABASE_URI = _sqlite_db_uri("siscont.db")

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Security / session
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = _env_flag("SESSION_COOKIE_SECURE")
    PERMANENT_SESSION_LIFETIME = int(os.environ.get("SESSION_LIFETIME_SECONDS", str(24 * 60 * 60)))

    # Spreadsheet uploads (never cleaned up automatically)
    UPLOAD_FOLDER = os.environ.get("UPLOAD_FOLDER", os.path.join(_project_root(), "instance", "uploads"))
    MAX_CONTENT_LENGTH = int(os.environ.get("MAX_CONTENT_LENGTH", str(20 * 1024 * 1024)))

    # Distribute commits row by row unless this is enabled; then the whole
    # batch is rolled back when any row fails.
    IMPORT_ATOMIC_BATCH = _env_flag("IMPORT_ATOMIC_BATCH")

    # es-PE short date used in Formato 7.1
    REPORT_DATE_FORMAT = os.environ.get("REPORT_DATE_FORMAT", "%d/%m/%Y")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    # Dev convenience: auto-create tables when no migrations were run yet.
    # In production you should run Alembic migrations instead.
    AUTO_CREATE_DB = _env_flag("AUTO_CREATE_DB", "true")


class DevConfig(Config):
    DEBUG = True


class ProdConfig(Config):
    DEBUG = False
    # Enable in production behind TLS
    SESSION_COOKIE_SECURE = os.environ.get("COOKIE_SECURE", "0") == "1"
    AUTO_CREATE_DB = _env_flag("AUTO_CREATE_DB", "false")

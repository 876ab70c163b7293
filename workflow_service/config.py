"""
Configuration — Workflow Service
Builds the Flask config mapping. This is the only module that reads the
process environment; create_app() given an explicit mapping never does.
"""

import os
from dotenv import load_dotenv

DEFAULTS = {
    "SQLALCHEMY_TRACK_MODIFICATIONS": False,
    "JWT_TOKEN_LOCATION": ["headers"],
    "ADMIN_SECRET": None,
    "STORE_TIMEOUT_SECONDS": 5.0,
    "STORE_READ_RETRIES": 3,
    "STORE_RETRY_DELAY": 0.2,
    "MESSAGE_MAX_LENGTH": 4000,
    "LOG_LEVEL": "INFO",
    "PORT": 5004,
    "AUTO_CREATE_TABLES": True,
}


def database_uri(environ):
    if environ.get("DATABASE_URL"):
        return environ["DATABASE_URL"]
    return (
        f"postgresql://{environ.get('WORKFLOW_DB_USER', 'workflow_svc_user')}"
        f":{environ.get('WORKFLOW_DB_PASS', 'password')}"
        f"@{environ.get('WORKFLOW_DB_HOST', 'workflow-db')}"
        f":5432"
        f"/{environ.get('WORKFLOW_DB_NAME', 'workflow_db')}"
    )


def engine_options(uri, timeout):
    """Bounded store timeouts. Only PostgreSQL gets connect/statement limits."""
    if not uri.startswith("postgresql"):
        return {}
    return {
        "pool_pre_ping": True,
        "pool_timeout": timeout,
        "connect_args": {
            "connect_timeout": max(1, int(timeout)),
            "options": f"-c statement_timeout={int(timeout * 1000)}",
        },
    }


def load_config(environ=None):
    if environ is None:
        load_dotenv()
        environ = os.environ

    config = dict(DEFAULTS)
    config["SQLALCHEMY_DATABASE_URI"] = database_uri(environ)
    config["JWT_SECRET_KEY"] = environ.get("JWT_SECRET", "dev-secret-change-me")
    config["ADMIN_SECRET"] = environ.get("ADMIN_SECRET") or None
    config["STORE_TIMEOUT_SECONDS"] = float(environ.get("STORE_TIMEOUT_SECONDS", DEFAULTS["STORE_TIMEOUT_SECONDS"]))
    config["STORE_READ_RETRIES"] = int(environ.get("STORE_READ_RETRIES", DEFAULTS["STORE_READ_RETRIES"]))
    config["STORE_RETRY_DELAY"] = float(environ.get("STORE_RETRY_DELAY", DEFAULTS["STORE_RETRY_DELAY"]))
    config["MESSAGE_MAX_LENGTH"] = int(environ.get("MESSAGE_MAX_LENGTH", DEFAULTS["MESSAGE_MAX_LENGTH"]))
    config["LOG_LEVEL"] = environ.get("LOG_LEVEL", DEFAULTS["LOG_LEVEL"]).upper()
    config["PORT"] = int(environ.get("PORT", DEFAULTS["PORT"]))
    config["AUTO_CREATE_TABLES"] = environ.get("AUTO_CREATE_TABLES", "true").lower() in ("1", "true", "yes")
    return config

import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./pos_auth.db")
    DB_CREATE_TABLES = bool(data.get("DB_CREATE_TABLES", True))
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")

    # Token signing
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    JWT_ALGORITHM = data.get("JWT_ALGORITHM", "HS256")
    JWT_ISSUER = data.get("JWT_ISSUER", "pos-auth")
    JWT_AUDIENCE = data.get("JWT_AUDIENCE", "pos-api")
    ACCESS_TOKEN_TTL_MINUTES = int(data.get("ACCESS_TOKEN_TTL_MINUTES", 60))
    IMPERSONATION_TOKEN_TTL_MINUTES = int(data.get("IMPERSONATION_TOKEN_TTL_MINUTES", 480))

    # Sessions
    REFRESH_TOKEN_TTL_DAYS = int(data.get("REFRESH_TOKEN_TTL_DAYS", 7))
    MAX_DEVICES = int(data.get("MAX_DEVICES", 5))
    INACTIVITY_TIMEOUT_MINUTES = int(data.get("INACTIVITY_TIMEOUT_MINUTES", 30))
    SESSION_SWEEP_INTERVAL_SECONDS = int(data.get("SESSION_SWEEP_INTERVAL_SECONDS", 900))

    # Credentials
    BCRYPT_ROUNDS = int(data.get("BCRYPT_ROUNDS", 12))

    ADMIN_API_KEY = data.get("ADMIN_API_KEY", "test-admin-key-12345")

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
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./employee_auth.db")
    REDIS_URL = data.get("REDIS_URL", "redis://localhost:6379/0")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    DEV_MODE = bool(data.get("DEV_MODE", False))
    ADMIN_API_KEY = data.get("ADMIN_API_KEY", "test-admin-key-12345")

    # Backends are selected once at start-up: "sql" | "memory"
    STORE_BACKEND = data.get("STORE_BACKEND", "sql")
    # "redis" | "memory"
    CACHE_BACKEND = data.get("CACHE_BACKEND", "memory")
    # "smtp" | "console"
    DELIVERY_BACKEND = data.get("DELIVERY_BACKEND", "console")

    # Tokens
    JWT_SECRET = data.get("JWT_SECRET", "dev-secret-key-change-in-production")
    JWT_ISSUER = data.get("JWT_ISSUER", "employee-auth-service")
    JWT_AUDIENCE = data.get("JWT_AUDIENCE", "employee-portal")
    JWT_ACCESS_TTL_SECONDS = int(data.get("JWT_ACCESS_TTL_SECONDS", 15 * 60))
    JWT_REFRESH_TTL_SECONDS = int(data.get("JWT_REFRESH_TTL_SECONDS", 7 * 24 * 60 * 60))

    # Credential lockout
    LOGIN_MAX_ATTEMPTS = int(data.get("LOGIN_MAX_ATTEMPTS", 5))
    LOGIN_LOCK_SECONDS = int(data.get("LOGIN_LOCK_SECONDS", 2 * 60 * 60))
    BCRYPT_ROUNDS = int(data.get("BCRYPT_ROUNDS", 12))

    # OTP sessions
    OTP_TTL_SECONDS = int(data.get("OTP_TTL_SECONDS", 5 * 60))
    OTP_MAX_ATTEMPTS = int(data.get("OTP_MAX_ATTEMPTS", 3))
    OTP_RESEND_COOLDOWN_SECONDS = int(data.get("OTP_RESEND_COOLDOWN_SECONDS", 60))
    OTP_REAPER_INTERVAL_SECONDS = int(data.get("OTP_REAPER_INTERVAL_SECONDS", 0))

    # Passcode delivery
    DELIVERY_TIMEOUT_SECONDS = float(data.get("DELIVERY_TIMEOUT_SECONDS", 10))
    SMTP_HOST = data.get("SMTP_HOST", "localhost")
    SMTP_PORT = int(data.get("SMTP_PORT", 587))
    SMTP_USER = data.get("SMTP_USER", "")
    SMTP_PASS = data.get("SMTP_PASS", "")
    SMTP_USE_TLS = bool(data.get("SMTP_USE_TLS", True))
    SMTP_FROM = data.get("SMTP_FROM", "no-reply@example.com")
    SMS_GATEWAY_URL = data.get("SMS_GATEWAY_URL", "")
    SMS_API_KEY = data.get("SMS_API_KEY", "")
    SMS_SENDER_ID = data.get("SMS_SENDER_ID", "EMPAUTH")

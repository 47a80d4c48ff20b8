import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "dev-secret-key"

    DB_USER = os.environ.get("DB_USER", "root")
    DB_PASSWORD = os.environ.get("DB_PASSWORD", "")
    DB_HOST = os.environ.get("DB_HOST", "localhost")
    DB_PORT = int(os.environ.get("DB_PORT", "3306"))
    DB_NAME = os.environ.get("DB_NAME", "class_attendance")

    # Dev helpers
    AUTO_INIT_DB = bool(int(os.environ.get("AUTO_INIT_DB", "0")))
    AUTO_SEED_DB = bool(int(os.environ.get("AUTO_SEED_DB", "0")))

    # Attendance rules
    GLOBAL_PIN = os.environ.get("GLOBAL_PIN", "1945")
    UTC_OFFSET_MINUTES = int(os.environ.get("UTC_OFFSET_MINUTES", "330"))
    SWEEP_COOLDOWN_SECONDS = int(os.environ.get("SWEEP_COOLDOWN_SECONDS", "3600"))

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    API_PREFIX = os.environ.get("API_PREFIX", "/api")


def db_config() -> dict:
    return {
        "host": Config.DB_HOST,
        "port": Config.DB_PORT,
        "user": Config.DB_USER,
        "password": Config.DB_PASSWORD,
        "database": Config.DB_NAME,
    }

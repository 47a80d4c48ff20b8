import os

from .config import Config, db_config

SECRET_KEY = Config.SECRET_KEY
DB_CONFIG = db_config()

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = Config.AUTO_SEED_DB

GLOBAL_PIN = Config.GLOBAL_PIN
UTC_OFFSET_MINUTES = Config.UTC_OFFSET_MINUTES
SWEEP_COOLDOWN_SECONDS = Config.SWEEP_COOLDOWN_SECONDS
LOG_LEVEL = "DEBUG"
API_PREFIX = Config.API_PREFIX

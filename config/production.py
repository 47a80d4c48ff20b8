import os

from .config import Config, db_config

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")
DB_CONFIG = db_config()

DEBUG = False

AUTO_INIT_DB = Config.AUTO_INIT_DB
AUTO_SEED_DB = Config.AUTO_SEED_DB

GLOBAL_PIN = Config.GLOBAL_PIN
UTC_OFFSET_MINUTES = Config.UTC_OFFSET_MINUTES
SWEEP_COOLDOWN_SECONDS = Config.SWEEP_COOLDOWN_SECONDS
LOG_LEVEL = Config.LOG_LEVEL
API_PREFIX = Config.API_PREFIX

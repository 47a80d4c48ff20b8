from .config import Config, db_config

SECRET_KEY = "test-secret"
DB_CONFIG = db_config()

DEBUG = False
TESTING = True

AUTO_INIT_DB = False
AUTO_SEED_DB = False

GLOBAL_PIN = "1945"
UTC_OFFSET_MINUTES = 330
# Tests drive the sweeper directly.
SWEEP_COOLDOWN_SECONDS = 0
LOG_LEVEL = "WARNING"
API_PREFIX = Config.API_PREFIX

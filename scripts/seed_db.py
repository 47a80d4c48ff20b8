from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.class_attendance.class_attendance.database.bootstrap import (
    DEMO_STAFF,
    apply_seed_sql,
    ensure_demo_staff,
)


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
    ensure_demo_staff(db_config)

    print(f"OK: seeded {db_config.get('database')} (demo staff: {', '.join(s[1] for s in DEMO_STAFF)})")


if __name__ == "__main__":
    main()

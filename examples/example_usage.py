"""Print the roll-call report straight from the service layer, without Flask."""

import importlib

from config import get_settings_module

from src.class_attendance.class_attendance.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(
        db_config=settings.DB_CONFIG,
        global_pin=settings.GLOBAL_PIN,
        offset_minutes=settings.UTC_OFFSET_MINUTES,
        sweep_cooldown_seconds=settings.SWEEP_COOLDOWN_SECONDS,
    )
    container.sweeper.maybe_sweep()

    summaries = container.report_service.roll_call_report()
    if not summaries:
        print("No attendance records found.")
        return
    print("\n\n".join(s.as_text() for s in summaries))


if __name__ == "__main__":
    main()

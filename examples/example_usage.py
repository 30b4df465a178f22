"""Example: drive the service layer directly (no Flask).

Controllers stay thin; every rule lives in the services.
"""

import importlib
from datetime import datetime

from config import get_settings_module

from src.leave_system.leave_system.container import build_container
from src.leave_system.leave_system.core.enums import LeaveType


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, timezone=settings.TIMEZONE)

    service = container.leave_service
    print(service.compute_hours(LeaveType.ANNUAL, datetime(2026, 10, 19, 8), datetime(2026, 10, 20, 17, 30)))
    print(service.compute_hours(LeaveType.OVERTIME, datetime(2026, 10, 19, 18), datetime(2026, 10, 19, 20, 30)))

    me = container.employee_service.get("00000000-0000-0000-0000-000000000004")
    print(service.get_quota(me, LeaveType.ANNUAL))


if __name__ == "__main__":
    main()

"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from datetime import time

# Standard workday: four compensable blocks, breaks fall between them.
WORK_BLOCKS = (
    (time(8, 0), time(10, 0)),
    (time(10, 15), time(12, 15)),
    (time(13, 15), time(15, 15)),
    (time(15, 30), time(17, 30)),
)

HOURS_PER_DAY = 8

OVERTIME_WINDOW = (time(18, 0), time(22, 0))
OVERTIME_REQUIRED_START = time(18, 0)
OVERTIME_MIN_HOURS = 1
WEEKDAY_OVERTIME_MAX_HOURS = 4
MEAL_ALLOWANCE_FROM = time(19, 30)
MONTHLY_OVERTIME_WARNING_HOURS = 40

# Requests longer than three standard workdays need GM sign-off.
LONG_LEAVE_HOURS = 24

DEFAULT_SICK_LEAVE_DAYS = 30
DEFAULT_PERSONAL_LEAVE_DAYS = 14
MAX_ANNUAL_LEAVE_DAYS = 30

# (years of service lower bound, entitled days); >= 10 years adds one day per year.
ANNUAL_LEAVE_TABLE = (
    (0.5, 3),
    (1, 7),
    (2, 10),
    (3, 14),
    (5, 15),
)
SENIOR_YEARS = 10
SENIOR_BASE_DAYS = 15

DEFAULT_TIMEZONE = "Asia/Taipei"
DEFAULT_HISTORY_LIMIT = 200

import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent.parent

DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE_DIR}/school_portal.db")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Assignment defaults
DEFAULT_CATEGORY = "Homework"
DEFAULT_POINTS = 100
MIN_POINTS = 1
MAX_POINTS = 100

# Late policy
MAX_LATE_DAYS = 365
DEFAULT_LATE_PENALTY_PER_DAY_PCT = 10  # 10% per day late
DEFAULT_MAX_LATE_PENALTY_PCT = 50  # max 50% total deduction

# Grade settings
MAX_CATEGORIES = 12
DEFAULT_GRADE_CATEGORIES = (
    ("Homework", 30),
    ("Quizzes", 20),
    ("Tests", 40),
    ("Projects", 10),
)

GRADE_STATUSES = ("graded", "late", "missing", "excused")

# Modules
MODULE_TITLE_MAX_LENGTH = 120
MODULE_DESCRIPTION_MAX_LENGTH = 800
DEFAULT_MODULE_LIST_LIMIT = 50
MAX_MODULE_LIST_LIMIT = 100
MAX_ASSIGNMENTS_PER_MODULE = 100

# Rubrics
MAX_RUBRIC_CRITERIA = 12
MAX_RUBRIC_POINTS = 100

# Import all models here so Base.metadata knows every table
# (used by init_db, alembic and the test suite).
from portal.db.base_class import Base  # noqa: F401
from portal.models.assignment import Assignment  # noqa: F401
from portal.models.classroom import Classroom  # noqa: F401
from portal.models.enrollment import Enrollment  # noqa: F401
from portal.models.grade import Grade  # noqa: F401
from portal.models.grade_settings import GradeSettings  # noqa: F401
from portal.models.module import Module  # noqa: F401
from portal.models.rubric import Rubric  # noqa: F401
from portal.models.submission import Submission  # noqa: F401
from portal.models.user import User  # noqa: F401

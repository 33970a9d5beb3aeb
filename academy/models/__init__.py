"""核心 SQLAlchemy 模型定义。"""

from academy.models.academy_class import AcademyClass
from academy.models.announcement import Announcement
from academy.models.attendance import AttendanceRecord
from academy.models.enrollment import Enrollment
from academy.models.enums import AttendanceStatus, Audience, PaymentStatus, Role
from academy.models.payment import PaymentRecord
from academy.models.user import User

__all__ = [
    "AcademyClass",
    "Announcement",
    "AttendanceRecord",
    "AttendanceStatus",
    "Audience",
    "Enrollment",
    "PaymentRecord",
    "PaymentStatus",
    "Role",
    "User",
]

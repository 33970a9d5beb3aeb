"""封闭枚举：角色、考勤状态、缴费状态、公告受众。"""

import enum


class Role(str, enum.Enum):
    """用户角色枚举。"""

    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class AttendanceStatus(str, enum.Enum):
    PRESENT = "present"
    ABSENT = "absent"
    LATE = "late"
    EXCUSED = "excused"


class PaymentStatus(str, enum.Enum):
    """缴费状态。

    只约束取值集合，不约束状态之间的迁移（例如 refunded -> paid 也被接受）。
    """

    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class Audience(str, enum.Enum):
    """公告受众：某个角色，或全部。"""

    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"
    ALL = "all"

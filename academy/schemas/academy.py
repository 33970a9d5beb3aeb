"""课程、选课、考勤、缴费与公告的请求/响应模型。"""

import datetime as dt
from typing import Optional

from pydantic import Field, StrictInt

from academy.models.enums import AttendanceStatus, Audience, PaymentStatus
from academy.schemas.base import DB_INT_MAX, CamelModel, RecordId


# === 课程 ===

class ClassCreate(CamelModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    start_at: Optional[dt.datetime] = None
    end_at: Optional[dt.datetime] = None


class ClassSummary(CamelModel):
    id: int
    title: str
    description: Optional[str] = None
    teacher_id: Optional[int] = None
    start_at: Optional[dt.datetime] = None
    end_at: Optional[dt.datetime] = None


# === 选课 ===

class EnrollRequest(CamelModel):
    class_id: RecordId


class EnrollmentView(CamelModel):
    id: int
    class_id: int
    student_id: int
    enrolled_at: dt.datetime
    class_: Optional[ClassSummary] = Field(default=None, alias="class")


class EnrollResult(CamelModel):
    """``created`` 为 False 表示已选过该课，本次调用没有修改存储。"""

    created: bool
    enrollment: EnrollmentView


# === 考勤 ===

class AttendanceMark(CamelModel):
    class_id: RecordId
    student_id: RecordId
    status: AttendanceStatus
    date: Optional[dt.date] = None


class AttendanceView(CamelModel):
    id: int
    class_id: int
    student_id: int
    date: dt.date
    status: AttendanceStatus
    created_at: dt.datetime
    updated_at: dt.datetime


# === 缴费 ===

class PaymentCreate(CamelModel):
    student_id: RecordId
    amount_cents: StrictInt = Field(ge=0, le=DB_INT_MAX)
    currency: str = "USD"
    status: PaymentStatus = PaymentStatus.PENDING
    note: Optional[str] = None


class PaymentStatusUpdate(CamelModel):
    status: PaymentStatus


class PaymentView(CamelModel):
    id: int
    student_id: int
    amount_cents: int
    currency: str
    status: PaymentStatus
    note: Optional[str] = None
    created_at: dt.datetime


# === 公告 ===

class AnnouncementCreate(CamelModel):
    title: str = Field(min_length=1)
    body: str = Field(min_length=1)
    audience_role: Audience = Audience.ALL


class AnnouncementView(CamelModel):
    id: int
    title: str
    body: str
    audience_role: Audience
    created_at: dt.datetime

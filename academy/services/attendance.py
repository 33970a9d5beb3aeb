"""考勤台账：以 (class, student, date) 为自然键的 upsert。"""

import datetime as dt
from typing import Optional, Union

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from academy.db import StorageClient, dialect_insert
from academy.errors import NotFound, ValidationError
from academy.models import AcademyClass, AttendanceRecord, AttendanceStatus, User
from academy.schemas.academy import AttendanceView


def parse_date(value: Union[dt.date, str, None]) -> dt.date:
    """缺省为今天；字符串必须是 ``YYYY-MM-DD``。"""

    if value is None:
        return dt.date.today()
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    try:
        return dt.datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError) as exc:
        raise ValidationError("date must be formatted as YYYY-MM-DD") from exc


def parse_status(value) -> AttendanceStatus:
    try:
        return AttendanceStatus(value)
    except ValueError as exc:
        raise ValidationError("status must be one of present, absent, late, excused") from exc


class AttendanceLedger:
    def __init__(self, storage: StorageClient) -> None:
        self.storage = storage

    def _find(
        self, db: Session, class_id: int, student_id: int, day: dt.date
    ) -> Optional[AttendanceRecord]:
        stmt = select(AttendanceRecord).where(
            AttendanceRecord.class_id == class_id,
            AttendanceRecord.student_id == student_id,
            AttendanceRecord.date == day,
        )
        return db.scalars(stmt).first()

    def _upsert(
        self,
        db: Session,
        class_id: int,
        student_id: int,
        day: dt.date,
        status: AttendanceStatus,
    ) -> None:
        now = dt.datetime.now(dt.timezone.utc)
        stmt = dialect_insert(db, AttendanceRecord.__table__)
        if stmt is not None:
            stmt = stmt.values(
                class_id=class_id,
                student_id=student_id,
                date=day,
                status=status,
                created_at=now,
                updated_at=now,
            )
            db.execute(
                stmt.on_conflict_do_update(
                    index_elements=["class_id", "student_id", "date"],
                    set_={"status": stmt.excluded.status, "updated_at": now},
                )
            )
            return

        record = self._find(db, class_id, student_id, day)
        if record is None:
            try:
                with db.begin_nested():
                    db.add(
                        AttendanceRecord(
                            class_id=class_id,
                            student_id=student_id,
                            date=day,
                            status=status,
                            created_at=now,
                            updated_at=now,
                        )
                    )
                return
            except IntegrityError:
                # 并发请求已插入同一自然键，转为原地更新
                record = self._find(db, class_id, student_id, day)
        record.status = status
        record.updated_at = now
        db.flush()

    def mark(
        self,
        class_id: int,
        student_id: int,
        status: Union[AttendanceStatus, str],
        date: Union[dt.date, str, None] = None,
    ) -> AttendanceView:
        """记录考勤；同一天重复标记时原地覆盖状态并保留原记录 id。"""

        day = parse_date(date)
        status = parse_status(status)
        with self.storage.session() as db:
            if db.get(AcademyClass, class_id) is None:
                raise NotFound("Class not found")
            if db.get(User, student_id) is None:
                raise NotFound("Student not found")
            self._upsert(db, class_id, student_id, day, status)
            record = self._find(db, class_id, student_id, day)
            return AttendanceView.model_validate(record)

    def list_for_student(self, student_id: int) -> list[AttendanceView]:
        """按日期倒序，同日按创建时间倒序。"""

        stmt = (
            select(AttendanceRecord)
            .where(AttendanceRecord.student_id == student_id)
            .order_by(
                AttendanceRecord.date.desc(),
                AttendanceRecord.created_at.desc(),
                AttendanceRecord.id.desc(),
            )
        )
        with self.storage.session() as db:
            return [AttendanceView.model_validate(row) for row in db.scalars(stmt)]

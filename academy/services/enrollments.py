"""选课台账：每个 (class, student) 至多一条选课记录。"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from academy.db import StorageClient, dialect_insert
from academy.errors import NotFound
from academy.models import AcademyClass, Enrollment, User
from academy.schemas.academy import ClassSummary, EnrollmentView, EnrollResult

logger = logging.getLogger(__name__)


def _view(enrollment: Enrollment, academy_class: AcademyClass | None) -> EnrollmentView:
    return EnrollmentView(
        id=enrollment.id,
        class_id=enrollment.class_id,
        student_id=enrollment.student_id,
        enrolled_at=enrollment.enrolled_at,
        class_=ClassSummary.model_validate(academy_class) if academy_class else None,
    )


class EnrollmentLedger:
    def __init__(self, storage: StorageClient) -> None:
        self.storage = storage

    def _find_id(self, db: Session, class_id: int, student_id: int) -> Optional[int]:
        return db.scalars(
            select(Enrollment.id).where(
                Enrollment.class_id == class_id, Enrollment.student_id == student_id
            )
        ).first()

    def _insert_if_absent(self, db: Session, class_id: int, student_id: int) -> bool:
        stmt = dialect_insert(db, Enrollment.__table__)
        if stmt is not None:
            result = db.execute(
                stmt.values(class_id=class_id, student_id=student_id).on_conflict_do_nothing(
                    index_elements=["class_id", "student_id"]
                )
            )
            return result.rowcount > 0

        if self._find_id(db, class_id, student_id) is not None:
            return False
        # 查询与插入之间可能被并发请求抢先，冲突时同样视为已选课
        try:
            with db.begin_nested():
                db.add(Enrollment(class_id=class_id, student_id=student_id))
        except IntegrityError:
            return False
        return True

    def enroll(self, class_id: int, student_id: int) -> EnrollResult:
        """选课；已选过时返回 ``created=False`` 且不修改存储。

        并发的重复请求由唯一约束上的 ``ON CONFLICT DO NOTHING`` 收敛为一条记录。
        """

        with self.storage.session() as db:
            academy_class = db.get(AcademyClass, class_id)
            if academy_class is None:
                raise NotFound("Class not found")
            if db.get(User, student_id) is None:
                raise NotFound("Student not found")

            created = self._insert_if_absent(db, class_id, student_id)
            enrollment = db.scalars(
                select(Enrollment).where(
                    Enrollment.class_id == class_id, Enrollment.student_id == student_id
                )
            ).one()
            result = EnrollResult(created=created, enrollment=_view(enrollment, academy_class))

        if not created:
            logger.debug("Student %s already enrolled in class %s", student_id, class_id)
        return result

    def list_for_student(self, student_id: int) -> list[EnrollmentView]:
        """按课程开始时间升序（最近的在前），未排期的课程排在最后。"""

        stmt = (
            select(Enrollment, AcademyClass)
            .join(AcademyClass, AcademyClass.id == Enrollment.class_id)
            .where(Enrollment.student_id == student_id)
            .order_by(AcademyClass.start_at.asc().nulls_last(), Enrollment.id.asc())
        )
        with self.storage.session() as db:
            return [_view(enrollment, cls) for enrollment, cls in db.execute(stmt)]

"""课程的创建与查询。"""

from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select

from academy.db import StorageClient
from academy.errors import NotFound, ValidationError
from academy.models import AcademyClass, User
from academy.schemas.academy import ClassSummary


class ClassCatalog:
    def __init__(self, storage: StorageClient) -> None:
        self.storage = storage

    def create(
        self,
        title: str,
        description: Optional[str] = None,
        teacher_id: Optional[int] = None,
        start_at: Optional[datetime] = None,
        end_at: Optional[datetime] = None,
    ) -> ClassSummary:
        title = (title or "").strip()
        if not title:
            raise ValidationError("title is required")
        if start_at and end_at and end_at < start_at:
            raise ValidationError("endAt must not be earlier than startAt")

        with self.storage.session() as db:
            if teacher_id is not None and db.get(User, teacher_id) is None:
                raise NotFound("Teacher not found")
            academy_class = AcademyClass(
                title=title,
                description=description or None,
                teacher_id=teacher_id,
                start_at=start_at,
                end_at=end_at,
            )
            db.add(academy_class)
            db.flush()
            return ClassSummary.model_validate(academy_class)

    def list_all(self) -> list[ClassSummary]:
        """按开课时间升序，未排期的课程排在最后。"""

        stmt = select(AcademyClass).order_by(
            AcademyClass.start_at.asc().nulls_last(), AcademyClass.id.asc()
        )
        with self.storage.session() as db:
            return [ClassSummary.model_validate(row) for row in db.scalars(stmt)]

    def get(self, class_id: int) -> ClassSummary:
        with self.storage.session() as db:
            academy_class = db.get(AcademyClass, class_id)
            if academy_class is None:
                raise NotFound("Class not found")
            return ClassSummary.model_validate(academy_class)

    def delete(self, class_id: int) -> bool:
        with self.storage.session() as db:
            result = db.execute(delete(AcademyClass).where(AcademyClass.id == class_id))
            return result.rowcount > 0

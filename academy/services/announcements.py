"""公告：按受众角色过滤可见性。"""

from sqlalchemy import select

from academy.db import StorageClient
from academy.errors import ValidationError
from academy.models import Announcement, Audience, Role
from academy.schemas.academy import AnnouncementView


def _view(row: Announcement) -> AnnouncementView:
    return AnnouncementView(
        id=row.id,
        title=row.title,
        body=row.body,
        audience_role=row.audience,
        created_at=row.created_at,
    )


class AnnouncementBoard:
    def __init__(self, storage: StorageClient) -> None:
        self.storage = storage

    def create(self, title: str, body: str, audience=Audience.ALL) -> AnnouncementView:
        title = (title or "").strip()
        if not title or not (body or "").strip():
            raise ValidationError("title and body are required")
        try:
            audience = Audience(audience or Audience.ALL)
        except ValueError as exc:
            raise ValidationError("audienceRole must be student, teacher, admin or all") from exc

        with self.storage.session() as db:
            row = Announcement(title=title, body=body, audience=audience)
            db.add(row)
            db.flush()
            return _view(row)

    def list_for_role(self, role: Role) -> list[AnnouncementView]:
        """受众为 ``all`` 或与调用者角色相同的公告，最新的在前。"""

        visible = [Audience.ALL, Audience(Role(role).value)]
        stmt = (
            select(Announcement)
            .where(Announcement.audience.in_(visible))
            .order_by(Announcement.created_at.desc(), Announcement.id.desc())
        )
        with self.storage.session() as db:
            return [_view(row) for row in db.scalars(stmt)]

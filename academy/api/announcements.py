"""公告 API。"""

from typing import List

from fastapi import APIRouter, Depends

from academy.dependencies import CurrentClaims, ServicesDep, require_roles
from academy.schemas.academy import AnnouncementCreate, AnnouncementView
from academy.services.guard import ADMINS

router = APIRouter()


@router.get("", response_model=List[AnnouncementView])
def list_announcements(claims: CurrentClaims, services: ServicesDep):
    return services.announcements.list_for_role(claims.role)


@router.post(
    "", response_model=AnnouncementView, dependencies=[Depends(require_roles(ADMINS))]
)
def create_announcement(data: AnnouncementCreate, services: ServicesDep):
    return services.announcements.create(data.title, data.body, data.audience_role)

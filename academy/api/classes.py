"""课程 API。"""

from typing import List

from fastapi import APIRouter, Depends

from academy.dependencies import CurrentClaims, PathId, ServicesDep, require_roles
from academy.errors import NotFound
from academy.models.enums import Role
from academy.schemas.academy import ClassCreate, ClassSummary
from academy.services.guard import ADMINS, STAFF

router = APIRouter()


@router.get("", response_model=List[ClassSummary])
def list_classes(_claims: CurrentClaims, services: ServicesDep):
    return services.classes.list_all()


@router.post("", response_model=ClassSummary)
def create_class(
    data: ClassCreate,
    services: ServicesDep,
    claims=Depends(require_roles(STAFF)),
):
    """教师创建的课程自动归属本人；管理员创建的课程不指定教师。"""
    teacher_id = claims.subject_id if claims.role == Role.TEACHER else None
    return services.classes.create(
        title=data.title,
        description=data.description,
        teacher_id=teacher_id,
        start_at=data.start_at,
        end_at=data.end_at,
    )


@router.get("/{class_id}", response_model=ClassSummary)
def get_class(class_id: PathId, _claims: CurrentClaims, services: ServicesDep):
    return services.classes.get(class_id)


@router.delete("/{class_id}", dependencies=[Depends(require_roles(ADMINS))])
def delete_class(class_id: PathId, services: ServicesDep):
    if not services.classes.delete(class_id):
        raise NotFound("Class not found")
    return {"deleted": True}

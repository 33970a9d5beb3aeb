"""资料修改与管理员用户管理。"""

from fastapi import APIRouter, Depends

from academy.dependencies import CurrentClaims, PathId, ServicesDep, require_roles
from academy.errors import NotFound
from academy.schemas.users import AdminUserUpdate, ProfileUpdate, UserPublic
from academy.services.guard import ADMINS

router = APIRouter()


@router.patch("/me", response_model=UserPublic)
def update_me(data: ProfileUpdate, claims: CurrentClaims, services: ServicesDep):
    """修改自己的用户名/邮箱/姓名/密码，不能修改角色。"""
    services.identities.update(claims.subject_id, data.model_dump(exclude_none=True))
    user = services.identities.get(claims.subject_id)
    if user is None:
        raise NotFound("User not found")
    return user


@router.patch(
    "/{user_id}", response_model=UserPublic, dependencies=[Depends(require_roles(ADMINS))]
)
def update_user(user_id: PathId, data: AdminUserUpdate, services: ServicesDep):
    # 角色变更不会影响该用户已签发的 Token
    services.identities.update(user_id, data.model_dump(exclude_none=True))
    user = services.identities.get(user_id)
    if user is None:
        raise NotFound("User not found")
    return user


@router.delete("/{user_id}", dependencies=[Depends(require_roles(ADMINS))])
def delete_user(user_id: PathId, services: ServicesDep):
    if not services.identities.delete(user_id):
        raise NotFound("User not found")
    return {"deleted": True}

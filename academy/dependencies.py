"""FastAPI 依赖注入工具。"""

from dataclasses import dataclass
from datetime import timedelta
from typing import AbstractSet, Annotated, Callable, Optional

from fastapi import Depends, Header, Path, Request

from academy.config import Settings
from academy.db import StorageClient
from academy.models.enums import Role
from academy.schemas.base import DB_INT_MAX
from academy.services.announcements import AnnouncementBoard
from academy.services.attendance import AttendanceLedger
from academy.services.classes import ClassCatalog
from academy.services.credentials import CredentialStore
from academy.services.enrollments import EnrollmentLedger
from academy.services.guard import AuthorizationGuard
from academy.services.identity import IdentityRepository
from academy.services.payments import PaymentLedger
from academy.services.tokens import Claims, TokenService


@dataclass
class Services:
    """进程级组件集合，在应用启动时构造一次。"""

    storage: StorageClient
    credentials: CredentialStore
    identities: IdentityRepository
    tokens: TokenService
    guard: AuthorizationGuard
    classes: ClassCatalog
    enrollments: EnrollmentLedger
    attendance: AttendanceLedger
    payments: PaymentLedger
    announcements: AnnouncementBoard


def build_services(settings: Settings, storage: Optional[StorageClient] = None) -> Services:
    storage = storage or StorageClient(settings.database_url)
    credentials = CredentialStore(rounds=settings.bcrypt_rounds)
    tokens = TokenService(
        settings.jwt_secret,
        ttl=timedelta(days=settings.token_ttl_days),
        algorithm=settings.jwt_algorithm,
    )
    return Services(
        storage=storage,
        credentials=credentials,
        identities=IdentityRepository(storage, credentials),
        tokens=tokens,
        guard=AuthorizationGuard(tokens),
        classes=ClassCatalog(storage),
        enrollments=EnrollmentLedger(storage),
        attendance=AttendanceLedger(storage),
        payments=PaymentLedger(storage),
        announcements=AnnouncementBoard(storage),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


ServicesDep = Annotated[Services, Depends(get_services)]


def get_current_claims(
    services: ServicesDep,
    authorization: Optional[str] = Header(None),
) -> Claims:
    """从 ``Authorization: Bearer <token>`` 解析当前调用者。"""

    return services.guard.authenticate(authorization)


CurrentClaims = Annotated[Claims, Depends(get_current_claims)]


def require_roles(allowed: AbstractSet[Role]) -> Callable[..., Claims]:
    """生成角色校验依赖，每个路由声明自己允许的角色集合。"""

    def dependency(services: ServicesDep, claims: CurrentClaims) -> Claims:
        return services.guard.authorize(claims, allowed)

    return dependency


# 超出存储整数范围的 id 在进入存储层之前即被拒绝
PathId = Annotated[int, Path(ge=1, le=DB_INT_MAX)]

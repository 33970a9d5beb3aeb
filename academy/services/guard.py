"""鉴权：解析 Bearer Token 并按角色集合放行，默认拒绝。"""

import logging
from typing import AbstractSet, Optional

from academy.errors import Forbidden, InvalidToken, Unauthenticated
from academy.models.enums import Role
from academy.services.tokens import Claims, TokenService

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer "

# 各操作允许的角色集合
ANY_ROLE = frozenset(Role)
STUDENTS = frozenset({Role.STUDENT})
STAFF = frozenset({Role.TEACHER, Role.ADMIN})
ADMINS = frozenset({Role.ADMIN})


class AuthorizationGuard:
    def __init__(self, tokens: TokenService) -> None:
        self.tokens = tokens

    def authenticate(self, header_value: Optional[str]) -> Claims:
        """从 ``Authorization`` 头取出 Bearer Token 并校验。"""

        if not header_value or not header_value.lower().startswith(BEARER_PREFIX):
            raise Unauthenticated("Missing token")
        token = header_value[len(BEARER_PREFIX):].strip()
        if not token:
            raise Unauthenticated("Missing token")
        try:
            return self.tokens.verify(token)
        except InvalidToken as exc:
            raise Unauthenticated("Invalid token") from exc

    def authorize(self, claims: Optional[Claims], allowed: AbstractSet[Role]) -> Claims:
        """角色不在允许集合内（或缺失）时抛出 ``Forbidden``。"""

        role = getattr(claims, "role", None)
        if role is None or role not in allowed:
            logger.info(
                "Forbidden: subject %s with role %s",
                getattr(claims, "subject_id", None),
                role,
            )
            raise Forbidden()
        return claims

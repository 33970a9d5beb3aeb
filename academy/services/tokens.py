"""JWT 签发与校验。

Token 是无状态的：服务端不保存会话，也没有吊销列表，登出即客户端丢弃
Token。签发后声明不可变，用户角色变更不会影响已签发的 Token。
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from jose import jwt
from jose.exceptions import JOSEError

from academy.errors import InvalidToken
from academy.models.enums import Role

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Claims:
    """校验通过的 Token 载荷。"""

    subject_id: int
    role: Role
    issued_at: datetime
    expires_at: datetime
    username: Optional[str] = None


class TokenService:
    def __init__(
        self,
        secret: str,
        ttl: timedelta = timedelta(days=7),
        algorithm: str = "HS256",
        clock: Clock = utcnow,
    ) -> None:
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self.ttl = ttl
        self.algorithm = algorithm
        self._clock = clock

    def issue(self, subject_id: int, role: Role, username: Optional[str] = None) -> str:
        """签发 Token，过期时间为签发时刻加固定有效期。"""

        issued_at = self._clock()
        payload = {
            "sub": str(subject_id),
            "role": Role(role).value,
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self.ttl).timestamp()),
        }
        if username:
            payload["username"] = username
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Claims:
        """校验签名、结构与有效期。

        签名错误、结构损坏、过期统一抛出 ``InvalidToken``，不向调用方区分原因。
        过期判断使用注入的时钟，而不是 jose 内部的系统时间。
        """

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"verify_exp": False, "verify_iat": False},
            )
        except JOSEError as exc:
            logger.debug("Rejected token: %s", exc)
            raise InvalidToken() from exc

        try:
            subject_id = int(payload["sub"])
            role = Role(payload["role"])
            issued_at = datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc)
            expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
        except (KeyError, TypeError, ValueError) as exc:
            logger.debug("Rejected token with malformed claims")
            raise InvalidToken() from exc

        if self._clock() >= expires_at:
            logger.debug("Rejected expired token for subject %s", subject_id)
            raise InvalidToken()

        return Claims(
            subject_id=subject_id,
            role=role,
            issued_at=issued_at,
            expires_at=expires_at,
            username=payload.get("username"),
        )

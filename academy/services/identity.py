"""身份仓储：用户的增删改查与唯一性约束。

除 ``find_by_identifier_with_secret`` 外，所有读路径都只返回不含密码摘要的
``UserPublic`` 投影。
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from academy.db import StorageClient
from academy.errors import DuplicateIdentity, ValidationError
from academy.models import Role, User
from academy.schemas.users import UserPublic
from academy.services.credentials import CredentialStore

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("username", "email", "full_name", "password", "role")


def is_email(identifier: str) -> bool:
    """形如 ``local@domain`` 的字符串按邮箱处理，否则按用户名处理。"""

    local, sep, domain = identifier.partition("@")
    return bool(sep and local and domain and "@" not in domain)


def normalize_username(username: Optional[str]) -> str:
    value = (username or "").strip()
    if not value:
        raise ValidationError("username is required")
    if "@" in value:
        raise ValidationError("username must not contain '@'")
    return value


def normalize_email(email: Optional[str]) -> Optional[str]:
    value = (email or "").strip().lower()
    if not value:
        return None
    if not is_email(value):
        raise ValidationError("email is not valid")
    return value


def _normalize_role(role: Any) -> Role:
    try:
        return Role(role)
    except ValueError as exc:
        raise ValidationError("role must be one of student, teacher, admin") from exc


class IdentityRepository:
    def __init__(self, storage: StorageClient, credentials: CredentialStore) -> None:
        self.storage = storage
        self.credentials = credentials

    # === 内部工具 ===

    def _lookup(self, db: Session, identifier: str) -> Optional[User]:
        value = (identifier or "").strip()
        if not value:
            return None
        if is_email(value):
            stmt = select(User).where(User.email == value.lower())
        else:
            stmt = select(User).where(User.username == value)
        return db.scalars(stmt).first()

    def _ensure_unique(
        self,
        db: Session,
        username: Optional[str],
        email: Optional[str],
        exclude_id: Optional[int] = None,
    ) -> None:
        conditions = []
        if username is not None:
            conditions.append(User.username == username)
        if email is not None:
            conditions.append(User.email == email)
        if not conditions:
            return
        stmt = select(User.id).where(or_(*conditions))
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        if db.scalars(stmt).first() is not None:
            raise DuplicateIdentity()

    def _flush_unique(self, db: Session) -> None:
        # 并发注册时预检查可能同时通过，由唯一约束兜底
        try:
            db.flush()
        except IntegrityError as exc:
            raise DuplicateIdentity() from exc

    # === 对外操作 ===

    def create(
        self,
        username: str,
        password: str,
        role: Role,
        email: Optional[str] = None,
        full_name: Optional[str] = None,
    ) -> UserPublic:
        """注册新用户；用户名或邮箱冲突时抛出 ``DuplicateIdentity``。"""

        username = normalize_username(username)
        email = normalize_email(email)
        role = _normalize_role(role)
        if not password:
            raise ValidationError("password is required")

        password_hash = self.credentials.hash(password)
        with self.storage.session() as db:
            self._ensure_unique(db, username, email)
            user = User(
                username=username,
                email=email,
                full_name=(full_name or "").strip() or None,
                role=role,
                password_hash=password_hash,
            )
            db.add(user)
            self._flush_unique(db)
            result = UserPublic.model_validate(user)
        logger.info("Registered user %s (id=%s, role=%s)", username, result.id, role.value)
        return result

    def get(self, user_id: int) -> Optional[UserPublic]:
        with self.storage.session() as db:
            user = db.get(User, user_id)
            return UserPublic.model_validate(user) if user else None

    def find_by_identifier(self, identifier: str) -> Optional[UserPublic]:
        with self.storage.session() as db:
            user = self._lookup(db, identifier)
            return UserPublic.model_validate(user) if user else None

    def find_by_identifier_with_secret(self, identifier: str) -> Optional[User]:
        """仅供认证流程使用，返回包含 ``password_hash`` 的实体，不得直接响应给客户端。"""

        with self.storage.session() as db:
            return self._lookup(db, identifier)

    def authenticate(self, identifier: str, password: str) -> Optional[UserPublic]:
        """校验凭据，成功时记录最后登录时间。

        身份不存在时仍执行一次哈希校验，避免通过耗时判断用户名是否存在。
        """

        user = self.find_by_identifier_with_secret(identifier)
        if user is None:
            self.credentials.verify_unknown(password or "")
            logger.info("Failed login attempt")
            return None
        if not self.credentials.verify(password or "", user.password_hash):
            logger.info("Failed login attempt")
            return None

        with self.storage.session() as db:
            stored = db.get(User, user.id)
            if stored is None:
                return None
            stored.last_login_at = datetime.now(timezone.utc)
            db.flush()
            return UserPublic.model_validate(stored)

    def update(self, user_id: int, fields: dict[str, Any]) -> bool:
        """只修改传入的字段，返回是否有记录被修改。

        ``password`` 会重新哈希；与他人用户名/邮箱冲突时抛出 ``DuplicateIdentity``。
        """

        changes: dict[str, Any] = {}
        for name in UPDATABLE_FIELDS:
            if fields.get(name) is None:
                continue
            value = fields[name]
            if name == "username":
                changes["username"] = normalize_username(value)
            elif name == "email":
                changes["email"] = normalize_email(value)
            elif name == "full_name":
                changes["full_name"] = value.strip() or None
            elif name == "role":
                changes["role"] = _normalize_role(value)
            elif value:
                changes["password_hash"] = self.credentials.hash(value)
            else:
                raise ValidationError("password must not be empty")
        if not changes:
            return False

        with self.storage.session() as db:
            user = db.get(User, user_id)
            if user is None:
                return False
            self._ensure_unique(
                db, changes.get("username"), changes.get("email"), exclude_id=user_id
            )
            for name, value in changes.items():
                setattr(user, name, value)
            self._flush_unique(db)
        return True

    def delete(self, user_id: int) -> bool:
        """删除用户，选课/考勤/缴费记录由外键 ``ON DELETE CASCADE`` 级联删除。"""

        with self.storage.session() as db:
            result = db.execute(delete(User).where(User.id == user_id))
            deleted = result.rowcount > 0
        if deleted:
            logger.info("Deleted user id=%s", user_id)
        return deleted

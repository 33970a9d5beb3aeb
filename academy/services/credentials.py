"""密码哈希与校验（bcrypt）。"""

import logging
import secrets

import bcrypt

logger = logging.getLogger(__name__)

# bcrypt 只使用前 72 字节
BCRYPT_MAX_BYTES = 72


def _to_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


class CredentialStore:
    """加盐慢哈希；工作因子是配置项而非调用参数。

    摘要中自带盐与工作因子，因此修改 ``rounds`` 不影响已存储摘要的校验。
    """

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds
        # 构造时生成，未知身份的每次登录都只做一次校验
        self._dummy_digest = self.hash(secrets.token_urlsafe(16))

    def hash(self, password: str) -> str:
        """每次调用生成新的盐，同一明文得到不同摘要。"""

        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(_to_bytes(password), salt).decode("utf-8")

    def verify(self, password: str, digest: str) -> bool:
        """校验明文与摘要是否匹配，不匹配时返回 False 而不是抛异常。"""

        try:
            return bcrypt.checkpw(_to_bytes(password), digest.encode("utf-8"))
        except ValueError:
            logger.warning("Stored password digest is malformed")
            return False

    def verify_unknown(self, password: str) -> bool:
        """对不存在的身份做一次等价耗时的校验，结果恒为 False。"""

        self.verify(password, self._dummy_digest)
        return False

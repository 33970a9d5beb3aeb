"""应用配置管理。

使用 Pydantic Settings 统一读取环境变量，便于在本地/生产之间切换。
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_JWT_SECRET = "change-me"


class Settings(BaseSettings):
    """核心配置项。

    - ``database_url``：默认使用本地 SQLite，便于快速启动。
    - ``jwt_secret``：签发 Token 的进程级密钥，生产环境必须覆盖。
    - ``bcrypt_rounds``：密码哈希的工作因子，修改后旧哈希仍可校验。
    """

    database_url: str = Field(
        default="sqlite:///./storage/academy.db", description="SQLAlchemy 数据库 URL"
    )
    jwt_secret: str = Field(default=DEFAULT_JWT_SECRET, description="Token 签名密钥")
    jwt_algorithm: str = Field(default="HS256", description="Token 签名算法")
    token_ttl_days: int = Field(default=7, ge=1, description="Token 有效期（天）")
    bcrypt_rounds: int = Field(default=12, ge=4, le=31, description="bcrypt 工作因子")
    cors_origin: str = Field(default="*", description="允许的跨域来源，逗号分隔")
    log_level: str = Field(default="INFO", description="日志级别")

    model_config = {
        "env_prefix": "ACADEMY_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origin.split(",") if origin.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """缓存后的全局配置实例。"""

    return Settings()

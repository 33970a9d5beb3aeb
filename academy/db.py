"""数据库连接与会话管理。

``StorageClient`` 在进程启动时显式创建一次，由各个 Repository/Ledger
在构造时持有引用；每个业务操作通过 ``session()`` 打开一个事务范围。
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from academy.errors import StorageError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """SQLAlchemy 基类。"""

    pass


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    # SQLite 默认不执行外键约束，级联删除依赖该 PRAGMA
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def _build_engine(database_url: str) -> Engine:
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return create_engine(database_url, pool_pre_ping=True)

    kwargs: dict = {"connect_args": {"check_same_thread": False}}
    if not url.database or url.database == ":memory:":
        # 内存库只能共享同一个连接，否则每个连接都是一个空库
        kwargs["poolclass"] = StaticPool
    else:
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)

    engine = create_engine(database_url, **kwargs)
    event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


class StorageClient:
    """持有唯一的 Engine 与 Session 工厂。"""

    def __init__(self, database_url: str) -> None:
        self.database_url = database_url
        self._engine: Engine | None = None
        self._session_factory: sessionmaker[Session] | None = None

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("StorageClient has not been started")
        return self._engine

    def start(self) -> None:
        """建立连接池并确保表存在，可重复调用。"""

        if self._engine is not None:
            return
        # 注册所有模型到 Base.metadata
        import academy.models  # noqa: F401

        self._engine = _build_engine(self.database_url)
        self._session_factory = sessionmaker(
            bind=self._engine, autoflush=False, expire_on_commit=False
        )
        try:
            Base.metadata.create_all(bind=self._engine)
        except SQLAlchemyError as exc:
            logger.exception("Failed to initialise schema")
            self.close()
            raise StorageError() from exc
        logger.info("Storage ready (%s)", self._engine.url.render_as_string(hide_password=True))

    def close(self) -> None:
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Storage closed")

    @contextmanager
    def session(self) -> Iterator[Session]:
        """提供事务范围的 Session 上下文管理器。

        成功时提交，任何异常都回滚；``SQLAlchemyError`` 记录日志后转换为
        ``StorageError``，业务异常原样抛出。
        """

        if self._session_factory is None:
            raise RuntimeError("StorageClient has not been started")
        session: Session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("Storage operation failed")
            raise StorageError() from exc
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()


def dialect_insert(session: Session, table):
    """返回支持 ``ON CONFLICT`` 的方言 insert 构造；其他方言返回 None。"""

    name = session.get_bind().dialect.name
    if name == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    elif name == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    else:
        return None
    return insert(table)

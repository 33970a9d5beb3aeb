from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from academy.config import Settings
from academy.db import StorageClient
from academy.main import create_app
from academy.services.announcements import AnnouncementBoard
from academy.services.attendance import AttendanceLedger
from academy.services.classes import ClassCatalog
from academy.services.credentials import CredentialStore
from academy.services.enrollments import EnrollmentLedger
from academy.services.identity import IdentityRepository
from academy.services.payments import PaymentLedger
from academy.services.tokens import TokenService

# bcrypt 最低工作因子，保证测试速度
TEST_ROUNDS = 4


class FakeClock:
    """可手动拨动的时钟，用于模拟 Token 过期。"""

    def __init__(self, now: datetime | None = None):
        self.now = now or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta) -> None:
        self.now = self.now + delta


@pytest.fixture(scope="function")
def storage():
    """
    Fresh in-memory database for each test.
    """
    client = StorageClient("sqlite://")
    client.start()
    try:
        yield client
    finally:
        client.close()


@pytest.fixture
def credentials() -> CredentialStore:
    return CredentialStore(rounds=TEST_ROUNDS)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def tokens(clock) -> TokenService:
    return TokenService("test-secret", clock=clock)


@pytest.fixture
def identities(storage, credentials) -> IdentityRepository:
    return IdentityRepository(storage, credentials)


@pytest.fixture
def classes(storage) -> ClassCatalog:
    return ClassCatalog(storage)


@pytest.fixture
def enrollments(storage) -> EnrollmentLedger:
    return EnrollmentLedger(storage)


@pytest.fixture
def attendance(storage) -> AttendanceLedger:
    return AttendanceLedger(storage)


@pytest.fixture
def payments(storage) -> PaymentLedger:
    return PaymentLedger(storage)


@pytest.fixture
def announcements(storage) -> AnnouncementBoard:
    return AnnouncementBoard(storage)


@pytest.fixture
def student(identities):
    return identities.create("stu", "pw-student", "student", email="stu@example.com")


@pytest.fixture
def teacher(identities):
    return identities.create("teach", "pw-teacher", "teacher")


@pytest.fixture
def academy_class(classes, teacher):
    return classes.create(
        "Piano basics",
        teacher_id=teacher.id,
        start_at=datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc),
    )


@pytest.fixture(scope="function")
def client():
    """
    TestClient backed by an isolated in-memory database.
    """
    settings = Settings(
        database_url="sqlite://",
        jwt_secret="test-secret",
        bcrypt_rounds=TEST_ROUNDS,
    )
    app = create_app(settings)
    with TestClient(app) as c:
        yield c

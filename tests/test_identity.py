import pytest
from sqlalchemy import func, select

from academy.errors import DuplicateIdentity, ValidationError
from academy.models import PaymentRecord, Role, User
from academy.services.identity import is_email


def test_create_normalizes_and_hides_secret(identities):
    user = identities.create("  alice  ", "pw1", "student", email="  Alice@Example.COM ")
    assert user.username == "alice"
    assert user.email == "alice@example.com"
    assert user.role == Role.STUDENT
    assert "password_hash" not in user.model_dump()


def test_password_is_stored_hashed(identities, credentials):
    identities.create("alice", "pw1", "student")
    stored = identities.find_by_identifier_with_secret("alice")
    assert stored.password_hash != "pw1"
    assert credentials.verify("pw1", stored.password_hash)


def test_duplicate_username_is_rejected(identities):
    identities.create("alice", "pw1", "student")
    with pytest.raises(DuplicateIdentity):
        identities.create("alice ", "pw2", "teacher")


def test_duplicate_email_is_rejected_case_insensitively(identities):
    identities.create("alice", "pw1", "student", email="alice@example.com")
    with pytest.raises(DuplicateIdentity):
        identities.create("bob", "pw2", "student", email="ALICE@example.com")


def test_username_is_case_sensitive(identities):
    identities.create("alice", "pw1", "student")
    assert identities.create("Alice", "pw2", "student").username == "Alice"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"username": "   ", "password": "pw", "role": "student"},
        {"username": "a@b", "password": "pw", "role": "student"},
        {"username": "carol", "password": "", "role": "student"},
        {"username": "carol", "password": "pw", "role": "janitor"},
        {"username": "carol", "password": "pw", "role": "student", "email": "nope"},
    ],
)
def test_invalid_input_is_rejected(identities, kwargs):
    with pytest.raises(ValidationError):
        identities.create(**kwargs)


def test_find_by_identifier_detects_email(identities):
    created = identities.create("alice", "pw1", "teacher", email="alice@example.com")
    assert identities.find_by_identifier("alice").id == created.id
    assert identities.find_by_identifier("ALICE@example.com").id == created.id
    assert identities.find_by_identifier("nobody") is None
    assert identities.find_by_identifier("") is None


@pytest.mark.parametrize(
    "value, expected",
    [("a@b.c", True), ("a@b", True), ("alice", False), ("@b.c", False), ("a@", False)],
)
def test_is_email(value, expected):
    assert is_email(value) is expected


def test_authenticate_stamps_last_login(identities):
    identities.create("alice", "pw1", "student")
    assert identities.get(identities.find_by_identifier("alice").id).last_login_at is None

    user = identities.authenticate("alice", "pw1")
    assert user is not None
    assert user.last_login_at is not None


def test_authenticate_failures_look_the_same(identities):
    identities.create("bob", "secret", "student")
    assert identities.authenticate("bob", "wrong") is None
    assert identities.authenticate("nobody", "secret") is None


def test_update_only_changes_supplied_fields(identities):
    user = identities.create("alice", "pw1", "student", email="a@example.com", full_name="Alice")
    assert identities.update(user.id, {"full_name": "Alice Liddell"}) is True

    updated = identities.get(user.id)
    assert updated.full_name == "Alice Liddell"
    assert updated.email == "a@example.com"
    assert updated.username == "alice"


def test_update_password_rehashes(identities):
    user = identities.create("alice", "pw1", "student")
    identities.update(user.id, {"password": "pw2"})
    assert identities.authenticate("alice", "pw1") is None
    assert identities.authenticate("alice", "pw2") is not None


def test_update_without_fields_or_unknown_user(identities):
    user = identities.create("alice", "pw1", "student")
    assert identities.update(user.id, {}) is False
    assert identities.update(9999, {"full_name": "Ghost"}) is False


def test_update_collision_is_duplicate_identity(identities):
    identities.create("alice", "pw1", "student", email="alice@example.com")
    bob = identities.create("bob", "pw2", "student")
    with pytest.raises(DuplicateIdentity):
        identities.update(bob.id, {"username": "alice"})
    with pytest.raises(DuplicateIdentity):
        identities.update(bob.id, {"email": "Alice@Example.com"})
    assert identities.get(bob.id).username == "bob"


def test_update_to_own_values_is_allowed(identities):
    alice = identities.create("alice", "pw1", "student", email="alice@example.com")
    assert identities.update(alice.id, {"username": "alice", "email": "alice@example.com"})


def test_delete_cascades_to_owned_rows(
    identities, storage, student, academy_class, enrollments, attendance, payments
):
    enrollments.enroll(academy_class.id, student.id)
    attendance.mark(academy_class.id, student.id, "present", "2024-03-01")
    payments.create(student.id, 5000)

    assert identities.delete(student.id) is True
    assert identities.get(student.id) is None
    assert enrollments.list_for_student(student.id) == []
    assert attendance.list_for_student(student.id) == []
    with storage.session() as db:
        assert db.scalar(select(func.count()).select_from(PaymentRecord)) == 0
        assert db.scalar(select(func.count()).select_from(User)) == 1

    assert identities.delete(student.id) is False

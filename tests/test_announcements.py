import pytest

from academy.errors import ValidationError
from academy.models import Audience, Role


def test_visibility_by_role(announcements):
    announcements.create("Everyone", "hello all")
    announcements.create("Students", "exam next week", Audience.STUDENT)
    announcements.create("Teachers", "staff meeting", "teacher")

    assert [a.title for a in announcements.list_for_role(Role.STUDENT)] == [
        "Students",
        "Everyone",
    ]
    assert [a.title for a in announcements.list_for_role("teacher")] == ["Teachers", "Everyone"]
    assert [a.title for a in announcements.list_for_role(Role.ADMIN)] == ["Everyone"]


def test_title_and_body_required(announcements):
    with pytest.raises(ValidationError):
        announcements.create(" ", "body")
    with pytest.raises(ValidationError):
        announcements.create("title", "")
    with pytest.raises(ValidationError):
        announcements.create("title", "body", "parents")

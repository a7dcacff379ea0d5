from uuid import uuid4

import pytest

from igreja_manager.db.models.ebd_attendance import AttendanceStatus
from igreja_manager.domain.errors import ValidationError
from igreja_manager.repositories.attendance_repository import LessonPresence
from igreja_manager.services.attendance_service import (
    average_present,
    average_presence_percentage,
    parse_attendance_status,
    percentage,
)


def test_percentage_is_zero_for_empty_denominator() -> None:
    assert percentage(3, 0) == 0.0
    assert percentage(1, 3) == 33.33


def test_averages_over_lessons_with_records() -> None:
    presence = [
        LessonPresence(lesson_id=uuid4(), present=8, total=10),
        LessonPresence(lesson_id=uuid4(), present=5, total=10),
    ]

    assert average_present(presence) == 6.5
    assert average_presence_percentage(presence) == 65.0
    assert average_present([]) == 0.0
    assert average_presence_percentage([]) == 0.0


def test_parse_attendance_status_accepts_known_values() -> None:
    assert parse_attendance_status("justificado") == AttendanceStatus.JUSTIFICADO


def test_parse_attendance_status_rejects_unknown_value() -> None:
    with pytest.raises(ValidationError) as exc_info:
        parse_attendance_status("atrasado")

    assert exc_info.value.details == {"status": "atrasado"}

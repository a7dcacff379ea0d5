"""Term-wide EBD reports."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from itertools import groupby
from uuid import UUID

from igreja_manager.db.models.ebd_attendance import AttendanceStatus
from igreja_manager.db.models.ebd_term import EbdTerm
from igreja_manager.domain.errors import NotFoundError
from igreja_manager.repositories.attendance_repository import AttendanceRepository
from igreja_manager.repositories.ebd_report_repository import (
    AttendanceLine,
    EbdReportRepository,
)
from igreja_manager.repositories.term_repository import TermRepository
from igreja_manager.services.attendance_service import (
    average_presence_percentage,
    percentage,
)

DEFAULT_MIN_CONSECUTIVE_ABSENCES = 3


@dataclass(slots=True, frozen=True)
class ClassSummary:
    class_id: UUID
    class_name: str
    teacher_name: str | None
    enrolled_students: int
    total_lessons: int
    attendance_percentage: float
    total_offerings: Decimal


@dataclass(slots=True, frozen=True)
class TermReport:
    """Aggregated attendance and offering figures for one term."""

    term: EbdTerm
    total_classes: int
    total_students: int
    total_lessons: int
    average_attendance_percentage: float
    total_offerings: Decimal
    bible_percentage: float
    magazine_percentage: float
    classes_summary: list[ClassSummary]


@dataclass(slots=True, frozen=True)
class RankedClass:
    rank: int
    summary: ClassSummary


@dataclass(slots=True, frozen=True)
class TermComparison:
    term_id: UUID
    term_name: str
    total_students: int
    total_lessons: int
    average_attendance_percentage: float
    total_offerings: Decimal


@dataclass(slots=True, frozen=True)
class AbsentStudent:
    """Member whose latest lessons in one class were all missed."""

    member_id: UUID
    member_name: str
    class_id: UUID
    class_name: str
    consecutive_absences: int
    last_present_date: date | None


def trailing_absences(lines: Sequence[AttendanceLine]) -> tuple[int, date | None]:
    """Count records before the most recent presence, newest first."""
    for position, line in enumerate(lines):
        if line.status == AttendanceStatus.PRESENTE:
            return position, line.lesson_date
    return len(lines), None


class EbdReportService:
    """Builds read-only term reports."""

    def __init__(
        self,
        *,
        term_repository: TermRepository,
        report_repository: EbdReportRepository,
        attendance_repository: AttendanceRepository,
    ) -> None:
        self._term_repository = term_repository
        self._report_repository = report_repository
        self._attendance_repository = attendance_repository

    def term_report(self, *, church_id: UUID, term_id: UUID) -> TermReport:
        term = self._require_term(church_id=church_id, term_id=term_id)

        class_ids = EbdReportRepository.term_class_ids(term.id)
        presence = self._attendance_repository.presence_by_lesson(class_ids=class_ids)
        materials = self._attendance_repository.present_material_counts(
            class_ids=class_ids
        )
        summaries = self._class_summaries(term.id)

        return TermReport(
            term=term,
            total_classes=len(summaries),
            total_students=self._report_repository.count_distinct_active_students(
                term.id
            ),
            total_lessons=self._attendance_repository.count_lessons(
                class_ids=class_ids
            ),
            average_attendance_percentage=average_presence_percentage(presence),
            total_offerings=self._attendance_repository.total_offerings(
                class_ids=class_ids
            ),
            bible_percentage=percentage(materials.bibles, materials.present),
            magazine_percentage=percentage(materials.magazines, materials.present),
            classes_summary=summaries,
        )

    def term_ranking(self, *, church_id: UUID, term_id: UUID) -> list[RankedClass]:
        """Classes of the term ordered by average presence, best first."""

        term = self._require_term(church_id=church_id, term_id=term_id)
        ordered = sorted(
            self._class_summaries(term.id),
            key=lambda item: (-item.attendance_percentage, item.class_name),
        )
        return [
            RankedClass(rank=position, summary=summary)
            for position, summary in enumerate(ordered, start=1)
        ]

    def term_comparison(
        self, *, church_id: UUID, term_ids: Sequence[UUID]
    ) -> list[TermComparison]:
        """Headline figures per term; ids outside the church are skipped."""

        comparisons = []
        for term_id in dict.fromkeys(term_ids):
            term = self._term_repository.get_term(church_id=church_id, term_id=term_id)
            if term is None:
                continue
            class_ids = EbdReportRepository.term_class_ids(term.id)
            comparisons.append(
                TermComparison(
                    term_id=term.id,
                    term_name=term.name,
                    total_students=(
                        self._report_repository.count_distinct_active_students(
                            term.id
                        )
                    ),
                    total_lessons=self._attendance_repository.count_lessons(
                        class_ids=class_ids
                    ),
                    average_attendance_percentage=average_presence_percentage(
                        self._attendance_repository.presence_by_lesson(
                            class_ids=class_ids
                        )
                    ),
                    total_offerings=self._attendance_repository.total_offerings(
                        class_ids=class_ids
                    ),
                )
            )
        return comparisons

    def absent_students(
        self,
        *,
        church_id: UUID,
        min_absences: int = DEFAULT_MIN_CONSECUTIVE_ABSENCES,
    ) -> list[AbsentStudent]:
        lines = self._report_repository.active_term_attendance(church_id)
        absent = []
        for _, group in groupby(
            lines, key=lambda line: (line.member_id, line.class_id)
        ):
            history = list(group)
            streak, last_present = trailing_absences(history)
            if streak < min_absences:
                continue
            latest = history[0]
            absent.append(
                AbsentStudent(
                    member_id=latest.member_id,
                    member_name=latest.member_name,
                    class_id=latest.class_id,
                    class_name=latest.class_name,
                    consecutive_absences=streak,
                    last_present_date=last_present,
                )
            )
        absent.sort(key=lambda item: (-item.consecutive_absences, item.member_name))
        return absent

    def _require_term(self, *, church_id: UUID, term_id: UUID) -> EbdTerm:
        term = self._term_repository.get_term(church_id=church_id, term_id=term_id)
        if term is None:
            raise NotFoundError.for_entity("Term", term_id)
        return term

    def _class_summaries(self, term_id: UUID) -> list[ClassSummary]:
        summaries = []
        for ebd_class, teacher_name, enrolled in (
            self._report_repository.list_term_classes(term_id)
        ):
            single = EbdReportRepository.single_class_ids(ebd_class.id)
            summaries.append(
                ClassSummary(
                    class_id=ebd_class.id,
                    class_name=ebd_class.name,
                    teacher_name=teacher_name,
                    enrolled_students=enrolled,
                    total_lessons=self._attendance_repository.count_lessons(
                        class_ids=single
                    ),
                    attendance_percentage=average_presence_percentage(
                        self._attendance_repository.presence_by_lesson(
                            class_ids=single
                        )
                    ),
                    total_offerings=self._attendance_repository.total_offerings(
                        class_ids=single
                    ),
                )
            )
        return summaries

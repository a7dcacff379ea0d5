"""EBD class and enrollment service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from igreja_manager.db.models.ebd_class import EbdClass
from igreja_manager.db.models.ebd_enrollment import EbdEnrollment
from igreja_manager.db.models.ebd_term import EbdTerm
from igreja_manager.db.models.member import Member
from igreja_manager.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    compose_error_message,
)
from igreja_manager.domain.periods import local_today
from igreja_manager.repositories.class_repository import ClassListFilters

logger = logging.getLogger(__name__)


class SessionProtocol(Protocol):
    """Subset of SQLAlchemy session APIs used by this service."""

    def commit(self) -> None: ...
    def rollback(self) -> None: ...
    def refresh(self, instance: object) -> None: ...


class ClassRepositoryProtocol(Protocol):
    """Class repository contract consumed by service."""

    def list_classes(
        self, filters: ClassListFilters
    ) -> tuple[list[tuple[EbdClass, int]], int]: ...

    def get_class(self, *, church_id: UUID, class_id: UUID) -> EbdClass | None: ...

    def get_class_for_update(
        self, *, church_id: UUID, class_id: UUID
    ) -> EbdClass | None: ...

    def count_active_enrollments(self, class_id: UUID) -> int: ...

    def has_active_enrollment_in_class(
        self, *, class_id: UUID, member_id: UUID
    ) -> bool: ...

    def find_active_enrollment_in_term(
        self, *, term_id: UUID, member_id: UUID
    ) -> EbdEnrollment | None: ...

    def list_enrollments(
        self, class_id: UUID
    ) -> list[tuple[EbdEnrollment, str | None]]: ...

    def get_enrollment(
        self, *, class_id: UUID, enrollment_id: UUID
    ) -> EbdEnrollment | None: ...

    def add(self, ebd_class: EbdClass) -> EbdClass: ...

    def add_enrollment(self, enrollment: EbdEnrollment) -> EbdEnrollment: ...

    def list_term_classes(self, term_id: UUID) -> list[EbdClass]: ...

    def active_member_ids(self, class_id: UUID) -> list[UUID]: ...

    def active_member_ids_in_term(self, term_id: UUID) -> set[UUID]: ...

    def delete_class_cascade(self, ebd_class: EbdClass) -> None: ...

    def flush(self) -> None: ...


class TermLookupProtocol(Protocol):
    """Term lookup used to validate class ownership."""

    def get_term(self, *, church_id: UUID, term_id: UUID) -> EbdTerm | None: ...


class MemberLookupProtocol(Protocol):
    """Member lookup used before enrolling."""

    def get_member(self, *, church_id: UUID, member_id: UUID) -> Member | None: ...


@dataclass(slots=True, frozen=True)
class CreateClassInput:
    """Input model for class creation."""

    church_id: UUID
    term_id: UUID
    name: str
    age_range_start: int | None = None
    age_range_end: int | None = None
    room: str | None = None
    max_capacity: int | None = None
    teacher_id: UUID | None = None
    aux_teacher_id: UUID | None = None
    congregation_id: UUID | None = None


@dataclass(slots=True, frozen=True)
class UpdateClassInput:
    """Partial update; None leaves the field unchanged."""

    church_id: UUID
    class_id: UUID
    name: str | None = None
    age_range_start: int | None = None
    age_range_end: int | None = None
    room: str | None = None
    max_capacity: int | None = None
    teacher_id: UUID | None = None
    aux_teacher_id: UUID | None = None
    is_active: bool | None = None


@dataclass(slots=True, frozen=True)
class CloneClassesInput:
    """Copy every class of a source term into a target term."""

    church_id: UUID
    source_term_id: UUID
    target_term_id: UUID
    include_enrollments: bool = False


@dataclass(slots=True, frozen=True)
class ClonedClass:
    ebd_class: EbdClass
    enrolled_count: int


def _validate_class_shape(
    *,
    age_range_start: int | None,
    age_range_end: int | None,
    max_capacity: int | None,
) -> None:
    if (
        age_range_start is not None
        and age_range_end is not None
        and age_range_end < age_range_start
    ):
        raise ValidationError(
            message=compose_error_message(
                cause="age_range_end must not be lower than age_range_start.",
                action="Send a valid age range.",
            )
        )
    if max_capacity is not None and max_capacity < 1:
        raise ValidationError(
            message=compose_error_message(
                cause="max_capacity must be at least 1.",
                action="Send a positive capacity or omit the field.",
            )
        )


class ClassService:
    """Manages classes and member enrollment exclusivity per term."""

    def __init__(
        self,
        *,
        class_repository: ClassRepositoryProtocol,
        term_repository: TermLookupProtocol,
        member_repository: MemberLookupProtocol,
        session: SessionProtocol,
    ) -> None:
        self._class_repository = class_repository
        self._term_repository = term_repository
        self._member_repository = member_repository
        self._session = session

    def list_classes(
        self, filters: ClassListFilters
    ) -> tuple[list[tuple[EbdClass, int]], int]:
        return self._class_repository.list_classes(filters)

    def get_class(self, *, church_id: UUID, class_id: UUID) -> EbdClass:
        ebd_class = self._class_repository.get_class(
            church_id=church_id, class_id=class_id
        )
        if ebd_class is None:
            raise NotFoundError.for_entity("Class", class_id)
        return ebd_class

    def get_enrolled_count(self, class_id: UUID) -> int:
        return self._class_repository.count_active_enrollments(class_id)

    def create_class(self, payload: CreateClassInput) -> EbdClass:
        term = self._term_repository.get_term(
            church_id=payload.church_id, term_id=payload.term_id
        )
        if term is None:
            raise NotFoundError.for_entity("Term", payload.term_id)
        _validate_class_shape(
            age_range_start=payload.age_range_start,
            age_range_end=payload.age_range_end,
            max_capacity=payload.max_capacity,
        )

        try:
            ebd_class = self._class_repository.add(
                EbdClass(
                    church_id=payload.church_id,
                    term_id=term.id,
                    name=payload.name.strip(),
                    age_range_start=payload.age_range_start,
                    age_range_end=payload.age_range_end,
                    room=payload.room,
                    max_capacity=payload.max_capacity,
                    teacher_id=payload.teacher_id,
                    aux_teacher_id=payload.aux_teacher_id,
                    congregation_id=payload.congregation_id,
                    is_active=True,
                )
            )
            self._session.commit()
            self._session.refresh(ebd_class)
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "class_created",
            extra={"class_id": str(ebd_class.id), "term_id": str(term.id)},
        )
        return ebd_class

    def update_class(self, payload: UpdateClassInput) -> EbdClass:
        """Apply provided fields; capacity never drops below active enrollments."""

        try:
            if payload.max_capacity is not None:
                ebd_class = self._class_repository.get_class_for_update(
                    church_id=payload.church_id, class_id=payload.class_id
                )
            else:
                ebd_class = self._class_repository.get_class(
                    church_id=payload.church_id, class_id=payload.class_id
                )
            if ebd_class is None:
                raise NotFoundError.for_entity("Class", payload.class_id)
            _validate_class_shape(
                age_range_start=(
                    payload.age_range_start
                    if payload.age_range_start is not None
                    else ebd_class.age_range_start
                ),
                age_range_end=(
                    payload.age_range_end
                    if payload.age_range_end is not None
                    else ebd_class.age_range_end
                ),
                max_capacity=payload.max_capacity,
            )
            if payload.max_capacity is not None:
                enrolled = self._class_repository.count_active_enrollments(
                    ebd_class.id
                )
                if enrolled > payload.max_capacity:
                    raise ValidationError(
                        message=compose_error_message(
                            cause="max_capacity is below the active enrollments.",
                            action="End enrollments first or keep a higher capacity.",
                        ),
                        details={
                            "max_capacity": payload.max_capacity,
                            "enrolled": enrolled,
                        },
                    )

            for field_name in (
                "age_range_start",
                "age_range_end",
                "room",
                "max_capacity",
                "teacher_id",
                "aux_teacher_id",
                "is_active",
            ):
                value = getattr(payload, field_name)
                if value is not None:
                    setattr(ebd_class, field_name, value)
            if payload.name is not None:
                ebd_class.name = payload.name.strip()
            self._class_repository.flush()
            self._session.commit()
            self._session.refresh(ebd_class)
        except Exception:
            self._session.rollback()
            raise

        logger.info("class_updated", extra={"class_id": str(ebd_class.id)})
        return ebd_class

    def delete_class(self, *, church_id: UUID, class_id: UUID) -> None:
        """Delete the class with its lessons, attendance and enrollments."""

        ebd_class = self.get_class(church_id=church_id, class_id=class_id)
        try:
            self._class_repository.delete_class_cascade(ebd_class)
            self._session.commit()
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "class_deleted",
            extra={"class_id": str(class_id), "church_id": str(church_id)},
        )

    def clone_classes(self, payload: CloneClassesInput) -> list[ClonedClass]:
        """Copy the source term's classes, optionally with active enrollments.

        Members already enrolled somewhere in the target term are not copied.
        """

        if payload.source_term_id == payload.target_term_id:
            raise ValidationError(
                message=compose_error_message(
                    cause="Source and target terms are the same.",
                    action="Clone classes from a different term.",
                ),
                details={"term_id": str(payload.target_term_id)},
            )
        for term_id in (payload.target_term_id, payload.source_term_id):
            if (
                self._term_repository.get_term(
                    church_id=payload.church_id, term_id=term_id
                )
                is None
            ):
                raise NotFoundError.for_entity("Term", term_id)

        cloned: list[ClonedClass] = []
        try:
            taken = self._class_repository.active_member_ids_in_term(
                payload.target_term_id
            )
            for source in self._class_repository.list_term_classes(
                payload.source_term_id
            ):
                ebd_class = self._class_repository.add(
                    EbdClass(
                        church_id=payload.church_id,
                        term_id=payload.target_term_id,
                        name=source.name,
                        age_range_start=source.age_range_start,
                        age_range_end=source.age_range_end,
                        room=source.room,
                        max_capacity=source.max_capacity,
                        teacher_id=source.teacher_id,
                        aux_teacher_id=source.aux_teacher_id,
                        congregation_id=source.congregation_id,
                        is_active=True,
                    )
                )
                enrolled = 0
                if payload.include_enrollments:
                    for member_id in self._class_repository.active_member_ids(
                        source.id
                    ):
                        if member_id in taken:
                            continue
                        self._class_repository.add_enrollment(
                            EbdEnrollment(
                                class_id=ebd_class.id,
                                term_id=payload.target_term_id,
                                member_id=member_id,
                                enrolled_at=local_today(),
                                is_active=True,
                            )
                        )
                        taken.add(member_id)
                        enrolled += 1
                cloned.append(ClonedClass(ebd_class=ebd_class, enrolled_count=enrolled))
            self._session.commit()
            for item in cloned:
                self._session.refresh(item.ebd_class)
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "classes_cloned",
            extra={
                "source_term_id": str(payload.source_term_id),
                "target_term_id": str(payload.target_term_id),
                "classes": len(cloned),
            },
        )
        return cloned

    def list_enrollments(
        self, *, church_id: UUID, class_id: UUID
    ) -> list[tuple[EbdEnrollment, str | None]]:
        ebd_class = self.get_class(church_id=church_id, class_id=class_id)
        return self._class_repository.list_enrollments(ebd_class.id)

    def enroll_member(
        self, *, church_id: UUID, class_id: UUID, member_id: UUID
    ) -> EbdEnrollment:
        """Enroll a member, keeping one active enrollment per member per term."""

        try:
            ebd_class = self._class_repository.get_class_for_update(
                church_id=church_id, class_id=class_id
            )
            if ebd_class is None:
                raise NotFoundError.for_entity("Class", class_id)
            if self._member_repository.get_member(
                church_id=church_id, member_id=member_id
            ) is None:
                raise NotFoundError.for_entity("Member", member_id)

            if self._class_repository.has_active_enrollment_in_class(
                class_id=ebd_class.id, member_id=member_id
            ):
                raise ConflictError(
                    message=compose_error_message(
                        cause="Member is already enrolled in this class.",
                        action="No action needed, or remove the enrollment first.",
                    ),
                    details={"member_id": str(member_id)},
                )

            existing = self._class_repository.find_active_enrollment_in_term(
                term_id=ebd_class.term_id, member_id=member_id
            )
            if existing is not None:
                raise ConflictError(
                    message=compose_error_message(
                        cause=(
                            "Member is already enrolled in another class "
                            "of this term."
                        ),
                        action="Remove the other enrollment before enrolling here.",
                    ),
                    details={
                        "member_id": str(member_id),
                        "class_id": str(existing.class_id),
                    },
                )

            if ebd_class.max_capacity is not None:
                enrolled = self._class_repository.count_active_enrollments(
                    ebd_class.id
                )
                if enrolled >= ebd_class.max_capacity:
                    raise ValidationError(
                        message=compose_error_message(
                            cause="Class has reached its maximum capacity.",
                            action="Choose another class or raise max_capacity.",
                        ),
                        details={
                            "max_capacity": ebd_class.max_capacity,
                            "enrolled": enrolled,
                        },
                    )

            enrollment = self._class_repository.add_enrollment(
                EbdEnrollment(
                    class_id=ebd_class.id,
                    term_id=ebd_class.term_id,
                    member_id=member_id,
                    enrolled_at=local_today(),
                    is_active=True,
                )
            )
            self._session.commit()
            self._session.refresh(enrollment)
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "enrollment_created",
            extra={
                "enrollment_id": str(enrollment.id),
                "class_id": str(class_id),
                "member_id": str(member_id),
            },
        )
        return enrollment

    def remove_enrollment(
        self, *, church_id: UUID, class_id: UUID, enrollment_id: UUID
    ) -> EbdEnrollment:
        ebd_class = self.get_class(church_id=church_id, class_id=class_id)
        enrollment = self._class_repository.get_enrollment(
            class_id=ebd_class.id, enrollment_id=enrollment_id
        )
        if enrollment is None:
            raise NotFoundError.for_entity("Enrollment", enrollment_id)

        try:
            enrollment.is_active = False
            enrollment.left_at = local_today()
            self._class_repository.flush()
            self._session.commit()
            self._session.refresh(enrollment)
        except Exception:
            self._session.rollback()
            raise

        logger.info(
            "enrollment_removed",
            extra={"enrollment_id": str(enrollment_id), "class_id": str(class_id)},
        )
        return enrollment

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.orm import Session

from schoolhub.models.academic_year import AcademicYear
from schoolhub.models.branch import Branch
from schoolhub.models.enums import RecordStatus
from schoolhub.models.school_class import SchoolClass
from schoolhub.models.subject import Subject
from schoolhub.models.teacher import Teacher


@dataclass(frozen=True)
class BranchRef:
    id: str
    short_name: str
    legal_name: str


@dataclass(frozen=True)
class AcademicYearRef:
    id: str
    name: str
    start_date: date
    end_date: date


@dataclass(frozen=True)
class ClassRef:
    id: str
    name: str
    branch_id: str
    academic_year_id: str


@dataclass(frozen=True)
class SubjectRef:
    id: str
    name: str


@dataclass(frozen=True)
class TeacherRef:
    id: str
    first_name: str
    last_name: str
    branch_id: str

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class ReferenceSnapshot:
    """Active reference data as of the start of one upload. Never refreshed mid-batch."""

    branches: list[BranchRef] = field(default_factory=list)
    classes: list[ClassRef] = field(default_factory=list)
    academic_years: list[AcademicYearRef] = field(default_factory=list)
    subjects: list[SubjectRef] = field(default_factory=list)
    teachers: list[TeacherRef] = field(default_factory=list)


class ReferenceResolver(Protocol):
    def resolve_branch(self, value: str) -> BranchRef | None: ...

    def resolve_academic_year(self, value: str) -> AcademicYearRef | None: ...

    def resolve_class(self, value: str, *, branch_id: str, academic_year_id: str) -> ClassRef | None: ...

    def resolve_subject(self, value: str) -> SubjectRef | None: ...

    def resolve_teacher(self, value: str, *, branch_id: str) -> TeacherRef | None: ...


def natural_key(value: str) -> str:
    return value.strip().casefold()


class SnapshotResolver:
    """Case-insensitive natural-key lookups over a `ReferenceSnapshot`.

    When two records share a key the one loaded first wins.
    """

    def __init__(self, snapshot: ReferenceSnapshot):
        self.snapshot = snapshot
        self._branches: dict[str, BranchRef] = {}
        for branch in snapshot.branches:
            self._branches.setdefault(natural_key(branch.short_name), branch)
        for branch in snapshot.branches:
            self._branches.setdefault(natural_key(branch.legal_name), branch)

        self._academic_years: dict[str, AcademicYearRef] = {}
        for year in snapshot.academic_years:
            self._academic_years.setdefault(natural_key(year.name), year)

        self._classes: dict[tuple[str, str, str], ClassRef] = {}
        for item in snapshot.classes:
            self._classes.setdefault((natural_key(item.name), item.branch_id, item.academic_year_id), item)

        self._subjects: dict[str, SubjectRef] = {}
        for subject in snapshot.subjects:
            self._subjects.setdefault(natural_key(subject.name), subject)

        self._teachers: dict[tuple[str, str], TeacherRef] = {}
        for teacher in snapshot.teachers:
            self._teachers.setdefault((natural_key(teacher.full_name), teacher.branch_id), teacher)

    def resolve_branch(self, value: str) -> BranchRef | None:
        return self._branches.get(natural_key(value))

    def resolve_academic_year(self, value: str) -> AcademicYearRef | None:
        return self._academic_years.get(natural_key(value))

    def resolve_class(self, value: str, *, branch_id: str, academic_year_id: str) -> ClassRef | None:
        return self._classes.get((natural_key(value), branch_id, academic_year_id))

    def resolve_subject(self, value: str) -> SubjectRef | None:
        return self._subjects.get(natural_key(value))

    def resolve_teacher(self, value: str, *, branch_id: str) -> TeacherRef | None:
        return self._teachers.get((natural_key(" ".join(value.split())), branch_id))


def load_reference_snapshot(db: Session) -> ReferenceSnapshot:
    active = RecordStatus.active
    branches = db.execute(
        select(Branch.id, Branch.short_name, Branch.legal_name).where(Branch.status == active)
    ).all()
    classes = db.execute(
        select(SchoolClass.id, SchoolClass.name, SchoolClass.branch_id, SchoolClass.academic_year_id).where(
            SchoolClass.status == active
        )
    ).all()
    years = db.execute(
        select(AcademicYear.id, AcademicYear.name, AcademicYear.start_date, AcademicYear.end_date).where(
            AcademicYear.status == active
        )
    ).all()
    subjects = db.execute(select(Subject.id, Subject.name).where(Subject.status == active)).all()
    teachers = db.execute(
        select(Teacher.id, Teacher.first_name, Teacher.last_name, Teacher.branch_id).where(Teacher.status == active)
    ).all()

    return ReferenceSnapshot(
        branches=[BranchRef(*row) for row in branches],
        classes=[ClassRef(*row) for row in classes],
        academic_years=[AcademicYearRef(*row) for row in years],
        subjects=[SubjectRef(*row) for row in subjects],
        teachers=[TeacherRef(*row) for row in teachers],
    )

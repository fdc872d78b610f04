from datetime import date

from schoolhub.services.reference_data import (
    AcademicYearRef,
    BranchRef,
    ClassRef,
    ReferenceSnapshot,
    SnapshotResolver,
    SubjectRef,
    TeacherRef,
    load_reference_snapshot,
)


def make_resolver():
    return SnapshotResolver(
        ReferenceSnapshot(
            branches=[
                BranchRef("b1", "SCI", "Science"),
                BranchRef("b2", "LIT", "Literature"),
                BranchRef("b3", "Science", "Science Annex"),
            ],
            academic_years=[AcademicYearRef("y1", "2024-25", date(2024, 9, 1), date(2025, 6, 30))],
            classes=[ClassRef("c1", "Grade 10A", "b1", "y1"), ClassRef("c2", "Grade 10A", "b2", "y1")],
            subjects=[SubjectRef("s1", "Physics"), SubjectRef("s2", "physics")],
            teachers=[TeacherRef("t1", "John", "Smith", "b1"), TeacherRef("t2", "John", "Smith", "b2")],
        )
    )


def test_branch_resolves_by_short_or_legal_name_ignoring_case():
    resolver = make_resolver()

    assert resolver.resolve_branch("sci").id == "b1"
    assert resolver.resolve_branch("  Literature ").id == "b2"
    assert resolver.resolve_branch("Unknown") is None


def test_short_name_match_wins_over_legal_name():
    assert make_resolver().resolve_branch("Science").id == "b3"


def test_first_loaded_record_wins_on_duplicate_key():
    assert make_resolver().resolve_subject("PHYSICS").id == "s1"


def test_class_and_teacher_are_scoped_to_branch():
    resolver = make_resolver()

    assert resolver.resolve_class("grade 10a", branch_id="b2", academic_year_id="y1").id == "c2"
    assert resolver.resolve_class("Grade 10A", branch_id="b3", academic_year_id="y1") is None
    assert resolver.resolve_teacher("John   Smith", branch_id="b2").id == "t2"
    assert resolver.resolve_teacher("John Smith", branch_id="b3") is None


def test_snapshot_loads_only_active_records(db, school):
    snapshot = load_reference_snapshot(db)

    assert {branch.short_name for branch in snapshot.branches} == {"SCI", "LIT"}
    assert {teacher.full_name for teacher in snapshot.teachers} == {"John Smith", "Jane Doe", "Alice Johnson"}
    assert snapshot.academic_years[0].start_date == date(2024, 9, 1)

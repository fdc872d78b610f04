"""Seed an admin account and the reference data named by the bulk-upload template.

After running this, the sample rows of the downloaded template validate cleanly.

Run:
  PYTHONPATH=backend python scripts/seed_school_data.py
"""

from __future__ import annotations

from datetime import date
import os

from sqlalchemy import select
from sqlalchemy.orm import Session

from schoolhub.core.security import get_password_hash
from schoolhub.db.session import SessionLocal
from schoolhub.models import AcademicYear, Branch, SchoolClass, Subject, Teacher, User, UserRole

ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@schoolhub.local").strip().lower()
ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD", "ChangeMe123!")

ACADEMIC_YEAR = ("2024-2025", date(2024, 9, 1), date(2025, 6, 30))
BRANCHES = {"SCI": "Science Branch", "LIT": "Literature Branch"}
CLASSES = {"SCI": ["Grade 10A"], "LIT": ["Grade 9B"]}
SUBJECTS = ["Physics", "Chemistry", "English Literature"]
TEACHERS = {"SCI": [("John", "Smith"), ("Jane", "Doe")], "LIT": [("Alice", "Johnson")]}


def _upsert_admin(session: Session) -> User:
    user = session.execute(select(User).where(User.email == ADMIN_EMAIL)).scalar_one_or_none()
    if user is None:
        user = User(
            name="School Admin",
            email=ADMIN_EMAIL,
            hashed_password=get_password_hash(ADMIN_PASSWORD),
            role=UserRole.admin,
            is_active=True,
        )
        session.add(user)
    else:
        user.role = UserRole.admin
        user.is_active = True
    return user


def _get_or_add(session: Session, model, lookup: dict, **values):
    instance = session.execute(select(model).filter_by(**lookup)).scalar_one_or_none()
    if instance is None:
        instance = model(**lookup, **values)
        session.add(instance)
        session.flush()
    return instance


def main() -> None:
    with SessionLocal() as session:
        admin = _upsert_admin(session)

        name, start_date, end_date = ACADEMIC_YEAR
        year = _get_or_add(session, AcademicYear, {"name": name}, start_date=start_date, end_date=end_date)

        for short_name, legal_name in BRANCHES.items():
            branch = _get_or_add(session, Branch, {"short_name": short_name}, legal_name=legal_name)
            for class_name in CLASSES[short_name]:
                _get_or_add(
                    session,
                    SchoolClass,
                    {"name": class_name, "branch_id": branch.id, "academic_year_id": year.id},
                )
            for first_name, last_name in TEACHERS[short_name]:
                _get_or_add(
                    session,
                    Teacher,
                    {"first_name": first_name, "last_name": last_name, "branch_id": branch.id},
                )

        for subject_name in SUBJECTS:
            _get_or_add(session, Subject, {"name": subject_name})

        session.commit()
        print(f"Admin account ready: {admin.email}")
        print(f"Academic year {name}, branches {', '.join(BRANCHES)}, {len(SUBJECTS)} subjects seeded")


if __name__ == "__main__":
    main()

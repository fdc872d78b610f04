from pathlib import Path

from alembic.config import Config
from alembic.script import ScriptDirectory

from schoolhub.db.base import Base
from schoolhub.models import TimetableEntry

MIGRATIONS_DIR = Path(__file__).resolve().parents[2] / "database" / "migrations"


def script_directory():
    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    return ScriptDirectory.from_config(config)


def test_revisions_form_a_single_chain():
    scripts = script_directory()

    assert scripts.get_heads() == ["20261019_0003"]
    assert [revision.revision for revision in scripts.walk_revisions()] == [
        "20261019_0003",
        "20261019_0002",
        "20261019_0001",
    ]


def test_every_model_table_is_created_by_a_revision():
    source = "\n".join(path.read_text() for path in (MIGRATIONS_DIR / "versions").glob("*.py"))

    for table_name in Base.metadata.tables:
        assert f'op.create_table(\n        "{table_name}"' in source, table_name


def test_timetable_slot_uniqueness_covers_active_entries_only():
    index = next(index for index in TimetableEntry.__table__.indexes if index.unique)

    assert [column.name for column in index.columns] == ["class_id", "full_date", "start_time"]
    assert str(index.dialect_options["postgresql"]["where"]) == "status = 'active'"
    assert str(index.dialect_options["sqlite"]["where"]) == "status = 'active'"

    source = (MIGRATIONS_DIR / "versions" / "20261019_0003_create_timetables_and_bulk_uploads.py").read_text()
    assert 'postgresql_where=sa.text("status = \'active\'")' in source

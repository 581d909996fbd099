import base64
from datetime import date

import pytest

from weekly_reminders import crud
from weekly_reminders.crud.settings import KNOWLEDGE_SHEET_KEY
from weekly_reminders.generator import generate_mock_artifact
from weekly_reminders.models import DailyReminder, Document, WeeklyOverview
from weekly_reminders.recorder import IngestionRecorder
from weekly_reminders.schemas import DocumentCreate, GeneratedArtifact, KNOWLEDGE_SHEET, WEEKLY_MAILING
from weekly_reminders.storage import LocalBlobStore

WEEK = date(2026, 3, 2)


def artifact_with(summary: str, titles) -> GeneratedArtifact:
    return GeneratedArtifact.model_validate({
        "dailyReminders": [
            {"date": "2026-03-0%d" % (i + 2), "title": title, "description": "", "priority": "low", "category": "General"}
            for i, title in enumerate(titles)
        ],
        "weeklyOverview": {
            "summary": summary,
            "keyHighlights": ["one"],
            "importantDates": [{"date": "2026-03-04", "event": "Trip"}],
            "weeklyMailingSummary": {"mainTopics": ["Trip"], "actionItems": ["Pay"], "upcomingEvents": []},
        },
        "knowledgeSheetSuggestions": {"additions": ["a"], "removals": ["r"]},
        "updatedKnowledgeSheet": f"sheet after {summary}",
    })


def test_replace_is_idempotent(db, year_group) -> None:
    recorder = IngestionRecorder(db)
    artifact = generate_mock_artifact(WEEK, year_group.name)

    recorder.replace_artifacts(year_group.id, WEEK, artifact)
    recorder.replace_artifacts(year_group.id, WEEK, artifact)

    assert db.query(DailyReminder).count() == 5
    assert db.query(WeeklyOverview).count() == 1


def test_replace_never_merges(db, year_group) -> None:
    recorder = IngestionRecorder(db)
    recorder.replace_artifacts(year_group.id, WEEK, artifact_with("first", ["a", "b", "c"]))
    recorder.replace_artifacts(year_group.id, WEEK, artifact_with("second", ["x"]))

    titles = [r.title for r in crud.get_reminders_for_week(db, year_group.id, WEEK)]
    assert titles == ["x"]
    assert crud.get_weekly_overview(db, year_group.id, WEEK).summary == "second"


def test_replace_only_touches_its_own_group_and_week(db, year_group) -> None:
    other = crud.create_year_group(db, "Year 5", 2)
    recorder = IngestionRecorder(db)
    recorder.replace_artifacts(other.id, WEEK, artifact_with("other", ["keep"]))
    recorder.replace_artifacts(year_group.id, date(2026, 3, 9), artifact_with("later", ["later"]))
    recorder.replace_artifacts(year_group.id, WEEK, artifact_with("mine", ["mine"]))

    assert [r.title for r in crud.get_reminders_for_week(db, other.id, WEEK)] == ["keep"]
    assert [r.title for r in crud.get_reminders_for_week(db, year_group.id, date(2026, 3, 9))] == ["later"]


def test_round_trip(db, year_group) -> None:
    artifact = artifact_with("round trip", ["PE kit", "Library books"])
    IngestionRecorder(db).replace_artifacts(year_group.id, WEEK, artifact)

    stored = crud.get_artifact(db, year_group.id, WEEK, knowledge_sheet=artifact.updated_knowledge_sheet)
    assert stored.model_dump() == artifact.model_dump()


def test_updated_sheet_overwrites_setting(db, year_group) -> None:
    crud.set_setting(db, KNOWLEDGE_SHEET_KEY, "old sheet")
    IngestionRecorder(db).replace_artifacts(year_group.id, WEEK, artifact_with("new", ["a"]))
    assert crud.get_setting(db, KNOWLEDGE_SHEET_KEY) == "sheet after new"


def test_failed_replace_rolls_back(db, year_group, monkeypatch) -> None:
    recorder = IngestionRecorder(db)
    recorder.replace_artifacts(year_group.id, WEEK, artifact_with("kept", ["old"]))

    def explode(*args, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(crud, "add_artifacts", explode)
    with pytest.raises(RuntimeError):
        recorder.replace_artifacts(year_group.id, WEEK, artifact_with("lost", ["new"]))

    assert [r.title for r in crud.get_reminders_for_week(db, year_group.id, WEEK)] == ["old"]


def test_persist_document_writes_blob(db, tmp_path) -> None:
    store = LocalBlobStore(str(tmp_path))
    content = b"%PDF-1.4 mailing"
    document = IngestionRecorder(db, store).persist_document(DocumentCreate(
        type=WEEKLY_MAILING,
        week_start_date=WEEK,
        filename="mailing.pdf",
        file_size=len(content),
        content_base64=base64.b64encode(content).decode("ascii"),
    ))

    assert document.storage_key.startswith("documents/mailing-")
    assert store.get(document.storage_key) == content
    assert document.is_active
    assert crud.get_weekly_mailings(db, WEEK)[0].id == document.id


def test_knowledge_sheet_versions_supersede(db, year_group) -> None:
    recorder = IngestionRecorder(db)
    crud.set_timetable(db, year_group.id, '{"Monday": []}')

    second = recorder.persist_document(DocumentCreate(type=KNOWLEDGE_SHEET, year_group_id=year_group.id, filename="sheet-v2.pdf"))
    third = recorder.persist_document(DocumentCreate(type=KNOWLEDGE_SHEET, year_group_id=year_group.id, filename="sheet-v3.pdf"))

    sheets = db.query(Document).filter(Document.type == KNOWLEDGE_SHEET).all()
    assert len(sheets) == 3
    assert [s.id for s in sheets if s.is_active] == [third.id]
    assert second.version == 2
    assert third.version == 3
    assert crud.get_timetable_json(db, year_group.id) == '{"Monday": []}'


def test_deactivate_document(db) -> None:
    recorder = IngestionRecorder(db)
    document = recorder.persist_document(DocumentCreate(type=WEEKLY_MAILING, week_start_date=WEEK, filename="a.pdf"))
    recorder.deactivate_document(document.id)

    assert crud.get_weekly_mailings(db, WEEK) == []
    assert crud.get_document(db, document.id) is not None
    assert recorder.deactivate_document("missing") is None


def test_round_trip_keeps_answer_order(db, year_group) -> None:
    artifact = GeneratedArtifact.model_validate({
        "dailyReminders": [
            {"date": "2026-03-04", "title": "Wed trip", "priority": "high", "category": "Trips"},
            {"date": "2026-03-02", "title": "Mon PE", "priority": "medium", "category": "PE"},
            {"date": "2026-03-04", "title": "Wed library", "priority": "low", "category": "General"},
        ],
        "weeklyOverview": {"summary": "Out of order"},
        "knowledgeSheetSuggestions": {"additions": [], "removals": []},
        "updatedKnowledgeSheet": "sheet",
    })
    IngestionRecorder(db).replace_artifacts(year_group.id, WEEK, artifact)

    stored = crud.get_artifact(db, year_group.id, WEEK, knowledge_sheet="sheet")
    assert [r.title for r in stored.daily_reminders] == ["Wed trip", "Mon PE", "Wed library"]
    assert stored.model_dump() == artifact.model_dump()


def test_failed_insert_removes_written_blob(db, tmp_path, monkeypatch) -> None:
    store = LocalBlobStore(str(tmp_path))

    def explode(*args, **kwargs):
        raise RuntimeError("database is locked")

    monkeypatch.setattr(crud, "create_document", explode)
    with pytest.raises(RuntimeError):
        IngestionRecorder(db, store).persist_document(DocumentCreate(
            type=WEEKLY_MAILING,
            week_start_date=WEEK,
            filename="mailing.pdf",
            content_base64=base64.b64encode(b"%PDF-1.4").decode("ascii"),
        ))

    assert list((tmp_path / "documents").iterdir()) == []

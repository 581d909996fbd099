import base64
from datetime import date, datetime

import pytest
from playwright.sync_api import Error as PlaywrightError

from weekly_reminders import crud
from weekly_reminders.crud.settings import KNOWLEDGE_SHEET_KEY, PROMPT_TEMPLATE_KEY, SCRAPING_URL_KEY
from weekly_reminders.exceptions import InvalidRunTransition
from weekly_reminders.generator import generate_mock_artifact
from weekly_reminders.models.scrape_run import COMPLETED, FAILED
from weekly_reminders.pipeline import build_generation_input, generate_for_all_groups, generate_for_group, run_scrape
from weekly_reminders.prompts import DEFAULT_PROMPT_TEMPLATE
from weekly_reminders.schemas import DocumentCreate, WEEKLY_MAILING
from weekly_reminders.seed import reset_prompt, seed_defaults
from weekly_reminders.storage import LocalBlobStore

NOW = datetime(2026, 3, 6, 14, 0)
WEEK = date(2026, 3, 9)


class RecordingOrchestrator:
    def __init__(self):
        self.inputs = []

    def generate(self, generation_input):
        self.inputs.append(generation_input)
        return generate_mock_artifact(
            generation_input.week_start_date,
            generation_input.year_group_name,
            "sheet from " + generation_input.year_group_name,
        )


def add_mailing(db, name: str = "mailing.pdf", week: date = WEEK):
    return crud.create_document(db, DocumentCreate(
        type=WEEKLY_MAILING,
        week_start_date=week,
        filename=name,
        content_base64=base64.b64encode(b"%PDF-1.4").decode("ascii"),
    ))


def test_run_scrape_finalizes_completed_run(db, config, fake_browser, tmp_path) -> None:
    crud.set_setting(db, SCRAPING_URL_KEY, "https://school.example/mailing")
    browser = fake_browser(links=[("https://school.example/files/week.pdf", "Mailing")])

    response = run_scrape(db, config=config, blob_store=LocalBlobStore(str(tmp_path)), browser_launcher=browser, now=NOW)

    assert response.success
    assert response.documents_found == 1
    assert response.documents_processed == 1
    run = crud.list_scrape_runs(db)[0]
    assert run.id == response.run_id
    assert run.status == COMPLETED
    assert run.completed_at is not None
    assert run.log_details[0]["step"] == 1
    mailings = crud.get_weekly_mailings(db, WEEK)
    assert [m.filename for m in mailings] == ["week.pdf"]
    assert mailings[0].storage_key


def test_run_scrape_records_failure(db, config, fake_browser) -> None:
    crud.set_setting(db, SCRAPING_URL_KEY, "https://school.example/mailing")
    browser = fake_browser(goto_error=PlaywrightError("Timeout 30000ms exceeded"))

    response = run_scrape(db, config=config, browser_launcher=browser, now=NOW)

    assert not response.success
    assert response.documents_found == 0
    run = crud.list_scrape_runs(db)[0]
    assert run.status == FAILED
    assert "Timeout" in run.error_message
    assert response.model_dump(by_alias=True)["documentsFound"] == 0


def test_run_scrape_without_url_fails(db, config, fake_browser) -> None:
    response = run_scrape(db, config=config, browser_launcher=fake_browser(), now=NOW)
    assert not response.success
    assert "URL" in response.error


def test_scrape_run_finalized_only_once(db) -> None:
    run = crud.create_scrape_run(db)
    crud.finalize_scrape_run(db, run.id, COMPLETED, 0, 0, [])
    with pytest.raises(InvalidRunTransition):
        crud.finalize_scrape_run(db, run.id, FAILED, 0, 0, [])
    with pytest.raises(InvalidRunTransition):
        crud.finalize_scrape_run(db, crud.create_scrape_run(db).id, "running", 0, 0, [])


def test_generation_input_collects_context(db, year_group) -> None:
    add_mailing(db, "first.pdf")
    add_mailing(db, "other-week.pdf", week=date(2026, 3, 2))
    crud.set_timetable(db, year_group.id, '{"Tuesday": [{"time": "09:00", "subject": "PE"}]}')
    crud.set_setting(db, KNOWLEDGE_SHEET_KEY, "Swimming on Thursdays")

    generation_input = build_generation_input(db, year_group, WEEK)

    assert [d.filename for d in generation_input.documents] == ["first.pdf"]
    assert generation_input.prompt_template == DEFAULT_PROMPT_TEMPLATE
    assert "PE" in generation_input.timetable_json
    assert generation_input.knowledge_sheet_content == "Swimming on Thursdays"


def test_extracted_text_is_cached_on_the_document(db, year_group) -> None:
    document = add_mailing(db)
    generation_input = build_generation_input(db, year_group, WEEK)

    attachment = generation_input.documents[0]
    generation_input.on_text_extracted(attachment, "cached text")

    db.refresh(document)
    assert document.extracted_text == "cached text"
    assert build_generation_input(db, year_group, WEEK).documents[0].extracted_text == "cached text"


def test_generate_for_group_stores_artifact(db, year_group) -> None:
    add_mailing(db)
    orchestrator = RecordingOrchestrator()

    response = generate_for_group(db, year_group.id, orchestrator=orchestrator, now=NOW)

    assert response.success
    assert response.week_start_date == WEEK
    assert response.knowledge_sheet_updated
    assert len(crud.get_reminders_for_week(db, year_group.id, WEEK)) == 5
    assert crud.get_setting(db, KNOWLEDGE_SHEET_KEY) == "sheet from Year 1"
    assert len(orchestrator.inputs[0].documents) == 1


def test_generate_for_unknown_group(db) -> None:
    response = generate_for_group(db, "no-such-group", orchestrator=RecordingOrchestrator(), now=NOW)
    assert not response.success
    assert "not found" in response.error


def test_generate_reports_persistence_failure(db, year_group, monkeypatch) -> None:
    def explode(*args, **kwargs):
        raise RuntimeError("database is locked")

    monkeypatch.setattr(crud, "add_artifacts", explode)
    response = generate_for_group(db, year_group.id, WEEK, orchestrator=RecordingOrchestrator())

    assert not response.success
    assert response.error == "Failed to store reminders: database is locked"


def test_generate_for_all_groups(db) -> None:
    seed_defaults(db)
    orchestrator = RecordingOrchestrator()

    responses = generate_for_all_groups(db, WEEK, orchestrator=orchestrator)

    assert [r.year_group_name for r in responses] == ["Year 1", "Year 5"]
    assert all(r.success for r in responses)


def test_seed_is_repeatable_and_prompt_resets(db) -> None:
    seed_defaults(db)
    crud.set_setting(db, PROMPT_TEMPLATE_KEY, "custom")
    seed_defaults(db)

    assert len(crud.list_year_groups(db)) == 2
    assert crud.get_setting(db, PROMPT_TEMPLATE_KEY) == "custom"

    reset_prompt(db)
    assert crud.get_setting(db, PROMPT_TEMPLATE_KEY) == DEFAULT_PROMPT_TEMPLATE

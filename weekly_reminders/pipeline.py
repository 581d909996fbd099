"""
Entry points called by the CLI or a scheduler: scrape the mailing page, and
generate reminders for a year group. Both are safe to re-run.
"""

import logging
from datetime import date, datetime
from typing import List, Optional
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from weekly_reminders import crud
from weekly_reminders.config import Settings, settings as default_settings
from weekly_reminders.crud.settings import (
    KNOWLEDGE_SHEET_KEY,
    PROMPT_TEMPLATE_KEY,
    SCRAPING_PASSWORD_KEY,
    SCRAPING_URL_KEY,
)
from weekly_reminders.dates import ScheduleCalculator
from weekly_reminders.generator import GenerationOrchestrator
from weekly_reminders.models.scrape_run import COMPLETED, FAILED
from weekly_reminders.prompts import DEFAULT_PROMPT_TEMPLATE
from weekly_reminders.recorder import IngestionRecorder
from weekly_reminders.schemas import (
    GenerationInput,
    GenerationResponse,
    MailingAttachment,
    ScrapeResult,
    ScrapeTriggerResponse,
)
from weekly_reminders.scraper import AcquisitionSession, launch_browser
from weekly_reminders.storage import LocalBlobStore

logger = logging.getLogger(__name__)


def current_time(config: Settings = None) -> datetime:
    config = config or default_settings
    return datetime.now(ZoneInfo(config.timezone))


def run_scrape(
    db: Session,
    config: Settings = None,
    blob_store: Optional[LocalBlobStore] = None,
    browser_launcher=launch_browser,
    now: Optional[datetime] = None
) -> ScrapeTriggerResponse:
    """
    Scrape the configured page and record the run.

    The run row is created as `running` and always finalized, whichever way
    the session ends.
    """
    config = config or default_settings
    recorder = IngestionRecorder(db, blob_store)
    url = crud.get_setting(db, SCRAPING_URL_KEY, config.scraping_url)
    password = crud.get_setting(db, SCRAPING_PASSWORD_KEY, config.scraping_password)

    run = crud.create_scrape_run(db)
    session = AcquisitionSession(recorder.persist_document, config=config, browser_launcher=browser_launcher)
    result = ScrapeResult(status="failed", error="Scrape did not finish")
    try:
        result = session.run(url, password or None, now=now)
    finally:
        log = [step.model_dump() for step in (result.log or session.log)]
        crud.finalize_scrape_run(
            db,
            run.id,
            status=COMPLETED if result.status == "completed" else FAILED,
            documents_found=result.found,
            documents_processed=result.processed,
            log_details=log,
            error_message=result.error
        )

    if result.status == "completed":
        logger.info("Scraping completed: %d/%d documents processed", result.processed, result.found)
    else:
        logger.error("Scraping failed: %s", result.error)

    return ScrapeTriggerResponse(
        success=result.status == "completed",
        documents_found=result.found,
        documents_processed=result.processed,
        error=result.error,
        run_id=run.id
    )


def build_generation_input(db: Session, year_group, week_start_date: date) -> GenerationInput:
    """Gather mailings, timetable, knowledge sheet and prompt for one group/week"""
    mailings = crud.get_weekly_mailings(db, week_start_date)
    attachments = [
        MailingAttachment(
            filename=doc.filename,
            content_base64=doc.content_base64,
            document_id=doc.id,
            extracted_text=doc.extracted_text
        )
        for doc in mailings
        if doc.content_base64
    ]

    def cache_text(attachment: MailingAttachment, text: str) -> None:
        if attachment.document_id:
            crud.cache_extracted_text(db, attachment.document_id, text)

    return GenerationInput(
        year_group_name=year_group.name,
        week_start_date=week_start_date,
        prompt_template=crud.get_setting(db, PROMPT_TEMPLATE_KEY, DEFAULT_PROMPT_TEMPLATE),
        documents=attachments,
        timetable_json=crud.get_timetable_json(db, year_group.id),
        knowledge_sheet_content=crud.get_setting(db, KNOWLEDGE_SHEET_KEY, ""),
        on_text_extracted=cache_text
    )


def generate_for_group(
    db: Session,
    year_group_id: str,
    week_start_date: Optional[date] = None,
    orchestrator: Optional[GenerationOrchestrator] = None,
    config: Settings = None,
    now: Optional[datetime] = None
) -> GenerationResponse:
    """Generate and store reminders for one year group and week"""
    config = config or default_settings
    year_group = crud.get_year_group(db, year_group_id)
    if year_group is None:
        return GenerationResponse(success=False, error=f"Year group {year_group_id} not found")

    if week_start_date is None:
        week_start_date = ScheduleCalculator.week_start(now or current_time(config), publish_day=config.publish_day)

    generation_input = build_generation_input(db, year_group, week_start_date)
    logger.info(
        "Generating for %s, week of %s (%d mailing documents)",
        year_group.name, week_start_date, len(generation_input.documents)
    )

    orchestrator = orchestrator or GenerationOrchestrator(config=config)
    artifact = orchestrator.generate(generation_input)

    try:
        IngestionRecorder(db).replace_artifacts(year_group.id, week_start_date, artifact)
    except Exception as e:
        logger.error("Failed to store reminders for %s: %s", year_group.name, e)
        return GenerationResponse(
            success=False,
            error=f"Failed to store reminders: {e}",
            year_group_name=year_group.name,
            week_start_date=week_start_date
        )

    return GenerationResponse(
        success=True,
        artifact=artifact,
        year_group_name=year_group.name,
        week_start_date=week_start_date,
        knowledge_sheet_updated=bool(artifact.updated_knowledge_sheet)
    )


def generate_for_all_groups(
    db: Session,
    week_start_date: Optional[date] = None,
    orchestrator: Optional[GenerationOrchestrator] = None,
    config: Settings = None,
    now: Optional[datetime] = None
) -> List[GenerationResponse]:
    """Generate for every year group in display order"""
    orchestrator = orchestrator or GenerationOrchestrator(config=config)
    return [
        generate_for_group(db, group.id, week_start_date, orchestrator=orchestrator, config=config, now=now)
        for group in crud.list_year_groups(db)
    ]

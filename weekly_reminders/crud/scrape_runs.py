from sqlalchemy.orm import Session
from weekly_reminders.models import ScrapeRun
from weekly_reminders.models.scrape_run import RUNNING, COMPLETED, FAILED
from weekly_reminders.exceptions import InvalidRunTransition
from datetime import datetime
from typing import List, Optional

def create_scrape_run(db: Session) -> ScrapeRun:
    """Open a new run in the running state"""
    run = ScrapeRun(status=RUNNING, log_details=[])
    db.add(run)
    db.commit()
    db.refresh(run)
    return run

def finalize_scrape_run(
    db: Session,
    run_id: str,
    status: str,
    documents_found: int,
    documents_processed: int,
    log_details: list,
    error_message: Optional[str] = None
) -> ScrapeRun:
    """Move a running run to completed or failed (exactly once)"""
    if status not in (COMPLETED, FAILED):
        raise InvalidRunTransition(f"Cannot finalize a run as {status!r}")
    
    run = db.query(ScrapeRun).filter(ScrapeRun.id == run_id).first()
    if run is None:
        raise InvalidRunTransition(f"Scrape run {run_id} not found")
    if run.status != RUNNING:
        raise InvalidRunTransition(f"Scrape run {run_id} already {run.status}")
    
    run.status = status
    run.completed_at = datetime.utcnow()
    run.documents_found = documents_found
    run.documents_processed = documents_processed
    run.error_message = error_message
    run.log_details = log_details
    db.commit()
    db.refresh(run)
    return run

def list_scrape_runs(db: Session, limit: int = 20) -> List[ScrapeRun]:
    """Most recent runs first"""
    return db.query(ScrapeRun).order_by(ScrapeRun.started_at.desc()).limit(limit).all()

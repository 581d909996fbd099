from sqlalchemy.orm import Session
from weekly_reminders.models import DailyReminder, WeeklyOverview
from weekly_reminders.schemas import GeneratedArtifact
from datetime import date
from typing import List, Optional

def delete_artifacts(db: Session, year_group_id: str, week_start_date: date) -> int:
    """Delete reminders and overview for (group, week) without committing"""
    deleted = db.query(DailyReminder).filter(
        DailyReminder.year_group_id == year_group_id,
        DailyReminder.week_start_date == week_start_date
    ).delete(synchronize_session=False)
    db.query(WeeklyOverview).filter(
        WeeklyOverview.year_group_id == year_group_id,
        WeeklyOverview.week_start_date == week_start_date
    ).delete(synchronize_session=False)
    return deleted

def add_artifacts(db: Session, year_group_id: str, week_start_date: date, artifact: GeneratedArtifact) -> None:
    """Stage reminders and overview rows for (group, week) without committing"""
    for position, reminder in enumerate(artifact.daily_reminders):
        db.add(DailyReminder(
            position=position,
            year_group_id=year_group_id,
            reminder_date=reminder.date,
            title=reminder.title,
            description=reminder.description,
            priority=reminder.priority,
            category=reminder.category,
            week_start_date=week_start_date
        ))
    
    overview = artifact.weekly_overview
    db.add(WeeklyOverview(
        year_group_id=year_group_id,
        week_start_date=week_start_date,
        summary=overview.summary,
        key_highlights=overview.key_highlights,
        important_dates=[d.model_dump() for d in overview.important_dates],
        weekly_mailing_summary=overview.weekly_mailing_summary.model_dump(by_alias=True),
        knowledge_sheet_suggestions=artifact.knowledge_sheet_suggestions.model_dump()
    ))

def get_reminders_for_week(db: Session, year_group_id: str, week_start_date: date) -> List[DailyReminder]:
    """Reminders for a week in the order they were generated"""
    return db.query(DailyReminder).filter(
        DailyReminder.year_group_id == year_group_id,
        DailyReminder.week_start_date == week_start_date
    ).order_by(DailyReminder.position.asc(), DailyReminder.created_at.asc()).all()

def get_reminders_for_date(db: Session, year_group_id: str, reminder_date: date) -> List[DailyReminder]:
    """Reminders shown on one day"""
    return db.query(DailyReminder).filter(
        DailyReminder.year_group_id == year_group_id,
        DailyReminder.reminder_date == reminder_date
    ).order_by(DailyReminder.position.asc()).all()

def get_weekly_overview(db: Session, year_group_id: str, week_start_date: date) -> Optional[WeeklyOverview]:
    """Overview for a week, if generated"""
    return db.query(WeeklyOverview).filter(
        WeeklyOverview.year_group_id == year_group_id,
        WeeklyOverview.week_start_date == week_start_date
    ).first()

def get_artifact(
    db: Session,
    year_group_id: str,
    week_start_date: date,
    knowledge_sheet: str = ""
) -> Optional[GeneratedArtifact]:
    """Rebuild the stored artifact for (group, week)"""
    overview = get_weekly_overview(db, year_group_id, week_start_date)
    if overview is None:
        return None
    
    reminders = get_reminders_for_week(db, year_group_id, week_start_date)
    return GeneratedArtifact.model_validate({
        "dailyReminders": [
            {
                "date": r.reminder_date,
                "title": r.title,
                "description": r.description,
                "priority": r.priority,
                "category": r.category
            }
            for r in reminders
        ],
        "weeklyOverview": {
            "summary": overview.summary or "",
            "keyHighlights": overview.key_highlights or [],
            "importantDates": overview.important_dates or [],
            "weeklyMailingSummary": overview.weekly_mailing_summary or {}
        },
        "knowledgeSheetSuggestions": overview.knowledge_sheet_suggestions or {},
        "updatedKnowledgeSheet": knowledge_sheet
    })

import uuid
from sqlalchemy import Column, Integer, String, DateTime, Text, JSON
from datetime import datetime
from weekly_reminders.database import Base

RUNNING = "running"
COMPLETED = "completed"
FAILED = "failed"

class ScrapeRun(Base):
    """One execution of the acquisition session"""
    __tablename__ = "scrape_runs"
    
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    status = Column(String(10), nullable=False, default=RUNNING)
    started_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    completed_at = Column(DateTime)
    documents_found = Column(Integer, default=0)
    documents_processed = Column(Integer, default=0)
    error_message = Column(Text)
    log_details = Column(JSON, default=list)  # [{"timestamp", "step", "message"}]

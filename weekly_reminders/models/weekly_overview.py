import uuid
from sqlalchemy import Column, String, Date, DateTime, Text, ForeignKey, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from weekly_reminders.database import Base

class WeeklyOverview(Base):
    """Generated summary of a year group's week"""
    __tablename__ = "weekly_overviews"
    
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    year_group_id = Column(String(36), ForeignKey("year_groups.id"), nullable=False)
    week_start_date = Column(Date, nullable=False, index=True)
    summary = Column(Text)
    key_highlights = Column(JSON)  # ["PE on Tuesday", ...]
    important_dates = Column(JSON)  # [{"date": "2026-03-02", "event": "..."}]
    weekly_mailing_summary = Column(JSON)  # mainTopics, actionItems, upcomingEvents
    knowledge_sheet_suggestions = Column(JSON)  # additions, removals
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    
    year_group = relationship("YearGroup", back_populates="weekly_overviews")

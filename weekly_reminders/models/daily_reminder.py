import uuid
from sqlalchemy import Column, Integer, String, Date, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from weekly_reminders.database import Base

class DailyReminder(Base):
    """One generated reminder for a year group on a school day"""
    __tablename__ = "daily_reminders"
    
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    year_group_id = Column(String(36), ForeignKey("year_groups.id"), nullable=False)
    reminder_date = Column(Date, nullable=False)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    priority = Column(String(10), nullable=False, default="medium")  # high, medium, low
    category = Column(String(100))
    week_start_date = Column(Date, nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)  # order within the generated artifact
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    
    year_group = relationship("YearGroup", back_populates="daily_reminders")

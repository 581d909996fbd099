import uuid
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
from weekly_reminders.database import Base

class YearGroup(Base):
    """A class-group that receives its own reminders, timetable and knowledge sheet"""
    __tablename__ = "year_groups"
    
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(50), nullable=False, unique=True)
    display_order = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    
    documents = relationship("Document", back_populates="year_group")
    daily_reminders = relationship("DailyReminder", back_populates="year_group")
    weekly_overviews = relationship("WeeklyOverview", back_populates="year_group")

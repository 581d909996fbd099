import uuid
from sqlalchemy import Column, String, DateTime, Text
from datetime import datetime
from weekly_reminders.database import Base

class AgentSetting(Base):
    """Key/value configuration editable at runtime (URL, prompt, knowledge sheet)"""
    __tablename__ = "agent_settings"
    
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    key = Column(String(100), nullable=False, unique=True)
    value = Column(Text)
    description = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

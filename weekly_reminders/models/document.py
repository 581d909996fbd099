import uuid
from sqlalchemy import Column, Integer, String, Date, DateTime, Text, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from weekly_reminders.database import Base


class Document(Base):
    """A discovered or uploaded file (weekly mailing or knowledge sheet)"""
    __tablename__ = "documents"
    
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    type = Column(String(20), nullable=False)  # "weekly_mailing" or "knowledge_sheet"
    year_group_id = Column(String(36), ForeignKey("year_groups.id"))  # NULL = school-wide
    week_start_date = Column(Date)
    filename = Column(String(255), nullable=False)
    storage_key = Column(String(500), nullable=False, default="")
    storage_url = Column(String(1000), nullable=False, default="")
    mime_type = Column(String(100), nullable=False)
    file_size = Column(Integer)
    content_base64 = Column(Text)  # raw document for providers that read PDFs natively
    extracted_text = Column(Text)  # cached plain text for text-only providers
    timetable_json = Column(Text)
    is_active = Column(Boolean, nullable=False, default=True)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    
    year_group = relationship("YearGroup", back_populates="documents")

from sqlalchemy.orm import Session
from weekly_reminders.models import Document
from weekly_reminders.schemas import DocumentCreate, WEEKLY_MAILING, KNOWLEDGE_SHEET
from datetime import date
from typing import List, Optional

def create_document(db: Session, document: DocumentCreate, commit: bool = True) -> Document:
    """
    Insert a document row.
    
    A new knowledge sheet supersedes the group's active one: the old row is
    deactivated (never deleted) and the version number carried forward.
    """
    data = document.model_dump()
    if document.type == KNOWLEDGE_SHEET:
        previous = get_active_knowledge_sheet(db, document.year_group_id)
        if previous:
            previous.is_active = False
            data["version"] = previous.version + 1
            if data.get("timetable_json") is None:
                data["timetable_json"] = previous.timetable_json
    
    db_document = Document(**data)
    db.add(db_document)
    if commit:
        db.commit()
        db.refresh(db_document)
    return db_document

def get_document(db: Session, document_id: str) -> Optional[Document]:
    """Get document by ID"""
    return db.query(Document).filter(Document.id == document_id).first()

def list_documents(
    db: Session,
    doc_type: Optional[str] = None,
    year_group_id: Optional[str] = None,
    week_start_date: Optional[date] = None,
    school_wide_only: bool = False
) -> List[Document]:
    """Active documents, newest first"""
    query = db.query(Document).filter(Document.is_active == True)  # noqa: E712
    if doc_type:
        query = query.filter(Document.type == doc_type)
    if school_wide_only:
        query = query.filter(Document.year_group_id == None)  # noqa: E711
    elif year_group_id:
        query = query.filter(Document.year_group_id == year_group_id)
    if week_start_date:
        query = query.filter(Document.week_start_date == week_start_date)
    return query.order_by(Document.created_at.desc()).all()

def get_weekly_mailings(db: Session, week_start_date: date) -> List[Document]:
    """Active school-wide mailings for a week, oldest first"""
    return db.query(Document).filter(
        Document.type == WEEKLY_MAILING,
        Document.week_start_date == week_start_date,
        Document.is_active == True  # noqa: E712
    ).order_by(Document.created_at.asc()).all()

def get_active_knowledge_sheet(db: Session, year_group_id: Optional[str]) -> Optional[Document]:
    """The single active knowledge-sheet row for a year group"""
    return db.query(Document).filter(
        Document.type == KNOWLEDGE_SHEET,
        Document.year_group_id == year_group_id,
        Document.is_active == True  # noqa: E712
    ).order_by(Document.version.desc()).first()

def get_timetable_json(db: Session, year_group_id: str) -> Optional[str]:
    """Timetable stored on the group's active knowledge sheet"""
    sheet = get_active_knowledge_sheet(db, year_group_id)
    return sheet.timetable_json if sheet else None

def set_timetable(db: Session, year_group_id: str, timetable_json: str) -> Document:
    """Store a timetable, creating the knowledge-sheet row if the group has none"""
    sheet = get_active_knowledge_sheet(db, year_group_id)
    if sheet:
        sheet.timetable_json = timetable_json
        db.commit()
        db.refresh(sheet)
        return sheet
    
    return create_document(db, DocumentCreate(
        type=KNOWLEDGE_SHEET,
        year_group_id=year_group_id,
        filename=f"timetable-{year_group_id}.json",
        mime_type="application/json",
        timetable_json=timetable_json
    ))

def deactivate_document(db: Session, document_id: str) -> Optional[Document]:
    """Soft-delete a document"""
    document = get_document(db, document_id)
    if document:
        document.is_active = False
        db.commit()
        db.refresh(document)
    return document

def cache_extracted_text(db: Session, document_id: str, text: str) -> None:
    """Remember extracted text so later fallbacks skip the PDF parse"""
    document = get_document(db, document_id)
    if document:
        document.extracted_text = text
        db.commit()

from sqlalchemy.orm import Session
from weekly_reminders.models import YearGroup
from typing import List, Optional

def create_year_group(db: Session, name: str, display_order: int) -> YearGroup:
    """Create a year group"""
    group = YearGroup(name=name, display_order=display_order)
    db.add(group)
    db.commit()
    db.refresh(group)
    return group

def get_year_group(db: Session, year_group_id: str) -> Optional[YearGroup]:
    """Get year group by ID"""
    return db.query(YearGroup).filter(YearGroup.id == year_group_id).first()

def get_year_group_by_name(db: Session, name: str) -> Optional[YearGroup]:
    """Get year group by name (case-insensitive)"""
    return db.query(YearGroup).filter(YearGroup.name.ilike(name)).first()

def resolve_year_group(db: Session, ref: str) -> Optional[YearGroup]:
    """Accept either an ID or a name"""
    return get_year_group(db, ref) or get_year_group_by_name(db, ref)

def list_year_groups(db: Session) -> List[YearGroup]:
    """All year groups in display order"""
    return db.query(YearGroup).order_by(YearGroup.display_order.asc()).all()

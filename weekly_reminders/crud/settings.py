from sqlalchemy.orm import Session
from weekly_reminders.models import AgentSetting
from typing import Dict, Optional

PROMPT_TEMPLATE_KEY = "llm_prompt_template"
KNOWLEDGE_SHEET_KEY = "knowledge_sheet_content"
SCRAPING_URL_KEY = "scraping_url"
SCRAPING_PASSWORD_KEY = "scraping_password"

def get_setting(db: Session, key: str, default: Optional[str] = None) -> Optional[str]:
    """Get a setting value, falling back to `default` when missing or empty"""
    setting = db.query(AgentSetting).filter(AgentSetting.key == key).first()
    if setting is None or not setting.value:
        return default
    return setting.value

def get_settings_map(db: Session) -> Dict[str, str]:
    """All settings as a key -> value dict"""
    return {s.key: s.value or "" for s in db.query(AgentSetting).all()}

def set_setting(
    db: Session,
    key: str,
    value: str,
    description: Optional[str] = None,
    commit: bool = True
) -> AgentSetting:
    """Insert or overwrite a setting"""
    setting = db.query(AgentSetting).filter(AgentSetting.key == key).first()
    if setting:
        setting.value = value
        if description is not None:
            setting.description = description
    else:
        setting = AgentSetting(key=key, value=value, description=description)
        db.add(setting)
    
    if commit:
        db.commit()
        db.refresh(setting)
    return setting

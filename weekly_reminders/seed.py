import logging

from sqlalchemy.orm import Session

from weekly_reminders import crud
from weekly_reminders.crud.settings import PROMPT_TEMPLATE_KEY
from weekly_reminders.models import AgentSetting
from weekly_reminders.prompts import DEFAULT_PROMPT_TEMPLATE, DEFAULT_SETTINGS, DEFAULT_YEAR_GROUPS

logger = logging.getLogger(__name__)


def seed_defaults(db: Session) -> None:
    """Create default year groups and settings; existing values are left alone"""
    for group in DEFAULT_YEAR_GROUPS:
        if crud.get_year_group_by_name(db, group["name"]) is None:
            crud.create_year_group(db, group["name"], group["display_order"])
            logger.info("Created year group %s", group["name"])

    for setting in DEFAULT_SETTINGS:
        exists = db.query(AgentSetting).filter(AgentSetting.key == setting["key"]).first()
        if exists is None:
            crud.set_setting(db, setting["key"], setting["value"], setting["description"])
            logger.info("Seeded setting %s", setting["key"])


def reset_prompt(db: Session) -> None:
    """Restore the default prompt template"""
    crud.set_setting(db, PROMPT_TEMPLATE_KEY, DEFAULT_PROMPT_TEMPLATE,
                     "Prompt template for LLM when generating reminders")

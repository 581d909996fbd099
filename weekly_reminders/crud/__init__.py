from weekly_reminders.crud.year_groups import (
    create_year_group,
    get_year_group,
    get_year_group_by_name,
    resolve_year_group,
    list_year_groups
)
from weekly_reminders.crud.settings import get_setting, get_settings_map, set_setting
from weekly_reminders.crud.documents import (
    create_document,
    get_document,
    list_documents,
    get_weekly_mailings,
    get_active_knowledge_sheet,
    get_timetable_json,
    set_timetable,
    deactivate_document,
    cache_extracted_text
)
from weekly_reminders.crud.reminders import (
    delete_artifacts,
    add_artifacts,
    get_reminders_for_week,
    get_reminders_for_date,
    get_weekly_overview,
    get_artifact
)
from weekly_reminders.crud.scrape_runs import create_scrape_run, finalize_scrape_run, list_scrape_runs

__all__ = [
    "create_year_group",
    "get_year_group",
    "get_year_group_by_name",
    "resolve_year_group",
    "list_year_groups",
    "get_setting",
    "get_settings_map",
    "set_setting",
    "create_document",
    "get_document",
    "list_documents",
    "get_weekly_mailings",
    "get_active_knowledge_sheet",
    "get_timetable_json",
    "set_timetable",
    "deactivate_document",
    "cache_extracted_text",
    "delete_artifacts",
    "add_artifacts",
    "get_reminders_for_week",
    "get_reminders_for_date",
    "get_weekly_overview",
    "get_artifact",
    "create_scrape_run",
    "finalize_scrape_run",
    "list_scrape_runs",
]

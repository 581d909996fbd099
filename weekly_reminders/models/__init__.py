from weekly_reminders.models.year_group import YearGroup
from weekly_reminders.models.document import Document
from weekly_reminders.models.daily_reminder import DailyReminder
from weekly_reminders.models.weekly_overview import WeeklyOverview
from weekly_reminders.models.scrape_run import ScrapeRun
from weekly_reminders.models.agent_setting import AgentSetting

__all__ = [
    "YearGroup",
    "Document",
    "DailyReminder",
    "WeeklyOverview",
    "ScrapeRun",
    "AgentSetting"
]

from datetime import date, datetime, timedelta
from typing import List, Union

MONDAY = 0
FRIDAY = 4
SATURDAY = 5


class ScheduleCalculator:
    """
    Date arithmetic for the mailing week.

    The school publishes its mailing on the publish day (Friday by default), and
    that mailing describes the *following* week. All functions are pure: they
    only look at the reference instant they are given.
    """

    @staticmethod
    def next_monday(day: date) -> date:
        """First Monday strictly after the given day"""
        days_ahead = (7 - day.weekday()) % 7 or 7
        return day + timedelta(days=days_ahead)

    @staticmethod
    def monday_of(day: date) -> date:
        return day - timedelta(days=day.weekday())

    @staticmethod
    def is_weekend(day: date) -> bool:
        return day.weekday() >= SATURDAY

    @staticmethod
    def week_start(now: Union[datetime, date], publish_day: int = FRIDAY) -> date:
        """
        Monday-aligned week key for the mailing that is relevant at `now`.

        On the publish day the mailing targets next week, so the key rolls
        forward to next Monday. Any other day maps to the Monday of its own week.
        """
        today = now.date() if isinstance(now, datetime) else now
        if today.weekday() == publish_day:
            return ScheduleCalculator.next_monday(today)
        return ScheduleCalculator.monday_of(today)

    @staticmethod
    def display_date(now: datetime, publish_day: int = FRIDAY, cutoff_hour: int = 10) -> date:
        """
        Date whose reminders a parent should see at `now`.

        Before the cutoff hour show today, from the cutoff onwards show
        tomorrow. Weekends, and the publish day after the cutoff, show next
        Monday instead.
        """
        today = now.date()
        before_cutoff = now.hour < cutoff_hour

        if ScheduleCalculator.is_weekend(today):
            return ScheduleCalculator.next_monday(today)

        if today.weekday() == publish_day and not before_cutoff:
            return ScheduleCalculator.next_monday(today)

        if before_cutoff:
            return today

        tomorrow = today + timedelta(days=1)
        if ScheduleCalculator.is_weekend(tomorrow):
            return ScheduleCalculator.next_monday(today)

        return tomorrow

    @staticmethod
    def should_show_next_week(now: datetime, publish_day: int = FRIDAY, cutoff_hour: int = 10) -> bool:
        """True once the upcoming week's content is what parents should see"""
        today = now.date()
        return ScheduleCalculator.is_weekend(today) or (
            today.weekday() == publish_day and now.hour >= cutoff_hour
        )

    @staticmethod
    def school_week_dates(week_start: date) -> List[date]:
        """Monday to Friday of the given week"""
        return [week_start + timedelta(days=i) for i in range(5)]


def format_for_db(day: date) -> str:
    return day.strftime("%Y-%m-%d")


def parse_db_date(value: str) -> date:
    return datetime.strptime(value, "%Y-%m-%d").date()


def format_display_date(day: date) -> str:
    """e.g. 'Monday, March 2'"""
    return f"{day.strftime('%A, %B')} {day.day}"


def format_week_range(week_start: date) -> str:
    """e.g. 'Mar 2 - Mar 6, 2026'"""
    week_end = week_start + timedelta(days=4)
    return f"{week_start.strftime('%b')} {week_start.day} - {week_end.strftime('%b')} {week_end.day}, {week_end.year}"


def relative_day(target: date, today: date) -> str:
    """Human description of `target` relative to `today`"""
    diff = (target - today).days
    if diff == 0:
        return "Today"
    if diff == 1:
        return "Tomorrow"
    if diff == -1:
        return "Yesterday"
    if 1 < diff <= 7:
        return target.strftime("%A")
    return f"{target.strftime('%B')} {target.day}"

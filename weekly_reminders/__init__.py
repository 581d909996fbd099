"""Weekly mailing scraper and reminder generator for school year groups."""

__version__ = "0.1.0"

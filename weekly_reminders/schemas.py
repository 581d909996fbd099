from pydantic import BaseModel, Field, AliasChoices, field_validator
from urllib.parse import unquote, urlparse
from typing import Callable, List, Literal, Optional
from datetime import date, datetime

WEEKLY_MAILING = "weekly_mailing"
KNOWLEDGE_SHEET = "knowledge_sheet"


class DocumentCreate(BaseModel):
    """Schema for persisting a scraped or uploaded document"""
    type: Literal["weekly_mailing", "knowledge_sheet"]
    year_group_id: Optional[str] = None
    week_start_date: Optional[date] = None
    filename: str
    mime_type: str = "application/pdf"
    file_size: Optional[int] = None
    content_base64: Optional[str] = None
    storage_key: str = ""
    storage_url: str = ""
    timetable_json: Optional[str] = None


class DocumentRef(BaseModel):
    """A document link found on the rendered page"""
    url: str
    text: str = "Unknown"

    @property
    def filename(self) -> str:
        name = unquote(urlparse(self.url).path.rstrip("/").split("/")[-1])
        return name or "document.pdf"


class LogStep(BaseModel):
    """One entry of a scrape run's step log"""
    timestamp: str
    step: int
    message: str


class ScrapeResult(BaseModel):
    """Outcome of one acquisition session"""
    status: Literal["completed", "failed"] = "completed"
    document_refs: List[DocumentRef] = Field(default_factory=list)
    found: int = 0
    processed: int = 0
    error: Optional[str] = None
    log: List[LogStep] = Field(default_factory=list)


class ScrapeTriggerResponse(BaseModel):
    """Response returned to whoever triggered a scrape"""
    success: bool
    documents_found: int = Field(0, serialization_alias="documentsFound")
    documents_processed: int = Field(0, serialization_alias="documentsProcessed")
    error: Optional[str] = None
    run_id: Optional[str] = Field(None, serialization_alias="runId")


# -------------------------------------------------------------------
# Generated artifact (provider JSON uses camelCase keys)
# -------------------------------------------------------------------

class ReminderItem(BaseModel):
    """Schema for a single daily reminder"""
    date: date
    title: str
    description: Optional[str] = ""
    priority: Literal["high", "medium", "low"] = "medium"
    category: Optional[str] = "General"

    @field_validator("priority", mode="before")
    @classmethod
    def normalize_priority(cls, value):
        if isinstance(value, str) and value.strip().lower() in ("high", "medium", "low"):
            return value.strip().lower()
        return "medium"


def _none_to_empty(value, empty):
    return empty if value is None else value


class ImportantDate(BaseModel):
    date: str = ""
    event: str = Field("", validation_alias=AliasChoices("event", "description", "title"))

    @field_validator("date", "event", mode="before")
    @classmethod
    def none_to_blank(cls, value):
        return _none_to_empty(value, "")


class WeeklyMailingSummary(BaseModel):
    main_topics: List[str] = Field(default_factory=list, validation_alias=AliasChoices("mainTopics", "main_topics"), serialization_alias="mainTopics")
    action_items: List[str] = Field(default_factory=list, validation_alias=AliasChoices("actionItems", "action_items"), serialization_alias="actionItems")
    upcoming_events: List[str] = Field(default_factory=list, validation_alias=AliasChoices("upcomingEvents", "upcoming_events"), serialization_alias="upcomingEvents")

    @field_validator("main_topics", "action_items", "upcoming_events", mode="before")
    @classmethod
    def none_to_list(cls, value):
        return _none_to_empty(value, [])


class WeeklyOverviewSchema(BaseModel):
    """Schema for the weekly overview block"""
    summary: str = ""
    key_highlights: List[str] = Field(default_factory=list, validation_alias=AliasChoices("keyHighlights", "key_highlights"), serialization_alias="keyHighlights")
    important_dates: List[ImportantDate] = Field(default_factory=list, validation_alias=AliasChoices("importantDates", "important_dates"), serialization_alias="importantDates")
    weekly_mailing_summary: WeeklyMailingSummary = Field(default_factory=WeeklyMailingSummary, validation_alias=AliasChoices("weeklyMailingSummary", "weekly_mailing_summary"), serialization_alias="weeklyMailingSummary")

    # Models often send null for sections they have nothing to say about
    @field_validator("summary", mode="before")
    @classmethod
    def none_to_blank(cls, value):
        return _none_to_empty(value, "")

    @field_validator("key_highlights", "important_dates", mode="before")
    @classmethod
    def none_to_list(cls, value):
        return _none_to_empty(value, [])

    @field_validator("weekly_mailing_summary", mode="before")
    @classmethod
    def none_to_dict(cls, value):
        return _none_to_empty(value, {})


class KnowledgeSheetSuggestions(BaseModel):
    additions: List[str] = Field(default_factory=list)
    removals: List[str] = Field(default_factory=list)

    @field_validator("additions", "removals", mode="before")
    @classmethod
    def none_to_list(cls, value):
        return _none_to_empty(value, [])


class GeneratedArtifact(BaseModel):
    """Reminders + overview + suggestions for one (year group, week) pair"""
    daily_reminders: List[ReminderItem] = Field(validation_alias=AliasChoices("dailyReminders", "daily_reminders"), serialization_alias="dailyReminders")
    weekly_overview: WeeklyOverviewSchema = Field(validation_alias=AliasChoices("weeklyOverview", "weekly_overview"), serialization_alias="weeklyOverview")
    knowledge_sheet_suggestions: KnowledgeSheetSuggestions = Field(
        validation_alias=AliasChoices("knowledgeSheetSuggestions", "factSheetSuggestions", "knowledge_sheet_suggestions"),
        serialization_alias="knowledgeSheetSuggestions",
    )
    updated_knowledge_sheet: str = Field("", validation_alias=AliasChoices("updatedKnowledgeSheet", "updatedFactSheet", "updated_knowledge_sheet"), serialization_alias="updatedKnowledgeSheet")
    # Name of the provider that answered; not persisted
    provider: Optional[str] = Field(None, exclude=True)


# -------------------------------------------------------------------
# Generation input (ephemeral)
# -------------------------------------------------------------------

class MailingAttachment(BaseModel):
    """A weekly mailing handed to the generator"""
    filename: str
    content_base64: str
    document_id: Optional[str] = None
    extracted_text: Optional[str] = None


class GenerationInput(BaseModel):
    """Everything a provider needs to generate one artifact"""
    year_group_name: str
    week_start_date: date
    prompt_template: str = ""
    documents: List[MailingAttachment] = Field(default_factory=list)
    timetable_json: Optional[str] = None
    knowledge_sheet_content: Optional[str] = None
    # Called with (attachment, text) after a lazy extraction so callers can cache it
    on_text_extracted: Optional[Callable[[MailingAttachment, str], None]] = Field(None, exclude=True)


class GenerationResponse(BaseModel):
    """Response returned to whoever triggered generation for a year group"""
    success: bool
    artifact: Optional[GeneratedArtifact] = None
    error: Optional[str] = None
    year_group_name: Optional[str] = None
    week_start_date: Optional[date] = None
    knowledge_sheet_updated: bool = False


class ReminderResponse(BaseModel):
    """Schema for a stored reminder"""
    id: str
    reminder_date: date
    title: str
    description: Optional[str] = None
    priority: str
    category: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

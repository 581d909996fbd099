import logging
from datetime import date, timedelta
from typing import List, Optional

from weekly_reminders.config import Settings
from weekly_reminders.pdf_extract import extract_text_from_base64
from weekly_reminders.prompts import OUTPUT_SCHEMA
from weekly_reminders.providers import BaseProvider, get_providers
from weekly_reminders.schemas import GeneratedArtifact, GenerationInput, MailingAttachment
from weekly_reminders.validator import parse_and_validate_response

logger = logging.getLogger(__name__)

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]
MOCK_CATEGORIES = ["Homework", "Events", "Uniform", "General", "Clubs"]
MOCK_PRIORITIES = ["high", "medium", "low"]


class GenerationOrchestrator:
    """
    Produce a validated artifact for one (year group, week) pair.

    Providers are tried once each, in priority order, skipping any without
    credentials. A provider error and an unusable answer are handled the same
    way: log and move on. The deterministic mock closes the chain, so
    `generate` always returns a well-formed artifact.
    """

    def __init__(self, providers: Optional[List[BaseProvider]] = None, config: Settings = None):
        self.providers = providers if providers is not None else get_providers(config)

    def generate(self, generation_input: GenerationInput) -> GeneratedArtifact:
        for provider in self.providers:
            if not provider.is_configured():
                logger.debug("Skipping %s: not configured", provider.name)
                continue

            try:
                logger.info("Trying %s for %s, week of %s", provider.name,
                            generation_input.year_group_name, generation_input.week_start_date)
                content = self._build_content(provider, generation_input)
                raw = provider.generate(content)
                artifact = parse_and_validate_response(raw, generation_input.knowledge_sheet_content)
            except Exception as e:
                logger.warning("%s failed: %s: %s", provider.name, type(e).__name__, e)
                continue

            logger.info("%s succeeded with %d reminders", provider.name, len(artifact.daily_reminders))
            artifact.provider = provider.name
            return artifact

        logger.info("All providers failed or unconfigured, using mock response")
        return generate_mock_artifact(
            generation_input.week_start_date,
            generation_input.year_group_name,
            generation_input.knowledge_sheet_content
        )

    def _build_content(self, provider: BaseProvider, generation_input: GenerationInput):
        if provider.accepts_documents:
            prompt = build_prompt(generation_input, documents_attached=True)
            blocks = [{"type": "text", "text": prompt}]
            for document in generation_input.documents:
                blocks.append({
                    "type": "file",
                    "source_type": "base64",
                    "mime_type": "application/pdf",
                    "data": document.content_base64,
                    "filename": document.filename
                })
            return blocks

        for document in generation_input.documents:
            ensure_extracted_text(document, generation_input)
        return build_prompt(generation_input, documents_attached=False)


def ensure_extracted_text(document: MailingAttachment, generation_input: GenerationInput) -> str:
    """Extract a mailing's text once and hand it to the cache callback"""
    if document.extracted_text is None:
        document.extracted_text = extract_text_from_base64(document.content_base64)
        if generation_input.on_text_extracted:
            generation_input.on_text_extracted(document, document.extracted_text)
    return document.extracted_text


def build_prompt(generation_input: GenerationInput, documents_attached: bool) -> str:
    """Shared prompt for every provider; only the mailing section differs"""
    name = generation_input.year_group_name
    week = generation_input.week_start_date.isoformat()
    documents = generation_input.documents

    if documents_attached and documents:
        mailing_section = (
            f"I have attached {len(documents)} PDF document(s) from the weekly mailing. "
            "Please analyze them carefully."
        )
    elif documents:
        inlined = "\n\n".join(
            f"=== {doc.filename} ===\n{doc.extracted_text or '(no extractable text)'}"
            for doc in documents
        )
        mailing_section = f"Weekly Mailing Content:\n{inlined}"
    else:
        mailing_section = "Weekly Mailing Content:\nNo mailings available for this week"

    return f"""{generation_input.prompt_template}

---

Week Starting: {week}
Year Group: {name}

{mailing_section}

Year Group Timetable (JSON):
{generation_input.timetable_json or 'No timetable data available'}

Current Knowledge Sheet Content:
{generation_input.knowledge_sheet_content or 'No knowledge sheet content available'}

---

Please analyze the weekly mailing and other information to generate a JSON response with daily reminders, weekly overview, knowledge sheet suggestions, AND an updated knowledge sheet for {name} for the week of {week}.

Remember to:
1. Create daily reminders for each school day (Monday-Friday)
2. Consider the timetable when suggesting what to bring/prepare
3. Extract key dates and events from the mailing
4. Suggest updates to the knowledge sheet based on new information

IMPORTANT - Knowledge Sheet Update Rules:
5. Generate an "updatedKnowledgeSheet" field containing the cleaned and updated knowledge sheet content
6. REMOVE any information that has expired (past dates, completed events)
7. REMOVE any conflicting information - if there are conflicts, always use the LATEST information
8. ADD any new permanent or ongoing information from the weekly mailing
9. Keep the knowledge sheet concise and well-organized

The JSON response MUST follow this structure:
{OUTPUT_SCHEMA}

Return ONLY valid JSON."""


def generate_mock_artifact(week_start_date: date, year_group_name: str, knowledge_sheet_content: Optional[str] = None) -> GeneratedArtifact:
    """
    Placeholder artifact: one reminder per weekday and a template overview.

    Fully deterministic for a given week and group.
    """
    reminders = []
    for index, day in enumerate(WEEKDAYS):
        reminders.append({
            "date": week_start_date + timedelta(days=index),
            "title": f"{day} reminder for {year_group_name}",
            "description": f"Remember to prepare for {day}'s activities. Check your bag the night before.",
            "priority": MOCK_PRIORITIES[index % len(MOCK_PRIORITIES)],
            "category": MOCK_CATEGORIES[index]
        })

    friday = week_start_date + timedelta(days=4)
    artifact = GeneratedArtifact.model_validate({
        "dailyReminders": reminders,
        "weeklyOverview": {
            "summary": (
                f"This week {year_group_name} has several activities planned. "
                "Make sure to check the daily reminders for specific preparation needs."
            ),
            "keyHighlights": [
                "PE kit needed on Tuesday and Thursday",
                "Library books due Wednesday",
                "Spelling test on Friday"
            ],
            "importantDates": [
                {"date": week_start_date.isoformat(), "event": "Start of new topic in Science"},
                {"date": friday.isoformat(), "event": "Assembly presentation"}
            ],
            "weeklyMailingSummary": {
                "mainTopics": ["Upcoming school trip", "New reading challenge", "Parent consultation dates"],
                "actionItems": ["Return permission slips", "Update contact details", "Book consultation slots"],
                "upcomingEvents": ["School trip in 2 weeks", "Sports day planning", "End of term celebration"]
            }
        },
        "knowledgeSheetSuggestions": {
            "additions": ["New PE schedule starts next month", "Updated lunch menu options"],
            "removals": ["Old event dates", "Outdated uniform supplier info"]
        },
        "updatedKnowledgeSheet": knowledge_sheet_content or f"""{year_group_name} Knowledge Sheet

Key Information:
- PE days: Tuesday and Thursday
- Library day: Wednesday
- Spelling test: Every Friday

Contact Information:
- Class teacher available via school office
- School website for latest updates"""
    })
    artifact.provider = "mock"
    return artifact

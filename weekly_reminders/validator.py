import json
import re
from typing import Optional

from pydantic import ValidationError

from weekly_reminders.exceptions import ResponseValidationError
from weekly_reminders.schemas import GeneratedArtifact

_FENCE = re.compile(r"```(?:json)?\s*\n?", re.IGNORECASE)

SUGGESTION_KEYS = ("knowledgeSheetSuggestions", "factSheetSuggestions")
UPDATED_SHEET_KEYS = ("updatedKnowledgeSheet", "updatedFactSheet")


def strip_code_fences(text: str) -> str:
    """Remove ```json ... ``` markup around a model answer"""
    return _FENCE.sub("", text).strip()


def parse_and_validate_response(text: str, knowledge_sheet_content: Optional[str]) -> GeneratedArtifact:
    """
    Turn raw provider text into an artifact, or raise ResponseValidationError.

    Requires a dailyReminders list, a weeklyOverview object and a suggestions
    object. A missing updated knowledge sheet defaults to the input sheet.
    """
    if not text or not text.strip():
        raise ResponseValidationError("Empty response")

    try:
        parsed = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as e:
        raise ResponseValidationError(f"Response is not valid JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise ResponseValidationError(f"Expected a JSON object, got {type(parsed).__name__}")
    if not isinstance(parsed.get("dailyReminders"), list):
        raise ResponseValidationError("Invalid response: missing dailyReminders array")
    if not isinstance(parsed.get("weeklyOverview"), dict):
        raise ResponseValidationError("Invalid response: missing weeklyOverview")
    if not any(isinstance(parsed.get(key), dict) for key in SUGGESTION_KEYS):
        raise ResponseValidationError("Invalid response: missing knowledgeSheetSuggestions")

    if not any(parsed.get(key) for key in UPDATED_SHEET_KEYS):
        for key in UPDATED_SHEET_KEYS:
            parsed.pop(key, None)
        parsed["updatedKnowledgeSheet"] = knowledge_sheet_content or ""

    try:
        return GeneratedArtifact.model_validate(parsed)
    except ValidationError as e:
        raise ResponseValidationError(f"Response does not match the artifact schema: {e}") from e

from __future__ import annotations

from typing import Any

from wallet_browser.core.exceptions import ValidationError, ValidationIssue

_REQUIRED_TEXT = (
    ("name", "RECORD_NAME", "Name is required"),
    ("category", "RECORD_CATEGORY", "Category is required"),
    ("custodyModel", "RECORD_CUSTODY", "Custody model is required"),
    ("version", "RECORD_VERSION", "Version is required"),
    ("lastTested", "RECORD_LAST_TESTED", "Last tested date is required"),
    ("website", "RECORD_WEBSITE", "Website is required"),
)


def validate_record_dict(obj: Any) -> None:
    """
    Validate a raw record dict BEFORE building a Record from it.
    Reports every missing required field at once.
    """
    if not isinstance(obj, dict):
        raise ValidationError([ValidationIssue("RECORD_TYPE", "Record must be a JSON object.")])

    issues: list[ValidationIssue] = []

    for key, code, message in _REQUIRED_TEXT:
        value = obj.get(key)
        if value is None or (isinstance(value, str) and not value.strip()):
            issues.append(ValidationIssue(code, message))

    platforms = obj.get("platforms")
    if not isinstance(platforms, list) or not platforms:
        issues.append(ValidationIssue("RECORD_PLATFORMS", "At least one platform is required"))

    for section in ("features", "security", "performance", "userExperience", "pricing", "downloadLinks"):
        value = obj.get(section)
        if value is not None and not isinstance(value, dict):
            issues.append(ValidationIssue("RECORD_SECTION", f"{section} must be an object."))

    if issues:
        raise ValidationError(issues)

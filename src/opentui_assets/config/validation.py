"""Configuration validation for opentui-assets.

Warns on unknown keys and reports values of the wrong type.
"""

from __future__ import annotations

from dataclasses import dataclass
from difflib import get_close_matches
from enum import Enum
from typing import Any, Dict, List, Optional, Set, Tuple

from opentui_assets.core.logging import get_logger

LOGGER = get_logger(__name__)


class ValidationSeverity(Enum):
    """Severity level for validation issues."""

    ERROR = "error"  # Config cannot be used
    WARNING = "warning"  # Likely mistake but config usable


@dataclass
class ConfigValidationIssue:
    """A validation issue for configuration with severity."""

    message: str
    source: str
    severity: ValidationSeverity
    key: Optional[str] = None
    suggestion: Optional[str] = None


# Valid keys and the types their values may take
VALID_KEYS: Dict[str, Tuple[type, ...]] = {
    "home": (str,),
    "release_url": (str,),
    "release_tag": (str,),
    "include_header": (bool,),
    "timeout": (int, float, type(None)),
}


def validate_config(data: Dict[str, Any], source: str) -> List[ConfigValidationIssue]:
    """Validate a configuration dictionary.

    Unknown keys are warnings; values of the wrong type are errors.
    Does not raise - returns issues instead.

    Args:
        data: Config dictionary to validate.
        source: Source file path for messages.

    Returns:
        List of validation issues.
    """
    issues: List[ConfigValidationIssue] = []

    for key, value in data.items():
        expected = VALID_KEYS.get(key)
        if expected is None:
            issue = ConfigValidationIssue(
                message=f"Unknown key '{key}'",
                source=source,
                severity=ValidationSeverity.WARNING,
                key=key,
                suggestion=_suggest_key(key, set(VALID_KEYS)),
            )
            issues.append(issue)
            _log_issue(issue)
            continue

        # bool is an int subclass; only accept it where bool is expected
        if isinstance(value, bool) and bool not in expected:
            valid = False
        else:
            valid = isinstance(value, expected)

        if not valid:
            names = ", ".join(t.__name__ for t in expected if t is not type(None))
            issue = ConfigValidationIssue(
                message=f"'{key}' must be {names}, got {type(value).__name__}",
                source=source,
                severity=ValidationSeverity.ERROR,
                key=key,
            )
            issues.append(issue)
            _log_issue(issue)

    return issues


def _suggest_key(invalid_key: str, valid_keys: Set[str]) -> Optional[str]:
    """Suggest a valid key for a potential typo."""
    matches = get_close_matches(invalid_key, sorted(valid_keys), n=1, cutoff=0.6)
    return matches[0] if matches else None


def _log_issue(issue: ConfigValidationIssue) -> None:
    msg = f"{issue.message} in {issue.source}"
    if issue.suggestion:
        msg += f" (did you mean '{issue.suggestion}'?)"
    if issue.severity == ValidationSeverity.ERROR:
        LOGGER.error(msg)
    else:
        LOGGER.warning(msg)

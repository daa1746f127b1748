"""
Input Validation & Sanitization
Turns admin-supplied text into a safe URL path segment
"""
from typing import Optional, Tuple, Dict, Any
import re
import unicodedata

from config.api import DEFAULT_API_PREFIX, RESERVED_PREFIXES, build_api_root


class InputValidator:
    """Validate and sanitize prefix input"""

    # One algorithm for every write path: preview, save, activation seed
    WHITESPACE_RUN = re.compile(r"\s+")
    DISALLOWED_CHARS = re.compile(r"[^a-zA-Z0-9_-]")

    MAX_PREFIX_LENGTH = 100

    @staticmethod
    def normalize_prefix(raw: Optional[str]) -> str:
        """
        Normalize arbitrary text into a prefix token.

        Whitespace runs become hyphens, diacritics are stripped
        (NFD decomposition, combining marks dropped), anything outside
        [a-zA-Z0-9_-] is removed and the result is lowercased.

        Never raises; unusable input degrades to "".
        """
        if not isinstance(raw, str):
            return ""

        normalized = InputValidator.WHITESPACE_RUN.sub("-", raw)
        normalized = unicodedata.normalize("NFD", normalized)
        normalized = "".join(ch for ch in normalized if not unicodedata.combining(ch))
        normalized = InputValidator.DISALLOWED_CHARS.sub("", normalized)
        return normalized.lower()

    @staticmethod
    def validate_prefix(raw: Optional[str]) -> Tuple[bool, Optional[str]]:
        """
        Validate submitted prefix text.

        Returns:
            (is_valid, error_message)
        """
        if raw is None or not str(raw).strip():
            return False, "Prefix cannot be empty"

        normalized = InputValidator.normalize_prefix(raw)
        if not normalized:
            return False, "Prefix cannot be empty after removing unsupported characters"

        if len(normalized) > InputValidator.MAX_PREFIX_LENGTH:
            return False, f"Prefix too long (max {InputValidator.MAX_PREFIX_LENGTH} characters)"

        if normalized in RESERVED_PREFIXES:
            return False, f"Prefix '{normalized}' is reserved"

        return True, None

    @staticmethod
    def preview_prefix(raw: Optional[str], home_url: str) -> Dict[str, Any]:
        """
        Describe what a submitted value would become.

        Mirrors the live preview next to the settings field: a non-empty value
        shows the resulting API root, an empty one shows the default reminder.
        """
        # Same empty rule as saving: blank input never becomes "-"
        blank = not isinstance(raw, str) or not raw.strip()
        normalized = "" if blank else InputValidator.normalize_prefix(raw)

        if not normalized:
            return {
                "prefix": "",
                "is_empty": True,
                "can_submit": False,
                "preview": DEFAULT_API_PREFIX,
                "message": f"The prefix cannot be empty! Just a reminder, the default is {DEFAULT_API_PREFIX}",
            }

        api_root = build_api_root(normalized, home_url).lower()
        return {
            "prefix": normalized,
            "is_empty": False,
            "can_submit": InputValidator.validate_prefix(normalized)[0],
            "preview": api_root,
            "message": f"The API root would be {api_root}",
        }

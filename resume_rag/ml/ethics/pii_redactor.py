"""
PII redaction and role-based result shaping.

Replaces contact details and other personally identifying substrings
with fixed placeholder tokens, and strips personal-info fields from
resume views returned to non-privileged callers.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from resume_rag.data.models import PersonalInfo, Resume
from resume_rag.utils.constants import UserRole
from resume_rag.utils.logger import get_logger

logger = get_logger(__name__)

# Words that appear inside placeholder tokens; never treated as name parts
_PLACEHOLDER_WORDS = frozenset({"email", "phone", "address", "ssn", "dob", "name", "profile", "redacted"})

# PersonalInfo fields whose literal values are redacted, with their placeholder category
_LITERAL_FIELDS = (
    ("email", "email"),
    ("phone", "phone"),
    ("address", "address"),
    ("date_of_birth", "dob"),
    ("linkedin", "profile"),
    ("github", "profile"),
    ("portfolio", "profile"),
)

# Values shorter than this are too ambiguous to replace literally
MIN_LITERAL_LENGTH = 3
MIN_PHONE_DIGITS = 7

_PHONE_SEPARATORS = r"[\s().-]*"


@dataclass
class RedactionResult:
    """Result of PII redaction over a piece of text."""

    original_text: str
    redacted_text: str
    redactions_made: int
    redacted_categories: dict[str, int] = field(default_factory=dict)


class PIIRedactor:
    """
    Redacts PII from free text and shapes resume views by caller role.

    Placeholder tokens contain no digits, '@' or word characters adjacent
    to digits, so redacting already-redacted text is a no-op.
    """

    PLACEHOLDERS: dict[str, str] = {
        "email": "[EMAIL REDACTED]",
        "phone": "[PHONE REDACTED]",
        "address": "[ADDRESS REDACTED]",
        "ssn": "[SSN REDACTED]",
        "dob": "[DOB REDACTED]",
        "name": "[NAME REDACTED]",
        "profile": "[PROFILE REDACTED]",
    }

    def __init__(self):
        """Initialize the redactor."""
        self._setup_redaction_rules()

    def _setup_redaction_rules(self) -> None:
        """Compile the text redaction patterns, applied in insertion order."""
        self.redaction_patterns: dict[str, re.Pattern] = {
            "email": re.compile(r"[\w.-]+@[\w.-]+\.\w+"),
            "phone": re.compile(r"(\+\d{1,3}[\s-]?)?\(?\d{3}\)?[\s.-]?\d{3}[\s.-]?\d{4}"),
            "address": re.compile(
                r"\d+\s+[\w\s]+(?:Street|St|Avenue|Ave|Road|Rd|Boulevard|Blvd|Drive|Dr"
                r"|Court|Ct|Lane|Ln|Way|Place|Pl)[\w\s,]*\d{5}",
                re.IGNORECASE,
            ),
            "ssn": re.compile(r"\b\d{3}-?\d{2}-?\d{4}\b"),
            "dob": re.compile(
                r"\b(0?[1-9]|1[0-2])[/-](0?[1-9]|[12]\d|3[01])[/-](19|20)\d{2}\b"
            ),
        }

    @staticmethod
    def is_privileged(role: Union[UserRole, str]) -> bool:
        """Whether the role may see personal information."""
        try:
            return UserRole(role).is_privileged
        except ValueError:
            return False

    @staticmethod
    def _phone_pattern(phone: str) -> Optional[re.Pattern]:
        # Digit groups in order, any separators between them
        groups = re.findall(r"\d+", phone)
        if sum(len(g) for g in groups) < MIN_PHONE_DIGITS:
            return None
        body = _PHONE_SEPARATORS.join(groups)
        prefix = r"\+?\s*" if phone.lstrip().startswith("+") else ""
        return re.compile(rf"(?<![\d+]){prefix}{body}(?!\d)")

    def _literal_patterns(
        self, personal_info: Optional[PersonalInfo]
    ) -> list[tuple[str, re.Pattern]]:
        """Case-insensitive patterns for the known personal-info values."""
        if personal_info is None:
            return []

        patterns = []
        for field_name, category in _LITERAL_FIELDS:
            value = (getattr(personal_info, field_name) or "").strip()
            if len(value) < MIN_LITERAL_LENGTH:
                continue
            if field_name == "phone":
                pattern = self._phone_pattern(value)
            else:
                literal = r"\s+".join(re.escape(part) for part in value.split())
                pattern = re.compile(literal, re.IGNORECASE)
            if pattern is not None:
                patterns.append((category, pattern))
        return patterns

    def _name_patterns(self, personal_info: Optional[PersonalInfo]) -> list[re.Pattern]:
        if personal_info is None or not personal_info.name:
            return []

        parts = [
            p for p in personal_info.name_parts
            if len(p) > 1 and p.lower() not in _PLACEHOLDER_WORDS
        ]
        patterns = []
        if len(parts) > 1:
            full_name = r"\s+".join(re.escape(p) for p in parts)
            patterns.append(re.compile(rf"\b{full_name}\b", re.IGNORECASE))
        patterns.extend(re.compile(rf"\b{re.escape(p)}\b", re.IGNORECASE) for p in parts)
        return patterns

    def redact_with_details(
        self,
        text: str,
        personal_info: Optional[PersonalInfo] = None,
    ) -> RedactionResult:
        """
        Redact PII from text and report what was replaced.

        Args:
            text: The text to redact.
            personal_info: Optional personal fields. Their contact values
                are replaced wherever they occur, whatever their format,
                and the name parts are redacted as whole words.

        Returns:
            RedactionResult with redacted text and per-category counts.
        """
        if not text:
            return RedactionResult(original_text="", redacted_text="", redactions_made=0)

        redacted_text = text
        counts: dict[str, int] = {}

        # Known values first, so the shape patterns cannot split them
        rules = self._literal_patterns(personal_info) + list(self.redaction_patterns.items())
        for category, pattern in rules:
            redacted_text, n = pattern.subn(self.PLACEHOLDERS[category], redacted_text)
            if n:
                counts[category] = counts.get(category, 0) + n

        for pattern in self._name_patterns(personal_info):
            redacted_text, n = pattern.subn(self.PLACEHOLDERS["name"], redacted_text)
            if n:
                counts["name"] = counts.get("name", 0) + n

        return RedactionResult(
            original_text=text,
            redacted_text=redacted_text,
            redactions_made=sum(counts.values()),
            redacted_categories=counts,
        )

    def redact(self, text: str, personal_info: Optional[PersonalInfo] = None) -> str:
        """Return a redacted copy of ``text``."""
        return self.redact_with_details(text, personal_info).redacted_text

    def strip(
        self,
        document: Union[Resume, dict[str, Any]],
        role: Union[UserRole, str],
    ) -> dict[str, Any]:
        """
        Build the role-appropriate view of a resume.

        Non-privileged roles lose ``personal_info`` and see the redacted
        text in place of ``text``. The redundant ``redacted_text`` field and
        the raw embedding are dropped for every role.

        Args:
            document: Resume model or an already-dumped resume dict.
            role: Caller role.

        Returns:
            A JSON-ready dict view of the resume.
        """
        if isinstance(document, Resume):
            view = document.model_dump(mode="json", exclude={"embedding"})
        else:
            view = {k: v for k, v in document.items() if k != "embedding"}

        if not self.is_privileged(role):
            personal = view.pop("personal_info", None)
            redacted = view.get("redacted_text")
            if not redacted and view.get("text"):
                # Ingestion left no redacted variant; redact on the fly
                info = PersonalInfo.model_validate(personal) if isinstance(personal, dict) else None
                redacted = self.redact(view["text"], info)
            view["text"] = redacted or ""

        view.pop("redacted_text", None)
        return view


# Singleton instance
_redactor: Optional[PIIRedactor] = None


def get_pii_redactor() -> PIIRedactor:
    """Get the PII redactor singleton instance."""
    global _redactor
    if _redactor is None:
        _redactor = PIIRedactor()
    return _redactor

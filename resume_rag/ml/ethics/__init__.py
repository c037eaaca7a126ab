"""
Privacy controls: PII redaction and role-based document views.

Components:
- PIIRedactor: Replaces contact details and names with placeholders and
  strips personal fields for non-privileged roles
"""

from .pii_redactor import PIIRedactor, RedactionResult, get_pii_redactor

__all__ = [
    "PIIRedactor",
    "RedactionResult",
    "get_pii_redactor",
]

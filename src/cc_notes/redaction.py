"""Redaction of secrets from conversation text."""

import re
from collections.abc import Iterable

PLACEHOLDER = "[REDACTED]"

# Ordered: whole PEM blocks go before bare headers, specific token shapes before
# the generic key/value and base64 rules.
DEFAULT_RULES = [
    r"-----BEGIN ([A-Z0-9 ]+)-----.*?-----END \1-----",
    r"-----BEGIN [A-Z0-9 ]+-----",
    r"\bbearer\s+[A-Za-z0-9._~+/-]+=*",
    r"\bsk-[A-Za-z0-9_-]{20,}",
    r"\bgh[pousr]_[A-Za-z0-9]{20,}",
    r"\bAKIA[0-9A-Z]{16}\b",
    r"(?:password|passwd|token|secret|api[_-]?key|key)[\w.-]*[\"']?\s*[:=]\s*[\"']?[^\s\"',;]+",
    r"\b(?:password|passwd|token|secret|api[_-]?key|key)\b[:\s]+[^\s\[]\S*",
    r"[A-Za-z0-9+/]{40,}={0,2}",
]


def _compile(pattern: str) -> re.Pattern[str]:
    # The placeholder alternative comes first so an existing placeholder is
    # matched whole and left as it is.
    return re.compile(rf"{re.escape(PLACEHOLDER)}|{pattern}", re.IGNORECASE | re.DOTALL)


class Sanitizer:
    """Replaces sensitive substrings with a fixed placeholder.

    Extra patterns are treated as literal, case-insensitive substrings.
    """

    def __init__(self, extra_patterns: Iterable[str] = ()):
        self.rules = [_compile(p) for p in DEFAULT_RULES]
        self.rules.extend(_compile(re.escape(p)) for p in extra_patterns if p)

    def sanitize(self, text: str | None) -> str:
        if not text:
            return ""
        for rule in self.rules:
            text = rule.sub(PLACEHOLDER, text)
        return text


_default = Sanitizer()


def sanitize(text: str | None) -> str:
    """Sanitize text with the built-in rule set."""
    return _default.sanitize(text)

import re

_HTML_STRUCTURAL = re.compile(r"[<>]")
# Unicode whitespace plus the byte order mark, which str.strip() keeps.
_EDGE_WHITESPACE = re.compile(r"\A[\s\ufeff]+|[\s\ufeff]+\Z")


def trim_text(text: str) -> str:
    """Trim surrounding whitespace, treating U+FEFF as whitespace."""
    return _EDGE_WHITESPACE.sub("", text)


def sanitize_string(text: str) -> str:
    """Neutralize user text for embedding in the HTML email body.

    Drops ``<`` and ``>`` and trims surrounding whitespace. Stripping happens
    before trimming so the result is stable under repeated application.
    """
    return trim_text(_HTML_STRUCTURAL.sub("", text))


def redact_pii(message: str) -> str:
    """Redact submitter details and provider credentials from log messages."""
    if not isinstance(message, str):
        return str(message)

    # Emails: jane@example.com -> j***@example.com
    message = re.sub(
        r"[\w.+-]+@[\w.-]+\.\w+",
        lambda m: m.group()[0] + "***@" + m.group().split("@")[1],
        message,
    )

    # IPv4: 203.0.113.10 -> 203.0.113.***
    message = re.sub(
        r"\b(\d{1,3}\.\d{1,3}\.\d{1,3}\.)\d{1,3}\b", r"\1***", message
    )

    # Resend API keys: re_xxx -> [API_KEY_REDACTED]
    message = re.sub(r"\bre_[A-Za-z0-9_]{8,}\b", "[API_KEY_REDACTED]", message)

    # Bearer credentials echoed in provider errors
    message = re.sub(
        r"(Bearer\s+)[A-Za-z0-9._~+/=-]+", r"\1[REDACTED]", message, flags=re.IGNORECASE
    )

    return message

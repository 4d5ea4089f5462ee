import re


def redact_secrets(text: str) -> str:
    """Redact common secret patterns from log lines and error strings."""
    if not isinstance(text, str):
        return text

    redacted = text

    # Query params like apiKey=, access_token=, token=, secret=, sign=
    redacted = re.sub(r"(?i)(api[_-]?key|access[_-]?token|token|secret|sign)=([^&\s]+)", r"\1=***REDACTED***", redacted)

    # Authorization: Bearer <token>
    redacted = re.sub(r"(?i)Authorization:\s*Bearer\s+[A-Za-z0-9._\-]+", "Authorization: Bearer ***REDACTED***", redacted)

    # Session cookies that upstream error pages sometimes echo back
    redacted = re.sub(r"(?i)(SESSDATA|z_c0|SUB)=([^;\s]+)", r"\1=***REDACTED***", redacted)

    return redacted

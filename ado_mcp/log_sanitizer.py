"""
Credential redaction for log output.

PATs and access tokens reach this process through the environment and travel
on every raw HTTP call. Error strings from the SDK and httpx can echo them
back (request headers, URLs with userinfo). Everything written to the log
goes through ``RedactingFilter``; error summaries use ``safe_log_error``.
"""

import logging
import re

REDACTED = "***REDACTED***"

# (name, pattern, replacement); group 1 is the part kept
REDACTION_RULES = (
    ("auth-scheme", re.compile(r'\b((?:bearer|basic)\s+)[A-Za-z0-9\-._~+/]+=*', re.IGNORECASE), rf'\1{REDACTED}'),
    ("url-userinfo", re.compile(r'(https?://)[^/\s:@]*:[^/\s@]+@', re.IGNORECASE), rf'\1{REDACTED}@'),
    ("client-secret", re.compile(r'(client_secret["\']?\s*[:=]\s*["\']?)[^"\'\s,}]+', re.IGNORECASE), rf'\1{REDACTED}'),
    ("token", re.compile(r'(token["\']?\s*[:=]\s*["\']?)[^"\'\s,}]+', re.IGNORECASE), rf'\1{REDACTED}'),
    ("pat", re.compile(r'(\bpat["\']?\s*[:=]\s*["\']?)[^"\'\s,}]+', re.IGNORECASE), rf'\1{REDACTED}'),
    (
        "authorization",
        re.compile(r'(authorization["\']?\s*[:=]\s*["\']?)(?!(?:bearer|basic)\s)[^"\'\s,}]+', re.IGNORECASE),
        rf'\1{REDACTED}'
    ),
)


def sanitize_log_message(message: str) -> str:
    """
    Redact credentials from a log message.

    Args:
        message: Text that may contain tokens, secrets or auth headers

    Returns:
        The text with every credential replaced by ``***REDACTED***``
    """
    if not message:
        return message

    for _, pattern, replacement in REDACTION_RULES:
        message = pattern.sub(replacement, message)
    return message


def safe_log_error(error: Exception, context: str = "") -> str:
    """
    Create a safe error message for logging.

    Returns:
        "<context>: <ErrorType>: <sanitized message>"
    """
    summary = f"{type(error).__name__}: {sanitize_log_message(str(error))}"
    return f"{context}: {summary}" if context else summary


class RedactingFilter(logging.Filter):
    """Logging filter that redacts credentials from every record it passes."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        sanitized = sanitize_log_message(message)
        if sanitized != message:
            record.msg = sanitized
            record.args = None
        return True

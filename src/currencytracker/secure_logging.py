"""
Secure logging utilities for currency-tracker.

Provider API credentials travel in headers (CoinMarketCap) and in the query
string (EOD Historical Data), so exception messages from requests can contain
them. Everything that reaches a log line goes through these helpers first.
"""

import re
from typing import Any, Dict, Optional

# Patterns for sensitive data that should be redacted
SENSITIVE_PATTERNS = [
    (r'(private_key["\']?\s*[=:]\s*["\']?)([^"\'&\s]+)', r"\1[REDACTED]"),
    (r'(token["\']?\s*[=:]\s*["\']?)([^"\'&\s]+)', r"\1[REDACTED]"),
    (r'(api_key["\']?\s*[=:]\s*["\']?)([^"\'&\s]+)', r"\1[REDACTED]"),
    (r'(X-CMC_PRO_API_KEY["\']?\s*[=:]\s*["\']?)([^"\'&\s]+)', r"\1[REDACTED]"),
    (r"(AWS_SECRET_ACCESS_KEY[=:]\s*)([^\s]+)", r"\1[REDACTED]"),
]

# Email patterns to mask (show first few chars + domain)
EMAIL_PATTERN = re.compile(r"([a-zA-Z0-9._%+-]+)@([a-zA-Z0-9.-]+\.[a-zA-Z]{2,})")


def mask_email(email: str) -> str:
    """
    Mask an email address, showing only first 2 chars and domain.

    Args:
        email: Email address to mask

    Returns:
        Masked email like "sh***@example.com"
    """
    match = EMAIL_PATTERN.match(email)
    if match:
        local, domain = match.groups()
        if len(local) <= 2:
            masked_local = local[0] + "***"
        else:
            masked_local = local[:2] + "***"
        return f"{masked_local}@{domain}"
    return email


def mask_string(value: Optional[str], visible_chars: int = 4) -> str:
    """
    Mask a string, showing only first N characters.

    Returns:
        Masked string like "b54b***"
    """
    if not value or len(value) <= visible_chars:
        return "***"
    return value[:visible_chars] + "***"


def mask_service_account_email(email: str) -> str:
    """
    Mask a Google service account email.

    "sheets-writer@project-123456.iam.gserviceaccount.com" becomes
    "sheets-writer@***.iam.gserviceaccount.com".
    """
    if not email:
        return "***"

    parts = email.split("@")
    if len(parts) == 2:
        name, domain = parts
        if len(domain.split(".")) >= 3 and "gserviceaccount" in domain:
            return f"{name}@***.iam.gserviceaccount.com"

    return mask_email(email)


def redact_sensitive_data(message: str, secrets: Optional[list] = None) -> str:
    """
    Redact sensitive data patterns from a message.

    Args:
        message: Message that may contain sensitive data
        secrets: Literal secret values to strip in addition to the patterns

    Returns:
        Message with sensitive data redacted
    """
    result = message
    for secret in secrets or []:
        if secret:
            result = result.replace(secret, "[REDACTED]")
    for pattern, replacement in SENSITIVE_PATTERNS:
        result = re.sub(pattern, replacement, result, flags=re.IGNORECASE)
    return result


def safe_dict_repr(data: Dict[str, Any], sensitive_keys: Optional[set] = None) -> str:
    """
    Create a safe string representation of a dictionary,
    redacting values for sensitive keys.
    """
    if sensitive_keys is None:
        sensitive_keys = {
            "private_key",
            "private_key_id",
            "client_secret",
            "CMC_PRO_API_KEY",
            "EOD_TOKEN",
            "token",
            "api_key",
        }

    safe_data = {}
    for key, value in data.items():
        if key in sensitive_keys:
            safe_data[key] = "[REDACTED]"
        elif key == "client_email":
            safe_data[key] = mask_service_account_email(str(value)) if value else "[NOT SET]"
        elif isinstance(value, dict):
            safe_data[key] = safe_dict_repr(value, sensitive_keys)
        elif isinstance(value, str) and len(value) > 100:
            # Long strings are likely sensitive (e.g., private keys)
            safe_data[key] = f"[{len(value)} chars]"
        else:
            safe_data[key] = value

    return str(safe_data)

"""
Settings overlay loaded from a single JSON secret in AWS Secrets Manager.

In Lambda: loads API keys and any other settings from one Secrets Manager secret.
Locally: returns nothing, so settings come from the environment / .env file.
"""

import json
import os
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_SECRET_NAME = "currency-tracker/config"

# Module-level cache: None = not loaded yet, {} = loaded (possibly empty)
_secrets_cache: Optional[dict] = None


def is_placeholder(value: Optional[str]) -> bool:
    """Values copied verbatim from .env.example start with 'your_'."""
    return bool(value) and value.strip().lower().startswith("your_")


def _load_secrets() -> dict:
    """Load the JSON secret from AWS Secrets Manager.

    Reads the secret name from CURRENCY_TRACKER_SECRET_NAME
    (default: 'currency-tracker/config'). Returns {} on any failure.
    """
    secret_name = os.getenv("CURRENCY_TRACKER_SECRET_NAME", DEFAULT_SECRET_NAME)
    region = os.getenv("AWS_REGION", os.getenv("AWS_REGION_NAME", "us-east-1"))

    try:
        client = boto3.client("secretsmanager", region_name=region)
        response = client.get_secret_value(SecretId=secret_name)
        secrets = json.loads(response["SecretString"])
    except (ClientError, BotoCoreError, KeyError, json.JSONDecodeError) as e:
        logger.warning(
            "Could not load secrets from Secrets Manager (%s): %s",
            secret_name, type(e).__name__
        )
        return {}

    if not isinstance(secrets, dict):
        logger.warning("Secret %s is not a JSON object, ignoring it", secret_name)
        return {}

    logger.info("Loaded secrets from Secrets Manager: %s", secret_name)
    return secrets


def get_secrets() -> dict:
    """Get the cached secrets dict.

    In Lambda (AWS_LAMBDA_FUNCTION_NAME set): loads from Secrets Manager
    on first call, caches for container reuse. Locally: returns {}.
    """
    global _secrets_cache

    if _secrets_cache is not None:
        return _secrets_cache

    if os.getenv("AWS_LAMBDA_FUNCTION_NAME"):
        _secrets_cache = _load_secrets()
    else:
        _secrets_cache = {}

    return _secrets_cache


def clear_cache() -> None:
    """Reset the secrets cache. Useful for testing."""
    global _secrets_cache
    _secrets_cache = None

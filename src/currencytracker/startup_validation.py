"""
Startup validation for currency-tracker.

Validates credentials and configuration before the first request is made and
fails fast with clear error messages if anything is missing.
"""

import json
import os
import re
from typing import List, Tuple

import boto3
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from .config import Settings
from .errors import ConfigurationError
from .logging_config import get_logger
from .secret_store import is_placeholder
from .sheets import REQUIRED_FIELDS

logger = get_logger(__name__)

_SYMBOL_PATTERN = re.compile(r"^[A-Z0-9]{1,15}$")
_SHEET_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{20,}$")


class StartupValidator:
    """Validates application configuration and credentials on startup."""

    def __init__(self, settings: Settings, skip_connectivity: bool = False):
        """
        Args:
            settings: Loaded configuration
            skip_connectivity: If True, skip the Secrets Manager check.
        """
        self.settings = settings
        self.skip_connectivity = skip_connectivity
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def validate_all(self) -> Tuple[bool, List[str], List[str]]:
        """
        Run all validation checks.

        Returns:
            Tuple of (success, errors, warnings)
        """
        self.errors = []
        self.warnings = []

        self._validate_api_keys()
        self._validate_targets()
        self._validate_service_account()

        if not self.skip_connectivity:
            self._validate_secret_connectivity()

        return len(self.errors) == 0, self.errors, self.warnings

    def _validate_api_keys(self) -> None:
        for key_name in ("CMC_PRO_API_KEY", "EOD_TOKEN"):
            if not getattr(self.settings, key_name):
                self.errors.append(
                    f"{key_name} is not set. Set it in the environment or the .env file."
                )

    def _validate_targets(self) -> None:
        sheet_id = self.settings.SHEET_ID
        if not sheet_id:
            self.errors.append("SHEET_ID is not set. Set it to the ID of the destination spreadsheet.")
        elif is_placeholder(sheet_id) or not _SHEET_ID_PATTERN.match(sheet_id):
            self.warnings.append(f"SHEET_ID '{sheet_id}' does not look like a Google Sheets ID.")

        symbols = self.settings.crypto_symbols
        if not symbols:
            self.errors.append("No currency symbols configured. Pass --currencies or set CRYPTO_SYMBOLS.")
        for symbol in symbols:
            if not _SYMBOL_PATTERN.match(symbol):
                self.warnings.append(f"Currency symbol '{symbol}' does not look like a ticker symbol.")

        if not self.settings.ETF_TICKER:
            self.errors.append("No ETF ticker configured. Pass --etfs or set ETF_TICKER.")

    def _validate_service_account(self) -> None:
        """Check the local service account file unless a secret is used instead."""
        if self.settings.SHEETS_SECRET_NAME:
            return

        path = self.settings.GOOGLE_SERVICE_ACCOUNT_FILE
        if not path or not os.path.isfile(path):
            self.errors.append(
                f"Service account file '{path}' not found. "
                "Set GOOGLE_SERVICE_ACCOUNT_FILE or SHEETS_SECRET_NAME."
            )
            return

        try:
            with open(path, encoding="utf-8") as f:
                credentials = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.errors.append(f"Service account file '{path}' is not readable JSON: {e}")
            return

        self._check_service_account_fields(credentials, f"file '{path}'")

    def _check_service_account_fields(self, credentials, source: str) -> None:
        if not isinstance(credentials, dict):
            self.errors.append(f"Service account {source} does not contain a JSON object.")
            return

        missing_fields = [f for f in REQUIRED_FIELDS if f not in credentials]
        if missing_fields:
            self.errors.append(
                f"Service account {source} is missing required fields: {', '.join(missing_fields)}."
            )
        elif credentials.get("type") != "service_account":
            self.warnings.append(
                f"Service account {source} has type '{credentials.get('type')}', expected 'service_account'."
            )

    def _validate_secret_connectivity(self) -> None:
        """Validate the service account secret can be read from Secrets Manager."""
        secret_name = self.settings.SHEETS_SECRET_NAME
        if not secret_name:
            return

        try:
            session = boto3.session.Session()
            client = session.client(service_name="secretsmanager", region_name=self.settings.AWS_REGION)
            response = client.get_secret_value(SecretId=secret_name)
        except NoCredentialsError:
            self.errors.append("AWS credentials not found. Configure an IAM role or AWS CLI credentials.")
            return
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code == "ResourceNotFoundException":
                self.errors.append(f"Secret '{secret_name}' not found in Secrets Manager.")
            elif error_code == "AccessDeniedException":
                self.errors.append(
                    f"Access denied to secret '{secret_name}'. "
                    "Ensure IAM role/user has secretsmanager:GetSecretValue permission."
                )
            else:
                self.errors.append(f"Failed to retrieve secret '{secret_name}': {error_code}")
            return
        except BotoCoreError as e:
            self.errors.append(f"AWS connectivity error: {e}")
            return

        try:
            credentials = json.loads(response.get("SecretString", ""))
        except json.JSONDecodeError:
            self.errors.append(f"Secret '{secret_name}' does not contain valid JSON.")
            return

        self._check_service_account_fields(credentials, f"secret '{secret_name}'")


def validate_startup(settings: Settings, skip_connectivity: bool = False) -> List[str]:
    """
    Validate configuration, logging every finding.

    Returns:
        The warnings

    Raises:
        ConfigurationError: If any check failed
    """
    validator = StartupValidator(settings, skip_connectivity=skip_connectivity)
    success, errors, warnings = validator.validate_all()

    for warning in warnings:
        logger.warning(warning)

    if not success:
        for error in errors:
            logger.error(error)
        raise ConfigurationError(f"Startup validation failed with {len(errors)} error(s): {errors[0]}")

    logger.debug("All startup validations passed")
    return warnings

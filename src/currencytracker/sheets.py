"""Google Sheets publisher: service account authorization and range updates."""

import http.client
import json
from concurrent.futures import CancelledError
from typing import Any, Dict, Optional

import boto3
import httplib2
from botocore.exceptions import BotoCoreError, ClientError
from google.auth import exceptions as auth_exceptions
from google.oauth2.service_account import Credentials
from googleapiclient import errors as api_errors
from googleapiclient.discovery import build

from .errors import CredentialFileError, RemoteFailure, RemoteFailureKind
from .logging_config import get_logger
from .models import UpdatePayload
from .secure_logging import mask_service_account_email, safe_dict_repr

logger = get_logger(__name__)

SCOPES = ["https://www.googleapis.com/auth/spreadsheets"]
VALUE_INPUT_OPTION = "USER_ENTERED"
REQUIRED_FIELDS = ("type", "project_id", "private_key", "client_email")

_STATUS_KINDS = {
    400: RemoteFailureKind.BAD_REQUEST,
    401: RemoteFailureKind.MISSING_CREDENTIAL,
    409: RemoteFailureKind.FIELD_CONFLICT,
    413: RemoteFailureKind.PAYLOAD_TOO_LARGE,
}

_REMOTE_ERRORS = (
    api_errors.Error,
    auth_exceptions.GoogleAuthError,
    httplib2.HttpLib2Error,
    OSError,
    http.client.HTTPException,
    json.JSONDecodeError,
    UnicodeDecodeError,
    CancelledError,
)


def _info_from_secrets_manager(secret_name: str, region: str) -> Dict[str, Any]:
    session = boto3.session.Session()
    client = session.client(service_name="secretsmanager", region_name=region)

    try:
        response = client.get_secret_value(SecretId=secret_name)
        return json.loads(response["SecretString"])
    except ClientError as e:
        error_code = e.response.get("Error", {}).get("Code", "Unknown")
        if error_code == "ResourceNotFoundException":
            raise CredentialFileError(f"Secret '{secret_name}' not found in Secrets Manager", e) from e
        if error_code == "AccessDeniedException":
            raise CredentialFileError(
                f"Access denied to secret '{secret_name}'. "
                "Ensure the IAM role has secretsmanager:GetSecretValue permission.", e
            ) from e
        raise CredentialFileError(f"Error retrieving secret '{secret_name}': {error_code}", e) from e
    except BotoCoreError as e:
        raise CredentialFileError(f"Could not reach Secrets Manager: {e}", e) from e
    except (KeyError, json.JSONDecodeError) as e:
        raise CredentialFileError(f"Secret '{secret_name}' does not hold service account JSON", e) from e


def _info_from_file(path: str) -> Dict[str, Any]:
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError as e:
        raise CredentialFileError(f"Service account file not found: {path}", e) from e
    except json.JSONDecodeError as e:
        raise CredentialFileError(f"Service account file is not valid JSON: {path}", e) from e
    except OSError as e:
        raise CredentialFileError(f"Could not read service account file {path}: {e}", e) from e


def load_service_account_info(
    credentials_file: Optional[str] = None,
    secret_name: Optional[str] = None,
    region: str = "us-east-1",
) -> Dict[str, Any]:
    """
    Read the service account key, preferring Secrets Manager when a secret name is given.

    Raises:
        CredentialFileError: If neither source is configured or the source is unreadable
    """
    if secret_name:
        info = _info_from_secrets_manager(secret_name, region)
        source = f"Secrets Manager ({secret_name})"
    elif credentials_file:
        info = _info_from_file(credentials_file)
        source = credentials_file
    else:
        raise CredentialFileError("No service account file or secret configured")

    if not isinstance(info, dict):
        raise CredentialFileError(f"Service account credentials from {source} are not a JSON object")

    logger.debug("Loaded service account credentials", extra={'source': source})
    return info


def authorize(
    credentials_file: Optional[str] = None,
    secret_name: Optional[str] = None,
    region: str = "us-east-1",
):
    """
    Build an authorized Sheets v4 resource for a service account.

    The returned resource is only read from by publish(), so one handle
    serves every update of a run.
    """
    info = load_service_account_info(credentials_file, secret_name, region)

    try:
        credentials = Credentials.from_service_account_info(info, scopes=SCOPES)
    except (ValueError, TypeError) as e:
        logger.debug("Rejected service account credentials: %s", safe_dict_repr(info))
        raise CredentialFileError(f"Invalid service account credentials: {e}", e) from e

    logger.info(
        "Authorized service account",
        extra={'service_account': mask_service_account_email(info.get("client_email", ""))}
    )
    return build("sheets", "v4", credentials=credentials, cache_discovery=False)


def classify_remote_error(error: BaseException) -> RemoteFailureKind:
    """Map an exception from the Sheets client stack onto a RemoteFailureKind."""
    if isinstance(error, api_errors.HttpError):
        return _STATUS_KINDS.get(error.resp.status, RemoteFailureKind.FAILURE)
    if isinstance(error, api_errors.MediaUploadSizeError):
        return RemoteFailureKind.PAYLOAD_TOO_LARGE
    if isinstance(error, (api_errors.InvalidJsonError, json.JSONDecodeError, UnicodeDecodeError)):
        return RemoteFailureKind.DECODE_ERROR
    if isinstance(error, auth_exceptions.TransportError):
        return RemoteFailureKind.TRANSPORT
    if isinstance(error, auth_exceptions.GoogleAuthError):
        return RemoteFailureKind.MISSING_CREDENTIAL
    if isinstance(error, CancelledError):
        return RemoteFailureKind.CANCELLED
    if isinstance(error, (httplib2.HttpLib2Error, http.client.HTTPException, OSError)):
        return RemoteFailureKind.TRANSPORT
    return RemoteFailureKind.FAILURE


def _describe(error: BaseException) -> str:
    if isinstance(error, api_errors.HttpError):
        reason = getattr(error, "reason", None) or "no reason given"
        return f"HTTP {error.resp.status}: {reason}"
    return str(error) or type(error).__name__


def publish(destination_id: str, handle, payload: UpdatePayload) -> Dict[str, Any]:
    """
    Write ``payload`` to its target range with USER_ENTERED parsing.

    Args:
        destination_id: Spreadsheet ID
        handle: Sheets v4 resource from authorize()
        payload: Values block and destination range

    Returns:
        The UpdateValuesResponse dict

    Raises:
        RemoteFailure: Classified failure from the Sheets API. Never retried.
    """
    try:
        response = handle.spreadsheets().values().update(
            spreadsheetId=destination_id,
            range=payload.target_range,
            valueInputOption=VALUE_INPUT_OPTION,
            body=payload.to_value_range(),
        ).execute()
    except _REMOTE_ERRORS as e:
        kind = classify_remote_error(e)
        raise RemoteFailure(kind, payload.target_range, _describe(e), cause=e) from e

    # the JSON model hands back the raw text when the body is not JSON
    if not isinstance(response, dict):
        raise RemoteFailure(
            RemoteFailureKind.DECODE_ERROR, payload.target_range, "response body is not a JSON object"
        )

    logger.info(
        "Updated range: %s", payload.target_range,
        extra={'updated_cells': response.get("updatedCells")}
    )
    return response

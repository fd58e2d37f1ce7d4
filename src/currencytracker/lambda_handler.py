"""
AWS Lambda handler for scheduled currency-tracker runs.

Triggered by an EventBridge schedule or manual invocation. Settings come from
the environment overlaid with the JSON secret named by
CURRENCY_TRACKER_SECRET_NAME.
"""

import json
from typing import Any, Dict

from pydantic import ValidationError

from .config import load_settings
from .errors import ConfigurationError, TrackerError
from .logging_config import get_logger, setup_logging
from .pipeline import run_pipeline

# JSON format for CloudWatch Insights
setup_logging(json_format=True)
logger = get_logger(__name__)


def _response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {'statusCode': status_code, 'body': json.dumps(body)}


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Run the pipeline once.

    Event parameters (optional):
    - symbols: list[str] or str - currencies to fetch (default: CRYPTO_SYMBOLS)
    - etf: str - ETF ticker (default: ETF_TICKER)
    - dry_run: bool - return without fetching (for smoke tests)

    Returns:
        Dict with statusCode and body:
        - 200: Both ranges updated
        - 207: Fetch succeeded but at least one sheet update failed
        - 400: Configuration error
        - 500: Fetch, decode or lookup error
    """
    event = event or {}
    logger.info("Currency tracker invoked", extra={'event_keys': list(event.keys())})

    if event.get('dry_run'):
        logger.info("Dry run requested, returning success")
        return _response(200, {'dry_run': True, 'status': 'ok'})

    symbols = event.get('symbols')
    if isinstance(symbols, list):
        symbols = ",".join(symbols)

    try:
        settings = load_settings(CRYPTO_SYMBOLS=symbols, ETF_TICKER=event.get('etf'))
        report = run_pipeline(settings)
    except (ConfigurationError, ValidationError) as e:
        logger.error("Configuration error: %s", e)
        return _response(400, {'message': 'Currency tracker misconfigured', 'error': str(e)})
    except TrackerError as e:
        logger.error("Currency tracker failed: %s", e, exc_info=True)
        return _response(500, {'message': 'Currency tracker failed', 'error': str(e)})

    status_code = 200 if report.ok else 207
    logger.info("Execution complete", extra=report.summary())
    return _response(status_code, {'message': 'Currency tracker completed', 'summary': report.summary()})

"""
Fetch -> assemble -> publish.

Everything before the first sheet update is fatal: configuration, transport,
decode and lookup errors propagate to the caller. Sheet updates are
independent of each other, so a failed update is recorded in the RunReport
and the next one is still attempted.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .config import Settings
from .errors import ConfigurationError, NoAPIKeyError, RemoteFailure
from .logging_config import get_logger
from .market_data import MarketDataClient
from .models import UpdatePayload
from .payloads import build_etf_payload, build_update_payload
from .sheets import authorize, publish

logger = get_logger(__name__)


@dataclass
class RunReport:
    updated_ranges: List[str] = field(default_factory=list)
    failures: List[RemoteFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def summary(self) -> dict:
        return {
            "updated_ranges": self.updated_ranges,
            "failures": [
                {"range": f.target_range, "kind": f.kind.value, "error": str(f)}
                for f in self.failures
            ],
        }


def require_configuration(settings: Settings) -> None:
    """Fail before any network call when a credential or target is missing."""
    if not settings.CMC_PRO_API_KEY:
        raise NoAPIKeyError("CMC_PRO_API_KEY")
    if not settings.EOD_TOKEN:
        raise NoAPIKeyError("EOD_TOKEN")
    if not settings.crypto_symbols:
        raise ConfigurationError("No currency symbols configured (CRYPTO_SYMBOLS / --currencies)")
    if not settings.ETF_TICKER:
        raise ConfigurationError("No ETF ticker configured (ETF_TICKER / --etfs)")
    if not settings.SHEET_ID:
        raise ConfigurationError("No destination spreadsheet configured (SHEET_ID / --sheet-id)")


def run_pipeline(
    settings: Settings,
    client: Optional[MarketDataClient] = None,
    authorizer: Callable = authorize,
    publisher: Callable = publish,
) -> RunReport:
    """
    Fetch quotes, build both update blocks and write them to the sheet.

    Args:
        settings: Loaded configuration
        client: Market data client (a new one is created and closed if None)
        authorizer: Returns a Sheets handle; see sheets.authorize
        publisher: Performs one update; see sheets.publish

    Returns:
        RunReport listing updated ranges and publish failures
    """
    require_configuration(settings)

    symbols = settings.crypto_symbols
    owns_client = client is None
    client = client or MarketDataClient()

    try:
        snapshot = client.fetch_crypto_quotes(settings.CMC_PRO_API_KEY, symbols)
        etf = client.fetch_etf_quote(settings.EOD_TOKEN, settings.ETF_TICKER)
    finally:
        if owns_client:
            client.close()

    for symbol in symbols:
        logger.debug(snapshot.currency(symbol).describe(settings.PRICING_CURRENCY))

    payloads: List[UpdatePayload] = [
        build_update_payload(
            snapshot,
            symbols,
            settings.crypto_range,
            settings.WRITE_ORIENTATION,
            settings.PRICING_CURRENCY,
        ),
        build_etf_payload(etf, settings.etf_range, settings.WRITE_ORIENTATION),
    ]

    handle = authorizer(
        credentials_file=settings.GOOGLE_SERVICE_ACCOUNT_FILE,
        secret_name=settings.SHEETS_SECRET_NAME,
        region=settings.AWS_REGION,
    )

    report = RunReport()
    for payload in payloads:
        try:
            publisher(settings.SHEET_ID, handle, payload)
        except RemoteFailure as e:
            logger.error(
                "Sheet update failed: %s", e,
                extra={'range': e.target_range, 'kind': e.kind.value}
            )
            report.failures.append(e)
        else:
            report.updated_ranges.append(payload.target_range)

    return report

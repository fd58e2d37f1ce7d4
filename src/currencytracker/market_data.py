"""
HTTP client for the two market data providers.

CoinMarketCap takes its key in the X-CMC_PRO_API_KEY header; EOD Historical
Data takes its token as the api_token query parameter. Credentials are
redacted from every error raised here.
"""

from typing import Iterable, List, Optional, Sequence
from urllib.parse import quote

import requests

from .errors import ConfigurationError, NoAPIKeyError, TransportError
from .logging_config import get_logger
from .models import CMC_PROVIDER, EOD_PROVIDER, EtfQuote, MarketSnapshot
from .secure_logging import mask_string, redact_sensitive_data

logger = get_logger(__name__)


class MarketDataClient:
    """
    Fetches crypto quotes from CoinMarketCap and ETF quotes from EOD Historical Data.

    One request per call: no retries, no rate limiting, transport default
    timeouts. Failures surface as TransportError / DecodeError.
    """

    CMC_QUOTES_URL = "https://pro-api.coinmarketcap.com/v1/cryptocurrency/quotes/latest"
    EOD_REALTIME_URL = "https://eodhistoricaldata.com/api/real-time"

    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()

    def __enter__(self) -> "MarketDataClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def _get(self, provider: str, url: str, secrets: Sequence[str], **kwargs) -> bytes:
        """Issue one GET and return the raw body of a 2xx response."""
        try:
            response = self.session.get(url, **kwargs)
        except requests.exceptions.RequestException as e:
            raise TransportError(
                provider, redact_sensitive_data(str(e), list(secrets)), cause=e
            ) from e

        if not response.ok:
            detail = redact_sensitive_data(self._error_detail(response), list(secrets))
            raise TransportError(
                provider,
                f"HTTP {response.status_code}: {detail}",
                status_code=response.status_code,
            )

        return response.content

    @staticmethod
    def _error_detail(response: requests.Response) -> str:
        """Best-effort error message from a non-2xx response body."""
        try:
            body = response.json()
        except ValueError:
            return response.text.strip()[:200] or response.reason or "no details"

        if isinstance(body, dict):
            # CoinMarketCap wraps errors in a status object
            status = body.get("status")
            if isinstance(status, dict) and status.get("error_message"):
                return str(status["error_message"])
            if body.get("message"):
                return str(body["message"])

        return response.reason or "no details"

    def fetch_crypto_quotes(self, api_key: str, symbols: Iterable[str]) -> MarketSnapshot:
        """
        Get the latest quotes for ``symbols``.

        Args:
            api_key: CoinMarketCap Pro API key, sent as the X-CMC_PRO_API_KEY header
            symbols: Ticker symbols, e.g. ["BTC", "ETH"]

        Returns:
            MarketSnapshot keyed by ticker symbol

        Raises:
            NoAPIKeyError: If api_key is empty (no request is made)
            TransportError: On network failure or non-2xx response
            DecodeError: If the body is not a quotes/latest response
        """
        if not api_key:
            raise NoAPIKeyError("CMC_PRO_API_KEY")

        requested: List[str] = list(dict.fromkeys(s.strip().upper() for s in symbols if s.strip()))
        if not requested:
            raise ConfigurationError("No currency symbols requested")

        symbol_param = ",".join(requested)
        logger.debug(
            "Querying currencies",
            extra={'symbols': symbol_param, 'api_key': mask_string(api_key)}
        )

        body = self._get(
            CMC_PROVIDER,
            self.CMC_QUOTES_URL,
            [api_key],
            headers={"X-CMC_PRO_API_KEY": api_key, "Accept": "application/json"},
            params={"symbol": symbol_param},
        )
        snapshot = MarketSnapshot.decode(body)

        logger.info(
            "Fetched %d currency quotes", len(snapshot.currencies_by_symbol),
            extra={'provider': CMC_PROVIDER}
        )
        return snapshot

    def fetch_etf_quote(self, api_token: str, ticker: str) -> EtfQuote:
        """
        Get the real-time quote for one ETF ticker (e.g. "AMUNDI.PA").

        Raises:
            NoAPIKeyError: If api_token is empty (no request is made)
            TransportError: On network failure or non-2xx response
            DecodeError: If the body lacks code/close
        """
        if not api_token:
            raise NoAPIKeyError("EOD_TOKEN")

        ticker = (ticker or "").strip()
        if not ticker:
            raise ConfigurationError("No ETF ticker requested")

        body = self._get(
            EOD_PROVIDER,
            f"{self.EOD_REALTIME_URL}/{quote(ticker, safe='.')}",
            [api_token],
            params={"api_token": api_token, "fmt": "json"},
        )
        etf = EtfQuote.decode(body)

        logger.debug("Fetched ETF: %s", etf.close, extra={'ticker': etf.code})
        return etf

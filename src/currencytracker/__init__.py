"""
currency-tracker - publish crypto and ETF prices to a Google Sheet.

Run once:
    currency-tracker -c BTC ETH DOGE --etfs AMUNDI.PA

From Python:
    from currencytracker import load_settings, run_pipeline

    report = run_pipeline(load_settings())
    if not report.ok:
        ...

Building blocks:
    MarketDataClient.fetch_crypto_quotes(api_key, symbols) -> MarketSnapshot
    MarketDataClient.fetch_etf_quote(api_token, ticker) -> EtfQuote
    build_update_payload(snapshot, symbols, target_range) -> UpdatePayload
    publish(sheet_id, authorize(...), payload) -> dict
"""

__version__ = "0.1.0"

from .config import Settings, load_settings
from .errors import (
    ConfigurationError,
    CredentialFileError,
    DecodeError,
    NoAPIKeyError,
    QuoteLookupError,
    RemoteFailure,
    RemoteFailureKind,
    TrackerError,
    TransportError,
)
from .market_data import MarketDataClient
from .models import CurrencyRecord, EtfQuote, MarketSnapshot, Orientation, Quote, UpdatePayload
from .payloads import build_etf_payload, build_update_payload, column_range
from .pipeline import RunReport, run_pipeline
from .sheets import authorize, publish

__all__ = [
    "Settings",
    "load_settings",
    "ConfigurationError",
    "CredentialFileError",
    "DecodeError",
    "NoAPIKeyError",
    "QuoteLookupError",
    "RemoteFailure",
    "RemoteFailureKind",
    "TrackerError",
    "TransportError",
    "MarketDataClient",
    "CurrencyRecord",
    "EtfQuote",
    "MarketSnapshot",
    "Orientation",
    "Quote",
    "UpdatePayload",
    "build_etf_payload",
    "build_update_payload",
    "column_range",
    "RunReport",
    "run_pipeline",
    "authorize",
    "publish",
]

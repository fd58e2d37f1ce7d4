"""
Application settings.

Read from the environment (and a .env file via the CLI), overlaid in Lambda
with the Secrets Manager JSON secret, then with command line or event
overrides.
"""

import re
from typing import List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .logging_config import get_logger
from .models import DEFAULT_PRICING_CURRENCY, Orientation
from .payloads import column_range
from .secret_store import get_secrets, is_placeholder

logger = get_logger(__name__)

_SYMBOL_SEPARATORS = re.compile(r"[,\s]+")


def parse_symbols(value: str) -> List[str]:
    """Split a comma/space separated symbol list, upper-cased, first occurrence wins."""
    symbols: List[str] = []
    for part in _SYMBOL_SEPARATORS.split(value or ""):
        symbol = part.strip().upper()
        if symbol and symbol not in symbols:
            symbols.append(symbol)
    return symbols


class Settings(BaseSettings):
    """Application settings and configuration"""

    model_config = SettingsConfigDict(case_sensitive=True, extra="ignore")

    # Provider credentials
    CMC_PRO_API_KEY: str = ""
    EOD_TOKEN: str = ""

    # Google Sheets destination
    SHEET_ID: str = ""
    GOOGLE_SERVICE_ACCOUNT_FILE: str = "secret.json"
    SHEETS_SECRET_NAME: Optional[str] = None  # service account JSON in Secrets Manager

    # What to fetch
    CRYPTO_SYMBOLS: str = "BTC,ETH,DOGE"
    ETF_TICKER: str = ""
    PRICING_CURRENCY: str = DEFAULT_PRICING_CURRENCY

    # Where to write it
    CRYPTO_SHEET: str = "Crypto"
    CRYPTO_COLUMN: str = "C"
    CRYPTO_START_ROW: int = 2
    ETF_SHEET: str = "ETFs"
    ETF_COLUMN: str = "C"
    ETF_START_ROW: int = 2
    WRITE_ORIENTATION: Orientation = Orientation.COLUMNS

    # Exit non-zero when a sheet update fails
    FAIL_ON_PUBLISH_ERROR: bool = False

    AWS_REGION: str = "us-east-1"

    @field_validator("CMC_PRO_API_KEY", "EOD_TOKEN", mode="before")
    @classmethod
    def reject_placeholders(cls, v: Optional[str]) -> str:
        value = (v or "").strip()
        if is_placeholder(value):
            logger.warning("API credential appears to be a placeholder value, treating as not configured")
            return ""
        return value

    @field_validator("ETF_TICKER", "PRICING_CURRENCY", "CRYPTO_COLUMN", "ETF_COLUMN")
    @classmethod
    def upper(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("WRITE_ORIENTATION", mode="before")
    @classmethod
    def orientation_upper(cls, v):
        return v.upper() if isinstance(v, str) else v

    @property
    def crypto_symbols(self) -> List[str]:
        return parse_symbols(self.CRYPTO_SYMBOLS)

    @property
    def crypto_range(self) -> str:
        count = max(len(self.crypto_symbols), 1)
        return column_range(self.CRYPTO_SHEET, self.CRYPTO_COLUMN, self.CRYPTO_START_ROW, count)

    @property
    def etf_range(self) -> str:
        return column_range(self.ETF_SHEET, self.ETF_COLUMN, self.ETF_START_ROW)


def load_settings(**overrides) -> Settings:
    """
    Build Settings from the environment, the Secrets Manager overlay (Lambda)
    and explicit overrides, in increasing order of precedence.

    Overrides whose value is None are ignored so argparse defaults can be
    passed straight through.
    """
    values = {key: value for key, value in get_secrets().items() if key in Settings.model_fields}
    values.update({key: value for key, value in overrides.items() if value is not None})
    return Settings(**values)

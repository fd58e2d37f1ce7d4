"""
Response and payload models.

CoinMarketCap quotes and EOD Historical Data real-time quotes are decoded
into frozen pydantic models. UpdatePayload is the shape of a Google Sheets
ValueRange write.
"""

from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import DecodeError, QuoteLookupError

CMC_PROVIDER = "CoinMarketCap"
EOD_PROVIDER = "EOD Historical Data"

DEFAULT_PRICING_CURRENCY = "USD"


def format_number(value: float) -> str:
    """Render a float as its shortest plain decimal string (50000.0 -> '50000')."""
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def _summarize(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ())) or "body"
    return f"{location}: {first.get('msg', 'invalid value')} ({error.error_count()} error(s))"


class Quote(BaseModel):
    model_config = ConfigDict(frozen=True)

    price: float
    percent_change_7d: float


class CurrencyRecord(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    symbol: str
    quotes_by_currency_code: Dict[str, Quote] = Field(alias="quote", min_length=1)

    def quote_for(self, currency: str = DEFAULT_PRICING_CURRENCY) -> Quote:
        """Return the quote in ``currency`` or raise QuoteLookupError."""
        quote = self.quotes_by_currency_code.get(currency)
        if quote is None:
            raise QuoteLookupError(self.symbol, currency)
        return quote

    def describe(self, currency: str = DEFAULT_PRICING_CURRENCY) -> str:
        quote = self.quote_for(currency)
        return (
            f"Name: {self.name}, Symbol: {self.symbol}, "
            f"Price: {format_number(quote.price)}, "
            f"Change(7d): {format_number(quote.percent_change_7d)}%"
        )

    def __str__(self) -> str:
        return self.describe()


class MarketSnapshot(BaseModel):
    """Decoded body of a CoinMarketCap ``quotes/latest`` response."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    currencies_by_symbol: Dict[str, CurrencyRecord] = Field(alias="data")

    @classmethod
    def decode(cls, body: Union[bytes, str]) -> "MarketSnapshot":
        try:
            return cls.model_validate_json(body)
        except ValidationError as e:
            raise DecodeError(CMC_PROVIDER, _summarize(e), cause=e) from e

    def currency(self, symbol: str) -> CurrencyRecord:
        record = self.currencies_by_symbol.get(symbol)
        if record is None:
            raise QuoteLookupError(symbol)
        return record


class EtfQuote(BaseModel):
    """Decoded body of an EOD Historical Data ``real-time`` response."""

    model_config = ConfigDict(frozen=True)

    code: str
    close: float

    @classmethod
    def decode(cls, body: Union[bytes, str]) -> "EtfQuote":
        try:
            return cls.model_validate_json(body)
        except ValidationError as e:
            raise DecodeError(EOD_PROVIDER, _summarize(e), cause=e) from e


class Orientation(str, Enum):
    """Major dimension of a Sheets value block."""

    ROWS = "ROWS"
    COLUMNS = "COLUMNS"


class UpdatePayload(BaseModel):
    """A rectangular block of values destined for one sheet range."""

    model_config = ConfigDict(frozen=True)

    target_range: str
    orientation: Orientation = Orientation.COLUMNS
    values: Tuple[Tuple[str, ...], ...]

    @field_validator("values")
    @classmethod
    def values_rectangular(cls, v: Tuple[Tuple[str, ...], ...]) -> Tuple[Tuple[str, ...], ...]:
        if not v or not v[0]:
            raise ValueError("values block must not be empty")
        width = len(v[0])
        if any(len(row) != width for row in v):
            raise ValueError("values block must be rectangular")
        return v

    def to_value_range(self) -> Dict[str, Any]:
        """Request body for ``spreadsheets.values.update``."""
        return {
            "range": self.target_range,
            "majorDimension": self.orientation.value,
            "values": [list(row) for row in self.values],
        }

"""
Assemble sheet update payloads from decoded market data.

Destination ranges and symbol order are inputs, so the same code builds the
crypto block and the ETF block.
"""

from typing import Sequence

from .models import (
    DEFAULT_PRICING_CURRENCY,
    EtfQuote,
    MarketSnapshot,
    Orientation,
    UpdatePayload,
    format_number,
)


def column_range(sheet: str, column: str, first_row: int, count: int = 1) -> str:
    """
    A1 range covering ``count`` cells of one column.

    >>> column_range("Crypto", "C", 2, 3)
    'Crypto!C2:C4'
    """
    if count < 1:
        raise ValueError("count must be at least 1")
    last_row = first_row + count - 1
    return f"{sheet}!{column}{first_row}:{column}{last_row}"


def build_update_payload(
    snapshot: MarketSnapshot,
    symbols: Sequence[str],
    target_range: str,
    orientation: Orientation = Orientation.COLUMNS,
    pricing_currency: str = DEFAULT_PRICING_CURRENCY,
) -> UpdatePayload:
    """
    Build a single-row block of prices, one cell per symbol in ``symbols`` order.

    Raises:
        QuoteLookupError: If any symbol, or its ``pricing_currency`` quote, is
            missing. No payload is produced in that case, since a short row
            would shift every following value into the wrong cell.
        ValueError: If ``symbols`` is empty.
    """
    if not symbols:
        raise ValueError("at least one symbol is required")

    row = tuple(
        format_number(snapshot.currency(symbol).quote_for(pricing_currency).price)
        for symbol in symbols
    )
    return UpdatePayload(target_range=target_range, orientation=orientation, values=(row,))


def build_etf_payload(
    quote: EtfQuote,
    target_range: str,
    orientation: Orientation = Orientation.COLUMNS,
) -> UpdatePayload:
    """Build the one-cell block holding the ETF closing price."""
    return UpdatePayload(
        target_range=target_range,
        orientation=orientation,
        values=((format_number(quote.close),),),
    )

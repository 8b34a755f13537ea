"""A symbol-centred facade over history and option requests."""

from __future__ import annotations

from typing import Optional

from .client import Client, get_client
from .history import History, HistoryQuery, PriceData
from .option import Option, OptionData


class Ticker:
    """Access prices and options of one symbol."""

    def __init__(self, symbol: str, client: Optional[Client] = None) -> None:
        if client is None:
            client = get_client()
        self.symbol = symbol
        self._history = History(client)
        self._option = Option(client)

    def history(self, query: Optional[HistoryQuery] = None) -> dict[str, PriceData]:
        """Return price bars keyed by date or date-time."""
        self._history.set_query(query if query is not None else HistoryQuery())
        data = self._history.get_history(self.symbol)
        return self._history.transform_data(data)

    def option_chain(self) -> OptionData:
        """Return the option chain for the nearest expiration."""
        return self._option.transform_data(self._option.get_option_chain(self.symbol))

    def option_chain_by_expiration(self, expiration: str) -> OptionData:
        """Return the option chain expiring on a YYYY-MM-DD date."""
        response = self._option.get_option_chain_by_expiration(self.symbol, expiration)
        return self._option.transform_data(response)

    def expiration_dates(self) -> list[str]:
        """List the dates on which the symbol's options expire."""
        return self._option.get_expiration_dates(self.symbol)
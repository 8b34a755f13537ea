"""Historical price data from the Yahoo Finance chart endpoint."""

from __future__ import annotations

import dataclasses
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional

from .client import Client, get_client
from .constants import BASE_URL, random_user_agent

_log = logging.getLogger(__name__)

_DATE_FORMAT = "%Y-%m-%d"
_DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class NoDataError(LookupError):
    """Raised when the chart endpoint returns no result for a symbol."""

    def __init__(self, symbol: str) -> None:
        super().__init__(f"no data found for symbol: {symbol}")
        self.symbol = symbol


def _value(data: dict[str, Any], key: str, default: Any) -> Any:
    value = data.get(key)
    return default if value is None else value


def _floats(values: Optional[list[Any]]) -> list[float]:
    return [0.0 if value is None else float(value) for value in values or ()]


def _ints(values: Optional[list[Any]]) -> list[int]:
    return [0 if value is None else int(value) for value in values or ()]


@dataclass
class YahooTradingPeriod:
    timezone: str = ""
    end: int = 0
    start: int = 0
    gmtoffset: int = 0

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> YahooTradingPeriod:
        data = data or {}
        return cls(
            timezone=str(_value(data, "timezone", "")),
            end=int(_value(data, "end", 0)),
            start=int(_value(data, "start", 0)),
            gmtoffset=int(_value(data, "gmtoffset", 0)),
        )


@dataclass
class YahooMeta:
    currency: str = ""
    symbol: str = ""
    exchange_name: str = ""
    full_exchange_name: str = ""
    instrument_type: str = ""
    first_trade_date: int = 0
    regular_market_time: int = 0
    has_pre_post_market_data: bool = False
    gmtoffset: int = 0
    timezone: str = ""
    exchange_timezone_name: str = ""
    regular_market_price: float = 0.0
    fifty_two_week_high: float = 0.0
    fifty_two_week_low: float = 0.0
    regular_market_day_high: float = 0.0
    regular_market_day_low: float = 0.0
    regular_market_volume: int = 0
    long_name: str = ""
    short_name: str = ""
    chart_previous_close: float = 0.0
    previous_close: float = 0.0
    scale: int = 0
    price_hint: int = 0
    current_trading_period: YahooTradingPeriod = field(default_factory=YahooTradingPeriod)
    trading_periods: list[list[YahooTradingPeriod]] = field(default_factory=list)
    data_granularity: str = ""
    range: str = ""
    valid_ranges: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> YahooMeta:
        data = data or {}
        return cls(
            currency=str(_value(data, "currency", "")),
            symbol=str(_value(data, "symbol", "")),
            exchange_name=str(_value(data, "exchangeName", "")),
            full_exchange_name=str(_value(data, "fullExchangeName", "")),
            instrument_type=str(_value(data, "instrumentType", "")),
            first_trade_date=int(_value(data, "firstTradeDate", 0)),
            regular_market_time=int(_value(data, "regularMarketTime", 0)),
            has_pre_post_market_data=bool(_value(data, "hasPrePostMarketData", False)),
            gmtoffset=int(_value(data, "gmtoffset", 0)),
            timezone=str(_value(data, "timezone", "")),
            exchange_timezone_name=str(_value(data, "exchangeTimezoneName", "")),
            regular_market_price=float(_value(data, "regularMarketPrice", 0.0)),
            fifty_two_week_high=float(_value(data, "fiftyTwoWeekHigh", 0.0)),
            fifty_two_week_low=float(_value(data, "fiftyTwoWeekLow", 0.0)),
            regular_market_day_high=float(_value(data, "regularMarketDayHigh", 0.0)),
            regular_market_day_low=float(_value(data, "regularMarketDayLow", 0.0)),
            regular_market_volume=int(_value(data, "regularMarketVolume", 0)),
            long_name=str(_value(data, "longName", "")),
            short_name=str(_value(data, "shortName", "")),
            chart_previous_close=float(_value(data, "chartPreviousClose", 0.0)),
            previous_close=float(_value(data, "previousClose", 0.0)),
            scale=int(_value(data, "scale", 0)),
            price_hint=int(_value(data, "priceHint", 0)),
            current_trading_period=YahooTradingPeriod.from_dict(data.get("currentTradingPeriod")),
            trading_periods=[
                [YahooTradingPeriod.from_dict(period) for period in row or ()]
                for row in data.get("tradingPeriods") or ()
            ],
            data_granularity=str(_value(data, "dataGranularity", "")),
            range=str(_value(data, "range", "")),
            valid_ranges=[str(item) for item in data.get("validRanges") or ()],
        )


@dataclass
class YahooQuote:
    open: list[float] = field(default_factory=list)
    high: list[float] = field(default_factory=list)
    low: list[float] = field(default_factory=list)
    close: list[float] = field(default_factory=list)
    volume: list[int] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> YahooQuote:
        data = data or {}
        return cls(
            open=_floats(data.get("open")),
            high=_floats(data.get("high")),
            low=_floats(data.get("low")),
            close=_floats(data.get("close")),
            volume=_ints(data.get("volume")),
        )


@dataclass
class YahooIndicator:
    quote: list[YahooQuote] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> YahooIndicator:
        data = data or {}
        return cls(quote=[YahooQuote.from_dict(item) for item in data.get("quote") or ()])


@dataclass
class YahooHistoryResult:
    meta: YahooMeta = field(default_factory=YahooMeta)
    timestamp: list[int] = field(default_factory=list)
    indicators: YahooIndicator = field(default_factory=YahooIndicator)

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> YahooHistoryResult:
        data = data or {}
        return cls(
            meta=YahooMeta.from_dict(data.get("meta")),
            timestamp=_ints(data.get("timestamp")),
            indicators=YahooIndicator.from_dict(data.get("indicators")),
        )


@dataclass
class YahooChart:
    result: list[YahooHistoryResult] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> YahooChart:
        data = data or {}
        return cls(result=[YahooHistoryResult.from_dict(item) for item in data.get("result") or ()])


@dataclass
class YahooHistoryResponse:
    chart: YahooChart = field(default_factory=YahooChart)

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> YahooHistoryResponse:
        data = data or {}
        return cls(chart=YahooChart.from_dict(data.get("chart")))


def parse_history_response(payload: Optional[dict[str, Any]]) -> YahooHistoryResponse:
    """Build a history response from decoded chart JSON."""
    return YahooHistoryResponse.from_dict(payload)


@dataclass(frozen=True)
class PriceData:
    open: float
    high: float
    low: float
    close: float
    volume: int


@dataclass
class HistoryQuery:
    """Parameters of a chart request; empty strings mean 'use the default'."""

    range: str = ""
    interval: str = ""
    start: str = ""
    end: str = ""
    user_agent: str = ""

    def set_default(self) -> None:
        """Fill in defaults and turn the start date into a Unix timestamp."""
        if not self.range and not self.start:
            self.range = "1mo"
        if not self.interval:
            self.interval = "1d"
        if self.start:
            try:
                parsed = datetime.strptime(self.start, _DATE_FORMAT).replace(tzinfo=timezone.utc)
            except ValueError as exc:
                _log.warning("Failed to parse start date: %s", exc)
                self.start = "default"
            else:
                self.start = str(int(parsed.timestamp()))
        if not self.end:
            self.end = str(int(time.time()))
        if not self.user_agent:
            self.user_agent = random_user_agent()


class History:
    """Fetches and reshapes historical prices for a symbol."""

    def __init__(self, client: Optional[Client] = None) -> None:
        self.client = client if client is not None else get_client()
        self.query = HistoryQuery()

    def set_query(self, query: HistoryQuery) -> None:
        """Use a copy of the given query for later requests."""
        self.query = dataclasses.replace(query)

    def get_history(self, symbol: str) -> YahooHistoryResponse:
        """Request chart data for a symbol; raise NoDataError if none comes back."""
        self.query.set_default()

        params: dict[str, str] = {}
        if self.query.range:
            params["range"] = self.query.range
        params["interval"] = self.query.interval
        params["period1"] = self.query.start
        params["period2"] = self.query.end

        endpoint = f"{BASE_URL}/v8/finance/chart/{symbol}"
        response = self.client.get(endpoint, params)
        try:
            payload = response.json()
        except ValueError:
            _log.error("Failed to decode history data JSON response", exc_info=True)
            raise
        finally:
            response.close()

        history = parse_history_response(payload)
        if not history.chart.result:
            raise NoDataError(symbol)
        return history

    def transform_data(self, data: YahooHistoryResponse) -> dict[str, PriceData]:
        """Map local-time date keys to the price bar at that time."""
        result = data.chart.result[0]
        quote = result.indicators.quote[0]
        columns = (quote.open, quote.high, quote.low, quote.close, quote.volume)
        if any(len(column) < len(result.timestamp) for column in columns):
            raise ValueError("quote arrays are shorter than the timestamp list")

        daily = self.query.interval.endswith(("d", "wk", "mo"))
        key_format = _DATE_FORMAT if daily else _DATETIME_FORMAT
        return {
            datetime.fromtimestamp(stamp).strftime(key_format): PriceData(o, h, lo, c, v)
            for stamp, o, h, lo, c, v in zip(result.timestamp, *columns)
        }
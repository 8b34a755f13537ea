"""Option chains from the Yahoo Finance options endpoint."""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Optional, TypeVar

from .client import Client, get_client
from .constants import BASE_URL

_log = logging.getLogger(__name__)

_DATE_FORMAT = "%Y-%m-%d"
_KEY = "json_key"
_KIND = "json_kind"

_T = TypeVar("_T")


def _json(key: str, kind: Callable[[Any], Any], default: Any) -> Any:
    return field(default=default, metadata={_KEY: key, _KIND: kind})


def _str(key: str) -> Any:
    return _json(key, str, "")


def _int(key: str) -> Any:
    return _json(key, int, 0)


def _float(key: str) -> Any:
    return _json(key, float, 0.0)


def _bool(key: str) -> Any:
    return _json(key, bool, False)


def _load_flat(cls: type[_T], data: Optional[dict[str, Any]]) -> _T:
    """Build a dataclass whose fields each carry their JSON key and converter."""
    data = data or {}
    kwargs: dict[str, Any] = {}
    for item in dataclasses.fields(cls):  # type: ignore[arg-type]
        key = item.metadata.get(_KEY)
        if key is None:
            continue
        value = data.get(key)
        if value is not None:
            kwargs[item.name] = item.metadata[_KIND](value)
    return cls(**kwargs)


def _local_date(stamp: int) -> str:
    return datetime.fromtimestamp(stamp).strftime(_DATE_FORMAT)


@dataclass
class YahooOptionQuote:
    language: str = _str("language")
    region: str = _str("region")
    quote_type: str = _str("quoteType")
    type_disp: str = _str("typeDisp")
    quote_source_name: str = _str("quoteSourceName")
    triggerable: bool = _bool("triggerable")
    custom_price_alert_confidence: str = _str("customPriceAlertConfidence")
    market_state: str = _str("marketState")
    regular_market_change_percent: float = _float("regularMarketChangePercent")
    regular_market_price: float = _float("regularMarketPrice")
    short_name: str = _str("shortName")
    long_name: str = _str("longName")
    exchange: str = _str("exchange")
    message_board_id: str = _str("messageBoardId")
    exchange_timezone_name: str = _str("exchangeTimezoneName")
    exchange_timezone_short_name: str = _str("exchangeTimezoneShortName")
    gmt_offset_milliseconds: int = _int("gmtOffSetMilliseconds")
    market: str = _str("market")
    esg_populated: bool = _bool("esgPopulated")
    currency: str = _str("currency")
    has_pre_post_market_data: bool = _bool("hasPrePostMarketData")
    first_trade_date_milliseconds: int = _int("firstTradeDateMilliseconds")
    price_hint: int = _int("priceHint")
    post_market_change_percent: float = _float("postMarketChangePercent")
    post_market_price: float = _float("postMarketPrice")
    post_market_change: float = _float("postMarketChange")
    regular_market_change: float = _float("regularMarketChange")
    regular_market_day_high: float = _float("regularMarketDayHigh")
    regular_market_day_range: str = _str("regularMarketDayRange")
    regular_market_day_low: float = _float("regularMarketDayLow")
    regular_market_volume: int = _int("regularMarketVolume")
    regular_market_previous_close: float = _float("regularMarketPreviousClose")
    bid: float = _float("bid")
    ask: float = _float("ask")
    bid_size: int = _int("bidSize")
    ask_size: int = _int("askSize")
    full_exchange_name: str = _str("fullExchangeName")
    financial_currency: str = _str("financialCurrency")
    regular_market_open: float = _float("regularMarketOpen")
    average_daily_volume_3_month: int = _int("averageDailyVolume3Month")
    average_daily_volume_10_day: int = _int("averageDailyVolume10Day")
    fifty_two_week_low_change: float = _float("fiftyTwoWeekLowChange")
    fifty_two_week_low_change_percent: float = _float("fiftyTwoWeekLowChangePercent")
    fifty_two_week_range: str = _str("fiftyTwoWeekRange")
    fifty_two_week_high_change: float = _float("fiftyTwoWeekHighChange")
    fifty_two_week_high_change_percent: float = _float("fiftyTwoWeekHighChangePercent")
    fifty_two_week_low: float = _float("fiftyTwoWeekLow")
    fifty_two_week_high: float = _float("fiftyTwoWeekHigh")
    fifty_two_week_change_percent: float = _float("fiftyTwoWeekChangePercent")
    dividend_date: int = _int("dividendDate")
    earnings_timestamp: int = _int("earningsTimestamp")
    earnings_timestamp_start: int = _int("earningsTimestampStart")
    earnings_timestamp_end: int = _int("earningsTimestampEnd")
    earnings_call_timestamp_start: int = _int("earningsCallTimestampStart")
    earnings_call_timestamp_end: int = _int("earningsCallTimestampEnd")
    is_earnings_date_estimate: bool = _bool("isEarningsDateEstimate")
    trailing_annual_dividend_rate: float = _float("trailingAnnualDividendRate")
    trailing_pe: float = _float("trailingPE")
    dividend_rate: float = _float("dividendRate")
    trailing_annual_dividend_yield: float = _float("trailingAnnualDividendYield")
    dividend_yield: float = _float("dividendYield")
    eps_trailing_twelve_months: float = _float("epsTrailingTwelveMonths")
    eps_forward: float = _float("epsForward")
    eps_current_year: float = _float("epsCurrentYear")
    price_eps_current_year: float = _float("priceEpsCurrentYear")
    shares_outstanding: int = _int("sharesOutstanding")
    book_value: float = _float("bookValue")
    fifty_day_average: float = _float("fiftyDayAverage")
    fifty_day_average_change: float = _float("fiftyDayAverageChange")
    fifty_day_average_change_percent: float = _float("fiftyDayAverageChangePercent")
    two_hundred_day_average: float = _float("twoHundredDayAverage")
    two_hundred_day_average_change: float = _float("twoHundredDayAverageChange")
    two_hundred_day_average_change_percent: float = _float("twoHundredDayAverageChangePercent")
    market_cap: int = _int("marketCap")
    forward_pe: float = _float("forwardPE")
    price_to_book: float = _float("priceToBook")
    source_interval: int = _int("sourceInterval")
    exchange_data_delayed_by: int = _int("exchangeDataDelayedBy")
    average_analyst_rating: str = _str("averageAnalystRating")
    tradeable: bool = _bool("tradeable")
    crypto_tradeable: bool = _bool("cryptoTradeable")
    corporate_actions: list[Any] = field(
        default_factory=list, metadata={_KEY: "corporateActions", _KIND: list}
    )
    post_market_time: int = _int("postMarketTime")
    regular_market_time: int = _int("regularMarketTime")
    display_name: str = _str("displayName")
    symbol: str = _str("symbol")

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> YahooOptionQuote:
        return _load_flat(cls, data)


@dataclass
class YahooOption:
    contract_symbol: str = _str("contractSymbol")
    strike: float = _float("strike")
    currency: str = _str("currency")
    last_price: float = _float("lastPrice")
    change: float = _float("change")
    percent_change: float = _float("percentChange")
    volume: int = _int("volume")
    open_interest: int = _int("openInterest")
    bid: float = _float("bid")
    ask: float = _float("ask")
    contract_size: str = _str("contractSize")
    expiration: int = _int("expiration")
    last_trade_date: int = _int("lastTradeDate")
    implied_volatility: float = _float("impliedVolatility")
    in_the_money: bool = _bool("inTheMoney")

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> YahooOption:
        return _load_flat(cls, data)


@dataclass
class YahooOptions:
    expiration_date: int = 0
    has_mini_options: bool = False
    calls: list[YahooOption] = field(default_factory=list)
    puts: list[YahooOption] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> YahooOptions:
        data = data or {}
        return cls(
            expiration_date=int(data.get("expirationDate") or 0),
            has_mini_options=bool(data.get("hasMiniOptions") or False),
            calls=[YahooOption.from_dict(item) for item in data.get("calls") or ()],
            puts=[YahooOption.from_dict(item) for item in data.get("puts") or ()],
        )


@dataclass
class YahooOptionResult:
    underlying_symbol: str = ""
    expiration_dates: list[int] = field(default_factory=list)
    strikes: list[float] = field(default_factory=list)
    has_mini_options: bool = False
    quote: YahooOptionQuote = field(default_factory=YahooOptionQuote)
    options: list[YahooOptions] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> YahooOptionResult:
        data = data or {}
        return cls(
            underlying_symbol=str(data.get("underlyingSymbol") or ""),
            expiration_dates=[int(item) for item in data.get("expirationDates") or ()],
            strikes=[float(item) for item in data.get("strikes") or ()],
            has_mini_options=bool(data.get("hasMiniOptions") or False),
            quote=YahooOptionQuote.from_dict(data.get("quote")),
            options=[YahooOptions.from_dict(item) for item in data.get("options") or ()],
        )


@dataclass
class YahooOptionChain:
    result: list[YahooOptionResult] = field(default_factory=list)
    error: Any = None

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> YahooOptionChain:
        data = data or {}
        return cls(
            result=[YahooOptionResult.from_dict(item) for item in data.get("result") or ()],
            error=data.get("error"),
        )


@dataclass
class YahooOptionResponse:
    option_chain: YahooOptionChain = field(default_factory=YahooOptionChain)

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> YahooOptionResponse:
        data = data or {}
        return cls(option_chain=YahooOptionChain.from_dict(data.get("optionChain")))


def parse_option_response(payload: Optional[dict[str, Any]]) -> YahooOptionResponse:
    """Build an option response from decoded options JSON."""
    return YahooOptionResponse.from_dict(payload)


@dataclass(frozen=True)
class OptionDetail:
    contract_symbol: str
    strike: float
    currency: str
    last_price: float
    change: float
    percent_change: float
    volume: int
    open_interest: int
    bid: float
    ask: float
    contract_size: str
    expiration: str
    last_trade_date: str
    implied_volatility: float
    in_the_money: bool

    @classmethod
    def from_option(cls, option: YahooOption) -> OptionDetail:
        """Copy a raw contract, turning its timestamps into local dates."""
        return cls(
            contract_symbol=option.contract_symbol,
            strike=option.strike,
            currency=option.currency,
            last_price=option.last_price,
            change=option.change,
            percent_change=option.percent_change,
            volume=option.volume,
            open_interest=option.open_interest,
            bid=option.bid,
            ask=option.ask,
            contract_size=option.contract_size,
            expiration=_local_date(option.expiration),
            last_trade_date=_local_date(option.last_trade_date),
            implied_volatility=option.implied_volatility,
            in_the_money=option.in_the_money,
        )


@dataclass
class OptionData:
    expiration_date: str
    has_mini_options: bool
    calls: list[OptionDetail] = field(default_factory=list)
    puts: list[OptionDetail] = field(default_factory=list)


class Option:
    """Fetches and reshapes option chains for a symbol."""

    def __init__(self, client: Optional[Client] = None) -> None:
        self.client = client if client is not None else get_client()

    def _fetch(self, symbol: str, params: dict[str, str]) -> YahooOptionResponse:
        endpoint = f"{BASE_URL}/v7/finance/options/{symbol}"
        response = self.client.get(endpoint, params)
        try:
            payload = response.json()
        except ValueError:
            _log.error("Failed to decode option data JSON response", exc_info=True)
            return YahooOptionResponse()
        finally:
            response.close()
        return parse_option_response(payload)

    def get_option_chain(self, symbol: str) -> YahooOptionResponse:
        """Request the option chain for the nearest expiration."""
        return self._fetch(symbol, {})

    def get_option_chain_by_expiration(
        self, symbol: str, expiration_date: str
    ) -> YahooOptionResponse:
        """Request the option chain expiring on a YYYY-MM-DD date."""
        try:
            parsed = datetime.strptime(expiration_date, _DATE_FORMAT).replace(tzinfo=timezone.utc)
        except ValueError:
            _log.error("Failed to parse expiration date %r", expiration_date)
            raise
        return self._fetch(symbol, {"date": str(int(parsed.timestamp()))})

    def transform_data(self, data: YahooOptionResponse) -> OptionData:
        """Reduce a raw response to the first expiration's calls and puts."""
        results = data.option_chain.result
        if not results or not results[0].options:
            raise ValueError("option chain holds no contracts")
        result = results[0]
        chain = result.options[0]
        return OptionData(
            expiration_date=_local_date(chain.expiration_date),
            has_mini_options=result.has_mini_options,
            calls=[OptionDetail.from_option(call) for call in chain.calls],
            puts=[OptionDetail.from_option(put) for put in chain.puts],
        )

    def get_expiration_dates(self, symbol: str) -> list[str]:
        """List the local dates on which the symbol's options expire."""
        results = self.get_option_chain(symbol).option_chain.result
        if not results:
            raise ValueError(f"option chain holds no result for symbol: {symbol}")
        return [_local_date(stamp) for stamp in results[0].expiration_dates]
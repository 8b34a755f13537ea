import re
from datetime import datetime, timezone
from urllib.parse import parse_qs, urlsplit

import pytest
import requests
import responses

from yahoofin.client import CRUMB_URL, Client
from yahoofin.constants import BASE_URL
from yahoofin.option import (
    OptionDetail,
    Option,
    YahooOptionResponse,
    parse_option_response,
)

OPTIONS_URL = f"{BASE_URL}/v7/finance/options/AAPL"


def _noon(year, month, day):
    return int(datetime(year, month, day, 12, tzinfo=timezone.utc).timestamp())


EXPIRY = _noon(2024, 6, 21)
NEXT_EXPIRY = _noon(2024, 6, 28)
TRADED = _noon(2024, 6, 18)


def _contract(symbol, strike, itm):
    return {
        "contractSymbol": symbol,
        "strike": strike,
        "currency": "USD",
        "lastPrice": 3.5,
        "change": 0.25,
        "percentChange": 7.5,
        "volume": 120,
        "openInterest": 3400,
        "bid": 3.4,
        "ask": 3.6,
        "contractSize": "REGULAR",
        "expiration": EXPIRY,
        "lastTradeDate": TRADED,
        "impliedVolatility": 0.31,
        "inTheMoney": itm,
    }


PAYLOAD = {
    "optionChain": {
        "result": [
            {
                "underlyingSymbol": "AAPL",
                "expirationDates": [EXPIRY, NEXT_EXPIRY],
                "strikes": [190, 200],
                "hasMiniOptions": True,
                "quote": {"symbol": "AAPL", "regularMarketPrice": 195.5, "marketCap": 3000000},
                "options": [
                    {
                        "expirationDate": EXPIRY,
                        "hasMiniOptions": False,
                        "calls": [_contract("AAPL240621C00190000", 190, True)],
                        "puts": [
                            _contract("AAPL240621P00190000", 190, False),
                            _contract("AAPL240621P00200000", 200, True),
                        ],
                    }
                ],
            }
        ],
        "error": None,
    }
}


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        rsps.add(responses.GET, re.compile(r"https://fc\.yahoo\.com/?.*"), body="")
        rsps.add(responses.GET, CRUMB_URL, body="token")
        yield rsps


@pytest.fixture
def option():
    return Option(Client(requests.Session()))


def test_parse_maps_contract_fields():
    response = parse_option_response(PAYLOAD)
    result = response.option_chain.result[0]
    assert result.underlying_symbol == "AAPL"
    assert result.strikes == [190.0, 200.0]
    assert result.quote.regular_market_price == 195.5
    assert result.quote.market_cap == 3000000
    call = result.options[0].calls[0]
    assert call.contract_symbol == "AAPL240621C00190000"
    assert call.open_interest == 3400
    assert call.in_the_money is True
    assert call.expiration == EXPIRY


def test_parse_missing_fields_take_defaults():
    response = parse_option_response({"optionChain": {"result": [{}]}})
    result = response.option_chain.result[0]
    assert result.underlying_symbol == ""
    assert result.options == []
    assert result.quote.symbol == ""
    assert result.quote.corporate_actions == []
    assert parse_option_response(None).option_chain.result == []


def test_transform_data_formats_dates():
    data = Option(Client(requests.Session())).transform_data(parse_option_response(PAYLOAD))
    assert data.expiration_date == "2024-06-21"
    assert data.has_mini_options is True
    assert [c.contract_symbol for c in data.calls] == ["AAPL240621C00190000"]
    assert len(data.puts) == 2
    put = data.puts[1]
    assert put.expiration == "2024-06-21"
    assert put.last_trade_date == "2024-06-18"
    assert put.strike == 200.0
    assert put.in_the_money is True


def test_transform_data_empty_raises(option):
    with pytest.raises(ValueError):
        option.transform_data(YahooOptionResponse())


def test_option_detail_copies_contract():
    raw = parse_option_response(PAYLOAD).option_chain.result[0].options[0].calls[0]
    detail = OptionDetail.from_option(raw)
    assert detail.implied_volatility == raw.implied_volatility
    assert detail.contract_size == "REGULAR"
    assert detail.expiration == "2024-06-21"


def test_get_option_chain_sends_crumb(mocked, option):
    mocked.add(responses.GET, OPTIONS_URL, json=PAYLOAD)
    response = option.get_option_chain("AAPL")
    assert response.option_chain.result[0].underlying_symbol == "AAPL"
    request_url = mocked.calls[-1].request.url
    assert request_url.startswith(OPTIONS_URL)
    assert parse_qs(urlsplit(request_url).query)["crumb"] == ["token"]


def test_get_option_chain_by_expiration_sends_date(mocked, option):
    mocked.add(responses.GET, OPTIONS_URL, json=PAYLOAD)
    response = option.get_option_chain_by_expiration("AAPL", "2024-06-21")
    assert response.option_chain.result[0].underlying_symbol == "AAPL"
    assert response.option_chain.result[0].expiration_dates == [EXPIRY, NEXT_EXPIRY]
    query = parse_qs(urlsplit(mocked.calls[-1].request.url).query)
    expected = int(datetime(2024, 6, 21, tzinfo=timezone.utc).timestamp())
    assert query["date"] == [str(expected)]


def test_get_option_chain_by_expiration_bad_date(option):
    with pytest.raises(ValueError):
        option.get_option_chain_by_expiration("AAPL", "21/06/2024")


def test_undecodable_body_gives_empty_response(mocked, option):
    mocked.add(responses.GET, OPTIONS_URL, body="not json")
    response = option.get_option_chain("AAPL")
    assert response.option_chain.result == []


def test_get_expiration_dates(mocked, option):
    mocked.add(responses.GET, OPTIONS_URL, json=PAYLOAD)
    assert option.get_expiration_dates("AAPL") == ["2024-06-21", "2024-06-28"]


def test_get_expiration_dates_without_result_raises(mocked, option):
    mocked.add(responses.GET, OPTIONS_URL, json={"optionChain": {"result": []}})
    with pytest.raises(ValueError):
        option.get_expiration_dates("AAPL")
from urllib.parse import parse_qs, urlsplit

import pytest
import requests
import responses

import yahoofin.client as client_module
from yahoofin.client import COOKIE_URL, CRUMB_URL, Client, get_client
from yahoofin.constants import BASE_URL, USER_AGENTS

CHART_URL = BASE_URL + "/v8/finance/chart/AAPL"


def _query(call):
    return parse_qs(urlsplit(call.request.url).query)


def _count(rsps, url):
    return sum(1 for call in rsps.calls if call.request.url.startswith(url))


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        rsps.add(responses.GET, COOKIE_URL, body="", status=404)
        rsps.add(responses.GET, CRUMB_URL, body="crumb-value")
        rsps.add(responses.GET, CHART_URL, json={"ok": True})
        yield rsps


def test_get_returns_body_and_attaches_crumb(mocked):
    client = Client()
    response = client.get(CHART_URL, {"interval": "1d"})
    assert response.json() == {"ok": True}
    query = _query(mocked.calls[-1])
    assert query["crumb"] == ["crumb-value"]
    assert query["interval"] == ["1d"]
    assert client.crumb == "crumb-value"


def test_crumb_is_fetched_once(mocked):
    client = Client()
    for _ in range(3):
        client.get(CHART_URL)
    assert _count(mocked, CRUMB_URL) == 1
    assert _count(mocked, CHART_URL) == 3
    assert client.call_count == 3


def test_browser_headers_are_sent(mocked):
    client = Client()
    response = client.get(CHART_URL)
    headers = response.request.headers
    assert headers["User-Agent"] in USER_AGENTS
    assert headers["Referer"] == "https://finance.yahoo.com/"
    assert headers["Accept"] == "application/json, text/plain, */*"
    assert response.json() == {"ok": True}


def test_caller_params_are_not_mutated(mocked):
    client = Client()
    params = {"range": "1mo"}
    client.get(CHART_URL, params)
    assert params == {"range": "1mo"}


def test_session_rotates_at_threshold(mocked, monkeypatch):
    monkeypatch.setattr(client_module, "ROTATE_THRESHOLD", 2)
    client = Client()
    results = [client.get(CHART_URL) for _ in range(3)]
    assert [r.json() for r in results] == [{"ok": True}] * 3
    last_query = parse_qs(urlsplit(results[-1].request.url).query)
    assert last_query["crumb"] == ["crumb-value"]
    assert client.call_count == 3
    assert client.crumb == "crumb-value"
    assert _count(mocked, CRUMB_URL) == 2


def test_crumb_failure_is_tolerated():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        rsps.add(responses.GET, CHART_URL, json={"ok": True})
        client = Client()
        response = client.get(CHART_URL, {"interval": "1d"})
        assert response.json() == {"ok": True}
        assert "crumb" not in _query(rsps.calls[-1])
        assert client.crumb == ""


def test_request_failure_raises():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        rsps.add(responses.GET, CRUMB_URL, body="crumb-value")
        client = Client()
        with pytest.raises(requests.ConnectionError):
            client.get(CHART_URL)


def test_get_client_is_shared():
    first = get_client()
    ids = {id(get_client()) for _ in range(3)}
    assert ids == {id(first)}
    assert isinstance(first, Client)
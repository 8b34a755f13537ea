# yahoofin

`yahoofin` is a small Python client for Yahoo Finance. For a ticker symbol it
fetches daily or intraday price history, option chains and option expiration
dates. It also handles the cookie and crumb that Yahoo requires. Both are
fetched when first needed and discarded every 1000 requests, then fetched
again.

## Installation

```
pip install .
```

To install the test dependencies too:

```
pip install ".[test]"
```

## Usage

```python
from yahoofin.ticker import Ticker
from yahoofin.history import HistoryQuery

ticker = Ticker("AAPL")

# Daily, weekly ("wk") and monthly ("mo") intervals give keys of the form
# "YYYY-MM-DD". Intraday intervals give keys of the form
# "YYYY-MM-DD HH:MM:SS". Keys are in local time.
prices = ticker.history(HistoryQuery(range="1mo", interval="1d"))
for day, bar in sorted(prices.items()):
    print(day, bar.open, bar.high, bar.low, bar.close, bar.volume)

# Option expiration dates, as "YYYY-MM-DD" strings.
print(ticker.expiration_dates())

# The chain for the nearest expiration, or for one given date.
chain = ticker.option_chain()
print(chain.expiration_date, chain.has_mini_options, len(chain.calls), len(chain.puts))

chain = ticker.option_chain_by_expiration("2025-01-17")
```

`Ticker.history()` can be called without a query. The defaults of a
`HistoryQuery` are:

- `range`: `"1mo"`, but only when no `start` is given.
- `interval`: `"1d"`.
- `start`: unset. When given as `YYYY-MM-DD`, it becomes the Unix timestamp
  of midnight UTC on that day. A `start` that cannot be parsed is sent as
  `"default"` and a warning is logged.
- `end`: the current time.

Each price bar is a frozen `PriceData` with `open`, `high`, `low`, `close` and
`volume`. An option chain is an `OptionData` whose `calls` and `puts` are
`OptionDetail` records. Their `expiration` and `last_trade_date` are local
`YYYY-MM-DD` dates.

`Ticker` uses the shared client by default. You can pass your own as
`Ticker("AAPL", client)`.

## Errors

- `Ticker.history` raises `yahoofin.history.NoDataError`, a `LookupError`,
  when the chart endpoint returns no result for the symbol. It raises
  `ValueError` when the response is not valid JSON, or when the quote arrays
  are shorter than the list of timestamps.
- `Ticker.option_chain_by_expiration` raises `ValueError` for a date that is
  not `YYYY-MM-DD`.
- `Ticker.option_chain` and `Ticker.option_chain_by_expiration` raise
  `ValueError` when the response holds no contracts. An options response that
  is not valid JSON is logged and treated as empty.
- `Ticker.expiration_dates` raises `ValueError` when the response holds no
  result.
- Network failures on the data request itself raise the matching
  `requests.RequestException`. Failures while fetching the cookie or the
  crumb are logged, and the request goes ahead without them.

## Lower-level access

- `yahoofin.client.get_client()` returns the process-wide shared `Client`.
- `Client(session)` wraps a `requests.Session`, or a new one if none is
  given. Its `get(url, params)` attaches the cookies, the crumb and
  browser-like headers. `Client.crumb` and `Client.call_count` show its state.
- `yahoofin.history.History` and `yahoofin.option.Option` build the requests
  and decode them into dataclasses.
- `parse_history_response` and `parse_option_response` turn decoded JSON
  payloads into those dataclasses.
- `yahoofin.constants` holds `BASE_URL`, `USER_AGENTS` and
  `random_user_agent()`.

## What it does not do

The package is a library only. It has no command-line tool. It does not cache
or store data, and it does not retry failed requests.

## Running the tests

```
pytest
```
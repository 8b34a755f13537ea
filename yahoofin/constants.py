"""Endpoints and browser identities used when talking to Yahoo Finance."""

from __future__ import annotations

import random

BASE_URL = "https://query2.finance.yahoo.com"

_CHROME_VERSION = "124.0.6367.91"
_EDGE_VERSION = "124.0.2478.80"
_FIREFOX_VERSION = "125.0"
_SAFARI_VERSION = "17.4"
_BLINK_ENGINE = "AppleWebKit/537.36 (KHTML, like Gecko)"
_WEBKIT_ENGINE = "AppleWebKit/605.1.15 (KHTML, like Gecko)"

_WINDOWS = "Windows NT 10.0; Win64; x64"
_MAC_UNDERSCORE = "Macintosh; Intel Mac OS X 14_4"
_MAC_DOTTED = "Macintosh; Intel Mac OS X 14.4"
_LINUX = "X11; Linux x86_64"


def _chrome(platform: str, *, mobile: bool = False, before: str = "", after: str = "") -> str:
    safari = "Mobile Safari/537.36" if mobile else "Safari/537.36"
    agent = f"Mozilla/5.0 ({platform}) {_BLINK_ENGINE} {before}Chrome/{_CHROME_VERSION} {safari}"
    return f"{agent} {after}" if after else agent


def _firefox(platform: str) -> str:
    return (
        f"Mozilla/5.0 ({platform}; rv:{_FIREFOX_VERSION}) "
        f"Gecko/20100101 Firefox/{_FIREFOX_VERSION}"
    )


def _safari(platform: str, tail: str) -> str:
    return f"Mozilla/5.0 ({platform}) {_WEBKIT_ENGINE} Version/{_SAFARI_VERSION} {tail}"


USER_AGENTS: tuple[str, ...] = (
    _chrome(_WINDOWS),
    _chrome(_MAC_UNDERSCORE),
    _chrome(_LINUX),
    _chrome("Linux; Android 13; SM-S918N", mobile=True),
    _firefox(_WINDOWS),
    _firefox(_MAC_DOTTED),
    _firefox(_LINUX),
    _safari(_MAC_UNDERSCORE, "Safari/605.1.15"),
    _safari("iPhone; CPU iPhone OS 17_4_1 like Mac OS X", "Mobile/15E148 Safari/604.1"),
    _chrome(_WINDOWS, after=f"Edg/{_EDGE_VERSION}"),
    _chrome(_MAC_UNDERSCORE, after=f"Edg/{_EDGE_VERSION}"),
    _chrome("Linux; Android 14; SM-G991N", mobile=True, before="SamsungBrowser/25.0 "),
)


def random_user_agent() -> str:
    """Return one of the known browser user-agent strings at random."""
    return random.choice(USER_AGENTS)
# feeds/tradeogre.py
"""
MWCUSDT Feed Module — TradeOgre MWC-BTC trade history x BTC-USDT ticker

MWC trades thinly and only against BTC, so its USDT price is the last
MWC-BTC trade multiplied by the BTC-USDT ticker price, both from TradeOgre.

Both responses are untrusted: the history must be a non-empty array whose
last element carries an integer "date" and a decimal-string "price"; the
ticker must be an object with "success": true and a decimal-string "price".
The product keeps every fractional digit the two inputs carried, minus
trailing zeros.

Usage:
  python3 -m price_oracle.feeds.tradeogre
  python3 -m price_oracle.feeds.tradeogre --no-tor
"""
import argparse
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from price_oracle import config
from price_oracle.decimals import compose_price, fractional_digits, parse_price, working_context
from price_oracle.errors import (
    InvalidFieldError,
    InvalidShapeError,
    MalformedResponseError,
    PriceOracleError,
    RequestConstructionError,
    TransportError,
)
from price_oracle.transport import HTTPS_PORT, TorTransport

log = logging.getLogger("price-oracle.tradeogre")

HOST = "tradeogre.com"
ASSET = "MWC"
QUOTE = "BTC"
STABLE = "USDT"

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
MIN_DATE = (datetime.min.replace(tzinfo=timezone.utc) - EPOCH) // timedelta(seconds=1)
MAX_DATE = (datetime.max.replace(tzinfo=timezone.utc) - EPOCH) // timedelta(seconds=1)


@dataclass(frozen=True)
class OraclePrice:
    timestamp: datetime
    price: str


def history_path(asset=ASSET, quote=QUOTE):
    return f"/api/v1/history/{asset}-{quote}"


def ticker_path(quote=QUOTE, stable=STABLE):
    return f"/api/v1/ticker/{quote}-{stable}"


def utc_now():
    return datetime.now(timezone.utc)


# === Request preparation & execution ===

def prepare_requests(transport, asset=ASSET, quote=QUOTE, stable=STABLE):
    """Prepare both requests; nothing is sent until execute_requests()."""
    try:
        history = transport.prepare(HOST, HTTPS_PORT, history_path(asset, quote))
    except RequestConstructionError as e:
        raise RequestConstructionError(f"creating feed-A request failed: {e}") from e
    try:
        ticker = transport.prepare(HOST, HTTPS_PORT, ticker_path(quote, stable))
    except RequestConstructionError as e:
        raise RequestConstructionError(f"creating feed-B request failed: {e}") from e
    return history, ticker


def execute_requests(transport, history, ticker):
    # The transport does not say which request failed, so neither do we
    if not transport.execute_all() or not history or not ticker:
        raise TransportError("performing TradeOgre requests failed")


# === Feed A: trade history ===

def _is_int64(value):
    return isinstance(value, int) and not isinstance(value, bool) and INT64_MIN <= value <= INT64_MAX


def observation_timestamp(date, now):
    """Timestamp for an epoch-seconds date, clamped to ``now`` if in the future."""
    if not MIN_DATE <= date <= MAX_DATE:
        raise InvalidFieldError("feed-A date out of range")
    timestamp = EPOCH + timedelta(seconds=date)
    current = now()
    if timestamp > current:
        return current
    return timestamp


def extract_history(body, ctx, now=utc_now):
    """Return (timestamp, price, fractional digits) of the most recent trade."""
    try:
        document = json.loads(body)
    except (ValueError, RecursionError) as e:
        raise MalformedResponseError("feed-A not parseable") from e

    if not isinstance(document, list) or not document:
        raise InvalidShapeError("feed-A empty or not an array")

    # Most recent trade is last, whatever the dates say
    latest = document[-1]
    if (
        not isinstance(latest, dict)
        or not _is_int64(latest.get("date"))
        or not isinstance(latest.get("price"), str)
    ):
        raise InvalidShapeError("feed-A observation malformed")

    timestamp = observation_timestamp(latest["date"], now)
    literal = latest["price"]
    price = parse_price(literal, ctx, "feed-A price not numeric", "feed-A price invalid")
    return timestamp, price, fractional_digits(literal)


# === Feed B: ticker ===

def extract_ticker(body, ctx):
    """Return (price, fractional digits) of the ticker."""
    try:
        document = json.loads(body)
    except (ValueError, RecursionError) as e:
        raise MalformedResponseError("feed-B not parseable") from e

    if (
        not isinstance(document, dict)
        or document.get("success") is not True
        or not isinstance(document.get("price"), str)
    ):
        raise InvalidShapeError("feed-B malformed or unsuccessful")

    literal = document["price"]
    price = parse_price(literal, ctx, "feed-B price invalid", "feed-B price invalid")
    return price, fractional_digits(literal)


# === Main price function ===

def get_price(transport, asset=ASSET, quote=QUOTE, stable=STABLE, now=None):
    """Fetch <asset>-<stable> as <asset>-<quote> history x <quote>-<stable> ticker.

    Returns an OraclePrice. Raises a PriceOracleError subclass on any
    failure; there is never a partial result.
    """
    pair = f"{asset}{stable}"
    now = now or utc_now
    try:
        history, ticker = prepare_requests(transport, asset, quote, stable)
        execute_requests(transport, history, ticker)
        with working_context() as ctx:
            timestamp, price_a, precision_a = extract_history(history, ctx, now)
            price_b, precision_b = extract_ticker(ticker, ctx)
            price = compose_price(price_a, price_b, precision_a + precision_b, ctx)
    except PriceOracleError as e:
        log.warning(f"{pair}: {type(e).__name__}: {e}")
        raise

    log.info(f"{pair}: {price} at {timestamp:%Y-%m-%dT%H:%M:%SZ}")
    return OraclePrice(timestamp=timestamp, price=price)


def get_mwcusdt_price(transport=None, now=None, proxy_host=None, proxy_port=None, use_tor=None):
    """MWCUSDT over the given transport, or over a fresh Tor transport closed afterwards."""
    if transport is not None:
        return get_price(transport, now=now)
    with TorTransport(proxy_host=proxy_host, proxy_port=proxy_port, use_tor=use_tor) as transport:
        return get_price(transport, now=now)


# === CLI test ===

def main(argv=None):
    parser = argparse.ArgumentParser(description="Fetch the TradeOgre MWCUSDT price")
    parser.add_argument("--tor-host", default=config.TOR_HOST, help="Tor SOCKS proxy host")
    parser.add_argument("--tor-port", type=int, default=config.TOR_PORT, help="Tor SOCKS proxy port")
    parser.add_argument("--no-tor", action="store_true", default=not config.USE_TOR, help="Connect directly, without Tor")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format=config.LOG_FORMAT, datefmt=config.LOG_DATEFMT)

    try:
        result = get_mwcusdt_price(
            proxy_host=args.tor_host,
            proxy_port=args.tor_port,
            use_tor=not args.no_tor,
        )
    except PriceOracleError as e:
        print(f"ERROR: {e}")
        return 1

    print("=== Result ===")
    print(f"  Price:     {result.price} USDT")
    print(f"  Timestamp: {result.timestamp:%Y-%m-%dT%H:%M:%SZ}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

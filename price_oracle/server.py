"""
TradeOgre Price Oracle — signed MWCUSDT endpoint
FastAPI application serving the feed as a signed canonical string.
"""
import argparse
import functools
import hashlib
import base64
import logging

from fastapi import FastAPI
from fastapi.responses import JSONResponse
import uvicorn

from price_oracle import __version__, config
from price_oracle.decimals import fractional_digits
from price_oracle.errors import PriceOracleError
from price_oracle.feeds.tradeogre import get_mwcusdt_price
from price_oracle.keys import load_or_create_key, pubkey_hex

log = logging.getLogger("price-oracle.server")

app = FastAPI(
    title="TradeOgre Price Oracle",
    description="MWCUSDT from TradeOgre MWC-BTC history and BTC-USDT ticker, signed",
)

ORACLES = {
    "mwcusdt": {
        "feed": get_mwcusdt_price,
        "domain": "MWCUSDT",
        "quote": "USDT",
        "nonce": "923456",
        "source": "tradeogre",
        "method": "product",
    },
}

_signing_key = None


def signing_key():
    global _signing_key
    if _signing_key is None:
        _signing_key = load_or_create_key()
    return _signing_key


def canonical_string(cfg, result):
    decimals = fractional_digits(result.price)
    ts = result.timestamp.strftime("%Y-%m-%dT%H:%M:%SZ")
    return (
        f"v1|{cfg['domain']}|{result.price}|{cfg['quote']}|{decimals}|{ts}"
        f"|{cfg['nonce']}|{cfg['source']}|{cfg['method']}"
    )


def sign_and_respond(oracle_key):
    cfg = ORACLES[oracle_key]
    try:
        result = cfg["feed"]()
    except PriceOracleError as e:
        return JSONResponse({"error": str(e), "kind": e.kind}, status_code=502)
    canonical = canonical_string(cfg, result)
    sk = signing_key()
    h = hashlib.sha256(canonical.encode()).digest()
    sig = sk.sign_digest(h)
    return JSONResponse({
        "domain": cfg["domain"],
        "canonical": canonical,
        "signature": base64.b64encode(sig).decode(),
        "pubkey": pubkey_hex(sk),
    })


@app.get("/oracle/mwcusdt")
def oracle_mwcusdt():
    return sign_and_respond("mwcusdt")


@app.get("/health")
def health():
    return {
        "status": "ok",
        "version": __version__,
        "pubkey": pubkey_hex(signing_key()),
        "endpoints": [f"/oracle/{key}" for key in ORACLES],
    }


@app.get("/oracle/status")
def oracle_status():
    status = {}
    for key, cfg in ORACLES.items():
        try:
            result = cfg["feed"]()
            status[key] = {
                "status": "ok",
                "price": result.price,
                "timestamp": result.timestamp.strftime("%Y-%m-%dT%H:%M:%SZ"),
            }
        except PriceOracleError as e:
            status[key] = {
                "status": "error",
                "kind": e.kind,
                "error": str(e),
            }
    return JSONResponse(status)


def main(argv=None):
    parser = argparse.ArgumentParser(description="TradeOgre price oracle server")
    parser.add_argument("--host", default="0.0.0.0", help="Listen address")
    parser.add_argument("--port", type=int, default=config.PORT, help="Listen port")
    parser.add_argument("--tor-host", default=config.TOR_HOST, help="Tor SOCKS proxy host")
    parser.add_argument("--tor-port", type=int, default=config.TOR_PORT, help="Tor SOCKS proxy port")
    parser.add_argument("--no-tor", action="store_true", default=not config.USE_TOR, help="Connect directly, without Tor")
    args = parser.parse_args(argv)

    ORACLES["mwcusdt"]["feed"] = functools.partial(
        get_mwcusdt_price,
        proxy_host=args.tor_host,
        proxy_port=args.tor_port,
        use_tor=not args.no_tor,
    )

    logging.basicConfig(level=logging.INFO, format=config.LOG_FORMAT, datefmt=config.LOG_DATEFMT)
    log.info(f"TradeOgre Price Oracle v{__version__} starting on :{args.port}")
    log.info(f"  Public key: {pubkey_hex(signing_key())}")
    tor = "disabled" if args.no_tor else f"{args.tor_host}:{args.tor_port}"
    log.info(f"  Tor proxy:  {tor}")
    for key, cfg in ORACLES.items():
        log.info(f"    /oracle/{key} — {cfg['domain']} ({cfg['method']})")
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()

# transport.py
"""
HTTPS transport that routes every request through a Tor SOCKS proxy.

Requests are prepared one at a time and then executed together. Each
prepared request owns a bytearray that receives the response body.
"""
import logging
from concurrent.futures import ThreadPoolExecutor

import requests

from price_oracle import config
from price_oracle.errors import RequestConstructionError

log = logging.getLogger("price-oracle.transport")

HTTPS_PORT = 443


class PreparedRequest:
    def __init__(self, url, body):
        self.url = url
        self.body = body


def build_url(host, port, path):
    if not host or "/" in host or ":" in host:
        raise RequestConstructionError(f"invalid host: {host!r}")
    if not isinstance(port, int) or isinstance(port, bool) or not 0 < port < 65536:
        raise RequestConstructionError(f"invalid port: {port!r}")
    if not path.startswith("/"):
        raise RequestConstructionError(f"invalid path: {path!r}")
    if port == HTTPS_PORT:
        return f"https://{host}{path}"
    return f"https://{host}:{port}{path}"


class TorTransport:
    """Executes prepared GET requests concurrently over a SOCKS5 proxy.

    DNS is resolved by the proxy (socks5h). Failures are reported only as a
    False return from execute_all(); the reason is logged per request.
    """

    def __init__(self, proxy_host=None, proxy_port=None, use_tor=None, timeout=None, session=None):
        self.proxy_host = proxy_host or config.TOR_HOST
        self.proxy_port = proxy_port or config.TOR_PORT
        self.use_tor = config.USE_TOR if use_tor is None else use_tor
        self.timeout = timeout or config.HTTP_TIMEOUT
        self.session = session or requests.Session()
        if self.use_tor:
            proxy = f"socks5h://{self.proxy_host}:{self.proxy_port}"
            self.session.proxies.update({"http": proxy, "https": proxy})
        self._pending = []

    def prepare(self, host, port, path):
        """Queue a GET request and return the buffer its body will land in."""
        request = PreparedRequest(build_url(host, port, path), bytearray())
        self._pending.append(request)
        return request.body

    def _fetch(self, request):
        try:
            r = self.session.get(request.url, timeout=self.timeout)
            r.raise_for_status()
        except requests.RequestException as e:
            log.warning(f"Request failed: {request.url} ({type(e).__name__}: {e})")
            return False
        request.body[:] = r.content
        return True

    def execute_all(self):
        """Run every prepared request; True only if all of them succeeded."""
        pending, self._pending = self._pending, []
        if not pending:
            return True
        with ThreadPoolExecutor(max_workers=len(pending)) as pool:
            results = list(pool.map(self._fetch, pending))
        return all(results)

    def close(self):
        self._pending = []
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

# config.py
"""
Runtime settings, read once from the environment.
"""
import os
from pathlib import Path

TOR_HOST = os.environ.get("ORACLE_TOR_HOST", "127.0.0.1")
TOR_PORT = int(os.environ.get("ORACLE_TOR_PORT", "9050"))
USE_TOR = os.environ.get("ORACLE_USE_TOR", "1") != "0"

HTTP_TIMEOUT = float(os.environ.get("ORACLE_HTTP_TIMEOUT", "10"))

PORT = int(os.environ.get("ORACLE_PORT", "9110"))
KEY_PATH = Path(os.environ.get(
    "ORACLE_KEY_PATH",
    str(Path(__file__).parent / "keys" / "oracle_secp256k1.key"),
))

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%SZ"

# price_oracle/keys/__init__.py
"""
Persistent secp256k1 signing key for the oracle.
Key is generated once and stored at ORACLE_KEY_PATH so consumers can pin it.
"""

import os
from pathlib import Path
from ecdsa import SigningKey, SECP256k1

from price_oracle import config


def load_or_create_key(path=None) -> SigningKey:
    """Load existing secp256k1 key or generate a new persistent one."""
    key_path = Path(path or config.KEY_PATH)
    if key_path.exists():
        sk_hex = key_path.read_text().strip()
        return SigningKey.from_string(bytes.fromhex(sk_hex), curve=SECP256k1)

    sk = SigningKey.generate(curve=SECP256k1)
    key_path.parent.mkdir(parents=True, exist_ok=True)
    key_path.write_text(sk.to_string().hex())
    os.chmod(str(key_path), 0o600)
    return sk


def pubkey_hex(sk: SigningKey) -> str:
    return sk.get_verifying_key().to_string("compressed").hex()

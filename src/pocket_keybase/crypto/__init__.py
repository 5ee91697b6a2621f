"""
Cryptographic primitives for the keybase.

Provides Ed25519 signing and the PBKDF2/AES-CTR passphrase encryption used
for private keys at rest.
"""

from .ed25519 import (
    Ed25519Error,
    Ed25519KeyPair,
    Ed25519PrivateKey,
    Ed25519PublicKey,
    generate_keypair,
    sign,
    verify,
)
from .cipher import derive_key, encrypt, decrypt, passphrase_salt

__all__ = [
    "Ed25519Error",
    "Ed25519KeyPair",
    "Ed25519PrivateKey",
    "Ed25519PublicKey",
    "generate_keypair",
    "sign",
    "verify",
    "derive_key",
    "encrypt",
    "decrypt",
    "passphrase_salt",
]

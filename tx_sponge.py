"""
tx_sponge.py
Arweave Transactions – Signing Engine
--------------------------------------------------------
Implements:
    - Sponge: anything that absorbs an ordered stream of byte chunks
    - Signer   : RSA-PSS signature over the absorbed message
    - Verifier : RSA-PSS check over the absorbed message
--------------------------------------------------------
Absorbed chunks go into a streaming SHA-256 context; the digest
is then signed as a pre-hashed value, which gives the same result
as RSA-PSS/SHA-256 applied to the whole concatenated message.
PSS uses MGF1(SHA-256). Signing salt = 32 bytes, verification
recovers the salt length from the signature.
"""

from typing import Protocol

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa, utils

from tx_errors import CryptoError


class Sponge(Protocol):

    def absorb(self, chunk: bytes) -> None:
        ...


def _pss(salt_length) -> padding.PSS:
    return padding.PSS(mgf=padding.MGF1(hashes.SHA256()), salt_length=salt_length)


class _Absorber:

    def __init__(self):
        self._hash = hashes.Hash(hashes.SHA256())

    def absorb(self, chunk: bytes) -> None:
        self._hash.update(bytes(chunk))

    def _squeeze(self) -> bytes:
        return self._hash.finalize()


class Signer(_Absorber):
    """Single use: `sign` finalizes the absorbed message."""

    def __init__(self, key: rsa.RSAPrivateKey):
        super().__init__()
        self._key = key

    def sign(self) -> bytes:
        digest = self._squeeze()
        try:
            return self._key.sign(
                digest,
                _pss(padding.PSS.DIGEST_LENGTH),
                utils.Prehashed(hashes.SHA256()),
            )
        except (ValueError, UnsupportedAlgorithm) as e:
            raise CryptoError(f"signing failed: {e}") from e


class Verifier(_Absorber):
    """Single use: `verify` finalizes the absorbed message."""

    def __init__(self, key: rsa.RSAPublicKey):
        super().__init__()
        self._key = key

    def verify(self, signature: bytes) -> bool:
        digest = self._squeeze()
        try:
            self._key.verify(
                bytes(signature),
                digest,
                _pss(padding.PSS.AUTO),
                utils.Prehashed(hashes.SHA256()),
            )
        except InvalidSignature:
            return False
        return True

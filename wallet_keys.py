"""
wallet_keys.py
Arweave Transactions – Key Management
--------------------------------------------------------
Implements:
    - RSA-4096 key generation (public exponent 65537)
    - Owner: the RSA public modulus as carried on the wire
    - Address derivation: SHA-256(modulus bytes)
--------------------------------------------------------
Keys are never written anywhere by this module; storing and
retrieving them is left to the caller.
"""

import hashlib

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import rsa

from tx_errors import CryptoError, InvalidValue
from tx_primitives import Address, ByteString


PUBLIC_EXPONENT = 65537
KEY_SIZE = 4096


# ================================================================
# Owner
# ================================================================

class Owner(ByteString):
    """
    Big-endian bytes of an RSA modulus. The exponent is implied:
    every owner uses 65537.
    """

    KIND = "owner"
    __slots__ = ()

    @classmethod
    def from_modulus(cls, n: int) -> "Owner":
        if n <= 0:
            raise InvalidValue(cls.KIND, "modulus must be positive")
        return cls(n.to_bytes((n.bit_length() + 7) // 8, "big"))

    @classmethod
    def from_public_key(cls, key: rsa.RSAPublicKey) -> "Owner":
        numbers = key.public_numbers()
        if numbers.e != PUBLIC_EXPONENT:
            raise InvalidValue(cls.KIND, f"public exponent must be {PUBLIC_EXPONENT}")
        return cls.from_modulus(numbers.n)

    @property
    def modulus(self) -> int:
        return int.from_bytes(self.raw, "big")

    def address(self) -> Address:
        return Address(hashlib.sha256(self.raw).digest())

    def public_key(self) -> rsa.RSAPublicKey:
        try:
            return rsa.RSAPublicNumbers(PUBLIC_EXPONENT, self.modulus).public_key()
        except (ValueError, UnsupportedAlgorithm) as e:
            raise CryptoError(f"cannot build RSA public key from owner: {e}") from e

    def __repr__(self):
        return f"Owner({self.address().encode()})"


# ================================================================
# Wallet
# ================================================================

class Wallet:
    """
    A private key together with its Owner and Address.

    The key object is immutable; one Wallet may sign from several
    threads at once, since `cryptography` creates a fresh signing
    context for every call.
    """

    __slots__ = ("_key", "_owner", "_address")

    def __init__(self, private_key: rsa.RSAPrivateKey):
        self._key = private_key
        self._owner = Owner.from_public_key(private_key.public_key())
        self._address = self._owner.address()

    @classmethod
    def generate(cls) -> "Wallet":
        try:
            key = rsa.generate_private_key(
                public_exponent=PUBLIC_EXPONENT,
                key_size=KEY_SIZE,
            )
        except (ValueError, UnsupportedAlgorithm) as e:
            raise CryptoError(f"key generation failed: {e}") from e
        return cls(key)

    @property
    def key(self) -> rsa.RSAPrivateKey:
        return self._key

    @property
    def owner(self) -> Owner:
        return self._owner

    @property
    def address(self) -> Address:
        return self._address

    def __copy__(self):
        raise TypeError("wallet key material is not copied implicitly")

    def __deepcopy__(self, memo):
        raise TypeError("wallet key material is not copied implicitly")

    def __repr__(self):
        return f"Wallet({self._address.encode()})"

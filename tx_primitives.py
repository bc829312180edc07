"""
tx_primitives.py
Arweave Transactions – Typed Primitives
--------------------------------------------------------
Implements:
    - URL-safe Base64 (no padding) codec
    - ByteString: named, optionally length-checked binary blob
    - BlockHash (48 bytes), TxHash (32 bytes), Address (32 bytes)
    - Data, tag Name / Value, Signature
    - Height: saturating block ordinal
    - Winstons: arbitrary-precision token amount
    - EmptyStringAsNone: optional value whose wire form for
      "absent" is the empty string
--------------------------------------------------------
"""

import re
import base64
import string
import hashlib
import unicodedata
from dataclasses import dataclass
from functools import total_ordering
from typing import Generic, Optional, TypeVar

from tx_errors import InvalidValue


# ================================================================
# Base64 Helpers
# ================================================================

_B64URL_ALPHABET = re.compile(r"[A-Za-z0-9_-]*")


def _readable(text: str) -> bool:
    """Letters, digits, punctuation and whitespace only (any script)."""
    return all(
        ch.isalnum() or ch.isspace() or ch in string.punctuation
        or unicodedata.category(ch).startswith("P")
        for ch in text
    )


def b64url_encode(data: bytes) -> str:
    """Encode bytes to URL-safe Base64 without '=' padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(thing: str, text: str) -> bytes:
    """
    Strict inverse of b64url_encode.
    Rejects padding, foreign characters and non-canonical trailing bits.
    """
    if (not isinstance(text, str)
            or not _B64URL_ALPHABET.fullmatch(text)
            or len(text) % 4 == 1):
        raise InvalidValue(thing, "invalid format")

    raw = base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))

    if b64url_encode(raw) != text:
        raise InvalidValue(thing, "invalid format")
    return raw


# ================================================================
# Byte Primitive
# ================================================================

@total_ordering
class ByteString:
    """
    Binary blob with a static kind label (used in error messages)
    and an optional fixed length enforced on construction.
    """

    KIND = "bytes"
    LENGTH: Optional[int] = None

    __slots__ = ("_raw",)

    def __init__(self, data: bytes = b""):
        data = bytes(data)
        if self.LENGTH is not None and len(data) != self.LENGTH:
            raise InvalidValue(self.KIND, "invalid length")
        self._raw = data

    @classmethod
    def decode(cls, text: str):
        return cls(b64url_decode(cls.KIND, text))

    def encode(self) -> str:
        return b64url_encode(self._raw)

    @property
    def raw(self) -> bytes:
        return self._raw

    def __bytes__(self) -> bytes:
        return self._raw

    def __len__(self) -> int:
        return len(self._raw)

    def __eq__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self._raw == other._raw

    def __lt__(self, other):
        if type(other) is not type(self):
            return NotImplemented
        return self._raw < other._raw

    def __hash__(self):
        return hash((type(self).__name__, self._raw))

    def __str__(self):
        return self.encode()

    def __repr__(self):
        try:
            shown = self._raw.decode("utf-8")
        except UnicodeDecodeError:
            shown = None
        if shown is None or not _readable(shown):
            shown = self.encode()
        return f"{type(self).__name__}({shown})"


class BlockHash(ByteString):
    KIND = "block hash"
    LENGTH = 48
    __slots__ = ()


class TxHash(ByteString):
    KIND = "transaction hash"
    LENGTH = 32
    __slots__ = ()


class Address(ByteString):
    """Account identifier: SHA-256 of the owner's RSA modulus."""
    KIND = "address"
    LENGTH = 32
    __slots__ = ()


class Data(ByteString):
    KIND = "data"
    __slots__ = ()


class Name(ByteString):
    KIND = "tag name"
    __slots__ = ()


class Value(ByteString):
    KIND = "tag value"
    __slots__ = ()


class Signature(ByteString):
    KIND = "signature"
    __slots__ = ()

    def to_transaction_hash(self) -> TxHash:
        """A transaction's id is SHA-256 of its signature."""
        return TxHash(hashlib.sha256(self.raw).digest())


# ================================================================
# Decimal Helpers
# ================================================================

# int <-> str conversion is capped (sys.int_max_str_digits);
# go through fixed-size chunks to stay below it.
_CHUNK_DIGITS = 1000
_CHUNK_BASE = 10 ** _CHUNK_DIGITS


def _to_decimal(n: int) -> str:
    chunks = []
    while n >= _CHUNK_BASE:
        n, low = divmod(n, _CHUNK_BASE)
        chunks.append(str(low).zfill(_CHUNK_DIGITS))
    chunks.append(str(n))
    return "".join(reversed(chunks))


def _from_decimal(text: str) -> int:
    head = len(text) % _CHUNK_DIGITS or _CHUNK_DIGITS
    n = int(text[:head])
    for i in range(head, len(text), _CHUNK_DIGITS):
        n = n * _CHUNK_BASE + int(text[i:i + _CHUNK_DIGITS])
    return n


def _check_natural(thing: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidValue(thing, f"expected an integer, got {type(value).__name__}")
    if value < 0:
        raise InvalidValue(thing, "negative")


# ================================================================
# Height
# ================================================================

@dataclass(frozen=True, order=True)
class Height:
    value: int

    def __post_init__(self):
        _check_natural("height", self.value)

    def __add__(self, other: "Height") -> "Height":
        return Height(self.value + other.value)

    def __sub__(self, other: "Height") -> "Height":
        # saturates at zero
        return Height(max(self.value - other.value, 0))

    def __int__(self):
        return self.value

    def __str__(self):
        return _to_decimal(self.value)

    def __repr__(self):
        return f"Height({self})"


# ================================================================
# Winstons
# ================================================================

_DECIMAL = re.compile(r"[0-9]+", re.ASCII)

U64_MAX = 2 ** 64 - 1


@dataclass(frozen=True, order=True)
class Winstons:
    """Token amount in winstons. Non-negative, unbounded."""

    value: int = 0

    def __post_init__(self):
        _check_natural("winstons", self.value)

    @classmethod
    def decode(cls, text: str) -> "Winstons":
        if not isinstance(text, str) or not _DECIMAL.fullmatch(text):
            raise InvalidValue("winstons", "invalid format")
        return cls(_from_decimal(text))

    def encode(self) -> str:
        return _to_decimal(self.value)

    @classmethod
    def from_u64(cls, n: int) -> "Winstons":
        if not 0 <= n <= U64_MAX:
            raise InvalidValue("winstons", "out of 64-bit range")
        return cls(n)

    def to_u64(self) -> int:
        """
        Lossy numeric encoding: amounts above 2**64 - 1 saturate.
        Only safe where the amount is known to fit in 64 bits.
        """
        return min(self.value, U64_MAX)

    def __add__(self, other: "Winstons") -> "Winstons":
        if not isinstance(other, Winstons):
            return NotImplemented
        return Winstons(self.value + other.value)

    def __int__(self):
        return self.value

    def __str__(self):
        return self.encode()

    def __repr__(self):
        return f"Winstons({self.encode()})"


# ================================================================
# Optional-as-empty-string
# ================================================================

T = TypeVar("T")


class EmptyStringAsNone(Generic[T]):
    """
    Optional value whose text form is "" when absent.
    `codec` is the inner type; it must provide `decode(text)` and its
    instances `encode()`.
    """

    __slots__ = ("codec", "value")

    def __init__(self, codec: type, value: Optional[T] = None):
        self.codec = codec
        self.value = value

    @classmethod
    def decode(cls, codec: type, text: str) -> "EmptyStringAsNone[T]":
        if text == "":
            return cls(codec, None)
        return cls(codec, codec.decode(text))

    def encode(self) -> str:
        return "" if self.value is None else self.value.encode()

    @classmethod
    def from_optional(cls, codec: type, value: Optional[T]) -> "EmptyStringAsNone[T]":
        return cls(codec, value)

    def to_optional(self) -> Optional[T]:
        return self.value

    def __eq__(self, other):
        if not isinstance(other, EmptyStringAsNone):
            return NotImplemented
        return self.codec is other.codec and self.value == other.value

    def __repr__(self):
        return f"EmptyStringAsNone[{self.codec.__name__}]({self.value!r})"

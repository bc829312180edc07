"""
tx_model.py
Arweave Transactions – Transaction Model
--------------------------------------------------------
Implements:
    - Anchor (block anchor | transaction anchor | none)
    - Tag / Tags
    - Tx: signed transaction, JSON wire codec, verification
    - Block / Info records returned by a node
    - absorb_tx_fields: the canonical signature-data order
--------------------------------------------------------
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, UTC
from typing import Iterable, Optional, Union

from tx_errors import InvalidValue
from tx_primitives import (
    Address,
    BlockHash,
    Data,
    EmptyStringAsNone,
    Height,
    Name,
    Signature,
    TxHash,
    Value,
    Winstons,
    b64url_decode,
)
from tx_sponge import Sponge, Verifier
from wallet_keys import Owner


# ================================================================
# JSON Helpers
# ================================================================

def _field(obj: dict, key: str, thing: str):
    if not isinstance(obj, dict):
        raise InvalidValue(thing, "expected a JSON object")
    if key not in obj:
        raise InvalidValue(thing, f"missing field '{key}'")
    return obj[key]


def _height(value) -> Height:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        raise InvalidValue("height", "expected a non-negative integer")
    return Height(value)


# ================================================================
# Anchor
# ================================================================

class Anchor(ABC):
    """
    What a new transaction points back to: a block, a previous
    transaction of the same wallet, or nothing (empty string).
    """

    __slots__ = ()

    @staticmethod
    def block(h: BlockHash) -> "BlockAnchor":
        return BlockAnchor(h)

    @staticmethod
    def transaction(h: Optional[TxHash] = None) -> "TxAnchor":
        return TxAnchor(h)

    @staticmethod
    def none() -> "TxAnchor":
        return TxAnchor(None)

    @staticmethod
    def decode(text: str) -> "Anchor":
        """
        "" is the no-anchor sentinel. Otherwise the decoded length picks
        the variant: 48 bytes is a block hash, then 32 bytes a
        transaction hash. Anything else is rejected.
        """
        if text == "":
            return TxAnchor(None)

        raw = b64url_decode("anchor", text)

        if len(raw) == BlockHash.LENGTH:
            return BlockAnchor(BlockHash(raw))
        if len(raw) == TxHash.LENGTH:
            return TxAnchor(TxHash(raw))
        raise InvalidValue("anchor", "invalid length")

    @abstractmethod
    def encode(self) -> str:
        """Wire form: "" for no anchor, else the hash in base64url."""

    @abstractmethod
    def raw(self) -> bytes:
        """Bytes contributed to the signature data."""


@dataclass(frozen=True)
class BlockAnchor(Anchor):
    hash: BlockHash

    def encode(self) -> str:
        return self.hash.encode()

    def raw(self) -> bytes:
        return self.hash.raw


@dataclass(frozen=True)
class TxAnchor(Anchor):
    hash: Optional[TxHash] = None

    def encode(self) -> str:
        return "" if self.hash is None else self.hash.encode()

    def raw(self) -> bytes:
        return b"" if self.hash is None else self.hash.raw


# ================================================================
# Tags
# ================================================================

def _as_bytes(v: Union[str, bytes]) -> bytes:
    return v.encode("utf-8") if isinstance(v, str) else bytes(v)


@dataclass(frozen=True)
class Tag:
    name: Name
    value: Value

    @classmethod
    def of(cls, name: Union[str, bytes], value: Union[str, bytes]) -> "Tag":
        return cls(Name(_as_bytes(name)), Value(_as_bytes(value)))

    @classmethod
    def from_json(cls, obj: dict) -> "Tag":
        return cls(
            Name.decode(_field(obj, "name", "tag")),
            Value.decode(_field(obj, "value", "tag")),
        )

    def to_json(self) -> dict:
        return {"name": self.name.encode(), "value": self.value.encode()}


class Tags(tuple):
    """Ordered, immutable sequence of Tag. Order is part of the signature."""

    __slots__ = ()

    def __new__(cls, tags: Iterable[Tag] = ()):
        tags = tuple(tags)
        for t in tags:
            if not isinstance(t, Tag):
                raise InvalidValue("tags", f"expected Tag, got {type(t).__name__}")
        return super().__new__(cls, tags)

    @classmethod
    def from_pairs(cls, pairs) -> "Tags":
        return cls(Tag.of(n, v) for n, v in pairs)

    @classmethod
    def from_json(cls, items: list) -> "Tags":
        if not isinstance(items, list):
            raise InvalidValue("tags", "expected a JSON array")
        return cls(Tag.from_json(i) for i in items)

    def to_json(self) -> list:
        return [t.to_json() for t in self]

    def __add__(self, other) -> "Tags":
        return Tags(tuple(self) + tuple(other))

    def __repr__(self):
        return f"Tags({list(self)!r})"


# ================================================================
# Canonical signature data
# ================================================================

def absorb_tx_fields(sponge: Sponge,
                     owner: Owner,
                     target: Optional[Address],
                     data: Data,
                     quantity: Winstons,
                     reward: Winstons,
                     anchor: Anchor,
                     tags: Tags) -> None:
    """
    Feeds the signature data of a transaction into `sponge`.
    This order is fixed by the protocol (ar_tx:signature_data_segment).
    An absent target and an empty anchor contribute no bytes at all.
    """
    sponge.absorb(owner.raw)
    if target is not None:
        sponge.absorb(target.raw)
    sponge.absorb(data.raw)
    sponge.absorb(quantity.encode().encode("ascii"))
    sponge.absorb(reward.encode().encode("ascii"))
    sponge.absorb(anchor.raw())
    for tag in tags:
        sponge.absorb(tag.name.raw)
        sponge.absorb(tag.value.raw)


# ================================================================
# Transaction
# ================================================================

@dataclass(frozen=True)
class Tx:
    id: TxHash
    data: Data
    quantity: Winstons
    reward: Winstons
    target: Optional[Address]
    anchor: Anchor
    owner: Owner
    tags: Tags
    signature: Signature

    def absorb(self, sponge: Sponge) -> None:
        absorb_tx_fields(
            sponge,
            self.owner,
            self.target,
            self.data,
            self.quantity,
            self.reward,
            self.anchor,
            self.tags,
        )

    def verify(self) -> bool:
        """
        True when the signature covers every field under the owner's key
        and the id is the hash of the signature. A mismatch is False,
        never an exception; only a malformed owner key raises.
        """
        verifier = Verifier(self.owner.public_key())
        self.absorb(verifier)
        if not verifier.verify(self.signature.raw):
            return False
        return self.signature.to_transaction_hash() == self.id

    @classmethod
    def from_json(cls, obj: dict) -> "Tx":
        thing = "transaction"
        return cls(
            id=TxHash.decode(_field(obj, "id", thing)),
            data=Data.decode(_field(obj, "data", thing)),
            quantity=Winstons.decode(_field(obj, "quantity", thing)),
            reward=Winstons.decode(_field(obj, "reward", thing)),
            target=EmptyStringAsNone.decode(
                Address, _field(obj, "target", thing)).to_optional(),
            anchor=Anchor.decode(_field(obj, "last_tx", thing)),
            owner=Owner.decode(_field(obj, "owner", thing)),
            tags=Tags.from_json(_field(obj, "tags", thing)),
            signature=Signature.decode(_field(obj, "signature", thing)),
        )

    def to_json(self) -> dict:
        return {
            "format": 1,
            "id": self.id.encode(),
            "last_tx": self.anchor.encode(),
            "owner": self.owner.encode(),
            "tags": self.tags.to_json(),
            "target": EmptyStringAsNone.from_optional(Address, self.target).encode(),
            "quantity": self.quantity.encode(),
            "data": self.data.encode(),
            "reward": self.reward.encode(),
            "signature": self.signature.encode(),
        }


# ================================================================
# Node records
# ================================================================

@dataclass(frozen=True)
class Info:
    height: Height
    current: BlockHash

    @classmethod
    def from_json(cls, obj: dict) -> "Info":
        return cls(
            height=_height(_field(obj, "height", "info")),
            current=BlockHash.decode(_field(obj, "current", "info")),
        )


@dataclass(frozen=True)
class Block:
    indep_hash: BlockHash
    previous_block: Optional[BlockHash]
    height: Height
    txs: tuple
    timestamp: datetime

    @classmethod
    def from_json(cls, obj: dict) -> "Block":
        thing = "block"
        txs = _field(obj, "txs", thing)
        if not isinstance(txs, list):
            raise InvalidValue(thing, "'txs' must be a JSON array")
        ts = _field(obj, "timestamp", thing)
        if isinstance(ts, bool) or not isinstance(ts, int):
            raise InvalidValue(thing, "'timestamp' must be unix seconds")

        return cls(
            indep_hash=BlockHash.decode(_field(obj, "indep_hash", thing)),
            # the genesis block has no predecessor
            previous_block=EmptyStringAsNone.decode(
                BlockHash, obj.get("previous_block", "")).to_optional(),
            height=_height(_field(obj, "height", thing)),
            txs=tuple(TxHash.decode(t) for t in txs),
            timestamp=datetime.fromtimestamp(ts, UTC),
        )

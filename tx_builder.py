"""
tx_builder.py
Arweave Transactions – Transaction Builder
--------------------------------------------------------
Staged construction of a new transaction:

    tx = (TxBuilder(anchor)
          .target(address)
          .data(Data(b"..."))
          .quantity(Winstons(100))
          .reward(node)          # fee query
          .sign(wallet))         # terminal

Every setter returns a new builder. `sign` consumes the builder
it is called on.
--------------------------------------------------------
"""

import logging
from typing import Optional, Union

from tx_errors import ValueNotPresent
from tx_model import Anchor, Tag, Tags, Tx, absorb_tx_fields
from tx_primitives import Address, Data, Signature, Winstons
from tx_sponge import Signer
from wallet_keys import Owner, Wallet

logger = logging.getLogger(__name__)

_THING = "request builder"


class TxBuilder:

    __slots__ = ("_anchor", "_owner", "_target", "_data",
                 "_quantity", "_reward", "_tags")

    def __init__(self, anchor: Anchor):
        self._anchor: Optional[Anchor] = anchor
        self._owner: Optional[Owner] = None
        self._target: Optional[Address] = None
        self._data = Data(b"")
        self._quantity = Winstons(0)
        self._reward: Optional[Winstons] = None
        self._tags = Tags()

    def _replace(self, **changes) -> "TxBuilder":
        if self._anchor is None:
            raise ValueNotPresent("anchor", _THING)
        new = TxBuilder(self._anchor)
        for slot in self.__slots__:
            setattr(new, slot, changes.get(slot, getattr(self, slot)))
        return new

    # ------------------------------------------------------------
    # Staged fields
    # ------------------------------------------------------------

    @property
    def anchor(self) -> Optional[Anchor]:
        return self._anchor

    @property
    def staged_target(self) -> Optional[Address]:
        return self._target

    @property
    def staged_data(self) -> Data:
        return self._data

    @property
    def staged_quantity(self) -> Winstons:
        return self._quantity

    @property
    def staged_reward(self) -> Optional[Winstons]:
        return self._reward

    @property
    def staged_tags(self) -> Tags:
        return self._tags

    # ------------------------------------------------------------
    # Setters
    # ------------------------------------------------------------

    def target(self, target: Address) -> "TxBuilder":
        return self._replace(_target=target)

    def data(self, data: Data) -> "TxBuilder":
        return self._replace(_data=data)

    def quantity(self, quantity: Winstons) -> "TxBuilder":
        return self._replace(_quantity=quantity)

    def tag(self, name: Union[str, bytes], value: Union[str, bytes]) -> "TxBuilder":
        return self._replace(_tags=self._tags + (Tag.of(name, value),))

    def tags(self, tags: Tags) -> "TxBuilder":
        return self._replace(_tags=Tags(tags))

    def reward(self, node) -> "TxBuilder":
        """Asks `node` for the fee of storing the staged data."""
        fee = node.get_price(self._target, len(self._data))
        logger.debug("fee for %d bytes: %s winstons", len(self._data), fee)
        return self._replace(_reward=fee)

    def reward_value(self, reward: Winstons) -> "TxBuilder":
        return self._replace(_reward=reward)

    # ------------------------------------------------------------
    # Terminal step
    # ------------------------------------------------------------

    def sign(self, wallet: Wallet) -> Tx:
        if self._anchor is None:
            raise ValueNotPresent("anchor", _THING)
        if self._reward is None:
            raise ValueNotPresent("reward", _THING)

        self._owner = wallet.owner

        signer = Signer(wallet.key)
        absorb_tx_fields(
            signer,
            self._owner,
            self._target,
            self._data,
            self._quantity,
            self._reward,
            self._anchor,
            self._tags,
        )
        signature = Signature(signer.sign())
        tx_id = signature.to_transaction_hash()

        tx = Tx(
            id=tx_id,
            data=self._data,
            quantity=self._quantity,
            reward=self._reward,
            target=self._target,
            anchor=self._anchor,
            owner=self._owner,
            tags=self._tags,
            signature=signature,
        )
        logger.debug("signed transaction %s", tx_id.encode())

        # consumed
        self._anchor = None
        return tx

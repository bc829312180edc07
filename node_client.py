"""
node_client.py
Arweave Transactions – Node Service
--------------------------------------------------------
Implements:
    - NodeService : the interface the rest of the library consumes
    - NodeConfig  : node URL / timeout, from the environment
    - HttpNodeClient : NodeService over the node's REST API
--------------------------------------------------------
Environment:
    ARWEAVE_TARGET   node base URL   (default https://arweave.net/)
    ARWEAVE_TIMEOUT  seconds         (default 30)

Transport errors (requests.RequestException, HTTPError) are not
caught or retried here.
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Union
from urllib.parse import urljoin

import requests

from tx_errors import InvalidValue
from tx_model import Anchor, Block, Info, Tx
from tx_primitives import Address, BlockHash, Height, TxHash, Winstons

logger = logging.getLogger(__name__)

DEFAULT_TARGET = "https://arweave.net/"
DEFAULT_TIMEOUT = 30.0


# ================================================================
# Interface
# ================================================================

class NodeService(Protocol):

    def get_info(self) -> Info: ...

    def get_block(self, ref: Union[BlockHash, Height]) -> Block: ...

    def current_block(self) -> Block: ...

    def get_tx(self, tx_hash: TxHash) -> Tx: ...

    def submit(self, tx: Tx) -> None: ...

    def get_balance(self, address: Address) -> Winstons: ...

    def get_last_tx(self, address: Address) -> Anchor: ...

    def get_price(self, target: Optional[Address], size: int) -> Winstons: ...


# ================================================================
# Configuration
# ================================================================

@dataclass(frozen=True)
class NodeConfig:
    url: str = DEFAULT_TARGET
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self):
        # urljoin drops the last path segment without it
        if not self.url.endswith("/"):
            object.__setattr__(self, "url", self.url + "/")

    @classmethod
    def from_env(cls, environ=None) -> "NodeConfig":
        environ = os.environ if environ is None else environ
        url = environ.get("ARWEAVE_TARGET") or DEFAULT_TARGET
        raw_timeout = environ.get("ARWEAVE_TIMEOUT")
        if raw_timeout is None or raw_timeout == "":
            return cls(url=url)
        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise InvalidValue("timeout", f"not a number: {raw_timeout!r}") from None
        if timeout <= 0:
            raise InvalidValue("timeout", "must be positive")
        return cls(url=url, timeout=timeout)


# ================================================================
# HTTP implementation
# ================================================================

class HttpNodeClient:

    def __init__(self,
                 config: Optional[NodeConfig] = None,
                 session: Optional[requests.Session] = None):
        self.config = config or NodeConfig.from_env()
        self.session = session or requests.Session()

    def _url(self, path: str) -> str:
        return urljoin(self.config.url, path)

    def _get(self, path: str) -> requests.Response:
        url = self._url(path)
        logger.debug("GET %s", url)
        rsp = self.session.get(url, timeout=self.config.timeout)
        rsp.raise_for_status()
        return rsp

    def _get_json(self, path: str):
        rsp = self._get(path)
        try:
            return rsp.json()
        except ValueError:
            raise InvalidValue("response", f"{path} did not return JSON") from None

    def get_info(self) -> Info:
        return Info.from_json(self._get_json("info"))

    def get_block(self, ref: Union[BlockHash, Height]) -> Block:
        if isinstance(ref, Height):
            return Block.from_json(self._get_json(f"block/height/{ref}"))
        return Block.from_json(self._get_json(f"block/hash/{ref.encode()}"))

    def current_block(self) -> Block:
        return Block.from_json(self._get_json("block/current"))

    def get_tx(self, tx_hash: TxHash) -> Tx:
        return Tx.from_json(self._get_json(f"tx/{tx_hash.encode()}"))

    def submit(self, tx: Tx) -> None:
        url = self._url("tx")
        logger.info("submitting transaction %s", tx.id.encode())
        rsp = self.session.post(url, json=tx.to_json(), timeout=self.config.timeout)
        rsp.raise_for_status()

    def get_balance(self, address: Address) -> Winstons:
        rsp = self._get(f"wallet/{address.encode()}/balance")
        return Winstons.decode(rsp.text.strip())

    def get_last_tx(self, address: Address) -> Anchor:
        rsp = self._get(f"wallet/{address.encode()}/last_tx")
        return Anchor.decode(rsp.text.strip())

    def get_price(self, target: Optional[Address], size: int) -> Winstons:
        path = f"price/{size}"
        if target is not None:
            path += f"/{target.encode()}"
        rsp = self._get(path)
        return Winstons.decode(rsp.text.strip())

"""
main.py
Arweave Transactions – CLI
--------------------------------------------------------
    arweave-tx info
    arweave-tx block [--hash H | --height N]
    arweave-tx tx ID
    arweave-tx balance ADDRESS
    arweave-tx price --size N [--target ADDRESS]
    arweave-tx verify FILE
    arweave-tx address --key PEM
    arweave-tx send --key PEM [--to ADDRESS] [--quantity W]
                    [--data TEXT] [--tag NAME=VALUE ...] [--dry-run]
--------------------------------------------------------
Key files are PEM private keys owned by the caller; they are
only ever read.
"""

import sys
import json
import getpass
import logging
import argparse

import requests
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from node_client import HttpNodeClient, NodeConfig
from tx_builder import TxBuilder
from tx_errors import InvalidValue, LedgerError
from tx_model import Tx
from tx_primitives import Address, BlockHash, Data, Height, TxHash, Winstons
from wallet_keys import Wallet


# ================================================================
# Helpers
# ================================================================

def load_wallet(path: str) -> Wallet:
    """Reads an RSA private key (PEM). Prompts for a passphrase if encrypted."""
    with open(path, "rb") as f:
        pem = f.read()

    try:
        try:
            key = serialization.load_pem_private_key(pem, password=None)
        except TypeError:
            passphrase = getpass.getpass("Key passphrase: ")
            key = serialization.load_pem_private_key(pem, password=passphrase.encode("utf-8"))
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        # malformed PEM or wrong passphrase
        raise InvalidValue("key", str(e)) from e

    if not isinstance(key, rsa.RSAPrivateKey):
        raise InvalidValue("key", "not an RSA private key")
    return Wallet(key)


def load_tx_file(path: str) -> Tx:
    """Reads a transaction in node JSON format."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            obj = json.load(f)
    except json.JSONDecodeError:
        raise InvalidValue("transaction file", f"'{path}' is not valid JSON") from None
    return Tx.from_json(obj)


def parse_tag(text: str):
    name, sep, value = text.partition("=")
    if not sep or not name:
        raise argparse.ArgumentTypeError(f"expected NAME=VALUE, got {text!r}")
    return name, value


def _address(text: str) -> Address:
    try:
        return Address.decode(text)
    except InvalidValue as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def _winstons(text: str) -> Winstons:
    try:
        return Winstons.decode(text)
    except InvalidValue as e:
        raise argparse.ArgumentTypeError(str(e)) from None


# ================================================================
# Commands
# ================================================================

class ArweaveCLI:

    def __init__(self, node):
        self.node = node

    def info(self, args):
        info = self.node.get_info()
        print(f"Height:  {info.height}")
        print(f"Current: {info.current}")

    def block(self, args):
        if args.hash:
            block = self.node.get_block(BlockHash.decode(args.hash))
        elif args.height is not None:
            block = self.node.get_block(Height(args.height))
        else:
            block = self.node.current_block()

        print(f"Block:     {block.indep_hash}")
        print(f"Height:    {block.height}")
        print(f"Previous:  {block.previous_block or '-'}")
        print(f"Timestamp: {block.timestamp.isoformat()}")
        print(f"Txs:       {len(block.txs)}")
        for txh in block.txs:
            print(f"   {txh}")

    def tx(self, args):
        tx = self.node.get_tx(TxHash.decode(args.id))
        return self._show_tx(tx)

    def balance(self, args):
        print(self.node.get_balance(args.address))

    def price(self, args):
        print(self.node.get_price(args.target, args.size))

    def verify(self, args):
        return self._show_tx(load_tx_file(args.path))

    def address(self, args):
        wallet = load_wallet(args.key)
        print(wallet.address)

    def send(self, args):
        wallet = load_wallet(args.key)

        builder = TxBuilder(self.node.get_last_tx(wallet.address))
        if args.to is not None:
            builder = builder.target(args.to)
        builder = builder.quantity(args.quantity)
        builder = builder.data(Data(args.data.encode("utf-8")))
        for name, value in args.tag:
            builder = builder.tag(name, value)

        tx = builder.reward(self.node).sign(wallet)

        if args.dry_run:
            print(json.dumps(tx.to_json(), indent=2))
            return 0

        self.node.submit(tx)
        print(f"Submitted: {tx.id}")
        return 0

    @staticmethod
    def _show_tx(tx: Tx):
        print(f"Id:       {tx.id}")
        print(f"From:     {tx.owner.address()}")
        print(f"To:       {tx.target or '-'}")
        print(f"Quantity: {tx.quantity}")
        print(f"Reward:   {tx.reward}")
        print(f"Anchor:   {tx.anchor.encode() or '-'}")
        for tag in tx.tags:
            print(f"Tag:      {tag.name!r} = {tag.value!r}")
        valid = tx.verify()
        print(f"Valid:    {'yes' if valid else 'NO'}")
        return 0 if valid else 1


# ================================================================
# Entry point
# ================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Arweave transaction client")
    parser.add_argument("--node", help="Node URL (default: $ARWEAVE_TARGET)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("info", help="Show node height and current block")

    block_parser = subparsers.add_parser("block", help="Show a block (default: current)")
    group = block_parser.add_mutually_exclusive_group()
    group.add_argument("--hash", help="Block hash")
    group.add_argument("--height", type=int, help="Block height")

    tx_parser = subparsers.add_parser("tx", help="Fetch and verify a transaction")
    tx_parser.add_argument("id", help="Transaction id")

    balance_parser = subparsers.add_parser("balance", help="Wallet balance in winstons")
    balance_parser.add_argument("address", type=_address)

    price_parser = subparsers.add_parser("price", help="Fee for storing data")
    price_parser.add_argument("--size", type=int, required=True, help="Data size in bytes")
    price_parser.add_argument("--target", type=_address, help="Recipient address")

    verify_parser = subparsers.add_parser("verify", help="Verify a transaction JSON file")
    verify_parser.add_argument("path")

    address_parser = subparsers.add_parser("address", help="Address of a PEM key")
    address_parser.add_argument("--key", required=True, help="PEM private key file")

    send_parser = subparsers.add_parser("send", help="Build, sign and submit a transaction")
    send_parser.add_argument("--key", required=True, help="PEM private key file")
    send_parser.add_argument("--to", type=_address, help="Recipient address")
    send_parser.add_argument("--quantity", type=_winstons, default=Winstons(0))
    send_parser.add_argument("--data", default="", help="Payload (UTF-8 text)")
    send_parser.add_argument("--tag", type=parse_tag, action="append", default=[],
                             help="NAME=VALUE, repeatable")
    send_parser.add_argument("--dry-run", action="store_true",
                             help="Print the signed transaction instead of submitting")
    return parser


def main(argv=None, node=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    if args.command is None:
        parser.print_help()
        return 2

    if node is None:
        config = NodeConfig.from_env()
        if args.node:
            config = NodeConfig(url=args.node, timeout=config.timeout)
        node = HttpNodeClient(config)

    cli = ArweaveCLI(node)
    try:
        result = getattr(cli, args.command)(args)
    except (LedgerError, requests.RequestException, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return result or 0


if __name__ == "__main__":
    sys.exit(main())

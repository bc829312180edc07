"""
test_wallet.py
Unit tests for Owner / Wallet
"""

import copy
import hashlib
import unittest

from cryptography.hazmat.primitives.asymmetric import rsa

from tx_errors import CryptoError, InvalidValue
from tx_primitives import Address
from wallet_keys import KEY_SIZE, PUBLIC_EXPONENT, Owner, Wallet


class TestWallet(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.wallet = Wallet.generate()

    def test_key_parameters(self):
        """4096-bit key with exponent 65537"""
        numbers = self.wallet.key.public_key().public_numbers()
        self.assertEqual(self.wallet.key.key_size, KEY_SIZE)
        self.assertEqual(numbers.e, PUBLIC_EXPONENT)

    def test_address_is_sha256_of_modulus(self):
        n = self.wallet.key.public_key().public_numbers().n
        expected = hashlib.sha256(n.to_bytes(512, "big")).digest()
        self.assertEqual(self.wallet.address, Address(expected))
        self.assertEqual(self.wallet.owner.address(), self.wallet.address)

    def test_owner_modulus(self):
        n = self.wallet.key.public_key().public_numbers().n
        self.assertEqual(self.wallet.owner.modulus, n)
        self.assertEqual(len(self.wallet.owner.raw), 512)

    def test_owner_round_trip(self):
        owner = self.wallet.owner
        decoded = Owner.decode(owner.encode())
        self.assertEqual(decoded, owner)
        self.assertEqual(decoded.address(), owner.address())

    def test_owner_public_key(self):
        pub = self.wallet.owner.public_key()
        self.assertEqual(pub.public_numbers(),
                         self.wallet.key.public_key().public_numbers())

    def test_wrong_exponent_rejected(self):
        n = self.wallet.owner.modulus
        key = rsa.RSAPublicNumbers(3, n).public_key()
        with self.assertRaises(InvalidValue) as cm:
            Owner.from_public_key(key)
        self.assertEqual(cm.exception.thing, "owner")

    def test_wallets_are_not_copied(self):
        with self.assertRaises(TypeError):
            copy.copy(self.wallet)
        with self.assertRaises(TypeError):
            copy.deepcopy(self.wallet)

    def test_repr_hides_key(self):
        self.assertEqual(repr(self.wallet), f"Wallet({self.wallet.address.encode()})")


class TestOwner(unittest.TestCase):

    def test_from_modulus_is_minimal(self):
        self.assertEqual(Owner.from_modulus(0x010001).raw, b"\x01\x00\x01")

    def test_from_modulus_rejects_zero(self):
        with self.assertRaises(InvalidValue):
            Owner.from_modulus(0)

    def test_malformed_modulus(self):
        with self.assertRaises(CryptoError):
            Owner(b"\x04").public_key()


if __name__ == "__main__":
    unittest.main()

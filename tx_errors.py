"""
tx_errors.py
Arweave Transactions – Error Taxonomy
--------------------------------------------------------
Implements:
    - InvalidValue    : decode-time format or length violation
    - ValueNotPresent : required staged field missing
    - CryptoError     : failure inside the RSA / hashing primitive
--------------------------------------------------------
Transport failures are not wrapped: the exceptions raised by
`requests` reach the caller unchanged.
"""


class LedgerError(Exception):
    """Base class for every error raised by this library."""


class InvalidValue(LedgerError):

    def __init__(self, thing: str, msg: str):
        super().__init__(f"invalid {thing}: {msg}")
        self.thing = thing
        self.msg = msg


class ValueNotPresent(LedgerError):

    def __init__(self, value: str, thing: str):
        super().__init__(f"{value} not present in {thing}")
        self.value = value
        self.thing = thing


class CryptoError(LedgerError):
    pass

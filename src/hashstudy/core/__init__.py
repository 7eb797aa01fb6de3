from .hashing import HashFunction, string_hash32
from .keys import KEY_LIMIT, KEY_WIDTH, Key
from .tables import ChainingTable, InsertOutcome, OpenAddressingTable, ProbeStrategy

__all__ = [
    "ChainingTable",
    "HashFunction",
    "InsertOutcome",
    "KEY_LIMIT",
    "KEY_WIDTH",
    "Key",
    "OpenAddressingTable",
    "ProbeStrategy",
    "string_hash32",
]

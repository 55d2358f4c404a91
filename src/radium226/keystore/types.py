from dataclasses import dataclass
from typing import TypeAlias



KeyName: TypeAlias = str



KeyDescription: TypeAlias = str



KeyStrength: TypeAlias = int



BYTE_ORDER = "little"



DEFAULT_KEY_STRENGTH: KeyStrength = 2048



class KeyStoreError(Exception):

    message: str

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message



@dataclass(frozen=True, eq=True)
class KeyComponents():
    """
    Numeric material of one RSA keypair.

    Every integer is kept as its little-endian magnitude, without sign or length prefix.
    """
    primes: tuple[bytes, ...]
    n: bytes
    e: bytes
    d: bytes



@dataclass(frozen=True, eq=True)
class KeyEntry():
    name: KeyName
    description: KeyDescription | None
    key: KeyComponents

    @property
    def strength(self) -> KeyStrength:
        return int.from_bytes(self.key.n, BYTE_ORDER).bit_length()



@dataclass(frozen=True, eq=True)
class KeyDetails():
    name: KeyName
    description: KeyDescription | None = None
    strength: KeyStrength = DEFAULT_KEY_STRENGTH



@dataclass(frozen=True, eq=True)
class KeyValue():
    key: str
    value: str

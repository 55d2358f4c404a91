from typing import Any, Generator, Iterable, Iterator
import yaml
from loguru import logger
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import rsa, padding
from Crypto.Cipher import PKCS1_v1_5

from .types import (
    KeyComponents,
    KeyDetails,
    KeyEntry,
    KeyName,
    KeyStoreError,
)
from .components import (
    components_from_private_key,
    components_to_private_key,
    components_to_rsa_key,
    check_components,
)
from .config import Settings



PUBLIC_EXPONENT = 65537



# Minimum overhead of PKCS#1 v1.5 encryption padding, in bytes
PKCS1V15_OVERHEAD = 11



class KeyStore():

    entries: list[KeyEntry]
    settings: Settings

    def __init__(self, entries: Iterable[KeyEntry] = (), settings: Settings | None = None) -> None:
        self.entries = list(entries)
        self.settings = settings if settings is not None else Settings()

    @classmethod
    def new(cls, settings: Settings | None = None) -> "KeyStore":
        return cls(settings=settings)

    def __iter__(self) -> Iterator[KeyEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def find(self, name: KeyName) -> KeyEntry:
        for entry in self.entries:
            if entry.name == name:
                return entry
        raise KeyStoreError(f"key: {name!r} not found")

    def generate_key(self, details: KeyDetails) -> KeyEntry:
        """
        Generate a new RSA keypair and append it to the store under `details.name`.

        Names are not checked for uniqueness: a duplicate is appended and stays hidden
        behind the first entry with the same name.
        """
        if not details.name:
            raise KeyStoreError("Key name must not be empty")

        if details.strength < self.settings.min_key_strength:
            raise KeyStoreError(
                f"Unable to generate key {details.name!r}: strength {details.strength} is below the minimum of {self.settings.min_key_strength} bits"
            )

        logger.debug("Generating {strength}-bit key {name!r}...", strength=details.strength, name=details.name)
        try:
            private_key = rsa.generate_private_key(public_exponent=PUBLIC_EXPONENT, key_size=details.strength)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise KeyStoreError(f"Unable to generate key {details.name!r}: {e}") from e

        entry = KeyEntry(
            name=details.name,
            description=details.description,
            key=components_from_private_key(private_key),
        )
        self.entries.append(entry)
        return entry

    def encrypt(self, name: KeyName, plaintext: bytes) -> bytes:
        entry = self.find(name)
        public_key = components_to_private_key(entry.key).public_key()

        max_plaintext_size = (public_key.key_size + 7) // 8 - PKCS1V15_OVERHEAD
        if len(plaintext) > max_plaintext_size:
            raise KeyStoreError(
                f"Plaintext is too long for key {name!r}: {len(plaintext)} bytes given, at most {max_plaintext_size} allowed"
            )

        try:
            return public_key.encrypt(plaintext, padding.PKCS1v15())
        except ValueError as e:
            raise KeyStoreError(f"Encryption with key {name!r} failed: {e}") from e

    def decrypt(self, name: KeyName, ciphertext: bytes) -> bytes:
        entry = self.find(name)
        cipher = PKCS1_v1_5.new(components_to_rsa_key(entry.key))

        # Same message for every cause, padding failures included
        try:
            plaintext = cipher.decrypt(ciphertext, None)
        except ValueError as e:
            raise KeyStoreError(f"Decryption with key {name!r} failed") from e

        if plaintext is None:
            raise KeyStoreError(f"Decryption with key {name!r} failed")
        return plaintext

    def serialize(self) -> str:
        obj = {
            "entries": [
                {
                    "name": entry.name,
                    "description": entry.description,
                    "key": {
                        "primes": [list(prime) for prime in entry.key.primes],
                        "n": list(entry.key.n),
                        "e": list(entry.key.e),
                        "d": list(entry.key.d),
                    },
                }
                for entry in self.entries
            ]
        }
        try:
            content = "---\n"
            content += yaml.safe_dump(obj, default_flow_style=None, sort_keys=False)
            return content
        except yaml.YAMLError as e:
            raise KeyStoreError(f"Unable to serialize key store: {e}") from e

    @classmethod
    def deserialize(cls, text: str, settings: Settings | None = None) -> "KeyStore":
        settings = settings if settings is not None else Settings()

        try:
            obj = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise KeyStoreError(f"Malformed key store: {e}") from e

        entries_obj = _get(_expect(obj, dict, "key store"), "entries", "key store")

        def yield_entries() -> Generator[KeyEntry, None, None]:
            for index, entry_obj in enumerate(_expect(entries_obj, list, "entries")):
                entry = _load_entry(entry_obj, f"entries[{index}]")
                if settings.validate_keys:
                    try:
                        check_components(entry.key)
                    except KeyStoreError as e:
                        raise KeyStoreError(f"Invalid key {entry.name!r}: {e}") from e
                yield entry

        key_store = cls(yield_entries(), settings=settings)
        logger.debug("Loaded key store with {count} entries", count=len(key_store))
        return key_store



def _expect(value: Any, expected_type: type, path: str) -> Any:
    # bool is a subclass of int, but never a valid value here
    if not isinstance(value, expected_type) or isinstance(value, bool):
        raise KeyStoreError(f"Malformed key store: {path} should be a {expected_type.__name__}, got {type(value).__name__}")
    return value


def _get(obj: dict[str, Any], field: str, path: str) -> Any:
    if field not in obj:
        raise KeyStoreError(f"Malformed key store: {path} is missing field {field!r}")
    return obj[field]


def _load_bytes(value: Any, path: str) -> bytes:
    values = _expect(value, list, path)
    if not values:
        raise KeyStoreError(f"Malformed key store: {path} is empty")
    for index, byte in enumerate(values):
        _expect(byte, int, f"{path}[{index}]")
        if not 0 <= byte <= 255:
            raise KeyStoreError(f"Malformed key store: {path}[{index}] is out of byte range ({byte})")
    return bytes(values)


def _load_components(value: Any, path: str) -> KeyComponents:
    obj = _expect(value, dict, path)
    primes_obj = _expect(_get(obj, "primes", path), list, f"{path}.primes")
    return KeyComponents(
        primes=tuple(
            _load_bytes(prime_obj, f"{path}.primes[{index}]")
            for index, prime_obj in enumerate(primes_obj)
        ),
        n=_load_bytes(_get(obj, "n", path), f"{path}.n"),
        e=_load_bytes(_get(obj, "e", path), f"{path}.e"),
        d=_load_bytes(_get(obj, "d", path), f"{path}.d"),
    )


def _load_entry(value: Any, path: str) -> KeyEntry:
    obj = _expect(value, dict, path)

    name = _expect(_get(obj, "name", path), str, f"{path}.name")
    if not name:
        raise KeyStoreError(f"Malformed key store: {path}.name is empty")

    description = obj.get("description")
    if description is not None:
        _expect(description, str, f"{path}.description")

    return KeyEntry(
        name=name,
        description=description,
        key=_load_components(_get(obj, "key", path), f"{path}.key"),
    )

from typing import overload
from pathlib import Path
from loguru import logger

from .keystore import KeyStore
from .config import Settings



def store_exists(file_path: Path) -> bool:
    return file_path.is_file()



@overload
def load_key_store(file_path: Path, /, settings: Settings | None = None) -> KeyStore: ...



@overload
def load_key_store(text: str, /, settings: Settings | None = None) -> KeyStore: ...



def load_key_store(text_or_file_path: Path | str, /, settings: Settings | None = None) -> KeyStore:
    if isinstance(text_or_file_path, Path):
        logger.debug("Reading key store from {file_path}", file_path=text_or_file_path)
        text = text_or_file_path.read_text(encoding="utf-8")
    else:
        text = text_or_file_path

    return KeyStore.deserialize(text, settings=settings)



def load_or_create_key_store(file_path: Path, settings: Settings | None = None) -> KeyStore:
    if store_exists(file_path):
        return load_key_store(file_path, settings=settings)

    logger.info(f"Key store {str(file_path)!r} does not exist yet. Creating a new one.")
    return KeyStore.new(settings=settings)



@overload
def dump_key_store(key_store: KeyStore) -> str: ...



@overload
def dump_key_store(key_store: KeyStore, file_path: Path) -> None: ...



def dump_key_store(key_store: KeyStore, file_path: Path | None = None) -> str | None:
    content = key_store.serialize()
    if file_path is not None:
        logger.debug("Writing key store to {file_path}", file_path=file_path)
        file_path.write_text(content, encoding="utf-8")
        return None
    else:
        return content



def read_payload(file_path: Path) -> bytes:
    return file_path.read_bytes()



def write_payload(file_path: Path, data: bytes) -> None:
    file_path.write_bytes(data)

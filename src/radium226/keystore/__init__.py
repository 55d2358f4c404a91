from loguru import logger

from .app import app
from .types import (
    KeyName,
    KeyDescription,
    KeyStrength,
    KeyComponents,
    KeyEntry,
    KeyDetails,
    KeyStoreError,
)
from .components import (
    encode_integer,
    decode_integer,
    components_from_private_key,
    components_to_private_key,
    components_to_rsa_key,
    check_components,
)
from .config import Settings, parse_config
from .keystore import KeyStore
from .files import (
    store_exists,
    load_key_store,
    load_or_create_key_store,
    dump_key_store,
)


logger.disable(__name__)


__all__ = [
    "app",
    "KeyName",
    "KeyDescription",
    "KeyStrength",
    "KeyComponents",
    "KeyEntry",
    "KeyDetails",
    "KeyStoreError",
    "encode_integer",
    "decode_integer",
    "components_from_private_key",
    "components_to_private_key",
    "components_to_rsa_key",
    "check_components",
    "Settings",
    "parse_config",
    "KeyStore",
    "store_exists",
    "load_key_store",
    "load_or_create_key_store",
    "dump_key_store",
]

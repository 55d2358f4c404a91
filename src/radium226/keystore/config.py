from dataclasses import dataclass, fields
from typing import Any, Callable
from loguru import logger
import os

from .types import KeyStrength, KeyStoreError, DEFAULT_KEY_STRENGTH



ENVIRONMENT_VARIABLE_PREFIX = "KEYSTORE_"



@dataclass(frozen=True, eq=True)
class Settings():
    min_key_strength: KeyStrength = 1024
    default_key_strength: KeyStrength = DEFAULT_KEY_STRENGTH
    validate_keys: bool = False



def _parse_bool(value: str) -> bool:
    match value.strip().lower():
        case "1" | "true" | "yes" | "on":
            return True
        case "0" | "false" | "no" | "off":
            return False
        case _:
            raise ValueError(f"{value!r} is not a boolean")


def _parse_int(value: str) -> int:
    return int(value.strip())



PARSERS: dict[str, Callable[[str], Any]] = {
    "min_key_strength": _parse_int,
    "default_key_strength": _parse_int,
    "validate_keys": _parse_bool,
}



def parse_config(obj: dict[str, str], environ: dict[str, str] | None = None) -> Settings:
    """
    Build the settings from explicit key/value pairs.

    Values given in `obj` win over the `KEYSTORE_*` environment variables, which win over
    the defaults of `Settings`.
    """
    environ = dict(os.environ) if environ is None else environ

    unknown_keys = set(obj) - set(PARSERS)
    if unknown_keys:
        raise KeyStoreError(f"Unknown configuration keys: {sorted(unknown_keys)}")

    values: dict[str, Any] = {}
    for field in fields(Settings):
        if field.name in obj:
            raw_value = obj[field.name]
        elif (environment_variable_name := ENVIRONMENT_VARIABLE_PREFIX + field.name.upper()) in environ:
            logger.debug("Using {name} from environment", name=environment_variable_name)
            raw_value = environ[environment_variable_name]
        else:
            continue

        try:
            values[field.name] = PARSERS[field.name](raw_value)
        except ValueError as e:
            raise KeyStoreError(f"Invalid value for {field.name!r}: {raw_value!r}") from e

    settings = Settings(**values)
    if settings.default_key_strength < settings.min_key_strength:
        raise KeyStoreError(
            f"Default key strength ({settings.default_key_strength}) is below the minimum ({settings.min_key_strength})"
        )
    return settings

from click import option, Context, pass_context, group, echo, Choice, ClickException
from contextlib import contextmanager
from loguru import logger
from typing import Generator, cast
from types import SimpleNamespace
from pathlib import Path
import sys

from .types import KeyDetails, KeyStrength, KeyStoreError
from .click import (
    KEY_VALUE,
    KEY_STRENGTH,
    to_dict,
)
from .config import Settings, parse_config
from .files import (
    load_key_store,
    load_or_create_key_store,
    dump_key_store,
    read_payload,
    write_payload,
)



LOG_LEVELS = ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]



@contextmanager
def reporting_errors() -> Generator[None, None, None]:
    try:
        yield
    except (KeyStoreError, OSError) as e:
        raise ClickException(str(e)) from e



@group()
@option(
    "--log-level",
    "log_level",
    type=Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
)
@option(
    "--config",
    "-c",
    "config",
    multiple=True,
    type=KEY_VALUE,
    callback=to_dict,
)
@pass_context
def app(
    context: Context,
    log_level: str,
    config: dict[str, str],
) -> None:
    logger.remove()
    logger.add(sys.stderr, level=log_level.upper())
    logger.enable("radium226.keystore")
    logger.debug("App started! ")

    context.obj = SimpleNamespace()
    with reporting_errors():
        context.obj.settings = parse_config(config)



@app.command("generate-key")
@option("--key-store-path", "key_store_path", type=Path, required=True)
@option("--key-name", "key_name", type=str, required=True)
@option("--key-strength", "key_strength", type=KEY_STRENGTH, required=False)
@option("--description", "description", type=str, required=False)
@pass_context
def generate_key(
    context: Context,
    key_store_path: Path,
    key_name: str,
    key_strength: KeyStrength | None,
    description: str | None,
) -> None:
    settings = cast(Settings, context.obj.settings)

    with reporting_errors():
        key_store = load_or_create_key_store(key_store_path, settings=settings)
        key_store.generate_key(KeyDetails(
            name=key_name,
            description=description,
            strength=key_strength if key_strength is not None else settings.default_key_strength,
        ))
        dump_key_store(key_store, key_store_path)



@app.command()
@option("--key-store-path", "key_store_path", type=Path, required=True)
@option("--key-name", "key_name", type=str, required=True)
@option("--input-file-path", "input_file_path", type=Path, required=True)
@option("--output-file-path", "output_file_path", type=Path, required=True)
@pass_context
def encrypt(
    context: Context,
    key_store_path: Path,
    key_name: str,
    input_file_path: Path,
    output_file_path: Path,
) -> None:
    settings = cast(Settings, context.obj.settings)

    with reporting_errors():
        key_store = load_key_store(key_store_path, settings=settings)
        ciphertext = key_store.encrypt(key_name, read_payload(input_file_path))
        write_payload(output_file_path, ciphertext)



@app.command()
@option("--key-store-path", "-k", "key_store_path", type=Path, required=True)
@option("--key-name", "key_name", type=str, required=True)
@option("--input-file-path", "input_file_path", type=Path, required=True)
@option("--output-file-path", "output_file_path", type=Path, required=True)
@pass_context
def decrypt(
    context: Context,
    key_store_path: Path,
    key_name: str,
    input_file_path: Path,
    output_file_path: Path,
) -> None:
    settings = cast(Settings, context.obj.settings)

    with reporting_errors():
        key_store = load_key_store(key_store_path, settings=settings)
        plaintext = key_store.decrypt(key_name, read_payload(input_file_path))
        write_payload(output_file_path, plaintext)



@app.command("list-keys")
@option("--key-store-path", "key_store_path", type=Path, required=True)
@pass_context
def list_keys(context: Context, key_store_path: Path) -> None:
    settings = cast(Settings, context.obj.settings)

    with reporting_errors():
        key_store = load_key_store(key_store_path, settings=settings)

    for entry in key_store:
        echo(f"{entry.name}\t{entry.strength}\t{entry.description or ''}")

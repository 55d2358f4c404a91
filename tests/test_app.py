import pytest
from pathlib import Path
from click.testing import CliRunner

from radium226.keystore import app, load_key_store, decode_integer


SECRET_MESSAGE = b"this is a secret message"


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def key_store_file_path(tmp_path: Path) -> Path:
    return tmp_path / "keystore.yaml"


def _generate_key(runner: CliRunner, key_store_file_path: Path, key_name: str, *args: str) -> None:
    result = runner.invoke(app, [
        "generate-key",
        "--key-store-path", str(key_store_file_path),
        "--key-name", key_name,
        "--key-strength", "1024",
        *args,
    ])
    assert result.exit_code == 0, f"Command failed: {result.output}"


def test_cli_generate_key_creates_key_store(runner: CliRunner, key_store_file_path: Path) -> None:
    _generate_key(runner, key_store_file_path, "mykey")
    assert key_store_file_path.exists()

    _generate_key(runner, key_store_file_path, "otherkey", "--description", "Second key")

    key_store = load_key_store(key_store_file_path)
    assert [entry.name for entry in key_store] == ["mykey", "otherkey"]
    assert key_store.find("otherkey").description == "Second key"


def test_cli_list_keys(runner: CliRunner, key_store_file_path: Path) -> None:
    _generate_key(runner, key_store_file_path, "mykey", "--description", "My key")

    result = runner.invoke(app, ["list-keys", "--key-store-path", str(key_store_file_path)])

    assert result.exit_code == 0, f"Command failed: {result.output}"
    assert result.output.splitlines() == ["mykey\t1024\tMy key"]


def test_cli_encrypt_and_decrypt(runner: CliRunner, key_store_file_path: Path, tmp_path: Path) -> None:
    _generate_key(runner, key_store_file_path, "mykey")

    decrypted_file_path = tmp_path / "input.dat"
    decrypted_file_path.write_bytes(SECRET_MESSAGE)
    encrypted_file_path = tmp_path / "encrypted.dat"
    output_file_path = tmp_path / "output.dat"

    result = runner.invoke(app, [
        "encrypt",
        "--key-store-path", str(key_store_file_path),
        "--key-name", "mykey",
        "--input-file-path", str(decrypted_file_path),
        "--output-file-path", str(encrypted_file_path),
    ])
    assert result.exit_code == 0, f"Command failed: {result.output}"
    assert encrypted_file_path.read_bytes() != SECRET_MESSAGE

    result = runner.invoke(app, [
        "decrypt",
        "--key-store-path", str(key_store_file_path),
        "--key-name", "mykey",
        "--input-file-path", str(encrypted_file_path),
        "--output-file-path", str(output_file_path),
    ])
    assert result.exit_code == 0, f"Command failed: {result.output}"
    assert output_file_path.read_bytes() == SECRET_MESSAGE


def test_cli_decrypt_when_key_store_does_not_exist(runner: CliRunner, tmp_path: Path) -> None:
    input_file_path = tmp_path / "input.dat"
    input_file_path.write_bytes(b"\x00" * 128)
    output_file_path = tmp_path / "output.dat"

    result = runner.invoke(app, [
        "decrypt",
        "--key-store-path", str(tmp_path / "missing.yaml"),
        "--key-name", "not_a_key",
        "--input-file-path", str(input_file_path),
        "--output-file-path", str(output_file_path),
    ])

    assert result.exit_code == 1
    assert not output_file_path.exists()


def test_cli_encrypt_with_unknown_key(runner: CliRunner, key_store_file_path: Path, tmp_path: Path) -> None:
    _generate_key(runner, key_store_file_path, "mykey")
    input_file_path = tmp_path / "input.dat"
    input_file_path.write_bytes(SECRET_MESSAGE)

    result = runner.invoke(app, [
        "encrypt",
        "--key-store-path", str(key_store_file_path),
        "--key-name", "not_a_key",
        "--input-file-path", str(input_file_path),
        "--output-file-path", str(tmp_path / "output.dat"),
    ])

    assert result.exit_code == 1
    assert "key: 'not_a_key' not found" in result.output


def test_cli_generate_key_below_minimum_strength(runner: CliRunner, key_store_file_path: Path) -> None:
    result = runner.invoke(app, [
        "-c", "min_key_strength=2048",
        "generate-key",
        "--key-store-path", str(key_store_file_path),
        "--key-name", "mykey",
        "--key-strength", "1024",
    ])

    assert result.exit_code == 1
    assert "below the minimum" in result.output
    assert not key_store_file_path.exists()


def test_cli_invalid_config(runner: CliRunner, key_store_file_path: Path) -> None:
    result = runner.invoke(app, [
        "-c", "validate_keys=maybe",
        "list-keys",
        "--key-store-path", str(key_store_file_path),
    ])

    assert result.exit_code == 1
    assert "Invalid value for 'validate_keys'" in result.output


def test_cli_decrypt_ciphertext_with_invalid_padding(runner: CliRunner, key_store_file_path: Path, tmp_path: Path) -> None:
    _generate_key(runner, key_store_file_path, "mykey")
    entry = load_key_store(key_store_file_path).find("mykey")

    # Signature padding (block type 1) under the key's public exponent
    n = decode_integer(entry.key.n)
    e = decode_integer(entry.key.e)
    size = (n.bit_length() + 7) // 8
    encoded_message = b"\x00\x01" + b"\xff" * (size - 3 - len(SECRET_MESSAGE)) + b"\x00" + SECRET_MESSAGE
    input_file_path = tmp_path / "input.dat"
    input_file_path.write_bytes(pow(int.from_bytes(encoded_message, "big"), e, n).to_bytes(size, "big"))
    output_file_path = tmp_path / "output.dat"

    result = runner.invoke(app, [
        "decrypt",
        "--key-store-path", str(key_store_file_path),
        "--key-name", "mykey",
        "--input-file-path", str(input_file_path),
        "--output-file-path", str(output_file_path),
    ])

    assert result.exit_code == 1
    assert "Decryption with key 'mykey' failed" in result.output
    assert not output_file_path.exists()

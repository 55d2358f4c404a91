from math import lcm, prod
from loguru import logger
from cryptography.hazmat.primitives.asymmetric.rsa import (
    RSAPrivateKey,
    RSAPrivateNumbers,
    RSAPublicNumbers,
    rsa_crt_dmp1,
    rsa_crt_dmq1,
    rsa_crt_iqmp,
)
from Crypto.PublicKey import RSA

from .types import KeyComponents, KeyStoreError, BYTE_ORDER



def encode_integer(value: int) -> bytes:
    if value < 0:
        raise KeyStoreError(f"Unable to encode negative integer {value}")
    return value.to_bytes(max(1, (value.bit_length() + 7) // 8), BYTE_ORDER)



def decode_integer(value: bytes) -> int:
    return int.from_bytes(value, BYTE_ORDER)



def components_from_private_key(private_key: RSAPrivateKey) -> KeyComponents:
    private_numbers = private_key.private_numbers()
    public_numbers = private_numbers.public_numbers
    return KeyComponents(
        primes=(
            encode_integer(private_numbers.p),
            encode_integer(private_numbers.q),
        ),
        n=encode_integer(public_numbers.n),
        e=encode_integer(public_numbers.e),
        d=encode_integer(private_numbers.d),
    )



def _decode_two_prime_components(components: KeyComponents) -> tuple[int, int, int, int, int]:
    if len(components.primes) != 2:
        raise KeyStoreError(f"Only two-prime keys are supported (got {len(components.primes)} primes)")

    p, q = (decode_integer(prime) for prime in components.primes)
    return (
        decode_integer(components.n),
        decode_integer(components.e),
        decode_integer(components.d),
        p,
        q,
    )



def components_to_private_key(components: KeyComponents) -> RSAPrivateKey:
    """
    Rebuild a working private key from stored components.

    Only the structural checks that `cryptography` always runs are applied here. A record
    that is well-formed but mathematically wrong either fails with a `KeyStoreError` or
    yields a key which does not decrypt correctly. Use `check_components` for a full check.
    """
    n, e, d, p, q = _decode_two_prime_components(components)

    try:
        private_numbers = RSAPrivateNumbers(
            p=p,
            q=q,
            d=d,
            dmp1=rsa_crt_dmp1(d, p),
            dmq1=rsa_crt_dmq1(d, q),
            iqmp=rsa_crt_iqmp(p, q),
            public_numbers=RSAPublicNumbers(e=e, n=n),
        )
        return private_numbers.private_key(unsafe_skip_rsa_key_validation=True)
    except (ValueError, TypeError, ZeroDivisionError) as error:
        raise KeyStoreError(f"Unable to rebuild key from its components: {error}") from error



def components_to_rsa_key(components: KeyComponents) -> RSA.RsaKey:
    """
    Rebuild the private key for PyCryptodome, whose PKCS#1 v1.5 cipher reports padding failures.
    """
    n, e, d, p, q = _decode_two_prime_components(components)

    try:
        return RSA.construct((n, e, d, p, q), consistency_check=False)
    except (ValueError, TypeError, ZeroDivisionError) as error:
        raise KeyStoreError(f"Unable to rebuild key from its components: {error}") from error



def check_components(components: KeyComponents) -> None:
    primes = [decode_integer(prime) for prime in components.primes]
    n = decode_integer(components.n)
    e = decode_integer(components.e)
    d = decode_integer(components.d)

    if len(primes) < 2 or any(prime < 2 for prime in primes):
        raise KeyStoreError("Key must have at least two prime factors")

    if prod(primes) != n:
        raise KeyStoreError("Product of the prime factors does not match the modulus")

    # Carmichael's totient of n
    totient = lcm(*(prime - 1 for prime in primes))
    if (e * d) % totient != 1:
        raise KeyStoreError("Private exponent is not the inverse of the public exponent")

    logger.debug("Key components of {bits}-bit modulus are consistent", bits=n.bit_length())

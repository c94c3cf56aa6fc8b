from __future__ import annotations

from dataclasses import dataclass, field

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from bunq_sdk.config.const import RSA_KEY_BITS


@dataclass(frozen=True, slots=True)
class KeyPair:
    """Client RSA credential pair.

    The private key signs outgoing requests; the PEM public key is registered
    with bunq during installation.
    """

    private_key: rsa.RSAPrivateKey = field(repr=False)
    public_key_pem: str

    def private_pem(self, passphrase: bytes | None = None) -> str:
        return private_key_pem(self.private_key, passphrase)


def generate_rsa_key(bits: int = RSA_KEY_BITS) -> rsa.RSAPrivateKey:
    return rsa.generate_private_key(public_exponent=65537, key_size=bits)


def generate_key_pair(bits: int = RSA_KEY_BITS) -> KeyPair:
    key = generate_rsa_key(bits)
    return KeyPair(private_key=key, public_key_pem=public_key_pem(key.public_key()))


def private_key_pem(key: rsa.RSAPrivateKey, passphrase: bytes | None = None) -> str:
    encryption: serialization.KeySerializationEncryption
    if passphrase:
        encryption = serialization.BestAvailableEncryption(passphrase)
    else:
        encryption = serialization.NoEncryption()
    pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=encryption,
    )
    return pem.decode("ascii")


def public_key_pem(key: rsa.RSAPublicKey) -> str:
    pem = key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return pem.decode("ascii")


def load_private_key(pem: str | bytes, passphrase: bytes | None = None) -> rsa.RSAPrivateKey:
    data = pem.encode("ascii") if isinstance(pem, str) else pem
    key = serialization.load_pem_private_key(data, password=passphrase)
    if not isinstance(key, rsa.RSAPrivateKey):
        raise ValueError("private key is not an RSA key")
    return key


def load_public_key(pem: str | bytes) -> rsa.RSAPublicKey:
    data = pem.encode("ascii") if isinstance(pem, str) else pem
    key = serialization.load_pem_public_key(data)
    if not isinstance(key, rsa.RSAPublicKey):
        raise ValueError("public key is not an RSA key")
    return key


def load_key_pair(private_pem: str, public_pem: str | None = None, passphrase: bytes | None = None) -> KeyPair:
    key = load_private_key(private_pem, passphrase)
    public = public_pem if public_pem else public_key_pem(key.public_key())
    return KeyPair(private_key=key, public_key_pem=public)


__all__ = [
    "KeyPair",
    "generate_rsa_key",
    "generate_key_pair",
    "private_key_pem",
    "public_key_pem",
    "load_private_key",
    "load_public_key",
    "load_key_pair",
]

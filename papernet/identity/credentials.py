"""Signing credentials for ledger identities.

Uses the `cryptography` library exclusively. ECDSA over P-256 with
SHA-256, the curve permissioned-ledger membership services issue.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import final

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec


@final
@dataclass(frozen=True, slots=True)
class SigningCredentials:
    """PEM-encoded key pair. The private half never leaves the client."""

    private_key_pem: bytes
    public_key_pem: bytes

    def __repr__(self) -> str:
        return "SigningCredentials(private_key_pem=<redacted>, public_key_pem=...)"


def generate_credentials() -> SigningCredentials:
    """Generate a fresh P-256 key pair."""
    private_key = ec.generate_private_key(ec.SECP256R1())
    return SigningCredentials(
        private_key_pem=private_key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.PKCS8,
            encryption_algorithm=serialization.NoEncryption(),
        ),
        public_key_pem=private_key.public_key().public_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        ),
    )


def sign(credentials: SigningCredentials, data: bytes) -> bytes:
    """DER-encoded ECDSA signature over data."""
    key = serialization.load_pem_private_key(credentials.private_key_pem, password=None)
    if not isinstance(key, ec.EllipticCurvePrivateKey):
        raise TypeError("Not an EC private key")
    return key.sign(data, ec.ECDSA(hashes.SHA256()))


def verify(public_key_pem: bytes, data: bytes, signature: bytes) -> bool:
    """True if signature is valid for data under the given public key."""
    key = serialization.load_pem_public_key(public_key_pem)
    if not isinstance(key, ec.EllipticCurvePublicKey):
        return False
    try:
        key.verify(signature, data, ec.ECDSA(hashes.SHA256()))
    except InvalidSignature:
        return False
    return True

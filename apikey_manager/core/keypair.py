"""
secp256k1 keypairs for API credentials.

The credential handed to a caller is the hex-encoded private scalar.
The stored fingerprint is an address-style digest of the public point,
so the private half never has to be kept server-side.
"""

from typing import Tuple

from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec

CURVE = ec.SECP256K1
CURVE_ORDER = 0xFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141
PRIVATE_KEY_SIZE = 32
FINGERPRINT_SIZE = 20


def generate_keypair() -> Tuple[str, str]:
    """
    Generate a fresh keypair.

    Returns:
        Tuple of (credential, fingerprint)
    """
    private_key = ec.generate_private_key(CURVE())
    scalar = private_key.private_numbers().private_value
    credential = scalar.to_bytes(PRIVATE_KEY_SIZE, "big").hex()
    return credential, fingerprint_of(private_key.public_key())


def fingerprint_of(public_key: ec.EllipticCurvePublicKey) -> str:
    point = public_key.public_bytes(
        serialization.Encoding.X962,
        serialization.PublicFormat.UncompressedPoint,
    )
    digest = hashes.Hash(hashes.SHA3_256())
    # drop the 0x04 uncompressed-point marker
    digest.update(point[1:])
    return "0x" + digest.finalize()[-FINGERPRINT_SIZE:].hex()


def decode_credential(credential: str) -> ec.EllipticCurvePrivateKey:
    """
    Parse a hex credential back into a private key.

    Raises:
        ValueError: If the credential is not a valid secp256k1 private scalar
    """
    if len(credential) != PRIVATE_KEY_SIZE * 2:
        raise ValueError(
            f"Credential must be {PRIVATE_KEY_SIZE * 2} hex characters, got {len(credential)}"
        )

    raw = bytes.fromhex(credential)
    if len(raw) != PRIVATE_KEY_SIZE:
        raise ValueError("Credential is not contiguous hex")

    scalar = int.from_bytes(raw, "big")
    if not 0 < scalar < CURVE_ORDER:
        raise ValueError("Credential is outside the curve order")

    return ec.derive_private_key(scalar, CURVE())


def fingerprint_credential(credential: str) -> str:
    """Derive the stored fingerprint from a caller-held credential."""
    return fingerprint_of(decode_credential(credential).public_key())

"""
UHRP Commitment Signing

ECDSA over secp256k1 with DER-encoded signatures.

The signed message is the byte concatenation of the contents of fields 0-6
(protocol tag through file size), with no separators and no length
prefixes. The message is hashed with SHA-256 and the resulting digest is
handed to the key's ECDSA-SHA256 routine, so the curve operation runs over
SHA-256(SHA-256(message)). Producers using the BSV SDK
(`privateKey.sign(Hash.sha256(message))`) generate exactly this.

Public keys are SEC1 points: compressed (33 bytes, 66 hex characters, the
form used for the host identity field) or uncompressed (65 bytes).
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import (
    decode_dss_signature,
    encode_dss_signature,
)

from .errors import FailureKind, InvalidPublicKeyError
from .hashing import sha256_digest
from .wire import FieldLike, as_bytes

MESSAGE_FIELD_COUNT = 7

CURVE = ec.SECP256K1()

PublicKeyLike = Union[bytes, str, ec.EllipticCurvePublicKey]


def canonical_message(fields: Sequence[FieldLike]) -> bytes:
    """
    Build the signed message from the first seven fields.

    Any fields after the seventh (the signature) are ignored.
    """
    if len(fields) < MESSAGE_FIELD_COUNT:
        raise ValueError(
            f"Signed message needs {MESSAGE_FIELD_COUNT} fields, got {len(fields)}"
        )
    return b"".join(as_bytes(f) for f in fields[:MESSAGE_FIELD_COUNT])


def message_digest(fields: Sequence[FieldLike]) -> bytes:
    """SHA-256 of the canonical message."""
    return sha256_digest(canonical_message(fields))


def load_public_key(key: PublicKeyLike) -> ec.EllipticCurvePublicKey:
    """
    Load a secp256k1 public key from SEC1 bytes, hex, or a key object.

    Raises:
        InvalidPublicKeyError: if the key is not a valid secp256k1 point
    """
    if isinstance(key, ec.EllipticCurvePublicKey):
        if key.curve.name != CURVE.name:
            raise InvalidPublicKeyError(f"Expected secp256k1 key, got {key.curve.name}")
        return key

    if isinstance(key, str):
        try:
            key = bytes.fromhex(key.strip())
        except ValueError:
            raise InvalidPublicKeyError("Public key is not valid hex")

    if not isinstance(key, (bytes, bytearray)) or len(key) not in (33, 65):
        raise InvalidPublicKeyError("Public key must be a 33 or 65 byte SEC1 point")

    try:
        return ec.EllipticCurvePublicKey.from_encoded_point(CURVE, bytes(key))
    except ValueError as e:
        raise InvalidPublicKeyError(f"Invalid secp256k1 point: {e}")


def public_key_bytes(key: PublicKeyLike, compressed: bool = True) -> bytes:
    """SEC1 encoding of a public key."""
    fmt = (
        serialization.PublicFormat.CompressedPoint
        if compressed
        else serialization.PublicFormat.UncompressedPoint
    )
    return load_public_key(key).public_bytes(serialization.Encoding.X962, fmt)


def public_key_hex(key: PublicKeyLike) -> str:
    """Compressed public key as lowercase hex (the host identity form)."""
    return public_key_bytes(key).hex()


@dataclass(frozen=True)
class SignatureOutcome:
    """Result of checking one signature."""
    valid: bool
    failure_kind: Optional[FailureKind] = None
    reason: Optional[str] = None

    @classmethod
    def ok(cls) -> 'SignatureOutcome':
        return cls(valid=True)

    @classmethod
    def failed(cls, kind: FailureKind, reason: str) -> 'SignatureOutcome':
        return cls(valid=False, failure_kind=kind, reason=reason)


class SignatureVerifier:
    """
    Verifies a commitment signature against a supplied public key.

    Stateless; one instance may be shared across threads.
    """

    def verify(
        self,
        message_fields: Sequence[FieldLike],
        signature: bytes,
        public_key: PublicKeyLike
    ) -> SignatureOutcome:
        """
        Verify a DER signature over the canonical message.

        Never raises: malformed DER, a bad key, or a wrong signature are all
        reported through the returned outcome.
        """
        try:
            r, s = decode_dss_signature(bytes(signature))
        except (ValueError, TypeError):
            return SignatureOutcome.failed(
                FailureKind.SIGNATURE_DECODE_ERROR,
                "signature is not valid DER"
            )

        try:
            key = load_public_key(public_key)
        except InvalidPublicKeyError as e:
            return SignatureOutcome.failed(FailureKind.SIGNATURE_VERIFICATION_FAILED, str(e))

        try:
            digest = message_digest(message_fields)
        except ValueError as e:
            return SignatureOutcome.failed(FailureKind.SIGNATURE_VERIFICATION_FAILED, str(e))

        try:
            key.verify(encode_dss_signature(r, s), digest, ec.ECDSA(hashes.SHA256()))
        except InvalidSignature:
            return SignatureOutcome.failed(
                FailureKind.SIGNATURE_VERIFICATION_FAILED,
                "signature does not match message and key"
            )

        return SignatureOutcome.ok()


@dataclass
class KeyPair:
    """secp256k1 key pair used to sign commitments."""
    private_key: ec.EllipticCurvePrivateKey

    @property
    def public_key(self) -> ec.EllipticCurvePublicKey:
        return self.private_key.public_key()

    @property
    def public_key_hex(self) -> str:
        return public_key_hex(self.public_key)

    @property
    def private_key_hex(self) -> str:
        return format(self.private_key.private_numbers().private_value, "064x")

    def to_dict(self) -> dict:
        return {
            "curve": "secp256k1",
            "public_key": self.public_key_hex,
            "private_key": self.private_key_hex,
        }


def generate_key_pair() -> KeyPair:
    """Generate a new secp256k1 key pair."""
    return KeyPair(private_key=ec.generate_private_key(CURVE))


def key_pair_from_private_hex(private_hex: str) -> KeyPair:
    """Rebuild a key pair from a 32-byte private scalar in hex."""
    try:
        value = int(private_hex, 16)
    except ValueError:
        raise ValueError("Private key is not valid hex")
    return KeyPair(private_key=ec.derive_private_key(value, CURVE))


def sign_fields(fields: Sequence[FieldLike], private_key: ec.EllipticCurvePrivateKey) -> bytes:
    """Sign the canonical message of the first seven fields; returns DER bytes."""
    digest = message_digest(fields)
    return private_key.sign(digest, ec.ECDSA(hashes.SHA256()))


def verify_signature(
    message_fields: Sequence[FieldLike],
    signature: bytes,
    public_key: PublicKeyLike
) -> bool:
    """Verify a commitment signature; True if valid."""
    return SignatureVerifier().verify(message_fields, signature, public_key).valid

"""
UHRP Storage Commitment

The eight positional fields of a commitment token, and helpers to build and
sign new tokens.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple, Union

from .clock import SystemClock
from .config import UHRP_ADVERTISE_ACTION, UHRP_PROTOCOL_ADDRESS
from .hashing import is_valid_sha256_hex
from .signing import KeyPair, canonical_message, sign_fields
from .wire import encode_fields


@dataclass(frozen=True)
class StorageCommitment:
    """
    A decoded storage commitment.

    Field order on the wire:
        0 protocol_tag, 1 host_identity, 2 content_hash, 3 action,
        4 url, 5 expiry_time, 6 file_size, 7 signature

    A commitment read from the wire keeps the exact bytes of fields 0-6, so
    message() and to_script() reproduce what was signed even when an
    integer was written as "+10" or "010", or the host identity is not UTF-8.
    """
    protocol_tag: str
    host_identity: str
    content_hash: str
    action: str
    url: str
    expiry_time: int
    file_size: int
    signature: bytes
    signed_fields: Tuple[bytes, ...] = field(default=(), repr=False, compare=False)

    @classmethod
    def from_fields(cls, fields: Sequence[bytes]) -> 'StorageCommitment':
        """
        Interpret decoded fields.

        Expects fields that already passed the check chain; raises
        ValueError otherwise.
        """
        if len(fields) < 8:
            raise ValueError(f"Commitment needs 8 fields, got {len(fields)}")
        return cls(
            protocol_tag=fields[0].decode('utf-8'),
            host_identity=fields[1].decode('utf-8', errors='replace'),
            content_hash=fields[2].hex(),
            action=fields[3].decode('utf-8', errors='replace'),
            url=fields[4].decode('utf-8'),
            expiry_time=int(fields[5].decode('ascii'), 10),
            file_size=int(fields[6].decode('ascii'), 10),
            signature=bytes(fields[7]),
            signed_fields=tuple(bytes(f) for f in fields[:7]),
        )

    def message_fields(self) -> List[bytes]:
        """The seven fields covered by the signature."""
        if self.signed_fields:
            return list(self.signed_fields)
        return [
            self.protocol_tag.encode('utf-8'),
            self.host_identity.encode('utf-8'),
            bytes.fromhex(self.content_hash),
            self.action.encode('utf-8'),
            self.url.encode('utf-8'),
            str(self.expiry_time).encode('utf-8'),
            str(self.file_size).encode('utf-8'),
        ]

    def to_fields(self) -> List[bytes]:
        return self.message_fields() + [self.signature]

    def message(self) -> bytes:
        return canonical_message(self.message_fields())

    def to_script(self) -> bytes:
        return encode_fields(self.to_fields())

    def to_dict(self) -> Dict[str, Any]:
        """Summary for display and logs; the signature is left out."""
        return {
            "protocol_tag": self.protocol_tag,
            "host_identity": self.host_identity,
            "content_hash": self.content_hash,
            "action": self.action,
            "url": self.url,
            "expiry_time": self.expiry_time,
            "file_size": self.file_size,
        }


def _content_hash_bytes(content_hash: Union[bytes, str]) -> bytes:
    if isinstance(content_hash, str):
        if not is_valid_sha256_hex(content_hash):
            raise ValueError("content_hash must be 64 lowercase hex characters")
        return bytes.fromhex(content_hash)
    if len(content_hash) != 32:
        raise ValueError(f"content_hash must be 32 bytes, got {len(content_hash)}")
    return bytes(content_hash)


def expiry_from_hosting_minutes(minutes: int, clock=None) -> int:
    """Unix expiry time for hosting a file for the given number of minutes."""
    if minutes <= 0:
        raise ValueError("hosting minutes must be positive")
    clock = clock or SystemClock()
    return clock.now() + int(minutes) * 60


def create_commitment(
    key_pair: KeyPair,
    content_hash: Union[bytes, str],
    url: str,
    expiry_time: int,
    file_size: int,
    action: str = UHRP_ADVERTISE_ACTION,
    protocol_tag: str = UHRP_PROTOCOL_ADDRESS
) -> bytes:
    """
    Build and sign a commitment script.

    The host identity field is the compressed public key of key_pair in hex.
    No semantic checks are applied; evaluate the result to validate it.

    Raises:
        ValueError: if content_hash is not a SHA-256 digest
        FieldTooLongError: if any field exceeds 255 bytes
    """
    fields = [
        protocol_tag.encode('utf-8'),
        key_pair.public_key_hex.encode('utf-8'),
        _content_hash_bytes(content_hash),
        action.encode('utf-8'),
        url.encode('utf-8'),
        str(int(expiry_time)).encode('utf-8'),
        str(int(file_size)).encode('utf-8'),
    ]
    signature = sign_fields(fields, key_pair.private_key)
    return encode_fields(fields + [signature])

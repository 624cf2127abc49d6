"""
UHRP Storage Commitment Verifier

Version: 1.0.0

Decodes and verifies UHRP storage commitment tokens: length-prefixed,
secp256k1-signed attestations that a host will serve a file (identified by
its SHA-256 hash and URL) until an expiry time.

A commitment is valid when, in order:
    - the script decodes to at least eight fields
    - field 0 is the UHRP protocol address
    - field 2 is a 32-byte SHA-256 digest
    - field 4 is a well-formed URL
    - field 5 (expiry) is strictly in the future
    - field 6 (file size) is strictly positive
    - field 7 is a DER signature over fields 0-6 by the supplied key

Usage:
    from uhrp_commitment import (
        CommitmentValidator,
        create_commitment,
        generate_key_pair,
    )

    keys = generate_key_pair()
    script = create_commitment(
        keys,
        content_hash=digest,
        url="https://files.example.com/report.pdf",
        expiry_time=now + 86400,
        file_size=1024,
    )

    result = CommitmentValidator().evaluate_script(script, keys.public_key_hex)
    if result.valid:
        print(result.commitment.url)
    else:
        print(result.failure_kind)
"""

__version__ = "1.0.0"

# Wire format
from .wire import (
    MAX_FIELD_LENGTH,
    decode_fields,
    encode_fields,
)

# Errors
from .errors import (
    FailureKind,
    CommitmentError,
    MalformedScriptError,
    FieldTooLongError,
    InvalidPublicKeyError,
)

# Hashing
from .hashing import (
    SHA256_HEX_PATTERN,
    sha256_digest,
    sha256_hex,
    is_valid_sha256_hex,
)

# URLs
from .urls import is_valid_url

# Clock
from .clock import SystemClock, FixedClock

# Configuration
from .config import (
    UHRP_PROTOCOL_ADDRESS,
    UHRP_ADVERTISE_ACTION,
    ValidatorConfig,
)

# Signing
from .signing import (
    SignatureVerifier,
    SignatureOutcome,
    KeyPair,
    canonical_message,
    message_digest,
    load_public_key,
    public_key_hex,
    generate_key_pair,
    key_pair_from_private_hex,
    sign_fields,
    verify_signature,
)

# Checks
from .checks import (
    Check,
    CheckResult,
    CheckEvaluation,
    CheckContext,
    FieldCountCheck,
    ProtocolTagCheck,
    ContentHashCheck,
    UrlCheck,
    ExpiryCheck,
    FileSizeCheck,
    SignatureCheck,
    default_checks,
)

# Commitments
from .commitment import (
    StorageCommitment,
    create_commitment,
    expiry_from_hosting_minutes,
)

# Validator
from .validator import (
    CommitmentValidator,
    EvaluationResult,
    evaluate_commitment,
)


__all__ = [
    "__version__",

    # Wire format
    "MAX_FIELD_LENGTH",
    "decode_fields",
    "encode_fields",

    # Errors
    "FailureKind",
    "CommitmentError",
    "MalformedScriptError",
    "FieldTooLongError",
    "InvalidPublicKeyError",

    # Hashing
    "SHA256_HEX_PATTERN",
    "sha256_digest",
    "sha256_hex",
    "is_valid_sha256_hex",

    # URLs
    "is_valid_url",

    # Clock
    "SystemClock",
    "FixedClock",

    # Configuration
    "UHRP_PROTOCOL_ADDRESS",
    "UHRP_ADVERTISE_ACTION",
    "ValidatorConfig",

    # Signing
    "SignatureVerifier",
    "SignatureOutcome",
    "KeyPair",
    "canonical_message",
    "message_digest",
    "load_public_key",
    "public_key_hex",
    "generate_key_pair",
    "key_pair_from_private_hex",
    "sign_fields",
    "verify_signature",

    # Checks
    "Check",
    "CheckResult",
    "CheckEvaluation",
    "CheckContext",
    "FieldCountCheck",
    "ProtocolTagCheck",
    "ContentHashCheck",
    "UrlCheck",
    "ExpiryCheck",
    "FileSizeCheck",
    "SignatureCheck",
    "default_checks",

    # Commitments
    "StorageCommitment",
    "create_commitment",
    "expiry_from_hosting_minutes",

    # Validator
    "CommitmentValidator",
    "EvaluationResult",
    "evaluate_commitment",
]

"""
UHRP Commitment Errors

Failure kinds reported by the validator, and the exceptions raised by the
wire codec and key helpers. The validator never lets these exceptions
escape; they are converted into negative evaluation results.
"""

from enum import Enum


class FailureKind(str, Enum):
    """Reasons a commitment evaluation can fail."""
    MALFORMED_SCRIPT = "MALFORMED_SCRIPT"
    PROTOCOL_MISMATCH = "PROTOCOL_MISMATCH"
    INVALID_HASH_FORMAT = "INVALID_HASH_FORMAT"
    INVALID_URL = "INVALID_URL"
    EXPIRED_OR_UNPARSABLE_TIMESTAMP = "EXPIRED_OR_UNPARSABLE_TIMESTAMP"
    INVALID_FILE_SIZE = "INVALID_FILE_SIZE"
    SIGNATURE_DECODE_ERROR = "SIGNATURE_DECODE_ERROR"
    SIGNATURE_VERIFICATION_FAILED = "SIGNATURE_VERIFICATION_FAILED"


class CommitmentError(Exception):
    """Base class for commitment processing errors."""


class MalformedScriptError(CommitmentError, ValueError):
    """A length prefix overruns the buffer, or required fields are missing."""

    def __init__(self, message: str, offset: int = None):
        super().__init__(message)
        self.offset = offset


class FieldTooLongError(CommitmentError, ValueError):
    """A field does not fit behind a single-byte length prefix."""

    def __init__(self, index: int, length: int):
        super().__init__(f"Field {index} is {length} bytes; maximum is 255")
        self.index = index
        self.length = length


class InvalidPublicKeyError(CommitmentError, ValueError):
    """The supplied public key is not a valid secp256k1 point."""

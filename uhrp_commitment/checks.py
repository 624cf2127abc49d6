"""
UHRP Commitment Checks

The ordered chain of predicates a decoded commitment must pass:

    1. field_count      at least eight fields were decoded
    2. protocol_tag     field 0 equals the configured protocol address
    3. content_hash     field 2, as hex, is a lowercase SHA-256 digest
    4. url              field 4 is a well-formed http(s) URL
    5. expiry           field 5 is a unix time strictly after "now"
    6. file_size        field 6 is a strictly positive integer
    7. signature        field 7 signs fields 0-6 under the supplied key

Every check is fail-closed: anything it cannot interpret is a FAIL, and
evaluate() never raises.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence

from .config import ValidatorConfig
from .errors import FailureKind
from .hashing import is_valid_sha256_hex
from .signing import PublicKeyLike, SignatureVerifier
from .wire import MAX_FIELD_LENGTH

_DECIMAL_RE = re.compile(r"[+-]?[0-9]+")


class CheckResult(str, Enum):
    """Check evaluation result."""
    PASS = "PASS"
    FAIL = "FAIL"


@dataclass
class CheckEvaluation:
    """Result of evaluating a single check."""
    check_id: str
    result: CheckResult
    field_index: Optional[int] = None
    failure_kind: Optional[FailureKind] = None
    required: Optional[str] = None
    observed: Optional[str] = None

    def passed(self) -> bool:
        return self.result == CheckResult.PASS

    def to_dict(self) -> Dict[str, Any]:
        d = {"check_id": self.check_id, "result": self.result.value}
        if self.field_index is not None:
            d["field_index"] = self.field_index
        if self.failure_kind:
            d["failure_kind"] = self.failure_kind.value
        if self.required:
            d["required"] = self.required
        if self.observed:
            d["observed"] = self.observed
        return d


@dataclass(frozen=True)
class CheckContext:
    """Everything a check may consult besides the fields themselves."""
    config: ValidatorConfig
    now: int
    public_key: PublicKeyLike
    url_validator: Callable[[str], bool]
    signature_verifier: SignatureVerifier


def parse_decimal(field: bytes) -> Optional[int]:
    """
    Parse a base-10 integer field.

    Accepts an optional sign followed by ASCII digits only; returns None for
    anything else (including invalid UTF-8 and surrounding whitespace). Text
    longer than a wire field can hold is rejected before conversion.
    """
    if len(field) > MAX_FIELD_LENGTH:
        return None
    try:
        text = field.decode('ascii')
    except UnicodeDecodeError:
        return None
    if not _DECIMAL_RE.fullmatch(text):
        return None
    return int(text, 10)


def _printable(field: bytes, limit: int = 80) -> str:
    text = field.decode('utf-8', errors='replace')
    if len(text) > limit:
        text = text[:limit] + "..."
    return text


class Check(ABC):
    """Abstract base class for commitment checks."""

    check_id: str = ""
    field_index: Optional[int] = None
    failure_kind: FailureKind = FailureKind.MALFORMED_SCRIPT

    @abstractmethod
    def evaluate(self, fields: Sequence[bytes], ctx: CheckContext) -> CheckEvaluation:
        """Evaluate the check. Must return PASS or FAIL, never raise."""
        pass

    def _pass(self) -> CheckEvaluation:
        return CheckEvaluation(
            check_id=self.check_id,
            result=CheckResult.PASS,
            field_index=self.field_index
        )

    def _fail(
        self,
        required: str = None,
        observed: str = None,
        kind: FailureKind = None
    ) -> CheckEvaluation:
        return CheckEvaluation(
            check_id=self.check_id,
            result=CheckResult.FAIL,
            field_index=self.field_index,
            failure_kind=kind or self.failure_kind,
            required=required,
            observed=observed
        )


class FieldCountCheck(Check):
    """Enough fields were decoded to address every position."""

    check_id = "field_count"
    failure_kind = FailureKind.MALFORMED_SCRIPT

    def evaluate(self, fields, ctx) -> CheckEvaluation:
        if len(fields) >= ctx.config.min_fields:
            return self._pass()
        return self._fail(f">= {ctx.config.min_fields} fields", f"{len(fields)} fields")


class ProtocolTagCheck(Check):
    """Field 0 is the protocol address, byte for byte."""

    check_id = "protocol_tag"
    field_index = 0
    failure_kind = FailureKind.PROTOCOL_MISMATCH

    def evaluate(self, fields, ctx) -> CheckEvaluation:
        expected = ctx.config.protocol_tag
        if fields[0] == expected.encode('utf-8'):
            return self._pass()
        return self._fail(expected, _printable(fields[0]))


class ContentHashCheck(Check):
    """Field 2, rendered as hex, is 64 lowercase hex characters (32 bytes)."""

    check_id = "content_hash"
    field_index = 2
    failure_kind = FailureKind.INVALID_HASH_FORMAT

    def evaluate(self, fields, ctx) -> CheckEvaluation:
        rendered = fields[2].hex()
        if is_valid_sha256_hex(rendered, ctx.config.hash_pattern):
            return self._pass()
        return self._fail("32-byte SHA-256 digest", f"{len(fields[2])} bytes")


class UrlCheck(Check):
    """Field 4 is a well-formed URL."""

    check_id = "url"
    field_index = 4
    failure_kind = FailureKind.INVALID_URL

    def evaluate(self, fields, ctx) -> CheckEvaluation:
        try:
            url = fields[4].decode('utf-8')
        except UnicodeDecodeError:
            return self._fail("UTF-8 URL", "invalid UTF-8")

        try:
            ok = bool(ctx.url_validator(url))
        except Exception as e:
            return self._fail("well-formed URL", f"validator error: {e}")

        if ok:
            return self._pass()
        return self._fail("well-formed URL", _printable(fields[4]))


class ExpiryCheck(Check):
    """Field 5 is a unix timestamp strictly later than the evaluation time."""

    check_id = "expiry"
    field_index = 5
    failure_kind = FailureKind.EXPIRED_OR_UNPARSABLE_TIMESTAMP

    def evaluate(self, fields, ctx) -> CheckEvaluation:
        expiry = parse_decimal(fields[5])
        if expiry is None:
            return self._fail("decimal unix timestamp", _printable(fields[5]))
        if expiry > ctx.now:
            return self._pass()
        return self._fail(f"expiry > {ctx.now}", str(expiry))


class FileSizeCheck(Check):
    """Field 6 is a strictly positive byte count."""

    check_id = "file_size"
    field_index = 6
    failure_kind = FailureKind.INVALID_FILE_SIZE

    def evaluate(self, fields, ctx) -> CheckEvaluation:
        size = parse_decimal(fields[6])
        if size is None:
            return self._fail("decimal file size", _printable(fields[6]))
        if size > 0:
            return self._pass()
        return self._fail("file size > 0", str(size))


class SignatureCheck(Check):
    """Field 7 is a valid signature over fields 0-6 for the supplied key."""

    check_id = "signature"
    field_index = 7
    failure_kind = FailureKind.SIGNATURE_VERIFICATION_FAILED

    def evaluate(self, fields, ctx) -> CheckEvaluation:
        outcome = ctx.signature_verifier.verify(fields[:7], fields[7], ctx.public_key)
        if outcome.valid:
            return self._pass()
        # The reason never includes signature or key bytes
        return self._fail("valid DER signature", outcome.reason, kind=outcome.failure_kind)


def default_checks() -> List[Check]:
    """The standard check chain, in evaluation order."""
    return [
        FieldCountCheck(),
        ProtocolTagCheck(),
        ContentHashCheck(),
        UrlCheck(),
        ExpiryCheck(),
        FileSizeCheck(),
        SignatureCheck(),
    ]

"""
UHRP Commitment Validator

Evaluates a storage commitment token:

    bytes -> decode_fields -> [field0..field7] -> ordered checks -> verdict

The checks run left to right and stop at the first failure. Every failure,
including a script that cannot be decoded, comes back as a negative
EvaluationResult; nothing is raised to the caller.

Usage:
    from uhrp_commitment import CommitmentValidator, FixedClock

    validator = CommitmentValidator(clock=FixedClock(1700000000))
    result = validator.evaluate_script(script, public_key_hex)

    if result.valid:
        commitment = result.commitment
    else:
        print(result.failure_kind)
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from .checks import Check, CheckContext, CheckEvaluation, CheckResult, default_checks
from .clock import SystemClock
from .commitment import StorageCommitment
from .config import ValidatorConfig
from .errors import FailureKind, MalformedScriptError
from .logging_config import VerificationLogger, evaluation_context, verification_log
from .signing import PublicKeyLike, SignatureVerifier
from .urls import is_valid_url
from .wire import BYTES_LIKE, decode_fields


@dataclass
class EvaluationResult:
    """Outcome of evaluating one commitment."""
    valid: bool
    evaluated_at: int
    failure_kind: Optional[FailureKind] = None
    evaluations: List[CheckEvaluation] = field(default_factory=list)
    commitment: Optional[StorageCommitment] = None
    reason: Optional[str] = None
    evaluation_id: Optional[str] = None

    def __bool__(self) -> bool:
        return self.valid

    @property
    def failed_check(self) -> Optional[CheckEvaluation]:
        for evaluation in self.evaluations:
            if not evaluation.passed():
                return evaluation
        return None

    @classmethod
    def success(
        cls,
        evaluated_at: int,
        evaluations: List[CheckEvaluation],
        commitment: StorageCommitment,
        evaluation_id: str = None
    ) -> 'EvaluationResult':
        return cls(
            valid=True,
            evaluated_at=evaluated_at,
            evaluations=evaluations,
            commitment=commitment,
            evaluation_id=evaluation_id
        )

    @classmethod
    def failure(
        cls,
        kind: FailureKind,
        evaluated_at: int,
        evaluations: List[CheckEvaluation] = None,
        reason: str = None,
        evaluation_id: str = None
    ) -> 'EvaluationResult':
        return cls(
            valid=False,
            evaluated_at=evaluated_at,
            failure_kind=kind,
            evaluations=evaluations or [],
            reason=reason,
            evaluation_id=evaluation_id
        )

    def to_dict(self) -> Dict[str, Any]:
        d = {
            "valid": self.valid,
            "evaluated_at": self.evaluated_at,
            "checks": [e.to_dict() for e in self.evaluations],
        }
        if self.evaluation_id:
            d["evaluation_id"] = self.evaluation_id
        if self.failure_kind:
            d["failure_kind"] = self.failure_kind.value
        if self.reason:
            d["reason"] = self.reason
        if self.commitment:
            d["commitment"] = self.commitment.to_dict()
        return d


def _copy_fields(fields: Sequence[bytes]) -> List[bytes]:
    """Snapshot caller-supplied fields as bytes; raises MalformedScriptError."""
    if isinstance(fields, BYTES_LIKE + (str,)):
        raise MalformedScriptError("Fields must be a sequence of byte strings")
    try:
        items = list(fields)
    except TypeError:
        raise MalformedScriptError(f"Fields must be a sequence, got {type(fields).__name__}")

    for index, item in enumerate(items):
        if not isinstance(item, BYTES_LIKE):
            raise MalformedScriptError(f"Field {index} must be bytes, got {type(item).__name__}")
    return [bytes(item) for item in items]


class CommitmentValidator:
    """
    Validates storage commitment tokens against a public key.

    Holds no per-call state: the same validator may be used concurrently
    from several threads.
    """

    def __init__(
        self,
        config: Optional[ValidatorConfig] = None,
        clock=None,
        url_validator: Optional[Callable[[str], bool]] = None,
        signature_verifier: Optional[SignatureVerifier] = None,
        checks: Optional[Sequence[Check]] = None,
        logger: Optional[VerificationLogger] = None
    ):
        """
        Args:
            config: Protocol tag and hash pattern to check against
            clock: Object with now() -> unix seconds (default: wall clock)
            url_validator: Predicate for field 4 (default: is_valid_url)
            signature_verifier: Verifier for field 7
            checks: Check chain override (default: default_checks())
            logger: Event logger (default: module verification_log)
        """
        self.config = config or ValidatorConfig()
        self.clock = clock or SystemClock()
        self.url_validator = url_validator or is_valid_url
        self.signature_verifier = signature_verifier or SignatureVerifier()
        self.checks = list(checks) if checks is not None else default_checks()
        self.log = logger or verification_log

    def evaluate(self, fields: Sequence[bytes], public_key: PublicKeyLike) -> EvaluationResult:
        """
        Run the check chain over decoded fields.

        Stops at the first failing check. The clock is read once, so every
        check sees the same "now".
        """
        with evaluation_context() as evaluation_id:
            try:
                fields = _copy_fields(fields)
            except MalformedScriptError as e:
                return self._malformed(e, None, evaluation_id)
            return self._run_checks(fields, public_key, evaluation_id)

    def evaluate_script(self, script: bytes, public_key: PublicKeyLike) -> EvaluationResult:
        """Decode a raw script, then evaluate its fields."""
        with evaluation_context() as evaluation_id:
            try:
                fields = decode_fields(script)
            except MalformedScriptError as e:
                length = len(script) if isinstance(script, BYTES_LIKE) else None
                return self._malformed(e, length, evaluation_id)
            return self._run_checks(fields, public_key, evaluation_id)

    def is_valid(self, script: bytes, public_key: PublicKeyLike) -> bool:
        """Boolean form of evaluate_script()."""
        return self.evaluate_script(script, public_key).valid

    def _malformed(
        self,
        error: MalformedScriptError,
        script_length: Optional[int],
        evaluation_id: str
    ) -> EvaluationResult:
        self.log.script_malformed(str(error), script_length)
        self.log.commitment_decision(False, failure_kind=FailureKind.MALFORMED_SCRIPT.value)
        return EvaluationResult.failure(
            FailureKind.MALFORMED_SCRIPT,
            self.clock.now(),
            reason=str(error),
            evaluation_id=evaluation_id
        )

    def _run_checks(
        self,
        fields: List[bytes],
        public_key: PublicKeyLike,
        evaluation_id: str
    ) -> EvaluationResult:
        now = self.clock.now()
        ctx = CheckContext(
            config=self.config,
            now=now,
            public_key=public_key,
            url_validator=self.url_validator,
            signature_verifier=self.signature_verifier,
        )

        evaluations = []
        for check in self.checks:
            try:
                evaluation = check.evaluate(fields, ctx)
            except IndexError:
                evaluation = CheckEvaluation(
                    check_id=check.check_id,
                    result=CheckResult.FAIL,
                    field_index=check.field_index,
                    failure_kind=FailureKind.MALFORMED_SCRIPT,
                    required=f"field {check.field_index}",
                    observed=f"{len(fields)} fields"
                )
            evaluations.append(evaluation)
            self.log.check_evaluated(
                evaluation.check_id,
                evaluation.field_index,
                evaluation.passed(),
                evaluation.failure_kind.value if evaluation.failure_kind else None
            )
            if not evaluation.passed():
                self.log.commitment_decision(
                    False,
                    failure_kind=evaluation.failure_kind.value,
                    checks_run=len(evaluations)
                )
                return EvaluationResult.failure(
                    evaluation.failure_kind,
                    now,
                    evaluations,
                    reason=evaluation.observed,
                    evaluation_id=evaluation_id
                )

        try:
            commitment = StorageCommitment.from_fields(fields)
        except ValueError as e:
            # Only reachable with a custom check chain
            self.log.commitment_decision(
                False,
                failure_kind=FailureKind.MALFORMED_SCRIPT.value,
                checks_run=len(evaluations)
            )
            return EvaluationResult.failure(
                FailureKind.MALFORMED_SCRIPT, now, evaluations, reason=str(e),
                evaluation_id=evaluation_id
            )

        self.log.commitment_decision(
            True,
            content_hash=commitment.content_hash,
            checks_run=len(evaluations)
        )
        return EvaluationResult.success(now, evaluations, commitment, evaluation_id)


def evaluate_commitment(script: bytes, public_key: PublicKeyLike, clock=None) -> bool:
    """
    Convenience function: True if the script is a valid, unexpired
    commitment signed by public_key.
    """
    validator = CommitmentValidator(clock=clock)
    return validator.is_valid(script, public_key)

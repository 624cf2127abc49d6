"""
Configuration module for the UHRP commitment verifier.

Environment variables provide defaults; the validator itself only ever
sees an explicit ValidatorConfig, so alternate protocol tags can be used
without touching module state.
"""

import os
from dataclasses import dataclass

from .hashing import SHA256_HEX_PATTERN

# ============================================================
# Environment Configuration
# ============================================================

# Protocol address identifying UHRP advertisement tokens
UHRP_PROTOCOL_ADDRESS = os.getenv("UHRP_PROTOCOL_ADDRESS", "1UHRPYnMHPuQ5Tgb3AF8JXqwKkmZVy5hG")

# Action tag written by hosts advertising availability
UHRP_ADVERTISE_ACTION = os.getenv("UHRP_ADVERTISE_ACTION", "advertise")

# Logging
LOG_LEVEL = os.getenv("UHRP_LOG_LEVEL", "INFO")
LOG_JSON = os.getenv("UHRP_LOG_JSON", "true").lower() in ("1", "true", "yes")
LOG_FILE = os.getenv("UHRP_LOG_FILE", "") or None

# Protocol tag, host identity, hash, action, URL, expiry, size, signature
COMMITMENT_FIELD_COUNT = 8


# ============================================================
# Validator Configuration
# ============================================================

@dataclass(frozen=True)
class ValidatorConfig:
    """Named values the validator checks against."""
    protocol_tag: str = UHRP_PROTOCOL_ADDRESS
    hash_pattern: str = SHA256_HEX_PATTERN
    min_fields: int = COMMITMENT_FIELD_COUNT

    def __post_init__(self):
        if self.min_fields < COMMITMENT_FIELD_COUNT:
            raise ValueError(
                f"min_fields must be at least {COMMITMENT_FIELD_COUNT}, got {self.min_fields}"
            )

    @classmethod
    def from_env(cls) -> 'ValidatorConfig':
        """Build a config from the current environment."""
        return cls(
            protocol_tag=os.getenv("UHRP_PROTOCOL_ADDRESS", UHRP_PROTOCOL_ADDRESS),
            hash_pattern=os.getenv("UHRP_HASH_PATTERN", SHA256_HEX_PATTERN),
            min_fields=int(os.getenv("UHRP_MIN_FIELDS", str(COMMITMENT_FIELD_COUNT))),
        )


# ============================================================
# Feature Flags
# ============================================================

def is_debug() -> bool:
    """Check if debug mode is enabled."""
    return os.getenv("UHRP_DEBUG", "").lower() in ("1", "true", "yes")

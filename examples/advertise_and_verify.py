#!/usr/bin/env python3
"""
UHRP Commitment Example - Host Advertisement End to End

A host signs a commitment to serve a file, the token is serialized, and a
verifier later checks it with the host's public key.

Run with: python examples/advertise_and_verify.py
"""

import json
import time

from uhrp_commitment import (
    CommitmentValidator,
    FixedClock,
    create_commitment,
    decode_fields,
    encode_fields,
    expiry_from_hosting_minutes,
    generate_key_pair,
    sha256_hex,
)
from uhrp_commitment.logging_config import configure_logging


def main():
    configure_logging(level="INFO", json_format=True)

    # The host's long-lived identity key
    host_keys = generate_key_pair()

    # Stand-in for the bytes of the hosted file
    file_bytes = b"quarterly report contents"
    now = int(time.time())

    script = create_commitment(
        host_keys,
        content_hash=sha256_hex(file_bytes),
        url="https://files.example.com/reports/q3.pdf",
        expiry_time=expiry_from_hosting_minutes(24 * 60, FixedClock(now)),
        file_size=len(file_bytes),
    )
    print(f"Script ({len(script)} bytes): {script.hex()[:64]}...")

    validator = CommitmentValidator(clock=FixedClock(now))

    result = validator.evaluate_script(script, host_keys.public_key_hex)
    print(json.dumps(result.to_dict(), indent=2))

    # A different host cannot claim the commitment
    impostor = generate_key_pair()
    result = validator.evaluate_script(script, impostor.public_key_hex)
    print(f"Impostor key: valid={result.valid} ({result.failure_kind.value})")

    # Rewriting the URL after signing breaks the signature
    fields = decode_fields(script)
    fields[4] = b"https://evil.example.com/q3.pdf"
    result = validator.evaluate_script(encode_fields(fields), host_keys.public_key_hex)
    print(f"Rewritten URL: valid={result.valid} ({result.failure_kind.value})")

    # One day later the commitment has lapsed
    later = CommitmentValidator(clock=FixedClock(now + 24 * 60 * 60))
    result = later.evaluate_script(script, host_keys.public_key_hex)
    print(f"After expiry: valid={result.valid} ({result.failure_kind.value})")


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
UHRP Commitment Command Line Interface

Usage:
    uhrp-commitment verify --script <hex> --public-key <hex>
    uhrp-commitment decode --script <hex>
    uhrp-commitment keygen --output <file>
    uhrp-commitment create --private-key <hex> --hash <hex> --url <url> --size <n> --hosting-minutes <m>
    uhrp-commitment demo
"""

import argparse
import json
import sys

from . import config
from .logging_config import configure_logging


def load_json(path: str) -> dict:
    """Load JSON from file."""
    with open(path, 'r') as f:
        return json.load(f)


def save_json(data: dict, path: str):
    """Save JSON to file."""
    with open(path, 'w') as f:
        json.dump(data, f, indent=2)


def load_script(args) -> bytes:
    """Script bytes from --script (hex) or --script-file (raw bytes)."""
    if args.script_file:
        with open(args.script_file, 'rb') as f:
            return f.read()
    return bytes.fromhex("".join(args.script.split()))


def cmd_verify(args):
    """Verify a commitment script against a public key."""
    from . import CommitmentValidator, FixedClock, SystemClock, ValidatorConfig
    from .logging_config import set_evaluation_id

    try:
        script = load_script(args)
    except ValueError:
        print("✗ INVALID: script is not valid hex", file=sys.stderr)
        return 2

    clock = FixedClock(args.now) if args.now is not None else SystemClock()
    validator_config = ValidatorConfig(protocol_tag=args.protocol_tag) if args.protocol_tag else ValidatorConfig.from_env()

    if args.evaluation_id:
        set_evaluation_id(args.evaluation_id)

    validator = CommitmentValidator(config=validator_config, clock=clock)
    result = validator.evaluate_script(script, args.public_key)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
    elif result.valid:
        print("✓ VALID")
        for key, value in result.commitment.to_dict().items():
            print(f"  {key}: {value}")
    else:
        print(f"✗ INVALID: {result.failure_kind.value}")
        if result.reason:
            print(f"  {result.reason}")

    return 0 if result.valid else 1


def cmd_decode(args):
    """Split a script into its fields without validating them."""
    from . import MalformedScriptError, decode_fields

    try:
        script = load_script(args)
        fields = decode_fields(script)
    except MalformedScriptError as e:
        print(f"✗ MALFORMED: {e}", file=sys.stderr)
        return 1
    except ValueError:
        print("✗ script is not valid hex", file=sys.stderr)
        return 2

    for index, field in enumerate(fields):
        try:
            text = field.decode('utf-8')
            printable = text if text.isprintable() else None
        except UnicodeDecodeError:
            printable = None
        line = f"[{index}] len={len(field)} hex={field.hex()}"
        if printable:
            line += f" utf8={printable!r}"
        print(line)

    return 0


def cmd_keygen(args):
    """Generate a secp256k1 key pair."""
    from . import generate_key_pair

    key_pair = generate_key_pair()

    if args.output:
        save_json(key_pair.to_dict(), args.output)
        print(f"Key pair saved to: {args.output}")
    else:
        print(json.dumps(key_pair.to_dict(), indent=2))

    print(f"\nPublic key: {key_pair.public_key_hex}", file=sys.stderr)
    return 0


def cmd_create(args):
    """Build and sign a commitment script."""
    from . import (
        CommitmentError,
        create_commitment,
        expiry_from_hosting_minutes,
        key_pair_from_private_hex,
    )

    if args.key_file:
        private_hex = load_json(args.key_file)["private_key"]
    elif args.private_key:
        private_hex = args.private_key
    else:
        print("✗ one of --private-key or --key-file is required", file=sys.stderr)
        return 2

    try:
        key_pair = key_pair_from_private_hex(private_hex)

        if args.expiry is not None:
            expiry = args.expiry
        else:
            expiry = expiry_from_hosting_minutes(args.hosting_minutes)

        script = create_commitment(
            key_pair,
            content_hash=args.hash,
            url=args.url,
            expiry_time=expiry,
            file_size=args.size,
            action=args.action,
        )
    except (CommitmentError, ValueError) as e:
        print(f"✗ {e}", file=sys.stderr)
        return 2

    print(script.hex())
    return 0


def cmd_demo(args):
    """Run a demonstration of commitment verification."""
    from . import (
        CommitmentValidator,
        FixedClock,
        create_commitment,
        decode_fields,
        encode_fields,
        generate_key_pair,
        sha256_hex,
    )

    print("=" * 60)
    print("UHRP Storage Commitment Demonstration")
    print("=" * 60)

    now = 1700000000
    validator = CommitmentValidator(clock=FixedClock(now))
    keys = generate_key_pair()

    script = create_commitment(
        keys,
        content_hash=sha256_hex("some valid input"),
        url="https://valid.url",
        expiry_time=now + 1000,
        file_size=1024,
    )

    print("\n" + "-" * 60)
    print("Scenario 1: Correctly signed commitment")
    print("-" * 60)
    result = validator.evaluate_script(script, keys.public_key_hex)
    print(f"Valid: {result.valid}")

    print("\n" + "-" * 60)
    print("Scenario 2: Same commitment, URL changed after signing")
    print("-" * 60)
    fields = decode_fields(script)
    fields[4] = b"https://other.url"
    result = validator.evaluate_script(encode_fields(fields), keys.public_key_hex)
    print(f"Valid: {result.valid}")
    print(f"  Failed: {result.failure_kind.value}")

    print("\n" + "-" * 60)
    print("Scenario 3: Evaluated after expiry")
    print("-" * 60)
    late = CommitmentValidator(clock=FixedClock(now + 1000))
    result = late.evaluate_script(script, keys.public_key_hex)
    print(f"Valid: {result.valid}")
    print(f"  Failed: {result.failure_kind.value}")

    print("\n" + "=" * 60)
    print("Demonstration complete.")
    print("=" * 60)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="uhrp-commitment",
        description="UHRP storage commitment CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  uhrp-commitment demo
  uhrp-commitment verify -s <script hex> -k <public key hex>
  uhrp-commitment decode -s <script hex>
  uhrp-commitment keygen -o keys.json
  uhrp-commitment create -f keys.json --hash <hex> --url https://host/file --size 1024 -m 1440
        """
    )
    parser.add_argument("--log-level", default=config.LOG_LEVEL, help="Log level")
    parser.add_argument("--log-json", dest="log_json", action="store_true", default=config.LOG_JSON, help="JSON log output")
    parser.add_argument("--log-text", dest="log_json", action="store_false", help="Plain text log output")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # verify
    verify_parser = subparsers.add_parser("verify", help="Verify a commitment script")
    script_group = verify_parser.add_mutually_exclusive_group(required=True)
    script_group.add_argument("-s", "--script", help="Script as hex")
    script_group.add_argument("-S", "--script-file", help="File holding raw script bytes")
    verify_parser.add_argument("-k", "--public-key", required=True, help="Signer public key (SEC1 hex)")
    verify_parser.add_argument("-p", "--protocol-tag", help="Override protocol address")
    verify_parser.add_argument("--now", type=int, help="Evaluate as of this unix time")
    verify_parser.add_argument("--json", action="store_true", help="Print JSON result")
    verify_parser.add_argument("--evaluation-id", help="Correlation ID attached to log events")

    # decode
    decode_parser = subparsers.add_parser("decode", help="Decode script fields")
    decode_group = decode_parser.add_mutually_exclusive_group(required=True)
    decode_group.add_argument("-s", "--script", help="Script as hex")
    decode_group.add_argument("-S", "--script-file", help="File holding raw script bytes")

    # keygen
    keygen_parser = subparsers.add_parser("keygen", help="Generate signing key pair")
    keygen_parser.add_argument("-o", "--output", help="Output file for key pair")

    # create
    create_parser = subparsers.add_parser("create", help="Create a signed commitment")
    create_parser.add_argument("-K", "--private-key", help="Private key hex")
    create_parser.add_argument("-f", "--key-file", help="Key pair JSON file from keygen")
    create_parser.add_argument("--hash", required=True, help="File SHA-256 as lowercase hex")
    create_parser.add_argument("--url", required=True, help="URL the file is served from")
    create_parser.add_argument("--size", type=int, required=True, help="File size in bytes")
    create_parser.add_argument("--action", default=config.UHRP_ADVERTISE_ACTION, help="Action tag")
    expiry_group = create_parser.add_mutually_exclusive_group(required=True)
    expiry_group.add_argument("-e", "--expiry", type=int, help="Expiry unix time")
    expiry_group.add_argument("-m", "--hosting-minutes", type=int, help="Hosting duration in minutes")

    # demo
    subparsers.add_parser("demo", help="Run demonstration")

    args = parser.parse_args(argv)

    log_level = "DEBUG" if config.is_debug() else args.log_level
    configure_logging(level=log_level, json_format=args.log_json, log_file=config.LOG_FILE)

    if args.command == "verify":
        return cmd_verify(args)
    elif args.command == "decode":
        return cmd_decode(args)
    elif args.command == "keygen":
        return cmd_keygen(args)
    elif args.command == "create":
        return cmd_create(args)
    elif args.command == "demo":
        return cmd_demo(args)
    else:
        parser.print_help()
        return 0


if __name__ == "__main__":
    sys.exit(main())

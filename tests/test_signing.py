"""
Signing and Hashing Tests

The signed message is the plain concatenation of fields 0-6; the signature
is DER-encoded ECDSA over secp256k1.
"""

import hashlib
import unittest

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec

from uhrp_commitment import (
    FailureKind,
    InvalidPublicKeyError,
    SignatureVerifier,
    canonical_message,
    generate_key_pair,
    is_valid_sha256_hex,
    key_pair_from_private_hex,
    load_public_key,
    message_digest,
    public_key_hex,
    sha256_digest,
    sha256_hex,
    sign_fields,
    verify_signature,
)
from uhrp_commitment.signing import public_key_bytes

from .factories import KEY_PAIR, PRIVATE_KEY_HEX, PUBLIC_KEY_HEX, message_fields, signed_fields


class TestHashing(unittest.TestCase):
    """SHA-256 helpers."""

    def test_sha256_hex_lowercase(self):
        h = sha256_hex("some valid input")
        self.assertEqual(h, hashlib.sha256(b"some valid input").hexdigest())
        self.assertEqual(h, h.lower())

    def test_str_and_bytes_agree(self):
        self.assertEqual(sha256_digest("abc"), sha256_digest(b"abc"))
        self.assertEqual(len(sha256_digest(b"")), 32)

    def test_valid_hex_pattern(self):
        self.assertTrue(is_valid_sha256_hex(sha256_hex("x")))

    def test_uppercase_rejected(self):
        self.assertFalse(is_valid_sha256_hex(sha256_hex("x").upper()))

    def test_wrong_lengths_rejected(self):
        h = sha256_hex("x")
        self.assertFalse(is_valid_sha256_hex(h[:-1]))
        self.assertFalse(is_valid_sha256_hex(h + "0"))
        self.assertFalse(is_valid_sha256_hex(""))

    def test_trailing_newline_rejected(self):
        self.assertFalse(is_valid_sha256_hex(sha256_hex("x") + "\n"))

    def test_non_string_rejected(self):
        self.assertFalse(is_valid_sha256_hex(None))
        self.assertFalse(is_valid_sha256_hex(sha256_digest("x")))

    def test_custom_pattern(self):
        self.assertTrue(is_valid_sha256_hex("ABCD", r"^[A-F]{4}$"))


class TestCanonicalMessage(unittest.TestCase):
    """Exact byte layout of the signed message."""

    def test_plain_concatenation_of_first_seven(self):
        fields = [b"a", b"bb", b"", b"ccc", b"d", b"1", b"2", b"SIGNATURE"]
        self.assertEqual(canonical_message(fields), b"abbcccd12")

    def test_no_length_prefixes(self):
        fields = message_fields()
        message = canonical_message(fields)
        self.assertEqual(len(message), sum(len(f) for f in fields))

    def test_strings_accepted(self):
        self.assertEqual(canonical_message(["a", "b", "c", "d", "e", "f", "g"]), b"abcdefg")

    def test_too_few_fields(self):
        with self.assertRaises(ValueError):
            canonical_message([b"a"] * 6)

    def test_digest_is_sha256_of_message(self):
        fields = message_fields()
        self.assertEqual(message_digest(fields), hashlib.sha256(b"".join(fields)).digest())


class TestKeys(unittest.TestCase):
    """secp256k1 public key handling."""

    def test_fixed_private_key_round_trip(self):
        self.assertEqual(KEY_PAIR.private_key_hex, PRIVATE_KEY_HEX)

    def test_compressed_hex_form(self):
        self.assertEqual(len(PUBLIC_KEY_HEX), 66)
        self.assertIn(PUBLIC_KEY_HEX[:2], ("02", "03"))

    def test_load_compressed_and_uncompressed(self):
        compressed = load_public_key(PUBLIC_KEY_HEX)
        uncompressed = load_public_key(public_key_bytes(PUBLIC_KEY_HEX, compressed=False))
        self.assertEqual(public_key_hex(compressed), public_key_hex(uncompressed))

    def test_load_key_object(self):
        self.assertEqual(public_key_hex(KEY_PAIR.public_key), PUBLIC_KEY_HEX)

    def test_wrong_curve_rejected(self):
        p256 = ec.generate_private_key(ec.SECP256R1()).public_key()
        with self.assertRaises(InvalidPublicKeyError):
            load_public_key(p256)

    def test_garbage_rejected(self):
        for bad in ("zz", "02" + "ff" * 32, b"\x04" * 10, b"", 42):
            with self.assertRaises(InvalidPublicKeyError):
                load_public_key(bad)

    def test_generated_keys_distinct(self):
        self.assertNotEqual(generate_key_pair().public_key_hex, generate_key_pair().public_key_hex)

    def test_private_hex_must_be_hex(self):
        with self.assertRaises(ValueError):
            key_pair_from_private_hex("not-hex")


class TestSignatureVerifier(unittest.TestCase):
    """DER decode and ECDSA verification."""

    def setUp(self):
        self.verifier = SignatureVerifier()
        self.fields = signed_fields()

    def test_valid_signature(self):
        outcome = self.verifier.verify(self.fields[:7], self.fields[7], PUBLIC_KEY_HEX)
        self.assertTrue(outcome.valid)
        self.assertIsNone(outcome.failure_kind)

    def test_signature_field_ignored_in_message(self):
        """Passing all eight fields verifies the same as passing seven."""
        self.assertTrue(self.verifier.verify(self.fields, self.fields[7], PUBLIC_KEY_HEX).valid)

    def test_digest_is_hashed_again_by_ecdsa(self):
        """The curve operation runs over SHA-256(SHA-256(message))."""
        message = b"".join(self.fields[:7])
        key = KEY_PAIR.public_key
        key.verify(self.fields[7], hashlib.sha256(message).digest(), ec.ECDSA(hashes.SHA256()))

    def test_wrong_key(self):
        other = generate_key_pair()
        outcome = self.verifier.verify(self.fields[:7], self.fields[7], other.public_key_hex)
        self.assertFalse(outcome.valid)
        self.assertEqual(outcome.failure_kind, FailureKind.SIGNATURE_VERIFICATION_FAILED)

    def test_changed_message(self):
        fields = list(self.fields)
        fields[3] = b"revoke"
        outcome = self.verifier.verify(fields[:7], fields[7], PUBLIC_KEY_HEX)
        self.assertEqual(outcome.failure_kind, FailureKind.SIGNATURE_VERIFICATION_FAILED)

    def test_length_prefixed_message_does_not_verify(self):
        """Signing a message that included length prefixes is not compatible."""
        prefixed = [bytes([len(f)]) + f for f in self.fields[:7]]
        signature = KEY_PAIR.private_key.sign(
            hashlib.sha256(b"".join(prefixed)).digest(), ec.ECDSA(hashes.SHA256())
        )
        self.assertFalse(verify_signature(self.fields[:7], signature, PUBLIC_KEY_HEX))

    def test_malformed_der_reports_decode_error(self):
        for bad in (b"", b"\x00\x00", b"\x30\x02\x02", self.fields[7][:-3], b"\x01" * 70):
            with self.subTest(signature=bad.hex()):
                outcome = self.verifier.verify(self.fields[:7], bad, PUBLIC_KEY_HEX)
                self.assertFalse(outcome.valid)
                self.assertEqual(outcome.failure_kind, FailureKind.SIGNATURE_DECODE_ERROR)

    def test_invalid_key_does_not_raise(self):
        outcome = self.verifier.verify(self.fields[:7], self.fields[7], "not a key")
        self.assertFalse(outcome.valid)
        self.assertEqual(outcome.failure_kind, FailureKind.SIGNATURE_VERIFICATION_FAILED)

    def test_reason_never_contains_signature_bytes(self):
        outcome = self.verifier.verify(self.fields[:7], self.fields[7][:-3], PUBLIC_KEY_HEX)
        self.assertNotIn(self.fields[7].hex()[:16], outcome.reason)

    def test_sign_fields_matches_verify(self):
        fields = message_fields(url="https://another.example")
        signature = sign_fields(fields, KEY_PAIR.private_key)
        self.assertTrue(verify_signature(fields, signature, PUBLIC_KEY_HEX))


if __name__ == "__main__":
    unittest.main()

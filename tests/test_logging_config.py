"""
Logging and Configuration Tests

Evaluation events are structured, emitted at the pipeline boundary, and
never carry signature or key bytes.
"""

import json
import logging
import os
import unittest
from unittest import mock

from uhrp_commitment import CommitmentValidator, FixedClock, ValidatorConfig
from uhrp_commitment.config import UHRP_PROTOCOL_ADDRESS, is_debug
from uhrp_commitment.logging_config import (
    StructuredFormatter,
    VerificationLogger,
    evaluation_context,
    get_evaluation_id,
    set_evaluation_id,
)

from .factories import NOW, PUBLIC_KEY_HEX, signed_fields, signed_script


class TestVerificationEvents(unittest.TestCase):

    def setUp(self):
        self.logger = VerificationLogger("uhrp_commitment.test_events")
        self.validator = CommitmentValidator(clock=FixedClock(NOW), logger=self.logger)

    def test_one_event_per_check_and_a_decision(self):
        with self.assertLogs("uhrp_commitment.test_events", level="DEBUG") as cm:
            self.validator.evaluate_script(signed_script(), PUBLIC_KEY_HEX)

        events = [r.extra_fields["event_type"] for r in cm.records]
        self.assertEqual(events, ["CHECK_EVALUATED"] * 7 + ["COMMITMENT_DECISION"])

        decision = cm.records[-1].extra_fields
        self.assertTrue(decision["valid"])
        self.assertEqual(decision["checks_run"], 7)

    def test_failure_event_fields(self):
        with self.assertLogs("uhrp_commitment.test_events", level="DEBUG") as cm:
            self.validator.evaluate_script(signed_script(size="0"), PUBLIC_KEY_HEX)

        failed = [r.extra_fields for r in cm.records if r.extra_fields.get("result") == "FAIL"]
        self.assertEqual(len(failed), 1)
        self.assertEqual(failed[0]["check_id"], "file_size")
        self.assertEqual(failed[0]["field_index"], 6)
        self.assertEqual(failed[0]["failure_kind"], "INVALID_FILE_SIZE")

        decision = cm.records[-1]
        self.assertEqual(decision.levelno, logging.WARNING)
        self.assertFalse(decision.extra_fields["valid"])

    def test_malformed_script_event(self):
        with self.assertLogs("uhrp_commitment.test_events", level="WARNING") as cm:
            self.validator.evaluate_script(b"\x09abc", PUBLIC_KEY_HEX)

        self.assertEqual(cm.records[0].extra_fields["event_type"], "SCRIPT_MALFORMED")
        self.assertEqual(cm.records[0].extra_fields["script_length"], 4)

    def test_no_signature_bytes_in_output(self):
        fields = signed_fields()
        signature_hex = fields[7].hex()
        formatter = StructuredFormatter()

        with self.assertLogs("uhrp_commitment.test_events", level="DEBUG") as cm:
            self.validator.evaluate(fields, PUBLIC_KEY_HEX)
            broken = list(fields)
            broken[7] = fields[7][:-2]
            self.validator.evaluate(broken, PUBLIC_KEY_HEX)

        output = "\n".join(formatter.format(r) for r in cm.records)
        self.assertNotIn(signature_hex[:20], output)
        self.assertNotIn(PUBLIC_KEY_HEX, output)

    def test_evaluation_id_attached(self):
        set_evaluation_id("eval-123")
        try:
            with self.assertLogs("uhrp_commitment.test_events", level="DEBUG") as cm:
                self.validator.evaluate_script(signed_script(), PUBLIC_KEY_HEX)
            self.assertEqual(get_evaluation_id(), "eval-123")
            self.assertTrue(all(r.extra_fields["evaluation_id"] == "eval-123" for r in cm.records))
        finally:
            set_evaluation_id("")

    def test_each_evaluation_gets_its_own_id(self):
        with self.assertLogs("uhrp_commitment.test_events", level="DEBUG") as cm:
            first = self.validator.evaluate_script(signed_script(), PUBLIC_KEY_HEX)
            second = self.validator.evaluate_script(b"\x09abc", PUBLIC_KEY_HEX)

        self.assertTrue(first.evaluation_id)
        self.assertNotEqual(first.evaluation_id, second.evaluation_id)

        ids = [r.extra_fields["evaluation_id"] for r in cm.records]
        self.assertEqual(ids, [first.evaluation_id] * 8 + [second.evaluation_id] * 2)
        self.assertEqual(first.to_dict()["evaluation_id"], first.evaluation_id)

    def test_generated_id_not_left_bound(self):
        self.validator.evaluate(signed_fields(), PUBLIC_KEY_HEX)
        self.assertEqual(get_evaluation_id(), "")

    def test_evaluation_context_restores_previous_value(self):
        with evaluation_context() as evaluation_id:
            self.assertEqual(get_evaluation_id(), evaluation_id)
        self.assertEqual(get_evaluation_id(), "")

    def test_generated_evaluation_id(self):
        try:
            self.assertEqual(len(set_evaluation_id()), 36)
        finally:
            set_evaluation_id("")


class TestStructuredFormatter(unittest.TestCase):

    def test_json_output(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "hello", (), None)
        record.extra_fields = {"event_type": "TEST", "valid": True}
        data = json.loads(StructuredFormatter().format(record))

        self.assertEqual(data["message"], "hello")
        self.assertEqual(data["level"], "INFO")
        self.assertEqual(data["event_type"], "TEST")
        self.assertTrue(data["valid"])


class TestConfig(unittest.TestCase):

    def test_defaults(self):
        config = ValidatorConfig()
        self.assertEqual(config.protocol_tag, UHRP_PROTOCOL_ADDRESS)
        self.assertEqual(config.hash_pattern, r"^[a-f0-9]{64}$")
        self.assertEqual(config.min_fields, 8)

    def test_from_env(self):
        with mock.patch.dict(os.environ, {"UHRP_PROTOCOL_ADDRESS": "other_tag", "UHRP_MIN_FIELDS": "9"}):
            config = ValidatorConfig.from_env()
        self.assertEqual(config.protocol_tag, "other_tag")
        self.assertEqual(config.min_fields, 9)

    def test_frozen(self):
        with self.assertRaises(Exception):
            ValidatorConfig().protocol_tag = "mutated"

    def test_debug_flag(self):
        with mock.patch.dict(os.environ, {"UHRP_DEBUG": "true"}):
            self.assertTrue(is_debug())
        with mock.patch.dict(os.environ, {"UHRP_DEBUG": ""}):
            self.assertFalse(is_debug())


if __name__ == "__main__":
    unittest.main()

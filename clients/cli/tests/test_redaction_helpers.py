import unittest

from twooter_cli.errors import TransportFailure
from twooter_cli.pipeline import RequestOptions, build_request
from twooter_cli.redact import MASK, mask_secrets, redact_failure, redact_fields


class TestCredentialRedaction(unittest.TestCase):
    def test_redact_fields_masks_only_the_token(self):
        body = {"token": "tok-123", "name": "ada", "message": "a token of thanks"}
        self.assertEqual(redact_fields(body), {"token": MASK, "name": "ada", "message": "a token of thanks"})
        self.assertEqual(body["token"], "tok-123")

    def test_request_body_debug_log_is_masked(self):
        options = RequestOptions(body={"name": "ada", "token": "tok-123"})
        with self.assertLogs("twooter_cli.pipeline", level="DEBUG") as logs:
            build_request("refreshName", options)
        self.assertNotIn("tok-123", "\n".join(logs.output))
        self.assertIn(MASK, "\n".join(logs.output))

    def test_mask_secrets_handles_json_token_fields(self):
        text = '{"code":"unauthorized","token": "tok-123","name":"ada"}'
        self.assertEqual(mask_secrets(text), '{"code":"unauthorized","token": "[REDACTED]","name":"ada"}')

    def test_mask_secrets_replaces_known_credentials(self):
        self.assertEqual(mask_secrets("bad credential tok-123 for ada", ["tok-123"]), "bad credential [REDACTED] for ada")

    def test_short_known_values_are_left_alone(self):
        self.assertEqual(mask_secrets("a b c", ["a", ""]), "a b c")

    def test_redact_failure_includes_masked_body(self):
        failure = TransportFailure(message="Unauthorized", status=401, body='{"token": "tok-123"}\n')
        self.assertEqual(redact_failure(failure), 'HTTP 401: Unauthorized: {"token": "[REDACTED]"}')

    def test_redact_failure_without_body(self):
        failure = TransportFailure(message="timed out after 10s")
        self.assertEqual(redact_failure(failure, ["tok-123"]), "timed out after 10s")


if __name__ == "__main__":
    unittest.main()

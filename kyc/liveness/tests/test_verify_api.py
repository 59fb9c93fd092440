from unittest import mock

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase, Client, override_settings

from kyc.liveness.services.client import VerificationClient
from kyc.liveness.services.errors import ServerError, TransportError

OK_BODY = '{"result":{"response":{"capture_liveness":{"probability":0.93}}}}'
PATH = "/api/v1/liveness/verify"


class LivenessVerifyApiTest(SimpleTestCase):
    def setUp(self):
        self.client = Client()

    def _payload(self, **overrides):
        data = {
            "bundle": SimpleUploadedFile("capture.bin", b"\x00bundle", content_type="application/octet-stream"),
            "auth_token": "Bearer tok_123",
            "template_id": "tpl_1",
            "verification_id": "ver_1",
        }
        data.update(overrides)
        return {k: v for k, v in data.items() if v is not None}

    @mock.patch.object(VerificationClient, "submit", return_value=OK_BODY)
    def test_ok(self, submit):
        jpeg = SimpleUploadedFile("photo.jpg", b"\xff\xd8jpeg", content_type="image/jpeg")
        resp = self.client.post(PATH, data=self._payload(image=jpeg))
        self.assertEqual(resp.status_code, 200, resp.content)
        data = resp.json()
        self.assertEqual(data["iad_result"], "Success")
        self.assertTrue(data["is_live"])
        self.assertEqual(data["probability"], 0.93)
        self.assertEqual(data["probability_percent"], 93)
        submit.assert_called_once_with(b"\x00bundle", b"\xff\xd8jpeg", auth_token="Bearer tok_123",
                                       template_id="tpl_1", verification_id="ver_1")

    @mock.patch.object(VerificationClient, "submit", return_value=OK_BODY)
    def test_auth_header_fallback(self, submit):
        resp = self.client.post(PATH, data=self._payload(auth_token=None), HTTP_AUTHORIZATION="Bearer hdr")
        self.assertEqual(resp.status_code, 200, resp.content)
        self.assertEqual(submit.call_args.kwargs["auth_token"], "Bearer hdr")
        self.assertIsNone(submit.call_args.args[1])

    @mock.patch.object(VerificationClient, "submit", return_value=OK_BODY)
    def test_missing_arguments(self, submit):
        for field in ("auth_token", "template_id", "verification_id", "bundle"):
            with self.subTest(field=field):
                resp = self.client.post(PATH, data=self._payload(**{field: None}))
                self.assertEqual(resp.status_code, 400, resp.content)
                self.assertEqual(resp.json()["error"]["code"], "MISSING_ARGUMENTS")
        submit.assert_not_called()

    @mock.patch.object(VerificationClient, "submit", return_value="{}")
    def test_envelope_error(self, _submit):
        resp = self.client.post(PATH, data=self._payload())
        self.assertEqual(resp.status_code, 502)
        err = resp.json()["error"]
        self.assertEqual(err["code"], "LIVENESS_FAILED")
        self.assertEqual(err["details"]["kind"], "ENVELOPE_ERROR")

    @mock.patch.object(VerificationClient, "submit", return_value=OK_BODY.replace("0.93", "NaN"))
    def test_non_finite_probability(self, _submit):
        resp = self.client.post(PATH, data=self._payload())
        self.assertEqual(resp.status_code, 502)
        err = resp.json()["error"]
        self.assertEqual(err["code"], "LIVENESS_FAILED")
        self.assertEqual(err["details"]["kind"], "ENVELOPE_ERROR")

    @mock.patch.object(VerificationClient, "submit", side_effect=ServerError(403, "invalid token"))
    def test_server_error(self, _submit):
        resp = self.client.post(PATH, data=self._payload())
        self.assertEqual(resp.status_code, 502)
        err = resp.json()["error"]
        self.assertEqual(err["details"], {"kind": "SERVER_ERROR", "upstream_status": 403})
        self.assertIn("invalid token", err["message"])

    @mock.patch.object(VerificationClient, "submit", side_effect=TransportError("connection refused"))
    def test_transport_error(self, submit):
        resp = self.client.post(PATH, data=self._payload())
        self.assertEqual(resp.status_code, 502)
        self.assertEqual(resp.json()["error"]["details"]["kind"], "TRANSPORT_ERROR")
        self.assertEqual(submit.call_count, 1)

    @mock.patch.object(VerificationClient, "submit", return_value=OK_BODY.replace("0.93", "0.1"))
    def test_rejected(self, _submit):
        resp = self.client.post(PATH, data=self._payload())
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["iad_result"], "Rejected")
        self.assertFalse(resp.json()["is_live"])

    @override_settings(LIVENESS_LICENSE_KEY="")
    @mock.patch.object(VerificationClient, "submit", return_value=OK_BODY)
    def test_license_error(self, submit):
        resp = self.client.post(PATH, data=self._payload())
        self.assertEqual(resp.status_code, 503)
        self.assertEqual(resp.json()["error"]["code"], "LICENSE_ERROR")
        submit.assert_not_called()


class HealthTest(SimpleTestCase):
    def test_health(self):
        resp = Client().get("/health/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "ok")

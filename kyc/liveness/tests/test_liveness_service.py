import httpx
from django.test import SimpleTestCase, override_settings
from django.conf import settings

from kyc.liveness.services.client import VerificationClient
from kyc.liveness.services.config import CaptureConfig, check_license
from kyc.liveness.services.errors import EnvelopeError, MissingArgumentsError, ServerError
from kyc.liveness.services.liveness_service import LivenessService, RequestIdentity
from kyc.liveness.services.policy import ProbabilityPolicy, extract_probability, to_int_percent

IDENTITY = RequestIdentity(auth_token="tok", template_id="tpl", verification_id="ver")


def envelope(p):
    return '{"result":{"response":{"capture_liveness":{"probability":%s}}}}' % p


class EnvelopeTest(SimpleTestCase):
    def test_probability(self):
        self.assertEqual(extract_probability(envelope("0.93")), 0.93)
        self.assertEqual(extract_probability(envelope("1")), 1.0)

    def test_missing_path(self):
        for raw in ("{}", '{"result":{}}', '{"result":{"response":{"capture_liveness":{}}}}',
                    '{"result":[]}', "[]", "not json", envelope('"0.9"'), envelope("true"), envelope("null"),
                    envelope("NaN"), envelope("Infinity"), envelope("-Infinity"), envelope("1" + "0" * 400)):
            with self.subTest(raw=raw):
                with self.assertRaises(EnvelopeError):
                    extract_probability(raw)


class PolicyTest(SimpleTestCase):
    def test_threshold(self):
        policy = ProbabilityPolicy(0.5)
        live = policy.decide(0.93)
        self.assertTrue(live.is_live)
        self.assertEqual(live.status, "Success")
        self.assertEqual(live.probability_percent, 93)
        spoof = policy.decide(0.12)
        self.assertFalse(spoof.is_live)
        self.assertEqual(spoof.status, "Rejected")
        self.assertTrue(policy.decide(0.5).is_live)

    def test_no_threshold_accepts_any_probability(self):
        outcome = ProbabilityPolicy(None).decide(0.01)
        self.assertTrue(outcome.is_live)
        self.assertIsNone(outcome.threshold)

    def test_invalid_threshold(self):
        with self.assertRaises(ValueError):
            ProbabilityPolicy(1.5)

    def test_percent(self):
        self.assertEqual(to_int_percent(0.564), 56)
        self.assertEqual(to_int_percent(0.0), 0)
        self.assertEqual(to_int_percent(1.0), 100)


class LivenessServiceTest(SimpleTestCase):
    def setUp(self):
        self.calls = 0

    def _service(self, status_code=200, body=envelope("0.93"), min_probability=0.5):
        def handler(request):
            self.calls += 1
            return httpx.Response(status_code, content=body.encode())
        client = VerificationClient("https://verify.test", transport=httpx.MockTransport(handler))
        return LivenessService(client, ProbabilityPolicy(min_probability))

    def test_success(self):
        outcome = self._service().verify(bundle=b"bundle", image=None, identity=IDENTITY)
        self.assertEqual(outcome.status, "Success")
        self.assertEqual(outcome.probability, 0.93)
        self.assertEqual(self.calls, 1)

    def test_below_threshold(self):
        outcome = self._service(body=envelope("0.2")).verify(bundle=b"bundle", image=b"jpeg", identity=IDENTITY)
        self.assertFalse(outcome.is_live)

    def test_empty_envelope(self):
        with self.assertRaises(EnvelopeError):
            self._service(body="{}").verify(bundle=b"bundle", image=None, identity=IDENTITY)

    def test_server_error_propagates(self):
        with self.assertRaises(ServerError):
            self._service(403, '{"message":"invalid token"}').verify(bundle=b"bundle", image=None, identity=IDENTITY)

    def test_missing_arguments_no_request(self):
        svc = self._service()
        for identity in (RequestIdentity("", "tpl", "ver"), RequestIdentity("tok", "", "ver"),
                         RequestIdentity("tok", "tpl", "")):
            with self.subTest(identity=identity):
                with self.assertRaises(MissingArgumentsError):
                    svc.verify(bundle=b"bundle", image=None, identity=identity)
        with self.assertRaises(MissingArgumentsError):
            svc.verify(bundle=b"", image=None, identity=IDENTITY)
        self.assertEqual(self.calls, 0)


class CaptureConfigTest(SimpleTestCase):
    def test_from_settings(self):
        config = CaptureConfig.from_settings(settings)
        self.assertEqual(config.server_url, settings.LIVENESS_SERVER_URL)
        self.assertIsNone(config.license_error)
        self.assertEqual(config.min_probability, 0.5)
        self.assertEqual(config.timeout.connect, 180.0)

    @override_settings(LIVENESS_LICENSE_KEY="", LIVENESS_MIN_PROBABILITY=None, LIVENESS_PAYLOAD_SIZE="small")
    def test_from_settings_overrides(self):
        config = CaptureConfig.from_settings(settings)
        self.assertEqual(config.license_error, "License key is not configured.")
        self.assertIsNone(config.min_probability)
        self.assertEqual(config.payload_size, "small")

    def test_check_license(self):
        self.assertIsNone(check_license("QUJDRA=="))
        self.assertEqual(check_license("@@@not-base64@@@"), "License key is malformed.")
        self.assertEqual(check_license(None), "License key is not configured.")

    def test_invalid_payload_size(self):
        with self.assertRaises(ValueError):
            CaptureConfig(server_url="https://verify.test", payload_size="huge")

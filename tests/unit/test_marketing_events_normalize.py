import hashlib

from django.test import SimpleTestCase, tag

from marketing_events.exceptions import InvalidEventError
from marketing_events.schema import (
    ConversionRequest,
    UserData,
    camelize_keys,
    derive_identity,
    sha256_norm,
    validate_request,
)


def _request(**data):
    return ConversionRequest.from_payload({"data": data, "meta": {}})


@tag("batch_marketing_events")
class CamelizeKeysTests(SimpleTestCase):
    def test_rewrites_nested_keys(self):
        payload = {
            "data": {
                "event_url": "https://x",
                "user_data": {"first_name": "Ana"},
                "items": [{"item_id": 1}, {"item_id": 2}],
            },
            "meta": {"meta_pixel_id": "123"},
        }

        out = camelize_keys(payload)

        self.assertEqual(
            out,
            {
                "data": {
                    "eventUrl": "https://x",
                    "userData": {"firstName": "Ana"},
                    "items": [{"itemId": 1}, {"itemId": 2}],
                },
                "meta": {"metaPixelId": "123"},
            },
        )

    def test_scalars_and_values_pass_through(self):
        self.assertEqual(camelize_keys("event_url"), "event_url")
        self.assertEqual(camelize_keys(42), 42)
        self.assertIsNone(camelize_keys(None))
        self.assertEqual(camelize_keys({"a_b": "c_d"}), {"aB": "c_d"})
        self.assertEqual(camelize_keys([]), [])
        self.assertEqual(camelize_keys({}), {})

    def test_only_lowercase_letters_after_underscore_are_joined(self):
        self.assertEqual(camelize_keys({"utm_1": 1, "a_B": 2, "_x": 3}), {"utm_1": 1, "a_B": 2, "X": 3})

    def test_is_idempotent(self):
        payload = {"event_id": [{"user_data": {"last_name": "Silva"}}], "gaEvent": "purchase"}
        once = camelize_keys(payload)
        self.assertEqual(camelize_keys(once), once)


@tag("batch_marketing_events")
class Sha256NormTests(SimpleTestCase):
    def test_trims_and_lowercases_before_hashing(self):
        self.assertEqual(sha256_norm("Test@Example.com "), sha256_norm("test@example.com"))
        self.assertEqual(
            sha256_norm("test@example.com"),
            hashlib.sha256(b"test@example.com").hexdigest(),
        )

    def test_absent_values_hash_to_none(self):
        self.assertIsNone(sha256_norm(None))
        self.assertIsNone(sha256_norm(""))

    def test_digest_is_64_lowercase_hex_chars(self):
        digest = sha256_norm("+55 11 99999-0000")
        self.assertEqual(len(digest), 64)
        self.assertRegex(digest, r"^[0-9a-f]{64}$")


@tag("batch_marketing_events")
class ConversionRequestTests(SimpleTestCase):
    def test_from_payload_reads_camel_case_fields(self):
        req = ConversionRequest.from_payload(
            {
                "data": {
                    "metaEvent": "Purchase",
                    "eventId": "evt-1",
                    "userData": {"email": "a@b.co"},
                    "cookieGclid": "gclid-1",
                },
                "meta": {"metaPixelId": "px-1", "metaTestCode": "TEST1"},
            }
        )
        self.assertEqual(req.data.meta_event, "Purchase")
        self.assertEqual(req.data.event_id, "evt-1")
        self.assertEqual(req.data.user_data.email, "a@b.co")
        self.assertEqual(req.data.cookie_gclid, "gclid-1")
        self.assertEqual(req.meta.meta_pixel_id, "px-1")
        self.assertEqual(req.meta.meta_test_code, "TEST1")

    def test_missing_sections_default_to_empty(self):
        req = ConversionRequest.from_payload({})
        self.assertIsNone(req.data.event_id)
        self.assertIsNone(req.meta.ga_measurement_id)
        self.assertEqual(req.data.user_data, UserData())

    def test_rejects_non_object_shapes(self):
        for body in ([], "x", 3, {"data": []}, {"meta": "x"}, {"data": {"userData": "x"}}):
            with self.subTest(body=body):
                with self.assertRaises(InvalidEventError) as ctx:
                    ConversionRequest.from_payload(body)
                self.assertEqual(ctx.exception.message, "Invalid JSON")

    def test_rejects_non_string_text_fields(self):
        cases = [
            {"data": {"eventUrl": 12345}},
            {"data": {"gaEvent": ["purchase"]}},
            {"data": {"cookieGclid": True}},
            {"data": {"userData": {"name": 42}}},
            {"data": {"userData": {"email": {"value": "a@b.co"}}}},
            {"meta": {"gaMeasurementId": 7}},
        ]
        for body in cases:
            with self.subTest(body=body):
                with self.assertRaises(InvalidEventError) as ctx:
                    ConversionRequest.from_payload(body)
                self.assertEqual(ctx.exception.message, "Invalid JSON")

    def test_numeric_identifiers_are_accepted(self):
        req = ConversionRequest.from_payload(
            {
                "data": {"eventId": 981, "userId": 555.777, "userData": {"phone": 5511999990000}},
                "meta": {"metaPixelId": 1234567890},
            }
        )
        self.assertEqual(req.data.event_id, 981)
        self.assertEqual(req.data.user_id, 555.777)
        self.assertEqual(req.data.user_data.phone, 5511999990000)
        self.assertEqual(req.meta.meta_pixel_id, 1234567890)

    def test_rejects_boolean_identifiers(self):
        for body in ({"data": {"eventId": True}}, {"meta": {"metaPixelId": False}}):
            with self.subTest(body=body):
                with self.assertRaises(InvalidEventError):
                    ConversionRequest.from_payload(body)


@tag("batch_marketing_events")
class ValidateRequestTests(SimpleTestCase):
    def assertRejected(self, req, message):
        with self.assertRaises(InvalidEventError) as ctx:
            validate_request(req)
        self.assertEqual(ctx.exception.message, message)

    def test_requires_an_event_or_conversion(self):
        self.assertRejected(
            _request(eventId="e", eventUrl="https://x", userId="u"),
            "Event/conversion is missing",
        )

    def test_event_id_is_checked_before_url(self):
        self.assertRejected(_request(gaEvent="purchase", userId="u"), "Event ID is missing")

    def test_event_url_is_checked_before_user_id(self):
        self.assertRejected(_request(gaEvent="purchase", eventId="e"), "Event URL is missing")

    def test_requires_user_id(self):
        self.assertRejected(
            _request(gadsConversionLabel="label", eventId="e", eventUrl="https://x"),
            "User ID is missing",
        )

    def test_empty_strings_count_as_missing(self):
        self.assertRejected(
            _request(metaEvent="", gaEvent="", gadsConversionLabel="", eventId="e"),
            "Event/conversion is missing",
        )

    def test_complete_request_passes(self):
        validate_request(_request(metaEvent="Lead", eventId="e", eventUrl="https://x", userId="u"))


@tag("batch_marketing_events")
class DeriveIdentityTests(SimpleTestCase):
    def test_parses_full_name_when_parts_missing(self):
        identity = derive_identity(UserData(name="joão da silva", email=" A@B.co", phone="5511"))

        self.assertEqual(identity.first_name, "João")
        self.assertEqual(identity.last_name, "da Silva")
        self.assertEqual(identity.fn, sha256_norm("João"))
        self.assertEqual(identity.ln, sha256_norm("da Silva"))
        self.assertEqual(identity.em, sha256_norm("a@b.co"))
        self.assertEqual(identity.ph, sha256_norm("5511"))

    def test_explicit_parts_win_over_parsed_name(self):
        identity = derive_identity(UserData(name="Ana Souza", first_name="Anna"))

        self.assertEqual(identity.first_name, "Anna")
        self.assertEqual(identity.last_name, "Souza")

    def test_no_pii_gives_no_hashes(self):
        identity = derive_identity(UserData())

        self.assertIsNone(identity.fn)
        self.assertIsNone(identity.ln)
        self.assertIsNone(identity.em)
        self.assertIsNone(identity.ph)

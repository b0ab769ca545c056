"""
Tests for request composition: URLs, headers and bodies.
"""
from __future__ import annotations

import base64
import json
import unittest
from datetime import date
from decimal import Decimal
from urllib.parse import parse_qsl, urlsplit

from pydantic import BaseModel, ValidationError

from avatax.builder import RequestBuilder, to_query
from avatax.credentials import StaticCredentials, basic_auth
from avatax.models.schemas import Coordinates
from tests.helpers import ACCOUNT, ENDPOINT, LICENSE_KEY, make_config, make_credentials

EXPECTED_AUTH = "Basic " + base64.b64encode(f"{ACCOUNT}:{LICENSE_KEY}".encode()).decode()


class _Address(BaseModel):
    line1: str
    city: str
    region: str
    postalCode: str


class _Order(BaseModel):
    DocCode: str
    DocDate: date
    TotalAmount: Decimal


class TestCredentials(unittest.TestCase):
    def test_basic_auth_header(self):
        self.assertEqual(basic_auth(make_credentials()), EXPECTED_AUTH)

    def test_license_key_not_in_repr(self):
        self.assertNotIn(LICENSE_KEY, repr(make_credentials()))

    def test_endpoint_trailing_slash_is_trimmed(self):
        creds = StaticCredentials(ACCOUNT, LICENSE_KEY, ENDPOINT + "/")
        self.assertEqual(creds.endpoint(), ENDPOINT)


class TestTaxRequests(unittest.TestCase):
    def setUp(self):
        self.builder = RequestBuilder(make_config())

    def test_get_tax_request(self):
        payload = {"DocCode": "R1", "Lines": [{"LineNo": "1", "Amount": 10}]}
        req = self.builder.tax("get", payload)
        self.assertEqual(req.method, "POST")
        self.assertEqual(req.url, f"{ENDPOINT}/tax/get")
        self.assertEqual(req.headers, {
            "Authorization": EXPECTED_AUTH,
            "Content-Type": "application/json",
        })
        self.assertEqual(json.loads(req.body), payload)

    def test_amounts_and_dates_are_serialised(self):
        payload = {
            "DocCode": "R1",
            "DocDate": date(2026, 10, 18),
            "Lines": [{"LineNo": "1", "Amount": Decimal("19.98")}],
        }
        req = self.builder.tax("get", payload)
        self.assertEqual(json.loads(req.body), {
            "DocCode": "R1",
            "DocDate": "2026-10-18",
            "Lines": [{"LineNo": "1", "Amount": "19.98"}],
        })

    def test_unserialisable_payload_still_rejected(self):
        with self.assertRaises(TypeError):
            self.builder.tax("get", {"DocCode": object()})

    def test_pydantic_payload_is_dumped(self):
        order = _Order(DocCode="R1", DocDate=date(2026, 10, 18), TotalAmount=Decimal("19.98"))
        body = json.loads(self.builder.tax("get", order).body)
        self.assertEqual(body["DocCode"], "R1")
        self.assertEqual(body["DocDate"], "2026-10-18")
        self.assertEqual(body["TotalAmount"], "19.98")

    def test_cancel_tax_request(self):
        req = self.builder.tax("cancel", {"DocCode": "R1", "CancelCode": "DocVoided"})
        self.assertEqual(req.url, f"{ENDPOINT}/tax/cancel")

    def test_unknown_operation_rejected(self):
        with self.assertRaises(ValueError):
            self.builder.tax("commit", {})

    def test_custom_service_path(self):
        builder = RequestBuilder(make_config(tax_service_path="/1.0/tax/"))
        self.assertEqual(builder.tax("get", {}).url, f"{ENDPOINT}/1.0/tax/get")

    def test_headers_are_hidden_from_repr(self):
        req = self.builder.tax("get", {})
        self.assertNotIn("Basic", repr(req))


class TestEstimateRequests(unittest.TestCase):
    def setUp(self):
        self.builder = RequestBuilder(make_config())

    def test_estimate_url(self):
        req = self.builder.estimate({"latitude": "40.714623", "longitude": "-74.006605"}, 15)
        self.assertEqual(req.method, "GET")
        self.assertEqual(req.url, f"{ENDPOINT}/tax/40.714623,-74.006605/get?saleamount=15")
        self.assertEqual(req.headers["Authorization"], EXPECTED_AUTH)
        self.assertEqual(req.headers["Content-Type"], "application/json")
        self.assertIsNone(req.body)

    def test_numeric_coordinates_are_stringified(self):
        req = self.builder.estimate(Coordinates(latitude=47.6, longitude=-122.3), 0)
        self.assertIn("/tax/47.6,-122.3/get?saleamount=0", req.url)

    def test_missing_coordinate_rejected(self):
        with self.assertRaises(ValidationError):
            self.builder.estimate({"latitude": None, "longitude": "1"}, 0)


class TestAddressRequests(unittest.TestCase):
    def setUp(self):
        self.builder = RequestBuilder(make_config())

    def test_address_validation_request(self):
        address = {"Line1": "118 N Clark St", "City": "Chicago", "Region": "IL", "PostalCode": "60602"}
        req = self.builder.address_validation(address)
        parts = urlsplit(req.url)
        self.assertEqual(req.method, "GET")
        self.assertEqual(f"{parts.scheme}://{parts.netloc}{parts.path}", f"{ENDPOINT}/address/validate")
        self.assertEqual(dict(parse_qsl(parts.query)), address)
        self.assertEqual(req.headers, {"Authorization": EXPECTED_AUTH})

    def test_pydantic_address_is_dumped(self):
        address = _Address(line1="1 Main St", city="Seattle", region="WA", postalCode="98101")
        req = self.builder.address_validation(address)
        self.assertIn("city=Seattle", req.url)
        self.assertIn("postalCode=98101", req.url)


class TestToQuery(unittest.TestCase):
    def test_keys_are_sorted(self):
        self.assertEqual(to_query({"b": "2", "a": "1"}), "a=1&b=2")

    def test_nested_mapping_and_list(self):
        query = to_query({"address": {"zip": "10001", "lines": ["a", "b"]}})
        self.assertEqual(
            parse_qsl(query),
            [("address[lines][]", "a"), ("address[lines][]", "b"), ("address[zip]", "10001")],
        )

    def test_values_are_escaped(self):
        self.assertEqual(to_query({"line1": "1 Main St & Co"}), "line1=1+Main+St+%26+Co")

    def test_empty_containers_keep_their_key(self):
        self.assertEqual(to_query({"a": [], "b": {}, "c": "1"}), "a%5B%5D=&b=&c=1")

    def test_none_and_bool(self):
        self.assertEqual(to_query({"a": None, "b": True}), "a=&b=true")


if __name__ == "__main__":
    unittest.main()

import asyncio
import unittest

import httpx

from artist_networth.config.env import WikidataConfig
from artist_networth.ingestion.wikidata_client import (
    WikidataClient, build_claims_params, build_labels_params, build_search_params, extract_labels
)
from artist_networth.networth.cancel import CancelToken
from artist_networth.networth.errors import ResolutionCancelled, TransportFailure
from wikidata_fixtures import FakeWikidata


class TestParams(unittest.TestCase):
    def test_search_params(self):
        p = build_search_params("Drake", WikidataConfig())
        self.assertEqual(p, {
            "format": "json", "action": "wbsearchentities", "search": "Drake",
            "language": "en", "type": "item", "limit": "10",
        })

    def test_origin_for_browser_cors(self):
        p = build_claims_params("Q33240", WikidataConfig(origin="*"))
        self.assertEqual(p["origin"], "*")
        self.assertEqual(p["props"], "claims")
        self.assertNotIn("origin", build_claims_params("Q33240", WikidataConfig()))

    def test_labels_params(self):
        p = build_labels_params("Q25344", WikidataConfig(language="de"))
        self.assertEqual(p["props"], "labels|aliases")
        self.assertEqual(p["languages"], "de")

    def test_extract_labels(self):
        payload = {"entities": {"Q1": {"labels": {"en": {"value": "euro"}}, "aliases": {"en": [{"value": "EUR"}, {}]}}}}
        self.assertEqual(extract_labels(payload, "Q1"), ("euro", ["EUR"]))
        self.assertEqual(extract_labels(payload, "Q2"), (None, []))


class TestClient(unittest.IsolatedAsyncioTestCase):
    async def test_get_json(self):
        fake = FakeWikidata(search={"Drake": [{"id": "Q33240"}]})
        async with fake.client() as client:
            data = await client.search_entities("Drake")
        self.assertEqual(data["search"][0]["id"], "Q33240")
        self.assertEqual(fake.calls[0]["search"], "Drake")

    async def test_http_error_carries_status(self):
        fake = FakeWikidata()
        fake.status["wbgetentities"] = 503
        async with fake.client() as client:
            with self.assertRaises(TransportFailure) as ctx:
                await client.get_claims("Q1")
        self.assertEqual(ctx.exception.status, 503)
        self.assertIn("503", str(ctx.exception))

    async def test_connection_error_is_transport_failure(self):
        def refuse(request):
            raise httpx.ConnectError("refused", request=request)

        async with WikidataClient(WikidataConfig(), transport=httpx.MockTransport(refuse)) as client:
            with self.assertRaises(TransportFailure) as ctx:
                await client.search_entities("Drake")
        self.assertIsNone(ctx.exception.status)

    async def test_invalid_json(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))
        async with WikidataClient(WikidataConfig(), transport=transport) as client:
            with self.assertRaises(TransportFailure):
                await client.search_entities("Drake")

    async def test_cancel_aborts_in_flight_request(self):
        fake = FakeWikidata()
        fake.gates["Drake"] = asyncio.Event()
        token = CancelToken("Drake")
        async with fake.client() as client:
            task = asyncio.ensure_future(client.search_entities("Drake", token))
            while not fake.calls:
                await asyncio.sleep(0)
            token.cancel()
            with self.assertRaises(ResolutionCancelled):
                await task

    async def test_cancelled_token_sends_nothing(self):
        fake = FakeWikidata()
        token = CancelToken()
        token.cancel()
        async with fake.client() as client:
            with self.assertRaises(ResolutionCancelled):
                await client.search_entities("Drake", token)
        self.assertEqual(fake.calls, [])

    async def test_user_agent_header(self):
        seen = []

        def handler(request):
            seen.append(request.headers.get("user-agent"))
            return httpx.Response(200, json={})

        cfg = WikidataConfig(user_agent="test-agent/1.0")
        async with WikidataClient(cfg, transport=httpx.MockTransport(handler)) as client:
            await client.get_labels("Q1")
        self.assertEqual(seen, ["test-agent/1.0"])

if __name__ == "__main__":
    unittest.main()

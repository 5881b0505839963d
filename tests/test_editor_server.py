import http.client
import os
import shutil
import tempfile
import unittest

import requests

from umrah_core.data_store import DEFAULT_DATA_DIR
from umrah_core.editor_client import EditorClient
from umrah_core.editor_server import EditorServer, parse_args
from umrah_core.editor_service import EditorService
from umrah_core.errors import EditorClientError
from umrah_core.schema_validator import DEFAULT_SCHEMA_DIR


class EditorServerTests(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.mkdtemp()
        self.addCleanup(shutil.rmtree, self.tmp)
        for name in ("duas.json", "themes.json", "rounds.json"):
            shutil.copy(os.path.join(DEFAULT_DATA_DIR, name), self.tmp)
        service = EditorService(self.tmp, DEFAULT_SCHEMA_DIR)
        self.server = EditorServer(service, "127.0.0.1", 0, max_body_bytes=100_000)
        self.server.start_in_thread()
        self.addCleanup(self.server.stop)
        self.client = EditorClient(self.server.url, timeout=5)

    def raw(self, name):
        with open(os.path.join(self.tmp, name), "rb") as f:
            return f.read()

    def test_get_document_and_schema(self):
        self.assertIn("opening", self.client.get_document("themes"))
        self.assertEqual(self.client.get_schema("rounds")["title"], "Rounds")

    def test_unknown_file_is_404(self):
        with self.assertRaises(EditorClientError) as ctx:
            self.client.get_document("hadiths")
        self.assertEqual(ctx.exception.status_code, 404)
        response = requests.get(self.server.url + "/nowhere", timeout=5)
        self.assertEqual(response.status_code, 404)

    def test_save_valid_document(self):
        themes = self.client.get_document("themes")
        themes["opening"]["title"] = "Opening"
        self.assertTrue(self.client.save_document("themes", themes).ok)
        self.assertEqual(self.client.get_document("themes")["opening"]["title"], "Opening")

    def test_save_invalid_document_returns_violations(self):
        before = self.raw("duas.json")
        duas = self.client.get_document("duas")
        del duas["talbiyah"]["translation"]
        result = self.client.save_document("duas", duas)
        self.assertFalse(result.ok)
        self.assertEqual(result.violations[0].path, "/talbiyah")
        self.assertIn("translation", result.violations[0].message)
        self.assertEqual(self.raw("duas.json"), before)

    def test_raw_validation_error_payload(self):
        response = requests.post(self.server.url + "/api/data/rounds", json={"hajj": {}}, timeout=5)
        self.assertEqual(response.status_code, 400)
        payload = response.json()
        self.assertEqual(payload["error"], "Schema validation failed")
        self.assertEqual(set(payload["details"][0]), {"path", "message"})

    def test_unparsable_body_is_400(self):
        response = requests.post(self.server.url + "/api/data/duas", data=b"{oops",
                                 headers={"Content-Type": "application/json"}, timeout=5)
        self.assertEqual(response.status_code, 400)
        self.assertIn("Invalid JSON", response.json()["error"])

    def test_oversized_body_is_413(self):
        response = requests.post(self.server.url + "/api/data/duas", data=b"x" * 200_000, timeout=5)
        self.assertEqual(response.status_code, 413)

    def post_with_content_length(self, value):
        host, port = self.server.httpd.server_address[:2]
        conn = http.client.HTTPConnection(host, port, timeout=5)
        self.addCleanup(conn.close)
        conn.putrequest("POST", "/api/data/duas")
        conn.putheader("Content-Length", value)
        conn.endheaders()
        return conn.getresponse()

    def test_negative_content_length_is_400(self):
        response = self.post_with_content_length("-1")
        self.assertEqual(response.status, 400)
        self.assertIn(b"Content-Length", response.read())

    def test_non_numeric_content_length_is_400(self):
        response = self.post_with_content_length("lots")
        self.assertEqual(response.status, 400)

    def test_upsert_and_delete_entry(self):
        fields = {"id": "x", "title": "Gratitude",
                  "duas": {"required": ["hasbunallah"], "pool": [], "count": 0}}
        self.assertTrue(self.client.upsert_entry("themes", "gratitude", fields).ok)
        self.assertEqual(self.client.get_document("themes")["gratitude"]["id"], "gratitude")
        self.assertTrue(self.client.delete_entry("themes", "gratitude").ok)
        self.assertNotIn("gratitude", self.client.get_document("themes"))

    def test_delete_missing_entry_is_404(self):
        with self.assertRaises(EditorClientError) as ctx:
            self.client.delete_entry("duas", "no such dua")
        self.assertEqual(ctx.exception.status_code, 404)

    def test_invalid_upsert_returns_violations(self):
        result = self.client.upsert_entry("duas", "half", {"arabic": "ا"})
        self.assertFalse(result.ok)
        self.assertTrue(all(v.path == "/half" for v in result.violations))


class ParseArgsTests(unittest.TestCase):

    def test_defaults_and_overrides(self):
        args = parse_args([])
        self.assertEqual((args.host, args.port), ("127.0.0.1", 4000))
        self.assertFalse(args.strict_references)
        args = parse_args(["--host", "0.0.0.0", "--port", "8080", "--strict-references"])
        self.assertEqual((args.host, args.port), ("0.0.0.0", 8080))
        self.assertTrue(args.strict_references)


if __name__ == "__main__":
    unittest.main()

"""Tests for oui_master.api_server: JSON lookup API routes."""

import json
import os
import tempfile
import unittest

_ENTRIES = {
    "00:11:22": {"manufacturer": "Example Incorporated", "registry": "MA-L",
                 "short_name": "EXI", "device_type": None, "country": "US",
                 "registered_date": None, "address": None, "sources": ["IEEE"]},
    "AA:BB:CC": {"manufacturer": "Cisco Systems", "registry": "MA-L",
                 "short_name": "Cisco", "device_type": "Router", "country": None,
                 "registered_date": None, "address": None, "sources": ["Nmap"]},
}


class TestApiRoutes(unittest.TestCase):
    def setUp(self):
        from oui_master.api_server import create_app
        from oui_master.lookup import OuiDatabase
        self.app = create_app(OuiDatabase(_ENTRIES))
        self.client = self.app.test_client()

    def test_lookup_found(self):
        resp = self.client.get("/api/lookup/00:11:22:33:44:55")
        self.assertEqual(resp.status_code, 200)
        data = resp.get_json()
        self.assertEqual(data["status"], "found")
        self.assertEqual(data["manufacturer"], "Example Incorporated")

    def test_lookup_unknown(self):
        resp = self.client.get("/api/lookup/FF-FF-FF-00-00-00")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.get_json()["manufacturer"], "Unknown")

    def test_lookup_invalid(self):
        resp = self.client.get("/api/lookup/not-a-mac")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.get_json()["status"], "invalid")

    def test_search(self):
        resp = self.client.get("/api/search?q=cisco")
        data = resp.get_json()
        self.assertEqual(data["total"], 1)
        self.assertEqual(data["results"][0]["oui"], "AA:BB:CC")

    def test_search_limit(self):
        data = self.client.get("/api/search?q=e&limit=1").get_json()
        self.assertEqual(data["total"], 2)
        self.assertEqual(len(data["results"]), 1)

    def test_search_requires_query(self):
        self.assertEqual(self.client.get("/api/search").status_code, 400)
        self.assertEqual(self.client.get("/api/search?q=x&limit=ten").status_code, 400)

    def test_extract(self):
        resp = self.client.post("/api/extract",
                                data="seen aa:bb:cc:01:02:03 and 001122334455")
        results = resp.get_json()["results"]
        self.assertEqual([r["oui"] for r in results], ["AA:BB:CC", "00:11:22"])

    def test_stats(self):
        data = self.client.get("/api/stats").get_json()
        self.assertEqual(data["total"], 2)
        self.assertEqual(data["by_device_type"]["Router"], 1)

    def test_reload_without_file_is_conflict(self):
        resp = self.client.post("/api/reload")
        self.assertEqual(resp.status_code, 409)
        self.assertIn("error", resp.get_json())
        self.assertEqual(self.client.get("/api/stats").get_json()["total"], 2)

    def test_results_do_not_leak_between_requests(self):
        first = self.client.get("/api/lookup/00:11:22:33:44:55").get_json()
        self.assertEqual(first["sources"], ["IEEE"])
        again = self.client.get("/api/lookup/00:11:22:33:44:55").get_json()
        self.assertEqual(again, first)


class TestApiReloadFromFile(unittest.TestCase):
    def test_reload_picks_up_new_file(self):
        from oui_master.api_server import create_app
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "master_oui.min.json")
            with open(path, "w", encoding="utf-8") as f:
                json.dump(_ENTRIES, f)
            client = create_app(db_path=path).test_client()
            self.assertEqual(client.get("/api/stats").get_json()["total"], 2)

            with open(path, "w", encoding="utf-8") as f:
                json.dump({"DE:AD:BE": {"manufacturer": "Fresh Co"}}, f)
            self.assertEqual(client.post("/api/reload").get_json()["entries"], 1)
            data = client.get("/api/lookup/DE:AD:BE:00:00:01").get_json()
            self.assertEqual(data["manufacturer"], "Fresh Co")

    def test_reload_failure_returns_500(self):
        from oui_master.api_server import create_app
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "master_oui.min.json")
            with open(path, "w", encoding="utf-8") as f:
                json.dump(_ENTRIES, f)
            client = create_app(db_path=path).test_client()
            with open(path, "w", encoding="utf-8") as f:
                f.write("{broken")
            resp = client.post("/api/reload")
            self.assertEqual(resp.status_code, 500)
            self.assertEqual(client.get("/api/stats").get_json()["total"], 2)


class TestApiServer(unittest.TestCase):
    def test_app_exposed(self):
        from oui_master.api_server import ApiServer
        from oui_master.lookup import OuiDatabase
        server = ApiServer(OuiDatabase(_ENTRIES), port=0)
        resp = server.app.test_client().get("/api/stats")
        self.assertEqual(resp.status_code, 200)


if __name__ == "__main__":
    unittest.main()

import asyncio
import time
import unittest

from fastapi.testclient import TestClient

from app.config.settings import Settings
from app.errors import NoDataError, RateLimitedError
from app.main import app, build_tracker


class StubRemoteSource:
    name = "stub-remote"

    def __init__(self, error: Exception) -> None:
        self.error = error
        self.calls = 0

    async def fetch(self, symbol: str) -> dict:
        self.calls += 1
        raise self.error


class HangingRemoteSource:
    name = "hanging-remote"

    def __init__(self) -> None:
        self.started = 0
        self.cancelled = 0

    async def fetch(self, symbol: str) -> dict:
        self.started += 1
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled += 1
            raise


class TrackerApiTest(unittest.TestCase):
    def setUp(self):
        self.remote = StubRemoteSource(NoDataError("empty quote"))
        app.state.tracker = build_tracker(remote_source=self.remote)
        app.state.get_settings = lambda: Settings(TRACKER_DEFAULT_TICKERS=["AAPL", "GOOGL", "MSFT"])

    def _wait_settled(self, client):
        for _ in range(200):
            body = client.get("/v1/tickers").json()
            if all(row["state"]["status"] in ("SUCCESS", "FAILURE") for row in body["rows"]):
                return body
            time.sleep(0.01)
        self.fail("rows did not settle")

    def test_lifespan_seeds_default_tickers(self):
        with TestClient(app) as client:
            body = self._wait_settled(client)

        self.assertEqual([row["ticker"] for row in body["rows"]], ["AAPL", "GOOGL", "MSFT"])
        self.assertEqual(body["rows"][0]["state"]["quote"]["price"], "175.43")
        self.assertEqual(body["sort"], {"field": None, "direction": "asc"})
        self.assertEqual(self.remote.calls, 0)

    def test_add_duplicate_and_remove(self):
        with TestClient(app) as client:
            added = client.post("/v1/tickers", json={"text": " tsla "})
            duplicate = client.post("/v1/tickers", json={"text": "TSLA"})
            empty = client.post("/v1/tickers", json={"text": "  "})
            body = self._wait_settled(client)
            removed = client.delete("/v1/tickers/TSLA")
            missing = client.delete("/v1/tickers/TSLA")

        self.assertEqual(added.json(), {"accepted": True, "ticker": "TSLA"})
        self.assertEqual(duplicate.json(), {"accepted": False, "ticker": None})
        self.assertEqual(empty.json()["accepted"], False)
        self.assertIn("TSLA", [row["ticker"] for row in body["rows"]])
        self.assertEqual(removed.json(), {"removed": True})
        self.assertEqual(missing.json(), {"removed": False})

    def test_unknown_ticker_row_fails_with_no_data(self):
        with TestClient(app) as client:
            client.post("/v1/tickers", json={"text": "zzzz"})
            body = self._wait_settled(client)

        row = next(r for r in body["rows"] if r["ticker"] == "ZZZZ")
        self.assertEqual(row["state"]["status"], "FAILURE")
        self.assertEqual(row["state"]["error"]["kind"], "NO_DATA")
        self.assertIsNone(row["state"]["quote"])

    def test_sort_toggle_via_api(self):
        with TestClient(app) as client:
            self._wait_settled(client)
            first = client.post("/v1/sort", json={"field": "price"})
            asc_rows = client.get("/v1/tickers").json()["rows"]
            second = client.post("/v1/sort", json={"field": "price"})
            desc_rows = client.get("/v1/tickers").json()["rows"]
            current = client.get("/v1/sort")
            cleared = client.post("/v1/sort", json={"field": None})

        self.assertEqual(first.json(), {"field": "price", "direction": "asc"})
        self.assertEqual([r["ticker"] for r in asc_rows], ["GOOGL", "AAPL", "MSFT"])
        self.assertEqual(second.json(), {"field": "price", "direction": "desc"})
        self.assertEqual([r["ticker"] for r in desc_rows], ["MSFT", "AAPL", "GOOGL"])
        self.assertEqual(current.json(), {"field": "price", "direction": "desc"})
        self.assertEqual(cleared.json(), {"field": None, "direction": "asc"})

    def test_invalid_sort_field_is_rejected(self):
        with TestClient(app) as client:
            response = client.post("/v1/sort", json={"field": "volume"})

        self.assertEqual(response.status_code, 422)

    def test_one_off_quote_lookup(self):
        with TestClient(app) as client:
            ok = client.get("/v1/quotes/nflx")
            missing = client.get("/v1/quotes/ZZZZ")

        self.assertEqual(ok.status_code, 200)
        self.assertEqual(ok.json(), {"symbol": "NFLX", "price": "612.15", "change": "8.30", "change_percent": "1.37"})
        self.assertEqual(missing.status_code, 404)
        self.assertEqual(missing.json()["detail"], "NO_DATA")

    def test_rate_limited_quote_lookup_maps_to_503(self):
        app.state.tracker = build_tracker(remote_source=StubRemoteSource(RateLimitedError("Note")))
        with TestClient(app) as client:
            response = client.get("/v1/quotes/IBM")

        self.assertEqual(response.status_code, 503)
        self.assertEqual(response.json()["detail"], "RATE_LIMITED")

    def test_lifespan_stop_cancels_hung_rows(self):
        remote = HangingRemoteSource()
        app.state.tracker = build_tracker(remote_source=remote)

        with TestClient(app) as client:
            client.post("/v1/tickers", json={"text": "ZZZZ"})
            for _ in range(200):
                if remote.started:
                    break
                time.sleep(0.01)
            row = next(r for r in client.get("/v1/tickers").json()["rows"] if r["ticker"] == "ZZZZ")

        self.assertEqual(row["state"]["status"], "LOADING")
        self.assertEqual(remote.started, 1)
        self.assertEqual(remote.cancelled, 1)

    def test_quote_metrics(self):
        with TestClient(app) as client:
            self._wait_settled(client)
            metrics = client.get("/v1/metrics/quote").json()

        self.assertEqual(metrics["tracked_count"], 3)
        self.assertEqual(metrics["success_count"], 3)
        self.assertEqual(metrics["fixture_hits"], 3)
        self.assertEqual(metrics["remote_source"], "stub-remote")


if __name__ == "__main__":
    unittest.main()

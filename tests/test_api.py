"""
HTTP and WebSocket API tests with FastAPI's TestClient.
The corpus dependency is overridden with the small in-memory corpus.
Run: python -m unittest tests.test_api
"""
import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient
from fastapi import WebSocketDisconnect

import config
import main
import metrics.streaming_metrics as streaming_metrics
from tests.sample_data import FATIHA, sample_corpus


class APITestCase(unittest.TestCase):
    def setUp(self):
        corpus = sample_corpus()
        main.app.dependency_overrides[main.load_quran_corpus] = lambda: corpus
        streaming_metrics.reset()
        self.client = TestClient(main.app)

    def tearDown(self):
        main.app.dependency_overrides.clear()
        streaming_metrics.reset()


class TestHTTP(APITestCase):
    def test_health(self):
        r = self.client.get("/")
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()["verses_loaded"], 11)

    def test_chapters(self):
        r = self.client.get("/chapters")
        self.assertEqual(len(r.json()), 114)
        detail = self.client.get("/chapters/1").json()
        self.assertEqual(detail["number_of_ayahs"], 7)
        self.assertEqual(detail["session_count"], 1)
        self.assertEqual(self.client.get("/chapters/115").status_code, 404)

    def test_session_window(self):
        data = self.client.get("/chapters/1/sessions/0").json()
        self.assertEqual(len(data["verses"]), 7)
        self.assertEqual(data["verses"][0]["verse_key"], "1:1")
        self.assertEqual(self.client.get("/chapters/1/sessions/1").status_code, 404)

    def test_verse(self):
        data = self.client.get("/verses/1/7").json()
        self.assertEqual(data["text"], FATIHA[6])
        self.assertEqual(data["next_verse_key"], "112:1")
        self.assertEqual(self.client.get("/verses/1/8").status_code, 404)

    def test_match(self):
        r = self.client.post("/match", json={"text": FATIHA[1]})
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.json()[0]["verse_key"], "1:2")
        self.assertEqual(self.client.post("/match", json={"text": "xyz"}).json(), [])

    def test_verify(self):
        r = self.client.post("/verify", json={"surah": 1, "ayah": 1, "text": "بسم الله الرحمن الرحيم"})
        self.assertEqual(r.status_code, 200)
        data = r.json()
        self.assertEqual(data["verse_key"], "1:1")
        self.assertEqual(data["accuracy"], 75.0)
        self.assertFalse(data["is_correct"])
        self.assertEqual([m["type"] for m in data["mistakes"]], ["wrong"])
        self.assertEqual(len(data["words"]), 4)

    def test_verify_errors(self):
        self.assertEqual(self.client.post("/verify", json={"surah": 2, "ayah": 1, "text": "الم"}).status_code, 404)
        self.assertEqual(self.client.post("/verify", json={"surah": 1}).status_code, 422)

    def test_metrics(self):
        data = self.client.get("/metrics/streaming").json()
        self.assertIn("superseded_evaluations", data)
        self.assertEqual(data["active_sessions"], 0)


class TestReciteWebSocket(APITestCase):
    def test_sequential_detect_resume_end(self):
        with self.client.websocket_connect("/ws/recite?surah=1&session=0") as ws:
            ws.send_json({"type": "transcript", "text": FATIHA[0], "is_final": True})
            partial = ws.receive_json()
            self.assertEqual(partial["type"], "partial_result")
            self.assertEqual(partial["index"], 0)
            self.assertTrue(partial["detected"])
            detected = ws.receive_json()
            self.assertEqual(detected["type"], "detected")
            self.assertEqual(detected["verse_key"], "1:1")

            ws.send_json({"type": "resume"})
            self.assertEqual(ws.receive_json(), {"type": "resumed", "next_index": 1})

            ws.send_json({"type": "error", "error": "no-speech"})
            ws.send_json({"type": "end"})
            final = ws.receive_json()
        self.assertEqual(final["type"], "final_result")
        self.assertEqual(final["result"]["current_index"], 0)
        self.assertEqual(final["result"]["completed_count"], 1)

        snap = streaming_metrics.get_snapshot()
        self.assertEqual(snap["verses_detected"], 1)
        self.assertEqual(snap["transient_error_count"], 1)
        self.assertEqual(snap["active_sessions"], 0)

    def test_best_match_does_not_pause(self):
        with self.client.websocket_connect("/ws/recite?surah=1&policy=best_match") as ws:
            ws.send_json({"type": "transcript", "text": FATIHA[3]})
            partial = ws.receive_json()
            self.assertEqual(partial["policy"], "best_match")
            self.assertEqual(partial["index"], 3)
            ws.send_json({"type": "end"})
            final = ws.receive_json()
        self.assertEqual(final["type"], "final_result")
        self.assertIn("3", final["result"]["results"])

    def test_fatal_error_closes_session(self):
        with self.client.websocket_connect("/ws/recite?surah=1") as ws:
            ws.send_json({"type": "error", "error": "not-allowed"})
            message = ws.receive_json()
        self.assertEqual(message["type"], "error")
        self.assertTrue(message["fatal"])
        self.assertEqual(message["error"], "not-allowed")
        self.assertEqual(streaming_metrics.get_snapshot()["fatal_error_count"], 1)

    def test_invalid_query_params(self):
        for url in (
            "/ws/recite",
            "/ws/recite?surah=abc",
            "/ws/recite?surah=1&session=5",
            "/ws/recite?surah=1&policy=greedy",
        ):
            with self.assertRaises(WebSocketDisconnect) as ctx:
                with self.client.websocket_connect(url) as ws:
                    ws.receive_json()
            self.assertEqual(ctx.exception.code, 1008)

    def test_invalid_word_metric_rejected(self):
        with patch.object(config, "WORD_METRIC", "phonetic"):
            with self.assertRaises(WebSocketDisconnect) as ctx:
                with self.client.websocket_connect("/ws/recite?surah=1") as ws:
                    ws.receive_json()
        self.assertEqual(ctx.exception.code, 1008)

    def test_binary_frame_ignored(self):
        with self.client.websocket_connect("/ws/recite?surah=1") as ws:
            ws.send_bytes(b"\x00\x01")
            warning = ws.receive_json()
            self.assertEqual(warning["type"], "warning")
            ws.send_json({"type": "end"})
            final = ws.receive_json()
        self.assertEqual(final["type"], "final_result")
        self.assertEqual(streaming_metrics.get_snapshot()["active_sessions"], 0)


class TestDetectWebSocket(APITestCase):
    def test_live_detection(self):
        with self.client.websocket_connect("/ws/detect") as ws:
            ws.send_json({"type": "transcript", "text": "قل هو الله احد", "is_final": True})
            partial = ws.receive_json()
            self.assertEqual(partial["type"], "partial_result")
            self.assertEqual(partial["matches"][0]["verse_key"], "112:1")
            ws.send_json({"type": "end"})
            final = ws.receive_json()
        self.assertEqual(final["type"], "final_result")
        self.assertTrue(final["result"]["is_complete"])
        self.assertEqual(final["result"]["matches"][0]["verse_key"], "112:1")


if __name__ == "__main__":
    unittest.main()

"""
Tests for the decoder REST API
"""

import logging
import threading
import unittest
from unittest.mock import patch

from fastapi.testclient import TestClient

from config import settings
import main
from main import app
from security_unit_protocol import SecurityUnitProtocol


VERIFY_PASSWORD = "E9 00 05 00 02 12 34 56 8C E6"
BAD_CHECKSUM = "E9 00 05 00 02 12 34 56 00 E6"


class TestDecodeEndpoints(unittest.TestCase):
    """Test cases for the decode endpoints"""

    def setUp(self):
        self.client_context = TestClient(app)
        self.client = self.client_context.__enter__()

    def tearDown(self):
        self.client_context.__exit__(None, None, None)

    def test_decode_frame(self):
        """Test single frame decode"""
        response = self.client.post("/api/frames/decode", json={"frame": VERIFY_PASSWORD})
        self.assertEqual(response.status_code, 200)

        body = response.json()
        self.assertEqual(body["status"], "PARSE_COMPLETE")
        self.assertEqual(body["message"], "安全单元帧解析完成")
        self.assertEqual(body["field_count"], 7)
        self.assertEqual(body["fields"][4]["meaning"], "操作员密码")

    def test_failed_frame_is_not_an_http_error(self):
        """Test failed frames still return 200"""
        response = self.client.post("/api/frames/decode", json={"frame": BAD_CHECKSUM})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "CHECKSUM_FAILED")
        self.assertEqual(response.json()["fields"], [])

    def test_oversized_frame(self):
        """Test frame size limit"""
        with patch.object(settings, "max_frame_chars", 8):
            response = self.client.post("/api/frames/decode", json={"frame": VERIFY_PASSWORD})
        self.assertEqual(response.status_code, 422)

    def test_batch_keeps_order(self):
        """Test batch results keep request order"""
        frames = [
            VERIFY_PASSWORD,
            BAD_CHECKSUM,
            SecurityUnitProtocol.build_frame(0x01, 0x87, "11223344"),
            "",
        ]
        response = self.client.post("/api/frames/decode/batch", json={"frames": frames})
        self.assertEqual(response.status_code, 200)

        body = response.json()
        self.assertEqual(body["total"], 4)
        self.assertEqual(body["complete"], 2)
        self.assertEqual(
            [result["status"] for result in body["results"]],
            ["PARSE_COMPLETE", "CHECKSUM_FAILED", "PARSE_COMPLETE", "BYTE_INCOMPLETE"]
        )

    def test_batch_decodes_on_worker_pool(self):
        """Test batch frames are decoded on the worker pool"""
        thread_names = []
        decode_to_response = main._decode_to_response

        def recording_decode(frame):
            thread_names.append(threading.current_thread().name)
            return decode_to_response(frame)

        with patch("main._decode_to_response", side_effect=recording_decode):
            response = self.client.post(
                "/api/frames/decode/batch",
                json={"frames": [VERIFY_PASSWORD] * 5}
            )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["complete"], 5)
        self.assertEqual(len(thread_names), 5)
        self.assertTrue(all(name.startswith("FrameDecoderWorker") for name in thread_names))

    def test_empty_batch(self):
        """Test empty batch rejection"""
        response = self.client.post("/api/frames/decode/batch", json={"frames": []})
        self.assertEqual(response.status_code, 400)

    def test_batch_over_limit(self):
        """Test batch size limit"""
        with patch.object(settings, "max_batch_size", 2):
            response = self.client.post(
                "/api/frames/decode/batch",
                json={"frames": [VERIFY_PASSWORD] * 3}
            )
        self.assertEqual(response.status_code, 400)


class TestLayoutEndpoints(unittest.TestCase):
    """Test cases for the layout catalogue and service endpoints"""

    def setUp(self):
        self.client = TestClient(app)

    def test_get_layouts(self):
        """Test layout listing"""
        response = self.client.get("/api/layouts")
        self.assertEqual(response.status_code, 200)
        keys = [layout["key"] for layout in response.json()]
        self.assertEqual(len(keys), 66)
        self.assertEqual(keys, sorted(keys))

    def test_get_layout(self):
        """Test single layout lookup"""
        response = self.client.get("/api/layouts/0189")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["alias_of"], "0187")

    def test_unknown_layout(self):
        """Test unknown layout keys"""
        self.assertEqual(self.client.get("/api/layouts/0401").status_code, 404)
        self.assertEqual(self.client.get("/api/layouts/zz").status_code, 404)

    def test_health(self):
        """Test health endpoint"""
        body = self.client.get("/api/health").json()
        self.assertEqual(body["status"], "healthy")
        self.assertEqual(body["layouts_registered"], 66)

    def test_root_redirects_to_docs(self):
        """Test root redirect"""
        response = self.client.get("/", follow_redirects=False)
        self.assertEqual(response.status_code, 307)
        self.assertEqual(response.headers["location"], "/docs")


class TestDebugEndpoints(unittest.TestCase):
    """Test cases for runtime logging control"""

    def setUp(self):
        self.client = TestClient(app)
        self.saved_level = logging.getLogger("FieldDispatcher").level

    def tearDown(self):
        logging.getLogger("FieldDispatcher").setLevel(self.saved_level)

    def test_get_logging_config(self):
        """Test logging configuration listing"""
        body = self.client.get("/debug/logging").json()
        self.assertIn("FrameDecoder", body["loggers"])
        self.assertEqual(body["log_file"], settings.log_file)

    def test_set_logging_level(self):
        """Test changing a logger level"""
        response = self.client.post("/debug/logging/FieldDispatcher/debug")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["new_level"], logging.DEBUG)
        self.assertEqual(logging.getLogger("FieldDispatcher").level, logging.DEBUG)

    def test_invalid_level(self):
        """Test an invalid log level"""
        response = self.client.post("/debug/logging/FieldDispatcher/LOUD")
        self.assertEqual(response.status_code, 400)


if __name__ == "__main__":
    unittest.main()

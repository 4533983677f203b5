"""
Tests for the command line decoder
"""

import io
import json
import unittest
from unittest.mock import patch

from decode_frame import main


VERIFY_PASSWORD = "E9000500021234568CE6"


class TestDecodeFrameCli(unittest.TestCase):
    """Test cases for decode_frame.main"""

    @patch('sys.stdout', new_callable=io.StringIO)
    def test_table_output(self, mock_stdout):
        """Test table output for a valid frame"""
        exit_code = main(["E9", "00", "05", "00", "02", "12", "34", "56", "8C", "E6"])

        self.assertEqual(exit_code, 0)
        output = mock_stdout.getvalue()
        self.assertIn("=== 安全单元帧解析完成 ===", output)
        self.assertIn("[5] 操作员密码", output)

    @patch('sys.stdout', new_callable=io.StringIO)
    def test_json_output(self, mock_stdout):
        """Test JSON output"""
        exit_code = main([VERIFY_PASSWORD, "--json"])

        self.assertEqual(exit_code, 0)
        payload = json.loads(mock_stdout.getvalue())
        self.assertEqual(payload["status"], "PARSE_COMPLETE")
        self.assertEqual(len(payload["fields"]), 7)
        self.assertEqual(payload["fields"][0]["origin"], "E9")

    @patch('sys.stdout', new_callable=io.StringIO)
    def test_failed_frame_exit_code(self, mock_stdout):
        """Test the exit code for a failed frame"""
        exit_code = main(["E900050002123456" + "00E6", "--json"])

        self.assertEqual(exit_code, 1)
        payload = json.loads(mock_stdout.getvalue())
        self.assertEqual(payload["status"], "CHECKSUM_FAILED")
        self.assertEqual(payload["fields"], [])

    @patch('sys.stdout', new_callable=io.StringIO)
    @patch('sys.stdin', new_callable=lambda: io.StringIO("e9 00 05 00 02 12 34 56 8c e6\n"))
    def test_reads_stdin(self, mock_stdin, mock_stdout):
        """Test reading the frame from stdin"""
        self.assertEqual(main(["--json"]), 0)
        self.assertIn("PARSE_COMPLETE", mock_stdout.getvalue())


if __name__ == "__main__":
    unittest.main()

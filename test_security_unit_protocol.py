"""
Unit tests for frame preprocessing, validation and context construction
"""

import unittest

from security_unit_protocol import SecurityUnitProtocol


VERIFY_PASSWORD = "E9000500021234568CE6"


class TestPreprocess(unittest.TestCase):
    """Test cases for textual normalization"""

    def test_strips_whitespace_and_uppercases(self):
        """Test whitespace removal and uppercasing"""
        self.assertEqual(
            SecurityUnitProtocol.preprocess(" e9 00 05\n00 02\t12 34 56\r\n8c e6 "),
            VERIFY_PASSWORD
        )

    def test_byte_integrity(self):
        """Test the byte integrity check"""
        self.assertTrue(SecurityUnitProtocol.check_byte_integrity(VERIFY_PASSWORD))
        self.assertFalse(SecurityUnitProtocol.check_byte_integrity(""))
        self.assertFalse(SecurityUnitProtocol.check_byte_integrity(VERIFY_PASSWORD[:-1]))


class TestBuildFrame(unittest.TestCase):
    """Test cases for the frame builder"""

    def test_command_frame(self):
        """Test a command frame"""
        self.assertEqual(SecurityUnitProtocol.build_frame(0x00, 0x02, "123456"), VERIFY_PASSWORD)

    def test_ack_frame_inserts_status(self):
        """Test acknowledgement frames get a status byte"""
        frame = SecurityUnitProtocol.build_frame(0x01, 0x87, "11223344", status=0x00)
        self.assertEqual(frame, "E900070187001122334422E6")

    def test_upgrade_ack_frame(self):
        """Test building the upgrade-3 acknowledgement"""
        self.assertEqual(SecurityUnitProtocol.build_frame(0xFE, None, "05"), "E90002FE05EEE6")


class TestFormatCheck(unittest.TestCase):
    """Test cases for the structural format check"""

    def test_valid_command_frame(self):
        """Test a valid command frame"""
        self.assertTrue(SecurityUnitProtocol.check_format(VERIFY_PASSWORD))

    def test_non_hex_character(self):
        """Test a non-hex character"""
        self.assertFalse(SecurityUnitProtocol.check_format("E90005000212345G8CE6"))

    def test_bad_markers(self):
        """Test wrong start and end markers"""
        self.assertFalse(SecurityUnitProtocol.check_format("E8000500021234568CE6"))
        self.assertFalse(SecurityUnitProtocol.check_format("E9000500021234568CE7"))

    def test_length_field_mismatch(self):
        """Test a length field mismatch"""
        frame = "E9000A000103040506E6"
        self.assertEqual(SecurityUnitProtocol.declared_length(frame), 0x0A)
        self.assertFalse(SecurityUnitProtocol.check_format(frame))

    def test_length_field_is_xor_combined(self):
        """Test the length bytes are XOR combined"""
        self.assertEqual(SecurityUnitProtocol.declared_length("E90105"), 0x0105)

    def test_too_short(self):
        """Test a frame below the minimum size"""
        self.assertFalse(SecurityUnitProtocol.check_format("E90001006CE6"))

    def test_ack_needs_status_byte(self):
        """Test acknowledgements need a status byte"""
        # 7 bytes with a valid length field, but an acknowledgement needs 8
        self.assertFalse(SecurityUnitProtocol.check_format("E9000200816CE6"))

    def test_invalid_main_function(self):
        """Test an invalid main function"""
        frame = SecurityUnitProtocol.build_frame(0x07, 0x02, "123456")
        self.assertFalse(SecurityUnitProtocol.check_format(frame))

    def test_invalid_command_code(self):
        """Test invalid command codes"""
        self.assertFalse(SecurityUnitProtocol.check_format(SecurityUnitProtocol.build_frame(0x00, 0x0F)))
        self.assertFalse(SecurityUnitProtocol.check_format(SecurityUnitProtocol.build_frame(0x00, 0x8F)))
        self.assertTrue(SecurityUnitProtocol.check_format(SecurityUnitProtocol.build_frame(0x00, 0x0E)))

    def test_upgrade_ack_variant_skips_code_check(self):
        """Test the upgrade-3 variant skips the code check"""
        frame = SecurityUnitProtocol.build_frame(0xFE, None, "7F")
        self.assertTrue(SecurityUnitProtocol.is_upgrade_ack(frame))
        self.assertTrue(SecurityUnitProtocol.check_format(frame))

    def test_upgrade_ack_variant_minimum_six_bytes(self):
        """Test the upgrade-3 variant at six bytes"""
        frame = SecurityUnitProtocol.build_frame(0xFE, None)
        self.assertEqual(len(frame) // 2, 6)
        self.assertTrue(SecurityUnitProtocol.check_format(frame))

    def test_regular_upgrade_codes(self):
        """Test regular upgrade codes"""
        for code in (0x01, 0x02, 0x03, 0x81, 0x82):
            frame = SecurityUnitProtocol.build_frame(0xFE, code, "00")
            self.assertFalse(SecurityUnitProtocol.is_upgrade_ack(frame))
            self.assertTrue(SecurityUnitProtocol.check_format(frame))


class TestChecksum(unittest.TestCase):
    """Test cases for the checksum check"""

    def test_matches_independent_sum(self):
        """Test the checksum against a plain byte sum"""
        frame = SecurityUnitProtocol.build_frame(0x02, 0x01, "AB" * 40)
        raw = bytes.fromhex(frame)
        self.assertEqual(SecurityUnitProtocol.calculate_checksum(frame), sum(raw[:-2]) % 256)
        self.assertTrue(SecurityUnitProtocol.check_checksum(frame))

    def test_mismatch(self):
        """Test a checksum mismatch"""
        self.assertFalse(SecurityUnitProtocol.check_checksum("E900050002123456" + "00E6"))


class TestBuildContext(unittest.TestCase):
    """Test cases for frame context construction"""

    def test_command_context(self):
        """Test context of a command frame"""
        context = SecurityUnitProtocol.build_context(VERIFY_PASSWORD)
        self.assertEqual(context.frame_byte_length, 5)
        self.assertEqual(context.main_function, 0x00)
        self.assertEqual(context.command_or_ack, 0x02)
        self.assertFalse(context.is_acknowledgement)
        self.assertIsNone(context.status)
        self.assertEqual(context.checksum, 0x8C)
        self.assertEqual(context.data_domain_byte_length, 3)
        self.assertEqual(context.data_domain_char_start, 10)
        self.assertEqual(context.data_domain_char_end, 16)
        self.assertEqual(context.dispatch_key, 0x0002)

    def test_ack_context(self):
        """Test context of an acknowledgement frame"""
        frame = SecurityUnitProtocol.build_frame(0x01, 0x87, "11223344", status=0xF1)
        context = SecurityUnitProtocol.build_context(frame)
        self.assertTrue(context.is_acknowledgement)
        self.assertEqual(context.status, 0xF1)
        self.assertEqual(context.code, 0x07)
        self.assertEqual(context.data_domain_byte_length, 4)
        self.assertEqual(frame[context.data_domain_char_start:context.data_domain_char_end], "11223344")

    def test_upgrade_ack_context(self):
        """Test context of the upgrade-3 variant"""
        frame = SecurityUnitProtocol.build_frame(0xFE, None, "05AA")
        context = SecurityUnitProtocol.build_context(frame)
        self.assertTrue(context.is_fe03_special)
        self.assertEqual(context.command_or_ack, 0x83)
        self.assertIsNone(context.status)
        self.assertEqual(context.data_domain_byte_length, 2)
        self.assertEqual(frame[context.data_domain_char_start:context.data_domain_char_end], "05AA")


if __name__ == "__main__":
    unittest.main()

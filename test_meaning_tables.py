"""
Unit tests for the header meaning tables
"""

import unittest

from meaning_tables import (
    main_function_meaning, command_label, command_meaning, command_details, status_meaning,
    UNKNOWN_MAIN_FUNCTION, UNKNOWN_COMMAND, UNKNOWN_STATUS,
)


class TestMainFunctionMeaning(unittest.TestCase):
    """Test cases for the F byte"""

    def test_known_main_function(self):
        """Test a known main function"""
        self.assertEqual(main_function_meaning(0x00), "主功能标识：安全单元自身操作命令")

    def test_unknown_main_function(self):
        """Test an unknown main function"""
        self.assertEqual(main_function_meaning(0x07), "主功能标识：" + UNKNOWN_MAIN_FUNCTION)

    def test_upgrade_3_ack_variant(self):
        """Test the upgrade-3 acknowledgement label"""
        meaning = main_function_meaning(0xFE, is_fe03_special=True)
        self.assertTrue(meaning.startswith("主功能标识：安全单元升级命令"))
        self.assertIn("命令类型：升级命令3;", meaning)
        self.assertIn("现场服务终端 ---> 安全单元", meaning)


class TestCommandMeaning(unittest.TestCase):
    """Test cases for the C/A byte"""

    def test_command_frame(self):
        """Test a command frame"""
        self.assertEqual(
            command_meaning(0x00, 0x02),
            "命令类型：验证操作员密码\n传输方向: 现场服务终端 ---> 安全单元"
        )

    def test_ack_frame_uses_code_without_ack_bit(self):
        """Test acknowledgements use the code without D7"""
        self.assertEqual(
            command_meaning(0x01, 0x87),
            "命令类型：本地密钥计算 MAC;\n传输方向: 安全单元 ---> 现场服务终端"
        )

    def test_upgrade_directions(self):
        """Test upgrade transfer directions"""
        self.assertIn("安全单元 ---> 现场服务终端", command_meaning(0xFE, 0x02))
        self.assertIn("现场服务终端 ---> 安全单元", command_meaning(0xFE, 0x01))
        self.assertIn("现场服务终端 ---> 安全单元", command_meaning(0xFE, 0x82))

    def test_unknown_codes(self):
        """Test unknown command codes"""
        self.assertEqual(command_label(0x03, 0x0E), UNKNOWN_COMMAND)
        self.assertEqual(command_label(0x07, 0x01), UNKNOWN_MAIN_FUNCTION)
        self.assertEqual(command_details(0x00, 0x0E), UNKNOWN_COMMAND)

    def test_upgrade_details_carry_file_format(self):
        """Test upgrade command details"""
        self.assertTrue(command_details(0xFE, 0x01).startswith("升级命令 1"))


class TestStatusMeaning(unittest.TestCase):
    """Test cases for the S byte"""

    def test_normal_response(self):
        """Test the normal response status"""
        self.assertEqual(status_meaning(0x00, 0x81, 0x00), "状态码：安全单元正常响应")

    def test_general_error(self):
        """Test a general error code"""
        self.assertEqual(status_meaning(0x02, 0x84, 0xF1), "通用错误码：帧效验错")

    def test_specific_error(self):
        """Test a command-specific error code"""
        self.assertEqual(status_meaning(0x00, 0x82, 0x07), "异常响应状态码：密码不一致")

    def test_f4_is_command_specific_for_some_commands(self):
        """Test F4 for commands with their own meaning"""
        self.assertEqual(status_meaning(0x01, 0x89, 0xF4), "异常响应状态码：计算 MAC 错误")
        self.assertEqual(status_meaning(0x03, 0x84, 0xF4), "异常响应状态码：解密随机数失败")
        self.assertEqual(status_meaning(0x05, 0x83, 0xF4), "异常响应状态码：计算 MAC 错误")
        self.assertTrue(status_meaning(0x01, 0x88, 0xF4).startswith("通用错误码"))

    def test_fallbacks(self):
        """Test fallback status text"""
        self.assertEqual(status_meaning(0x00, 0x82, 0x55), "异常响应状态码：" + UNKNOWN_STATUS)
        self.assertEqual(status_meaning(0x03, 0x8E, 0x01), "异常响应状态码：" + UNKNOWN_COMMAND)
        self.assertEqual(status_meaning(0x07, 0x81, 0x01), "异常响应状态码：" + UNKNOWN_MAIN_FUNCTION)


if __name__ == "__main__":
    unittest.main()

"""Data-domain layouts for F=0x03, terminal and security isolation gateway interaction"""

from typing import List

from models import FrameContext, ResultField
from frame_format import REMAINDER_COUNT, decimal_field, plain_field
from layout_registry import DataCursor, LayoutTable

GATEWAY_LAYOUTS = LayoutTable("现场服务终端与安全隔离网关交互类命令")


def _unit_length_and_content(
    data: DataCursor, length_meaning: str, content_meaning: str, length_note: str, content_note: str,
) -> List[ResultField]:
    """2+N application data unit, length shown as raw hex"""
    length_hex, payload = data.take_length_prefixed()
    return [
        plain_field(length_meaning, length_hex, 2, length_note),
        plain_field(content_meaning, payload, REMAINDER_COUNT, content_note),
    ]


@GATEWAY_LAYOUTS.register(0x0301)
def gateway_authentication(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [
        plain_field("密文 M1", data.take(32), 32),
        plain_field("M1 签名", data.take_rest(), 64),
    ]


@GATEWAY_LAYOUTS.register(0x0302)
def gateway_encrypt(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return _unit_length_and_content(data, "输入数据长度", "输入数据内容", "应用数据单元长度", "应用数据单元（数据明文）")


@GATEWAY_LAYOUTS.register(0x0303)
def gateway_decrypt(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return _unit_length_and_content(data, "输入数据长度", "输入数据内容", "应用数据单元长度", "应用数据单元（密文 + MAC）")


@GATEWAY_LAYOUTS.register(0x0304, 0x0305)
def gateway_mac(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [
        decimal_field("密钥 ID", data.take(1), 1),
        plain_field("输入数据长度", data.take(2), 2, "应用数据单元长度"),
        plain_field("输入数据内容", data.take_rest(), REMAINDER_COUNT, "应用数据单元"),
    ]


@GATEWAY_LAYOUTS.register(0x0381)
def gateway_authentication_response(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [
        plain_field("密文 M2", data.take(48), 48),
        plain_field("M2 签名", data.take_rest(), 64, "签名内容"),
    ]


@GATEWAY_LAYOUTS.register(0x0382)
def gateway_encrypt_response(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return _unit_length_and_content(data, "返回数据长度", "返回数据内容", "", "应用数据单元（密文 + MAC）")


@GATEWAY_LAYOUTS.register(0x0383)
def gateway_decrypt_response(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return _unit_length_and_content(data, "返回数据长度", "返回数据内容", "", "明文数据")


@GATEWAY_LAYOUTS.register(0x0384)
def gateway_mac_response(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [plain_field("返回数据 MAC", data.take_rest(), 4)]

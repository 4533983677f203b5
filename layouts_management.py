"""Data-domain layouts for F=0x01, terminal and management system interaction"""

from typing import List

from models import FrameContext, ResultField
from frame_format import REMAINDER_COUNT, composite_field, decimal_field, hex_to_decimal, plain_field
from layout_registry import DataCursor, LayoutTable, esam_type_field, length_prefixed_field, pad

MANAGEMENT_LAYOUTS = LayoutTable("现场服务终端与管理系统交互类命令")

MAC_BYTES = 4


def _sealed_length_prefixed(meaning: str, label: str, data: DataCursor) -> ResultField:
    """2+N ciphertext followed by a 4-byte MAC at the end of the data domain"""
    length_hex, payload = data.take_length_prefixed(reserve=MAC_BYTES)
    data.take_rest(reserve=MAC_BYTES)
    mac = pad(data.take(MAC_BYTES), MAC_BYTES)
    return composite_field(
        meaning,
        [length_hex, payload, mac],
        (
            f"{label}长度：{hex_to_decimal(length_hex)}\n"
            f"{label} ---- N 字节密文：\n{payload}\n"
            f"{label} ---- MAC：\n{mac}"
        ),
        "2 + N",
        f"{label}长度（2 字节 LHLL）+ 具体数据（ N 字节密文 + MAC）",
    )


def _plain_with_mac(meaning: str, content: str) -> ResultField:
    """Plaintext whose last 4 bytes are a MAC"""
    split = max(len(content) - MAC_BYTES * 2, 0)
    plain, mac = content[:split], content[split:]
    return composite_field(
        meaning,
        [plain, mac],
        f"明文数据：{plain}\nMAC：{mac}",
        REMAINDER_COUNT,
        "明文数据 + MAC",
    )


@MANAGEMENT_LAYOUTS.register(0x0101)
def get_random_number(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [
        esam_type_field(data.take(1)),
        decimal_field("随机数长度", data.take_rest(), 1, "长度取值：4，8，16"),
    ]


@MANAGEMENT_LAYOUTS.register(0x0102)
def application_authentication(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [
        plain_field("密文 M1", data.take(32), 32),
        plain_field("M1 签名", data.take_rest(), 64),
    ]


@MANAGEMENT_LAYOUTS.register(0x0103)
def application_encrypt(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [length_prefixed_field(
        "输入数据", data, "输入数据长度", "输入数据",
        "输入数据长度（2 字节 LHLL）+ 具体数据（ N 字节 Data）",
    )]


@MANAGEMENT_LAYOUTS.register(0x0104)
def application_decrypt(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [_sealed_length_prefixed("输入数据", "输入数据", data)]


@MANAGEMENT_LAYOUTS.register(0x0105)
def re_encryption_init(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [plain_field("数据", data.take_rest(), 32)]


@MANAGEMENT_LAYOUTS.register(0x0106)
def set_offline_counter(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [plain_field("数据", data.take_rest(), 16)]


@MANAGEMENT_LAYOUTS.register(0x0107)
def local_key_mac(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [
        plain_field("随机数 M", data.take(16), 16),
        length_prefixed_field("数据", data, "数据长度", "数据内容", "数据长度 + 数据内容"),
    ]


@MANAGEMENT_LAYOUTS.register(0x0108)
def local_key_verify_mac(data: DataCursor, context: FrameContext) -> List[ResultField]:
    random_m = plain_field("随机数 M", data.take(16), 16)
    length_hex, content = data.take_length_prefixed()
    return [
        random_m,
        decimal_field("随机数长度", length_hex, 2),
        _plain_with_mac("数据", content),
    ]


@MANAGEMENT_LAYOUTS.register(0x0109)
def session_key_mac(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [length_prefixed_field("数据", data, "数据长度", "数据内容")]


@MANAGEMENT_LAYOUTS.register(0x010A)
def session_key_verify_mac(data: DataCursor, context: FrameContext) -> List[ResultField]:
    length_hex, content = data.take_length_prefixed()
    return [
        decimal_field("数据长度", length_hex, 2),
        _plain_with_mac("数据", content),
    ]


@MANAGEMENT_LAYOUTS.register(0x0181)
def get_random_number_response(data: DataCursor, context: FrameContext) -> List[ResultField]:
    fields = [esam_type_field(data.take(1))]
    # The random number is only present in a normal response
    if context.status == 0x00:
        fields.append(length_prefixed_field("随机数", data, "数据长度", "数据内容"))
    return fields


@MANAGEMENT_LAYOUTS.register(0x0182)
def application_authentication_response(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [
        plain_field("密文 M2", data.take(48), 48),
        plain_field("M2 签名", data.take_rest(), 64),
    ]


@MANAGEMENT_LAYOUTS.register(0x0183)
def application_encrypt_response(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [_sealed_length_prefixed("返回数据", "返回数据", data)]


@MANAGEMENT_LAYOUTS.register(0x0184)
def application_decrypt_response(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [length_prefixed_field(
        "返回数据", data, "返回数据长度", "返回数据 ---- N 字节明文",
        "返回数据长度（2 字节 LHLL）+ 具体数据（ N 字节明文）",
    )]


@MANAGEMENT_LAYOUTS.register(0x0185)
def re_encryption_init_response(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [plain_field("数据", data.take_rest(), 4)]


@MANAGEMENT_LAYOUTS.register(0x0187, 0x0189)
def mac_response(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [plain_field("MAC", data.take_rest(), 4)]

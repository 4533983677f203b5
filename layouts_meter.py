"""
Data-domain layouts for F=0x02, terminal and electricity meter interaction.

Most meter commands open with the meter number, the random number from
identity authentication and a 48-byte permission block, and close with the
handheld's current time (7-byte BCD date).
"""

from typing import List

from models import FrameContext, ResultField
from frame_format import (
    REMAINDER_COUNT, composite_field, date_field, decimal_field, hex_to_date, hex_to_decimal,
    plain_field, split_key_block,
)
from layout_registry import DataCursor, LayoutTable, length_prefixed_field, pad

METER_LAYOUTS = LayoutTable("现场服务终端与电能表的交互命令")

METER_NUMBER_NOTE = "高位在前（非颠倒），高 2 字节补 0x00"
RANDOM_NUMBER_NOTE = "身份认证产生的随机数"
SERIAL_OR_METER_NOTE = "若为公钥：使用ESAM序列号\n若为私钥：用表号高位在前（非颠倒），高 2 字节补 0x00"
DATE_FORMAT_NOTE = "yyyyMMddHHmmss"

METER_KEY_BYTES = 32
PERMISSION_BYTES = 48
DATE_BYTES = 7
MAC_BYTES = 4

KEY_PAIR_FLAGS = {0x00: "公钥"}
KEY_STATES = {0x00: "密钥恢复", 0x01: "密钥下装"}
PARAMETER_TYPES = {0x03: "二类参数", 0x05: "一类参数", 0x06: "一套费率", 0x07: "备用套费率"}
WEEKDAYS = {1: "一", 2: "二", 3: "三", 4: "四", 5: "五", 6: "六", 7: "日"}
DATA_FORMS = {"00": "明文", "01": "密文"}
MAC_FLAGS = {"00": "不含 MAC", "01": "含有 MAC"}
SECURITY_MODES = {"00": "明文", "01": "明文 + MAC", "03": "密文 + MAC", "04": "明文 + RN 随机数"}


def _meter_number(data: DataCursor) -> ResultField:
    return plain_field("表号", data.take(8), 8, METER_NUMBER_NOTE)


def _random_number(data: DataCursor) -> ResultField:
    return plain_field("随机数", data.take(4), 4, RANDOM_NUMBER_NOTE)


def _handheld_time(data: DataCursor, note: str = "", last: bool = False) -> ResultField:
    """7-byte BCD time; as the last field it also keeps any surplus bytes"""
    raw = data.take_rest() if last else data.take(DATE_BYTES)
    return date_field("掌机当前时间", raw, DATE_BYTES, note)


def _key_pair_flag(raw: str) -> ResultField:
    value = int(pad(raw, 1), 16)
    return decimal_field(
        "公私钥标志", raw, 1, "00 为公钥，01 为私钥",
        label="公私钥标志：" + KEY_PAIR_FLAGS.get(value, "私钥"),
    )


def _key_block_field(meaning: str, block: str, key_count: int, tail_bytes: int, note: str = "") -> ResultField:
    """Ciphertext made of 32-byte meter keys followed by a fixed trailing block"""
    keys, tail = split_key_block(block, METER_KEY_BYTES, tail_bytes)
    analyzed = [f"密钥 {number}：{key}" for number, key in enumerate(keys, 1)]
    total = METER_KEY_BYTES * key_count + tail_bytes
    return composite_field(
        meaning,
        keys + [tail],
        "\n".join(analyzed + [tail]),
        f"{METER_KEY_BYTES} * {key_count} + {tail_bytes}  ({total})",
        note,
    )


def _length_then_payload(length_meaning: str, payload_meaning: str, data: DataCursor) -> List[ResultField]:
    """2+N structure shown as a decimal length field and a separate payload field"""
    length_hex, payload = data.take_length_prefixed()
    return [
        decimal_field(length_meaning, length_hex, 2),
        plain_field(payload_meaning, payload, REMAINDER_COUNT),
    ]


def _length_payload_mac(payload_meaning: str, data: DataCursor) -> List[ResultField]:
    """Length (which counts the MAC), payload, then the trailing MAC"""
    length_hex = data.take(2)
    payload = data.take_rest(reserve=MAC_BYTES)
    return [
        decimal_field("数据长度", length_hex, 2, "注：包含 MAC 长度"),
        plain_field(payload_meaning, payload, REMAINDER_COUNT),
        plain_field("MAC", data.take(MAC_BYTES), MAC_BYTES),
    ]


@METER_LAYOUTS.register(0x0201)
def infrared_authentication(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [
        _meter_number(data),
        plain_field("ESAM 序列号", data.take(8), 8),
        plain_field("随机数 1 密文", data.take(8), 8),
        plain_field("红外认证权限 1", data.take(PERMISSION_BYTES), PERMISSION_BYTES),
        plain_field("红外认证权限 2", data.take(PERMISSION_BYTES), PERMISSION_BYTES),
        plain_field("随机数 2", data.take(8), 8),
        _handheld_time(data, DATE_FORMAT_NOTE),
        _key_pair_flag(data.take_rest()),
    ]


@METER_LAYOUTS.register(0x0202)
def identity_authentication(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [
        _meter_number(data),
        plain_field("身份认证权限", data.take(PERMISSION_BYTES), PERMISSION_BYTES),
        _handheld_time(data, DATE_FORMAT_NOTE),
        _key_pair_flag(data.take_rest()),
    ]


@METER_LAYOUTS.register(0x0203)
def remote_control(data: DataCursor, context: FrameContext) -> List[ResultField]:
    fields = [
        _meter_number(data),
        _random_number(data),
        plain_field("远程控制权限", data.take(PERMISSION_BYTES), PERMISSION_BYTES),
    ]

    command = pad(data.take(2), 2)
    deadline = pad(data.take(6), 6)
    mac = pad(data.take(MAC_BYTES), MAC_BYTES)
    fields.append(composite_field(
        "控制数据",
        [command, deadline, mac],
        f"命令码：{command}\n截止时间：{hex_to_date(deadline)}\nMAC：{mac}",
        12,
        "命令码（2 字节）+ 截止时间（yyMMddHHmmss 6 字节）+ MAC（4 字节）",
    ))

    fields.append(_handheld_time(data, DATE_FORMAT_NOTE, last=True))
    return fields


@METER_LAYOUTS.register(0x0204)
def parameter_update(data: DataCursor, context: FrameContext) -> List[ResultField]:
    fields = [
        _meter_number(data),
        _random_number(data),
        plain_field("参数设置权限", data.take(PERMISSION_BYTES), PERMISSION_BYTES),
    ]

    parameter_type = data.take(1)
    fields.append(decimal_field(
        "参数类型", parameter_type, 1,
        "03：二类参数\n05：一类参数\n06：一套费率\n07：备用套费率",
        label="参数类型：" + PARAMETER_TYPES.get(int(pad(parameter_type, 1), 16), "未知参数类型"),
    ))

    fields.append(plain_field("数据标识", data.take(4), 4))
    fields.append(plain_field("参数值", data.take_rest(reserve=MAC_BYTES + DATE_BYTES), REMAINDER_COUNT))
    fields.append(plain_field(
        "MAC", data.take(MAC_BYTES), MAC_BYTES,
        "参数类型为 05、06、07时，MAC 值是参数值的 MAC\n参数类型为 03 时，MAC 值是数据标示及参数值的 MAC",
    ))
    fields.append(_handheld_time(data, last=True))
    return fields


@METER_LAYOUTS.register(0x0205)
def clock_adjustment(data: DataCursor, context: FrameContext) -> List[ResultField]:
    fields = [
        _meter_number(data),
        _random_number(data),
        plain_field("校时权限", data.take(PERMISSION_BYTES), PERMISSION_BYTES),
        plain_field("数据标识", data.take(4), 4),
        plain_field("参数值", data.take_rest(reserve=MAC_BYTES + 1 + DATE_BYTES), REMAINDER_COUNT),
        plain_field("MAC", data.take(MAC_BYTES), MAC_BYTES, "MAC值是数据标示及参数值的MAC"),
    ]

    weekday = data.take(1)
    fields.append(decimal_field(
        "星期", weekday, 1,
        label="星期 " + WEEKDAYS.get(int(pad(weekday, 1), 16), "?"),
    ))
    fields.append(_handheld_time(data, last=True))
    return fields


@METER_LAYOUTS.register(0x0206)
def key_update(data: DataCursor, context: FrameContext) -> List[ResultField]:
    fields = [
        _meter_number(data),
        _random_number(data),
        plain_field("权限数据", data.take(PERMISSION_BYTES), PERMISSION_BYTES),
        _key_block_field("密钥密文", data.take(METER_KEY_BYTES * 6 + 16), 6, 16, "密钥 1 ... 密钥 6\n密文数据"),
        _handheld_time(data),
    ]

    state = data.take_rest()
    fields.append(decimal_field(
        "密钥状态", state, 1, "00：密钥恢复\n01：密钥下装",
        label="密钥状态：" + KEY_STATES.get(int(pad(state, 1), 16), "未知状态"),
    ))
    return fields


@METER_LAYOUTS.register(0x0207)
def key_update_full(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [
        _meter_number(data),
        _random_number(data),
        plain_field("权限数据", data.take(PERMISSION_BYTES), PERMISSION_BYTES),
        _key_block_field("密钥密文", data.take(METER_KEY_BYTES * 20 + 16), 20, 16, "密钥 1 ... 密钥 20\n密文数据"),
        _handheld_time(data, last=True),
    ]


@METER_LAYOUTS.register(0x0208)
def account_opening(data: DataCursor, context: FrameContext) -> List[ResultField]:
    fields = [
        _meter_number(data),
        _random_number(data),
        plain_field("权限数据 1", data.take(PERMISSION_BYTES), PERMISSION_BYTES),
        plain_field("权限数据 2", data.take(PERMISSION_BYTES), PERMISSION_BYTES),
    ]

    block = DataCursor(pad(data.take(26), 26))
    parts = [block.take(4), block.take(4), block.take(4), block.take(4), block.take(6), block.take(4)]
    identifier, amount, count, mac_1, customer, mac_2 = parts
    fields.append(composite_field(
        "开户数据",
        parts,
        (
            f"数据标识：{identifier}\n购电金额：{amount}\n购电次数：{count}\n"
            f"MAC 1：{mac_1}\n客户编号：{customer}\nMAC 2：{mac_2}"
        ),
        26,
        "数据标识（4B）\n购电金额（4B）\n购电次数（4B）\nMAC 1（4B）\n客户编号（6B）\nMAC 2（4B）",
    ))

    fields.append(_handheld_time(data, last=True))
    return fields


@METER_LAYOUTS.register(0x0209)
def session_negotiation(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [
        plain_field("密钥包", data.take(48 * 4), 48 * 4),
        plain_field("表号 / ESAM 序列号", data.take(8), 8, SERIAL_OR_METER_NOTE),
        decimal_field("会话计数器", data.take(4), 4),
        _handheld_time(data, last=True),
    ]


@METER_LAYOUTS.register(0x020A)
def session_key_verification(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [
        plain_field("密钥包", data.take(48 * 4), 48 * 4),
        plain_field("表号 / ESAM 序列号", data.take(8), 8, SERIAL_OR_METER_NOTE),
        plain_field("密钥标识", data.take(16), 16),
        plain_field("会话数据", data.take(48 + 4), 48 + 4),
        _handheld_time(data, last=True),
    ]


@METER_LAYOUTS.register(0x020B)
def master_station_task(data: DataCursor, context: FrameContext) -> List[ResultField]:
    mode = pad(data.take(1), 1)
    parameter_type = pad(data.take(1), 1)
    length_hex = pad(data.take(2), 2)
    application_data = data.take_rest(reserve=MAC_BYTES)
    mac = pad(data.take(MAC_BYTES), MAC_BYTES)
    return [composite_field(
        "主站任务数据",
        [mode, parameter_type, length_hex, application_data, mac],
        (
            f"安全模式字：{SECURITY_MODES.get(mode, '未知安全模式字')}\n"
            f"任务参数类型：{parameter_type}\n"
            f"应用层数据长度：{hex_to_decimal(length_hex)}\n"
            f"应用层数据：{application_data}\n"
            f"MAC：{mac}"
        ),
        REMAINDER_COUNT,
        "安全模式字 （1B）\n任务参数类型 （1B）\n应用层数据长度 （2B）\n应用层数据 （N）\nMAC （4B，也称保护码）",
    )]


LINK_DATA_NOTE = (
    "0x90\n"
    "数据形式（1B）：\n"
    "    00：明文\n"
    "    01：密文\n"
    "数据长度（2B，大字节序）\n"
    "数据内容（N）\n"
    "是否含数据验证消息（1B）：\n"
    "    00：不含 MAC\n"
    "    01：含有 MAC\n"
    "数据验证消息（1B）\n"
    "MAC（4B）"
)


@METER_LAYOUTS.register(0x020C)
def link_user_data(data: DataCursor, context: FrameContext) -> List[ResultField]:
    length_hex, payload = data.take_length_prefixed()
    link = DataCursor(payload)
    tag = link.take(1)
    form = link.take(1)
    content_length = link.take(2)
    content = link.take_rest(reserve=1 + 1 + MAC_BYTES)
    mac_flag = link.take(1)
    verification = link.take(1)
    mac = link.take(MAC_BYTES)
    return [
        decimal_field("链路用户数据长度", length_hex, 2),
        composite_field(
            "链路用户数据",
            [tag, form, content_length, content, mac_flag, verification, mac],
            (
                f"{tag}\n"
                f"数据型式：{DATA_FORMS.get(form, '未知数据形式')}\n"
                f"数据长度：{hex_to_decimal(content_length)}\n"
                f"数据内容：{content}\n"
                f"是否含数据验证消息：{MAC_FLAGS.get(mac_flag, '未知')}\n"
                f"数据验证消息：{verification}\n"
                f"MAC：{mac}"
            ),
            REMAINDER_COUNT,
            LINK_DATA_NOTE,
        ),
    ]


@METER_LAYOUTS.register(0x020D)
def application_data_encrypt(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [
        plain_field("分散因子", data.take(8), 8),
        decimal_field("应用层数据明文长度", data.take(2), 2),
        plain_field("应用层数据明文", data.take_rest(), REMAINDER_COUNT),
    ]


@METER_LAYOUTS.register(0x020E)
def application_data_decrypt(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [
        plain_field(
            "表号/ESAM 序列号", data.take(8), 8,
            "高位在前（非颠倒），高 2 字节补 0x00；\n公钥状态下当前值为 ESAM 序列号，私钥状态下为表号",
        ),
        plain_field("OAD", data.take(4), 4),
        decimal_field("应用层数据长度", data.take(2), 2),
        plain_field("应用层数据", data.take_rest(), REMAINDER_COUNT),
    ]


@METER_LAYOUTS.register(0x0281)
def infrared_authentication_response(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [plain_field("随机数 2 密文", data.take_rest(), 8)]


@METER_LAYOUTS.register(0x0282)
def identity_authentication_response(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [
        plain_field("身份认证密文", data.take(8), 8),
        plain_field("随机数 1", data.take_rest(), 8),
    ]


@METER_LAYOUTS.register(0x0283)
def remote_control_response(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [
        plain_field("控制数据密文", data.take(16), 16),
        plain_field("MAC", data.take_rest(), MAC_BYTES),
    ]


@METER_LAYOUTS.register(0x0284)
def parameter_update_response(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return _length_payload_mac("参数明文或密文", data)


@METER_LAYOUTS.register(0x0285)
def clock_adjustment_response(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return _length_payload_mac("校时数据密文", data)


@METER_LAYOUTS.register(0x0286)
def key_update_response(data: DataCursor, context: FrameContext) -> List[ResultField]:
    length_hex, payload = data.take_length_prefixed()
    return [
        decimal_field("数据长度", length_hex, 2, "数据长度"),
        _key_block_field("校时数据密文", payload, 6, 48),
    ]


@METER_LAYOUTS.register(0x0287)
def key_update_full_response(data: DataCursor, context: FrameContext) -> List[ResultField]:
    key_block = length_prefixed_field(
        "密钥数据块", data, "密钥数据块长度", "密钥 1 ... 密钥 N",
        "数据长度（2B）+ 密钥1 ... 密钥 N", reserve=MAC_BYTES,
    )
    data.take_rest(reserve=MAC_BYTES)
    return [key_block, plain_field("MAC", data.take(MAC_BYTES), MAC_BYTES)]


@METER_LAYOUTS.register(0x0288)
def account_opening_response(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [
        plain_field("充值金额", data.take(4), 4),
        plain_field("购电次数", data.take(4), 4),
        plain_field("MAC", data.take(MAC_BYTES), MAC_BYTES),
        plain_field("客户编号", data.take(6), 6),
        plain_field("MAC", data.take_rest(), MAC_BYTES),
    ]


@METER_LAYOUTS.register(0x0289)
def session_negotiation_response(data: DataCursor, context: FrameContext) -> List[ResultField]:
    parts = [pad(data.take(32), 32), data.take_rest()]
    return [composite_field("会话数据", parts, "\n".join(parts), 36, "")]


@METER_LAYOUTS.register(0x028B)
def master_station_task_response(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return _length_then_payload("应用层数据长度", "应用层数据", data)


@METER_LAYOUTS.register(0x028C, 0x028D)
def application_data_response(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return _length_then_payload("应用层数据明文长度", "应用层数据明文", data)

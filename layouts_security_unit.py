"""Data-domain layouts for F=0x00, the security unit's own operation commands"""

from typing import List

from models import FrameContext, ResultField
from frame_format import (
    composite_field, data_details, decimal_field, hex_to_decimal, hex_to_int, hex_to_utf8, plain_field,
)
from layout_registry import DataCursor, LayoutTable, esam_type_field, length_prefixed_field, pad

SECURITY_UNIT_LAYOUTS = LayoutTable("安全单元自身操作命令")

BCD_8421 = "BCD （8421）"
DIGITS_ONLY = "包含 0-9 数字"


def length_prefixed_content(meaning: str, length_label: str, content_label: str, data: DataCursor) -> ResultField:
    """2+N field whose description is simply its own name"""
    return length_prefixed_field(meaning, data, length_label, content_label, meaning)


# BCD passwords are read as 8421 digits only; letters allowed by the protocol
# cannot be told apart from BCD bytes.
@SECURITY_UNIT_LAYOUTS.register(0x0002)
def verify_operator_password(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [plain_field("操作员密码", data.take_rest(), 3, DIGITS_ONLY, data_format=BCD_8421)]


@SECURITY_UNIT_LAYOUTS.register(0x0003)
def change_operator_password(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [
        plain_field("旧操作员密码", data.take(3), 3, DIGITS_ONLY, data_format=BCD_8421),
        plain_field("新操作员密码", data.take_rest(), 3, DIGITS_ONLY, data_format=BCD_8421),
    ]


@SECURITY_UNIT_LAYOUTS.register(0x0004)
def lock_security_unit(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [plain_field("认证数据", data.take_rest(), 8)]


@SECURITY_UNIT_LAYOUTS.register(0x0005)
def unlock_security_unit(data: DataCursor, context: FrameContext) -> List[ResultField]:
    auth = pad(data.take(8), 8)
    cipher = pad(data.take(16), 16)
    max_tries = pad(data.take(2), 2)
    remaining_tries = pad(data.take_rest(), 2)
    return [composite_field(
        "解锁数据",
        [auth, cipher, max_tries, remaining_tries],
        f"认证数据：{auth}\n密码密文：{cipher}\n最大密码尝试次数：{max_tries}\n剩余密码尝试次数：{remaining_tries}",
        28,
        "   认证数据（8B）\n   密码密文（16B）\n   最大密码尝试次数（2B）\n   剩余密码尝试次数（2B）",
    )]


@SECURITY_UNIT_LAYOUTS.register(0x0006, 0x0007)
def issue_security_unit(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [
        esam_type_field(data.take(1)),
        length_prefixed_content("发行数据内容", "发行数据内容长度", "发行数据内容", data),
    ]


def _key_data_header(data: DataCursor) -> List[ResultField]:
    # File number is 2 bytes here although the protocol table says 1; 0009 uses 2
    return [
        decimal_field("文件编号", data.take(2), 2),
        plain_field("操作模式", data.take(1), 1),
        decimal_field("偏移地址", data.take(2), 2),
    ]


@SECURITY_UNIT_LAYOUTS.register(0x0008)
def store_key_data(data: DataCursor, context: FrameContext) -> List[ResultField]:
    fields = _key_data_header(data)
    fields.append(decimal_field("数据长度", data.take(2), 2, "存储数据长度"))
    content = data.take_rest()
    fields.append(plain_field("数据内容", content, len(content) // 2, "数据内容"))
    return fields


@SECURITY_UNIT_LAYOUTS.register(0x0009)
def read_key_data(data: DataCursor, context: FrameContext) -> List[ResultField]:
    fields = _key_data_header(data)
    fields.append(decimal_field("数据长度", data.take_rest(), 2, "存储数据长度"))
    return fields


@SECURITY_UNIT_LAYOUTS.register(0x000A)
def forward_esam_instruction(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [
        esam_type_field(data.take(1)),
        length_prefixed_content("转发数据内容", "转发数据内容长度", "转发数据内容", data),
    ]


WORK_STATES = {0x0: "模块正常，可以接收指令", 0x1: "存贮器错误"}
ESAM_STATES = {0x0: "ESAM 正常", 0x1: "ESAM 故障"}

STATUS_WORD_DIAGRAM = (
    "\n"
    "|--------------------------------------------------------\n"
    "|  D7  |  D6  |  D5  |  D4  |  D3  |  D2  |  D1  |  D0  |\n"
    "|---------------------------|-------------|-------------|\n"
    "| 工作状态                   | C-ESAM 状态  | Y-ESAM 状态 |\n"
    "|---------------------------|---------------------------|\n"
    "| 0000：模块正常，可接收指令   | 00 ESAM 正常 | 00 ESAM 正常|\n"
    "| 0001：存贮器错误            | 01 ESAM 故障 | 01 ESAM 故障|\n"
    "| 0002：保留                 | 1X 保留      | 1X 保留     |\n"
    "|--------------------------------------------------------\n"
)


def _status_word_field(raw: str) -> ResultField:
    """Security unit status word: work status (D7-D4), C-ESAM (D3-D2), Y-ESAM (D1-D0)"""
    origin = pad(raw, 1)
    value = hex_to_int(origin)
    work = WORK_STATES.get((value & 0xF0) >> 4, "未知工作状态")
    c_esam = ESAM_STATES.get((value & 0x0C) >> 2)
    y_esam = ESAM_STATES.get(value & 0x03)
    c_text = f"C-{c_esam}" if c_esam else "保留，状态未定义"
    y_text = f"Y-{y_esam}" if y_esam else "保留，状态未定义"
    return ResultField(
        origin=origin,
        analyzed=f"工作状态：{work}\n操作员 ESAM 状态：{c_text}\n业务 ESAM 状态：{y_text}",
        meaning="安全单元状态字",
        meaning_details=data_details("安全单元状态字", 1, STATUS_WORD_DIAGRAM),
    )


def _version_field(meaning: str, raw: str, first_label: str, rest_label: str, note: str) -> ResultField:
    origin = pad(raw, 3)
    first, rest = origin[:2], origin[2:]
    return ResultField(
        origin=origin,
        analyzed=(
            f"{first_label}：{first} （{hex_to_decimal(first)}）\n"
            f"{rest_label}：{rest} （{hex_to_decimal(rest)}）"
        ),
        meaning=meaning,
        meaning_details=data_details(meaning, 3, note),
    )


def _certificate_field(meaning: str, data: DataCursor) -> ResultField:
    return length_prefixed_field(meaning, data, "证书长度", "证书数据", "证书长度 + 证书数据")


@SECURITY_UNIT_LAYOUTS.register(0x0081)
def security_unit_information(data: DataCursor, context: FrameContext) -> List[ResultField]:
    fields = [
        _status_word_field(data.take(1)),
        _version_field("软件版本号", data.take(3), "boot 版本", "APP 版本",
                       "第一个字节是 boot 程序版本号\n后两个字节是 APP 程序版本号"),
        _version_field("硬件版本号", data.take(3), "安全单元改版编号", "安全单元本版编号",
                       "第一个字节是安全单元改版编号\n后二个字节是安全单元本版编号"),
        plain_field("C-ESAM 序列号", data.take(8), 8),
        plain_field("操作者代码", data.take(4), 4, "操作者代码"),
        decimal_field("权限", data.take(1), 1, "有效范围：1-15"),
        plain_field("权限掩码", data.take(8), 8),
    ]

    operator = pad(data.take(30), 30)
    fields.append(ResultField(
        origin=operator,
        analyzed=f"姓名：{hex_to_utf8(operator[:10])}\n单位：{hex_to_utf8(operator[10:])}",
        meaning="操作者信息",
        meaning_details=data_details("操作者信息", 30, "姓名和单位信息（姓名 5 个汉字；单位信息 10 个汉字）"),
    ))

    fields.extend([
        plain_field("Y-ESAM 序列号", data.take(8), 8),
        plain_field("Y-ESAM 对称密钥版本", data.take(16), 16, "最新更新的对称密钥密钥版本，初始值为全00"),
        decimal_field("主站证书版本号", data.take(1), 1),
        decimal_field("终端证书版本号", data.take(1), 1),
        plain_field("主站证书序列号", data.take(16), 16),
        plain_field("终端证书序列号", data.take(16), 16),
        decimal_field("当前计数器", data.take(4), 4),
        decimal_field("转加密剩余次数", data.take(4), 4),
        plain_field("标签密钥版本", data.take(8), 8),
        _certificate_field("主站证书", data),
        _certificate_field("终端证书", data),
    ])
    return fields


@SECURITY_UNIT_LAYOUTS.register(0x0086, 0x0087)
def issue_security_unit_response(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [
        esam_type_field(data.take(1)),
        length_prefixed_content("ESAM 返回数据内容", "返回数据内容长度", "返回数据内容", data),
    ]


@SECURITY_UNIT_LAYOUTS.register(0x0089)
def read_key_data_response(data: DataCursor, context: FrameContext) -> List[ResultField]:
    fields = _key_data_header(data)
    fields.append(decimal_field("数据长度", data.take(2), 2, "存储数据长度"))
    content = data.take_rest()
    fields.append(plain_field("读取数据", content, len(content) // 2, "存储数据"))
    return fields


@SECURITY_UNIT_LAYOUTS.register(0x008A)
def forward_esam_instruction_response(data: DataCursor, context: FrameContext) -> List[ResultField]:
    return [
        esam_type_field(data.take(1)),
        length_prefixed_content("转发返回数据内容", "转发数据内容长度", "转发返回数据内容", data),
    ]

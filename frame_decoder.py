"""
Security unit frame decoder

Preprocess -> validate (bytes, format, checksum) -> build the frame context ->
emit header fields -> decode the data domain -> emit trailer fields.
"""

import logging
from typing import Dict, List, Optional

from models import DecodeOutcome, DecodeStatus, FrameContext, ResultField
from frame_format import int_to_zero_prefix_hex
from meaning_tables import command_details, command_meaning, main_function_meaning, status_meaning
from security_unit_protocol import SecurityUnitProtocol
from field_dispatcher import dispatch

logger = logging.getLogger("FrameDecoder")

OUTCOME_MESSAGES: Dict[DecodeStatus, str] = {
    DecodeStatus.PARSE_COMPLETE: "安全单元帧解析完成",
    DecodeStatus.EMPTY_INPUT: "未输入安全单元帧",
    DecodeStatus.BYTE_INCOMPLETE: "安全单元帧字节不完整",
    DecodeStatus.FORMAT_INCOMPLETE: "安全单元帧不完整",
    DecodeStatus.CHECKSUM_FAILED: "安全单元帧校验不正确",
}


def outcome_message(status: DecodeStatus) -> str:
    return OUTCOME_MESSAGES[status]


def decode(frame: Optional[str]) -> DecodeOutcome:
    """
    Decode one security unit frame.

    Never raises for malformed input; every failure is reported as a
    DecodeStatus. Safe to call concurrently: all per-frame state lives in
    the FrameContext built here.
    """
    if frame is None:
        return DecodeOutcome(status=DecodeStatus.EMPTY_INPUT)

    cleaned = SecurityUnitProtocol.preprocess(frame)

    if not SecurityUnitProtocol.check_byte_integrity(cleaned):
        logger.debug(f"Byte integrity check failed ({len(cleaned)} hex digits)")
        return DecodeOutcome(status=DecodeStatus.BYTE_INCOMPLETE)

    if not SecurityUnitProtocol.check_format(cleaned):
        return DecodeOutcome(status=DecodeStatus.FORMAT_INCOMPLETE)

    if not SecurityUnitProtocol.check_checksum(cleaned):
        return DecodeOutcome(status=DecodeStatus.CHECKSUM_FAILED)

    context = SecurityUnitProtocol.build_context(cleaned)

    fields = header_fields(context)
    if context.is_fe03_special:
        logger.debug("Upgrade-3 acknowledgement, data domain not decoded")
    elif context.data_domain_byte_length != 0:
        fields.extend(dispatch(cleaned, context))
    fields.extend(trailer_fields(context))

    logger.debug(f"Decoded frame {context.dispatch_key:04X} into {len(fields)} fields")
    return DecodeOutcome(status=DecodeStatus.PARSE_COMPLETE, fields=fields)


def header_fields(context: FrameContext) -> List[ResultField]:
    """Start marker, length, F and (unless the upgrade-3 ack variant) C/A and S"""
    fields = [
        ResultField(
            origin="E9",
            analyzed="E9",
            meaning="帧起始码",
            meaning_details="标识一桢信息的开始",
        ),
        ResultField(
            origin=int_to_zero_prefix_hex(context.frame_byte_length, 2),
            analyzed=str(context.frame_byte_length),
            meaning="帧长度",
            meaning_details="标识从主功能标识开始到数据域最后1字节结束的字节数。2字节16进制数，高字节在前，低字节在后",
        ),
        ResultField(
            origin=int_to_zero_prefix_hex(context.main_function),
            analyzed=str(context.main_function),
            meaning=main_function_meaning(context.main_function, context.is_fe03_special),
            meaning_details="表示主命令类型",
        ),
    ]

    if context.is_fe03_special:
        return fields

    if context.is_acknowledgement:
        details = "标识响应类型，最高位 D7=1，D6-D0 响应码与命令码相同"
    else:
        details = (
            "标识命令类型，最高位D7=0，D6-D0 命令码。\n"
            f"命令解释详情：{command_details(context.main_function, context.command_or_ack)}"
        )
    fields.append(ResultField(
        origin=int_to_zero_prefix_hex(context.command_or_ack),
        analyzed=str(context.command_or_ack),
        meaning=command_meaning(context.main_function, context.command_or_ack),
        meaning_details=details,
    ))

    if context.is_acknowledgement:
        fields.append(ResultField(
            origin=int_to_zero_prefix_hex(context.status),
            analyzed=str(context.status),
            meaning=status_meaning(context.main_function, context.command_or_ack | 0x80, context.status),
            meaning_details="标识响应状态，仅适用于响应帧，00 表示正常响应，非 00 为异常响应",
        ))
    return fields


def trailer_fields(context: FrameContext) -> List[ResultField]:
    return [
        ResultField(
            origin=int_to_zero_prefix_hex(context.checksum),
            analyzed=str(context.checksum),
            meaning="帧校验",
            meaning_details="帧起始码到数据域最后一个字节的算术和（模256）",
        ),
        ResultField(
            origin="E6",
            analyzed="E6",
            meaning="帧结束码",
            meaning_details="标识一桢信息的结束",
        ),
    ]

"""
Hex formatting helpers and ResultField builders shared by the field layouts.

All helpers work on uppercase hex text as produced by frame preprocessing and
never raise on short input: missing bytes are zero-padded.
"""

from typing import List, Optional, Tuple, Union

from models import ResultField

DATA_NAME = "数据名称："
DATA_COUNT = "字节数："
DATA_FORMAT = "数据格式："
DATA_MEANING_DETAILS = "意义："

# Byte counts printed for variable-length fields
REMAINDER_COUNT = "N"
LENGTH_PREFIXED_COUNT = "2 + N"

LENGTH_PREFIX_BYTES = 2

ByteCount = Union[int, str]


def to_zero_prefix_hex(hex_string: str, byte_width: int = 1) -> str:
    """Left-pad hex text with 00 bytes (or a single 0 nibble) up to byte_width; never truncates"""
    if not hex_string:
        return "00" * byte_width

    current_bytes = len(hex_string) // 2
    if len(hex_string) % 2 != 0:
        prefix_bytes = byte_width - current_bytes - 1
        if prefix_bytes < 0:
            return "0" + hex_string
        return "00" * prefix_bytes + "0" + hex_string

    prefix_bytes = byte_width - current_bytes
    if prefix_bytes < 0:
        return hex_string
    return "00" * prefix_bytes + hex_string


def int_to_zero_prefix_hex(value: int, byte_width: int = 1) -> str:
    """Format an integer as uppercase hex padded to byte_width"""
    return to_zero_prefix_hex(f"{value:X}", byte_width)


def hex_to_int(hex_string: str) -> int:
    return int(hex_string, 16) if hex_string else 0


def hex_to_decimal(hex_string: str) -> str:
    return str(hex_to_int(hex_string))


def hex_to_date(hex_string: str) -> str:
    """
    Read BCD digit pairs as a date.

    14 digits are yyyyMMddHHmmss, anything else is read as yyMMddHHmmss.
    Output is "YYYY-MM-DD HH:MM:SS" (or "YY-...").
    """
    year_digits = 4 if len(hex_string) == 14 else 2
    year = hex_string[:year_digits]
    parts = [hex_string[i:i + 2] for i in range(year_digits, year_digits + 10, 2)]
    month, day, hour, minute, second = parts
    return f"{year}-{month}-{day} {hour}:{minute}:{second}"


def hex_to_utf8(hex_string: str) -> str:
    """Decode hex text as UTF-8, replacing invalid sequences"""
    even = hex_string[:len(hex_string) - len(hex_string) % 2]
    return bytes.fromhex(even).decode("utf-8", errors="replace")


def split_length_prefixed(hex_string: str) -> Tuple[str, str]:
    """
    Split a 2+N structure into (length, payload).

    The payload width is the smaller of the declared length and the bytes
    actually present. Both parts come back zero-padded.
    """
    prefix_chars = LENGTH_PREFIX_BYTES * 2
    length_hex = hex_string[:prefix_chars]
    declared = hex_to_int(length_hex)
    available = max(len(hex_string) // 2 - LENGTH_PREFIX_BYTES, 0)
    payload_bytes = min(declared, available)
    payload = hex_string[prefix_chars:prefix_chars + payload_bytes * 2]
    return (
        to_zero_prefix_hex(length_hex, LENGTH_PREFIX_BYTES),
        to_zero_prefix_hex(payload, payload_bytes),
    )


def split_key_block(hex_string: str, key_bytes: int, tail_bytes: int) -> Tuple[List[str], str]:
    """Split a key block into fixed-width keys followed by a trailing block of tail_bytes"""
    tail_chars = tail_bytes * 2
    if tail_chars and len(hex_string) >= tail_chars:
        keys_part, tail = hex_string[:-tail_chars], hex_string[-tail_chars:]
    elif tail_chars:
        keys_part, tail = "", hex_string
    else:
        keys_part, tail = hex_string, ""
    step = key_bytes * 2
    keys = [keys_part[i:i + step] for i in range(0, len(keys_part), step)]
    return keys, tail


def data_details(meaning: str, byte_count: ByteCount, note: str = "", data_format: str = "HEX") -> str:
    """Standard meaning-details text: name, byte count, format, then the free-form note"""
    return (
        f"{DATA_NAME}{meaning}\n"
        f"{DATA_COUNT}{byte_count}\n"
        f"{DATA_FORMAT}{data_format}\n"
        f"{DATA_MEANING_DETAILS}\n"
        f"{note}"
    )


def plain_field(
    meaning: str,
    data: str,
    byte_count: ByteCount,
    note: str = "",
    data_format: str = "HEX",
    label: Optional[str] = None,
    details: Optional[str] = None,
) -> ResultField:
    """Field whose analyzed value is the padded hex itself"""
    origin = _pad(data, byte_count)
    return _field(meaning, origin, origin, byte_count, note, data_format, label, details)


def decimal_field(
    meaning: str,
    data: str,
    byte_count: ByteCount,
    note: str = "",
    data_format: str = "HEX",
    label: Optional[str] = None,
    details: Optional[str] = None,
) -> ResultField:
    """Field whose analyzed value is the hex read as an unsigned big-endian integer"""
    origin = _pad(data, byte_count)
    return _field(meaning, origin, hex_to_decimal(origin), byte_count, note, data_format, label, details)


def date_field(
    meaning: str,
    data: str,
    byte_count: ByteCount,
    note: str = "",
    data_format: str = "HEX",
) -> ResultField:
    """Field whose analyzed value is a BCD date; bytes past byte_count stay in origin only"""
    origin = _pad(data, byte_count)
    date_digits = origin[:byte_count * 2] if isinstance(byte_count, int) else origin
    return _field(meaning, origin, hex_to_date(date_digits), byte_count, note, data_format, None, None)


def composite_field(meaning: str, origin_parts: List[str], analyzed: str, byte_count: ByteCount, note: str) -> ResultField:
    """Field made of several sub-parts, one origin line per part"""
    return ResultField(
        origin="\n".join(origin_parts),
        analyzed=analyzed,
        meaning=meaning,
        meaning_details=data_details(meaning, byte_count, note),
    )


def _pad(data: str, byte_count: ByteCount) -> str:
    width = byte_count if isinstance(byte_count, int) else len(data) // 2
    return to_zero_prefix_hex(data, width)


def _field(
    meaning: str,
    origin: str,
    analyzed: str,
    byte_count: ByteCount,
    note: str,
    data_format: str,
    label: Optional[str],
    details: Optional[str],
) -> ResultField:
    shown = label or meaning
    return ResultField(
        origin=origin,
        analyzed=analyzed,
        meaning=shown,
        meaning_details=details if details is not None else data_details(shown, byte_count, note, data_format),
    )

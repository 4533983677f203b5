import logging
from typing import Dict, List, Optional

from models import FrameContext, LayoutInfo, ResultField
from meaning_tables import command_label, main_function_meaning
from layout_registry import DataCursor, LayoutDecoder, LayoutTable
from layouts_security_unit import SECURITY_UNIT_LAYOUTS
from layouts_management import MANAGEMENT_LAYOUTS
from layouts_meter import METER_LAYOUTS
from layouts_gateway import GATEWAY_LAYOUTS

logger = logging.getLogger("FieldDispatcher")

LAYOUT_TABLES: List[LayoutTable] = [
    SECURITY_UNIT_LAYOUTS,
    MANAGEMENT_LAYOUTS,
    METER_LAYOUTS,
    GATEWAY_LAYOUTS,
]


def _merge(tables: List[LayoutTable]) -> Dict[int, LayoutDecoder]:
    merged: Dict[int, LayoutDecoder] = {}
    for table in tables:
        for key in table:
            if key in merged:
                raise ValueError(f"Layout key {key:04X} registered twice ({table.name})")
            merged[key] = table.get(key)
    return merged


DISPATCH_TABLE: Dict[int, LayoutDecoder] = _merge(LAYOUT_TABLES)

ALIASES: Dict[int, int] = {
    alias: target for table in LAYOUT_TABLES for alias, target in table.aliases.items()
}


def find_layout(key: int) -> Optional[LayoutDecoder]:
    return DISPATCH_TABLE.get(key)


def dispatch(frame: str, context: FrameContext) -> List[ResultField]:
    """
    Decode the data domain of a validated frame.

    Unknown (F, C/A) combinations are not an error: they simply produce no
    data-domain fields.
    """
    key = context.dispatch_key
    layout = find_layout(key)
    if layout is None:
        logger.debug(f"No layout for key {key:04X}, data domain left undecoded")
        return []

    fields = layout(DataCursor.for_frame(frame, context), context)
    logger.debug(f"Layout {key:04X} produced {len(fields)} data fields")
    return fields


def format_key(key: int) -> str:
    return f"{key:04X}"


def parse_key(text: str) -> Optional[int]:
    """Parse a 4-digit hex layout key; None when malformed"""
    if len(text) != 4:
        return None
    try:
        return int(text, 16)
    except ValueError:
        return None


def layout_info(key: int) -> LayoutInfo:
    main_function, command_or_ack = key >> 8, key & 0xFF
    alias_of = ALIASES.get(key)
    return LayoutInfo(
        key=format_key(key),
        main_function=main_function_meaning(main_function),
        command=command_label(main_function, command_or_ack),
        is_acknowledgement=bool(command_or_ack & 0x80),
        alias_of=format_key(alias_of) if alias_of is not None else None,
    )


def supported_layouts() -> List[LayoutInfo]:
    """Every registered layout key, in key order"""
    return [layout_info(key) for key in sorted(DISPATCH_TABLE)]

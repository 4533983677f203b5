"""
Registry of data-domain layouts and the cursor the layouts read with.

A layout is a function (DataCursor, FrameContext) -> List[ResultField],
registered under the dispatch key (F << 8) | C-or-A.
"""

from typing import Callable, Dict, Iterator, List, Optional, Tuple

from models import FrameContext, ResultField
from frame_format import (
    LENGTH_PREFIX_BYTES, LENGTH_PREFIXED_COUNT, composite_field, data_details,
    hex_to_decimal, split_length_prefixed, to_zero_prefix_hex,
)

LayoutDecoder = Callable[["DataCursor", FrameContext], List[ResultField]]


class DataCursor:
    """Sequential reader over the data domain of one frame (or a block inside it)"""

    def __init__(self, data: str):
        self.data = data
        self.position = 0

    @classmethod
    def for_frame(cls, frame: str, context: FrameContext) -> "DataCursor":
        return cls(frame[context.data_domain_char_start:context.data_domain_char_end])

    @property
    def remaining(self) -> int:
        """Bytes not consumed yet"""
        return max(len(self.data) - self.position, 0) // 2

    def take(self, byte_count: int) -> str:
        """Next byte_count bytes; shorter when the domain runs out"""
        end = self.position + byte_count * 2
        chunk = self.data[self.position:end]
        self.position = min(end, len(self.data))
        return chunk

    def take_rest(self, reserve: int = 0) -> str:
        """Everything left except the last `reserve` bytes"""
        return self.take(max(self.remaining - reserve, 0))

    def take_length_prefixed(self, reserve: int = 0) -> Tuple[str, str]:
        """
        Read a 2+N field from what is left (minus `reserve` trailing bytes).

        Returns padded (length, payload); consumes the prefix and the payload actually used.
        """
        end = max(len(self.data) - reserve * 2, self.position)
        available = self.data[self.position:end]
        length_hex, payload = split_length_prefixed(available)
        used = min(len(available) // 2, LENGTH_PREFIX_BYTES + len(payload) // 2)
        self.take(used)
        return length_hex, payload


class LayoutTable:
    """Layouts of one main-function family, keyed by dispatch key"""

    def __init__(self, name: str):
        self.name = name
        self.layouts: Dict[int, LayoutDecoder] = {}
        self.aliases: Dict[int, int] = {}

    def register(self, key: int, *aliases: int) -> Callable[[LayoutDecoder], LayoutDecoder]:
        """Decorator registering a layout under key and any alias keys"""
        def decorator(func: LayoutDecoder) -> LayoutDecoder:
            self.layouts[key] = func
            for alias in aliases:
                self.layouts[alias] = func
                self.aliases[alias] = key
            return func
        return decorator

    def get(self, key: int) -> Optional[LayoutDecoder]:
        return self.layouts.get(key)

    def __contains__(self, key: int) -> bool:
        return key in self.layouts

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self.layouts))

    def __len__(self) -> int:
        return len(self.layouts)


def esam_type(code: str) -> str:
    return {"01": "C-ESAM", "02": "Y-ESAM"}.get(code, "未知类型")


def pad(data: str, byte_count: int) -> str:
    return to_zero_prefix_hex(data, byte_count)


def esam_type_field(code: str) -> ResultField:
    """1-byte ESAM type selector"""
    origin = pad(code, 1)
    return ResultField(
        origin=origin,
        analyzed=origin,
        meaning="ESAM 类型：" + esam_type(code),
        meaning_details=data_details("ESAM 类型", 1, "   01：C-ESAM\n   02：Y-ESAM"),
    )


def length_prefixed_field(
    meaning: str,
    data: DataCursor,
    length_label: str,
    content_label: str,
    note: str = "",
    reserve: int = 0,
) -> ResultField:
    """2+N field shown as its declared length followed by the payload"""
    length_hex, payload = data.take_length_prefixed(reserve)
    return composite_field(
        meaning,
        [length_hex, payload],
        f"{length_label}：{hex_to_decimal(length_hex)}\n{content_label}：\n{payload}",
        LENGTH_PREFIXED_COUNT,
        note,
    )

from typing import Dict, List, Optional, Any
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime


class DecodeStatus(str, Enum):
    """
    Decode outcome tags:
    - PARSE_COMPLETE: frame validated and fully segmented
    - EMPTY_INPUT: no frame supplied at all
    - BYTE_INCOMPLETE: empty after preprocessing, or odd hex digit count
    - FORMAT_INCOMPLETE: bad characters, too short, markers, length field,
      main-function or command/ack code
    - CHECKSUM_FAILED: byte sum does not match the CS byte
    """
    PARSE_COMPLETE = "PARSE_COMPLETE"
    EMPTY_INPUT = "EMPTY_INPUT"
    BYTE_INCOMPLETE = "BYTE_INCOMPLETE"
    FORMAT_INCOMPLETE = "FORMAT_INCOMPLETE"
    CHECKSUM_FAILED = "CHECKSUM_FAILED"


class ResultField(BaseModel):
    """One decoded frame field, in wire order"""
    model_config = ConfigDict(frozen=True)

    origin: str = Field(..., description="Raw hex bytes, zero-padded to the field width")
    analyzed: str = Field(..., description="Decoded value (hex, decimal or date)")
    meaning: str = Field(..., description="Short label")
    meaning_details: str = Field(..., description="Long description")


class DecodeOutcome(BaseModel):
    """
    Result of a single decode call. Only PARSE_COMPLETE carries fields.

    Example:
    {
        "status": "PARSE_COMPLETE",
        "fields": [{"origin": "E9", "analyzed": "E9", "meaning": "帧起始码", ...}]
    }
    """
    status: DecodeStatus = Field(..., description="Outcome tag")
    fields: Optional[List[ResultField]] = Field(None, description="Decoded fields on success")

    @property
    def is_complete(self) -> bool:
        return self.status == DecodeStatus.PARSE_COMPLETE


class FrameContext(BaseModel):
    """Header-derived values of one validated frame; built once per decode call"""
    model_config = ConfigDict(frozen=True)

    frame_byte_length: int = Field(..., description="Value of the LH LL length field")
    main_function: int = Field(..., description="F byte")
    command_or_ack: int = Field(..., description="C or A byte (0x83 implied for the upgrade-3 ack variant)")
    is_acknowledgement: bool = Field(..., description="Bit 7 of the command/ack byte")
    status: Optional[int] = Field(None, description="S byte, acknowledgement frames only")
    is_fe03_special: bool = Field(False, description="Upgrade-3 ack variant without A byte")
    checksum: int = Field(..., description="CS byte")
    data_domain_byte_length: int = Field(..., ge=0)
    data_domain_char_start: int = Field(..., ge=0)
    data_domain_char_end: int = Field(..., ge=0)

    @property
    def code(self) -> int:
        """Command/response code without the acknowledgement bit"""
        return self.command_or_ack & 0x7F

    @property
    def dispatch_key(self) -> int:
        return (self.main_function << 8) | self.command_or_ack


class DecodeRequest(BaseModel):
    """Single frame decode request"""
    frame: str = Field(..., description="Frame as hex text; whitespace and case are ignored")


class DecodeResponse(BaseModel):
    """
    Decode response returned by the API

    Example:
    {
        "status": "PARSE_COMPLETE",
        "message": "安全单元帧解析完成",
        "field_count": 6,
        "fields": [...],
        "timestamp": "2025-07-05T12:34:56.789Z"
    }
    """
    status: DecodeStatus = Field(..., description="Outcome tag")
    message: str = Field(..., description="Human readable outcome")
    field_count: int = Field(0, description="Number of decoded fields")
    fields: List[ResultField] = Field(default_factory=list, description="Decoded fields")
    timestamp: datetime = Field(..., description="Decode timestamp")


class BatchDecodeRequest(BaseModel):
    """Several frames decoded in one request"""
    frames: List[str] = Field(..., description="Frames as hex text")


class BatchDecodeResponse(BaseModel):
    """Batch decode response, results in request order"""
    results: List[DecodeResponse] = Field(..., description="Per-frame results")
    total: int = Field(..., description="Number of frames decoded")
    complete: int = Field(..., description="Frames that decoded successfully")
    duration: float = Field(..., description="Batch duration in seconds")
    timestamp: datetime = Field(..., description="Batch timestamp")


class LayoutInfo(BaseModel):
    """Registered data-domain layout"""
    key: str = Field(..., description="Dispatch key as 4 hex digits (F then C/A)")
    main_function: str = Field(..., description="Main-function meaning")
    command: str = Field(..., description="Command/response meaning")
    is_acknowledgement: bool = Field(..., description="Layout applies to acknowledgement frames")
    alias_of: Optional[str] = Field(None, description="Key whose layout this one shares")


class ErrorResponse(BaseModel):
    """Error response model"""
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Error details")
    timestamp: datetime = Field(..., description="Error timestamp")

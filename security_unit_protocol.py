import re
import logging
from typing import List, Optional

from models import FrameContext


class SecurityUnitProtocol:
    """
    Security unit frame protocol

    Command frame:          E9 LH LL F C DATA CS E6
    Acknowledgement frame:  E9 LH LL F A S DATA CS E6
    Upgrade-3 ack (F=FE):   E9 LH LL F DATA CS E6
    """

    START_MARKER = 0xE9
    END_MARKER = 0xE6

    # Main-function codes
    MAIN_FUNCTIONS = frozenset(range(0x00, 0x07)) | {0xFE}
    MAIN_UPGRADE = 0xFE

    ACK_FLAG = 0x80            # Bit 7 of the C/A byte
    CODE_MASK = 0x7F
    MAX_CODE = 0x0E

    # Upgrade C/A bytes that keep the regular layout
    UPGRADE_REGULAR_CODES = frozenset({0x01, 0x02, 0x03, 0x81, 0x82})

    # Byte counts
    MIN_COMMAND_FRAME = 7
    MIN_ACK_FRAME = 8
    MIN_UPGRADE_ACK_FRAME = 6
    FRAMING_OVERHEAD = 5       # E9 LH LL ... CS E6

    # Header bytes before DATA, counted from F
    COMMAND_HEADER = 2         # F C
    ACK_HEADER = 3             # F A S
    UPGRADE_ACK_HEADER = 1     # F

    HEX_PATTERN = re.compile(r"^[0-9A-F]*$")
    WHITESPACE_PATTERN = re.compile(r"\s")

    logger = logging.getLogger("SecurityUnitProtocol")

    @staticmethod
    def preprocess(raw_frame: str) -> str:
        """Strip whitespace and upper-case the frame text"""
        return SecurityUnitProtocol.WHITESPACE_PATTERN.sub("", raw_frame).upper()

    @staticmethod
    def byte_at(frame: str, index: int) -> int:
        """Byte at index (0-based) of a hex frame"""
        return int(frame[index * 2:index * 2 + 2], 16)

    @staticmethod
    def to_bytes(frame: str) -> List[int]:
        return list(bytes.fromhex(frame))

    @staticmethod
    def check_byte_integrity(frame: str) -> bool:
        """Frame is non-empty and every byte has two hex digits"""
        return len(frame) > 0 and len(frame) % 2 == 0

    @staticmethod
    def is_upgrade_ack(frame: str) -> bool:
        """Upgrade-3 acknowledgement: F=FE and the next byte is not a regular upgrade C/A"""
        if len(frame) // 2 < SecurityUnitProtocol.MIN_UPGRADE_ACK_FRAME:
            return False
        main_function = SecurityUnitProtocol.byte_at(frame, 3)
        next_byte = SecurityUnitProtocol.byte_at(frame, 4)
        return (
            main_function == SecurityUnitProtocol.MAIN_UPGRADE
            and next_byte not in SecurityUnitProtocol.UPGRADE_REGULAR_CODES
        )

    @staticmethod
    def check_format(frame: str) -> bool:
        """Structural checks: characters, length, markers, length field, F and C/A codes"""
        log = SecurityUnitProtocol.logger

        if not SecurityUnitProtocol.HEX_PATTERN.match(frame):
            log.debug("Format check failed: non-hex characters")
            return False

        byte_count = len(frame) // 2
        upgrade_ack = SecurityUnitProtocol.is_upgrade_ack(frame)
        if upgrade_ack:
            minimum = SecurityUnitProtocol.MIN_UPGRADE_ACK_FRAME
        elif byte_count >= SecurityUnitProtocol.MIN_COMMAND_FRAME and \
                SecurityUnitProtocol.byte_at(frame, 4) & SecurityUnitProtocol.ACK_FLAG:
            minimum = SecurityUnitProtocol.MIN_ACK_FRAME
        else:
            minimum = SecurityUnitProtocol.MIN_COMMAND_FRAME
        if byte_count < minimum:
            log.debug(f"Format check failed: {byte_count} bytes, at least {minimum} required")
            return False

        if SecurityUnitProtocol.byte_at(frame, 0) != SecurityUnitProtocol.START_MARKER or \
                SecurityUnitProtocol.byte_at(frame, byte_count - 1) != SecurityUnitProtocol.END_MARKER:
            log.debug("Format check failed: missing E9/E6 markers")
            return False

        declared = SecurityUnitProtocol.declared_length(frame)
        if declared != byte_count - SecurityUnitProtocol.FRAMING_OVERHEAD:
            log.debug(f"Format check failed: length field {declared}, frame carries {byte_count - 5}")
            return False

        main_function = SecurityUnitProtocol.byte_at(frame, 3)
        if main_function not in SecurityUnitProtocol.MAIN_FUNCTIONS:
            log.debug(f"Format check failed: invalid main function 0x{main_function:02X}")
            return False

        if not upgrade_ack:
            code = SecurityUnitProtocol.byte_at(frame, 4) & SecurityUnitProtocol.CODE_MASK
            if code > SecurityUnitProtocol.MAX_CODE:
                log.debug(f"Format check failed: invalid command code 0x{code:02X}")
                return False

        return True

    @staticmethod
    def declared_length(frame: str) -> int:
        """LH LL length field; the two bytes are combined with XOR"""
        high = SecurityUnitProtocol.byte_at(frame, 1) << 8
        low = SecurityUnitProtocol.byte_at(frame, 2)
        return high ^ low

    @staticmethod
    def calculate_checksum(frame: str) -> int:
        """Sum modulo 256 of every byte from E9 to the last data byte"""
        return sum(SecurityUnitProtocol.to_bytes(frame)[:-2]) & 0xFF

    @staticmethod
    def check_checksum(frame: str) -> bool:
        expected = SecurityUnitProtocol.byte_at(frame, len(frame) // 2 - 2)
        actual = SecurityUnitProtocol.calculate_checksum(frame)
        if actual != expected:
            SecurityUnitProtocol.logger.debug(
                f"Checksum mismatch: frame carries 0x{expected:02X}, computed 0x{actual:02X}"
            )
            return False
        return True

    @staticmethod
    def build_frame(main_function: int, command_or_ack: Optional[int], data: str = "",
                    status: Optional[int] = None) -> str:
        """
        Build a frame with length field and checksum filled in.

        command_or_ack=None builds the upgrade-3 acknowledgement variant
        (F followed directly by DATA).
        """
        header = [main_function]
        if command_or_ack is not None:
            header.append(command_or_ack)
            if command_or_ack & SecurityUnitProtocol.ACK_FLAG:
                header.append(status or 0x00)

        body = bytes(header) + bytes.fromhex(SecurityUnitProtocol.preprocess(data))
        frame = bytes([SecurityUnitProtocol.START_MARKER, len(body) >> 8, len(body) & 0xFF]) + body
        checksum = sum(frame) & 0xFF
        return (frame + bytes([checksum, SecurityUnitProtocol.END_MARKER])).hex().upper()

    @staticmethod
    def build_context(frame: str) -> FrameContext:
        """Extract header values of a validated frame"""
        byte_count = len(frame) // 2
        frame_byte_length = SecurityUnitProtocol.declared_length(frame)
        main_function = SecurityUnitProtocol.byte_at(frame, 3)
        checksum = SecurityUnitProtocol.byte_at(frame, byte_count - 2)

        if SecurityUnitProtocol.is_upgrade_ack(frame):
            command_or_ack = 0x03 | SecurityUnitProtocol.ACK_FLAG
            is_acknowledgement = True
            status = None
            header = SecurityUnitProtocol.UPGRADE_ACK_HEADER
            special = True
        else:
            command_or_ack = SecurityUnitProtocol.byte_at(frame, 4)
            is_acknowledgement = bool(command_or_ack & SecurityUnitProtocol.ACK_FLAG)
            status = SecurityUnitProtocol.byte_at(frame, 5) if is_acknowledgement else None
            header = SecurityUnitProtocol.ACK_HEADER if is_acknowledgement else SecurityUnitProtocol.COMMAND_HEADER
            special = False

        data_length = frame_byte_length - header
        char_start = (3 + header) * 2
        return FrameContext(
            frame_byte_length=frame_byte_length,
            main_function=main_function,
            command_or_ack=command_or_ack,
            is_acknowledgement=is_acknowledgement,
            status=status,
            is_fe03_special=special,
            checksum=checksum,
            data_domain_byte_length=data_length,
            data_domain_char_start=char_start,
            data_domain_char_end=char_start + data_length * 2,
        )

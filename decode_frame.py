#!/usr/bin/env python3
"""
Security Unit Frame Decoder
Decodes a security unit frame from the command line

Usage:
    python decode_frame.py "E9 00 05 00 02 12 34 56 ..."
    python decode_frame.py E9000500021234 --json
    echo E9000500021234 | python decode_frame.py
"""

import sys
import json
import logging
import argparse
from typing import List, Optional

from frame_decoder import decode, outcome_message
from models import DecodeOutcome, DecodeStatus


def format_table(outcome: DecodeOutcome) -> str:
    """Render decoded fields as an indented text table"""
    lines = [f"=== {outcome_message(outcome.status)} ==="]
    for index, field in enumerate(outcome.fields or [], 1):
        lines.append(f"[{index}] {field.meaning}")
        lines.append(f"    Origin:   {_indent(field.origin)}")
        lines.append(f"    Analyzed: {_indent(field.analyzed)}")
        lines.append(f"    Details:  {_indent(field.meaning_details)}")
    return "\n".join(lines)


def format_json(outcome: DecodeOutcome) -> str:
    payload = {
        "status": outcome.status.value,
        "message": outcome_message(outcome.status),
        "fields": [field.model_dump() for field in outcome.fields or []],
    }
    return json.dumps(payload, ensure_ascii=False, indent=2)


def _indent(text: str) -> str:
    return text.replace("\n", "\n              ")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Security Unit Frame Decoder")
    parser.add_argument('frame', nargs='*', help="Frame as hex text; read from stdin when omitted")
    parser.add_argument('--json', action='store_true', help="Print the result as JSON")
    parser.add_argument('--log-level', type=str, default='WARNING',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help="Set logging level")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)]
    )

    frame = " ".join(args.frame) if args.frame else sys.stdin.read()
    outcome = decode(frame)

    print(format_json(outcome) if args.json else format_table(outcome))
    return 0 if outcome.status == DecodeStatus.PARSE_COMPLETE else 1


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
Example script demonstrating how to use the Security Unit Frame Decoder API
"""

import requests
import json
from typing import List, Optional

# API base URL
BASE_URL = "http://localhost:8000"

# Sample frames
VERIFY_PASSWORD_COMMAND = "E9 00 05 00 02 12 34 56 8C E6"
MAC_ACKNOWLEDGEMENT = "E9 00 07 01 87 00 11 22 33 44 22 E6"
UPGRADE_3_ACKNOWLEDGEMENT = "E9 00 02 FE 05 EE E6"
BAD_CHECKSUM = "E9 00 05 00 02 12 34 56 00 E6"


def print_response(title: str, response: requests.Response):
    """Helper function to print API responses"""
    print(f"\n=== {title} ===")
    print(f"Status Code: {response.status_code}")
    if response.status_code == 200:
        try:
            data = response.json()
            print(f"Response: {json.dumps(data, indent=2, ensure_ascii=False, default=str)}")
        except ValueError:
            print(f"Response: {response.text}")
    else:
        print(f"Error: {response.text}")


def check_api_health() -> bool:
    """Check that the decoder service is up and has its layouts loaded"""
    try:
        response = requests.get(f"{BASE_URL}/api/health", timeout=5)
    except requests.exceptions.RequestException as e:
        print(f"Decoder service not reachable: {e}")
        return False

    print_response("Decoder Health", response)
    if response.status_code != 200:
        return False
    return response.json().get("layouts_registered", 0) > 0


def decode_frame(frame: str) -> Optional[dict]:
    """Decode a single frame"""
    try:
        response = requests.post(f"{BASE_URL}/api/frames/decode", json={"frame": frame}, timeout=10)
        print_response(f"Decode {frame}", response)

        if response.status_code == 200:
            return response.json()

    except requests.exceptions.RequestException as e:
        print(f"Decode failed: {e}")

    return None


def decode_frames(frames: List[str]) -> Optional[dict]:
    """Decode several frames in one request"""
    try:
        response = requests.post(f"{BASE_URL}/api/frames/decode/batch", json={"frames": frames}, timeout=30)
        print_response("Batch Decode", response)

        if response.status_code == 200:
            return response.json()

    except requests.exceptions.RequestException as e:
        print(f"Batch decode failed: {e}")

    return None


def get_layouts() -> list:
    """Get every registered data-domain layout"""
    try:
        response = requests.get(f"{BASE_URL}/api/layouts")
        if response.status_code == 200:
            layouts = response.json()
            print(f"\n=== Layouts ({len(layouts)}) ===")
            for layout in layouts:
                alias = f" (same as {layout['alias_of']})" if layout["alias_of"] else ""
                print(f"{layout['key']}: {layout['command']}{alias}")
            return layouts
        print_response("Layouts", response)

    except requests.exceptions.RequestException as e:
        print(f"Failed to get layouts: {e}")

    return []


def get_layout(key: str) -> Optional[dict]:
    """Get one layout by its hex key"""
    try:
        response = requests.get(f"{BASE_URL}/api/layouts/{key}")
        print_response(f"Layout {key}", response)

        if response.status_code == 200:
            return response.json()

    except requests.exceptions.RequestException as e:
        print(f"Failed to get layout {key}: {e}")

    return None


def print_fields(result: dict):
    """Print decoded fields one per line"""
    print(f"\n--- {result['message']} ---")
    for field in result["fields"]:
        analyzed = field["analyzed"].replace("\n", " | ")
        print(f"{field['origin']:<12} {analyzed:<24} {field['meaning'].splitlines()[0]}")


def main():
    """Main example workflow"""
    print("Security Unit Frame Decoder - Example Usage")
    print("=" * 50)

    # Step 1: Check API health
    if not check_api_health():
        print("API is not available. Please start the server with: python main.py")
        return

    # Step 2: Decode single frames
    print("\n1. Decoding single frames...")
    for frame in (VERIFY_PASSWORD_COMMAND, MAC_ACKNOWLEDGEMENT, UPGRADE_3_ACKNOWLEDGEMENT):
        result = decode_frame(frame)
        if result and result["status"] == "PARSE_COMPLETE":
            print_fields(result)

    # Step 3: A frame that fails validation still returns 200
    print("\n2. Decoding a frame with a bad checksum...")
    result = decode_frame(BAD_CHECKSUM)
    if result:
        print(f"Status: {result['status']} - {result['message']}")

    # Step 4: Batch decode
    print("\n3. Batch decoding...")
    batch = decode_frames([VERIFY_PASSWORD_COMMAND, MAC_ACKNOWLEDGEMENT, BAD_CHECKSUM])
    if batch:
        print(f"{batch['complete']}/{batch['total']} frames decoded in {batch['duration']:.3f}s")

    # Step 5: Layout catalogue
    print("\n4. Listing layouts...")
    get_layouts()
    get_layout("0187")

    print("\nExample completed!")


if __name__ == "__main__":
    main()

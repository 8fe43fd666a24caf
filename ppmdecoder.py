#!/usr/bin/env python3
"""
ppmdecoder.py — Manual PPM (Portable Pixmap) decoder/encoder (no Pillow)

Reads:
- Header tokens (magic, width, height, max value), with # comments
- P3 (ASCII) or P6 (binary, 8- or 16-bit big-endian) pixel data
Returns:
    PixelBuffer with every sample rescaled to 0..255 and alpha = 255

Writes:
- P6 with max value 255 (alpha dropped)
"""

from __future__ import annotations
import os, struct
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List

from pixelbuffer import PixelBuffer, round_half_up

logger = logging.getLogger(__name__)

WHITESPACE = b" \t\r\n"
COMMENT = ord("#")
MAX_VALUE_LIMIT = 65535


class DecodeError(ValueError):
    """Base class for every PPM decoding failure."""

class UnsupportedFormat(DecodeError):
    pass

class InvalidHeader(DecodeError):
    pass

class TruncatedData(DecodeError):
    pass

class ValueOutOfRange(DecodeError):
    pass


@dataclass
class PPMHeader:
    magic: str
    width: int
    height: int
    max_value: int
    data_offset: int

    @property
    def bytes_per_component(self) -> int:
        return 1 if self.max_value < 256 else 2

    @property
    def expected_bytes(self) -> int:
        return self.width * self.height * 3 * self.bytes_per_component


# ------------------ Token scanner ------------------

class _TokenScanner:
    """Whitespace/comment-delimited ASCII tokens over a byte buffer."""

    def __init__(self, data: bytes, offset: int = 0):
        self.data = data
        self.offset = offset

    def skip_whitespace_and_comments(self):
        data, n = self.data, len(self.data)
        while self.offset < n:
            b = data[self.offset]
            if b in WHITESPACE:
                self.offset += 1
            elif b == COMMENT:
                while self.offset < n and data[self.offset] not in b"\r\n":
                    self.offset += 1
            else:
                break

    def next_token(self) -> str:
        """Next token, or "" at end of data."""
        self.skip_whitespace_and_comments()
        data, n = self.data, len(self.data)
        start = self.offset
        while self.offset < n and data[self.offset] not in WHITESPACE and data[self.offset] != COMMENT:
            self.offset += 1
        return data[start:self.offset].decode("ascii", errors="replace")


def _parse_int(token: str):
    if not token or not token.lstrip("+").isdigit():
        return None
    return int(token)


def _rescale_lut(max_value: int) -> List[int]:
    """value -> round(value / max_value * 255) for every legal sample value."""
    if max_value == 255:
        return list(range(256))
    return [round_half_up(v / max_value * 255) for v in range(max_value + 1)]


# ------------------ Header ------------------

def read_ppm_header(data: bytes) -> PPMHeader:
    scanner = _TokenScanner(data)
    magic = scanner.next_token()
    if magic not in ("P3", "P6"):
        raise UnsupportedFormat(f"Unsupported PPM format: expected P3 or P6, got {magic!r}")

    fields = []
    for name in ("width", "height"):
        token = scanner.next_token()
        value = _parse_int(token)
        if value is None or value <= 0:
            raise InvalidHeader(f"Invalid {name}: {token!r}")
        fields.append(value)
    width, height = fields

    token = scanner.next_token()
    max_value = _parse_int(token)
    if max_value is None or not 1 <= max_value <= MAX_VALUE_LIMIT:
        raise InvalidHeader(f"Invalid max value: {token!r} (must be 1-{MAX_VALUE_LIMIT})")

    # exactly one whitespace byte separates the header from the raster
    if scanner.offset >= len(data):
        raise TruncatedData("Missing pixel data after header")
    if data[scanner.offset] not in WHITESPACE:
        raise InvalidHeader("Header must end with a single whitespace byte")
    return PPMHeader(magic, width, height, max_value, scanner.offset + 1)


# ------------------ Raster decoding ------------------

def _decode_p6(data: bytes, header: PPMHeader) -> bytes:
    start = header.data_offset
    expected = header.expected_bytes
    remaining = len(data) - start
    if remaining < expected:
        raise TruncatedData(f"Insufficient pixel data: expected {expected} bytes, got {remaining}")
    raw = data[start:start + expected]

    if header.bytes_per_component == 1:
        if header.max_value == 255:
            return raw
        lut = _rescale_lut(header.max_value)
        # samples above max_value would be out of range; clip them to 255
        table = bytes(lut[v] if v <= header.max_value else 255 for v in range(256))
        return raw.translate(table)

    count = header.width * header.height * 3
    values = struct.unpack(f">{count}H", raw)
    lut = _rescale_lut(header.max_value)
    return bytes(lut[v] if v <= header.max_value else 255 for v in values)


def _decode_p3(data: bytes, header: PPMHeader) -> bytes:
    scanner = _TokenScanner(data, header.data_offset)
    lut = _rescale_lut(header.max_value)
    count = header.width * header.height * 3
    # every sample takes at least one digit plus a separator
    available = (len(data) - header.data_offset + 1) // 2
    if count > available:
        raise TruncatedData(f"Insufficient pixel data: expected {count} samples, "
                            f"stream holds at most {available}")
    out = bytearray(count)
    for i in range(count):
        token = scanner.next_token()
        if not token:
            raise TruncatedData(f"Insufficient pixel data: expected {count} samples, got {i}")
        v = _parse_int(token)
        if v is None or v > header.max_value:
            channel = "RGB"[i % 3]
            raise ValueOutOfRange(f"Invalid {channel} value: {token!r} (must be 0-{header.max_value})")
        out[i] = lut[v]
    return bytes(out)


def decode_ppm(data: bytes) -> PixelBuffer:
    """Decode a P3/P6 byte stream. Raises DecodeError; never returns a partial image."""
    data = bytes(data)
    header = read_ppm_header(data)
    if header.magic == "P6":
        rgb = _decode_p6(data, header)
    else:
        rgb = _decode_p3(data, header)
    logger.debug("Decoded %s %dx%d (max value %d)", header.magic, header.width, header.height, header.max_value)
    return PixelBuffer.from_rgb(header.width, header.height, rgb, header.max_value)


def encode_ppm(buf: PixelBuffer) -> bytes:
    """Encode as P6 with max value 255; alpha is dropped."""
    header = f"P6\n{buf.width} {buf.height}\n255\n".encode("ascii")
    rgb = bytearray(buf.pixel_count * 3)
    rgb[0::3] = buf.channels[0::4]
    rgb[1::3] = buf.channels[1::4]
    rgb[2::3] = buf.channels[2::4]
    return header + bytes(rgb)


# ------------------ File helpers ------------------

def decode_ppm_file(path: Path) -> PixelBuffer:
    return decode_ppm(Path(path).read_bytes())


def save_ppm(buf: PixelBuffer, path: Path) -> None:
    Path(path).write_bytes(encode_ppm(buf))
    logger.info("Saved %dx%d PPM to %s", buf.width, buf.height, path)


def ppm_header_info(path: Path) -> Dict[str, object]:
    path = Path(path)
    header = read_ppm_header(path.read_bytes())
    return {
        "Filename": os.path.basename(path),
        "File Size": f"{path.stat().st_size} bytes",
        "Format": f"{header.magic} ({'ASCII' if header.magic == 'P3' else 'binary'})",
        "Image Dimensions": f"{header.width} × {header.height}",
        "Max Value": header.max_value,
        "Bytes per Component": header.bytes_per_component,
    }


if __name__ == "__main__":
    import sys
    if len(sys.argv) < 2:
        print("Usage: python ppmdecoder.py <file.ppm>")
    else:
        p = Path(sys.argv[1])
        try:
            info = ppm_header_info(p)
            buf = decode_ppm_file(p)
        except DecodeError as e:
            print(f"Error: {e}")
            sys.exit(1)
        for k, v in info.items():
            print(f"{k}: {v}")
        print(f"Pixels: {buf.pixel_count}")

"""
Byte-to-text decoding for local file reads.

A byte order mark wins outright. Without one, content that looks binary is
rejected, and otherwise each fallback encoding is tried in turn.
"""

import logging
from typing import List, NamedTuple, Optional

logger = logging.getLogger(__name__)

# Tried in order; latin-1 accepts any byte sequence
DEFAULT_ENCODINGS = ['utf-8', 'utf-8-sig', 'latin-1', 'cp1252']

# utf-32 before utf-16: their little-endian BOMs share a prefix. Codecs strip the BOM.
BOMS = [
    (b'\xff\xfe\x00\x00', 'utf-32'),
    (b'\x00\x00\xfe\xff', 'utf-32'),
    (b'\xef\xbb\xbf', 'utf-8-sig'),
    (b'\xff\xfe', 'utf-16'),
    (b'\xfe\xff', 'utf-16'),
]

BINARY_SAMPLE_SIZE = 8192


class DecodedText(NamedTuple):
    """Outcome of a decode attempt; exactly one of text/error is set."""
    text: Optional[str]
    encoding: Optional[str]
    error: Optional[str]


class EncodingDetector:
    """Decodes raw file bytes with a BOM check and encoding fallbacks."""

    def __init__(self, fallback_encodings: Optional[List[str]] = None):
        self.encodings = list(fallback_encodings or DEFAULT_ENCODINGS)

    @staticmethod
    def bom_encoding(raw: bytes) -> Optional[str]:
        """Codec named by a leading byte order mark, or None."""
        return next((codec for bom, codec in BOMS if raw.startswith(bom)), None)

    @staticmethod
    def is_likely_binary(raw: bytes) -> bool:
        """
        Guess from the first few KB whether content is binary.

        Null bytes are decisive. A sample that is not valid UTF-8 counts as
        binary when more than 30% of it is control characters other than
        tab, newline and carriage return.
        """
        sample = raw[:BINARY_SAMPLE_SIZE]
        if b'\x00' in sample:
            return True
        try:
            sample.decode('utf-8')
        except UnicodeDecodeError:
            controls = sum(1 for byte in sample if byte < 32 and byte not in (9, 10, 13))
            return controls > len(sample) * 0.3
        return False

    def decode(self, raw: bytes, label: str = "") -> DecodedText:
        """
        Turn file bytes into text.

        Args:
            raw: File content.
            label: Name used in log messages.
        """
        codec = self.bom_encoding(raw)
        if codec is not None:
            try:
                return DecodedText(raw.decode(codec), codec, None)
            except UnicodeDecodeError as e:
                logger.debug(f"{label}: {codec} BOM present but decode failed: {e}")
        elif self.is_likely_binary(raw):
            return DecodedText(None, None, "Binary content")

        failure = None
        for encoding in self.encodings:
            try:
                text = raw.decode(encoding)
            except (UnicodeDecodeError, LookupError) as e:
                failure = e
                continue
            logger.debug(f"{label}: decoded as {encoding}")
            return DecodedText(text, encoding, None)

        message = f"Unable to decode file with {', '.join(self.encodings)}"
        if isinstance(failure, UnicodeDecodeError):
            message += f" (failed at byte {failure.start})"
        logger.info(f"{label}: {message}")
        return DecodedText(None, None, message)

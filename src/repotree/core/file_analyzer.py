"""
File classification for repotree.

Decides, from a file handle's metadata alone, whether its content should be
read: binary MIME types and files above the size limit are recorded without
reading them.
"""

from typing import Any, Optional

from .models import Config, Classification


class FileAnalyzer:
    """Handles binary and size classification of file handles."""

    def __init__(self, config: Config):
        self.config = config

    def is_binary_type(self, type_tag: Optional[str]) -> bool:
        """
        Check a MIME type tag against the binary type lists.

        A missing or empty tag is never binary.
        """
        if not type_tag:
            return False

        mime = type_tag.split(';', 1)[0].strip().lower()
        if mime in self.config.binary_types:
            return True
        return any(mime.startswith(prefix) for prefix in self.config.binary_type_prefixes)

    def is_oversized(self, size: Optional[int]) -> bool:
        """Check if a size exceeds the configured limit."""
        return (size or 0) > self.config.max_file_size

    def classify(self, handle: Any) -> Classification:
        """
        Classify a file handle.

        Args:
            handle: Object exposing `size` and `type`.

        Returns:
            Classification with binary and oversized flags.
        """
        return Classification(
            binary=self.is_binary_type(getattr(handle, 'type', None)),
            oversized=self.is_oversized(getattr(handle, 'size', 0)),
        )

    def skip_reason(self, classification: Classification, size: int) -> Optional[str]:
        """Human readable reason for not reading a file, if any."""
        if classification.binary:
            return "Binary file"
        if classification.oversized:
            return f"File too large ({size:,} bytes)"
        return None

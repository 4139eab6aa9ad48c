"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

utils/convert_utils.py
"""
import time


class ConvertUtils:
    @staticmethod
    def bytes_to_human(size_bytes: int) -> str:
        """
        Convert bytes to human-readable string (e.g., 1.50KB, 3.20MB).
        """
        if size_bytes < 0:
            return "0B"

        units = ["B", "KB", "MB", "GB", "TB", "PB"]
        for unit in units:
            if size_bytes < 1024:
                return f"{size_bytes:.2f}{unit}"
            size_bytes /= 1024
        return f"{size_bytes:.2f}EB"

    @staticmethod
    def millis_to_human(millis: int, fmt: str = "%Y-%m-%d %H:%M:%S") -> str:
        """
        Convert a node's modification time (milliseconds since epoch) to local time.
        """
        try:
            return time.strftime(fmt, time.localtime(millis / 1000))
        except (OverflowError, OSError, ValueError):
            return "Invalid timestamp"

    @staticmethod
    def short_fingerprint(fingerprint: str, length: int = 12) -> str:
        """Abbreviated digest for console output; size fallbacks are shown whole."""
        if fingerprint.startswith("size:"):
            return fingerprint
        return fingerprint[:length]

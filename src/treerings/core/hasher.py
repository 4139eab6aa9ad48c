"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

hasher.py
Implements bounded-sample file fingerprinting with pluggable hash algorithms.

A fingerprint covers a size prefix, the first 16KB, a ~1MB window centered on the
file's midpoint and the last 16KB. Files up to 1MB are hashed in full. Larger files
that differ only outside the sampled windows produce the same fingerprint: this
trades exactness for O(1) I/O per file.
"""

import hashlib
import logging
from typing import Tuple

import xxhash

from treerings.core.interfaces import Fingerprinter, HashAlgorithm, HashState
from treerings.core.models import SamplingConfig

logger = logging.getLogger(__name__)


# Use the same way to implement and use any other hashing algorithm
class Sha1AlgorithmImpl(HashAlgorithm):
    @staticmethod
    def new() -> HashState:
        return hashlib.sha1()


class XXHashAlgorithmImpl(HashAlgorithm):
    @staticmethod
    def new() -> HashState:
        return xxhash.xxh128()


class FingerprinterImpl(Fingerprinter):
    """
    A fingerprinter that supports any algorithm via the HashAlgorithm interface.
    Reads the file page by page, seeking past the unsampled regions.
    """

    SIZE_PREFIX = "size:"

    def __init__(self, algorithm: HashAlgorithm = None):
        self.algorithm = algorithm or Sha1AlgorithmImpl()

    def fingerprint(self, path: str, size: int) -> Tuple[str, bool]:
        try:
            f = open(path, 'rb')
        except OSError as e:
            logger.warning(f"Unable to fingerprint file {path}, using size instead: {e}")
            return self.size_fingerprint(size), True

        with f:
            hasher = self.algorithm.new()
            hasher.update(f"filesize:{size}\n".encode("utf-8"))
            self._sample(f, size, hasher)
            return hasher.hexdigest(), False

    @staticmethod
    def size_fingerprint(size: int) -> str:
        """Fallback identifier for unreadable files. Equal sizes collide."""
        return f"{FingerprinterImpl.SIZE_PREFIX}{size}"

    @staticmethod
    def _sample(f, size: int, hasher: HashState) -> None:
        """Feeds head, body and tail windows of an open file into the hasher."""
        head = SamplingConfig.HEAD
        body = SamplingConfig.BODY
        max_bytes = SamplingConfig.MAX_BYTES
        body_start = SamplingConfig.body_start(size)

        total_read = 0
        zone = 0  # 0 = head, 1 = body, 2 = tail

        # Any I/O error ends sampling at the point reached; it is not a failure
        try:
            while total_read < max_bytes:
                data = f.read(SamplingConfig.PAGE_SIZE)
                if not data:
                    break

                total_read += len(data)
                hasher.update(data)

                if zone == 0 and total_read >= head:
                    if body_start > total_read:
                        logger.debug(f"  read {total_read}/{size}, seek to body {body_start}")
                        f.seek(body_start)
                    zone = 1
                elif zone == 1 and total_read >= head + body:
                    if size > max_bytes:
                        tail_start = SamplingConfig.tail_start(size)
                        logger.debug(f"  read {total_read}/{size}, seek to tail {tail_start}")
                        f.seek(tail_start)
                    zone = 2
        except OSError as e:
            logger.debug(f"Sampling stopped after {total_read} bytes: {e}")

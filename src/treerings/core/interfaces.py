"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

interfaces.py

Defines core interfaces (Protocols) used throughout the reconciliation system.
These protocols enforce structural typing using Python's `typing.Protocol` so that
hashing, scanning and analysis can be swapped independently.

Key Components:
---------------
- HashState / HashAlgorithm: Incremental hash functions (e.g., SHA-1, xxHash128).
- Fingerprinter: Computes a bounded-sample content fingerprint of one file.
- TreeScanner: Walks one root and builds its Tree.
- TreeAnalyzer: Reconciles an ordered list of Trees into an Analysis.
"""

from typing import Protocol, List, Tuple, Optional, Callable
from treerings.core.models import Tree, Analysis


# ===== Interfaces =====

class HashState(Protocol):
    """Running hash object, as returned by hashlib / xxhash constructors."""
    def update(self, data: bytes) -> None: ...
    def hexdigest(self) -> str: ...


class HashAlgorithm(Protocol):
    """
    Interface for generic hash algorithms.

    Allows plugging in different hashing functions like SHA-1 or xxHash
    without affecting the sampling logic.
    """

    @staticmethod
    def new() -> HashState:
        """Returns a fresh incremental hash object."""
        ...


class Fingerprinter(Protocol):
    """Interface for fingerprinting a single file."""
    def fingerprint(self, path: str, size: int) -> Tuple[str, bool]:
        """
        Returns (hex digest, degraded). `degraded` is True when the file could not be
        opened and the digest is the size-only fallback.
        """
        ...


class TreeScanner(Protocol):
    """
    Interface for scanning one directory root into a Tree.
    """
    def scan(
        self,
        root_path: str,
        prior: Optional[Tree] = None,
        progress_callback: Optional[Callable[[str, int, object], None]] = None
    ) -> Tree:
        """
        Scan the given root.

        Args:
            root_path: Directory (or file) to scan.
            prior: A previous Tree of the same root, used to skip unchanged files.
            progress_callback: Optional callback for reporting progress (stage, current, total).

        Returns:
            Tree indexing every fingerprinted file under the root.
        """
        ...


class TreeAnalyzer(Protocol):
    """
    Interface for reconciling trees.
    """
    def analyze(self, trees: List[Tree]) -> Analysis:
        """Classify every path as unique, duplicated, or missing relative to earlier trees."""
        ...

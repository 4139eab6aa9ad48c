"""
Core reconciliation engine — hasher, scanner and analyzer.

This package contains the I/O-bound foundation of treerings:
- FingerprinterImpl + Sha1AlgorithmImpl / XXHashAlgorithmImpl: bounded-sample content fingerprints
- TreeScannerImpl: directory traversal with hidden-entry and symlink policy
- TreeAnalyzerImpl: multi-tree unique / duplicate / missing classification
- Models: Node, Tree, Analysis, BackupResult and configuration objects

All components are pure Python with no UI dependencies.
"""

from .hasher import FingerprinterImpl, Sha1AlgorithmImpl, XXHashAlgorithmImpl
from .scanner import TreeScannerImpl
from .analyzer import TreeAnalyzerImpl
from .models import (
    Node, Tree, Analysis, BackupResult, BackupStatus,
    HashAlgorithmName, SamplingConfig, ScanParams)

__all__ = [
    "FingerprinterImpl",
    "Sha1AlgorithmImpl",
    "XXHashAlgorithmImpl",
    "TreeScannerImpl",
    "TreeAnalyzerImpl",
    "Node",
    "Tree",
    "Analysis",
    "BackupResult",
    "BackupStatus",
    "HashAlgorithmName",
    "SamplingConfig",
    "ScanParams",
]

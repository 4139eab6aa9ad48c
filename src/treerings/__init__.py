"""
treerings — find unique, duplicated and missing files across directory trees.

Core features:
- Bounded-sample fingerprints: head, middle and tail of each file, at most 1MB read per file
- Reconciliation of any number of roots: unique files, duplicate groups, and files
  missing from the baseline (first) root
- Safe backup of missing files into the baseline, never overwriting existing files
- JSON analysis document, reusable as a rescan cache
- CLI interface for headless/server usage
"""

# Get version
try:
    from importlib.metadata import version as _version
    __version__ = _version("treerings")
except Exception:
    __version__ = "0.0.0"

# Public API: only what users should import directly
from treerings.commands import ReconcileCommand
from treerings.core import (
    Node, Tree, Analysis, BackupResult, BackupStatus, HashAlgorithmName, ScanParams,
    TreeScannerImpl, TreeAnalyzerImpl, FingerprinterImpl)
from treerings.services import BackupService, AnalysisStore
from treerings.utils.convert_utils import ConvertUtils

__all__ = [
    "ReconcileCommand",
    "Node",
    "Tree",
    "Analysis",
    "BackupResult",
    "BackupStatus",
    "HashAlgorithmName",
    "ScanParams",
    "TreeScannerImpl",
    "TreeAnalyzerImpl",
    "FingerprinterImpl",
    "BackupService",
    "AnalysisStore",
    "ConvertUtils",
    "__version__",
]

"""
Unified command orchestrator for reconciliation.
This is the SINGLE source of truth for the scan → analyze → backup workflow, used by
the CLI and by library callers.
"""
import os
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Callable, Dict, Tuple

from treerings.core.models import Analysis, BackupResult, HashAlgorithmName, ScanParams, Tree
from treerings.core.hasher import FingerprinterImpl, Sha1AlgorithmImpl, XXHashAlgorithmImpl
from treerings.core.scanner import TreeScannerImpl
from treerings.core.analyzer import TreeAnalyzerImpl
from treerings.services.backup_service import BackupService

logger = logging.getLogger(__name__)

ALGORITHMS = {
    HashAlgorithmName.SHA1: Sha1AlgorithmImpl,
    HashAlgorithmName.XXH128: XXHashAlgorithmImpl,
}


class ReconcileCommand:
    """
    Orchestrates the entire reconciliation workflow:
    1. Scan every root into a Tree (optionally several roots in parallel)
    2. Analyze the trees in the order the roots were given
    3. Optionally back up missing files into the first root

    Usage:
        params = ScanParams(roots=["/backup", "/laptop/photos"], workers=2)
        command = ReconcileCommand()
        analysis = command.execute(params, progress_callback=cli_progress_printer)
        results = command.backup(analysis)
    """

    def __init__(self):
        self._analyzer = TreeAnalyzerImpl()

    @staticmethod
    def build_scanner(params: ScanParams) -> TreeScannerImpl:
        algorithm = ALGORITHMS[params.algorithm]()
        return TreeScannerImpl(
            include_hidden=params.include_hidden,
            fingerprinter=FingerprinterImpl(algorithm)
        )

    def execute(
            self,
            params: ScanParams,
            prior: Optional[Dict[str, Tree]] = None,
            progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None
    ) -> Analysis:
        """
        Execute scan + analysis with given parameters.

        Args:
            params: Validated scan parameters
            prior: Trees of an earlier run keyed by root, used as rescan hints
            progress_callback: (stage: str, current: int, total: Optional[int]) -> None

        Returns:
            Analysis of all roots, baseline first

        Raises:
            ValueError / OSError: if a root cannot be scanned
            RuntimeError: if the scanned trees are internally inconsistent
        """
        trees = self.scan_all(params, prior=prior, progress_callback=progress_callback)
        return self._analyzer.analyze(trees)

    def scan_all(
            self,
            params: ScanParams,
            prior: Optional[Dict[str, Tree]] = None,
            progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None
    ) -> List[Tree]:
        """Scans every root; the returned list keeps the order of params.roots."""
        self.warn_nested_roots(params.roots)
        scanner = self.build_scanner(params)
        prior = prior or {}

        def scan_one(root: str) -> Tree:
            logger.debug(f"Scanning {root}")
            return scanner.scan(root, prior=self._prior_for(root, prior), progress_callback=progress_callback)

        if params.workers == 1 or len(params.roots) == 1:
            return [scan_one(root) for root in params.roots]

        # Each worker builds its own Tree; nothing mutable is shared between them
        with ThreadPoolExecutor(max_workers=min(params.workers, len(params.roots))) as executor:
            futures = [executor.submit(scan_one, root) for root in params.roots]
            return [future.result() for future in futures]

    @staticmethod
    def warn_nested_roots(roots: List[str]) -> List[Tuple[str, str]]:
        """
        Files under a root that lies inside another root are scanned twice and
        every one of them is reported as a duplicate of itself.
        Returns the (outer, inner) pairs found.
        """
        canonical = [os.path.realpath(root) for root in roots]
        nested = []
        for i, outer in enumerate(canonical):
            for j, inner in enumerate(canonical):
                if i != j and (inner == outer or inner.startswith(outer.rstrip(os.sep) + os.sep)):
                    logger.warning(f"Root {roots[j]} is inside root {roots[i]}: "
                                   f"its files will be reported as duplicates of themselves")
                    nested.append((roots[i], roots[j]))
        return nested

    @staticmethod
    def backup(analysis: Analysis, dry_run: bool = False) -> List[BackupResult]:
        """Copy every missing file into the baseline root."""
        return BackupService.backup_missing(analysis, dry_run=dry_run)

    @staticmethod
    def _prior_for(root: str, prior: Dict[str, Tree]) -> Optional[Tree]:
        # Cached trees are keyed by canonical root; the scanner drops a hint whose root differs
        return prior.get(root) or prior.get(os.path.abspath(root))

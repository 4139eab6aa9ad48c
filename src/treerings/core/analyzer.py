"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

analyzer.py
Reconciles the fingerprint indexes of several scanned trees.

Trees are folded in order; trees[0] is the baseline. A fingerprint first seen in a
later tree is reported as missing for that tree, so "missing" always means "novel
relative to every tree processed before it", not "absent from the baseline only".
Classification into unique and duplicated paths depends only on how many paths share
a fingerprint: ordering inside the result lists follows traversal order and carries
no meaning.
"""
import os
import time
import logging
from typing import List, Dict

from treerings.core.models import Tree, Analysis
from treerings.core.interfaces import TreeAnalyzer

logger = logging.getLogger(__name__)


class TreeAnalyzerImpl(TreeAnalyzer):
    """
    Folds trees into a single fingerprint accumulator and classifies every path.
    """

    def analyze(self, trees: List[Tree]) -> Analysis:
        """
        Args:
            trees: Scanned trees, baseline first
        Returns:
            Analysis owning the given trees
        Raises:
            RuntimeError: if a tree's fingerprint index and node index disagree
        """
        logger.debug(f"Analyzing {len(trees)} trees ...")
        start_time = time.time()

        analysis = Analysis(trees=list(trees))
        unioned: Dict[str, List[str]] = {}

        for index, tree in enumerate(trees):
            missing = []
            for digest, paths in tree.fingerprints.items():
                self._check_consistency(tree, digest, paths)

                if index > 0 and digest not in unioned:
                    missing.append(self._relativize(paths[0], tree.root))
                unioned.setdefault(digest, []).extend(paths)

            if missing:
                analysis.missing.setdefault(tree.root, []).extend(missing)

        for digest, paths in unioned.items():
            if len(paths) == 1:
                analysis.unique.append(paths[0])
            elif len(paths) > 1:
                analysis.duplicates[digest] = list(paths)

        logger.debug(f"Analysis finished in {time.time() - start_time:.3f}s: "
                     f"{len(analysis.unique)} unique, {len(analysis.duplicates)} duplicate groups, "
                     f"{analysis.missing_count} missing")
        return analysis

    @staticmethod
    def _check_consistency(tree: Tree, digest: str, paths: List[str]) -> None:
        # Never true for a Tree built by the scanner; signals a bug or a corrupt document
        if not paths:
            raise RuntimeError(f"Tree {tree.root} has no paths for fingerprint {digest}")
        for path in paths:
            node = tree.nodes.get(path)
            if node is None or node.fingerprint != digest:
                raise RuntimeError(
                    f"Tree {tree.root} lists {path} under {digest} but its node disagrees"
                )

    @staticmethod
    def _relativize(path: str, root: str) -> str:
        try:
            return os.path.relpath(path, root)
        except ValueError as e:
            logger.warning(f"Error relativizing {path} against {root}: {e}")
            return path

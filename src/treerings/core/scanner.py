"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/scanner.py
Implements tree scanning: walks a root, applies the hidden-entry and symlink policy
and fingerprints every regular file into a Tree.
Features:
- Symbolic links are resolved one level; linked directories are scanned into the same Tree
- Every directory is descended at most once, so cyclic links terminate
- A file or directory that cannot be read never aborts the rest of the walk
- An earlier Tree of the same root can be passed in to skip unchanged files
"""

import os
import stat
import time
import logging
from dataclasses import dataclass, field
from typing import Optional, Callable, Set, Tuple

logger = logging.getLogger(__name__)

# Local imports
from treerings.core.models import Node, Tree
from treerings.core.interfaces import TreeScanner, Fingerprinter
from treerings.core.hasher import FingerprinterImpl


@dataclass
class _ScanState:
    """Per-scan bookkeeping, so one scanner instance can be shared between threads."""
    tree: Tree
    prior: Optional[Tree] = None
    progress_callback: Optional[Callable[[str, int, object], None]] = None
    descended: Set[str] = field(default_factory=set)
    processed: int = 0
    reused: int = 0
    progress_counter: int = 0


class TreeScannerImpl(TreeScanner):
    """
    Scans a directory tree and builds its fingerprint index.

    Attributes:
        include_hidden: Whether dot-prefixed entries are scanned (hidden directories are
            otherwise pruned together with their whole subtree)
        fingerprinter: Fingerprint engine used for regular files
    """

    PROGRESS_INTERVAL = 1000  # Report progress every 1,000 files

    def __init__(self, include_hidden: bool = False, fingerprinter: Optional[Fingerprinter] = None):
        self.include_hidden = include_hidden
        self.fingerprinter = fingerprinter or FingerprinterImpl()

    def scan(self,
             root_path: str,
             prior: Optional[Tree] = None,
             progress_callback: Optional[Callable[[str, int, object], None]] = None) -> Tree:
        """
        Builds the Tree of `root_path`.
        Only a failure to resolve or stat the root itself is raised; per-entry errors are
        logged and the walk continues.
        """
        if not root_path:
            raise ValueError("Tree root is empty")

        logger.debug(f"Starting scan of {root_path} (include_hidden={self.include_hidden})")
        start_time = time.time()

        try:
            root = self._scan_node(root_path, apply_hidden_policy=False)
        except OSError as e:
            logger.error(f"Error scanning root node {root_path}: {e}")
            raise

        state = _ScanState(tree=Tree(root=root.path), prior=prior, progress_callback=progress_callback)
        if prior is not None and prior.root != root.path:
            logger.debug(f"Ignoring cached tree of {prior.root}: root differs from {root.path}")
            state.prior = None

        if root.skip:
            logger.warning(f"Root {root.path} is neither a directory nor a regular file, nothing to scan")
            return state.tree

        state.tree.add_node(root)
        if root.is_dir:
            self._scan_subtree(root.path, state)
        else:
            self._count(state)

        if progress_callback and state.progress_counter > 0:
            progress_callback('fingerprinting', state.processed, None)

        elapsed_time = time.time() - start_time
        logger.debug(f"Total scan time: {elapsed_time:.2f} seconds")
        logger.debug(f"Scan of {state.tree.root} completed. {state.processed} files fingerprinted, "
                     f"{state.reused} reused from cache.")
        return state.tree

    def _scan_subtree(self, dir_path: str, state: _ScanState) -> None:
        """Walks one directory; linked directories found on the way are walked recursively."""
        top_real = os.path.realpath(dir_path)
        if top_real in state.descended:
            logger.debug(f"Already scanned, not descending again: {dir_path}")
            return

        for dirpath, dirnames, filenames in os.walk(dir_path, onerror=self._on_walk_error):
            real = os.path.realpath(dirpath)
            if real in state.descended:
                logger.debug(f"Already scanned, not descending again: {dirpath}")
                dirnames[:] = []
                continue
            state.descended.add(real)

            kept = []
            for name in dirnames:
                node = self._visit(os.path.join(dirpath, name), state)
                if node is None or node.skip:
                    continue
                state.tree.add_node(node)
                if node.was_symlink:
                    # os.walk does not follow links: scan the target as a nested subtree
                    if node.is_dir:
                        self._scan_subtree(node.path, state)
                    continue
                kept.append(name)
            dirnames[:] = kept

            for name in filenames:
                node = self._visit(os.path.join(dirpath, name), state)
                if node is None or node.skip:
                    continue
                if node.is_dir:
                    # Only reachable through a link os.walk did not classify as a directory
                    state.tree.add_node(node)
                    self._scan_subtree(node.path, state)
                    continue
                if state.tree.add_node(node):
                    self._count(state)

    def _visit(self, path: str, state: _ScanState) -> Optional[Node]:
        """Scans one entry; an I/O error skips that entry only."""
        try:
            return self._scan_node(path, state=state)
        except OSError as e:
            logger.warning(f"Skipping {path}: {e}")
            return None

    def _scan_node(self,
                   path: str,
                   state: Optional[_ScanState] = None,
                   apply_hidden_policy: bool = True) -> Node:
        """
        Resolves, stats and (for regular files) fingerprints one path.
        Args:
            path: Path as found during traversal
            state: Current scan state (provides the rescan cache)
            apply_hidden_policy: False for the scan root, which is always scanned
        Returns:
            Node, with `skip` set if the entry is excluded by policy
        Raises:
            OSError: if the entry cannot be resolved or stat'ed
        """
        resolved, was_symlink = self._resolve(path)
        node = Node(name=os.path.basename(resolved), path=resolved, was_symlink=was_symlink)

        if apply_hidden_policy and self._is_hidden(node.name):
            logger.debug(f"Skipping hidden entry: {resolved}")
            node.skip = True
            return node

        st = os.stat(resolved)
        node.is_dir = stat.S_ISDIR(st.st_mode)
        node.modified = st.st_mtime_ns // 1_000_000

        if node.is_dir:
            return node

        if not stat.S_ISREG(st.st_mode):
            logger.debug(f"Skipping special file: {resolved}")
            node.skip = True
            return node

        node.size = st.st_size
        self._fingerprint(node, state)
        return node

    def _fingerprint(self, node: Node, state: Optional[_ScanState]) -> None:
        """Reuses the cached fingerprint of an unchanged file, or computes a new one."""
        prior = state.prior if state is not None else None
        cached = prior.nodes.get(node.path) if prior is not None else None
        if (cached is not None
                and not cached.is_dir
                and cached.fingerprint
                and not cached.fingerprint.startswith(FingerprinterImpl.SIZE_PREFIX)
                and cached.size == node.size
                and cached.modified == node.modified):
            node.fingerprint = cached.fingerprint
            state.reused += 1
            return

        logger.debug(f"fingerprinting {node.path} ...")
        node.fingerprint, node.degraded = self.fingerprinter.fingerprint(node.path, node.size)

    @staticmethod
    def _resolve(path: str) -> Tuple[str, bool]:
        """
        Follows a symbolic link one level. The link's target becomes the entry's identity.
        Returns (absolute path, was_symlink).
        """
        was_symlink = False
        if os.path.islink(path):
            target = os.readlink(path)
            if not os.path.isabs(target):
                target = os.path.join(os.path.dirname(path), target)
            path = target
            was_symlink = True
        return os.path.abspath(path), was_symlink

    def _is_hidden(self, name: str) -> bool:
        return not self.include_hidden and name.startswith(".") and name != "."

    def _count(self, state: _ScanState) -> None:
        state.processed += 1
        state.progress_counter += 1
        if state.progress_callback and state.progress_counter >= self.PROGRESS_INTERVAL:
            state.progress_callback('fingerprinting', state.processed, None)
            state.progress_counter = 0

    @staticmethod
    def _on_walk_error(error: OSError) -> None:
        logger.warning(f"Cannot list directory {error.filename}: {error}")

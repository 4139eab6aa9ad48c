"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models for tree scanning, fingerprint reconciliation and backup.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional, Any
from enum import Enum


# =============================
# Enums
# =============================

class HashAlgorithmName(Enum):
    """
    Digest used for content fingerprints.
    """
    SHA1 = "sha1"
    XXH128 = "xxh128"

    @property
    def display_name(self) -> str:
        """Human-readable name for UI display."""
        mapping = {
            HashAlgorithmName.SHA1: "SHA-1",
            HashAlgorithmName.XXH128: "xxHash128",
        }
        return mapping.get(self, self.value)

    @property
    def description(self) -> str:
        """Detailed description for help text."""
        mapping = {
            HashAlgorithmName.SHA1:
                "160-bit SHA-1 over the sampled bytes (default)",
            HashAlgorithmName.XXH128:
                "128-bit xxHash over the sampled bytes (faster, non-cryptographic)",
        }
        return mapping.get(self, self.value)

    def __repr__(self) -> str:
        return self.value


class BackupStatus(Enum):
    COPIED = "copied"
    FAILED = "failed"
    SKIPPED = "skipped"
    PLANNED = "planned"  # dry run: destination computed, nothing written


# =============================
# Config
# =============================

class SamplingConfig:
    """
    Byte windows sampled by the fingerprint engine.
    At most MAX_BYTES of content are read per file regardless of its size.
    """
    HEAD = 16384
    BODY = 1015808
    TAIL = 16384
    PAGE_SIZE = 4096
    MAX_BYTES = HEAD + BODY + TAIL

    @staticmethod
    def body_start(file_size: int) -> int:
        """Offset of the body window, centered on the file's midpoint."""
        return max(0, file_size // 2 - SamplingConfig.BODY // 2)

    @staticmethod
    def tail_start(file_size: int) -> int:
        return max(0, file_size - SamplingConfig.TAIL)


# ======================
#  Core Data Models
# ======================

@dataclass
class Node:
    """
    One filesystem entry observed during a scan.
    `was_symlink`, `skip` and `degraded` only live for the duration of a scan
    and are never persisted.
    """
    name: str = ""
    is_dir: bool = False
    path: str = ""
    fingerprint: str = ""
    size: int = 0  # in bytes
    modified: int = 0  # milliseconds since epoch
    was_symlink: bool = field(default=False, compare=False)
    skip: bool = field(default=False, compare=False)
    degraded: bool = field(default=False, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "is_dir": self.is_dir,
            "path": self.path,
            "print": self.fingerprint,
            "size": self.size,
            "modified": self.modified,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Node":
        return cls(
            name=data.get("name", ""),
            is_dir=bool(data.get("is_dir", False)),
            path=data["path"],
            fingerprint=data.get("print", ""),
            size=int(data.get("size", 0)),
            modified=int(data.get("modified", 0)),
        )

    def __repr__(self):
        return f"<Node path={self.path}, size={self.size}, print={self.fingerprint[:12]}>"


@dataclass
class Tree:
    """
    Fingerprint index of one scanned root.

    fingerprints: digest -> paths that produced it, in traversal order
    nodes: path -> Node for every entry that was not excluded (directories included)
    """
    root: str
    fingerprints: Dict[str, List[str]] = field(default_factory=dict)
    nodes: Dict[str, Node] = field(default_factory=dict)

    def add_node(self, node: Node) -> bool:
        """
        Registers a node and, for files, indexes its path under its fingerprint.
        Returns False if the path was already registered (e.g. reached twice via a symlink).
        """
        if node.path in self.nodes:
            return False
        self.nodes[node.path] = node
        if node.fingerprint:
            self.fingerprints.setdefault(node.fingerprint, []).append(node.path)
        return True

    @property
    def file_count(self) -> int:
        return sum(len(paths) for paths in self.fingerprints.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "root": self.root,
            "fingerprints_to_paths": {h: list(paths) for h, paths in self.fingerprints.items()},
            "paths_to_nodes": {p: n.to_dict() for p, n in self.nodes.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Tree":
        return cls(
            root=data["root"],
            fingerprints={h: list(paths) for h, paths in (data.get("fingerprints_to_paths") or {}).items()},
            nodes={p: Node.from_dict(n) for p, n in (data.get("paths_to_nodes") or {}).items()},
        )

    def __repr__(self):
        return f"<Tree root={self.root}, files={self.file_count}>"


@dataclass
class Analysis:
    """
    Reconciliation of an ordered list of trees; trees[0] is the baseline.

    duplicates: digest -> every path (across all trees) sharing it, only when 2+
    unique: paths whose digest occurs exactly once
    missing: tree root -> root-relative paths novel relative to all earlier trees
    """
    trees: List[Tree] = field(default_factory=list)
    duplicates: Dict[str, List[str]] = field(default_factory=dict)
    unique: List[str] = field(default_factory=list)
    missing: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def baseline(self) -> Optional[Tree]:
        return self.trees[0] if self.trees else None

    @property
    def missing_count(self) -> int:
        return sum(len(paths) for paths in self.missing.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "trees": [t.to_dict() for t in self.trees],
            "duplicates": {h: list(paths) for h, paths in self.duplicates.items()},
            "unique": list(self.unique),
            "missing": {root: list(paths) for root, paths in self.missing.items()},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Analysis":
        return cls(
            trees=[Tree.from_dict(t) for t in data.get("trees") or []],
            duplicates={h: list(paths) for h, paths in (data.get("duplicates") or {}).items()},
            unique=list(data.get("unique") or []),
            missing={root: list(paths) for root, paths in (data.get("missing") or {}).items()},
        )

    def __repr__(self):
        return (f"<Analysis trees={len(self.trees)}, unique={len(self.unique)}, "
                f"duplicates={len(self.duplicates)}, missing={self.missing_count}>")


@dataclass
class BackupResult:
    """Outcome of copying one missing file into the baseline root."""
    source: str
    destination: Optional[str]
    status: BackupStatus
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == BackupStatus.COPIED


"""
DTO for scan parameters with built-in validation.
Interface-agnostic: used by the CLI and by library callers.
"""

@dataclass
class ScanParams:
    """Parameters for a reconciliation run with validation."""
    roots: List[str]
    include_hidden: bool = False
    algorithm: HashAlgorithmName = HashAlgorithmName.SHA1
    workers: int = 1

    def __post_init__(self):
        """Validate parameters immediately after creation."""
        if not self.roots:
            raise ValueError("At least one root directory is required")

        cleaned = [r.strip() for r in self.roots if r and r.strip()]
        if len(cleaned) != len(self.roots):
            raise ValueError("Root directory cannot be empty")
        self.roots = cleaned

        if self.workers < 1:
            raise ValueError("Worker count must be at least 1")

        if not isinstance(self.algorithm, HashAlgorithmName):
            self.algorithm = HashAlgorithmName(self.algorithm)

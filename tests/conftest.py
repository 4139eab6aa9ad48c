"""
Shared fixtures for reconciliation tests.
Creates isolated temporary directory trees with controlled test files.
"""
import pytest
import tempfile
from pathlib import Path
from typing import Dict, Callable
import sys

# Add src/ to sys.path so the 'treerings' package is importable without installation
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from treerings.core.models import Node, Tree


@pytest.fixture
def temp_dir():
    """Creates isolated temporary directory, auto-cleanup after test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def write_file() -> Callable[[Path, str, bytes], Path]:
    """Returns a helper that writes `content` to root/relative, creating parent directories."""
    def _write(root: Path, relative: str, content: bytes) -> Path:
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return path
    return _write


@pytest.fixture
def test_trees(temp_dir, write_file) -> Dict[str, Path]:
    """
    Creates two roots for reconciliation scenarios:
    - baseline/: a.txt, b.txt, docs/report.pdf, .git/config (hidden)
    - laptop/:   a_copy.txt (same as a.txt), c.txt (new), docs/report.pdf (same as baseline),
                 photos/d.jpg and photos/d_again.jpg (new, identical to each other)
    """
    baseline = temp_dir / "baseline"
    laptop = temp_dir / "laptop"
    baseline.mkdir()
    laptop.mkdir()

    files = {"baseline": baseline, "laptop": laptop}

    files["a"] = write_file(baseline, "a.txt", b"A" * 1024)
    files["b"] = write_file(baseline, "b.txt", b"B" * 2048)
    files["report"] = write_file(baseline, "docs/report.pdf", b"%PDF" + b"R" * 4000)
    files["git_config"] = write_file(baseline, ".git/config", b"[core]\n")

    files["a_copy"] = write_file(laptop, "a_copy.txt", b"A" * 1024)
    files["c"] = write_file(laptop, "c.txt", b"C" * 1500)
    files["report_copy"] = write_file(laptop, "docs/report.pdf", b"%PDF" + b"R" * 4000)
    files["d"] = write_file(laptop, "photos/d.jpg", b"\xff\xd8" + b"D" * 3000)
    files["d_again"] = write_file(laptop, "photos/d_again.jpg", b"\xff\xd8" + b"D" * 3000)

    return files


def make_tree(root: str, prints: Dict[str, str]) -> Tree:
    """Builds a consistent Tree from {path: fingerprint} without touching the filesystem."""
    tree = Tree(root=root)
    for path, fingerprint in prints.items():
        tree.add_node(Node(name=Path(path).name, path=path, fingerprint=fingerprint, size=1))
    return tree

"""
Unit tests for TreeAnalyzerImpl.
Verifies unique/duplicate classification, cumulative missing detection and the
consistency check on input trees.
"""
import itertools

import pytest

from conftest import make_tree
from treerings.core.analyzer import TreeAnalyzerImpl
from treerings.core.models import Node, Tree
from treerings.core.scanner import TreeScannerImpl


def all_paths(trees):
    return [p for tree in trees for paths in tree.fingerprints.values() for p in paths]


class TestTreeAnalyzerImpl:
    """Test classification across baseline and later trees."""

    def test_two_trees_with_shared_and_new_files(self):
        """Baseline {A, B} vs laptop {A', C}: A/A' duplicate, B and C unique, C missing."""
        baseline = make_tree("/base", {"/base/a": "h1", "/base/b": "h2"})
        laptop = make_tree("/laptop", {"/laptop/a_copy": "h1", "/laptop/c": "h3"})

        analysis = TreeAnalyzerImpl().analyze([baseline, laptop])

        assert analysis.duplicates == {"h1": ["/base/a", "/laptop/a_copy"]}
        assert sorted(analysis.unique) == ["/base/b", "/laptop/c"]
        assert analysis.missing == {"/laptop": ["c"]}
        assert analysis.trees == [baseline, laptop]

    def test_baseline_is_never_missing(self):
        baseline = make_tree("/base", {"/base/only_here": "h1"})

        analysis = TreeAnalyzerImpl().analyze([baseline])

        assert analysis.missing == {}
        assert analysis.unique == ["/base/only_here"]

    def test_missing_is_cumulative_across_trees(self):
        """A file already contributed by an earlier non-baseline tree is not missing again."""
        baseline = make_tree("/t0", {"/t0/x": "h0"})
        second = make_tree("/t1", {"/t1/new": "h1"})
        third = make_tree("/t2", {"/t2/same_new": "h1", "/t2/newer": "h2"})

        analysis = TreeAnalyzerImpl().analyze([baseline, second, third])

        assert analysis.missing == {"/t1": ["new"], "/t2": ["newer"]}
        assert analysis.duplicates == {"h1": ["/t1/new", "/t2/same_new"]}

    def test_roots_with_nothing_missing_are_omitted(self):
        baseline = make_tree("/base", {"/base/a": "h1"})
        mirror = make_tree("/mirror", {"/mirror/a": "h1"})

        analysis = TreeAnalyzerImpl().analyze([baseline, mirror])

        assert "/mirror" not in analysis.missing
        assert analysis.missing_count == 0

    def test_duplicates_inside_one_new_tree_report_first_path_only(self):
        later = make_tree("/laptop", {
            "/laptop/photos/d.jpg": "hd",
            "/laptop/photos/d_again.jpg": "hd",
        })

        analysis = TreeAnalyzerImpl().analyze([make_tree("/base", {}), later])

        assert analysis.missing == {"/laptop": ["photos/d.jpg"]}
        assert analysis.duplicates == {"hd": ["/laptop/photos/d.jpg", "/laptop/photos/d_again.jpg"]}
        assert analysis.unique == []

    def test_duplicate_groups_span_trees(self):
        trees = [
            make_tree("/a", {"/a/1": "h", "/a/2": "h"}),
            make_tree("/b", {"/b/1": "h"}),
            make_tree("/c", {"/c/1": "h"}),
        ]

        analysis = TreeAnalyzerImpl().analyze(trees)

        assert sorted(analysis.duplicates["h"]) == ["/a/1", "/a/2", "/b/1", "/c/1"]

    def test_every_path_is_unique_or_duplicated_exactly_once(self):
        trees = [
            make_tree("/a", {"/a/1": "h1", "/a/2": "h2", "/a/3": "h2"}),
            make_tree("/b", {"/b/1": "h1", "/b/4": "h4"}),
            make_tree("/c", {"/c/5": "h5", "/c/2": "h2"}),
        ]

        analysis = TreeAnalyzerImpl().analyze(trees)

        classified = list(analysis.unique) + [p for g in analysis.duplicates.values() for p in g]
        assert sorted(classified) == sorted(all_paths(trees))
        assert all(len(group) >= 2 for group in analysis.duplicates.values())

    def test_unique_and_duplicates_do_not_depend_on_tree_order(self):
        trees = [
            make_tree("/a", {"/a/1": "h1", "/a/2": "h2"}),
            make_tree("/b", {"/b/1": "h1", "/b/3": "h3"}),
            make_tree("/c", {"/c/3": "h3", "/c/4": "h4"}),
        ]
        reference = TreeAnalyzerImpl().analyze(trees)

        for order in itertools.permutations(trees):
            analysis = TreeAnalyzerImpl().analyze(list(order))
            assert sorted(analysis.unique) == sorted(reference.unique)
            assert {h: sorted(g) for h, g in analysis.duplicates.items()} == \
                {h: sorted(g) for h, g in reference.duplicates.items()}

    def test_empty_input_yields_empty_analysis(self):
        analysis = TreeAnalyzerImpl().analyze([])

        assert analysis.trees == []
        assert analysis.unique == []
        assert analysis.duplicates == {}
        assert analysis.missing == {}
        assert analysis.baseline is None

    def test_directory_nodes_are_not_classified(self):
        tree = make_tree("/base", {"/base/f": "h1"})
        tree.add_node(Node(name="sub", is_dir=True, path="/base/sub"))

        analysis = TreeAnalyzerImpl().analyze([tree])

        assert analysis.unique == ["/base/f"]


class TestConsistencyCheck:
    """Inconsistent trees are rejected, never silently classified."""

    def test_path_without_node_raises(self):
        tree = Tree(root="/base", fingerprints={"h1": ["/base/ghost"]})

        with pytest.raises(RuntimeError, match="ghost"):
            TreeAnalyzerImpl().analyze([tree])

    def test_node_with_other_fingerprint_raises(self):
        tree = make_tree("/base", {"/base/a": "h1"})
        tree.fingerprints["h2"] = ["/base/a"]

        with pytest.raises(RuntimeError):
            TreeAnalyzerImpl().analyze([tree])

    def test_empty_path_list_raises(self):
        tree = Tree(root="/base", fingerprints={"h1": []})

        with pytest.raises(RuntimeError, match="no paths"):
            TreeAnalyzerImpl().analyze([tree])


class TestAnalyzeScannedTrees:
    """End-to-end classification of real directory trees."""

    def test_reconciles_baseline_and_laptop(self, test_trees):
        scanner = TreeScannerImpl()
        baseline = scanner.scan(str(test_trees["baseline"]))
        laptop = scanner.scan(str(test_trees["laptop"]))

        analysis = TreeAnalyzerImpl().analyze([baseline, laptop])

        assert list(analysis.missing) == [str(test_trees["laptop"])]
        missing = sorted(analysis.missing[str(test_trees["laptop"])])
        # Which of the two identical photos is reported depends on directory listing order
        assert missing[0] == "c.txt"
        assert missing[1:] in (["photos/d.jpg"], ["photos/d_again.jpg"])
        assert sorted(analysis.unique) == sorted([str(test_trees["b"]), str(test_trees["c"])])
        groups = sorted(sorted(g) for g in analysis.duplicates.values())
        assert groups == sorted([
            sorted([str(test_trees["a"]), str(test_trees["a_copy"])]),
            sorted([str(test_trees["report"]), str(test_trees["report_copy"])]),
            sorted([str(test_trees["d"]), str(test_trees["d_again"])]),
        ])

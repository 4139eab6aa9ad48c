#!/usr/bin/env python3
"""
treerings CLI — Command line interface for multi-root file reconciliation.
Scans one or more roots, reports unique, duplicated and missing files, writes the
analysis document and optionally copies missing files into the first root.
Backups never overwrite: a taken name gets a numeric suffix instead.
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import sys
import os
import time
from pathlib import Path
from typing import Dict, List, Optional, NoReturn
import logging

logging.basicConfig(
    level=logging.ERROR,
    format="%(levelname)-8s | %(name)-25s | %(message)s"
)

# === EARLY DEPENDENCY VALIDATION ===
_MISSING_DEPS = []
try:
    from send2trash import send2trash
except ImportError:
    _MISSING_DEPS.append("send2trash")

try:
    import xxhash
except ImportError:
    _MISSING_DEPS.append("xxhash")

if _MISSING_DEPS:
    print("❌ Missing required dependencies:", file=sys.stderr)
    print(f"   pip install {' '.join(_MISSING_DEPS)}", file=sys.stderr)
    sys.exit(1)

# === NORMAL IMPORTS (after validation) ===
from treerings.core.models import Analysis, BackupResult, BackupStatus, Node, ScanParams, Tree
from treerings.commands import ReconcileCommand
from treerings.services.analysis_store import AnalysisStore
from treerings.utils.convert_utils import ConvertUtils
from treerings.aliases import ALGORITHM_ALIASES, ALGORITHM_CHOICES, ALGORITHM_HELP_TEXT, EPILOG_TEXT


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False

        # Fix encoding for Windows consoles to prevent UnicodeEncodeError
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding='utf-8')
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding='utf-8')

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(
            prog="treerings",
            description="treerings — find unique, duplicated and missing files across directory trees",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        parser.add_argument(
            "roots",
            nargs="+",
            metavar="ROOT",
            help="Directories to scan. The first one is the baseline that others are compared against"
        )

        # Scan options
        parser.add_argument(
            "--include-hidden", "-H",
            action="store_true",
            dest="include_hidden",
            help="Also scan dot-prefixed files and directories"
        )
        parser.add_argument(
            "--algorithm", "-a",
            choices=ALGORITHM_CHOICES,
            default="sha1",
            type=str,
            help=ALGORITHM_HELP_TEXT
        )
        parser.add_argument(
            "--workers", "-w",
            default=1,
            type=int,
            metavar='',
            help="Number of roots scanned in parallel. Default: 1"
        )
        parser.add_argument(
            "--cache", "-c",
            default=None,
            type=str,
            metavar='',
            help="Analysis document of an earlier run; unchanged files are not read again"
        )

        # Output options
        parser.add_argument(
            "--output", "-o",
            default=AnalysisStore.DEFAULT_FILENAME,
            type=str,
            metavar='',
            help=f"Where to write the analysis document. Default: {AnalysisStore.DEFAULT_FILENAME}"
        )

        # Actions
        parser.add_argument(
            "--backup",
            action="store_true",
            help="Copy missing files into the first root. Existing files are never overwritten"
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            dest="dry_run",
            help="With --backup: only show where files would be copied"
        )

        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress non-essential output"
        )
        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Show per-file details and debug logging"
        )

        return parser.parse_args(args)

    def validate_args(self, args: argparse.Namespace) -> None:
        """Validate command-line arguments before execution."""
        if args.dry_run and not args.backup:
            self.error_exit("--dry-run can only be used with --backup")

        if args.workers < 1:
            self.error_exit("--workers must be at least 1")

        for root in args.roots:
            if not Path(root).exists():
                self.error_exit(f"Path not found: {root}")

        if args.backup and not Path(args.roots[0]).is_dir():
            self.error_exit(f"Baseline is not a directory: {args.roots[0]}")

        if args.cache and not AnalysisStore.exists(args.cache):
            self.warning(f"Cache file not found, scanning from scratch: {args.cache}")

    def create_params(self, args: argparse.Namespace) -> ScanParams:
        """Create ScanParams from CLI arguments."""
        try:
            return ScanParams(
                roots=[str(Path(root).absolute()) for root in args.roots],
                include_hidden=args.include_hidden,
                algorithm=ALGORITHM_ALIASES[args.algorithm],
                workers=args.workers,
            )
        except ValueError as e:
            self.error_exit(f"Parameter error: {e}")

    def load_cache(self, path: Optional[str]) -> Dict[str, Tree]:
        """Trees of an earlier run, keyed by root. A broken cache only costs a full rescan."""
        if not path or not AnalysisStore.exists(path):
            return {}
        try:
            return AnalysisStore.trees_by_root(AnalysisStore.load(path))
        except (OSError, ValueError) as e:
            self.warning(f"Ignoring cache {path}: {e}")
            return {}

    def progress_callback(self, stage: str, current: int, total: Optional[int]) -> None:
        """CLI progress callback - shows progress in console."""
        if not self.verbose:
            return

        if total and total > 0:
            percent = (current / total) * 100
            sys.stderr.write(f"\r  [{stage}] {current}/{total} ({percent:.1f}%)")
        else:
            sys.stderr.write(f"\r  [{stage}] {current} files processed...")
        sys.stderr.flush()

    def run_reconcile(self, params: ScanParams, prior: Dict[str, Tree]) -> Analysis:
        """Execute scan + analysis workflow."""
        command = ReconcileCommand()
        try:
            analysis = command.execute(
                params,
                prior=prior,
                progress_callback=self.progress_callback if self.verbose else None
            )
        except (OSError, ValueError, RuntimeError) as e:
            self.error_exit(f"Analysis failed: {e}")

        if self.verbose:
            sys.stderr.write("\n")
        return analysis

    def output_results(self, analysis: Analysis, params: ScanParams) -> None:
        """Print the analysis summary; per-file details with --verbose."""
        if self.quiet:
            return

        if self.verbose:
            self.output_details(analysis)

        print("\n\n======== ANALYSIS ========\n")
        if params.include_hidden:
            print("  Hidden files were included in this analysis.")
        else:
            print("  Hidden files were NOT included in this analysis.")
        print(f"  Unique files: {len(analysis.unique)}")
        print(f"  Duplicated files: {len(analysis.duplicates)}")
        print(f"  Missing* files: {analysis.missing_count}")
        print("\n  *files not found in first tree, but present in one or more subsequent trees.")
        print("\n==========================\n")

    @staticmethod
    def output_details(analysis: Analysis) -> None:
        """Duplicate groups and missing files, sorted for stable output."""
        nodes = {}
        for tree in analysis.trees:
            nodes.update(tree.nodes)

        for idx, (digest, paths) in enumerate(sorted(analysis.duplicates.items()), 1):
            size = nodes[paths[0]].size if paths[0] in nodes else 0
            print(f"\n📁 Group {idx} | {ConvertUtils.short_fingerprint(digest)} | "
                  f"Size: {ConvertUtils.bytes_to_human(size)} | Files: {len(paths)}")
            for path in sorted(paths):
                print(f"   {CLIApplication._modified(nodes, path)}  {path}")

        for root, paths in sorted(analysis.missing.items()):
            print(f"\n🔎 Missing from earlier trees, found in {root}:")
            for path in sorted(paths):
                print(f"   {CLIApplication._modified(nodes, os.path.join(root, path))}  {path}")

    @staticmethod
    def _modified(nodes: Dict[str, Node], path: str) -> str:
        node = nodes.get(path)
        return ConvertUtils.millis_to_human(node.modified) if node else "????-??-?? ??:??:??"

    def execute_backup(self, analysis: Analysis, dry_run: bool = False) -> List[BackupResult]:
        """Copy missing files into the baseline, reporting each failure and continuing."""
        if not analysis.missing:
            if not self.quiet:
                print("No missing files to back up.")
            return []

        baseline = analysis.baseline.root
        if not self.quiet:
            action = "Would copy" if dry_run else "Backing up"
            print(f"{action} {analysis.missing_count} missing files to {baseline}")

        try:
            results = ReconcileCommand.backup(analysis, dry_run=dry_run)
        except KeyboardInterrupt:
            print("\n⚠️  Operation cancelled by user (Ctrl+C)")
            sys.exit(130)

        for result in results:
            if result.status == BackupStatus.FAILED:
                self.warning(f"Couldn't backup {result.source}: {result.error}")
            elif result.status == BackupStatus.SKIPPED:
                self.warning(f"Skipped {result.source}: {result.error}")
            elif self.verbose or dry_run:
                print(f"cp {result.source}\n  to: {result.destination}")

        if not self.quiet and not dry_run:
            copied = sum(1 for r in results if r.ok)
            failed = [r for r in results if not r.ok]
            if failed:
                print(f"\n⚠️  Partial success: {copied}/{len(results)} files copied.")
                for result in failed[:5]:
                    print(f"  • {os.path.basename(result.source)}: {result.error}")
                if len(failed) > 5:
                    print(f"  ...and {len(failed) - 5} more files")
            else:
                print(f"✅ Successfully copied {copied} files to {baseline}.")
        return results

    def save_analysis(self, analysis: Analysis, path: str) -> None:
        if not self.quiet:
            print(f"Writing out {path}")
        try:
            AnalysisStore.save(analysis, path)
        except OSError as e:
            self.error_exit(f"Error writing analysis document: {e}")

    def warning(self, message: str) -> None:
        """Print a warning message to stderr."""
        if not self.quiet:
            print(f"⚠️  {message}", file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"❌ Error: {message}", file=sys.stderr)
        sys.exit(code)

    def run(self, argv=None) -> None:
        """Main entry point with conditional output behavior."""
        args = self.parse_args(argv)
        self.verbose = args.verbose
        self.quiet = args.quiet
        if self.verbose:
            logging.getLogger("treerings").setLevel(logging.DEBUG)

        self.validate_args(args)
        params = self.create_params(args)
        prior = self.load_cache(args.cache)

        if not self.quiet:
            print(f"Analyzing {len(params.roots)} trees ...")

        analysis = self.run_reconcile(params, prior)
        self.output_results(analysis, params)
        self.save_analysis(analysis, args.output)

        if args.backup:
            self.execute_backup(analysis, dry_run=args.dry_run)

        elapsed = time.time() - self.start_time
        if self.verbose:
            print(f"\n✅ Completed in {elapsed:.2f} seconds")


def main() -> None:
    """Application entry point."""
    app = CLIApplication()
    try:
        app.run()
    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user (Ctrl+C)")
        sys.exit(130)
    except Exception as e:
        if os.environ.get("DEBUG"):
            raise
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()

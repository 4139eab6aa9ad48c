"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

services/analysis_store.py
Reads and writes the analysis document (treerings.json).
Transient node flags are not part of the document.
"""
import json
import logging
from pathlib import Path
from typing import Dict

from treerings.core.models import Analysis, Tree

logger = logging.getLogger(__name__)


class AnalysisStore:
    DEFAULT_FILENAME = "treerings.json"

    @staticmethod
    def save(analysis: Analysis, path: str) -> None:
        logger.debug(f"Writing out {path}")
        with open(path, "w", encoding="utf-8") as f:
            json.dump(analysis.to_dict(), f, indent=2, ensure_ascii=False)

    @staticmethod
    def load(path: str) -> Analysis:
        """
        Raises:
            FileNotFoundError: if the document does not exist
            ValueError: if it is not a valid analysis document
        """
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid analysis document {path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Invalid analysis document {path}: expected an object")
        try:
            return Analysis.from_dict(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise ValueError(f"Invalid analysis document {path}: {e}") from e

    @staticmethod
    def trees_by_root(analysis: Analysis) -> Dict[str, Tree]:
        """Indexes the trees of a stored analysis for use as rescan hints."""
        return {tree.root: tree for tree in analysis.trees}

    @staticmethod
    def exists(path: str) -> bool:
        return Path(path).is_file()

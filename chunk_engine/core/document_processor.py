"""Load markdown/text files into Documents ready for splitting."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from chunk_engine.core.models import Document
from chunk_engine.utils.metadata_utils import stringify_metadata

logger = logging.getLogger(__name__)

DEFAULT_PATTERNS = ("*.md", "*.txt")


class DocumentProcessor:
    """Read documents from a single file or a folder of files."""

    def __init__(self, mode: str = "folder", patterns: tuple[str, ...] = DEFAULT_PATTERNS):
        """Initialize processor.

        Args:
            mode: 'folder' or 'file'
            patterns: Glob patterns matched recursively in folder mode
        """
        if mode not in ("folder", "file"):
            raise ValueError(f"Unknown mode: {mode}")
        self.mode = mode
        self.patterns = patterns
        logger.info("DocumentProcessor initialized in %s mode", mode)

    def process(self, source: str, max_files: int | None = None) -> list[Document]:
        if self.mode == "file":
            return [self.load_file(Path(source))]
        return self._process_folder(source, max_files=max_files)

    def load_file(self, file_path: Path, root: Path | None = None) -> Document:
        """Parse one file; YAML frontmatter becomes metadata."""
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        content, fm = self._parse_with_frontmatter(file_path)
        meta: dict[str, Any] = {
            "source_file": str(file_path),
            "title": fm.get("title") or file_path.stem,
        }
        if root is not None:
            meta["relative_path"] = file_path.relative_to(root).as_posix()
        for key, value in fm.items():
            # Canonical keys win over frontmatter
            meta.setdefault(key, value)
        return Document(content, stringify_metadata(meta))

    def _process_folder(self, folder_path: str, max_files: int | None = None) -> list[Document]:
        folder = Path(folder_path)
        if not folder.exists():
            raise FileNotFoundError(f"Folder not found: {folder_path}")

        files = sorted({p for pattern in self.patterns for p in folder.rglob(pattern) if p.is_file()})
        if max_files is not None and max_files >= 0:
            files = files[:max_files]
        logger.info("Found %d files in %s", len(files), folder_path)

        documents: list[Document] = []
        for file in files:
            try:
                documents.append(self.load_file(file, root=folder))
            except (OSError, UnicodeDecodeError) as exc:
                logger.error("Failed to process %s: %s", file, exc)
                continue

        logger.info("Successfully processed %d documents", len(documents))
        return documents

    def _parse_with_frontmatter(self, file_path: Path) -> tuple[str, dict[str, Any]]:
        """Parse a file with optional YAML frontmatter."""
        content = file_path.read_text(encoding="utf-8")

        if content.startswith("---"):
            parts = content.split("---", 2)
            if len(parts) >= 3:
                try:
                    frontmatter = yaml.safe_load(parts[1])
                    if isinstance(frontmatter, dict):
                        return parts[2].lstrip("\n"), frontmatter
                except yaml.YAMLError as exc:
                    logger.warning("Failed to parse frontmatter in %s: %s", file_path, exc)

        return content, {}

"""Discovery of variable declarations in Terraform sources."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import hcl2

from tgscaffold.core.errors import ScanError
from tgscaffold.core.logger import get_logger

logger = get_logger(__name__)

VARIABLE_BLOCK = "variable"


@dataclass
class SkippedFile:
    """A file the scanner could not use."""
    path: Path
    reason: str
    kind: str  # "read" or "parse"


@dataclass
class ScanResult:
    """Variables discovered under a directory, plus files that were skipped."""
    variables: List[str] = field(default_factory=list)
    skipped: List[SkippedFile] = field(default_factory=list)


class DeclarationScanner:
    """Collects `variable` block names from every matching file under a root."""

    def __init__(self, extension: str = ".tf"):
        self.extension = extension

    def scan(self, root: Path) -> ScanResult:
        """Scan root recursively.

        Args:
            root: Directory to walk

        Returns:
            ScanResult with deduplicated variable names in first-seen order

        Raises:
            ScanError: If the directory walk itself fails
        """
        root = Path(root)
        result = ScanResult()
        seen = set()

        for path in self.list_files(root):
            try:
                content = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.error(f"Error reading file {path}: {e}")
                result.skipped.append(SkippedFile(path=path, reason=str(e), kind="read"))
                continue

            try:
                document = hcl2.loads(content)
            except Exception as e:
                logger.warning(f"Failed to parse HCL in file {path}: {e}")
                result.skipped.append(SkippedFile(path=path, reason=str(e), kind="parse"))
                continue

            for name in extract_variable_names(document):
                if name in seen:
                    logger.debug(f"Variable '{name}' already discovered, skipping duplicate in {path}")
                    continue
                seen.add(name)
                result.variables.append(name)

        logger.debug(
            f"Discovered {len(result.variables)} variables under {root} "
            f"({len(result.skipped)} files skipped)"
        )
        return result

    def list_files(self, root: Path) -> List[Path]:
        """Return every file under root with the scanned extension.

        Directories and files are visited in sorted order so the result only
        depends on what is on disk.

        Raises:
            ScanError: If any directory cannot be listed
        """
        def _fail(error: OSError):
            raise ScanError(f"Failed to walk directory {root}", cause=error) from error

        files = []
        for dirpath, dirnames, filenames in os.walk(root, onerror=_fail):
            dirnames.sort()
            for filename in sorted(filenames):
                if os.path.splitext(filename)[1] == self.extension:
                    files.append(Path(dirpath) / filename)
        return files


def extract_variable_names(document: Dict[str, Any]) -> List[str]:
    """Pull the label of each top-level variable block out of a parsed document."""
    names = []
    for block in document.get(VARIABLE_BLOCK, []) or []:
        if not isinstance(block, dict):
            continue
        for label in block:
            name = _unquote(label)
            if name:
                names.append(name)
    return names


def _unquote(label: Any) -> Optional[str]:
    # Newer python-hcl2 releases keep the quotes around block labels
    if not isinstance(label, str) or label.startswith("__"):
        return None
    if len(label) >= 2 and label[0] == label[-1] == '"':
        label = label[1:-1]
    return label.strip() or None

"""Canonical formatting for HCL configuration files.

Each file is piped through `terraform fmt -`, which formats any HCL read from
stdin. `terraform fmt -recursive` only picks up .tf and .tfvars files, so it
would never touch terragrunt.hcl.
"""
import os
import subprocess
from pathlib import Path
from typing import Iterable, List, Optional, Union

from tgscaffold.core.logger import get_logger

logger = get_logger(__name__)

SKIP_DIRS = {".git", ".terraform", ".terragrunt-cache"}


class HclFormatError(Exception):
    """Raised when terraform fmt rejects a file or cannot be run."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path


def format_hcl(
    source: str,
    path: Optional[Path] = None,
    terraform_bin: str = "terraform",
    timeout: int = 60,
) -> str:
    """Return source in canonical style.

    Raises:
        HclFormatError: If terraform is missing, times out, or reports a syntax error
    """
    try:
        result = subprocess.run(
            [terraform_bin, "fmt", "-no-color", "-"],
            input=source,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except FileNotFoundError as e:
        raise HclFormatError(f"{terraform_bin} not found. Please install Terraform first.", path) from e
    except subprocess.TimeoutExpired as e:
        raise HclFormatError(f"terraform fmt timed out after {timeout}s", path) from e

    if result.returncode != 0:
        raise HclFormatError(
            result.stderr.strip() or f"terraform fmt exited with status {result.returncode}",
            path,
        )
    return result.stdout


class HclFormatter:
    """Formats every matching file below a directory."""

    def __init__(
        self,
        extension: str = ".hcl",
        exclude_dirs: Iterable[str] = (),
        terraform_bin: str = "terraform",
        timeout: int = 60,
    ):
        self.extension = extension
        self.exclude_dirs = SKIP_DIRS | set(exclude_dirs)
        self.terraform_bin = terraform_bin
        self.timeout = timeout

    def list_files(self, directory: Path) -> List[Path]:
        """Files the formatter would touch, in sorted order."""
        files = []
        for dirpath, dirnames, filenames in os.walk(directory):
            dirnames[:] = sorted(d for d in dirnames if d not in self.exclude_dirs)
            for filename in sorted(filenames):
                if filename.endswith(self.extension):
                    files.append(Path(dirpath) / filename)
        return files

    def format_file(self, path: Union[str, Path], check: bool = False) -> bool:
        """Format one file in place. Returns True if its content changed (or would change)."""
        path = Path(path)
        original = path.read_text(encoding="utf-8")
        formatted = format_hcl(original, path, self.terraform_bin, self.timeout)
        if formatted == original:
            return False
        if not check:
            path.write_text(formatted, encoding="utf-8")
            logger.debug(f"Formatted {path}")
        return True

    def format_directory(self, directory: Union[str, Path], check: bool = False) -> List[Path]:
        """Format every matching file below directory.

        Args:
            directory: Root directory
            check: Only report files that would change

        Returns:
            Files that were (or would be) rewritten

        Raises:
            HclFormatError: If terraform fmt fails on a file
            OSError: If a file cannot be read or written
        """
        changed = []
        for path in self.list_files(Path(directory)):
            if self.format_file(path, check=check):
                changed.append(path)
        return changed

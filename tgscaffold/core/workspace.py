"""Per-run workspace: the destination directory plus scoped temp dirs."""
import shutil
import tempfile
from pathlib import Path
from typing import List, Optional, Union

from tgscaffold.core.logger import get_logger

logger = get_logger(__name__)


class Workspace:
    """Destination of a scaffolding run and owner of its temporary directories.

    Temporary directories handed out by temp_dir() live until close() is
    called. Used as a context manager, they are removed on every exit path.
    The destination itself is never removed.
    """

    def __init__(self, destination: Union[str, Path]):
        self.destination = Path(destination).expanduser().resolve()
        self._temp_dirs: List[Path] = []
        self._closed = False

    def __enter__(self) -> "Workspace":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self) -> str:
        return f"Workspace(destination={str(self.destination)!r})"

    @property
    def temp_dirs(self) -> List[Path]:
        """Temporary directories created so far (still on disk until close())."""
        return list(self._temp_dirs)

    def temp_dir(self, purpose: str = "scaffold") -> Path:
        """Create a fresh temporary directory owned by this workspace.

        Raises:
            RuntimeError: If the workspace was already closed
            OSError: If the directory cannot be created
        """
        if self._closed:
            raise RuntimeError("Workspace is closed")
        path = Path(tempfile.mkdtemp(prefix=f"tgscaffold-{purpose}-"))
        self._temp_dirs.append(path)
        logger.debug(f"Created temporary directory {path}")
        return path

    def close(self) -> None:
        """Remove every temporary directory. Safe to call more than once."""
        while self._temp_dirs:
            path = self._temp_dirs.pop()
            shutil.rmtree(path, ignore_errors=True)
            logger.debug(f"Removed temporary directory {path}")
        self._closed = True


def is_non_empty_dir(path: Optional[Path]) -> bool:
    """Return True if path is a directory with at least one entry."""
    if path is None or not path.is_dir():
        return False
    return any(path.iterdir())

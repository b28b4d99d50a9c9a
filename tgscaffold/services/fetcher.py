"""Retrieval of module and template sources into a local directory.

Locators follow the go-getter conventions Terraform users already know:

    ./modules/vpc                                   local path
    github.com/org/repo//modules/vpc?ref=v1.2.0     git shorthand
    git::https://example.com/org/repo.git           forced git
    git@github.com:org/repo.git                     scp-style git
    https://example.com/modules/vpc.tar.gz          archive over HTTP
"""
import re
import shutil
import subprocess
import tarfile
import tempfile
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit

import requests

from tgscaffold.core.config import ScaffoldConfig, get_config
from tgscaffold.core.errors import FetchError
from tgscaffold.core.logger import get_logger

logger = get_logger(__name__)

GIT_HOSTS = ("github.com/", "gitlab.com/", "bitbucket.org/")
FORCED_GETTER = re.compile(r"^([A-Za-z0-9]+)::(.+)$")
IGNORED_ENTRIES = (".git",)
MAX_REDIRECTS = 5

# archive format -> tarfile mode (None for zip)
ARCHIVE_FORMATS = {
    "zip": None,
    "tar": "r:",
    "tar.gz": "r:gz",
    "tgz": "r:gz",
    "tar.bz2": "r:bz2",
    "tbz2": "r:bz2",
    "tar.xz": "r:xz",
    "txz": "r:xz",
}


@dataclass(frozen=True)
class SourceLocator:
    """A parsed locator."""
    getter: str  # "file", "git" or "http"
    url: str
    subdir: str = ""
    ref: Optional[str] = None
    archive: Optional[str] = None


def split_subdir(src: str) -> Tuple[str, str]:
    """Split a `//subdir` suffix off a locator, keeping any query string."""
    stop = src.find("?")
    if stop == -1:
        stop = len(src)

    offset = 0
    scheme_end = src.find("://")
    if -1 < scheme_end < stop:
        offset = scheme_end + 3

    idx = src.find("//", offset, stop)
    if idx == -1:
        return src, ""
    return src[:idx] + src[stop:], src[idx + 2:stop].strip("/")


def detect_archive(path: str) -> Optional[str]:
    """Archive format implied by a file name, if any."""
    lowered = path.lower()
    for fmt in sorted(ARCHIVE_FORMATS, key=len, reverse=True):
        if lowered.endswith(f".{fmt}"):
            return fmt
    return None


def parse_locator(locator: str) -> SourceLocator:
    """Parse a locator string into getter, url, subdir, ref and archive format.

    Raises:
        FetchError: If the locator is empty or no getter understands it
    """
    locator = locator.strip()
    if not locator:
        raise FetchError("Empty source locator")

    forced = None
    match = FORCED_GETTER.match(locator)
    if match:
        forced, locator = match.group(1).lower(), match.group(2)

    locator, subdir = split_subdir(locator)

    if forced == "file" or (forced is None and _looks_local(locator)):
        path = locator[len("file://"):] if locator.startswith("file://") else locator
        return SourceLocator(getter="file", url=path, subdir=subdir)

    url, query = _split_query(locator)
    ref = query.pop("ref", None)
    archive = query.pop("archive", None)
    if query:
        url = f"{url}?{urlencode(query)}"

    if forced is None:
        forced = _detect_getter(url)
    if forced == "git":
        if any(url.startswith(host) for host in GIT_HOSTS):
            url = f"https://{url}"
        return SourceLocator(getter="git", url=url, subdir=subdir, ref=ref)
    if forced in ("http", "https"):
        if forced == "https" and not url.startswith(("http://", "https://")):
            url = f"https://{url}"
        return SourceLocator(
            getter="http",
            url=url,
            subdir=subdir,
            archive=archive or detect_archive(urlsplit(url).path),
        )

    raise FetchError(f"Unsupported source locator '{locator}'")


def _looks_local(locator: str) -> bool:
    if locator.startswith(("/", "./", "../", "~", "file://")) or locator in (".", ".."):
        return True
    if "://" in locator or locator.startswith("git@"):
        return False
    return Path(locator).exists()


def _split_query(locator: str) -> Tuple[str, dict]:
    if locator.startswith("git@"):
        base, _, query = locator.partition("?")
        return base, dict(parse_qsl(query))
    parts = urlsplit(locator)
    query = dict(parse_qsl(parts.query))
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", parts.fragment)), query


def _detect_getter(url: str) -> Optional[str]:
    if url.startswith("git@") or any(url.startswith(host) for host in GIT_HOSTS):
        return "git"
    scheme = urlsplit(url).scheme
    if scheme in ("ssh", "git"):
        return "git"
    if scheme in ("http", "https"):
        return "git" if urlsplit(url).path.endswith(".git") else "http"
    return None


class SourceFetcher:
    """Materializes a locator's content into a destination directory."""

    def __init__(self, config: Optional[ScaffoldConfig] = None):
        self.config = config or get_config()

    def fetch(self, locator: str, destination: Path) -> List[Path]:
        """Retrieve locator and copy its content into destination.

        Content is staged in a temporary directory first, so nothing is
        written to destination unless retrieval succeeded.

        Args:
            locator: Source locator
            destination: Directory receiving the content (created if missing)

        Returns:
            Top-level paths copied into destination

        Raises:
            FetchError: If the source cannot be retrieved or copied
        """
        source = parse_locator(locator)
        destination = Path(destination)
        logger.debug(f"Fetching {locator} via {source.getter} getter")

        with tempfile.TemporaryDirectory(prefix="tgscaffold-fetch-") as staging:
            try:
                content = self.retrieve(source, Path(staging) / "source")
                destination.mkdir(parents=True, exist_ok=True)
                return copy_contents(content, destination)
            except FetchError:
                raise
            except OSError as e:
                raise FetchError(f"Failed to fetch {locator}", cause=e) from e

    def retrieve(self, source: SourceLocator, target: Path, depth: int = 0) -> Path:
        """Download source into target and return the directory holding its content."""
        if source.getter == "file":
            self._get_file(source, target)
        elif source.getter == "git":
            self._get_git(source, target)
        else:
            redirect = self._get_http(source, target)
            if redirect is not None:
                if depth >= MAX_REDIRECTS:
                    raise FetchError(f"Too many X-Terraform-Get redirects for {source.url}")
                logger.debug(f"Following X-Terraform-Get from {source.url} to {redirect}")
                target = self.retrieve(parse_locator(redirect), target, depth + 1)

        if not source.subdir:
            return target
        content = target / source.subdir
        if not content.is_dir():
            raise FetchError(f"Subdirectory '{source.subdir}' not found in {source.url}")
        return content

    def _get_file(self, source: SourceLocator, target: Path) -> None:
        path = Path(source.url).expanduser()
        if not path.exists():
            raise FetchError(f"Local source {path} does not exist")

        if path.is_dir():
            shutil.copytree(path, target, ignore=shutil.ignore_patterns(*IGNORED_ENTRIES))
            return

        fmt = detect_archive(path.name)
        target.mkdir(parents=True)
        if fmt:
            extract_archive(path, fmt, target)
        else:
            shutil.copy2(path, target / path.name)

    def _get_git(self, source: SourceLocator, target: Path) -> None:
        cmd = ["git", "clone", "--depth", "1"]
        if source.ref:
            cmd += ["--branch", source.ref]
        success, stderr = self._run_git(cmd + [source.url, str(target)])

        if not success and source.ref:
            # --branch only accepts branches and tags; retry for commit refs
            logger.debug(f"Shallow clone of {source.ref} failed, retrying with full clone")
            shutil.rmtree(target, ignore_errors=True)
            success, stderr = self._run_git(["git", "clone", source.url, str(target)])
            if success:
                success, stderr = self._run_git(
                    ["git", "-C", str(target), "checkout", source.ref]
                )

        if not success:
            raise FetchError(f"Failed to clone {source.url}: {stderr}")

        shutil.rmtree(target / ".git", ignore_errors=True)

    def _run_git(self, cmd: List[str]) -> Tuple[bool, str]:
        """Run a git command and return success and stderr."""
        try:
            subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                check=True,
                timeout=self.config.git_timeout,
            )
            return True, ""
        except subprocess.CalledProcessError as e:
            return False, e.stderr.strip() if e.stderr else str(e)
        except subprocess.TimeoutExpired:
            return False, f"timed out after {self.config.git_timeout}s"
        except FileNotFoundError:
            raise FetchError("Git not found. Please install git first.")

    def _get_http(self, source: SourceLocator, target: Path) -> Optional[str]:
        """Download an HTTP source. Returns the X-Terraform-Get locator if the server sent one."""
        try:
            response = requests.get(source.url, timeout=self.config.http_timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise FetchError(f"Failed to download {source.url}", cause=e) from e

        redirect = response.headers.get("X-Terraform-Get")
        if redirect:
            return urljoin(source.url, redirect)

        if not source.archive:
            raise FetchError(
                f"Unsupported HTTP source {source.url}: not an archive and no X-Terraform-Get header"
            )
        if source.archive not in ARCHIVE_FORMATS:
            raise FetchError(f"Unsupported archive format '{source.archive}'")

        target.mkdir(parents=True)
        archive_path = target.parent / f"download.{source.archive}"
        archive_path.write_bytes(response.content)
        extract_archive(archive_path, source.archive, target)
        return None


def extract_archive(archive_path: Path, fmt: str, target: Path) -> None:
    """Extract a zip or tar archive into target, refusing paths that escape it.

    Raises:
        FetchError: If the archive is corrupt or contains unsafe paths
    """
    mode = ARCHIVE_FORMATS[fmt]
    try:
        if mode is None:
            with zipfile.ZipFile(archive_path) as archive:
                for name in archive.namelist():
                    _ensure_within(target, name)
                archive.extractall(target)
        else:
            with tarfile.open(archive_path, mode) as archive:
                for member in archive.getmembers():
                    _ensure_within(target, member.name)
                    if member.issym() or member.islnk():
                        _ensure_within(target, str(Path(member.name).parent / member.linkname))
                if hasattr(tarfile, "data_filter"):
                    archive.extractall(target, filter="data")
                else:
                    archive.extractall(target)
    except (zipfile.BadZipFile, tarfile.TarError) as e:
        raise FetchError(f"Failed to extract {archive_path.name}", cause=e) from e


def _ensure_within(root: Path, name: str) -> None:
    resolved = (root / name).resolve()
    if resolved != root.resolve() and root.resolve() not in resolved.parents:
        raise FetchError(f"Archive entry '{name}' escapes the extraction directory")


def copy_contents(source: Path, destination: Path) -> List[Path]:
    """Copy every entry of source into destination, merging directories."""
    copied = []
    for entry in sorted(source.iterdir()):
        if entry.name in IGNORED_ENTRIES:
            continue
        target = destination / entry.name
        if entry.is_dir():
            shutil.copytree(
                entry,
                target,
                dirs_exist_ok=True,
                ignore=shutil.ignore_patterns(*IGNORED_ENTRIES),
            )
        else:
            shutil.copy2(entry, target)
        copied.append(target)
    return copied

"""Error taxonomy for the scaffolding pipeline.

Every error names the pipeline step it came from and keeps the underlying
exception, so the CLI can log something meaningful. All of them are fatal
to a run.
"""
from typing import Optional


class ScaffoldError(Exception):
    """Base class for fatal scaffolding failures."""

    step = "scaffold"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"[{self.step}] {self.message}: {self.cause}"
        return f"[{self.step}] {self.message}"


class FetchError(ScaffoldError):
    """Raised when a module or template source cannot be retrieved."""

    step = "fetch"


class ScanError(ScaffoldError):
    """Raised when the directory walk itself fails.

    Unreadable or unparsable files are not errors; they end up in
    ScanResult.skipped instead.
    """

    step = "scan"


class VarParseError(ScaffoldError):
    """Raised for malformed --var assignments or variable files."""

    step = "vars"


class TemplateSetupError(ScaffoldError):
    """Raised when the template source cannot be prepared."""

    step = "template"


class RenderError(ScaffoldError):
    """Raised when the rendering engine fails."""

    step = "render"


class FormatError(ScaffoldError):
    """Raised when reformatting the rendered output fails.

    The rendered files stay on disk, unformatted.
    """

    step = "format"

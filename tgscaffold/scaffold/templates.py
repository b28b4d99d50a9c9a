"""Template resolution: module-authored template directory or synthesized default."""
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional

from tgscaffold.core.config import ScaffoldConfig, get_config
from tgscaffold.core.errors import TemplateSetupError
from tgscaffold.core.logger import get_logger
from tgscaffold.core.workspace import Workspace, is_non_empty_dir

logger = get_logger(__name__)

DEFAULT_TEMPLATE = """\
# This is a Terragrunt module generated by tgscaffold.
terraform {
  # {{ moduleUrl }}
  source = "."
}

inputs = {
{% for input in parsedInputs %}
  {{ input }} = ""
{% endfor %}
}
"""


class TemplateMode(str, Enum):
    """How the template source was obtained."""
    DIRECTORY = "directory"
    DEFAULT = "default"


@dataclass(frozen=True)
class TemplateSource:
    """Directory the renderer reads templates from."""
    path: Path
    mode: TemplateMode

    @property
    def is_default(self) -> bool:
        return self.mode == TemplateMode.DEFAULT


class TemplateResolver:
    """Picks exactly one template source for a run."""

    def __init__(self, workspace: Workspace, config: Optional[ScaffoldConfig] = None):
        self.workspace = workspace
        self.config = config or get_config()

    @property
    def module_template_dir(self) -> Path:
        """Conventional location of a module-authored template."""
        return self.workspace.destination / self.config.boilerplate_dir

    def resolve(self, variables: List[str], template_dir: Optional[Path] = None) -> TemplateSource:
        """Resolve the template source.

        An explicitly fetched template directory wins, then the module's own
        template directory; otherwise the default template is synthesized.
        Nothing is merged between them.

        Args:
            variables: Discovered variable names (used for logging only; the
                default template reads them from the render context)
            template_dir: Directory fetched from a template locator, if any

        Returns:
            The selected TemplateSource

        Raises:
            TemplateSetupError: If the default template cannot be written
        """
        for candidate in (template_dir, self.module_template_dir):
            if is_non_empty_dir(candidate):
                logger.info(f"📐 Using template directory {candidate}")
                return TemplateSource(path=candidate, mode=TemplateMode.DIRECTORY)

        logger.info(f"📐 No template directory found, generating default template for {len(variables)} inputs")
        return self.synthesize_default()

    def synthesize_default(self) -> TemplateSource:
        """Write the default template into a fresh workspace temp directory."""
        try:
            target_dir = self.workspace.temp_dir("template")
            (target_dir / self.config.output_filename).write_text(DEFAULT_TEMPLATE)
        except OSError as e:
            raise TemplateSetupError("Failed to write default template", cause=e) from e
        return TemplateSource(path=target_dir, mode=TemplateMode.DEFAULT)

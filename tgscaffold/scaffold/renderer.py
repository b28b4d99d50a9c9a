"""Jinja2 rendering of template directories into a destination."""
import shutil
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml
from jinja2 import ChainableUndefined, Environment, FileSystemLoader, StrictUndefined
from pydantic import ValidationError

from tgscaffold.core.logger import get_logger
from tgscaffold.models.template_config import TemplateConfig
from tgscaffold.scaffold.templates import TemplateSource

logger = get_logger(__name__)

CONFIG_FILENAME = "boilerplate.yml"
NO_VALUE = "<no value>"


class MissingKeyAction(str, Enum):
    """What to render for a variable the context does not define."""
    INVALID = "invalid"  # visible placeholder
    ZERO = "zero"  # empty string
    ERROR = "error"  # abort rendering


class MissingConfigAction(str, Enum):
    """What to do when a template directory has no boilerplate.yml."""
    IGNORE = "ignore"
    EXIT = "exit"


class TemplateConfigError(Exception):
    """Raised when boilerplate.yml is missing (and required) or invalid."""
    pass


class PlaceholderUndefined(ChainableUndefined):
    """Undefined that renders as a visible placeholder instead of failing."""
    __slots__ = ()

    def __str__(self) -> str:
        return NO_VALUE


_UNDEFINED = {
    MissingKeyAction.INVALID: PlaceholderUndefined,
    MissingKeyAction.ZERO: ChainableUndefined,
    MissingKeyAction.ERROR: StrictUndefined,
}


class TemplateRenderer:
    """Renders every file of a template directory into an output directory."""

    def render(
        self,
        source: Union[TemplateSource, Path],
        output_dir: Path,
        context: Dict[str, Any],
        missing_key: MissingKeyAction = MissingKeyAction.INVALID,
        missing_config: MissingConfigAction = MissingConfigAction.IGNORE,
        non_interactive: bool = True,
    ) -> List[Path]:
        """Render a template directory.

        Template file paths are rendered as well as their contents. Files
        that are not UTF-8 text are copied unchanged.

        Args:
            source: Template source (or plain directory) to render
            output_dir: Directory receiving the rendered files
            context: Variables available to the templates
            missing_key: Policy for undefined variables
            missing_config: Policy for a missing boilerplate.yml
            non_interactive: Must be True; prompting is not supported

        Returns:
            Paths of the written files

        Raises:
            TemplateError: If Jinja2 fails to parse or render a template
            TemplateConfigError: If boilerplate.yml is invalid or required but missing
            OSError: If reading templates or writing output fails
        """
        if not non_interactive:
            raise ValueError("Interactive rendering is not supported")

        template_dir = Path(source.path if isinstance(source, TemplateSource) else source)
        output_dir = Path(output_dir)

        render_context = dict(self.load_config(template_dir, missing_config).defaults())
        render_context.update(context)

        env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            undefined=_UNDEFINED[MissingKeyAction(missing_key)],
            autoescape=False,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )

        written = []
        for template_file in self.list_templates(template_dir):
            written.append(
                self._render_file(env, template_dir, template_file, output_dir, render_context)
            )

        logger.debug(f"Rendered {len(written)} files from {template_dir} into {output_dir}")
        return written

    def load_config(
        self,
        template_dir: Path,
        missing_config: MissingConfigAction = MissingConfigAction.IGNORE,
    ) -> TemplateConfig:
        """Load boilerplate.yml from the template root.

        Returns an empty config when the file is absent and the policy allows it.
        """
        config_path = template_dir / CONFIG_FILENAME
        if not config_path.exists():
            if MissingConfigAction(missing_config) == MissingConfigAction.EXIT:
                raise TemplateConfigError(f"Template config not found at {config_path}")
            return TemplateConfig()

        try:
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
            return TemplateConfig.model_validate(data)
        except (yaml.YAMLError, ValidationError) as e:
            raise TemplateConfigError(f"Invalid template config {config_path}: {e}") from e

    def list_templates(self, template_dir: Path) -> List[Path]:
        """Relative paths of every template file, sorted, config file excluded."""
        templates = []
        for path in sorted(template_dir.rglob("*")):
            if not path.is_file():
                continue
            relative = path.relative_to(template_dir)
            if relative == Path(CONFIG_FILENAME):
                continue
            templates.append(relative)
        return templates

    def _render_file(
        self,
        env: Environment,
        template_dir: Path,
        template_file: Path,
        output_dir: Path,
        context: Dict[str, Any],
    ) -> Path:
        name = template_file.as_posix()
        target = output_dir / self._render_path(env, name, context)
        target.parent.mkdir(parents=True, exist_ok=True)

        try:
            template = env.get_template(name)
        except UnicodeDecodeError:
            logger.debug(f"Copying binary file {name} unchanged")
            shutil.copy2(template_dir / template_file, target)
            return target

        target.write_text(template.render(context))
        shutil.copymode(template_dir / template_file, target)
        return target

    @staticmethod
    def _render_path(env: Environment, name: str, context: Dict[str, Any]) -> str:
        if "{{" not in name and "{%" not in name:
            return name
        return env.from_string(name).render(context) or name

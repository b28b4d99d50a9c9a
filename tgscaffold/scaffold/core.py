"""Core scaffolding pipeline: fetch, scan, resolve template, build context, render, format."""
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Union

from jinja2 import TemplateError

from tgscaffold.core.config import ScaffoldConfig, get_config
from tgscaffold.core.errors import (
    FetchError,
    FormatError,
    RenderError,
    TemplateSetupError,
)
from tgscaffold.core.logger import get_logger
from tgscaffold.core.workspace import Workspace
from tgscaffold.models.module import ModuleReference
from tgscaffold.scaffold.context import ContextBuilder
from tgscaffold.scaffold.renderer import (
    MissingConfigAction,
    MissingKeyAction,
    TemplateConfigError,
    TemplateRenderer,
)
from tgscaffold.scaffold.scanner import DeclarationScanner, SkippedFile
from tgscaffold.scaffold.templates import TemplateResolver, TemplateSource
from tgscaffold.services.fetcher import SourceFetcher
from tgscaffold.services.hclfmt import HclFormatError, HclFormatter

logger = get_logger(__name__)


@dataclass
class ScaffoldResult:
    """What a successful scaffolding run produced."""
    destination: Path
    variables: List[str]
    template: TemplateSource
    rendered: List[Path] = field(default_factory=list)
    formatted: List[Path] = field(default_factory=list)
    skipped: List[SkippedFile] = field(default_factory=list)


class ScaffoldManager:
    """Runs the scaffolding pipeline for one module reference.

    Every collaborator can be swapped out, which is how the tests drive
    the pipeline without network access.
    """

    def __init__(
        self,
        fetcher: Optional[SourceFetcher] = None,
        scanner: Optional[DeclarationScanner] = None,
        renderer: Optional[TemplateRenderer] = None,
        formatter: Optional[HclFormatter] = None,
        context_builder: Optional[ContextBuilder] = None,
        config: Optional[ScaffoldConfig] = None,
    ):
        self.config = config or get_config()
        self.fetcher = fetcher or SourceFetcher(self.config)
        self.scanner = scanner or DeclarationScanner(extension=self.config.variable_extension)
        self.renderer = renderer or TemplateRenderer()
        self.formatter = formatter or HclFormatter(
            extension=self.config.format_extension,
            exclude_dirs=[self.config.boilerplate_dir],
            terraform_bin=self.config.terraform_bin,
            timeout=self.config.fmt_timeout,
        )
        self.context_builder = context_builder or ContextBuilder()

    def scaffold(
        self,
        reference: ModuleReference,
        workspace: Workspace,
        inline_vars: Sequence[str] = (),
        var_files: Sequence[Union[str, Path]] = (),
    ) -> ScaffoldResult:
        """Scaffold a Terragrunt configuration for a module.

        Each step runs once; the first failure ends the run and whatever was
        already written to the destination stays there.

        Args:
            reference: Module (and optional template) locators
            workspace: Destination plus owner of the run's temp directories
            inline_vars: NAME=VALUE assignments for the templates
            var_files: YAML variable files for the templates

        Returns:
            ScaffoldResult describing the generated configuration

        Raises:
            FetchError: Module or template source could not be retrieved
            ScanError: The module directory could not be walked
            TemplateSetupError: The template source could not be prepared
            VarParseError: User variables are malformed
            RenderError: Rendering failed
            FormatError: Formatting failed (rendered files are kept)
        """
        destination = workspace.destination
        sources = " ".join(filter(None, [reference.module_url, reference.template_url]))
        logger.info(f"✨ Scaffolding a new Terragrunt module {sources} to {destination}")

        # Fetch
        self._fetch(reference.module_url, destination)
        template_dir = None
        if reference.template_url:
            template_dir = self._fetch_template(reference.template_url, workspace)
        logger.info(f"📥 Downloaded module source into {destination}")

        # Scan
        scan = self.scanner.scan(destination)
        if scan.skipped:
            logger.warning(f"Skipped {len(scan.skipped)} files while discovering inputs")
        logger.info(f"🔍 Discovered {len(scan.variables)} inputs")

        # Resolve template
        template = TemplateResolver(workspace, self.config).resolve(scan.variables, template_dir)

        # Build context
        context = self.context_builder.build(
            scan.variables,
            reference.module_url,
            inline_vars=inline_vars,
            var_files=var_files,
        )

        # Render
        logger.info(f"🔧 Running template in {destination}")
        try:
            rendered = self.renderer.render(
                template,
                destination,
                context,
                missing_key=MissingKeyAction.INVALID,
                missing_config=MissingConfigAction.IGNORE,
                non_interactive=True,
            )
        except (TemplateError, TemplateConfigError, OSError) as e:
            raise RenderError(f"Failed to render template {template.path}", cause=e) from e

        # Format
        try:
            formatted = self.formatter.format_directory(destination)
        except (HclFormatError, OSError) as e:
            raise FormatError(f"Failed to format {destination}", cause=e) from e
        logger.info(f"📝 Formatted {len(formatted)} files")

        return ScaffoldResult(
            destination=destination,
            variables=scan.variables,
            template=template,
            rendered=rendered,
            formatted=formatted,
            skipped=scan.skipped,
        )

    def _fetch(self, locator: str, destination: Path) -> None:
        try:
            self.fetcher.fetch(locator, destination)
        except FetchError:
            raise
        except OSError as e:
            raise FetchError(f"Failed to fetch {locator}", cause=e) from e

    def _fetch_template(self, locator: str, workspace: Workspace) -> Path:
        try:
            target = workspace.temp_dir("template-source")
        except OSError as e:
            raise TemplateSetupError("Failed to create template directory", cause=e) from e
        self._fetch(locator, target)
        logger.info(f"📥 Downloaded template source {locator}")
        return target


def scaffold_module(
    module_url: str,
    destination: Union[str, Path],
    template_url: Optional[str] = None,
    inline_vars: Sequence[str] = (),
    var_files: Sequence[Union[str, Path]] = (),
    manager: Optional[ScaffoldManager] = None,
) -> ScaffoldResult:
    """Run one scaffolding invocation with a scoped workspace.

    Temporary directories are removed however the run ends.
    """
    try:
        reference = ModuleReference(module_url=module_url, template_url=template_url)
    except ValueError as e:
        raise FetchError(f"Invalid module locator '{module_url}'", cause=e) from e

    manager = manager or ScaffoldManager()
    with Workspace(destination) as workspace:
        return manager.scaffold(reference, workspace, inline_vars=inline_vars, var_files=var_files)


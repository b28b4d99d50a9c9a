#!/usr/bin/env python3
"""tgscaffold CLI - Terragrunt configuration from Terraform modules."""
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from tgscaffold.cli_support import (
    handle_cli_error,
    print_error,
    print_info,
    print_success,
    print_warning,
    setup_logging,
)
from tgscaffold.core.config import get_config
from tgscaffold.core.errors import ScaffoldError, ScanError
from tgscaffold.core.logger import get_logger
from tgscaffold.scaffold.core import scaffold_module
from tgscaffold.scaffold.scanner import DeclarationScanner
from tgscaffold.services.hclfmt import HclFormatError, HclFormatter

app = typer.Typer(
    name="tgscaffold",
    help="""tgscaffold - Terragrunt configuration from Terraform modules

Fetch a module, discover its inputs, write a terragrunt.hcl to fill in.

Quick start:
  tgscaffold scaffold github.com/org/modules//vpc?ref=v1.0.0
  tgscaffold inputs ./modules/vpc
  tgscaffold fmt
""",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)


@app.command()
def scaffold(
    module_url: str = typer.Argument(..., help="Module locator (path, URL, git::..., //subdir, ?ref=)"),
    template_url: Optional[str] = typer.Argument(None, help="Template locator (overrides the module's .boilerplate)"),
    var: Optional[List[str]] = typer.Option(None, "--var", "-v", help="Template variable as NAME=VALUE (repeatable)"),
    var_file: Optional[List[Path]] = typer.Option(None, "--var-file", help="YAML file with template variables (repeatable)"),
    working_dir: Path = typer.Option(Path("."), "--working-dir", "-w", help="Directory to scaffold into"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Also write logs to this file"),
):
    """Scaffold a terragrunt.hcl for a Terraform module."""
    setup_logging(log_file, verbose)

    try:
        result = scaffold_module(
            module_url,
            working_dir,
            template_url=template_url,
            inline_vars=var or [],
            var_files=var_file or [],
        )
    except ScaffoldError as e:
        handle_cli_error(e, console, verbose)
        return

    print_success(console, f"Scaffolded {len(result.rendered)} files in {result.destination}")
    if result.template.is_default:
        print_info(console, f"Inputs stubbed: {', '.join(result.variables) or 'none'}")
    for skipped in result.skipped:
        print_warning(console, f"Skipped {skipped.path} ({skipped.kind} error)")


@app.command()
def inputs(
    path: Path = typer.Argument(Path("."), help="Module directory to scan"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
):
    """List the input variables a local module declares."""
    setup_logging(verbose=verbose)

    scanner = DeclarationScanner(extension=get_config().variable_extension)
    try:
        result = scanner.scan(path)
    except ScanError as e:
        handle_cli_error(e, console, verbose)
        return

    if not result.variables:
        print_info(console, "No input variables found")
    else:
        table = Table(title="Module inputs")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Variable", style="cyan")
        for index, name in enumerate(result.variables, start=1):
            table.add_row(str(index), name)
        console.print(table)

    for skipped in result.skipped:
        print_warning(console, f"Skipped {skipped.path}: {skipped.reason}")


@app.command()
def fmt(
    path: Path = typer.Argument(Path("."), help="Directory to format"),
    check: bool = typer.Option(False, "--check", help="Only report files that need formatting"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
):
    """Rewrite HCL files in canonical style."""
    setup_logging(verbose=verbose)

    config = get_config()
    formatter = HclFormatter(
        extension=config.format_extension,
        exclude_dirs=[config.boilerplate_dir],
        terraform_bin=config.terraform_bin,
        timeout=config.fmt_timeout,
    )
    try:
        changed = formatter.format_directory(path, check=check)
    except (HclFormatError, OSError) as e:
        handle_cli_error(e, console, verbose)
        return

    if check and changed:
        for changed_path in changed:
            print_error(console, f"{changed_path} needs formatting")
        raise typer.Exit(1)

    if changed:
        print_success(console, f"Formatted {len(changed)} files")
    else:
        print_success(console, "Nothing to format")


if __name__ == "__main__":
    app()

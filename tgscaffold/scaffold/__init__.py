"""Terragrunt configuration scaffolding.

Turns a Terraform module locator into a terragrunt.hcl that already lists
the module's inputs.
"""

from .context import ContextBuilder
from .core import ScaffoldManager, ScaffoldResult, scaffold_module
from .renderer import TemplateRenderer
from .scanner import DeclarationScanner, ScanResult
from .templates import TemplateResolver, TemplateSource

__all__ = [
    "ContextBuilder",
    "DeclarationScanner",
    "ScaffoldManager",
    "ScaffoldResult",
    "ScanResult",
    "TemplateRenderer",
    "TemplateResolver",
    "TemplateSource",
    "scaffold_module",
]

"""Data models for tgscaffold."""
from tgscaffold.models.module import ModuleReference
from tgscaffold.models.template_config import TemplateConfig, TemplateVariable

__all__ = [
    'ModuleReference',
    'TemplateConfig',
    'TemplateVariable',
]

"""Models for the optional boilerplate.yml shipped with a template directory."""
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TemplateVariable(BaseModel):
    """A variable a template declares, with an optional default."""

    model_config = ConfigDict(extra='ignore')

    name: str
    description: str = ""
    type: str = "string"
    default: Optional[Any] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        """Variable names must not be blank."""
        v = v.strip()
        if not v:
            raise ValueError("Template variable name must not be empty")
        return v


class TemplateConfig(BaseModel):
    """Contents of boilerplate.yml.

    Unknown top-level sections are tolerated so existing boilerplate
    configs (hooks, dependencies, skip_files) still load.
    """

    model_config = ConfigDict(extra='allow')

    variables: List[TemplateVariable] = Field(default_factory=list)

    def defaults(self) -> dict:
        """Defaults of every variable that declares one."""
        return {var.name: var.default for var in self.variables if var.default is not None}

"""Module reference model built from invocation arguments."""
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator


class ModuleReference(BaseModel):
    """Where a module's source lives, plus an optional template source.

    Locators follow go-getter conventions: local paths, plain URLs,
    `git::` forced sources, `//subdir` and `?ref=` suffixes.
    """

    model_config = ConfigDict(extra='forbid', frozen=True)

    module_url: str
    template_url: Optional[str] = None

    @field_validator('module_url')
    @classmethod
    def validate_module_url(cls, v):
        """Module locator must not be blank."""
        v = v.strip()
        if not v:
            raise ValueError("Module locator must not be empty")
        return v

    @field_validator('template_url')
    @classmethod
    def normalize_template_url(cls, v):
        """Blank template locators mean no template locator."""
        if v is None:
            return None
        v = v.strip()
        return v or None

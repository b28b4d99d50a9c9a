"""tgscaffold runtime configuration and settings."""
import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class ScaffoldConfig:
    """Runtime configuration for scaffolding runs.

    Attributes:
        variable_extension: Extension of files scanned for variable blocks (default: .tf)
        boilerplate_dir: Module subdirectory holding an authored template (default: .boilerplate)
        output_filename: File name of the synthesized default template (default: terragrunt.hcl)
        format_extension: Extension of files rewritten by the formatter (default: .hcl)
        terraform_bin: Executable used for `terraform fmt` (default: terraform)
        http_timeout: Timeout in seconds for HTTP downloads (default: 60)
        git_timeout: Timeout in seconds for git clone/checkout (default: 300)
        fmt_timeout: Timeout in seconds for one `terraform fmt` call (default: 60)
    """

    variable_extension: str = ".tf"
    boilerplate_dir: str = ".boilerplate"
    output_filename: str = "terragrunt.hcl"
    format_extension: str = ".hcl"

    terraform_bin: str = "terraform"

    http_timeout: int = 60
    git_timeout: int = 300  # large monorepos take a while
    fmt_timeout: int = 60

    @classmethod
    def from_env(cls) -> "ScaffoldConfig":
        """Create config from environment variables.

        Environment variables:
            TGSCAFFOLD_VARIABLE_EXTENSION: Extension scanned for variables
            TGSCAFFOLD_BOILERPLATE_DIR: Module template directory name
            TGSCAFFOLD_OUTPUT_FILENAME: Default template file name
            TGSCAFFOLD_FORMAT_EXTENSION: Extension rewritten by the formatter
            TGSCAFFOLD_TERRAFORM_BIN: Terraform executable
            TGSCAFFOLD_HTTP_TIMEOUT: HTTP download timeout in seconds
            TGSCAFFOLD_GIT_TIMEOUT: Git operation timeout in seconds
            TGSCAFFOLD_FMT_TIMEOUT: terraform fmt timeout in seconds

        Returns:
            ScaffoldConfig instance with values from environment or defaults
        """
        return cls(
            variable_extension=os.getenv(
                "TGSCAFFOLD_VARIABLE_EXTENSION", cls.variable_extension
            ),
            boilerplate_dir=os.getenv("TGSCAFFOLD_BOILERPLATE_DIR", cls.boilerplate_dir),
            output_filename=os.getenv("TGSCAFFOLD_OUTPUT_FILENAME", cls.output_filename),
            format_extension=os.getenv(
                "TGSCAFFOLD_FORMAT_EXTENSION", cls.format_extension
            ),
            terraform_bin=os.getenv("TGSCAFFOLD_TERRAFORM_BIN", cls.terraform_bin),
            http_timeout=int(os.getenv("TGSCAFFOLD_HTTP_TIMEOUT", cls.http_timeout)),
            git_timeout=int(os.getenv("TGSCAFFOLD_GIT_TIMEOUT", cls.git_timeout)),
            fmt_timeout=int(os.getenv("TGSCAFFOLD_FMT_TIMEOUT", cls.fmt_timeout)),
        )


# Global config instance (can be overridden)
_config: Optional[ScaffoldConfig] = None


def get_config() -> ScaffoldConfig:
    """Get the global scaffolding configuration.

    Returns:
        ScaffoldConfig instance (creates from environment if not set)
    """
    global _config
    if _config is None:
        _config = ScaffoldConfig.from_env()
    return _config


def set_config(config: Optional[ScaffoldConfig]):
    """Set the global scaffolding configuration.

    Args:
        config: ScaffoldConfig instance to use globally (None re-reads the environment)
    """
    global _config
    _config = config

"""Tests for runtime configuration."""
import pytest

from tgscaffold.core.config import ScaffoldConfig, get_config, set_config


class TestScaffoldConfig:
    """Test defaults and environment overrides."""

    def test_defaults(self, monkeypatch):
        for name in ("VARIABLE_EXTENSION", "BOILERPLATE_DIR", "OUTPUT_FILENAME", "FORMAT_EXTENSION",
                     "TERRAFORM_BIN", "HTTP_TIMEOUT", "GIT_TIMEOUT", "FMT_TIMEOUT"):
            monkeypatch.delenv(f"TGSCAFFOLD_{name}", raising=False)

        config = ScaffoldConfig.from_env()

        assert config.variable_extension == ".tf"
        assert config.boilerplate_dir == ".boilerplate"
        assert config.output_filename == "terragrunt.hcl"
        assert config.format_extension == ".hcl"
        assert config.http_timeout == 60
        assert config.git_timeout == 300
        assert config.terraform_bin == "terraform"
        assert config.fmt_timeout == 60

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("TGSCAFFOLD_VARIABLE_EXTENSION", ".hcl")
        monkeypatch.setenv("TGSCAFFOLD_BOILERPLATE_DIR", "_template")
        monkeypatch.setenv("TGSCAFFOLD_HTTP_TIMEOUT", "5")
        monkeypatch.setenv("TGSCAFFOLD_TERRAFORM_BIN", "tofu")

        config = ScaffoldConfig.from_env()

        assert config.variable_extension == ".hcl"
        assert config.boilerplate_dir == "_template"
        assert config.http_timeout == 5
        assert config.terraform_bin == "tofu"

    def test_invalid_timeout(self, monkeypatch):
        monkeypatch.setenv("TGSCAFFOLD_GIT_TIMEOUT", "soon")

        with pytest.raises(ValueError):
            ScaffoldConfig.from_env()


class TestGlobalConfig:
    """Test the process-wide config accessor."""

    def test_get_config_is_cached(self):
        assert get_config() is get_config()

    def test_set_config_overrides(self):
        custom = ScaffoldConfig(output_filename="root.hcl")
        set_config(custom)

        assert get_config() is custom

    def test_reset_rereads_environment(self, monkeypatch):
        get_config()
        monkeypatch.setenv("TGSCAFFOLD_OUTPUT_FILENAME", "module.hcl")
        set_config(None)

        assert get_config().output_filename == "module.hcl"

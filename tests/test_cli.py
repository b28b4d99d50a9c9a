"""Tests for the tgscaffold CLI."""
import subprocess

import pytest
from typer.testing import CliRunner

from tgscaffold.cli import app

runner = CliRunner()


class TestHelp:
    """Test help output."""

    def test_main_help(self):
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "scaffold" in result.stdout
        assert "inputs" in result.stdout
        assert "fmt" in result.stdout


@pytest.mark.usefixtures("terraform_fmt")
class TestScaffoldCommand:
    """Test the scaffold command."""

    def test_scaffolds_into_working_dir(self, tmp_path, s3_module):
        destination = tmp_path / "live"

        result = runner.invoke(app, ["scaffold", str(s3_module), "-w", str(destination)])

        assert result.exit_code == 0
        assert "Scaffolded 1 files" in result.stdout
        assert "bucket_name, region" in result.stdout
        assert (destination / "terragrunt.hcl").exists()

    def test_passes_template_variables(self, tmp_path, s3_module, write_tree):
        write_tree(s3_module / ".boilerplate", {"terragrunt.hcl": 'env = "{{ env }}"\n'})
        destination = tmp_path / "live"

        result = runner.invoke(app, [
            "scaffold", str(s3_module), "-w", str(destination), "--var", "env=prod",
        ])

        assert result.exit_code == 0
        assert (destination / "terragrunt.hcl").read_text() == 'env = "prod"\n'

    def test_fetch_failure_exits_nonzero(self, tmp_path):
        result = runner.invoke(app, ["scaffold", str(tmp_path / "missing"), "-w", str(tmp_path / "live")])

        assert result.exit_code == 1
        assert "[fetch]" in result.stdout

    def test_malformed_var_exits_nonzero(self, tmp_path, s3_module):
        result = runner.invoke(app, [
            "scaffold", str(s3_module), "-w", str(tmp_path / "live"), "--var", "broken",
        ])

        assert result.exit_code == 1
        assert "[vars]" in result.stdout


class TestInputsCommand:
    """Test the inputs command."""

    def test_lists_variables(self, s3_module):
        result = runner.invoke(app, ["inputs", str(s3_module)])

        assert result.exit_code == 0
        assert "bucket_name" in result.stdout
        assert "region" in result.stdout
        assert result.stdout.index("bucket_name") < result.stdout.index("region")

    def test_no_variables(self, tmp_path):
        result = runner.invoke(app, ["inputs", str(tmp_path)])

        assert result.exit_code == 0
        assert "No input variables found" in result.stdout

    def test_missing_directory(self, tmp_path):
        result = runner.invoke(app, ["inputs", str(tmp_path / "missing")])

        assert result.exit_code == 1


@pytest.mark.usefixtures("terraform_fmt")
class TestFmtCommand:
    """Test the fmt command."""

    def test_formats_files(self, tmp_path):
        (tmp_path / "terragrunt.hcl").write_text("a = 1  \n")

        result = runner.invoke(app, ["fmt", str(tmp_path)])

        assert result.exit_code == 0
        assert "Formatted 1 files" in result.stdout
        assert (tmp_path / "terragrunt.hcl").read_text() == "a = 1\n"

    def test_nothing_to_format(self, tmp_path):
        (tmp_path / "terragrunt.hcl").write_text("a = 1\n")

        result = runner.invoke(app, ["fmt", str(tmp_path)])

        assert result.exit_code == 0
        assert "Nothing to format" in result.stdout

    def test_check_reports_without_writing(self, tmp_path):
        (tmp_path / "terragrunt.hcl").write_text("a = 1  \n")

        result = runner.invoke(app, ["fmt", str(tmp_path), "--check"])

        assert result.exit_code == 1
        assert "needs formatting" in result.stdout
        assert (tmp_path / "terragrunt.hcl").read_text() == "a = 1  \n"

    def test_malformed_file(self, tmp_path, terraform_fmt):
        terraform_fmt.side_effect = lambda cmd, **kwargs: subprocess.CompletedProcess(
            cmd, 2, stdout="", stderr="Error: Unclosed configuration block"
        )
        (tmp_path / "terragrunt.hcl").write_text("inputs = {\n")

        result = runner.invoke(app, ["fmt", str(tmp_path)])

        assert result.exit_code == 1
        assert "Error" in result.stdout

"""Shared test fixtures for tgscaffold tests."""
import subprocess
from pathlib import Path
from typing import Dict, Union
from unittest.mock import patch

import pytest

from tgscaffold.core.config import set_config


@pytest.fixture(autouse=True)
def reset_config():
    """Every test starts from the environment-derived config."""
    set_config(None)
    yield
    set_config(None)


@pytest.fixture
def write_tree():
    """Write a {relative path: content} mapping under a root directory."""
    def _write(root: Path, files: Dict[str, Union[str, bytes]]) -> Path:
        root.mkdir(parents=True, exist_ok=True)
        for relative, content in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_text(content)
        return root
    return _write


@pytest.fixture
def s3_module(tmp_path, write_tree):
    """Local module declaring bucket_name and region, without a template."""
    return write_tree(tmp_path / "modules" / "s3", {
        "main.tf": (
            'variable "bucket_name" {\n'
            '  type = string\n'
            '}\n'
            '\n'
            'resource "aws_s3_bucket" "this" {\n'
            '  bucket = var.bucket_name\n'
            '}\n'
        ),
        "variables.tf": (
            'variable "region" {\n'
            '  type    = string\n'
            '  default = "us-east-1"\n'
            '}\n'
        ),
        "outputs.tf": 'output "bucket" {\n  value = aws_s3_bucket.this.id\n}\n',
    })


def _fake_terraform_fmt(cmd, input=None, **kwargs):
    """Answer like `terraform fmt -`, only stripping trailing whitespace."""
    formatted = "".join(line.rstrip() + "\n" for line in input.splitlines())
    return subprocess.CompletedProcess(cmd, 0, stdout=formatted, stderr="")


@pytest.fixture
def terraform_fmt():
    """Patch the terraform binary used by the formatter."""
    with patch("tgscaffold.services.hclfmt.subprocess.run", side_effect=_fake_terraform_fmt) as mock_run:
        yield mock_run

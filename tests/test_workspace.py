"""Tests for the per-run workspace."""
import pytest

from tgscaffold.core.workspace import Workspace, is_non_empty_dir


class TestWorkspace:
    """Test temp directory ownership and cleanup."""

    def test_destination_is_resolved(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)

        workspace = Workspace("live/prod")

        assert workspace.destination == tmp_path / "live" / "prod"
        assert not workspace.destination.exists()

    def test_temp_dirs_removed_on_exit(self, tmp_path):
        with Workspace(tmp_path) as workspace:
            first = workspace.temp_dir("template")
            second = workspace.temp_dir("template-source")
            (first / "terragrunt.hcl").write_text("x")
            assert workspace.temp_dirs == [first, second]
            assert first.name.startswith("tgscaffold-template-")

        assert not first.exists()
        assert not second.exists()
        assert workspace.temp_dirs == []
        assert tmp_path.exists()

    def test_temp_dirs_removed_when_run_fails(self, tmp_path):
        with pytest.raises(ValueError):
            with Workspace(tmp_path) as workspace:
                temp = workspace.temp_dir()
                raise ValueError("boom")

        assert not temp.exists()

    def test_closed_workspace_refuses_new_temp_dirs(self, tmp_path):
        workspace = Workspace(tmp_path)
        workspace.close()
        workspace.close()

        with pytest.raises(RuntimeError):
            workspace.temp_dir()


class TestIsNonEmptyDir:
    """Test the directory emptiness check."""

    def test_cases(self, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()
        full = tmp_path / "full"
        full.mkdir()
        (full / "x").write_text("x")

        assert is_non_empty_dir(full)
        assert not is_non_empty_dir(empty)
        assert not is_non_empty_dir(tmp_path / "missing")
        assert not is_non_empty_dir(full / "x")
        assert not is_non_empty_dir(None)

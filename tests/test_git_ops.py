"""Tests for committing registry changes to Git."""

import tempfile
from pathlib import Path

from git import Repo

from clinch.utils.git_ops import commit_message, commit_registry


def _init_repo(root: Path) -> Repo:
    repo = Repo.init(root)
    with repo.config_writer() as cw:
        cw.set_value("user", "name", "Test User")
        cw.set_value("user", "email", "test@example.com")
    return repo


def _write_registry(root: Path, content: str = "[]\n") -> Path:
    registry_dir = root / ".clinch"
    registry_dir.mkdir(exist_ok=True)
    (registry_dir / "contracts.json").write_text(content)
    return registry_dir


def test_commit_message():
    assert commit_message(["Token", "Vault"]) == "chore(clinch): sync Token, Vault"


def test_not_a_repository_is_reported():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        registry_dir = _write_registry(root)

        result = commit_registry(root, registry_dir, ["Token"])
        assert not result.ok
        assert not result.committed
        assert "Not a Git repository" in result.errors[0]


def test_commit_registry_directory():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        repo = _init_repo(root)
        (root / "README.md").write_text("untouched")
        registry_dir = _write_registry(root)

        result = commit_registry(root, registry_dir, ["Token"])
        assert result.ok
        assert result.committed
        assert repo.head.commit.hexsha == result.commit_sha
        assert repo.head.commit.message == "chore(clinch): sync Token"
        assert set(repo.head.commit.stats.files) == {".clinch/contracts.json"}


def test_nothing_to_commit():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        _init_repo(root)
        registry_dir = _write_registry(root)
        commit_registry(root, registry_dir, ["Token"])

        result = commit_registry(root, registry_dir, ["Token"])
        assert result.ok
        assert not result.committed
        assert result.message == "No new changes to commit"


def test_push_failure_is_reported_not_raised():
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir)
        _init_repo(root)
        registry_dir = _write_registry(root)

        result = commit_registry(root, registry_dir, ["Token"], push=True)
        assert result.committed
        assert not result.pushed
        assert result.errors


def test_no_names_is_a_no_op():
    with tempfile.TemporaryDirectory() as tmpdir:
        result = commit_registry(tmpdir, Path(tmpdir) / ".clinch", [])
        assert result.ok
        assert not result.committed

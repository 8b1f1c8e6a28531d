"""Git operations — commit and push registry changes after a sync.

Everything here is best-effort: a failure is returned as a result, never
raised, and never touches the registry that was already saved.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from git import GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo


@dataclass
class GitSyncResult:
    """What happened when committing registry changes."""

    committed: bool = False
    pushed: bool = False
    commit_sha: str = ""
    branch: str = ""
    message: str = ""
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def commit_message(names: list[str]) -> str:
    return f"chore(clinch): sync {', '.join(names)}"


def commit_registry(
    repo_path: str | Path,
    registry_dir: str | Path,
    names: list[str],
    push: bool = False,
    remote: str = "origin",
) -> GitSyncResult:
    """Stage the registry directory, commit it, and optionally push.

    Args:
        repo_path: Project root (or any path inside the work tree).
        registry_dir: Registry directory to stage.
        names: Names of the synced contracts, used in the commit message.
        push: Push the current branch to ``remote`` after committing.
    """
    result = GitSyncResult()
    if not names:
        return result

    try:
        repo = Repo(repo_path, search_parent_directories=True)
    except (InvalidGitRepositoryError, NoSuchPathError):
        result.errors.append(f"Not a Git repository: {repo_path} (run 'git init' first)")
        return result

    try:
        repo.git.add(_relative_to_worktree(repo, registry_dir))
        if not _has_staged_changes(repo):
            result.message = "No new changes to commit"
        else:
            result.message = commit_message(names)
            commit = repo.index.commit(result.message)
            result.committed = True
            result.commit_sha = commit.hexsha
    except (GitCommandError, ValueError, OSError) as e:
        result.errors.append(f"Git commit failed: {e}")
        return result

    if not push:
        return result

    if repo.head.is_detached:
        result.errors.append("Could not detect current branch; push manually")
        return result

    result.branch = repo.active_branch.name
    try:
        repo.git.push(remote, result.branch)
        result.pushed = True
    except GitCommandError as e:
        result.errors.append(_describe_push_failure(e))
    return result


def _describe_push_failure(error: GitCommandError) -> str:
    text = str(error)
    if "rejected" in text or "non-fast-forward" in text:
        return "Push rejected: the remote has changes you don't have locally (run 'git pull')"
    if "Could not resolve host" in text:
        return "Push failed: no network connection; changes are committed locally"
    if "Permission denied" in text or "authentication failed" in text.lower():
        return "Push failed: authentication failed; check your credentials or SSH keys"
    return f"Push failed: {text}"


def _has_staged_changes(repo: Repo) -> bool:
    if not repo.head.is_valid():
        # Unborn branch: anything in the index is new
        return bool(repo.index.entries)
    return bool(repo.index.diff("HEAD"))


def _relative_to_worktree(repo: Repo, path: str | Path) -> str:
    return os.path.relpath(Path(path).resolve(), Path(repo.working_tree_dir).resolve())

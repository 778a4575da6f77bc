"""Git utilities - obtain unified diffs from a repository."""

from __future__ import annotations

import subprocess
from pathlib import Path

from flipscan.errors import GitError


def run_git(args: list[str], cwd: Path | None = None) -> str:
    """Run a git command and return its output."""
    try:
        result = subprocess.run(
            ["git"] + args,
            cwd=cwd,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout
    except FileNotFoundError as e:
        raise GitError("git executable not found") from e
    except subprocess.CalledProcessError as e:
        raise GitError(
            f"Git command failed: git {' '.join(args)}\n{e.stderr}",
            returncode=e.returncode,
        ) from e


def get_repo_root(path: Path) -> Path:
    """Get the git repository root for a path."""
    try:
        root = run_git(["rev-parse", "--show-toplevel"], cwd=path)
        return Path(root.strip())
    except GitError:
        raise GitError(f"Not a git repository: {path}", path=str(path))


def get_diff(
    repo_path: Path,
    base_ref: str | None = None,
    target_ref: str | None = None,
    staged: bool = False,
) -> str:
    """Get a unified diff from git.

    Args:
        repo_path: Any directory within the repository
        base_ref: Compare against this ref (default: working tree vs index)
        target_ref: Compare base_ref to this ref instead of the working tree
        staged: Diff the index against HEAD (or base_ref)

    Returns:
        The unified diff text, empty when nothing changed
    """
    if target_ref is not None and base_ref is None:
        raise GitError("A target ref requires a base ref")

    args = ["diff", "--no-color", "--no-ext-diff", "-M"]
    if staged:
        args.append("--cached")
    if base_ref is not None:
        args.append(base_ref)
    if target_ref is not None:
        args.append(target_ref)

    return run_git(args, cwd=repo_path)


__all__ = ["run_git", "get_repo_root", "get_diff"]

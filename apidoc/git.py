"""Git branch lookup used to derive the document version."""

from __future__ import annotations

import re
import subprocess
from pathlib import Path
from typing import Callable, Iterable, Optional

from .logging import get_logger

logger = get_logger("git")

Runner = Callable[..., str]

_VERSION_BRANCH = re.compile(r"^[Vv]?\d+\.\d+(\.\d+)?")
_VERSION_IN_NAME = re.compile(r"(\d+\.\d+(?:\.\d+)?)")
_COMMIT = re.compile(r"^[0-9a-f]{40}$")


class GitBranchReader:
    """Reads the current branch from ``.git/HEAD`` or the git CLI."""

    def __init__(self, runner: Runner | None = None) -> None:
        self._runner = runner or self._default_runner

    def current_branch(self, path: Path | str) -> Optional[str]:
        """Return the branch checked out for the repository containing ``path``."""
        repo = find_git_root(Path(path))
        if repo is None:
            return None
        branch = read_head(repo)
        if branch:
            return branch
        try:
            output = self._runner(["git", "rev-parse", "--abbrev-ref", "HEAD"], cwd=repo)
        except (OSError, subprocess.CalledProcessError) as exc:
            logger.debug("git rev-parse failed in %s: %s", repo, exc)
            return None
        branch = output.strip().splitlines()[0] if output.strip() else ""
        return branch or None

    @staticmethod
    def _default_runner(args: Iterable[str], *, cwd: Path) -> str:
        completed = subprocess.run(
            list(args),
            cwd=str(cwd),
            check=True,
            text=True,
            capture_output=True,
        )
        return completed.stdout


def find_git_root(path: Path) -> Optional[Path]:
    """Walk upward from ``path`` to the directory holding ``.git``."""
    current = path if path.is_dir() else path.parent
    current = current.resolve()
    for candidate in (current, *current.parents):
        if (candidate / ".git").exists():
            return candidate
    return None


def read_head(repo: Path) -> Optional[str]:
    """Read the branch name (or short commit for a detached HEAD) from HEAD."""
    git_path = repo / ".git"
    head_file = git_path / "HEAD"
    try:
        if git_path.is_file():
            # Worktrees and submodules point at the real git dir.
            pointer = git_path.read_text(encoding="utf-8").strip()
            if pointer.startswith("gitdir:"):
                git_dir = Path(pointer[len("gitdir:"):].strip())
                if not git_dir.is_absolute():
                    git_dir = repo / git_dir
                head_file = git_dir / "HEAD"
        if not head_file.is_file():
            return None
        line = head_file.read_text(encoding="utf-8").strip()
    except OSError as exc:
        logger.debug("Unable to read git HEAD in %s: %s", repo, exc)
        return None
    if line.startswith("ref: refs/heads/"):
        return line[len("ref: refs/heads/"):].strip()
    if _COMMIT.match(line):
        return line[:7]
    return None


def format_version(branch: Optional[str], default: str) -> str:
    """Turn a branch name into a version label.

    ``1.2.0`` and ``v1.2.0`` become ``V1.2.0``; ``release/2.0`` becomes ``V2.0``;
    other branch names are returned unchanged.
    """
    if not branch:
        return default
    if _VERSION_BRANCH.match(branch):
        if branch[0] in "Vv":
            return "V" + branch[1:]
        return "V" + branch
    match = _VERSION_IN_NAME.search(branch)
    if match:
        return "V" + match.group(1)
    return branch


def resolve_version(root: Path, default: str, reader: GitBranchReader | None = None) -> str:
    reader = reader or GitBranchReader()
    return format_version(reader.current_branch(root), default)


__all__ = ["GitBranchReader", "find_git_root", "format_version", "read_head", "resolve_version"]

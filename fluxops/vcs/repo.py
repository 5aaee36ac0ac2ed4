"""Local git working copy: the :class:`GitClient` interface and its CLI backend.

All git operations use :func:`subprocess.run`; no GitPython dependency.
"""

from __future__ import annotations

import abc
import base64
import logging
import os
import shutil
import subprocess
from pathlib import Path

from fluxops.config import DEFAULT_REMOTE
from fluxops.errors import GitError, RepositoryIsEmptyError

logger = logging.getLogger(__name__)


class GitClient(abc.ABC):
    """Operations on the local working copy of the configuration repository."""

    @abc.abstractmethod
    def clone(self) -> None:
        """Clone the remote repository into the working directory.

        Raises :class:`RepositoryIsEmptyError` when the remote has no commits.
        """

    @abc.abstractmethod
    def init(self) -> None:
        """Initialise a fresh repository wired to the remote."""

    @abc.abstractmethod
    def branch(self, name: str) -> None:
        """Switch to branch *name*, creating it if needed."""

    @abc.abstractmethod
    def add(self, path: str) -> None:
        """Stage *path* (relative to the working directory)."""

    @abc.abstractmethod
    def remove(self, path: str) -> None:
        """Stage the recursive removal of *path*."""

    @abc.abstractmethod
    def commit(self, message: str) -> None:
        """Commit the staged changes."""

    @abc.abstractmethod
    def push(self) -> None:
        """Push the current branch to the remote."""

    @abc.abstractmethod
    def pull(self, branch: str) -> None:
        """Pull *branch* from the remote into the current branch."""


def _run_git(
    *args: str,
    cwd: str | Path | None = None,
    check: bool = True,
    env: dict[str, str] | None = None,
    timeout: float | None = None,
) -> subprocess.CompletedProcess[str]:
    """Execute a git command via subprocess and return the result.

    Parameters
    ----------
    *args:
        Arguments passed after ``git``.
    cwd:
        Working directory for the command.
    check:
        If *True*, raise :class:`GitError` on non-zero exit.
    env:
        Extra environment variables layered over the current environment.
    timeout:
        Seconds before the command is killed.
    """
    cmd = ["git", *args]
    logger.debug("git %s (cwd=%s)", _describe(args), cwd)
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            env={**os.environ, **env} if env else None,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as exc:
        raise GitError(f"git {_describe(args)} timed out after {timeout}s") from exc
    except OSError as exc:
        raise GitError(f"git {_describe(args)} could not be executed: {exc}") from exc
    if check and result.returncode != 0:
        raise GitError(
            f"git {_describe(args)} failed (rc={result.returncode}): "
            f"{result.stderr.strip()}"
        )
    return result


def _describe(args: tuple[str, ...]) -> str:
    """Render *args* for messages, dropping ``-c key=value`` pairs (credentials)."""
    shown: list[str] = []
    skip = False
    for arg in args:
        if skip:
            skip = False
        elif arg == "-c":
            skip = True
        else:
            shown.append(arg)
    return " ".join(shown)


class GitCliClient(GitClient):
    """:class:`GitClient` backed by the ``git`` executable.

    Parameters
    ----------
    repo_dir:
        Local working directory of the configuration repository.
    repository_url:
        Remote URL the working copy clones from and pushes to.
    author_name, author_email:
        Commit identity written to the local repository config.
    auth_token:
        Optional HTTPS token, sent as a basic-auth header on network calls.
    ssh_command:
        Optional ``GIT_SSH_COMMAND`` for SSH remotes.
    timeout:
        Per-command timeout in seconds for network operations.
    """

    def __init__(
        self,
        repo_dir: str | Path,
        repository_url: str,
        *,
        author_name: str = "EKS-A CLI",
        author_email: str = "eksa@localhost",
        auth_token: str | None = None,
        ssh_command: str | None = None,
        timeout: float | None = 300.0,
    ) -> None:
        self.repo_dir = Path(repo_dir)
        self.repository_url = repository_url
        self.author_name = author_name
        self.author_email = author_email
        self._auth_token = auth_token
        self._ssh_command = ssh_command
        self._timeout = timeout

    # -- Helpers --------------------------------------------------------------

    def _env(self) -> dict[str, str]:
        env = {"GIT_TERMINAL_PROMPT": "0"}
        if self._ssh_command:
            env["GIT_SSH_COMMAND"] = self._ssh_command
        return env

    def _auth_args(self) -> list[str]:
        if not self._auth_token:
            return []
        creds = base64.b64encode(f"x-access-token:{self._auth_token}".encode()).decode()
        return ["-c", f"http.extraHeader=Authorization: Basic {creds}"]

    def _git(self, *args: str, check: bool = True) -> subprocess.CompletedProcess[str]:
        return _run_git(*args, cwd=self.repo_dir, check=check)

    def _remote_git(self, *args: str) -> subprocess.CompletedProcess[str]:
        return _run_git(
            *self._auth_args(), *args,
            cwd=self.repo_dir, env=self._env(), timeout=self._timeout,
        )

    def _configure_identity(self) -> None:
        self._git("config", "user.email", self.author_email, check=False)
        self._git("config", "user.name", self.author_name, check=False)
        self._git("config", "commit.gpgsign", "false", check=False)

    def _has_head(self) -> bool:
        return self._git("rev-parse", "--verify", "--quiet", "HEAD", check=False).returncode == 0

    def _has_ref(self, ref: str) -> bool:
        return self._git("rev-parse", "--verify", "--quiet", ref, check=False).returncode == 0

    # -- GitClient ------------------------------------------------------------

    def clone(self) -> None:
        self.repo_dir.mkdir(parents=True, exist_ok=True)
        _run_git(
            *self._auth_args(), "clone", self.repository_url, str(self.repo_dir),
            env=self._env(), timeout=self._timeout,
        )
        if not self._has_head():
            # Leave the directory as it was so the caller can `init` instead.
            shutil.rmtree(self.repo_dir / ".git", ignore_errors=True)
            raise RepositoryIsEmptyError(
                f"remote repository {self.repository_url} is empty and can't be cloned"
            )
        self._configure_identity()
        logger.info("Cloned %s -> %s", self.repository_url, self.repo_dir)

    def init(self) -> None:
        self.repo_dir.mkdir(parents=True, exist_ok=True)
        self._git("init")
        self._configure_identity()
        if self._git("remote", "get-url", DEFAULT_REMOTE, check=False).returncode == 0:
            self._git("remote", "set-url", DEFAULT_REMOTE, self.repository_url)
        else:
            self._git("remote", "add", DEFAULT_REMOTE, self.repository_url)
        logger.info("Initialised git repo at %s", self.repo_dir)

    def branch(self, name: str) -> None:
        if self._has_ref(f"refs/heads/{name}"):
            self._git("checkout", name)
        elif self._has_ref(f"refs/remotes/{DEFAULT_REMOTE}/{name}"):
            self._git("checkout", "-b", name, "--track", f"{DEFAULT_REMOTE}/{name}")
        else:
            self._git("checkout", "-b", name)
        logger.debug("Switched to branch '%s'", name)

    def add(self, path: str) -> None:
        self._git("add", "--", path)

    def remove(self, path: str) -> None:
        self._git("rm", "-r", "--", path)

    def commit(self, message: str) -> None:
        args = ["commit", "-m", message]
        # git needs at least one commit to branch from; the first may be empty.
        if not self._has_head():
            args.append("--allow-empty")
        self._git(*args)

    def push(self) -> None:
        self._remote_git("push", "--set-upstream", DEFAULT_REMOTE, "HEAD")

    def pull(self, branch: str) -> None:
        self._remote_git("pull", "--no-rebase", DEFAULT_REMOTE, branch)

    # -- Status / info --------------------------------------------------------

    def is_repo(self) -> bool:
        """Return *True* if the working directory holds git metadata."""
        return (self.repo_dir / ".git").is_dir()

    def current_branch(self) -> str:
        """Return the name of the current branch."""
        return self._git("rev-parse", "--abbrev-ref", "HEAD").stdout.strip()

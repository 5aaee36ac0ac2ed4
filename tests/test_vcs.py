"""Tests for the local git working copy (GitCliClient).

All tests use tmp_path fixtures with real git repos (subprocess git); a
bare repository on disk plays the remote.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from fluxops.config import SEED_COMMIT_MESSAGE
from fluxops.errors import GitError, RepositoryIsEmptyError
from fluxops.vcs.repo import GitCliClient, _describe, _run_git


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _configure_git_user(path: Path) -> None:
    """Set git user.name, user.email, and disable GPG signing in a temp repo."""
    subprocess.run(["git", "config", "user.email", "test@fluxops.dev"], cwd=path, capture_output=True)
    subprocess.run(["git", "config", "user.name", "fluxops test"], cwd=path, capture_output=True)
    subprocess.run(["git", "config", "commit.gpgsign", "false"], cwd=path, capture_output=True)


def _make_remote(tmp_path: Path, with_commit: bool = True, branch: str = "main") -> Path:
    """Create a bare remote, optionally seeded with one commit on *branch*."""
    bare = tmp_path / "remote.git"
    subprocess.run(["git", "init", "--bare", str(bare)], capture_output=True, check=True)
    if with_commit:
        seed = tmp_path / "seed"
        seed.mkdir()
        subprocess.run(["git", "init", "-b", branch], cwd=seed, capture_output=True, check=True)
        _configure_git_user(seed)
        (seed / "README.md").write_text("# config\n")
        subprocess.run(["git", "add", "."], cwd=seed, capture_output=True, check=True)
        subprocess.run(["git", "commit", "-m", "seed"], cwd=seed, capture_output=True, check=True)
        subprocess.run(["git", "remote", "add", "origin", str(bare)], cwd=seed, capture_output=True, check=True)
        subprocess.run(["git", "push", "origin", branch], cwd=seed, capture_output=True, check=True)
        subprocess.run(
            ["git", "symbolic-ref", "HEAD", f"refs/heads/{branch}"],
            cwd=bare, capture_output=True, check=True,
        )
    return bare


def _log_messages(path: Path, ref: str = "HEAD") -> list[str]:
    result = subprocess.run(
        ["git", "log", "--format=%s", ref], cwd=path, capture_output=True, text=True, check=True,
    )
    return [line for line in result.stdout.splitlines() if line]


def _client(tmp_path: Path, remote: Path) -> GitCliClient:
    return GitCliClient(
        tmp_path / "work",
        str(remote),
        author_name="fluxops test",
        author_email="test@fluxops.dev",
    )


# ---------------------------------------------------------------------------
# _run_git
# ---------------------------------------------------------------------------


class TestRunGit:
    def test_raises_git_error_on_failure(self, tmp_path: Path):
        with pytest.raises(GitError, match="rev-parse"):
            _run_git("rev-parse", "HEAD", cwd=tmp_path)

    def test_check_false_returns_result(self, tmp_path: Path):
        result = _run_git("rev-parse", "HEAD", cwd=tmp_path, check=False)
        assert result.returncode != 0

    def test_missing_git_binary_raises_git_error(self, tmp_path: Path):
        with patch("fluxops.vcs.repo.subprocess.run", side_effect=FileNotFoundError("git")):
            with pytest.raises(GitError, match="could not be executed") as exc_info:
                _run_git("status", cwd=tmp_path)
        assert isinstance(exc_info.value.__cause__, FileNotFoundError)

    def test_push_without_git_binary_raises_git_error(self, tmp_path: Path):
        client = GitCliClient(tmp_path, "https://example.com/acme/fleet.git", auth_token="secret")

        with patch("fluxops.vcs.repo.subprocess.run", side_effect=FileNotFoundError("git")):
            with pytest.raises(GitError, match="git push") as exc_info:
                client.push()
        assert "secret" not in str(exc_info.value)

    def test_describe_hides_config_pairs(self):
        args = ("-c", "http.extraHeader=Authorization: Basic c2VjcmV0", "push", "origin")
        assert _describe(args) == "push origin"


# ---------------------------------------------------------------------------
# GitCliClient
# ---------------------------------------------------------------------------


class TestClone:
    def test_clone_populated_remote(self, tmp_path: Path):
        remote = _make_remote(tmp_path)
        client = _client(tmp_path, remote)

        client.clone()

        assert client.is_repo()
        assert (client.repo_dir / "README.md").read_text() == "# config\n"
        assert client.current_branch() == "main"

    def test_clone_empty_remote_raises_and_leaves_no_metadata(self, tmp_path: Path):
        remote = _make_remote(tmp_path, with_commit=False)
        client = _client(tmp_path, remote)

        with pytest.raises(RepositoryIsEmptyError):
            client.clone()

        assert not client.is_repo()

    def test_clone_missing_remote_raises_git_error(self, tmp_path: Path):
        client = _client(tmp_path, tmp_path / "does-not-exist.git")

        with pytest.raises(GitError) as exc_info:
            client.clone()
        assert not isinstance(exc_info.value, RepositoryIsEmptyError)


class TestInitAndCommit:
    def test_init_seed_commit_and_branch(self, tmp_path: Path):
        remote = _make_remote(tmp_path, with_commit=False)
        client = _client(tmp_path, remote)

        client.init()
        client.commit(SEED_COMMIT_MESSAGE)
        client.branch("main")

        assert client.is_repo()
        assert client.current_branch() == "main"
        assert _log_messages(client.repo_dir) == [SEED_COMMIT_MESSAGE]

    def test_init_wires_origin(self, tmp_path: Path):
        remote = _make_remote(tmp_path, with_commit=False)
        client = _client(tmp_path, remote)

        client.init()
        client.init()

        url = subprocess.run(
            ["git", "remote", "get-url", "origin"],
            cwd=client.repo_dir, capture_output=True, text=True, check=True,
        ).stdout.strip()
        assert url == str(remote)

    def test_commit_with_nothing_staged_fails_after_seed(self, tmp_path: Path):
        remote = _make_remote(tmp_path, with_commit=False)
        client = _client(tmp_path, remote)
        client.init()
        client.commit(SEED_COMMIT_MESSAGE)

        with pytest.raises(GitError):
            client.commit("nothing to see")

    def test_add_commit_push_reaches_remote(self, tmp_path: Path):
        remote = _make_remote(tmp_path, with_commit=False)
        client = _client(tmp_path, remote)
        client.init()
        client.commit(SEED_COMMIT_MESSAGE)
        client.branch("main")

        target = client.repo_dir / "clusters" / "mgmt"
        target.mkdir(parents=True)
        (target / "eksa-cluster.yaml").write_text("kind: Cluster\n")
        client.add("clusters")
        client.commit("add cluster")
        client.push()

        assert _log_messages(remote, "main") == ["add cluster", SEED_COMMIT_MESSAGE]


class TestBranch:
    def test_branch_creates_and_switches(self, tmp_path: Path):
        remote = _make_remote(tmp_path)
        client = _client(tmp_path, remote)
        client.clone()

        client.branch("feature")
        assert client.current_branch() == "feature"

        client.branch("main")
        assert client.current_branch() == "main"

    def test_branch_tracks_existing_remote_branch(self, tmp_path: Path):
        remote = _make_remote(tmp_path, branch="main")
        seed = tmp_path / "seed"
        subprocess.run(["git", "checkout", "-b", "gitops"], cwd=seed, capture_output=True, check=True)
        (seed / "gitops.txt").write_text("x")
        subprocess.run(["git", "add", "."], cwd=seed, capture_output=True, check=True)
        subprocess.run(["git", "commit", "-m", "gitops branch"], cwd=seed, capture_output=True, check=True)
        subprocess.run(["git", "push", "origin", "gitops"], cwd=seed, capture_output=True, check=True)

        client = _client(tmp_path, remote)
        client.clone()
        client.branch("gitops")

        assert client.current_branch() == "gitops"
        assert (client.repo_dir / "gitops.txt").is_file()


class TestRemoveAndPull:
    def test_remove_stages_deletion(self, tmp_path: Path):
        remote = _make_remote(tmp_path)
        client = _client(tmp_path, remote)
        client.clone()

        client.remove("README.md")
        client.commit("delete readme")

        assert not (client.repo_dir / "README.md").exists()

    def test_remove_missing_path_raises(self, tmp_path: Path):
        remote = _make_remote(tmp_path)
        client = _client(tmp_path, remote)
        client.clone()

        with pytest.raises(GitError):
            client.remove("nope")

    def test_pull_fetches_new_commits(self, tmp_path: Path):
        remote = _make_remote(tmp_path)
        client = _client(tmp_path, remote)
        client.clone()

        seed = tmp_path / "seed"
        (seed / "new.txt").write_text("new")
        subprocess.run(["git", "add", "."], cwd=seed, capture_output=True, check=True)
        subprocess.run(["git", "commit", "-m", "upstream change"], cwd=seed, capture_output=True, check=True)
        subprocess.run(["git", "push", "origin", "main"], cwd=seed, capture_output=True, check=True)

        client.pull("main")

        assert (client.repo_dir / "new.txt").is_file()
        assert _log_messages(client.repo_dir)[0] == "upstream change"

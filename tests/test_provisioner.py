"""Tests for RepositoryProvisioner — describe, create, clone or initialise.

Git client and hosting provider are mocks attached to one parent so the
order of collaborator calls can be asserted.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, call

import pytest

from fluxops.config import REPOSITORY_DESCRIPTION, SEED_COMMIT_MESSAGE
from fluxops.errors import (
    ConfigVersionControlFailedError,
    GitError,
    GitProviderError,
    RemoteDescribeError,
    RepositoryIsEmptyError,
)
from fluxops.filewriter import DirectoryWriter
from fluxops.gitops.provisioner import ProvisionOutcome, RepositoryProvisioner
from fluxops.models.cluster import ClusterSpec, GitOpsConfig, GithubProviderConfig
from fluxops.models.context import OperationContext
from fluxops.retry import RetryPolicy
from fluxops.vcs.factory import GitTools
from fluxops.vcs.provider import CreateRepoOpts, RemoteRepository


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _op(personal: bool = False) -> OperationContext:
    spec = ClusterSpec(
        name="mgmt",
        gitops=GitOpsConfig(
            cluster_config_path="clusters/mgmt",
            github=GithubProviderConfig(
                owner="acme", repository="fleet", personal=personal,
            ),
        ),
    )
    return OperationContext(spec)


def _setup(tmp_path: Path, attempts: int = 5) -> tuple[RepositoryProvisioner, MagicMock, list[float]]:
    parent = MagicMock()
    parent.provider.get_repo.return_value = None
    tools = GitTools(client=parent.client, writer=DirectoryWriter(tmp_path), provider=parent.provider)
    sleeps: list[float] = []
    retry = RetryPolicy(attempts, 5.0, sleep=sleeps.append)
    return RepositoryProvisioner(tools, retry), parent, sleeps


def _existing(is_empty: bool = False) -> RemoteRepository:
    return RemoteRepository(name="fleet", owner="acme", organization="acme", is_empty=is_empty)


# ---------------------------------------------------------------------------
# ensure_repository
# ---------------------------------------------------------------------------


class TestEnsureRepository:
    def test_missing_remote_is_created_and_initialized(self, tmp_path: Path):
        provisioner, parent, _ = _setup(tmp_path)

        outcome = provisioner.ensure_repository(_op())

        assert outcome is ProvisionOutcome.CREATED
        assert parent.mock_calls == [
            call.provider.get_repo(),
            call.provider.create_repo(CreateRepoOpts(
                name="fleet", owner="acme", description=REPOSITORY_DESCRIPTION,
                personal=False, privacy=True,
            )),
            call.client.init(),
            call.client.commit(SEED_COMMIT_MESSAGE),
            call.client.branch("main"),
        ]

    def test_created_repo_is_personal_and_private(self, tmp_path: Path):
        provisioner, parent, _ = _setup(tmp_path)

        provisioner.ensure_repository(_op(personal=True))

        opts = parent.provider.create_repo.call_args.args[0]
        assert opts.personal is True
        assert opts.privacy is True

    def test_existing_remote_is_cloned(self, tmp_path: Path):
        provisioner, parent, _ = _setup(tmp_path)
        parent.provider.get_repo.return_value = _existing()

        outcome = provisioner.ensure_repository(_op())

        assert outcome is ProvisionOutcome.CLONED
        assert parent.mock_calls == [
            call.provider.get_repo(),
            call.client.clone(),
            call.client.branch("main"),
        ]

    def test_empty_descriptor_skips_clone(self, tmp_path: Path):
        provisioner, parent, _ = _setup(tmp_path)
        parent.provider.get_repo.return_value = _existing(is_empty=True)

        outcome = provisioner.ensure_repository(_op())

        assert outcome is ProvisionOutcome.INITIALIZED_EMPTY_REMOTE
        parent.client.clone.assert_not_called()
        parent.provider.create_repo.assert_not_called()
        assert parent.client.commit.call_args_list == [call(SEED_COMMIT_MESSAGE)]

    def test_empty_clone_falls_back_without_retry(self, tmp_path: Path):
        provisioner, parent, sleeps = _setup(tmp_path)
        parent.provider.get_repo.return_value = _existing()
        parent.client.clone.side_effect = RepositoryIsEmptyError("empty")

        outcome = provisioner.ensure_repository(_op())

        assert outcome is ProvisionOutcome.INITIALIZED_EMPTY_REMOTE
        assert parent.client.clone.call_count == 1
        assert sleeps == []
        parent.client.init.assert_called_once()
        parent.client.branch.assert_called_once_with("main")

    def test_clone_failure_is_retried_then_reported(self, tmp_path: Path):
        provisioner, parent, sleeps = _setup(tmp_path)
        parent.provider.get_repo.return_value = _existing()
        parent.client.clone.side_effect = GitError("connection refused")

        with pytest.raises(ConfigVersionControlFailedError, match="connection refused") as exc_info:
            provisioner.ensure_repository(_op())

        assert parent.client.clone.call_count == 5
        assert sleeps == [5.0] * 4
        assert isinstance(exc_info.value.__cause__, GitError)
        parent.client.init.assert_not_called()

    def test_describe_failure(self, tmp_path: Path):
        provisioner, parent, _ = _setup(tmp_path, attempts=3)
        parent.provider.get_repo.side_effect = GitProviderError("503 unavailable")

        with pytest.raises(RemoteDescribeError, match="failed to describe repo"):
            provisioner.ensure_repository(_op())

        assert parent.provider.get_repo.call_count == 3
        parent.client.clone.assert_not_called()

    def test_describe_recovers_after_transient_failure(self, tmp_path: Path):
        provisioner, parent, sleeps = _setup(tmp_path)
        parent.provider.get_repo.side_effect = [GitProviderError("timeout"), _existing()]

        assert provisioner.ensure_repository(_op()) is ProvisionOutcome.CLONED
        assert sleeps == [5.0]

    def test_create_failure(self, tmp_path: Path):
        provisioner, parent, _ = _setup(tmp_path, attempts=2)
        parent.provider.create_repo.side_effect = GitProviderError("forbidden")

        with pytest.raises(ConfigVersionControlFailedError, match="could not create repo"):
            provisioner.ensure_repository(_op())

        assert parent.provider.create_repo.call_count == 2
        parent.client.init.assert_not_called()

    def test_init_failure(self, tmp_path: Path):
        provisioner, parent, _ = _setup(tmp_path)
        parent.client.init.side_effect = GitError("permission denied")

        with pytest.raises(ConfigVersionControlFailedError, match="could not initialize repo"):
            provisioner.ensure_repository(_op())

        parent.client.commit.assert_not_called()

    def test_seed_commit_failure(self, tmp_path: Path):
        provisioner, parent, _ = _setup(tmp_path)
        parent.client.commit.side_effect = GitError("no identity")

        with pytest.raises(ConfigVersionControlFailedError, match="initializing repository"):
            provisioner.ensure_repository(_op())

        parent.client.branch.assert_not_called()

    def test_second_run_is_idempotent(self, tmp_path: Path):
        provisioner, parent, _ = _setup(tmp_path)
        parent.client.init.side_effect = lambda: (tmp_path / ".git").mkdir()

        assert provisioner.ensure_repository(_op()) is ProvisionOutcome.CREATED

        parent.provider.get_repo.return_value = _existing()
        assert provisioner.ensure_repository(_op()) is ProvisionOutcome.ALREADY_READY

        parent.provider.create_repo.assert_called_once()
        parent.client.init.assert_called_once()
        parent.client.commit.assert_called_once_with(SEED_COMMIT_MESSAGE)
        parent.client.clone.assert_not_called()
        assert parent.client.branch.call_args_list == [call("main"), call("main")]

    def test_local_repository_with_missing_remote_recreates_remote(self, tmp_path: Path):
        provisioner, parent, _ = _setup(tmp_path)
        (tmp_path / ".git").mkdir()

        assert provisioner.ensure_repository(_op()) is ProvisionOutcome.ALREADY_READY
        parent.provider.create_repo.assert_called_once()
        parent.client.init.assert_not_called()

    def test_no_provider(self, tmp_path: Path):
        tools = GitTools(client=MagicMock(), writer=DirectoryWriter(tmp_path))
        provisioner = RepositoryProvisioner(tools, RetryPolicy(1, 0))

        with pytest.raises(ConfigVersionControlFailedError, match="no remote repository provider"):
            provisioner.ensure_repository(_op())


# ---------------------------------------------------------------------------
# clone
# ---------------------------------------------------------------------------


class TestClone:
    def test_branch_failure_is_not_retried(self, tmp_path: Path):
        provisioner, parent, _ = _setup(tmp_path)
        parent.client.branch.side_effect = GitError("bad ref")

        with pytest.raises(GitError):
            provisioner.clone(_op())

        parent.client.clone.assert_called_once()
        parent.client.branch.assert_called_once_with("main")

"""RepositoryProvisioner — bring the remote and local repository to a ready state.

The remote is described first, then one of:

- remote exists with history: clone it and switch to the target branch;
- remote exists but is empty: an empty repository can't be cloned, so a
  local repository is initialised with a seed commit instead;
- remote is missing: create it, then initialise locally as above.

A working copy that already holds git metadata is only switched to the
target branch, so provisioning twice never re-creates or re-seeds.
"""

from __future__ import annotations

import logging
from enum import Enum

from fluxops.config import REPOSITORY_DESCRIPTION, SEED_COMMIT_MESSAGE
from fluxops.errors import (
    ConfigVersionControlFailedError,
    GitError,
    GitProviderError,
    RemoteDescribeError,
    RepositoryIsEmptyError,
)
from fluxops.models.context import OperationContext
from fluxops.retry import RetryPolicy
from fluxops.vcs.factory import GitTools
from fluxops.vcs.provider import CreateRepoOpts, RemoteRepository, RemoteRepositoryProvider


class ProvisionOutcome(str, Enum):
    """How the working copy reached its ready state."""

    CLONED = "cloned"
    INITIALIZED_EMPTY_REMOTE = "initialized_empty_remote"
    CREATED = "created"
    ALREADY_READY = "already_ready"


class RepositoryProvisioner:
    """Provision the configuration repository for a cluster.

    Parameters
    ----------
    git_tools:
        Client, provider and writer for the working copy.
    retry:
        Policy applied to describe, create and clone.
    logger:
        Optional logger; defaults to the module logger.
    """

    def __init__(
        self,
        git_tools: GitTools,
        retry: RetryPolicy,
        logger: logging.Logger | None = None,
    ) -> None:
        self.git_tools = git_tools
        self.retry = retry
        self.log = logger or logging.getLogger(__name__)

    @property
    def _provider(self) -> RemoteRepositoryProvider:
        if self.git_tools.provider is None:
            raise ConfigVersionControlFailedError("no remote repository provider configured")
        return self.git_tools.provider

    def has_local_repository(self) -> bool:
        return (self.git_tools.repo_dir / ".git").exists()

    def ensure_repository(self, op: OperationContext) -> ProvisionOutcome:
        """Make the working copy ready on ``op.branch``; return how it got there.

        Raises :class:`RemoteDescribeError` if the remote can't be described
        and :class:`ConfigVersionControlFailedError` for any other failure.
        """
        provider = self._provider
        try:
            repo = self.retry.run(provider.get_repo)
        except GitProviderError as exc:
            raise RemoteDescribeError(f"failed to describe repo: {exc}") from exc

        if self.has_local_repository():
            if repo is None:
                self.create_remote_repository(op)
            self.log.debug("Local repository already present; switching to branch %s", op.branch)
            self._switch_branch(op.branch)
            return ProvisionOutcome.ALREADY_READY

        if repo is not None:
            return self._clone_or_initialize(op, repo)

        self.create_remote_repository(op)
        self.initialize_local_repository(op)
        return ProvisionOutcome.CREATED

    def _clone_or_initialize(self, op: OperationContext, repo: RemoteRepository) -> ProvisionOutcome:
        if not repo.is_empty:
            try:
                self.clone(op)
                return ProvisionOutcome.CLONED
            except RepositoryIsEmptyError:
                pass
            except GitError as exc:
                raise ConfigVersionControlFailedError(exc) from exc

        self.log.debug("Remote repository is empty and can't be cloned; will initialize locally")
        self.initialize_local_repository(op)
        return ProvisionOutcome.INITIALIZED_EMPTY_REMOTE

    def clone(self, op: OperationContext) -> None:
        """Clone the remote (retried) and switch to ``op.branch`` (not retried).

        :class:`RepositoryIsEmptyError` is raised on the first attempt.
        """
        self.log.debug("Cloning remote repository")
        self.retry.run(self.git_tools.client.clone)

        self.log.debug("Creating a new branch")
        self.git_tools.client.branch(op.branch)

    def create_remote_repository(self, op: OperationContext) -> None:
        """Create the remote repository with the configured owner and privacy."""
        self.log.debug("Remote repo does not exist; will create and initialize (repo=%s, owner=%s)",
                       op.repository, op.owner)
        opts = CreateRepoOpts(
            name=op.repository,
            owner=op.owner,
            description=REPOSITORY_DESCRIPTION,
            personal=op.personal,
            privacy=True,
        )
        try:
            self.retry.run(self._provider.create_repo, opts)
        except GitProviderError as exc:
            raise ConfigVersionControlFailedError(f"could not create repo: {exc}") from exc

    def initialize_local_repository(self, op: OperationContext) -> None:
        """``git init``, seed commit, then create and switch to ``op.branch``."""
        client = self.git_tools.client
        try:
            client.init()
        except GitError as exc:
            raise ConfigVersionControlFailedError(f"could not initialize repo: {exc}") from exc

        # git requires at least one commit in the repo to branch from
        try:
            client.commit(SEED_COMMIT_MESSAGE)
        except GitError as exc:
            raise ConfigVersionControlFailedError(f"initializing repository: {exc}") from exc

        try:
            client.branch(op.branch)
        except GitError as exc:
            raise ConfigVersionControlFailedError(f"creating branch: {exc}") from exc

    def _switch_branch(self, branch: str) -> None:
        try:
            self.git_tools.client.branch(branch)
        except GitError as exc:
            raise ConfigVersionControlFailedError(
                f"failed to switch to git branch {branch}: {exc}"
            ) from exc

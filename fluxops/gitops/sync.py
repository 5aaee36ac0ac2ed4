"""SyncEngine — keep the working copy on the target branch and publish commits."""

from __future__ import annotations

import logging

from fluxops.errors import ConfigVersionControlFailedError, GitError
from fluxops.gitops.provisioner import RepositoryProvisioner
from fluxops.models.context import OperationContext
from fluxops.retry import RetryPolicy
from fluxops.vcs.factory import GitTools


class SyncEngine:
    """Local state sync, staging and the commit+push workflow.

    Parameters
    ----------
    git_tools:
        Client and writer for the working copy.
    provisioner:
        Provides the clone+branch path used when no working copy exists.
    retry:
        Policy applied to push and pull.  Commit is local and never retried.
    logger:
        Optional logger; defaults to the module logger.
    """

    def __init__(
        self,
        git_tools: GitTools,
        provisioner: RepositoryProvisioner,
        retry: RetryPolicy,
        logger: logging.Logger | None = None,
    ) -> None:
        self.git_tools = git_tools
        self.provisioner = provisioner
        self.retry = retry
        self.log = logger or logging.getLogger(__name__)

    def sync_local_state(self, op: OperationContext) -> None:
        """Clone if there is no working copy, else switch to ``op.branch``.

        The branch is not pulled; only :meth:`pull` fetches remote changes.
        """
        if not self.provisioner.has_local_repository():
            try:
                self.provisioner.clone(op)
            except GitError as exc:
                raise ConfigVersionControlFailedError(f"failed cloning git repo: {exc}") from exc
            return

        try:
            self.git_tools.client.branch(op.branch)
        except GitError as exc:
            raise ConfigVersionControlFailedError(
                f"failed to switch to git branch {op.branch}: {exc}"
            ) from exc

    def stage(self, path: str) -> None:
        try:
            self.git_tools.client.add(path)
        except GitError as exc:
            raise ConfigVersionControlFailedError(f"adding {path} to git: {exc}", path) from exc

    def remove(self, path: str) -> None:
        try:
            self.git_tools.client.remove(path)
        except GitError as exc:
            raise ConfigVersionControlFailedError(f"removing {path} in git: {exc}", path) from exc

    def commit_and_push(self, path: str, message: str) -> None:
        """Commit staged changes under *message* and push them.

        Raises :class:`ConfigVersionControlFailedError` if the commit fails
        or the push still fails after every retry.
        """
        client = self.git_tools.client
        try:
            client.commit(message)
        except GitError as exc:
            raise ConfigVersionControlFailedError(f"committing {path} to git: {exc}", path) from exc

        try:
            self.retry.run(client.push)
        except Exception as exc:
            raise ConfigVersionControlFailedError(f"pushing {path} to git: {exc}", path) from exc

    def pull(self, branch: str) -> None:
        """Pull *branch* from the remote (retried); errors propagate."""
        self.retry.run(self.git_tools.client.pull, branch)

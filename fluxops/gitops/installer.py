"""ToolkitInstaller — version control cluster configuration and run Flux on the cluster.

Installing sets up the configuration repository (creating it on GitHub if
needed), commits the cluster and toolkit manifests to the configured branch
and path, and bootstraps the toolkit so the cluster reconciles from that
path.  If bootstrap fails the toolkit is uninstalled on a best-effort basis.

When the installer is built without :class:`GitTools`, GitOps is not
configured and every operation logs and returns without side effects.
"""

from __future__ import annotations

import logging
import posixpath
from typing import Any, Callable

from fluxops.config import (
    DEFAULT_REMOTE,
    DELETE_COMMIT_MESSAGE,
    INITIAL_COMMIT_MESSAGE,
    UPDATE_COMMIT_MESSAGE,
)
from fluxops.errors import (
    ConfigVersionControlFailedError,
    GitError,
    ManifestGenerationError,
    ToolkitBootstrapError,
    ValidationError,
)
from fluxops.gitops.provisioner import RepositoryProvisioner
from fluxops.gitops.sync import SyncEngine
from fluxops.gitops.validation import (
    ValidationResult,
    flux_path_validation,
    validate_local_config_path_does_not_exist,
)
from fluxops.log import mark_fail, mark_success
from fluxops.manifests.generator import ManifestGenerator
from fluxops.models.cluster import CliConfig, ClusterContext, ClusterSpec
from fluxops.models.context import OperationContext
from fluxops.retry import RetryPolicy
from fluxops.toolkit.client import ToolkitClient
from fluxops.vcs.factory import GitTools


class ToolkitInstaller:
    """Orchestrate GitOps repository setup and the Flux toolkit lifecycle.

    Parameters
    ----------
    toolkit:
        Client driving the toolkit in the target cluster.
    git_tools:
        Repository collaborators, or *None* when GitOps is not configured.
    cli_config:
        Credentials passed to generic git bootstrap.
    retry:
        Policy for network-facing calls; defaults to 5 attempts, 5s apart.
    logger:
        Optional logger; defaults to the module logger.
    """

    def __init__(
        self,
        toolkit: ToolkitClient,
        git_tools: GitTools | None,
        cli_config: CliConfig | None = None,
        *,
        retry: RetryPolicy | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.toolkit = toolkit
        self.git_tools = git_tools
        self.cli_config = cli_config
        self.log = logger or logging.getLogger(__name__)
        self.set_retry_policy(retry or RetryPolicy(logger=self.log))

    def set_retry_policy(self, retry: RetryPolicy) -> None:
        """Replace the retry policy used by every collaborator call."""
        self.retry = retry
        self.provisioner: RepositoryProvisioner | None = None
        self.sync: SyncEngine | None = None
        self.manifests: ManifestGenerator | None = None
        if self.git_tools is not None:
            self.provisioner = RepositoryProvisioner(self.git_tools, retry, self.log)
            self.sync = SyncEngine(self.git_tools, self.provisioner, retry, self.log)
            self.manifests = ManifestGenerator(self.git_tools.writer, self.log)

    def _should_skip(self) -> bool:
        return self.git_tools is None

    # -- Install --------------------------------------------------------------

    def install_gitops(
        self,
        cluster: ClusterContext,
        cluster_spec: ClusterSpec,
        datacenter_config: dict[str, Any] | None = None,
        machine_configs: list[dict[str, Any]] | None = None,
    ) -> None:
        """Set up the repository, commit configuration and bootstrap the toolkit."""
        if self._should_skip():
            self.log.info("GitOps field not specified, bootstrap flux skipped")
            return

        op = OperationContext(cluster_spec, datacenter_config, machine_configs)

        if op.gitops.is_github:
            self._install_github(cluster, op)
        else:
            self._install_generic_git(cluster, op)

        self._pull_after_bootstrap(op)
        mark_success(self.log, "GitOps configuration installed for cluster %s", cluster.name)

    def _install_github(self, cluster: ClusterContext, op: OperationContext) -> None:
        self.provisioner.ensure_repository(op)
        self._commit_flux_and_cluster_config(op)

        if not cluster.existing_management:
            self._bootstrap(cluster, op, self.toolkit.bootstrap_github, cluster, op.gitops)

    def _install_generic_git(self, cluster: ClusterContext, op: OperationContext) -> None:
        try:
            self.provisioner.clone(op)
        except GitError as exc:
            raise ConfigVersionControlFailedError(exc) from exc
        self._commit_flux_and_cluster_config(op)

        if not cluster.existing_management:
            self._bootstrap(
                cluster, op, self.toolkit.bootstrap_git, cluster, op.gitops, self.cli_config,
            )

    def _bootstrap(
        self,
        cluster: ClusterContext,
        op: OperationContext,
        fn: Callable[..., None],
        *args: Any,
    ) -> None:
        try:
            self.retry.run(fn, *args)
        except Exception as exc:
            mark_fail(self.log, "Flux bootstrap failed for cluster %s", cluster.name)
            self._uninstall_toolkit(cluster, op)
            raise ToolkitBootstrapError(f"bootstrapping flux: {exc}") from exc

    def _uninstall_toolkit(self, cluster: ClusterContext, op: OperationContext) -> None:
        try:
            self.retry.run(self.toolkit.uninstall, cluster, op.gitops)
        except Exception as exc:
            self.log.warning("Could not uninstall flux components: %s", exc)

    def _commit_flux_and_cluster_config(self, op: OperationContext) -> None:
        """Write the manifests, then stage, commit and push them in one commit."""
        self.log.info("Adding cluster configuration files to Git")

        try:
            validate_local_config_path_does_not_exist(op, self.git_tools.repo_dir)
            self.manifests.write_eksa_system_files(op)
            if op.cluster_spec.is_self_managed:
                self.manifests.write_flux_system_files(op)
            else:
                self.log.debug("Skipping flux custom manifest files")
        except (ValidationError, ManifestGenerationError) as exc:
            raise ConfigVersionControlFailedError(exc) from exc

        p = posixpath.dirname(op.path) or "."
        self.sync.stage(p)
        self.sync.commit_and_push(p, INITIAL_COMMIT_MESSAGE)
        self.log.debug("Finished pushing cluster config and flux custom manifest files to git")

    def _pull_after_bootstrap(self, op: OperationContext) -> None:
        self.log.debug(
            "Pulling from remote after Flux bootstrap to keep the local repository in sync "
            "(remote=%s, branch=%s)", DEFAULT_REMOTE, op.branch,
        )
        try:
            self.sync.pull(op.branch)
        except Exception as exc:
            self.log.error(
                "Error when pulling from remote repository after Flux bootstrap; ensure local "
                "repository is up-to-date with remote (git pull) (remote=%s, branch=%s): %s",
                DEFAULT_REMOTE, op.branch, exc,
            )

    # -- Repository maintenance -----------------------------------------------

    def update_git_eksa_spec(
        self,
        cluster_spec: ClusterSpec,
        datacenter_config: dict[str, Any] | None,
        machine_configs: list[dict[str, Any]] | None,
    ) -> None:
        """Regenerate the cluster config manifests and push them as an update commit."""
        if self._should_skip():
            self.log.info("GitOps field not specified, update git repo skipped")
            return

        op = OperationContext(cluster_spec, datacenter_config, machine_configs)
        self.sync.sync_local_state(op)
        self.manifests.write_eksa_system_files(op)

        path = op.eksa_system_dir
        self.sync.stage(path)
        self.sync.commit_and_push(path, UPDATE_COMMIT_MESSAGE)
        self.log.debug("Finished pushing updated cluster config file to git (repository=%s)", op.repository)

    def cleanup_git_repo(self, cluster_spec: ClusterSpec) -> None:
        """Remove the cluster's files from the repository.

        Workload clusters lose their eksa-system directory; self-managed
        clusters lose the whole configuration path.
        """
        if self._should_skip():
            self.log.info("GitOps field not specified, clean up git repo skipped")
            return

        op = OperationContext(cluster_spec)
        self.sync.sync_local_state(op)

        p = op.eksa_system_dir if cluster_spec.is_managed else op.path
        if not (self.git_tools.repo_dir / p).exists():
            self.log.debug("Cluster dir %s does not exist in git, skip clean up", p)
            return

        self.sync.remove(p)
        self.sync.commit_and_push(p, DELETE_COMMIT_MESSAGE)
        self.log.debug("Finished cleaning up cluster files in git (repository=%s)", op.repository)

    # -- Toolkit control ------------------------------------------------------

    def pause_kustomization(self, cluster: ClusterContext, cluster_spec: ClusterSpec) -> None:
        if self._should_skip():
            self.log.info("GitOps field not specified, pause flux kustomization skipped")
            return
        gitops = cluster_spec.gitops
        self.log.debug("Pause reconciliation of all Kustomization (namespace=%s)", gitops.system_namespace)
        self.retry.run(self.toolkit.suspend_kustomization, cluster, gitops)

    def resume_kustomization(self, cluster: ClusterContext, cluster_spec: ClusterSpec) -> None:
        if self._should_skip():
            self.log.info("GitOps field not specified, resume flux kustomization skipped")
            return
        gitops = cluster_spec.gitops
        self.log.debug("Resume reconciliation of all Kustomization (namespace=%s)", gitops.system_namespace)
        self.retry.run(self.toolkit.resume_kustomization, cluster, gitops)

    def force_reconcile_git_repo(self, cluster: ClusterContext, cluster_spec: ClusterSpec) -> None:
        if self._should_skip():
            self.log.info("GitOps not configured, force reconcile flux git repo skipped")
            return
        self.toolkit.force_reconcile_git_repo(cluster, cluster_spec.gitops.system_namespace)

    def delete_system_secret(self, cluster: ClusterContext, cluster_spec: ClusterSpec) -> None:
        if self._should_skip():
            self.log.info("GitOps not configured, delete flux system secret skipped")
            return
        self.toolkit.delete_system_secret(cluster, cluster_spec.gitops.system_namespace)

    # -- Validation -----------------------------------------------------------

    def validations(self, cluster_spec: ClusterSpec) -> list[ValidationResult]:
        """Return the GitOps pre-flight validation results for *cluster_spec*."""
        if self._should_skip():
            return []
        op = OperationContext(cluster_spec)
        return [flux_path_validation(op, self.git_tools.provider)]

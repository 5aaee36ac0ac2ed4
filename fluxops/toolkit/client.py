"""Abstract ToolkitClient interface for the in-cluster Flux controllers."""

from __future__ import annotations

import abc

from fluxops.models.cluster import CliConfig, ClusterContext, GitOpsConfig


class ToolkitClient(abc.ABC):
    """Basic commands of the Flux toolkit against one cluster."""

    @abc.abstractmethod
    def bootstrap_github(self, cluster: ClusterContext, gitops: GitOpsConfig) -> None:
        """Bootstrap toolkit components from a GitHub repository."""

    @abc.abstractmethod
    def bootstrap_git(
        self, cluster: ClusterContext, gitops: GitOpsConfig, cli_config: CliConfig | None
    ) -> None:
        """Bootstrap toolkit components from a generic git repository."""

    @abc.abstractmethod
    def uninstall(self, cluster: ClusterContext, gitops: GitOpsConfig) -> None:
        """Remove the toolkit components and resources from the cluster."""

    @abc.abstractmethod
    def suspend_kustomization(self, cluster: ClusterContext, gitops: GitOpsConfig) -> None:
        """Pause reconciliation of the root Kustomization."""

    @abc.abstractmethod
    def resume_kustomization(self, cluster: ClusterContext, gitops: GitOpsConfig) -> None:
        """Resume a paused Kustomization."""

    @abc.abstractmethod
    def force_reconcile_git_repo(self, cluster: ClusterContext, namespace: str) -> None:
        """Sync the git source with the latest commit."""

    @abc.abstractmethod
    def delete_system_secret(self, cluster: ClusterContext, namespace: str) -> None:
        """Delete the flux-system git credentials secret."""

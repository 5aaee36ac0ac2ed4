"""Cluster and GitOps configuration models.

A :class:`ClusterSpec` describes the desired cluster together with the
GitOps repository that will hold its configuration.  A
:class:`ClusterContext` identifies the running cluster the toolkit is
installed into.
"""

from __future__ import annotations

import posixpath
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from fluxops.config import DEFAULT_BRANCH, DEFAULT_SYSTEM_NAMESPACE


class GithubProviderConfig(BaseModel):
    """Repository hosted on GitHub; created on demand when missing."""

    model_config = ConfigDict(frozen=True)

    owner: str
    repository: str
    personal: bool = False


class GitProviderConfig(BaseModel):
    """Generic git endpoint, assumed to exist already."""

    model_config = ConfigDict(frozen=True)

    repository_url: str


class GitOpsConfig(BaseModel):
    """Where and how cluster configuration is version controlled."""

    model_config = ConfigDict(frozen=True)

    name: str = "flux"
    branch: str = DEFAULT_BRANCH
    cluster_config_path: str
    system_namespace: str = DEFAULT_SYSTEM_NAMESPACE
    github: GithubProviderConfig | None = None
    git: GitProviderConfig | None = None

    @model_validator(mode="after")
    def _exactly_one_provider(self) -> GitOpsConfig:
        if (self.github is None) == (self.git is None):
            raise ValueError("exactly one of 'github' or 'git' must be configured")
        return self

    @property
    def is_github(self) -> bool:
        return self.github is not None

    @property
    def repository(self) -> str:
        """Repository name: GitHub repo, or the last URL segment sans extension."""
        if self.github is not None:
            return self.github.repository
        if self.git is not None:
            base = posixpath.basename(self.git.repository_url.rstrip("/"))
            return posixpath.splitext(base)[0]
        return ""

    @property
    def owner(self) -> str:
        return self.github.owner if self.github is not None else ""

    @property
    def personal(self) -> bool:
        return self.github.personal if self.github is not None else False

    def to_manifest(self) -> dict[str, Any]:
        """Return the FluxConfig resource for this configuration."""
        spec: dict[str, Any] = {
            "branch": self.branch,
            "clusterConfigPath": self.cluster_config_path,
            "systemNamespace": self.system_namespace,
        }
        if self.github is not None:
            spec["github"] = {
                "owner": self.github.owner,
                "repository": self.github.repository,
                "personal": self.github.personal,
            }
        if self.git is not None:
            spec["git"] = {"repositoryUrl": self.git.repository_url}
        return {
            "kind": "FluxConfig",
            "metadata": {"name": self.name},
            "spec": spec,
        }


class FluxImages(BaseModel):
    """Versioned controller images patched into the flux-system manifests."""

    model_config = ConfigDict(frozen=True)

    source_controller: str = "ghcr.io/fluxcd/source-controller:v1.2.4"
    kustomize_controller: str = "ghcr.io/fluxcd/kustomize-controller:v1.2.2"
    helm_controller: str = "ghcr.io/fluxcd/helm-controller:v0.37.4"
    notification_controller: str = "ghcr.io/fluxcd/notification-controller:v1.2.4"


class ClusterSpec(BaseModel):
    """Desired cluster definition plus its GitOps configuration.

    A cluster whose ``management_cluster_name`` is unset or equal to its own
    name is self-managed and runs its own toolkit.  Any other cluster is a
    workload cluster reconciled by its management cluster's toolkit.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    management_cluster_name: str | None = None
    gitops: GitOpsConfig
    flux_images: FluxImages = Field(default_factory=FluxImages)
    spec: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_self_managed(self) -> bool:
        return self.management_cluster_name in (None, "", self.name)

    @property
    def is_managed(self) -> bool:
        return not self.is_self_managed

    def to_manifest(self) -> dict[str, Any]:
        """Return the Cluster resource, with GitOps and management references."""
        spec: dict[str, Any] = dict(self.spec)
        spec["gitOpsRef"] = {"kind": "FluxConfig", "name": self.gitops.name}
        spec["managementCluster"] = {
            "name": self.management_cluster_name or self.name,
        }
        return {
            "kind": "Cluster",
            "metadata": {"name": self.name},
            "spec": spec,
        }


class ClusterContext(BaseModel):
    """A running cluster targeted by toolkit operations."""

    model_config = ConfigDict(frozen=True)

    name: str
    kubeconfig: str | None = None
    existing_management: bool = False


class CliConfig(BaseModel):
    """Credentials used when bootstrapping against a generic git endpoint."""

    model_config = ConfigDict(frozen=True)

    git_private_key_file: str = ""
    git_ssh_key_passphrase: str = ""
    git_known_hosts_file: str = ""

"""OperationContext — per-call bundle of cluster spec and manifest payloads."""

from __future__ import annotations

import posixpath
from dataclasses import dataclass
from typing import Any

from fluxops.config import EKSA_SYSTEM_DIR
from fluxops.models.cluster import ClusterSpec, GitOpsConfig


@dataclass(frozen=True)
class OperationContext:
    """Everything one GitOps operation needs to know about its cluster.

    Built fresh for each public call and never mutated, so no state leaks
    between operations.  The datacenter and machine configs are only used
    when generating the cluster configuration manifest.
    """

    cluster_spec: ClusterSpec
    datacenter_config: dict[str, Any] | None = None
    machine_configs: list[dict[str, Any]] | None = None

    @property
    def gitops(self) -> GitOpsConfig:
        return self.cluster_spec.gitops

    @property
    def cluster_name(self) -> str:
        return self.cluster_spec.name

    @property
    def branch(self) -> str:
        return self.gitops.branch

    @property
    def namespace(self) -> str:
        return self.gitops.system_namespace

    @property
    def repository(self) -> str:
        return self.gitops.repository

    @property
    def owner(self) -> str:
        return self.gitops.owner

    @property
    def personal(self) -> bool:
        return self.gitops.personal

    @property
    def path(self) -> str:
        """Base configuration path inside the repository."""
        return self.gitops.cluster_config_path

    @property
    def eksa_system_dir(self) -> str:
        return posixpath.join(self.path, self.cluster_name, EKSA_SYSTEM_DIR)

    @property
    def flux_system_dir(self) -> str:
        return posixpath.join(self.path, self.namespace)

    @property
    def has_manifest_payload(self) -> bool:
        return self.datacenter_config is not None or self.machine_configs is not None

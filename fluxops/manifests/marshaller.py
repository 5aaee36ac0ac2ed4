"""Serialise a cluster spec and its provider configs to a YAML stream."""

from __future__ import annotations

from typing import Any

import yaml

from fluxops.config import EKSA_API_VERSION
from fluxops.models.cluster import ClusterSpec


def _with_api_version(resource: dict[str, Any]) -> dict[str, Any]:
    if "apiVersion" in resource:
        return resource
    return {"apiVersion": EKSA_API_VERSION, **resource}


def marshal_cluster_spec(
    cluster_spec: ClusterSpec,
    datacenter_config: dict[str, Any] | None,
    machine_configs: list[dict[str, Any]] | None,
) -> str:
    """Return a multi-document YAML string for the cluster configuration.

    Documents are ordered: Cluster, FluxConfig, datacenter config, then each
    machine config.  Resources without ``apiVersion`` get the EKS-A group.
    """
    resources: list[dict[str, Any]] = [
        cluster_spec.to_manifest(),
        cluster_spec.gitops.to_manifest(),
    ]
    if datacenter_config:
        resources.append(datacenter_config)
    resources.extend(machine_configs or [])

    return yaml.safe_dump_all(
        [_with_api_version(r) for r in resources],
        default_flow_style=False,
        sort_keys=False,
        explicit_start=False,
    )

"""Pydantic models for clusters and their GitOps configuration."""

from fluxops.models.cluster import (
    CliConfig,
    ClusterContext,
    ClusterSpec,
    FluxImages,
    GitOpsConfig,
    GitProviderConfig,
    GithubProviderConfig,
)
from fluxops.models.context import OperationContext

__all__ = [
    "CliConfig",
    "ClusterContext",
    "ClusterSpec",
    "FluxImages",
    "GitOpsConfig",
    "GitProviderConfig",
    "GithubProviderConfig",
    "OperationContext",
]

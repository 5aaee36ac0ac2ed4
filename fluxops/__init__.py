"""fluxops — GitOps configuration repositories and Flux toolkit lifecycle for clusters."""

__version__ = "0.1.0"

from fluxops.errors import (
    ConfigVersionControlFailedError,
    FluxOpsError,
    RemoteDescribeError,
    RepositoryIsEmptyError,
    ToolkitBootstrapError,
)
from fluxops.gitops.installer import ToolkitInstaller
from fluxops.gitops.provisioner import ProvisionOutcome, RepositoryProvisioner
from fluxops.gitops.sync import SyncEngine
from fluxops.gitops.validation import ValidationResult
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
from fluxops.retry import RetryPolicy
from fluxops.settings import ConfigManager, Settings
from fluxops.toolkit.flux import FluxCli
from fluxops.vcs.factory import GitTools, build_git_tools

__all__ = [
    "CliConfig",
    "ClusterContext",
    "ClusterSpec",
    "ConfigManager",
    "ConfigVersionControlFailedError",
    "FluxCli",
    "FluxImages",
    "FluxOpsError",
    "GitOpsConfig",
    "GitProviderConfig",
    "GitTools",
    "GithubProviderConfig",
    "OperationContext",
    "ProvisionOutcome",
    "RemoteDescribeError",
    "RepositoryIsEmptyError",
    "RepositoryProvisioner",
    "RetryPolicy",
    "Settings",
    "SyncEngine",
    "ToolkitBootstrapError",
    "ToolkitInstaller",
    "ValidationResult",
    "build_git_tools",
]

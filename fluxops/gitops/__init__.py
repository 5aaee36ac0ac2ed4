"""GitOps workflow: repository provisioning, sync, and toolkit installation."""

from fluxops.gitops.installer import ToolkitInstaller
from fluxops.gitops.provisioner import ProvisionOutcome, RepositoryProvisioner
from fluxops.gitops.sync import SyncEngine
from fluxops.gitops.validation import ValidationResult

__all__ = [
    "ProvisionOutcome",
    "RepositoryProvisioner",
    "SyncEngine",
    "ToolkitInstaller",
    "ValidationResult",
]

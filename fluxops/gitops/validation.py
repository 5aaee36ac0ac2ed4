"""Pre-flight checks on the configuration path."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel

from fluxops.errors import ConfigPathExistsError, GitProviderError, ValidationError
from fluxops.models.context import OperationContext
from fluxops.vcs.provider import RemoteRepositoryProvider

logger = logging.getLogger(__name__)

FLUX_PATH_CHECK = "Flux path"
FLUX_PATH_REMEDIATION = "Please provide a different path or different cluster name"


class ValidationResult(BaseModel):
    """Outcome of a single named validation."""

    name: str
    remediation: str = ""
    error: str | None = None

    @property
    def passed(self) -> bool:
        return self.error is None


def validate_local_config_path_does_not_exist(op: OperationContext, repo_dir: Path) -> None:
    """Raise if a self-managed cluster's configuration path already exists locally.

    Guards against clobbering a cluster configuration already present in
    the user's repository.  Workload clusters always pass.
    """
    if not op.cluster_spec.is_self_managed:
        return
    p = repo_dir / op.path
    if p.exists():
        raise ConfigPathExistsError(f"a cluster configuration file already exists at path {p}")


def validate_remote_config_path_does_not_exist(
    op: OperationContext,
    provider: RemoteRepositoryProvider | None,
) -> None:
    """Raise if a self-managed cluster's configuration path exists on the remote branch."""
    if not op.cluster_spec.is_self_managed or provider is None:
        return
    try:
        exists = provider.path_exists(op.owner, op.repository, op.branch, op.path)
    except GitProviderError as exc:
        raise ValidationError(f"failed validating remote flux config path: {exc}") from exc
    if exists:
        raise ValidationError(f"flux path {op.path} already exists in remote repository")


def flux_path_validation(
    op: OperationContext,
    provider: RemoteRepositoryProvider | None,
) -> ValidationResult:
    """Run the remote path check and report it as a :class:`ValidationResult`."""
    try:
        validate_remote_config_path_does_not_exist(op, provider)
    except ValidationError as exc:
        logger.debug("Flux path validation failed: %s", exc)
        return ValidationResult(name=FLUX_PATH_CHECK, remediation=FLUX_PATH_REMEDIATION, error=str(exc))
    return ValidationResult(name=FLUX_PATH_CHECK, remediation=FLUX_PATH_REMEDIATION)

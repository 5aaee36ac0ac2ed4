"""Exception hierarchy for GitOps repository provisioning and Flux installs."""

from __future__ import annotations


class FluxOpsError(Exception):
    """Base error for all fluxops failures."""


class GitError(FluxOpsError):
    """Raised when a git subprocess returns a non-zero exit code."""


class RepositoryIsEmptyError(GitError):
    """Raised when cloning a remote repository that has no commits.

    An empty repository cannot be cloned, so callers initialise a local
    repository instead of treating this as a failure.
    """


class GitProviderError(FluxOpsError):
    """Raised when the remote repository hosting API call fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ToolkitError(FluxOpsError):
    """Raised when a flux or kubectl command returns a non-zero exit code."""


class ManifestGenerationError(FluxOpsError):
    """Raised when a manifest cannot be rendered or written."""


class RemoteDescribeError(FluxOpsError):
    """Raised when the remote repository cannot be described after retries."""


class ValidationError(FluxOpsError):
    """Raised when a pre-flight check fails."""


class ConfigPathExistsError(ValidationError):
    """Raised when a cluster configuration already exists at the target path."""


class ConfigVersionControlFailedError(FluxOpsError):
    """Raised when cluster configuration could not be version controlled.

    Parameters
    ----------
    err:
        The underlying error, or a message describing the failed action.
    path:
        Repository path the action was attempted on, when known.
    """

    def __init__(self, err: BaseException | str, path: str | None = None) -> None:
        self.err = err
        self.path = path
        super().__init__(
            "Encountered an error when attempting to version control "
            f"cluster config: {err}"
        )


class ToolkitBootstrapError(FluxOpsError):
    """Raised when bootstrapping the Flux toolkit fails after all retries."""

"""Version control: local working copy, remote hosting and their bundle."""

from fluxops.vcs.factory import GitTools, build_git_tools
from fluxops.vcs.provider import CreateRepoOpts, GitHubProvider, RemoteRepository, RemoteRepositoryProvider
from fluxops.vcs.repo import GitCliClient, GitClient

__all__ = [
    "CreateRepoOpts",
    "GitCliClient",
    "GitClient",
    "GitHubProvider",
    "GitTools",
    "RemoteRepository",
    "RemoteRepositoryProvider",
    "build_git_tools",
]

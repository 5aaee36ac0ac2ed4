"""GitTools — the git client, remote provider and writer for one working copy."""

from __future__ import annotations

import shlex
from dataclasses import dataclass
from pathlib import Path

from fluxops.filewriter import DirectoryWriter, FileWriter
from fluxops.models.cluster import GitOpsConfig
from fluxops.settings import Settings
from fluxops.vcs.provider import GitHubProvider, RemoteRepositoryProvider
from fluxops.vcs.repo import GitCliClient, GitClient


@dataclass
class GitTools:
    """Collaborators bound to a single repository working directory.

    *provider* is *None* for generic git endpoints, which have no hosting
    API to describe or create repositories with.
    """

    client: GitClient
    writer: FileWriter
    provider: RemoteRepositoryProvider | None = None

    @property
    def repo_dir(self) -> Path:
        return self.writer.dir


def _ssh_command(settings: Settings) -> str | None:
    if not settings.git_private_key_file:
        return None
    parts = ["ssh", "-i", settings.git_private_key_file, "-o", "IdentitiesOnly=yes"]
    if settings.git_known_hosts_file:
        parts += ["-o", f"UserKnownHostsFile={settings.git_known_hosts_file}"]
    return shlex.join(parts)


def build_git_tools(
    gitops: GitOpsConfig,
    repo_dir: str | Path,
    settings: Settings,
) -> GitTools:
    """Build :class:`GitTools` for *gitops*, with the working copy at *repo_dir*."""
    writer = DirectoryWriter(repo_dir)

    if gitops.github is not None:
        url = f"https://github.com/{gitops.github.owner}/{gitops.github.repository}.git"
        client = GitCliClient(
            repo_dir,
            url,
            author_name=settings.git_author_name,
            author_email=settings.git_author_email,
            auth_token=settings.github_token or None,
        )
        provider = GitHubProvider(
            gitops.github.owner,
            gitops.github.repository,
            settings.github_token,
            personal=gitops.github.personal,
        )
        return GitTools(client=client, writer=writer, provider=provider)

    if gitops.git is None:
        raise ValueError("GitOps config has no github or git provider")
    client = GitCliClient(
        repo_dir,
        gitops.git.repository_url,
        author_name=settings.git_author_name,
        author_email=settings.git_author_email,
        ssh_command=_ssh_command(settings),
    )
    return GitTools(client=client, writer=writer)

"""Remote repository hosting: the provider interface and a GitHub backend."""

from __future__ import annotations

import abc
import logging
from typing import Any
from urllib.parse import quote

import requests
from pydantic import BaseModel

from fluxops.errors import GitProviderError

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"


class RemoteRepository(BaseModel):
    """Descriptor of an existing remote repository."""

    name: str
    owner: str = ""
    organization: str = ""
    clone_url: str = ""
    is_empty: bool = False


class CreateRepoOpts(BaseModel):
    """Options for creating a remote repository."""

    name: str
    owner: str
    description: str = ""
    personal: bool = False
    privacy: bool = True


class RemoteRepositoryProvider(abc.ABC):
    """Hosted git service holding the configuration repository."""

    @abc.abstractmethod
    def get_repo(self) -> RemoteRepository | None:
        """Describe the configured repository, or return *None* if it is missing."""

    @abc.abstractmethod
    def create_repo(self, opts: CreateRepoOpts) -> RemoteRepository:
        """Create a repository and return its descriptor."""

    @abc.abstractmethod
    def path_exists(self, owner: str, repo: str, branch: str, path: str) -> bool:
        """Return *True* if *path* exists on *branch* of ``owner/repo``."""


class GitHubProvider(RemoteRepositoryProvider):
    """GitHub REST API provider.

    Parameters
    ----------
    owner:
        User or organization owning the repository.
    repository:
        Repository name.
    token:
        Personal access token with ``repo`` scope.
    personal:
        *True* if *owner* is the token's user rather than an organization.
    api_url:
        API root, for GitHub Enterprise installations.
    session:
        Optional pre-configured :class:`requests.Session`.
    timeout:
        Per-request timeout in seconds.
    """

    def __init__(
        self,
        owner: str,
        repository: str,
        token: str,
        *,
        personal: bool = False,
        api_url: str = GITHUB_API_URL,
        session: requests.Session | None = None,
        timeout: float = 30.0,
    ) -> None:
        if not token:
            raise GitProviderError("a GitHub access token is required")
        self.owner = owner
        self.repository = repository
        self.personal = personal
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        })

    def _request(self, method: str, path: str, **kwargs: Any) -> requests.Response:
        url = f"{self.api_url}{path}"
        logger.debug("GitHub %s %s", method, url)
        try:
            return self._session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise GitProviderError(f"GitHub {method} {path} failed: {exc}") from exc

    @staticmethod
    def _raise_for(resp: requests.Response, action: str) -> None:
        if resp.status_code >= 400:
            try:
                detail = resp.json().get("message", "")
            except ValueError:
                detail = resp.text[:200]
            raise GitProviderError(
                f"{action} failed ({resp.status_code}): {detail}",
                status_code=resp.status_code,
            )

    def _descriptor(self, data: dict[str, Any], is_empty: bool) -> RemoteRepository:
        owner = data.get("owner") or {}
        return RemoteRepository(
            name=data.get("name", self.repository),
            owner=owner.get("login", self.owner),
            organization="" if owner.get("type") == "User" else owner.get("login", ""),
            clone_url=data.get("clone_url", ""),
            is_empty=is_empty,
        )

    def _is_empty(self, owner: str, repo: str) -> bool:
        # GitHub answers 409 "Git Repository is empty" when listing commits.
        resp = self._request("GET", f"/repos/{owner}/{repo}/commits", params={"per_page": 1})
        return resp.status_code == 409

    def get_repo(self) -> RemoteRepository | None:
        resp = self._request("GET", f"/repos/{self.owner}/{self.repository}")
        if resp.status_code == 404:
            logger.debug("GitHub repo %s/%s not found", self.owner, self.repository)
            return None
        self._raise_for(resp, f"describing repo {self.owner}/{self.repository}")
        return self._descriptor(resp.json(), self._is_empty(self.owner, self.repository))

    def create_repo(self, opts: CreateRepoOpts) -> RemoteRepository:
        path = "/user/repos" if opts.personal else f"/orgs/{opts.owner}/repos"
        payload = {
            "name": opts.name,
            "description": opts.description,
            "private": opts.privacy,
        }
        resp = self._request("POST", path, json=payload)
        self._raise_for(resp, f"creating repo {opts.owner}/{opts.name}")
        logger.info("Created GitHub repo %s/%s", opts.owner, opts.name)
        return self._descriptor(resp.json(), is_empty=True)

    def path_exists(self, owner: str, repo: str, branch: str, path: str) -> bool:
        resp = self._request(
            "GET",
            f"/repos/{owner}/{repo}/contents/{quote(path.strip('/'))}",
            params={"ref": branch},
        )
        if resp.status_code == 404:
            return False
        self._raise_for(resp, f"checking path {path} in {owner}/{repo}@{branch}")
        return True

"""FluxCli — :class:`ToolkitClient` backed by the ``flux`` and ``kubectl`` binaries."""

from __future__ import annotations

import logging
import os
import subprocess

from fluxops.errors import ToolkitError
from fluxops.models.cluster import CliConfig, ClusterContext, GitOpsConfig
from fluxops.toolkit.client import ToolkitClient

logger = logging.getLogger(__name__)

# Name flux bootstrap gives the root GitRepository, Kustomization and secret.
ROOT_RESOURCE_NAME = "flux-system"


class FluxCli(ToolkitClient):
    """Run toolkit operations through the flux CLI.

    Parameters
    ----------
    flux_binary, kubectl_binary:
        Executables to invoke.
    github_token:
        Token exported as ``GITHUB_TOKEN`` for ``flux bootstrap github``.
    timeout:
        Per-command timeout in seconds.
    """

    def __init__(
        self,
        flux_binary: str = "flux",
        kubectl_binary: str = "kubectl",
        *,
        github_token: str = "",
        timeout: float | None = 600.0,
    ) -> None:
        self.flux_binary = flux_binary
        self.kubectl_binary = kubectl_binary
        self._github_token = github_token
        self._timeout = timeout

    def _execute(
        self,
        binary: str,
        args: list[str],
        cluster: ClusterContext,
        env: dict[str, str] | None = None,
    ) -> str:
        cmd = [binary, *args]
        if cluster.kubeconfig:
            cmd += ["--kubeconfig", cluster.kubeconfig]
        logger.debug("Executing %s (cluster=%s)", " ".join(cmd), cluster.name)
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                env={**os.environ, **env} if env else None,
                timeout=self._timeout,
            )
        except FileNotFoundError as exc:
            raise ToolkitError(f"{binary} executable not found") from exc
        except subprocess.TimeoutExpired as exc:
            raise ToolkitError(f"{binary} {args[0]} timed out after {self._timeout}s") from exc
        except OSError as exc:
            raise ToolkitError(f"{binary} {args[0]} could not be executed: {exc}") from exc
        if result.returncode != 0:
            raise ToolkitError(
                f"{binary} {' '.join(args[:2])} failed (rc={result.returncode}): "
                f"{result.stderr.strip()}"
            )
        return result.stdout

    def _flux(self, args: list[str], cluster: ClusterContext, env: dict[str, str] | None = None) -> str:
        return self._execute(self.flux_binary, args, cluster, env)

    def bootstrap_github(self, cluster: ClusterContext, gitops: GitOpsConfig) -> None:
        if gitops.github is None:
            raise ToolkitError("bootstrap github requires a github provider config")
        args = [
            "bootstrap", "github",
            f"--repository={gitops.github.repository}",
            f"--owner={gitops.github.owner}",
            f"--path={gitops.cluster_config_path}",
            f"--branch={gitops.branch}",
            f"--namespace={gitops.system_namespace}",
        ]
        if gitops.github.personal:
            args.append("--personal")
        self._flux(args, cluster, env={"GITHUB_TOKEN": self._github_token})

    def bootstrap_git(
        self, cluster: ClusterContext, gitops: GitOpsConfig, cli_config: CliConfig | None
    ) -> None:
        if gitops.git is None:
            raise ToolkitError("bootstrap git requires a generic git provider config")
        args = [
            "bootstrap", "git",
            f"--url={gitops.git.repository_url}",
            f"--path={gitops.cluster_config_path}",
            f"--branch={gitops.branch}",
            f"--namespace={gitops.system_namespace}",
            "--silent",
        ]
        env: dict[str, str] = {}
        if cli_config is not None:
            if cli_config.git_private_key_file:
                args.append(f"--private-key-file={cli_config.git_private_key_file}")
            if cli_config.git_ssh_key_passphrase:
                args.append(f"--password={cli_config.git_ssh_key_passphrase}")
            if cli_config.git_known_hosts_file:
                env["SSH_KNOWN_HOSTS"] = cli_config.git_known_hosts_file
        self._flux(args, cluster, env=env or None)

    def uninstall(self, cluster: ClusterContext, gitops: GitOpsConfig) -> None:
        self._flux(["uninstall", "--silent", f"--namespace={gitops.system_namespace}"], cluster)

    def suspend_kustomization(self, cluster: ClusterContext, gitops: GitOpsConfig) -> None:
        self._flux(
            ["suspend", "kustomization", ROOT_RESOURCE_NAME, f"--namespace={gitops.system_namespace}"],
            cluster,
        )

    def resume_kustomization(self, cluster: ClusterContext, gitops: GitOpsConfig) -> None:
        self._flux(
            ["resume", "kustomization", ROOT_RESOURCE_NAME, f"--namespace={gitops.system_namespace}"],
            cluster,
        )

    def force_reconcile_git_repo(self, cluster: ClusterContext, namespace: str) -> None:
        self._flux(
            ["reconcile", "source", "git", ROOT_RESOURCE_NAME, f"--namespace={namespace}"],
            cluster,
        )

    def delete_system_secret(self, cluster: ClusterContext, namespace: str) -> None:
        self._execute(
            self.kubectl_binary,
            ["delete", "secret", ROOT_RESOURCE_NAME, f"--namespace={namespace}", "--ignore-not-found"],
            cluster,
        )

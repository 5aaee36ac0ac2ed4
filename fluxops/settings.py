"""Settings — typed configuration merged from profiles, files and the environment.

Every :class:`Settings` field is bound to one configuration key through its
alias.  :class:`ConfigManager` collects those keys from each source in turn
and validates the merged mapping straight into ``Settings``.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from fluxops.config import DEFAULT_MAX_ATTEMPTS, DEFAULT_RETRY_DELAY_SECONDS
from fluxops.models.cluster import CliConfig
from fluxops.retry import RetryPolicy

logger = logging.getLogger(__name__)

_SECRET = {"secret": True}


class Settings(BaseModel):
    """Typed view of the merged configuration."""

    model_config = ConfigDict(populate_by_name=True)

    env: str = Field("development", alias="FLUXOPS_ENV", description="Environment profile")
    log_level: str = Field("INFO", alias="FLUXOPS_LOG_LEVEL", description="Logging level")
    log_file: str = Field(
        "", alias="FLUXOPS_LOG_FILE", description="Optional file receiving DEBUG logs"
    )
    retry_max_attempts: int = Field(
        DEFAULT_MAX_ATTEMPTS, alias="FLUXOPS_RETRY_MAX_ATTEMPTS",
        description="Attempts for each network call",
    )
    retry_delay_seconds: float = Field(
        DEFAULT_RETRY_DELAY_SECONDS, alias="FLUXOPS_RETRY_DELAY_SECONDS",
        description="Fixed delay between attempts",
    )
    git_author_name: str = Field(
        "EKS-A CLI", alias="FLUXOPS_GIT_AUTHOR_NAME", description="Commit author name"
    )
    git_author_email: str = Field(
        "eksa@localhost", alias="FLUXOPS_GIT_AUTHOR_EMAIL", description="Commit author email"
    )
    flux_binary: str = Field("flux", alias="FLUXOPS_FLUX_BINARY", description="flux executable")
    kubectl_binary: str = Field(
        "kubectl", alias="FLUXOPS_KUBECTL_BINARY", description="kubectl executable"
    )
    github_token: str = Field(
        "", alias="EKSA_GITHUB_TOKEN", description="GitHub personal access token",
        json_schema_extra=_SECRET,
    )
    git_private_key_file: str = Field(
        "", alias="EKSA_GIT_PRIVATE_KEY", description="SSH private key file for generic git"
    )
    git_ssh_key_passphrase: str = Field(
        "", alias="EKSA_GIT_SSH_KEY_PASSPHRASE", description="SSH key passphrase",
        json_schema_extra=_SECRET,
    )
    git_known_hosts_file: str = Field(
        "", alias="EKSA_GIT_KNOWN_HOSTS", description="SSH known_hosts file for generic git"
    )

    def retry_policy(
        self, logger: logging.Logger | None = None, cancel: threading.Event | None = None
    ) -> RetryPolicy:
        return RetryPolicy(
            self.retry_max_attempts, self.retry_delay_seconds, logger=logger, cancel=cancel
        )

    def cli_config(self) -> CliConfig:
        return CliConfig(
            git_private_key_file=self.git_private_key_file,
            git_ssh_key_passphrase=self.git_ssh_key_passphrase,
            git_known_hosts_file=self.git_known_hosts_file,
        )


# Configuration key for every Settings field, in declaration order.
_CONFIG_KEYS: tuple[str, ...] = tuple(f.alias for f in Settings.model_fields.values())

_PROFILES: dict[str, dict[str, str]] = {
    "development": {"FLUXOPS_LOG_LEVEL": "DEBUG"},
    "production": {"FLUXOPS_LOG_LEVEL": "INFO"},
    "testing": {
        "FLUXOPS_LOG_LEVEL": "DEBUG",
        "FLUXOPS_RETRY_MAX_ATTEMPTS": "2",
        "FLUXOPS_RETRY_DELAY_SECONDS": "0",
    },
}


def _defaults() -> dict[str, str]:
    return {f.alias: str(f.default) for f in Settings.model_fields.values()}


def _profile(name: str) -> dict[str, str]:
    if name not in _PROFILES:
        logger.warning("Unknown profile %r; using defaults", name)
        return {"FLUXOPS_ENV": name}
    return {"FLUXOPS_ENV": name, **_PROFILES[name]}


def _read_json_layer(path: Path) -> dict[str, str]:
    if not path.is_file():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError):
        logger.warning("Could not read %s", path, exc_info=True)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: expected a JSON object", path)
        return {}
    return {str(k): str(v) for k, v in data.items()}


def _read_dotenv_layer(path: Path) -> dict[str, str]:
    if not path.is_file():
        return {}
    try:
        text = path.read_text(encoding="utf-8")
    except OSError:
        logger.warning("Could not read %s", path, exc_info=True)
        return {}
    layer: dict[str, str] = {}
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        layer[key.strip()] = value.strip()
    return layer


def _environment_layer() -> dict[str, str]:
    return {key: os.environ[key] for key in _CONFIG_KEYS if key in os.environ}


class ConfigManager:
    """Manage fluxops configuration across environments."""

    def generate_env_template(self, project_path: str | Path) -> Path:
        """Write ``.env.example`` listing every configuration key.

        Secret keys are always left blank.
        """
        env_path = Path(project_path) / ".env.example"
        lines = ["# fluxops configuration template", "# Copy to .env and fill in values", ""]
        for field in Settings.model_fields.values():
            secret = bool(field.json_schema_extra and field.json_schema_extra.get("secret"))
            lines.append(f"# {field.description}" + (" (secret)" if secret else ""))
            lines.append(f"{field.alias}=" + ("" if secret else str(field.default)))
            lines.append("")
        env_path.write_text("\n".join(lines), encoding="utf-8")
        return env_path

    def load_config(self, project_path: str | Path) -> dict[str, str]:
        """Merge defaults, profile, ``.fluxops/config.json``, ``.env`` and the environment.

        Later layers win.  The profile is chosen by ``FLUXOPS_ENV`` in the
        process environment.
        """
        root = Path(project_path)
        config = _defaults()
        layers = (
            _profile(os.environ.get("FLUXOPS_ENV", config["FLUXOPS_ENV"])),
            _read_json_layer(root / ".fluxops" / "config.json"),
            _read_dotenv_layer(root / ".env"),
            _environment_layer(),
        )
        for layer in layers:
            config.update(layer)
        return config

    def load_settings(self, project_path: str | Path) -> Settings:
        return Settings.model_validate(self.load_config(project_path))

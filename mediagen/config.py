"""Configuration loading: service credentials, HTTP timeout, poll budgets.

Each service authenticates with an API key sent in a single header. Keys
come from the YAML config, falling back to ``<SERVICE>_API_KEY`` in the
environment when the config value is empty or still a placeholder.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from mediagen.models import DEFAULT_POLL_POLICIES, MediaKind, PollPolicy

_DEFAULT_CONFIG = "config.yaml"
_DEFAULT_TIMEOUT = 60.0


@dataclass(frozen=True)
class ServiceConfig:
    """Endpoint and credentials for one upstream service.

    Attributes:
        name: Service key referenced by provider adapters.
        base_url: Root URL that adapter paths are appended to.
        api_key: Key from the config file, may be a placeholder.
        auth_header: Header carrying the key.
        auth_prefix: Prefix prepended to the key in that header.
    """
    name: str
    base_url: str
    api_key: str = ""
    auth_header: str = "Authorization"
    auth_prefix: str = "Bearer "

    @property
    def env_var(self) -> str:
        return f"{self.name.upper()}_API_KEY"

    def require_key(self) -> str:
        """Return the API key, or raise ValueError if none is configured."""
        key = self.api_key
        if not key or key.startswith("YOUR_"):
            key = os.environ.get(self.env_var, "")
        if not key:
            raise ValueError(
                f"API key not configured for '{self.name}'. Set 'services.{self.name}.api_key' "
                f"in config.yaml or the {self.env_var} environment variable."
            )
        return key

    def auth_headers(self) -> dict[str, str]:
        return {self.auth_header: f"{self.auth_prefix}{self.require_key()}"}


DEFAULT_SERVICES: dict[str, ServiceConfig] = {
    "kie": ServiceConfig("kie", "https://api.kie.ai"),
    "minimax": ServiceConfig("minimax", "https://api.minimaxi.chat/v1"),
    "pixazo": ServiceConfig(
        "pixazo",
        "https://gateway.pixazo.ai/flux-1-schnell/v1",
        auth_header="Ocp-Apim-Subscription-Key",
        auth_prefix="",
    ),
    "presenton": ServiceConfig("presenton", "https://api.presenton.ai/api/v1"),
    "heygen": ServiceConfig("heygen", "https://api.heygen.com", auth_header="X-Api-Key", auth_prefix=""),
    "xai": ServiceConfig("xai", "https://api.x.ai/v1"),
}


@dataclass
class Settings:
    """Parsed configuration."""
    services: dict[str, ServiceConfig] = field(default_factory=lambda: dict(DEFAULT_SERVICES))
    timeout: float = _DEFAULT_TIMEOUT
    polling: dict[MediaKind, PollPolicy] = field(default_factory=lambda: dict(DEFAULT_POLL_POLICIES))
    download_dir: Path = Path("output")

    def service(self, name: str) -> ServiceConfig:
        try:
            return self.services[name]
        except KeyError:
            raise ValueError(f"No service named '{name}' in configuration") from None


def load_config(config_path: str | Path | None = None) -> dict:
    """Load the raw YAML configuration.

    Raises:
        FileNotFoundError: If the config file does not exist.
    """
    path = Path(config_path or _DEFAULT_CONFIG)
    if not path.exists():
        raise FileNotFoundError(f"Config not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def parse_settings(config: dict) -> Settings:
    """Build Settings from a parsed config dict, filling in defaults."""
    services = dict(DEFAULT_SERVICES)
    for name, raw in (config.get("services") or {}).items():
        raw = raw or {}
        base = services.get(name)
        if base is None and "base_url" not in raw:
            raise ValueError(f"Service '{name}' needs a base_url")
        services[name] = ServiceConfig(
            name=name,
            base_url=str(raw.get("base_url") or base.base_url).rstrip("/"),
            api_key=str(raw.get("api_key") or ""),
            auth_header=raw.get("auth_header") or (base.auth_header if base else "Authorization"),
            auth_prefix=raw.get("auth_prefix", base.auth_prefix if base else "Bearer "),
        )

    polling = dict(DEFAULT_POLL_POLICIES)
    for kind_name, raw in (config.get("polling") or {}).items():
        try:
            kind = MediaKind(kind_name)
        except ValueError:
            raise ValueError(f"Unknown media kind in polling config: {kind_name}") from None
        default = polling[kind]
        polling[kind] = PollPolicy(
            interval=float(raw.get("interval", default.interval)),
            max_attempts=int(raw.get("max_attempts", default.max_attempts)),
        )

    http = config.get("http") or {}
    output = config.get("output") or {}
    return Settings(
        services=services,
        timeout=float(http.get("timeout", _DEFAULT_TIMEOUT)),
        polling=polling,
        download_dir=Path(output.get("download_dir", "output")),
    )


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load and parse the config file into Settings."""
    return parse_settings(load_config(config_path))

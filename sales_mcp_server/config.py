"""Configuration management for the Sales MCP Server."""

import json
import os
from typing import Any, Dict, Optional
from dataclasses import dataclass, field


@dataclass
class ServerConfig:
    """HTTP server configuration."""
    host: str = "0.0.0.0"
    port: int = 8088
    log_level: str = "INFO"


@dataclass
class BackendAuthConfig:
    """Backend credentials. type is "basic", "bearer" or empty for none."""
    type: str = ""
    username: str = ""
    password: str = ""


@dataclass
class BackendConfig:
    """Sales backend connection configuration."""
    base_url: str = "http://localhost:8080"
    timeout_ms: int = 8000
    auth: BackendAuthConfig = field(default_factory=BackendAuthConfig)
    tenant_header: str = ""
    default_tenant: str = ""

    @property
    def timeout(self) -> float:
        """Per-call timeout in seconds."""
        return self.timeout_ms / 1000.0


@dataclass
class LimitsConfig:
    """Caps applied to both the REST and the tool-call surface."""
    resolve_limit: int = 10
    max_rows: int = 5000


@dataclass
class MCPConfig:
    """JSON-RPC tool endpoint configuration."""
    enabled: bool = True
    bearer_token: str = ""


@dataclass
class APIConfig:
    """REST endpoint configuration."""
    bearer_token: str = ""


@dataclass
class Config:
    """Main configuration."""
    server: ServerConfig = field(default_factory=ServerConfig)
    backend: BackendConfig = field(default_factory=BackendConfig)
    limits: LimitsConfig = field(default_factory=LimitsConfig)
    mcp: MCPConfig = field(default_factory=MCPConfig)
    api: APIConfig = field(default_factory=APIConfig)

    def to_dict(self) -> Dict:
        """Convert configuration to dictionary for logging setup."""
        return {
            "log_level": self.server.log_level,
            "host": self.server.host,
            "port": self.server.port,
            "log_file": "logs/sales_mcp_server.log",
            "backend_log_file": "logs/backend_api.log"
        }


# env var -> (section, key, type)
ENV_OVERRIDES = {
    "SERVER_HOST": ("server", "host", str),
    "SERVER_PORT": ("server", "port", int),
    "LOG_LEVEL": ("server", "log_level", str),
    "BACKEND_BASE_URL": ("backend", "base_url", str),
    "BACKEND_TIMEOUT_MS": ("backend", "timeout_ms", int),
    "BACKEND_AUTH_TYPE": ("backend.auth", "type", str),
    "BACKEND_USERNAME": ("backend.auth", "username", str),
    "BACKEND_PASSWORD": ("backend.auth", "password", str),
    "BACKEND_TENANT_HEADER": ("backend", "tenant_header", str),
    "BACKEND_DEFAULT_TENANT": ("backend", "default_tenant", str),
    "LIMITS_RESOLVE_LIMIT": ("limits", "resolve_limit", int),
    "LIMITS_MAX_ROWS": ("limits", "max_rows", int),
    "MCP_ENABLED": ("mcp", "enabled", bool),
    "MCP_BEARER_TOKEN": ("mcp", "bearer_token", str),
    "API_BEARER_TOKEN": ("api", "bearer_token", str),
}

DEFAULT_CONFIG_PATHS = ["config.json", "configs/config.json"]


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def apply_env_overrides(config: Config, environ: Optional[Dict[str, str]] = None) -> Config:
    """Apply environment variable overrides on top of a loaded configuration."""
    if environ is None:
        environ = os.environ

    for env_name, (section, key, kind) in ENV_OVERRIDES.items():
        raw = environ.get(env_name)
        if raw is None or raw == "":
            continue

        target: Any = config
        for part in section.split("."):
            target = getattr(target, part)

        try:
            value = _parse_bool(raw) if kind is bool else kind(raw)
        except ValueError as e:
            raise ValueError(f"Invalid value for {env_name}: {raw!r}") from e
        setattr(target, key, value)

    return config


def _validate(config: Config) -> Config:
    if config.limits.resolve_limit <= 0:
        raise ValueError("limits.resolve_limit must be positive")
    if config.limits.max_rows <= 0:
        raise ValueError("limits.max_rows must be positive")
    if config.backend.timeout_ms <= 0:
        raise ValueError("backend.timeout_ms must be positive")
    return config


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration from file, then apply environment overrides."""
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH") or None

    if config_path is None:
        for path in DEFAULT_CONFIG_PATHS:
            if os.path.exists(path):
                config_path = path
                break
        else:
            return _validate(apply_env_overrides(Config()))

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        backend_data = dict(data.get("backend", {}))
        auth_config = BackendAuthConfig(**backend_data.pop("auth", {}))

        config = Config(
            server=ServerConfig(**data.get("server", {})),
            backend=BackendConfig(auth=auth_config, **backend_data),
            limits=LimitsConfig(**data.get("limits", {})),
            mcp=MCPConfig(**data.get("mcp", {})),
            api=APIConfig(**data.get("api", {}))
        )
    except (OSError, json.JSONDecodeError, TypeError, AttributeError) as e:
        raise ValueError(f"Failed to load config from {config_path}: {e}")

    return _validate(apply_env_overrides(config))

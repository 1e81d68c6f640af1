"""Configuration management for deploywait using Pydantic."""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from deploywait.clients.netlify import DEFAULT_API_URL
from deploywait.core.exceptions import ConfigError
from deploywait.core.output import OutputFormat
from deploywait.core.logging import LogLevel
from deploywait.deploy.models import DeployContext
from deploywait.deploy.stages import StagePolicy, WaitPolicies


class NetlifyConfig(BaseModel):
    """Netlify API configuration."""

    auth_token: str | None = None
    api_url: str = DEFAULT_API_URL
    timeout: int = 30

    def get_auth_token(self) -> str | None:
        """Get the auth token from config or environment."""
        token = self.auth_token
        if token == "from_env" or token is None:
            token = (
                os.environ.get("DEPLOYWAIT_NETLIFY_AUTH_TOKEN")
                or os.environ.get("NETLIFY_AUTH_TOKEN")
            )
        return token

    def get_api_url(self) -> str:
        """Get the API base URL from config or environment."""
        return os.environ.get("DEPLOYWAIT_NETLIFY_API_URL") or self.api_url


class StagePolicyConfig(BaseModel):
    """Delay and overall timeout for one wait stage, in seconds."""

    delay: float = Field(gt=0)
    timeout: float = Field(gt=0)


def _lookup_policy() -> StagePolicyConfig:
    return StagePolicyConfig(delay=5, timeout=60)


def _ready_policy() -> StagePolicyConfig:
    return StagePolicyConfig(delay=15, timeout=60 * 15)


def _reachability_policy() -> StagePolicyConfig:
    return StagePolicyConfig(delay=10, timeout=60)


class WaitConfig(BaseModel):
    """What to wait for and how long each stage may take."""

    site_id: str | None = None
    context: str | None = None
    lookup: StagePolicyConfig = Field(default_factory=_lookup_policy)
    ready: StagePolicyConfig = Field(default_factory=_ready_policy)
    reachability: StagePolicyConfig = Field(default_factory=_reachability_policy)

    @field_validator("context")
    @classmethod
    def validate_context(cls, v: str | None) -> str | None:
        if v:
            try:
                validate_deploy_context(v)
            except ConfigError as e:
                raise ValueError(e.message)
        return v

    def get_site_id(self) -> str | None:
        """Get the site id from action input, environment or config."""
        return (
            os.environ.get("INPUT_SITE_ID")
            or os.environ.get("DEPLOYWAIT_SITE_ID")
            or self.site_id
        )

    def get_context(self) -> str:
        """Get the deploy context filter; empty means any context."""
        context = (
            os.environ.get("INPUT_CONTEXT")
            or os.environ.get("DEPLOYWAIT_CONTEXT")
            or self.context
            or ""
        )
        return validate_deploy_context(context)

    def get_policies(self) -> WaitPolicies:
        """Get the timing of each stage."""
        return WaitPolicies(
            lookup=StagePolicy(delay=self.lookup.delay, timeout=self.lookup.timeout),
            ready=StagePolicy(delay=self.ready.delay, timeout=self.ready.timeout),
            reachability=StagePolicy(
                delay=self.reachability.delay,
                timeout=self.reachability.timeout,
            ),
        )


def validate_deploy_context(value: str) -> str:
    """Check a context filter against the known deploy contexts."""
    value = value.strip()
    if not value:
        return ""
    allowed = [c.value for c in DeployContext]
    if value not in allowed:
        raise ConfigError(
            f"Invalid context '{value}'. Choose from: {', '.join(allowed)}"
        )
    return value


class ProfileConfig(BaseModel):
    """Profile configuration grouping all settings."""

    netlify: NetlifyConfig = Field(default_factory=NetlifyConfig)
    wait: WaitConfig = Field(default_factory=WaitConfig)


class GlobalConfig(BaseModel):
    """Global settings."""

    output_format: OutputFormat = OutputFormat.TABLE
    color: str = "auto"  # auto, always, never
    verbosity: LogLevel = LogLevel.INFO

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        if v not in ("auto", "always", "never"):
            raise ValueError("color must be 'auto', 'always', or 'never'")
        return v


class DeployWaitConfig(BaseModel):
    """Main configuration model."""

    model_config = {"populate_by_name": True}

    version: str = "1"
    global_settings: GlobalConfig = Field(default_factory=GlobalConfig, alias="global")
    profiles: dict[str, ProfileConfig] = Field(default_factory=lambda: {"default": ProfileConfig()})

    def get_profile(self, name: str | None = None) -> ProfileConfig:
        """Get a profile by name, defaulting to 'default'."""
        profile_name = name or "default"
        if profile_name not in self.profiles:
            raise ConfigError(f"Profile '{profile_name}' not found")
        return self.profiles[profile_name]


class ConfigLoader:
    """Loads and merges configuration from multiple sources."""

    CONFIG_FILENAMES = ["deploywait.yaml", "deploywait.yml", ".deploywait.yaml", ".deploywait.yml"]

    def __init__(self):
        self._config: DeployWaitConfig | None = None

    def load(self, config_file: str | Path | None = None) -> DeployWaitConfig:
        """Load configuration from files.

        Priority (highest to lowest):
        1. Explicitly specified config file
        2. Project config (./deploywait.yaml)
        3. User config (~/.deploywait/config.yaml)

        Args:
            config_file: Optional explicit config file path

        Returns:
            Merged configuration
        """
        configs: list[dict[str, Any]] = []

        user_config_path = Path.home() / ".deploywait" / "config.yaml"
        if user_config_path.exists():
            configs.append(self._load_yaml_file(user_config_path))

        project_config = self._find_project_config()
        if project_config:
            configs.append(self._load_yaml_file(project_config))

        if config_file:
            config_path = Path(config_file)
            if not config_path.exists():
                raise ConfigError(f"Config file not found: {config_file}")
            configs.append(self._load_yaml_file(config_path))

        merged = self._merge_configs(configs)

        try:
            self._config = DeployWaitConfig(**merged)
        except ValueError as e:
            raise ConfigError(f"Invalid configuration: {e}")
        return self._config

    def _find_project_config(self) -> Path | None:
        """Find project config file in current or parent directories."""
        current = Path.cwd()

        while current != current.parent:
            for filename in self.CONFIG_FILENAMES:
                config_path = current / filename
                if config_path.exists():
                    return config_path
            current = current.parent

        return None

    def _load_yaml_file(self, path: Path) -> dict[str, Any]:
        """Load a YAML config file."""
        try:
            with open(path) as f:
                content = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}")
        except OSError as e:
            raise ConfigError(f"Cannot read {path}: {e}")
        if not isinstance(content, dict):
            raise ConfigError(f"Expected a mapping at the top of {path}")
        return content

    def _merge_configs(self, configs: list[dict[str, Any]]) -> dict[str, Any]:
        """Deep merge multiple configuration dictionaries."""
        result: dict[str, Any] = {}
        for config in configs:
            result = self._deep_merge(result, config)
        return result

    def _deep_merge(
        self,
        base: dict[str, Any],
        override: dict[str, Any],
    ) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result


# Global config loader instance
_config_loader = ConfigLoader()


def load_config(config_file: str | Path | None = None) -> DeployWaitConfig:
    """Load deploywait configuration.

    Args:
        config_file: Optional explicit config file path

    Returns:
        Loaded configuration
    """
    return _config_loader.load(config_file)


def get_default_config() -> DeployWaitConfig:
    """Get default configuration without loading from files."""
    return DeployWaitConfig()

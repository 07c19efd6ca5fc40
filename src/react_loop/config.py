from pathlib import Path
from typing import List, Literal, Optional

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import (
    DotEnvSettingsSource,
    EnvSettingsSource,
    JsonConfigSettingsSource,
)

DEFAULT_APP_DIR = Path(".react_loop")
DEFAULT_CONFIG_PATH = DEFAULT_APP_DIR / "config.json"
DEFAULT_MAX_ITERATIONS = 7
DEFAULT_REQUIRED_CAPABILITY = "manage_options"
DEFAULT_OBSERVATION_MAX_CHARS = 800
DEFAULT_ALIAS_PREFIXES = ("resource-", "tool-")


class Config(BaseSettings):
    """
    Application configuration loaded from environment variables, .env, and JSON.
    """

    max_iterations: int = Field(
        default=DEFAULT_MAX_ITERATIONS,
        ge=1,
        description="Maximum model calls per request before giving up.",
    )
    required_capability: str = Field(
        default=DEFAULT_REQUIRED_CAPABILITY,
        min_length=1,
        description="Capability a caller must hold to run the agent.",
    )
    observation_max_chars: int = Field(
        default=DEFAULT_OBSERVATION_MAX_CHARS,
        ge=1,
        description="Observations longer than this are truncated.",
    )
    alias_prefixes: List[str] = Field(
        default_factory=lambda: list(DEFAULT_ALIAS_PREFIXES),
        description="Ordered namespace prefixes tried when a tool id is unknown.",
    )
    temperature: float = Field(
        default=0.0, ge=0.0, description="Sampling temperature for model calls."
    )
    model_backend: Literal["pydantic_ai", "langchain"] = Field(
        default="pydantic_ai", description="Library used to talk to the model."
    )
    model_provider: str = Field(
        default="openai", description="Provider slug used to pick a default model."
    )
    model_name: Optional[str] = Field(
        default=None, description="Explicit model override for the provider."
    )
    openai_api_key: Optional[SecretStr] = Field(
        default=None, description="OpenAI API key used for model access."
    )
    litellm_use_proxy: bool = Field(
        default=False, description="Route model traffic through the LiteLLM proxy."
    )
    litellm_proxy_url: Optional[str] = Field(
        default=None, description="LiteLLM proxy base URL."
    )
    litellm_proxy_api_key: Optional[SecretStr] = Field(
        default=None, description="LiteLLM proxy API key."
    )
    model_transport_attempts: int = Field(
        default=1,
        ge=1,
        description="Attempts for transient transport faults; 1 disables retries.",
    )
    app_dir: Path = Field(
        default=DEFAULT_APP_DIR, description="Root directory for react_loop files."
    )
    tool_root: Optional[Path] = Field(
        default=None, description="Root directory for file tool access."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="forbid",
        protected_namespaces=(),
    )

    @model_validator(mode="after")
    def _apply_defaults(self) -> "Config":
        """
        Fills derived defaults and validates cross-field constraints.

        Returns:
            The validated configuration instance.
        """
        if self.tool_root is None:
            self.tool_root = Path.cwd().resolve()
        if self.litellm_use_proxy and not self.litellm_proxy_url:
            raise ValueError(
                "LiteLLM proxy URL is required when proxy mode is enabled."
            )
        if any(not prefix for prefix in self.alias_prefixes):
            raise ValueError("Alias prefixes must be non-empty strings.")
        return self

    @staticmethod
    def _secret_to_str(secret: Optional[SecretStr]) -> Optional[str]:
        """Return the underlying secret value if present."""

        if secret is None:
            return None
        return secret.get_secret_value()

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Config":
        """
        Loads configuration from a JSON file when present.

        Environment variables override .env values, which override JSON.

        Args:
            path: Optional override path for the JSON config file.

        Returns:
            A validated configuration object.
        """
        config_path = path or DEFAULT_CONFIG_PATH
        if not config_path.exists():
            return cls()

        json_source = JsonConfigSettingsSource(cls, json_file=config_path)
        dotenv_source = DotEnvSettingsSource(cls)
        env_source = EnvSettingsSource(cls)
        merged: dict[str, object] = {}
        merged.update(json_source())
        merged.update(dotenv_source())
        merged.update(env_source())
        return cls.model_validate(merged)

    def get_max_iterations(self) -> int:
        return self.max_iterations

    def get_required_capability(self) -> str:
        return self.required_capability

    def get_observation_max_chars(self) -> int:
        return self.observation_max_chars

    def get_alias_prefixes(self) -> tuple[str, ...]:
        return tuple(self.alias_prefixes)

    def get_temperature(self) -> float:
        return self.temperature

    def get_model_backend(self) -> str:
        return self.model_backend

    def get_model_provider(self) -> str:
        return self.model_provider

    def get_model_name(self) -> Optional[str]:
        """
        Returns the explicit model override, if any.

        Returns:
            The model name string or None to use the provider preference.
        """
        return self.model_name

    def get_openai_api_key(self) -> Optional[str]:
        """
        Returns the OpenAI API key for runtime usage.

        Returns:
            The OpenAI API key or None if unset.
        """
        return self._secret_to_str(self.openai_api_key)

    def use_litellm_proxy(self) -> bool:
        """Returns whether LiteLLM proxy usage is enabled."""

        return self.litellm_use_proxy

    def get_litellm_proxy_url(self) -> Optional[str]:
        """Returns the configured LiteLLM proxy base URL."""

        return self.litellm_proxy_url

    def get_litellm_proxy_api_key(self) -> Optional[str]:
        """Returns the configured LiteLLM proxy API key."""

        return self._secret_to_str(self.litellm_proxy_api_key)

    def get_model_transport_attempts(self) -> int:
        return self.model_transport_attempts

    def get_app_dir(self) -> Path:
        return self.app_dir

    def get_tool_root(self) -> Path:
        """
        Returns the root directory for file tool operations.

        Returns:
            The root directory path for file tool access.
        """
        if self.tool_root is None:
            raise ValueError("Tool root path is not configured.")
        return self.tool_root

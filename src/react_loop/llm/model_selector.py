from typing import Dict, Mapping, Optional

DEFAULT_MODEL_PREFERENCES: Dict[str, str] = {
    "openai": "gpt-4o",
    "anthropic": "claude-3-7-sonnet-latest",
    "google": "gemini-2.5-flash",
}


class ModelSelector:
    """Selects the model used for a provider."""

    def __init__(self, preferences: Optional[Mapping[str, str]] = None) -> None:
        self._preferences = dict(
            DEFAULT_MODEL_PREFERENCES if preferences is None else preferences
        )

    def select_model(self, provider: str, override: Optional[str] = None) -> str:
        """Return the model for ``provider``.

        Args:
            provider: Provider slug, e.g. ``openai``.
            override: Explicit model name; wins when set.

        Returns:
            Selected model identifier.

        Raises:
            ValueError: If no override is given and the provider is unknown.
        """

        if override:
            return override
        try:
            return self._preferences[provider.lower()]
        except KeyError:
            raise ValueError(
                f"No default model for provider '{provider}'; set model_name."
            ) from None

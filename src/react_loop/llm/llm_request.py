from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, SecretStr


class TextGenerationRequest(BaseModel):
    """Internal request payload for one text-generation call."""

    messages: List[Dict[str, str]] = Field(
        description="Role/content messages, system instruction first."
    )
    model: str = Field(description="Model identifier for the request.")
    temperature: float = Field(default=0.0, description="Sampling temperature.")
    metadata: Dict[str, Any] = Field(
        default_factory=dict, description="Request metadata for log correlation."
    )
    api_base: Optional[str] = Field(
        default=None, description="Optional API base override for proxy usage."
    )
    api_key: Optional[SecretStr] = Field(
        default=None, description="Optional API key for provider access."
    )

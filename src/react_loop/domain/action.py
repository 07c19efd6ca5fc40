from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field


class ActionReference(BaseModel):
    """Parsed form of a model-emitted action line."""

    tool_id: str = Field(description="Namespaced tool identifier, e.g. fs/read-file.")
    args: Dict[str, Any] = Field(
        default_factory=dict, description="Decoded JSON arguments for the tool."
    )

    model_config = ConfigDict(frozen=True)

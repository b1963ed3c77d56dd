"""Raw upstream record representation before normalization."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RawRecord(BaseModel):
    """
    Loosely-typed job or contact record as returned by the upstream API.
    Field presence and naming vary between records.
    """

    model_config = ConfigDict(extra="allow")

    data: dict[str, Any] = Field(default_factory=dict)

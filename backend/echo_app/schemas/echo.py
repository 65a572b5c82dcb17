from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Union

HeaderValue = Union[str, List[str]]


class EchoRecord(BaseModel):
    """One received HTTP request, reflected back to its sender."""

    model_config = ConfigDict(frozen=True)

    method: str = Field(..., description="HTTP verb exactly as received")
    url: str = Field(..., description="Raw request target (path plus query)")
    headers: Dict[str, HeaderValue] = Field(
        default_factory=dict,
        description="Lower-cased header names; repeated headers become lists",
    )
    body: str = Field(default="", description="Request body decoded as text")
    time: str = Field(..., description="ISO-8601 UTC timestamp taken after the body was read")

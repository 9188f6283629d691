"""SqsModel base class for AWS wire shapes."""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_pascal


class SqsModel(BaseModel):
    """Base model mapping snake_case fields to AWS PascalCase keys.

    - Parsing accepts the PascalCase keys boto3 returns (or field names)
    - Wire output uses PascalCase
    - Bytes travel as base64 in JSON
    - Instances are frozen so a batch can be shared between threads
    """

    model_config = ConfigDict(
        alias_generator=to_pascal,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
        ser_json_bytes="base64",
        val_json_bytes="base64",
    )

    def to_wire(self) -> dict[str, Any]:
        """Dump to a JSON-compatible dict with AWS key names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

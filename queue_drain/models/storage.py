"""Storage location models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class S3Location(BaseModel):
    model_config = ConfigDict(frozen=True)

    bucket: str
    key: str

    @property
    def uri(self) -> str:
        return f"s3://{self.bucket}/{self.key}"

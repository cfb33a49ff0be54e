from typing import Optional
from pydantic import BaseModel, ConfigDict, model_validator

class VideoReference(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: Optional[str] = None
    payload: Optional[bytes] = None
    mime_type: Optional[str] = None
    filename: Optional[str] = None

    @model_validator(mode="after")
    def _one_source(self):
        if (self.url is None) == (self.payload is None):
            raise ValueError("VideoReference needs exactly one of url or payload")
        if self.payload is not None and not self.mime_type:
            raise ValueError("Uploaded videos need a mime_type")
        return self

    @classmethod
    def from_url(cls, url: str) -> "VideoReference":
        return cls(url=url.strip())

    @classmethod
    def from_upload(cls, payload: bytes, mime_type: str, filename: Optional[str] = None) -> "VideoReference":
        return cls(payload=payload, mime_type=mime_type, filename=filename)

    @property
    def is_upload(self) -> bool:
        return self.payload is not None

from typing import Any

from pydantic import BaseModel, Field, SerializerFunctionWrapHandler, model_serializer

# Image keys dropped from the JSON output when they hold their zero value.
_OMIT_WHEN_EMPTY = ("alt", "type", "width", "height")


class ImageDescriptor(BaseModel):
    url: str = ""
    alt: str = ""
    type: str = ""
    width: int = 0
    height: int = 0

    @model_serializer(mode="wrap")
    def _omit_empty(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        for key in _OMIT_WHEN_EMPTY:
            if key in data and not data[key]:
                del data[key]
        return data


class MetadataRecord(BaseModel):
    title: str = ""
    description: str = ""
    images: list[ImageDescriptor] = Field(default_factory=list)
    sitename: str = ""
    favicon: str = ""
    duration: int = 0
    domain: str = ""
    url: str

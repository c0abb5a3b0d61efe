"""
Shared pieces of the MongoDB document models.

ObjectId fields are declared as ``PyObjectId``: they accept an ObjectId or its
24-character hex string, stay ObjectIds in Python (so they go to pymongo
unchanged) and render as strings in JSON.
"""

from __future__ import annotations

from typing import Annotated, Any, Optional, TypeVar

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, PlainValidator


def to_object_id(value: Any) -> ObjectId:
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    raise ValueError(f"Invalid ObjectId: {value!r}")


PyObjectId = Annotated[
    ObjectId,
    PlainValidator(to_object_id),
    PlainSerializer(str, return_type=str, when_used="json"),
]

DocT = TypeVar("DocT", bound="MongoDocument")


class MongoDocument(BaseModel):
    """Base for collection documents; ``_id`` is exposed as ``id``."""

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: Optional[PyObjectId] = Field(default=None, alias="_id")

    def to_mongo(self) -> dict[str, Any]:
        """Dict for ``insert_one``; ``_id`` is left out until MongoDB assigns one."""
        exclude = {"id"} if self.id is None else None
        return self.model_dump(by_alias=True, exclude=exclude)

    @classmethod
    def from_mongo(cls: type[DocT], data: Optional[dict[str, Any]]) -> Optional[DocT]:
        """Validate a raw pymongo document; ``None`` (a find miss) passes through."""
        if data is None:
            return None
        return cls.model_validate(data)

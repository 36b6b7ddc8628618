# models/common.py
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base model: camelCase on the wire, snake_case in Python.

    Input accepts either spelling; responses are serialised by alias.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class BaseResponse(BaseModel):
    success: bool
    message: str
    data: Optional[None] = None


class DataResponse(BaseModel, Generic[T]):
    success: bool
    message: str
    data: T

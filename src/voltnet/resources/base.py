"""Base class for API resource modules."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping, TypeVar

from pydantic import BaseModel

from ..models import ApiModel

if TYPE_CHECKING:
    from ..client import VoltnetClient

M = TypeVar("M", bound=BaseModel)


def to_body(value: Any) -> Any:
    """Serialise models to their API form; other values pass through."""
    if isinstance(value, ApiModel):
        return value.to_api()
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, list):
        return [to_body(item) for item in value]
    return value


class Resource:
    """A group of API calls sharing one client."""

    def __init__(self, client: "VoltnetClient"):
        self.client = client

    async def _get(self, path: str, query: Mapping[str, Any] | None = None, **kwargs: Any) -> Any:
        return await self.client.request("GET", path, query=query, **kwargs)

    async def _post(self, path: str, body: Any = None) -> Any:
        return await self.client.request("POST", path, body=to_body(body))

    async def _patch(self, path: str, body: Any = None) -> Any:
        return await self.client.request("PATCH", path, body=to_body(body))

    async def _delete(self, path: str) -> Any:
        return await self.client.request("DELETE", path)

    @staticmethod
    def _parse(model: type[M], data: Any) -> M:
        return model.model_validate(data)

    @staticmethod
    def _parse_list(model: type[M], data: Any) -> list[M]:
        return [model.model_validate(item) for item in data or []]

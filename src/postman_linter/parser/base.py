"""Typed view over a Postman Collection v2.x document.

Only the fields the lint rules read are declared; everything else is kept
as extra data so a fixed collection can be written back without losing
anything. Only fields present in the input (or set by the fixer) are
dumped, explicit nulls included, so ``to_dict()`` reproduces the input shape.
"""

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

logger = logging.getLogger(__name__)


class _Node(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)


class Script(_Node):
    """Source lines of a test or pre-request script."""

    exec: list[str] | None = None
    type: str | None = None

    @field_validator("exec", mode="before")
    @classmethod
    def _split_exec(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.splitlines()
        if isinstance(value, list):
            return [line for line in value if isinstance(line, str)]
        return value

    @property
    def text(self) -> str:
        return "\n".join(self.exec or [])


class Event(_Node):
    """A ``test`` or ``prerequest`` hook attached to an item."""

    listen: str | None = None
    script: Script | None = None


class QueryParam(_Node):
    key: str | None = None
    value: str | None = None
    description: str | dict | None = None

    @property
    def documented(self) -> bool:
        return isinstance(self.description, str) and bool(self.description.strip())


class Url(_Node):
    raw: str | None = None
    query: list[QueryParam] | None = None


class Request(_Node):
    method: str | None = None
    url: Url | str | None = None
    header: list[dict[str, Any]] | str | None = None


class Response(_Node):
    """A saved response example."""

    name: str | None = None
    code: int | None = None
    status: str | None = None
    body: str | None = None

    @property
    def is_no_content(self) -> bool:
        return (
            self.code == 204
            or self.status == "No Content"
            or "no content" in (self.name or "").lower()
        )


class _Container(_Node):
    """Shared accessors for nodes that carry events and child items."""

    event: list[Event] | None = None
    item: list["Item"] | None = None

    @property
    def children(self) -> list["Item"]:
        return self.item or []

    def scripts(self, listen: str) -> list[str]:
        """Joined script text of every event listening on ``listen``."""
        return [
            event.script.text
            for event in self.event or []
            if event.listen == listen and event.script is not None and event.script.exec is not None
        ]

    def first_script(self, listen: str) -> str:
        scripts = self.scripts(listen)
        return scripts[0] if scripts else ""

    @property
    def test_script(self) -> str:
        return "\n".join(self.scripts("test"))


class Item(_Container):
    """A folder or a request, told apart by which fields are present."""

    name: str | None = None
    request: Request | str | None = None
    response: list[Response] | None = None

    @model_validator(mode="after")
    def _request_or_folder(self) -> "Item":
        if self.is_request and "item" in self.model_fields_set:
            logger.warning("item %r has both 'request' and 'item'; treating it as a request", self.name)
        return self

    @property
    def is_request(self) -> bool:
        return "request" in self.model_fields_set

    @property
    def is_folder(self) -> bool:
        return not self.is_request and "item" in self.model_fields_set

    @property
    def children(self) -> list["Item"]:
        if self.is_request:
            return []
        return self.item or []

    def display_name(self, default: str) -> str:
        return self.name if self.name is not None else default

    @property
    def method(self) -> str:
        if isinstance(self.request, Request):
            return self.request.method or ""
        return ""

    @property
    def url(self) -> str:
        """Raw URL string, whether the request stores it as text or as an object."""
        if not isinstance(self.request, Request):
            return ""
        url = self.request.url
        if isinstance(url, str):
            return url
        if url is not None:
            return url.raw or ""
        return ""

    @property
    def query_params(self) -> list[QueryParam] | None:
        if isinstance(self.request, Request) and isinstance(self.request.url, Url):
            return self.request.url.query
        return None

    @property
    def responses(self) -> list[Response]:
        return self.response or []


class Info(_Node):
    name: str | None = None
    description: str | dict | None = None
    postman_id: str | None = Field(default=None, alias="_postman_id")
    schema_: str | None = Field(default=None, alias="schema")


class Collection(_Container):
    """Root of a Postman collection."""

    info: Info | None = None

    @property
    def description(self) -> str:
        if self.info is not None and isinstance(self.info.description, str):
            return self.info.description
        return ""

    def to_dict(self) -> dict:
        """Plain JSON-compatible dict, as it would be exported by Postman."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


Item.model_rebuild()
Collection.model_rebuild()

"""ToolRegistry — the fixed catalog of tools and resources an agent serves."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from mcp_agents.protocol.errors import (
    ResourceNotFoundError,
    ToolArgumentError,
    ToolNotFoundError,
)
from mcp_agents.protocol.models import ResourceDescriptor, ToolDescriptor

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

ArgsT = TypeVar("ArgsT", bound="ToolArguments")


class ToolArguments(BaseModel):
    """Base class for a tool's typed arguments.

    Subclasses declare their fields with pydantic; the published
    ``inputSchema`` is generated from the model. ``required_messages`` maps
    an argument name (as sent on the wire) to the message reported when that
    argument is missing, null or an empty string.
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    required_messages: ClassVar[dict[str, str]] = {}

    @model_validator(mode="before")
    @classmethod
    def _check_required(cls, data: Any) -> Any:
        if isinstance(data, dict):
            for name, message in cls.required_messages.items():
                if data.get(name) in (None, ""):
                    raise ValueError(message)
        return data

    @classmethod
    def input_schema(cls) -> dict[str, Any]:
        """Return the model's JSON schema, trimmed for ``tools/list``."""
        schema = cls.model_json_schema(by_alias=True)
        schema.pop("title", None)
        schema.pop("description", None)
        schema.setdefault("properties", {})
        for prop in schema["properties"].values():
            _simplify_property(prop)
        return schema


def _simplify_property(prop: dict[str, Any]) -> None:
    prop.pop("title", None)
    variants = prop.get("anyOf")
    if variants is not None:
        non_null = [v for v in variants if v.get("type") != "null"]
        if len(non_null) == 1:
            del prop["anyOf"]
            prop.update(non_null[0])
    if prop.get("default", ...) is None:
        del prop["default"]


def _describe_validation_error(tool: str, exc: ValidationError) -> str:
    error = exc.errors()[0]
    if error["type"] == "value_error":
        ctx = error.get("ctx") or {}
        if "error" in ctx:
            return str(ctx["error"])
    loc = ".".join(str(part) for part in error["loc"])
    if loc:
        return f"Invalid arguments for {tool}: {loc}: {error['msg']}"
    return f"Invalid arguments for {tool}: {error['msg']}"


class NoArguments(ToolArguments):
    """Arguments model for tools that take no input."""


@dataclass(frozen=True)
class ToolSpec(Generic[ArgsT]):
    """One registered tool: its descriptor data, argument model and handler.

    The handler receives the session's client and the validated arguments
    and returns any JSON-serialisable value (or a string).
    """

    name: str
    description: str
    arguments: type[ArgsT]
    handler: Callable[[Any, ArgsT], Awaitable[Any]]

    @property
    def descriptor(self) -> ToolDescriptor:
        return ToolDescriptor(
            name=self.name,
            description=self.description,
            input_schema=self.arguments.input_schema(),
        )

    def parse_arguments(self, raw: Any) -> ArgsT:
        """Validate *raw* into the tool's argument model.

        Raises:
            ToolArgumentError: With a single human-readable message.
        """
        if raw is None:
            raw = {}
        if not isinstance(raw, dict):
            raise ToolArgumentError(self.name, f"Invalid arguments for {self.name}: expected an object")
        try:
            return self.arguments.model_validate(raw)
        except ValidationError as exc:
            raise ToolArgumentError(self.name, _describe_validation_error(self.name, exc)) from exc

    async def invoke(self, client: Any, arguments: ArgsT) -> Any:
        return await self.handler(client, arguments)


@dataclass(frozen=True)
class ResourceSpec:
    """A readable resource identified by a URI."""

    uri: str
    name: str
    reader: Callable[[Any], Awaitable[str]]
    description: str = ""
    mime_type: str = "application/json"

    @property
    def descriptor(self) -> ResourceDescriptor:
        return ResourceDescriptor(
            uri=self.uri,
            name=self.name,
            description=self.description,
            mime_type=self.mime_type,
        )


@dataclass
class ToolRegistry:
    """Ordered, name-unique catalog of :class:`ToolSpec` and :class:`ResourceSpec`.

    Usage::

        registry = ToolRegistry([get_tasks, create_task])
        registry.list_tools()            # descriptors in registration order
        spec = registry.lookup("create_task")
    """

    tools: Iterable[ToolSpec[Any]] = ()
    resources: Iterable[ResourceSpec] = ()
    _tools: dict[str, ToolSpec[Any]] = field(init=False, repr=False)
    _resources: dict[str, ResourceSpec] = field(init=False, repr=False)
    _descriptors: tuple[ToolDescriptor, ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._tools = {}
        for spec in self.tools:
            if spec.name in self._tools:
                msg = f"Duplicate tool name: {spec.name}"
                raise ValueError(msg)
            self._tools[spec.name] = spec
        self._resources = {}
        for resource in self.resources:
            if resource.uri in self._resources:
                msg = f"Duplicate resource URI: {resource.uri}"
                raise ValueError(msg)
            self._resources[resource.uri] = resource
        self.tools = tuple(self._tools.values())
        self.resources = tuple(self._resources.values())
        self._descriptors = tuple(spec.descriptor for spec in self._tools.values())

    @property
    def has_resources(self) -> bool:
        return bool(self._resources)

    def lookup(self, name: str) -> ToolSpec[Any]:
        """Return the tool registered under *name*."""
        spec = self._tools.get(name)
        if spec is None:
            raise ToolNotFoundError(name)
        return spec

    def list_tools(self) -> list[ToolDescriptor]:
        """Return all tool descriptors in registration order."""
        return list(self._descriptors)

    def list_resources(self) -> list[ResourceDescriptor]:
        return [resource.descriptor for resource in self._resources.values()]

    def lookup_resource(self, uri: str) -> ResourceSpec:
        resource = self._resources.get(uri)
        if resource is None:
            raise ResourceNotFoundError(uri)
        return resource

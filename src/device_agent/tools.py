"""Tool protocol and the tool catalog.

Tools are registered explicitly. Each tool declares its arguments as a pydantic
model (a ``ToolArgs`` subclass); the parameter schema sent to providers is read
from that model and its field defaults are applied when arguments are decoded.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
import types
import typing
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import ArgumentDecodeError, ToolExecutionError, UnknownTool
from .models import ToolResult

logger = logging.getLogger(__name__)

# Order matters: bool is checked before int.
_TYPE_NAMES: tuple[tuple[type, str], ...] = (
    (str, "string"),
    (bool, "boolean"),
    (int, "integer"),
    (dict, "object"),
    (list, "array"),
)


@dataclass(frozen=True)
class ParameterDef:
    """Provider-agnostic description of one tool parameter."""

    name: str
    type: str  # "string" | "integer" | "boolean" | "object" | "array"
    description: str = ""
    required: bool = True


class ToolArgs(BaseModel):
    """Base class for tool argument structs. Unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore")


class NoArgs(ToolArgs):
    pass


def _type_name(annotation: Any) -> str:
    origin = typing.get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        members = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(members) == 1:
            return _type_name(members[0])
    target = origin or annotation
    for py_type, name in _TYPE_NAMES:
        if target is py_type:
            return name
    raise TypeError(f"Unsupported tool parameter type: {annotation!r}")


def parameters_for(args_model: type[ToolArgs]) -> list[ParameterDef]:
    """Ordered parameter descriptors for an argument struct."""
    return [
        ParameterDef(
            name=name,
            type=_type_name(info.annotation),
            description=info.description or "",
            required=info.is_required(),
        )
        for name, info in args_model.model_fields.items()
    ]


class BaseTool(ABC):
    """Base class for agent tools."""

    args_model: type[ToolArgs] = NoArgs

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        ...

    @property
    def parameters(self) -> list[ParameterDef]:
        return parameters_for(self.args_model)

    @abstractmethod
    async def execute(self, args: Any) -> ToolResult:
        ...

    def decode_arguments(self, arguments: str | None) -> ToolArgs:
        """Parse the JSON argument string and apply declared defaults."""
        try:
            raw = json.loads(arguments) if arguments and arguments.strip() else {}
        except json.JSONDecodeError as e:
            raise ArgumentDecodeError(f"Invalid JSON arguments for {self.name}: {e}") from e
        if not isinstance(raw, dict):
            raise ArgumentDecodeError(f"Arguments for {self.name} must be a JSON object")
        missing = [p.name for p in self.parameters if p.required and p.name not in raw]
        if missing:
            raise ArgumentDecodeError(f"Missing required arguments for {self.name}: {', '.join(missing)}")
        try:
            return self.args_model.model_validate(raw)
        except ValidationError as e:
            raise ArgumentDecodeError(f"Invalid arguments for {self.name}: {e}") from e


ToolHandler = Callable[[Any], Union[ToolResult, str, None, Awaitable[Union[ToolResult, str, None]]]]


class FunctionTool(BaseTool):
    """Tool backed by a plain (sync or async) function taking the argument struct."""

    def __init__(
        self,
        name: str,
        description: str,
        handler: ToolHandler,
        args_model: type[ToolArgs] = NoArgs,
    ) -> None:
        self._name = name
        self._description = description
        self._handler = handler
        self.args_model = args_model
        # Fail at registration on unsupported field types.
        parameters_for(args_model)

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    async def execute(self, args: Any) -> ToolResult:
        if inspect.iscoroutinefunction(self._handler):
            out = await self._handler(args)
        else:
            out = await asyncio.to_thread(self._handler, args)
        if isinstance(out, ToolResult):
            return out
        return ToolResult(success=True, content="" if out is None else str(out))


class ToolCatalog:
    """Read-only set of tools, looked up by name."""

    def __init__(self, tools: Iterable[BaseTool] = ()) -> None:
        by_name: dict[str, BaseTool] = {}
        for tool in tools:
            if tool.name in by_name:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            by_name[tool.name] = tool
        self._tools = by_name

    @classmethod
    def builder(cls) -> ToolCatalogBuilder:
        return ToolCatalogBuilder()

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[BaseTool]:
        return iter(self._tools.values())

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def get(self, name: str) -> BaseTool | None:
        return self._tools.get(name)

    async def execute(self, name: str, arguments: str | None) -> ToolResult:
        """Run one tool.

        Raises UnknownTool, ArgumentDecodeError, or ToolExecutionError (wrapping
        whatever the host implementation raised).
        """
        tool = self._tools.get(name)
        if tool is None:
            raise UnknownTool(name)
        args = tool.decode_arguments(arguments)
        try:
            result = await tool.execute(args)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.warning("Tool %s raised %s", name, e)
            raise ToolExecutionError(name, str(e)) from e
        logger.debug("Tool %s finished (success=%s)", name, result.success)
        return result


class ToolCatalogBuilder:
    """Collects tool registrations at startup, then builds a ToolCatalog."""

    def __init__(self) -> None:
        self._tools: list[BaseTool] = []

    def add(self, tool: BaseTool) -> ToolCatalogBuilder:
        self._tools.append(tool)
        return self

    def add_function(
        self,
        name: str,
        description: str,
        handler: ToolHandler,
        args_model: type[ToolArgs] = NoArgs,
    ) -> ToolCatalogBuilder:
        return self.add(FunctionTool(name, description, handler, args_model))

    def tool(
        self, name: str, description: str, args_model: type[ToolArgs] = NoArgs
    ) -> Callable[[ToolHandler], ToolHandler]:
        """Decorator form of add_function."""

        def decorator(fn: ToolHandler) -> ToolHandler:
            self.add_function(name, description, fn, args_model)
            return fn

        return decorator

    def build(self) -> ToolCatalog:
        return ToolCatalog(self._tools)


__all__ = [
    "ParameterDef",
    "ToolArgs",
    "NoArgs",
    "parameters_for",
    "BaseTool",
    "FunctionTool",
    "ToolCatalog",
    "ToolCatalogBuilder",
]

"""Tool registry built on Pydantic v2 models."""

from __future__ import annotations

from collections.abc import Callable
from time import perf_counter
from typing import Any

from langchain_core.tools import StructuredTool
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from o2o_analyzer.errors import UnknownCapabilityError, UsageError
from o2o_analyzer.types import ToolTrace

_SCHEMA_KEYS = ("type", "enum", "description", "default", "pattern", "minLength")


class ToolDescriptor(BaseModel):
    """Static, client-facing description of one tool."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str
    input_schema: dict[str, Any]


class ToolSpec(BaseModel):
    """Declarative tool specification for registration and validation."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    description: str
    args_schema: type[BaseModel]
    handler: Callable[[Any], str]
    tags: list[str] = Field(default_factory=list)

    def invoke(self, payload: dict[str, Any]) -> str:
        try:
            data = self.args_schema.model_validate(payload)
        except ValidationError as exc:
            raise UsageError(_describe_validation_error(self.name, exc)) from exc
        return self.handler(data)

    def descriptor(self) -> ToolDescriptor:
        return ToolDescriptor(
            name=self.name,
            description=self.description,
            input_schema=input_schema(self.args_schema),
        )


class ToolRegistry:
    """Stores tool specs and exports LangChain-compatible tool objects."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolSpec] = {}
        self._observer: Callable[[ToolTrace], None] | None = None

    def register(self, spec: ToolSpec) -> None:
        if spec.name in self._tools:
            raise ValueError(f"Tool already registered: {spec.name}")
        self._tools[spec.name] = spec

    def set_observer(self, observer: Callable[[ToolTrace], None] | None) -> None:
        """Set an optional callback invoked after each tool execution."""
        self._observer = observer

    def execute(self, name: str, payload: dict[str, Any]) -> str:
        spec = self._tools.get(name)
        if spec is None:
            raise UnknownCapabilityError(name)
        return self._execute_spec(spec, payload)

    def as_langchain_tools(self) -> list[StructuredTool]:
        tools: list[StructuredTool] = []
        for spec in self._tools.values():
            tools.append(
                StructuredTool.from_function(
                    name=spec.name,
                    description=spec.description,
                    args_schema=spec.args_schema,
                    func=self._build_function(spec),
                )
            )
        return tools

    def specs(self) -> list[ToolSpec]:
        return list(self._tools.values())

    def descriptors(self) -> list[ToolDescriptor]:
        return [spec.descriptor() for spec in self._tools.values()]

    def _build_function(self, spec: ToolSpec) -> Callable[..., str]:
        def _callable(**kwargs: Any) -> str:
            return self._execute_spec(spec, kwargs)

        return _callable

    def _execute_spec(self, spec: ToolSpec, payload: dict[str, Any]) -> str:
        start = perf_counter()
        output = ""
        failed = True
        try:
            output = spec.invoke(payload)
            failed = False
            return output
        finally:
            latency_ms = (perf_counter() - start) * 1000.0
            if self._observer is not None:
                self._observer(
                    ToolTrace(
                        name=spec.name,
                        input_payload=payload,
                        output_preview=output[:320],
                        latency_ms=latency_ms,
                        is_error=failed,
                    )
                )


def input_schema(model: type[BaseModel]) -> dict[str, Any]:
    """Flatten a model's JSON schema to `{type, properties, required}`.

    Enum references and `Optional[...]` unions are inlined so every property
    reads as a primitive type with an optional list of allowed values.
    """

    schema = model.model_json_schema()
    defs = schema.get("$defs", {})
    properties = {
        name: _flatten(prop, defs) for name, prop in schema.get("properties", {}).items()
    }
    result: dict[str, Any] = {"type": "object", "properties": properties}
    result["required"] = list(schema.get("required", []))
    return result


def _flatten(prop: dict[str, Any], defs: dict[str, Any]) -> dict[str, Any]:
    if "$ref" in prop:
        target = defs[prop["$ref"].rsplit("/", 1)[-1]]
        rest = {key: value for key, value in prop.items() if key != "$ref"}
        return _flatten({**target, **rest}, defs)
    if "allOf" in prop and len(prop["allOf"]) == 1:
        rest = {key: value for key, value in prop.items() if key != "allOf"}
        return _flatten({**prop["allOf"][0], **rest}, defs)
    if "anyOf" in prop:
        branches = [branch for branch in prop["anyOf"] if branch.get("type") != "null"]
        rest = {key: value for key, value in prop.items() if key != "anyOf"}
        if len(branches) == 1:
            return _flatten({**branches[0], **rest}, defs)
    flat = {key: prop[key] for key in _SCHEMA_KEYS if key in prop}
    if flat.get("default", ...) is None:
        del flat["default"]
    return flat


def _describe_validation_error(tool_name: str, exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "arguments"
        problems.append(f"{location}: {error.get('msg', 'invalid value')}")
    return f"Invalid arguments for {tool_name}: " + "; ".join(problems)

"""Data models for the tool invocation contract."""

from collections.abc import Awaitable, Callable
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

# =============================================================================
# Parameter specs
# =============================================================================


class _ParameterSpec(BaseModel):
    """Fields shared by every parameter variant."""

    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    required: bool = True
    default: Optional[Any] = None

    @model_validator(mode="after")
    def _check_default(self) -> "_ParameterSpec":
        if self.required and self.default is not None:
            raise ValueError(f"Required parameter '{self.name}' cannot declare a default")
        return self

    def json_schema(self) -> dict[str, Any]:
        """JSON schema fragment describing this parameter."""
        schema = self._type_schema()
        if self.description:
            schema["description"] = self.description
        if self.default is not None:
            schema["default"] = self.default
        return schema

    def _type_schema(self) -> dict[str, Any]:
        raise NotImplementedError


class StringParam(_ParameterSpec):
    kind: Literal["string"] = "string"
    format: Optional[Literal["url"]] = None

    def _type_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": "string"}
        if self.format == "url":
            schema["format"] = "uri"
        return schema


class NumberParam(_ParameterSpec):
    kind: Literal["number"] = "number"
    integer: bool = False
    minimum: Optional[float] = None
    maximum: Optional[float] = None

    def _type_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": "integer" if self.integer else "number"}
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        if self.maximum is not None:
            schema["maximum"] = self.maximum
        return schema


class BooleanParam(_ParameterSpec):
    kind: Literal["boolean"] = "boolean"

    def _type_schema(self) -> dict[str, Any]:
        return {"type": "boolean"}


class EnumParam(_ParameterSpec):
    kind: Literal["enum"] = "enum"
    allowed: list[str]

    @model_validator(mode="after")
    def _check_allowed(self) -> "EnumParam":
        if not self.allowed:
            raise ValueError(f"Enum parameter '{self.name}' needs at least one choice")
        if self.default is not None and self.default not in self.allowed:
            raise ValueError(
                f"Default '{self.default}' of '{self.name}' is not one of {self.allowed}"
            )
        return self

    def _type_schema(self) -> dict[str, Any]:
        return {"type": "string", "enum": list(self.allowed)}


class StringListParam(_ParameterSpec):
    kind: Literal["string_list"] = "string_list"

    def _type_schema(self) -> dict[str, Any]:
        return {"type": "array", "items": {"type": "string"}}


class StringMapParam(_ParameterSpec):
    kind: Literal["string_map"] = "string_map"

    def _type_schema(self) -> dict[str, Any]:
        return {"type": "object", "additionalProperties": {"type": "string"}}


ToolParameter = Annotated[
    Union[StringParam, NumberParam, BooleanParam, EnumParam, StringListParam, StringMapParam],
    Field(discriminator="kind"),
]


# =============================================================================
# Results
# =============================================================================


class TextContent(BaseModel):
    """A single text block of a tool response."""

    type: Literal["text"] = "text"
    text: str


class ToolResult(BaseModel):
    """Outcome of a tool invocation.

    Success and failure share the same envelope: a non-empty list of content
    blocks. A failure carries exactly one block whose text starts with
    ``"Error: "`` so callers can display it without branching.
    """

    content: list[TextContent] = Field(min_length=1)
    is_error: bool = False

    @classmethod
    def success(cls, text: str) -> "ToolResult":
        return cls(content=[TextContent(text=text)])

    @classmethod
    def failure(cls, reason: str) -> "ToolResult":
        text = reason if reason.startswith("Error: ") else f"Error: {reason}"
        return cls(content=[TextContent(text=text)], is_error=True)

    @property
    def text(self) -> str:
        """All content blocks joined by newlines."""
        return "\n".join(block.text for block in self.content)

    def to_envelope(self) -> dict[str, Any]:
        """Wire representation used by the transport."""
        return {
            "content": [block.model_dump() for block in self.content],
            "isError": self.is_error,
        }

    def __str__(self) -> str:
        """String representation."""
        return self.text[:200] + ("..." if len(self.text) > 200 else "")


ToolHandler = Callable[..., Awaitable[Union[ToolResult, str]]]


# =============================================================================
# Definitions and calls
# =============================================================================


class ToolDefinition(BaseModel):
    """Everything the registry knows about a tool. Immutable."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    parameters: tuple[ToolParameter, ...] = ()
    handler: ToolHandler

    @model_validator(mode="after")
    def _check_parameter_names(self) -> "ToolDefinition":
        names = [p.name for p in self.parameters]
        if len(names) != len(set(names)):
            raise ValueError(f"Parameter names of tool '{self.name}' must be unique")
        return self

    def input_schema(self) -> dict[str, Any]:
        """Get JSON schema for tool input."""
        return {
            "type": "object",
            "properties": {p.name: p.json_schema() for p in self.parameters},
            "required": [p.name for p in self.parameters if p.required],
        }

    def manifest_entry(self) -> dict[str, Any]:
        """Capability manifest entry for this tool."""
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema(),
        }

    def __repr__(self) -> str:
        return f"<ToolDefinition name={self.name} params={len(self.parameters)}>"


class ToolCall(BaseModel):
    """A request to invoke a tool."""

    id: Optional[str] = None
    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)

    def __str__(self) -> str:
        """String representation."""
        return f"{self.name}({', '.join(f'{k}={v!r}' for k, v in self.arguments.items())})"

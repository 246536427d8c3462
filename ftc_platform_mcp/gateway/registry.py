"""Static catalog of the tools exposed by the gateway.

Each tool is a small class from a closed set. A tool owns:

- its `ToolDescriptor` (name, description, parameter list), used to answer
  ``tools/list`` requests;
- a pydantic argument model, validated before any upstream call;
- the coroutine that performs the upstream call.

The `ToolRegistry` is built once at startup and never mutated afterwards, so it
may be shared by every session without locking.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import MappingProxyType
from typing import Any, ClassVar, Dict, Iterable, Mapping, Optional, Sequence, Tuple, Type

from mcp import types as mcp_types
from pydantic import BaseModel, ConfigDict, Field, StringConstraints, ValidationError
from typing_extensions import Annotated

from ftc_platform_mcp import SERVER_NAME, __version__
from ftc_platform_mcp.upstream import PlatformApiClient

from .errors import InvalidArguments

EventId = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, strict=True)]


class ToolParameter(BaseModel):
    """One declared parameter of a tool."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    type: str = Field(default="string", description="JSON Schema type of the parameter")
    required: bool = False
    description: Optional[str] = None


class ToolDescriptor(BaseModel):
    """Name, description and parameter schema of a tool."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    description: str
    parameters: Tuple[ToolParameter, ...] = ()

    @property
    def required(self) -> Tuple[str, ...]:
        return tuple(p.name for p in self.parameters if p.required)

    def input_schema(self) -> Dict[str, Any]:
        """Render the parameter list as a JSON Schema object."""
        properties: Dict[str, Any] = {}
        for p in self.parameters:
            prop: Dict[str, Any] = {"type": p.type}
            if p.description:
                prop["description"] = p.description
            properties[p.name] = prop
        return {"type": "object", "properties": properties, "required": list(self.required)}

    def to_mcp_tool(self) -> mcp_types.Tool:
        return mcp_types.Tool(name=self.name, description=self.description, inputSchema=self.input_schema())


class NoArguments(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


class EventArguments(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    event_id: EventId = Field(alias="eventId")


class PlatformTool(ABC):
    """Base class of every tool in the registry."""

    descriptor: ClassVar[ToolDescriptor]
    arguments_model: ClassVar[Type[BaseModel]] = NoArguments

    @property
    def name(self) -> str:
        return self.descriptor.name

    def parse_arguments(self, arguments: Optional[Mapping[str, Any]]) -> BaseModel:
        """Validate raw call arguments into the tool's argument model.

        Unknown extra keys are ignored. Raises `InvalidArguments` naming the
        first offending parameter.
        """
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, Mapping):
            raise InvalidArguments(self.name, "arguments", "must be an object")
        try:
            return self.arguments_model.model_validate(dict(arguments))
        except ValidationError as e:
            error = e.errors()[0]
            parameter = str(error["loc"][0]) if error.get("loc") else "arguments"
            if error["type"] in ("missing", "string_too_short"):
                raise InvalidArguments(self.name, parameter) from e
            raise InvalidArguments(self.name, parameter, "must be a non-empty string") from e

    @abstractmethod
    async def run(self, client: PlatformApiClient, arguments: Any) -> Any:
        """Call the upstream API. Returns a pydantic model or a JSON-compatible value."""


def _event_id_parameter(description: str) -> ToolParameter:
    return ToolParameter(name="eventId", type="string", required=True, description=description)


class ProbeTool(PlatformTool):
    descriptor = ToolDescriptor(
        name="test_connection",
        description="Test connection to the FTC Platform API and verify the MCP server is working properly",
    )

    async def run(self, client: PlatformApiClient, arguments: NoArguments) -> Dict[str, Any]:
        probe = await client.test_connection()
        return {
            **probe.model_dump(mode="json"),
            "mcpServer": SERVER_NAME,
            "version": __version__,
            "apiClient": client.get_status().to_payload(),
        }


class EventApplicationsTool(PlatformTool):
    descriptor = ToolDescriptor(
        name="get_event_applications",
        description=(
            "Get all applications for a specific event with complete data for AI analysis and ranking. "
            "Returns applicant information, responses to all questions, and metadata for evaluation."
        ),
        parameters=(_event_id_parameter("The unique ID of the event to fetch applications for"),),
    )
    arguments_model = EventArguments

    async def run(self, client: PlatformApiClient, arguments: EventArguments) -> Any:
        return await client.get_event_applications(arguments.event_id)


class EventEvaluationsTool(PlatformTool):
    descriptor = ToolDescriptor(
        name="get_event_evaluations",
        description=(
            "Get completed evaluations for applications in a specific event. Includes reviewer scores, "
            "comments, recommendations, and statistics for AI analysis of human evaluation patterns."
        ),
        parameters=(_event_id_parameter("The unique ID of the event to fetch evaluations for"),),
    )
    arguments_model = EventArguments

    async def run(self, client: PlatformApiClient, arguments: EventArguments) -> Any:
        return await client.get_event_evaluations(arguments.event_id)


class EvaluationCriteriaTool(PlatformTool):
    descriptor = ToolDescriptor(
        name="get_evaluation_criteria",
        description=(
            "Get evaluation criteria categorized for AI understanding. Provides scoring rubrics, weights, "
            "and guidelines used by human reviewers for consistent AI application scoring."
        ),
        parameters=(
            _event_id_parameter("The unique ID of the event to get evaluation criteria for (provides context)"),
        ),
    )
    arguments_model = EventArguments

    async def run(self, client: PlatformApiClient, arguments: EventArguments) -> Any:
        return await client.get_evaluation_criteria(arguments.event_id)


class ApplicationQuestionsTool(PlatformTool):
    descriptor = ToolDescriptor(
        name="get_application_questions",
        description=(
            "Get application questions structure and metadata. Provides the complete question set, types, "
            "and requirements for understanding application data format and content."
        ),
        parameters=(_event_id_parameter("The unique ID of the event to fetch application questions for"),),
    )
    arguments_model = EventArguments

    async def run(self, client: PlatformApiClient, arguments: EventArguments) -> Any:
        return await client.get_application_questions(arguments.event_id)


DEFAULT_TOOLS: Tuple[PlatformTool, ...] = (
    ProbeTool(),
    EventApplicationsTool(),
    EventEvaluationsTool(),
    EvaluationCriteriaTool(),
    ApplicationQuestionsTool(),
)


class ToolRegistry:
    """Ordered, immutable catalog of tools keyed by name."""

    def __init__(self, tools: Iterable[PlatformTool] = DEFAULT_TOOLS) -> None:
        ordered = tuple(tools)
        by_name: Dict[str, PlatformTool] = {}
        for tool in ordered:
            if tool.name in by_name:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            by_name[tool.name] = tool
        self._tools = ordered
        self._by_name: Mapping[str, PlatformTool] = MappingProxyType(by_name)

    def list(self) -> Sequence[ToolDescriptor]:
        return tuple(tool.descriptor for tool in self._tools)

    def get(self, name: str) -> Optional[PlatformTool]:
        return self._by_name.get(name)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name in self._by_name

    def __len__(self) -> int:
        return len(self._tools)

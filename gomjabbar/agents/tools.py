"""
Tool descriptions for eval suites.

Tools are descriptive metadata only: a suite keeps the name, description and
parameter schema of each tool and drops anything callable, so a model's tool
calls can be asserted on but never executed.
"""
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from langchain_core.utils.function_calling import convert_to_openai_tool
from pydantic import BaseModel, ConfigDict, Field


class ToolDescription(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str = ""
    parameters: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}}
    )

    def to_openai_tool(self) -> dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }


def describe_tool(name: str, tool: Any) -> ToolDescription:
    """
    Accepts a LangChain tool, a pydantic model class, an OpenAI-format dict or a
    ToolDescription. The mapping key always wins as the tool name.
    """
    if isinstance(tool, ToolDescription):
        return tool if tool.name == name else tool.model_copy(update={"name": name})

    function = convert_to_openai_tool(tool)["function"]
    return ToolDescription(
        name=name,
        description=function.get("description") or "",
        parameters=function.get("parameters") or {"type": "object", "properties": {}},
    )


def describe_tools(tools: Mapping[str, Any] | None) -> Mapping[str, ToolDescription]:
    described = {name: describe_tool(name, tool) for name, tool in (tools or {}).items()}
    return MappingProxyType(described)

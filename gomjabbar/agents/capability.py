"""
Model capability: the async boundary between the eval engine and a model.

The engine only needs `generate(request) -> Completion`. Any exception raised
from it is classified as a generation failure by the suite.
"""
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from langchain_core.language_models import BaseChatModel

from gomjabbar.eval.models import Completion, Message
from .message_utils import completion_from_ai_message, to_langchain_messages
from .tools import ToolDescription


@dataclass(frozen=True)
class GenerationRequest:
    system_prompt: str
    tool_descriptions: Mapping[str, ToolDescription]
    messages: list[Message]


@runtime_checkable
class ModelCapability(Protocol):
    async def generate(self, request: GenerationRequest) -> Completion:
        ...


class ChatModelCapability:
    """Adapts a LangChain chat model to the ModelCapability protocol."""

    def __init__(self, chat_model: BaseChatModel):
        self.chat_model = chat_model

    async def generate(self, request: GenerationRequest) -> Completion:
        llm = self.chat_model
        if request.tool_descriptions:
            llm = llm.bind_tools(
                [tool.to_openai_tool() for tool in request.tool_descriptions.values()]
            )

        msgs = to_langchain_messages(request.system_prompt, request.messages)
        ai = await llm.ainvoke(msgs)
        return completion_from_ai_message(ai)


def provider_for_chat_model(chat_model: BaseChatModel) -> str:
    """`langchain_openai.ChatOpenAI` -> `openai`, `langchain_aws.ChatBedrock` -> `aws`."""
    package = type(chat_model).__module__.split(".")[0]
    return package.removeprefix("langchain_")

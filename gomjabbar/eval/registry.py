from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from langchain_core.language_models import BaseChatModel

from gomjabbar.agents.capability import (
    ChatModelCapability,
    ModelCapability,
    provider_for_chat_model,
)
from gomjabbar.core.exceptions import NotFoundError


@dataclass(frozen=True)
class ModelHandle:
    """A named model under test. `provider` is the concurrency partition key."""
    identifier: str
    provider: str
    capability: ModelCapability


def as_model_handle(identifier: str, model: ModelHandle | BaseChatModel) -> ModelHandle:
    if isinstance(model, ModelHandle):
        if model.identifier == identifier:
            return model
        return ModelHandle(identifier=identifier, provider=model.provider, capability=model.capability)

    if isinstance(model, BaseChatModel):
        return ModelHandle(
            identifier=identifier,
            provider=provider_for_chat_model(model),
            capability=ChatModelCapability(model),
        )

    raise TypeError(f"Model {identifier!r} must be a ModelHandle or a LangChain chat model, got {type(model).__name__}")


class ModelRegistry(Mapping[str, ModelHandle]):
    """Read-only set of models, resolved by identifier."""

    def __init__(self, models: Mapping[str, ModelHandle | BaseChatModel] | None = None):
        handles = {
            identifier: as_model_handle(identifier, model)
            for identifier, model in (models or {}).items()
        }
        self._models = MappingProxyType(handles)

    def resolve(self, identifier: str) -> ModelHandle:
        try:
            return self._models[identifier]
        except KeyError:
            raise NotFoundError("Model", identifier, self.list_identifiers()) from None

    def list_identifiers(self) -> list[str]:
        return sorted(self._models)

    def providers(self) -> list[str]:
        return sorted({handle.provider for handle in self._models.values()})

    def __getitem__(self, identifier: str) -> ModelHandle:
        return self._models[identifier]

    def __iter__(self) -> Iterator[str]:
        return iter(self._models)

    def __len__(self) -> int:
        return len(self._models)

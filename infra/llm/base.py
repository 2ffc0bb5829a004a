from abc import ABC, abstractmethod
from typing import Type, TypeVar

from pydantic import BaseModel

T = TypeVar("T", bound=BaseModel)


class LLM(ABC):
    """
    Defines the contract for all LLMs.
    """
    @abstractmethod
    async def generate_structured(self, prompt: str, schema: Type[T], timeout: float | None = None) -> T:
        raise NotImplementedError

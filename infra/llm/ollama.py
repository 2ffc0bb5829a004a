import asyncio
import time
from typing import Type, TypeVar

from langchain_ollama import ChatOllama
from pydantic import BaseModel

from api.utils.logger import configure_logging
from infra.llm.base import LLM

T = TypeVar("T", bound=BaseModel)

DEFAULT_STRUCTURED_TIMEOUT = 120.0

logger = configure_logging()


class OllamaLLM(LLM):
    """
    Ollama chat model via LangChain. Structured output goes through
    ChatOllama.with_structured_output, which parses and validates against the schema.
    """

    def __init__(
        self,
        model: str,
        temperature: float = 0.7,
        base_url: str = "http://localhost:11434",
        timeout: float = DEFAULT_STRUCTURED_TIMEOUT,
    ):
        self.model = model
        self.timeout = timeout
        self._chat_llm = ChatOllama(model=model, temperature=temperature, base_url=base_url)

    async def generate_structured(self, prompt: str, schema: Type[T], timeout: float | None = None) -> T:
        """
        Ask the model for output matching `schema`.
        Raises TimeoutError after `timeout` seconds; other LangChain/pydantic errors propagate.
        """
        timeout_seconds = float(timeout if timeout is not None else self.timeout)
        runnable = self._chat_llm.with_structured_output(schema)

        start_time = time.monotonic()
        logger.debug("LLM structured call starting model=%s schema=%s ~%s input tokens", self.model, schema.__name__, len(prompt) // 4)
        try:
            result = await asyncio.wait_for(runnable.ainvoke(prompt), timeout=timeout_seconds)
        except asyncio.TimeoutError:
            elapsed = time.monotonic() - start_time
            logger.error("LLM call timed out after %.2fs (timeout: %ss) model=%s", elapsed, timeout_seconds, self.model)
            raise TimeoutError(f"LLM call timed out after {timeout_seconds}s") from None
        except Exception as e:
            elapsed = time.monotonic() - start_time
            logger.error("LLM call failed after %.2fs model=%s: %s", elapsed, self.model, e)
            raise

        elapsed = time.monotonic() - start_time
        logger.info("LLM call completed in %.2fs model=%s schema=%s", elapsed, self.model, schema.__name__)
        if elapsed > 60:
            logger.warning("LLM call took %.2fs; consider a smaller model than %s", elapsed, self.model)

        if isinstance(result, dict):
            result = schema.model_validate(result)
        return result

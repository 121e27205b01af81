"""Bridge from LangChain chat models to :class:`TextGenerator`.

Any ``BaseChatModel`` (``ChatOpenAI``, ``ChatGoogleGenerativeAI``,
``ChatAnthropic``, or a fake model in tests) becomes a text generator by
piping it into ``StrOutputParser``.

Example
-------
::

    from langchain_openai import ChatOpenAI
    from doodle.infrastructure.llm.langchain_bridge import ChatModelGenerator

    generator = ChatModelGenerator(ChatOpenAI(model="o4-mini"), name="openai")
    text = generator.generate("List three facts about graph coloring.")
"""

from __future__ import annotations

import logging
from typing import Any

from langchain_core.language_models import BaseChatModel
from langchain_core.output_parsers import StrOutputParser

from doodle.infrastructure.llm import (
    LLMConnectionError,
    LLMError,
    LLMResponseError,
    TextGenerator,
)

logger = logging.getLogger(__name__)


class ChatModelGenerator(TextGenerator):
    """Wraps a LangChain ``BaseChatModel`` as a ``TextGenerator``.

    Parameters
    ----------
    model:
        The chat model to call.  The prompt is sent as a single human
        message.
    name:
        Provider name reported by :attr:`provider_name`.  Defaults to the
        model's ``_llm_type``.
    """

    def __init__(self, model: BaseChatModel, name: str = "") -> None:
        self.model = model
        self._name = name
        self._chain = self._build_chain()

    def _build_chain(self) -> Any:
        return self.model | StrOutputParser()

    @property
    def provider_name(self) -> str:
        if self._name:
            return self._name
        try:
            return self.model._llm_type
        except AttributeError:
            return "langchain"

    def generate(self, prompt: str) -> str:
        logger.debug(
            "ChatModelGenerator(%s): sending prompt of %d chars",
            self.provider_name,
            len(prompt),
        )
        try:
            text = self._chain.invoke(prompt)
        except LLMError:
            raise
        except (ConnectionError, TimeoutError) as exc:
            raise LLMConnectionError(
                f"{self.provider_name} unreachable: {exc}"
            ) from exc
        except Exception as exc:
            raise LLMError(
                f"{self.provider_name} generation failed: {exc}"
            ) from exc

        if not isinstance(text, str):
            raise LLMResponseError(
                f"{self.provider_name} returned {type(text).__name__}, expected str"
            )
        return text

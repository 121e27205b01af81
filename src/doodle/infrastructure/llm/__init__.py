"""Text-generation layer for doodle.

This sub-package provides a **provider-agnostic** abstraction over text
generation backends.  The research controller needs exactly one
capability -- turn a prompt string into a response string -- so the
abstraction is a single-method interface rather than a class hierarchy.

Public API
----------
TextGenerator
    Abstract base class every backend implements.
ChatModelGenerator
    Adapter turning any LangChain ``BaseChatModel`` into a ``TextGenerator``.
TextGeneratorFactory / create_generator
    Configuration-driven backend selection.
LLMError
    Base exception for all backend failures.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


# =========================================================================== #
#  Exceptions                                                                  #
# =========================================================================== #

class LLMError(Exception):
    """Base exception for text-generation backend errors."""


class LLMConnectionError(LLMError):
    """Raised when the backend cannot be reached."""


class LLMResponseError(LLMError):
    """Raised when the backend returns an unusable response."""


class LLMConfigurationError(LLMError):
    """Raised when a backend cannot be built from the given configuration."""


# =========================================================================== #
#  Abstract generator                                                          #
# =========================================================================== #

class TextGenerator(ABC):
    """Maps a prompt string to a response string.

    Implementations are stateless from the caller's point of view and may
    fail transiently; failures are reported as :class:`LLMError`.

    Usage::

        generator = create_generator(ResearchConfig.from_env())
        text = generator.generate("Summarize graph coloring.")
    """

    @property
    def provider_name(self) -> str:
        """Human-readable backend identifier."""
        return type(self).__name__

    @abstractmethod
    def generate(self, prompt: str) -> str:
        """Generate a plain-text reply to *prompt*.

        Raises
        ------
        LLMError
            On any backend-level failure.
        """
        ...


# =========================================================================== #
#  Public API                                                                  #
# =========================================================================== #

__all__ = [
    "LLMError",
    "LLMConnectionError",
    "LLMResponseError",
    "LLMConfigurationError",
    "TextGenerator",
]


# ---------------------------------------------------------------------------
# Lazy imports (the bridge pulls in langchain_core)
# ---------------------------------------------------------------------------

def __getattr__(name: str):  # noqa: N807
    """Lazy-load concrete generators on attribute access."""
    _lazy_map = {
        "ChatModelGenerator": "doodle.infrastructure.llm.langchain_bridge",
        "TextGeneratorFactory": "doodle.infrastructure.llm.factory",
        "create_generator": "doodle.infrastructure.llm.factory",
    }

    if name in _lazy_map:
        import importlib
        module = importlib.import_module(_lazy_map[name])
        return getattr(module, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

"""Text-generator factory for doodle.

Registry-based factory pattern.  Creates concrete :class:`TextGenerator`
instances by name, importing each backend's LangChain integration only
when that backend is requested.

Usage::

    factory = TextGeneratorFactory()
    generator = factory.create("gemini", api_key="...", model="gemini-1.5-flash")
    generator = factory.create("openai", api_key="sk-...")

    # or, driven by configuration / environment:
    generator = create_generator(ResearchConfig.from_env())
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from typing import Any

from doodle.infrastructure.config import ResearchConfig
from doodle.infrastructure.llm import LLMConfigurationError, TextGenerator

logger = logging.getLogger(__name__)


# Type for generator constructor functions
GeneratorConstructor = Callable[..., TextGenerator]

DEFAULT_MODELS: dict[str, str] = {
    "gemini": "gemini-1.5-flash",
    "openai": "o4-mini",
    "anthropic": "claude-sonnet-4-5-20250929",
}

API_KEY_VARS: dict[str, str] = {
    "gemini": "GOOGLE_API_KEY",
    "openai": "OPENAI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}


class TextGeneratorFactory:
    """Registry-based factory for creating text generators.

    Maintains a registry mapping backend names to constructor functions.
    The built-in backends (Gemini, OpenAI, Anthropic) are pre-registered;
    custom backends can be added via :meth:`register`.

    Parameters
    ----------
    auto_discover:
        If ``True`` (default), pre-register the built-in backends.
    """

    def __init__(self, auto_discover: bool = True) -> None:
        self._registry: dict[str, GeneratorConstructor] = {}

        if auto_discover:
            self._register_builtin_backends()

    # -- registration ---------------------------------------------------------

    def register(
        self,
        name: str,
        constructor: GeneratorConstructor,
        overwrite: bool = False,
    ) -> None:
        """Register a generator constructor under the given *name*.

        Raises
        ------
        ValueError
            If the name is already registered and ``overwrite`` is ``False``.
        """
        if name in self._registry and not overwrite:
            raise ValueError(
                f"Backend {name!r} is already registered. "
                f"Use overwrite=True to replace it."
            )
        self._registry[name] = constructor
        logger.debug("TextGeneratorFactory: registered backend %r", name)

    def unregister(self, name: str) -> bool:
        """Remove a backend from the registry.

        Returns ``True`` if the backend was found and removed.
        """
        if name in self._registry:
            del self._registry[name]
            return True
        return False

    # -- creation -------------------------------------------------------------

    def create(self, backend: str, **kwargs: Any) -> TextGenerator:
        """Create a text generator by backend name.

        Raises
        ------
        ValueError
            If the backend name is not registered.
        LLMConfigurationError
            If the backend's integration package is not installed.
        """
        constructor = self._registry.get(backend)
        if constructor is None:
            raise ValueError(
                f"Unknown backend {backend!r}. "
                f"Available backends: {', '.join(self.available)}"
            )

        logger.info(
            "TextGeneratorFactory: creating backend %r with kwargs %s",
            backend,
            sorted(kwargs),
        )
        return constructor(**kwargs)

    # -- query ----------------------------------------------------------------

    @property
    def available(self) -> list[str]:
        return sorted(self._registry)

    def __contains__(self, name: object) -> bool:
        return name in self._registry

    # -- built-ins ------------------------------------------------------------

    def _register_builtin_backends(self) -> None:
        self.register("gemini", _create_gemini)
        self.register("openai", _create_openai)
        self.register("anthropic", _create_anthropic)


# ---------------------------------------------------------------------------
# Built-in constructors
# ---------------------------------------------------------------------------

def _chat_kwargs(model: str, temperature: float | None) -> dict[str, Any]:
    kwargs: dict[str, Any] = {"model": model}
    if temperature is not None:
        kwargs["temperature"] = temperature
    return kwargs


def _missing_integration(package: str, backend: str) -> LLMConfigurationError:
    return LLMConfigurationError(
        f"The '{package}' package is required for the {backend} backend. "
        f"Install it with: pip install {package}"
    )


def _create_gemini(
    api_key: str | None = None,
    model: str = "",
    temperature: float | None = None,
) -> TextGenerator:
    try:
        from langchain_google_genai import ChatGoogleGenerativeAI
    except ImportError as exc:
        raise _missing_integration("langchain-google-genai", "gemini") from exc

    from doodle.infrastructure.llm.langchain_bridge import ChatModelGenerator

    kwargs = _chat_kwargs(model or DEFAULT_MODELS["gemini"], temperature)
    if api_key is not None:
        kwargs["google_api_key"] = api_key
    return ChatModelGenerator(ChatGoogleGenerativeAI(**kwargs), name="gemini")


def _create_openai(
    api_key: str | None = None,
    model: str = "",
    temperature: float | None = None,
) -> TextGenerator:
    try:
        from langchain_openai import ChatOpenAI
    except ImportError as exc:
        raise _missing_integration("langchain-openai", "openai") from exc

    from doodle.infrastructure.llm.langchain_bridge import ChatModelGenerator

    kwargs = _chat_kwargs(model or DEFAULT_MODELS["openai"], temperature)
    if api_key is not None:
        kwargs["api_key"] = api_key
    return ChatModelGenerator(ChatOpenAI(**kwargs), name="openai")


def _create_anthropic(
    api_key: str | None = None,
    model: str = "",
    temperature: float | None = None,
) -> TextGenerator:
    try:
        from langchain_anthropic import ChatAnthropic
    except ImportError as exc:
        raise _missing_integration("langchain-anthropic", "anthropic") from exc

    from doodle.infrastructure.llm.langchain_bridge import ChatModelGenerator

    kwargs = _chat_kwargs(model or DEFAULT_MODELS["anthropic"], temperature)
    if api_key is not None:
        kwargs["api_key"] = api_key
    return ChatModelGenerator(ChatAnthropic(**kwargs), name="anthropic")


# ---------------------------------------------------------------------------
# Configuration-driven selection
# ---------------------------------------------------------------------------

def create_generator(
    config: ResearchConfig | None = None,
    environ: Mapping[str, str] | None = None,
    factory: TextGeneratorFactory | None = None,
) -> TextGenerator:
    """Build the backend named by ``config.provider``.

    Built-in backends require their API key variable to be set.

    Raises
    ------
    LLMConfigurationError
        If the API key is missing or the integration is not installed.
    ValueError
        If the provider name is unknown.
    """
    config = config or ResearchConfig.from_env(environ)
    env = os.environ if environ is None else environ
    factory = factory or TextGeneratorFactory()
    provider = config.provider.lower()

    if provider not in factory:
        raise ValueError(
            f"Unknown backend {provider!r}. "
            f"Available backends: {', '.join(factory.available)}"
        )

    kwargs: dict[str, Any] = {"model": config.model, "temperature": config.temperature}
    key_var = API_KEY_VARS.get(provider)
    if key_var is not None:
        api_key = env.get(key_var)
        if not api_key:
            raise LLMConfigurationError(
                f"{key_var} environment variable is required when using "
                f"the {provider} backend"
            )
        kwargs["api_key"] = api_key

    generator = factory.create(provider, **kwargs)
    logger.info("Using %s text-generation backend", generator.provider_name)
    return generator

"""Configuration dataclasses for doodle.

Each config is a plain ``dataclass`` with a ``validate()`` method that raises
``ValueError`` on invalid combinations.  No third-party dependencies --
just stdlib ``dataclasses``.

Configs are **frozen** so a session cannot change its own limits while it
runs.  Values can come from code, a JSON document or environment
variables, so the iteration budget and quality bar are tunable without
code changes.
"""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from dataclasses import asdict, dataclass, fields
from typing import Any

# ===================================================================== #
#  Research Configuration                                                #
# ===================================================================== #

_ENV_PREFIX = "DOODLE_"

# field name -> environment variable
_ENV_VARS: dict[str, str] = {
    "max_iterations": f"{_ENV_PREFIX}MAX_ITERATIONS",
    "quality_threshold": f"{_ENV_PREFIX}QUALITY_THRESHOLD",
    "context_chars": f"{_ENV_PREFIX}CONTEXT_CHARS",
    "evaluation_section_chars": f"{_ENV_PREFIX}EVALUATION_SECTION_CHARS",
    "output_dir": f"{_ENV_PREFIX}OUTPUT_DIR",
    "provider": "MODEL_PROVIDER",
    "model": f"{_ENV_PREFIX}MODEL",
    "temperature": f"{_ENV_PREFIX}TEMPERATURE",
}

DEFAULT_EXTRA_KNOWLEDGE_PLACEHOLDER = (
    "_Additional insights could not be generated for this topic._"
)


@dataclass(frozen=True)
class ResearchConfig:
    """Parameters governing one research session.

    Attributes
    ----------
    max_iterations:
        Hard upper limit on research/evaluation rounds.
    quality_threshold:
        Minimum evaluation score (1-10) that, together with an explicit
        completeness signal, ends the loop early.
    context_chars:
        Size of the trailing window of already gathered content that seeds
        each area research prompt.
    evaluation_section_chars:
        Per-section truncation applied to the document sent for
        evaluation.  ``0`` sends every section body in full.
    extra_knowledge_placeholder:
        Text used for the extra-knowledge block when generating it fails.
    output_dir:
        Directory the markdown note writer saves into.
    provider:
        Text-generation backend name (``"gemini"``, ``"openai"``,
        ``"anthropic"``).
    model:
        Model identifier.  Empty string selects the backend default.
    temperature:
        Sampling temperature, or ``None`` to keep the backend default.
    """

    max_iterations: int = 10
    quality_threshold: float = 8.0
    context_chars: int = 2000
    evaluation_section_chars: int = 4000
    extra_knowledge_placeholder: str = DEFAULT_EXTRA_KNOWLEDGE_PLACEHOLDER
    output_dir: str = "research-notes"
    provider: str = "gemini"
    model: str = ""
    temperature: float | None = None

    def validate(self) -> None:
        """Raise ``ValueError`` if any field is out of valid range."""
        if self.max_iterations < 1:
            raise ValueError(f"max_iterations must be >= 1, got {self.max_iterations}")
        if not (1.0 <= self.quality_threshold <= 10.0):
            raise ValueError(
                f"quality_threshold must be in [1, 10], got {self.quality_threshold}"
            )
        if self.context_chars < 0:
            raise ValueError(f"context_chars must be >= 0, got {self.context_chars}")
        if self.evaluation_section_chars < 0:
            raise ValueError(
                f"evaluation_section_chars must be >= 0, got {self.evaluation_section_chars}"
            )
        if not self.provider:
            raise ValueError("provider must not be empty")
        if self.temperature is not None and not (0.0 <= self.temperature <= 2.0):
            raise ValueError(f"temperature must be in [0, 2], got {self.temperature}")

    @property
    def recursion_limit(self) -> int:
        """Graph step budget: two nodes per iteration plus the fixed stages."""
        return 2 * self.max_iterations + 10

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ResearchConfig:
        valid_keys = {f.name for f in fields(cls)}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        cfg = cls(**filtered)
        cfg.validate()
        return cfg

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> ResearchConfig:
        """Build a config from environment variables.

        Unset variables keep their defaults; *overrides* win over both.
        """
        env = os.environ if environ is None else environ
        data: dict[str, Any] = {}
        for name, var in _ENV_VARS.items():
            raw = env.get(var)
            if raw is None or raw.strip() == "":
                continue
            data[name] = _coerce(name, raw.strip())
        data.update(overrides)
        return cls.from_dict(data)


def _coerce(name: str, raw: str) -> Any:
    """Convert an environment string to the type of field *name*."""
    try:
        if name in ("max_iterations", "context_chars", "evaluation_section_chars"):
            return int(raw)
        if name in ("quality_threshold", "temperature"):
            return float(raw)
    except ValueError as exc:
        raise ValueError(f"{_ENV_VARS[name]} must be numeric, got {raw!r}") from exc
    if name == "provider":
        return raw.lower()
    return raw


# ===================================================================== #
#  Unified config loader                                                 #
# ===================================================================== #

_CONFIG_MAP: dict[str, type] = {
    "research": ResearchConfig,
}


def load_config_from_json(json_str: str) -> dict[str, Any]:
    """Parse a JSON string into a dict of typed config objects.

    The JSON is expected to be an object whose top-level keys correspond to
    config section names (``research``).  Unknown sections are preserved as
    raw dicts.

    Returns a dict mapping section name -> config instance (or raw dict).
    """
    raw = json.loads(json_str)
    if not isinstance(raw, dict):
        raise ValueError("Top-level JSON must be an object")
    result: dict[str, Any] = {}
    for section, data in raw.items():
        cls = _CONFIG_MAP.get(section)
        if cls is not None and isinstance(data, dict):
            result[section] = cls.from_dict(data)
        else:
            result[section] = data
    return result

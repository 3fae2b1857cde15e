"""Configuration loading from environment variables and CLI flags."""

import math
import os
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Callable, Optional

from inkexpr.errors import ConfigError


class Provider(str, Enum):
    TESSERACT = "tesseract"
    ANTHROPIC = "anthropic"
    OPENAI = "openai"


DEFAULTS = {
    Provider.TESSERACT: "tesseract",
    Provider.ANTHROPIC: "claude-sonnet-4-6",
    Provider.OPENAI: "gpt-4o",
}

ENV_KEYS = {
    Provider.ANTHROPIC: "ANTHROPIC_API_KEY",
    Provider.OPENAI: "OPENAI_API_KEY",
}

# Characters the recognizer tends to emit for digits and operators in
# hand-drawn math.  Each pair is (misread, replacement); one character at a
# time, case-sensitive.
DEFAULT_SUBSTITUTIONS: tuple[tuple[str, str], ...] = (
    ("O", "0"),
    ("o", "0"),
    ("l", "1"),
    ("I", "1"),
    ("|", "1"),
    ("S", "5"),
    ("s", "5"),
    ("Z", "2"),
    ("z", "2"),
    ("g", "9"),
    ("q", "9"),
    ("B", "8"),
    ("x", "*"),
    ("X", "*"),
    (":", "/"),
    ("÷", "/"),
    ("?", "2"),
)

# Digits, operators, and the glyphs DEFAULT_SUBSTITUTIONS knows how to repair.
DEFAULT_WHITELIST = "0123456789+-*/^().=!|lIoOxX:÷?"


@dataclass(frozen=True)
class EngineConfig:
    """Values forwarded untouched to the recognition engine."""

    language: str = "eng"
    dpi: int = 300
    page_segmentation_mode: int = 6
    engine_mode: int = 1
    char_whitelist: str = DEFAULT_WHITELIST


@dataclass(frozen=True)
class PipelineConfig:
    margin_px: int = 20
    padding_ratio: float = 0.50
    min_padding_px: int = 50
    scale_factor: int = 3
    binarize_threshold: int = 180
    background_level: int = 240
    min_ink_extent_px: int = 5
    char_whitelist: str = DEFAULT_WHITELIST
    language: str = "eng"
    dpi: int = 300
    page_segmentation_mode: int = 6
    engine_mode: int = 1
    substitutions: tuple[tuple[str, str], ...] = field(default=DEFAULT_SUBSTITUTIONS)

    def __post_init__(self) -> None:
        if self.margin_px < 0:
            raise ConfigError(f"margin_px must be >= 0, got {self.margin_px}", "margin_px")
        if not math.isfinite(self.padding_ratio) or self.padding_ratio < 0:
            raise ConfigError(
                f"padding_ratio must be a finite number >= 0, got {self.padding_ratio}",
                "padding_ratio",
            )
        if self.min_padding_px < 0:
            raise ConfigError(
                f"min_padding_px must be >= 0, got {self.min_padding_px}", "min_padding_px"
            )
        if self.scale_factor < 1:
            raise ConfigError(
                f"scale_factor must be >= 1, got {self.scale_factor}", "scale_factor"
            )
        if not 0 <= self.binarize_threshold <= 255:
            raise ConfigError(
                f"binarize_threshold must be within 0..255, got {self.binarize_threshold}",
                "binarize_threshold",
            )
        if not 0 <= self.background_level <= 255:
            raise ConfigError(
                f"background_level must be within 0..255, got {self.background_level}",
                "background_level",
            )
        if self.min_ink_extent_px < 0:
            raise ConfigError(
                f"min_ink_extent_px must be >= 0, got {self.min_ink_extent_px}",
                "min_ink_extent_px",
            )
        for pair in self.substitutions:
            if len(pair) != 2 or len(pair[0]) != 1:
                raise ConfigError(
                    f"substitutions must map single characters, got {pair!r}", "substitutions"
                )

    @property
    def engine(self) -> EngineConfig:
        return EngineConfig(
            language=self.language,
            dpi=self.dpi,
            page_segmentation_mode=self.page_segmentation_mode,
            engine_mode=self.engine_mode,
            char_whitelist=self.char_whitelist,
        )

    @classmethod
    def from_env(cls, **overrides: Any) -> "PipelineConfig":
        """Build a config from ``INKEXPR_*`` variables.

        Keyword overrides that are not ``None`` take precedence over the
        environment, which takes precedence over the field defaults.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(overrides) - known
        if unknown:
            raise ConfigError(f"Unknown config option(s): {', '.join(sorted(unknown))}")

        values: dict[str, Any] = {}
        sources: dict[str, str] = {}
        for name, (env_var, parse) in ENV_OPTIONS.items():
            raw = os.environ.get(env_var)
            if raw is None or raw.strip() == "":
                continue
            try:
                values[name] = parse(raw.strip())
                sources[name] = env_var
            except ValueError:
                raise ConfigError(f"Invalid value for {env_var}: {raw!r}", name) from None

        explicit = {k: v for k, v in overrides.items() if v is not None}
        values.update(explicit)
        for name in explicit:
            sources.pop(name, None)

        try:
            return cls(**values)
        except ConfigError as e:
            if e.field not in sources:
                raise
            raise ConfigError(f"Invalid value for {sources[e.field]}: {e}", e.field) from None


ENV_OPTIONS: dict[str, tuple[str, Callable[[str], Any]]] = {
    "margin_px": ("INKEXPR_MARGIN_PX", int),
    "padding_ratio": ("INKEXPR_PADDING_RATIO", float),
    "min_padding_px": ("INKEXPR_MIN_PADDING_PX", int),
    "scale_factor": ("INKEXPR_SCALE_FACTOR", int),
    "binarize_threshold": ("INKEXPR_BINARIZE_THRESHOLD", int),
    "min_ink_extent_px": ("INKEXPR_MIN_INK_EXTENT_PX", int),
    "char_whitelist": ("INKEXPR_CHAR_WHITELIST", str),
    "language": ("INKEXPR_LANGUAGE", str),
    "dpi": ("INKEXPR_DPI", int),
}


@dataclass
class ProviderConfig:
    provider: Provider
    model: str
    api_key: str = ""
    tesseract_cmd: Optional[str] = None

    @classmethod
    def from_env(
        cls,
        provider: Provider,
        model_override: Optional[str] = None,
        api_key_override: Optional[str] = None,
    ) -> "ProviderConfig":
        model = model_override or DEFAULTS[provider]
        if provider == Provider.TESSERACT:
            return cls(
                provider=provider,
                model=model,
                tesseract_cmd=os.environ.get("TESSERACT_CMD") or None,
            )
        api_key = api_key_override or os.environ.get(ENV_KEYS[provider], "")
        if not api_key:
            raise RuntimeError(
                f"No API key for {provider.value}. "
                f"Set {ENV_KEYS[provider]} in your environment or .env file."
            )
        return cls(provider=provider, model=model, api_key=api_key)

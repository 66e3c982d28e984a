"""Import limits and their environment overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Mapping, Optional

import structlog

from svg_codec.parser import ParserConfig

logger = structlog.get_logger(__name__)

ENV_PREFIX = "CURVEBRIDGE_"


@dataclass
class ImportConfig:
    """Limits applied by the import pipeline.

    Attributes:
        max_objects: Objects beyond this count are dropped with a warning
        max_points_per_object: Points beyond this count are dropped per object
        batch_size: Objects processed between cooperative yields
        handle_offset: Horizontal length of synthesized handles
        substitute_placeholder: Replace unparseable shapes with a square
            instead of skipping them
        parser: Settings for SVG path data
    """

    max_objects: int = 100
    max_points_per_object: int = 1000
    batch_size: int = 10
    handle_offset: float = 20.0
    substitute_placeholder: bool = False
    parser: ParserConfig = field(default_factory=ParserConfig)

    def __post_init__(self) -> None:
        if self.max_objects < 1:
            raise ValueError("max_objects must be at least 1")
        if self.max_points_per_object < 2:
            raise ValueError("max_points_per_object must be at least 2")
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")

    @classmethod
    def preset(cls, name: str) -> "ImportConfig":
        """Return a copy of a named preset.

        Raises:
            KeyError: If no preset has that name
        """
        try:
            factory = PRESETS[name]
        except KeyError:
            raise KeyError(f"Unknown import preset '{name}'. Available: {', '.join(PRESETS)}") from None
        return factory()

    @classmethod
    def from_env(
        cls,
        base: Optional["ImportConfig"] = None,
        environ: Optional[Mapping[str, str]] = None,
        prefix: str = ENV_PREFIX,
    ) -> "ImportConfig":
        """Apply ``CURVEBRIDGE_*`` overrides on top of ``base``.

        Values that do not parse are logged and ignored.
        """
        environ = os.environ if environ is None else environ
        config = base or cls()

        top: Dict[str, Any] = {}
        for key, (attr, convert) in _IMPORT_ENV.items():
            value = _read_env(environ, prefix + key, convert)
            if value is not _UNSET:
                top[attr] = value

        nested: Dict[str, Any] = {}
        for key, (attr, convert) in _PARSER_ENV.items():
            value = _read_env(environ, prefix + key, convert)
            if value is not _UNSET:
                nested[attr] = value

        if not top and not nested:
            return config

        try:
            if nested:
                top["parser"] = replace(config.parser, **nested)
            updated = replace(config, **top)
        except ValueError as e:
            logger.warning("Ignoring out-of-range environment overrides", error=str(e))
            return config

        logger.debug("Applied import config overrides", fields=sorted(top))
        return updated


def _to_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ValueError(f"not a boolean: {value!r}")


def _to_optional_int(value: str) -> Optional[int]:
    if value.strip().lower() in ("", "none", "unlimited"):
        return None
    return int(value)


_IMPORT_ENV: Dict[str, tuple[str, Callable[[str], Any]]] = {
    "MAX_OBJECTS": ("max_objects", int),
    "MAX_POINTS_PER_OBJECT": ("max_points_per_object", int),
    "BATCH_SIZE": ("batch_size", int),
    "HANDLE_OFFSET": ("handle_offset", float),
    "SUBSTITUTE_PLACEHOLDER": ("substitute_placeholder", _to_bool),
}

_PARSER_ENV: Dict[str, tuple[str, Callable[[str], Any]]] = {
    "MAX_COMMANDS": ("max_commands", _to_optional_int),
    "MIN_POINT_SPACING": ("min_point_spacing", float),
    "TARGET_POINT_COUNT": ("target_point_count", _to_optional_int),
}


_UNSET = object()


def _read_env(environ: Mapping[str, str], name: str, convert: Callable[[str], Any]) -> Any:
    raw = environ.get(name)
    if raw is None:
        return _UNSET
    try:
        return convert(raw)
    except ValueError as e:
        logger.warning("Ignoring invalid environment override", variable=name, value=raw, error=str(e))
        return _UNSET


PRESETS: Dict[str, Callable[[], ImportConfig]] = {
    "safe": lambda: ImportConfig(
        max_objects=8,
        max_points_per_object=10,
        batch_size=2,
        parser=ParserConfig.safe(),
    ),
    "default": ImportConfig,
    "balanced": lambda: ImportConfig(max_objects=500, parser=ParserConfig.balanced()),
    "full": lambda: ImportConfig(
        max_objects=10_000,
        max_points_per_object=100_000,
        batch_size=50,
        parser=ParserConfig.full(),
    ),
}

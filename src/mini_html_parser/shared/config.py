"""Configuration for the mini HTML parser.

``ParserConfig`` is immutable; use ``override`` to derive a modified copy.
"""

import json
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, List, Optional

VALID_LOGGING_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
VALID_DECODE_ERRORS = ["strict", "replace", "ignore"]

# Upper bound on max_depth. Each nesting level uses two interpreter frames.
MAX_DEPTH_LIMIT = 400


class ConfigError(Exception):
    """Base exception for configuration errors."""


class ConfigValidationError(ConfigError):
    """Exception raised when configuration validation fails."""

    def __init__(self, message: str, field_name: Optional[str] = None,
                 suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.field_name = field_name
        self.suggestions = suggestions or []


@dataclass(frozen=True)
class ParserConfig:
    """Configuration controlling document-level parsing behaviour.

    Thread-safe due to frozen dataclass implementation.

    Attributes:
        allow_text_root: Accept a bare text run as the document root. When
            False a document whose first structural node is text fails with
            ``TEXT_AT_ROOT``.
        skip_doctype: Skip a leading ``<!doctype ...>`` declaration.
        max_depth: Maximum element nesting depth before the parse fails.
        encoding: Codec used to decode ``bytes`` input. No sniffing is done.
        decode_errors: Error handler passed to ``bytes.decode``.
        max_input_size: Optional limit on input length in characters.
        logging_level: Level applied by the CLI when configuring logging.
        enable_diagnostics: Record diagnostics on parse results.
    """

    allow_text_root: bool = False
    skip_doctype: bool = True
    max_depth: int = 256
    encoding: str = "utf-8"
    decode_errors: str = "replace"
    max_input_size: Optional[int] = None
    logging_level: str = "WARNING"
    enable_diagnostics: bool = True

    # Metadata
    correlation_id: Optional[str] = None
    name: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the configuration."""
        if not (0 < self.max_depth <= MAX_DEPTH_LIMIT):
            raise ConfigValidationError(
                f"max_depth must be between 1 and {MAX_DEPTH_LIMIT}",
                field_name="max_depth",
            )
        if self.max_input_size is not None and self.max_input_size <= 0:
            raise ConfigValidationError(
                "max_input_size must be > 0 or None", field_name="max_input_size"
            )
        if self.decode_errors not in VALID_DECODE_ERRORS:
            raise ConfigValidationError(
                f"decode_errors must be one of {VALID_DECODE_ERRORS}",
                field_name="decode_errors",
                suggestions=VALID_DECODE_ERRORS,
            )
        if self.logging_level not in VALID_LOGGING_LEVELS:
            raise ConfigValidationError(
                f"logging_level must be one of {VALID_LOGGING_LEVELS}",
                field_name="logging_level",
                suggestions=VALID_LOGGING_LEVELS,
            )
        try:
            "".encode(self.encoding)
        except LookupError as e:
            raise ConfigValidationError(
                f"Unknown encoding: {self.encoding}", field_name="encoding"
            ) from e

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Keyword arguments for configuration fields to override

        Returns:
            New ParserConfig instance with overrides applied

        Raises:
            ConfigValidationError: If a field name is unknown or a value is invalid
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(kwargs) - known)
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration field(s): {', '.join(unknown)}",
                field_name=unknown[0],
                suggestions=sorted(known),
            )
        return replace(self, **kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary representation."""
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        """Serialize configuration to a JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        """Create configuration from a JSON string."""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid JSON configuration: {e}") from e
        if not isinstance(data, dict):
            raise ConfigValidationError("JSON configuration must be an object")
        return cls.from_dict(data)

    @classmethod
    def balanced(cls) -> "ParserConfig":
        """Default configuration."""
        return cls(name="balanced")

    @classmethod
    def strict(cls) -> "ParserConfig":
        """Reject anything beyond the documented grammar, fail fast on bad bytes."""
        return cls(
            name="strict",
            allow_text_root=False,
            decode_errors="strict",
            max_depth=128,
        )

    @classmethod
    def lenient(cls) -> "ParserConfig":
        """Accept a bare text root and tolerate deeper nesting."""
        return cls(
            name="lenient",
            allow_text_root=True,
            max_depth=MAX_DEPTH_LIMIT,
        )

    @classmethod
    def from_preset(cls, preset: str) -> "ParserConfig":
        """Build a configuration from a preset name."""
        presets = {
            "balanced": cls.balanced,
            "strict": cls.strict,
            "lenient": cls.lenient,
        }
        if preset not in presets:
            raise ConfigValidationError(
                f"Unknown preset: {preset}",
                suggestions=sorted(presets),
            )
        return presets[preset]()

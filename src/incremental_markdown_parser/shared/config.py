"""Configuration classes for incremental Markdown parsing.

This module provides configuration objects for the tokenizer, the persistent
tree and the parse orchestrator, enabling control over grouping, node id
generation, logging and metrics collection.
"""

import json
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

ID_STRATEGIES = ("random", "sequential")
LOGGING_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
COMPONENT_FIELDS = ("tokenization", "tree", "global_")


@dataclass
class TokenizationConfig:
    """Configuration for the tokenizer."""

    # Synthesize zero-width grouping tokens before sentences and list items
    group: bool = True
    # Treat raw HTML spans as opaque (delimiters inside them do not split)
    ignore_html_blocks: bool = True

    def __post_init__(self) -> None:
        """Validate tokenization configuration."""
        if not isinstance(self.group, bool):
            raise ValueError("group must be a boolean")
        if not isinstance(self.ignore_html_blocks, bool):
            raise ValueError("ignore_html_blocks must be a boolean")


@dataclass
class TreeConfig:
    """Configuration for node construction."""

    id_strategy: str = "random"  # random, sequential
    id_prefix: str = "n"

    def __post_init__(self) -> None:
        """Validate tree configuration."""
        if self.id_strategy not in ID_STRATEGIES:
            raise ValueError(f"id_strategy must be one of {list(ID_STRATEGIES)}")
        if not self.id_prefix:
            raise ValueError("id_prefix cannot be empty")


@dataclass
class GlobalConfig:
    """Global configuration settings that apply across all components."""

    logging_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
    enable_correlation_tracking: bool = True
    enable_metrics: bool = False

    def __post_init__(self) -> None:
        """Validate global configuration."""
        if self.logging_level not in LOGGING_LEVELS:
            raise ValueError(f"logging_level must be one of {list(LOGGING_LEVELS)}")


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
    """Complete configuration for the parser components.

    Immutable once built; use ``override`` to derive variants.
    """

    tokenization: TokenizationConfig = field(default_factory=TokenizationConfig)
    tree: TreeConfig = field(default_factory=TreeConfig)
    global_: GlobalConfig = field(default_factory=GlobalConfig)

    # Metadata
    version: str = "1.0.0"
    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate the complete parser configuration."""
        try:
            self.tokenization.__post_init__()
            self.tree.__post_init__()
            self.global_.__post_init__()
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

    def override(self, **kwargs: Any) -> "ParserConfig":
        """Create a new configuration with specific overrides.

        Args:
            **kwargs: Fields to override; nested fields use ``component__field``
                (``global___logging_level`` for the ``global_`` component)

        Returns:
            New ParserConfig instance with overrides applied

        Example:
            >>> config = ParserConfig().override(tokenization__group=False)
            >>> config.tokenization.group
            False
        """
        nested_overrides: Dict[str, Any] = {}
        for key, value in kwargs.items():
            if "__" in key:
                component, field_name = key.rsplit("__", 1)
                if component not in COMPONENT_FIELDS:
                    raise ConfigValidationError(
                        f"Unknown configuration component: {component}",
                        field_name=key,
                        suggestions=list(COMPONENT_FIELDS),
                    )
                nested_overrides.setdefault(component, {})[field_name] = value
            else:
                nested_overrides[key] = value

        new_fields: Dict[str, Any] = {}
        for field_name in COMPONENT_FIELDS:
            current_config = getattr(self, field_name)
            if field_name in nested_overrides:
                try:
                    new_fields[field_name] = replace(
                        current_config, **nested_overrides[field_name]
                    )
                except (TypeError, ValueError) as e:
                    raise ConfigValidationError(str(e), field_name=field_name) from e
            else:
                new_fields[field_name] = current_config

        for key, value in nested_overrides.items():
            if key not in COMPONENT_FIELDS:
                new_fields[key] = value

        return replace(self, **new_fields)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary format."""
        def _dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, "__dataclass_fields__"):
                return {
                    name: _dataclass_to_dict(getattr(obj, name))
                    for name in obj.__dataclass_fields__
                }
            if isinstance(obj, (list, tuple, set)):
                return [_dataclass_to_dict(item) for item in obj]
            return obj

        return _dataclass_to_dict(self)

    def to_json(self, indent: int = 2) -> str:
        """Convert configuration to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParserConfig":
        """Create configuration from dictionary.

        Unknown keys are ignored; missing keys keep their defaults.
        """
        def _dict_to_dataclass(data_dict: Dict[str, Any], target_class: type) -> Any:
            field_values: Dict[str, Any] = {}
            for field_name, field_info in target_class.__dataclass_fields__.items():
                if field_name not in data_dict:
                    continue
                value = data_dict[field_name]
                if hasattr(field_info.type, "__dataclass_fields__"):
                    value = _dict_to_dataclass(value, field_info.type)
                field_values[field_name] = value
            return target_class(**field_values)

        try:
            return _dict_to_dataclass(data, cls)
        except ValueError as e:
            raise ConfigValidationError(str(e)) from e

    @classmethod
    def from_json(cls, json_str: str) -> "ParserConfig":
        """Create configuration from JSON string."""
        return cls.from_dict(json.loads(json_str))

    # Preset factory methods
    @classmethod
    def flat(cls) -> "ParserConfig":
        """Preset that disables grouping tokens (raw tokenizer output)."""
        return cls(
            tokenization=TokenizationConfig(group=False),
            name="flat",
            description="Tokenizer output without synthesized grouping tokens",
        )

    @classmethod
    def deterministic(cls, id_prefix: str = "n") -> "ParserConfig":
        """Preset that assigns sequential node ids."""
        return cls(
            tree=TreeConfig(id_strategy="sequential", id_prefix=id_prefix),
            name="deterministic",
            description="Sequential node ids for reproducible trees",
        )

    @classmethod
    def profiling(cls) -> "ParserConfig":
        """Preset that collects parse metrics."""
        return cls(
            global_=GlobalConfig(enable_metrics=True),
            name="profiling",
            description="Collect timing, count and memory metrics per parse",
        )

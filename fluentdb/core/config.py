"""Statement configuration shared by every builder created from a table."""

import datetime
from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Optional
from uuid import UUID

if TYPE_CHECKING:
    from collections.abc import Mapping

    from fluentdb.observability import StatementObserver

__all__ = ("DEFAULT_STATEMENT_CONFIG", "GeneratedKeys", "StatementConfig", "sqlite_statement_config")


class GeneratedKeys(Enum):
    """How the driver reports the key of a row inserted without an explicit id."""

    LASTROWID = "lastrowid"
    RETURNING = "returning"
    UNSUPPORTED = "unsupported"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class StatementConfig:
    """Execution settings for statements rendered by the builders.

    Attributes:
        dialect: sqlglot dialect used to tokenize rendered SQL when counting placeholders.
        validate_parameters: Compare placeholder and parameter counts before every execution.
        generated_keys: Mechanism used to read back autogenerated numeric keys.
        type_coercion_map: Converters applied to bound parameters, looked up by exact type.
        statement_observers: Callbacks receiving a ``StatementEvent`` after every execution.
    """

    dialect: "Optional[str]" = None
    validate_parameters: bool = True
    generated_keys: GeneratedKeys = GeneratedKeys.LASTROWID
    type_coercion_map: "Mapping[type, Callable[[Any], Any]]" = field(default_factory=dict)
    statement_observers: "tuple[StatementObserver, ...]" = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "type_coercion_map", MappingProxyType(dict(self.type_coercion_map)))
        object.__setattr__(self, "statement_observers", tuple(self.statement_observers))

    def replace(self, **changes: Any) -> "StatementConfig":
        """Return a copy with ``changes`` applied."""
        return replace(self, **changes)

    def coerce(self, value: Any) -> Any:
        """Convert ``value`` to the form handed to the driver."""
        if value is None or not self.type_coercion_map:
            return value
        converter = self.type_coercion_map.get(type(value))
        return converter(value) if converter is not None else value

    def coerce_parameters(self, parameters: "list[Any]") -> "list[Any]":
        if not self.type_coercion_map:
            return list(parameters)
        return [self.coerce(value) for value in parameters]


DEFAULT_STATEMENT_CONFIG = StatementConfig()

sqlite_statement_config = StatementConfig(
    dialect="sqlite",
    type_coercion_map={
        bool: int,
        datetime.datetime: lambda v: v.isoformat(),
        datetime.date: lambda v: v.isoformat(),
        Decimal: str,
        UUID: str,
    },
)

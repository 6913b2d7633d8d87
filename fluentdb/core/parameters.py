"""Placeholder counting for rendered statements.

The composer only ever emits ``?`` placeholders, but caller supplied fragments from
``where_expression`` may contain string literals or comments holding a literal ``?``.
Counting goes through the sqlglot tokenizer so those are not mistaken for placeholders.
"""

from functools import lru_cache
from typing import TYPE_CHECKING, Any, Optional

import sqlglot
from sqlglot.errors import TokenError
from sqlglot.tokens import TokenType

from fluentdb.exceptions import ParameterMismatchError

if TYPE_CHECKING:
    from collections.abc import Sequence

__all__ = ("count_placeholders", "validate_parameter_count")

QMARK = "?"


@lru_cache(maxsize=512)
def count_placeholders(sql: str, dialect: "Optional[str]" = None) -> int:
    """Return the number of positional ``?`` placeholders in ``sql``.

    Raises:
        ParameterMismatchError: If the statement cannot be tokenized.
    """
    try:
        tokens = sqlglot.tokenize(sql, read=dialect)
    except TokenError as e:
        raise ParameterMismatchError(sql, -1, -1, message=f"Unable to count placeholders: {e}") from e
    return sum(1 for token in tokens if token.token_type == TokenType.PLACEHOLDER and token.text == QMARK)


def validate_parameter_count(sql: str, parameters: "Sequence[Any]", dialect: "Optional[str]" = None) -> None:
    """Ensure ``sql`` has exactly one placeholder per parameter.

    Raises:
        ParameterMismatchError: If the counts differ.
    """
    placeholder_count = count_placeholders(sql, dialect)
    if placeholder_count != len(parameters):
        raise ParameterMismatchError(sql, placeholder_count, len(parameters))

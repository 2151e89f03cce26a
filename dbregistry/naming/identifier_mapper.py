# ==============================================
# IdentifierMapper
# ==============================================
#
# PURPOSE:
#   Apply a pair of naming-convention converters at the two places
#   a database client touches names:
#     - outgoing identifiers (table / column names in queries)
#     - incoming result rows (column names as dict keys)
#
# CLASS: IdentifierMapper
# -----------------------
#   Constructor:
#   ------------
#   - __init__(parse, format, id_separator=":")
#       parse:  storage name -> application name (e.g. to_camel)
#       format: application name -> storage name (e.g. to_snake)
#
#   Methods:
#   --------
#   - format_identifier(identifier) / parse_identifier(identifier)
#       Convert only the part after the last separator:
#         "table:fooBar" -> "table:foo_bar"
#
#   - wrap_identifier(identifier, orig_wrap, query_context=None)
#       Format, then hand over to the driver's own quoting.
#
#   - post_process_response(result, query_context=None)
#       Parse the keys of one row or a list of rows, one level deep.
#
# HELPERS:
# --------
# - map_last_part(mapper, separator)
# - key_mapper(mapper)
# - snake_case_mappers(id_separator=":")
#
# ==============================================

from collections.abc import Mapping
from typing import Any, Callable, Optional

from .case_converter import to_camel, to_snake
from .memoize import memoize


def map_last_part(mapper: Callable[[str], str], separator: str) -> Callable[[str], str]:
    """
    Return a function that runs `mapper` on the text after the last
    `separator` and glues the untouched prefix back on. Without a
    separator the whole string is mapped.
    """
    def mapped(value: str) -> str:
        idx = value.rfind(separator)
        if idx == -1:
            return mapper(value)
        cut = idx + len(separator)
        return value[:cut] + mapper(value[cut:])

    return mapped


def key_mapper(mapper: Callable[[str], str]) -> Callable[[Any], Any]:
    """Return a function mapping the keys of a dict; non-dicts pass through."""
    def mapped(row):
        if not isinstance(row, Mapping):
            return row
        return {mapper(key): value for key, value in row.items()}

    return mapped


class IdentifierMapper:
    """
    Converts identifiers on the way to the database and row keys on
    the way back. Convention-agnostic: any pair of inverse string
    functions works.
    """

    def __init__(
        self,
        parse: Callable[[str], str],
        format: Callable[[str], str],
        id_separator: str = ":"
    ):
        if not id_separator:
            raise ValueError("id_separator must be a non-empty string")
        self.parse = parse
        self.format = format
        self.id_separator = id_separator

        # One cache per mapper, never shared between connections
        self.format_identifier = memoize(map_last_part(format, id_separator))
        self.parse_identifier = memoize(map_last_part(parse, id_separator))
        self._parse_keys = key_mapper(self.parse_identifier)

    def wrap_identifier(
        self,
        identifier: str,
        orig_wrap: Callable[[str], str],
        query_context: Optional[Any] = None
    ) -> str:
        return orig_wrap(self.format_identifier(identifier))

    def post_process_response(self, result: Any, query_context: Optional[Any] = None) -> Any:
        """
        Parse row keys. Lists keep their order and length; rows that
        aren't dicts are returned as they are. Nested values are not
        touched.
        """
        if isinstance(result, (list, tuple)):
            return [self._parse_keys(row) for row in result]
        return self._parse_keys(result)


def snake_case_mappers(id_separator: str = ":") -> IdentifierMapper:
    """camelCase in the application, snake_case in the database."""
    return IdentifierMapper(parse=to_camel, format=to_snake, id_separator=id_separator)

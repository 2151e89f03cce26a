# ==============================================
# NAMING: camelCase <-> snake_case mapping
# ==============================================
#
# Modules:
# --------
# - case_converter.py    → to_snake / to_camel
# - memoize.py           → per-instance result cache
# - identifier_mapper.py → applies converters to identifiers and rows
#
# ==============================================

from .case_converter import to_camel, to_snake
from .memoize import memoize
from .identifier_mapper import (
    IdentifierMapper,
    key_mapper,
    map_last_part,
    snake_case_mappers
)

__all__ = [
    "to_camel",
    "to_snake",
    "memoize",
    "IdentifierMapper",
    "key_mapper",
    "map_last_part",
    "snake_case_mappers"
]

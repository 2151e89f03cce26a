# ==============================================
# memoize
# ==============================================
#
# PURPOSE:
#   Cache the results of a pure single-argument function so that
#   converting the same table/column name twice costs one dict
#   lookup instead of a full string walk.
#
# NOTES:
# ------
#   - The cache is unbounded and never evicted. Identifier
#     vocabularies (table and column names) are small and fixed.
#   - Each call to memoize() gets its own cache.
#
# ==============================================

from functools import wraps
from typing import Any, Callable, Dict


def memoize(func: Callable[[Any], Any]) -> Callable[[Any], Any]:
    """
    Wrap `func` so it runs at most once per distinct input.

    The wrapper exposes its cache as `wrapper.cache`.
    """
    cache: Dict[Any, Any] = {}

    @wraps(func)
    def wrapper(value):
        if value in cache:
            return cache[value]
        output = func(value)
        cache[value] = output
        return output

    wrapper.cache = cache
    return wrapper

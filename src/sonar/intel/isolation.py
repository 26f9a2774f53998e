"""
Fault-isolated provider queries.

Every facet of an exploration report is fetched through ``isolated_query`` so
that one failing or empty query never affects any other facet.
"""

import logging
from typing import Any, Callable, Optional, TypeVar

# Configure logging
logger = logging.getLogger(__name__)

T = TypeVar("T")


def isolated_query(facet: str, query: Callable[..., T], *args: Any, **kwargs: Any) -> Optional[T]:
    """Run a single provider query, returning None if it raises.

    Failures are logged at WARNING and empty results at DEBUG; from the
    caller's perspective both mean "no data for this facet".
    """
    try:
        result = query(*args, **kwargs)
    except Exception as e:  # pylint: disable=broad-except
        logger.warning(f"{facet}: query failed: {e}")
        return None

    if result is None or (hasattr(result, "__len__") and len(result) == 0):
        logger.debug(f"{facet}: no results")
    return result

"""
Tool domains: named groups of tools that can be enabled per server instance
"""
import logging
from typing import FrozenSet, Iterable, Optional, Union

logger = logging.getLogger(__name__)


class Domains:
    """Domain names, also used as tool tags"""
    CORE = "core"
    WORK = "work"
    WORK_ITEMS = "work-items"
    BUILDS = "builds"
    RELEASES = "releases"
    WIKI = "wiki"
    TEST_PLANS = "test-plans"

    ALL = frozenset({CORE, WORK, WORK_ITEMS, BUILDS, RELEASES, WIKI, TEST_PLANS})


ALL_DOMAINS_KEYWORD = "all"


def parse_domains(value: Optional[Union[str, Iterable[str]]]) -> FrozenSet[str]:
    """
    Parse a domain selection into a set of enabled domains.

    Accepts a comma-separated string or an iterable of names (each of which may
    itself be comma-separated). Names are case-insensitive. ``all`` or an empty
    selection enables every domain; unknown names are logged and ignored.

    Examples:
        >>> sorted(parse_domains("Work-Items, wiki"))
        ['wiki', 'work-items']
        >>> parse_domains(None) == Domains.ALL
        True
    """
    if value is None:
        return Domains.ALL

    raw = [value] if isinstance(value, str) else list(value)
    names = [
        name.strip().lower()
        for chunk in raw
        for name in str(chunk).split(",")
        if name.strip()
    ]

    if not names or ALL_DOMAINS_KEYWORD in names:
        return Domains.ALL

    enabled = set()
    for name in names:
        if name in Domains.ALL:
            enabled.add(name)
        else:
            logger.warning(
                f"Ignoring unknown domain '{name}'. "
                f"Available domains: {', '.join(sorted(Domains.ALL))}"
            )

    if not enabled:
        logger.warning("No valid domains given, enabling all domains")
        return Domains.ALL
    return frozenset(enabled)

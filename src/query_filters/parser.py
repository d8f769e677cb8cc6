"""Request parser: raw client input to grammar nodes.

Turns the untyped nested structures a client sends (JSON bodies or decoded
bracketed query strings) into FilterGroup / FilterCondition trees and
OrderSpec lists. Structural problems never raise: a malformed leaf or order
entry is dropped and logged at DEBUG.

Leaf vs. group is decided structurally. A raw element is a group when it is
a list, or a mapping whose non-"t" children include something leaf-like (a
mapping with a "c" key) or a nested group. Everything else is a leaf
candidate and must validate as a FilterCondition. Elements nested deeper
than MAX_DEPTH are dropped.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any
from urllib.parse import parse_qsl

from pydantic import ValidationError

from src.query_filters.models.nodes import FilterCondition, FilterGroup, OrderSpec

logger = logging.getLogger(__name__)

CONNECTOR_KEY = "t"
COLUMN_KEY = "c"

# Deepest nesting level kept; top-level elements sit at depth 1
MAX_DEPTH = 16

# "f[0][c]" → name "f", segments ["0", "c"]; "f[]" → segments [""]
_BRACKET_KEY_RE = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])*)$")
_SEGMENT_RE = re.compile(r"\[([^\[\]]*)\]")


# ---------------------------------------------------------------------------
# Filter conditions
# ---------------------------------------------------------------------------


def parse_conditions(raw: Any) -> FilterGroup:
    """Parse the top-level filter input into a root FilterGroup.

    The first element of the top level, when it is a group, always joins
    with AND regardless of its own "t" key. Deeper groups use their own
    connector.

    Args:
        raw: List (or index-keyed mapping) of leaves and groups.

    Returns:
        Root group. Its items keep input order; invalid leaves are absent.
    """
    root = FilterGroup(connector="and")
    for position, element in enumerate(_children(raw)):
        node = _parse_element(element, 1)
        if node is None:
            continue
        if position == 0 and isinstance(node, FilterGroup):
            node.connector = "and"
        root.items.append(node)
    return root


def _parse_element(element: Any, depth: int) -> FilterCondition | FilterGroup | None:
    if depth > MAX_DEPTH:
        logger.debug("Dropping filter element nested deeper than %d levels", MAX_DEPTH)
        return None
    if is_group(element, depth):
        return _parse_group(element, depth)
    return _parse_leaf(element)


def _parse_group(raw: Any, depth: int) -> FilterGroup:
    connector = "or" if _connector_of(raw) == "or" else "and"
    group = FilterGroup(connector=connector)
    for element in _children(raw):
        node = _parse_element(element, depth + 1)
        if node is not None:
            group.items.append(node)
    return group


def _parse_leaf(raw: Any) -> FilterCondition | None:
    if not isinstance(raw, Mapping):
        logger.debug("Dropping filter leaf %r: not a mapping", raw)
        return None
    try:
        return FilterCondition.model_validate(dict(raw))
    except ValidationError as e:
        logger.debug(
            "Dropping filter leaf %r: %s", raw, e.errors(include_url=False)
        )
        return None


def is_group(raw: Any, depth: int = 1) -> bool:
    """Return True when a raw element should be read as a group.

    Lists and tuples always qualify when they hold at least one leaf-like
    child or nested group; mappings qualify the same way, ignoring "t".
    At MAX_DEPTH any nested container counts, without looking further down.
    """
    if not isinstance(raw, (list, tuple, Mapping)):
        return False
    for child in _children(raw):
        if isinstance(child, Mapping) and COLUMN_KEY in child:
            return True
        if isinstance(child, (list, tuple, Mapping)):
            if depth >= MAX_DEPTH or is_group(child, depth + 1):
                return True
    return False


def _children(raw: Any) -> list[Any]:
    if isinstance(raw, Mapping):
        return [value for key, value in raw.items() if key != CONNECTOR_KEY]
    if isinstance(raw, (list, tuple)):
        return list(raw)
    return []


def _connector_of(raw: Any) -> Any:
    if isinstance(raw, Mapping):
        return raw.get(CONNECTOR_KEY)
    return None


# ---------------------------------------------------------------------------
# Order entries
# ---------------------------------------------------------------------------


def parse_orders(raw: Any) -> list[OrderSpec]:
    """Parse the order input into OrderSpecs, preserving input order.

    Entries that are not mappings, lack "c", or carry a non-scalar column
    are skipped. Directions are left as requested (a non-scalar one becomes
    ""); the ordering compiler coerces them against the column policy.
    """
    orders: list[OrderSpec] = []
    for entry in _children(raw):
        if not isinstance(entry, Mapping) or COLUMN_KEY not in entry:
            logger.debug("Skipping order entry %r: no column", entry)
            continue
        try:
            orders.append(OrderSpec.model_validate(dict(entry)))
        except ValidationError as e:
            logger.debug(
                "Skipping order entry %r: %s", entry, e.errors(include_url=False)
            )
    return orders


# ---------------------------------------------------------------------------
# Bracketed query strings
# ---------------------------------------------------------------------------


def parse_query_string(query: str) -> dict[str, Any]:
    """Decode a query string with bracketed keys into nested dicts.

    Example:
        >>> parse_query_string("f[0][c]=age&f[0][o]=%3E%3D&f[0][v]=18")
        {'f': {'0': {'c': 'age', 'o': '>=', 'v': '18'}}}
    """
    return parse_query_params(parse_qsl(query, keep_blank_values=True))


def parse_query_params(pairs: Iterable[tuple[str, str]]) -> dict[str, Any]:
    """Decode (key, value) pairs with bracketed keys into nested dicts.

    ``a[x][y]=1`` nests under string keys; an empty segment (``a[]=1``)
    appends using the next free integer index, as a string. Keys that are
    not valid bracket expressions are kept verbatim. When a scalar and a
    nested value collide, the later one wins.

    Args:
        pairs: Decoded query pairs, e.g. ``request.query_params.multi_items()``.

    Returns:
        Nested dict with insertion order matching the query.
    """
    result: dict[str, Any] = {}
    for key, value in pairs:
        match = _BRACKET_KEY_RE.match(key)
        if match is None:
            result[key] = value
            continue

        path = [match.group(1), *_SEGMENT_RE.findall(match.group(2))]
        target = result
        for index, segment in enumerate(path):
            if segment == "":
                segment = str(_next_index(target))
            if index == len(path) - 1:
                target[segment] = value
                break
            child = target.get(segment)
            if not isinstance(child, dict):
                child = {}
                target[segment] = child
            target = child
    return result


def _next_index(target: dict[str, Any]) -> int:
    numeric = [int(key) for key in target if key.isdigit()]
    return max(numeric) + 1 if numeric else 0

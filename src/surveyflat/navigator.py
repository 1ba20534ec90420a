"""
Lookups over answer trees.

Both functions are read-only traversals: they return a node of the given
tree (or None) and never modify it.
"""

from typing import Optional

from surveyflat.model import ResponseItem, SurveyItemResponse


def get_by_full_path(response: Optional[SurveyItemResponse], full_key: str) -> Optional[ResponseItem]:
    """
    Retrieve a node by its dotted path from the root.

    The first path segment must be the root key, every following segment
    must be the key of a child of the previous node.

    Args:
        response: Answer to one survey item (may be None)
        full_key: Dotted path, e.g. "rg.scg.1"

    Returns:
        The matching ResponseItem or None on any mismatch
    """
    if response is None or response.response is None:
        return None

    result: Optional[ResponseItem] = None
    for key in full_key.split("."):
        if result is None:
            if key != response.response.key:
                return None
            result = response.response
            continue

        for item in result.items:
            if item.key == key:
                result = item
                break
        else:
            return None
    return result


def _find_short_key(item: ResponseItem, short_key: str) -> Optional[ResponseItem]:
    if item.key == short_key:
        return item

    for child in item.items:
        if child.key == short_key:
            return child

    for child in item.items:
        found = _find_short_key(child, short_key)
        if found is not None:
            return found
    return None


def get_by_short_key(response: Optional[SurveyItemResponse], short_key: str) -> Optional[ResponseItem]:
    """
    Retrieve a node by its own key, wherever it sits in the tree.

    Checks the root, then its direct children, then searches each child's
    subtree depth-first. The first match wins.

    Args:
        response: Answer to one survey item (may be None)
        short_key: Key of the node without its ancestry

    Returns:
        The matching ResponseItem or None
    """
    if response is None or response.response is None:
        return None
    return _find_short_key(response.response, short_key)


__all__ = ["get_by_full_path", "get_by_short_key"]

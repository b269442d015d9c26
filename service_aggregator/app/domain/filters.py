"""
Listing filters scoped by visibility.
"""

from typing import Any, Dict, List, Optional, Sequence

from .references import extract_id


def filter_by_visibility(
    entities: Sequence[Dict[str, Any]],
    reference_field: str,
    visited_ids: Sequence[str],
    exact_id: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Keep entities referencing at least one visited entry, in input order.

    With ``exact_id`` an entity must reference that exact entry, which must
    also be visited. Nothing is visible when ``visited_ids`` is empty.
    """
    if not visited_ids:
        return []

    visible = set(visited_ids)

    def _allowed(reference_id: str) -> bool:
        if reference_id not in visible:
            return False
        if exact_id:
            return reference_id == exact_id
        return True

    return [
        entity
        for entity in entities
        if any(_allowed(extract_id(url)) for url in entity.get(reference_field, []))
    ]

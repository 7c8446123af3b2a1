"""
Ordered-list editing for id-identified items.

Goals, achievements and challenges share these primitives. Every function
returns a new list and leaves the input untouched; items keep their
identity (same object, same id) unless they are the one being updated.
Validation errors are keyed by id, so they follow items across moves.
"""

from typing import Any, List, Optional, Sequence, TypeVar

from app.exceptions import ItemNotFoundException

T = TypeVar("T")


def index_of(items: Sequence[T], item_id: str) -> int:
    """
    Position of the item with `item_id`.

    Raises:
        ItemNotFoundException: No item has that id
    """
    for index, item in enumerate(items):
        if item.id == item_id:
            return index
    raise ItemNotFoundException(item_id)


def insert(items: Sequence[T], item: T, index: Optional[int] = None) -> List[T]:
    """Insert `item` at `index` (appended when omitted, clamped when out of range)."""
    if any(existing.id == item.id for existing in items):
        raise ValueError(f"Duplicate item id: {item.id}")
    result = list(items)
    if index is None:
        result.append(item)
    else:
        result.insert(max(0, min(index, len(result))), item)
    return result


def remove_by_id(items: Sequence[T], item_id: str) -> List[T]:
    position = index_of(items, item_id)
    return list(items[:position]) + list(items[position + 1:])


def update_by_id(items: Sequence[T], item_id: str, **changes: Any) -> List[T]:
    """
    Replace one item with a validated, updated copy.

    The id cannot be changed through an update.

    Raises:
        ItemNotFoundException: No item has that id
        pydantic.ValidationError: The changes break the item schema
    """
    if "id" in changes and changes["id"] != item_id:
        raise ValueError("Item ids are immutable")
    position = index_of(items, item_id)
    result = list(items)
    current = result[position]
    result[position] = type(current).model_validate({**current.model_dump(), **changes})
    return result


def move_item(items: Sequence[T], from_index: int, to_index: int) -> List[T]:
    """
    Move the item at `from_index` so it ends up at `to_index`.

    `to_index` is clamped to the list bounds.
    """
    if not 0 <= from_index < len(items):
        raise IndexError(f"No item at position {from_index}")
    result = list(items)
    item = result.pop(from_index)
    result.insert(max(0, min(to_index, len(result))), item)
    return result


def move_to(items: Sequence[T], item_id: str, new_index: int) -> List[T]:
    """Move the item with `item_id` to `new_index`."""
    return move_item(items, index_of(items, item_id), new_index)

"""Exceptions raised for caller contract violations.

Routing failures are not represented here: the reconciler absorbs them
into the affected transit item.
"""


class ItineraryError(Exception):
    """Base class for itinerary contract violations."""


class InvalidItineraryError(ItineraryError, ValueError):
    """Builder input or edit arguments are structurally invalid."""


class ItemIndexError(ItineraryError, IndexError):
    """An edit referenced a position outside the itinerary."""

    def __init__(self, index: int, length: int) -> None:
        super().__init__(f"Item index {index} out of range for itinerary of {length} items")
        self.index = index
        self.length = length


class NotATransitItemError(ItineraryError, TypeError):
    """A transit-only edit targeted a visit or break."""


class NoteNotSupportedError(ItineraryError, TypeError):
    """A note edit targeted a transit segment."""

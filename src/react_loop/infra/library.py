from typing import Callable, Generic, Iterable, List, Optional, TypeVar

T = TypeVar("T")


class Library(Generic[T]):
    """
    Base class for registry-based libraries with access control.

    Args:
        key: Returns the identifier used to match items against the
            whitelist and blacklist.
    """

    def __init__(self, key: Callable[[T], str]) -> None:
        self._key = key

    def apply_access_control(
        self,
        items: Iterable[T],
        whitelist: Optional[List[str]] = None,
        blacklist: Optional[List[str]] = None,
    ) -> List[T]:
        """
        Filters items by identifier.

        A whitelist takes precedence; the blacklist is only consulted when
        no whitelist is given.

        Args:
            items: Items to filter.
            whitelist: Identifiers that are allowed.
            blacklist: Identifiers that are forbidden.

        Returns:
            The filtered items, in their original order.
        """
        if whitelist is not None:
            allowed = set(whitelist)
            return [item for item in items if self._key(item) in allowed]

        if blacklist is not None:
            forbidden = set(blacklist)
            return [item for item in items if self._key(item) not in forbidden]

        return list(items)

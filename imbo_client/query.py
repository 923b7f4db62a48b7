"""
Query builder for the images list endpoint.

ImagesQuery is immutable: every ``with_*`` method returns a new query.
Parameters serialize in a fixed order (page, limit, metadata, ids,
checksums, originalChecksums, sort) and the server relies on it.
"""

from dataclasses import dataclass, replace
from typing import Iterable, List, Tuple, Union
from urllib.parse import urlencode

from .constants import DEFAULT_LIMIT, DEFAULT_PAGE
from .exceptions import InvalidQueryError

SORT_ASC = "asc"
SORT_DESC = "desc"

SortEntry = Tuple[str, str]


def _ordered_set(values: Iterable[str]) -> Tuple[str, ...]:
    if isinstance(values, str):
        values = [values]
    return tuple(dict.fromkeys(str(value) for value in values))


def _parse_sort(entry: Union[str, SortEntry]) -> SortEntry:
    if isinstance(entry, str):
        field, _, direction = entry.partition(':')
    else:
        field, direction = entry

    field = field.strip()
    direction = (direction or SORT_ASC).strip().lower()

    if not field:
        raise InvalidQueryError("Sort field cannot be empty")
    if direction not in (SORT_ASC, SORT_DESC):
        raise InvalidQueryError(f"Invalid sort direction: {direction}")

    return field, direction


@dataclass(frozen=True)
class ImagesQuery:
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    metadata: bool = False
    ids: Tuple[str, ...] = ()
    checksums: Tuple[str, ...] = ()
    original_checksums: Tuple[str, ...] = ()
    sort: Tuple[SortEntry, ...] = ()

    def __post_init__(self):
        for name in ('page', 'limit'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidQueryError(f"{name} must be an integer, got {value!r}")
            if value < 1:
                raise InvalidQueryError(f"{name} must be at least 1, got {value}")

        object.__setattr__(self, 'metadata', bool(self.metadata))
        for name in ('ids', 'checksums', 'original_checksums'):
            object.__setattr__(self, name, _ordered_set(getattr(self, name)))
        object.__setattr__(self, 'sort', tuple(_parse_sort(entry) for entry in self.sort))

    def with_page(self, page: int) -> "ImagesQuery":
        return replace(self, page=page)

    def with_limit(self, limit: int) -> "ImagesQuery":
        return replace(self, limit=limit)

    def with_metadata(self, metadata: bool = True) -> "ImagesQuery":
        return replace(self, metadata=bool(metadata))

    def with_ids(self, ids: Iterable[str]) -> "ImagesQuery":
        return replace(self, ids=_ordered_set(ids))

    def with_checksums(self, checksums: Iterable[str]) -> "ImagesQuery":
        return replace(self, checksums=_ordered_set(checksums))

    def with_original_checksums(self, checksums: Iterable[str]) -> "ImagesQuery":
        return replace(self, original_checksums=_ordered_set(checksums))

    def with_sort(self, *entries: Union[str, SortEntry]) -> "ImagesQuery":
        """
        Set the sort order.

        Entries are either ``"field"``, ``"field:desc"`` or
        ``(field, direction)`` tuples. Calling with no entries clears the sort.
        """
        return replace(self, sort=tuple(_parse_sort(entry) for entry in entries))

    def to_params(self) -> List[Tuple[str, str]]:
        """Return the query parameters as ordered (name, value) pairs."""
        params = [
            ('page', str(self.page)),
            ('limit', str(self.limit)),
            ('metadata', '1' if self.metadata else '0'),
        ]

        for name, values in (
            ('ids', self.ids),
            ('checksums', self.checksums),
            ('originalChecksums', self.original_checksums),
        ):
            params.extend((f"{name}[{i}]", value) for i, value in enumerate(values))

        # Indexed like the filters (sort[0]=size:desc), as accepted by Imbo 3.x;
        # confirm against newer API versions before relying on it.
        for i, (field, direction) in enumerate(self.sort):
            value = field if direction == SORT_ASC else f"{field}:{direction}"
            params.append((f"sort[{i}]", value))

        return params

    def to_query_string(self) -> str:
        """Encode the query; brackets go out as %5B and %5D."""
        return urlencode(self.to_params())

    def __str__(self):
        return self.to_query_string()

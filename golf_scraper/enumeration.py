"""
Enumeration strategies for the scrape loop.

A strategy turns a Progress Record into a lazy, ordered sequence of units
starting at the recorded position. Each unit carries the record that
resumes AT it and the record that resumes AFTER it, so the engine can
persist a position without knowing the record's shape.
"""

from dataclasses import dataclass
from itertools import count
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Set, Tuple


@dataclass
class Unit:
    """Smallest enumerable work item: a page, a store index, a region/district pair."""
    seq: int
    label: str
    payload: Any
    position: Dict[str, Any]
    next_position: Dict[str, Any]
    # Units sharing a group end together when one of them comes back empty
    group: Any = None


class Enumeration:
    """Base class for enumeration strategies."""

    # Open-ended enumerations treat an empty unit as the end of the data
    stop_on_empty = False

    def default_record(self) -> Dict[str, Any]:
        raise NotImplementedError

    def units(self, record: Optional[Dict[str, Any]] = None) -> Iterator[Unit]:
        raise NotImplementedError

    def is_valid_record(self, record: Optional[Dict[str, Any]]) -> bool:
        """Every position field, when present, must be a non-negative int."""
        return all(_read_int(record, key, 0) is not None for key in self.default_record())

    def end_group(self, group: Any):
        """Stop yielding units of group; no-op for ungrouped strategies."""

    def group_ended(self, group: Any) -> bool:
        return False

    def describe(self, record: Dict[str, Any]) -> str:
        return ", ".join(f"{k}={v}" for k, v in record.items())


def _read_int(record: Optional[Dict[str, Any]], key: str, default: int) -> Optional[int]:
    """Read a non-negative int from a record, None if it is malformed."""
    if not record or key not in record:
        return default
    value = record[key]
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return None
    return value


class PageEnumeration(Enumeration):
    """Listing pages first_page, first_page+1, ... (optionally up to max_page)."""

    stop_on_empty = True

    def __init__(self, field: str = "currentPage", first_page: int = 1, max_page: Optional[int] = None):
        self.field = field
        self.first_page = first_page
        self.max_page = max_page

    def default_record(self) -> Dict[str, Any]:
        return {self.field: self.first_page}

    def start_page(self, record: Optional[Dict[str, Any]]) -> int:
        page = _read_int(record, self.field, self.first_page)
        if page is None or page < self.first_page:
            return self.first_page
        return page

    def units(self, record: Optional[Dict[str, Any]] = None) -> Iterator[Unit]:
        start = self.start_page(record)
        pages = count(start) if self.max_page is None else range(start, self.max_page + 1)
        for seq, page in enumerate(pages):
            yield Unit(
                seq=seq,
                label=f"page {page}",
                payload=page,
                position={self.field: page},
                next_position={self.field: page + 1},
            )


class IndexEnumeration(Enumeration):
    """One unit per input item, resumed by index."""

    def __init__(self, items: Sequence[Any], field: str = "currentIndex"):
        self.items = list(items)
        self.field = field

    def default_record(self) -> Dict[str, Any]:
        return {self.field: 0}

    def start_index(self, record: Optional[Dict[str, Any]]) -> int:
        index = _read_int(record, self.field, 0)
        return 0 if index is None else index

    def units(self, record: Optional[Dict[str, Any]] = None) -> Iterator[Unit]:
        start = self.start_index(record)
        total = len(self.items)
        for seq, index in enumerate(range(start, total)):
            yield Unit(
                seq=seq,
                label=f"item {index + 1}/{total}",
                payload=self.items[index],
                position={self.field: index},
                next_position={self.field: index + 1},
            )


class RegionEnumeration(Enumeration):
    """Region x district pairs, resumed by (region index, district index)."""

    def __init__(
        self,
        regions: Sequence[Tuple[str, Sequence[str]]],
        region_field: str = "currentRegionIndex",
        area_field: str = "currentPageIndex",
    ):
        self.regions: List[Tuple[str, List[str]]] = [(name, list(areas)) for name, areas in regions]
        self.region_field = region_field
        self.area_field = area_field

    def default_record(self) -> Dict[str, Any]:
        return {self.region_field: 0, self.area_field: 0}

    def _record(self, region_index: int, area_index: int) -> Dict[str, Any]:
        return {self.region_field: region_index, self.area_field: area_index}

    def units(self, record: Optional[Dict[str, Any]] = None) -> Iterator[Unit]:
        region_start = _read_int(record, self.region_field, 0)
        area_start = _read_int(record, self.area_field, 0)
        if region_start is None or area_start is None:
            region_start, area_start = 0, 0

        seq = 0
        for region_index in range(region_start, len(self.regions)):
            region, areas = self.regions[region_index]
            # Only the resumed region starts mid-way
            first = area_start if region_index == region_start else 0
            for area_index in range(first, len(areas)):
                if area_index + 1 < len(areas):
                    after = self._record(region_index, area_index + 1)
                else:
                    after = self._record(region_index + 1, 0)
                yield Unit(
                    seq=seq,
                    label=f"{region} {areas[area_index]}",
                    payload=(region, areas[area_index]),
                    position=self._record(region_index, area_index),
                    next_position=after,
                )
                seq += 1


class RegionPageEnumeration(Enumeration):
    """
    Open-ended pages inside each region, resumed by (region index, page).

    An empty page ends only its own region; the walk then moves on to the
    next region at first_page.
    """

    stop_on_empty = True

    def __init__(
        self,
        regions: Sequence[Any],
        region_field: str = "currentRegion",
        page_field: str = "currentPage",
        first_page: int = 1,
        max_page: Optional[int] = None,
        name: Callable[[Any], str] = str,
    ):
        self.regions = list(regions)
        self.region_field = region_field
        self.page_field = page_field
        self.first_page = first_page
        self.max_page = max_page
        self.name = name
        self._ended: Set[int] = set()

    def default_record(self) -> Dict[str, Any]:
        return {self.region_field: 0, self.page_field: self.first_page}

    def _record(self, region_index: int, page: int) -> Dict[str, Any]:
        return {self.region_field: region_index, self.page_field: page}

    def end_group(self, group: Any):
        self._ended.add(group)

    def group_ended(self, group: Any) -> bool:
        return group in self._ended

    def units(self, record: Optional[Dict[str, Any]] = None) -> Iterator[Unit]:
        region_start = _read_int(record, self.region_field, 0)
        page_start = _read_int(record, self.page_field, self.first_page)
        if region_start is None or page_start is None:
            region_start, page_start = 0, self.first_page
        page_start = max(page_start, self.first_page)

        seq = 0
        for region_index in range(region_start, len(self.regions)):
            region = self.regions[region_index]
            first = page_start if region_index == region_start else self.first_page
            pages = count(first) if self.max_page is None else range(first, self.max_page + 1)
            for page in pages:
                # Checked lazily: the engine ends a region while later pages are pending
                if self.group_ended(region_index):
                    break
                yield Unit(
                    seq=seq,
                    label=f"{self.name(region)} page {page}",
                    payload=(region, page),
                    position=self._record(region_index, page),
                    next_position=self._record(region_index, page + 1),
                    group=region_index,
                )
                seq += 1

"""Static region and geographic group tables used for server discovery."""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Sequence, Tuple

OTHER_GROUP = "Other"

SEARCH_REGIONS: Tuple[str, ...] = (
    # Vietnam
    "Hanoi", "Ho Chi Minh", "Da Nang",
    # Southeast Asia
    "Singapore", "Bangkok", "Jakarta", "Kuala Lumpur", "Manila", "Phnom Penh",
    # East Asia
    "Tokyo", "Hong Kong", "Seoul", "Taipei", "Shanghai",
    # South Asia
    "Mumbai", "Delhi", "Bangalore",
    # Oceania
    "Sydney", "Melbourne", "Auckland", "Brisbane",
    # Europe
    "London", "Frankfurt", "Paris", "Amsterdam", "Stockholm", "Madrid", "Milan",
    # North America
    "Los Angeles", "New York", "Chicago", "Toronto", "Dallas", "Miami", "Seattle",
    # South America
    "Sao Paulo", "Buenos Aires", "Santiago", "Lima",
    # Africa
    "Johannesburg", "Cape Town", "Cairo", "Lagos",
    # Middle East
    "Dubai", "Tel Aviv", "Riyadh",
    # Russia
    "Moscow", "Saint Petersburg",
)

GROUP_PRIORITY: Tuple[str, ...] = (
    "Vietnam",
    "Southeast Asia",
    "East Asia",
    "South Asia",
    "Oceania",
    "Europe",
    "North America",
    "South America",
    "Africa",
    "Middle East",
    "Russia",
)

_GROUP_MEMBERS: Dict[str, Tuple[str, ...]] = {
    "Vietnam": (
        "Hanoi", "Ho Chi Minh", "Da Nang",
        "Vietnam", "Viet Nam",
    ),
    "Southeast Asia": (
        "Singapore", "Bangkok", "Jakarta", "Kuala Lumpur", "Manila", "Phnom Penh",
        "Thailand", "Indonesia", "Malaysia", "Philippines", "Cambodia", "Laos",
        "Myanmar", "Brunei",
    ),
    "East Asia": (
        "Tokyo", "Hong Kong", "Seoul", "Taipei", "Shanghai",
        "Japan", "South Korea", "Korea", "Republic of Korea", "Taiwan", "China",
        "Macau", "Mongolia",
    ),
    "South Asia": (
        "Mumbai", "Delhi", "Bangalore",
        "India", "Pakistan", "Bangladesh", "Sri Lanka", "Nepal",
    ),
    "Oceania": (
        "Sydney", "Melbourne", "Auckland", "Brisbane",
        "Australia", "New Zealand", "Fiji", "Papua New Guinea",
    ),
    "Europe": (
        "London", "Frankfurt", "Paris", "Amsterdam", "Stockholm", "Madrid", "Milan",
        "United Kingdom", "Germany", "France", "Netherlands", "The Netherlands",
        "Sweden", "Spain", "Italy", "Belgium", "Switzerland", "Austria", "Poland",
        "Portugal", "Ireland", "Denmark", "Norway", "Finland", "Czech Republic",
        "Czechia", "Romania", "Hungary", "Greece", "Ukraine", "Bulgaria",
        "Serbia", "Croatia", "Slovakia", "Slovenia", "Lithuania", "Latvia",
        "Estonia", "Luxembourg", "Iceland",
    ),
    "North America": (
        "Los Angeles", "New York", "Chicago", "Toronto", "Dallas", "Miami", "Seattle",
        "United States", "Canada", "Mexico",
    ),
    "South America": (
        "Sao Paulo", "Buenos Aires", "Santiago", "Lima",
        "Brazil", "Argentina", "Chile", "Peru", "Colombia", "Venezuela",
        "Ecuador", "Uruguay", "Paraguay", "Bolivia",
    ),
    "Africa": (
        "Johannesburg", "Cape Town", "Cairo", "Lagos",
        "South Africa", "Egypt", "Nigeria", "Kenya", "Morocco", "Ghana",
        "Tunisia", "Algeria", "Ethiopia", "Tanzania",
    ),
    "Middle East": (
        "Dubai", "Tel Aviv", "Riyadh",
        "United Arab Emirates", "Israel", "Saudi Arabia", "Qatar", "Kuwait",
        "Bahrain", "Oman", "Jordan", "Lebanon", "Turkey", "Iran", "Iraq",
    ),
    "Russia": (
        "Moscow", "Saint Petersburg",
        "Russia", "Russian Federation",
    ),
}

GEO_GROUPS: Mapping[str, str] = MappingProxyType(
    {name.lower(): group for group, names in _GROUP_MEMBERS.items() for name in names}
)


def lookup_group(name: Optional[str]) -> str:
    """Return the geographic group for a region or country name."""
    if not name:
        return OTHER_GROUP
    return GEO_GROUPS.get(name.strip().lower(), OTHER_GROUP)


def group_for_country(country: Optional[str]) -> str:
    return lookup_group(country)


def group_for_region(region: Optional[str]) -> str:
    return lookup_group(region)


def resolve_priority(configured: Optional[Iterable[str]] = None) -> Tuple[str, ...]:
    """Build the group priority order, home region first.

    Groups named in ``configured`` come first in the given order; the
    remaining default groups follow in their usual order.
    """
    ordered = []
    for group in list(configured or []) + list(GROUP_PRIORITY):
        if group not in ordered and group != OTHER_GROUP:
            ordered.append(group)
    return tuple(ordered)


def group_rank(group: str, priority: Sequence[str] = GROUP_PRIORITY) -> int:
    """Position of ``group`` in ``priority``; unknown groups sort after all known ones."""
    try:
        return list(priority).index(group)
    except ValueError:
        return len(priority)

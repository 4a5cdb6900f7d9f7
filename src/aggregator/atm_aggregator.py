"""Filtering and aggregation of ATM records for the dashboard views."""

import logging
from collections import defaultdict
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from ..data.atm_loader import ATMRecord

logger = logging.getLogger(__name__)

ALL = 'all'

SERVICE_24H = '24小時'
SERVICE_DAYTIME_LATE = '9:00–22:00'
SERVICE_BANK_HOURS = '9:00–15:30'
SERVICE_OTHER = '其他'

SERVICE_HOURS_LABELS = (SERVICE_24H, SERVICE_DAYTIME_LATE, SERVICE_BANK_HOURS)
_SERVICE_CODES = {
    '9': SERVICE_24H,
    'E': SERVICE_DAYTIME_LATE,
    'N': SERVICE_BANK_HOURS,
}

ACCESS_WHEELCHAIR = '輪椅友善'
ACCESS_BOTH = '輪椅+視障友善'
ACCESS_NONE = '無障礙皆無'
ACCESSIBILITY_LABELS = (ACCESS_WHEELCHAIR, ACCESS_BOTH, ACCESS_NONE)

INSTALL_INSIDE = '銀行內'
INSTALL_OUTSIDE = '銀行外'
INSTALL_TYPE_LABELS = (INSTALL_INSIDE, INSTALL_OUTSIDE)
_INSTALL_CODES = {'1': INSTALL_INSIDE, '2': INSTALL_OUTSIDE}

LOCATION_CATEGORIES = {
    'A': '火車站', 'B': '地方政府', 'H': '醫院', 'I': '學校',
    'C': '其他公務機關', 'D': '高鐵站', 'E': '長途客運站', 'F': '捷運站',
    'G': '機場', 'J': '大型賣場及百貨公司', 'K': '其他公共場所', 'L': '便利商店', 'O': '其他',
}
LOCATION_SUBCATEGORIES = {
    'A1': '特等站', 'A2': '一等站', 'A3': '二等站', 'A4': '其他等級',
    'B1': '直轄市', 'B2': '縣市',
    'H1': '醫學中心', 'H2': '區域醫院', 'H3': '地區醫院', 'H4': '其他等級',
    'I1': '大專院校以上', 'I2': '高級中等學校', 'I3': '國中', 'I4': '小學',
    'C1': '其他公務機關', 'D1': '高鐵站', 'E1': '長途客運站', 'F1': '捷運站',
    'G1': '機場', 'J1': '大型賣場及百貨公司', 'K1': '其他公共場所', 'L1': '便利商店', 'O1': '其他',
}

BucketCounts = Dict[str, int]
Classifier = Callable[[ATMRecord], Optional[str]]


def _normalize_choice(value: Optional[str]) -> str:
    if value is None:
        return ALL
    value = value.strip()
    return value or ALL


@dataclass(frozen=True)
class FilterState:
    """Selected city and bank; 'all' means no constraint."""
    city: str = ALL
    bank: str = ALL

    def __post_init__(self):
        object.__setattr__(self, 'city', _normalize_choice(self.city))
        object.__setattr__(self, 'bank', _normalize_choice(self.bank))

    @property
    def has_bank(self) -> bool:
        return self.bank != ALL

    def with_city(self, city: Optional[str]) -> 'FilterState':
        # the bank list is rebuilt for the new city, so the bank selection resets
        return FilterState(city=city, bank=ALL)

    def with_bank(self, bank: Optional[str]) -> 'FilterState':
        return replace(self, bank=bank)

    def matches(self, record: ATMRecord) -> bool:
        ok_city = self.city == ALL or record.city == self.city
        ok_bank = self.bank == ALL or record.bank == self.bank
        return ok_city and ok_bank

    def to_dict(self) -> Dict[str, str]:
        return {'city': self.city, 'bank': self.bank}


@dataclass
class CategoryNode:
    """A node of the location category hierarchy."""
    name: str
    value: int
    children: Optional[List['CategoryNode']] = None

    def to_dict(self) -> Dict[str, Any]:
        node: Dict[str, Any] = {'name': self.name, 'value': self.value}
        if self.children is not None:
            node['children'] = [child.to_dict() for child in self.children]
        return node


@dataclass
class DashboardSummary:
    """Everything one render pass of the dashboard needs."""
    filter_state: FilterState
    records: Tuple[ATMRecord, ...]
    total_count: int
    bank_count: int
    features: Dict[str, Any]
    service_hours: BucketCounts
    accessibility: BucketCounts
    install_type: BucketCounts
    location_hierarchy: Optional[List[CategoryNode]]
    last_updated: datetime = field(default_factory=datetime.now)

    @property
    def show_location_chart(self) -> bool:
        return self.location_hierarchy is not None

    def to_dict(self, include_features: bool = True) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            'filter': self.filter_state.to_dict(),
            'kpi': {'total': self.total_count, 'banks': self.bank_count},
            'service_hours': bucket_items(self.service_hours),
            'accessibility': bucket_items(self.accessibility),
            'install_type': bucket_items(self.install_type),
            'location_hierarchy': (
                [node.to_dict() for node in self.location_hierarchy]
                if self.location_hierarchy is not None else None
            ),
            'last_updated': self.last_updated.isoformat(timespec='seconds'),
        }
        if include_features:
            payload['features'] = self.features
        return payload


def filter_records(records: Iterable[ATMRecord], filter_state: FilterState) -> Tuple[ATMRecord, ...]:
    """Return the records matching both city and bank, in input order."""
    return tuple(r for r in records if filter_state.matches(r))


def count_by_scheme(
    records: Iterable[ATMRecord],
    classify: Classifier,
    labels: Optional[Sequence[str]] = None,
) -> BucketCounts:
    """
    Count records per category label.

    Args:
        records: Records to classify.
        classify: Returns a label, or None for an unclassified record.
        labels: If given, only these labels are tracked, in this order.

    Returns:
        Label to count mapping without zero-count labels.
    """
    counts: Dict[str, int] = {label: 0 for label in labels} if labels is not None else {}
    for record in records:
        label = classify(record)
        if label is None:
            continue
        if label in counts:
            counts[label] += 1
        elif labels is None:
            counts[label] = 1
    return {label: n for label, n in counts.items() if n > 0}


def bucket_items(counts: BucketCounts) -> List[Dict[str, Any]]:
    return [{'label': label, 'count': n} for label, n in counts.items()]


def service_hours_label(code: Optional[str]) -> str:
    return _SERVICE_CODES.get((code or '').strip(), SERVICE_OTHER)


def classify_service_hours(record: ATMRecord) -> str:
    return service_hours_label(record.service_code)


def classify_accessibility(record: ATMRecord) -> str:
    # blind-only support has no bucket of its own and counts as neither
    if record.wheelchair_accessible:
        return ACCESS_BOTH if record.blind_accessible else ACCESS_WHEELCHAIR
    return ACCESS_NONE


def classify_install_type(record: ATMRecord) -> Optional[str]:
    return _INSTALL_CODES.get(record.install_type_code)


def build_location_hierarchy(
    records: Iterable[ATMRecord],
    filter_state: FilterState,
) -> Optional[List[CategoryNode]]:
    """
    Build the category -> sub-category tree of install locations.

    Only built when a specific bank is selected. Returns None when the
    chart should be hidden, either because no bank is selected or because
    there is nothing to show.
    """
    if not filter_state.has_bank:
        return None

    code_counts: Dict[str, int] = {}
    for record in records:
        code = record.location_code
        if not code:
            continue
        code_counts[code] = code_counts.get(code, 0) + 1

    grouped: Dict[str, List[Tuple[str, int]]] = defaultdict(list)
    for code, count in code_counts.items():
        category = code[0]
        if category not in LOCATION_CATEGORIES:
            continue
        grouped[category].append((code, count))

    nodes: List[CategoryNode] = []
    for category, sub_counts in grouped.items():
        category_name = LOCATION_CATEGORIES[category]
        ranked = sorted(sub_counts, key=lambda item: item[1], reverse=True)
        total = sum(count for _, count in ranked)

        if len(ranked) == 1:
            code, _ = ranked[0]
            same_meaning = LOCATION_SUBCATEGORIES.get(code, code) == category_name or code.endswith('1')
            if same_meaning:
                nodes.append(CategoryNode(name=category_name, value=total))
                continue

        children = [
            CategoryNode(name=LOCATION_SUBCATEGORIES.get(code, code), value=count)
            for code, count in ranked
        ]
        nodes.append(CategoryNode(name=category_name, value=total, children=children))

    if not nodes:
        return None
    return sorted(nodes, key=lambda node: node.value, reverse=True)


def summary_counts(records: Sequence[ATMRecord]) -> Tuple[int, int]:
    """Total record count and number of distinct banks."""
    banks = {r.bank for r in records if r.bank}
    return len(records), len(banks)


def to_feature_collection(records: Iterable[ATMRecord]) -> Dict[str, Any]:
    """Convert records to a GeoJSON FeatureCollection of points."""
    return {
        'type': 'FeatureCollection',
        'features': [
            {
                'type': 'Feature',
                'properties': {
                    'bank': r.bank,
                    'place': r.place,
                    'addr': r.address,
                    'city': r.city,
                    'town': r.town,
                    'tel': r.phone or '',
                },
                'geometry': {'type': 'Point', 'coordinates': [r.longitude, r.latitude]},
            }
            for r in records
        ],
    }


def city_options(records: Iterable[ATMRecord]) -> List[str]:
    return sorted({r.city for r in records if r.city})


def bank_options(records: Iterable[ATMRecord], city: Optional[str] = ALL) -> List[str]:
    """Selectable banks, limited to one city unless city is 'all'."""
    city = _normalize_choice(city)
    return sorted({r.bank for r in records if r.bank and (city == ALL or r.city == city)})


class ATMAggregator:
    """Runs the full filter and aggregation pipeline for one filter state."""

    def __init__(self):
        logger.info("ATM Aggregator initialized")

    def aggregate(self, records: Sequence[ATMRecord], filter_state: FilterState) -> DashboardSummary:
        """
        Filter the dataset and compute every dashboard view.

        Args:
            records: The full, unfiltered dataset.
            filter_state: Active city/bank selection.

        Returns:
            DashboardSummary for the filtered records.
        """
        logger.debug(f"Aggregating {len(records)} records for {filter_state}")
        filtered = filter_records(records, filter_state)
        total, banks = summary_counts(filtered)

        summary = DashboardSummary(
            filter_state=filter_state,
            records=filtered,
            total_count=total,
            bank_count=banks,
            features=to_feature_collection(filtered),
            service_hours=count_by_scheme(filtered, classify_service_hours, SERVICE_HOURS_LABELS),
            accessibility=count_by_scheme(filtered, classify_accessibility, ACCESSIBILITY_LABELS),
            install_type=count_by_scheme(filtered, classify_install_type, INSTALL_TYPE_LABELS),
            location_hierarchy=build_location_hierarchy(filtered, filter_state),
        )

        logger.info(
            f"Aggregation complete: {summary.total_count} ATMs across {summary.bank_count} banks "
            f"(city={filter_state.city}, bank={filter_state.bank})"
        )
        return summary

"""Aggregator package for filtering ATM records and computing chart data."""

from .atm_aggregator import (
    ALL,
    ATMAggregator,
    CategoryNode,
    DashboardSummary,
    FilterState,
    bank_options,
    build_location_hierarchy,
    city_options,
    classify_accessibility,
    classify_install_type,
    classify_service_hours,
    count_by_scheme,
    filter_records,
    summary_counts,
    to_feature_collection,
)

__all__ = [
    'ALL',
    'ATMAggregator',
    'CategoryNode',
    'DashboardSummary',
    'FilterState',
    'bank_options',
    'build_location_hierarchy',
    'city_options',
    'classify_accessibility',
    'classify_install_type',
    'classify_service_hours',
    'count_by_scheme',
    'filter_records',
    'summary_counts',
    'to_feature_collection',
]

"""Dashboard controller owning the dataset and the active filter."""

import logging
from typing import Callable, List, Optional, Sequence

from ..aggregator.atm_aggregator import (
    ATMAggregator,
    DashboardSummary,
    FilterState,
    bank_options,
    city_options,
)
from ..data.atm_loader import ATMRecord

logger = logging.getLogger(__name__)

Renderer = Callable[[DashboardSummary], None]


class DashboardController:
    """
    Holds the loaded records and the current FilterState.

    Every filter change recomputes the whole summary and hands it to each
    subscribed renderer, synchronously and in subscription order.
    """

    def __init__(
        self,
        records: Sequence[ATMRecord],
        aggregator: Optional[ATMAggregator] = None,
        filter_state: Optional[FilterState] = None,
    ):
        self._records = tuple(records)
        self._aggregator = aggregator or ATMAggregator()
        self._renderers: List[Renderer] = []
        self._filter_state = filter_state or FilterState()
        self._summary = self._aggregator.aggregate(self._records, self._filter_state)
        logger.info(f"Dashboard Controller initialized with {len(self._records)} records")

    @property
    def records(self) -> Sequence[ATMRecord]:
        return self._records

    @property
    def filter_state(self) -> FilterState:
        return self._filter_state

    @property
    def summary(self) -> DashboardSummary:
        return self._summary

    @property
    def city_options(self) -> List[str]:
        return city_options(self._records)

    @property
    def bank_options(self) -> List[str]:
        return bank_options(self._records, self._filter_state.city)

    def subscribe(self, renderer: Renderer) -> None:
        """Register a renderer and render the current summary into it."""
        self._renderers.append(renderer)
        renderer(self._summary)

    def apply_filter(self, filter_state: FilterState) -> DashboardSummary:
        """Replace the filter, recompute the summary and notify renderers."""
        logger.info(f"Filter changed: city={filter_state.city}, bank={filter_state.bank}")
        self._filter_state = filter_state
        self._summary = self._aggregator.aggregate(self._records, filter_state)
        for renderer in self._renderers:
            renderer(self._summary)
        return self._summary

    def select_city(self, city: Optional[str]) -> DashboardSummary:
        return self.apply_filter(self._filter_state.with_city(city))

    def select_bank(self, bank: Optional[str]) -> DashboardSummary:
        return self.apply_filter(self._filter_state.with_bank(bank))

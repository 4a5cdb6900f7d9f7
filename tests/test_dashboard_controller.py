"""Tests for the dashboard controller."""

import pytest

from src.aggregator.atm_aggregator import ALL, FilterState
from src.dashboard.controller import DashboardController


@pytest.fixture
def controller(sample_records):
    return DashboardController(sample_records)


def test_initial_summary_covers_all_records(controller):
    assert controller.filter_state == FilterState()
    assert controller.summary.total_count == 5
    assert controller.summary.location_hierarchy is None


def test_initial_filter_from_constructor(sample_records):
    controller = DashboardController(sample_records, filter_state=FilterState(city='台北市'))

    assert controller.summary.total_count == 2


def test_subscribe_renders_current_summary(controller):
    seen = []

    controller.subscribe(seen.append)

    assert seen == [controller.summary]


def test_filter_change_dispatches_in_order(controller):
    calls = []
    controller.subscribe(lambda s: calls.append(('first', s.total_count)))
    controller.subscribe(lambda s: calls.append(('second', s.total_count)))
    calls.clear()

    controller.apply_filter(FilterState(city='新北市'))

    assert calls == [('first', 2), ('second', 2)]


def test_summary_is_replaced_on_change(controller):
    before = controller.summary

    after = controller.select_bank('B銀行')

    assert after is not before
    assert before.total_count == 5
    assert after.total_count == 1
    assert controller.summary is after


def test_select_city_resets_bank(controller):
    controller.select_bank('B銀行')

    controller.select_city('新北市')

    assert controller.filter_state == FilterState(city='新北市', bank=ALL)
    assert controller.bank_options == ['A銀行']


def test_location_hierarchy_only_with_bank(controller):
    controller.select_city('新北市')
    assert controller.summary.show_location_chart is False

    controller.select_bank('A銀行')
    assert controller.summary.show_location_chart is True


def test_options(controller):
    assert controller.city_options == sorted(['台北市', '新北市', '台中市'])
    assert controller.bank_options == ['A銀行', 'B銀行', 'C銀行']


def test_dataset_is_not_modified(controller, sample_records):
    controller.select_city('台中市')

    assert list(controller.records) == sample_records


def test_renderer_errors_propagate(controller):
    def broken(_):
        raise RuntimeError('render failed')

    with pytest.raises(RuntimeError, match='render failed'):
        controller.subscribe(broken)

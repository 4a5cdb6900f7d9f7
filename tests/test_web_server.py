"""Tests for the dashboard JSON API."""

import asyncio

import pytest
from aiohttp.test_utils import TestClient, TestServer

from src.dashboard.controller import DashboardController
from src.dashboard.web_server import create_app


@pytest.fixture
def controller(sample_records):
    return DashboardController(sample_records)


def run_client(controller, scenario):
    async def runner():
        async with TestClient(TestServer(create_app(controller))) as client:
            return await scenario(client)
    return asyncio.run(runner())


def test_root_and_favicon(controller):
    async def scenario(client):
        root = await client.get('/')
        favicon = await client.get('/favicon.ico')
        return root.status, await root.text(), favicon.status

    status, text, favicon_status = run_client(controller, scenario)

    assert status == 200
    assert '/api/summary' in text
    assert favicon_status == 204


def test_options(controller):
    async def scenario(client):
        resp = await client.get('/api/options')
        return await resp.json()

    payload = run_client(controller, scenario)

    assert payload['banks'] == ['A銀行', 'B銀行', 'C銀行']
    assert payload['filter'] == {'city': 'all', 'bank': 'all'}
    assert '台北市' in payload['cities']


def test_summary_and_features(controller):
    async def scenario(client):
        summary = await (await client.get('/api/summary')).json()
        features = await (await client.get('/api/features')).json()
        return summary, features

    summary, features = run_client(controller, scenario)

    assert summary['kpi'] == {'total': 5, 'banks': 3}
    assert 'features' not in summary
    assert features['type'] == 'FeatureCollection'
    assert len(features['features']) == 5


def test_post_filter_updates_controller(controller):
    async def scenario(client):
        resp = await client.post('/api/filter', json={'city': '新北市', 'bank': 'A銀行'})
        return resp.status, await resp.json()

    status, payload = run_client(controller, scenario)

    assert status == 200
    assert payload['filter'] == {'city': '新北市', 'bank': 'A銀行'}
    assert payload['kpi']['total'] == 2
    assert payload['location_hierarchy'][0]['name'] == '醫院'
    assert payload['options']['banks'] == ['A銀行']
    assert controller.summary.total_count == 2


def test_post_filter_city_change_resets_bank(controller):
    controller.select_bank('A銀行')

    async def scenario(client):
        return await (await client.post('/api/filter', json={'city': '台北市'})).json()

    payload = run_client(controller, scenario)

    assert payload['filter'] == {'city': '台北市', 'bank': 'all'}
    assert payload['location_hierarchy'] is None


def test_post_filter_rejects_bad_body(controller):
    async def scenario(client):
        not_json = await client.post('/api/filter', data='city=台北市')
        not_object = await client.post('/api/filter', json=['台北市'])
        not_utf8 = await client.post('/api/filter', data=b'\xff\xfe{',
                                     headers={'Content-Type': 'application/json'})
        return not_json.status, not_object.status, not_utf8.status

    assert run_client(controller, scenario) == (400, 400, 400)
    assert controller.summary.total_count == 5


@pytest.mark.parametrize('body', [
    {'city': 123},
    {'bank': []},
    {'city': '台北市', 'bank': {'name': 'A銀行'}},
])
def test_post_filter_rejects_non_string_values(controller, body):
    async def scenario(client):
        resp = await client.post('/api/filter', json=body)
        return resp.status, await resp.json()

    status, payload = run_client(controller, scenario)

    assert status == 400
    assert 'must be a string' in payload['error']
    assert controller.filter_state.city == 'all'


def test_post_filter_accepts_null_values(controller):
    controller.select_bank('A銀行')

    async def scenario(client):
        return (await client.post('/api/filter', json={'bank': None})).status

    assert run_client(controller, scenario) == 200
    assert controller.filter_state.bank == 'all'

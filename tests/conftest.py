"""Shared fixtures for the ATM dashboard tests."""

import pytest

from src.data.atm_loader import parse_rows

HEADER = [
    '所屬縣市', '鄉鎮縣市別', '所屬銀行簡稱', '裝設地點', '地址', '聯絡電話',
    '服務型態', '符合輪椅使用且環境亦符合', '視障語音且環境亦符合',
    '裝設型態', '裝設地點類別', '座標經度', '座標緯度',
]


def make_row(**overrides):
    row = {
        '所屬縣市': '台北市',
        '鄉鎮縣市別': '中正區',
        '所屬銀行簡稱': 'A銀行',
        '裝設地點': '台北車站',
        '地址': '北平西路3號',
        '聯絡電話': '02-1234-5678',
        '服務型態': '9',
        '符合輪椅使用且環境亦符合': 'V',
        '視障語音且環境亦符合': '',
        '裝設型態': '1',
        '裝設地點類別': 'A1',
        '座標經度': '121.5170',
        '座標緯度': '25.0478',
    }
    row.update(overrides)
    return row


@pytest.fixture
def sample_rows():
    return [
        make_row(),
        make_row(**{'所屬銀行簡稱': 'B銀行', '服務型態': 'E', '視障語音且環境亦符合': 'V',
                    '裝設型態': '2', '裝設地點類別': 'L1', '聯絡電話': ''}),
        make_row(**{'所屬縣市': '新北市', '鄉鎮縣市別': '板橋區', '服務型態': 'N',
                    '符合輪椅使用且環境亦符合': '', '裝設地點類別': 'H2',
                    '座標經度': '121.4637', '座標緯度': '25.0143'}),
        make_row(**{'所屬縣市': '新北市', '鄉鎮縣市別': '板橋區', '服務型態': 'X',
                    '符合輪椅使用且環境亦符合': '', '視障語音且環境亦符合': 'V',
                    '裝設型態': '', '裝設地點類別': 'H3'}),
        make_row(**{'所屬縣市': '台中市', '所屬銀行簡稱': 'C銀行', '服務型態': '',
                    '裝設型態': '3', '裝設地點類別': ''}),
    ]


@pytest.fixture
def sample_records(sample_rows):
    return parse_rows(sample_rows)

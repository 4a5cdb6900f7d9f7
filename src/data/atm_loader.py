"""ATM dataset loader for reading CSV rows from a local file or a URL."""

import asyncio
import csv
import io
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional

import aiohttp

logger = logging.getLogger(__name__)

# CSV header names used by the published ATM dataset
COL_CITY = '所屬縣市'
COL_BANK = '所屬銀行簡稱'
COL_TOWN = '鄉鎮縣市別'
COL_PLACE = '裝設地點'
COL_ADDRESS = '地址'
COL_PHONE = '聯絡電話'
COL_SERVICE = '服務型態'
COL_WHEELCHAIR = '符合輪椅使用且環境亦符合'
COL_BLIND = '視障語音且環境亦符合'
COL_INSTALL_TYPE = '裝設型態'
COL_LOCATION_CATEGORY = '裝設地點類別'
COL_LONGITUDE = '座標經度'
COL_LATITUDE = '座標緯度'

ACCESSIBLE_MARK = 'V'


class DatasetError(Exception):
    """Raised when the ATM dataset cannot be read."""


def _parse_coordinate(value: Optional[str]) -> Optional[float]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    try:
        number = float(value)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


@dataclass(frozen=True)
class ATMRecord:
    """One ATM entry. The raw row is kept as a read-only mapping."""
    longitude: float
    latitude: float
    fields: Mapping[str, str] = field(default_factory=dict, repr=False)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Optional['ATMRecord']:
        """Build a record from a CSV row, or None when its coordinates are unusable."""
        longitude = _parse_coordinate(row.get(COL_LONGITUDE))
        latitude = _parse_coordinate(row.get(COL_LATITUDE))
        if longitude is None or latitude is None:
            return None
        cleaned = {
            str(key).strip(): (value or '').strip() if isinstance(value, str) else ''
            for key, value in row.items()
            if key is not None
        }
        return cls(longitude=longitude, latitude=latitude, fields=MappingProxyType(cleaned))

    def get(self, column: str, default: str = '') -> str:
        return self.fields.get(column, default)

    @property
    def city(self) -> str:
        return self.get(COL_CITY)

    @property
    def bank(self) -> str:
        return self.get(COL_BANK)

    @property
    def town(self) -> str:
        return self.get(COL_TOWN)

    @property
    def place(self) -> str:
        return self.get(COL_PLACE)

    @property
    def address(self) -> str:
        return self.get(COL_ADDRESS)

    @property
    def phone(self) -> str:
        return self.get(COL_PHONE)

    @property
    def service_code(self) -> str:
        return self.get(COL_SERVICE)

    @property
    def wheelchair_accessible(self) -> bool:
        return self.get(COL_WHEELCHAIR) == ACCESSIBLE_MARK

    @property
    def blind_accessible(self) -> bool:
        return self.get(COL_BLIND) == ACCESSIBLE_MARK

    @property
    def install_type_code(self) -> str:
        return self.get(COL_INSTALL_TYPE)

    @property
    def location_code(self) -> str:
        return self.get(COL_LOCATION_CATEGORY)

    def __str__(self) -> str:
        return f"{self.bank or 'Unknown Bank'} - {self.place or self.address} ({self.latitude}, {self.longitude})"


def parse_rows(rows: Iterable[Mapping[str, Any]]) -> List[ATMRecord]:
    """
    Convert raw CSV rows into ATM records.

    Rows whose coordinates are missing or not numeric are dropped.

    Args:
        rows: Mappings from header name to string value.

    Returns:
        Records in input order.
    """
    records: List[ATMRecord] = []
    skipped = 0
    for row in rows:
        record = ATMRecord.from_row(row)
        if record is None:
            skipped += 1
            continue
        records.append(record)

    if skipped:
        logger.warning(f"Skipped {skipped} rows without usable coordinates")
    logger.info(f"Parsed {len(records)} ATM records")
    return records


class ATMDataLoader:
    """Reads the ATM CSV from the configured source."""

    def __init__(self, data_config: Dict[str, Any]):
        """
        Initialize the loader.

        Args:
            data_config: The 'data' section of the application config.
        """
        self.source = data_config['source']
        self.encoding = data_config.get('encoding', 'utf-8-sig')
        self.timeout = aiohttp.ClientTimeout(total=data_config.get('timeout', 30))

        logger.info(f"ATM Data Loader initialized for {self.source}")

    @property
    def is_remote(self) -> bool:
        return str(self.source).lower().startswith(('http://', 'https://'))

    async def load(self) -> List[ATMRecord]:
        """
        Load and parse the dataset.

        Returns:
            Usable ATM records.

        Raises:
            DatasetError: If the source cannot be read or lacks coordinate columns.
        """
        logger.info(f"Loading ATM dataset from {self.source}...")
        if self.is_remote:
            text = await self._fetch_remote()
        else:
            text = self._read_local()
        return self.parse_text(text)

    def parse_text(self, text: str) -> List[ATMRecord]:
        reader = csv.DictReader(io.StringIO(text))
        headers = [h.strip() for h in (reader.fieldnames or [])]
        missing = [col for col in (COL_LONGITUDE, COL_LATITUDE) if col not in headers]
        if missing:
            raise DatasetError(f"Dataset is missing coordinate columns: {missing}")
        reader.fieldnames = headers
        return parse_rows(reader)

    def _read_local(self) -> str:
        path = Path(self.source)
        try:
            return path.read_text(encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise DatasetError(f"Cannot read dataset {path}: {e}") from e

    async def _fetch_remote(self) -> str:
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.get(self.source) as response:
                    if response.status != 200:
                        raise DatasetError(f"Dataset download failed with HTTP {response.status}")
                    raw = await response.read()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise DatasetError(f"Dataset download failed: {e}") from e

        try:
            return raw.decode(self.encoding)
        except UnicodeDecodeError as e:
            raise DatasetError(f"Dataset is not valid {self.encoding}: {e}") from e

"""HTTP clients for the Census ACS API and ZIP radius lookups."""

from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from ...config import settings
from .aggregation import ZipDemographics

logger = logging.getLogger(__name__)

# ACS 5-year variables, in response column order.
ACS_VARIABLES = (
    "B01003_001E",  # total population
    "B19013_001E",  # median household income
    "B25077_001E",  # median home value
    "B15003_022E",  # bachelor's degree
    "B15003_023E",  # master's degree
    "B15003_024E",  # professional degree
    "B15003_025E",  # doctorate
    "B01001_007E",  # males 25-29
    "B01001_008E",  # males 30-34
    "B01001_009E",  # males 35-39
    "B01001_010E",  # males 40-44
    "B01001_011E",  # males 45-49
    "B01001_012E",  # males 50-54
    "B01001_031E",  # females 25-29
    "B01001_032E",  # females 30-34
    "B01001_033E",  # females 35-39
    "B01001_034E",  # females 40-44
    "B01001_035E",  # females 45-49
    "B01001_036E",  # females 50-54
)


class MarketDataError(RuntimeError):
    """An upstream market data source failed or returned nothing usable."""


def _to_count(value: Any) -> int:
    # The ACS reports suppressed cells as large negative sentinels.
    try:
        number = int(float(value))
    except (TypeError, ValueError):
        return 0
    return max(number, 0)


class MarketDataClient:
    """Shared GET-with-retries plumbing for the market data sources."""

    def __init__(
        self,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.timeout = timeout if timeout is not None else settings.market_data_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.market_data_max_retries
        self.backoff_seconds = (
            backoff_seconds if backoff_seconds is not None else settings.market_data_backoff_seconds
        )
        self.transport = transport

    def _get_client(self) -> httpx.Client:
        # One client per call; lookups run on worker threads.
        return httpx.Client(timeout=httpx.Timeout(self.timeout, connect=5.0), transport=self.transport)

    def _get_json(self, url: str, params: dict[str, str] | None = None) -> Any:
        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(url, params=params)
                    response.raise_for_status()
                    return response.json()
                except httpx.HTTPStatusError as exc:
                    # 4xx means the query itself is wrong; retrying will not help.
                    if exc.response.status_code < 500:
                        raise MarketDataError(f"{url} returned {exc.response.status_code}") from exc
                    attempt += 1
                    if attempt > self.max_retries:
                        raise MarketDataError(f"{url} returned {exc.response.status_code}") from exc
                    time.sleep(self.backoff_seconds * attempt)
                except (httpx.TimeoutException, httpx.NetworkError) as exc:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning(f"Market data request failed after {self.max_retries} retries: {exc}")
                        raise MarketDataError(f"{url} unreachable: {exc}") from exc
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"Market data request failed, retrying in {wait_time:.1f}s ({attempt}/{self.max_retries})")
                    time.sleep(wait_time)
                except ValueError as exc:
                    raise MarketDataError(f"{url} returned invalid JSON") from exc
        finally:
            client.close()


class CensusClient(MarketDataClient):
    def __init__(self, base_url: str | None = None, api_key: str | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.base_url = base_url or settings.census_api_url
        self.api_key = api_key if api_key is not None else settings.census_api_key

    def zip_demographics(self, zip_code: str) -> ZipDemographics:
        """Fetch ACS figures for one ZIP code tabulation area."""

        params = {
            "get": ",".join(ACS_VARIABLES),
            "for": f"zip code tabulation area:{zip_code}",
        }
        if self.api_key:
            params["key"] = self.api_key
        rows = self._get_json(self.base_url, params)
        # First row is the header.
        if not isinstance(rows, list) or len(rows) < 2:
            raise MarketDataError(f"No census data for ZIP {zip_code}")
        values = [_to_count(value) for value in rows[1][: len(ACS_VARIABLES)]]
        values += [0] * (len(ACS_VARIABLES) - len(values))
        return ZipDemographics(
            zip_code=zip_code,
            total_population=values[0],
            median_income=values[1],
            median_home_value=values[2],
            bachelors=values[3],
            masters=values[4],
            professional=values[5],
            doctorate=values[6],
            age_25_to_29=values[7] + values[13],
            age_30_to_34=values[8] + values[14],
            age_35_to_39=values[9] + values[15],
            age_40_to_44=values[10] + values[16],
            age_45_to_49=values[11] + values[17],
            age_50_to_54=values[12] + values[18],
        )


class ZipRadiusClient(MarketDataClient):
    """ZipCodeAPI radius search."""

    def __init__(self, base_url: str | None = None, api_key: str | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.base_url = (base_url or settings.zipcode_api_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.zipcode_api_key

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def zip_codes_in_radius(self, lat: float, lng: float, radius_miles: float) -> list[str]:
        if not self.api_key:
            raise MarketDataError("ZipCodeAPI key is not configured")
        url = f"{self.base_url}/{self.api_key}/radius.json/{lat}/{lng}/{radius_miles}/mile"
        payload = self._get_json(url)
        zip_codes = payload.get("zip_codes", []) if isinstance(payload, dict) else []
        # Entries are objects with a zip_code key, or bare strings.
        codes = [str(item.get("zip_code") or "") if isinstance(item, dict) else str(item) for item in zip_codes]
        return [code for code in codes if code]

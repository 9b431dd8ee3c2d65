import httpx
import pytest

from src.dentalmap.services.demographics import (
    CensusClient,
    DemographicsService,
    MarketDataError,
    ZipDemographics,
    ZipRadiusClient,
    aggregate,
)
from src.dentalmap.services.demographics.service import metro_zip_codes
from src.dentalmap.services.territories import ValidationError

# Midtown Atlanta-ish ZCTA: ages 25-54 split evenly between men and women.
ACS_ROW = [
    "20000", "90000", "400000",
    "3000", "1500", "300", "200",
    "700", "800", "900", "1000", "1100", "1200",
    "700", "800", "900", "1000", "1100", "1200",
    "30309",
]


def census_handler(calls: list, status_code: int = 200, row=ACS_ROW):
    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if status_code != 200:
            return httpx.Response(status_code)
        zip_code = request.url.params["for"].rsplit(":", 1)[1]
        return httpx.Response(200, json=[["HEADER"] * len(row), row[:-1] + [zip_code]])

    return handler


def _census(handler, **kwargs) -> CensusClient:
    return CensusClient(
        base_url="https://census.test/acs5",
        api_key="",
        transport=httpx.MockTransport(handler),
        backoff_seconds=0,
        **kwargs,
    )


def _no_zip_api() -> ZipRadiusClient:
    return ZipRadiusClient(api_key="")


def test_census_client_parses_acs_row():
    calls: list = []
    client = _census(census_handler(calls), max_retries=0)

    record = client.zip_demographics("30309")

    assert calls[0].url.params["for"] == "zip code tabulation area:30309"
    assert "B01003_001E" in calls[0].url.params["get"]
    assert record.total_population == 20000
    assert record.median_income == 90000
    assert record.college_educated == 5000
    assert record.prime_age == 6800
    assert record.secondary_age == 4600
    assert record.simulated is False


def test_census_client_treats_suppressed_cells_as_zero():
    row = list(ACS_ROW)
    row[1] = "-666666666"
    row[2] = None
    client = _census(census_handler([], row=row), max_retries=0)

    record = client.zip_demographics("30309")

    assert record.median_income == 0
    assert record.median_home_value == 0


def test_census_client_retries_server_errors():
    attempts: list = []
    ok = census_handler([])

    def flaky(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        if len(attempts) == 1:
            return httpx.Response(503)
        return ok(request)

    record = _census(flaky, max_retries=1).zip_demographics("30309")

    assert len(attempts) == 2
    assert record.total_population == 20000


def test_census_client_does_not_retry_client_errors():
    calls: list = []
    client = _census(census_handler(calls, status_code=404), max_retries=3)

    with pytest.raises(MarketDataError):
        client.zip_demographics("00000")

    assert len(calls) == 1


def test_aggregate_weights_medians_by_population():
    records = [
        ZipDemographics(zip_code="30309", total_population=10000, median_income=100000, age_25_to_29=1000),
        ZipDemographics(zip_code="30305", total_population=30000, median_income=40000),
    ]

    result = aggregate(records, radius_miles=2)

    assert result["median_income"] == 55000
    assert result["total_population"] == 40000
    # 1000 prime-age residents * 0.70 * (55000 / 60000)
    assert result["qualified_audience"] == 641
    assert result["zip_codes"] == ["30309", "30305"]
    assert result["area_sq_miles"] == pytest.approx(12.566, abs=1e-3)
    assert result["population_density"] == pytest.approx(40000 / result["area_sq_miles"])


def test_aggregate_of_empty_population_is_zeroed():
    result = aggregate([ZipDemographics(zip_code="30309")], radius_miles=1)

    assert result["median_income"] == 0
    assert result["qualified_audience"] == 0
    assert result["qualified_percent"] == 0.0


def test_income_multiplier_is_clamped():
    rich = [ZipDemographics(zip_code="1", total_population=100, median_income=250000, age_30_to_34=100)]
    poor = [ZipDemographics(zip_code="2", total_population=100, median_income=10000, age_30_to_34=100)]

    assert aggregate(rich, 1)["qualified_audience"] == 70
    assert aggregate(poor, 1)["qualified_audience"] == 28


def test_metro_zip_codes_pick_region_and_scale_with_radius():
    assert metro_zip_codes(25.77, -80.19, 5) == ["33101", "33131", "33132"]
    assert metro_zip_codes(33.85, -84.39, 1) == ["30309"]
    assert len(metro_zip_codes(34.05, -118.0, 100)) == 9


def test_demographics_from_live_sources_are_not_simulated():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "zips.test":
            return httpx.Response(200, json={"zip_codes": [{"zip_code": "30309", "distance": 1.2}, {"zip_code": "30305"}]})
        return census_handler([])(request)

    transport = httpx.MockTransport(handler)
    service = DemographicsService(
        census=CensusClient(base_url="https://census.test/acs5", api_key="", transport=transport),
        zip_lookup=ZipRadiusClient(base_url="https://zips.test/rest", api_key="key", transport=transport),
        max_workers=2,
    )

    result = service.territory_demographics(33.8488, -84.3877, 5)

    assert result["zip_source"] == "zipcodeapi"
    assert result["data_quality"] == "census"
    assert result["simulated"] is False
    assert result["zip_codes"] == 2
    assert result["demographics"]["zip_codes"] == ["30309", "30305"]
    assert result["demographics"]["total_population"] == 40000
    assert result["demographics"]["qualified_audience"] == 2 * (4760 + 2530)


def test_metro_estimate_is_flagged_approximate():
    service = DemographicsService(census=_census(census_handler([])), zip_lookup=_no_zip_api())

    result = service.territory_demographics(33.8488, -84.3877, 4)

    assert result["zip_source"] == "metro_estimate"
    assert result["data_quality"] == "approximate"
    assert result["simulated"] is True


def test_census_outage_falls_back_to_labelled_estimates(caplog):
    service = DemographicsService(
        census=_census(census_handler([], status_code=500), max_retries=0),
        zip_lookup=_no_zip_api(),
    )

    result = service.territory_demographics(33.8488, -84.3877, 4)

    assert result["data_quality"] == "estimated"
    assert result["simulated"] is True
    assert result["demographics"]["total_population"] == 2 * 14000
    assert "using typical figures" in caplog.text


def test_zip_lookup_failure_uses_metro_estimate():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "zips.test":
            return httpx.Response(401)
        return census_handler([])(request)

    transport = httpx.MockTransport(handler)
    service = DemographicsService(
        census=CensusClient(base_url="https://census.test/acs5", api_key="", transport=transport),
        zip_lookup=ZipRadiusClient(base_url="https://zips.test/rest", api_key="bad", transport=transport),
    )

    result = service.territory_demographics(41.88, -87.63, 2)

    assert result["zip_source"] == "metro_estimate"
    assert result["demographics"]["zip_codes"] == ["60601"]


@pytest.mark.parametrize(
    "lat, lng, radius",
    [(None, -84.0, 5), (34.0, -84.0, None), (34.0, -84.0, 0), (float("nan"), -84.0, 5), (34.0, -84.0, float("inf"))],
)
def test_demographics_validates_parameters(lat, lng, radius):
    service = DemographicsService(census=_census(census_handler([])), zip_lookup=_no_zip_api())

    with pytest.raises(ValidationError):
        service.territory_demographics(lat, lng, radius)

import httpx
import pytest
from fastapi.testclient import TestClient

from src.dentalmap.main import create_app
from src.dentalmap.services.demographics import (
    CensusClient,
    DemographicsService,
    ZipRadiusClient,
    get_demographics_service,
)
from src.dentalmap.services.territories import get_territory_service

ACS_ROW = ["20000", "90000", "400000", "3000", "1500", "300", "200"] + ["700", "800", "900", "1000", "1100", "1200"] * 2


@pytest.fixture
def census_status() -> dict:
    return {"code": 200}


@pytest.fixture
def market_client(service, census_status):
    def handler(request: httpx.Request) -> httpx.Response:
        if census_status["code"] != 200:
            return httpx.Response(census_status["code"])
        zip_code = request.url.params["for"].rsplit(":", 1)[1]
        return httpx.Response(200, json=[["HEADER"] * 20, ACS_ROW + [zip_code]])

    demographics = DemographicsService(
        census=CensusClient(
            base_url="https://census.test/acs5",
            api_key="",
            transport=httpx.MockTransport(handler),
            max_retries=0,
        ),
        zip_lookup=ZipRadiusClient(api_key=""),
    )
    app = create_app()
    app.dependency_overrides[get_territory_service] = lambda: service
    app.dependency_overrides[get_demographics_service] = lambda: demographics
    with TestClient(app) as client:
        yield client


def test_census_data_returns_camel_case_demographics(market_client: TestClient):
    response = market_client.post("/api/census-data", json={"lat": 33.8488, "lng": -84.3877, "radius": 4})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["zipCodes"] == 2
    assert body["dataQuality"] == "approximate"
    assert body["simulated"] is True
    demographics = body["demographics"]
    assert demographics["totalPopulation"] == 40000
    assert demographics["medianIncome"] == 90000
    assert demographics["zipCodes"] == ["30309", "30326"]


def test_census_outage_is_labelled_estimated(market_client: TestClient, census_status):
    census_status["code"] = 503

    body = market_client.post("/api/census-data", json={"lat": 33.8488, "lng": -84.3877, "radius": 2}).json()

    assert body["dataQuality"] == "estimated"
    assert body["simulated"] is True


def test_census_data_requires_parameters(market_client: TestClient):
    response = market_client.post("/api/census-data", json={"lat": 33.8488, "lng": -84.3877})

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "Missing required parameters: lat, lng, radius"


def test_census_data_rejects_infinite_radius(market_client: TestClient):
    response = market_client.post(
        "/api/census-data",
        content='{"lat": 33.8488, "lng": -84.3877, "radius": Infinity}',
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400


def test_invisalign_directory_scores_practice(market_client: TestClient):
    response = market_client.post(
        "/api/invisalign-directory",
        json={"name": "Atlanta Orthodontic Associates", "address": "Suite 200, Atlanta, GA", "phone": "4045550142"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["isProvider"] is True
    assert body["confidence"] == "high"
    assert body["verificationMethod"] == "database_cross_reference"
    assert body["simulated"] is True
    assert body["dataQuality"] == "heuristic"
    assert body["details"]["estimate"]["factors"]["specialization"] == 40


def test_invisalign_directory_requires_name(market_client: TestClient):
    response = market_client.post("/api/invisalign-directory", json={"address": "12 Oak St"})

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "Practice name required"

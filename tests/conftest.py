"""Pytest configuration and fixtures for gwas-sumstats tests."""

import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest

from gwas_sumstats.client import GwasClient

BASE_URL = "https://gwas.test/summary-statistics/api"
API_PREFIX = "/summary-statistics/api"


def json_response(
    payload: Any, status_code: int = 200, content_type: str | None = "application/json"
) -> httpx.Response:
    """Build a response with a JSON body and (optionally) a content-type header."""
    headers = {} if content_type is None else {"content-type": content_type}
    return httpx.Response(status_code, content=json.dumps(payload).encode(), headers=headers)


class StubApi:
    """Serves canned responses keyed by path below the API root.

    A route value is either a JSON payload or a zero-argument callable
    returning an ``httpx.Response``. Unknown paths answer 404. Every
    request is recorded.
    """

    def __init__(self, routes: dict[str, Any] | None = None):
        self.routes: dict[str, Any] = routes or {}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix(API_PREFIX)
        if path not in self.routes:
            return httpx.Response(404, text="Not Found")
        route = self.routes[path]
        if callable(route):
            return route()
        return json_response(route)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def client(self) -> GwasClient:
        return GwasClient(BASE_URL, http=httpx.Client(transport=httpx.MockTransport(self)))


def links(path: str) -> dict[str, Any]:
    return {"self": {"href": f"{BASE_URL}{path}"}}


def association_payload(**overrides: Any) -> dict[str, Any]:
    data = {
        "variant_id": "rs10875231",
        "chromosome": 1,
        "base_pair_location": 99534456,
        "study_accession": "GCST000392",
        "trait": ["EFO_0001360"],
        "p_value": 2.826e-06,
        "code": 10,
        "effect_allele": "T",
        "other_allele": "G",
        "effect_allele_frequency": 0.2449,
        "odds_ratio": None,
        "ci_lower": None,
        "ci_upper": None,
        "beta": 0.0109,
        "se": 0.0025,
        "_links": links("/associations/rs10875231"),
    }
    data.update(overrides)
    return data


def summary_stats_file_payload(accession: str, trait_id: str = "EFO_0001360") -> dict[str, Any]:
    return {
        "study_accession": accession,
        "trait_id": trait_id,
        "file_path": f"https://files.test/{accession}/{accession}.tsv.gz",
        "file_size": 1024,
        "file_type": "tsv.gz",
        "download_url": f"https://files.test/{accession}/harmonised/{accession}.h.tsv.gz",
        "_links": links(f"/studies/{accession}/summary-statistics"),
    }


@pytest.fixture
def stub_api() -> StubApi:
    return StubApi()


@pytest.fixture
def make_stub() -> Callable[[dict[str, Any]], StubApi]:
    return StubApi


@pytest.fixture
def chromosome_payload() -> dict[str, Any]:
    return {"chromosome": "1", "_links": links("/chromosomes/1")}


@pytest.fixture
def associations_payload() -> dict[str, Any]:
    return {
        "_embedded": {
            "associations": {
                "0": association_payload(),
                "1": association_payload(variant_id="rs7329174", p_value=1.5e-08),
            }
        },
        "_links": links("/associations"),
    }


@pytest.fixture
def studies_payload() -> dict[str, Any]:
    return {
        "_embedded": {
            "studies": [
                [
                    {"study_accession": "GCST000392", "_links": links("/studies/GCST000392")},
                    {"study_accession": "GCST000393", "_links": links("/studies/GCST000393")},
                ],
                [{"study_accession": "GCST001234"}],
            ]
        },
        "_links": links("/studies"),
    }


@pytest.fixture
def files_payload() -> dict[str, Any]:
    return {
        "_embedded": {
            "summary_statistics": [
                summary_stats_file_payload("GCST000392"),
                summary_stats_file_payload("GCST000393"),
            ]
        },
        "_links": links("/traits/EFO_0001360/summary-statistics"),
    }

"""Synchronous client for the GWAS Catalog summary statistics REST API."""

import logging
from collections.abc import Callable
from typing import Any, TypeVar

import httpx

from .errors import HttpStatusError, UnexpectedContentTypeError
from .filters import GwasFilter, params_for
from .hal import (
    association_map,
    decode_entity,
    decode_envelope,
    nested_sequence_of,
    sequence_of,
)
from .models import (
    Association,
    Chromosome,
    HalEnvelope,
    Study,
    SummaryStatsFile,
    Trait,
)
from .urls import build_url, validate_base_url

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.ebi.ac.uk/gwas/summary-statistics/api"

# Defaults the API applies when no pagination parameters are sent.
DEFAULT_START = 0
DEFAULT_SIZE = 20

T = TypeVar("T")

AssociationEnvelope = HalEnvelope[dict[str, Association]]
FileEnvelope = HalEnvelope[list[SummaryStatsFile]]

_chromosome_list = sequence_of(Chromosome.from_dict)
_study_list = sequence_of(Study.from_dict)
_study_groups = nested_sequence_of(Study.from_dict)
_trait_list = sequence_of(Trait.from_dict)
_file_list = sequence_of(SummaryStatsFile.from_dict)


def build_filter(
    p_value_min: str | None = None,
    p_value_max: str | None = None,
    bp_min: int | None = None,
    bp_max: int | None = None,
    study: str | None = None,
    trait_id: str | None = None,
    reveal: str | None = None,
    start: int | None = None,
    size: int | None = None,
) -> GwasFilter:
    """Build a GwasFilter from individually optional bounds.

    A p-value range given with only one side is completed with ``"0.0"``
    as the lower or ``"1.0"`` as the upper bound. A base-pair range needs
    both sides and is dropped otherwise.
    """
    if p_value_min is None and p_value_max is None:
        p_value_range = None
    elif p_value_max is None:
        p_value_range = (str(p_value_min), "1.0")
    elif p_value_min is None:
        p_value_range = ("0.0", str(p_value_max))
    else:
        p_value_range = (str(p_value_min), str(p_value_max))

    bp_location_range = None
    if bp_min is not None and bp_max is not None:
        bp_location_range = (bp_min, bp_max)

    return GwasFilter(
        p_value_range=p_value_range,
        bp_location_range=bp_location_range,
        study=study,
        trait_id=trait_id,
        reveal=reveal,
        start=start,
        size=size,
    )


def check_response(response: httpx.Response) -> httpx.Response:
    """Validate status code and content type of an API response.

    Raises:
        HttpStatusError: If the status code is not 2xx
        UnexpectedContentTypeError: If a content-type header is present and is not JSON
    """
    if not response.is_success:
        try:
            body = response.text
        except (httpx.ResponseNotRead, UnicodeDecodeError):
            body = "Unable to read response body"
        raise HttpStatusError(response.status_code, body, url=str(response.request.url))

    content_type = response.headers.get("content-type")
    if content_type is not None and "application/json" not in content_type:
        raise UnexpectedContentTypeError(content_type)

    return response


class GwasClient:
    """Client for the summary statistics API.

    One ``httpx.Client`` is shared by every call. Pass ``http`` to inject
    your own (for connection pooling across clients, or a mock transport
    in tests); otherwise the client creates and owns one.
    """

    def __init__(self, base_url: str = DEFAULT_BASE_URL, http: httpx.Client | None = None):
        self.base_url = validate_base_url(base_url)
        self._owns_http = http is None
        self.http = http if http is not None else httpx.Client(follow_redirects=True)

    def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_http:
            self.http.close()

    def __enter__(self) -> "GwasClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _get(self, endpoint: str, params: dict[str, str], decode: Callable[[bytes], T]) -> T:
        url = build_url(self.base_url, endpoint, params)
        logger.debug("GET %s", url)
        response = self.http.get(url)
        logger.debug("GET %s -> %s", url, response.status_code)
        check_response(response)
        return decode(response.content)

    def _envelope(
        self, endpoint: str, params: dict[str, str], payload: Callable[[Any], T]
    ) -> HalEnvelope[T]:
        return self._get(endpoint, params, lambda raw: decode_envelope(raw, payload))

    def _entity(self, endpoint: str, model: Callable[[Any], T]) -> T:
        return self._get(endpoint, {}, lambda raw: decode_entity(raw, model))

    def _associations(self, endpoint: str, filter: GwasFilter | None) -> AssociationEnvelope:
        return self._envelope(endpoint, params_for(filter), association_map)

    # Associations

    def get_associations(self, filter: GwasFilter | None = None) -> AssociationEnvelope:
        return self._associations("/associations", filter)

    def get_variant_associations(
        self, variant_id: str, filter: GwasFilter | None = None
    ) -> AssociationEnvelope:
        return self._associations(f"/associations/{variant_id}", filter)

    # Chromosomes

    def get_chromosomes(self) -> HalEnvelope[list[Chromosome]]:
        return self._envelope("/chromosomes", {}, _chromosome_list)

    def get_chromosome(self, chromosome: str) -> Chromosome:
        return self._entity(f"/chromosomes/{chromosome}", Chromosome.from_dict)

    def get_chromosome_associations(
        self, chromosome: str, filter: GwasFilter | None = None
    ) -> AssociationEnvelope:
        return self._associations(f"/chromosomes/{chromosome}/associations", filter)

    def get_chromosome_variant_associations(
        self, chromosome: str, variant_id: str, filter: GwasFilter | None = None
    ) -> AssociationEnvelope:
        return self._associations(
            f"/chromosomes/{chromosome}/associations/{variant_id}", filter
        )

    # Studies

    def get_studies(self, filter: GwasFilter | None = None) -> HalEnvelope[list[list[Study]]]:
        """List studies.

        The listing embeds a list of lists of studies; callers get exactly
        that shape back.
        """
        return self._envelope("/studies", params_for(filter), _study_groups)

    def get_study(self, study_accession: str) -> Study:
        return self._entity(f"/studies/{study_accession}", Study.from_dict)

    def get_study_associations(
        self, study_accession: str, filter: GwasFilter | None = None
    ) -> AssociationEnvelope:
        return self._associations(f"/studies/{study_accession}/associations", filter)

    # Traits

    def get_traits(self, filter: GwasFilter | None = None) -> HalEnvelope[list[Trait]]:
        return self._envelope("/traits", params_for(filter), _trait_list)

    def get_trait(self, trait_id: str) -> Trait:
        return self._entity(f"/traits/{trait_id}", Trait.from_dict)

    def get_trait_associations(
        self, trait_id: str, filter: GwasFilter | None = None
    ) -> AssociationEnvelope:
        return self._associations(f"/traits/{trait_id}/associations", filter)

    def get_trait_studies(
        self, trait_id: str, filter: GwasFilter | None = None
    ) -> HalEnvelope[list[Study]]:
        return self._envelope(f"/traits/{trait_id}/studies", params_for(filter), _study_list)

    def get_trait_study(self, trait_id: str, study_accession: str) -> Study:
        return self._entity(f"/traits/{trait_id}/studies/{study_accession}", Study.from_dict)

    def get_trait_study_associations(
        self, trait_id: str, study_accession: str, filter: GwasFilter | None = None
    ) -> AssociationEnvelope:
        return self._associations(
            f"/traits/{trait_id}/studies/{study_accession}/associations", filter
        )

    # Summary statistics files

    def get_study_summary_stats_files(self, study_accession: str) -> FileEnvelope:
        return self._envelope(
            f"/studies/{study_accession}/summary-statistics", {}, _file_list
        )

    def get_trait_summary_stats_files(self, trait_id: str) -> FileEnvelope:
        return self._envelope(f"/traits/{trait_id}/summary-statistics", {}, _file_list)

    def get_trait_study_summary_stats_files(
        self, trait_id: str, study_accession: str
    ) -> FileEnvelope:
        return self._envelope(
            f"/traits/{trait_id}/studies/{study_accession}/summary-statistics", {}, _file_list
        )

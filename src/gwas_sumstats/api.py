"""Caller-facing functions that never raise.

Every function here returns an :class:`ApiResult`. Failures of any kind
(bad arguments, HTTP errors, undecodable responses, configuration
problems) come back as ``ApiResult(ok=False, ...)`` so a long-lived host
process survives individual failed calls.
"""

import json
import logging
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from functools import wraps
from pathlib import Path
from typing import Any

import httpx

from . import router
from .client import GwasClient, build_filter
from .config import load_settings
from .downloader import ProgressCallback
from .downloader import download_all as _download_all
from .filters import GwasFilter
from .models import to_jsonable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApiResult:
    """Result of a boundary call: either ``data`` or an ``error`` message."""

    ok: bool
    data: Any = None
    error: str | None = None
    error_type: str | None = None

    @classmethod
    def success(cls, data: Any) -> "ApiResult":
        return cls(ok=True, data=to_jsonable(data))

    @classmethod
    def failure(cls, error: BaseException, context: str) -> "ApiResult":
        return cls(ok=False, error=f"Error {context}: {error}", error_type=type(error).__name__)

    def to_dict(self) -> dict[str, Any]:
        if self.ok:
            return {"ok": True, "data": self.data}
        return {"ok": False, "error": self.error, "error_type": self.error_type}

    def to_json(self, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


@contextmanager
def _client_scope(client: GwasClient | None) -> Iterator[GwasClient]:
    if client is not None:
        yield client
        return
    settings = load_settings()
    with GwasClient(base_url=settings.base_url) as owned:
        yield owned


def _boundary(context: str) -> Callable[[Callable[..., Any]], Callable[..., ApiResult]]:
    """Run the wrapped call with a client and turn its outcome into an ApiResult.

    The wrapped function receives the client as its first argument; the
    exposed function takes an optional ``client`` keyword instead.
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., ApiResult]:
        @wraps(func)
        def wrapper(*args: Any, client: GwasClient | None = None, **kwargs: Any) -> ApiResult:
            try:
                with _client_scope(client) as active:
                    value = func(active, *args, **kwargs)
                return ApiResult.success(value)
            except Exception as e:
                logger.error("Error %s: %s", context, e)
                return ApiResult.failure(e, context)

        return wrapper

    return decorator


# Dispatch entry points


def gwas_get(
    entity_type: str,
    id: str | None = None,
    start: int | None = None,
    size: int | None = None,
    *,
    client: GwasClient | None = None,
) -> ApiResult:
    """Fetch a chromosome, study or trait by id, or list them when no id is given.

    Args:
        entity_type: ``"chromosomes"``, ``"studies"`` or ``"traits"`` (singular also accepted)
        id: Optional entity id
        start: Offset; the API defaults to 0
        size: Page size; the API defaults to 20
    """

    @_boundary(f"fetching {entity_type}")
    def call(active: GwasClient) -> Any:
        return router.get_entity(
            active, entity_type, id, GwasFilter(start=start, size=size)
        )

    return call(client=client)


def gwas_associations(
    entity_type: str | None = None,
    entity_id: str | None = None,
    p_value_min: str | None = None,
    p_value_max: str | None = None,
    bp_min: int | None = None,
    bp_max: int | None = None,
    study: str | None = None,
    trait_id: str | None = None,
    reveal: str | None = None,
    start: int | None = None,
    size: int | None = None,
    *,
    client: GwasClient | None = None,
) -> ApiResult:
    """Fetch associations, optionally scoped to a variant, chromosome, study or trait.

    A one-sided p-value bound is completed with ``"0.0"`` or ``"1.0"``.
    """

    @_boundary("fetching associations")
    def call(active: GwasClient) -> Any:
        filter = build_filter(
            p_value_min=p_value_min,
            p_value_max=p_value_max,
            bp_min=bp_min,
            bp_max=bp_max,
            study=study,
            trait_id=trait_id,
            reveal=reveal,
            start=start,
            size=size,
        )
        return router.get_scoped_associations(active, entity_type, entity_id, filter)

    return call(client=client)


@_boundary("listing files")
def gwas_list_files(
    active: GwasClient, entity_type: str, entity_id: str, secondary_id: str | None = None
) -> Any:
    """List summary statistics files for a study, a trait, or a trait + study."""
    return router.list_files(active, entity_type, entity_id, secondary_id)


def gwas_download_files(
    file_urls: Sequence[str],
    output_paths: Sequence[str | Path],
    max_concurrent: int | None = None,
    *,
    chunk_size: int | None = None,
    client: httpx.AsyncClient | None = None,
    progress_callback: ProgressCallback | None = None,
) -> ApiResult:
    """Download files concurrently.

    The result's data is the batch report (``total``, ``succeeded``,
    ``failures``, ``summary``). Individual file failures are reported
    there; only invalid arguments make the whole call fail.
    ``max_concurrent`` and ``chunk_size`` default to the configured settings.
    """
    try:
        if max_concurrent is None or chunk_size is None:
            settings = load_settings()
            if max_concurrent is None:
                max_concurrent = settings.max_concurrency
            if chunk_size is None:
                chunk_size = settings.chunk_size
        report = _download_all(
            list(file_urls),
            list(output_paths),
            max_concurrent,
            chunk_size=chunk_size,
            client=client,
            progress_callback=progress_callback,
        )
    except Exception as e:
        logger.error("Error downloading files: %s", e)
        return ApiResult.failure(e, "downloading files")

    data = report.to_dict()
    data["summary"] = report.summary()
    return ApiResult.success(data)


def gwas_files(
    operation: str,
    entity_type: str | None = None,
    entity_id: str | None = None,
    secondary_id: str | None = None,
    file_urls: Sequence[str] | None = None,
    output_paths: Sequence[str | Path] | None = None,
    max_concurrent: int | None = None,
    *,
    client: GwasClient | None = None,
    download_client: httpx.AsyncClient | None = None,
) -> ApiResult:
    """Combined file operation: ``"list"`` or ``"download"``."""
    if operation == "list":
        if entity_type is None or entity_id is None:
            return ApiResult.failure(
                ValueError("entity_type and entity_id required for list operation"),
                "listing files",
            )
        return gwas_list_files(entity_type, entity_id, secondary_id, client=client)

    if operation == "download":
        if file_urls is None or output_paths is None:
            return ApiResult.failure(
                ValueError("file_urls and output_paths required for download operation"),
                "downloading files",
            )
        return gwas_download_files(
            file_urls, output_paths, max_concurrent, client=download_client
        )

    return ApiResult.failure(
        ValueError(f"Invalid operation: {operation}. Use 'list' or 'download'"),
        "running file operation",
    )


# One function per endpoint


@_boundary("fetching associations")
def get_associations(active: GwasClient, **filter_fields: Any) -> Any:
    return active.get_associations(build_filter(**filter_fields))


@_boundary("fetching variant associations")
def get_variant_associations(active: GwasClient, variant_id: str, **filter_fields: Any) -> Any:
    return active.get_variant_associations(variant_id, build_filter(**filter_fields))


@_boundary("fetching chromosomes")
def get_chromosomes(active: GwasClient) -> Any:
    return active.get_chromosomes()


@_boundary("fetching chromosome")
def get_chromosome(active: GwasClient, chromosome: str) -> Any:
    return active.get_chromosome(chromosome)


@_boundary("fetching chromosome associations")
def get_chromosome_associations(
    active: GwasClient, chromosome: str, **filter_fields: Any
) -> Any:
    return active.get_chromosome_associations(chromosome, build_filter(**filter_fields))


@_boundary("fetching chromosome variant associations")
def get_chromosome_variant_associations(
    active: GwasClient, chromosome: str, variant_id: str, **filter_fields: Any
) -> Any:
    return active.get_chromosome_variant_associations(
        chromosome, variant_id, build_filter(**filter_fields)
    )


@_boundary("fetching studies")
def get_studies(active: GwasClient, **filter_fields: Any) -> Any:
    return active.get_studies(build_filter(**filter_fields))


@_boundary("fetching study")
def get_study(active: GwasClient, study_accession: str) -> Any:
    return active.get_study(study_accession)


@_boundary("fetching study associations")
def get_study_associations(active: GwasClient, study_accession: str, **filter_fields: Any) -> Any:
    return active.get_study_associations(study_accession, build_filter(**filter_fields))


@_boundary("fetching traits")
def get_traits(active: GwasClient, **filter_fields: Any) -> Any:
    return active.get_traits(build_filter(**filter_fields))


@_boundary("fetching trait")
def get_trait(active: GwasClient, trait_id: str) -> Any:
    return active.get_trait(trait_id)


@_boundary("fetching trait associations")
def get_trait_associations(active: GwasClient, trait_id: str, **filter_fields: Any) -> Any:
    return active.get_trait_associations(trait_id, build_filter(**filter_fields))


@_boundary("fetching trait studies")
def get_trait_studies(active: GwasClient, trait_id: str, **filter_fields: Any) -> Any:
    return active.get_trait_studies(trait_id, build_filter(**filter_fields))


@_boundary("fetching trait study")
def get_trait_study(active: GwasClient, trait_id: str, study_accession: str) -> Any:
    return active.get_trait_study(trait_id, study_accession)


@_boundary("fetching trait study associations")
def get_trait_study_associations(
    active: GwasClient, trait_id: str, study_accession: str, **filter_fields: Any
) -> Any:
    return active.get_trait_study_associations(
        trait_id, study_accession, build_filter(**filter_fields)
    )


@_boundary("listing study files")
def get_study_summary_stats_files(active: GwasClient, study_accession: str) -> Any:
    return active.get_study_summary_stats_files(study_accession)


@_boundary("listing trait files")
def get_trait_summary_stats_files(active: GwasClient, trait_id: str) -> Any:
    return active.get_trait_summary_stats_files(trait_id)


@_boundary("listing trait study files")
def get_trait_study_summary_stats_files(
    active: GwasClient, trait_id: str, study_accession: str
) -> Any:
    return active.get_trait_study_summary_stats_files(trait_id, study_accession)

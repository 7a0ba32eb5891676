"""Data models for GWAS Catalog summary statistics API responses."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .errors import DecodeError

T = TypeVar("T")

Links = dict[str, Any]

_NUMBER = (int, float)
_IDENTIFIER = (str, int)


def expect_mapping(value: Any, what: str) -> dict[str, Any]:
    """Return ``value`` if it is a JSON object, otherwise raise DecodeError."""
    if not isinstance(value, dict):
        raise DecodeError(f"Expected an object for {what}, got {type(value).__name__}")
    return value


def expect_list(value: Any, what: str) -> list[Any]:
    """Return ``value`` if it is a JSON array, otherwise raise DecodeError."""
    if not isinstance(value, list):
        raise DecodeError(f"Expected an array for {what}, got {type(value).__name__}")
    return value


def _optional(data: dict[str, Any], key: str, kinds: tuple[type, ...], owner: str) -> Any:
    value = data.get(key)
    if value is None:
        return None
    # bool is an int subclass but never a valid number here
    if isinstance(value, bool) or not isinstance(value, kinds):
        raise DecodeError(
            f"Unexpected type for {owner}.{key}: {type(value).__name__}"
        )
    return value


def _required_identifier(data: dict[str, Any], key: str, owner: str) -> str:
    if key not in data or data[key] is None:
        raise DecodeError(f"Missing required field {owner}.{key}")
    return str(_optional(data, key, _IDENTIFIER, owner))


def _links(data: dict[str, Any], owner: str) -> Links | None:
    links = data.get("_links")
    if links is None:
        return None
    return expect_mapping(links, f"{owner}._links")


def _trait_ids(data: dict[str, Any]) -> list[str] | None:
    value = data.get("trait")
    if value is None:
        return None
    # Some reveal modes return a single trait rather than a list.
    if isinstance(value, str):
        return [value]
    items = expect_list(value, "Association.trait")
    if not all(isinstance(item, str) for item in items):
        raise DecodeError("Association.trait must contain only strings")
    return list(items)


@dataclass(frozen=True)
class Association:
    """One variant-study-trait association record.

    Any field may be missing depending on the ``reveal`` mode of the query.
    """

    variant_id: str | None = None
    chromosome: str | int | None = None
    base_pair_location: int | None = None
    study_accession: str | None = None
    trait_ids: list[str] | None = None
    p_value: float | None = None
    code: int | None = None
    effect_allele: str | None = None
    other_allele: str | None = None
    effect_allele_frequency: float | None = None
    odds_ratio: float | None = None
    ci_lower: float | None = None
    ci_upper: float | None = None
    beta: float | None = None
    se: float | None = None
    links: Links | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "Association":
        data = expect_mapping(data, "Association")
        owner = "Association"
        return cls(
            variant_id=_optional(data, "variant_id", (str,), owner),
            chromosome=_optional(data, "chromosome", _IDENTIFIER, owner),
            base_pair_location=_optional(data, "base_pair_location", (int,), owner),
            study_accession=_optional(data, "study_accession", (str,), owner),
            trait_ids=_trait_ids(data),
            p_value=_optional(data, "p_value", _NUMBER, owner),
            code=_optional(data, "code", (int,), owner),
            effect_allele=_optional(data, "effect_allele", (str,), owner),
            other_allele=_optional(data, "other_allele", (str,), owner),
            effect_allele_frequency=_optional(data, "effect_allele_frequency", _NUMBER, owner),
            odds_ratio=_optional(data, "odds_ratio", _NUMBER, owner),
            ci_lower=_optional(data, "ci_lower", _NUMBER, owner),
            ci_upper=_optional(data, "ci_upper", _NUMBER, owner),
            beta=_optional(data, "beta", _NUMBER, owner),
            se=_optional(data, "se", _NUMBER, owner),
            links=_links(data, owner),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "variant_id": self.variant_id,
            "chromosome": self.chromosome,
            "base_pair_location": self.base_pair_location,
            "study_accession": self.study_accession,
            "trait": self.trait_ids,
            "p_value": self.p_value,
            "code": self.code,
            "effect_allele": self.effect_allele,
            "other_allele": self.other_allele,
            "effect_allele_frequency": self.effect_allele_frequency,
            "odds_ratio": self.odds_ratio,
            "ci_lower": self.ci_lower,
            "ci_upper": self.ci_upper,
            "beta": self.beta,
            "se": self.se,
            "_links": self.links,
        }


@dataclass(frozen=True)
class Chromosome:
    """A chromosome known to the API."""

    chromosome: str
    links: Links | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "Chromosome":
        data = expect_mapping(data, "Chromosome")
        return cls(
            chromosome=_required_identifier(data, "chromosome", "Chromosome"),
            links=_links(data, "Chromosome"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"chromosome": self.chromosome, "_links": self.links}


@dataclass(frozen=True)
class Study:
    """A GWAS study identified by its GCST accession."""

    study_accession: str
    links: Links | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "Study":
        data = expect_mapping(data, "Study")
        return cls(
            study_accession=_required_identifier(data, "study_accession", "Study"),
            links=_links(data, "Study"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"study_accession": self.study_accession, "_links": self.links}


@dataclass(frozen=True)
class Trait:
    """A trait, usually an EFO ontology term such as ``EFO_0001360``."""

    trait: str
    links: Links | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "Trait":
        data = expect_mapping(data, "Trait")
        return cls(
            trait=_required_identifier(data, "trait", "Trait"),
            links=_links(data, "Trait"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"trait": self.trait, "_links": self.links}


@dataclass(frozen=True)
class SummaryStatsFile:
    """Descriptor of a downloadable summary statistics file."""

    study_accession: str
    file_path: str
    trait_id: str | None = None
    file_size: int | None = None
    file_type: str | None = None
    download_url: str | None = None
    links: Links | None = None

    @property
    def fetch_url(self) -> str:
        """URL to download from; ``download_url`` wins over ``file_path``."""
        return self.download_url or self.file_path

    @classmethod
    def from_dict(cls, data: Any) -> "SummaryStatsFile":
        data = expect_mapping(data, "SummaryStatsFile")
        owner = "SummaryStatsFile"
        return cls(
            study_accession=_required_identifier(data, "study_accession", owner),
            file_path=_required_identifier(data, "file_path", owner),
            trait_id=_optional(data, "trait_id", (str,), owner),
            file_size=_optional(data, "file_size", (int,), owner),
            file_type=_optional(data, "file_type", (str,), owner),
            download_url=_optional(data, "download_url", (str,), owner),
            links=_links(data, owner),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "study_accession": self.study_accession,
            "trait_id": self.trait_id,
            "file_path": self.file_path,
            "file_size": self.file_size,
            "file_type": self.file_type,
            "download_url": self.download_url,
            "_links": self.links,
        }


@dataclass(frozen=True)
class HalEnvelope(Generic[T]):
    """HAL response wrapper.

    ``embedded`` is keyed by resource type name (``associations``,
    ``chromosomes``, ...). Either field may be absent; an envelope with
    neither means the query matched nothing.
    """

    embedded: dict[str, T] | None = None
    links: Links | None = None

    @property
    def is_empty(self) -> bool:
        return not self.embedded

    def get(self, resource: str) -> T | None:
        if self.embedded is None:
            return None
        return self.embedded.get(resource)

    def to_dict(self) -> dict[str, Any]:
        embedded = None
        if self.embedded is not None:
            embedded = {key: to_jsonable(value) for key, value in self.embedded.items()}
        return {"_embedded": embedded, "_links": self.links}


def to_jsonable(value: Any) -> Any:
    """Convert models (and containers of models) into plain JSON values."""
    to_dict: Callable[[], Any] | None = getattr(value, "to_dict", None)
    if to_dict is not None:
        return to_dict()
    if isinstance(value, dict):
        return {key: to_jsonable(item) for key, item in value.items()}
    if isinstance(value, list | tuple):
        return [to_jsonable(item) for item in value]
    return value

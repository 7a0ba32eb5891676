"""Dispatch of (kind, id) lookups onto GwasClient endpoints."""

import logging
from enum import Enum

from .client import AssociationEnvelope, FileEnvelope, GwasClient
from .errors import InvalidFileScopeError, InvalidScopeError, UnsupportedEntityKindError
from .filters import GwasFilter
from .models import Chromosome, HalEnvelope, Study, Trait

logger = logging.getLogger(__name__)


class EntityKind(Enum):
    """Reference entities that can be fetched singly or listed."""

    CHROMOSOME = "chromosome"
    STUDY = "study"
    TRAIT = "trait"

    @classmethod
    def parse(cls, tag: "EntityKind | str") -> "EntityKind":
        """Parse a tag such as ``"trait"`` or ``"traits"``.

        Raises:
            UnsupportedEntityKindError: If the tag names no known entity
        """
        if isinstance(tag, cls):
            return tag
        kind = _ENTITY_ALIASES.get(str(tag).strip().lower())
        if kind is None:
            raise UnsupportedEntityKindError(str(tag))
        return kind


_ENTITY_ALIASES = {
    "chromosome": EntityKind.CHROMOSOME,
    "chromosomes": EntityKind.CHROMOSOME,
    "study": EntityKind.STUDY,
    "studies": EntityKind.STUDY,
    "trait": EntityKind.TRAIT,
    "traits": EntityKind.TRAIT,
}


class ScopeKind(Enum):
    """Entities that associations can be scoped to."""

    VARIANT = "variant"
    CHROMOSOME = "chromosome"
    STUDY = "study"
    TRAIT = "trait"

    @classmethod
    def parse(cls, tag: "ScopeKind | str") -> "ScopeKind":
        if isinstance(tag, cls):
            return tag
        try:
            return cls(str(tag).strip().lower())
        except ValueError:
            raise InvalidScopeError(f"Invalid entity type: {tag}") from None


class FileScopeKind(Enum):
    """Entities that summary statistics files are listed for."""

    STUDY = "study"
    TRAIT = "trait"

    @classmethod
    def parse(cls, tag: "FileScopeKind | str") -> "FileScopeKind":
        if isinstance(tag, cls):
            return tag
        try:
            return cls(str(tag).strip().lower())
        except ValueError:
            raise InvalidFileScopeError(f"Invalid file entity type: {tag}") from None


def _blank_to_none(value: str | None) -> str | None:
    """Treat an empty or whitespace-only id as absent."""
    if value is None or not value.strip():
        return None
    return value


EntityResult = (
    Chromosome
    | Study
    | Trait
    | HalEnvelope[list[Chromosome]]
    | HalEnvelope[list[list[Study]]]
    | HalEnvelope[list[Trait]]
)


def get_entity(
    client: GwasClient,
    kind: EntityKind | str,
    entity_id: str | None = None,
    filter: GwasFilter | None = None,
) -> EntityResult:
    """Fetch one entity when ``entity_id`` is given, otherwise list them.

    The filter applies to the study and trait listings only; the
    chromosome listing takes no parameters and single lookups ignore it.
    A blank ``entity_id`` counts as absent and selects the listing.

    Raises:
        UnsupportedEntityKindError: If ``kind`` is not chromosome, study or trait
    """
    kind = EntityKind.parse(kind)
    entity_id = _blank_to_none(entity_id)
    logger.debug("Entity lookup: kind=%s id=%s", kind.value, entity_id)

    if kind is EntityKind.CHROMOSOME:
        if entity_id is not None:
            return client.get_chromosome(entity_id)
        return client.get_chromosomes()

    if kind is EntityKind.STUDY:
        if entity_id is not None:
            return client.get_study(entity_id)
        return client.get_studies(filter)

    if entity_id is not None:
        return client.get_trait(entity_id)
    return client.get_traits(filter)


def get_scoped_associations(
    client: GwasClient,
    kind: ScopeKind | str | None = None,
    entity_id: str | None = None,
    filter: GwasFilter | None = None,
) -> AssociationEnvelope:
    """Fetch associations, optionally scoped to a variant, chromosome, study or trait.

    With neither ``kind`` nor ``entity_id`` the global association listing
    is returned. A blank ``entity_id`` counts as missing.

    Raises:
        InvalidScopeError: If only one of kind/id is given or the kind is unknown
    """
    entity_id = _blank_to_none(entity_id)
    if kind is None and entity_id is None:
        return client.get_associations(filter)
    if kind is None or entity_id is None:
        raise InvalidScopeError("Invalid entity type or missing ID")

    scope = ScopeKind.parse(kind)
    logger.debug("Scoped associations: kind=%s id=%s", scope.value, entity_id)

    if scope is ScopeKind.VARIANT:
        return client.get_variant_associations(entity_id, filter)
    if scope is ScopeKind.CHROMOSOME:
        return client.get_chromosome_associations(entity_id, filter)
    if scope is ScopeKind.STUDY:
        return client.get_study_associations(entity_id, filter)
    return client.get_trait_associations(entity_id, filter)


def list_files(
    client: GwasClient,
    kind: FileScopeKind | str,
    entity_id: str,
    secondary_id: str | None = None,
) -> FileEnvelope:
    """List summary statistics files for a study, a trait, or a trait within a study.

    ``secondary_id`` is a study accession and is only meaningful with a trait.

    Raises:
        InvalidFileScopeError: For any other combination of arguments
    """
    scope = FileScopeKind.parse(kind)
    if _blank_to_none(entity_id) is None:
        raise InvalidFileScopeError(
            f"Invalid file entity type or parameters: {scope.value} id is required"
        )
    secondary_id = _blank_to_none(secondary_id)

    if scope is FileScopeKind.STUDY:
        if secondary_id is not None:
            raise InvalidFileScopeError(
                "Invalid file entity type or parameters: secondary_id is only valid for traits"
            )
        return client.get_study_summary_stats_files(entity_id)

    if secondary_id is None:
        return client.get_trait_summary_stats_files(entity_id)
    return client.get_trait_study_summary_stats_files(entity_id, secondary_id)

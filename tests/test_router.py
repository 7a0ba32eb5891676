"""Tests for (kind, id) dispatch onto client endpoints."""

from unittest.mock import MagicMock

import pytest

from gwas_sumstats.client import GwasClient
from gwas_sumstats.errors import (
    InvalidFileScopeError,
    InvalidScopeError,
    UnsupportedEntityKindError,
)
from gwas_sumstats.filters import GwasFilter
from gwas_sumstats.router import (
    EntityKind,
    FileScopeKind,
    ScopeKind,
    get_entity,
    get_scoped_associations,
    list_files,
)


@pytest.fixture
def client():
    return MagicMock(spec=GwasClient)


class TestKindParsing:
    """Test parsing of entity tags into closed enums."""

    @pytest.mark.parametrize(
        "tag,expected",
        [
            ("chromosome", EntityKind.CHROMOSOME),
            ("chromosomes", EntityKind.CHROMOSOME),
            ("studies", EntityKind.STUDY),
            ("Study", EntityKind.STUDY),
            ("TRAITS", EntityKind.TRAIT),
            (EntityKind.TRAIT, EntityKind.TRAIT),
        ],
    )
    def test_entity_kind(self, tag, expected):
        assert EntityKind.parse(tag) is expected

    def test_unknown_entity_kind(self):
        with pytest.raises(UnsupportedEntityKindError, match="Invalid entity type: genes"):
            EntityKind.parse("genes")

    def test_variant_is_not_an_entity(self):
        with pytest.raises(UnsupportedEntityKindError):
            EntityKind.parse("variant")

    def test_scope_kind(self):
        assert ScopeKind.parse("variant") is ScopeKind.VARIANT
        with pytest.raises(InvalidScopeError):
            ScopeKind.parse("gene")

    def test_file_scope_kind(self):
        assert FileScopeKind.parse("trait") is FileScopeKind.TRAIT
        with pytest.raises(InvalidFileScopeError):
            FileScopeKind.parse("chromosome")


class TestGetEntity:
    def test_single_chromosome(self, client):
        get_entity(client, "chromosomes", "1")
        client.get_chromosome.assert_called_once_with("1")

    def test_chromosome_listing_takes_no_filter(self, client):
        get_entity(client, "chromosome", filter=GwasFilter(size=5))
        client.get_chromosomes.assert_called_once_with()

    def test_study_listing_passes_filter(self, client):
        f = GwasFilter(start=0, size=5)
        get_entity(client, "studies", None, f)
        client.get_studies.assert_called_once_with(f)

    def test_single_study(self, client):
        get_entity(client, EntityKind.STUDY, "GCST1")
        client.get_study.assert_called_once_with("GCST1")

    def test_trait_listing_and_lookup(self, client):
        get_entity(client, "traits")
        client.get_traits.assert_called_once_with(None)

        get_entity(client, "traits", "EFO_1")
        client.get_trait.assert_called_once_with("EFO_1")

    def test_unknown_kind_makes_no_request(self, client):
        with pytest.raises(UnsupportedEntityKindError):
            get_entity(client, "variants", "rs1")
        assert client.method_calls == []

    def test_returns_client_result(self, client):
        client.get_chromosome.return_value = "sentinel"
        assert get_entity(client, "chromosome", "1") == "sentinel"

    def test_blank_id_selects_listing(self, client):
        get_entity(client, "traits", "")
        client.get_traits.assert_called_once_with(None)
        client.get_trait.assert_not_called()


class TestGetScopedAssociations:
    def test_no_scope_is_global_listing(self, client):
        f = GwasFilter(size=1)
        get_scoped_associations(client, None, None, f)
        client.get_associations.assert_called_once_with(f)

    @pytest.mark.parametrize(
        "kind,method",
        [
            ("variant", "get_variant_associations"),
            ("chromosome", "get_chromosome_associations"),
            ("study", "get_study_associations"),
            ("trait", "get_trait_associations"),
        ],
    )
    def test_scoped_listing(self, client, kind, method):
        f = GwasFilter(reveal="all")
        get_scoped_associations(client, kind, "x", f)
        getattr(client, method).assert_called_once_with("x", f)

    def test_kind_without_id(self, client):
        with pytest.raises(InvalidScopeError, match="missing ID"):
            get_scoped_associations(client, "trait", None)
        assert client.method_calls == []

    def test_id_without_kind(self, client):
        with pytest.raises(InvalidScopeError):
            get_scoped_associations(client, None, "EFO_1")

    def test_unknown_kind(self, client):
        with pytest.raises(InvalidScopeError):
            get_scoped_associations(client, "gene", "BRCA1")
        assert client.method_calls == []

    @pytest.mark.parametrize("entity_id", ["", " "])
    def test_blank_id_is_missing(self, client, entity_id):
        with pytest.raises(InvalidScopeError, match="missing ID"):
            get_scoped_associations(client, "trait", entity_id)
        assert client.method_calls == []


class TestListFiles:
    def test_study_files(self, client):
        list_files(client, "study", "GCST1")
        client.get_study_summary_stats_files.assert_called_once_with("GCST1")

    def test_trait_files(self, client):
        list_files(client, "trait", "EFO_1")
        client.get_trait_summary_stats_files.assert_called_once_with("EFO_1")

    def test_trait_study_files(self, client):
        list_files(client, "trait", "EFO_1", "GCST1")
        client.get_trait_study_summary_stats_files.assert_called_once_with("EFO_1", "GCST1")

    def test_study_with_secondary_id(self, client):
        with pytest.raises(InvalidFileScopeError):
            list_files(client, "study", "GCST1", "EFO_1")
        assert client.method_calls == []

    def test_unknown_kind(self, client):
        with pytest.raises(InvalidFileScopeError):
            list_files(client, "chromosome", "1")

    @pytest.mark.parametrize("entity_id", ["", "   "])
    def test_blank_id_rejected(self, client, entity_id):
        with pytest.raises(InvalidFileScopeError, match="id is required"):
            list_files(client, "trait", entity_id)
        assert client.method_calls == []

    def test_blank_secondary_id_is_absent(self, client):
        list_files(client, "trait", "EFO_1", "")
        client.get_trait_summary_stats_files.assert_called_once_with("EFO_1")

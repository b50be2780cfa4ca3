"""
Tests for record normalization.
"""

import pytest

from crxq_catalog import models
from crxq_catalog.models.base import ResourceType
from crxq_catalog.models.resource import RawStorageEntry, StorageMetadata
from crxq_catalog.normalizer import (
    RecordNormalizer,
    display_name,
    program_name_to_slug,
    public_url,
    size_in_mb,
)
from crxq_catalog.strategies.catalog import catalog_row_to_entry

ENDPOINT = "https://storage.example.test"


@pytest.fixture
def normalizer():
    return RecordNormalizer(ENDPOINT, "clinicalrxqfiles")


class TestHelpers:
    """Test the small conversion helpers."""

    @pytest.mark.parametrize(
        "label,slug",
        [
            ("MedSync: TimeMyMeds", "tmm"),
            ("MTM The Future Today", "mtmtft"),
            ("Test and Treat: Strep, Flu, COVID", "tnt"),
            ("HbA1C Testing", "a1c"),
            ("Oral Contraceptives", "oc"),
            ("Something else", "tmm"),
            (None, "tmm"),
        ],
    )
    def test_program_name_to_slug(self, label, slug):
        assert program_name_to_slug(label) == slug

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("worksheet.pdf", "worksheet"),
            ("Intro.PPTX.mp4", "Intro"),
            ("deck.pptx", "deck"),
            ("photo.JPEG", "photo"),
            ("notes.txt", "notes.txt"),
            ("archive.pdf.zip", "archive.pdf.zip"),
        ],
    )
    def test_display_name(self, name, expected):
        assert display_name(name) == expected

    def test_size_in_mb(self):
        assert size_in_mb(2097152) == 2.0
        assert size_in_mb(1500000) == 1.43
        assert size_in_mb(0) is None
        assert size_in_mb(None) is None

    def test_public_url_encodes_path(self):
        url = public_url(ENDPOINT + "/", "storage/v1/object/public", "clinicalrxqfiles", "/A B/c#1.pdf")
        assert url == (
            "https://storage.example.test/storage/v1/object/public/clinicalrxqfiles/A%20B/c#1.pdf"
        )


class TestRecordNormalizer:
    """Test raw row to ResourceItem conversion."""

    def test_program_form_example(self, normalizer):
        row = RawStorageEntry.from_mapping(
            {"path": "MTMTheFutureToday/forms/CMR/worksheet.pdf", "name": "worksheet.pdf"}
        )
        item = normalizer.to_resource_item(row)

        assert item.program == "mtmtft"
        assert item.type == ResourceType.DOCUMENTATION_FORMS
        assert item.category == "Cmr"
        assert item.name == "worksheet"
        assert item.id == "MTMTheFutureToday/forms/CMR/worksheet.pdf"
        assert item.bookmarked is False
        assert item.file_url == (
            f"{ENDPOINT}/storage/v1/object/public/clinicalrxqfiles/"
            "MTMTheFutureToday/forms/CMR/worksheet.pdf"
        )

    def test_catalog_fields_override_path(self, normalizer):
        row = RawStorageEntry(
            path="TimeMyMeds/forms/CMR/worksheet.pdf",
            name="worksheet.pdf",
            id="c1",
            file_url="https://cdn.example.test/w.pdf",
            program_name="Oral Contraceptives",
            subcategory="cmr_forms",
            tags=("cmr",),
        )
        item = normalizer.to_resource_item(row)

        assert item.program == "oc"
        assert item.category == "Cmr Forms"
        assert item.file_url == "https://cdn.example.test/w.pdf"
        assert item.tags == ("cmr",)
        # type still comes from the path
        assert item.type == ResourceType.DOCUMENTATION_FORMS

    def test_metadata_size_and_dates(self, normalizer):
        row = RawStorageEntry(
            path="misc/a.pdf",
            name="a.pdf",
            id="x",
            metadata=StorageMetadata(
                size=3145728, updated_at="2024-01-01T00:00:00Z", created_at="2023-01-01T00:00:00Z"
            ),
        )
        item = normalizer.to_resource_item(row)

        assert item.size_mb == 3.0
        assert item.last_updated == "2024-01-01T00:00:00Z"
        assert item.type == ResourceType.ADDITIONAL_RESOURCES
        assert item.program == "general"

    def test_last_modified_preferred(self, normalizer):
        metadata = StorageMetadata.from_mapping(
            {"lastModified": "2024-06-01", "updated_at": "2024-01-01", "created_at": "2023-01-01"}
        )
        row = RawStorageEntry(path="a.pdf", name="a.pdf", id="a", metadata=metadata)
        assert normalizer.to_resource_item(row).last_updated == "2024-06-01"

    def test_malformed_row_gets_defaults(self, normalizer):
        row = RawStorageEntry.from_mapping({"metadata": "not-a-mapping", "tags": 5})
        item = normalizer.to_resource_item(row)

        assert item.name == "Resource"
        assert item.program == "general"
        assert item.type == ResourceType.ADDITIONAL_RESOURCES
        assert item.category is None
        assert item.tags is None
        assert item.size_mb is None

    def test_non_text_catalog_fields_get_defaults(self, normalizer):
        row = catalog_row_to_entry(
            {
                "id": "1",
                "file_path": "TimeMyMeds/forms/a.pdf",
                "program_name": 7,
                "subcategory": 2024,
                "file_size": "Infinity",
                "mime_type": 0.5,
            }
        )
        item = normalizer.to_resource_item(row)

        assert item.program == "tmm"
        assert item.type == ResourceType.DOCUMENTATION_FORMS
        assert item.category == "2024"
        assert item.size_mb is None

    def test_listing_row_with_infinite_size(self, normalizer):
        row = RawStorageEntry.from_mapping(
            {"path": "a.pdf", "metadata": {"size": "Infinity"}, "program_name": 3, "subcategory": 9}
        )
        item = normalizer.to_resource_item(row)

        assert row.metadata.size is None
        assert row.program_name == "3"
        assert item.category == "9"
        assert item.size_mb is None

    def test_normalization_is_deterministic(self, normalizer, rpc_rows):
        for raw in rpc_rows:
            first = normalizer.to_resource_item(RawStorageEntry.from_mapping(raw))
            second = normalizer.to_resource_item(RawStorageEntry.from_mapping(raw))
            assert first == second
            assert first.to_dict() == second.to_dict()

    def test_to_dict_uses_portal_keys(self, normalizer, rpc_rows):
        item = normalizer.to_resource_item(RawStorageEntry.from_mapping(rpc_rows[0]))
        data = item.to_dict()

        assert data["fileUrl"].endswith("worksheet.pdf")
        assert data["sizeMB"] == 2.0
        assert data["lastUpdatedISO"] == "2024-05-01T00:00:00Z"
        assert data["type"] == "Documentation Forms"
        assert "downloadCount" not in data


class TestModelExports:
    """Test the public surface of the models package."""

    def test_every_exported_name_resolves(self):
        assert all(hasattr(models, name) for name in models.__all__)
        assert set(models.__all__) >= {"ResourceItem", "RawStorageEntry", "ResourceFilters"}

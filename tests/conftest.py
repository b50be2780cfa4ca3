"""
Shared test fixtures and configuration for the crxq_catalog test suite.
"""

from typing import Any, Dict, List, Optional, Tuple

import aioresponses
import pytest

from crxq_catalog.config.models import (
    CatalogSettings,
    RetryPolicy,
    StorageConfig,
    TraversalConfig,
)
from crxq_catalog.models.base import ResourceType
from crxq_catalog.models.resource import ResourceItem

ENDPOINT = "https://storage.example.test"
CREDENTIAL = "test-anon-key-1234567890"
BUCKET = "clinicalrxqfiles"


class FakeStorageClient:
    """
    In-memory storage backend recording every call.

    Each answer may be a value or an exception instance, which is raised.
    ``tree`` maps a directory prefix to its listing entries.
    """

    def __init__(
        self,
        catalog: Any = None,
        rpc_rows: Any = None,
        tree: Optional[Dict[str, Any]] = None,
        search_rows: Any = None,
        bucket: str = BUCKET,
    ) -> None:
        self._bucket = bucket
        self.catalog = catalog
        self.rpc_rows = rpc_rows
        self.tree = tree or {}
        self.search_rows = search_rows
        self.calls: List[Tuple[Any, ...]] = []
        self.closed = False

    @property
    def bucket(self) -> str:
        return self._bucket

    @staticmethod
    def _answer(value: Any) -> Any:
        if isinstance(value, BaseException):
            raise value
        return value

    async def select(self, table: str, select: str = "*") -> Any:
        self.calls.append(("select", table))
        return self._answer(self.catalog if self.catalog is not None else [])

    async def rpc(self, name: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        self.calls.append(("rpc", name, payload))
        value = self.search_rows if name == "search_content" else self.rpc_rows
        return self._answer(value if value is not None else [])

    async def list_objects(self, prefix: str = "", limit: int = 1000, offset: int = 0) -> List[Dict[str, Any]]:
        self.calls.append(("list", prefix, offset))
        entries = self._answer(self.tree.get(prefix, []))
        return list(entries[offset:offset + limit])

    async def close(self) -> None:
        self.closed = True

    def called(self, kind: str) -> List[Tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == kind]

    @property
    def call_kinds(self) -> List[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def storage_config() -> StorageConfig:
    """Fully configured storage settings."""
    return StorageConfig(endpoint=ENDPOINT, credential=CREDENTIAL, bucket=BUCKET)


@pytest.fixture
def settings(storage_config: StorageConfig) -> CatalogSettings:
    """Default test settings with instant retries."""
    return CatalogSettings(
        storage=storage_config,
        retry=RetryPolicy(max_attempts=3, initial_delay=0.0, max_delay=0.0, jitter=False),
        traversal=TraversalConfig(max_workers=2, page_size=1000),
    )


@pytest.fixture
def rpc_rows() -> List[Dict[str, Any]]:
    """Rows as returned by the list_all_files function."""
    return [
        {
            "path": "MTMTheFutureToday/forms/CMR/worksheet.pdf",
            "name": "worksheet.pdf",
            "id": "f1",
            "metadata": {
                "size": 2097152,
                "mimetype": "application/pdf",
                "lastModified": "2024-05-01T00:00:00Z",
            },
        },
        {
            "path": "TimeMyMeds/protocols/sync_protocol.pdf",
            "name": "sync_protocol.pdf",
            "id": "f2",
        },
        {
            "path": "patienthandouts/CardiovascularConditions/bp_log.pdf",
            "name": "bp_log.pdf",
            "id": "f3",
        },
        {
            "path": "OralContraceptives/training/oc_module_1.mp4",
            "name": "oc_module_1.mp4",
            "id": "f4",
        },
        {"path": "misc/readme.txt", "name": "readme.txt", "id": "f5"},
    ]


@pytest.fixture
def catalog_rows() -> List[Dict[str, Any]]:
    """Rows of the storage_files_catalog table, one from a foreign bucket."""
    return [
        {
            "id": "c1",
            "bucket_name": BUCKET,
            "file_name": "worksheet.pdf",
            "file_path": "/MTMTheFutureToday/forms/CMR/worksheet.pdf",
            "file_url": "https://cdn.example.test/worksheet.pdf",
            "file_size": 1048576,
            "mime_type": "application/pdf",
            "last_modified": "2024-06-01T00:00:00Z",
            "program_name": "MTM The Future Today",
            "category": "Forms",
            "subcategory": "cmr_forms",
            "tags": ["cmr", "mtm"],
        },
        {
            "id": "c2",
            "bucket_name": "another-bucket",
            "file_name": "stray.pdf",
            "file_path": "stray.pdf",
            "file_url": None,
            "file_size": None,
            "mime_type": None,
            "last_modified": None,
        },
        {
            "id": "c3",
            "bucket_name": BUCKET,
            "file_name": "a1c_protocol.pdf",
            "file_path": "HbA1C/protocols/a1c_protocol.pdf",
            "file_url": None,
            "file_size": None,
            "mime_type": None,
            "last_modified": None,
            "created_at": "2024-02-01T00:00:00Z",
            "program_name": None,
        },
    ]


@pytest.fixture
def storage_tree() -> Dict[str, List[Dict[str, Any]]]:
    """Directory listings for the recursive traversal."""
    return {
        "": [
            {"name": "TimeMyMeds", "id": None, "metadata": None},
            {"name": "patienthandouts", "id": None, "metadata": None},
            {"name": "notes.txt", "id": "t0", "metadata": None},
        ],
        "TimeMyMeds": [{"name": "forms", "id": None, "metadata": None}],
        "TimeMyMeds/forms": [
            {"name": "intake", "id": None, "metadata": None},
            {
                "name": "checklist.pdf",
                "id": "t1",
                "updated_at": "2024-01-02T00:00:00Z",
                "metadata": {"size": 1024, "mimetype": "application/pdf"},
            },
        ],
        "TimeMyMeds/forms/intake": [],
        "patienthandouts": [{"name": "ZoneTools", "id": None, "metadata": None}],
        "patienthandouts/ZoneTools": [
            {"name": "copd_zone", "id": "t2", "metadata": {"size": 2048}},
        ],
    }


@pytest.fixture
def fake_backend(rpc_rows: List[Dict[str, Any]]) -> FakeStorageClient:
    """Backend whose catalog is empty and whose RPC answers with ``rpc_rows``."""
    return FakeStorageClient(catalog=[], rpc_rows=rpc_rows)


@pytest.fixture
def sample_items() -> List[ResourceItem]:
    """Five normalized resources across programs."""
    return [
        ResourceItem(
            id="r1",
            name="Blood Pressure Log",
            type=ResourceType.PATIENT_HANDOUTS,
            program="general",
            category="Cardiovascular Conditions",
            tags=("bp", "handout"),
            last_updated="2024-03-01T00:00:00Z",
            download_count=12,
        ),
        ResourceItem(
            id="r2",
            name="Appointment Calendar",
            type=ResourceType.DOCUMENTATION_FORMS,
            program="tmm",
            category="Scheduling",
            tags=("sync",),
            last_updated="2024-05-01T00:00:00Z",
            download_count=40,
        ),
        ResourceItem(
            id="r3",
            name="Sync Protocol",
            type=ResourceType.PROTOCOLS,
            program="tmm",
            last_updated="2023-12-01T00:00:00Z",
        ),
        ResourceItem(
            id="r4",
            name="Contraceptive Intake",
            type=ResourceType.DOCUMENTATION_FORMS,
            program="oc",
            category="Intake",
            tags=("intake", "sync"),
            download_count=7,
        ),
        ResourceItem(
            id="r5",
            name="CMR Worksheet",
            type=ResourceType.DOCUMENTATION_FORMS,
            program="mtmtft",
            category="Cmr",
            tags=("cmr",),
            last_updated="2024-06-01T00:00:00Z",
            download_count=99,
        ),
    ]


@pytest.fixture
def mock_aiohttp():
    """Mock aiohttp responses for testing."""
    with aioresponses.aioresponses() as m:
        yield m

"""
Base models and common enums for the crxq_catalog library.

This module contains the closed vocabularies (program slugs, resource types,
sort fields) and the pydantic base class shared by configuration models.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class ProgramSlug(str, Enum):
    """
    Short stable identifiers for the five clinical programs.

    Items carrying no program signal use ``GENERAL_PROGRAM`` instead.
    """

    TMM = "tmm"  # MedSync: TimeMyMeds
    MTMTFT = "mtmtft"  # MTM The Future Today
    TNT = "tnt"  # Test and Treat
    A1C = "a1c"  # HbA1C Testing
    OC = "oc"  # Oral Contraceptives


GENERAL_PROGRAM = "general"


class ResourceType(str, Enum):
    """Closed set of resource classifications."""

    DOCUMENTATION_FORMS = "Documentation Forms"
    CLINICAL_RESOURCES = "Clinical Resources"
    PATIENT_HANDOUTS = "Patient Handouts"
    PROTOCOLS = "Protocols"
    TRAINING_MATERIALS = "Training Materials"
    MEDICAL_BILLING = "Medical Billing"
    ADDITIONAL_RESOURCES = "Additional Resources"


class SortField(str, Enum):
    """Fields the query engine can sort on."""

    NAME = "name"
    LAST_UPDATED = "lastUpdated"
    DOWNLOAD_COUNT = "downloadCount"
    CATEGORY = "category"


class SortOrder(str, Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


class BaseConfig(BaseModel):
    """Base configuration class with common validation settings."""

    model_config = ConfigDict(
        use_enum_values=True, validate_assignment=True, extra="forbid"
    )


__all__ = [
    "ProgramSlug",
    "GENERAL_PROGRAM",
    "ResourceType",
    "SortField",
    "SortOrder",
    "BaseConfig",
]

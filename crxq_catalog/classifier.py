"""
Path classifier: derive program, resource type and category from a storage path.

Everything here is a pure function of the path tokens and sidecar metadata,
so repeated loads through different strategies classify a file identically.
Every branch has a default; nothing in this module raises on odd input.

Bucket layout understood by the classifier::

    <program folder>/<forms|protocols|resources|training>/<category...>/<file>
    <patienthandouts|clinicalguidelines|medicalbilling>/<category...>/<file>
    programs/<slug>/...                      (legacy layout)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from .models.base import GENERAL_PROGRAM, ProgramSlug, ResourceType
from .models.resource import StorageMetadata

KNOWN_SLUGS = frozenset(slug.value for slug in ProgramSlug)

# Top-level bucket folder -> program
PROGRAM_FOLDERS = {
    "mtmthefuturetoday": ProgramSlug.MTMTFT.value,
    "timemymeds": ProgramSlug.TMM.value,
    "testandtreat": ProgramSlug.TNT.value,
    "hba1c": ProgramSlug.A1C.value,
    "oralcontraceptives": ProgramSlug.OC.value,
}

LEGACY_PROGRAMS_FOLDER = "programs"

# Top-level library folders that fix the type for everything beneath them
LIBRARY_FOLDERS = {
    "patienthandouts": ResourceType.PATIENT_HANDOUTS,
    "clinicalguidelines": ResourceType.CLINICAL_RESOURCES,
    "medicalbilling": ResourceType.MEDICAL_BILLING,
}

# Type folders searched for below a program folder
TYPE_FOLDERS = {
    "forms": ResourceType.DOCUMENTATION_FORMS,
    "protocols": ResourceType.PROTOCOLS,
    "resources": ResourceType.CLINICAL_RESOURCES,
    "training": ResourceType.TRAINING_MATERIALS,
}

# Folder names whose display label is not derivable from the name itself
SPECIAL_LABELS = {
    # Program-specific
    "medflowsheets": "Medical Condition Flowsheets",
    "outcomestip": "Outcomes TIP Forms",
    "prescribercomm": "Prescriber Communication Forms",
    "druginteractions": "Drug Interactions",
    "needsdrugtherapy": "Needs Drug Therapy",
    "optimizemedicationtherapy": "Optimize Medication Therapy",
    "suboptimaldrugselection_hrm": "Suboptimal Drug Selection (HRM)",
    "utilityforms": "Utility Forms",
    # General libraries
    "cardiovascularconditions": "Cardiovascular Conditions",
    "infectionsdisease": "Infectious Disease",
    "painandopioids": "Pain and Opioids",
    "psychologicalconditions": "Psychological Conditions",
    "zonetools": "Zone Tools",
}

CATEGORY_SEPARATOR = " / "

_SEPARATORS_RE = re.compile(r"[_-]+")
_CAMEL_BOUNDARY_RE = re.compile(r"([a-z])([A-Z])")
_WHITESPACE_RE = re.compile(r"\s+")
_WORD_RE = re.compile(r"\w\S*")
_FOLDER_KEY_RE = re.compile(r"[\s_-]+")


@dataclass(frozen=True)
class Classification:
    """Domain labels derived from one storage path."""

    program: str = GENERAL_PROGRAM
    type: ResourceType = ResourceType.ADDITIONAL_RESOURCES
    category: Optional[str] = None


def folder_key(token: Optional[str]) -> str:
    """Lower-case a folder name and drop separators (``Patient Handouts`` -> ``patienthandouts``)."""
    return _FOLDER_KEY_RE.sub("", (token or "").lower())


def prettify_token(token: Optional[str]) -> Optional[str]:
    """
    Turn a folder name into a display label.

    Known folder names use a fixed label; anything else has separators
    replaced, camelCase split, whitespace collapsed and each word
    title-cased (``CMR`` -> ``Cmr``, ``patient_intake-v2`` -> ``Patient Intake V2``).
    """
    if not token:
        return None
    token = str(token)

    special = SPECIAL_LABELS.get(token.lower())
    if special:
        return special

    spaced = _SEPARATORS_RE.sub(" ", token)
    spaced = _CAMEL_BOUNDARY_RE.sub(r"\1 \2", spaced)
    spaced = _WHITESPACE_RE.sub(" ", spaced).strip()
    if not spaced:
        return None

    return _WORD_RE.sub(lambda m: m.group(0)[0].upper() + m.group(0)[1:].lower(), spaced)


def join_category(segments: Iterable[str]) -> Optional[str]:
    """Prettify folder segments and join them into one category label."""
    labels = [label for label in (prettify_token(s) for s in segments) if label]
    return CATEGORY_SEPARATOR.join(labels) if labels else None


def derive_program(
    tokens: Sequence[str], metadata: Optional[StorageMetadata] = None
) -> str:
    """
    Resolve the program slug for a path.

    Precedence: explicit metadata program, top-level program folder, legacy
    ``programs/<slug>/`` layout, then ``general``.
    """
    if metadata is not None and metadata.program:
        explicit = metadata.program.strip().lower()
        if explicit in KNOWN_SLUGS:
            return explicit

    top = folder_key(tokens[0]) if tokens else ""
    if top in PROGRAM_FOLDERS:
        return PROGRAM_FOLDERS[top]

    if top == LEGACY_PROGRAMS_FOLDER and len(tokens) >= 2:
        slug = (tokens[1] or "").strip().lower()
        if slug in KNOWN_SLUGS:
            return slug

    return GENERAL_PROGRAM


def derive_type_and_category(tokens: Sequence[str]) -> Classification:
    """
    Resolve resource type and category for a path.

    The returned ``program`` is left at its default; see ``classify``.
    """
    if not tokens:
        return Classification()

    folders = list(tokens[:-1])  # the last token is the file name

    library_type = LIBRARY_FOLDERS.get(folder_key(tokens[0]))
    if library_type is not None:
        return Classification(type=library_type, category=join_category(folders[1:]))

    for index in range(1, len(folders)):
        resource_type = TYPE_FOLDERS.get(folder_key(folders[index]))
        if resource_type is not None:
            return Classification(
                type=resource_type, category=join_category(folders[index + 1:])
            )

    return Classification()


def classify(
    tokens: Sequence[str], metadata: Optional[StorageMetadata] = None
) -> Classification:
    """Classify a tokenized storage path (plus optional sidecar metadata)."""
    tokens = [token for token in tokens if token]
    typed = derive_type_and_category(tokens)
    return Classification(
        program=derive_program(tokens, metadata),
        type=typed.type,
        category=typed.category,
    )


def classify_path(path: str, metadata: Optional[StorageMetadata] = None) -> Classification:
    """Classify a ``/``-delimited storage path."""
    return classify((path or "").split("/"), metadata)


__all__ = [
    "Classification",
    "KNOWN_SLUGS",
    "PROGRAM_FOLDERS",
    "LIBRARY_FOLDERS",
    "TYPE_FOLDERS",
    "SPECIAL_LABELS",
    "folder_key",
    "prettify_token",
    "join_category",
    "derive_program",
    "derive_type_and_category",
    "classify",
    "classify_path",
]

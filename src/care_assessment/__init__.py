"""care_assessment — multi-step care assessment SDK.

Public API:
    AssessmentSession — per-member wizard: edit, navigate, autosave, submit
    StepCatalog       — loads the YAML step catalog into typed models
    ValidationEngine  — evaluates field rules for a step
    ScoreAggregator   — completion percentage, submit gate, ADL total
    DraftPersistence  — dirty tracking, coalesced autosave, restore-on-load
    StepSequencer     — bounded step index

Models:
    AssessmentDraft   — the answers being collected
    SessionState      — immutable snapshot published after every command
    StepDefinition    — one wizard step
    ValidationResult  — per-step validation outcome
    SubmissionResult  — what a successful submit returns

Collaborators (host-replaceable):
    KeyValueStore     — ABC; in-memory, JSON-file and HTTP implementations
    Scheduler         — ABC; asyncio-loop and manual (test) implementations
    Submitter         — ABC; HttpSubmitter posts to the backend
    CareTierClassifier — ABC; ThresholdCareTierClassifier maps ADL totals
"""

from care_assessment.catalog import StepCatalog, default_catalog
from care_assessment.client import HttpDraftStore, HttpSubmitter
from care_assessment.clock import LoopScheduler, ManualScheduler, Scheduler
from care_assessment.errors import (
    NetworkError,
    ServerError,
    ServerValidationError,
    StepCatalogError,
    SubmissionError,
)
from care_assessment.interfaces import CareTierClassifier, Submitter
from care_assessment.models import (
    AssessmentDraft,
    DraftEnvelope,
    FieldRule,
    Gender,
    SessionState,
    StepDefinition,
    SubmissionResult,
    ValidationResult,
)
from care_assessment.persistence import DraftPersistence, draft_key
from care_assessment.scoring import ScoreAggregator, ThresholdCareTierClassifier
from care_assessment.sequencer import StepSequencer
from care_assessment.session import AssessmentSession
from care_assessment.storage import (
    InMemoryKeyValueStore,
    JsonFileKeyValueStore,
    KeyValueStore,
)
from care_assessment.validation import ValidationCache, ValidationEngine

__all__ = [
    # Session & components
    "AssessmentSession",
    "DraftPersistence",
    "ScoreAggregator",
    "StepCatalog",
    "StepSequencer",
    "ValidationCache",
    "ValidationEngine",
    "default_catalog",
    "draft_key",
    # Models
    "AssessmentDraft",
    "DraftEnvelope",
    "FieldRule",
    "Gender",
    "SessionState",
    "StepDefinition",
    "SubmissionResult",
    "ValidationResult",
    # Collaborators
    "CareTierClassifier",
    "HttpDraftStore",
    "HttpSubmitter",
    "InMemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "LoopScheduler",
    "ManualScheduler",
    "Scheduler",
    "Submitter",
    "ThresholdCareTierClassifier",
    # Errors
    "NetworkError",
    "ServerError",
    "ServerValidationError",
    "StepCatalogError",
    "SubmissionError",
]

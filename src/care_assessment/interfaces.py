"""Abstract interfaces for collaborators the engine depends on.

These ABCs define the contract that host-side implementations must fulfil.
The SDK ships one concrete submitter (:class:`~care_assessment.client.HttpSubmitter`)
and one classifier (:class:`~care_assessment.scoring.ThresholdCareTierClassifier`);
anything else plugs in here.

Typical integration flow::

    session = AssessmentSession(
        "member-42",
        store=JsonFileKeyValueStore("/var/lib/drafts"),
        scheduler=LoopScheduler(),
        submitter=HttpSubmitter("https://care.example.org"),
    )
    # ... update_field / next_step as the user fills the form ...
    result = await session.submit()
"""

from abc import ABC, abstractmethod

from care_assessment.models.draft import AssessmentDraft
from care_assessment.models.session import SubmissionResult


class Submitter(ABC):
    """Sends a finished draft to the backend.

    Implementations raise one of :class:`~care_assessment.errors.NetworkError`,
    :class:`~care_assessment.errors.ServerValidationError` or
    :class:`~care_assessment.errors.ServerError` on failure.  Retries and
    timeouts are the implementation's business; the session never retries.
    """

    @abstractmethod
    async def submit(self, draft: AssessmentDraft) -> SubmissionResult:
        """Submit ``draft`` and return the backend's acknowledgement."""
        ...


class CareTierClassifier(ABC):
    """Maps the four ADL levels to a qualitative care tier.

    The engine stores raw sub-scores only; clinical grading is left to the
    host, which injects a classifier with thresholds it is accountable for.
    """

    @abstractmethod
    def classify(self, levels: tuple[int, int, int, int]) -> str:
        """Return the tier for (mobility, eating, toilet, communication)."""
        ...

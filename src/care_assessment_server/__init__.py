"""care_assessment_server — FastAPI REST API for care assessments.

Receives submitted assessments from the SDK's ``HttpSubmitter``, serves a
member's assessment history, stores drafts for ``HttpDraftStore``, and
exposes the step catalog as reference data.
"""

"""Assessment engine constants shared across the SDK.

These values are referenced by the session, persistence layer, and
validation engine.  They mirror conventions encoded in the bundled step
catalog under ``definitions/v1/``.

Several constants can be overridden via environment variables so that
deployments can tune autosave and draft retention without code changes.
"""

import os

# Delay between the first unsaved edit and the automatic draft write.
# Overridable via AUTOSAVE_INTERVAL_SECONDS env var.
AUTOSAVE_INTERVAL_SECONDS = float(os.getenv("AUTOSAVE_INTERVAL_SECONDS", "30"))

# Persisted drafts live under "{namespace}:{version}:{member_id}".  Bumping
# the version orphans drafts written by an incompatible schema instead of
# loading them into the new one.
DRAFT_KEY_NAMESPACE = os.getenv("DRAFT_KEY_NAMESPACE", "assessment-draft")
DRAFT_SCHEMA_VERSION = os.getenv("DRAFT_SCHEMA_VERSION", "v1")

# Persisted drafts older than this are ignored on restore.
# 0 disables the age check.
DRAFT_MAX_AGE_HOURS = float(os.getenv("DRAFT_MAX_AGE_HOURS", "24"))

# Lower bound for birth_year; the upper bound is always the current year.
BIRTH_YEAR_MIN = int(os.getenv("BIRTH_YEAR_MIN", "1900"))

# The four Activities-of-Daily-Living sub-scores, in catalog order.
ADL_FIELDS: tuple[str, ...] = (
    "mobility_level",
    "eating_level",
    "toilet_level",
    "communication_level",
)

# Key used in the errors map for submission failures.
SUBMIT_ERROR_KEY = "submit"

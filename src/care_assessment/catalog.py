"""StepCatalog — loads the wizard step definitions from YAML into typed models.

This is the single source of truth for step structure at runtime.  The
catalog is loaded once (at host startup) and shared by every session; a
broken catalog is a configuration fault and is rejected here rather than
surfacing later as odd navigation behaviour.

Usage::

    catalog = StepCatalog()         # defaults to the bundled definitions/v1
    catalog.load()

    step = catalog.get_step(0)
    owners = catalog.steps_owning("birth_year")
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterable, Mapping

import yaml
from pydantic import ValidationError

from care_assessment.errors import StepCatalogError
from care_assessment.models.draft import AssessmentDraft
from care_assessment.models.step import FieldRule, StepDefinition

logger = logging.getLogger(__name__)

_DEFAULT_DEFINITION = Path(__file__).resolve().parent / "definitions" / "v1" / "steps.yaml"


def load_yaml(path: Path | str) -> Any:
    """Load a single YAML file and return the parsed contents."""
    if isinstance(path, str):
        path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Missing YAML file: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f)


class StepCatalog:
    """Ordered step definitions plus the field rules they reference.

    Attributes populated after :meth:`load`:

        steps   — list[StepDefinition] in display order
        fields  — dict[field_name, FieldRule]
    """

    def __init__(self, definition_path: str | Path | None = None) -> None:
        self._path = Path(definition_path) if definition_path else _DEFAULT_DEFINITION
        self.steps: list[StepDefinition] = []
        self.fields: dict[str, FieldRule] = {}
        # field name -> indexes of the steps that own it
        self._owners: dict[str, list[int]] = {}

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @classmethod
    def from_definitions(
        cls,
        steps: Iterable[Mapping[str, Any] | StepDefinition],
        fields: Mapping[str, Mapping[str, Any] | FieldRule],
    ) -> StepCatalog:
        """Build and validate a catalog from in-memory definitions."""
        catalog = cls()
        catalog._populate({"steps": list(steps), "fields": dict(fields)})
        return catalog

    def load(self) -> None:
        """Parse the YAML definition file and validate it.

        Raises ``FileNotFoundError`` if the file is missing and
        :class:`StepCatalogError` if its contents are malformed.
        """
        raw = load_yaml(self._path)
        self._populate(raw)
        logger.info(
            "StepCatalog loaded: %d steps, %d field rules from %s",
            len(self.steps), len(self.fields), self._path,
        )

    def _populate(self, raw: Any) -> None:
        if not isinstance(raw, dict):
            raise StepCatalogError("Step catalog must be a mapping with 'steps' and 'fields'")

        raw_steps = raw.get("steps") or []
        raw_fields = raw.get("fields") or {}
        if not raw_steps:
            raise StepCatalogError("Step catalog defines no steps")

        try:
            fields = {
                name: rule if isinstance(rule, FieldRule) else FieldRule.model_validate(rule)
                for name, rule in raw_fields.items()
            }
            steps: list[StepDefinition] = []
            for index, entry in enumerate(raw_steps):
                if isinstance(entry, StepDefinition):
                    steps.append(entry.model_copy(update={"order_index": index}))
                else:
                    steps.append(StepDefinition.model_validate({**entry, "order_index": index}))
        except ValidationError as exc:
            raise StepCatalogError(f"Malformed step catalog: {exc}") from exc

        self._check(steps, fields)

        self.steps = steps
        self.fields = fields
        self._owners = {}
        for step in steps:
            for name in step.fields:
                self._owners.setdefault(name, []).append(step.order_index)

    @staticmethod
    def _check(steps: list[StepDefinition], fields: dict[str, FieldRule]) -> None:
        """Reject catalogs that would misbehave at runtime."""
        draft_fields = set(AssessmentDraft.model_fields)

        unknown_rules = set(fields) - draft_fields
        if unknown_rules:
            raise StepCatalogError(f"Field rules for unknown draft fields: {sorted(unknown_rules)}")

        seen_ids: set[str] = set()
        for step in steps:
            if step.id in seen_ids:
                raise StepCatalogError(f"Duplicate step id: {step.id}")
            seen_ids.add(step.id)

            overlap = set(step.required_fields) & set(step.optional_fields)
            if overlap:
                raise StepCatalogError(
                    f"Step {step.id} lists {sorted(overlap)} as both required and optional"
                )
            for name in step.fields:
                if name not in draft_fields:
                    raise StepCatalogError(f"Step {step.id} references unknown field: {name}")
                if name not in fields:
                    raise StepCatalogError(f"Step {step.id} references field without a rule: {name}")

        for rule_name, rule in fields.items():
            if rule.type == "choice" and not rule.values:
                raise StepCatalogError(f"Choice field {rule_name} has no values")
            if rule.type == "ordinal" and (rule.min is None or rule.max is None):
                raise StepCatalogError(f"Ordinal field {rule_name} needs min and max")
            if rule.min is not None and rule.max is not None and rule.min > rule.max:
                raise StepCatalogError(f"Field {rule_name} has min > max")

        terminals = [s for s in steps if s.terminal]
        if len(terminals) > 1:
            raise StepCatalogError("At most one terminal step is allowed")
        if terminals and terminals[0] is not steps[-1]:
            raise StepCatalogError(f"Terminal step {terminals[0].id} must be the last step")

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    def get_step(self, index: int) -> StepDefinition:
        """Return the step at ``index``.  Raises ``KeyError`` if out of range."""
        if not 0 <= index < len(self.steps):
            raise KeyError(f"Step index out of range: {index}")
        return self.steps[index]

    def index_of(self, step_id: str) -> int:
        """Return the index of the step with id ``step_id``."""
        for step in self.steps:
            if step.id == step_id:
                return step.order_index
        raise KeyError(f"Unknown step id: {step_id}")

    def field_rule(self, name: str) -> FieldRule | None:
        return self.fields.get(name)

    def steps_owning(self, name: str) -> list[int]:
        """Indexes of every step that lists ``name`` as required or optional."""
        return list(self._owners.get(name, []))

    @property
    def mandatory_steps(self) -> list[StepDefinition]:
        """Non-terminal steps whose required fields gate submission."""
        return [s for s in self.steps if s.is_required_step and not s.terminal]


@lru_cache(maxsize=1)
def default_catalog() -> StepCatalog:
    """Return the bundled v1 catalog, loaded once per process."""
    catalog = StepCatalog()
    catalog.load()
    return catalog

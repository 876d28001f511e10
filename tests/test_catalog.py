"""StepCatalog loading and configuration checks."""

import pytest

from care_assessment.catalog import StepCatalog, default_catalog, load_yaml
from care_assessment.errors import StepCatalogError

FIELDS = {
    "gender": {"label": "Gender", "type": "choice", "values": ["M", "F"]},
    "mobility_level": {"label": "Mobility", "type": "ordinal", "min": 1, "max": 3},
}


class TestBundledCatalog:

    def test_step_order(self, catalog):
        ids = [s.id for s in catalog.steps]
        assert ids == [
            "basic-info",
            "adl-mobility",
            "adl-eating",
            "adl-toilet",
            "adl-communication",
            "ltci-grade",
            "additional-info",
            "review",
        ]

    def test_order_index_matches_position(self, catalog):
        for i, step in enumerate(catalog.steps):
            assert step.order_index == i, f"{step.id} has order_index {step.order_index}"

    def test_review_is_terminal_and_last(self, catalog):
        assert catalog.steps[-1].terminal is True
        assert not any(s.terminal for s in catalog.steps[:-1])

    def test_mandatory_steps(self, catalog):
        ids = [s.id for s in catalog.mandatory_steps]
        assert ids == [
            "basic-info", "adl-mobility", "adl-eating", "adl-toilet", "adl-communication",
        ]

    def test_adl_rules_are_one_to_three(self, catalog):
        for name in ("mobility_level", "eating_level", "toilet_level", "communication_level"):
            rule = catalog.field_rule(name)
            assert (rule.type, rule.min, rule.max) == ("ordinal", 1, 3), name

    def test_steps_owning(self, catalog):
        assert catalog.steps_owning("mobility_level") == [1]
        assert catalog.steps_owning("notes") == [catalog.index_of("additional-info")]
        assert catalog.steps_owning("nonexistent") == []

    def test_get_step_out_of_range(self, catalog):
        with pytest.raises(KeyError):
            catalog.get_step(catalog.total_steps)
        with pytest.raises(KeyError):
            catalog.get_step(-1)

    def test_index_of_unknown(self, catalog):
        with pytest.raises(KeyError):
            catalog.index_of("nope")

    def test_default_catalog_is_cached(self):
        assert default_catalog() is default_catalog()


class TestCatalogErrors:

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            StepCatalog(tmp_path / "missing.yaml").load()

    def test_empty_file(self, tmp_path):
        path = tmp_path / "steps.yaml"
        path.write_text("")
        with pytest.raises(StepCatalogError):
            StepCatalog(path).load()

    def test_no_steps(self):
        with pytest.raises(StepCatalogError, match="no steps"):
            StepCatalog.from_definitions([], FIELDS)

    def test_unknown_field(self):
        with pytest.raises(StepCatalogError):
            StepCatalog.from_definitions(
                [{"id": "a", "title": "A", "required_fields": ["shoe_size"]}], FIELDS,
            )

    def test_duplicate_ids(self):
        steps = [
            {"id": "a", "title": "A", "required_fields": ["gender"]},
            {"id": "a", "title": "A again", "required_fields": ["mobility_level"]},
        ]
        with pytest.raises(StepCatalogError):
            StepCatalog.from_definitions(steps, FIELDS)

    def test_field_without_rule(self):
        with pytest.raises(StepCatalogError):
            StepCatalog.from_definitions(
                [{"id": "a", "title": "A", "required_fields": ["eating_level"]}], FIELDS,
            )

    def test_terminal_must_be_last(self):
        steps = [
            {"id": "review", "title": "Review", "terminal": True},
            {"id": "a", "title": "A", "required_fields": ["gender"]},
        ]
        with pytest.raises(StepCatalogError):
            StepCatalog.from_definitions(steps, FIELDS)

    def test_malformed_rule(self):
        bad = {"gender": {"label": "Gender", "type": "colour"}}
        with pytest.raises(StepCatalogError, match="Malformed"):
            StepCatalog.from_definitions(
                [{"id": "a", "title": "A", "required_fields": ["gender"]}], bad,
            )

    def test_from_definitions_assigns_order(self):
        c = StepCatalog.from_definitions(
            [
                {"id": "one", "title": "One", "required_fields": ["gender"]},
                {"id": "two", "title": "Two", "required_fields": ["mobility_level"]},
            ],
            FIELDS,
        )
        assert [s.order_index for s in c.steps] == [0, 1]
        assert c.total_steps == 2


def test_load_yaml_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_yaml(tmp_path / "nope.yaml")

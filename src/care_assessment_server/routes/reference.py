"""Reference data endpoints — the step catalog.

Read-only and unauthenticated: the catalog is the same for every member.
"""

from fastapi import APIRouter, Depends

from care_assessment.catalog import StepCatalog

from care_assessment_server.dependencies import get_catalog

router = APIRouter(tags=["reference"])


@router.get("/steps")
def list_steps(catalog: StepCatalog = Depends(get_catalog)) -> list[dict]:
    """Return every step with the rules of the fields it owns."""
    return [
        {
            "id": step.id,
            "title": step.title,
            "description": step.description,
            "order_index": step.order_index,
            "is_required_step": step.is_required_step,
            "terminal": step.terminal,
            "required_fields": list(step.required_fields),
            "optional_fields": list(step.optional_fields),
            "fields": {
                name: catalog.fields[name].model_dump(exclude_none=True)
                for name in step.fields
            },
        }
        for step in catalog.steps
    ]

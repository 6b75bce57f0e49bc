"""
Form validation for catalog mutations.

Collects every rule violation of a submitted form (never fail-fast)
into an ordered list of FieldError and pairs it with the entity to
render: the validated entity on success, an unsaved draft otherwise.
Rejected forms also keep the raw submitted values so inputs the draft
cannot represent, such as unparsable dates, are shown as typed.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type

import structlog
from fastapi import Request
from pydantic import ValidationError

from catalog.src.models.forms import CatalogForm

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class FieldError:
    """One violated rule."""

    field: str
    message: str


@dataclass
class FormResult:
    """Outcome of validating a submitted form."""

    entity: Any
    errors: List[FieldError] = field(default_factory=list)
    submitted: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_valid(self) -> bool:
        return not self.errors


def collect_errors(exc: ValidationError) -> List[FieldError]:
    """Flatten pydantic errors into FieldErrors, in field declaration order."""
    errors = []
    for error in exc.errors():
        loc = error.get("loc") or ()
        name = str(loc[0]) if loc else "__all__"
        errors.append(FieldError(field=name, message=error["msg"]))
    return errors


def validate_form(
    form_cls: Type[CatalogForm],
    data: Dict[str, Any],
    entity_id: Optional[str] = None,
) -> FormResult:
    """
    Validate submitted form data.

    Args:
        form_cls: Form model declaring the rules
        data: Raw submitted values keyed by field name
        entity_id: Id of the entity being updated, None for creates

    Returns:
        FormResult with the entity and any violations
    """
    try:
        form = form_cls.model_validate(data)
    except ValidationError as exc:
        errors = collect_errors(exc)
        logger.info(
            "form_validation_failed",
            form=form_cls.__name__,
            fields=[error.field for error in errors],
        )
        return FormResult(
            entity=form_cls.draft(data, entity_id), errors=errors, submitted=data
        )

    return FormResult(entity=form.to_entity(entity_id))


async def read_form(request: Request, form_cls: Type[CatalogForm]) -> Dict[str, Any]:
    """
    Read an urlencoded or multipart body into a plain dict.

    Multi-valued fields listed in form_cls.list_fields keep every value;
    other fields keep the last one.
    """
    form = await request.form()
    data: Dict[str, Any] = {}
    for name in form_cls.model_fields:
        if name in form_cls.list_fields:
            data[name] = form.getlist(name)
        elif name in form:
            data[name] = form[name]
    return data

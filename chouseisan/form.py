"""Fill the chouseisan event form from a schedule request.

The page form has three fields: event name (`name`), memo (`comment`) and
candidate dates (`kouho`). A field set to None is treated as absent from the
page, which is how a half-loaded or unrelated page shows up.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping, Optional, Tuple

from .cli_errors import RequestValidationError
from .constants import FORM_FIELDS
from .generator import ScheduleGenerator
from .model import ScheduleRequest, missing_fields

LOG = logging.getLogger(__name__)

MSG_ALL_FILLED = "All fields were filled."
MSG_INVALID_DATA = "Invalid data was sent"
MSG_FIELDS_NOT_FOUND = (
    "chouseisan input fields were not found. "
    "Check that the page has finished loading."
)
MSG_FILL_FAILED = "Failed to fill the schedule. Please check the data."


@dataclass(frozen=True)
class FormState:
    name: Optional[str] = None
    comment: Optional[str] = None
    kouho: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "FormState":
        """Omitted keys are missing elements; a key with no value is an empty field."""
        data = data or {}
        values = {}
        for key in FORM_FIELDS:
            if key not in data:
                values[key] = None
                continue
            value = data[key]
            values[key] = "" if value is None else str(value)
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {k: getattr(self, k) for k in FORM_FIELDS if getattr(self, k) is not None}

    def has_any_field(self) -> bool:
        return any(getattr(self, k) is not None for k in FORM_FIELDS)


@dataclass(frozen=True)
class FillResult:
    form: FormState
    success_count: int
    total_fields: int = len(FORM_FIELDS)


@dataclass(frozen=True)
class SubmissionResponse:
    success: bool
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"success": self.success, "message": self.message}


def merge_candidates(existing: Optional[str], generated: str, overwrite: bool) -> str:
    """Replace the candidate text, or append below what is already there."""
    if overwrite or not existing:
        return generated
    return f"{existing}\n{generated}"


def fill_form(form: FormState, request: ScheduleRequest, generator: ScheduleGenerator) -> FillResult:
    """Write title, memo and candidates into whichever fields exist."""
    filled = form
    count = 0
    if form.name is not None:
        filled = replace(filled, name=request.event_title)
        count += 1
    if form.comment is not None:
        filled = replace(filled, comment=request.memo or "")
        count += 1
    if form.kouho is not None:
        text = generator.generate(request)
        filled = replace(filled, kouho=merge_candidates(form.kouho, text, request.overwrite_existing))
        count += 1
    return FillResult(form=filled, success_count=count)


def build_response(result: FillResult, form: FormState) -> SubmissionResponse:
    """Summarize a fill for the user; success requires the candidate field."""
    if form.kouho is not None and result.success_count > 0:
        if result.success_count == result.total_fields:
            return SubmissionResponse(True, MSG_ALL_FILLED)
        return SubmissionResponse(
            True, f"{result.success_count} of {result.total_fields} fields were filled."
        )
    if not form.has_any_field():
        return SubmissionResponse(False, MSG_FIELDS_NOT_FOUND)
    return SubmissionResponse(False, MSG_FILL_FAILED)


def handle_submission(
    data: Any,
    form: FormState,
    generator: ScheduleGenerator,
) -> Tuple[SubmissionResponse, FormState]:
    """Validate a submitted record, fill the form, and report the outcome.

    Returns:
        `(response, filled_form)`; the form is unchanged when the record
        is rejected.
    """
    if not isinstance(data, Mapping):
        return SubmissionResponse(False, MSG_INVALID_DATA), form
    missing = missing_fields(data)
    if missing:
        return SubmissionResponse(False, f"Required fields are missing: {', '.join(missing)}"), form
    try:
        request = ScheduleRequest.from_dict(data).validate()
    except RequestValidationError as exc:
        LOG.debug("Rejected submission: %s", exc)
        return SubmissionResponse(False, exc.message), form
    result = fill_form(form, request, generator)
    return build_response(result, form), result.form

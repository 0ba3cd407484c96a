"""
Form Validation
================
Turns a raw form snapshot into blocking errors and advisory clinical
warnings.  Pure: no logging, no state.  The workflow controller decides
what to do with the outcome.
"""

from __future__ import annotations

from typing import Mapping

from heartguard.app.fields import (
    FIELD_SCHEMA,
    FIELDS_BY_NAME,
    REQUIRED_FIELDS,
    FieldKind,
    humanize,
    is_blank,
    to_code,
    to_number,
)
from heartguard.app.schemas import ValidationOutcome

# Plausibility thresholds (advisory only)
AGE_RANGE = FIELDS_BY_NAME["age"].bounds
BP_RANGE = FIELDS_BY_NAME["bp"].bounds
BP_ELEVATED = 140
CHOLESTEROL_RANGE = FIELDS_BY_NAME["cholesterol"].bounds
CHOLESTEROL_HIGH = 240
HR_TOLERANCE = 1.1


def _outside(value: float, bounds: tuple[float, float]) -> bool:
    low, high = bounds
    return value < low or value > high


def _required_errors(snapshot: Mapping[str, str]) -> list[str]:
    return [
        f"{humanize(name)} is required"
        for name in REQUIRED_FIELDS
        if is_blank(snapshot.get(name))
    ]


def _format_errors(snapshot: Mapping[str, str]) -> list[str]:
    """Errors for values the scoring request could not be built from."""
    errors: list[str] = []
    for spec in FIELD_SCHEMA:
        raw = snapshot.get(spec.name)
        if is_blank(raw):
            # Required blanks were already reported above.
            if not spec.required:
                errors.append(f"{humanize(spec.name)} is required")
            continue
        if spec.kind is FieldKind.CONTINUOUS:
            if to_number(raw) is None:
                errors.append(f"{humanize(spec.name)} must be a number")
        elif to_code(spec, raw) is None:
            codes = ", ".join(str(c) for c in spec.codes)
            errors.append(f"{humanize(spec.name)} must be one of {codes}")
    return errors


def _warnings(snapshot: Mapping[str, str]) -> list[str]:
    warnings: list[str] = []

    age = to_number(snapshot.get("age"))
    if age is not None and _outside(age, AGE_RANGE):
        warnings.append("Age should typically be between 20-100 years")

    bp = to_number(snapshot.get("bp"))
    if bp is not None:
        if _outside(bp, BP_RANGE):
            warnings.append("Blood pressure outside typical range (50-250 mm Hg)")
        if bp > BP_ELEVATED:
            warnings.append("Elevated blood pressure detected")

    chol = to_number(snapshot.get("cholesterol"))
    if chol is not None:
        if _outside(chol, CHOLESTEROL_RANGE):
            warnings.append("Cholesterol outside typical range (100-600 mg/dl)")
        if chol > CHOLESTEROL_HIGH:
            warnings.append("High cholesterol level detected")

    hr = to_number(snapshot.get("max_hr"))
    if age and hr:
        predicted_max = 220 - age
        if hr > predicted_max * HR_TOLERANCE:
            warnings.append("Heart rate exceeds typical maximum for age")

    return warnings


def validate(snapshot: Mapping[str, str]) -> ValidationOutcome:
    """Validate a form snapshot.

    Errors list missing required fields first (in declaration order of
    ``REQUIRED_FIELDS``), then malformed values.  Warnings flag clinically
    unusual but acceptable values and never block submission.
    """
    return ValidationOutcome(
        errors=_required_errors(snapshot) + _format_errors(snapshot),
        warnings=_warnings(snapshot),
    )

"""
Field Schema — Clinical Intake Parameters
==========================================
Declarative table of the thirteen clinical inputs collected by the
assessment form: kind, required-ness, plausibility bounds, categorical
encodings, defaults, and the key each one takes on the wire.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional


class FieldKind(str, Enum):
    CONTINUOUS = "continuous"
    CATEGORICAL = "categorical"


@dataclass(frozen=True)
class FieldOption:
    code: int
    label: str


@dataclass(frozen=True)
class FieldSpec:
    """One clinical parameter as the form and the scoring service see it."""
    name: str
    wire_name: str
    label: str
    kind: FieldKind
    required: bool = False
    bounds: Optional[tuple[float, float]] = None
    options: tuple[FieldOption, ...] = ()
    default: str = ""
    unit: str = ""

    @property
    def codes(self) -> tuple[int, ...]:
        return tuple(opt.code for opt in self.options)


_NO_YES = (FieldOption(0, "No"), FieldOption(1, "Yes"))

# ---------------------------------------------------------------------------
# The schema, in form declaration order.
# ---------------------------------------------------------------------------
FIELD_SCHEMA: tuple[FieldSpec, ...] = (
    FieldSpec("age", "Age", "Age", FieldKind.CONTINUOUS,
              required=True, bounds=(20, 100), unit="years"),
    FieldSpec("sex", "Sex", "Sex", FieldKind.CATEGORICAL,
              required=True,
              options=(FieldOption(0, "Female"), FieldOption(1, "Male"))),
    FieldSpec("chest_pain_type", "chest_pain_type", "Chest Pain Type",
              FieldKind.CATEGORICAL, default="1",
              options=(
                  FieldOption(1, "Typical angina"),
                  FieldOption(2, "Atypical angina"),
                  FieldOption(3, "Non-anginal pain"),
                  FieldOption(4, "Asymptomatic"),
              )),
    FieldSpec("bp", "BP", "Blood Pressure", FieldKind.CONTINUOUS,
              required=True, bounds=(50, 250), unit="mm Hg"),
    FieldSpec("cholesterol", "Cholesterol", "Cholesterol", FieldKind.CONTINUOUS,
              required=True, bounds=(100, 600), unit="mg/dl"),
    FieldSpec("fbs_over_120", "fbs_over_120", "Fasting Blood Sugar > 120 mg/dl",
              FieldKind.CATEGORICAL, default="0", options=_NO_YES),
    FieldSpec("ekg_results", "ekg_results", "Resting EKG Results",
              FieldKind.CATEGORICAL, default="0",
              options=(
                  FieldOption(0, "Normal"),
                  FieldOption(1, "ST-T abnormality"),
                  FieldOption(2, "LV hypertrophy"),
              )),
    FieldSpec("max_hr", "Max_HR", "Max Heart Rate", FieldKind.CONTINUOUS,
              required=True, unit="bpm"),
    FieldSpec("exercise_angina", "exercise_angina", "Exercise-Induced Angina",
              FieldKind.CATEGORICAL, default="0", options=_NO_YES),
    FieldSpec("st_depression", "ST_depression", "ST Depression",
              FieldKind.CONTINUOUS, required=True),
    FieldSpec("slope_st", "slope_st", "Slope of ST Segment",
              FieldKind.CATEGORICAL, default="1",
              options=(
                  FieldOption(1, "Upsloping"),
                  FieldOption(2, "Flat"),
                  FieldOption(3, "Downsloping"),
              )),
    FieldSpec("num_vessels_fluro", "num_vessels_fluro",
              "Vessels Colored by Fluoroscopy", FieldKind.CATEGORICAL,
              default="0",
              options=tuple(FieldOption(n, str(n)) for n in range(4))),
    FieldSpec("thallium", "Thallium", "Thallium Stress Test",
              FieldKind.CATEGORICAL, default="3",
              options=(
                  FieldOption(3, "Normal"),
                  FieldOption(6, "Fixed defect"),
                  FieldOption(7, "Reversible defect"),
              )),
)

FIELDS_BY_NAME: dict[str, FieldSpec] = {spec.name: spec for spec in FIELD_SCHEMA}

REQUIRED_FIELDS: tuple[str, ...] = (
    "age", "sex", "bp", "cholesterol", "max_hr", "st_depression",
)

# ---------------------------------------------------------------------------
# Sample profiles offered by the "Try Sample Data" shortcut
# ---------------------------------------------------------------------------
_SAMPLES: dict[str, dict[str, str]] = {
    "lowRisk": {
        "age": "35", "sex": "0", "chest_pain_type": "1", "bp": "120",
        "cholesterol": "180", "fbs_over_120": "0", "ekg_results": "0",
        "max_hr": "160", "exercise_angina": "0", "st_depression": "0",
        "slope_st": "1", "num_vessels_fluro": "0", "thallium": "3",
    },
    "mediumRisk": {
        "age": "54", "sex": "1", "chest_pain_type": "3", "bp": "130",
        "cholesterol": "240", "fbs_over_120": "0", "ekg_results": "0",
        "max_hr": "140", "exercise_angina": "0", "st_depression": "2.5",
        "slope_st": "2", "num_vessels_fluro": "0", "thallium": "3",
    },
    "highRisk": {
        "age": "65", "sex": "1", "chest_pain_type": "4", "bp": "160",
        "cholesterol": "300", "fbs_over_120": "1", "ekg_results": "2",
        "max_hr": "120", "exercise_angina": "1", "st_depression": "4.0",
        "slope_st": "3", "num_vessels_fluro": "2", "thallium": "7",
    },
}

SAMPLE_PROFILES: tuple[str, ...] = tuple(_SAMPLES)


def default_snapshot() -> dict[str, str]:
    """Return a fresh form snapshot holding every field's default."""
    return {spec.name: spec.default for spec in FIELD_SCHEMA}


def sample_snapshot(profile: str) -> dict[str, str]:
    """Return a fresh copy of a named sample profile.

    Raises ``KeyError`` for an unknown profile key.
    """
    return dict(_SAMPLES[profile])


def is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def completion_fraction(snapshot: Mapping[str, str]) -> float:
    """Share of required fields that currently hold a value."""
    filled = sum(1 for name in REQUIRED_FIELDS if not is_blank(snapshot.get(name)))
    return filled / len(REQUIRED_FIELDS)


def humanize(name: str) -> str:
    return name.replace("_", " ")


def option_label(name: str, code_text: Optional[str]) -> str:
    """Label of a categorical code, falling back to the raw text."""
    spec = FIELDS_BY_NAME[name]
    for opt in spec.options:
        if str(opt.code) == str(code_text).strip():
            return opt.label
    return "" if code_text is None else str(code_text)


def to_number(value: Optional[str]) -> Optional[float]:
    """Parse form text as a finite float, or ``None`` when it is not one."""
    if is_blank(value):
        return None
    try:
        number = float(str(value).strip())
    except ValueError:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def to_code(spec: FieldSpec, value: Optional[str]) -> Optional[int]:
    """Parse form text as one of ``spec``'s categorical codes."""
    if is_blank(value):
        return None
    try:
        code = int(str(value).strip())
    except ValueError:
        return None
    return code if code in spec.codes else None

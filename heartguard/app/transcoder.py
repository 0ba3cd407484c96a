"""
Request Transcoding
====================
Maps the user-facing form snapshot onto the scoring service's wire
schema: text to float/int coercion and key renaming.
"""

from __future__ import annotations

from typing import Mapping

from heartguard.app.fields import FIELD_SCHEMA, FieldKind, to_code, to_number
from heartguard.app.schemas import PredictionRequest


class TranscodeError(ValueError):
    """A snapshot value could not be converted to its wire type."""

    def __init__(self, field: str, value: object):
        self.field = field
        self.value = value
        super().__init__(f"Cannot encode field {field!r} from value {value!r}")


def transcode(snapshot: Mapping[str, str]) -> PredictionRequest:
    """Build the ``POST /predict`` payload from a form snapshot.

    Every field is mandatory on the wire, so a blank or malformed value
    anywhere raises :class:`TranscodeError`.
    """
    payload: dict[str, float | int] = {}
    for spec in FIELD_SCHEMA:
        raw = snapshot.get(spec.name)
        if spec.kind is FieldKind.CONTINUOUS:
            value = to_number(raw)
        else:
            value = to_code(spec, raw)
        if value is None:
            raise TranscodeError(spec.name, raw)
        payload[spec.wire_name] = value

    # Thallium is chosen from codes but the service types it as float.
    payload["Thallium"] = float(payload["Thallium"])
    return PredictionRequest(**payload)

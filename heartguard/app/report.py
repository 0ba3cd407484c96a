"""
Prediction Report Export
=========================
Renders one prediction as a fixed-section plain-text report and writes
it to disk under a per-result filename.
"""

from __future__ import annotations

from pathlib import Path

from heartguard.app.fields import option_label
from heartguard.app.schemas import PredictionResult

REPORT_TITLE = "Heart Disease Prediction Report"

PRESENCE_RECOMMENDATIONS = (
    "- Consult with a cardiologist immediately",
    "- Schedule further diagnostic tests",
    "- Monitor blood pressure regularly",
    "- Consider lifestyle modifications",
)

ABSENCE_RECOMMENDATIONS = (
    "- Maintain healthy lifestyle",
    "- Regular exercise recommended",
    "- Annual check-ups advised",
    "- Continue preventive measures",
)

DISCLAIMER = (
    "This prediction is based on machine learning algorithms and should not "
    "replace professional medical advice. Always consult with healthcare "
    "providers for accurate diagnosis."
)


def _section(title: str, lines: list[str] | tuple[str, ...]) -> list[str]:
    return [title, "-" * len(title), *lines, ""]


def recommendations_for(result: PredictionResult) -> tuple[str, ...]:
    if result.prediction_label == "Presence":
        return PRESENCE_RECOMMENDATIONS
    return ABSENCE_RECOMMENDATIONS


def format_report(result: PredictionResult) -> str:
    """Render ``result`` as the downloadable plain-text report.

    Output depends only on the result itself (its own timestamp and source
    snapshot), so the same result always renders identically.
    """
    data = result.source_snapshot
    lines = [REPORT_TITLE, "=" * len(REPORT_TITLE)]
    lines += [
        f"Date: {result.timestamp:%Y-%m-%d}",
        f"Time: {result.timestamp:%H:%M:%S}",
        "",
    ]
    lines += _section("PREDICTION RESULT", [
        f"Heart Disease: {result.prediction_label}",
        f"Risk Level: {result.risk_level}",
        f"Probability: {result.probability:.4f}",
        f"Confidence: {result.confidence_text}",
    ])
    lines += _section("PATIENT DATA", [
        f"Age: {data.get('age', '')} years",
        f"Sex: {option_label('sex', data.get('sex'))}",
        f"Blood Pressure: {data.get('bp', '')} mm Hg",
        f"Cholesterol: {data.get('cholesterol', '')} mg/dl",
        f"Max Heart Rate: {data.get('max_hr', '')} bpm",
    ])
    lines += _section("RECOMMENDATIONS", recommendations_for(result))
    lines += _section("DISCLAIMER", [DISCLAIMER])
    return "\n".join(lines)


def export_filename(result: PredictionResult) -> str:
    return f"HeartGuard_Prediction_{result.id}.txt"


def write_report(result: PredictionResult, directory: str | Path) -> Path:
    """Write the report for ``result`` into ``directory``; return its path."""
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / export_filename(result)
    path.write_text(format_report(result), encoding="utf-8")
    return path

"""
HeartGuard — Terminal Front End
================================
Drive the intake workflow from a shell: inspect the form fields, list
the sample profiles, and run assessments against the scoring service.

Usage
-----
    heartguard fields
    heartguard samples
    heartguard predict --sample highRisk --export-dir ./reports
    heartguard predict --set age=61 --set sex=1 --set bp=150 ...
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from typing import Optional, Sequence

from heartguard.app.client import API_URL, PredictionClient
from heartguard.app.fields import FIELD_SCHEMA, SAMPLE_PROFILES, FieldKind, sample_snapshot
from heartguard.app.services import ScoringClient, SubmitStatus, WorkflowController

LOG_LEVEL = os.getenv("HEARTGUARD_LOG_LEVEL", "INFO")


def _field_assignment(text: str) -> tuple[str, str]:
    name, sep, value = text.partition("=")
    if not sep or not name.strip():
        raise argparse.ArgumentTypeError(f"expected name=value, got {text!r}")
    return name.strip(), value.strip()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="heartguard", description="Heart disease risk assessment client"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("fields", help="List form fields and their encodings")
    sub.add_parser("samples", help="List the built-in sample profiles")

    predict = sub.add_parser("predict", help="Run one or more assessments")
    predict.add_argument(
        "--sample", action="append", default=[], choices=SAMPLE_PROFILES,
        help="Start from a sample profile (repeat to run several)",
    )
    predict.add_argument(
        "--set", dest="assignments", action="append", default=[],
        type=_field_assignment, metavar="NAME=VALUE",
        help="Override one field value",
    )
    predict.add_argument("--export-dir", type=str, default=None,
                         help="Write a text report for each successful prediction")
    predict.add_argument("--url", type=str, default=API_URL,
                         help="Scoring service base URL")
    return parser


def _print_fields() -> None:
    for spec in FIELD_SCHEMA:
        flag = "*" if spec.required else " "
        if spec.kind is FieldKind.CATEGORICAL:
            detail = ", ".join(f"{o.code}={o.label}" for o in spec.options)
        else:
            detail = spec.unit or "number"
        default = f" (default {spec.default})" if spec.default else ""
        print(f"{flag} {spec.name:<18} {spec.label}: {detail}{default}")


def _print_samples() -> None:
    for profile in SAMPLE_PROFILES:
        values = ", ".join(f"{k}={v}" for k, v in sample_snapshot(profile).items())
        print(f"{profile}: {values}")


async def _run_predictions(args: argparse.Namespace, controller: WorkflowController) -> int:
    status = SubmitStatus.FAILED
    for profile in args.sample or [None]:
        if profile is None:
            controller.reset()
        else:
            controller.load_sample(profile)
        for name, value in args.assignments:
            if not controller.edit(name, value):
                print(f"[⚠] Unknown field {name!r} ignored")

        status = await controller.submit()
        session = controller.session
        label = profile or "custom"
        for warning in controller.warnings:
            print(f"[⚠] {label}: {warning}")

        if status is not SubmitStatus.SUCCEEDED:
            print(f"[✗] {label}: {session.error}")
            continue

        result = session.result
        print(
            f"[✓] {label}: {result.prediction_label} — {result.risk_level} risk "
            f"(probability {result.probability:.4f}, confidence {result.confidence_text})"
        )
        if args.export_dir:
            path = controller.export_current(args.export_dir)
            print(f"[✓] Report saved to {path}")

    if len(controller.history):
        print()
        print(controller.history.to_frame().drop(columns=["id"]).to_string(index=False))
    return 0 if status is SubmitStatus.SUCCEEDED else 1


def main(argv: Optional[Sequence[str]] = None, client: Optional[ScoringClient] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    if args.command == "fields":
        _print_fields()
        return 0
    if args.command == "samples":
        _print_samples()
        return 0

    controller = WorkflowController(client=client or PredictionClient(base_url=args.url))
    return asyncio.run(_run_predictions(args, controller))


if __name__ == "__main__":
    sys.exit(main())

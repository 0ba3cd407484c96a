"""
Business Logic — Workflow Controller
=====================================
Owns the session state of one assessment (form snapshot, current result,
error, loading flag, history) and drives a submission through
validate -> transcode -> call -> record.  Every failure is turned into a
single user-facing message on the session; nothing raises past here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Mapping, Optional, Protocol

from heartguard.app.client import FailureKind, PredictionClient, SubmissionOutcome
from heartguard.app.fields import (
    FIELDS_BY_NAME,
    completion_fraction,
    default_snapshot,
    sample_snapshot,
)
from heartguard.app.history import HistoryStore
from heartguard.app.report import write_report
from heartguard.app.schemas import PredictionRequest, PredictionResult, ValidationOutcome
from heartguard.app.transcoder import TranscodeError, transcode
from heartguard.app.validator import validate

log = logging.getLogger(__name__)

GENERIC_FAILURE = "Failed to prepare the prediction request."


class ScoringClient(Protocol):
    async def settle(
        self, request: PredictionRequest, snapshot: Mapping[str, str]
    ) -> SubmissionOutcome: ...


class WorkflowState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    INVALID = "invalid"
    TRANSCODING = "transcoding"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class SubmitStatus(str, Enum):
    SUCCEEDED = "succeeded"
    INVALID = "invalid"
    FAILED = "failed"
    REJECTED = "rejected"


@dataclass
class SessionState:
    """Everything the presentation layer reads back after an action."""
    snapshot: dict[str, str] = field(default_factory=default_snapshot)
    result: Optional[PredictionResult] = None
    error: Optional[str] = None
    loading: bool = False
    validation: Optional[ValidationOutcome] = None
    failure: Optional[FailureKind] = None
    completion: float = 0.0


class WorkflowController:
    """Single-session assessment workflow.

    Parameters
    ----------
    client : ScoringClient, optional
        Anything exposing ``settle``; defaults to :class:`PredictionClient`.
    history : HistoryStore, optional
        Injected history; a fresh one is created when omitted.
    """

    def __init__(
        self,
        client: Optional[ScoringClient] = None,
        history: Optional[HistoryStore] = None,
    ):
        self.client = client if client is not None else PredictionClient()
        self.history = history if history is not None else HistoryStore()
        self.session = SessionState()
        self.session.completion = completion_fraction(self.session.snapshot)
        self.state = WorkflowState.IDLE

    # ---------------------------------------------------------------
    # State helpers
    # ---------------------------------------------------------------
    def _enter(self, state: WorkflowState) -> None:
        log.debug("Workflow %s -> %s", self.state.value, state.value)
        self.state = state

    def _replace_snapshot(self, snapshot: dict[str, str]) -> None:
        self.session.snapshot = snapshot
        self.session.completion = completion_fraction(snapshot)
        self.session.result = None
        self.session.error = None
        self.session.failure = None
        self.session.validation = None

    @property
    def warnings(self) -> list[str]:
        validation = self.session.validation
        return list(validation.warnings) if validation else []

    # ---------------------------------------------------------------
    # Form editing
    # ---------------------------------------------------------------
    def edit(self, name: str, value: str) -> bool:
        """Set one field's raw text. Ignored while a request is in flight."""
        if self.session.loading:
            log.info("Edit of %r ignored while submitting", name)
            return False
        if name not in FIELDS_BY_NAME:
            log.warning("Edit of unknown field %r ignored", name)
            return False
        self.session.snapshot[name] = value
        self.session.completion = completion_fraction(self.session.snapshot)
        return True

    def reset(self) -> bool:
        """Restore defaults and clear the current result. History is kept."""
        if self.session.loading:
            log.info("Reset ignored while submitting")
            return False
        self._replace_snapshot(default_snapshot())
        self._enter(WorkflowState.IDLE)
        return True

    def load_sample(self, profile: str) -> bool:
        if self.session.loading:
            log.info("Sample load ignored while submitting")
            return False
        try:
            snapshot = sample_snapshot(profile)
        except KeyError:
            log.warning("Unknown sample profile %r", profile)
            self.session.error = f"Unknown sample profile: {profile}"
            return False
        self._replace_snapshot(snapshot)
        log.info("Loaded sample profile %s", profile)
        return True

    # ---------------------------------------------------------------
    # Submission
    # ---------------------------------------------------------------
    def _fail(self, message: str, kind: FailureKind) -> SubmitStatus:
        self._enter(WorkflowState.FAILED)
        self.session.error = message
        self.session.failure = kind
        self._enter(WorkflowState.IDLE)
        return SubmitStatus.FAILED

    async def submit(self) -> SubmitStatus:
        """Validate, transcode and send the current snapshot.

        Returns how the attempt ended.  A prior result and the history are
        only ever replaced by a new success, never cleared by a failure.
        """
        if self.session.loading:
            log.warning("Submission ignored: a prediction request is already in flight")
            return SubmitStatus.REJECTED

        snapshot = dict(self.session.snapshot)

        self._enter(WorkflowState.VALIDATING)
        outcome = validate(snapshot)
        self.session.validation = outcome
        if outcome.warnings:
            log.warning("Validation warnings: %s", "; ".join(outcome.warnings))
        if not outcome.is_valid:
            self._enter(WorkflowState.INVALID)
            self.session.error = ", ".join(outcome.errors)
            self.session.failure = None
            log.info("Submission blocked: %s", self.session.error)
            self._enter(WorkflowState.IDLE)
            return SubmitStatus.INVALID

        self._enter(WorkflowState.TRANSCODING)
        try:
            request = transcode(snapshot)
        except TranscodeError:
            log.exception("Validated snapshot could not be transcoded")
            return self._fail(GENERIC_FAILURE, FailureKind.INTERNAL)

        self._enter(WorkflowState.SUBMITTING)
        self.session.loading = True
        self.session.error = None
        self.session.failure = None
        try:
            exchange = await self.client.settle(request, snapshot)
        except Exception:
            log.exception("Scoring client raised instead of reporting a failure")
            exchange = SubmissionOutcome(
                failure=FailureKind.INTERNAL, message=GENERIC_FAILURE
            )
        finally:
            self.session.loading = False

        if not exchange.ok:
            log.warning("Prediction failed (%s): %s", exchange.failure, exchange.message)
            return self._fail(
                exchange.message or GENERIC_FAILURE,
                exchange.failure or FailureKind.INTERNAL,
            )

        self._enter(WorkflowState.SUCCEEDED)
        self.history.record(exchange.result)
        self.session.result = exchange.result
        log.info(
            "Prediction %s: %s (%s risk, p=%.4f)",
            exchange.result.id,
            exchange.result.prediction_label,
            exchange.result.risk_level,
            exchange.result.probability,
        )
        self._enter(WorkflowState.IDLE)
        return SubmitStatus.SUCCEEDED

    # ---------------------------------------------------------------
    # Export
    # ---------------------------------------------------------------
    def export_current(self, directory: str | Path) -> Optional[Path]:
        """Write the current result's report; ``None`` when there is none."""
        if self.session.result is None:
            return None
        path = write_report(self.session.result, directory)
        log.info("Report written to %s", path)
        return path

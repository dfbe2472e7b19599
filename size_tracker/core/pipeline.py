"""
Run orchestration.

Sequences one CI run:

1. classify the trigger (skips touch neither git nor the store),
2. sync the record store from the remote,
3. build the artifact and measure it,
4. build the size record for the commit,
5. record it as a new baseline, or compare it against the history and
   render the trend chart.

Publishing is the last step of the record path, so a run that fails or is
cancelled earlier leaves the remote unchanged. Rendering only happens on the
compare path, which never writes.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Sequence, Union

from ..cancellation import Cancellation
from ..ci.build import build_artifact
from ..ci.context import CIContext
from ..config.loader import TrackerConfig
from ..errors import NoRemoteHistory
from ..logging import log_group
from ..storage.git import GitClient
from ..storage.models import SizeRecord
from ..storage.repository import RecordStore
from .chart import render_trend_chart
from .comparator import Report, compare
from .record_builder import build_record
from .trigger import Trigger, branch_name, classify_trigger

logger = logging.getLogger(__name__)

Builder = Callable[[Sequence[str], Union[str, Path], Union[str, Path]], int]


class RunOutcome(Enum):
    """How a run ended. Every outcome is a success."""
    SKIPPED = "skipped"
    RECORDED = "recorded"
    COMPARED = "compared"
    NO_BASELINE = "no_baseline"


@dataclass
class RunResult:
    """Outcome of a run plus what it produced."""
    outcome: RunOutcome
    trigger: Trigger
    record: Optional[SizeRecord] = None
    report: Optional[Report] = None
    chart_path: Optional[Path] = None


class SizeTracker:
    """Runs the size tracking pipeline for one CI event."""

    def __init__(
        self,
        config: TrackerConfig,
        context: CIContext,
        store: RecordStore,
        git: GitClient,
        builder: Builder = build_artifact,
        cancellation: Optional[Cancellation] = None,
    ):
        self.config = config
        self.context = context
        self.store = store
        self.git = git
        self.builder = builder
        self.cancellation = cancellation or Cancellation()

    def _checkpoint(self, step: str) -> None:
        self.cancellation.raise_if_cancelled(step)

    def classify(self) -> Trigger:
        default_branch = self.config.default_branch or self.context.default_branch
        return classify_trigger(
            event_name=self.context.event_name,
            ref_type=self.context.ref_type,
            ref=self.context.ref,
            default_branch=default_branch,
        )

    def run(self) -> RunResult:
        """Run the pipeline.

        Returns:
            RunResult describing what happened

        Raises:
            SizeTrackerError: On any fatal failure
            RunCancelled: If interrupted between steps
        """
        trigger = self.classify()
        if trigger == Trigger.SKIP:
            if self.context.ref_type == "tag" or self.context.ref.startswith("refs/tags/"):
                logger.info("Triggered by a tag, exiting")
            else:
                logger.info("Triggered by %s event, exiting", self.context.event_name)
            return RunResult(outcome=RunOutcome.SKIPPED, trigger=trigger)

        if trigger == Trigger.RECORD:
            logger.info("Adding size record for commit %s", self.context.sha)
        else:
            logger.info(
                "Comparing size of commit %s (%s on %s) against recorded sizes",
                self.context.sha, self.context.event_name, branch_name(self.context.ref) or "unknown ref"
            )

        self._checkpoint("setting up git")
        with log_group("Setting up git"):
            self.git.configure_identity()

        self._checkpoint("fetching size records")
        with log_group("Fetching size records"):
            try:
                self.store.sync_remote()
            except NoRemoteHistory as e:
                if trigger == Trigger.COMPARE:
                    logger.info("No size records to compare against (%s)", e)
                    return RunResult(outcome=RunOutcome.NO_BASELINE, trigger=trigger)
                logger.info("No size records yet, this run establishes the first baseline")

        self._checkpoint("building binary")
        size = self.builder(self.config.build_command, self.config.artifact_path, self.context.workspace)

        self._checkpoint("creating size record")
        with log_group("Creating size record"):
            record = build_record(self.context.sha, size, self.git.commit_timestamp(self.context.sha))
            logger.info("Size record: commit %s, %s, %d bytes",
                        record.commit, record.timestamp.isoformat(), record.size)

        if trigger == Trigger.RECORD:
            self._checkpoint("adding size record")
            with log_group("Adding size record"):
                self.store.save(record)
            return RunResult(outcome=RunOutcome.RECORDED, trigger=trigger, record=record)

        return self._compare(trigger, record)

    def _compare(self, trigger: Trigger, record: SizeRecord) -> RunResult:
        self._checkpoint("comparing size records")
        history = self.store.load_records()
        report = compare(record, history, window=self.config.sma_window)

        for line in report.headline():
            logger.info(line)

        if not report.has_baseline:
            return RunResult(outcome=RunOutcome.NO_BASELINE, trigger=trigger, record=record, report=report)

        self._checkpoint("rendering graph")
        chart_path = render_trend_chart(report.series, self.config.graph_path)
        return RunResult(
            outcome=RunOutcome.COMPARED,
            trigger=trigger,
            record=record,
            report=report,
            chart_path=chart_path,
        )

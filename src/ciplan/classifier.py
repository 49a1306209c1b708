# Copyright (c) Syntropy Systems
"""Daily vs. standard build classification."""
from __future__ import annotations

import logging
import os
import re
from typing import TYPE_CHECKING, Callable, Optional

from ciplan.config import CiplanConfig
from ciplan.errors import ClassificationAmbiguousError
from ciplan.models.build import BuildClassification, BuildReason, EnvironmentSignals
from ciplan.vcs import commit_message

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ciplan.variables import VariableStore

logger = logging.getLogger(__name__)

CommitLog = Callable[[str], Optional[str]]

_TRUTHY = {"true", "1", "yes"}


def signals_from_env(
    environ: Mapping[str, str] | None = None,
    config: CiplanConfig | None = None,
) -> EnvironmentSignals:
    """Read pipeline signals from environment variables."""
    env = os.environ if environ is None else environ
    cfg = config or CiplanConfig()

    reason = env.get(cfg.schedule_variable, "")
    force = env.get(cfg.force_feature_variable, "")
    commit_id = env.get(cfg.commit_variable, "").strip() or None

    return EnvironmentSignals(
        scheduled=reason.lower() == cfg.schedule_value.lower(),
        force_feature=force.strip().lower() in _TRUTHY,
        commit_id=commit_id,
    )


def _matches_feature_tag(
    signals: EnvironmentSignals,
    commit_log: CommitLog,
    config: CiplanConfig,
) -> bool:
    if signals.commit_id is None:
        msg = "No commit id in trigger metadata"
        raise ClassificationAmbiguousError(msg)

    try:
        message = commit_log(signals.commit_id)
    except Exception as e:
        msg = f"Commit log lookup failed for {signals.commit_id}: {e}"
        raise ClassificationAmbiguousError(msg) from e
    if message is None:
        msg = f"Could not read commit message for {signals.commit_id}"
        raise ClassificationAmbiguousError(msg)

    try:
        pattern = config.compiled_feature_pattern()
    except re.error as e:
        msg = f"Invalid feature tag pattern {config.feature_tag_pattern!r}: {e}"
        raise ClassificationAmbiguousError(msg) from e

    return pattern.search(message) is not None


def classify(
    signals: EnvironmentSignals,
    *,
    commit_log: CommitLog = commit_message,
    variables: VariableStore | None = None,
    config: CiplanConfig | None = None,
) -> BuildClassification:
    """Decide whether this run is a daily/full build.

    Rules, first match wins:
    1. Scheduled trigger.
    2. Feature tag in the commit message, or the force-feature override.
       This decision is also written to the build-variable store.
    3. Standard CI build.

    Never raises: unreadable trigger metadata is logged and counts as
    "no feature tag".
    """
    cfg = config or CiplanConfig()

    if signals.scheduled:
        logger.info("Scheduled trigger, daily build")
        return BuildClassification(
            is_daily=True, reason=BuildReason.SCHEDULED_TRIGGER
        )

    tagged = False
    try:
        tagged = _matches_feature_tag(signals, commit_log, cfg)
    except ClassificationAmbiguousError as e:
        logger.warning("Classification ambiguous, assuming no feature tag: %s", e)

    reason = BuildReason.NONE
    if tagged:
        reason = BuildReason.COMMIT_TAG
    elif signals.force_feature:
        reason = BuildReason.MANUAL_OVERRIDE

    if reason is BuildReason.NONE:
        logger.info("Standard CI build")
        return BuildClassification.standard()

    logger.info("Daily build requested (%s)", reason.value)
    if variables is not None:
        try:
            variables.set(cfg.daily_variable, "true")
        except OSError as e:
            logger.warning("Could not persist %s: %s", cfg.daily_variable, e)
    return BuildClassification(is_daily=True, reason=reason)

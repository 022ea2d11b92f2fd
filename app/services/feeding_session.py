"""Feeding session state machine.

`FeedingState` is the explicit container for the singleton state (history,
settings, active session, last side, prediction). Transitions mutate it in
memory only; persistence and reminders are driven by the feeding store.

    Idle --start_feeding--> Active(type, start) --stop_feeding--> Idle
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from app.models.feeding import ActiveSession, BreastSide, FeedingRecord, FeedingType, Settings
from app.services.calculations import calculate_duration
from app.services.predictor import Prediction, predict

logger = logging.getLogger(__name__)


class SessionAlreadyActiveError(Exception):
    """A feeding is already in progress."""

    def __init__(self, session: ActiveSession) -> None:
        super().__init__(f"A {session.type} feeding is already in progress")
        self.session = session


@dataclass
class FeedingState:
    feedings: list[FeedingRecord] = field(default_factory=list)
    settings: Settings = field(default_factory=Settings)
    active_session: Optional[ActiveSession] = None
    last_side: BreastSide = "right"
    prediction: Optional[Prediction] = None
    is_loading: bool = True

    @property
    def is_active(self) -> bool:
        return self.active_session is not None


def refresh_prediction(state: FeedingState) -> Optional[Prediction]:
    """Recompute the prediction from the most recent record.

    There is no prediction without history or while a session runs.
    """
    if not state.feedings or state.is_active:
        state.prediction = None
    else:
        state.prediction = predict(state.feedings[0].end_time, state.settings, state.last_side)
    return state.prediction


def start_feeding(state: FeedingState, feeding_type: FeedingType, now: datetime) -> ActiveSession:
    if state.active_session is not None:
        raise SessionAlreadyActiveError(state.active_session)

    session = ActiveSession(type=feeding_type, start_time=now)
    state.active_session = session
    if feeding_type in ("left", "right"):
        state.last_side = feeding_type
    state.prediction = None
    return session


def stop_feeding(
    state: FeedingState, quantity_ml: Optional[int], now: datetime
) -> Optional[FeedingRecord]:
    """Close the running session into a history record; None when idle."""
    session = state.active_session
    if session is None:
        return None

    if quantity_ml is not None and session.type != "bottle":
        # Kept as recorded; only bottle feeds are expected to carry a quantity
        logger.warning("Quantity %d ml recorded on a %s feeding", quantity_ml, session.type)

    end_time = max(now, session.start_time)
    record = FeedingRecord(
        id=str(int(end_time.timestamp() * 1000)),
        type=session.type,
        start_time=session.start_time,
        end_time=end_time,
        duration_minutes=calculate_duration(session.start_time, end_time),
        quantity_ml=quantity_ml,
    )
    state.feedings.insert(0, record)
    state.active_session = None
    refresh_prediction(state)
    return record


def apply_settings(state: FeedingState, settings: Settings) -> bool:
    """Replace settings. Returns True if the reminder must be rescheduled."""
    state.settings = settings
    if state.is_active or not state.feedings:
        return False
    refresh_prediction(state)
    return True


def clear_history(state: FeedingState) -> None:
    state.feedings.clear()
    state.prediction = None

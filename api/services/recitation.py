"""
Recitation log: saving a recording advances the caller's daily streak.

Streaks count UTC calendar days. A second recording on the same day keeps the
streak, a recording on the next day extends it, and any longer gap restarts
it at 1.
"""
from __future__ import annotations

import logging
from typing import Callable, Dict, Optional, Tuple

from models.base_model import epoch_now
from models.recording import Recording
from models.stores import RecordingStore, StreakStore
from models.streak import Streak

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


def day_number(epoch_seconds: int) -> int:
    return epoch_seconds // SECONDS_PER_DAY


def next_streak(streak: Optional[Streak], now: int) -> Dict[str, int]:
    """Streak fields after a recitation at `now`."""
    if streak is None or streak.last_recorded_at is None:
        current = 1
    else:
        gap = day_number(now) - day_number(streak.last_recorded_at)
        if gap <= 0:
            current = max(streak.current_streak, 1)
        elif gap == 1:
            current = streak.current_streak + 1
        else:
            current = 1
    longest = max(current, streak.longest_streak if streak else 0)
    return {"current_streak": current, "longest_streak": longest, "last_recorded_at": now}


class RecitationService:
    def __init__(self, recordings: RecordingStore, streaks: StreakStore, clock: Callable[[], int] = epoch_now):
        self.recordings = recordings
        self.streaks = streaks
        self.clock = clock

    def record(self, user_id: int, fields: dict) -> Tuple[Recording, Streak]:
        """Save a recording for `user_id` and advance their streak in one commit."""
        now = self.clock()
        recording = self.recordings.create(
            {
                "user_id": user_id,
                "file_url": fields["file_url"],
                "note": fields.get("note"),
                "chapter_id": fields.get("chapter_id"),
            },
            commit=False,
        )
        current = self.streaks.find_by_user(user_id)
        progress = next_streak(current, now)
        if current is None:
            streak = self.streaks.create({"user_id": user_id, **progress})
        else:
            streak = self.streaks.update(current.id, progress)
        logger.info(
            "Recording id=%s saved for user id=%s, streak now %s",
            recording.id,
            user_id,
            streak.current_streak,
        )
        return recording, streak

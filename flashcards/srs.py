"""
Spaced Repetition System (SRS) review scheduler.

This module implements an SM-2 variant for flashcard review. Given the prior
review state of a learner/card pair (or None for a first review) and the
learner's recall rating, it computes the next review state and due date.

Everything here is a pure function of its inputs: the current time is passed
in by the caller and nothing touches the database.
"""

import enum
import logging
import math
from dataclasses import dataclass, replace
from datetime import datetime, timedelta


logger = logging.getLogger(__name__)


# Algorithm constants
MIN_EASE_FACTOR = 1.3      # Floor below which intervals would stop growing usefully
DEFAULT_EASE_FACTOR = 2.5  # Starting ease factor for new cards
FIRST_INTERVAL = 1         # First successful review: 1 day
SECOND_INTERVAL = 6        # Second successful review: 6 days
MAX_INTERVAL = 36500       # About 100 years; keeps due dates inside datetime's range
PASSING_SCORE = 3         # Scores below this are a lapse


class InvalidQualityError(ValueError):
    """Raised when a rating is not one of the four allowed qualities."""


class Quality(str, enum.Enum):
    """Learner's self-reported recall strength, weakest first."""
    AGAIN = 'again'  # Total failure
    HARD = 'hard'    # Recalled with serious difficulty
    GOOD = 'good'    # Recalled with normal effort
    EASY = 'easy'    # Recalled effortlessly

    @property
    def score(self):
        return QUALITY_SCORES[self]

    # Strings are compared as ratings, never alphabetically; a string that
    # is not a rating raises InvalidQualityError.
    def __lt__(self, other):
        if not isinstance(other, str):
            return NotImplemented
        return self.score < parse_quality(other).score

    def __le__(self, other):
        if not isinstance(other, str):
            return NotImplemented
        return self.score <= parse_quality(other).score

    def __gt__(self, other):
        if not isinstance(other, str):
            return NotImplemented
        return self.score > parse_quality(other).score

    def __ge__(self, other):
        if not isinstance(other, str):
            return NotImplemented
        return self.score >= parse_quality(other).score


# Numeric strength on the SM-2 0-5 scale. There is no rating for 2 or 4.
QUALITY_SCORES = {
    Quality.AGAIN: 0,
    Quality.HARD: 1,
    Quality.GOOD: 3,
    Quality.EASY: 5,
}


@dataclass(frozen=True)
class ReviewState:
    """Immutable memory model for one learner/card pair."""
    ease_factor: float
    interval: int  # days
    repetitions: int
    last_reviewed_at: datetime
    next_review_at: datetime


# First review: (repetitions, interval, ease_factor) per quality
FIRST_REVIEW_SEEDS = {
    Quality.AGAIN: (0, 1, 2.5),
    Quality.HARD: (1, 1, 2.0),
    Quality.GOOD: (1, 1, 2.5),
    Quality.EASY: (1, 4, 2.6),
}


def parse_quality(value) -> Quality:
    """
    Return the Quality for value, or raise InvalidQualityError.

    Only Quality members and their exact string values are accepted.
    """
    if isinstance(value, Quality):
        return value
    if isinstance(value, str):
        try:
            return Quality(value)
        except ValueError:
            pass
    raise InvalidQualityError(
        f"Quality must be one of {', '.join(q.value for q in Quality)}, got {value!r}"
    )


def quality_score(quality) -> int:
    return QUALITY_SCORES[parse_quality(quality)]


def is_lapse(quality) -> bool:
    """A rating below the passing score resets the repetition count."""
    return quality_score(quality) < PASSING_SCORE


def ease_delta(score: int) -> float:
    """
    Ease factor adjustment for a numeric quality score.

    delta = 0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)

    Positive for strong recalls (+0.1 at q=5), negative for weak ones
    (-0.8 at q=0).
    """
    return 0.1 - (5 - score) * (0.08 + (5 - score) * 0.02)


def clamp_ease_factor(value: float) -> float:
    return max(MIN_EASE_FACTOR, value)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def first_review_state(quality, now: datetime) -> ReviewState:
    """Seed state for a pair that has never been reviewed."""
    repetitions, interval, ease_factor = FIRST_REVIEW_SEEDS[parse_quality(quality)]
    return ReviewState(
        ease_factor=ease_factor,
        interval=interval,
        repetitions=repetitions,
        last_reviewed_at=now,
        next_review_at=now + timedelta(days=interval),
    )


def _repair(prior: ReviewState) -> ReviewState:
    """Clamp out-of-range fields of a stored state, logging what was fixed."""
    fixes = {}
    if not prior.ease_factor >= MIN_EASE_FACTOR:
        fixes['ease_factor'] = MIN_EASE_FACTOR
    if prior.interval < 0:
        fixes['interval'] = 0
    if prior.repetitions < 0:
        fixes['repetitions'] = 0

    if not fixes:
        return prior

    logger.warning(
        "Repairing inconsistent review state: %s",
        ', '.join(
            f"{field}={getattr(prior, field)!r} -> {value!r}"
            for field, value in fixes.items()
        ),
    )
    return replace(prior, **fixes)


def schedule(prior, quality, now: datetime) -> ReviewState:
    """
    Compute the next review state for a learner/card pair.

    This is the main entry point for the scheduler.

    Args:
        prior: The pair's current ReviewState, or None on a first review
        quality: A Quality (or its string value)
        now: Time of this review, supplied by the caller

    Returns:
        A new ReviewState; prior is never modified

    Raises:
        InvalidQualityError: quality is not one of the four ratings
    """
    quality = parse_quality(quality)

    if prior is None:
        return first_review_state(quality, now)

    prior = _repair(prior)
    score = QUALITY_SCORES[quality]
    delta = ease_delta(score)

    if score < PASSING_SCORE:
        repetitions = 0
    else:
        repetitions = prior.repetitions + 1

    if repetitions == 1:
        interval = FIRST_INTERVAL
    elif repetitions == 2:
        interval = SECOND_INTERVAL
    else:
        # Mature cards, and the lapse itself: scale the previous interval.
        interval = _round_half_up(prior.interval * (prior.ease_factor + delta))
        interval = min(MAX_INTERVAL, max(FIRST_INTERVAL, interval))

    return ReviewState(
        ease_factor=clamp_ease_factor(prior.ease_factor + delta),
        interval=interval,
        repetitions=repetitions,
        last_reviewed_at=now,
        next_review_at=now + timedelta(days=interval),
    )


def get_due(items, now: datetime):
    """
    Filter items that are due for review.

    Args:
        items: Iterable of ReviewState objects or anything with a
            next_review_at or next_review attribute
        now: Current time

    Returns:
        List of due items, sorted by due time (oldest first)
    """
    def due_at(item):
        if hasattr(item, 'next_review_at'):
            return item.next_review_at
        return item.next_review

    due_items = [item for item in items if due_at(item) <= now]
    return sorted(due_items, key=due_at)

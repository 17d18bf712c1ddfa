"""
Module: engine.review

Purpose:
    Review selection. For a single board the review set is simply the
    missed and skipped outcomes; for follow-up rounds a new clue pool is
    biased toward weak categories.

Key Functions:
    - review_items(): WRONG ∪ SKIPPED outcomes, chronological
    - make_review_card(): Study card for one review item
    - build_review_round(): Weak-category biased clue pool

Key Classes:
    - ReviewCard: Display-ready review material

Dependencies:
    - random (std)
    - urllib.parse (std)

Used By:
    - engine.stats: Board summary
    - engine.game: Review rounds
    - gui.widgets.results_view: Review feed
"""

from __future__ import annotations

import logging
import random
import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence
from urllib.parse import quote_plus

from trivia_trainer.core.models import ClueRecord, Outcome, OutcomeStatus, normalize_category_key

logger = logging.getLogger(__name__)

_QUESTION_PREFIX = re.compile(r"^(who|what|where|when)\s+(is|are|was|were)\s+", re.IGNORECASE)

DRILL_TEXT = "Say the response first, then justify it in one sentence. Repeat 3 times."


def review_items(outcomes: Iterable[Outcome]) -> List[Outcome]:
    """Outcomes that need review (WRONG or SKIPPED), order preserved."""
    return [o for o in outcomes if o.needs_review]


def response_anchor(response_text: str) -> str:
    """
    Strip question phrasing from a response.

    Example:
        >>> response_anchor("What is the Nile?")
        'the Nile'
    """
    anchor = _QUESTION_PREFIX.sub("", response_text.strip())
    return anchor.rstrip("?").strip() or response_text.strip()


@dataclass(frozen=True)
class ReviewCard:
    """Study material for one missed or skipped clue."""

    outcome: Outcome
    status_label: str
    anchor: str
    explanation: str
    drill: str
    wikipedia_url: str
    youtube_url: str

    @property
    def title(self) -> str:
        return f"{self.outcome.category} • ${self.outcome.value} • {self.status_label}"


def make_review_card(outcome: Outcome) -> ReviewCard:
    anchor = response_anchor(outcome.response_text)
    query = quote_plus(f"{outcome.response_text} {outcome.category}")
    return ReviewCard(
        outcome=outcome,
        status_label="MISSED" if outcome.status is OutcomeStatus.WRONG else "SKIPPED",
        anchor=anchor,
        explanation=(
            f"Anchor: {anchor}. Translate the clue into a one-line definition, then "
            "retrieve the proper noun. If you hesitated, you lacked an immediate anchor; "
            "drill 5 fast prompts using the response as the starting cue."
        ),
        drill=DRILL_TEXT,
        wikipedia_url=f"https://en.wikipedia.org/wiki/Special:Search?search={query}",
        youtube_url=f"https://www.youtube.com/results?search_query={query}",
    )


def build_review_round(
    pool: Sequence[ClueRecord],
    weak_categories: Iterable[str],
    *,
    round_length: int,
    review_ratio: float = 0.5,
    rng: Optional[random.Random] = None,
) -> List[ClueRecord]:
    """
    Build the next round's clue list, biased toward weak categories.

    ``round(review_ratio × round_length)`` clues come from weak categories
    and the rest from all other categories, each sampled uniformly without
    replacement. Missing clues on either side are backfilled from the
    other, so the round reaches ``round_length`` (or the pool size if
    smaller). The combined list is shuffled.

    Example:
        >>> picks = build_review_round(pool, ["Science"], round_length=10, review_ratio=0.5)
        >>> len(picks)
        10
    """
    rng = rng or random.Random()
    ratio = min(1.0, max(0.0, review_ratio))
    target = min(max(0, round_length), len(pool))
    weak_keys = {normalize_category_key(name) for name in weak_categories}

    weak_pool = [c for c in pool if c.category_key in weak_keys]
    other_pool = [c for c in pool if c.category_key not in weak_keys]

    want_weak = min(int(ratio * round_length + 0.5), target)
    weak_picks = rng.sample(weak_pool, min(want_weak, len(weak_pool)))
    other_picks = rng.sample(other_pool, min(target - len(weak_picks), len(other_pool)))

    shortfall = target - len(weak_picks) - len(other_picks)
    if shortfall > 0:
        chosen = {id(c) for c in weak_picks}
        leftover = [c for c in weak_pool if id(c) not in chosen]
        weak_picks += rng.sample(leftover, min(shortfall, len(leftover)))

    picks = weak_picks + other_picks
    rng.shuffle(picks)
    logger.info(
        f"Review round: {len(weak_picks)} weak-category + {len(other_picks)} other clues "
        f"(requested {round_length}, pool {len(pool)})"
    )
    return picks

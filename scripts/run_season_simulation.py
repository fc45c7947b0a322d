#!/usr/bin/env python
"""Simulate a season of quiz sessions against in-memory stores.

Plays a seeded stream of sessions across a few categories and prints the
final ratings, rank tiers and coin balance. Nothing is written to disk.
"""

import random

from rich.console import Console
from rich.table import Table

from quiz_rating.core.config import EngineConfig
from quiz_rating.ranking import create_rating_engine
from quiz_rating.ranking.tiers import rank_progress

SEED = 2026
SESSIONS = 60
CATEGORIES = ["tech", "finance", "history"]
DIFFICULTIES = ["easy", "medium", "hard"]

# Per-category chance of answering a question correctly
SKILL = {"tech": 0.85, "finance": 0.6, "history": 0.35}


def play_session(rng: random.Random, category: str) -> dict:
    """Generate one raw session record."""
    answered = rng.randint(5, 25)
    correct = sum(1 for _ in range(answered) if rng.random() < SKILL[category])
    return {
        "category": category,
        "difficulty": rng.choice(DIFFICULTIES),
        "questions_answered": answered,
        "correct_answers": correct,
        "time_spent_seconds": answered * rng.uniform(8, 20),
        "total_time_budget_seconds": 25 * 20,
    }


def main() -> None:
    """Run the season and print standings."""
    console = Console()
    rng = random.Random(SEED)
    engine = create_rating_engine(EngineConfig(), dry_run=True)

    results = {"win": 0, "draw": 0, "loss": 0}
    for _ in range(SESSIONS):
        session = engine.load_session(play_session(rng, rng.choice(CATEGORIES)))
        outcome = engine.process_session(session)
        results[outcome.outcome.delta.result.value] += 1

    table = Table(title=f"Season of {SESSIONS} sessions (seed {SEED})")
    table.add_column("Category")
    table.add_column("Rating", justify="right")
    table.add_column("Rank")
    table.add_column("W/D/L", justify="right")
    snapshot = engine.ledger.snapshot()
    for category, rating in sorted(snapshot.by_category.items(), key=lambda x: -x[1]):
        stats = engine.ledger.stats(category)
        table.add_row(
            category,
            f"{rating:.0f}",
            rank_progress(rating).rank.name,
            f"{stats.wins}/{stats.draws}/{stats.losses}",
        )

    console.print(table)
    console.print(f"Overall rating: {snapshot.overall:.0f}")
    console.print(f"Results: {results}")
    console.print(f"Coins earned: {engine.currency.balance()}")


if __name__ == "__main__":
    main()

#!/usr/bin/env python3
"""
Match CLI - Reconciliation Commands

Runs the greedy matcher over CSV uploads, the record store, or sample data
and renders the result as text tables or JSON.
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any

import click

from ..core.config import Config
from ..core.errors import ConfigurationError, ReconciliationError
from ..core.json_utils import format_json, write_json
from ..matching.candidates import TrigramCandidateIndex
from ..matching.datastore import RecordStore
from ..matching.loader import load_orders_csv, load_transactions_csv
from ..matching.matcher import GreedyMatcher
from ..matching.models import MatchingResult, Order, merge_results
from ..matching.scorer import MatchScorer
from ..matching.sample import SAMPLE_SETS


def matching_options(func: Any) -> Any:
    """Options shared by every command that runs a match."""
    options = [
        click.option(
            "--profile",
            type=click.Choice(["strict", "name-only"]),
            help="Weight profile (default from MATCH_PROFILE)",
        ),
        click.option("--threshold", type=float, help="Minimum score, exclusive (default from MATCH_THRESHOLD)"),
        click.option("--weights", "weights_json", help="Custom weights as a JSON object; overrides --profile"),
        click.option("--workers", type=int, help="Scoring threads (default from MATCH_MAX_WORKERS)"),
        click.option("--candidates", is_flag=True, help="Pre-filter orders with the trigram name index"),
        click.option("--json", "as_json", is_flag=True, help="Print the result as JSON"),
        click.option("--output", type=click.Path(dir_okay=False, path_type=Path), help="Also save the result here"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_matcher(
    config: Config,
    orders: list[Order],
    profile: str | None,
    threshold: float | None,
    weights_json: str | None,
    workers: int | None,
    candidates: bool,
) -> GreedyMatcher:
    """Fill unset options from configuration and build a matcher."""
    weights: Any = profile or config.matching.profile
    if weights_json:
        try:
            weights = json.loads(weights_json)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"--weights is not valid JSON: {e}") from e
        if not isinstance(weights, dict):
            raise ConfigurationError("--weights must be a JSON object")

    return GreedyMatcher(
        weights,
        config.matching.threshold if threshold is None else threshold,
        date_window_days=config.matching.date_window_days,
        max_workers=config.matching.max_workers if workers is None else workers,
        candidate_source=TrigramCandidateIndex(orders) if candidates else None,
        candidate_min_similarity=config.matching.candidate_min_similarity,
    )


def render_result(result: MatchingResult, scorer: MatchScorer | None = None) -> None:
    """Print a matching result as text tables, with per-pair factors when a scorer is given."""
    click.echo(f"Matched groups ({len(result.matched)}):")
    if not result.matched:
        click.echo("  (none)")
    for group in result.matched:
        click.echo(f"  [{group.score:.3f}] {group.order.label()}")
        for transaction in group.transactions:
            click.echo(f"      {transaction.label()}")
            if scorer is not None:
                factors = scorer.factors(group.order, transaction).to_dict()
                click.echo("        " + ", ".join(f"{name}={value:.2f}" for name, value in factors.items()))
        click.echo(f"      Net: {group.net_amount}")

    click.echo()
    click.echo(f"Unmatched orders ({len(result.unmatched_orders)}):")
    for order in result.unmatched_orders:
        click.echo(f"  - {order.label()}")

    click.echo()
    click.echo(f"Unmatched transactions ({len(result.unmatched_transactions)}):")
    for transaction in result.unmatched_transactions:
        click.echo(f"  - {transaction.label()}")

    click.echo()
    click.echo(
        f"✅ Matched {result.matched_transaction_count} of {result.total_transactions} transactions "
        f"({result.match_rate * 100:.1f}%)"
    )


def emit_result(
    result: MatchingResult, as_json: bool, output: Path | None, scorer: MatchScorer | None = None
) -> None:
    """Print a result and optionally save it with run metadata."""
    if as_json:
        click.echo(format_json(result.to_dict()))
    else:
        render_result(result, scorer)

    if output is not None:
        payload = {
            "metadata": {**result.metadata, "timestamp": datetime.now().isoformat(timespec="seconds")},
            "summary": result.summary(),
            **result.to_dict(),
        }
        write_json(output, payload)
        if not as_json:
            click.echo(f"   Results saved to: {output}")


def _explainer(ctx: click.Context, matcher: GreedyMatcher) -> MatchScorer | None:
    return matcher.scorer if ctx.obj.get("verbose", False) else None


@click.group()
def match() -> None:
    """Order/transaction matching commands."""
    pass


@match.command()
@click.option("--orders", "orders_csv", required=True, type=click.Path(dir_okay=False, path_type=Path))
@click.option("--transactions", "transactions_csv", required=True, type=click.Path(dir_okay=False, path_type=Path))
@matching_options
@click.pass_context
def run(
    ctx: click.Context,
    orders_csv: Path,
    transactions_csv: Path,
    profile: str | None,
    threshold: float | None,
    weights_json: str | None,
    workers: int | None,
    candidates: bool,
    as_json: bool,
    output: Path | None,
) -> None:
    """
    Match a transactions CSV against an orders CSV.

    Examples:
      reconciler match run --orders orders.csv --transactions txns.csv
      reconciler match run --orders orders.csv --transactions txns.csv --profile name-only --threshold 0.6
    """
    config = ctx.obj["config"]

    try:
        orders = load_orders_csv(orders_csv)
        transactions = load_transactions_csv(transactions_csv)

        if ctx.obj.get("verbose", False) and not as_json:
            click.echo(f"Loaded {len(orders)} orders and {len(transactions)} transactions")

        matcher = build_matcher(config, orders, profile, threshold, weights_json, workers, candidates)
        result = matcher.match(orders, transactions)
    except (ReconciliationError, FileNotFoundError) as e:
        raise click.ClickException(str(e)) from e

    emit_result(result, as_json, output, _explainer(ctx, matcher))


@match.command()
@click.option("--write-back", is_flag=True, help="Persist matched_order_id for committed transactions")
@click.option("--reset", is_flag=True, help="Ignore stored matches and rematch every transaction")
@matching_options
@click.pass_context
def stored(
    ctx: click.Context,
    write_back: bool,
    reset: bool,
    profile: str | None,
    threshold: float | None,
    weights_json: str | None,
    workers: int | None,
    candidates: bool,
    as_json: bool,
    output: Path | None,
) -> None:
    """
    Match the record store's unmatched transactions against its orders.

    The report includes matches already in the store. With --reset the
    stored matches are ignored and every transaction is rematched; they are
    only replaced when --write-back is also given.

    Example:
      reconciler match stored --write-back
    """
    config = ctx.obj["config"]
    store = RecordStore(config.storage.records_file)

    try:
        orders = store.all_orders()
        matcher = build_matcher(config, orders, profile, threshold, weights_json, workers, candidates)

        if reset:
            fresh = matcher.match(orders, store.all_transactions())
            result = fresh
        else:
            stored_matches = store.stored_result()
            fresh = matcher.match(orders, stored_matches.unmatched_transactions)
            result = merge_results(stored_matches, fresh)

        # Nothing is written until the run has succeeded
        written = store.apply_matches(fresh, replace_existing=reset) if write_back else 0
    except ReconciliationError as e:
        raise click.ClickException(str(e)) from e

    emit_result(result, as_json, output, _explainer(ctx, matcher))
    if write_back and not as_json:
        click.echo(f"   Wrote back {written} matches to {store.records_file}")


@match.command()
@click.option(
    "--set",
    "sample_set",
    type=click.Choice(sorted(SAMPLE_SETS)),
    default="seed",
    show_default=True,
    help="Which sample records to match",
)
@matching_options
@click.pass_context
def demo(
    ctx: click.Context,
    sample_set: str,
    profile: str | None,
    threshold: float | None,
    weights_json: str | None,
    workers: int | None,
    candidates: bool,
    as_json: bool,
    output: Path | None,
) -> None:
    """Match the built-in sample records."""
    config = ctx.obj["config"]
    orders, transactions = SAMPLE_SETS[sample_set]()

    try:
        matcher = build_matcher(config, orders, profile, threshold, weights_json, workers, candidates)
        result = matcher.match(orders, transactions)
    except ReconciliationError as e:
        raise click.ClickException(str(e)) from e

    emit_result(result, as_json, output, _explainer(ctx, matcher))

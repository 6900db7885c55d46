from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from rollcall.app import (
    event_stats,
    get_status,
    history,
    list_records,
    override_status,
    reconcile_event,
    reconcile_participation,
    review_queue,
)
from rollcall.config import configure_logging
from rollcall.domain.model import Actor, ActorRole, CanonicalStatus
from rollcall.domain.ports.persistence import RecordFilters
from rollcall.domain.reconciliation import ReconciliationError

from .views import (
    BatchResultView,
    EventStatsView,
    HistoryView,
    RecordListView,
    RecordView,
    StatusViewModel,
    SummaryView,
    ViewModel,
)

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _tristate(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in {"true", "yes", "1"}:
        return True
    if lowered in {"false", "no", "0"}:
        return False
    raise argparse.ArgumentTypeError(f"Expected true/false, got {value!r}")


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Reconcile event participation records")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    reconcile = subparsers.add_parser("reconcile", help="Reconcile one participant")
    reconcile.add_argument("email", help="Participant email address")
    reconcile.add_argument("event_id", help="Event identifier")

    reconcile_all = subparsers.add_parser(
        "reconcile-event",
        help="Reconcile every registrant of an event",
    )
    reconcile_all.add_argument("event_id", help="Event identifier")
    reconcile_all.add_argument(
        "--parallel",
        action="store_true",
        help="Fan out over the worker pool (ROLLCALL_WORKERS)",
    )

    status = subparsers.add_parser("status", help="Show the public status of a participant")
    status.add_argument("email", help="Participant email address")
    status.add_argument("event_id", help="Event identifier")

    override = subparsers.add_parser("override", help="Manually override a canonical status")
    override.add_argument("email", help="Participant email address")
    override.add_argument("event_id", help="Event identifier")
    override.add_argument("status", help=f"New status ({', '.join(CanonicalStatus)})")
    override.add_argument("--actor", required=True, help="Id of the acting user")
    override.add_argument(
        "--role",
        required=True,
        choices=[role.value for role in ActorRole],
        help="Role of the acting user",
    )
    override.add_argument("--reason", required=True, help="Why the status is overridden")

    records = subparsers.add_parser("records", help="List reconciled records for an event")
    records.add_argument("event_id", help="Event identifier")
    records.add_argument(
        "--status",
        choices=[status.value for status in CanonicalStatus],
        help="Only records with this canonical status",
    )
    records.add_argument("--requires-review", type=_tristate, help="Filter on the review flag")
    records.add_argument("--suspicious", type=_tristate, help="Filter on the suspicious flag")
    records.add_argument("--verified", type=_tristate, help="Filter on the verified flag")

    stats = subparsers.add_parser("stats", help="Show status counts for an event")
    stats.add_argument("event_id", help="Event identifier")

    review = subparsers.add_parser("review", help="List records needing manual review")
    review.add_argument("--event", dest="event_id", help="Restrict to one event")

    history_parser = subparsers.add_parser("history", help="Show the audit trail of a record")
    history_parser.add_argument("email", help="Participant email address")
    history_parser.add_argument("event_id", help="Event identifier")

    return parser.parse_args(list(argv))


def _run_command(args: argparse.Namespace) -> ViewModel:
    match args.command:
        case "reconcile":
            return SummaryView.from_summary(reconcile_participation(args.email, args.event_id))
        case "reconcile-event":
            return BatchResultView.from_result(
                reconcile_event(args.event_id, parallel=args.parallel)
            )
        case "status":
            return StatusViewModel.from_view(get_status(args.email, args.event_id))
        case "override":
            record = override_status(
                args.email,
                args.event_id,
                args.status,
                actor=Actor(args.actor, ActorRole(args.role)),
                reason=args.reason,
            )
            return RecordView.from_record(record)
        case "records":
            filters = RecordFilters(
                status=CanonicalStatus(args.status) if args.status else None,
                requires_review=args.requires_review,
                suspicious=args.suspicious,
                verified=args.verified,
            )
            return RecordListView.from_records(
                list_records(args.event_id, filters),
                event_id=args.event_id,
            )
        case "stats":
            return EventStatsView.from_stats(event_stats(args.event_id))
        case "review":
            return RecordListView.from_records(review_queue(args.event_id), event_id=args.event_id)
        case "history":
            return HistoryView.from_entries(
                history(args.email, args.event_id),
                email=args.email,
                event_id=args.event_id,
            )
        case _:
            raise ValueError(f"Unsupported command: {args.command}")


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        view = _run_command(parsed_args)
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)
    except ReconciliationError as exc:
        log.error("%s", exc)  # noqa: TRY400
        sys.exit(1)
    except Exception:
        log.exception("Fatal error during reconciliation")
        sys.exit(1)

    sys.stdout.write(view.render() + "\n")


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()

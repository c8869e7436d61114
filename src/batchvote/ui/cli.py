from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from batchvote import __version__
from batchvote.adapters.cart_storage import SerializedCart, deserialize_cart
from batchvote.app import build_cart_store, submit_cart, submit_stored_cart
from batchvote.config import configure_logging
from batchvote.domain.batch_vote import BatchVoteError

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from batchvote.domain.batch_vote import BatchVoteResult
    from batchvote.domain.model import Cart

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Submit batched votes")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    submit = subparsers.add_parser("submit", help="Submit a cart of votes")
    source = submit.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--subject-id",
        type=str,
        help="Submit the stored cart of this subject (removed on success)",
    )
    source.add_argument(
        "--cart-file",
        type=str,
        help="Path to a serialized cart JSON file",
    )

    show = subparsers.add_parser("show", help="Show the stored cart of a subject")
    show.add_argument("--subject-id", type=str, required=True)

    clear = subparsers.add_parser("clear", help="Delete the stored cart of a subject")
    clear.add_argument("--subject-id", type=str, required=True)

    return parser.parse_args(argv)


def _read_cart_file(path: str) -> Cart:
    with open(path, encoding="utf-8") as handle:
        return deserialize_cart(SerializedCart.model_validate_json(handle.read()))


def _log_result(result: BatchVoteResult) -> None:
    for phase, hashes in result.tx_hashes.items():
        for tx_hash in hashes:
            log.info("%s: %s", phase, tx_hash)
    log.info(
        "Objects created=%s, relationships created=%s, deposited=%s, withdrawn=%s",
        result.objects_created,
        result.relationships_created,
        result.total_deposited,
        result.total_withdrawn,
    )
    for skipped in result.skipped:
        log.warning("Skipped item %s (%s)", skipped.item_id, skipped.reason)


def _show_cart(subject_id: str) -> None:
    cart = build_cart_store().load(subject_id)
    if cart is None:
        log.info("No stored cart for %s", subject_id)
        return
    log.info("Cart for %s (%s item(s))", cart.subject_label or cart.subject_id, len(cart.items))
    for item in cart.items:
        log.info(
            "  %s %s %s on %r (%s)",
            item.id,
            item.direction,
            item.amount,
            item.object_label,
            item.curve,
        )


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(verbose=parsed_args.verbose)

    try:
        if parsed_args.command == "submit":
            if parsed_args.cart_file:
                result = submit_cart(_read_cart_file(parsed_args.cart_file))
            else:
                result = submit_stored_cart(parsed_args.subject_id)
            if result is not None:
                _log_result(result)
        elif parsed_args.command == "show":
            _show_cart(parsed_args.subject_id)
        elif parsed_args.command == "clear":
            removed = build_cart_store().remove(parsed_args.subject_id)
            log.info("Removed cart" if removed else "No stored cart to remove")
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except BatchVoteError as exc:
        log.error(  # noqa: TRY400
            "Submission failed [%s] in %s: %s", exc.code, exc.phase, exc.message
        )
        sys.exit(1)
    except Exception:
        log.exception("Fatal error")
        sys.exit(1)


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

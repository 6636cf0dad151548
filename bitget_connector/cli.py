"""
Bitget Connector - CLI.

============================================================
RESPONSIBILITY
============================================================
Command-line interface to the connector.

- `call` runs one registered operation (or one per --item)
- `poll` runs one poll tick for a subscription
- `operations` lists the registered operations

Results are printed to stdout as JSON. Logs, and the metrics
summary requested with --metrics, go to stderr.
Credentials come from BITGET_* environment variables (.env
is honoured).

============================================================
USAGE
============================================================
bitget-connector call marketData getTicker --param symbol=BTCUSDT
bitget-connector call spotTrading placeOrder --param symbol=BTCUSDT \\
    --param side=buy --param orderType=market --param size=10
bitget-connector poll priceAlert --subscription btc --param targetPrice=50000 \\
    --param priceCondition=crossesAbove --state-db sqlite:///bitget_state.db

============================================================
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any, Dict, List, Optional, Tuple

from . import __version__
from .config import BitgetCredentials, ClientConfig
from .errors import BitgetError, ValidationError
from .logging_setup import LOG_FORMATS, configure_logging
from .operations import Resource, execute, execute_batch, flatten_results, list_operations
from .polling import EventType, InMemoryStateStore, PollTrigger, SqlAlchemyStateStore, StateStoreError
from .transport import BitgetClient


logger = logging.getLogger(__name__)


# ============================================================
# CLI ARGUMENT PARSER
# ============================================================

def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="bitget-connector",
        description="Bitget v2 REST connector",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  call        - Run an operation (resource + operation name)
  poll        - Run one poll tick and print the change events
  operations  - List registered operations

Examples:
  %(prog)s call marketData getTicker --param symbol=BTCUSDT
  %(prog)s call spotTrading getOrderHistory --param symbol=BTCUSDT --all
  %(prog)s poll orderFilled --subscription fills --state-db sqlite:///state.db
        """
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    # --------------------------------------------------------
    # Logging Options
    # --------------------------------------------------------
    logging_group = parser.add_argument_group("Logging Options")

    logging_group.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Logging level (default: WARNING)",
    )

    logging_group.add_argument(
        "--log-format",
        type=str,
        choices=list(LOG_FORMATS),
        default="text",
        help="Logging format (default: text)",
    )

    # --------------------------------------------------------
    # Output Options
    # --------------------------------------------------------
    output_group = parser.add_argument_group("Output Options")

    output_group.add_argument(
        "--metrics",
        action="store_true",
        help="Print the transport metrics summary to stderr after the command",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # --------------------------------------------------------
    # call
    # --------------------------------------------------------
    call_parser = subparsers.add_parser("call", help="Run one operation")
    call_parser.add_argument(
        "resource",
        choices=[r.value for r in Resource],
        help="Resource group",
    )
    call_parser.add_argument("operation", help="Operation name, e.g. getTicker or get_ticker")
    _add_param_argument(call_parser)
    call_parser.add_argument(
        "--item",
        action="append",
        default=[],
        metavar="JSON",
        help="Parameter object for one batch item (repeatable); --param values apply to every item",
    )
    call_parser.add_argument(
        "--continue-on-fail",
        action="store_true",
        help="Record failing items and keep going",
    )
    call_parser.add_argument(
        "--all",
        dest="return_all",
        action="store_true",
        help="Fetch every page of a listing operation",
    )
    call_parser.add_argument(
        "--max-items",
        type=int,
        metavar="N",
        help="Cap on records fetched with --all",
    )

    # --------------------------------------------------------
    # poll
    # --------------------------------------------------------
    poll_parser = subparsers.add_parser("poll", help="Run one poll tick")
    poll_parser.add_argument(
        "event",
        choices=[e.value for e in EventType],
        help="Event type",
    )
    poll_parser.add_argument(
        "--subscription",
        default="default",
        metavar="ID",
        help="Subscription identity in the state store (default: default)",
    )
    _add_param_argument(poll_parser)
    poll_parser.add_argument(
        "--state-db",
        metavar="URL",
        help="SQLAlchemy database URL for durable poll state (default: in-memory)",
    )

    # --------------------------------------------------------
    # operations
    # --------------------------------------------------------
    operations_parser = subparsers.add_parser("operations", help="List registered operations")
    operations_parser.add_argument(
        "resource",
        nargs="?",
        choices=[r.value for r in Resource],
        help="Limit to one resource",
    )

    return parser


def _add_param_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--param", "-p",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Operation parameter (repeatable); values starting with [ or { are decoded as JSON",
    )


# ============================================================
# CLI VALIDATION
# ============================================================

def parse_param(raw: str) -> Tuple[str, Any]:
    """
    Split KEY=VALUE.

    VALUE is decoded as JSON only when it starts with '[' or '{'
    (lists and objects). Everything else stays a string, so prices
    and sizes keep their exact text.

    Raises:
        ValidationError: no '=' or empty key
    """
    key, sep, value = raw.partition("=")
    key = key.strip()
    if not sep or not key:
        raise ValidationError(f"Parameter must be KEY=VALUE: {raw}")
    if value.lstrip().startswith(("[", "{")):
        try:
            return key, json.loads(value)
        except ValueError:
            return key, value
    return key, value


def parse_params(raw_params: List[str]) -> Dict[str, Any]:
    return dict(parse_param(raw) for raw in raw_params)


def parse_items(raw_items: List[str]) -> List[Dict[str, Any]]:
    """Decode --item JSON objects."""
    items = []
    for raw in raw_items:
        try:
            item = json.loads(raw)
        except ValueError as e:
            raise ValidationError(f"Invalid --item JSON: {e}") from e
        if not isinstance(item, dict):
            raise ValidationError("Each --item must be a JSON object")
        items.append(item)
    return items


def validate_args(args: argparse.Namespace) -> List[str]:
    """
    Validate CLI arguments.

    Returns:
        List of validation errors
    """
    errors = []

    if args.command == "call":
        if args.max_items is not None and args.max_items < 1:
            errors.append("--max-items must be at least 1")
        if args.max_items is not None and not args.return_all:
            errors.append("--max-items requires --all")
        if args.item and args.return_all:
            errors.append("--all cannot be combined with --item")

    return errors


# ============================================================
# COMMANDS
# ============================================================

async def run_call(client: BitgetClient, args: argparse.Namespace) -> Any:
    params = parse_params(args.param)

    if args.item:
        items = [{**params, **item} for item in parse_items(args.item)]
        results = await execute_batch(
            client,
            args.resource,
            args.operation,
            items,
            continue_on_fail=args.continue_on_fail,
        )
        return flatten_results(results)

    if args.return_all:
        params["return_all"] = True
        if args.max_items:
            params["max_items"] = args.max_items

    return await execute(client, args.resource, args.operation, params)


async def run_poll(client: BitgetClient, args: argparse.Namespace) -> List[Dict[str, Any]]:
    store = SqlAlchemyStateStore(args.state_db) if args.state_db else InMemoryStateStore()
    try:
        trigger = PollTrigger(
            client,
            args.event,
            parse_params(args.param),
            store=store,
            subscription_id=args.subscription,
        )
        return await trigger.poll()
    finally:
        if isinstance(store, SqlAlchemyStateStore):
            store.close()


def show_operations(resource: Optional[str]) -> List[Dict[str, Any]]:
    return [
        {
            "resource": spec.resource.value,
            "operation": spec.name,
            "retry": spec.retry,
            "paginated": spec.paginated,
        }
        for spec in list_operations(resource)
    ]


# ============================================================
# MAIN ENTRY POINT
# ============================================================

async def async_main(args: argparse.Namespace) -> int:
    """
    Async main entry point.

    Returns:
        Exit code
    """
    config = ClientConfig.from_env()
    config_errors = config.validate()
    if config_errors:
        for error in config_errors:
            print(f"Error: {error}", file=sys.stderr)
        return 1

    async with BitgetClient(BitgetCredentials.from_env, config=config) as client:
        try:
            if args.command == "call":
                result = await run_call(client, args)
            else:
                result = await run_poll(client, args)
        except (BitgetError, StateStoreError) as e:
            logger.debug(f"Command failed: {e!r}")
            print(f"Error: {e}", file=sys.stderr)
            return 1
        finally:
            if args.metrics:
                print_metrics(client)

    print_json(result)
    return 0


def print_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def print_metrics(client: BitgetClient) -> None:
    """Transport metrics go to stderr so stdout stays parseable JSON."""
    print(json.dumps(client.metrics.summary(), indent=2), file=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        argv: Command line arguments (default: sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(args.log_level, args.log_format)

    errors = validate_args(args)
    if errors:
        for error in errors:
            print(f"Error: {error}", file=sys.stderr)
        return 1

    if args.command == "operations":
        print_json(show_operations(args.resource))
        return 0

    try:
        return asyncio.run(async_main(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130


# ============================================================
# MODULE EXECUTION
# ============================================================

if __name__ == "__main__":
    sys.exit(main())

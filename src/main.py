import sys
import logging

from account_sinks import AccountSink, CsvAccountSink, JsonAccountSink
from event_sources import CsvEventSource, EventSourceError
from payments_engine import PaymentsEngine

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s: %(message)s",
    stream=sys.stderr,
)

logger = logging.getLogger(__name__)

USAGE = "Usage: python main.py <input.csv> [output.csv|output.json]"


def make_sink(stream, output_path=None) -> AccountSink:
    if output_path and output_path.lower().endswith(".json"):
        return JsonAccountSink(stream)
    return CsvAccountSink(stream)


def main(argv=None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) not in (1, 2):
        print(USAGE, file=sys.stderr)
        return 1

    input_path = args[0]
    output_path = args[1] if len(args) == 2 else None

    engine = PaymentsEngine()
    try:
        accounts = engine.process(CsvEventSource(input_path))
    except (OSError, EventSourceError) as e:
        logger.error(f"Failed to read transactions from {input_path}: {e}")
        return 1

    try:
        if output_path is None:
            make_sink(sys.stdout).write_accounts(accounts.values())
        else:
            with open(output_path, "w", newline="") as f:
                make_sink(f, output_path).write_accounts(accounts.values())
    except OSError as e:
        logger.error(f"Failed to write accounts to {output_path or 'stdout'}: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())

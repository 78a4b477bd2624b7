import argparse
import logging
import sys
from typing import Iterable, Optional, TextIO

from referee.dispatcher import CommandDispatcher
from referee.exceptions import InvalidConfigError
from referee.models import DeuceMode, MatchConfig, Rule66
from referee.voice import CommandParser


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        description="Console padel referee: type 'point blue', 'point red', 'undo' or 'reset'"
    )
    ap.add_argument("--rule66", choices=[r.value for r in Rule66], default=Rule66.TIE_BREAK.value,
                    help="6-6 handling: tie-break or play to 8 games")
    ap.add_argument("--deuce-mode", choices=[d.value for d in DeuceMode],
                    default=DeuceMode.IMMEDIATE_KILLER.value,
                    help="killer point at the first deuce or after two advantages")
    ap.add_argument("--sets-to-win", type=int, default=None,
                    help="sets needed to win the match (default: no limit)")
    ap.add_argument("-v", "--verbose", action="store_true")
    return ap


def run(lines: Iterable[str], dispatcher: CommandDispatcher, out: TextIO = sys.stdout) -> int:
    """Feed transcript lines to the dispatcher. Returns the number of commands run."""
    parser = CommandParser()
    handled = 0

    for line in lines:
        if not line.strip():
            continue

        if line.strip().lower() in ("quit", "exit"):
            break

        command = parser.parse(line)
        if command is None:
            # Not a command: stay silent
            continue

        message = dispatcher.dispatch(command.intent, command.args)
        if message is None:
            continue

        handled += 1
        s = dispatcher.state
        print(
            f"{message}  [games {s.games.us}-{s.games.them} | sets {s.sets.us}-{s.sets.them}]",
            file=out,
        )

    return handled


def main(argv: Optional[list] = None):
    ap = build_parser()
    args = ap.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = MatchConfig(
        rule66=Rule66(args.rule66),
        deuce_mode=DeuceMode(args.deuce_mode),
        sets_to_win=args.sets_to_win,
    )
    try:
        dispatcher = CommandDispatcher(config)
    except InvalidConfigError as e:
        ap.error(str(e))

    print(f"[referee] rule66={config.rule66.value} deuce_mode={config.deuce_mode.value}")
    run(sys.stdin, dispatcher)


if __name__ == "__main__":
    main()

"""
Command line entry point (`gamey`).

    gamey validate match.txt          -> check a transcript file, print the final status
    gamey position match.txt          -> print the position after the last move of a transcript
    gamey selfplay --size 5 --seed 7  -> let bots play a full match, print its transcript
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

from src.bots.random_bot import RandomBot
from src.bots.registry import BotRegistry
from src.core.exceptions import GameError
from src.core.settings import load_settings
from src.db.files import load_transcript, save_transcript
from src.game.board import Config
from src.game.controller import GameController
from src.game.coordinate import DEFAULT_BOARD_SIZE
from src.game.position import encode_position
from src.game.transcript import decode_transcript
from src.game.variant import Variant

logger = logging.getLogger(__name__)


def cmd_validate(args: argparse.Namespace) -> int:
    transcript, state = decode_transcript(load_transcript(args.transcript))
    print(f"OK: {len(transcript.moves)} moves, status {state.status}")
    return 0


def cmd_position(args: argparse.Namespace) -> int:
    _, state = decode_transcript(load_transcript(args.transcript))
    print(encode_position(state), end="")
    return 0


def cmd_selfplay(args: argparse.Namespace) -> int:
    config = Config(
        size=args.size, num_players=args.players, variant=Variant.from_tag(args.variant)
    )
    registry = BotRegistry().with_bot(RandomBot(seed=args.seed))
    registry.freeze()
    bots = {player: RandomBot.name for player in range(config.num_players)}

    with GameController(config, bots, registry, load_settings()) as controller:
        controller.advance()
        transcript = controller.export_transcript()
        logger.info("Self-play finished: %s", controller.state.status)

    if args.output:
        save_transcript(args.output, transcript)
    else:
        print(transcript, end="")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gamey", description="Connection game engine tools"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    validate_parser = subparsers.add_parser(
        "validate", help="Replay a transcript file and report whether it is legal"
    )
    validate_parser.add_argument("transcript", help="Path to a transcript file")

    position_parser = subparsers.add_parser(
        "position", help="Print the final position of a transcript file"
    )
    position_parser.add_argument("transcript", help="Path to a transcript file")

    selfplay_parser = subparsers.add_parser(
        "selfplay", help="Play a match between random bots"
    )
    selfplay_parser.add_argument("--size", type=int, default=DEFAULT_BOARD_SIZE)
    selfplay_parser.add_argument("--players", type=int, default=2)
    selfplay_parser.add_argument(
        "--variant",
        default=Variant.STANDARD.value,
        choices=[variant.value for variant in Variant],
    )
    selfplay_parser.add_argument("--seed", type=int, default=None)
    selfplay_parser.add_argument(
        "--output", default=None, help="Write the transcript here instead of stdout"
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    commands = {
        "validate": cmd_validate,
        "position": cmd_position,
        "selfplay": cmd_selfplay,
    }
    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return 1
    try:
        return handler(args)
    except GameError as error:
        print(f"error: {error}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

"""Command-line interface for world generation."""

import argparse
import logging
import sys
import tomllib
from collections import Counter
from pathlib import Path

import structlog


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate procedural biome worlds with landmarks and quests"
    )
    # Options shared by every subcommand
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--store-dir",
        type=str,
        default="saves",
        help="Directory for stored worlds (default: saves)",
    )
    common.add_argument(
        "--verbose", "-v", action="store_true", help="Verbose logging"
    )
    commands = parser.add_subparsers(dest="command", required=True)

    generate = commands.add_parser(
        "generate", parents=[common], help="Generate and store a world"
    )
    generate.add_argument("--player", required=True, help="Player id")
    generate.add_argument("--session-id", required=True, help="Session id")
    generate.add_argument("--width", type=int, default=None, help="World width")
    generate.add_argument("--height", type=int, default=None, help="World height")
    generate.add_argument(
        "--landmark-percentage",
        type=float,
        default=None,
        help="Fraction of tiles scattered as landmarks in basic mode",
    )
    generate.add_argument(
        "--imaginary-world",
        action="store_true",
        help="Use a biome configuration instead of basic generation",
    )
    generate.add_argument(
        "--prompt", type=str, default=None, help="Prompt passed to the config source"
    )
    generate.add_argument(
        "--biome-config",
        type=str,
        default=None,
        help="JSON biome configuration file (implies --imaginary-world)",
    )
    generate.add_argument("--seed", type=int, default=None, help="Random seed")
    generate.add_argument(
        "--config", type=str, default=None, help="Generator TOML config file"
    )
    generate.add_argument(
        "--output",
        "-o",
        type=str,
        default=None,
        help="Write the full JSON response to this path",
    )

    show = commands.add_parser(
        "show", parents=[common], help="Summarize a stored world"
    )
    key = show.add_mutually_exclusive_group(required=True)
    key.add_argument("--player", help="Player id")
    key.add_argument("--session-id", help="Session id")

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for world generation."""
    args = _build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    # Import here to avoid slow startup for --help
    from pydantic import ValidationError

    from .biome import FileConfigSource
    from .config import GeneratorConfig, load_config
    from .exceptions import WorldGenError
    from .persistence import JsonFileWorldStore
    from .service import GenerateRequest, WorldService

    logger = structlog.get_logger()
    store = JsonFileWorldStore(Path(args.store_dir))

    if args.command == "show":
        service = WorldService(store)
        try:
            snapshot = service.load(player_id=args.player, session_id=args.session_id)
        except WorldGenError as e:
            logger.error("show_failed", error=str(e))
            return 1
        grid = snapshot.world_grid
        print(f"Player {snapshot.player_id}, session {snapshot.session_id}")
        print(f"Saved at {snapshot.timestamp.isoformat()}")
        _print_summary(grid)
        return 0

    try:
        config = load_config(Path(args.config)) if args.config else GeneratorConfig()
    except (OSError, tomllib.TOMLDecodeError, ValidationError) as e:
        logger.error("config_load_failed", path=args.config, error=str(e))
        return 1
    source = FileConfigSource(Path(args.biome_config)) if args.biome_config else None
    service = WorldService(store, config_source=source, config=config)

    try:
        request = GenerateRequest(
            player=args.player,
            session_id=args.session_id,
            width=args.width,
            height=args.height,
            landmark_percentage=args.landmark_percentage,
            imaginary_world=args.imaginary_world or source is not None,
            prompt=args.prompt,
            seed=args.seed,
        )
    except ValidationError as e:
        logger.error("invalid_request", error=str(e))
        return 1
    try:
        response = service.generate(request)
    except WorldGenError as e:
        logger.error("generate_failed", error=str(e), error_type=type(e).__name__)
        return 1

    print(response.message)
    if response.used_default_config:
        print("Biome configuration was invalid; used the built-in default")
    _print_summary(response.terrain)
    print(f"  quests: {response.quest_count}")

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(response.model_dump_json(by_alias=True), encoding="utf-8")
        print(f"Saved response to {output_path}")

    return 0 if response.persisted else 2


def _print_summary(grid) -> None:
    counts = Counter(tile.category for _, _, tile in grid.iter_tiles())
    landmarks = sum(1 for _, _, tile in grid.iter_tiles() if tile.is_landmark)
    merchants = sum(1 for _, _, tile in grid.iter_tiles() if tile.has_merchant)
    print(f"World {grid.width}x{grid.height}:")
    for name, count in counts.most_common():
        print(f"  {name}: {count} ({count / grid.total_tiles * 100:.1f}%)")
    print(f"  landmarks: {landmarks}")
    print(f"  merchants: {merchants}")


if __name__ == "__main__":
    sys.exit(main())

import argparse
import logging
import random
import sys
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from game_config import ConfigurationError, GameConfig, load_config
from game_session import GameState, Session

console = Console()
logger = logging.getLogger("flappy")


def setup_logging(level: str = "warning"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="flappy-core", description="Flappy Bird game loop")
    sub = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", help="JSON file with GameConfig overrides")
    common.add_argument("--seed", type=int, help="Seed for pipe gap randomization")
    common.add_argument("--pairs", type=int, dest="pipe_pairs", help="Number of pipe pairs")
    common.add_argument("--width", type=int, dest="screen_width", help="Screen width")
    common.add_argument("--height", type=int, dest="screen_height", help="Screen height")
    common.add_argument("--log-level", default="warning", help="debug, info, warning or error")

    sub.add_parser("play", parents=[common], help="Open the game window")

    simulate = sub.add_parser("simulate", parents=[common], help="Run the game loop headless")
    simulate.add_argument("--ticks", type=int, default=1000, help="Maximum ticks to simulate")
    simulate.add_argument("--jump-every", type=int, default=0, help="Jump every K ticks (0 = never)")
    return parser


def config_from_args(args: argparse.Namespace) -> GameConfig:
    return load_config(
        args.config,
        pipe_pairs=args.pipe_pairs,
        screen_width=args.screen_width,
        screen_height=args.screen_height,
    )


def new_session(config: GameConfig, seed: Optional[int]) -> Session:
    session = Session(config, random.Random(seed))
    session.initialize(config.screen_width, config.screen_height)
    return session


def simulate(session: Session, ticks: int, jump_every: int = 0) -> Session:
    """Drive a session without a window until game over or `ticks` run out."""
    for i in range(1, ticks + 1):
        if jump_every > 0 and i % jump_every == 0:
            session.handle_jump()
        session.tick()
        if session.state == GameState.GAME_OVER:
            break
    return session


def render_summary(session: Session) -> Table:
    table = Table(title="Simulation", show_header=False, border_style="cyan")
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Ticks survived", str(session.ticks))
    table.add_row("Score", str(session.score))
    table.add_row("Speed", f"x{session.speed_multiplier:.1f}")
    table.add_row("State", session.state.value)
    table.add_row("Reason", session.game_over_reason or "-")
    return table


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        config = config_from_args(args)
        logger.info("Running %s with seed %s", args.command, args.seed)
        if args.command == "simulate":
            session = new_session(config, args.seed)
            simulate(session, args.ticks, args.jump_every)
            console.print(render_summary(session))
            return 0

        # Imported lazily so `simulate` never needs a display
        from game_renderer import GameApp

        console.print(Panel.fit(
            "[bold cyan]Flappy Bird[/]\n[dim]SPACE jump - R restart - ESC quit[/]",
            border_style="cyan"
        ))
        GameApp(new_session(config, args.seed), config).run()
        return 0
    except ConfigurationError as e:
        console.print(Panel(str(e), title="[bold red]Configuration error[/]", border_style="red", expand=False))
        return 2


if __name__ == "__main__":
    sys.exit(main())

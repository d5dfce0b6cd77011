"""CLI entry point: python -m tictacpro [config.yaml]

Terminal front end for the game. Cells are numbered 1-9, left to right and
top to bottom. Commands:
    1-9          play that cell
    r            reset the board (scores are kept)
    m <mode>     switch mode: pvp, basic or ai (scores are cleared)
    q            quit
"""

import argparse
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console, Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from tictacpro.config import AppConfig, load_config, parse_mode
from tictacpro.game.board import GameStatus, Mark
from tictacpro.game.state import GameState, Mode, ScoreTally
from tictacpro.session import build_orchestrator

_MARK_STYLES = {Mark.X: "bold blue", Mark.O: "bold magenta"}

_THINKING = {
    Mode.VS_AI: "ARTIFICIAL INTELLIGENCE IS THINKING...",
    Mode.VS_BASIC_BOT: "Training bot is thinking...",
}

_HELP = "[dim]1-9 play  |  r reset  |  m pvp/basic/ai change mode  |  q quit[/dim]"


def _render_board(state: GameState) -> Panel:
    winning = set(state.winning_line or ())
    grid = Table(show_header=False, show_lines=True, padding=(0, 2))
    for _ in range(3):
        grid.add_column(justify="center")
    for row in range(3):
        cells = []
        for col in range(3):
            index = row * 3 + col
            mark = state.board[index]
            if mark is None:
                cells.append(Text(str(index + 1), style="dim"))
                continue
            style = _MARK_STYLES[mark]
            if index in winning:
                style += " reverse green"
            cells.append(Text(mark.value, style=style))
        grid.add_row(*cells)
    return Panel(grid, title="[bold]TIC-TAC-TOE PRO[/bold]", border_style="blue", expand=False)


def _render_scoreboard(scores: ScoreTally) -> Panel:
    table = Table(show_edge=False, pad_edge=False, expand=False)
    table.add_column("X", style="blue", justify="center")
    table.add_column("O", style="magenta", justify="center")
    table.add_column("DRAW", style="white", justify="center")
    table.add_row(str(scores.x_wins), str(scores.o_wins), str(scores.draws))
    return Panel(table, title="[bold]Scoreboard[/bold]", border_style="purple", expand=False)


def _render_commentary(state: GameState) -> Panel:
    if state.status is GameStatus.ONGOING:
        turn = Text.assemble("Next turn: player ", (state.current_mark.value, _MARK_STYLES[state.current_mark]))
    else:
        turn = Text("Game over. Press r for a rematch.", style="bold")
    body = Group(Text(f'"{state.commentary}"', style="italic"), Text(""), turn)
    return Panel(body, title="[bold]AI Comms[/bold]", border_style="green", expand=False)


def render(state: GameState, scores: ScoreTally) -> Group:
    return Group(
        Text(state.mode.label.upper(), style="bold cyan"),
        _render_board(state),
        _render_scoreboard(scores),
        _render_commentary(state),
        Text.from_markup(_HELP),
    )


def _handle_command(orchestrator, line: str, console: Console) -> bool:
    """Apply one line of input. Returns False when the player quits."""
    parts = line.strip().split()
    if not parts:
        return True
    cmd = parts[0].lower()

    if cmd in ("q", "quit", "exit"):
        return False
    if cmd in ("r", "reset"):
        orchestrator.reset()
    elif cmd in ("m", "mode"):
        if len(parts) != 2:
            console.print("[yellow]Usage: m pvp|basic|ai[/yellow]")
            return True
        try:
            orchestrator.change_mode(parse_mode(parts[1]))
        except ValueError as e:
            console.print(f"[yellow]{e}[/yellow]")
    elif cmd.isdigit() and 1 <= int(cmd) <= 9:
        if not orchestrator.select_cell(int(cmd) - 1):
            console.print("[yellow]That move is not available.[/yellow]")
    else:
        console.print(f"[yellow]Unknown command: {cmd!r}[/yellow]")
    return True


def play(orchestrator, console: Console) -> None:
    """Read commands until the player quits or input ends."""
    while True:
        state = orchestrator.state
        if state.automated_turn_in_flight:
            with console.status(_THINKING[state.mode]):
                orchestrator.wait_for_automated_turn()
            state = orchestrator.state

        console.print()
        console.print(render(state, orchestrator.scores))
        try:
            line = console.input("[bold]> [/bold]")
        except (EOFError, KeyboardInterrupt):
            console.print()
            return
        if not _handle_command(orchestrator, line, console):
            return


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="tictacpro",
        description="Tic-Tac-Toe against a friend, a training bot, or an AI",
    )
    parser.add_argument(
        "config",
        type=Path,
        nargs="?",
        default=None,
        help="Path to game YAML config file (default: built-in settings)",
    )
    parser.add_argument(
        "--mode",
        default=None,
        help="Starting mode: pvp, basic or ai (overrides the config file)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level for messages on stderr",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    load_dotenv()

    if args.config is not None and not args.config.exists():
        print(f"Error: config file not found: {args.config}", file=sys.stderr)
        sys.exit(1)

    try:
        config = load_config(args.config) if args.config else AppConfig()
        if args.mode:
            config.game.mode = parse_mode(args.mode)
        orchestrator = build_orchestrator(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    console = Console()
    with orchestrator:
        play(orchestrator, console)


if __name__ == "__main__":
    main()

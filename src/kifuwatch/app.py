"""Application entry point: a headless watcher on the Qt event loop."""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from pathlib import Path

from kifuwatch.config import MODES, WatchConfig, config_from_mapping, load_config
from kifuwatch.core.models import GameIdentity
from kifuwatch.core.timecontrol import extract_game_id
from kifuwatch.sync.boards import BoardSet, GameSelector
from kifuwatch.sync.session import BoardModel, BoardSession
from kifuwatch.sync.source import QtRecordSource, RecordSource

_LOGGER = logging.getLogger("kifuwatch")


def log_board(model: BoardModel) -> None:
    """Render callback that writes a one-line board summary to the log."""
    move = model.selected_move
    label = move.label if move is not None and move.label else "start"
    score = "" if move is None or move.score is None else f" score {move.score:+d}"
    clocks = ""
    if model.remaining_black or model.remaining_white:
        clocks = f" ☗{model.remaining_black or '-'} ☖{model.remaining_white or '-'}"
    state = " (finished)" if model.is_terminal else ""
    _LOGGER.info(
        "%s: %d/%d %s%s%s%s",
        model.identity.display_name,
        model.selected_ply,
        model.max_ply,
        label,
        score,
        clocks,
        state,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kifuwatch", description="Follow live shogi game records."
    )
    parser.add_argument("--config", type=Path, help="YAML config file")
    parser.add_argument("--mode", choices=MODES)
    parser.add_argument("--base-url", dest="base_url")
    parser.add_argument("--record-url", dest="record_url_template")
    parser.add_argument("--list-url", dest="list_url")
    parser.add_argument("--canonical-url", dest="canonical_url_template")
    parser.add_argument("--game", dest="game_id", help="game id or #fragment")
    parser.add_argument("--name", dest="game_name")
    parser.add_argument("--ply", dest="start_ply", type=int)
    parser.add_argument("--span-ms", dest="window_span_ms", type=int)
    parser.add_argument("--encoding", help="record and list text encoding")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def build_config(args: argparse.Namespace) -> WatchConfig:
    """Merge a config file (if any) with command-line overrides."""
    overrides = {
        key: value
        for key, value in vars(args).items()
        if key not in ("config", "verbose") and value is not None
    }
    if "game_id" in overrides:
        overrides["game_id"] = extract_game_id(overrides["game_id"]) or overrides["game_id"]
    if args.config is None:
        return config_from_mapping(overrides)
    base = load_config(args.config)
    merged = {
        key: value
        for key, value in vars(base).items()
        if key != "list_log_parser"
    }
    merged.update(overrides)
    return config_from_mapping(merged)


def start_watch(config: WatchConfig, source: RecordSource) -> object:
    """Wire sessions for the configured mode and kick off the first load."""
    if config.mode == "multi":
        boards = BoardSet(
            config,
            source=source,
            session_factory=lambda _identity: BoardSession(
                config, source=source, render=log_board
            ),
        )
        boards.refresh()
        return boards

    if config.mode == "single":
        selector = GameSelector(
            config,
            source=source,
            session=BoardSession(config, source=source, render=log_board),
        )
        selector.refresh(requested_id=config.game_id)
        return selector

    if not config.game_id:
        raise ValueError("direct mode needs a game id")
    session = BoardSession(
        config, source=source, render=log_board, initial_ply=config.start_ply
    )
    session.assign(GameIdentity(config.game_id, config.game_name or config.game_id))
    return session


def main(argv: list[str] | None = None) -> int:
    """Launch the watcher and run until interrupted."""
    from PyQt6.QtCore import QCoreApplication, QTimer

    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = build_config(args)
    except (OSError, ValueError) as exc:
        _LOGGER.error("Invalid configuration: %s", exc)
        return 2

    app = QCoreApplication(sys.argv[:1])
    app.setApplicationName("kifuwatch")
    signal.signal(signal.SIGINT, lambda *_: app.quit())
    # Python signal handlers only run when control returns to the interpreter.
    wakeup = QTimer(app)
    wakeup.timeout.connect(lambda: None)
    wakeup.start(500)

    source = QtRecordSource(app, encoding=config.encoding)
    try:
        watch = start_watch(config, source)
    except ValueError as exc:
        _LOGGER.error("%s", exc)
        return 2

    exit_code = app.exec()
    if isinstance(watch, BoardSet):
        watch.shutdown()
    elif isinstance(watch, GameSelector):
        watch.session.disable()
    elif isinstance(watch, BoardSession):
        watch.disable()
    return exit_code


if __name__ == "__main__":
    sys.exit(main())

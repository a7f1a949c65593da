# main.py
from __future__ import annotations
import sys
import logging
from typing import Optional

import typer
from dotenv import load_dotenv
from PySide6.QtCore import QCoreApplication
from rich.console import Console

from app.errors import TouchTyperError
from app.state import MAX_DURATION_MINUTES, MIN_DURATION_MINUTES
from app.config import load_or_create_config
from services.text_sources import get_opening_text, new_text_source
from ui.main_window import MainWindow
from utils.file_handler import default_log_path, ensure_dir

cli = typer.Typer(add_completion=False, help="Touch typing trainer with AI-generated practice text.")
err_console = Console(stderr=True)


def setup_logging() -> None:
    # stdout belongs to the terminal UI, so only the log file gets records
    handlers = []
    try:
        log_path = default_log_path()
        ensure_dir(log_path.parent)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))
    except OSError:
        handlers.append(logging.NullHandler())

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        handlers=handlers,
    )

    # Log any uncaught exceptions rather than silently dying
    def excepthook(exctype, value, tb):
        logging.critical("Unhandled exception", exc_info=(exctype, value, tb))
        sys.__excepthook__(exctype, value, tb)

    sys.excepthook = excepthook


@cli.command()
def main(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to a config.yaml file."),
    duration: Optional[int] = typer.Option(
        None,
        "--duration",
        "-d",
        min=MIN_DURATION_MINUTES,
        max=MAX_DURATION_MINUTES,
        help="Session length in minutes (overrides ui.default_duration_minutes).",
    ),
) -> None:
    setup_logging()
    load_dotenv()

    app = QCoreApplication.instance() or QCoreApplication(sys.argv[:1])
    app.setApplicationName("touchtyper")

    try:
        cfg, cfg_path = load_or_create_config(config)
        logging.info("using config %s", cfg_path or "<built-in defaults>")
        if duration is not None:
            cfg.ui.default_duration_minutes = duration

        source = new_text_source(cfg.text)
        text = get_opening_text(source, cfg.text)

        result = MainWindow(cfg, text, source).run()
    except TouchTyperError as e:
        logging.error("%s", e)
        err_console.print(f"[bold red]Error:[/] {e}")
        raise typer.Exit(code=1)

    if result.error is not None:
        logging.error("%s", result.error)
        err_console.print(f"[bold red]Error:[/] {result.error}")
        raise typer.Exit(code=1)
    if result.session is not None:
        s = result.session
        logging.info("session saved: %.1f wpm, %.1f%% accuracy, %d errors", s.wpm, s.accuracy, s.errors)


def run() -> None:
    cli()


if __name__ == "__main__":
    run()

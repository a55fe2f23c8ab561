"""Tsundoku - reading-progress tracker with book characters."""

from __future__ import annotations

import logging

from textual.app import App

from tsundoku.config import AppConfig, load_config
from tsundoku.dialogue.engine import DialogueEngine
from tsundoku.library.models import Book
from tsundoku.library.operations import BookOperations
from tsundoku.library.store import BookStore
from tsundoku.lookup.openbd import OpenBDClient
from tsundoku.ui.screens.book_screen import BookScreen
from tsundoku.ui.screens.library_screen import LibraryScreen
from tsundoku.ui.themes import APP_CSS


class TsundokuApp(App):
    """A terminal tracker for owned-but-unread books."""

    TITLE = "Tsundoku"
    CSS = APP_CSS

    def __init__(self, config: AppConfig | None = None) -> None:
        super().__init__()
        self.config = config or load_config()
        self.store = BookStore(self.config.db_path, key=self.config.storage_key)
        self.dialogue = DialogueEngine(self.config)
        self.lookup = OpenBDClient(self.config.lookup_base_url)
        self.ops = BookOperations(self.store, self.dialogue)

    def on_mount(self) -> None:
        self.ops.load_or_seed()
        self.push_screen(LibraryScreen())

    def open_book(self, book: Book) -> None:
        """Open a book's detail view. Called from LibraryScreen."""
        self.push_screen(BookScreen(book.id))

    async def action_quit(self) -> None:
        await self.dialogue.close()
        await self.lookup.close()
        self.store.close()
        self.exit()


def _setup_logging(config: AppConfig) -> None:
    handler = logging.FileHandler(config.log_path, encoding="utf-8")
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    root = logging.getLogger("tsundoku")
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)


def main() -> None:
    config = load_config()
    _setup_logging(config)
    app = TsundokuApp(config=config)
    app.run()


if __name__ == "__main__":
    main()

from __future__ import annotations

from typing import TYPE_CHECKING

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import VerticalScroll
from textual.screen import Screen
from textual.widgets import Footer, Input, ProgressBar, Static

from tsundoku.library.errors import NotFoundError, ValidationError
from tsundoku.library.models import Book, NO_COVER_URL
from tsundoku.library.progress import calculate_progress, clamp_page, is_completed

if TYPE_CHECKING:
    from tsundoku.app import TsundokuApp

QUICK_STEP = 50


class BookScreen(Screen):
    BINDINGS = [
        Binding("escape", "back", "Back"),
        Binding("right,plus", f"step({QUICK_STEP})", f"+{QUICK_STEP}P"),
        Binding("left,minus", f"step({-QUICK_STEP})", f"-{QUICK_STEP}P"),
        Binding("p", "enter_page", "Set page"),
    ]

    def __init__(self, book_id: str) -> None:
        super().__init__()
        self._book_id = book_id
        self._updating = False

    @property
    def td(self) -> TsundokuApp:
        return self.app  # type: ignore[return-value]

    def compose(self) -> ComposeResult:
        yield Static("", id="book-header")
        with VerticalScroll(id="book-body"):
            yield Static("", id="cover")
            yield Static("", id="character")
            yield Static("", id="dialogue")
            yield Static("", id="reason")
            yield ProgressBar(total=100, show_eta=False, id="progress-bar")
            yield Static("", id="page-label")
            yield Input(placeholder="ページ番号を入力して Enter", type="integer", id="page-input")
            yield Static("🎉 完読おめでとうございます！", id="completed")
        yield Footer()

    def on_mount(self) -> None:
        self._render_book()

    def _current(self) -> Book | None:
        return self.td.ops.get(self._book_id)

    def _render_book(self) -> None:
        book = self._current()
        if book is None:
            self.app.pop_screen()
            return

        pct = calculate_progress(book.current_page, book.total_page)
        self.query_one("#book-header", Static).update(f" {book.title}")
        self.query_one("#cover", Static).update(
            f"Cover: {book.cover_image or NO_COVER_URL}"
        )
        self.query_one("#character", Static).update(
            f"{book.character.emoji}  {book.character.type}"
        )
        dialogue = "…考え中…" if self._updating else book.latest_dialogue
        self.query_one("#dialogue", Static).update(dialogue)
        self.query_one("#reason", Static).update(f"購入理由: {book.reason}")
        self.query_one("#progress-bar", ProgressBar).update(progress=pct)
        self.query_one("#page-label", Static).update(
            f"{book.current_page} / {book.total_page} ページ  ({pct}%)"
        )
        self.query_one("#completed").set_class(is_completed(book), "visible")

    # ── Progress ────────────────────────────────

    def action_step(self, delta: int) -> None:
        book = self._current()
        if book is None or self._updating:
            return
        self._commit_page(clamp_page(book.current_page + delta, 0, book.total_page))

    def action_enter_page(self) -> None:
        if self._updating:
            return
        inp = self.query_one("#page-input", Input)
        inp.add_class("visible")
        inp.value = ""
        inp.focus()

    @on(Input.Submitted, "#page-input")
    def on_page_submitted(self, event: Input.Submitted) -> None:
        event.input.remove_class("visible")
        try:
            page = int(event.value)
        except ValueError:
            self.notify("ページ番号は数字で入力してください。", severity="error")
            return
        self._commit_page(page)

    def _commit_page(self, page: int) -> None:
        # one outstanding update per book; further input waits for it
        self._updating = True
        self._render_book()
        self._do_update(page)

    @work
    async def _do_update(self, page: int) -> None:
        try:
            book = await self.td.ops.update_progress(self._book_id, page)
        except (NotFoundError, ValidationError) as e:
            self._updating = False
            self.notify(str(e), severity="error")
            self._render_book()
            return
        self._updating = False
        self._render_book()
        if is_completed(book):
            self.notify(f"{book.character.emoji} 読了！")

    def action_back(self) -> None:
        page_input = self.query_one("#page-input", Input)
        if page_input.has_class("visible"):
            page_input.remove_class("visible")
            return
        self.app.pop_screen()

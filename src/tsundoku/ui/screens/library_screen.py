from __future__ import annotations

from typing import TYPE_CHECKING

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.screen import ModalScreen, Screen
from textual.widgets import Button, DataTable, Footer, Header, Label, Static

from tsundoku.library.errors import ValidationError
from tsundoku.library.progress import calculate_progress, is_completed
from tsundoku.ui.screens.add_book_screen import AddBookScreen, BookDraft

if TYPE_CHECKING:
    from tsundoku.app import TsundokuApp


class ConfirmDeleteScreen(ModalScreen[bool]):
    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
        Binding("y", "confirm", "Yes"),
        Binding("n", "cancel", "No"),
    ]

    DEFAULT_CSS = """
    ConfirmDeleteScreen {
        align: center middle;
    }
    #confirm-delete-dialog {
        width: 60;
        height: 9;
        background: $surface;
        border: solid $error;
        padding: 1 2;
    }
    #confirm-delete-msg {
        text-align: center;
        margin: 1 0;
    }
    #confirm-delete-buttons {
        align: center middle;
        height: 3;
    }
    #confirm-delete-buttons Button {
        margin: 0 2;
    }
    """

    def __init__(self, book_title: str) -> None:
        super().__init__()
        self._book_title = book_title

    def compose(self) -> ComposeResult:
        with Vertical(id="confirm-delete-dialog"):
            yield Label(f"「{self._book_title}」を削除しますか？", id="confirm-delete-msg")
            with Horizontal(id="confirm-delete-buttons"):
                yield Button("Delete (y)", variant="error", id="cd-yes")
                yield Button("Cancel (n)", variant="default", id="cd-no")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "cd-yes")

    def action_confirm(self) -> None:
        self.dismiss(True)

    def action_cancel(self) -> None:
        self.dismiss(False)


class LibraryScreen(Screen):
    BINDINGS = [
        Binding("A", "add_book", "Add", priority=True),
        Binding("D", "delete_book", "Delete", priority=True),
        Binding("q", "quit_app", "Quit"),
    ]

    @property
    def td(self) -> TsundokuApp:
        return self.app  # type: ignore[return-value]

    def compose(self) -> ComposeResult:
        yield Header()
        yield Static("", id="library-header")
        yield DataTable(id="book-table")
        yield Footer()

    def on_mount(self) -> None:
        table = self.query_one("#book-table", DataTable)
        table.cursor_type = "row"
        table.add_columns("Title", "Character", "Progress", "Pages")
        self._refresh_books()
        table.focus()

    def on_screen_resume(self) -> None:
        self._refresh_books()
        self.query_one("#book-table", DataTable).focus()

    def _refresh_books(self) -> None:
        table = self.query_one("#book-table", DataTable)
        table.clear()

        books = self.td.ops.books
        for book in books:
            pct = calculate_progress(book.current_page, book.total_page)
            mark = " ✓" if is_completed(book) else ""
            table.add_row(
                book.title,
                f"{book.character.emoji} {book.character.type}",
                f"{pct}%{mark}",
                f"{book.current_page}/{book.total_page}",
                key=book.id,
            )

        unread = sum(1 for b in books if not is_completed(b))
        self.query_one("#library-header", Static).update(
            f" 積読ライブラリ  ({len(books)} books, {unread} unfinished)"
        )

    # ── Add Book ────────────────────────────────

    def action_add_book(self) -> None:
        self.app.push_screen(AddBookScreen(), callback=self._on_draft)

    def _on_draft(self, draft: BookDraft | None) -> None:
        if draft:
            self._do_add_book(draft)

    @work(exclusive=True)
    async def _do_add_book(self, draft: BookDraft) -> None:
        try:
            book = await self.td.ops.add(
                title=draft.title,
                genre=draft.genre,
                total_page=draft.total_page,
                cover_image=draft.cover_image,
                reason=draft.reason,
            )
        except ValidationError as e:
            self.notify(str(e), severity="error")
            return
        self._refresh_books()
        self.notify(f"Added: {book.title}")

    # ── Delete Book ─────────────────────────────

    def action_delete_book(self) -> None:
        table = self.query_one("#book-table", DataTable)
        if table.row_count == 0:
            return
        row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        book = self.td.ops.get(str(row_key.value))
        if not book:
            return
        self.app.push_screen(
            ConfirmDeleteScreen(book.title),
            callback=lambda confirmed: self._on_delete_confirmed(confirmed, book.id),
        )

    def _on_delete_confirmed(self, confirmed: bool | None, book_id: str) -> None:
        if confirmed:
            self._do_delete(book_id)

    @work
    async def _do_delete(self, book_id: str) -> None:
        book = self.td.ops.get(book_id)
        title = book.title if book else book_id
        await self.td.ops.delete(book_id)
        self._refresh_books()
        self.notify(f"Removed: {title}")

    # ── Open / Quit ─────────────────────────────

    @on(DataTable.RowSelected, "#book-table")
    def on_row_selected(self, event: DataTable.RowSelected) -> None:
        book = self.td.ops.get(str(event.row_key.value))
        if book:
            self.td.open_book(book)

    async def action_quit_app(self) -> None:
        await self.td.action_quit()

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from textual import on, work
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, VerticalScroll
from textual.screen import ModalScreen
from textual.widgets import Button, Input, Label, Select

from tsundoku.library.characters import DEFAULT_GENRE, genre_choices

if TYPE_CHECKING:
    from tsundoku.app import TsundokuApp


@dataclass
class BookDraft:
    title: str
    genre: str
    total_page: int
    reason: str
    cover_image: Optional[str] = None


class AddBookScreen(ModalScreen[Optional[BookDraft]]):
    BINDINGS = [
        Binding("escape", "cancel", "Cancel"),
    ]

    DEFAULT_CSS = """
    AddBookScreen {
        align: center middle;
    }
    #add-book-dialog {
        width: 72;
        height: 90%;
        background: $surface;
        border: solid $primary;
        padding: 1 2;
    }
    #add-book-dialog Label {
        margin-top: 1;
    }
    #isbn-row {
        height: 3;
    }
    #isbn-input {
        width: 1fr;
    }
    #add-book-buttons {
        align: center middle;
        height: 3;
        margin-top: 1;
    }
    #add-book-buttons Button {
        margin: 0 2;
    }
    """

    @property
    def td(self) -> TsundokuApp:
        return self.app  # type: ignore[return-value]

    def compose(self) -> ComposeResult:
        with VerticalScroll(id="add-book-dialog"):
            yield Label("ISBN（任意）")
            with Horizontal(id="isbn-row"):
                yield Input(placeholder="978-4-...", id="isbn-input")
                yield Button("Lookup", id="ab-lookup")
            yield Label("タイトル")
            yield Input(placeholder="例：React完全ガイド", id="title-input")
            yield Label("なぜこの本を買ったのか")
            yield Input(
                placeholder="例：この技術をマスターして転職したいから！",
                id="reason-input",
            )
            yield Label("ジャンル")
            yield Select(
                genre_choices(), value=DEFAULT_GENRE, allow_blank=False, id="genre-select"
            )
            yield Label("総ページ数")
            yield Input(placeholder="300", type="integer", id="pages-input")
            yield Label("表紙画像URL（任意）")
            yield Input(placeholder="https://...", id="cover-input")
            with Horizontal(id="add-book-buttons"):
                yield Button("Add", variant="primary", id="ab-add")
                yield Button("Cancel [Esc]", variant="default", id="ab-cancel")

    def on_mount(self) -> None:
        self.query_one("#title-input", Input).focus()

    def _value(self, selector: str) -> str:
        return self.query_one(selector, Input).value.strip()

    # ── ISBN lookup ─────────────────────────────

    @on(Input.Submitted, "#isbn-input")
    def on_isbn_submitted(self) -> None:
        self._do_lookup(self._value("#isbn-input"))

    @work(exclusive=True)
    async def _do_lookup(self, isbn: str) -> None:
        button = self.query_one("#ab-lookup", Button)
        button.disabled = True
        try:
            info = await self.td.lookup.fetch(isbn)
        finally:
            button.disabled = False

        if info is None:
            self.notify(
                "本の情報を取得できませんでした。手動で入力してください。",
                severity="warning",
            )
            return

        # only fill what the lookup found, leave the rest for manual entry
        draft = info.apply_to({})
        self.query_one("#title-input", Input).value = draft["title"]
        self.query_one("#genre-select", Select).value = draft["genre"]
        if "total_page" in draft:
            self.query_one("#pages-input", Input).value = str(draft["total_page"])
        if "cover_image" in draft:
            self.query_one("#cover-input", Input).value = draft["cover_image"]
        self.query_one("#reason-input", Input).focus()

    # ── Submit ──────────────────────────────────

    def _build_draft(self) -> Optional[BookDraft]:
        title = self._value("#title-input")
        reason = self._value("#reason-input")
        pages_raw = self._value("#pages-input")
        try:
            total_page = int(pages_raw)
        except ValueError:
            total_page = 0
        if not title or not reason or total_page <= 0:
            self.notify(
                "タイトル・購入理由・総ページ数を入力してください。", severity="error"
            )
            return None

        genre = self.query_one("#genre-select", Select).value
        return BookDraft(
            title=title,
            genre=str(genre) if genre is not Select.BLANK else DEFAULT_GENRE,
            total_page=total_page,
            reason=reason,
            cover_image=self._value("#cover-input") or None,
        )

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "ab-lookup":
            self._do_lookup(self._value("#isbn-input"))
        elif event.button.id == "ab-add":
            draft = self._build_draft()
            if draft:
                self.dismiss(draft)
        elif event.button.id == "ab-cancel":
            self.dismiss(None)

    def action_cancel(self) -> None:
        self.dismiss(None)

"""Textual CSS themes for tsundoku."""

APP_CSS = """
/* ── Global ────────────────────────────────── */
Screen {
    background: $surface;
}

/* ── Library Screen ────────────────────────── */
#library-header {
    dock: top;
    height: 3;
    padding: 1 2;
    background: $primary;
    color: $text;
    text-style: bold;
}

#book-table {
    height: 1fr;
}

/* ── Book Screen ───────────────────────────── */
#book-header {
    dock: top;
    height: 1;
    background: $primary;
    color: $text;
    padding: 0 2;
    text-style: bold;
}

#book-body {
    height: 1fr;
    padding: 1 2;
}

#character {
    height: 3;
    text-align: center;
    text-style: bold;
}

#dialogue {
    border: round $accent;
    padding: 1 2;
    margin: 0 4 1 4;
    text-align: center;
}

#reason {
    color: $text-muted;
    margin-bottom: 1;
}

#progress-bar {
    margin: 1 0;
}

#page-label {
    text-align: center;
}

#completed {
    display: none;
    background: $success-darken-2;
    color: $text;
    text-align: center;
    padding: 1 2;
    margin-top: 1;
}

#completed.visible {
    display: block;
}

#page-input {
    display: none;
}

#page-input.visible {
    display: block;
}
"""

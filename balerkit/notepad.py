"""Plain-text document with file handling, clipboard and undo history."""

from __future__ import annotations

import os


class Document:
    """Text being edited, the file it belongs to and its edit history."""

    def __init__(self) -> None:
        self.text = ""
        self.current_file = ""
        self.clipboard = ""
        self._undo: list[str] = []
        self._redo: list[str] = []

    def _replace(self, text: str) -> None:
        """Set the text and forget the edit history."""
        self.text = text
        self._undo.clear()
        self._redo.clear()

    def _edit(self, text: str) -> None:
        if text == self.text:
            return
        self._undo.append(self.text)
        self._redo.clear()
        self.text = text

    def _span(self, start: int, end: int) -> tuple[int, int]:
        if not 0 <= start <= end <= len(self.text):
            raise ValueError(f"invalid selection {start}..{end}")
        return start, end

    def new(self) -> None:
        """Start an empty, unnamed document."""
        self.current_file = ""
        self._replace("")

    def open(self, path: str | os.PathLike) -> str:
        """Load ``path``; it becomes the current file even if it cannot be read."""
        self.current_file = os.fspath(path)
        with open(self.current_file, encoding="utf-8") as handle:
            text = handle.read()
        self._replace(text)
        return text

    def save(self) -> None:
        """Write the text to the current file."""
        with open(self.current_file, "w", encoding="utf-8") as handle:
            handle.write(self.text)

    def save_as(self, path: str | os.PathLike) -> str:
        """Write the text to ``path``, adding '.txt' if missing; return the path used."""
        target = os.fspath(path)
        if not target.lower().endswith(".txt"):
            target += ".txt"
        self.current_file = target
        self.save()
        return target

    def set_text(self, text: str) -> None:
        """Replace the text as a single undoable edit."""
        self._edit(text)

    def cut(self, start: int, end: int) -> str:
        """Move the selection to the clipboard."""
        start, end = self._span(start, end)
        selected = self.text[start:end]
        if selected:
            self.clipboard = selected
            self._edit(self.text[:start] + self.text[end:])
        return selected

    def copy(self, start: int, end: int) -> str:
        """Put the selection on the clipboard."""
        start, end = self._span(start, end)
        selected = self.text[start:end]
        if selected:
            self.clipboard = selected
        return selected

    def paste(self, position: int) -> str:
        """Insert the clipboard at ``position`` and return the new text."""
        self._span(position, position)
        if self.clipboard:
            self._edit(self.text[:position] + self.clipboard + self.text[position:])
        return self.text

    def undo(self) -> str:
        """Revert the last edit, if any, and return the text."""
        if self._undo:
            self._redo.append(self.text)
            self.text = self._undo.pop()
        return self.text

    def redo(self) -> str:
        """Reapply the last undone edit, if any, and return the text."""
        if self._redo:
            self._undo.append(self.text)
            self.text = self._redo.pop()
        return self.text
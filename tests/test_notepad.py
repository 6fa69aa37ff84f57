import pytest

from balerkit.notepad import Document


def test_save_as_and_open_round_trip(tmp_path):
    doc = Document()
    doc.set_text("hello\nworld")
    saved = doc.save_as(tmp_path / "note.txt")
    other = Document()
    assert other.open(saved) == "hello\nworld"
    assert other.current_file == saved


def test_save_as_appends_extension(tmp_path):
    doc = Document()
    saved = doc.save_as(tmp_path / "note")
    assert saved.endswith("note.txt")
    assert doc.current_file == saved


def test_save_as_keeps_uppercase_extension(tmp_path):
    doc = Document()
    target = str(tmp_path / "NOTE.TXT")
    assert doc.save_as(target) == target


def test_save_writes_current_file(tmp_path):
    path = tmp_path / "a.txt"
    path.write_text("old", encoding="utf-8")
    doc = Document()
    doc.open(path)
    doc.set_text("new")
    doc.save()
    assert path.read_text(encoding="utf-8") == "new"


def test_save_without_file_fails():
    doc = Document()
    with pytest.raises(OSError):
        doc.save()


def test_open_missing_file_fails_but_sets_current(tmp_path):
    doc = Document()
    missing = tmp_path / "missing.txt"
    with pytest.raises(OSError):
        doc.open(missing)
    assert doc.current_file == str(missing)


def test_new_clears(tmp_path):
    doc = Document()
    doc.set_text("abc")
    doc.save_as(tmp_path / "x.txt")
    doc.new()
    assert (doc.text, doc.current_file) == ("", "")
    assert doc.undo() == ""


def test_cut_and_paste():
    doc = Document()
    doc.set_text("hello world")
    assert doc.cut(0, 5) == "hello"
    assert doc.text == " world"
    assert doc.paste(len(doc.text)) == " worldhello"


def test_copy_leaves_text():
    doc = Document()
    doc.set_text("abcdef")
    assert doc.copy(2, 4) == "cd"
    assert doc.text == "abcdef"
    assert doc.clipboard == "cd"


def test_undo_redo():
    doc = Document()
    doc.set_text("one")
    doc.set_text("two")
    assert doc.undo() == "one"
    assert doc.undo() == ""
    assert doc.undo() == ""
    assert doc.redo() == "one"
    assert doc.redo() == "two"


def test_edit_after_undo_drops_redo():
    doc = Document()
    doc.set_text("one")
    doc.set_text("two")
    doc.undo()
    doc.set_text("three")
    assert doc.redo() == "three"


def test_invalid_selection():
    doc = Document()
    doc.set_text("abc")
    with pytest.raises(ValueError):
        doc.cut(2, 10)


def test_paste_with_empty_clipboard_is_noop():
    doc = Document()
    doc.set_text("abc")
    assert doc.paste(1) == "abc"
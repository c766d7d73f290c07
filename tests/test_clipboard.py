import pytest

from patchvision.core.clipboard import ClipboardStore
from patchvision.core.errors import ClipboardMissError, InputMalformedError


def test_capture_and_retrieve():
    store = ClipboardStore()
    store.capture("c1", "func a() {}\n")
    assert store.retrieve("c1") == "func a() {}\n"
    assert "c1" in store
    assert len(store) == 1


def test_last_write_wins():
    store = ClipboardStore()
    store.capture("c1", "first")
    store.capture("c1", "second")
    assert store.retrieve("c1") == "second"
    assert store.names() == ["c1"]


def test_miss_names_the_clipboard():
    store = ClipboardStore()
    with pytest.raises(ClipboardMissError) as info:
        store.retrieve("nope")
    assert info.value.name == "nope"
    assert info.value.structural
    assert "nope" in str(info.value)


def test_empty_name_is_rejected():
    store = ClipboardStore()
    with pytest.raises(InputMalformedError):
        store.capture("", "text")


def test_empty_text_is_a_valid_capture():
    store = ClipboardStore()
    store.capture("blank", "")
    assert store.retrieve("blank") == ""


def test_clear_only_when_asked():
    store = ClipboardStore()
    store.capture("b", "2")
    store.capture("a", "1")
    assert store.names() == ["a", "b"]
    store.clear()
    assert len(store) == 0
    assert "a" not in store

import os
import zipfile

import pytest

from microed import util


def test_string_width():
    text = "\tPot să \tmănânc sticlă și ea nu mă rănește."
    assert util.string_width(text, 23, 4) == 26


def test_string_width_non_positive():
    assert util.string_width("hello", 0, 4) == 0


@pytest.mark.parametrize(
    "n, rest, cols",
    [(2, "\thello", 2), (1, "\thello", 1), (4, "hello", 0), (5, "ello", 0)],
)
def test_slice_visual_end(n, rest, cols):
    slc, got_cols, _ = util.slice_visual_end("\thello", n, 4)
    assert slc == rest
    assert got_cols == cols


def test_slice_visual_end_char_pos():
    text = "\thello"
    rest, _, pos = util.slice_visual_end(text, 5, 4)
    assert text[pos:] == rest


def test_slice_start_and_end_round_trip():
    text = "ca\u0301fe\u0301 bar"
    for index in range(8):
        assert util.slice_start(text, index) + util.slice_end(text, index) == text


def test_slice_keeps_combining_marks_together():
    text = "e\u0301x"
    assert util.slice_start(text, 1) == "e\u0301"
    assert util.slice_end(text, 1) == "x"


def test_get_char_pos_in_line():
    assert util.get_char_pos_in_line("\thello", 4, 4) == 1
    assert util.get_char_pos_in_line("\thello", 2, 4) == 0


def test_rune_pos():
    data = "héllo".encode("utf-8")
    assert util.rune_pos(data, 3) == 2
    assert util.rune_pos(data, len(data)) == 5


def test_rune_at():
    assert util.rune_at("abc", 1) == "b"
    assert util.rune_at("a\u0301bc", 1) == "b"
    assert util.rune_at("abc", 5) == ""


def test_word_chars():
    assert util.is_word_char("a")
    assert util.is_word_char("_")
    assert util.is_word_char("7")
    assert not util.is_word_char("-")
    assert not util.is_word_char("")
    assert util.is_non_alpha_numeric("!")
    assert util.is_autocomplete(".")
    assert not util.is_autocomplete(" ")


def test_whitespace_predicates():
    assert util.is_whitespace("\n")
    assert not util.is_whitespace("\x1c")
    assert util.is_spaces("   ")
    assert not util.is_spaces(" \t")
    assert util.is_spaces_or_tabs(" \t ")
    assert util.is_all_whitespace(" \t\n")
    assert not util.is_all_whitespace(" x")


def test_spaces():
    assert util.spaces(3) == "   "


def test_leading_and_trailing_whitespace():
    assert util.get_leading_whitespace("\t  code ") == "\t  "
    assert util.get_trailing_whitespace("code \t\n") == " \t\n"
    assert util.has_trailing_whitespace("code ")
    assert not util.has_trailing_whitespace("code")
    assert not util.has_trailing_whitespace("")


def test_make_relative():
    base = os.path.abspath(os.sep + "a")
    path = os.path.join(base, "b", "c")
    assert util.make_relative(path, base) == os.path.join("b", "c")
    assert util.make_relative("", base) == ""


def test_make_relative_mixed_raises():
    with pytest.raises(ValueError):
        util.make_relative("rel/path", os.path.abspath(os.sep))


def test_replace_home(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("USERPROFILE", str(tmp_path))
    assert util.replace_home("~/notes.txt") == str(tmp_path) + "/notes.txt"
    assert util.replace_home("/plain/path") == "/plain/path"


def test_replace_home_unknown_user():
    with pytest.raises(ValueError):
        util.replace_home("~nosuchuserexample/file")


def test_get_path_and_cursor_position():
    assert util.get_path_and_cursor_position("util.go:10:5") == ("util.go", ["10", "5"])
    assert util.get_path_and_cursor_position("util.go:10") == ("util.go", ["10", "0"])
    assert util.get_path_and_cursor_position("util.go") == ("util.go", None)
    assert util.get_path_and_cursor_position("C:\\myfile.txt:10:5") == (
        "C:\\myfile.txt",
        ["10", "5"],
    )


def test_get_mod_time(tmp_path):
    target = tmp_path / "f.txt"
    target.write_text("x")
    os.utime(target, (1_000_000_000, 1_000_000_000))
    assert util.get_mod_time(target).timestamp() == 1_000_000_000


def test_get_mod_time_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        util.get_mod_time(tmp_path / "missing")


def test_escape_path():
    assert util.escape_path("/home/user/file.txt") == "%home%user%file.txt"


def test_parse_bool():
    assert util.parse_bool("on") is True
    assert util.parse_bool("off") is False
    assert util.parse_bool("true") is True
    assert util.parse_bool("0") is False
    with pytest.raises(ValueError):
        util.parse_bool("maybe")


def test_clamp():
    assert util.clamp(5, 0, 3) == 3
    assert util.clamp(-1, 0, 3) == 0
    assert util.clamp(2, 0, 3) == 2


def test_parse_special():
    assert util.parse_special("a\\tb") == "a\tb"


def test_unzip(tmp_path):
    archive = tmp_path / "a.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("dir/inner.txt", "inner")
        zf.writestr("top.txt", "top")
    dest = tmp_path / "out"
    util.unzip(archive, dest)
    assert (dest / "dir" / "inner.txt").read_text() == "inner"
    assert (dest / "top.txt").read_text() == "top"


def test_unzip_rejects_traversal(tmp_path):
    archive = tmp_path / "bad.zip"
    with zipfile.ZipFile(archive, "w") as zf:
        zf.writestr("../evil.txt", "evil")
    with pytest.raises(ValueError):
        util.unzip(archive, tmp_path / "out")
    assert not (tmp_path / "evil.txt").exists()
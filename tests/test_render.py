from rich.box import ROUNDED
from rich.cells import cell_len

from cdnscli.ui.render import (
    block_width,
    box,
    join_vertical,
    overlay,
    pad,
    place,
    pluralize,
)


def test_pad_truncates_and_fills():
    assert pad("abc", 5) == "abc  "
    assert pad("abcdef", 3) == "abc"
    assert pad("abc", -1) == ""


def test_pad_counts_wide_glyphs():
    assert cell_len(pad("𐄂", 4)) == 4
    assert cell_len(pad("名前", 3)) == 3


def test_place_centers():
    assert place("ab", 6) == "  ab  "
    assert place("ab", 6, align="left") == "ab    "
    assert place("ab", 6, align="right") == "    ab"
    assert place("abcdef", 3) == "abcdef"


def test_join_vertical_skips_empty():
    assert join_vertical("a", "", "b") == "a\nb"


def test_box_dimensions():
    out = box("hi", width=4).split("\n")
    # margin + border + padding + content + padding + border + margin
    assert len(out) == 7
    assert {cell_len(line) for line in out} == {4 + 2 + 2 + 2}
    assert out[1].strip() == "╭──────╮"
    assert out[3] == " │ hi   │ "


def test_box_without_margin():
    out = box("x", padding=0, margin=0).split("\n")
    assert out == ["╭─╮", "│x│", "╰─╯"]


def test_overlay_centers_foreground():
    bg = "\n".join(["....."] * 5)
    out = overlay("ab\ncd", bg).split("\n")
    assert len(out) == 5
    assert out[0] == "....."
    assert out[1] == ".ab.."
    assert out[2] == ".cd.."
    assert out[3] == "....."


def test_overlay_grows_canvas_for_large_foreground():
    out = overlay("abcd\nefgh\nijkl", "..")
    lines = out.split("\n")
    assert len(lines) == 3
    assert block_width(out) == 4
    assert lines[0] == "abcd"


def test_overlay_keeps_widths_with_wide_glyphs():
    bg = "\n".join(["𐄂𐄂𐄂𐄂"] * 3)
    out = overlay("x", bg)
    assert {cell_len(line) for line in out.split("\n")} == {cell_len("𐄂𐄂𐄂𐄂")}


def test_pluralize():
    assert pluralize(1, "zone", "zones") == "1 zone"
    assert pluralize(0, "zone", "zones") == "0 zones"
    assert pluralize(2, "record", "records") == "2 records"


def test_box_border_comes_from_rich_rounded():
    out = box("ab", padding=0, margin=0).split("\n")
    assert out[0] == ROUNDED.get_top([2])
    assert out[1] == ROUNDED.mid_left + "ab" + ROUNDED.mid_right
    assert out[-1] == ROUNDED.get_bottom([2])

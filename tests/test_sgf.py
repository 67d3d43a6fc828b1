import pytest

from analysis.sgf import Color, annotation, coord2point, escape_text, variations_to_sgf
from analysis.variations import Variation

COMMENT = "- `400` visits\n  - **V** `54.32%`\n  - **N** `12.3%`"


@pytest.fixture
def variation():
    return Variation(
        visits=400,
        stats={"V": "54.32%", "N": "12.3%"},
        moves=["D4", "Q16", "C3", "D5"],
    )


@pytest.mark.parametrize(
    "vertex, size, point",
    [
        ("D4", 19, "dp"),
        ("d4", 19, "dp"),
        ("A1", 19, "as"),
        ("T19", 19, "sa"),
        ("J9", 9, "ia"),
        ("pass", 19, ""),
        ("resign", 19, ""),
        ("Z1", 19, ""),
        ("D20", 19, ""),
        ("D4", 0, ""),
        ("D4", 26, ""),
    ],
)
def test_coord2point(vertex, size, point):
    assert coord2point(vertex, size) == point


def test_color_from_gtp():
    assert Color.from_gtp("white") is Color.WHITE
    assert Color.from_gtp("B") is Color.BLACK
    assert Color.from_gtp("x") is None
    assert Color.from_gtp("") is None
    assert Color.BLACK.opponent is Color.WHITE


def test_annotation(variation):
    assert annotation(variation) == COMMENT


def test_annotation_with_unknown_visits():
    assert annotation(Variation(visits=None)) == "- `?` visits"


def test_nested_tree(variation):
    sgf = variations_to_sgf([variation], Color.BLACK, 19)
    assert sgf == f"(;C[{COMMENT}]B[dp];W[pd];B[cq];W[do])"


def test_nested_tree_starts_with_mover(variation):
    sgf = variations_to_sgf([variation], Color.WHITE, 19)
    assert sgf.endswith("W[dp];B[pd];W[cq];B[do])")


def test_flat_tree_skips_passes():
    variation = Variation(visits=7, moves=["D4", "pass", "C3", "D5"])
    sgf = variations_to_sgf([variation], Color.WHITE, 19, flat=True)
    assert sgf == "(;C[- `7` visits]AB[do]AW[dp][cq]LB[dp:1][cq:3][do:4])"


def test_trees_are_concatenated_in_order(variation):
    second = Variation(visits=1, moves=["Q16", "D4", "R4", "C16"])
    sgf = variations_to_sgf([variation, second], Color.BLACK, 19)
    assert sgf.count("(;C[") == 2
    assert sgf.index("`400`") < sgf.index("`1`")
    assert ")(" in sgf


def test_no_variations_render_empty():
    assert variations_to_sgf([], Color.BLACK, 19) == ""


def test_escape_text():
    assert escape_text("a]b\\c") == "a\\]b\\\\c"

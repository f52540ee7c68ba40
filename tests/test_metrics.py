from writ_metrics import (
    PageDensity,
    estimate_ground_pages,
    estimate_row_pages,
    estimate_text_pages,
    split_grounds,
)


def test_text_pages_boundaries():
    assert estimate_text_pages("x" * 3200) == 1
    assert estimate_text_pages("x" * 3201) == 2
    assert estimate_text_pages("x" * 6400) == 2
    assert estimate_text_pages("x" * 6401) == 3


def test_empty_text_is_still_one_page():
    assert estimate_text_pages("") == 1
    assert estimate_text_pages(None) == 1


def test_row_pages():
    assert estimate_row_pages(0) == 1
    assert estimate_row_pages(15) == 1
    assert estimate_row_pages(16) == 2
    assert estimate_row_pages(-3) == 1


def test_ground_pages_ignore_blank_lines():
    text = "first\n\n   \nsecond\nthird\nfourth\nfifth\n"
    assert split_grounds(text) == ["first", "second", "third", "fourth", "fifth"]
    assert estimate_ground_pages(text) == 2
    assert estimate_ground_pages("a\nb\nc\nd") == 1
    assert estimate_ground_pages("") == 1


def test_density_is_tunable():
    density = PageDensity(chars_per_page=100, rows_per_page=5, grounds_per_page=1)
    assert estimate_text_pages("x" * 101, density) == 2
    assert estimate_row_pages(11, density) == 3
    assert estimate_ground_pages("a\nb\nc", density) == 3


def test_estimates_are_monotonic():
    previous = 0
    for length in range(0, 20000, 97):
        pages = estimate_text_pages("y" * length)
        assert pages >= previous
        previous = pages

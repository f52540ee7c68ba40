import string

import pytest
from hypothesis import given, settings, strategies as st

from writ_form import Petitioner, Respondent
from writ_labels import (
    BOLD,
    ITALIC,
    PLAIN,
    InlineToken,
    annexure_number,
    annexure_title,
    case_number_line,
    cause_title,
    cause_title_pair,
    ground_label,
    ground_marker,
    tokenize_inline,
)


def label_to_index(label):
    n = 0
    for ch in label:
        n = n * 26 + (ord(ch) - ord("A") + 1)
    return n - 1


@pytest.mark.parametrize(
    "index, label",
    [(0, "A"), (1, "B"), (25, "Z"), (26, "AA"), (27, "AB"), (51, "AZ"), (52, "BA"),
     (701, "ZZ"), (702, "AAA"), (18277, "ZZZ")],
)
def test_ground_label(index, label):
    assert ground_label(index) == label


@settings(max_examples=200)
@given(st.integers(min_value=0, max_value=10 ** 9))
def test_ground_label_is_a_bijection(index):
    label = ground_label(index)
    assert label and set(label) <= set(string.ascii_uppercase)
    assert label_to_index(label) == index


def test_ground_label_rejects_negative_index():
    with pytest.raises(ValueError):
        ground_label(-1)


def test_ground_marker_numeric_enumeration():
    assert ground_marker(0, "Numeric") == "1"
    assert ground_marker(26, "Numeric") == "27"
    assert ground_marker(26, "Alpha") == "AA"


def test_annexure_numbering_is_positional():
    assert [annexure_number(i) for i in range(3)] == ["P-1", "P-2", "P-3"]
    assert annexure_title(9) == "ANNEXURE P-10"


def test_cause_title_single_party():
    assert cause_title([Petitioner(name="Ravi Kumar")]) == "RAVI KUMAR"


def test_cause_title_two_parties():
    parties = [Petitioner(name="Ravi Kumar"), Petitioner(name="Sita Devi")]
    assert cause_title(parties).endswith("& ANR.")


def test_cause_title_many_parties():
    parties = [Respondent(name=f"R{i}") for i in range(3)]
    assert cause_title(parties) == "R0 & ORS."


def test_cause_title_with_authorised_representative():
    parties = [Petitioner(name="Acme Glass Ltd", auth_rep="its director Mr. Rao"), Petitioner(name="B")]
    assert cause_title(parties) == "ACME GLASS LTD (THROUGH ITS DIRECTOR MR. RAO) & ANR."


def test_cause_title_placeholder():
    assert cause_title([]) == "________________"
    assert cause_title([Petitioner(name="")]) == "________________"


def test_cause_title_pair_and_case_number(make_form):
    form = make_form(petition_type="Criminal", year="2026")
    assert cause_title_pair(form) == ("RAVI KUMAR", "UNION OF INDIA")
    assert case_number_line(form) == "W.P. (C) NO. _______ OF 2026"


def test_tokenize_plain_text():
    assert tokenize_inline("no markup here") == [InlineToken(PLAIN, "no markup here")]
    assert tokenize_inline("") == []


def test_tokenize_bold_and_italic():
    assert tokenize_inline("a **b** c *d* e") == [
        InlineToken(PLAIN, "a "),
        InlineToken(BOLD, "b"),
        InlineToken(PLAIN, " c "),
        InlineToken(ITALIC, "d"),
        InlineToken(PLAIN, " e"),
    ]


def test_tokenize_unterminated_markers_are_literal():
    assert tokenize_inline("price **50") == [InlineToken(PLAIN, "price **50")]
    assert tokenize_inline("5 * 3") == [InlineToken(PLAIN, "5 * 3")]


def test_tokenize_does_not_nest():
    assert tokenize_inline("**bold *inner* bold**") == [InlineToken(BOLD, "bold *inner* bold")]
    assert tokenize_inline("*a **b** c*") == [
        InlineToken(ITALIC, "a "),
        InlineToken(ITALIC, "b"),
        InlineToken(ITALIC, " c"),
    ]


def test_tokenize_bold_keeps_inner_asterisk():
    assert tokenize_inline("**M/S A*B TRADERS**") == [InlineToken(BOLD, "M/S A*B TRADERS")]
    assert tokenize_inline("a **x*y** and *z*") == [
        InlineToken(PLAIN, "a "),
        InlineToken(BOLD, "x*y"),
        InlineToken(PLAIN, " and "),
        InlineToken(ITALIC, "z"),
    ]


SEGMENT_TEXT = st.text(alphabet=string.ascii_letters + string.digits + " .,;:()-", min_size=1, max_size=10)
SEGMENTS = st.lists(st.tuples(st.sampled_from([PLAIN, BOLD, ITALIC]), SEGMENT_TEXT), max_size=8)


def _markup(kind, text):
    if kind == BOLD:
        return f"**{text}**"
    if kind == ITALIC:
        return f"*{text}*"
    return text


@settings(max_examples=200)
@given(SEGMENTS)
def test_tokenize_round_trip_strips_markers(segments):
    source = "".join(_markup(kind, text) for kind, text in segments)
    tokens = tokenize_inline(source)
    assert "".join(t.text for t in tokens) == "".join(text for _, text in segments)
    assert [t for t in tokens if t.kind != PLAIN] == [
        InlineToken(kind, text) for kind, text in segments if kind != PLAIN
    ]

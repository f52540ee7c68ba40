import re
from typing import List, NamedTuple, Sequence

from writ_form import PLACEHOLDER_NAME


###############################################################################
#  GROUNDS & ANNEXURES
###############################################################################
def ground_label(index: int) -> str:
    """
    Spreadsheet-column style label for the ground at 0-based index:
    0 -> A, 25 -> Z, 26 -> AA, 701 -> ZZ, 702 -> AAA.
    """
    if index < 0:
        raise ValueError("Ground index must be non-negative.")
    label = ""
    n = index
    while n >= 0:
        label = chr(n % 26 + ord("A")) + label
        n = n // 26 - 1
    return label


def ground_marker(index: int, enumeration: str = "Alpha") -> str:
    if enumeration == "Numeric":
        return str(index + 1)
    return ground_label(index)


def annexure_number(index: int) -> str:
    return f"P-{index + 1}"


def annexure_title(index: int) -> str:
    return f"ANNEXURE {annexure_number(index)}"


###############################################################################
#  CAUSE TITLE
###############################################################################
def cause_title(parties: Sequence) -> str:
    """
    Caption text for one side of the matter: the first party's name in capitals,
    its authorised representative if any, then "& ANR." for two parties or
    "& ORS." for more.
    """
    if not parties:
        return PLACEHOLDER_NAME
    first = parties[0]
    text = (first.name or PLACEHOLDER_NAME).upper()
    if first.auth_rep:
        text += f" (THROUGH {first.auth_rep.upper()})"
    if len(parties) == 2:
        text += " & ANR."
    elif len(parties) > 2:
        text += " & ORS."
    return text


def cause_title_pair(form):
    return cause_title(form.petitioners), cause_title(form.respondents)


def case_number_line(form) -> str:
    initial = (form.petition_type or "Civil")[:1].upper()
    return f"W.P. ({initial}) NO. _______ OF {form.year}"


###############################################################################
#  INLINE MARKUP
###############################################################################
PLAIN = "plain"
BOLD = "bold"
ITALIC = "italic"

# Bold is tried first and closes at the next "**", so it may contain a lone "*".
INLINE_MARKUP = re.compile(r"\*\*(.+?)\*\*|\*([^*]+)\*")


class InlineToken(NamedTuple):
    kind: str
    text: str


def tokenize_inline(text: str) -> List[InlineToken]:
    """
    Split text into plain, **bold** and *italic* runs. Spans do not nest;
    a marker without its closing partner is kept as literal text.
    """
    tokens = []
    pos = 0
    for m in INLINE_MARKUP.finditer(text or ""):
        if m.start() > pos:
            tokens.append(InlineToken(PLAIN, text[pos:m.start()]))
        if m.group(1) is not None:
            tokens.append(InlineToken(BOLD, m.group(1)))
        else:
            tokens.append(InlineToken(ITALIC, m.group(2)))
        pos = m.end()
    if text and pos < len(text):
        tokens.append(InlineToken(PLAIN, text[pos:]))
    return tokens

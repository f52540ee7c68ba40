"""
Section catalog and pagination for a writ petition bundle.

paginate() walks the fixed catalog of sections once and returns the Index
entries together with one RenderDirective per output page. Everything is
recomputed from the form on every call; PaginationCache only saves repeated
work for identical form values.
"""

import logging
import math
import re
from collections import OrderedDict
from functools import reduce
from typing import Any, Dict, NamedTuple, Optional, Tuple

from writ_labels import annexure_title
from writ_metrics import (
    DEFAULT_DENSITY,
    PageDensity,
    estimate_ground_pages,
    estimate_row_pages,
    estimate_text_pages,
)

logger = logging.getLogger(__name__)

# Section kinds, in catalog order.
LISTING_PROFORMA = "listing_proforma"
INDEX = "index"
URGENT_APPLICATION = "urgent_application"
CERTIFICATE = "certificate"
NOTICE_OF_MOTION = "notice_of_motion"
COURT_FEES = "court_fees"
MEMO_OF_PARTIES = "memo_of_parties"
SYNOPSIS_AND_DATES = "synopsis_and_dates"
MAIN_PETITION = "main_petition"
AFFIDAVIT = "affidavit"
ANNEXURE = "annexure"
APPLICATION = "application"
LETTER_OF_AUTHORITY = "letter_of_authority"
VAKALATNAMA = "vakalatnama"
PROOF_OF_SERVICE = "proof_of_service"

# Directive layouts.
SINGLE = "single"
COLLAPSED = "collapsed"
EXPANDED = "expanded"
FRONT_MATTER = "front_matter"

FRONT_MATTER_PREFIX = "A"

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


###############################################################################
#  VALUE TYPES
###############################################################################
class PageLabel(NamedTuple):
    """A page number, an inclusive range, or a lettered front-matter page."""
    start: int
    end: int
    prefix: Optional[str] = None

    @classmethod
    def single(cls, page: int) -> "PageLabel":
        return cls(page, page)

    @classmethod
    def span(cls, start: int, pages: int) -> "PageLabel":
        return cls(start, start + max(1, pages) - 1)

    @classmethod
    def front(cls, page: int, prefix: str = FRONT_MATTER_PREFIX) -> "PageLabel":
        return cls(page, page, prefix)

    @property
    def kind(self) -> str:
        if self.prefix:
            return "front"
        return "single" if self.start == self.end else "range"

    @property
    def pages(self) -> int:
        return self.end - self.start + 1

    def __str__(self) -> str:
        if self.prefix:
            return f"{self.prefix}-{self.start}"
        if self.start == self.end:
            return str(self.start)
        return f"{self.start}-{self.end}"


class IndexEntry(NamedTuple):
    ordinal: int
    title: str
    page_label: PageLabel


class RenderDirective(NamedTuple):
    logical_page: PageLabel
    physical_index: int
    section_kind: str
    payload: Dict[str, Any]


class Section(NamedTuple):
    """
    One active catalog entry.

    pages is the logical page cost. layout decides how many directives the
    section emits: SINGLE and COLLAPSED emit one, EXPANDED emits one per page
    (merging sheets[k] into the payload of page k when sheets is given).
    """
    kind: str
    title: str
    pages: int = 1
    layout: str = SINGLE
    payload: Dict[str, Any] = {}
    sheets: Optional[Tuple[Dict[str, Any], ...]] = None


class Pagination(NamedTuple):
    index_entries: Tuple[IndexEntry, ...]
    render_directives: Tuple[RenderDirective, ...]

    def index_rows(self):
        """(S.No., particulars, page no.) as printed on the Index page."""
        return [(e.ordinal, e.title, str(e.page_label)) for e in self.index_entries]

    @property
    def logical_pages(self) -> int:
        """Pages numbered in the Index, front matter excluded."""
        return sum(e.page_label.pages for e in self.index_entries if e.page_label.kind != "front")

    @property
    def physical_pages(self) -> int:
        return len(self.render_directives)


###############################################################################
#  SECTION CATALOG
###############################################################################
def parse_page_count(value, default: int = 1) -> int:
    """
    Read a declared page count the way the form stores it: an int, or a string
    starting with digits ("3", "3 pages"). Anything else, or a count below one,
    gives default.
    """
    count = None
    if isinstance(value, bool):
        count = None
    elif isinstance(value, int):
        count = value
    elif isinstance(value, float):
        count = int(value) if math.isfinite(value) else None
    elif value is not None:
        m = _LEADING_INT.match(str(value))
        if m:
            count = int(m.group(1))
    if count is None or count < 1:
        logger.debug("page count %r defaulted to %d", value, default)
        return default
    return count


def synopsis_pages(form, density: PageDensity = DEFAULT_DENSITY) -> Dict[str, int]:
    return {
        "synopsis": estimate_text_pages(form.synopsis_content, density),
        "dates": estimate_row_pages(len(form.date_list), density),
    }


def main_petition_pages(form, density: PageDensity = DEFAULT_DENSITY) -> Dict[str, int]:
    narrative = (form.petition_showeth or "") + (form.petition_facts or "")
    return {
        "narrative": estimate_text_pages(narrative, density),
        "grounds": estimate_ground_pages(form.petition_grounds, density),
        "prayers": estimate_text_pages(form.petition_prayers, density),
    }


def receipt_sheets(form) -> Tuple[Dict[str, Any], ...]:
    """
    One sheet per source page of every proof-of-service receipt, in upload
    order. Counts come from proof_of_service_page_counts; a receipt without a
    usable count takes one page.
    """
    counts = form.proof_of_service_page_counts
    sheets = []
    for idx, upload in enumerate(form.proof_of_service_uploads):
        pages = parse_page_count(counts[idx] if idx < len(counts) else None)
        sheets += [
            {"receipt_index": idx, "file": upload, "receipt_sheet": k + 1, "receipt_sheets": pages}
            for k in range(pages)
        ]
    return tuple(sheets)


def build_catalog(form, density: PageDensity = DEFAULT_DENSITY):
    """Active sections for this form, in filing order."""
    sections = []

    if form.include_listing_proforma:
        sections.append(Section(LISTING_PROFORMA, "LISTING PROFORMA", layout=FRONT_MATTER))

    notes = [n.text for n in form.notes] if form.include_index_notes else []
    sections.append(Section(INDEX, "INDEX", payload={"notes": notes}))
    sections.append(Section(URGENT_APPLICATION, "URGENT APPLICATION"))
    if form.include_certificate:
        sections.append(Section(CERTIFICATE, "CERTIFICATE"))
    sections.append(Section(NOTICE_OF_MOTION, "NOTICE OF MOTION"))
    sections.append(Section(COURT_FEES, "COURT FEES"))
    sections.append(Section(MEMO_OF_PARTIES, "MEMO OF PARTIES"))

    breakdown = synopsis_pages(form, density)
    sections.append(Section(
        SYNOPSIS_AND_DATES, "SYNOPSIS AND LIST OF DATES",
        pages=sum(breakdown.values()), layout=COLLAPSED, payload={"breakdown": breakdown},
    ))
    breakdown = main_petition_pages(form, density)
    sections.append(Section(
        MAIN_PETITION, "WRIT PETITION",
        pages=sum(breakdown.values()), layout=COLLAPSED, payload={"breakdown": breakdown},
    ))
    sections.append(Section(AFFIDAVIT, "AFFIDAVIT"))

    for idx, ann in enumerate(form.annexures):
        title = annexure_title(idx)
        if ann.title:
            title += f": A TRUE COPY OF {ann.title.upper()}"
        sections.append(Section(
            ANNEXURE, title,
            pages=parse_page_count(ann.page_count), layout=EXPANDED,
            payload={"annexure_index": idx},
        ))

    for idx, app in enumerate(form.applications):
        sections.append(Section(
            APPLICATION, f"MISC. APPL.: {app.description.upper()}",
            pages=2, layout=EXPANDED, payload={"application_index": idx},
            sheets=({"part": "application"}, {"part": "affidavit"}),
        ))

    if form.letter_of_authority_upload:
        sections.append(Section(
            LETTER_OF_AUTHORITY, "LETTER OF AUTHORITY",
            payload={"file": form.letter_of_authority_upload},
        ))
    sections.append(Section(VAKALATNAMA, "VAKALATNAMA"))

    if form.proof_of_service_uploads:
        sheets = receipt_sheets(form)
        sections.append(Section(
            PROOF_OF_SERVICE, "PROOF OF SERVICE",
            pages=len(sheets), layout=EXPANDED, sheets=sheets,
        ))

    return sections


###############################################################################
#  PAGINATION WALKER
###############################################################################
class WalkState(NamedTuple):
    next_logical: int
    next_physical: int
    entries: Tuple[IndexEntry, ...]
    directives: Tuple[RenderDirective, ...]


INITIAL_STATE = WalkState(1, 0, (), ())


def _sheet_payload(section: Section, sheet: int) -> Dict[str, Any]:
    payload = dict(section.payload)
    payload["sheet"] = sheet + 1
    payload["sheets"] = section.pages
    if section.sheets is not None:
        payload.update(section.sheets[sheet])
    return payload


def _page_plan(section: Section, label: PageLabel):
    """(logical page, payload) for every output page of the section."""
    if section.layout == EXPANDED:
        return [
            (PageLabel.single(label.start + k), _sheet_payload(section, k))
            for k in range(section.pages)
        ]
    return [(label, dict(section.payload))]


def walk_section(state: WalkState, section: Section) -> WalkState:
    if section.layout == FRONT_MATTER:
        front_pages = sum(1 for d in state.directives if d.logical_page.prefix)
        label = PageLabel.front(front_pages + 1)
        next_logical = state.next_logical
    else:
        label = PageLabel.span(state.next_logical, section.pages)
        next_logical = state.next_logical + label.pages

    entry = IndexEntry(len(state.entries) + 1, section.title, label)
    directives = tuple(
        RenderDirective(page_label, state.next_physical + offset + 1, section.kind, payload)
        for offset, (page_label, payload) in enumerate(_page_plan(section, label))
    )
    return WalkState(
        next_logical,
        state.next_physical + len(directives),
        state.entries + (entry,),
        state.directives + directives,
    )


def paginate(form, density: Optional[PageDensity] = None) -> Pagination:
    """Index entries and render directives for the current form values."""
    catalog = build_catalog(form, density or DEFAULT_DENSITY)
    final = reduce(walk_section, catalog, INITIAL_STATE)
    return Pagination(final.entries, final.directives)


###############################################################################
#  CACHE
###############################################################################
class PaginationCache:
    """
    Least-recently-used results of paginate(), keyed by the form's value
    snapshot. Two equal forms share an entry even when they are different
    objects; a changed form always misses.
    """

    def __init__(self, maxsize: int = 32) -> None:
        self.maxsize = maxsize
        self._entries = OrderedDict()
        self.hits = 0
        self.misses = 0

    def __len__(self):
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()
        self.hits = self.misses = 0

    def paginate(self, form, density: Optional[PageDensity] = None) -> Pagination:
        density = density or DEFAULT_DENSITY
        key = (form.snapshot(), tuple(density))
        if key in self._entries:
            self._entries.move_to_end(key)
            self.hits += 1
            logger.debug("pagination cache hit (%d entries)", len(self._entries))
            return self._entries[key]
        self.misses += 1
        result = paginate(form, density)
        self._entries[key] = result
        if len(self._entries) > self.maxsize:
            self._entries.popitem(last=False)
        return result


_shared_cache = PaginationCache()


def paginate_cached(form, density: Optional[PageDensity] = None) -> Pagination:
    return _shared_cache.paginate(form, density)

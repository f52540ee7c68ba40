#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Generate a writ petition bundle (PDF) for the High Court from a JSON form,
together with a stand-alone Index as PDF and DOCX, and optionally pickle the
form record.

Every page of the bundle comes from one render directive produced by
writ_pagination.paginate(); the number printed in the footer is the
directive's logical page, so the bundle always agrees with its Index.

DEPENDENCIES:
    - Python 3
    - reportlab (for PDF generation)
    - python-docx (for the DOCX index)
    - pikepdf (for counting pages of attached PDFs)
    - colorlog (console logging)

USAGE EXAMPLE:
    python3 print_writ.py \
        --form=petition.json \
        --attachments-dir=uploads/ \
        --output=bundle.pdf \
        --index=index.pdf
"""

import argparse
import json
import logging
import os
import pickle
from pathlib import Path

# PDF-related imports
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import inch, mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

# DOCX-related imports
from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt

from colorlog import ColoredFormatter

from writ_form import PLACEHOLDER_NAME, WritFormData
from writ_labels import (
    BOLD,
    ITALIC,
    PLAIN,
    annexure_title,
    case_number_line,
    cause_title_pair,
    ground_marker,
    tokenize_inline,
)
from writ_metrics import PageDensity, split_grounds
from writ_pagination import (
    AFFIDAVIT,
    ANNEXURE,
    APPLICATION,
    CERTIFICATE,
    COURT_FEES,
    INDEX,
    LETTER_OF_AUTHORITY,
    LISTING_PROFORMA,
    MAIN_PETITION,
    MEMO_OF_PARTIES,
    NOTICE_OF_MOTION,
    PROOF_OF_SERVICE,
    SYNOPSIS_AND_DATES,
    URGENT_APPLICATION,
    VAKALATNAMA,
    paginate,
)
from writ_pdfpages import detect_attachment_pages

logger = logging.getLogger(__name__)

PAGE_WIDTH, PAGE_HEIGHT = A4
LEFT_MARGIN = 40 * mm
RIGHT_MARGIN = 40 * mm
TOP_MARGIN = 20 * mm
BOTTOM_MARGIN = 20 * mm
BODY_FONT_SIZE = 14
MIN_FONT_SIZE = 7
LINE_HEIGHT = 1.5

TOKEN_FONTS = {PLAIN: "Times-Roman", BOLD: "Times-Bold", ITALIC: "Times-Italic"}
IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".bmp")

PROVISION_OF_LAW = "ARTICLE 226 & 227 OF THE CONSTITUTION OF INDIA"
DEFAULT_PETITION_HEADING = (
    "WRIT PETITION UNDER ARTICLE 226 & 227 OF THE CONSTITUTION OF INDIA SEEKING THE "
    "ISSUANCE OF A WRIT, ORDER OR DIRECTION IN THE NATURE OF CERTIORARI, MANDAMUS OR "
    "ANY OTHER APPROPRIATE WRIT"
)


class BundleRenderError(ValueError):
    """A page whose content cannot be drawn on its single sheet."""


###############################################################################
#  TEXT LAYOUT HELPERS
###############################################################################
def split_rich_words(text, base_kind=PLAIN):
    """
    Break one paragraph into (font_name, word, glued) triples, where glued is
    True when the word continues the previous one without a space (e.g. a
    comma straight after a **bold** run).
    """
    words = []
    prev_open = False
    for token in tokenize_inline(text):
        kind = base_kind if token.kind == PLAIN else token.kind
        font_name = TOKEN_FONTS[kind]
        for i, word in enumerate(token.text.split()):
            glued = i == 0 and prev_open and not token.text[0].isspace()
            words.append((font_name, word, glued))
        prev_open = bool(token.text) and not token.text[-1].isspace()
    return words


def wrap_rich_text(full_text, font_size, max_width, base_kind=PLAIN):
    """
    Splits text into lines of runs that fit within max_width. Each paragraph
    starts a new line; an empty paragraph gives an empty line.
    """
    all_lines = []
    space = stringWidth(" ", TOKEN_FONTS[PLAIN], font_size)
    for paragraph in (full_text or "").split("\n"):
        words = split_rich_words(paragraph, base_kind)
        if not words:
            all_lines.append([])
            continue
        current_line = []
        current_width = 0.0
        for font_name, word, glued in words:
            word_width = stringWidth(word, font_name, font_size)
            gap = 0.0 if (glued or not current_line) else space
            if current_line and current_width + gap + word_width > max_width:
                all_lines.append(current_line)
                current_line = []
                current_width = 0.0
                gap = 0.0
            current_line.append((font_name, word, glued))
            current_width += gap + word_width
        all_lines.append(current_line)
    return all_lines


def runs_width(runs, font_size):
    space = stringWidth(" ", TOKEN_FONTS[PLAIN], font_size)
    width = 0.0
    for i, (font_name, word, glued) in enumerate(runs):
        if i > 0 and not glued:
            width += space
        width += stringWidth(word, font_name, font_size)
    return width


def draw_runs(pdf_canvas, runs, x, y, font_size):
    space = stringWidth(" ", TOKEN_FONTS[PLAIN], font_size)
    for i, (font_name, word, glued) in enumerate(runs):
        if i > 0 and not glued:
            x += space
        pdf_canvas.setFont(font_name, font_size)
        pdf_canvas.drawString(x, y, word)
        x += stringWidth(word, font_name, font_size)


###############################################################################
#  BLOCK LAYOUT
###############################################################################
# A page body is a list of blocks:
#   ("title", text)   centred, bold
#   ("center", text)  centred
#   ("text", text)    left aligned, inline **bold** / *italic* honoured
#   ("right", text)   right aligned, bold
#   ("row", (a, b, c)) three columns: short label, wrapped text, right label
#   ("gap", None)     one blank line
def layout_blocks(blocks, font_size, width):
    """Flatten blocks into drawable lines: (align, runs) or ("row", left, runs, right)."""
    lines = []
    label_col = 0.6 * inch
    right_col = 0.9 * inch
    for style, value in blocks:
        if style == "gap":
            lines.append(("left", []))
        elif style == "row":
            left, middle, right = value
            wrapped = wrap_rich_text(middle, font_size, width - label_col - right_col) or [[]]
            for i, runs in enumerate(wrapped):
                if i == 0:
                    lines.append(("row", split_rich_words(left), runs, split_rich_words(right)))
                else:
                    lines.append(("row", [], runs, []))
        else:
            align = {"title": "center", "center": "center", "right": "right"}.get(style, "left")
            base_kind = BOLD if style in ("title", "right") else PLAIN
            for runs in wrap_rich_text(value, font_size, width, base_kind):
                lines.append((align, runs))
    return lines


def fit_blocks(blocks, width, height):
    """
    Largest font size (down to MIN_FONT_SIZE) at which the blocks fit the
    given height, with the laid-out lines. Each directive owns exactly one
    sheet, so long estimated sections shrink rather than spill over; content
    that does not fit even at MIN_FONT_SIZE raises BundleRenderError.
    """
    font_size = BODY_FONT_SIZE
    while True:
        lines = layout_blocks(blocks, font_size, width)
        if len(lines) * font_size * LINE_HEIGHT <= height:
            return font_size, lines
        if font_size <= MIN_FONT_SIZE:
            capacity = int(height // (font_size * LINE_HEIGHT))
            raise BundleRenderError(
                f"{len(lines)} lines do not fit on one sheet at {font_size}pt (room for {capacity})"
            )
        font_size -= 1


def draw_lines(pdf_canvas, lines, font_size, x_left, x_right, y_top, y_bottom):
    """Draws laid-out lines from y_top downwards; returns the y below the last line."""
    leading = font_size * LINE_HEIGHT
    y = y_top - font_size
    for line in lines:
        if y < y_bottom:
            raise BundleRenderError(f"{len(lines)} lines overflow the page at {font_size}pt")
        if line[0] == "row":
            _, left, runs, right = line
            draw_runs(pdf_canvas, left, x_left, y, font_size)
            draw_runs(pdf_canvas, runs, x_left + 0.6 * inch, y, font_size)
            draw_runs(pdf_canvas, right, x_right - runs_width(right, font_size), y, font_size)
        else:
            align, runs = line
            if align == "center":
                x = (x_left + x_right - runs_width(runs, font_size)) / 2.0
            elif align == "right":
                x = x_right - runs_width(runs, font_size)
            else:
                x = x_left
            draw_runs(pdf_canvas, runs, x, y, font_size)
        y -= leading
    return y + leading - 0.3 * font_size


###############################################################################
#  PAGE FRAME
###############################################################################
def draw_advocate_name_vertical_center(pdf_canvas, text, page_width, page_height):
    """
    Draws the filing advocate's name (rotated 90 degrees) along the left edge,
    centred vertically.
    """
    if not text:
        return
    pdf_canvas.saveState()
    pdf_canvas.setFont("Times-Bold", 9)
    text_width = pdf_canvas.stringWidth(text, "Times-Bold", 9)
    pdf_canvas.translate(0.3 * inch, page_height / 2.0 - text_width / 2.0)
    pdf_canvas.rotate(90)
    pdf_canvas.drawString(0, 0, text)
    pdf_canvas.restoreState()


def draw_page_frame(pdf_canvas, form, page_label):
    """Bounding box, advocate name in the margin and the page number footer."""
    pdf_canvas.setLineWidth(1)
    pdf_canvas.rect(0.5 * inch, 0.5 * inch, PAGE_WIDTH - 1.0 * inch, PAGE_HEIGHT - 1.0 * inch)
    if form.advocates:
        draw_advocate_name_vertical_center(
            pdf_canvas, form.advocates[0].name.upper(), PAGE_WIDTH, PAGE_HEIGHT
        )
    if page_label is not None:
        pdf_canvas.setFont("Times-Bold", 11)
        pdf_canvas.drawCentredString(PAGE_WIDTH / 2.0, 0.65 * inch, str(page_label))


def header_blocks(form):
    """Court, case number and cause title printed at the top of filed pages."""
    petitioner_text, respondent_text = cause_title_pair(form)
    blocks = [
        ("title", (form.high_court or "").upper()),
        ("title", (form.jurisdiction or "").upper()),
        ("title", case_number_line(form)),
    ]
    if form.petition_type == "Criminal":
        blocks.append(("title", f"AND CRL.M.A. NO. ______ OF {form.year}"))
    blocks += [
        ("gap", None),
        ("text", "**IN THE MATTER OF:**"),
        ("text", f"**{petitioner_text}**"),
        ("right", "... PETITIONER(S)"),
        ("center", "*Versus*"),
        ("text", f"**{respondent_text}**"),
        ("right", "... RESPONDENT(S)"),
        ("gap", None),
    ]
    return blocks


def signature_blocks(form):
    blocks = [("gap", None), ("right", "PETITIONER(S)"), ("right", "THROUGH")]
    for adv in form.advocates:
        blocks.append(("right", f"({(adv.name or 'ADVOCATE').upper()})"))
        blocks.append(("right", "Advocate for Petitioner(s)"))
        if adv.enrolment_number:
            blocks.append(("right", f"Enrolment No: {adv.enrolment_number}"))
        if adv.addresses and adv.addresses[0]:
            blocks.append(("right", adv.addresses[0]))
        if adv.phone_numbers and adv.phone_numbers[0]:
            blocks.append(("right", f"M: {adv.phone_numbers[0]}"))
        if adv.email:
            blocks.append(("right", f"Email: {adv.email}"))
    blocks.append(("right", f"{form.location}, {form.filing_date}".strip(", ")))
    return blocks


###############################################################################
#  SECTION BODIES
###############################################################################
def listing_proforma_blocks(form, directive, pagination):
    rows = [
        ("1.", f"**CASE TYPE:** WRIT PETITION ({form.petition_type.upper()})"),
        ("2.", f"**CASE NUMBER:** {case_number_line(form)}"),
        ("3.", "**PETITIONER(S):** " + ", ".join(p.name.upper() for p in form.petitioners)),
        ("4.", "**RESPONDENT(S):** " + ", ".join(r.name.upper() for r in form.respondents)),
        ("5.", f"**DATE OF FILING:** {form.filing_date}"),
        ("6.", f"**PROVISION OF LAW:** {PROVISION_OF_LAW}"),
        ("7.", f"**COURT FEE:** INR {form.court_fee_amount} /-"),
    ]
    blocks = [("title", "LISTING PROFORMA"), ("gap", None)]
    blocks += [("row", (num, text, "")) for num, text in rows]
    blocks += [("gap", None), ("gap", None), ("row", ("", "**PETITIONER(S) SIGNATURE**", "**ADVOCATE(S) SIGNATURE**"))]
    return blocks


def index_blocks(form, directive, pagination):
    blocks = header_blocks(form) + [("title", "INDEX"), ("gap", None)]
    blocks.append(("row", ("**S.NO.**", "**PARTICULARS**", "**PAGE NO.**")))
    for ordinal, title, page in pagination.index_rows():
        blocks.append(("row", (str(ordinal), title, page)))
    notes = directive.payload.get("notes") or []
    if notes:
        blocks += [("gap", None), ("text", "**NOTES:**")]
        blocks += [("text", f"{i}. {note}") for i, note in enumerate(notes, start=1)]
    return blocks + signature_blocks(form)


def urgent_application_blocks(form, directive, pagination):
    return header_blocks(form) + [
        ("title", "URGENT APPLICATION"),
        ("gap", None),
        ("text", "To,"),
        ("text", "**The Registrar,**"),
        ("text", "**High Court of Delhi,**"),
        ("text", f"**New Delhi - {form.urgent_pin_code}**"),
        ("gap", None),
        ("text", "*Sub: Application for urgent listing of the captioned writ petition.*"),
        ("gap", None),
        ("text", form.urgent_content),
    ] + signature_blocks(form)


def certificate_blocks(form, directive, pagination):
    return header_blocks(form) + [
        ("title", "CERTIFICATE"),
        ("gap", None),
        ("text", form.certificate_content),
    ] + signature_blocks(form)


def notice_of_motion_blocks(form, directive, pagination):
    addressee = [
        form.notice_addressed_to,
        form.notice_designation,
        form.notice_org,
        form.notice_office,
        form.notice_location or form.notice_org,
    ]
    hearing = form.notice_hearing_date or "Next Hearing Date"
    return header_blocks(form) + [
        ("title", "NOTICE OF MOTION"),
        ("gap", None),
        ("text", "To,"),
    ] + [("text", line) for line in addressee if line] + [
        ("gap", None),
        ("text", "Sir/Madam,"),
        ("text", "Please take notice that the accompanying Writ Petition is likely to be listed "
                 f"before the Hon'ble Court on **{hearing}** or any other date the Hon'ble Court "
                 "may deem fit."),
    ] + signature_blocks(form)


def court_fees_blocks(form, directive, pagination):
    blocks = header_blocks(form) + [
        ("title", "COURT FEES"),
        ("gap", None),
        ("text", f"Court fee of **INR {form.court_fee_amount} /-** has been paid"
                 + (f" vide UIN **{form.court_fee_uin}**." if form.court_fee_uin else ".")),
    ]
    if form.court_fee_attachment:
        pages = form.court_fee_attachment_pages or "1"
        blocks.append(("center", f"*[COURT FEE RECEIPT ATTACHED: {pages} PAGE(S)]*"))
    return blocks + signature_blocks(form)


def _party_blocks(parties, with_email):
    blocks = []
    for i, party in enumerate(parties, start=1):
        blocks.append(("text", f"**{i}. {(party.name or PLACEHOLDER_NAME).upper()}**"))
        if party.auth_rep:
            blocks.append(("text", f"*Through its Authorised Representative {party.auth_rep}*"))
        blocks += [("text", addr) for addr in party.addresses if addr]
        blocks.append(("text", f"{party.city} - {party.pin}, {party.state}".upper()))
        if with_email and party.email:
            blocks.append(("text", f"Email: {party.email}"))
        blocks.append(("gap", None))
    return blocks


def memo_of_parties_blocks(form, directive, pagination):
    return (
        header_blocks(form)
        + [("title", "MEMO OF PARTIES"), ("gap", None)]
        + _party_blocks(form.petitioners, with_email=False)
        + [("right", "...PETITIONER(S)"), ("title", "VERSUS")]
        + _party_blocks(form.respondents, with_email=True)
        + [("right", "...RESPONDENT(S)")]
        + signature_blocks(form)
    )


def synopsis_blocks(form, directive, pagination):
    blocks = header_blocks(form) + [("title", "SYNOPSIS")]
    if form.synopsis_description:
        blocks.append(("text", f"**{form.synopsis_description}**"))
    blocks += [("text", form.synopsis_content), ("gap", None), ("title", "LIST OF DATES")]
    blocks.append(("row", ("", "**DATE / EVENTS**", "")))
    for entry in form.date_list:
        dates = ", ".join(d for d in entry.dates if d)
        blocks.append(("row", ("", f"**{dates}**: {entry.event}" if dates else entry.event, "")))
    return blocks + signature_blocks(form)


def main_petition_blocks(form, directive, pagination):
    blocks = header_blocks(form) + [
        ("title", form.petition_description_main or DEFAULT_PETITION_HEADING),
        ("gap", None),
        ("text", "**MOST RESPECTFULLY SHOWETH:**"),
        ("text", "1. The present Writ Petition is being filed by the Petitioner seeking the kind "
                 "indulgence of this Hon'ble Court under its Extraordinary Writ Jurisdiction."),
        ("text", form.petition_showeth),
        ("text", "**FACTS:**"),
        ("text", form.petition_facts),
        ("text", "*2. The Petitioner states that they have no other alternate, efficacious and "
                 "speedy remedy available against the impugned action other than the invocation "
                 "of the Extraordinary Writ Jurisdiction of this Hon'ble Court.*"),
        ("text", "**GROUNDS:**"),
    ]
    for idx, ground in enumerate(split_grounds(form.petition_grounds)):
        marker = ground_marker(idx, form.ground_enumeration_type)
        blocks.append(("text", f"**GROUND {marker}:** *Because* {ground.strip()}"))
    blocks += [
        ("text", "**PRAYER:**"),
        ("text", "IN THE LIGHT OF THE FACTS AND CIRCUMSTANCES STATED HEREIN ABOVE, IT IS MOST "
                 "HUMBLY PRAYED THAT THIS HON'BLE COURT MAY BE GRACIOUSLY PLEASED TO:"),
        ("text", "(a) " + (form.petition_prayers or "Issue an appropriate writ, order or direction.")),
        ("text", "(b) Pass such further orders as this Hon'ble Court may deem fit and proper in "
                 "the facts and circumstances of the case and in the interest of justice."),
        ("title", "AND FOR THIS ACT OF KINDNESS THE PETITIONER SHALL REMAIN DUTY BOUND, EVER PRAY."),
    ]
    return blocks + signature_blocks(form)


def _deponent_line(form):
    return (
        f"I, **{form.affidavit_name or PLACEHOLDER_NAME}**, aged about **{form.affidavit_age or '____'}** "
        f"years, resident of **{form.affidavit_address or PLACEHOLDER_NAME}**, presently at "
        f"**{form.affidavit_location or 'New Delhi'}**, do hereby solemnly affirm and declare as under:"
    )


def affidavit_blocks(form, directive, pagination):
    capacity = (
        "Petitioner" if form.affidavit_identity == "Petitioner"
        else "Authorised Representative of the Petitioner"
    )
    verified_on = form.verification_date or "____ day of ______"
    return header_blocks(form) + [
        ("title", "AFFIDAVIT"),
        ("gap", None),
        ("text", _deponent_line(form)),
        ("text", f"1. That I am the {capacity} in the above-mentioned Writ Petition and as such, I am "
                 "well conversant with the facts and circumstances of the case and am competent to "
                 "depose this affidavit."),
        ("text", "2. That the accompanying Writ Petition and the applications filed along with it have "
                 "been drafted by my counsel under my instructions. The contents thereof are true and "
                 "correct to my knowledge and based on records of the case."),
        ("text", "3. That the Annexures filed along with the Writ Petition are true copies of their "
                 "respective originals."),
        ("right", "DEPONENT"),
        ("title", "VERIFICATION"),
        ("text", f"Verified at **{form.affidavit_location.upper()}** on **{verified_on}** that the "
                 "contents of the above affidavit are true and correct to my knowledge, no part of it "
                 "is false and nothing material has been concealed therefrom."),
        ("right", "DEPONENT"),
    ]


def application_blocks(form, directive, pagination):
    app = form.applications[directive.payload["application_index"]]
    if directive.payload.get("part") == "affidavit":
        verified_on = app.verification_date
        if app.use_main_affidavit:
            verified_on = verified_on or form.verification_date
        verified_on = verified_on or "____ day of ______"
        statements = [
            ("text", "1. That I am the deponent herein and am well conversant with the facts of the case."),
            ("text", "2. That the accompanying application has been drafted under my instructions and "
                     "the contents are true and correct."),
        ]
        if app.use_main_affidavit:
            statements.append(
                ("text", "3. That the contents of my affidavit filed with the Writ Petition may be read "
                         "as part of this affidavit.")
            )
        return header_blocks(form) + [
            ("title", "AFFIDAVIT"),
            ("gap", None),
            ("text", _deponent_line(form)),
        ] + statements + [
            ("right", "DEPONENT"),
            ("title", "VERIFICATION"),
            ("text", f"Verified at **{form.affidavit_location.upper()}** on **{verified_on}** that the "
                     "contents of the above affidavit are true and correct."),
            ("right", "DEPONENT"),
        ]
    return header_blocks(form) + [
        ("title", f"MISC. APPL. NO. ______ OF {form.year}"),
        ("title", "IN"),
        ("title", case_number_line(form)),
        ("gap", None),
        ("title", f"APPLICATION UNDER SECTION 151 OF CPC FOR {app.description.upper()}"),
        ("text", "**MOST RESPECTFULLY SHOWETH:**"),
        ("text", app.showeth_content),
        ("text", "**PRAYER:**"),
        ("text", app.prayer_content),
    ] + signature_blocks(form)


def letter_of_authority_blocks(form, directive, pagination):
    return header_blocks(form) + [("title", "LETTER OF AUTHORITY"), ("gap", None)]


def vakalatnama_blocks(form, directive, pagination):
    names = ", ".join(adv.name.upper() for adv in form.advocates if adv.name)
    return header_blocks(form) + [
        ("title", "VAKALATNAMA"),
        ("gap", None),
        ("text", "The Petitioner(s) hereby appoint and authorize the Advocate(s) named below to "
                 "represent, appear and act on their behalf in the captioned matter."),
        ("gap", None),
        ("row", ("", f"**ADVOCATE(S):** {names}", "")),
        ("gap", None),
        ("row", ("", "**ADVOCATE(S) SIGNATURE**", "**PETITIONER(S)**")),
    ] + signature_blocks(form)


def annexure_blocks(form, directive, pagination):
    idx = directive.payload["annexure_index"]
    ann = form.annexures[idx]
    blocks = [("text", f"**{annexure_title(idx)}**")]
    if directive.payload["sheet"] == 1:
        blocks += [("gap", None), ("title", f"A TRUE COPY OF {ann.title.upper()}")]
        if ann.content_text.strip():
            blocks += [("gap", None), ("text", ann.content_text)]
    return blocks


def proof_of_service_blocks(form, directive, pagination):
    return header_blocks(form) + [("title", "PROOF OF SERVICE"), ("gap", None)]


BODY_BUILDERS = {
    LISTING_PROFORMA: listing_proforma_blocks,
    INDEX: index_blocks,
    URGENT_APPLICATION: urgent_application_blocks,
    CERTIFICATE: certificate_blocks,
    NOTICE_OF_MOTION: notice_of_motion_blocks,
    COURT_FEES: court_fees_blocks,
    MEMO_OF_PARTIES: memo_of_parties_blocks,
    SYNOPSIS_AND_DATES: synopsis_blocks,
    MAIN_PETITION: main_petition_blocks,
    AFFIDAVIT: affidavit_blocks,
    ANNEXURE: annexure_blocks,
    APPLICATION: application_blocks,
    LETTER_OF_AUTHORITY: letter_of_authority_blocks,
    VAKALATNAMA: vakalatnama_blocks,
    PROOF_OF_SERVICE: proof_of_service_blocks,
}


def attachment_for(form, directive):
    """(file reference, placeholder caption) for pages that carry an attachment."""
    payload = directive.payload
    if directive.section_kind == ANNEXURE:
        ann = form.annexures[payload["annexure_index"]]
        caption = f"[DOCUMENT: {ann.title or annexure_title(payload['annexure_index'])}"
        if payload["sheets"] > 1:
            caption += f", PAGE {payload['sheet']} OF {payload['sheets']}"
        return ann.file, caption + "]"
    if directive.section_kind == PROOF_OF_SERVICE:
        caption = f"[RECEIPT / PROOF OF SERVICE #{payload['receipt_index'] + 1}"
        if payload.get("receipt_sheets", 1) > 1:
            caption += f", PAGE {payload['receipt_sheet']} OF {payload['receipt_sheets']}"
        return payload.get("file"), caption + "]"
    if directive.section_kind == LETTER_OF_AUTHORITY:
        return payload.get("file"), "[ATTACHED LETTER OF AUTHORITY]"
    return None, None


###############################################################################
#  DRAWING ATTACHMENTS (PDF)
###############################################################################
def draw_attachment(pdf_canvas, reference, caption, base_dir, x, y_bottom, width, height):
    """
    Draws an image attachment scaled into the box, or a dashed placeholder with
    the caption when the attachment is not an image or cannot be loaded.
    """
    if reference and reference.lower().endswith(IMAGE_EXTENSIONS):
        path = Path(reference)
        if base_dir is not None and not path.is_absolute():
            path = Path(base_dir) / path
        try:
            img_reader = ImageReader(str(path))
            img_width, img_height = img_reader.getSize()
        except Exception as e:
            logger.warning("Unable to load attachment image %s: %s", path, e)
            caption = f"{caption} (unable to load image: {e})"
        else:
            scale = min(width / img_width, height / img_height, 1.0)
            new_width = img_width * scale
            new_height = img_height * scale
            pdf_canvas.drawImage(
                img_reader,
                x + (width - new_width) / 2.0,
                y_bottom + (height - new_height) / 2.0,
                width=new_width,
                height=new_height,
                preserveAspectRatio=True,
                anchor='c'
            )
            return

    pdf_canvas.saveState()
    pdf_canvas.setDash(4, 3)
    pdf_canvas.setStrokeGray(0.6)
    pdf_canvas.rect(x, y_bottom, width, height)
    pdf_canvas.restoreState()
    pdf_canvas.setFont("Times-BoldItalic", 11)
    for offset, line in enumerate(_split_caption(caption, width - 0.4 * inch)):
        pdf_canvas.drawCentredString(x + width / 2.0, y_bottom + height / 2.0 - offset * 14, line)


def _split_caption(caption, max_width):
    return [
        " ".join(word for _, word, _ in runs)
        for runs in wrap_rich_text(caption, 11, max_width, BOLD)
    ]


###############################################################################
#  MAIN PDF GENERATION
###############################################################################
def draw_directive_page(pdf_canvas, form, directive, pagination, base_dir=None):
    """
    Draws one physical page for one render directive. Raises
    BundleRenderError naming the section and page when the content does not
    fit its sheet.
    """
    try:
        _draw_directive_body(pdf_canvas, form, directive, pagination, base_dir)
    except BundleRenderError as e:
        raise BundleRenderError(
            f"Cannot render {directive.section_kind} (page {directive.logical_page}): {e}"
        ) from e


def _draw_directive_body(pdf_canvas, form, directive, pagination, base_dir):
    draw_page_frame(pdf_canvas, form, directive.logical_page)

    x_left = LEFT_MARGIN
    x_right = PAGE_WIDTH - RIGHT_MARGIN
    y_top = PAGE_HEIGHT - TOP_MARGIN
    y_bottom = BOTTOM_MARGIN + 0.4 * inch
    width = x_right - x_left

    blocks = BODY_BUILDERS[directive.section_kind](form, directive, pagination)
    reference, caption = attachment_for(form, directive)

    if caption is None:
        font_size, lines = fit_blocks(blocks, width, y_top - y_bottom)
        draw_lines(pdf_canvas, lines, font_size, x_left, x_right, y_top, y_bottom)
        return

    # The attachment keeps at least an inch below the heading.
    font_size, lines = fit_blocks(blocks, width, y_top - y_bottom - 1.0 * inch)
    y_after = draw_lines(pdf_canvas, lines, font_size, x_left, x_right, y_top, y_bottom)
    area_top = y_after - 0.3 * inch
    if area_top - y_bottom < 1.0 * inch:
        area_top = y_bottom + 1.0 * inch
    draw_attachment(
        pdf_canvas, reference, caption, base_dir,
        0.75 * inch, y_bottom, PAGE_WIDTH - 1.5 * inch, area_top - y_bottom
    )


def generate_bundle_pdf(output_filename, form, pagination, base_dir=None):
    """
    Draws every render directive on its own page, in order. The footer shows
    the directive's logical page label exactly as the Index does.
    """
    pdf_canvas = canvas.Canvas(output_filename, pagesize=A4)
    petitioner_text, respondent_text = cause_title_pair(form)
    pdf_canvas.setTitle("Writ Petition")
    pdf_canvas.setSubject(f"{petitioner_text} v. {respondent_text}")
    if form.advocates:
        pdf_canvas.setAuthor(form.advocates[0].name)
    pdf_canvas.setCreator("Writ Petition Bundle Generator")

    for directive in pagination.render_directives:
        draw_directive_page(pdf_canvas, form, directive, pagination, base_dir)
        pdf_canvas.showPage()

    pdf_canvas.save()
    logger.info("Bundle PDF saved as: %s (%d pages)", output_filename, len(pagination.render_directives))


###############################################################################
#  INDEX (PDF + DOCX)
###############################################################################
def generate_index_pdf(index_filename, form, pagination):
    """
    Stand-alone Index, continued over as many pages as the rows need.
    """
    pdf_canvas = canvas.Canvas(index_filename, pagesize=A4)
    pdf_canvas.setTitle("Index")

    x_left = LEFT_MARGIN
    x_right = PAGE_WIDTH - RIGHT_MARGIN
    y_top = PAGE_HEIGHT - TOP_MARGIN
    y_bottom = BOTTOM_MARGIN + 0.4 * inch
    width = x_right - x_left
    font_size = 12

    head = layout_blocks(header_blocks(form) + [("title", "INDEX"), ("gap", None)], font_size, width)
    column_head = layout_blocks([("row", ("**S.NO.**", "**PARTICULARS**", "**PAGE NO.**"))], font_size, width)
    rows = layout_blocks(
        [("row", (str(n), title, page)) for n, title, page in pagination.index_rows()],
        font_size, width,
    )

    leading = font_size * LINE_HEIGHT
    first_capacity = int((y_top - y_bottom) // leading) - len(head) - len(column_head)
    later_capacity = int((y_top - y_bottom) // leading) - len(column_head)
    pages = [rows[:max(1, first_capacity)]]
    remaining = rows[max(1, first_capacity):]
    while remaining:
        pages.append(remaining[:max(1, later_capacity)])
        remaining = remaining[max(1, later_capacity):]

    total_index_pages = len(pages)
    for page_no, page_rows in enumerate(pages, start=1):
        draw_page_frame(pdf_canvas, form, None)
        lines = (head if page_no == 1 else []) + column_head + page_rows
        draw_lines(pdf_canvas, lines, font_size, x_left, x_right, y_top, y_bottom)
        pdf_canvas.setFont("Times-Italic", 9)
        pdf_canvas.drawCentredString(
            PAGE_WIDTH / 2.0, 0.65 * inch, f"Index Page {page_no} of {total_index_pages}"
        )
        pdf_canvas.showPage()

    pdf_canvas.save()
    logger.info("Index PDF saved as: %s", index_filename)


def generate_index_docx(docx_filename, form, pagination):
    """
    Generates a docx Index: court heading, cause title and a three-column
    table of S.No., particulars and page numbers.
    """
    doc = Document()

    style = doc.styles['Normal']
    font = style.font
    font.name = 'Times New Roman'
    font.size = Pt(14)

    petitioner_text, respondent_text = cause_title_pair(form)
    for line in ((form.high_court or "").upper(), (form.jurisdiction or "").upper(), case_number_line(form)):
        par = doc.add_paragraph()
        par.alignment = WD_ALIGN_PARAGRAPH.CENTER
        par.add_run(line).bold = True

    caption = doc.add_paragraph()
    caption.alignment = WD_ALIGN_PARAGRAPH.CENTER
    caption.add_run(f"{petitioner_text}\n").bold = True
    caption.add_run("Versus\n").italic = True
    caption.add_run(respondent_text).bold = True

    title = doc.add_paragraph()
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = title.add_run("INDEX")
    run.bold = True
    run.underline = True

    table = doc.add_table(rows=1, cols=3)
    table.style = 'Table Grid'
    for cell, heading in zip(table.rows[0].cells, ("S.NO.", "PARTICULARS", "PAGE NO.")):
        cell.paragraphs[0].add_run(heading).bold = True

    for ordinal, particulars, page in pagination.index_rows():
        row_cells = table.add_row().cells
        row_cells[0].paragraphs[0].add_run(str(ordinal))
        row_cells[1].paragraphs[0].add_run(particulars)
        right_par = row_cells[2].paragraphs[0]
        right_par.add_run(page)
        right_par.alignment = WD_ALIGN_PARAGRAPH.CENTER

    notes = None
    for directive in pagination.render_directives:
        if directive.section_kind == INDEX:
            notes = directive.payload.get("notes")
            break
    if notes:
        doc.add_paragraph().add_run("NOTES:").bold = True
        for i, note in enumerate(notes, start=1):
            doc.add_paragraph(f"{i}. {note}")

    doc.save(docx_filename)
    logger.info("Index DOCX saved as: %s", docx_filename)


###############################################################################
#  LOGGING & INPUT
###############################################################################
def configure_logging(verbose=False):
    """Coloured console logging for the command line tool."""
    handler = logging.StreamHandler()
    handler.setFormatter(ColoredFormatter(
        "%(log_color)s%(asctime)s - %(levelname)s - %(name)s: %(message)s%(reset)s",
        log_colors={"DEBUG": "cyan", "INFO": "green", "WARNING": "yellow", "ERROR": "red", "CRITICAL": "red,bg_white"},
    ))
    root = logging.getLogger()
    for old in list(root.handlers):
        if isinstance(old.formatter, ColoredFormatter):
            root.removeHandler(old)
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.INFO)


def load_form(path):
    with open(path, 'r', encoding='utf-8') as f:
        return WritFormData.from_dict(json.load(f))


###############################################################################
#  MAIN
###############################################################################
def main(argv=None):
    parser = argparse.ArgumentParser(
        description=(
            "Generate a writ petition bundle PDF from a JSON form, with an auto-paginated Index "
            "as PDF and DOCX, and optionally pickle the form record."
        )
    )
    parser.add_argument("--form", required=True,
                        help="Path to a UTF-8 JSON file holding the writ petition form.")
    parser.add_argument("--output", default="writ_petition.pdf",
                        help="Output PDF filename for the bundle (default: writ_petition.pdf).")
    parser.add_argument("--index", default="index.pdf",
                        help="PDF filename for the stand-alone Index (default: index.pdf).")
    parser.add_argument("--attachments-dir", default=None,
                        help="Directory that relative attachment paths in the form are resolved against "
                             "(default: the directory of the form file).")
    parser.add_argument("--chars-per-page", type=int, default=PageDensity().chars_per_page,
                        help="Characters of free text estimated per page.")
    parser.add_argument("--rows-per-page", type=int, default=PageDensity().rows_per_page,
                        help="List-of-dates rows estimated per page.")
    parser.add_argument("--grounds-per-page", type=int, default=PageDensity().grounds_per_page,
                        help="Grounds estimated per page.")
    parser.add_argument("--strict", action="store_true",
                        help="Refuse to generate when the form fails its filing checks.")
    parser.add_argument("--pickle", nargs='?', const="", default=None,
                        help="Optional path to store the form record in pickle format. If no path is given, "
                             "defaults to 'writ_form.pickle'.")
    parser.add_argument("--verbose", action="store_true", help="Log debug messages.")

    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        form = load_form(args.form)
    except (OSError, ValueError) as e:
        parser.error(f"Cannot read form {args.form}: {e}")

    problems = form.validate()
    for problem in problems:
        logger.warning("CHECK FAILED: %s", problem)
    if problems and args.strict:
        parser.error("form failed its filing checks")

    base_dir = Path(args.attachments_dir) if args.attachments_dir else Path(args.form).resolve().parent
    detect_attachment_pages(form, base_dir)

    density = PageDensity(args.chars_per_page, args.rows_per_page, args.grounds_per_page)
    pagination = paginate(form, density)

    try:
        generate_bundle_pdf(args.output, form, pagination, base_dir)
    except BundleRenderError as e:
        logger.error("%s", e)
        parser.error(f"bundle not generated: {e}")
    generate_index_pdf(args.index, form, pagination)
    index_docx = os.path.splitext(args.index)[0] + ".docx"
    generate_index_docx(index_docx, form, pagination)

    if args.pickle is not None:
        pickle_filename = args.pickle or "writ_form.pickle"
        with open(pickle_filename, "wb") as pf:
            pickle.dump(form, pf)
        pkl_path = pickle_filename
    else:
        pkl_path = "Not saved (not requested)."

    # Summary
    print(f"Bundle PDF generated: {args.output} ({pagination.physical_pages} pages)")
    print(f"Index PDF generated: {args.index}")
    print(f"Index DOCX generated: {index_docx}")
    print(f"Form saved to: {pkl_path}\n")
    print("INDEX:")
    for ordinal, title, page in pagination.index_rows():
        print(f"  {ordinal:>3}. {title:<60} {page}")
    return 0


if __name__ == "__main__":
    main()

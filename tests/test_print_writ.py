import json

import docx
import pikepdf
import pytest

import load_writ
import print_writ
from writ_form import Annexure, Application
from writ_pagination import ANNEXURE, APPLICATION, PROOF_OF_SERVICE, paginate


def test_split_rich_words_keeps_punctuation_glued():
    words = print_writ.split_rich_words("see **Annexure P-1**, page 3")
    assert words == [
        ("Times-Roman", "see", False),
        ("Times-Bold", "Annexure", False),
        ("Times-Bold", "P-1", False),
        ("Times-Roman", ",", True),
        ("Times-Roman", "page", False),
        ("Times-Roman", "3", False),
    ]


def test_wrap_rich_text_respects_width():
    text = " ".join(["word"] * 200)
    lines = print_writ.wrap_rich_text(text, 14, 300)
    assert len(lines) > 1
    assert all(print_writ.runs_width(line, 14) <= 300 for line in lines)
    assert sum(len(line) for line in lines) == 200


def test_fit_blocks_shrinks_long_sections():
    blocks = [("text", "x " * 4500)]
    font_size, lines = print_writ.fit_blocks(blocks, 400, 700)
    assert font_size == print_writ.MIN_FONT_SIZE
    assert len(lines) * font_size * print_writ.LINE_HEIGHT <= 700
    short_size, _ = print_writ.fit_blocks([("text", "short")], 400, 700)
    assert short_size == print_writ.BODY_FONT_SIZE


def test_fit_blocks_refuses_to_drop_lines():
    with pytest.raises(print_writ.BundleRenderError):
        print_writ.fit_blocks([("text", "x " * 8000)], 400, 700)


def test_overlong_main_petition_stops_the_bundle(tmp_path, make_form):
    form = make_form(petition_facts="The respondent failed to decide the representation. " * 1200)
    output = tmp_path / "bundle.pdf"
    with pytest.raises(print_writ.BundleRenderError, match="main_petition"):
        print_writ.generate_bundle_pdf(str(output), form, paginate(form), tmp_path)
    assert not output.exists()


def test_bundle_has_one_page_per_directive(tmp_path, full_form):
    pagination = paginate(full_form)
    output = tmp_path / "bundle.pdf"
    print_writ.generate_bundle_pdf(str(output), full_form, pagination, tmp_path)
    with pikepdf.open(output) as pdf:
        assert len(pdf.pages) == len(pagination.render_directives)


def test_index_docx_lists_every_entry(tmp_path, full_form):
    pagination = paginate(full_form)
    output = tmp_path / "index.docx"
    print_writ.generate_index_docx(str(output), full_form, pagination)
    table = docx.Document(str(output)).tables[0]
    assert len(table.rows) == len(pagination.index_entries) + 1
    assert table.rows[1].cells[1].text == "LISTING PROFORMA"
    assert table.rows[1].cells[2].text == "A-1"


def test_index_pdf_is_written(tmp_path, make_form):
    form = make_form(annexures=[Annexure(title=f"Document {i}") for i in range(60)])
    output = tmp_path / "index.pdf"
    print_writ.generate_index_pdf(str(output), form, paginate(form))
    with pikepdf.open(output) as pdf:
        assert len(pdf.pages) >= 2


def _write_form(tmp_path):
    pdf = pikepdf.new()
    for _ in range(3):
        pdf.add_blank_page()
    pdf.save(tmp_path / "order.pdf")
    form = {
        "year": "2025",
        "petitioners": [{"name": "Ravi Kumar"}],
        "respondents": [{"name": "Union of India"}, {"name": "State of Delhi"}],
        "advocates": [{"name": "A. Sharma", "enrolmentNumber": "D/1/2010"}],
        "annexures": [{"title": "Impugned order", "pageCount": "1", "files": ["order.pdf"]}],
        "petitionGrounds": "the order is arbitrary\nno hearing was given",
    }
    path = tmp_path / "petition.json"
    path.write_text(json.dumps(form), encoding="utf-8")
    return path


def test_main_end_to_end(tmp_path, capsys):
    form_path = _write_form(tmp_path)
    output = tmp_path / "bundle.pdf"
    index = tmp_path / "index.pdf"
    pickle_path = tmp_path / "form.pickle"

    assert print_writ.main([
        "--form", str(form_path),
        "--output", str(output),
        "--index", str(index),
        "--pickle", str(pickle_path),
    ]) == 0

    out = capsys.readouterr().out
    assert "ANNEXURE P-1: A TRUE COPY OF IMPUGNED ORDER" in out
    assert "12-14" in out
    assert (tmp_path / "index.docx").exists()
    with pikepdf.open(output) as pdf:
        assert len(pdf.pages) == 12

    load_writ.main([str(pickle_path)])
    assert "VAKALATNAMA" in capsys.readouterr().out


def test_main_strict_refuses_incomplete_form(tmp_path):
    path = tmp_path / "petition.json"
    path.write_text(json.dumps({"petitioners": [{"name": ""}]}), encoding="utf-8")
    with pytest.raises(SystemExit):
        print_writ.main(["--form", str(path), "--strict", "--output", str(tmp_path / "b.pdf")])


def test_main_rejects_malformed_form(tmp_path):
    path = tmp_path / "petition.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(SystemExit):
        print_writ.main(["--form", str(path)])


def test_main_reports_unrenderable_form(tmp_path):
    path = tmp_path / "petition.json"
    path.write_text(json.dumps({
        "petitioners": [{"name": "Ravi Kumar"}],
        "respondents": [{"name": "Union of India"}],
        "advocates": [{"name": "A. Sharma"}],
        "petitionFacts": "The order was passed without hearing the petitioner. " * 1200,
    }), encoding="utf-8")
    with pytest.raises(SystemExit):
        print_writ.main([
            "--form", str(path),
            "--output", str(tmp_path / "bundle.pdf"),
            "--index", str(tmp_path / "index.pdf"),
        ])
    assert not (tmp_path / "bundle.pdf").exists()


def _affidavit_text(form):
    pagination = paginate(form)
    directive = next(d for d in pagination.render_directives
                     if d.section_kind == APPLICATION and d.payload["part"] == "affidavit")
    return " ".join(value for style, value in print_writ.application_blocks(form, directive, pagination)
                    if style == "text")


def test_application_affidavit_adopts_main_affidavit(make_form):
    adopted = _affidavit_text(make_form(
        verification_date="10.02.2025", applications=[Application(description="stay")],
    ))
    assert "affidavit filed with the Writ Petition" in adopted
    assert "10.02.2025" in adopted

    separate = _affidavit_text(make_form(
        verification_date="10.02.2025",
        applications=[Application(description="stay", use_main_affidavit=False)],
    ))
    assert "affidavit filed with the Writ Petition" not in separate
    assert "10.02.2025" not in separate


def test_annexure_transcript_and_receipt_pages(make_form):
    form = make_form(
        annexures=[Annexure(title="Notice", page_count="2", content_text="Notice under Section 80 CPC")],
        proof_of_service_uploads=["receipt.pdf"],
        proof_of_service_page_counts=["2"],
    )
    pagination = paginate(form)
    first, second = [d for d in pagination.render_directives if d.section_kind == ANNEXURE]
    first_text = [v for _, v in print_writ.annexure_blocks(form, first, pagination)]
    assert "Notice under Section 80 CPC" in first_text
    assert "Notice under Section 80 CPC" not in [v for _, v in print_writ.annexure_blocks(form, second, pagination)]

    captions = [print_writ.attachment_for(form, d)[1]
                for d in pagination.render_directives if d.section_kind == PROOF_OF_SERVICE]
    assert captions == [
        "[RECEIPT / PROOF OF SERVICE #1, PAGE 1 OF 2]",
        "[RECEIPT / PROOF OF SERVICE #1, PAGE 2 OF 2]",
    ]

import os

import ezdxf
import pytest

from pdf2dxf.converter import PDFToDXFConverter, convert_pdf, default_output_path
from pdf2dxf.exceptions import (
    DocumentLoadError,
    EmptyResultError,
    InputFileNotFoundError,
)

MM_PER_POINT = 25.4 / 72.0


def read_lines(path):
    doc = ezdxf.readfile(str(path))
    return [
        (tuple(line.dxf.start)[:2], tuple(line.dxf.end)[:2])
        for line in doc.modelspace().query("LINE")
    ]


def test_default_output_path():
    assert default_output_path(os.path.join("a", "plan.pdf")) == os.path.join("a", "plan.dxf")


def test_convert_pdf_writes_scaled_lines(simple_pdf):
    output = convert_pdf(str(simple_pdf))

    assert output == str(simple_pdf.with_suffix(".dxf"))
    lines = read_lines(output)
    expected = [((0, 0), (10, 0)), ((10, 0), (10, 10)), ((10, 10), (0, 0))]
    assert len(lines) == 3
    for (start, end), (exp_start, exp_end) in zip(lines, expected):
        assert start == pytest.approx(tuple(v * MM_PER_POINT for v in exp_start))
        assert end == pytest.approx(tuple(v * MM_PER_POINT for v in exp_end))


def test_scale_and_unit(simple_pdf, tmp_path):
    output = convert_pdf(str(simple_pdf), scale_factor=2.0, unit="in",
                         output_path=str(tmp_path / "out" / "plan.dxf"))
    lines = read_lines(output)
    assert lines[0][1] == pytest.approx((20 / 72.0, 0))


def test_result_details(simple_pdf, tmp_path):
    converter = PDFToDXFConverter()
    result = converter.convert(str(simple_pdf), str(tmp_path / "plan.dxf"))

    assert result.success
    assert result.pages_processed == 1
    assert result.entities_count == 3
    assert result.output_path == str(tmp_path / "plan.dxf")
    assert result.image_files == []
    assert result.error is None


def test_progress_reaches_completion(simple_pdf):
    reported = []
    converter = PDFToDXFConverter()
    converter.set_progress_callback(lambda message, progress: reported.append(progress))
    converter.convert(str(simple_pdf))

    assert reported[0] == 0.0
    assert reported[-1] == 1.0
    assert reported == sorted(reported)


def test_images_written_next_to_output(pdf_builder, tmp_path):
    builder = pdf_builder()
    builder.add_image(b"\xff\xd8 jpeg \xff\xd9", 1, 1, filter_name="DCTDecode")
    builder.add_page(b"0 0 10 10 re")
    path = builder.save(tmp_path / "photo.pdf")

    result = PDFToDXFConverter().convert(str(path))
    assert [os.path.basename(p) for p in result.image_files] == ["photo_img_1.jpg"]
    assert os.path.exists(result.image_files[0])


def test_images_can_be_skipped(pdf_builder, tmp_path):
    builder = pdf_builder()
    builder.add_image(b"\xff\xd8 jpeg \xff\xd9", 1, 1, filter_name="DCTDecode")
    builder.add_page(b"0 0 10 10 re")
    path = builder.save(tmp_path / "photo.pdf")

    result = PDFToDXFConverter().convert(str(path), extract_images=False)
    assert result.image_files == []
    assert not (tmp_path / "photo_img_1.jpg").exists()


def test_missing_input(tmp_path):
    with pytest.raises(InputFileNotFoundError):
        convert_pdf(str(tmp_path / "missing.pdf"))


def test_missing_input_is_a_load_error(tmp_path):
    result = PDFToDXFConverter().convert(str(tmp_path / "missing.pdf"))
    assert not result.success
    assert isinstance(result.error, DocumentLoadError)


def test_not_a_pdf(tmp_path):
    path = tmp_path / "notes.pdf"
    path.write_bytes(b"\x00\x01\x02 definitely not a pdf")
    with pytest.raises(DocumentLoadError):
        convert_pdf(str(path))


def test_page_without_vectors(pdf_builder, tmp_path):
    builder = pdf_builder()
    builder.add_page(b"BT /F1 12 Tf (text only) Tj ET")
    path = builder.save(tmp_path / "text.pdf")

    result = PDFToDXFConverter().convert(str(path))
    assert not result.success
    assert isinstance(result.error, EmptyResultError)
    assert result.message == "No vector graphics found in the PDF."
    assert not (tmp_path / "text.dxf").exists()


def test_only_degenerate_segments(pdf_builder, tmp_path):
    builder = pdf_builder()
    builder.add_page(b"5 5 m 5 5 l 5 5 m 5.0001 5 l")
    path = builder.save(tmp_path / "dots.pdf")

    with pytest.raises(EmptyResultError):
        convert_pdf(str(path))


def test_invalid_scale(simple_pdf):
    with pytest.raises(ValueError):
        convert_pdf(str(simple_pdf), scale_factor=0)


def test_multi_page_layout(pdf_builder, tmp_path):
    builder = pdf_builder()
    builder.add_page(b"0 0 m 72 0 l", mediabox=(0, 0, 100, 100))
    builder.add_page(b"0 0 m 72 0 l", mediabox=(0, 0, 100, 100))
    path = builder.save(tmp_path / "two.pdf")

    lines = read_lines(convert_pdf(str(path), unit="in"))
    # second page starts after 100pt of page and 200pt of margin
    assert lines[1][0] == pytest.approx((300 / 72.0, 0))


def test_images_written_into_new_output_directory(pdf_builder, tmp_path):
    builder = pdf_builder()
    builder.add_image(b"\xff\xd8 jpeg \xff\xd9", 1, 1, filter_name="DCTDecode")
    builder.add_page(b"0 0 10 10 re")
    path = builder.save(tmp_path / "photo.pdf")

    output = tmp_path / "new_dir" / "photo.dxf"
    result = PDFToDXFConverter().convert(str(path), str(output))

    assert result.success
    assert output.exists()
    assert result.image_files == [str(tmp_path / "new_dir" / "photo_img_1.jpg")]
    assert (tmp_path / "new_dir" / "photo_img_1.jpg").exists()


def test_undecodable_page_does_not_abort_conversion(pdf_builder, tmp_path):
    builder = pdf_builder()
    builder.add_page(b"0 0 m 5 0 l S \xff\xfe\x00garbage")
    builder.add_page(b"0 0 m 0 5 l S")
    path = builder.save(tmp_path / "mixed.pdf")

    result = PDFToDXFConverter().convert(str(path))
    assert result.success
    assert result.entities_count == 1
    assert "1 stream(s) could not be decoded" in result.message

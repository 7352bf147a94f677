import io
import json
import pathlib
import time

import fitz
import PIL.Image
import pypdf
import pytest

import uline_labels as ulab
import uline_labels.assemble
import uline_labels.config
import uline_labels.errors
import uline_labels.geometry
import uline_labels.render


DPI = 144
INK_THRESHOLD = 240
EDGE_STRIP = 8.0
EPSILON = 0.01


#============================================
def build_document(make_product, make_enhanced, generated_at, format_name: str, quantity: int):
	"""
	Assemble a one-item document for PDF tests.
	"""
	enhanced = make_enhanced(
		label_quantity=quantity,
		case_quantity=12,
		box_count=2,
		harvest_date="05/03/2025",
		packaged_date="12/03/2025",
	)
	return ulab.assemble.generate(
		[(make_product(), enhanced)],
		format_name,
		operator_name="tester",
		generated_at=generated_at,
	)


#============================================
def _render_page(data: bytes, page_number: int) -> PIL.Image.Image:
	"""
	Render one PDF page to a grayscale image.

	Args:
		data: PDF bytes.
		page_number: Zero-based page number.

	Returns:
		PIL image.
	"""
	document = fitz.open(stream=data, filetype="pdf")
	page = document[page_number]
	scale = DPI / 72.0
	pixmap = page.get_pixmap(matrix=fitz.Matrix(scale, scale), alpha=False)
	image = PIL.Image.frombytes("RGB", [pixmap.width, pixmap.height], pixmap.samples)
	document.close()
	return image.convert("L")


#============================================
def _ink_ratio(gray: PIL.Image.Image) -> float:
	pixels = list(gray.getdata())
	if not pixels:
		return 0.0
	ink = sum(1 for value in pixels if value < INK_THRESHOLD)
	return ink / len(pixels)


#============================================
@pytest.mark.parametrize(
	"format_name, quantity, pages, size",
	[
		("S-5627", 14, 2, (612.0, 792.0)),
		("S-5492", 5, 2, (612.0, 1008.0)),
	],
)
def test_page_count_and_media_box(make_product, make_enhanced, generated_at, format_name, quantity, pages, size) -> None:
	"""
	Output pages match the label count and the physical sheet size.
	"""
	document = build_document(make_product, make_enhanced, generated_at, format_name, quantity)
	data = ulab.render.encode_document(document)
	reader = pypdf.PdfReader(io.BytesIO(data))
	assert len(reader.pages) == pages
	for page in reader.pages:
		assert float(page.mediabox.width) == pytest.approx(size[0])
		assert float(page.mediabox.height) == pytest.approx(size[1])
	assert reader.metadata.title == f"Inventory Labels - {generated_at.strftime('%Y-%m-%d')}"
	assert format_name in reader.metadata.subject


#============================================
def test_calibration_page_prepended(make_product, make_enhanced, generated_at) -> None:
	"""
	Calibration adds one leading page; outlines do not add pages.
	"""
	document = build_document(make_product, make_enhanced, generated_at, "S-5627", 3)
	options = ulab.config.PrintOptions(calibration=True, draw_outlines=True)
	data = ulab.render.encode_document(document, options)
	reader = pypdf.PdfReader(io.BytesIO(data))
	assert len(reader.pages) == 2
	assert "calibration" in reader.pages[0].extract_text()


#============================================
@pytest.mark.parametrize("format_name", ["S-5627", "S-5492"])
def test_no_ink_outside_printable_area(make_product, make_enhanced, generated_at, format_name) -> None:
	"""
	Raster smoke test: page edges stay blank and the first slot has ink.
	"""
	document = build_document(make_product, make_enhanced, generated_at, format_name, 4)
	data = ulab.render.encode_document(document)
	gray = _render_page(data, 0)
	scale = DPI / 72.0
	strip = int(round(EDGE_STRIP * scale))
	width, height = gray.size

	edges = {
		"left": gray.crop((0, 0, strip, height)),
		"right": gray.crop((width - strip, 0, width, height)),
		"top": gray.crop((0, 0, width, strip)),
		"bottom": gray.crop((0, height - strip, width, height)),
	}
	for edge_name, edge in edges.items():
		assert _ink_ratio(edge) == 0.0, f"ink in {edge_name} strip"

	sheet = document.sheet
	position = ulab.geometry.position_for(0, sheet)
	slot = gray.crop(
		(
			int(position.x * scale),
			int(position.y * scale),
			int(position.right * scale),
			int(position.bottom * scale),
		)
	)
	assert _ink_ratio(slot) > 0.01


#============================================
@pytest.mark.parametrize("format_name", ["S-5627", "S-5492"])
def test_tile_transform_fills_slot(format_name: str) -> None:
	"""
	Tile corners land on the slot box, rotated or not.
	"""
	sheet = ulab.config.SHEET_FORMATS[format_name]
	for position in ulab.geometry.page_positions(sheet):
		transform = ulab.render.tile_transform(position, sheet)
		corners = [
			transform.apply_on((0.0, 0.0)),
			transform.apply_on((sheet.label_width, 0.0)),
			transform.apply_on((0.0, sheet.label_height)),
			transform.apply_on((sheet.label_width, sheet.label_height)),
		]
		xs = [corner[0] for corner in corners]
		ys = [corner[1] for corner in corners]
		x0, y0, x1, y1 = ulab.geometry.to_pdf_box(position, sheet.page_height)
		assert min(xs) == pytest.approx(x0, abs=EPSILON)
		assert max(xs) == pytest.approx(x1, abs=EPSILON)
		assert min(ys) == pytest.approx(y0, abs=EPSILON)
		assert max(ys) == pytest.approx(y1, abs=EPSILON)


#============================================
def test_rotated_tile_top_faces_page_left() -> None:
	"""
	The top edge of a 6 x 4 tile ends up on the left of its slot.
	"""
	sheet = ulab.config.SHEET_FORMATS["S-5492"]
	position = ulab.geometry.position_for(0, sheet)
	transform = ulab.render.tile_transform(position, sheet)
	top_left = transform.apply_on((0.0, sheet.label_height))
	assert top_left[0] == pytest.approx(position.x, abs=EPSILON)


#============================================
def test_strict_mode_refuses_layout_issues(make_product, make_enhanced, generated_at) -> None:
	"""
	Strict encoding raises LayoutError when the report has issues.
	"""
	document = build_document(make_product, make_enhanced, generated_at, "S-5627", 2)
	document.layout.issues.append("Page 1: Labels 0 and 1 overlap")
	with pytest.raises(ulab.errors.LayoutError) as excinfo:
		ulab.render.encode_document(document, ulab.config.PrintOptions(strict=True))
	assert excinfo.value.report is document.layout
	assert ulab.render.encode_document(document).startswith(b"%PDF")


#============================================
def test_export_to_memory_and_file(make_product, make_enhanced, generated_at, tmp_path: pathlib.Path) -> None:
	"""
	Both sinks receive the same bytes.
	"""
	document = build_document(make_product, make_enhanced, generated_at, "S-5627", 1)
	memory = ulab.render.MemoryExportSink()
	written = ulab.render.export_document(document, memory, timeout=60)
	assert written == len(memory.data)

	output_path = tmp_path / "out" / "labels.pdf"
	ulab.render.export_document(document, ulab.render.FileExportSink(output_path))
	assert output_path.read_bytes().startswith(b"%PDF")


#============================================
def test_export_timeout(make_product, make_enhanced, generated_at, monkeypatch) -> None:
	"""
	A slow encode is abandoned with ExportTimeoutError.
	"""
	document = build_document(make_product, make_enhanced, generated_at, "S-5627", 1)

	def slow_encode(*_args, **_kwargs) -> bytes:
		time.sleep(1.0)
		return b"%PDF-late"

	monkeypatch.setattr(ulab.render, "encode_document", slow_encode)
	sink = ulab.render.MemoryExportSink()
	with pytest.raises(ulab.errors.ExportTimeoutError):
		ulab.render.export_document(document, sink, timeout=0.05)
	assert sink.data is None


#============================================
class FlakySink:
	"""
	Sink that fails a set number of times before accepting data.
	"""

	def __init__(self, failures: int):
		self.failures = failures
		self.calls = 0
		self.data = None

	def write(self, data: bytes) -> None:
		self.calls += 1
		if self.calls <= self.failures:
			raise OSError("disk busy")
		self.data = data


#============================================
def test_export_retries_then_succeeds(make_product, make_enhanced, generated_at) -> None:
	"""
	Transient sink errors are retried.
	"""
	document = build_document(make_product, make_enhanced, generated_at, "S-5627", 1)
	sink = FlakySink(failures=2)
	ulab.render.export_document(document, sink, retries=2)
	assert sink.calls == 3
	assert sink.data.startswith(b"%PDF")


#============================================
def test_export_gives_up(make_product, make_enhanced, generated_at) -> None:
	"""
	Exhausted retries raise ExportError.
	"""
	document = build_document(make_product, make_enhanced, generated_at, "S-5627", 1)
	sink = FlakySink(failures=10)
	with pytest.raises(ulab.errors.ExportError):
		ulab.render.export_document(document, sink, retries=1)
	assert sink.calls == 2


#============================================
def test_write_manifest(make_product, make_enhanced, generated_at, tmp_path: pathlib.Path) -> None:
	"""
	The manifest records format, counts and the layout report.
	"""
	items = [
		(make_product(sku="OK-1"), make_enhanced(label_quantity=3)),
		(make_product(sku="BAD-1", barcode="A#"), make_enhanced()),
	]
	document = ulab.assemble.generate(items, "S-5492", generated_at=generated_at)
	manifest_path = tmp_path / "labels.json"
	ulab.render.write_manifest(manifest_path, document, ulab.config.PrintOptions(), 1234)
	data = json.loads(manifest_path.read_text(encoding="utf-8"))
	assert data["format"] == "S-5492"
	assert data["pages"] == 1
	assert data["total_labels"] == 3
	assert data["bytes_written"] == 1234
	assert data["item_errors"][0]["sku"] == "BAD-1"
	assert data["layout_report"]["is_valid"] is True
	assert data["sheet"]["rotated"] is True


#============================================
def test_wrap_text_limits_lines() -> None:
	"""
	Wrapped text respects the width and the line limit.
	"""
	text = "Blue Dream Premium Indoor Flower Small Buds Value Pack"
	lines = ulab.render.wrap_text(text, "Helvetica-Bold", 10.0, 80.0, max_lines=2)
	assert len(lines) == 2
	assert lines[-1].endswith("...")
	for line in lines:
		assert ulab.render.string_width(line, "Helvetica-Bold", 10.0) <= 80.0


#============================================
def test_progress_line(capsys) -> None:
	"""
	The tile progress bar fills in proportion and overwrites its own line.
	"""
	assert ulab.render.format_progress("Tiles", 7, 14, width=10) == "Tiles [=====     ] 7/14"
	assert ulab.render.format_progress("Tiles", 20, 14, width=4) == "Tiles [====] 14/14"
	ulab.render.print_progress("Tiles", 3, 4)
	ulab.render.print_progress("Tiles", 1, 0)
	output = capsys.readouterr().out
	assert output.endswith("] 3/4\r")
	assert output.count("\r") == 1

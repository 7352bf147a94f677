"""
PDF drawing, imposition and export.

Each label is drawn once in its own orientation as a tile page, then the
tiles are imposed onto sheet pages at the slots computed by the geometry
module. Rotated formats turn the tile 90 degrees during imposition.
"""

# Standard Library
import concurrent.futures
import dataclasses
import io
import json
import pathlib

# PIP3 modules
import pypdf
import reportlab.pdfbase.pdfmetrics
import reportlab.pdfgen.canvas

# local repo modules
import uline_labels as ulab
import uline_labels.assemble
import uline_labels.barcode
import uline_labels.config
import uline_labels.content
import uline_labels.errors
import uline_labels.geometry


Document = ulab.assemble.Document
LabelContent = ulab.content.LabelContent
PositionResult = ulab.geometry.PositionResult
PrintOptions = ulab.config.PrintOptions
SheetFormat = ulab.config.SheetFormat

POINTS_PER_INCH = ulab.config.POINTS_PER_INCH
DEFAULT_FONT_REGULAR = ulab.config.DEFAULT_FONT_REGULAR
DEFAULT_FONT_BOLD = ulab.config.DEFAULT_FONT_BOLD
DEFAULT_FONT_ITALIC = ulab.config.DEFAULT_FONT_ITALIC
DEFAULT_FONT_MONO = ulab.config.DEFAULT_FONT_MONO
DEFAULT_TEXT_MIN_SIZE = ulab.config.DEFAULT_TEXT_MIN_SIZE
LABEL_PADDING_COMPACT = ulab.config.LABEL_PADDING_COMPACT
LABEL_PADDING_LANDSCAPE = ulab.config.LABEL_PADDING_LANDSCAPE
OUTLINE_WIDTH = ulab.config.OUTLINE_WIDTH
PROGRESS_BAR_WIDTH = ulab.config.PROGRESS_BAR_WIDTH
PROGRESS_UPDATE_EVERY = ulab.config.PROGRESS_UPDATE_EVERY

BLACK = (0.0, 0.0, 0.0)
WHITE = (1.0, 1.0, 1.0)
GRAY = (0.4, 0.4, 0.4)
LIGHT_GRAY = (0.78, 0.78, 0.78)
BRAND_GREEN = (44 / 255.0, 85 / 255.0, 48 / 255.0)
BLANK_DATE = "__/__/____"
LINE_LEADING = 1.15


#============================================
def format_progress(prefix: str, current: int, total: int, width: int = PROGRESS_BAR_WIDTH) -> str:
	"""
	Build one line of tile progress.

	Args:
		prefix: Label text.
		current: Tiles drawn so far.
		total: Tiles in the document.
		width: Bar width in characters.

	Returns:
		Text such as "Tiles [==========          ] 7/14".
	"""
	current = min(max(current, 0), total)
	done = current * width // total
	return f"{prefix} [{'=' * done}{' ' * (width - done)}] {current}/{total}"


#============================================
def print_progress(prefix: str, current: int, total: int) -> None:
	if total > 0:
		print(format_progress(prefix, current, total), end="\r", flush=True)


#============================================
def string_width(text: str, font_name: str, font_size: float) -> float:
	return reportlab.pdfbase.pdfmetrics.stringWidth(text, font_name, font_size)


#============================================
def fit_font_size(
	text: str,
	font_name: str,
	max_size: float,
	min_size: float,
	max_width: float,
) -> float:
	"""
	Shrink a font size until a single line fits.

	Args:
		text: Text to fit.
		font_name: ReportLab font name.
		max_size: Preferred size.
		min_size: Smallest allowed size.
		max_width: Available width.

	Returns:
		Font size between min_size and max_size.
	"""
	if not text:
		return max_size
	width = string_width(text, font_name, max_size)
	if width <= max_width:
		return max_size
	return max(min_size, max_size * max_width / width)


#============================================
def fit_text(text: str, font_name: str, font_size: float, max_width: float) -> str:
	"""
	Cut text with an ellipsis so it fits a width.

	Args:
		text: Text to fit.
		font_name: ReportLab font name.
		font_size: Font size.
		max_width: Available width.

	Returns:
		Text that fits.
	"""
	if string_width(text, font_name, font_size) <= max_width:
		return text
	ellipsis = "..."
	trimmed = text
	while trimmed and string_width(trimmed + ellipsis, font_name, font_size) > max_width:
		trimmed = trimmed[:-1]
	trimmed = trimmed.rstrip()
	if not trimmed:
		return ""
	return trimmed + ellipsis


#============================================
def wrap_text(
	text: str,
	font_name: str,
	font_size: float,
	max_width: float,
	max_lines: int | None = None,
) -> list[str]:
	"""
	Word-wrap text to a width.

	Args:
		text: Text to wrap.
		font_name: ReportLab font name.
		font_size: Font size.
		max_width: Available width.
		max_lines: Optional line limit; the last kept line is ellipsized.

	Returns:
		List of lines.
	"""
	lines: list[str] = []
	current = ""
	for word in text.split():
		candidate = f"{current} {word}".strip()
		if not current or string_width(candidate, font_name, font_size) <= max_width:
			current = candidate
		else:
			lines.append(current)
			current = word
	if current:
		lines.append(current)
	if max_lines is not None and len(lines) > max_lines:
		rest = " ".join(lines[max_lines - 1:])
		lines = lines[:max_lines - 1] + [rest + " ..."]
	return [fit_text(line, font_name, font_size, max_width) for line in lines]


#============================================
def draw_text(
	pdf: reportlab.pdfgen.canvas.Canvas,
	text: str,
	x: float,
	y: float,
	font_name: str,
	font_size: float,
	align: str = "LEFT",
	color: tuple[float, float, float] = BLACK,
) -> None:
	"""
	Draw one line of text anchored at x.

	Args:
		pdf: ReportLab canvas.
		text: Text to draw.
		x: Anchor x (left, center or right edge depending on align).
		y: Baseline y.
		font_name: ReportLab font name.
		font_size: Font size.
		align: LEFT, CENTER or RIGHT.
		color: RGB fill color.
	"""
	if not text:
		return
	pdf.setFont(font_name, font_size)
	pdf.setFillColorRGB(color[0], color[1], color[2])
	if align == "CENTER":
		pdf.drawCentredString(x, y, text)
	elif align == "RIGHT":
		pdf.drawRightString(x, y, text)
	else:
		pdf.drawString(x, y, text)


#============================================
def draw_source_tag(pdf: reportlab.pdfgen.canvas.Canvas, tag: str, right: float, y: float) -> None:
	font_size = 6.0
	tag_width = string_width(tag, DEFAULT_FONT_BOLD, font_size) + 6.0
	pdf.setFillColorRGB(*BLACK)
	pdf.roundRect(right - tag_width, y - 2.0, tag_width, font_size + 3.0, 1.5, stroke=0, fill=1)
	draw_text(pdf, tag, right - tag_width / 2.0, y, DEFAULT_FONT_BOLD, font_size, "CENTER", WHITE)


#============================================
def draw_compact_label(
	pdf: reportlab.pdfgen.canvas.Canvas,
	content: LabelContent,
	width: float,
	height: float,
	debug: bool = False,
) -> None:
	"""
	Draw the 4" x 1.5" label layout.

	Header with SKU and source tag, product details on the left, barcode on
	the right, dates and box caption in the footer.

	Args:
		pdf: ReportLab canvas.
		content: Label content.
		width: Tile width.
		height: Tile height.
		debug: Draw the content area box.
	"""
	pad = LABEL_PADDING_COMPACT
	header_y = height - pad - 8.0
	sku_size = fit_font_size(content.sku, DEFAULT_FONT_BOLD, 9.0, 6.0, width * 0.6)
	draw_text(pdf, content.sku, pad, header_y, DEFAULT_FONT_BOLD, sku_size)
	draw_source_tag(pdf, content.source_tag, width - pad, header_y)

	barcode_width = 110.0
	barcode_x = width - pad - barcode_width
	ulab.barcode.draw_code39(pdf, content.barcode, barcode_x, 34.0, barcode_width, 40.0)
	display_size = fit_font_size(content.barcode_display, DEFAULT_FONT_MONO, 6.5, DEFAULT_TEXT_MIN_SIZE, barcode_width)
	draw_text(
		pdf,
		content.barcode_display,
		barcode_x + barcode_width / 2.0,
		26.0,
		DEFAULT_FONT_MONO,
		display_size,
		"CENTER",
	)

	column_width = barcode_x - pad - 6.0
	name_size = 8.0
	name_lines = wrap_text(content.product_name, DEFAULT_FONT_BOLD, name_size, column_width, max_lines=2)
	cursor = header_y - 13.0
	for line in name_lines:
		draw_text(pdf, line, pad, cursor, DEFAULT_FONT_BOLD, name_size)
		cursor -= name_size * LINE_LEADING
	if content.brand:
		draw_text(pdf, fit_text(content.brand.upper(), DEFAULT_FONT_REGULAR, 6.5, column_width), pad, cursor, DEFAULT_FONT_REGULAR, 6.5, color=GRAY)
		cursor -= 6.5 * LINE_LEADING
	details = "  ".join(part for part in (content.size, content.strain, content.location) if part)
	if details and cursor > 26.0:
		draw_text(pdf, fit_text(details, DEFAULT_FONT_ITALIC, 6.0, column_width), pad, cursor, DEFAULT_FONT_ITALIC, 6.0, color=GRAY)

	pdf.setStrokeColorRGB(*LIGHT_GRAY)
	pdf.setLineWidth(0.5)
	pdf.line(pad, 21.0, width - pad, 21.0)

	dates = []
	if content.harvest_date:
		dates.append(f"H: {content.harvest_date}")
	if content.packaged_date:
		dates.append(f"P: {content.packaged_date}")
	draw_text(pdf, "  ".join(dates), pad, 13.0, DEFAULT_FONT_REGULAR, 6.0)
	quantities = []
	if content.case_quantity:
		quantities.append(f"Case: {content.case_quantity}")
	quantities.append(content.box_caption)
	draw_text(pdf, "  ".join(quantities), width - pad, 13.0, DEFAULT_FONT_BOLD, 6.5, "RIGHT")

	draw_text(pdf, content.audit_line, pad, pad, DEFAULT_FONT_REGULAR, 5.0, color=GRAY)
	draw_text(pdf, content.label_caption, width - pad, pad, DEFAULT_FONT_REGULAR, 5.0, "RIGHT", GRAY)

	if debug:
		pdf.setStrokeColorRGB(0.0, 0.8, 0.0)
		pdf.setLineWidth(0.5)
		pdf.rect(pad, pad, width - 2.0 * pad, height - 2.0 * pad, stroke=1, fill=0)


#============================================
def draw_landscape_label(
	pdf: reportlab.pdfgen.canvas.Canvas,
	content: LabelContent,
	width: float,
	height: float,
	debug: bool = False,
) -> None:
	"""
	Draw the 6" x 4" label layout.

	Args:
		pdf: ReportLab canvas.
		content: Label content.
		width: Tile width (the long side).
		height: Tile height.
		debug: Draw the content area and section boxes.
	"""
	pad = LABEL_PADDING_LANDSCAPE
	left = pad
	content_width = width - 2.0 * pad
	content_height = height - 2.0 * pad
	top = height - pad
	top_section_bottom = top - int(content_height * 0.4)
	middle_section_bottom = top_section_bottom - int(content_height * 0.25)
	center_x = width / 2.0

	# top section: brand and product name
	cursor = top
	if content.brand:
		brand_size = float(min(24, max(16, 28 - len(content.brand) // 4)))
		brand_size = fit_font_size(content.brand, DEFAULT_FONT_BOLD, brand_size, 10.0, content_width)
		cursor -= brand_size
		draw_text(pdf, content.brand, center_x, cursor, DEFAULT_FONT_BOLD, brand_size, "CENTER", BRAND_GREEN)
		cursor -= 6.0

	name_width = content_width * 0.9
	available = cursor - top_section_bottom
	name_size = 28.0
	while name_size > 14.0:
		lines = wrap_text(content.product_name, DEFAULT_FONT_BOLD, name_size, name_width)
		if len(lines) <= 3 and len(lines) * name_size * LINE_LEADING <= available:
			break
		name_size -= 1.0
	name_lines = wrap_text(content.product_name, DEFAULT_FONT_BOLD, name_size, name_width, max_lines=3)
	for line in name_lines:
		cursor -= name_size
		draw_text(pdf, line, center_x, cursor, DEFAULT_FONT_BOLD, name_size, "CENTER")
		cursor -= name_size * (LINE_LEADING - 1.0)

	# middle section: hand-written store box
	box_height = 45.0
	box_x = left + 70.0
	box_width = min(content_width - 85.0, 300.0)
	box_y = middle_section_bottom + (top_section_bottom - middle_section_bottom - box_height) / 2.0
	draw_text(pdf, "Store:", left, box_y + box_height / 2.0 - 5.0, DEFAULT_FONT_BOLD, 16.0)
	pdf.setStrokeColorRGB(*BLACK)
	pdf.setLineWidth(2.0)
	pdf.rect(box_x, box_y, box_width, box_height, stroke=1, fill=0)
	pdf.setStrokeColorRGB(*LIGHT_GRAY)
	pdf.setLineWidth(0.5)
	for index in (1, 2):
		line_y = box_y + index * box_height / 3.0
		pdf.line(box_x + 8.0, line_y, box_x + box_width - 8.0, line_y)

	# bottom section: barcode, dates, case and box
	column_width = content_width / 3.0
	row_top = middle_section_bottom - 14.0

	col1_x = left + column_width / 2.0
	display_size = fit_font_size(content.barcode_display, DEFAULT_FONT_MONO, 11.0, 6.0, column_width)
	draw_text(pdf, content.barcode_display, col1_x, row_top, DEFAULT_FONT_MONO, display_size, "CENTER", GRAY)
	barcode_width = min(120.0, column_width - 8.0)
	ulab.barcode.draw_code39(pdf, content.barcode, col1_x - barcode_width / 2.0, row_top - 58.0, barcode_width, 50.0)

	col2_x = left + column_width * 1.5
	draw_text(pdf, "Harvest:", col2_x, row_top, DEFAULT_FONT_BOLD, 13.0, "CENTER")
	draw_text(pdf, content.harvest_date or BLANK_DATE, col2_x, row_top - 16.0, DEFAULT_FONT_REGULAR, 12.0, "CENTER")
	draw_text(pdf, "Package:", col2_x, row_top - 36.0, DEFAULT_FONT_BOLD, 13.0, "CENTER")
	draw_text(pdf, content.packaged_date or BLANK_DATE, col2_x, row_top - 52.0, DEFAULT_FONT_REGULAR, 12.0, "CENTER")

	col3_x = left + column_width * 2.5
	case_box_width = column_width * 0.8
	case_box_height = 22.0
	pdf.setStrokeColorRGB(*BLACK)
	pdf.setLineWidth(1.0)
	case_text = f"Case: {content.case_quantity or '___'}"
	for offset, text in ((0.0, case_text), (28.0, content.box_caption)):
		box_bottom = row_top - 7.0 - offset
		pdf.rect(col3_x - case_box_width / 2.0, box_bottom, case_box_width, case_box_height, stroke=1, fill=0)
		text_size = fit_font_size(text, DEFAULT_FONT_BOLD, 12.0, 7.0, case_box_width - 6.0)
		draw_text(pdf, text, col3_x, box_bottom + 7.0, DEFAULT_FONT_BOLD, text_size, "CENTER")
	draw_text(pdf, content.label_caption, col3_x, row_top - 52.0, DEFAULT_FONT_REGULAR, 9.0, "CENTER", GRAY)

	draw_text(pdf, content.audit_line, left, pad, DEFAULT_FONT_REGULAR, 8.0, color=GRAY)
	footer = " ".join(part for part in (content.source_tag, content.sku, content.location) if part)
	footer = fit_text(footer, DEFAULT_FONT_REGULAR, 8.0, content_width / 2.0)
	draw_text(pdf, footer, width - pad, pad, DEFAULT_FONT_REGULAR, 8.0, "RIGHT", GRAY)

	if debug:
		pdf.setStrokeColorRGB(0.0, 0.8, 0.0)
		pdf.setLineWidth(0.5)
		pdf.rect(left, pad, content_width, content_height, stroke=1, fill=0)
		pdf.setStrokeColorRGB(0.0, 0.0, 1.0)
		pdf.line(left, top_section_bottom, left + content_width, top_section_bottom)
		pdf.line(left, middle_section_bottom, left + content_width, middle_section_bottom)


LAYOUT_DRAWERS = {
	ulab.config.LAYOUT_COMPACT: draw_compact_label,
	ulab.config.LAYOUT_LANDSCAPE: draw_landscape_label,
}


#============================================
def render_tiles(
	document: Document,
	options: PrintOptions,
	verbose: bool = False,
) -> list[pypdf.PageObject]:
	"""
	Draw every label of a document as a tile page in label orientation.

	Args:
		document: Assembled document.
		options: Print options.
		verbose: Print a progress bar.

	Returns:
		Tile pages in document order.
	"""
	sheet = document.sheet
	drawer = LAYOUT_DRAWERS[sheet.content_layout]
	tile_width = sheet.label_width
	tile_height = sheet.label_height

	buffer = io.BytesIO()
	pdf = reportlab.pdfgen.canvas.Canvas(buffer, pagesize=(tile_width, tile_height))
	total = document.total_labels
	index = 0
	for page in document.pages:
		for content in page.contents:
			drawer(pdf, content, tile_width, tile_height, options.debug)
			if options.debug:
				pdf.setStrokeColorRGB(1.0, 0.0, 0.0)
				pdf.setLineWidth(0.5)
				pdf.rect(1.0, 1.0, tile_width - 2.0, tile_height - 2.0, stroke=1, fill=0)
			pdf.showPage()
			index += 1
			if verbose and (index % PROGRESS_UPDATE_EVERY == 0 or index == total):
				print_progress("Tiles", index, total)
	pdf.save()
	if verbose and total > 0:
		print()
	buffer.seek(0)
	reader = pypdf.PdfReader(buffer)
	return list(reader.pages)


#============================================
def tile_transform(
	position: PositionResult,
	sheet: SheetFormat,
	apply_scaling: bool = True,
) -> pypdf.Transformation:
	"""
	Build the transform that places a tile into its slot.

	Args:
		position: Slot position in the page frame.
		sheet: Sheet format.
		apply_scaling: Honour a shrink scale factor.

	Returns:
		pypdf Transformation.
	"""
	scale = position.scale_factor if apply_scaling else 1.0
	x0, y0, _x1, _y1 = ulab.geometry.to_pdf_box(position, sheet.page_height)
	transform = pypdf.Transformation().scale(scale, scale)
	if position.is_rotated:
		# rotate(90) maps (u, v) to (-v, u); shift right by the box width
		transform = transform.rotate(90).translate(x0 + position.width, y0)
	else:
		transform = transform.translate(x0, y0)
	return transform


#============================================
def draw_label_outlines(pdf: reportlab.pdfgen.canvas.Canvas, sheet: SheetFormat) -> None:
	"""
	Draw every slot outline of a sheet on the current page.

	Args:
		pdf: ReportLab canvas.
		sheet: Sheet format.
	"""
	pdf.setLineWidth(OUTLINE_WIDTH)
	pdf.setStrokeColorRGB(0.7, 0.7, 0.7)
	for position in ulab.geometry.page_positions(sheet):
		x0, y0, x1, y1 = ulab.geometry.to_pdf_box(position, sheet.page_height)
		pdf.rect(x0, y0, x1 - x0, y1 - y0, stroke=1, fill=0)


#============================================
def build_outline_overlay(sheet: SheetFormat) -> pypdf.PageObject:
	"""
	Build a PDF overlay page with slot outlines.

	Args:
		sheet: Sheet format.

	Returns:
		PDF page object.
	"""
	buffer = io.BytesIO()
	pdf = reportlab.pdfgen.canvas.Canvas(buffer, pagesize=(sheet.page_width, sheet.page_height))
	draw_label_outlines(pdf, sheet)
	pdf.save()
	buffer.seek(0)
	reader = pypdf.PdfReader(buffer)
	return reader.pages[0]


#============================================
def build_calibration_page(sheet: SheetFormat) -> pypdf.PageObject:
	"""
	Build a calibration page: slot boxes, corner crosshairs and a 1 inch ruler.

	Args:
		sheet: Sheet format.

	Returns:
		PDF page object.
	"""
	buffer = io.BytesIO()
	pdf = reportlab.pdfgen.canvas.Canvas(buffer, pagesize=(sheet.page_width, sheet.page_height))
	draw_label_outlines(pdf, sheet)

	pdf.setLineWidth(0.6)
	pdf.setStrokeColorRGB(0.0, 0.0, 0.0)
	positions = ulab.geometry.page_positions(sheet)
	corner_slots = {0, sheet.columns - 1, len(positions) - sheet.columns, len(positions) - 1}
	for slot in sorted(corner_slots):
		x0, y0, x1, y1 = ulab.geometry.to_pdf_box(positions[slot], sheet.page_height)
		center_x = (x0 + x1) / 2.0
		center_y = (y0 + y1) / 2.0
		size = 6.0
		pdf.line(center_x - size, center_y, center_x + size, center_y)
		pdf.line(center_x, center_y - size, center_x, center_y + size)

	ruler_x = sheet.printer_margin
	ruler_y = sheet.page_height - sheet.printer_margin - 2.0
	pdf.line(ruler_x, ruler_y, ruler_x + POINTS_PER_INCH, ruler_y)
	draw_text(pdf, "1 in", ruler_x + POINTS_PER_INCH + 4.0, ruler_y - 2.0, DEFAULT_FONT_REGULAR, 8.0)
	title = f"{sheet.name} calibration - print at actual size"
	draw_text(pdf, title, sheet.page_width / 2.0, sheet.printer_margin + 2.0, DEFAULT_FONT_REGULAR, 8.0, "CENTER")
	pdf.save()
	buffer.seek(0)
	reader = pypdf.PdfReader(buffer)
	return reader.pages[0]


#============================================
def impose_tiles(
	document: Document,
	tiles: list[pypdf.PageObject],
	options: PrintOptions,
) -> pypdf.PdfWriter:
	"""
	Impose tile pages onto sheet pages.

	Args:
		document: Assembled document.
		tiles: Tile pages in document order.
		options: Print options.

	Returns:
		PdfWriter holding the sheet pages.
	"""
	sheet = document.sheet
	writer = pypdf.PdfWriter()

	outline_page = None
	if options.draw_outlines:
		outline_page = build_outline_overlay(sheet)

	if options.calibration:
		writer.add_page(build_calibration_page(sheet))

	tile_index = 0
	for page in document.pages:
		blank = pypdf.PageObject.create_blank_page(width=sheet.page_width, height=sheet.page_height)
		if outline_page is not None:
			blank.merge_page(outline_page)
		writer.add_page(blank)
		sheet_page = writer.pages[-1]
		for position in page.positions:
			transform = tile_transform(position, sheet, options.apply_scaling)
			sheet_page.merge_transformed_page(tiles[tile_index], transform)
			tile_index += 1

	writer.add_metadata(
		{
			"/Title": f"Inventory Labels - {document.generated_at.strftime('%Y-%m-%d')}",
			"/Subject": f"{sheet.description}",
			"/Author": ulab.config.DOCUMENT_AUTHOR,
			"/Creator": ulab.config.DOCUMENT_CREATOR,
			"/Keywords": f"inventory, labels, uline, {sheet.name}",
		}
	)
	return writer


#============================================
def encode_document(
	document: Document,
	options: PrintOptions | None = None,
	verbose: bool = False,
) -> bytes:
	"""
	Encode a document as PDF bytes.

	Args:
		document: Assembled document.
		options: Print options.
		verbose: Print progress.

	Returns:
		PDF file contents.
	"""
	if options is None:
		options = PrintOptions()
	if options.strict and not document.layout.is_valid:
		raise ulab.errors.LayoutError(
			f"Layout has {len(document.layout.issues)} unresolved issues",
			report=document.layout,
		)
	tiles = render_tiles(document, options, verbose=verbose)
	writer = impose_tiles(document, tiles, options)
	buffer = io.BytesIO()
	writer.write(buffer)
	return buffer.getvalue()


class FileExportSink:
	"""
	Export sink that writes the finished PDF to a path.
	"""

	def __init__(self, path: pathlib.Path | str):
		self.path = pathlib.Path(path)

	def write(self, data: bytes) -> None:
		self.path.parent.mkdir(parents=True, exist_ok=True)
		self.path.write_bytes(data)


class MemoryExportSink:
	"""
	Export sink that keeps the finished PDF in memory.
	"""

	def __init__(self):
		self.data: bytes | None = None

	def write(self, data: bytes) -> None:
		self.data = bytes(data)


#============================================
def export_document(
	document: Document,
	sink,
	options: PrintOptions | None = None,
	timeout: float | None = None,
	retries: int = ulab.config.DEFAULT_EXPORT_RETRIES,
	verbose: bool = False,
) -> int:
	"""
	Encode a document and hand the bytes to an export sink.

	Encoding runs in a worker thread so a timeout can abandon it. Sink
	writes failing with OSError are retried.

	Args:
		document: Assembled document.
		sink: Object with a write(bytes) method.
		options: Print options.
		timeout: Seconds to wait for encoding, None waits forever.
		retries: Extra write attempts after the first failure.
		verbose: Print progress.

	Returns:
		Number of bytes written.
	"""
	executor = concurrent.futures.ThreadPoolExecutor(max_workers=1)
	future = executor.submit(encode_document, document, options, verbose)
	try:
		data = future.result(timeout=timeout)
	except concurrent.futures.TimeoutError:
		future.cancel()
		raise ulab.errors.ExportTimeoutError(
			f"Document encoding did not finish within {timeout} seconds "
			f"({document.total_labels} labels)"
		) from None
	finally:
		executor.shutdown(wait=False, cancel_futures=True)

	last_error: OSError | None = None
	for attempt in range(1, retries + 2):
		try:
			sink.write(data)
		except OSError as error:
			last_error = error
			if verbose:
				print(f"Export attempt {attempt} failed: {error}")
			continue
		return len(data)
	raise ulab.errors.ExportError(f"Export failed after {retries + 1} attempts: {last_error}") from last_error


#============================================
def write_manifest(
	manifest_path: pathlib.Path,
	document: Document,
	options: PrintOptions,
	bytes_written: int | None = None,
) -> None:
	"""
	Write a manifest JSON file.

	Args:
		manifest_path: Output path.
		document: Assembled document.
		options: Print options.
		bytes_written: PDF size, when exported.
	"""
	sheet = document.sheet
	data = {
		"format": sheet.name,
		"description": sheet.description,
		"operator": document.operator_name,
		"generated_at": document.generated_at.isoformat(timespec="seconds"),
		"labels_per_page": sheet.labels_per_page,
		"total_labels": document.total_labels,
		"pages": document.page_count,
		"skus": document.skus,
		"bytes_written": bytes_written,
		"item_errors": [dataclasses.asdict(error) for error in document.item_errors],
		"item_warnings": list(document.item_warnings),
		"layout_report": document.layout.to_dict(),
		"options": dataclasses.asdict(options),
		"sheet": {
			"page_width": sheet.page_width,
			"page_height": sheet.page_height,
			"printer_margin": sheet.printer_margin,
			"label_width": sheet.label_width,
			"label_height": sheet.label_height,
			"columns": sheet.columns,
			"rows": sheet.rows,
			"column_gap": sheet.column_gap,
			"row_gap": sheet.row_gap,
			"rotated": sheet.rotated,
		},
		"fonts": {
			"regular": DEFAULT_FONT_REGULAR,
			"bold": DEFAULT_FONT_BOLD,
			"italic": DEFAULT_FONT_ITALIC,
			"mono": DEFAULT_FONT_MONO,
		},
	}
	with manifest_path.open("w", encoding="utf-8") as handle:
		json.dump(data, handle, indent=2, sort_keys=True)

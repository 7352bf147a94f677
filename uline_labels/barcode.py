"""
Code 39 value checks, display formatting and drawing.
"""

# PIP3 modules
import reportlab.graphics.barcode.code39
import reportlab.pdfgen.canvas

# local repo modules
import uline_labels as ulab
import uline_labels.config
import uline_labels.errors


CODE39_ALPHABET = frozenset("0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ -.$/+%")
CODE39_RATIO = 2.2
MAX_BAR_WIDTH = 2.0
DISPLAY_GROUP_SIZE = 4


#============================================
def clean_code39(value: str, sku: str | None = None) -> str:
	"""
	Normalize a barcode value and check it against the Code 39 alphabet.

	Args:
		value: Raw barcode value.
		sku: SKU used in error messages.

	Returns:
		Uppercased, trimmed value.
	"""
	text = str(value or "").strip().upper()
	if not text:
		raise ulab.errors.ItemValidationError("Barcode value is required", sku=sku, field="barcode")
	bad_characters = []
	for char in text:
		if char not in CODE39_ALPHABET and char not in bad_characters:
			bad_characters.append(char)
	if bad_characters:
		raise ulab.errors.UnsupportedCharacterError(text, "".join(bad_characters), sku=sku)
	if len(text) > ulab.config.CODE39_MAX_LENGTH:
		raise ulab.errors.ItemValidationError(
			f"Barcode value too long ({len(text)} > {ulab.config.CODE39_MAX_LENGTH} characters)",
			sku=sku,
			field="barcode",
		)
	return text


#============================================
def is_code39(value: str) -> bool:
	"""
	Check whether a value can be encoded as Code 39.

	Args:
		value: Barcode value.

	Returns:
		True if clean_code39 accepts it.
	"""
	try:
		clean_code39(value)
	except ulab.errors.ItemValidationError:
		return False
	return True


#============================================
def format_barcode_display(value: str) -> str:
	"""
	Group a barcode value in blocks of four for human reading.

	Args:
		value: Barcode value.

	Returns:
		Spaced display text, e.g. "CUR1 9862 332".
	"""
	compact = "".join(char for char in str(value or "").upper() if char.isalnum())
	groups = [
		compact[start:start + DISPLAY_GROUP_SIZE]
		for start in range(0, len(compact), DISPLAY_GROUP_SIZE)
	]
	return " ".join(groups)


#============================================
def build_code39(value: str, bar_height: float, bar_width: float) -> reportlab.graphics.barcode.code39.Standard39:
	return reportlab.graphics.barcode.code39.Standard39(
		value,
		barWidth=bar_width,
		barHeight=bar_height,
		gap=bar_width,
		ratio=CODE39_RATIO,
		checksum=0,
		quiet=0,
	)


#============================================
def draw_code39(
	pdf: reportlab.pdfgen.canvas.Canvas,
	value: str,
	x: float,
	y: float,
	width: float,
	height: float,
) -> float:
	"""
	Draw a Code 39 symbol centered in a box.

	Args:
		pdf: ReportLab canvas.
		value: Clean Code 39 value (see clean_code39).
		x: Box left in points.
		y: Box bottom in points.
		width: Box width.
		height: Box height, used as the bar height.

	Returns:
		Drawn symbol width in points.
	"""
	unit_width = build_code39(value, height, 1.0).width
	bar_width = min(MAX_BAR_WIDTH, width / unit_width)
	symbol = build_code39(value, height, bar_width)
	symbol_width = symbol.width
	offset = max(0.0, (width - symbol_width) / 2.0)
	symbol.drawOn(pdf, x + offset, y)
	return symbol_width

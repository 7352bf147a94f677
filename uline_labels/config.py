"""
Shared configuration, constants and the sheet format registry.
"""

# Standard Library
import dataclasses

# PIP3 modules
import reportlab.lib.pagesizes

# local repo modules
import uline_labels as ulab
import uline_labels.errors


POINTS_PER_INCH = 72.0
PRINTER_MARGIN = 12.0

LETTER_WIDTH, LETTER_HEIGHT = reportlab.lib.pagesizes.letter
LEGAL_WIDTH, LEGAL_HEIGHT = reportlab.lib.pagesizes.legal

LAYOUT_COMPACT = "compact"
LAYOUT_LANDSCAPE = "landscape"

DEFAULT_FORMAT_NAME = "S-5627"

DEFAULT_FONT_REGULAR = "Helvetica"
DEFAULT_FONT_BOLD = "Helvetica-Bold"
DEFAULT_FONT_ITALIC = "Helvetica-Oblique"
DEFAULT_FONT_MONO = "Courier"
DEFAULT_TEXT_MIN_SIZE = 4.5
LABEL_PADDING_COMPACT = 5.0
LABEL_PADDING_LANDSCAPE = 15.0
OUTLINE_WIDTH = 0.3
PROGRESS_BAR_WIDTH = 20
PROGRESS_UPDATE_EVERY = 10

LABEL_QUANTITY_MIN = 1
LABEL_QUANTITY_MAX = 50
CASE_QUANTITY_MIN = 1
CASE_QUANTITY_MAX = 1000
BOX_COUNT_MIN = 1
BOX_COUNT_MAX = 100
YEAR_MIN = 1900
YEAR_MAX = 2100
TWO_DIGIT_YEAR_PIVOT = 50

CODE39_MAX_LENGTH = 43
SKU_WARN_LENGTH = 20
PRODUCT_NAME_WARN_LENGTH = 50

DEFAULT_EXPORT_RETRIES = 2
DOCUMENT_AUTHOR = "Uline Label Engine"
DOCUMENT_CREATOR = "uline-labels"


@dataclasses.dataclass(frozen=True)
class SheetFormat:
	"""
	Immutable geometry of one physical label sheet.

	label_width and label_height are the logical (unrotated) label size.
	For rotated formats the grid is laid out in a frame whose width is the
	printable page height and whose height is the printable page width.
	"""
	name: str
	description: str
	page_width: float
	page_height: float
	printer_margin: float
	label_width: float
	label_height: float
	columns: int
	rows: int
	column_gap: float
	row_gap: float
	rotated: bool
	content_layout: str

	@property
	def labels_per_page(self) -> int:
		return self.columns * self.rows

	@property
	def rotation_angle(self) -> int:
		return 90 if self.rotated else 0

	@property
	def printable_width(self) -> float:
		return self.page_width - 2.0 * self.printer_margin

	@property
	def printable_height(self) -> float:
		return self.page_height - 2.0 * self.printer_margin

	@property
	def frame_width(self) -> float:
		"""
		Width of the working frame the grid is laid out in.
		"""
		if self.rotated:
			return self.printable_height
		return self.printable_width

	@property
	def frame_height(self) -> float:
		"""
		Height of the working frame the grid is laid out in.
		"""
		if self.rotated:
			return self.printable_width
		return self.printable_height

	@property
	def required_width(self) -> float:
		return self.columns * self.label_width + (self.columns - 1) * self.column_gap

	@property
	def required_height(self) -> float:
		return self.rows * self.label_height + (self.rows - 1) * self.row_gap


@dataclasses.dataclass
class PrintOptions:
	draw_outlines: bool = False
	calibration: bool = False
	debug: bool = False
	strict: bool = False
	apply_scaling: bool = True


SHEET_FORMATS: dict[str, SheetFormat] = {
	"S-5627": SheetFormat(
		name="S-5627",
		description='Uline S-5627, 4" x 1.5" labels, 12 per letter sheet',
		page_width=LETTER_WIDTH,
		page_height=LETTER_HEIGHT,
		printer_margin=PRINTER_MARGIN,
		label_width=4.0 * POINTS_PER_INCH,
		label_height=1.5 * POINTS_PER_INCH,
		columns=2,
		rows=6,
		column_gap=12.0,
		row_gap=0.0,
		rotated=False,
		content_layout=LAYOUT_COMPACT,
	),
	"S-5492": SheetFormat(
		name="S-5492",
		description='Uline S-5492, 6" x 4" labels turned sideways, 4 per legal sheet',
		page_width=LEGAL_WIDTH,
		page_height=LEGAL_HEIGHT,
		printer_margin=PRINTER_MARGIN,
		label_width=6.0 * POINTS_PER_INCH,
		label_height=4.0 * POINTS_PER_INCH,
		columns=2,
		rows=2,
		column_gap=0.0,
		row_gap=0.0,
		rotated=True,
		content_layout=LAYOUT_LANDSCAPE,
	),
}


#============================================
def get_sheet_format(name: str) -> SheetFormat:
	"""
	Look up a sheet format preset by name.

	Args:
		name: Preset name such as "S-5627".

	Returns:
		SheetFormat.
	"""
	key = name.strip().upper()
	if key not in SHEET_FORMATS:
		known = ", ".join(sorted(SHEET_FORMATS))
		raise ulab.errors.UnknownFormatError(f"Unknown sheet format {name!r} (known: {known})")
	return SHEET_FORMATS[key]

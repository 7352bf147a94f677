"""
Label slot geometry for the sheet formats.

Positions are in points with the origin at the top-left corner of the
physical page and y growing downward. Rotated formats lay the grid out in
a frame turned 90 degrees and map each slot back onto the page.
"""

# Standard Library
import dataclasses

# local repo modules
import uline_labels as ulab
import uline_labels.config
import uline_labels.errors


SheetFormat = ulab.config.SheetFormat


@dataclasses.dataclass(frozen=True)
class PositionResult:
	slot_index: int
	x: float
	y: float
	width: float
	height: float
	row: int
	col: int
	scale_factor: float
	is_rotated: bool
	rotation_angle: int
	logical_width: float
	logical_height: float

	@property
	def right(self) -> float:
		return self.x + self.width

	@property
	def bottom(self) -> float:
		return self.y + self.height

	@property
	def fits_without_scaling(self) -> bool:
		return self.scale_factor >= 1.0


#============================================
def compute_scale_factor(sheet: SheetFormat) -> float:
	"""
	Compute the shrink factor needed to fit the grid in the working frame.

	Args:
		sheet: Sheet format.

	Returns:
		Scale factor, never above 1.0.
	"""
	width_ratio = sheet.frame_width / sheet.required_width
	height_ratio = sheet.frame_height / sheet.required_height
	return min(width_ratio, height_ratio, 1.0)


#============================================
def position_for(label_index: int, sheet: SheetFormat) -> PositionResult:
	"""
	Compute the page position of one label slot.

	Args:
		label_index: Slot index on the page, 0 <= index < labels_per_page.
		sheet: Sheet format.

	Returns:
		PositionResult in the page frame.
	"""
	if isinstance(label_index, bool) or not isinstance(label_index, int):
		raise ulab.errors.SlotIndexError(f"Slot index must be an int, got {label_index!r}")
	if label_index < 0 or label_index >= sheet.labels_per_page:
		raise ulab.errors.SlotIndexError(
			f"Slot index {label_index} out of range for {sheet.name} "
			f"(0..{sheet.labels_per_page - 1})"
		)

	scale = compute_scale_factor(sheet)
	row = label_index // sheet.columns
	col = label_index % sheet.columns

	label_width = sheet.label_width * scale
	label_height = sheet.label_height * scale
	frame_x = col * label_width + col * sheet.column_gap * scale
	frame_y = row * label_height + row * sheet.row_gap * scale

	margin = sheet.printer_margin
	if sheet.rotated:
		# 90 degree turn: frame y runs along page x, frame x runs up the page
		x = margin + frame_y
		y = margin + (sheet.frame_width - frame_x - label_width)
		width = label_height
		height = label_width
	else:
		x = margin + frame_x
		y = margin + frame_y
		width = label_width
		height = label_height

	return PositionResult(
		slot_index=label_index,
		x=x,
		y=y,
		width=width,
		height=height,
		row=row,
		col=col,
		scale_factor=scale,
		is_rotated=sheet.rotated,
		rotation_angle=sheet.rotation_angle,
		logical_width=sheet.label_width,
		logical_height=sheet.label_height,
	)


#============================================
def page_positions(sheet: SheetFormat) -> list[PositionResult]:
	"""
	Compute positions for every slot on one page.

	Args:
		sheet: Sheet format.

	Returns:
		List of PositionResult in slot order.
	"""
	return [position_for(index, sheet) for index in range(sheet.labels_per_page)]


#============================================
def unrotated_size(position: PositionResult) -> tuple[float, float]:
	"""
	Undo the page-frame transpose of a position's size.

	Args:
		position: PositionResult.

	Returns:
		Tuple of (width, height) in the label's own orientation.
	"""
	if position.is_rotated:
		return (position.height, position.width)
	return (position.width, position.height)


#============================================
def positions_overlap(box_a: PositionResult, box_b: PositionResult) -> bool:
	"""
	Check whether two label rectangles intersect.

	Touching edges do not count as overlap.

	Args:
		box_a: First position.
		box_b: Second position.

	Returns:
		True if the rectangles overlap.
	"""
	overlap_x = box_a.x < box_b.x + box_b.width and box_b.x < box_a.x + box_a.width
	overlap_y = box_a.y < box_b.y + box_b.height and box_b.y < box_a.y + box_a.height
	return overlap_x and overlap_y


#============================================
def positions_gap(box_a: PositionResult, box_b: PositionResult) -> float:
	"""
	Clearance between two label rectangles.

	Args:
		box_a: First position.
		box_b: Second position.

	Returns:
		Separation along the axis where the boxes are furthest apart.
		Zero means touching edges; negative means the boxes overlap.
	"""
	gap_x = max(box_b.x - box_a.right, box_a.x - box_b.right)
	gap_y = max(box_b.y - box_a.bottom, box_a.y - box_b.bottom)
	return max(gap_x, gap_y)


#============================================
def to_pdf_box(position: PositionResult, page_height: float) -> tuple[float, float, float, float]:
	"""
	Convert a top-left position into a PDF bottom-left bounding box.

	Args:
		position: PositionResult.
		page_height: Page height in points.

	Returns:
		Tuple of (x0, y0, x1, y1).
	"""
	y0 = page_height - position.y - position.height
	return (position.x, y0, position.x + position.width, y0 + position.height)

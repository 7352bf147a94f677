"""
Diagnostic checks over a set of label positions.
"""

# Standard Library
import dataclasses

# local repo modules
import uline_labels as ulab
import uline_labels.config
import uline_labels.geometry


SheetFormat = ulab.config.SheetFormat
PositionResult = ulab.geometry.PositionResult

EDGE_TOLERANCE = 0.001
NEAR_OVERLAP_DISTANCE = 1.0


@dataclasses.dataclass
class LayoutReport:
	issues: list[str] = dataclasses.field(default_factory=list)
	warnings: list[str] = dataclasses.field(default_factory=list)
	total_labels: int = 0
	rotated_count: int = 0
	unscaled_count: int = 0

	@property
	def is_valid(self) -> bool:
		return len(self.issues) == 0

	#============================================
	def extend(self, other: "LayoutReport", prefix: str = "") -> None:
		"""
		Fold another report into this one.

		Args:
			other: Report to merge.
			prefix: Text prepended to each merged message.
		"""
		self.issues.extend(f"{prefix}{message}" for message in other.issues)
		self.warnings.extend(f"{prefix}{message}" for message in other.warnings)
		self.total_labels += other.total_labels
		self.rotated_count += other.rotated_count
		self.unscaled_count += other.unscaled_count

	def to_dict(self) -> dict:
		return {
			"is_valid": self.is_valid,
			"issues": list(self.issues),
			"warnings": list(self.warnings),
			"total_labels": self.total_labels,
			"rotated_count": self.rotated_count,
			"unscaled_count": self.unscaled_count,
		}


#============================================
def validate(positions: list[PositionResult], sheet: SheetFormat) -> LayoutReport:
	"""
	Check positions for off-page placement, margin tightness and overlap.

	Args:
		positions: Positions on one page.
		sheet: Sheet format the positions were computed for.

	Returns:
		LayoutReport with issues and warnings.
	"""
	report = LayoutReport()
	margin = sheet.printer_margin

	for index, position in enumerate(positions):
		if position.x < 0.0 or position.y < 0.0:
			report.issues.append(
				f"Label {index}: negative coordinates (x={position.x:.2f}, y={position.y:.2f})"
			)

	for index, position in enumerate(positions):
		if position.right > sheet.page_width + EDGE_TOLERANCE:
			report.issues.append(
				f"Label {index}: right edge {position.right:.2f} runs past page width {sheet.page_width:.2f}"
			)
		if position.bottom > sheet.page_height + EDGE_TOLERANCE:
			report.issues.append(
				f"Label {index}: bottom edge {position.bottom:.2f} runs past page height {sheet.page_height:.2f}"
			)

	for index, position in enumerate(positions):
		edges = (
			("left", position.x),
			("top", position.y),
			("right", sheet.page_width - position.right),
			("bottom", sheet.page_height - position.bottom),
		)
		for edge_name, distance in edges:
			if distance < margin - EDGE_TOLERANCE:
				report.warnings.append(
					f"Label {index}: {edge_name} edge within printer margin "
					f"({distance:.2f}pt < {margin:.2f}pt)"
				)

	for first in range(len(positions)):
		for second in range(first + 1, len(positions)):
			if ulab.geometry.positions_overlap(positions[first], positions[second]):
				report.issues.append(f"Labels {first} and {second} overlap")
				continue
			# butt-cut stock touches exactly; only a sliver of clearance warns
			gap = ulab.geometry.positions_gap(positions[first], positions[second])
			if EDGE_TOLERANCE < gap < NEAR_OVERLAP_DISTANCE:
				report.warnings.append(
					f"Labels {first} and {second} nearly overlap ({gap:.2f}pt apart)"
				)

	if sheet.rotated:
		for index, position in enumerate(positions):
			if not position.is_rotated:
				report.issues.append(
					f"Label {index}: not rotated but {sheet.name} requires rotated labels"
				)

	report.total_labels = len(positions)
	report.rotated_count = sum(1 for position in positions if position.is_rotated)
	report.unscaled_count = sum(1 for position in positions if position.fits_without_scaling)
	return report

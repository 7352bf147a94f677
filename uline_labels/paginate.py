"""
Group label records into sheet pages.
"""

# Standard Library
import dataclasses

# local repo modules
import uline_labels as ulab
import uline_labels.config
import uline_labels.content
import uline_labels.geometry
import uline_labels.records


SheetFormat = ulab.config.SheetFormat
PositionResult = ulab.geometry.PositionResult
LabelContent = ulab.content.LabelContent
LabelRecord = ulab.records.LabelRecord


@dataclasses.dataclass
class Page:
	index: int
	positions: list[PositionResult]
	contents: list[LabelContent]

	@property
	def label_count(self) -> int:
		return len(self.positions)


#============================================
def count_pages(label_count: int, labels_per_page: int) -> int:
	"""
	Number of pages needed for a label count.

	Args:
		label_count: Total labels.
		labels_per_page: Slots per page.

	Returns:
		Page count.
	"""
	if label_count <= 0:
		return 0
	return (label_count + labels_per_page - 1) // labels_per_page


#============================================
def paginate(records: list[LabelRecord], sheet: SheetFormat) -> list[Page]:
	"""
	Assign records to pages and slots in input order.

	Args:
		records: Label records in print order.
		sheet: Sheet format.

	Returns:
		List of Page; the last page holds only the remaining labels.
	"""
	labels_per_page = sheet.labels_per_page
	slot_positions = ulab.geometry.page_positions(sheet)
	pages: list[Page] = []
	for index, record in enumerate(records):
		page_index = index // labels_per_page
		slot_index = index % labels_per_page
		if slot_index == 0:
			pages.append(Page(index=page_index, positions=[], contents=[]))
		page = pages[-1]
		page.positions.append(slot_positions[slot_index])
		page.contents.append(ulab.content.render(record))
	return pages

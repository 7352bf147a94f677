import dataclasses

import pytest

import uline_labels as ulab
import uline_labels.config
import uline_labels.errors
import uline_labels.geometry


S5627 = ulab.config.SHEET_FORMATS["S-5627"]
S5492 = ulab.config.SHEET_FORMATS["S-5492"]
EPSILON = 1e-6


#============================================
def test_s5627_first_slot_is_top_left() -> None:
	"""
	Slot 0 sits at the printer margin with the smallest x and y.
	"""
	positions = ulab.geometry.page_positions(S5627)
	first = positions[0]
	assert first.x == pytest.approx(12.0)
	assert first.y == pytest.approx(12.0)
	assert first.x == min(position.x for position in positions)
	assert first.y == min(position.y for position in positions)
	assert (first.row, first.col) == (0, 0)


#============================================
def test_s5627_last_slot_is_bottom_right() -> None:
	"""
	Slot 11 is the bottom-right slot of the 2 x 6 grid.
	"""
	positions = ulab.geometry.page_positions(S5627)
	last = positions[11]
	assert (last.row, last.col) == (5, 1)
	assert last.x == max(position.x for position in positions)
	assert last.y == max(position.y for position in positions)
	assert last.x == pytest.approx(12.0 + 288.0 + 12.0)
	assert last.y == pytest.approx(12.0 + 5 * 108.0)


#============================================
def test_s5627_slot_size_is_exact() -> None:
	"""
	Unrotated slots keep the 4 x 1.5 inch label size.
	"""
	for position in ulab.geometry.page_positions(S5627):
		assert position.width == pytest.approx(288.0)
		assert position.height == pytest.approx(108.0)
		assert position.scale_factor == 1.0
		assert not position.is_rotated
		assert position.rotation_angle == 0


#============================================
@pytest.mark.parametrize("sheet", [S5627, S5492])
def test_positions_inside_page(sheet: ulab.config.SheetFormat) -> None:
	"""
	Every unscaled slot lies within the physical page.
	"""
	for position in ulab.geometry.page_positions(sheet):
		assert position.scale_factor == 1.0
		assert position.x >= 0.0
		assert position.y >= 0.0
		assert position.right <= sheet.page_width + EPSILON
		assert position.bottom <= sheet.page_height + EPSILON


#============================================
@pytest.mark.parametrize("sheet", [S5627, S5492])
def test_positions_do_not_overlap(sheet: ulab.config.SheetFormat) -> None:
	"""
	No two slots on one page intersect.
	"""
	positions = ulab.geometry.page_positions(sheet)
	for first in range(len(positions)):
		for second in range(first + 1, len(positions)):
			assert not ulab.geometry.positions_overlap(positions[first], positions[second])


#============================================
def test_rotated_positions_unswap_to_logical_size() -> None:
	"""
	Swapping a rotated slot back gives the 6 x 4 inch label for every index.
	"""
	for index in range(S5492.labels_per_page):
		position = ulab.geometry.position_for(index, S5492)
		assert position.is_rotated
		assert position.rotation_angle == 90
		assert position.width == pytest.approx(288.0)
		assert position.height == pytest.approx(432.0)
		assert ulab.geometry.unrotated_size(position) == pytest.approx((432.0, 288.0))


#============================================
def test_rotated_mapping_matches_frame_transform() -> None:
	"""
	Frame columns run up the page and frame rows run across it.
	"""
	frame_width = S5492.page_height - 24.0
	first = ulab.geometry.position_for(0, S5492)
	assert first.x == pytest.approx(12.0)
	assert first.y == pytest.approx(12.0 + frame_width - 432.0)

	second_col = ulab.geometry.position_for(1, S5492)
	assert second_col.x == pytest.approx(12.0)
	assert second_col.y == pytest.approx(12.0 + frame_width - 864.0)

	second_row = ulab.geometry.position_for(2, S5492)
	assert second_row.x == pytest.approx(12.0 + 288.0)
	assert second_row.y == pytest.approx(first.y)


#============================================
@pytest.mark.parametrize("index", [-1, 12, 100])
def test_out_of_range_slot_raises(index: int) -> None:
	"""
	Indexes outside the page are contract violations.
	"""
	with pytest.raises(ulab.errors.SlotIndexError):
		ulab.geometry.position_for(index, S5627)


#============================================
def test_slot_index_error_is_index_error() -> None:
	"""
	Slot errors can be caught as IndexError and ContractViolation.
	"""
	with pytest.raises(IndexError):
		ulab.geometry.position_for(4, S5492)
	with pytest.raises(ulab.errors.ContractViolation):
		ulab.geometry.position_for(True, S5627)


#============================================
def test_oversized_grid_shrinks_uniformly() -> None:
	"""
	A grid larger than the printable area gets one shrink factor.
	"""
	crowded = dataclasses.replace(S5627, name="CROWDED", rows=8)
	scale = ulab.geometry.compute_scale_factor(crowded)
	assert scale == pytest.approx((792.0 - 24.0) / (8 * 108.0))
	last = ulab.geometry.position_for(15, crowded)
	assert last.scale_factor == pytest.approx(scale)
	assert not last.fits_without_scaling
	assert last.width == pytest.approx(288.0 * scale)
	assert last.height == pytest.approx(108.0 * scale)
	assert last.bottom <= crowded.page_height - crowded.printer_margin + EPSILON
	assert last.logical_width == 288.0


#============================================
def test_scale_never_grows() -> None:
	"""
	Spare room never enlarges the labels.
	"""
	roomy = dataclasses.replace(S5627, name="ROOMY", rows=2)
	assert ulab.geometry.compute_scale_factor(roomy) == 1.0


#============================================
def test_position_for_is_deterministic() -> None:
	"""
	Repeated calls give equal results.
	"""
	assert ulab.geometry.position_for(7, S5627) == ulab.geometry.position_for(7, S5627)


#============================================
def test_to_pdf_box_flips_y() -> None:
	"""
	Top-down positions convert to bottom-up PDF boxes.
	"""
	position = ulab.geometry.position_for(0, S5627)
	x0, y0, x1, y1 = ulab.geometry.to_pdf_box(position, S5627.page_height)
	assert (x0, x1) == pytest.approx((12.0, 300.0))
	assert y1 == pytest.approx(792.0 - 12.0)
	assert y0 == pytest.approx(792.0 - 12.0 - 108.0)


#============================================
def test_touching_edges_do_not_overlap() -> None:
	"""
	S-5492 labels share edges without counting as overlap.
	"""
	first = ulab.geometry.position_for(0, S5492)
	second = ulab.geometry.position_for(2, S5492)
	assert first.right == pytest.approx(second.x)
	assert not ulab.geometry.positions_overlap(first, second)

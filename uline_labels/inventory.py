"""
Load product records from inventory CSV exports and enhanced data JSON.
"""

# Standard Library
import csv
import json
import pathlib

# local repo modules
import uline_labels as ulab
import uline_labels.records


ProductRecord = ulab.records.ProductRecord
EnhancedData = ulab.records.EnhancedData

# zero-based row and column positions in each export
MAIN_INVENTORY_LAYOUT = {
	"header_row": 2,
	"first_data_row": 3,
	"columns": {
		"product_name": 1,
		"brand": 4,
		"strain": 6,
		"size": 7,
		"sku": 8,
		"barcode": 9,
		"bio_track_code": 10,
		"quantity": 11,
		"location": 19,
	},
}
SWEED_REPORT_LAYOUT = {
	"header_row": 10,
	"first_data_row": 11,
	"columns": {
		"product_name": 0,
		"brand": 1,
		"strain": 2,
		"size": 3,
		"sku": 4,
		"barcode": 5,
		"external_track_code": 6,
		"quantity": 7,
		"ship_to_location": 8,
	},
}


#============================================
def read_rows(path: pathlib.Path) -> list[list[str]]:
	"""
	Read a CSV file into a list of rows.

	Args:
		path: CSV path.

	Returns:
		List of rows as lists of strings.
	"""
	with path.open("r", encoding="utf-8-sig", newline="") as handle:
		return [row for row in csv.reader(handle)]


#============================================
def parse_stock_quantity(value: str) -> int:
	"""
	Parse an on-hand quantity cell, treating junk as zero.

	Args:
		value: Cell text.

	Returns:
		Whole quantity, 0 when the cell is blank or not numeric.
	"""
	text = str(value or "").replace(",", "").strip()
	if not text:
		return 0
	try:
		return int(float(text))
	except ValueError:
		return 0


def cell(row: list[str], index: int) -> str:
	if index >= len(row):
		return ""
	return row[index].strip()


#============================================
def parse_rows(rows: list[list[str]], layout: dict, source: str) -> list[ProductRecord]:
	"""
	Turn raw CSV rows into product records.

	Blank rows and rows without a SKU or barcode are skipped. When a SKU
	repeats, the first row wins.

	Args:
		rows: All CSV rows, including preamble and header.
		layout: Row and column layout for the export.
		source: Source identifier stored on each record.

	Returns:
		List of ProductRecord in file order.
	"""
	columns = layout["columns"]
	if len(rows) <= layout["header_row"]:
		raise ValueError(f"Expected a header on row {layout['header_row'] + 1}, file has {len(rows)} rows")
	records = []
	seen_skus = set()
	for row in rows[layout["first_data_row"]:]:
		if not any(value.strip() for value in row):
			continue
		sku = cell(row, columns["sku"])
		barcode = cell(row, columns["barcode"])
		if not sku or not barcode:
			continue
		if sku in seen_skus:
			continue
		seen_skus.add(sku)
		fields = {}
		for field, index in columns.items():
			if field in ("sku", "barcode", "quantity"):
				continue
			fields[field] = cell(row, index)
		records.append(
			ProductRecord(
				sku=sku,
				barcode=barcode,
				quantity=parse_stock_quantity(cell(row, columns["quantity"])),
				source=source,
				**fields,
			)
		)
	return records


#============================================
def load_main_inventory(path: pathlib.Path | str, verbose: bool = False) -> list[ProductRecord]:
	"""
	Load the main inventory export.

	Args:
		path: CSV path.
		verbose: Print a summary.

	Returns:
		List of ProductRecord.
	"""
	path = pathlib.Path(path)
	rows = read_rows(path)
	records = parse_rows(rows, MAIN_INVENTORY_LAYOUT, ulab.records.SOURCE_MAIN_INVENTORY)
	if verbose:
		print(f"Main inventory {path.name}: {len(records)} products")
	return records


#============================================
def load_sweed_report(path: pathlib.Path | str, verbose: bool = False) -> list[ProductRecord]:
	"""
	Load a Sweed transfer report export.

	Args:
		path: CSV path.
		verbose: Print a summary.

	Returns:
		List of ProductRecord.
	"""
	path = pathlib.Path(path)
	rows = read_rows(path)
	records = parse_rows(rows, SWEED_REPORT_LAYOUT, ulab.records.SOURCE_SWEED_REPORT)
	if verbose:
		print(f"Sweed report {path.name}: {len(records)} products")
	return records


#============================================
def merge_products(*sources: list[ProductRecord]) -> list[ProductRecord]:
	"""
	Combine product lists, keeping the first record for each SKU.

	Args:
		sources: Product lists in priority order.

	Returns:
		Merged list.
	"""
	merged = []
	seen_skus = set()
	for records in sources:
		for record in records:
			if record.sku in seen_skus:
				continue
			seen_skus.add(record.sku)
			merged.append(record)
	return merged


#============================================
def load_enhanced_data(path: pathlib.Path | str) -> dict[str, dict]:
	"""
	Load per-SKU enhanced data from a JSON object.

	Values are returned as raw mappings; they are checked per item when the
	document is generated so one bad entry does not sink the batch.

	Args:
		path: JSON path holding {sku: {labelQuantity: ..., ...}}.

	Returns:
		Dict of SKU to mapping.
	"""
	path = pathlib.Path(path)
	with path.open("r", encoding="utf-8") as handle:
		data = json.load(handle)
	if not isinstance(data, dict):
		raise ValueError(f"{path}: enhanced data must be a JSON object keyed by SKU")
	enhanced = {}
	for sku, values in data.items():
		if not isinstance(values, dict):
			raise ValueError(f"{path}: entry for {sku} must be an object")
		enhanced[str(sku).strip()] = dict(values)
	return enhanced

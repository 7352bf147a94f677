"""
Expand inventory items into label records and assemble a paginated document.
"""

# Standard Library
import dataclasses
import datetime
import math

# local repo modules
import uline_labels as ulab
import uline_labels.barcode
import uline_labels.config
import uline_labels.errors
import uline_labels.paginate
import uline_labels.records
import uline_labels.validate


SheetFormat = ulab.config.SheetFormat
ProductRecord = ulab.records.ProductRecord
EnhancedData = ulab.records.EnhancedData
LabelRecord = ulab.records.LabelRecord
Page = ulab.paginate.Page
LayoutReport = ulab.validate.LayoutReport


@dataclasses.dataclass(frozen=True)
class ItemError:
	sku: str
	message: str
	field: str | None = None

	def __str__(self) -> str:
		return f"{self.sku or '<no sku>'}: {self.message}"


@dataclasses.dataclass
class Document:
	sheet: SheetFormat
	pages: list[Page]
	layout: LayoutReport
	item_errors: list[ItemError]
	item_warnings: list[str]
	operator_name: str
	generated_at: datetime.datetime

	@property
	def page_count(self) -> int:
		return len(self.pages)

	@property
	def total_labels(self) -> int:
		return sum(page.label_count for page in self.pages)

	@property
	def skus(self) -> list[str]:
		seen: list[str] = []
		for page in self.pages:
			for content in page.contents:
				if content.sku not in seen:
					seen.append(content.sku)
		return seen


#============================================
def compute_box_number(label_number: int, label_quantity: int, box_count: int) -> int:
	"""
	Spread labels evenly across boxes.

	Args:
		label_number: 1-based label number.
		label_quantity: Labels requested for the item.
		box_count: Number of boxes.

	Returns:
		1-based box number within [1, box_count].
	"""
	labels_per_box = max(1, math.ceil(label_quantity / box_count))
	box_number = (label_number - 1) // labels_per_box + 1
	return min(max(box_number, 1), box_count)


#============================================
def expand_item(
	product: ProductRecord,
	enhanced: EnhancedData,
	operator_name: str,
	generated_at: datetime.datetime,
) -> list[LabelRecord]:
	"""
	Expand one item into its label records.

	Args:
		product: Product record.
		enhanced: Packaging metadata.
		operator_name: Operator shown on the label.
		generated_at: Generation timestamp shared by the batch.

	Returns:
		List of label_quantity LabelRecord entries.
	"""
	label_quantity = enhanced.label_quantity
	box_count = enhanced.effective_box_count
	if label_quantity < 1:
		raise ulab.errors.ContractViolation(
			f"{product.sku}: label quantity must be positive, got {label_quantity}"
		)
	if box_count < 1:
		raise ulab.errors.ContractViolation(
			f"{product.sku}: box count must be positive, got {box_count}"
		)
	records = []
	for label_number in range(1, label_quantity + 1):
		records.append(
			LabelRecord(
				product=product,
				enhanced=enhanced,
				label_number=label_number,
				total_labels=label_quantity,
				box_number=compute_box_number(label_number, label_quantity, box_count),
				total_boxes=box_count,
				operator_name=operator_name,
				generated_at=generated_at,
			)
		)
	return records


#============================================
def check_item(product: ProductRecord, enhanced: EnhancedData) -> tuple[EnhancedData, list[str]]:
	"""
	Check that an item can be printed.

	Quantities that pass validation as strings or whole floats come back
	as ints, so the returned data is safe to expand.

	Args:
		product: Product record.
		enhanced: Packaging metadata.

	Returns:
		Tuple of (normalized EnhancedData, non-fatal warnings).
	"""
	sku = str(product.sku or "").strip()
	if not sku:
		raise ulab.errors.ItemValidationError("SKU is required", field="sku")
	if not str(product.barcode or "").strip():
		raise ulab.errors.ItemValidationError("Barcode is required", sku=sku, field="barcode")
	ulab.barcode.clean_code39(product.barcode, sku=sku)
	errors, warnings = ulab.records.validate_enhanced_data(enhanced, sku)
	if errors:
		raise ulab.errors.ItemValidationError("; ".join(errors), sku=sku, field="enhanced_data")
	normalized = ulab.records.normalize_enhanced_data(enhanced, sku)
	return (normalized, warnings)


#============================================
def snapshot_items(items) -> list[tuple[ProductRecord, EnhancedData | dict]]:
	"""
	Copy the caller's items so later store edits are not observed.

	Args:
		items: Iterable of (ProductRecord, EnhancedData or mapping) pairs.

	Returns:
		List of pairs with mappings copied.
	"""
	snapshot = []
	for product, enhanced in items:
		if isinstance(enhanced, dict):
			enhanced = dict(enhanced)
		snapshot.append((product, enhanced))
	return snapshot


#============================================
def generate(
	items,
	sheet: SheetFormat | str,
	operator_name: str = "Unknown",
	generated_at: datetime.datetime | None = None,
	verbose: bool = False,
) -> Document:
	"""
	Build a paginated label document for a batch of items.

	Items that fail validation are left out and reported in
	Document.item_errors; the batch only fails when nothing is left.

	Args:
		items: Iterable of (ProductRecord, EnhancedData or mapping) pairs.
		sheet: Sheet format or preset name.
		operator_name: Operator shown on each label.
		generated_at: Timestamp for the batch, defaults to now.
		verbose: Print progress.

	Returns:
		Document.
	"""
	if isinstance(sheet, str):
		sheet = ulab.config.get_sheet_format(sheet)
	if generated_at is None:
		generated_at = datetime.datetime.now()

	snapshot = snapshot_items(items)
	if not snapshot:
		raise ulab.errors.EmptyBatchError("No items to generate labels for")

	records: list[LabelRecord] = []
	item_errors: list[ItemError] = []
	item_warnings: list[str] = []
	for product, enhanced in snapshot:
		sku = str(product.sku or "").strip()
		try:
			if isinstance(enhanced, dict):
				enhanced = EnhancedData.from_mapping(enhanced, sku=sku)
			enhanced, warnings = check_item(product, enhanced)
			item_records = expand_item(product, enhanced, operator_name, generated_at)
		except ulab.errors.ItemValidationError as error:
			item_errors.append(ItemError(sku=sku, message=error.message, field=error.field))
			if verbose:
				print(f"Skipping {sku or '<no sku>'}: {error.message}")
			continue
		item_warnings.extend(f"{sku}: {warning}" for warning in warnings)
		records.extend(item_records)

	if not records:
		raise ulab.errors.EmptyBatchError(
			f"All {len(snapshot)} items failed validation",
			item_errors=item_errors,
		)

	pages = ulab.paginate.paginate(records, sheet)
	layout = LayoutReport()
	for page in pages:
		page_report = ulab.validate.validate(page.positions, sheet)
		layout.extend(page_report, prefix=f"Page {page.index + 1}: ")
		for content in page.contents:
			item_warnings.extend(f"{content.label_id}: {warning}" for warning in content.warnings)

	if verbose:
		print(f"Sheet format: {sheet.name}")
		print(f"Items accepted: {len(snapshot) - len(item_errors)} of {len(snapshot)}")
		print(f"Labels: {len(records)} on {len(pages)} pages")

	return Document(
		sheet=sheet,
		pages=pages,
		layout=layout,
		item_errors=item_errors,
		item_warnings=item_warnings,
		operator_name=operator_name,
		generated_at=generated_at,
	)


#============================================
def select_items(
	products: list[ProductRecord],
	enhanced_by_sku: dict,
	skus: list[str] | None = None,
) -> list[tuple[ProductRecord, EnhancedData | dict]]:
	"""
	Pair products with their enhanced data for a "generate all" run.

	Args:
		products: Product records in inventory order.
		enhanced_by_sku: SKU to EnhancedData or raw mapping.
		skus: Optional SKUs to restrict to, in the order to print them.

	Returns:
		List of (product, enhanced) pairs.
	"""
	by_sku: dict[str, ProductRecord] = {}
	for product in products:
		by_sku.setdefault(product.sku, product)
	if skus is None:
		order = [product.sku for product in by_sku.values() if product.sku in enhanced_by_sku]
	else:
		order = [sku for sku in skus if sku in by_sku]
	items = []
	for sku in order:
		enhanced = enhanced_by_sku.get(sku, EnhancedData())
		items.append((by_sku[sku], enhanced))
	return items

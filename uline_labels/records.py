"""
Input records for label generation and their semantic validation.
"""

# Standard Library
import calendar
import dataclasses
import datetime
import re

# local repo modules
import uline_labels as ulab
import uline_labels.config
import uline_labels.errors


ItemValidationError = ulab.errors.ItemValidationError

SOURCE_MAIN_INVENTORY = "MainInventory"
SOURCE_SWEED_REPORT = "SweedReport"
SOURCE_TAGS = {
	SOURCE_MAIN_INVENTORY: "[MAIN]",
	SOURCE_SWEED_REPORT: "[SWEED]",
}

DATE_PATTERNS = (
	re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4}|\d{2})$"),
	re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4}|\d{2})$"),
)

# session store keys arrive camelCase from the browser side
ENHANCED_KEY_ALIASES = {
	"labelQuantity": "label_quantity",
	"caseQuantity": "case_quantity",
	"boxCount": "box_count",
	"harvestDate": "harvest_date",
	"packagedDate": "packaged_date",
}


@dataclasses.dataclass(frozen=True)
class ProductRecord:
	sku: str
	barcode: str
	product_name: str = ""
	brand: str = ""
	strain: str = ""
	size: str = ""
	bio_track_code: str = ""
	external_track_code: str = ""
	quantity: int = 0
	location: str = ""
	ship_to_location: str = ""
	source: str = SOURCE_MAIN_INVENTORY

	@property
	def display_location(self) -> str:
		return self.location or self.ship_to_location

	@property
	def source_tag(self) -> str:
		return SOURCE_TAGS.get(self.source, "[MAIN]")

	@property
	def track_code(self) -> str:
		if self.source == SOURCE_SWEED_REPORT:
			return self.external_track_code
		return self.bio_track_code


@dataclasses.dataclass(frozen=True)
class EnhancedData:
	label_quantity: int = 1
	case_quantity: int | None = None
	box_count: int | None = None
	harvest_date: str = ""
	packaged_date: str = ""

	@property
	def effective_box_count(self) -> int:
		if self.box_count is None:
			return 1
		return self.box_count

	#============================================
	@classmethod
	def from_mapping(cls, data: dict, sku: str | None = None) -> "EnhancedData":
		"""
		Build enhanced data from raw session values.

		Args:
			data: Mapping with camelCase or snake_case keys; values may be
				strings, ints or blanks.
			sku: SKU used in error messages.

		Returns:
			EnhancedData.
		"""
		values = {}
		for key, value in data.items():
			values[ENHANCED_KEY_ALIASES.get(key, key)] = value

		raw_label_quantity = values.get("label_quantity")
		if raw_label_quantity is None:
			label_quantity = 1
		else:
			label_quantity = parse_quantity(
				raw_label_quantity,
				"label_quantity",
				ulab.config.LABEL_QUANTITY_MIN,
				ulab.config.LABEL_QUANTITY_MAX,
				sku,
				required=True,
			)
		case_quantity = parse_quantity(
			values.get("case_quantity"),
			"case_quantity",
			ulab.config.CASE_QUANTITY_MIN,
			ulab.config.CASE_QUANTITY_MAX,
			sku,
		)
		box_count = parse_quantity(
			values.get("box_count"),
			"box_count",
			ulab.config.BOX_COUNT_MIN,
			ulab.config.BOX_COUNT_MAX,
			sku,
		)
		return cls(
			label_quantity=label_quantity,
			case_quantity=case_quantity,
			box_count=box_count,
			harvest_date=str(values.get("harvest_date") or "").strip(),
			packaged_date=str(values.get("packaged_date") or "").strip(),
		)


@dataclasses.dataclass(frozen=True)
class LabelRecord:
	"""
	One physical label instance: a product, its packaging data and the
	position of this label within the requested run.
	"""
	product: ProductRecord
	enhanced: EnhancedData
	label_number: int
	total_labels: int
	box_number: int
	total_boxes: int
	operator_name: str
	generated_at: datetime.datetime


#============================================
def parse_quantity(
	value,
	field: str,
	minimum: int,
	maximum: int,
	sku: str | None = None,
	required: bool = False,
) -> int | None:
	"""
	Parse and range-check an integer quantity.

	Args:
		value: Raw value (int, numeric string, blank or None).
		field: Field name for error messages.
		minimum: Smallest allowed value.
		maximum: Largest allowed value.
		sku: SKU for error messages.
		required: Whether a blank value is an error.

	Returns:
		Parsed integer, or None for an optional blank value.
	"""
	label = field.replace("_", " ").capitalize()
	if value is None or (isinstance(value, str) and not value.strip()):
		if required:
			raise ItemValidationError(f"{label} is required", sku=sku, field=field)
		return None
	if isinstance(value, bool):
		raise ItemValidationError(f"{label} must be a number", sku=sku, field=field)
	if isinstance(value, float):
		if not value.is_integer():
			raise ItemValidationError(f"{label} must be a whole number", sku=sku, field=field)
		number = int(value)
	elif isinstance(value, int):
		number = value
	else:
		try:
			number = int(str(value).strip())
		except ValueError:
			raise ItemValidationError(f"{label} must be a number", sku=sku, field=field) from None
	if number < minimum:
		raise ItemValidationError(f"{label} must be at least {minimum}", sku=sku, field=field)
	if number > maximum:
		raise ItemValidationError(f"{label} cannot exceed {maximum}", sku=sku, field=field)
	return number


#============================================
def parse_date(value: str) -> datetime.date | None:
	"""
	Parse a free-text label date.

	Accepts D/M/YYYY, D/M/YY and the same with hyphens. When both leading
	parts could be a month the value is read as DD/MM.

	Args:
		value: Date text.

	Returns:
		Parsed date, or None for a blank value.
	"""
	text = (value or "").strip()
	if not text:
		return None
	match = None
	for pattern in DATE_PATTERNS:
		match = pattern.match(text)
		if match:
			break
	if match is None:
		raise ValueError(
			"Date must be in format DD/MM/YYYY, MM/DD/YYYY, DD/MM/YY, "
			"or use hyphens instead of slashes"
		)
	first, second, year = (int(part) for part in match.groups())
	if len(match.group(3)) == 2:
		if year <= ulab.config.TWO_DIGIT_YEAR_PIVOT:
			year += 2000
		else:
			year += 1900

	if first > 12:
		day, month = first, second
	elif second > 12:
		month, day = first, second
	else:
		day, month = first, second

	if month < 1 or month > 12:
		raise ValueError("Invalid month")
	if day < 1 or day > 31:
		raise ValueError("Invalid day")
	if year < ulab.config.YEAR_MIN or year > ulab.config.YEAR_MAX:
		raise ValueError(f"Year must be between {ulab.config.YEAR_MIN} and {ulab.config.YEAR_MAX}")
	days_in_month = calendar.monthrange(year, month)[1]
	if day > days_in_month:
		raise ValueError(f"Invalid day for {calendar.month_name[month]}")
	return datetime.date(year, month, day)


#============================================
def format_date(value: str) -> str:
	"""
	Normalize a label date to DD/MM/YYYY.

	Args:
		value: Date text.

	Returns:
		Formatted date, or an empty string for a blank value.
	"""
	parsed = parse_date(value)
	if parsed is None:
		return ""
	return parsed.strftime("%d/%m/%Y")


#============================================
def validate_enhanced_data(
	enhanced: EnhancedData,
	sku: str | None = None,
) -> tuple[list[str], list[str]]:
	"""
	Re-check packaging metadata ranges and dates.

	Args:
		enhanced: Enhanced data to check.
		sku: SKU for messages.

	Returns:
		Tuple of (errors, warnings).
	"""
	errors: list[str] = []
	warnings: list[str] = []
	parsed = {}
	for field, value, minimum, maximum, required in quantity_checks(enhanced):
		try:
			parsed[field] = parse_quantity(value, field, minimum, maximum, sku, required=required)
		except ItemValidationError as error:
			errors.append(error.message)

	for field, value in (("Harvest date", enhanced.harvest_date), ("Packaged date", enhanced.packaged_date)):
		try:
			parse_date(str(value or ""))
		except ValueError as error:
			errors.append(f"{field}: {error}")

	if not errors and parsed["box_count"] is not None:
		if parsed["label_quantity"] < parsed["box_count"]:
			warnings.append(
				f"Label quantity {parsed['label_quantity']} is less than box count "
				f"{parsed['box_count']}; some boxes will have no label"
			)
	return (errors, warnings)


def quantity_checks(enhanced: EnhancedData) -> tuple:
	return (
		("label_quantity", enhanced.label_quantity, ulab.config.LABEL_QUANTITY_MIN, ulab.config.LABEL_QUANTITY_MAX, True),
		("case_quantity", enhanced.case_quantity, ulab.config.CASE_QUANTITY_MIN, ulab.config.CASE_QUANTITY_MAX, False),
		("box_count", enhanced.box_count, ulab.config.BOX_COUNT_MIN, ulab.config.BOX_COUNT_MAX, False),
	)


#============================================
def normalize_enhanced_data(enhanced: EnhancedData, sku: str | None = None) -> EnhancedData:
	"""
	Coerce checked quantities to ints and dates to trimmed strings.

	Args:
		enhanced: Enhanced data that passed validate_enhanced_data.
		sku: SKU for error messages.

	Returns:
		EnhancedData with int quantities.
	"""
	values = {}
	for field, value, minimum, maximum, required in quantity_checks(enhanced):
		values[field] = parse_quantity(value, field, minimum, maximum, sku, required=required)
	return dataclasses.replace(
		enhanced,
		harvest_date=str(enhanced.harvest_date or "").strip(),
		packaged_date=str(enhanced.packaged_date or "").strip(),
		**values,
	)

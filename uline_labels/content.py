"""
Label content: the text and barcode fields printed on one label.

Content is a pure function of a LabelRecord and knows nothing about where
the label lands on the sheet.
"""

# Standard Library
import dataclasses
import datetime
import re

# local repo modules
import uline_labels as ulab
import uline_labels.barcode
import uline_labels.config
import uline_labels.errors
import uline_labels.records


LabelRecord = ulab.records.LabelRecord

PRODUCT_NAME_MAX_LENGTH = 90
BRAND_MAX_LENGTH = 20
STRAIN_MAX_LENGTH = 18
SIZE_MAX_LENGTH = 15
LOCATION_MAX_LENGTH = 15
OPERATOR_AUDIT_LENGTH = 8
BRAND_SPLIT_MAX_LENGTH = 25

KNOWN_BRANDS = (
	"Curaleaf", "Grassroots", "Reef", "B-Noble", "Cresco", "Rythm", "GTI",
	"Verano", "Aeriz", "Revolution", "Cookies", "Jeeter", "Raw Garden",
	"Stiiizy", "Select", "Heavy Hitters", "Papa & Barkley", "Kiva",
	"Wyld", "Wana", "Plus Products", "Legion of Bloom", "AbsoluteXtracts",
	"Matter", "Pharmacann", "Green Thumb", "Columbia Care", "Trulieve",
	"FIND",
)
BRAND_ABBREVIATIONS = {
	"INCORPORATED": "INC",
	"CORPORATION": "CORP",
	"COMPANY": "CO",
	"LIMITED": "LTD",
	"CANNABIS": "CANN",
	"CULTIVATION": "CULT",
}
SIZE_UNITS = {
	"GRAMS": "g",
	"GRAM": "g",
	"OUNCES": "oz",
	"OUNCE": "oz",
	"POUNDS": "lb",
	"POUND": "lb",
	"MILLIGRAMS": "mg",
	"MILLIGRAM": "mg",
	"KILOGRAMS": "kg",
	"KILOGRAM": "kg",
}
LOCATION_ABBREVIATIONS = {
	"WAREHOUSE": "WH",
	"SECTION": "SEC",
	"AISLE": "A",
	"SHELF": "SH",
	"BIN": "B",
	"LEVEL": "L",
}
STRAIN_CLEANUP = (
	re.compile(r"^strain\s*", re.IGNORECASE),
	re.compile(r"\s*strain$", re.IGNORECASE),
	re.compile(r"^cannabis\s*", re.IGNORECASE),
	re.compile(r"\s*cannabis$", re.IGNORECASE),
)
BRAND_SPLIT_PATTERN = re.compile(r"^([A-Za-z\s&'-]+?)\s*[-–:]\s*(.+)$")


@dataclasses.dataclass(frozen=True)
class LabelContent:
	sku: str
	barcode: str
	barcode_display: str
	product_name: str
	brand: str
	strain: str
	size: str
	location: str
	source_tag: str
	harvest_date: str
	packaged_date: str
	case_quantity: str
	label_caption: str
	box_caption: str
	operator_name: str
	audit_line: str
	label_id: str
	warnings: tuple[str, ...] = ()


#============================================
def replace_words(text: str, replacements: dict[str, str]) -> str:
	"""
	Replace whole words case-insensitively.

	Args:
		text: Input text.
		replacements: Map of word to replacement.

	Returns:
		Text with replacements applied.
	"""
	for word, replacement in replacements.items():
		text = re.sub(rf"\b{word}\b", replacement, text, flags=re.IGNORECASE)
	return text


#============================================
def truncate(text: str, max_length: int) -> str:
	"""
	Truncate text with an ellipsis.

	Args:
		text: Input text.
		max_length: Maximum length including the ellipsis.

	Returns:
		Truncated text.
	"""
	if len(text) <= max_length:
		return text
	return text[:max_length - 3] + "..."


#============================================
def format_product_name(name: str, max_length: int = PRODUCT_NAME_MAX_LENGTH) -> str:
	"""
	Collapse whitespace and truncate a product name, preferring word breaks.

	Args:
		name: Product name.
		max_length: Maximum length.

	Returns:
		Formatted product name.
	"""
	formatted = " ".join(str(name or "").split())
	if len(formatted) <= max_length:
		return formatted
	truncated = formatted[:max_length - 3]
	last_space = truncated.rfind(" ")
	if last_space > max_length * 0.6:
		return truncated[:last_space] + "..."
	return truncated + "..."


def format_brand(brand: str) -> str:
	formatted = replace_words(str(brand or "").strip(), BRAND_ABBREVIATIONS)
	return truncate(formatted, BRAND_MAX_LENGTH)


def format_strain(strain: str) -> str:
	formatted = str(strain or "").strip()
	for pattern in STRAIN_CLEANUP:
		formatted = pattern.sub("", formatted)
	return truncate(formatted, STRAIN_MAX_LENGTH)


def format_size(size: str) -> str:
	formatted = replace_words(str(size or "").strip(), SIZE_UNITS)
	formatted = " ".join(formatted.split())
	return formatted[:SIZE_MAX_LENGTH]


def format_location(location: str) -> str:
	formatted = replace_words(str(location or "").strip(), LOCATION_ABBREVIATIONS)
	return formatted[:LOCATION_MAX_LENGTH]


#============================================
def extract_brand(product_name: str) -> tuple[str, str]:
	"""
	Split a leading brand off a product name.

	Args:
		product_name: Full product name.

	Returns:
		Tuple of (brand, remaining product name). Brand is empty when none
		is recognized.
	"""
	trimmed = str(product_name or "").strip()
	if not trimmed:
		return ("", "")
	for brand in KNOWN_BRANDS:
		pattern = re.compile(rf"^{re.escape(brand)}\s+", re.IGNORECASE)
		if pattern.match(trimmed):
			remaining = pattern.sub("", trimmed, count=1).strip()
			return (brand, remaining or trimmed)
	match = BRAND_SPLIT_PATTERN.match(trimmed)
	if match and len(match.group(1)) <= BRAND_SPLIT_MAX_LENGTH:
		return (match.group(1).strip(), match.group(2).strip())
	return ("", trimmed)


#============================================
def format_audit_line(generated_at: datetime.datetime, operator_name: str) -> str:
	"""
	Build the timestamp and operator footer line.

	Args:
		generated_at: Generation time.
		operator_name: Operator name.

	Returns:
		Text such as "05/03/2025 2:07PM (warehou)".
	"""
	hour = generated_at.hour % 12 or 12
	meridiem = "PM" if generated_at.hour >= 12 else "AM"
	operator = (operator_name or "Unknown")[:OPERATOR_AUDIT_LENGTH]
	return f"{generated_at.strftime('%d/%m/%Y')} {hour}:{generated_at.minute:02d}{meridiem} ({operator})"


#============================================
def collect_warnings(record: LabelRecord) -> tuple[str, ...]:
	"""
	Collect print-quality warnings for a record.

	Args:
		record: Label record.

	Returns:
		Tuple of warning strings.
	"""
	product = record.product
	text_fields = {
		"sku": product.sku,
		"product_name": product.product_name,
		"brand": product.brand,
		"strain": product.strain,
		"size": product.size,
		"location": product.display_location,
		"operator_name": record.operator_name,
	}
	text_fields = {field: str(value or "") for field, value in text_fields.items()}
	warnings = []
	if len(text_fields["sku"].strip()) > ulab.config.SKU_WARN_LENGTH:
		warnings.append("SKU may be too long for label")
	if len(text_fields["product_name"].strip()) > ulab.config.PRODUCT_NAME_WARN_LENGTH:
		warnings.append("Product name may be too long for label")
	for field, value in text_fields.items():
		if value and not value.isascii():
			warnings.append(f"{field} contains special characters that may not print correctly")
	return tuple(warnings)


#============================================
def render(record: LabelRecord) -> LabelContent:
	"""
	Produce the printable content of one label.

	Args:
		record: Label record.

	Returns:
		LabelContent.
	"""
	product = record.product
	sku = str(product.sku or "").strip().upper()
	if not sku:
		raise ulab.errors.ItemValidationError("SKU is required", field="sku")
	barcode = ulab.barcode.clean_code39(product.barcode, sku=sku)

	dates = {}
	for field, value in (("harvest_date", record.enhanced.harvest_date), ("packaged_date", record.enhanced.packaged_date)):
		try:
			dates[field] = ulab.records.format_date(str(value or ""))
		except ValueError as error:
			raise ulab.errors.ItemValidationError(str(error), sku=sku, field=field) from None

	brand = product.brand
	product_name = product.product_name
	if not brand:
		brand, product_name = extract_brand(product.product_name)

	case_quantity = ""
	if record.enhanced.case_quantity is not None:
		case_quantity = str(record.enhanced.case_quantity)

	return LabelContent(
		sku=sku,
		barcode=barcode,
		barcode_display=ulab.barcode.format_barcode_display(barcode),
		product_name=format_product_name(product_name),
		brand=format_brand(brand),
		strain=format_strain(product.strain),
		size=format_size(product.size),
		location=format_location(product.display_location),
		source_tag=product.source_tag,
		harvest_date=dates["harvest_date"],
		packaged_date=dates["packaged_date"],
		case_quantity=case_quantity,
		label_caption=f"Label {record.label_number} of {record.total_labels}",
		box_caption=f"Box {record.box_number} of {record.total_boxes}",
		operator_name=record.operator_name,
		audit_line=format_audit_line(record.generated_at, record.operator_name),
		label_id=f"{sku}_{record.label_number}",
		warnings=collect_warnings(record),
	)

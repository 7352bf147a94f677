"""
Exception types for the label engine.

LabelEngineError
	ContractViolation (programmer error, fatal to the call)
		SlotIndexError
		UnknownFormatError
	ItemValidationError (recoverable, excludes one item from a batch)
		UnsupportedCharacterError
	EmptyBatchError
	LayoutError (strict mode only)
	ExportTimeoutError
	ExportError
"""


class LabelEngineError(Exception):
	"""
	Base class for every error raised by the label engine.
	"""
	pass


class ContractViolation(LabelEngineError, ValueError):
	pass


class SlotIndexError(ContractViolation, IndexError):
	pass


class UnknownFormatError(ContractViolation, KeyError):
	def __str__(self) -> str:
		# KeyError quotes its message; keep it readable
		return str(self.args[0]) if self.args else ""


class ItemValidationError(LabelEngineError, ValueError):
	"""
	Raised when one inventory item cannot be turned into labels.

	Args:
		message: Human readable reason.
		sku: SKU of the failing item, when known.
		field: Name of the offending field, when known.
	"""

	def __init__(self, message: str, sku: str | None = None, field: str | None = None):
		super().__init__(message)
		self.message = message
		self.sku = sku
		self.field = field

	def __str__(self) -> str:
		if self.sku:
			return f"{self.sku}: {self.message}"
		return self.message


class UnsupportedCharacterError(ItemValidationError):
	"""
	Raised when a barcode value holds characters Code 39 cannot encode.
	"""

	def __init__(
		self,
		value: str,
		characters: str,
		sku: str | None = None,
	):
		message = f"Barcode {value!r} has characters Code 39 cannot encode: {characters!r}"
		super().__init__(message, sku=sku, field="barcode")
		self.value = value
		self.characters = characters


class EmptyBatchError(LabelEngineError):
	"""
	Raised when no valid label records remain after filtering.
	"""

	def __init__(self, message: str, item_errors: list | None = None):
		super().__init__(message)
		self.item_errors = list(item_errors or [])


class LayoutError(LabelEngineError):
	"""
	Raised in strict mode when a layout report carries issues.
	"""

	def __init__(self, message: str, report=None):
		super().__init__(message)
		self.report = report


class ExportTimeoutError(LabelEngineError, TimeoutError):
	pass


class ExportError(LabelEngineError):
	pass

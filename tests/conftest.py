"""
Pytest configuration for local imports and shared label fixtures.
"""

# Standard Library
import datetime
import os
import sys

# PIP3 modules
import pytest

#============================================


def _ensure_repo_on_path() -> None:
	"""
	Ensure the repository root is on sys.path so uline_labels imports.
	"""
	repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
	if repo_root not in sys.path:
		sys.path.insert(0, repo_root)


_ensure_repo_on_path()

# local repo modules
import uline_labels as ulab
import uline_labels.records


#============================================
@pytest.fixture
def generated_at() -> datetime.datetime:
	"""
	Fixed batch timestamp.
	"""
	return datetime.datetime(2025, 3, 5, 14, 7)


#============================================
@pytest.fixture
def make_product():
	"""
	Factory for ProductRecord with sensible defaults.
	"""
	def _make(sku: str = "CUR-1001", barcode: str = "CUR19862332", **fields) -> ulab.records.ProductRecord:
		values = {
			"product_name": "Curaleaf Blue Dream Flower",
			"brand": "Curaleaf",
			"strain": "Blue Dream",
			"size": "3.5 GRAMS",
			"location": "WAREHOUSE A",
		}
		values.update(fields)
		return ulab.records.ProductRecord(sku=sku, barcode=barcode, **values)
	return _make


#============================================
@pytest.fixture
def make_enhanced():
	"""
	Factory for EnhancedData.
	"""
	def _make(label_quantity: int = 1, **fields) -> ulab.records.EnhancedData:
		return ulab.records.EnhancedData(label_quantity=label_quantity, **fields)
	return _make

import csv
import json
import pathlib

import pypdf
import pytest

import uline_labels as ulab
import uline_labels.cli


#============================================
def write_inputs(tmp_path: pathlib.Path, enhanced: dict) -> tuple[pathlib.Path, pathlib.Path]:
	"""
	Write a small Sweed report and enhanced data file.
	"""
	sweed_path = tmp_path / "sweed.csv"
	rows = [[f"preamble {index}"] for index in range(11)]
	rows.append(["Blue Dream Flower", "Curaleaf", "Blue Dream", "3.5g", "SKU-1", "CUR100", "EXT-1", "5", "Store 1"])
	rows.append(["OG Kush Vape", "Cresco", "OG Kush", "1g", "SKU-2", "CRE200", "EXT-2", "8", "Store 2"])
	with sweed_path.open("w", encoding="utf-8", newline="") as handle:
		csv.writer(handle).writerows(rows)
	enhanced_path = tmp_path / "enhanced.json"
	enhanced_path.write_text(json.dumps(enhanced), encoding="utf-8")
	return sweed_path, enhanced_path


#============================================
def test_cli_writes_pdf_and_manifest(tmp_path: pathlib.Path) -> None:
	"""
	A full run writes the PDF and a manifest next to it.
	"""
	sweed_path, enhanced_path = write_inputs(
		tmp_path,
		{"SKU-1": {"labelQuantity": "3", "boxCount": "2"}, "SKU-2": {"labelQuantity": 2}},
	)
	output_path = tmp_path / "labels.pdf"
	args = ulab.cli.parse_args(
		["-s", str(sweed_path), "-e", str(enhanced_path), "-o", str(output_path), "-f", "S-5492", "-u", "tester"]
	)
	assert ulab.cli.run_pipeline(args) == 0
	reader = pypdf.PdfReader(str(output_path))
	assert len(reader.pages) == 2
	manifest = json.loads(pathlib.Path(f"{output_path}.json").read_text(encoding="utf-8"))
	assert manifest["total_labels"] == 5
	assert manifest["skus"] == ["SKU-1", "SKU-2"]
	assert manifest["operator"] == "tester"


#============================================
def test_cli_empty_batch_exit_status(tmp_path: pathlib.Path) -> None:
	"""
	Nothing printable gives exit status 1.
	"""
	sweed_path, enhanced_path = write_inputs(tmp_path, {"SKU-1": {"labelQuantity": "0"}})
	args = ulab.cli.parse_args(["-s", str(sweed_path), "-e", str(enhanced_path), "-o", str(tmp_path / "x.pdf")])
	assert ulab.cli.run_pipeline(args) == 1
	assert not (tmp_path / "x.pdf").exists()


#============================================
def test_cli_requires_an_inventory_source(tmp_path: pathlib.Path) -> None:
	"""
	At least one CSV source must be given.
	"""
	with pytest.raises(SystemExit):
		ulab.cli.parse_args(["-e", str(tmp_path / "e.json"), "-o", str(tmp_path / "x.pdf")])


#============================================
def test_cli_sku_selection_and_options(tmp_path: pathlib.Path) -> None:
	"""
	Repeated -k flags select SKUs; behavior flags map onto PrintOptions.
	"""
	args = ulab.cli.parse_args(
		["-i", "inv.csv", "-e", "e.json", "-o", "o.pdf", "-k", "B", "-k", "A", "--calibration", "--strict"]
	)
	assert args.skus == ["B", "A"]
	options = ulab.cli.build_options(args)
	assert options.calibration
	assert options.strict
	assert not options.draw_outlines

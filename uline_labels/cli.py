"""
CLI entry point for Uline label sheet generation.
"""

# Standard Library
import argparse
import pathlib
import sys
import time

# local repo modules
import uline_labels as ulab
import uline_labels.assemble
import uline_labels.config
import uline_labels.errors
import uline_labels.inventory
import uline_labels.render


PrintOptions = ulab.config.PrintOptions


#============================================
def build_options(args: argparse.Namespace) -> PrintOptions:
	"""
	Build print options from CLI args.

	Args:
		args: Parsed argparse namespace.

	Returns:
		PrintOptions.
	"""
	return PrintOptions(
		draw_outlines=args.draw_outlines,
		calibration=args.calibration,
		debug=args.debug,
		strict=args.strict,
		apply_scaling=True,
	)


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Args:
		argv: Argument list, defaults to sys.argv.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Generate Uline label sheet PDFs from inventory exports.")

	input_group = parser.add_argument_group("Input")
	input_group.add_argument("-i", "--inventory", dest="inventory_path", default=None, help="Main inventory CSV export.")
	input_group.add_argument("-s", "--sweed", dest="sweed_path", default=None, help="Sweed report CSV export.")
	input_group.add_argument("-e", "--enhanced", dest="enhanced_path", required=True, help="Enhanced data JSON keyed by SKU.")
	input_group.add_argument("-k", "--sku", dest="skus", action="append", default=None, help="SKU to print, repeatable.")

	output_group = parser.add_argument_group("Output")
	output_group.add_argument("-o", "--output", dest="output_path", required=True, help="Output PDF path.")
	output_group.add_argument("-m", "--manifest", dest="manifest_path", default=None, help="Output manifest JSON path.")
	output_group.add_argument(
		"-f",
		"--format",
		dest="format_name",
		default=ulab.config.DEFAULT_FORMAT_NAME,
		choices=sorted(ulab.config.SHEET_FORMATS),
		help="Label sheet format.",
	)
	output_group.add_argument("-u", "--operator", dest="operator_name", default="Unknown", help="Operator name for the audit line.")

	behavior_group = parser.add_argument_group("Behavior")
	behavior_group.add_argument("-d", "--draw-outlines", dest="draw_outlines", action="store_true", help="Draw label outlines.")
	behavior_group.add_argument("-D", "--no-draw-outlines", dest="draw_outlines", action="store_false", help="Disable label outlines.")
	behavior_group.add_argument("-c", "--calibration", dest="calibration", action="store_true", help="Add a calibration page.")
	behavior_group.add_argument("-C", "--no-calibration", dest="calibration", action="store_false", help="Disable calibration page.")
	behavior_group.add_argument("-x", "--strict", dest="strict", action="store_true", help="Refuse to write a PDF with layout issues.")
	behavior_group.add_argument("-X", "--no-strict", dest="strict", action="store_false", help="Treat layout issues as advisory.")
	behavior_group.add_argument("--debug", dest="debug", action="store_true", help="Draw content area boxes.")
	behavior_group.add_argument("-t", "--timeout", dest="timeout", type=float, default=None, help="Seconds allowed for PDF encoding.")

	parser.set_defaults(
		draw_outlines=False,
		calibration=False,
		strict=False,
		debug=False,
	)

	args = parser.parse_args(argv)
	if args.inventory_path is None and args.sweed_path is None:
		parser.error("at least one of --inventory or --sweed is required")
	return args


#============================================
def print_report(document: ulab.assemble.Document) -> None:
	"""
	Print layout findings and per-item problems.

	Args:
		document: Assembled document.
	"""
	for error in document.item_errors:
		print(f"Item error: {error}")
	for warning in document.item_warnings:
		print(f"Item warning: {warning}")
	for warning in document.layout.warnings:
		print(f"Layout warning: {warning}")
	for issue in document.layout.issues:
		print(f"Layout issue: {issue}")


#============================================
def run_pipeline(args: argparse.Namespace) -> int:
	"""
	Run the full pipeline from inventory exports to a label PDF.

	Args:
		args: Parsed argparse namespace.

	Returns:
		Process exit status.
	"""
	print("Uline label pipeline")
	print(f"Format: {args.format_name}")
	print(f"Output PDF: {args.output_path}")
	if args.manifest_path:
		print(f"Manifest: {args.manifest_path}")
	print(f"Operator: {args.operator_name}")
	print(f"Draw outlines: {args.draw_outlines}")
	print(f"Calibration: {args.calibration}")
	print(f"Strict: {args.strict}")
	if args.timeout is not None:
		print(f"Timeout: {args.timeout}s")

	start_time = time.perf_counter()
	load_start = time.perf_counter()
	sources = []
	if args.inventory_path:
		sources.append(ulab.inventory.load_main_inventory(args.inventory_path, verbose=True))
	if args.sweed_path:
		sources.append(ulab.inventory.load_sweed_report(args.sweed_path, verbose=True))
	products = ulab.inventory.merge_products(*sources)
	enhanced = ulab.inventory.load_enhanced_data(args.enhanced_path)
	items = ulab.assemble.select_items(products, enhanced, args.skus)
	load_end = time.perf_counter()
	print(f"Products loaded: {len(products)}")
	print(f"Items selected: {len(items)}")

	options = build_options(args)
	assemble_start = time.perf_counter()
	try:
		document = ulab.assemble.generate(
			items,
			args.format_name,
			operator_name=args.operator_name,
			verbose=True,
		)
	except ulab.errors.EmptyBatchError as error:
		print(f"Error: {error}")
		for item_error in error.item_errors:
			print(f"Item error: {item_error}")
		return 1
	assemble_end = time.perf_counter()
	print_report(document)

	output_path = pathlib.Path(args.output_path)
	sink = ulab.render.FileExportSink(output_path)
	export_start = time.perf_counter()
	try:
		bytes_written = ulab.render.export_document(
			document,
			sink,
			options,
			timeout=args.timeout,
			verbose=True,
		)
	except ulab.errors.LayoutError as error:
		print(f"Error: {error}")
		return 1
	except (ulab.errors.ExportTimeoutError, ulab.errors.ExportError) as error:
		print(f"Export failed: {error}")
		return 1
	export_end = time.perf_counter()
	print(f"Pages written: {document.page_count}")
	print(f"Labels printed: {document.total_labels}")
	print(f"Bytes written: {bytes_written}")

	manifest_path = args.manifest_path
	if manifest_path is None:
		manifest_path = f"{output_path}.json"
	ulab.render.write_manifest(pathlib.Path(manifest_path), document, options, bytes_written)

	total_time = time.perf_counter() - start_time
	print(
		"Timing: load={:.2f}s assemble={:.2f}s export={:.2f}s total={:.2f}s".format(
			load_end - load_start,
			assemble_end - assemble_start,
			export_end - export_start,
			total_time,
		)
	)
	print(f"Manifest written: {manifest_path}")
	return 0


#============================================
def main(argv: list[str] | None = None) -> None:
	"""
	Main entry point.
	"""
	args = parse_args(argv)
	sys.exit(run_pipeline(args))


if __name__ == "__main__":
	main()

import argparse
import logging
import sys
from typing import List, Optional

from csv2sheet.appender import SheetAppender
from csv2sheet.exceptions import AppendError
from csv2sheet.summary import summarize
from csv2sheet.types import DEFAULT_ENCODING, AppendSession

logger = logging.getLogger(__name__)

DESCRIPTION = """\
Appends data from CSV/TSV files onto an existing Excel (XLSX, XLTX) sheet.
Works with tables and pivot tables. Slicers are not kept.
Line input errors are ignored and logged.
Quotation marks are removed during processing."""

EPILOG = """\
Example: Appends CSV file prc.csv to a sheet named Pf-Table
in an excel template named PfSlicer.xltx starting at line 2
and outputs a file named pfoutput.xlsx

    csv2sheet -i prc.csv -t PfSlicer.xltx -s Pf-Table -r 2 -o pfoutput.xlsx"""

REQUIRED_FLAGS = {
    "source": "-i (input file)",
    "template": "-t (Excel template)",
    "sheet": "-s (Sheet name)",
    "output": "-o (Output file)",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="csv2sheet",
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    options = parser.add_argument_group("Options")
    options.add_argument(
        "-i", dest="source", help="Input path to the source CSV/TSV file (required)"
    )
    options.add_argument(
        "-t", dest="template", help="Path to the Excel XLSX/XLTX file (required)"
    )
    options.add_argument(
        "-s", dest="sheet", help="Existing sheet name to append lines (required)"
    )
    options.add_argument("-o", dest="output", help="Output file name (required)")
    options.add_argument(
        "-d",
        dest="delimiter",
        default="csv",
        help="Delimiter of input file: 'csv', 'tab', or a single character (default: 'csv')",
    )
    options.add_argument(
        "-r",
        dest="start_line",
        type=int,
        default=1,
        help="Start appending sheet from this line number (default: 1)",
    )
    options.add_argument(
        "-e",
        "--encoding",
        default=DEFAULT_ENCODING,
        help=f"Encoding of the input file, or 'auto' to detect it (default: '{DEFAULT_ENCODING}')",
    )
    options.add_argument(
        "--max-field-size",
        type=int,
        default=None,
        help="Lines with a field longer than this many characters are logged as errors",
    )
    options.add_argument(
        "-v", "--verbose", action="store_true", help="Log progress details to stderr"
    )
    options.add_argument(
        "-h", "--help", action="store_true", help="Show this help message"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point of the csv2sheet command. Returns the process exit code."""
    if argv is None:
        argv = sys.argv[1:]
    parser = build_parser()

    if not argv:
        parser.print_help()
        return 0

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.help:
        parser.print_help()
        return 0

    missing = [flag for dest, flag in REQUIRED_FLAGS.items() if not getattr(args, dest)]
    if missing:
        parser.print_help()
        logger.error(
            "Flags -i (input file), -t (Excel template), -s (Sheet name), and -o (Output file) "
            f"must be specified; missing {', '.join(missing)}"
        )
        return 1

    try:
        session = AppendSession.create(
            args.source,
            args.template,
            args.sheet,
            args.output,
            delimiter=args.delimiter,
            start_line=args.start_line,
            encoding=args.encoding,
            max_field_size=args.max_field_size,
        )
        summary = SheetAppender().append(session)
    except AppendError as e:
        logger.error(str(e))
        return 1
    except ValueError as e:
        logger.error(f"Invalid option: {e}")
        return 1

    print(summarize(summary))
    return 0


if __name__ == "__main__":
    sys.exit(main())

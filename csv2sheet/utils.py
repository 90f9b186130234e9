from pathlib import Path
from typing import List, Union

from csv2sheet.exceptions import InvalidDelimiterError

ENCODING_SAMPLE_SIZE = 1024 * 12  # Bytes for encoding detection

ERROR_LOG_SUFFIX = "-errors.log"

_NAMED_DELIMITERS = {
    "csv": ",",
    "tab": "\t",
}


def resolve_delimiter(token: str) -> str:
    """
    Maps a delimiter token to the field separator.

    'csv' is a comma, 'tab' a horizontal tab, and any other single character
    (counted in code points, so non-ASCII separators work) is used verbatim.
    """
    if token in _NAMED_DELIMITERS:
        return _NAMED_DELIMITERS[token]
    if len(token) == 1:
        return token
    raise InvalidDelimiterError(token)


def strip_quotes(fields: List[str]) -> List[str]:
    """Removes every quotation mark from every field."""
    return [field.replace('"', "") for field in fields]


def error_log_path(output_path: Union[Path, str]) -> Path:
    """
    The diagnostic log sits next to the output: report.xlsx -> report-errors.log.

    Everything from the last dot of the file name is dropped, so a name that
    is only an extension (.xlsx) gives a bare -errors.log.
    """
    output_path = Path(output_path)
    name = output_path.name
    dot = name.rfind(".")
    base = name[:dot] if dot >= 0 else name
    return output_path.with_name(base + ERROR_LOG_SUFFIX)


def detect_file_encoding(
    file_path: Path, sample_size: int = ENCODING_SAMPLE_SIZE
) -> str:
    """Detect file encoding using charset-normalizer."""
    from charset_normalizer import detect as charset_detect

    try:
        with open(file_path, "rb") as fb:
            data = fb.read(sample_size)
            if not data:
                return "utf-8"
            best_guess = charset_detect(data)
            if best_guess and best_guess.get("encoding"):
                return best_guess["encoding"]
            else:
                raise ValueError(
                    f"Encoding detection failed for {file_path.name}: No suitable encoding found by charset_normalizer."
                )
    except ValueError:
        raise
    except Exception as e:
        raise RuntimeError(
            f"Error during encoding detection for {file_path.name}: {e}"
        ) from e

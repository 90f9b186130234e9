class AppendError(Exception):
    """Base class for errors that abort an append run."""

    pass


class InvalidDelimiterError(AppendError, ValueError):
    """Raised when a delimiter token is not 'csv', 'tab' or a single character."""

    def __init__(self, token: str):
        self.token = token
        super().__init__(f"Invalid delimiter: {token}")


class SourceOpenError(AppendError):
    """Raised when the delimited source file cannot be opened."""

    pass


class DocumentOpenError(AppendError):
    """Raised when the spreadsheet document cannot be opened or is not a valid workbook."""

    pass


class SheetNotFoundError(AppendError):
    """Raised when the target sheet does not exist in the document."""

    def __init__(self, sheet_name: str):
        self.sheet_name = sheet_name
        super().__init__(f"Sheet '{sheet_name}' does not exist in the template file!")


class SheetReadError(AppendError):
    """Raised when the rows of the target sheet cannot be read."""

    pass


class SheetCapacityError(AppendError):
    """Raised when the appended records would not fit below the sheet's last row."""

    def __init__(self, sheet_name: str, next_row: int, record_count: int, max_rows: int):
        self.sheet_name = sheet_name
        self.next_row = next_row
        self.record_count = record_count
        super().__init__(
            f"Sheet '{sheet_name}' has no room for {record_count} more rows after row "
            f"{next_row - 1}: a sheet holds at most {max_rows} rows"
        )


class SaveError(AppendError):
    """Raised when the output document cannot be written."""

    pass


class DiagnosticLogError(AppendError):
    """Raised when the diagnostic log file cannot be created or written."""

    pass

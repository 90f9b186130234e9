from csv2sheet.types import RunSummary


def summarize(summary: RunSummary) -> str:
    """Human-readable outcome of a run: where the data went and, if any, how many lines failed."""
    lines = [
        f"Data successfully written to file {summary.output_path}, sheet {summary.sheet_name}"
    ]
    if summary.failure_count > 0:
        lines.append(
            f"{summary.failure_count} lines encountered errors. See the log at {summary.log_path}"
        )
    return "\n".join(lines)

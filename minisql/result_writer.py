"""Text table output for query results."""

from __future__ import annotations

from typing import Iterable, TextIO


class ResultWriter:
    """Writes result rows as a bordered text table."""

    def __init__(self, stream: TextIO, disable_header: bool = False, separator: str = "|") -> None:
        self.stream = stream
        self.disable_header = disable_header
        self.separator = separator

    def write_cell(self, cell: str, width: int) -> None:
        self.stream.write(f" {cell.ljust(width)} {self.separator}")

    def write_header_cell(self, cell: str, width: int) -> None:
        if not self.disable_header:
            self.write_cell(cell, width)

    def divider(self, data_width: Iterable[int]) -> None:
        line = "+" + "".join("+".rjust(width + 3, "-") for width in data_width)
        self.stream.write(line + "\n")

    def begin_row(self) -> None:
        self.stream.write("|")

    def end_row(self) -> None:
        self.stream.write("\n")
        self.stream.flush()

    def end_information(self, result_size: int, time_ms: float, is_scan: bool) -> None:
        if is_scan:
            summary = "Empty set" if not result_size else f"{result_size} row in set"
        else:
            summary = f"Query OK, {result_size} row affected"
        self.stream.write(f"{summary}({time_ms / 1000:.4f} sec).\n")
        self.stream.flush()
"""
Format Contract Table
=====================

Maps an output format id to the instruction the generation request must
carry and to the file extension used on export. Unknown formats fall back
to the CSV entry.
"""
from typing import Union

from core.schemas import DatasetFormat

CSV_INSTRUCTION = (
    "Return ONLY valid CSV with a header row. Use commas as delimiters. "
    "Quote fields containing commas."
)

FORMAT_INSTRUCTIONS = {
    DatasetFormat.CSV: CSV_INSTRUCTION,
    DatasetFormat.JSON: "Return ONLY a valid JSON array of objects. No markdown, no code fences.",
    DatasetFormat.SQL: (
        "Return ONLY valid SQL INSERT statements for a table called 'data'. "
        "Include a CREATE TABLE statement first."
    ),
    DatasetFormat.XML: "Return ONLY valid XML with a root <dataset> element containing <row> elements.",
    DatasetFormat.YAML: "Return ONLY valid YAML as a list of objects. No markdown, no code fences.",
    DatasetFormat.TSV: (
        "Return ONLY valid TSV with a header row. Use a single tab character as the delimiter. "
        "Do not use tabs inside field values."
    ),
    DatasetFormat.XLSX: CSV_INSTRUCTION + " This will be converted to Excel format.",
    DatasetFormat.TXT: "Return the data as readable plain text with consistent formatting.",
}

FORMAT_EXTENSIONS = {
    DatasetFormat.CSV: ".csv",
    DatasetFormat.JSON: ".json",
    DatasetFormat.SQL: ".sql",
    DatasetFormat.XML: ".xml",
    DatasetFormat.YAML: ".yaml",
    DatasetFormat.TSV: ".tsv",
    DatasetFormat.XLSX: ".csv",  # content is CSV text
    DatasetFormat.TXT: ".txt",
}

DEFAULT_FORMAT = DatasetFormat.CSV


def resolve_format(fmt: Union[str, DatasetFormat, None]) -> DatasetFormat:
    """Return the matching DatasetFormat, or CSV for anything unrecognized"""
    if isinstance(fmt, DatasetFormat):
        return fmt
    try:
        return DatasetFormat(str(fmt).strip().lower())
    except ValueError:
        return DEFAULT_FORMAT


def is_known_format(fmt: Union[str, DatasetFormat, None]) -> bool:
    if isinstance(fmt, DatasetFormat):
        return True
    try:
        DatasetFormat(str(fmt).strip().lower())
    except ValueError:
        return False
    return True


def instruction_for(fmt: Union[str, DatasetFormat, None]) -> str:
    return FORMAT_INSTRUCTIONS[resolve_format(fmt)]


def extension_for(fmt: Union[str, DatasetFormat, None]) -> str:
    return FORMAT_EXTENSIONS[resolve_format(fmt)]

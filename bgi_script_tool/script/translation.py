"""
Translation file records.

Every exported string becomes three lines::

    ◇0000ABCD◇original text
    ◆0000ABCD◆original text

The first line is a read-only copy for reference; the second one is edited
by the translator and is the only line read back on import.
"""

import re
from dataclasses import dataclass
from io import StringIO
from typing import Iterable, List, TextIO

from ..utils.string_utils import escape_string, unescape_string
from .errors import FormatError

ORIGINAL_MARKER = '◇'
EDITABLE_MARKER = '◆'

# Text runs to the end of the line, so later markers belong to the text
RECORD_PATTERN = re.compile(rf'{EDITABLE_MARKER}([0-9A-Fa-f]+){EDITABLE_MARKER}(.*)')


def reading_encoding(encoding: str) -> str:
    """
    Encoding to read translation files with.

    UTF-8 is read as utf-8-sig so a BOM added by an editor is dropped.
    """
    if encoding.lower().replace('_', '-') in ('utf-8', 'utf8'):
        return 'utf-8-sig'
    return encoding


@dataclass
class TranslationRecord:
    """One editable line of a translation file."""
    offset: int
    text: str
    line_no: int = 0


def format_record(offset: int, text: str, escape: bool = True) -> List[str]:
    """
    Render one string as its original line, editable line and separator.

    Args:
        offset: Code section offset of the string operand
        text: String content
        escape: Whether to escape line breaks and tabs

    Returns:
        The three lines, without line terminators
    """
    if escape:
        text = escape_string(text)
    return [
        f'{ORIGINAL_MARKER}{offset:08X}{ORIGINAL_MARKER}{text}',
        f'{EDITABLE_MARKER}{offset:08X}{EDITABLE_MARKER}{text}',
        '',
    ]


def write_records(stream: TextIO, records: Iterable[TranslationRecord], escape: bool = True) -> int:
    """
    Write records to a text stream.

    Returns:
        Number of records written
    """
    count = 0
    for record in records:
        for line in format_record(record.offset, record.text, escape):
            stream.write(line + '\n')
        count += 1
    return count


def parse_record(line: str, line_no: int, unescape: bool = True) -> TranslationRecord:
    """
    Parse one editable line.

    Raises:
        FormatError: If the line does not follow the record layout
    """
    match = RECORD_PATTERN.fullmatch(line)
    if match is None:
        raise FormatError(f"Bad format at line: {line_no}")

    offset = int(match.group(1), 16)

    text = match.group(2)
    if unescape:
        text = unescape_string(text)
    return TranslationRecord(offset, text, line_no)


def read_records(stream: TextIO, unescape: bool = True) -> List[TranslationRecord]:
    """
    Collect the editable records of a translation file.

    Lines that do not start with the editable marker are ignored.

    Args:
        stream: Text stream opened with universal newlines
        unescape: Whether to reverse the export escaping

    Returns:
        Records in file order; line numbers are 1-based
    """
    records = []
    for line_no, line in enumerate(stream, start=1):
        line = line.rstrip('\r\n')
        if not line.startswith(EDITABLE_MARKER):
            continue
        records.append(parse_record(line, line_no, unescape))
    return records


def parse_text(text: str, unescape: bool = True) -> List[TranslationRecord]:
    """Parse translation records from an in-memory string."""
    return read_records(StringIO(text, newline=None), unescape)

"""
Compiled BGI script container.

File layout::

    version tag      null-terminated ASCII, "BurikoCompiledScriptVer1.00"
    import size      int32, counts its own four bytes
    import section   opaque, copied through unchanged
    code section     bytecode, length not stored in the file
    string section   null-terminated strings

String operands in the bytecode hold ``code length + string offset``.
"""

import struct
from io import StringIO
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..config import Config
from ..io.binary_stream import BinaryStream
from ..utils.pattern_search import iter_pattern, hex_to_bytes
from .boundary import CodeSizeStrategy, guess_code_size_by_halt
from .errors import FormatError, StateError
from .translation import (
    TranslationRecord, read_records, parse_text, reading_encoding, write_records
)

PathLike = Union[str, Path]

SCRIPT_VERSION = "BurikoCompiledScriptVer1.00"

# push-string instruction: 03 00 00 00 followed by an int32 operand
LOAD_STRING_PATTERN = hex_to_bytes("03 00 00 00")
LOAD_STRING_SIZE = 8

# first code point above which a string is treated as translatable text
TEXT_CODE_POINT_THRESHOLD = 0x80


@dataclass
class StringReference:
    """A string operand in the code section and the text it points at."""
    offset: int
    text: str


@dataclass
class ScriptSummary:
    """Section sizes and string counts of a loaded script."""
    version: str
    import_size: int
    code_size: int
    string_size: int
    reference_count: int
    distinct_strings: int


class StringTable:
    """
    String section under construction.

    Each distinct text is stored once; later references to the same text
    reuse the offset assigned on first sight, so the output layout only
    depends on the order of ``add`` calls.
    """

    def __init__(self, encoding: str):
        self.encoding = encoding
        self._offsets: Dict[str, int] = {}
        self._stream = BinaryStream()

    def add(self, text: str) -> int:
        """Store ``text`` if it is new and return its offset."""
        offset = self._offsets.get(text)
        if offset is not None:
            return offset

        data = text.encode(self.encoding)
        offset = self._stream.position
        self._stream.write_bytes(data)
        self._stream.write_byte(0)
        self._offsets[text] = offset
        return offset

    def offset_of(self, text: str) -> int:
        return self._offsets[text]

    def to_bytes(self) -> bytes:
        return self._stream.getvalue()


class Script:
    """
    In-memory representation of one compiled script.

    Attributes:
        config: Encodings and export options
        code_size_strategy: Function locating the end of the code section
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        code_size_strategy: CodeSizeStrategy = guess_code_size_by_halt
    ):
        self.config = config or Config()
        self.code_size_strategy = code_size_strategy

        self.version: Optional[str] = None
        self.section_import = b''
        self.section_code = bytearray()
        self.section_string = b''

    @property
    def is_loaded(self) -> bool:
        return self.version is not None

    def _check_loaded(self) -> None:
        if not self.is_loaded:
            raise StateError("The script has not been loaded yet.")

    # ========== Load / Save ==========

    def load(self, path: PathLike) -> None:
        """
        Load and parse a script file.

        Args:
            path: Path to the compiled script

        Raises:
            FormatError: If the file is not a supported script
        """
        with open(path, 'rb') as f:
            data = f.read()
        self.parse(data)

    def parse(self, data: bytes) -> None:
        """
        Split raw script bytes into sections.

        The container is only updated once every check has passed.

        Args:
            data: Full contents of a compiled script

        Raises:
            FormatError: On an unsupported version, a truncated header or
                when the code section boundary cannot be found
        """
        stream = BinaryStream(data)

        try:
            version = stream.read_string_to_null('ascii')
        except (EOFError, UnicodeDecodeError):
            raise FormatError("Unsupported script version.") from None
        if version != SCRIPT_VERSION:
            raise FormatError("Unsupported script version.")

        try:
            import_size = stream.read_int32() - 4
            if import_size < 0:
                raise FormatError(f"Invalid import section size: {import_size + 4}")
            section_import = stream.read_bytes(import_size)
        except EOFError as e:
            raise FormatError(f"Truncated import section: {e}") from None

        block = stream.read_to_end()

        code_size = self.code_size_strategy(block)
        if code_size is None:
            raise FormatError("Unable to guess the section range.")

        self.version = version
        self.section_import = section_import
        self.section_code = bytearray(block[:code_size])
        self.section_string = block[code_size:]

    def to_bytes(self) -> bytes:
        """
        Serialize the sections back into the file layout.

        Raises:
            StateError: If nothing has been loaded
        """
        self._check_loaded()

        stream = BinaryStream()
        stream.write_string_to_null(self.version, 'ascii')
        stream.write_int32(len(self.section_import) + 4)
        stream.write_bytes(self.section_import)
        stream.write_bytes(bytes(self.section_code))
        stream.write_bytes(self.section_string)
        return stream.getvalue()

    def save(self, path: PathLike) -> None:
        """Write the script to ``path``."""
        data = self.to_bytes()
        with open(path, 'wb') as f:
            f.write(data)

    # ========== String discovery ==========

    def find_strings(self) -> List[StringReference]:
        """
        Locate every string operand in the code section.

        Matches that run past the end of the code section or point outside
        the string section are stray byte sequences, not instructions, and
        are skipped.

        Returns:
            References in ascending code offset order
        """
        self._check_loaded()

        code = self.section_code
        strings = self.section_string
        code_size = len(code)
        results = []

        for offset in iter_pattern(code, LOAD_STRING_PATTERN):
            if offset + LOAD_STRING_SIZE > code_size:
                continue

            address = struct.unpack_from('<i', code, offset + 4)[0] - code_size
            if address < 0 or address >= len(strings):
                continue

            end = strings.find(b'\x00', address)
            if end == -1:
                end = len(strings)

            text = strings[address:end].decode(self.config.source_encoding, errors='replace')
            results.append(StringReference(offset + 4, text))

        return results

    def summary(self) -> ScriptSummary:
        """Describe the loaded script."""
        self._check_loaded()
        references = self.find_strings()
        return ScriptSummary(
            version=self.version,
            import_size=len(self.section_import),
            code_size=len(self.section_code),
            string_size=len(self.section_string),
            reference_count=len(references),
            distinct_strings=len({ref.text for ref in references}),
        )

    # ========== Export ==========

    @staticmethod
    def is_translatable(text: str) -> bool:
        """Whether a string looks like game text rather than an identifier."""
        return len(text) > 0 and ord(text[0]) > TEXT_CODE_POINT_THRESHOLD

    def exportable_strings(self, export_all: bool = False) -> List[StringReference]:
        """Return the references that an export would write."""
        references = self.find_strings()
        if export_all:
            return references
        return [ref for ref in references if self.is_translatable(ref.text)]

    def export_text(self, export_all: bool = False) -> str:
        """Render the translation file as a string."""
        buffer = StringIO()
        self._write_export(buffer, export_all)
        return buffer.getvalue()

    def export_strings(self, path: PathLike, export_all: bool = False) -> int:
        """
        Write the translation file for this script.

        Args:
            path: Output text file
            export_all: Also export empty strings and strings starting
                with an ASCII character

        Returns:
            Number of strings written
        """
        self._check_loaded()
        with open(path, 'w', encoding=self.config.text_encoding, newline='') as f:
            return self._write_export(f, export_all)

    def _write_export(self, stream, export_all: bool) -> int:
        records = (
            TranslationRecord(ref.offset, ref.text)
            for ref in self.exportable_strings(export_all)
        )
        return write_records(stream, records, self.config.escape_control_chars)

    # ========== Import / rebuild ==========

    def import_strings(self, path: PathLike) -> int:
        """
        Apply a translation file and rebuild the string section.

        Args:
            path: Translation text file

        Returns:
            Number of translation records applied

        Raises:
            FormatError: On a file that is not valid text, a malformed line,
                an unknown offset or a string the output encoding cannot represent
        """
        self._check_loaded()
        encoding = reading_encoding(self.config.text_encoding)
        try:
            with open(path, 'r', encoding=encoding) as f:
                records = read_records(f, self.config.escape_control_chars)
        except UnicodeDecodeError as e:
            raise FormatError(
                f"Translation file is not valid {self.config.text_encoding}: {e.reason}"
            ) from None
        return self.apply_translations(records)

    def import_text(self, text: str) -> int:
        """Apply translation records held in a string."""
        self._check_loaded()
        return self.apply_translations(parse_text(text, self.config.escape_control_chars))

    def apply_translations(self, records: List[TranslationRecord]) -> int:
        """
        Merge translations into the script and rebuild its string section.

        Every record is validated and the new string table is built before
        either section is replaced; on error both sections are left untouched.
        """
        self._check_loaded()

        strings: Dict[int, str] = {ref.offset: ref.text for ref in self.find_strings()}

        for record in records:
            if record.offset not in strings:
                raise FormatError(f"The offset {record.offset:08X} is not contained in the script.")
            strings[record.offset] = record.text

        table = StringTable(self.config.output_encoding)
        for offset, text in strings.items():
            try:
                table.add(text)
            except UnicodeEncodeError as e:
                raise FormatError(
                    f"String at offset {offset:08X} cannot be encoded as "
                    f"{self.config.output_encoding}: {e.reason}"
                ) from None

        code = bytearray(self.section_code)
        code_size = len(code)
        for offset, text in strings.items():
            struct.pack_into('<I', code, offset, table.offset_of(text) + code_size)

        self.section_code = code
        self.section_string = table.to_bytes()
        return len(records)

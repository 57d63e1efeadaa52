"""
Compiled script parsing, string export and rebuild.

This module provides:
- Script: container for the import, code and string sections
- StringReference / StringTable: string operands and the rebuilt table
- Code size strategies for locating the end of the bytecode
- Translation file records
"""

from .errors import FormatError, StateError
from .boundary import guess_code_size_by_halt, fixed_code_size
from .translation import TranslationRecord
from .script import Script, ScriptSummary, StringReference, StringTable, SCRIPT_VERSION

__all__ = [
    'Script', 'ScriptSummary', 'StringReference', 'StringTable', 'SCRIPT_VERSION',
    'TranslationRecord', 'FormatError', 'StateError',
    'guess_code_size_by_halt', 'fixed_code_size',
]

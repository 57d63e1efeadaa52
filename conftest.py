"""
Shared fixtures: synthetic compiled scripts.
"""

import struct

import pytest

VERSION = b"BurikoCompiledScriptVer1.00\x00"
HALT = b"\xF4\x00\x00\x00"
PUSH_STRING = b"\x03\x00\x00\x00"


def build_script(import_data: bytes, code: bytes, strings: bytes) -> bytes:
    """Assemble a script file from its sections."""
    return VERSION + struct.pack('<i', len(import_data) + 4) + import_data + code + strings


def build_code(string_offsets, filler: bytes = b"\x01\x00\x00\x00") -> bytes:
    """
    Build a code section that pushes each string offset once.

    The code length is known up front, so operands can be biased by it.
    Each push is followed by a filler instruction and the section ends
    with a halt instruction.
    """
    code_size = len(string_offsets) * (8 + len(filler)) + len(HALT)
    code = b''
    for offset in string_offsets:
        code += PUSH_STRING + struct.pack('<i', offset + code_size) + filler
    code += HALT
    assert len(code) == code_size
    return code


def encode_strings(texts, encoding='cp932'):
    """Encode texts into a string section, returning data and offsets."""
    data = b''
    offsets = []
    for text in texts:
        offsets.append(len(data))
        data += text.encode(encoding) + b'\x00'
    return data, offsets


@pytest.fixture
def sample_texts():
    return ["こんにちは", "Hello", "さようなら", "こんにちは", ""]


@pytest.fixture
def sample_bytes(sample_texts):
    """
    Script with five references: two of them point at the same
    Japanese greeting stored once, one is ASCII and one is empty.
    """
    unique = ["こんにちは", "Hello", "さようなら", ""]
    strings, offsets = encode_strings(unique)
    by_text = dict(zip(unique, offsets))
    code = build_code([by_text[t] for t in sample_texts])
    return build_script(b"\x10\x20\x30\x40", code, strings)


@pytest.fixture
def sample_file(tmp_path, sample_bytes):
    path = tmp_path / "scene01"
    path.write_bytes(sample_bytes)
    return path

"""
String utility functions for translation lines.
"""

_ESCAPES = {
    '\\': '\\\\',
    '\n': '\\n',
    '\r': '\\r',
    '\t': '\\t',
}

_UNESCAPES = {
    '\\': '\\',
    'n': '\n',
    'r': '\r',
    't': '\t',
}


def escape_string(s: str) -> str:
    """
    Escape characters that would break a one-line translation record.

    Args:
        s: Input string

    Returns:
        String with backslash, newline, carriage return and tab escaped
    """
    return ''.join(_ESCAPES.get(char, char) for char in s)


def unescape_string(s: str) -> str:
    """
    Reverse escape_string.

    Unknown escape sequences are kept as written, so a stray backslash
    typed by a translator survives unchanged.

    Args:
        s: Escaped string

    Returns:
        The original string
    """
    result = []
    i = 0
    while i < len(s):
        char = s[i]
        if char == '\\' and i + 1 < len(s) and s[i + 1] in _UNESCAPES:
            result.append(_UNESCAPES[s[i + 1]])
            i += 2
            continue
        result.append(char)
        i += 1
    return ''.join(result)

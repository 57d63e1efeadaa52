"""
Byte pattern search utilities.

Matches are reported left to right and never overlap: after a hit at
``i`` the scan resumes at ``i + len(pattern)``. Offsets computed from
these matches (instruction operands, section boundaries) rely on that
stride, so it must not be changed to a one-byte step.
"""

from typing import Iterator, List, Optional


def _check_pattern(pattern: bytes) -> None:
    if not pattern:
        raise ValueError("Search pattern must not be empty")


def iter_pattern(data: bytes, pattern: bytes, start: int = 0) -> Iterator[int]:
    """
    Lazily yield every non-overlapping occurrence of a byte pattern.

    Args:
        data: Binary data to search
        pattern: Exact pattern to find
        start: Offset to start scanning at

    Yields:
        Match start offsets in ascending order
    """
    _check_pattern(pattern)
    while True:
        index = data.find(pattern, start)
        if index == -1:
            break
        yield index
        start = index + len(pattern)


def find_first(data: bytes, pattern: bytes) -> Optional[int]:
    """
    Find the lowest offset of a byte pattern.

    Args:
        data: Binary data to search
        pattern: Exact pattern to find

    Returns:
        The first match offset, or None when the pattern is absent
    """
    return next(iter_pattern(data, pattern), None)


def find_all(data: bytes, pattern: bytes) -> List[int]:
    """
    Find all non-overlapping occurrences of a byte pattern.

    Args:
        data: Binary data to search
        pattern: Exact pattern to find

    Returns:
        List of match offsets in ascending order
    """
    return list(iter_pattern(data, pattern))


class PatternMatches:
    """
    Restartable sequence of non-overlapping pattern matches.

    Every call to ``iter()`` starts a fresh scan of the buffer, so the
    same object can be walked several times.
    """

    def __init__(self, data: bytes, pattern: bytes):
        _check_pattern(pattern)
        self.data = data
        self.pattern = bytes(pattern)

    def __iter__(self) -> Iterator[int]:
        return iter_pattern(self.data, self.pattern)

    def last(self) -> Optional[int]:
        """Return the offset of the final match, or None if there is none."""
        result = None
        for result in self:
            pass
        return result


class Searcher:
    """
    Cursor-based search over a single buffer.

    ``find_first`` starts a scan and ``find_next`` continues it just past
    the end of the previous match.
    """

    def __init__(self, data: bytes):
        self._data = data
        self._pattern: Optional[bytes] = None
        self._current: Optional[int] = None

    def find_first(self, pattern: bytes) -> Optional[int]:
        """Start a new scan and return the first match offset."""
        _check_pattern(pattern)
        self._pattern = bytes(pattern)
        self._current = find_first(self._data, self._pattern)
        return self._current

    def find_next(self) -> Optional[int]:
        """Return the next match after the previous one, or None."""
        if self._pattern is None or self._current is None:
            return None
        start = self._current + len(self._pattern)
        self._current = next(iter_pattern(self._data, self._pattern, start), None)
        return self._current

    def find_all(self, pattern: bytes) -> List[int]:
        """Collect every match by chaining find_first and find_next."""
        results = []
        offset = self.find_first(pattern)
        while offset is not None:
            results.append(offset)
            offset = self.find_next()
        return results


def hex_to_bytes(hex_string: str) -> bytes:
    """
    Convert a hex string to bytes.

    Args:
        hex_string: Hex string (e.g., "F4 00 00 00")

    Returns:
        Bytes representation
    """
    return bytes.fromhex(hex_string.replace(' ', ''))

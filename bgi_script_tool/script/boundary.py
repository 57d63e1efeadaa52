"""
Code section size inference.

The file stores no section table, so the end of the bytecode has to be
recovered from its content. A strategy takes the block that follows the
import section and returns the code section length, or None when it
cannot tell.
"""

from typing import Callable, Optional

from ..utils.pattern_search import PatternMatches, hex_to_bytes

CodeSizeStrategy = Callable[[bytes], Optional[int]]

# Halt/return opcode that closes the bytecode right before the string table
HALT_PATTERN = hex_to_bytes("F4 00 00 00")


def guess_code_size_by_halt(block: bytes) -> Optional[int]:
    """
    Place the boundary right after the last halt instruction.

    Args:
        block: Code and string sections as one buffer

    Returns:
        Code section length, or None if no halt instruction exists
    """
    last = PatternMatches(block, HALT_PATTERN).last()
    if last is None:
        return None
    return last + len(HALT_PATTERN)


def fixed_code_size(size: int) -> CodeSizeStrategy:
    """
    Build a strategy that always answers ``size``.

    Useful when the boundary is known from elsewhere (a disassembler,
    a previous run) and the heuristic should be bypassed.
    """
    def strategy(block: bytes) -> Optional[int]:
        if 0 <= size <= len(block):
            return size
        return None
    return strategy

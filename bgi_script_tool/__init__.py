"""
BGI Script Tool
Export and re-insert the text of compiled BGI (Buriko) scripts.
"""

__version__ = "0.1.0"
__author__ = "BGI Script Tool contributors"

from .config import Config
from .script import Script, FormatError, StateError

__all__ = ['Config', 'Script', 'FormatError', 'StateError', '__version__']

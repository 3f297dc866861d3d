"""Line-oriented builders for C++ headers and implementation files."""

from .header import HeaderParser
from .parameters import parse_parameters
from .source import SourceParser

__all__ = ["HeaderParser", "SourceParser", "parse_parameters"]

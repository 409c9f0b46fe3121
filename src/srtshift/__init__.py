"""
srtshift - Subtitle timestamp shifting utility.

Shifts every timestamp in SubRip (.srt) files by a fixed signed offset,
rewriting the files in place.
"""

__version__ = "0.1.0";
__author__ = "srtshift Project";
__license__ = "MIT";

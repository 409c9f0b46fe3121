"""
Line-oriented rewriting of SRT timing lines.

Only timing lines are touched; sequence numbers, caption text, blank lines,
line endings and a leading byte-order mark are written back unchanged.
"""
import io
import os
import re
import shutil
from pathlib import Path
from typing import Optional, Tuple

from .backup import BackupManager
from .errors import FormatError, SubtitleIOError
from .logging import get_logger
from .timestamps import format_offset, format_timestamp, parse_timestamp, shift_timestamp

BOM = "\ufeff";

# Two timestamp-shaped tokens around an arrow; the tokens are validated separately
TIMING_LINE_PATTERN = re.compile(
    r'(?P<lead>[ \t]*)(?P<start>\d+:[\d:,.]*)(?P<arrow>[ \t]*-->[ \t]*)(?P<end>\d+:[\d:,.]*)(?P<rest>(?:[ \t].*)?)'
);


class RewriteResult:
    """Summary of one rewritten subtitle file."""

    def __init__( self, source: Path, destination: Path, text: str, shifted_lines: int, clamped: int ):
        self.source = source;                # File that was read
        self.destination = destination;      # File that was (or would be) written
        self.text = text;                    # Rewritten content
        self.shifted_lines = shifted_lines;  # Timing lines rewritten
        self.clamped = clamped;              # Timestamps clamped to zero
        self.backup_path = None;             # Set when a backup was made

    def __repr__( self ):
        return f"RewriteResult(destination={self.destination}, shifted_lines={self.shifted_lines}, clamped={self.clamped})";


def split_line_ending( line: str ) -> Tuple[str, str]:
    """Split a line into its content and its line terminator."""
    body = line.rstrip( "\r\n" );
    return body, line[len( body ):];


def is_timing_line( line: str ) -> bool:
    """Check whether a line has the shape of a timing line."""
    body, _ = split_line_ending( line );
    return TIMING_LINE_PATTERN.fullmatch( body ) is not None;


def shift_line( line: str, offset: int ) -> Tuple[str, int]:
    """
    Shift both timestamps of a timing line.

    Args:
        line: One line of the file, with or without its line ending
        offset: Signed offset in milliseconds

    Returns:
        Tuple of (rewritten line, number of timestamps clamped to zero).
        Lines that are not timing lines are returned unchanged.

    Raises:
        FormatError: If the line looks like a timing line but a timestamp is malformed
    """
    body, ending = split_line_ending( line );
    match = TIMING_LINE_PATTERN.fullmatch( body );
    if not match:
        return line, 0;

    clamped = 0;
    rendered = [];
    for name in ( "start", "end" ):
        original = parse_timestamp( match.group( name ) );
        shifted = shift_timestamp( original, offset );
        # Each timestamp clamps on its own
        if original + offset < 0:
            clamped += 1;
        rendered.append( format_timestamp( shifted ) );

    new_body = (
        match.group( "lead" ) + rendered[0] + match.group( "arrow" ) + rendered[1] + match.group( "rest" )
    );
    return new_body + ending, clamped;


def shift_text( text: str, offset: int ) -> Tuple[str, int, int]:
    """
    Shift every timing line in SRT text.

    Args:
        text: Full file content
        offset: Signed offset in milliseconds

    Returns:
        Tuple of (rewritten text, timing lines shifted, timestamps clamped)

    Raises:
        FormatError: With line_number set, for the first malformed timing line
    """
    bom = "";
    if text.startswith( BOM ):
        bom, text = BOM, text[len( BOM ):];

    output = [ bom ];
    shifted_lines = 0;
    clamped = 0;

    # newline="" keeps \r\n and \r endings untranslated
    for line_number, line in enumerate( io.StringIO( text, newline="" ), start=1 ):
        try:
            new_line, line_clamped = shift_line( line, offset );
        except FormatError as e:
            e.line_number = line_number;
            raise;

        if is_timing_line( line ):
            shifted_lines += 1;
            clamped += line_clamped;
        output.append( new_line );

    return "".join( output ), shifted_lines, clamped;


def read_subtitle_file( path: Path ) -> str:
    """Read a subtitle file as UTF-8 without newline translation."""
    try:
        with open( path, "r", encoding="utf-8", newline="" ) as infile:
            return infile.read();
    except UnicodeDecodeError as e:
        raise SubtitleIOError( f"Failed to read the input file {path}: not valid UTF-8 ({e.reason})" ) from e;
    except OSError as e:
        raise SubtitleIOError( f"Failed to read the input file {path}: {e.strerror or e}" ) from e;


def write_subtitle_file( path: Path, text: str ):
    """
    Write text to path through a temporary sibling file.

    The target is only replaced once the temporary file is fully written, so
    a failed write leaves the original untouched. A symlink is followed so
    the file behind it is replaced, and an existing file keeps its mode.
    """
    path = Path( path ).resolve();
    tmp_path = path.with_name( f".{path.name}.tmp" );
    try:
        with open( tmp_path, "w", encoding="utf-8", newline="" ) as outfile:
            outfile.write( text );
        if path.exists():
            shutil.copymode( path, tmp_path );
        os.replace( tmp_path, path );
    except OSError as e:
        if tmp_path.exists():
            tmp_path.unlink();
        raise SubtitleIOError( f"Failed to write the output file {path}: {e.strerror or e}" ) from e;


def rewrite_file(
    path: Path,
    offset: int,
    output: Optional[Path] = None,
    dry_run: bool = False,
    backup_dir: Optional[Path] = None
) -> RewriteResult:
    """
    Shift all timestamps in a subtitle file and save the result.

    Args:
        path: Subtitle file to read
        offset: Signed offset in milliseconds
        output: File to write (defaults to path, i.e. in place)
        dry_run: If True, don't write anything
        backup_dir: If set, back up the file being overwritten into this directory

    Returns:
        RewriteResult describing the change

    Raises:
        FormatError: If a timing line is malformed (path and line_number set)
        SubtitleIOError: If the file cannot be read, backed up or written
    """
    logger = get_logger();
    path = Path( path );
    destination = Path( output ) if output else path;

    logger.debug( f"Reading {path}" );
    text = read_subtitle_file( path );

    try:
        new_text, shifted_lines, clamped = shift_text( text, offset );
    except FormatError as e:
        e.path = path;
        raise;

    result = RewriteResult( path, destination, new_text, shifted_lines, clamped );

    if shifted_lines == 0:
        logger.warning( f"No timing lines found in {path}" );
    if clamped:
        logger.warning( f"{clamped} timestamp(s) in {path} would be negative and were clamped to 00:00:00,000" );

    if dry_run:
        logger.info( f"Dry run: would shift {shifted_lines} timing line(s) in {path} by {format_offset( offset )}" );
        return result;

    if backup_dir is not None and destination.exists():
        result.backup_path = BackupManager( backup_dir ).backup_before_modification( destination );

    write_subtitle_file( destination, new_text );
    logger.info( f"Shifted {shifted_lines} timing line(s) in {path} by {format_offset( offset )}" );
    if destination != path:
        logger.info( f"Output saved to: {destination}" );

    return result;

"""
SRT timestamp parsing, formatting and offset arithmetic.

All values are integer milliseconds. Timestamps are never negative; offsets
are signed.
"""
import re

from .errors import FormatError

SECOND = 1000;
MINUTE = SECOND * 60;
HOUR = MINUTE * 60;

# Hours are two digits, or more without a leading zero, so format(parse(s)) == s
TIMESTAMP_PATTERN = re.compile(
    r'(?P<hours>\d{2}|[1-9]\d{2,}):(?P<minutes>\d{2}):(?P<seconds>\d{2}),(?P<millis>\d{3})'
);


def parse_timestamp( text: str ) -> int:
    """
    Parse an SRT timestamp into milliseconds.

    Args:
        text: String like "00:01:23,456"

    Returns:
        Milliseconds since the start of the video

    Raises:
        FormatError: If the string is not a well-formed HH:MM:SS,mmm timestamp
    """
    match = TIMESTAMP_PATTERN.fullmatch( text );
    if not match:
        raise FormatError( f"Invalid timestamp {text!r}, expected HH:MM:SS,mmm", text=text );

    hours = int( match.group( "hours" ) );
    minutes = int( match.group( "minutes" ) );
    seconds = int( match.group( "seconds" ) );
    millis = int( match.group( "millis" ) );

    if minutes >= 60:
        raise FormatError( f"Invalid minutes in timestamp {text!r}", text=text );
    if seconds >= 60:
        raise FormatError( f"Invalid seconds in timestamp {text!r}", text=text );

    return hours * HOUR + minutes * MINUTE + seconds * SECOND + millis;


def format_timestamp( millis: int ) -> str:
    """
    Format milliseconds as an SRT timestamp.

    Args:
        millis: Non-negative millisecond count

    Returns:
        Zero-padded timestamp string like "00:01:23,456"
    """
    if millis < 0:
        raise ValueError( f"Timestamps cannot be negative: {millis}" );

    hours, leftover = divmod( millis, HOUR );
    minutes, leftover = divmod( leftover, MINUTE );
    seconds, leftover = divmod( leftover, SECOND );

    return f"{hours:02d}:{minutes:02d}:{seconds:02d},{leftover:03d}";


def shift_timestamp( millis: int, offset: int ) -> int:
    """Apply a signed offset, clamping at zero."""
    return max( 0, millis + offset );


def parse_offset( text: str ) -> int:
    """
    Parse a signed duration from the command line into milliseconds.

    Accepted forms are [+|-][[H:]M:]S with an optional ",mmm" or ".mmm"
    fraction, e.g. "-0:09", "+1:30:00", "2.5" or "-00:00:01,250". A missing
    sign means a positive offset.

    Args:
        text: Offset string

    Returns:
        Signed offset in milliseconds

    Raises:
        FormatError: If the string is not a valid duration
    """
    value = text.strip();
    sign = 1;
    if value[:1] in ( "+", "-" ):
        sign = -1 if value[0] == "-" else 1;
        value = value[1:];

    if not value:
        raise FormatError( f"Invalid offset {text!r}: no duration given", text=text );

    millis = 0;
    for separator in ( ",", "." ):
        if separator in value:
            value, fraction = value.split( separator, 1 );
            if not ( fraction.isdigit() and fraction.isascii() and len( fraction ) <= 3 ):
                raise FormatError( f"Invalid offset {text!r}: bad fraction {fraction!r}", text=text );
            millis = int( fraction.ljust( 3, "0" ) );
            break;

    fields = value.split( ":" );
    if len( fields ) > 3:
        raise FormatError( f"Invalid offset {text!r}: expected [[H:]M:]S", text=text );

    numbers = [];
    for field in fields:
        if not ( field.isdigit() and field.isascii() ):
            raise FormatError( f"Invalid offset {text!r}: {field!r} is not a number", text=text );
        numbers.append( int( field ) );

    # Only the leading field may exceed its unit
    for number in numbers[1:]:
        if number >= 60:
            raise FormatError( f"Invalid offset {text!r}: {number} is out of range", text=text );

    units = [ HOUR, MINUTE, SECOND ][-len( numbers ):];
    total = sum( number * unit for number, unit in zip( numbers, units ) ) + millis;

    return sign * total;


def format_offset( offset: int ) -> str:
    """Render a signed offset for log output, e.g. "-00:00:09,000"."""
    sign = "-" if offset < 0 else "+";
    return f"{sign}{format_timestamp( abs( offset ) )}";

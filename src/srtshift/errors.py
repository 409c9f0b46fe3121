"""
Exception types raised while parsing offsets and rewriting subtitle files.
"""


class FormatError( ValueError ):
    """
    Raised when a timestamp or offset string is malformed.

    The rewriter fills in line_number and path so the error can be reported
    as "file:line: message".
    """

    def __init__( self, message: str, text: str = None, line_number: int = None, path=None ):
        super().__init__( message );
        self.message = message;
        self.text = text;
        self.line_number = line_number;
        self.path = path;

    def __str__( self ):
        if self.path is not None and self.line_number is not None:
            return f"{self.path}:{self.line_number}: {self.message}";
        if self.line_number is not None:
            return f"line {self.line_number}: {self.message}";
        if self.path is not None:
            return f"{self.path}: {self.message}";
        return self.message;


class SubtitleIOError( OSError ):
    """Raised when a subtitle file cannot be read, written or backed up."""

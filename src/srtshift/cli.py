"""
CLI entry point for srtshift with argument parsing and environment variable loading.
"""
import argparse
import os
import re
import sys
from pathlib import Path
from dotenv import load_dotenv

from . import __version__
from .backup import DEFAULT_BACKUP_DIR
from .errors import FormatError, SubtitleIOError
from .logging import setup_logging
from .rewrite import rewrite_file
from .timestamps import format_offset, parse_offset

# "-0:09" and friends are offsets, not options
NEGATIVE_OFFSET = re.compile( r'-\d[\d:,.]*' );


class OffsetArgumentParser( argparse.ArgumentParser ):
    """ArgumentParser that treats negative durations as positional values."""

    def _parse_optional( self, arg_string ):
        if NEGATIVE_OFFSET.fullmatch( arg_string ):
            return None;
        return super()._parse_optional( arg_string );


class SrtShiftCLI:
    """
    Command line interface for srtshift.

    Supports command line arguments with environment variable defaults
    for the backup and log directories.
    """

    def __init__( self ):
        self.parser = self._create_parser();
        self.args = None;
        self.logger = None;
        self.offset = None;

    def _create_parser( self ):
        """Create argument parser with all srtshift options."""
        parser = OffsetArgumentParser(
            prog="srtshift",
            description="Shift every timestamp in SRT subtitle files by a fixed offset, in place",
            epilog=(
                "OFFSET is a signed duration [+|-][[H:]M:]S[,mmm], e.g. -0:09 or +1:30:00. "
                "Environment variables: SRTSHIFT_BACKUP_DIR, SRTSHIFT_LOG_DIR"
            )
        );

        parser.add_argument(
            "files",
            nargs="+",
            type=Path,
            metavar="FILE",
            help="Subtitle file(s) to adjust (.srt)"
        );

        parser.add_argument(
            "offset",
            metavar="OFFSET",
            help="The change in time, e.g. -0:09 or +1:30:00"
        );

        parser.add_argument(
            "--output", "-o",
            type=Path,
            default=None,
            help="Write to this file instead of in place (single input file only)"
        );

        # Mode flags
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Report what would change without modifying any file"
        );

        parser.add_argument(
            "--backup",
            action="store_true",
            help="Keep a timestamped copy of each file before overwriting it"
        );

        parser.add_argument(
            "--backup-dir",
            type=Path,
            default=None,
            help="Directory for backups (default: $SRTSHIFT_BACKUP_DIR or ./backup)"
        );

        parser.add_argument(
            "--log-dir",
            type=Path,
            default=None,
            help="Also write a rotating log file to this directory (default: $SRTSHIFT_LOG_DIR)"
        );

        parser.add_argument(
            "--debug",
            action="store_true",
            help="Enable debug mode with verbose output"
        );

        parser.add_argument(
            "--version",
            action="version",
            version=f"%(prog)s {__version__}"
        );

        return parser;

    def _load_environment( self ):
        """Load environment variables from .env file and system."""
        env_file = Path( ".env" );
        if env_file.exists():
            load_dotenv( env_file );

        self.backup_dir_env = os.getenv( "SRTSHIFT_BACKUP_DIR" );
        self.log_dir_env = os.getenv( "SRTSHIFT_LOG_DIR" );

    def _validate_arguments( self ):
        """Validate parsed arguments and parse the offset."""
        errors = [];

        if self.args.output and len( self.args.files ) > 1:
            errors.append( "--output can only be used with a single input file" );

        try:
            self.offset = parse_offset( self.args.offset );
        except FormatError as e:
            errors.append( str( e ) );

        return errors;

    def parse_args( self, argv=None ):
        """Parse command line arguments and validate configuration."""
        self.args = self.parser.parse_intermixed_args( argv );

        self._load_environment();

        if self.args.backup_dir is None and self.backup_dir_env:
            self.args.backup_dir = Path( self.backup_dir_env );
        if self.args.log_dir is None and self.log_dir_env:
            self.args.log_dir = Path( self.log_dir_env );

        try:
            self.logger = setup_logging( debug=self.args.debug, log_dir=self.args.log_dir );
        except OSError as e:
            # Fall back to console-only logging to report the problem
            self.logger = setup_logging( debug=self.args.debug );
            self.logger.error( f"Cannot write log file in {self.args.log_dir}: {e.strerror or e}" );
            sys.exit( 1 );

        errors = self._validate_arguments();
        if errors:
            for error in errors:
                self.logger.error( error );
            sys.exit( 1 );

        for subtitle_file in self.args.files:
            if subtitle_file.suffix.lower() != ".srt":
                self.logger.warning( f"{subtitle_file} does not have an .srt extension" );

        self.logger.debug( f"srtshift v{__version__} starting..." );
        self.logger.debug( f"Files: {', '.join( str( f ) for f in self.args.files )}" );
        self.logger.debug( f"Offset: {format_offset( self.offset )}" );
        self.logger.debug( f"Dry run: {self.args.dry_run}" );

        return self.args;

    def get_backup_dir( self ):
        """Get the backup directory, or None when backups are disabled."""
        if not self.args.backup:
            return None;
        return self.args.backup_dir or DEFAULT_BACKUP_DIR;


def main( argv=None ):
    """Main entry point for the srtshift CLI."""
    cli = SrtShiftCLI();
    args = cli.parse_args( argv );

    try:
        for subtitle_file in args.files:
            rewrite_file(
                subtitle_file,
                cli.offset,
                output=args.output,
                dry_run=args.dry_run,
                backup_dir=cli.get_backup_dir()
            );
    except ( FormatError, SubtitleIOError ) as e:
        cli.logger.error( str( e ) );
        sys.exit( 1 );
    except KeyboardInterrupt:
        cli.logger.warning( "Interrupted by user" );
        sys.exit( 130 );
    except Exception as e:
        cli.logger.error( f"Unexpected error: {e}" );
        if args.debug:
            raise;
        sys.exit( 1 );


if __name__ == "__main__":
    main();

"""
Backup utility with file retention based on file size.
"""
import glob
import re
import shutil
from datetime import datetime
from pathlib import Path
from typing import List, Tuple

from .errors import SubtitleIOError
from .logging import get_logger

DEFAULT_BACKUP_DIR = Path( "backup" );


class BackupManager:
    """
    Manages timestamped backup copies of subtitle files.

    Rules:
    - Files <150KB: Keep up to 50 copies
    - Files ≥150KB: Keep up to 25 copies
    - Copies are named <stem>.<ISO-8601 timestamp><suffix>, with a _N counter
      before the suffix when that name is already taken
    """

    def __init__( self, backup_dir: Path = None ):
        self.logger = get_logger();
        self.backup_dir = Path( backup_dir ) if backup_dir else DEFAULT_BACKUP_DIR;

        # Size thresholds in bytes
        self.size_threshold = 150 * 1024;  # 150KB
        self.max_small_files = 50;         # <150KB files
        self.max_large_files = 25;         # ≥150KB files

    def get_backup_filename( self, original_file: Path, now: datetime = None, counter: int = 0 ) -> str:
        """
        Generate backup filename with ISO-8601 timestamp.

        Args:
            original_file: Path to original file
            now: Time to stamp the backup with (defaults to the current time)
            counter: Disambiguates backups made within the same second

        Returns:
            Backup filename with timestamp
        """
        now = now or datetime.now();
        timestamp = now.isoformat( timespec="seconds" ).replace( ":", "-" );
        if counter:
            timestamp = f"{timestamp}_{counter}";
        return f"{original_file.stem}.{timestamp}{original_file.suffix}";

    def get_existing_backups( self, original_file: Path ) -> List[Tuple[Path, datetime, int]]:
        """
        Get list of existing backup files for the original file.

        Args:
            original_file: Path to original file

        Returns:
            List of (backup_path, timestamp, size_bytes) tuples, sorted by timestamp
        """
        if not self.backup_dir.exists():
            return [];

        stem = glob.escape( original_file.stem );
        suffix = glob.escape( original_file.suffix );
        backup_pattern = f"{stem}.????-??-??T??-??-??*{suffix}";
        name_pattern = re.compile(
            re.escape( original_file.stem )
            + r'\.(?P<date>\d{4}-\d{2}-\d{2})T(?P<time>\d{2}-\d{2}-\d{2})(?:_(?P<counter>\d+))?'
            + re.escape( original_file.suffix )
        );

        backup_info = [];
        for backup_path in self.backup_dir.glob( backup_pattern ):
            match = name_pattern.fullmatch( backup_path.name );
            if not match:
                continue;
            try:
                timestamp = datetime.fromisoformat( f"{match.group( 'date' )}T{match.group( 'time' ).replace( '-', ':' )}" );
                counter = int( match.group( "counter" ) or 0 );

                size_bytes = backup_path.stat().st_size;

                backup_info.append( ( backup_path, timestamp, size_bytes, counter ) );

            except ( ValueError, OSError ) as e:
                self.logger.debug( f"Skipping malformed backup file {backup_path}: {e}" );

        # Oldest first
        backup_info.sort( key=lambda x: ( x[1], x[3] ) );

        return [ ( path, timestamp, size ) for path, timestamp, size, _ in backup_info ];

    def apply_retention_policy( self, original_file: Path ) -> int:
        """
        Remove the oldest backups beyond the limit for the file's size.

        Args:
            original_file: Path to original file (used to determine backup pattern)

        Returns:
            Number of backups removed
        """
        backups = self.get_existing_backups( original_file );

        if not backups:
            return 0;

        # Use current file size, or average of backups if original doesn't exist
        if original_file.exists():
            current_size = original_file.stat().st_size;
        else:
            sizes = [ size for _, _, size in backups ];
            current_size = sum( sizes ) / len( sizes );

        max_backups = self.max_small_files if current_size < self.size_threshold else self.max_large_files;

        if len( backups ) <= max_backups:
            return 0;

        backups_to_remove = backups[:-max_backups];

        removed_count = 0;
        for backup_path, timestamp, size in backups_to_remove:
            try:
                backup_path.unlink();
                removed_count += 1;
                self.logger.debug( f"Removed old backup: {backup_path.name}" );
            except OSError as e:
                self.logger.warning( f"Could not remove backup {backup_path}: {e}" );

        if removed_count > 0:
            self.logger.info( f"Removed {removed_count} old backup(s) to enforce retention policy" );

        return removed_count;

    def create_backup( self, file_path: Path ) -> Path:
        """
        Create backup of file with timestamp and apply retention policy.

        Args:
            file_path: Path to file to backup

        Returns:
            Path to created backup file

        Raises:
            SubtitleIOError: If the file is missing or cannot be copied
        """
        file_path = Path( file_path );
        if not file_path.exists():
            raise SubtitleIOError( f"File to backup not found: {file_path}" );

        now = datetime.now();
        counter = 0;
        backup_path = self.backup_dir / self.get_backup_filename( file_path, now=now );
        # Never overwrite an earlier backup
        while backup_path.exists():
            counter += 1;
            backup_path = self.backup_dir / self.get_backup_filename( file_path, now=now, counter=counter );

        try:
            self.backup_dir.mkdir( parents=True, exist_ok=True );
            shutil.copy2( file_path, backup_path );
            self.logger.info( f"Created backup: {backup_path}" );
        except OSError as e:
            raise SubtitleIOError( f"Failed to create backup of {file_path}: {e.strerror or e}" ) from e;

        self.apply_retention_policy( file_path );

        return backup_path;

    def backup_before_modification( self, file_path: Path ) -> Path:
        """Create backup before modifying a file (convenience method)."""
        self.logger.debug( f"Creating pre-modification backup of {file_path}" );
        return self.create_backup( file_path );


def create_backup( file_path: Path, backup_dir: Path = None ) -> Path:
    """
    Convenience function to create a backup file.

    Args:
        file_path: Path to file to backup
        backup_dir: Optional backup directory (defaults to ./backup)

    Returns:
        Path to created backup file
    """
    return BackupManager( backup_dir ).create_backup( file_path );

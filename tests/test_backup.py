"""
Test cases for backup creation and retention.
"""
import pytest
from datetime import datetime, timedelta
from pathlib import Path
from unittest.mock import patch
import sys

# Add src directory to path for testing
sys.path.insert( 0, str( Path( __file__ ).parent.parent / "src" ) );

from srtshift.backup import BackupManager, create_backup
from srtshift.errors import SubtitleIOError


class TestBackupManager:
    """Test cases for BackupManager."""

    def _make_backups( self, manager, original, count ):
        """Create fake backups one minute apart, oldest first."""
        manager.backup_dir.mkdir( parents=True, exist_ok=True );
        start = datetime( 2024, 1, 1, 12, 0, 0 );
        paths = [];
        for i in range( count ):
            name = manager.get_backup_filename( original, now=start + timedelta( minutes=i ) );
            path = manager.backup_dir / name;
            path.write_text( "backup", encoding="utf-8" );
            paths.append( path );
        return paths;

    def test_backup_filename( self ):
        manager = BackupManager( Path( "unused" ) );
        name = manager.get_backup_filename( Path( "The.Movie.srt" ), now=datetime( 2024, 5, 6, 7, 8, 9, 123 ) );
        assert name == "The.Movie.2024-05-06T07-08-09.srt";

    def test_create_backup( self, tmp_path ):
        original = tmp_path / "movie.srt";
        original.write_text( "1\n00:00:01,000 --> 00:00:02,000\nHi\n", encoding="utf-8" );

        backup_path = create_backup( original, tmp_path / "backup" );

        assert backup_path.exists();
        assert backup_path.parent == tmp_path / "backup";
        assert backup_path.read_text( encoding="utf-8" ) == original.read_text( encoding="utf-8" );

    def test_same_second_backups_do_not_overwrite( self, tmp_path ):
        """Test two same-named files backed up within one second."""
        first = tmp_path / "a" / "movie.srt";
        second = tmp_path / "b" / "movie.srt";
        for path, content in ( ( first, "A" ), ( second, "B" ) ):
            path.parent.mkdir();
            path.write_text( content, encoding="utf-8" );

        manager = BackupManager( tmp_path / "backup" );
        frozen = datetime( 2024, 1, 1, 12, 0, 0 );
        with patch( 'srtshift.backup.datetime' ) as mock_datetime:
            mock_datetime.now.return_value = frozen;
            mock_datetime.fromisoformat.side_effect = datetime.fromisoformat;
            first_backup = manager.create_backup( first );
            second_backup = manager.create_backup( second );

        assert first_backup.name == "movie.2024-01-01T12-00-00.srt";
        assert second_backup.name == "movie.2024-01-01T12-00-00_1.srt";
        assert first_backup.read_text( encoding="utf-8" ) == "A";
        assert second_backup.read_text( encoding="utf-8" ) == "B";

        backups = manager.get_existing_backups( first );
        assert [ path for path, _, _ in backups ] == [ first_backup, second_backup ];

    def test_backups_for_names_with_glob_characters( self, tmp_path ):
        """Test that brackets in a file name are matched literally."""
        original = tmp_path / "movie [1080p].srt";
        original.write_text( "small", encoding="utf-8" );
        manager = BackupManager( tmp_path / "backup" );
        paths = self._make_backups( manager, original, 52 );

        assert len( manager.get_existing_backups( original ) ) == 52;
        assert manager.apply_retention_policy( original ) == 2;
        assert not paths[0].exists();
        assert paths[-1].exists();

    def test_create_backup_missing_file( self, tmp_path ):
        with pytest.raises( SubtitleIOError ):
            create_backup( tmp_path / "missing.srt", tmp_path / "backup" );

    def test_existing_backups_sorted( self, tmp_path ):
        original = tmp_path / "movie.srt";
        manager = BackupManager( tmp_path / "backup" );
        paths = self._make_backups( manager, original, 3 );

        # Unrelated and malformed names are ignored
        ( manager.backup_dir / "other.2024-01-01T12-00-00.srt" ).write_text( "x", encoding="utf-8" );
        ( manager.backup_dir / "movie.2024-13-01T12-00-00.srt" ).write_text( "x", encoding="utf-8" );

        backups = manager.get_existing_backups( original );

        assert [ path for path, _, _ in backups ] == paths;
        assert backups[0][1] == datetime( 2024, 1, 1, 12, 0, 0 );

    def test_retention_small_files( self, tmp_path ):
        """Test that small files keep at most 50 backups."""
        original = tmp_path / "movie.srt";
        original.write_text( "small", encoding="utf-8" );
        manager = BackupManager( tmp_path / "backup" );
        paths = self._make_backups( manager, original, 53 );

        removed = manager.apply_retention_policy( original );

        assert removed == 3;
        assert not any( path.exists() for path in paths[:3] );
        assert all( path.exists() for path in paths[3:] );

    def test_retention_large_files( self, tmp_path ):
        """Test that files of 150KB or more keep at most 25 backups."""
        original = tmp_path / "movie.srt";
        original.write_bytes( b"x" * ( 150 * 1024 ) );
        manager = BackupManager( tmp_path / "backup" );
        paths = self._make_backups( manager, original, 30 );

        removed = manager.apply_retention_policy( original );

        assert removed == 5;
        assert len( manager.get_existing_backups( original ) ) == 25;
        assert paths[-1].exists();

    def test_retention_within_limits( self, tmp_path ):
        original = tmp_path / "movie.srt";
        original.write_text( "small", encoding="utf-8" );
        manager = BackupManager( tmp_path / "backup" );
        self._make_backups( manager, original, 5 );

        assert manager.apply_retention_policy( original ) == 0;


if __name__ == '__main__':
    pytest.main( [ __file__ ] );

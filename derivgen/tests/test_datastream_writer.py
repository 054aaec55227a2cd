"""Tests for DatastreamWriter class."""

import logging
from unittest.mock import MagicMock

import pytest

from derivgen.datastream import ControlGroup, Datastream, RepositoryObject
from derivgen.datastream_writer import DatastreamWriter, WriteResult
from derivgen.object_store import ObjectStore, ObjectStoreError


class TestDatastreamWriter:
    """Tests for DatastreamWriter class."""

    @pytest.fixture
    def mock_store(self):
        """Create a mock store whose objects start without the derivative."""
        store = MagicMock(spec=ObjectStore)
        store.get_datastream.return_value = None
        store.create_datastream.side_effect = (
            lambda obj, dsid, control_group: Datastream(id=dsid, control_group=control_group)
        )
        return store

    @pytest.fixture
    def scaled_file(self, temp_files):
        """Create a scaled temp file."""
        handle = temp_files.create('demo-1TN.jpg')
        with open(handle.path, 'wb') as f:
            f.write(b'scaled bytes')
        return handle

    @pytest.fixture
    def obj(self):
        return RepositoryObject(pid='demo:1')

    def test_ingest_after_populate(self, mock_store, temp_files, scaled_file, obj):
        """Test a new datastream is fully populated before ingest."""
        seen = {}

        def capture(target, datastream):
            seen.update(
                label=datastream.label,
                mime_type=datastream.mime_type,
                content=datastream.content,
                control_group=datastream.control_group,
            )
        mock_store.ingest.side_effect = capture
        writer = DatastreamWriter(mock_store, temp_files)

        result = writer.write_derivative(obj, 'TN', scaled_file)

        assert result == WriteResult(True)
        mock_store.create_datastream.assert_called_once_with(obj, 'TN', ControlGroup.MANAGED)
        assert seen == {
            'label': 'TN',
            'mime_type': 'image/jpeg',
            'content': b'scaled bytes',
            'control_group': ControlGroup.MANAGED,
        }
        mock_store.update_datastream.assert_not_called()

    def test_success_deletes_temp_file(self, mock_store, temp_files, scaled_file, obj):
        """Test the consumed temp file is deleted."""
        writer = DatastreamWriter(mock_store, temp_files)

        writer.write_derivative(obj, 'TN', scaled_file)

        assert not scaled_file.exists()
        assert temp_files.allocated == []

    def test_update_same_mime(self, mock_store, temp_files, scaled_file, obj):
        """Test an existing datastream is updated without touching its MIME type."""
        existing = Datastream(id='TN', mime_type='image/jpeg')
        mock_store.get_datastream.return_value = existing
        writer = DatastreamWriter(mock_store, temp_files)

        result = writer.write_derivative(obj, 'TN', scaled_file)

        assert result.success is True
        mock_store.update_datastream.assert_called_once_with(
            obj, existing, b'scaled bytes', mime_type=None
        )
        mock_store.create_datastream.assert_not_called()
        mock_store.ingest.assert_not_called()

    def test_update_changed_mime(self, mock_store, temp_files, scaled_file, obj):
        """Test the MIME type is passed when it changed."""
        existing = Datastream(id='TN', mime_type='image/png')
        mock_store.get_datastream.return_value = existing
        writer = DatastreamWriter(mock_store, temp_files)

        writer.write_derivative(obj, 'TN', scaled_file)

        mock_store.update_datastream.assert_called_once_with(
            obj, existing, b'scaled bytes', mime_type='image/jpeg'
        )

    def test_store_error_returned(self, mock_store, temp_files, scaled_file, obj):
        """Test a store error becomes a failure value."""
        mock_store.ingest.side_effect = ObjectStoreError('bucket unavailable')
        writer = DatastreamWriter(mock_store, temp_files)

        result = writer.write_derivative(obj, 'TN', scaled_file)

        assert result.success is False
        assert result.error == 'bucket unavailable'

    def test_store_error_leaves_temp_file(self, mock_store, temp_files, scaled_file, obj):
        """Test the temp file is left for the caller after a failure."""
        mock_store.ingest.side_effect = ObjectStoreError('bucket unavailable')
        writer = DatastreamWriter(mock_store, temp_files)

        writer.write_derivative(obj, 'TN', scaled_file)

        assert scaled_file.exists()
        assert temp_files.allocated == [scaled_file]

    def test_store_error_logged_with_traceback(self, mock_store, temp_files, scaled_file,
                                               obj, caplog):
        """Test the failure is logged at ERROR with the stack trace."""
        mock_store.update_datastream.side_effect = ObjectStoreError('timeout')
        mock_store.get_datastream.return_value = Datastream(id='TN', mime_type='image/jpeg')
        writer = DatastreamWriter(mock_store, temp_files, logger=logging.getLogger('test'))

        with caplog.at_level(logging.ERROR, logger='test'):
            writer.write_derivative(obj, 'TN', scaled_file)

        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert errors[0].exc_info is not None
        assert 'timeout' in errors[0].getMessage()

    def test_unreadable_source_file(self, mock_store, temp_files, scaled_file, obj):
        """Test a vanished source file is reported as a write failure."""
        import os
        os.remove(scaled_file.path)
        writer = DatastreamWriter(mock_store, temp_files)

        result = writer.write_derivative(obj, 'TN', scaled_file)

        assert result.success is False
        mock_store.ingest.assert_not_called()

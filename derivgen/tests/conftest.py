"""
Pytest fixtures for derivgen tests.
"""

import io

import pytest


def make_image_bytes(size=(1000, 800), fmt='JPEG', mode='RGB', color='red'):
    """Build an encoded image in memory."""
    from PIL import Image

    img = Image.new(mode, size, color=color)
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


def read_datastream(store, obj, dsid):
    """Read a datastream's stored bytes."""
    buffer = io.BytesIO()
    store.read_content(obj, obj.get_datastream(dsid), buffer)
    return buffer.getvalue()


@pytest.fixture
def logger():
    """Fixture providing a logger."""
    import logging
    return logging.getLogger('test')


@pytest.fixture
def current_user():
    """Fixture providing a fixed current user."""
    from derivgen.config import CurrentUser
    return CurrentUser('tester')


@pytest.fixture
def derivative_config(tmp_path):
    """Fixture providing derivative settings with a private temp folder."""
    from derivgen.config import DerivativeConfig
    return DerivativeConfig(tmp_folder=str(tmp_path / 'tmp'))


@pytest.fixture
def temp_files(derivative_config, current_user, logger):
    """Fixture providing a temp file service."""
    from derivgen.temp_files import TempFileService
    return TempFileService(derivative_config.tmp_folder, current_user, logger=logger)


@pytest.fixture
def local_config(tmp_path):
    """Fixture providing local storage configuration."""
    from derivgen.local_client import LocalConfig

    root = tmp_path / 'repository'
    root.mkdir()
    return LocalConfig(root_path=str(root), prefix='objects')


@pytest.fixture
def local_store(local_config, logger):
    """Fixture providing a local filesystem object store."""
    from derivgen.local_client import LocalObjectStore
    return LocalObjectStore(local_config, logger)


@pytest.fixture
def ingest_datastream():
    """Fixture providing a helper that ingests a managed datastream."""
    from derivgen.datastream import ControlGroup

    def ingest(store, obj, dsid, content, mime_type):
        datastream = store.create_datastream(obj, dsid, ControlGroup.MANAGED)
        datastream.label = dsid
        datastream.mime_type = mime_type
        datastream.content = content
        store.ingest(obj, datastream)
        return datastream

    return ingest


@pytest.fixture
def sample_image_bytes():
    """Fixture providing a 1000x800 JPEG."""
    return make_image_bytes((1000, 800))


@pytest.fixture
def small_image_bytes():
    """Fixture providing a 100x100 JPEG."""
    return make_image_bytes((100, 100))


@pytest.fixture
def sample_png_bytes():
    """Fixture providing a PNG with transparency."""
    return make_image_bytes((300, 150), fmt='PNG', mode='RGBA', color=(255, 0, 0, 128))


@pytest.fixture
def image_object(local_store, ingest_datastream, sample_image_bytes):
    """Fixture providing an object with a JPEG OBJ datastream."""
    obj = local_store.create_object('demo:1', label='Sample image')
    ingest_datastream(local_store, obj, 'OBJ', sample_image_bytes, 'image/jpeg')
    return obj


@pytest.fixture
def object_without_source(local_store, ingest_datastream):
    """Fixture providing an object with metadata but no OBJ."""
    obj = local_store.create_object('demo:2', label='No image')
    ingest_datastream(local_store, obj, 'DC', b'<dc/>', 'text/xml')
    return obj


@pytest.fixture
def generator(local_store, temp_files, derivative_config, logger):
    """Fixture providing a derivative generator over the local store."""
    from derivgen.derivatives import DerivativeGenerator
    return DerivativeGenerator(local_store, temp_files, config=derivative_config, logger=logger)

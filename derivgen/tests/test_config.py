"""Tests for configuration classes."""

import pytest

from derivgen.config import CurrentUser, DerivativeConfig, str2bool
from derivgen.s3_config import S3Config


class TestStr2Bool:
    """Tests for str2bool."""

    @pytest.mark.parametrize('value', ['yes', 'TRUE', 't', 'Y', '1', 'on', ' true ', True])
    def test_true_values(self, value):
        assert str2bool(value) is True

    @pytest.mark.parametrize('value', ['no', 'False', 'f', 'n', '0', 'off', False])
    def test_false_values(self, value):
        assert str2bool(value) is False

    def test_unknown_value(self):
        """Test unknown values give None."""
        assert str2bool('maybe') is None
        assert str2bool(None) is None

    def test_unknown_value_raises(self):
        """Test unknown values raise when asked to."""
        with pytest.raises(ValueError):
            str2bool('maybe', raise_exc=True)


class TestDerivativeConfig:
    """Tests for DerivativeConfig class."""

    def test_defaults(self):
        """Test default configuration."""
        config = DerivativeConfig()

        assert config.upscale_images is False
        assert config.jpeg_quality == 85
        assert config.tmp_folder.endswith('derivgen')
        assert config.validate() == []

    def test_from_env(self, monkeypatch, tmp_path):
        """Test loading from environment variables."""
        monkeypatch.setenv('DERIVGEN_UPSCALE_IMAGES', 'yes')
        monkeypatch.setenv('DERIVGEN_TMP_FOLDER', str(tmp_path))
        monkeypatch.setenv('DERIVGEN_JPEG_QUALITY', '70')

        config = DerivativeConfig.from_env()

        assert config.upscale_images is True
        assert config.tmp_folder == str(tmp_path)
        assert config.jpeg_quality == 70

    def test_from_env_invalid_bool(self, monkeypatch):
        """Test an unparseable upscale flag is rejected."""
        monkeypatch.setenv('DERIVGEN_UPSCALE_IMAGES', 'sometimes')

        with pytest.raises(ValueError):
            DerivativeConfig.from_env()

    def test_from_env_invalid_quality(self, monkeypatch):
        """Test a non-integer JPEG quality names the variable."""
        monkeypatch.setenv('DERIVGEN_JPEG_QUALITY', 'high')

        with pytest.raises(ValueError, match='DERIVGEN_JPEG_QUALITY'):
            DerivativeConfig.from_env()

    def test_get_bool(self):
        """Test boolean lookup by name."""
        config = DerivativeConfig(upscale_images=True)

        assert config.get_bool('upscale_images') is True

    def test_get_bool_unknown_key(self):
        """Test unknown keys raise KeyError."""
        with pytest.raises(KeyError):
            DerivativeConfig().get_bool('upscale_everything')

    def test_validate(self):
        """Test validation errors."""
        config = DerivativeConfig(tmp_folder='', jpeg_quality=100)

        errors = config.validate()

        assert len(errors) == 2
        assert any('DERIVGEN_JPEG_QUALITY' in e for e in errors)
        assert any('DERIVGEN_TMP_FOLDER' in e for e in errors)


class TestCurrentUser:
    """Tests for CurrentUser class."""

    def test_explicit(self, monkeypatch):
        """Test an explicit id wins."""
        monkeypatch.setenv('DERIVGEN_USER', 'from-env')

        assert CurrentUser('curator').id == 'curator'

    def test_from_env(self, monkeypatch):
        """Test the environment is consulted next."""
        monkeypatch.setenv('DERIVGEN_USER', 'from-env')

        assert CurrentUser().id == 'from-env'

    def test_login_name_fallback(self, monkeypatch, mocker):
        """Test hosts without a passwd entry get anonymous."""
        monkeypatch.delenv('DERIVGEN_USER', raising=False)
        mocker.patch('derivgen.config.getpass.getuser', side_effect=KeyError('uid'))

        assert CurrentUser().id == 'anonymous'


class TestS3Config:
    """Tests for S3Config class."""

    def test_from_env(self, monkeypatch):
        """Test loading from environment variables."""
        monkeypatch.setenv('S3_ENDPOINT', 'https://minio.example.com:9000')
        monkeypatch.setenv('S3_BUCKET', 'repository')
        monkeypatch.setenv('S3_ACCESS_KEY', 'key')
        monkeypatch.setenv('S3_SECRET_KEY', 'secret')
        monkeypatch.setenv('S3_VERIFY_SSL', 'false')
        monkeypatch.delenv('S3_PREFIX', raising=False)

        config = S3Config.from_env()

        assert config.endpoint == 'https://minio.example.com:9000'
        assert config.bucket == 'repository'
        assert config.prefix == 'objects'
        assert config.verify_ssl is False
        assert config.validate() == []

    def test_verify_ssl_default(self, monkeypatch):
        """Test unparseable verify flags keep verification on."""
        monkeypatch.setenv('S3_VERIFY_SSL', 'perhaps')

        assert S3Config.from_env().verify_ssl is True

    def test_validate_missing(self):
        """Test validation with missing fields."""
        errors = S3Config().validate()

        assert len(errors) == 4
        assert "S3_ENDPOINT is not set" in errors

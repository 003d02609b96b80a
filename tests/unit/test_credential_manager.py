"""
Unit tests for Credential Manager Module
"""

import os

import pytest

from src.utils.credential_manager import (
    GENERATION_API_KEY,
    PROFILE_TOKEN_KEY,
    CredentialManager,
)


@pytest.fixture
def clean_env(monkeypatch):
    """Remove session credentials from the environment around each test."""
    for key in (GENERATION_API_KEY, PROFILE_TOKEN_KEY):
        monkeypatch.delenv(key, raising=False)
    yield
    for key in (GENERATION_API_KEY, PROFILE_TOKEN_KEY):
        os.environ.pop(key, None)


@pytest.fixture
def sample_env_file(tmp_path):
    """Create a sample .env file for testing."""
    env_file = tmp_path / ".env"
    env_file.write_text(
        "GEMINI_API_KEY=AIzaSy-test-key\nPROFILE_API_TOKEN=access-token\n",
        encoding="utf-8",
    )
    return env_file


class TestCredentialManagerInit:
    """Test CredentialManager initialization."""

    def test_init_with_existing_env_file(self, sample_env_file, clean_env):
        manager = CredentialManager(env_file=sample_env_file, interactive=False)

        assert manager.env_file == sample_env_file
        assert os.getenv(GENERATION_API_KEY) == "AIzaSy-test-key"
        assert os.getenv(PROFILE_TOKEN_KEY) == "access-token"

    def test_init_without_env_file(self, tmp_path, clean_env):
        env_file = tmp_path / ".env"

        CredentialManager(env_file=env_file, interactive=False)

        assert not env_file.exists()

    @pytest.mark.skipif(os.name == "nt", reason="Unix file permissions")
    def test_env_file_permissions_restricted(self, sample_env_file, clean_env):
        sample_env_file.chmod(0o644)

        CredentialManager(env_file=sample_env_file, interactive=False)

        assert sample_env_file.stat().st_mode & 0o777 == 0o600


class TestGetCredential:
    """Test get_credential in non-interactive and interactive modes."""

    def test_returns_value_from_environment(self, tmp_path, clean_env, monkeypatch):
        monkeypatch.setenv(GENERATION_API_KEY, "from-env")
        manager = CredentialManager(env_file=tmp_path / ".env", interactive=False)

        assert manager.get_credential(GENERATION_API_KEY, "API key") == "from-env"

    def test_missing_required_raises_when_not_interactive(self, tmp_path, clean_env):
        manager = CredentialManager(env_file=tmp_path / ".env", interactive=False)

        with pytest.raises(ValueError, match=GENERATION_API_KEY):
            manager.get_credential(GENERATION_API_KEY, "API key")

    def test_missing_optional_returns_none(self, tmp_path, clean_env):
        manager = CredentialManager(env_file=tmp_path / ".env", interactive=False)

        assert manager.get_credential(PROFILE_TOKEN_KEY, "token", required=False) is None

    def test_prompted_value_is_saved(self, tmp_path, clean_env, mocker):
        # Arrange
        env_file = tmp_path / ".env"
        mocker.patch(
            "src.utils.credential_manager.Prompt.ask", return_value="AIzaSy-typed"
        )
        manager = CredentialManager(env_file=env_file)

        # Act
        value = manager.get_credential(GENERATION_API_KEY, "API key", is_password=True)

        # Assert
        assert value == "AIzaSy-typed"
        assert "GEMINI_API_KEY='AIzaSy-typed'" in env_file.read_text(encoding="utf-8")
        assert os.environ[GENERATION_API_KEY] == "AIzaSy-typed"

    def test_empty_prompt_for_required_raises(self, tmp_path, clean_env, mocker):
        mocker.patch("src.utils.credential_manager.Prompt.ask", return_value="")
        manager = CredentialManager(env_file=tmp_path / ".env")

        with pytest.raises(ValueError):
            manager.get_credential(GENERATION_API_KEY, "API key")

    def test_empty_prompt_for_optional_is_not_saved(self, tmp_path, clean_env, mocker):
        env_file = tmp_path / ".env"
        mocker.patch("src.utils.credential_manager.Prompt.ask", return_value="")
        manager = CredentialManager(env_file=env_file)

        value = manager.get_credential(PROFILE_TOKEN_KEY, "token", required=False)

        assert value is None
        assert not env_file.exists()


class TestSessionCredentials:
    def test_collects_key_and_token(self, sample_env_file, clean_env):
        manager = CredentialManager(env_file=sample_env_file, interactive=False)

        assert manager.session_credentials() == {
            GENERATION_API_KEY: "AIzaSy-test-key",
            PROFILE_TOKEN_KEY: "access-token",
        }

    def test_token_is_optional(self, tmp_path, clean_env, monkeypatch):
        monkeypatch.setenv(GENERATION_API_KEY, "AIzaSy-test-key")
        manager = CredentialManager(env_file=tmp_path / ".env", interactive=False)

        assert manager.session_credentials()[PROFILE_TOKEN_KEY] is None

    def test_api_key_is_required(self, tmp_path, clean_env):
        manager = CredentialManager(env_file=tmp_path / ".env", interactive=False)

        with pytest.raises(ValueError):
            manager.session_credentials()


class TestMaskCredential:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("AIzaSyABCDEF", "AIz*********"),
            ("abc", "***"),
            ("", "***"),
        ],
    )
    def test_mask_credential(self, value, expected):
        assert CredentialManager.mask_credential(value) == expected

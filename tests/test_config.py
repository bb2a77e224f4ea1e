"""Tests for pulsestore.config."""

from pathlib import Path

import pytest

from pulsestore.config import CONFIG_FILENAME, DATA_DIR_ENV, EngineConfig, default_data_dir, load_config


@pytest.fixture(autouse=True)
def _clear_data_dir_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(DATA_DIR_ENV, raising=False)


def test_defaults(tmp_path: Path) -> None:
    config = EngineConfig(data_dir=tmp_path)
    assert config.blob_dir == tmp_path / "PulseCRM"
    assert config.metadata_dir == tmp_path / "metadata"
    assert config.documents_key == "pulse_documents"
    assert config.custom_fields_key == "pulse_document_custom_fields"
    assert config.contacts_key == "pulse_contacts"
    assert (config.thumbnail_max_dimension, config.thumbnail_quality) == (200, 70)
    assert (config.profile_image_max_dimension, config.profile_image_quality) == (300, 70)
    assert config.metadata_soft_limit_bytes == 3 * 1024 * 1024


def test_default_data_dir_respects_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    assert default_data_dir() == Path.home() / ".pulsestore"
    monkeypatch.setenv(DATA_DIR_ENV, str(tmp_path))
    assert default_data_dir() == tmp_path
    assert EngineConfig().data_dir == tmp_path


def test_missing_file_yields_defaults(tmp_path: Path) -> None:
    config = load_config(tmp_path / CONFIG_FILENAME)
    assert config == EngineConfig()


def test_load_config_applies_table(tmp_path: Path) -> None:
    path = tmp_path / CONFIG_FILENAME
    path.write_text(
        "[pulsestore]\n"
        f'data_dir = "{tmp_path.as_posix()}/crm"\n'
        "thumbnail_max_dimension = 128\n"
        "seed_default_custom_fields = false\n"
        'contacts_key = "contacts_v2"\n'
    )

    config = load_config(path)

    assert config.data_dir == tmp_path / "crm"
    assert config.thumbnail_max_dimension == 128
    assert config.seed_default_custom_fields is False
    assert config.contacts_key == "contacts_v2"
    assert config.thumbnail_quality == 70


def test_env_overrides_file_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / CONFIG_FILENAME
    path.write_text(f'[pulsestore]\ndata_dir = "{tmp_path.as_posix()}/from-file"\n')
    monkeypatch.setenv(DATA_DIR_ENV, str(tmp_path / "from-env"))
    assert load_config(path).data_dir == tmp_path / "from-env"


def test_default_config_path_lives_in_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(DATA_DIR_ENV, str(tmp_path))
    (tmp_path / CONFIG_FILENAME).write_text("[pulsestore]\nrecent_days = 14\n")
    assert load_config().recent_days == 14


@pytest.mark.parametrize(
    ("body", "message"),
    [
        pytest.param("unknown_setting = 1", "Unknown settings", id="unknown-key"),
        pytest.param('thumbnail_quality = "high"', "thumbnail_quality must be a positive integer", id="wrong-type"),
        pytest.param("thumbnail_quality = 0", "thumbnail_quality must be a positive integer", id="zero"),
        pytest.param("seed_default_custom_fields = 1", "must be a boolean", id="bool"),
        pytest.param("data_dir = 5", "data_dir must be a path string", id="path"),
        pytest.param('documents_key = ""', "documents_key must be a non-empty string", id="empty-string"),
    ],
)
def test_invalid_settings_raise(tmp_path: Path, body: str, message: str) -> None:
    path = tmp_path / CONFIG_FILENAME
    path.write_text(f"[pulsestore]\n{body}\n")
    with pytest.raises(ValueError, match=message):
        load_config(path)


def test_table_must_be_a_table(tmp_path: Path) -> None:
    path = tmp_path / CONFIG_FILENAME
    path.write_text('pulsestore = "nope"\n')
    with pytest.raises(ValueError, match="must be a table"):
        load_config(path)

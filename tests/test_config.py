"""EngineConfig loading: YAML values, defaults and environment overrides."""

from pathlib import Path

import pytest

from treino.config import DEFAULT_SEED_PATH, EngineConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ('TREINO_DATA_DIR', 'TREINO_SEED', 'TREINO_LOG_LEVEL', 'TREINO_CONFIG'):
        monkeypatch.delenv(var, raising=False)


def test_defaults_when_file_missing(tmp_path):
    config = EngineConfig.from_yaml(tmp_path / 'missing.yaml')
    assert config.seed_path == DEFAULT_SEED_PATH
    assert config.max_plan_days == 3
    assert config.strict_names is False


def test_yaml_values(tmp_path):
    path = tmp_path / 'engine.yaml'
    path.write_text(
        "storage:\n"
        f"  data_dir: {tmp_path / 'data'}\n"
        "catalog:\n"
        "  strict_names: true\n"
        "session:\n"
        "  tick_interval_sec: 0.5\n"
        "logging:\n"
        "  level: debug\n",
        encoding='utf-8',
    )
    config = EngineConfig.from_yaml(path)
    assert config.data_dir == tmp_path / 'data'
    assert config.strict_names is True
    assert config.tick_interval_sec == 0.5
    assert config.log_level == 'DEBUG'
    assert config.max_muscle_groups == 3


def test_environment_wins(tmp_path, monkeypatch):
    path = tmp_path / 'engine.yaml'
    path.write_text("storage:\n  data_dir: /nowhere\n", encoding='utf-8')
    monkeypatch.setenv('TREINO_DATA_DIR', str(tmp_path / 'env-data'))
    monkeypatch.setenv('TREINO_LOG_LEVEL', 'info')
    config = EngineConfig.from_yaml(path)
    assert config.data_dir == tmp_path / 'env-data'
    assert config.log_level == 'INFO'


def test_config_path_from_environment(tmp_path, monkeypatch):
    path = tmp_path / 'other.yaml'
    path.write_text("plans:\n  max_days: 2\n", encoding='utf-8')
    monkeypatch.setenv('TREINO_CONFIG', str(path))
    assert EngineConfig.from_yaml().max_plan_days == 2


def test_relative_seed_resolved_from_config_folder(tmp_path):
    path = tmp_path / 'engine.yaml'
    path.write_text("storage:\n  seed_path: seeds/custom.yaml\n", encoding='utf-8')
    assert EngineConfig.from_yaml(path).seed_path == (tmp_path / 'seeds' / 'custom.yaml').resolve()


def test_relative_env_seed_resolved_from_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv('TREINO_SEED', 'mine.yaml')
    config = EngineConfig.from_yaml(tmp_path / 'missing.yaml')
    assert config.seed_path == (tmp_path / 'mine.yaml').resolve()


def test_default_seed_ships_inside_package():
    import treino

    assert isinstance(DEFAULT_SEED_PATH, Path)
    assert DEFAULT_SEED_PATH.exists()
    assert Path(treino.__file__).resolve().parent in DEFAULT_SEED_PATH.resolve().parents

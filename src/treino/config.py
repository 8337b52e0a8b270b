"""
Engine configuration.

Loads config/engine.yaml when present and applies environment overrides
(optionally from a .env file). Anything missing falls back to the dataclass
defaults.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / 'config' / 'engine.yaml'
# Shipped inside the package so regular installs find it too
DEFAULT_SEED_PATH = Path(str(resources.files('treino') / 'data' / 'catalog_seed.yaml'))


def load_config_yaml(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration from YAML file, return empty dict if not found."""
    config_path = Path(path) if path else DEFAULT_CONFIG_PATH
    if config_path.exists():
        with open(config_path, encoding='utf-8') as f:
            return yaml.safe_load(f) or {}
    logger.debug("No config file at %s, using defaults", config_path)
    return {}


@dataclass
class EngineConfig:
    """Runtime settings for the workout engine.

    Loads from config/engine.yaml if available, else uses defaults.
    TREINO_* environment variables win over the file.
    """

    # Storage
    data_dir: Path = Path.home() / '.treino'
    seed_path: Path = DEFAULT_SEED_PATH

    # Catalog
    strict_names: bool = False  # Reject duplicate names within a sub-group

    # Plans
    max_plan_days: int = 3
    max_muscle_groups: int = 3

    # Session
    tick_interval_sec: float = 1.0  # Wall-clock seconds per rest tick in the CLI

    # Logging
    log_level: str = 'WARNING'

    @classmethod
    def from_yaml(cls, path: Optional[Path] = None) -> 'EngineConfig':
        """Load config from YAML file, then apply environment overrides."""
        load_dotenv()

        env_path = os.getenv('TREINO_CONFIG')
        config_path = Path(path) if path else (Path(env_path) if env_path else DEFAULT_CONFIG_PATH)
        yaml_config = load_config_yaml(config_path)

        kwargs: Dict[str, Any] = {}

        if 'storage' in yaml_config:
            st = yaml_config['storage'] or {}
            if st.get('data_dir'):
                kwargs['data_dir'] = Path(st['data_dir']).expanduser()
            if st.get('seed_path'):
                kwargs['seed_path'] = _resolve(st['seed_path'], config_path.parent)

        if 'catalog' in yaml_config:
            cat = yaml_config['catalog'] or {}
            kwargs['strict_names'] = bool(cat.get('strict_names', False))

        if 'plans' in yaml_config:
            pl = yaml_config['plans'] or {}
            kwargs['max_plan_days'] = int(pl.get('max_days', 3))
            kwargs['max_muscle_groups'] = int(pl.get('max_muscle_groups', 3))

        if 'session' in yaml_config:
            se = yaml_config['session'] or {}
            kwargs['tick_interval_sec'] = float(se.get('tick_interval_sec', 1.0))

        if 'logging' in yaml_config:
            kwargs['log_level'] = str((yaml_config['logging'] or {}).get('level', 'WARNING')).upper()

        # Environment overrides
        if os.getenv('TREINO_DATA_DIR'):
            kwargs['data_dir'] = Path(os.environ['TREINO_DATA_DIR']).expanduser()
        if os.getenv('TREINO_SEED'):
            kwargs['seed_path'] = _resolve(os.environ['TREINO_SEED'], Path.cwd())
        if os.getenv('TREINO_LOG_LEVEL'):
            kwargs['log_level'] = os.environ['TREINO_LOG_LEVEL'].upper()

        return cls(**kwargs)


def _resolve(value: str, base: Path) -> Path:
    """Relative paths are taken from base (the config file's folder, or cwd for env vars)."""
    p = Path(value).expanduser()
    return p if p.is_absolute() else (base / p).resolve()

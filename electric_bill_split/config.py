import logging
import yaml
from pathlib import Path
from typing import Any, Dict, Optional

from .datatypes import Household, Tariff, TariffStep
from .errors import InvalidRangeError, TariffConfigError

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / 'data'
TARIFF_PATH = DATA_DIR / 'tariff_config.yaml'
HOUSEHOLD_PATH = DATA_DIR / 'household_config.yaml'


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f'Config not found at {path}')
    logger.debug(f'Loading config from {path}')
    cfg = yaml.safe_load(path.read_text(encoding='utf-8'))
    if not isinstance(cfg, dict):
        raise TariffConfigError(f'{path} must hold a mapping at the top level')
    return cfg


def load_tariff(path: Optional[Path] = None) -> Tariff:
    """
    Load the tariff schedule from YAML.

    The schedule is validated here (ascending caps, only the last step
    unbounded, non-negative rates) so a bad file fails at load time rather
    than in the middle of a calculation.
    """
    path = Path(path) if path else TARIFF_PATH
    cfg = _read_yaml(path)
    try:
        body = cfg['tariff']
        steps = []
        for i, s in enumerate(body['steps']):
            if not isinstance(s, dict):
                raise TariffConfigError(f'Step {i + 1} in {path} must be a mapping with upto and rate, got {s!r}')
            steps.append(TariffStep(upto=s.get('upto'), rate=s['rate']))
        tariff = Tariff(
            steps=steps,
            ft_per_kwh=body['ft_per_kwh'],
            service_charge=body['service_charge'],
            vat_rate=body.get('vat_rate'),
            name=body.get('name', path.stem),
        )
    except (KeyError, TypeError, AttributeError, InvalidRangeError) as e:
        raise TariffConfigError(f'Malformed tariff config {path}: {e}') from e

    metadata = cfg.get('metadata') or {}
    if not isinstance(metadata, dict):
        raise TariffConfigError(f'metadata in {path} must be a mapping')
    version = metadata.get('config_version', 'unknown')
    logger.info(f'Loaded tariff {tariff.name} with {len(tariff.steps)} steps (version {version})')
    return tariff


def load_household(path: Optional[Path] = None) -> Household:
    """Default participant list and appliance user"""
    path = Path(path) if path else HOUSEHOLD_PATH
    cfg = _read_yaml(path)
    body = cfg.get('household', {})
    household = Household(
        participants=[str(p) for p in body.get('participants', [])],
        appliance_user=body.get('appliance_user'),
        currency=body.get('currency', 'THB'),
    )
    logger.info(f'Loaded household with {len(household.participants)} participants')
    return household

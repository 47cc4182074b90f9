"""
Configuration loader for the Dirigera Local Server
Loads and validates configuration from YAML files, reads the hub bearer token
"""

import yaml
import logging
from typing import Dict, Any
from pathlib import Path
from datetime import datetime
import pytz

logger = logging.getLogger(__name__)

def load_config(config_path: str = "config/config.yaml") -> Dict[str, Any]:
    """
    Load configuration from YAML file with validation
    """
    try:
        config_file = Path(config_path)
        if not config_file.exists():
            logger.error(f"Configuration file not found: {config_path}")
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_file, 'r') as f:
            config = yaml.safe_load(f) or {}

        # Validate required sections
        _validate_config(config)

        # Apply defaults
        config = _apply_defaults(config)

        logger.info(f"Configuration loaded from {config_path}")
        return config

    except Exception as e:
        logger.error(f"Failed to load configuration: {e}")
        raise

def _validate_config(config: Dict) -> None:
    """Validate that required configuration sections exist and hold sane values"""
    if not isinstance(config, dict):
        raise ValueError("Configuration root must be a mapping")

    if 'hub' not in config or not isinstance(config['hub'], dict):
        raise ValueError("Missing required configuration section: hub")

    # Validate hub section
    hub = config['hub']
    service_type = hub.get('service_type')
    if service_type is not None and not str(service_type).endswith('.local.'):
        raise ValueError("hub.service_type must be a fully qualified mDNS type ending in '.local.'")
    _validate_port(hub.get('port'), 'hub.port')
    _validate_positive(hub.get('discovery_timeout'), 'hub.discovery_timeout')
    _validate_positive(hub.get('request_timeout'), 'hub.request_timeout')

    # Validate API section
    api = config.get('api') or {}
    _validate_port(api.get('port'), 'api.port')

    # Validate dashboard section
    dashboard = config.get('dashboard') or {}
    _validate_positive(dashboard.get('poll_interval_seconds'), 'dashboard.poll_interval_seconds')
    _validate_positive(dashboard.get('request_timeout'), 'dashboard.request_timeout')
    _validate_non_negative(dashboard.get('debounce_seconds'), 'dashboard.debounce_seconds')
    _validate_non_negative(dashboard.get('bulk_command_delay_seconds'), 'dashboard.bulk_command_delay_seconds')

def _validate_port(value, name: str) -> None:
    if value is None:
        return
    if not isinstance(value, int) or not 1 <= value <= 65535:
        raise ValueError(f"{name} must be an integer between 1 and 65535")

def _validate_positive(value, name: str) -> None:
    if value is None:
        return
    if not isinstance(value, (int, float)) or value <= 0:
        raise ValueError(f"{name} must be a positive number")

def _validate_non_negative(value, name: str) -> None:
    if value is None:
        return
    if not isinstance(value, (int, float)) or value < 0:
        raise ValueError(f"{name} must not be negative")

def _apply_defaults(config: Dict) -> Dict:
    """Apply default values to configuration"""

    # Hub defaults
    hub_defaults = {
        'service_type': '_ihsp._tcp.local.',
        'port': 8443,
        'api_version': 'v1',
        'token_file': 'token.txt',
        'discovery_timeout': 30,
        'request_timeout': 10
    }
    for key, default_value in hub_defaults.items():
        if key not in config['hub']:
            config['hub'][key] = default_value

    # API defaults (loopback-only listener)
    if not config.get('api'):
        config['api'] = {}
    api_defaults = {
        'host': '127.0.0.1',
        'port': 3000,
        'cors_origins': ['*'],
        'static_dir': None
    }
    for key, default_value in api_defaults.items():
        if key not in config['api']:
            config['api'][key] = default_value

    # Dashboard client defaults
    if not config.get('dashboard'):
        config['dashboard'] = {}
    dashboard_defaults = {
        'proxy_url': f"http://{config['api']['host']}:{config['api']['port']}",
        'poll_interval_seconds': 10,
        'debounce_seconds': 0.25,
        'bulk_command_delay_seconds': 0.15,
        'request_timeout': 10
    }
    for key, default_value in dashboard_defaults.items():
        if key not in config['dashboard']:
            config['dashboard'][key] = default_value

    # Logging defaults
    if not config.get('logging'):
        config['logging'] = {}
    logging_defaults = {
        'level': 'INFO',
        'file': 'logs/dirigera_server.log',
        'console_output': True,
        'timezone': 'UTC'
    }
    for key, default_value in logging_defaults.items():
        if key not in config['logging']:
            config['logging'][key] = default_value

    return config

def load_token(token_path: str) -> str:
    """
    Read the hub bearer token once at startup.
    Missing or empty credential files are fatal for the caller.
    """
    token_file = Path(token_path)
    if not token_file.exists():
        logger.error(f"Could not read {token_path}. Please make sure the file exists.")
        raise FileNotFoundError(f"Token file not found: {token_path}")

    token = token_file.read_text(encoding='utf-8').strip()
    if not token:
        logger.error(f"Token file {token_path} is empty")
        raise ValueError(f"Token file is empty: {token_path}")

    logger.info("Successfully read token.")
    return token


class TimezoneFormatter(logging.Formatter):
    """Formatter rendering timestamps in the configured timezone"""

    def __init__(self, fmt=None, timezone: str = 'UTC'):
        super().__init__(fmt)
        self.tz = pytz.timezone(timezone)

    def formatTime(self, record, datefmt=None):
        dt = datetime.fromtimestamp(record.created, tz=self.tz)
        if datefmt:
            return dt.strftime(datefmt)
        else:
            # Default format: YYYY-MM-DD HH:MM:SS TZ
            return dt.strftime('%Y-%m-%d %H:%M:%S %Z')

def setup_logging(config: Dict) -> None:
    """Setup logging based on configuration with timezone-aware timestamps"""
    log_config = config.get('logging', {})
    level = log_config.get('level', 'INFO')
    timezone = log_config.get('timezone', 'UTC')

    log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    formatter = TimezoneFormatter(log_format, timezone=timezone)

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format=log_format,
        handlers=[]
    )
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper()))

    # Console handler
    if log_config.get('console_output', True):
        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

    # File handler
    log_file = log_config.get('file')
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    logger.info(f"Logging configured: level={level}, timezone={timezone}, console={log_config.get('console_output', True)}, file={log_file}")

def get_sample_config() -> Dict:
    """Return a sample configuration for reference"""
    return {
        "hub": {
            "service_type": "_ihsp._tcp.local.",
            "port": 8443,
            "api_version": "v1",
            "token_file": "token.txt",
            "discovery_timeout": 30,
            "request_timeout": 10
        },
        "api": {
            "host": "127.0.0.1",
            "port": 3000,
            "cors_origins": ["*"],
            "static_dir": None
        },
        "dashboard": {
            "proxy_url": "http://127.0.0.1:3000",
            "poll_interval_seconds": 10,
            "debounce_seconds": 0.25,
            "bulk_command_delay_seconds": 0.15,
            "request_timeout": 10
        },
        "logging": {
            "level": "INFO",
            "file": "logs/dirigera_server.log",
            "console_output": True,
            "timezone": "UTC"
        }
    }

"""Application configuration for the translation checker."""
import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any

import yaml
from dotenv import load_dotenv

from translation_checker.logging_config import setup_logger

DEFAULT_LANGUAGE_NAMES: Dict[str, str] = {
    'fr': 'French',
    'de': 'German',
    'es': 'Spanish',
    'it': 'Italian',
    'pt': 'Portuguese',
    'nl': 'Dutch',
    'ar': 'Arabic',
}


@dataclass
class AppConfig:
    """Application configuration dataclass."""
    # Core paths
    project_root: str
    glossary_dir: Optional[str]

    # Language configuration
    default_language: str
    language_codes: Dict[str, str]
    rule_languages: List[str]

    # Engine configuration
    engine: str
    model_name: str
    claude_model: Optional[str]
    openai_api_key: Optional[str] = field(repr=False)
    openai_api_url: Optional[str]
    temperature: float
    request_timeout: float

    # Logging
    log_level: str = 'INFO'
    log_file_path: Optional[str] = None
    log_to_console: bool = True


def _compute_project_root() -> str:
    """Compute the project root directory."""
    script_real_path = os.path.realpath(__file__)
    script_dir = os.path.dirname(script_real_path)
    return os.path.abspath(os.path.join(script_dir, os.pardir))


def _find_dotenv(project_root: str) -> Optional[str]:
    for candidate in (os.path.join(project_root, '.env'), os.path.join(project_root, 'docker', '.env')):
        if os.path.exists(candidate):
            return candidate
    return None


def _load_yaml_config(project_root: str, config_file: Optional[str] = None) -> Dict[str, Any]:
    """Load the YAML configuration file, falling back to defaults on any problem."""
    default_config_path = os.path.join(project_root, 'config.yaml')
    config_file = config_file or os.environ.get('TRANSLATION_CHECKER_CONFIG', default_config_path)

    if not os.path.isabs(config_file):
        config_file = os.path.abspath(config_file)

    config: Dict[str, Any] = {}
    if not os.path.exists(config_file):
        # A missing default file is the normal case for command line use
        if config_file != default_config_path:
            print(f"Warning: Configuration file '{config_file}' not found. Using default configuration.",
                  file=sys.stderr)
        return config

    try:
        with open(config_file, 'r', encoding='utf-8') as config_file_stream:
            loaded_config = yaml.safe_load(config_file_stream)
            if loaded_config is None:
                print(f"Warning: Configuration file '{config_file}' is empty. Using default configuration.",
                      file=sys.stderr)
            elif isinstance(loaded_config, dict):
                config = loaded_config
            else:
                print(f"Error: Configuration file '{config_file}' must contain a YAML dictionary. Using defaults.",
                      file=sys.stderr)

    except yaml.YAMLError as e:
        print(f"Error: Invalid YAML in configuration file '{config_file}': {e}", file=sys.stderr)
        print("Please check your YAML syntax. Using default configuration.", file=sys.stderr)
    except (OSError, IOError) as e:
        print(f"Error: Could not read configuration file '{config_file}': {e}", file=sys.stderr)
        print("Using default configuration.", file=sys.stderr)

    return config


def _build_language_names(locales_list: List[Dict[str, str]]) -> Dict[str, str]:
    """Merge configured ``{code, name}`` locales over the built-in language table."""
    language_codes = dict(DEFAULT_LANGUAGE_NAMES)
    for locale in locales_list:
        code = locale.get('code')
        name = locale.get('name')
        if code and name:
            language_codes[code] = name
    return language_codes


def configure_logging(app_config: AppConfig, quiet: bool = False) -> logging.Logger:
    """Set up the package logger from configuration; ``quiet`` keeps the console to warnings and above."""
    return setup_logger(
        app_config.log_level,
        app_config.log_file_path,
        app_config.log_to_console,
        console_level_str='WARNING' if quiet else None
    )


def load_app_config(config_file: Optional[str] = None) -> AppConfig:
    """
    Load application configuration from YAML file and environment variables.

    Args:
        config_file: Explicit configuration path; otherwise ``TRANSLATION_CHECKER_CONFIG``
            or ``config.yaml`` in the project root is used.

    Returns:
        AppConfig: The loaded application configuration.
    """
    project_root = _compute_project_root()

    dotenv_path = _find_dotenv(project_root)
    if dotenv_path:
        load_dotenv(dotenv_path)

    config = _load_yaml_config(project_root, config_file)

    log_config = config.get('logging', {}) or {}
    language_codes = _build_language_names(config.get('supported_locales', []) or [])

    return AppConfig(
        project_root=project_root,
        glossary_dir=config.get('glossary_dir'),
        default_language=config.get('default_language', 'fr'),
        language_codes=language_codes,
        rule_languages=list(config.get('rule_languages', ['fr'])),
        engine=os.environ.get('TRANSLATION_CHECKER_ENGINE', config.get('engine', 'openai')),
        model_name=os.environ.get('TRANSLATION_CHECKER_MODEL', config.get('model_name', 'gpt-4o-mini')),
        claude_model=config.get('claude_model'),
        openai_api_key=os.environ.get('OPENAI_API_KEY') or None,
        openai_api_url=os.environ.get('OPENAI_API_URL', config.get('openai_api_url')),
        temperature=float(config.get('temperature', 0.8)),
        request_timeout=float(config.get('request_timeout', 120)),
        log_level=str(log_config.get('log_level', 'INFO')).upper(),
        log_file_path=log_config.get('log_file_path'),
        log_to_console=log_config.get('log_to_console', True),
    )

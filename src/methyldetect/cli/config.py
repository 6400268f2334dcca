"""
Configuration file support for the MethylDetect CLI.

Supports YAML and JSON config files with CLI argument override.

Example config (YAML):

    input: samples/GSM1234
    output: results/GSM1234.pval.csv
    method: oob_ecdf
    float_format: "%.6g"
    logging:
      level: DEBUG
"""

import json
from argparse import Namespace
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml


@dataclass
class DetectConfig:
    """
    Configuration schema for the ``detect`` command.

    Mirrors the CLI argument structure for consistency.
    """
    input: Optional[Path] = None
    output: Optional[Path] = None
    method: str = "neg_ecdf"
    float_format: Optional[str] = None
    log_level: str = "INFO"


def load_config(config_path: Path) -> Dict[str, Any]:
    """
    Load configuration from YAML or JSON file.

    Parameters:
        config_path: Path to config file (.yaml, .yml, or .json)

    Returns:
        Dictionary with configuration values

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If file format is unsupported or invalid

    Examples:
        >>> config = load_config(Path("detect.yaml"))
        >>> print(config['method'])
        oob_ecdf
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    suffix = config_path.suffix.lower()
    if suffix not in ('.yaml', '.yml', '.json'):
        raise ValueError(
            f"Unsupported config format: {suffix}. "
            f"Use .yaml, .yml, or .json"
        )

    try:
        with open(config_path, 'r') as f:
            if suffix == '.json':
                config = json.load(f)
            else:
                config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file: {e}") from e
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file: {e}") from e

    if config is None:
        return {}

    if not isinstance(config, dict):
        raise ValueError("Config file must contain a dictionary/mapping at top level")

    return config


def config_from_dict(config: Dict[str, Any]) -> DetectConfig:
    """
    Build a DetectConfig from a loaded config dictionary.

    Unknown top-level keys are rejected so typos do not pass silently.

    Raises:
        ValueError: If the dictionary contains unknown keys
    """
    known = {'input', 'output', 'method', 'float_format', 'logging'}
    unknown = sorted(set(config) - known)
    if unknown:
        raise ValueError(f"Unknown config key(s): {unknown}. Valid keys: {sorted(known)}")

    result = DetectConfig()
    if config.get('input') is not None:
        result.input = Path(config['input'])
    if config.get('output') is not None:
        result.output = Path(config['output'])
    if config.get('method') is not None:
        result.method = str(config['method'])
    if config.get('float_format') is not None:
        result.float_format = str(config['float_format'])

    logging_section = config.get('logging') or {}
    if not isinstance(logging_section, dict):
        raise ValueError("Config 'logging' section must be a mapping")
    if 'level' in logging_section:
        result.log_level = str(logging_section['level']).upper()

    return result


def _explicit_args(cli_args: Optional[List[str]]) -> set:
    """Names of the arguments the user typed on the command line."""
    short_to_long = {
        'i': 'input',
        'o': 'output',
        'm': 'method',
    }
    explicit = set()
    for arg in cli_args or []:
        if arg.startswith('--'):
            explicit.add(arg[2:].split('=', 1)[0].replace('-', '_'))
        elif arg.startswith('-') and len(arg) == 2 and arg[1] in short_to_long:
            explicit.add(short_to_long[arg[1]])
    return explicit


def merge_config_with_args(
    config: Dict[str, Any],
    args: Namespace,
    cli_args: Optional[List[str]] = None,
) -> Namespace:
    """
    Merge config file values with CLI arguments.

    Priority (highest to lowest):
    1. Explicitly provided CLI arguments
    2. Config file values
    3. CLI argument defaults

    Parameters:
        config: Configuration dictionary from load_config()
        args: Parsed CLI arguments (argparse.Namespace)
        cli_args: Raw CLI arguments list (for detecting explicit values)
                  If None, assumes all args are defaults

    Returns:
        Updated Namespace with merged values

    Examples:
        >>> config = load_config(Path("detect.yaml"))
        >>> args = parser.parse_args(["--input", "samples/GSM1234"])
        >>> merged = merge_config_with_args(config, args)
        >>> # args.input from CLI, args.method from config
    """
    parsed = config_from_dict(config)
    explicit = _explicit_args(cli_args)
    merged = Namespace(**vars(args))

    for name in ('input', 'output', 'method', 'float_format'):
        if name in explicit:
            continue
        if name in config and config[name] is not None:
            setattr(merged, name, getattr(parsed, name))

    # --verbose always wins over the config's level
    if not getattr(merged, 'verbose', False) and 'logging' in config:
        merged.log_level = parsed.log_level

    return merged

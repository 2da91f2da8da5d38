"""Solana CLI config and keypair files."""

import json
import sys
from pathlib import Path
from typing import NamedTuple, Optional, Union

import yaml
from solders.keypair import Keypair

from votes.constants import CLI_CONFIG_PATH, DEFAULT_RPC_URL
from votes.errors import ConfigUnavailable, KeypairDecodeError, MissingPayerError

SECRET_KEY_LEN: int = 64


class CliConfig(NamedTuple):
    """Settings read from the Solana CLI config file."""
    json_rpc_url: Optional[str]
    keypair_path: Optional[str]


class UseDefault(NamedTuple):
    """The CLI config could not be read, callers fall back to defaults."""
    reason: ConfigUnavailable


ConfigResult = Union[CliConfig, UseDefault]


def warn(message: str):
    print(f"Warning: {message}", file=sys.stderr)


def _str_or_none(value) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def read_cli_config(path: Union[str, Path] = CLI_CONFIG_PATH) -> ConfigResult:
    try:
        with open(path, 'r', encoding='utf8') as config_file:
            config = yaml.safe_load(config_file)
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        return UseDefault(ConfigUnavailable(f"Failed to read CLI config file '{path}': {e}"))
    if not isinstance(config, dict):
        return UseDefault(ConfigUnavailable(f"CLI config file '{path}' is not a mapping"))
    return CliConfig(
        json_rpc_url=_str_or_none(config.get('json_rpc_url')),
        keypair_path=_str_or_none(config.get('keypair_path')),
    )


def rpc_url_from(config: ConfigResult) -> str:
    if isinstance(config, UseDefault):
        warn(f"{config.reason}, falling back to {DEFAULT_RPC_URL}")
        return DEFAULT_RPC_URL
    if config.json_rpc_url is None:
        warn(f"Missing RPC URL in CLI config file, falling back to {DEFAULT_RPC_URL}")
        return DEFAULT_RPC_URL
    return config.json_rpc_url


def keypair_from_file(keyfile_name: Union[str, Path]) -> Keypair:
    with open(keyfile_name, 'rb') as keyfile:
        data = keyfile.read()
    try:
        int_list = json.loads(data.decode('utf8'))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise KeypairDecodeError(f"Keypair file '{keyfile_name}' is not valid JSON: {e}") from e
    if (
        not isinstance(int_list, list)
        or len(int_list) != SECRET_KEY_LEN
        or not all(isinstance(value, int) and 0 <= value <= 255 for value in int_list)
    ):
        raise KeypairDecodeError(
            f"Keypair file '{keyfile_name}' must hold a JSON array of {SECRET_KEY_LEN} bytes")
    try:
        return Keypair.from_bytes(bytes(int_list))
    except ValueError as e:
        raise KeypairDecodeError(f"Keypair file '{keyfile_name}' is not a valid keypair: {e}") from e


def payer_from(config: ConfigResult) -> Keypair:
    """Loads the payer keypair named by the CLI config, failing before any transaction is built."""
    if isinstance(config, UseDefault):
        reason = str(config.reason)
    elif config.keypair_path is None:
        reason = "Missing keypair path in CLI config file"
    else:
        try:
            return keypair_from_file(Path(config.keypair_path).expanduser())
        except (OSError, KeypairDecodeError) as e:
            reason = f"Failed to read keypair '{config.keypair_path}': {e}"
    warn(f"{reason}, no payer available")
    raise MissingPayerError(f"A payer keypair is required to create the vote account: {reason}")

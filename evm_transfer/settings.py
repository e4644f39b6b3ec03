"""
Settings

Key-value settings lookup used by the authorization gate and the wallet provider.

Lookup order:
1. Explicit overrides
2. Process environment (after loading .env)
3. `settings:` section of the YAML config
"""

import os
from dataclasses import replace
from pathlib import Path
from typing import Dict, Optional, Protocol

import yaml
from dotenv import load_dotenv
from loguru import logger

from .chains import ChainConfig, SupportedChain, load_chain_configs

PRIVATE_KEY_SETTING = "EVM_PRIVATE_KEY"
PROVIDER_URL_SETTING = "EVM_PROVIDER_URL"


class SettingsSource(Protocol):
    def get_setting(self, name: str) -> Optional[str]:
        ...

    def chain_configs(self) -> Dict[SupportedChain, ChainConfig]:
        ...


class Settings:
    """
    Settings backed by overrides, environment variables and a YAML file

    Features:
    - .env loading via python-dotenv
    - YAML `settings:` section as fallback
    - Per-chain RPC URL overrides
    """

    def __init__(
        self,
        config_path: Optional[str] = "transfer_config.yaml",
        overrides: Optional[Dict[str, str]] = None,
        load_env: bool = True
    ):
        """
        Initialize settings

        Args:
            config_path: Path to YAML config (None to skip)
            overrides: Values that take precedence over everything else
            load_env: Whether to consult the process environment and .env
        """
        self.config_path = config_path
        self.overrides = dict(overrides or {})
        self.load_env = load_env

        if load_env:
            load_dotenv()

        self._file_settings = self._load_file_settings()

        logger.debug(
            f"Settings initialized (config: {config_path}, "
            f"overrides: {len(self.overrides)}, env: {'on' if load_env else 'off'})"
        )

    def _load_file_settings(self) -> Dict[str, str]:
        """Load the `settings:` section from YAML"""
        if not self.config_path:
            return {}

        try:
            config_file = Path(self.config_path)
            if not config_file.exists():
                return {}

            with open(config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f) or {}

            section = config.get('settings') or {}
            return {str(key): str(value) for key, value in section.items() if value is not None}

        except Exception as e:
            logger.warning(f"Failed to load settings from {self.config_path}: {e}")
            return {}

    def get_setting(self, name: str) -> Optional[str]:
        """
        Look up a setting

        Args:
            name: Setting name (e.g. EVM_PRIVATE_KEY)

        Returns:
            Setting value, or None when unset
        """
        if name in self.overrides:
            return self.overrides[name]

        if self.load_env:
            value = os.environ.get(name)
            if value is not None:
                return value

        return self._file_settings.get(name)

    def chain_configs(self) -> Dict[SupportedChain, ChainConfig]:
        """
        Chain configs from the YAML file with RPC URL settings applied

        Returns:
            Dict of chain -> ChainConfig
        """
        configs = load_chain_configs(self.config_path)

        for chain, config in list(configs.items()):
            rpc_url = self.get_setting(f"{PROVIDER_URL_SETTING}_{chain.value.upper()}")
            if rpc_url:
                configs[chain] = replace(config, rpc_url=rpc_url)

        return configs

"""
Supported Chains

Chain table for native-asset transfers:
- Supported chain identifiers
- Per-chain RPC / explorer / unit configuration
- YAML overrides for RPC endpoints
- Chain-specific address validation
"""

from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Tuple

import yaml
from loguru import logger
from web3 import Web3


class SupportedChain(str, Enum):
    """Chains the transfer action can execute on"""
    ETHEREUM = "ethereum"
    SEPOLIA = "sepolia"
    BASE = "base"
    OPTIMISM = "optimism"
    ARBITRUM = "arbitrum"
    POLYGON = "polygon"


@dataclass(frozen=True)
class ChainConfig:
    """Network parameters for one chain"""
    name: SupportedChain
    chain_id: int
    rpc_url: str
    native_symbol: str
    decimals: int = 18
    key_prefix: str = "0x"
    explorer_url: Optional[str] = None

    def __repr__(self):
        return f"ChainConfig({self.name.value}: id={self.chain_id}, {self.native_symbol})"


DEFAULT_CHAINS: Dict[SupportedChain, ChainConfig] = {
    SupportedChain.ETHEREUM: ChainConfig(
        name=SupportedChain.ETHEREUM,
        chain_id=1,
        rpc_url="https://eth.llamarpc.com",
        native_symbol="ETH",
        explorer_url="https://etherscan.io",
    ),
    SupportedChain.SEPOLIA: ChainConfig(
        name=SupportedChain.SEPOLIA,
        chain_id=11155111,
        rpc_url="https://rpc.sepolia.org",
        native_symbol="ETH",
        explorer_url="https://sepolia.etherscan.io",
    ),
    SupportedChain.BASE: ChainConfig(
        name=SupportedChain.BASE,
        chain_id=8453,
        rpc_url="https://mainnet.base.org",
        native_symbol="ETH",
        explorer_url="https://basescan.org",
    ),
    SupportedChain.OPTIMISM: ChainConfig(
        name=SupportedChain.OPTIMISM,
        chain_id=10,
        rpc_url="https://mainnet.optimism.io",
        native_symbol="ETH",
        explorer_url="https://optimistic.etherscan.io",
    ),
    SupportedChain.ARBITRUM: ChainConfig(
        name=SupportedChain.ARBITRUM,
        chain_id=42161,
        rpc_url="https://arb1.arbitrum.io/rpc",
        native_symbol="ETH",
        explorer_url="https://arbiscan.io",
    ),
    SupportedChain.POLYGON: ChainConfig(
        name=SupportedChain.POLYGON,
        chain_id=137,
        rpc_url="https://polygon-rpc.com",
        native_symbol="POL",
        explorer_url="https://polygonscan.com",
    ),
}

# Fields a config file may override per chain
_OVERRIDABLE_FIELDS = ('rpc_url', 'explorer_url', 'chain_id', 'native_symbol')


def resolve_chain(value) -> SupportedChain:
    """
    Parse a chain identifier

    Args:
        value: Chain name such as 'ethereum' or ' Base '

    Returns:
        SupportedChain member

    Raises:
        ValueError: If the value is not a supported chain name
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError("chain must be a non-empty string")

    try:
        return SupportedChain(value.strip().lower())
    except ValueError:
        supported = ", ".join(chain.value for chain in SupportedChain)
        raise ValueError(f"unsupported chain '{value}' (supported: {supported})") from None


def load_chain_configs(config_path: Optional[str] = None) -> Dict[SupportedChain, ChainConfig]:
    """
    Load chain configs, applying overrides from the `chains:` section of a YAML file

    Args:
        config_path: Path to config file (None for defaults only)

    Returns:
        Dict of chain -> ChainConfig
    """
    configs = dict(DEFAULT_CHAINS)

    if config_path is None:
        return configs

    try:
        config_file = Path(config_path)
        if not config_file.exists():
            logger.debug(f"Config file {config_path} not found, using default chains")
            return configs

        with open(config_file, 'r', encoding='utf-8') as f:
            config = yaml.safe_load(f) or {}

        custom_chains = config.get('chains') or {}
        for chain_name, overrides in custom_chains.items():
            try:
                chain = resolve_chain(chain_name)
            except ValueError as e:
                logger.warning(f"Ignoring chain override: {e}")
                continue

            fields = {
                key: value for key, value in (overrides or {}).items()
                if key in _OVERRIDABLE_FIELDS
            }
            if fields:
                configs[chain] = replace(configs[chain], **fields)
                logger.info(f"Loaded chain override for {chain.value}: {sorted(fields)}")

    except Exception as e:
        logger.warning(f"Failed to load chain overrides from config: {e}, using defaults")
        return dict(DEFAULT_CHAINS)

    return configs


def validate_address(address, chain: ChainConfig) -> Tuple[bool, Optional[str]]:
    """
    Validate a destination address for a chain

    Args:
        address: Address to validate
        chain: Target chain

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(address, str):
        return False, "Address must be a string"

    if not address:
        return False, "Address is empty"

    # All supported chains are EVM-compatible
    if not address.startswith('0x'):
        return False, "EVM address must start with 0x"
    if len(address) != 42:
        return False, "EVM address must be 42 characters"

    body = address[2:]
    if any(c not in "0123456789abcdefABCDEF" for c in body):
        return False, "EVM address must be hexadecimal"

    # Mixed case means the sender committed to an EIP-55 checksum
    if body != body.lower() and body != body.upper():
        if not Web3.is_checksum_address(address):
            return False, f"Invalid EIP-55 checksum for {chain.name.value} address"

    return True, None

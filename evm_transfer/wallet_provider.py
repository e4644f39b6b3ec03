"""
Wallet Provider

Signing/submission capability backed by web3 and a local private key.
This is the only component that touches key material.
"""

import asyncio
from typing import List, Optional, Protocol

from eth_account import Account
from loguru import logger
from web3 import Web3

from .chains import ChainConfig
from .models import TransactionSpec
from .settings import PRIVATE_KEY_SETTING, SettingsSource


class SigningCapability(Protocol):
    async def resolve_addresses(self) -> List[str]:
        ...

    async def send_transaction(self, spec: TransactionSpec) -> str:
        ...


class WalletProvider:
    """
    web3-backed signer bound to one account on one chain

    Features:
    - Local signing with eth_account
    - Legacy gas pricing from the node
    - Broadcast without waiting for a receipt
    """

    def __init__(
        self,
        private_key: str,
        chain: ChainConfig,
        web3: Optional[Web3] = None
    ):
        """
        Initialize wallet provider

        Args:
            private_key: Hex private key
            chain: Chain to sign for
            web3: Optional preconfigured Web3 client
        """
        self.chain = chain
        self._account = Account.from_key(private_key)
        self._web3 = web3 or Web3(Web3.HTTPProvider(chain.rpc_url, request_kwargs={"timeout": 30}))

        logger.info(f"Wallet provider ready on {chain.name.value} for {self._account.address}")

    @classmethod
    def from_settings(cls, settings: SettingsSource, chain: ChainConfig) -> "WalletProvider":
        """
        Build a provider from EVM_PRIVATE_KEY

        Raises:
            ValueError: If the key is not configured
        """
        private_key = settings.get_setting(PRIVATE_KEY_SETTING)
        if not private_key:
            raise ValueError(f"{PRIVATE_KEY_SETTING} is not configured")
        return cls(private_key, chain)

    @property
    def address(self) -> str:
        return self._account.address

    async def resolve_addresses(self) -> List[str]:
        return [self._account.address]

    async def send_transaction(self, spec: TransactionSpec) -> str:
        """
        Build, sign and broadcast a transaction

        Args:
            spec: Transaction to send

        Returns:
            0x-prefixed transaction hash
        """
        if spec.account.lower() != self._account.address.lower():
            raise ValueError(f"Signer is not bound to account {spec.account}")

        tx = await asyncio.to_thread(self._build_transaction, spec)
        signed = self._account.sign_transaction(tx)

        raw_tx_hash = await asyncio.to_thread(self._web3.eth.send_raw_transaction, signed.raw_transaction)
        tx_hash = Web3.to_hex(raw_tx_hash)

        logger.info(f"✓ Broadcast {spec.value} wei to {spec.to} on {self.chain.name.value}: {tx_hash}")
        return tx_hash

    def _build_transaction(self, spec: TransactionSpec) -> dict:
        sender = self._account.address
        tx = {
            'from': sender,
            'to': Web3.to_checksum_address(spec.to),
            'value': spec.value,
            'data': Web3.to_hex(spec.data),
            'nonce': self._web3.eth.get_transaction_count(sender, 'pending'),
            'chainId': self.chain.chain_id,
        }
        tx['gas'] = self._web3.eth.estimate_gas(tx)
        tx['gasPrice'] = self._web3.eth.gas_price

        # eth_account derives the sender from the key
        del tx['from']
        return tx

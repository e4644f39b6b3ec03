"""Shared fakes for the transfer tests"""

import asyncio
from typing import List, Optional

import pytest

from evm_transfer.chains import DEFAULT_CHAINS, SupportedChain
from evm_transfer.models import TransactionSpec
from evm_transfer.settings import Settings
from evm_transfer.transfer_orchestrator import TransferRequestContext

DESTINATION = "0x742d35Cc6634C0532925a3b844Bc454e4438f44e"
SENDER = "0xABC0000000000000000000000000000000000001"
PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"


class FakeSigner:
    """Records submissions instead of broadcasting"""

    def __init__(
        self,
        addresses: Optional[List[str]] = None,
        tx_hash="0xdeadbeef",
        error: Optional[Exception] = None,
        delay: float = 0.0
    ):
        self.addresses = [SENDER] if addresses is None else addresses
        self.tx_hash = tx_hash
        self.error = error
        self.delay = delay
        self.sent: List[TransactionSpec] = []

    async def resolve_addresses(self) -> List[str]:
        return list(self.addresses)

    async def send_transaction(self, spec: TransactionSpec) -> str:
        self.sent.append(spec)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.tx_hash


class FakeExtractor:
    """Returns a canned response, or raises"""

    def __init__(self, response=None, error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.calls = []

    async def generate(self, state, template):
        self.calls.append((state, template))
        if self.error is not None:
            raise self.error
        return self.response


class SignerFactory:
    """Hands out one signer and counts how often it was asked"""

    def __init__(self, signer: FakeSigner):
        self.signer = signer
        self.chains = []

    def __call__(self, chain):
        self.chains.append(chain)
        return self.signer


def transfer_fields(source_chain="ethereum", amount="1", to_address=DESTINATION) -> dict:
    return {'sourceChain': source_chain, 'amount': amount, 'toAddress': to_address}


@pytest.fixture
def ethereum():
    return DEFAULT_CHAINS[SupportedChain.ETHEREUM]


@pytest.fixture
def settings():
    return Settings(config_path=None, overrides={'EVM_PRIVATE_KEY': PRIVATE_KEY}, load_env=False)


@pytest.fixture
def signer():
    return FakeSigner()


@pytest.fixture
def make_context(settings):
    def _make(response=None, signer=None, extractor_error=None, payload=b""):
        extractor = FakeExtractor(response=response, error=extractor_error)
        factory = SignerFactory(signer or FakeSigner())
        context = TransferRequestContext(
            state={'recentMessages': 'user: send 1 ETH'},
            settings=settings,
            extractor=extractor,
            signer_factory=factory,
            payload=payload,
        )
        return context, extractor, factory

    return _make

"""End-to-end tests for the transfer state machine"""

import asyncio
from dataclasses import replace

import pytest

from evm_transfer.chains import DEFAULT_CHAINS, SupportedChain
from evm_transfer.models import ExtractionError, Failure, SubmissionError, Success, ValidationError
from evm_transfer.settings import Settings
from evm_transfer.transfer_orchestrator import (
    TransferOrchestrator,
    TransferRequestContext,
    TransferState,
)

from .conftest import DESTINATION, FakeExtractor, FakeSigner, SignerFactory, transfer_fields


@pytest.mark.asyncio
async def test_successful_transfer(make_context):
    context, extractor, factory = make_context(response=transfer_fields())
    notifications = []

    success, text = await TransferOrchestrator().run(context, notifications.append)

    assert success is True
    assert text == f"1 sent to {DESTINATION}. Transaction hash: 0xdeadbeef"
    assert notifications == [{'text': text}]
    assert len(extractor.calls) == 1
    assert factory.chains[0].chain_id == 1


@pytest.mark.asyncio
async def test_network_error_is_reported(make_context):
    signer = FakeSigner(error=ConnectionError("connection reset by peer"))
    context, _, _ = make_context(response=transfer_fields(), signer=signer)

    success, text = await TransferOrchestrator().run(context)

    assert success is False
    assert text == f"Failed to send 1 to {DESTINATION}: Transfer failed: connection reset by peer"


@pytest.mark.asyncio
async def test_empty_address_fails_validation_without_signing(make_context):
    signer = FakeSigner()
    context, _, factory = make_context(response=transfer_fields(to_address=""), signer=signer)

    transfer_run = await TransferOrchestrator().execute(context)

    assert transfer_run.state == TransferState.FAILED
    assert isinstance(transfer_run.outcome, Failure)
    assert isinstance(transfer_run.outcome.error, ValidationError)
    assert transfer_run.outcome.error.field == "to_address"
    assert factory.chains == []
    assert signer.sent == []


@pytest.mark.asyncio
async def test_zero_amount_transfer(make_context):
    signer = FakeSigner()
    context, _, _ = make_context(response=transfer_fields(amount="0"), signer=signer)

    transfer_run = await TransferOrchestrator().execute(context)

    assert transfer_run.state == TransferState.SUCCEEDED
    assert isinstance(transfer_run.outcome, Success)
    assert signer.sent[0].value == 0


@pytest.mark.parametrize("to_address", [
    "0x123",
    "0x742d35cc6634C0532925a3b844Bc454e4438f44e",
    "0xZZ2d35Cc6634C0532925a3b844Bc454e4438f44e",
])
@pytest.mark.asyncio
async def test_malformed_address_never_signs(make_context, to_address):
    signer = FakeSigner()
    context, _, _ = make_context(response=transfer_fields(to_address=to_address), signer=signer)

    success, text = await TransferOrchestrator().run(context)

    assert success is False
    assert text.startswith(f"Failed to send 1 to {to_address}: Invalid to_address")
    assert signer.sent == []


@pytest.mark.asyncio
async def test_lossy_amount_rejected_before_executor(make_context):
    signer = FakeSigner()
    context, _, _ = make_context(response=transfer_fields(amount="1.0000000000000000001"), signer=signer)

    transfer_run = await TransferOrchestrator().execute(context)

    assert transfer_run.outcome.error.field == "amount"
    assert signer.sent == []


@pytest.mark.asyncio
async def test_unsupported_chain(make_context):
    context, _, _ = make_context(response=transfer_fields(source_chain="solana"))

    success, text = await TransferOrchestrator().run(context)

    assert success is False
    assert "Invalid source_chain" in text
    assert f"Failed to send 1 to {DESTINATION}" in text


@pytest.mark.asyncio
async def test_extractor_exception_is_extraction_error(make_context):
    context, _, factory = make_context(extractor_error=RuntimeError("model overloaded"))

    transfer_run = await TransferOrchestrator().execute(context)

    assert isinstance(transfer_run.outcome.error, ExtractionError)
    assert "model overloaded" in str(transfer_run.outcome.error)
    assert factory.chains == []


@pytest.mark.asyncio
async def test_missing_fields_render_placeholders(make_context):
    context, _, _ = make_context(response={'fromChain': 'ethereum', 'amount': '2'})

    success, text = await TransferOrchestrator().run(context)

    assert success is False
    assert text.startswith("Failed to send 2 to an unspecified address: Could not extract transfer details")


@pytest.mark.asyncio
async def test_signer_factory_failure_is_submission_error(settings):
    def broken_factory(chain):
        raise ValueError("EVM_PRIVATE_KEY is not configured")

    context = TransferRequestContext(
        state={},
        settings=settings,
        extractor=FakeExtractor(response=transfer_fields()),
        signer_factory=broken_factory,
    )

    transfer_run = await TransferOrchestrator().execute(context)

    assert isinstance(transfer_run.outcome.error, SubmissionError)


@pytest.mark.asyncio
async def test_submission_timeout(make_context):
    context, _, _ = make_context(response=transfer_fields(), signer=FakeSigner(delay=1.0))

    success, text = await TransferOrchestrator(submission_timeout=0.01).run(context)

    assert success is False
    assert "timed out" in text
    assert DESTINATION in text


@pytest.mark.asyncio
async def test_async_notify_called_once(make_context):
    context, _, _ = make_context(response=transfer_fields())
    received = []

    async def notify(message):
        await asyncio.sleep(0)
        received.append(message)

    await TransferOrchestrator().run(context, notify)

    assert len(received) == 1


@pytest.mark.asyncio
async def test_failing_notify_does_not_change_outcome(make_context):
    context, _, _ = make_context(response=transfer_fields())

    def notify(message):
        raise RuntimeError("chat closed")

    success, text = await TransferOrchestrator().run(context, notify)

    assert success is True
    assert "Transaction hash: 0xdeadbeef" in text


@pytest.mark.asyncio
async def test_concurrent_runs_are_independent(make_context):
    orchestrator = TransferOrchestrator()
    first, _, _ = make_context(response=transfer_fields(amount="1"), signer=FakeSigner(tx_hash="0x01"))
    second, _, _ = make_context(response=transfer_fields(amount="2"), signer=FakeSigner(tx_hash="0x02"))

    results = await asyncio.gather(orchestrator.run(first), orchestrator.run(second))

    assert results[0] == (True, f"1 sent to {DESTINATION}. Transaction hash: 0x01")
    assert results[1] == (True, f"2 sent to {DESTINATION}. Transaction hash: 0x02")


class _RawSettings:
    def __init__(self, value):
        self.value = value

    def get_setting(self, name):
        return self.value

    def chain_configs(self):
        return dict(DEFAULT_CHAINS)


@pytest.mark.parametrize("value,expected", [
    ("0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318", True),
    ("4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318", False),
    ("", False),
    (None, False),
    (1234, False),
    (b"0xabc", False),
])
def test_authorize(value, expected):
    context = TransferRequestContext(state={}, settings=_RawSettings(value), extractor=FakeExtractor())
    assert TransferOrchestrator().authorize(context) is expected


def test_authorize_rechecks_every_call():
    settings = Settings(config_path=None, overrides={'EVM_PRIVATE_KEY': '0xabc'}, load_env=False)
    context = TransferRequestContext(state={}, settings=settings, extractor=FakeExtractor())
    orchestrator = TransferOrchestrator()

    assert orchestrator.authorize(context) is True
    settings.overrides['EVM_PRIVATE_KEY'] = 'abc'
    assert orchestrator.authorize(context) is False


def test_authorize_uses_chain_key_prefixes():
    chains = dict(DEFAULT_CHAINS)
    chains[SupportedChain.BASE] = replace(chains[SupportedChain.BASE], key_prefix="0xab")
    context = TransferRequestContext(state={}, settings=_RawSettings("0x12ff"), extractor=FakeExtractor())

    assert TransferOrchestrator().authorize(context) is True
    assert TransferOrchestrator(chains=chains).authorize(context) is False
    assert TransferOrchestrator(chains={}).authorize(context) is False


@pytest.mark.parametrize("amount", ["1e60", "1e20000000"])
@pytest.mark.asyncio
async def test_amount_beyond_uint256_never_signs(make_context, amount):
    signer = FakeSigner()
    context, _, factory = make_context(response=transfer_fields(amount=amount), signer=signer)

    transfer_run = await TransferOrchestrator().execute(context)

    assert transfer_run.state == TransferState.FAILED
    assert transfer_run.outcome.error.field == "amount"
    assert factory.chains == []
    assert signer.sent == []


@pytest.mark.asyncio
async def test_rpc_override_from_settings_reaches_signer(tmp_path):
    config = tmp_path / "transfer_config.yaml"
    config.write_text("chains:\n  base:\n    rpc_url: https://base.example\n", encoding='utf-8')
    settings = Settings(
        str(config),
        overrides={
            'EVM_PRIVATE_KEY': '0xabc',
            'EVM_PROVIDER_URL_ETHEREUM': 'https://eth.example',
        },
        load_env=False,
    )
    factory = SignerFactory(FakeSigner())

    for chain_name, expected in [("ethereum", "https://eth.example"), ("base", "https://base.example")]:
        context = TransferRequestContext(
            state={},
            settings=settings,
            extractor=FakeExtractor(response=transfer_fields(source_chain=chain_name)),
            signer_factory=factory,
        )
        success, _ = await TransferOrchestrator().run(context)

        assert success is True
        assert factory.chains[-1].rpc_url == expected

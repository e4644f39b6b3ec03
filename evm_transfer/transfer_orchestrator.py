"""
Transfer Orchestrator

End-to-end flow for one transfer request:
1. Extracting - ask the extraction collaborator for structured fields
2. Validating - field-level checks (chain, amount, destination)
3. Submitting - hand validated params to TransferExecutor
4. Succeeded / Failed - exactly one terminal state per run

Every run produces a user-facing notification and a success flag.
"""

import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

from loguru import logger

from .chains import ChainConfig, SupportedChain
from .extraction import TRANSFER_TEMPLATE, ParameterExtractor, TransferFields, parse_transfer_fields
from .models import ExtractionError, Failure, Outcome, SubmissionError, Success, TransferError
from .settings import PRIVATE_KEY_SETTING, SettingsSource
from .transfer_executor import TransferExecutor, submit_with_timeout
from .validation import validate_transfer
from .wallet_provider import SigningCapability, WalletProvider

SignerFactory = Callable[[ChainConfig], SigningCapability]
NotificationSink = Callable[[Dict[str, str]], Any]

UNSPECIFIED_AMOUNT = "an unspecified amount"
UNSPECIFIED_ADDRESS = "an unspecified address"


class TransferState(Enum):
    EXTRACTING = "extracting"
    VALIDATING = "validating"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass
class TransferRequestContext:
    """Per-invocation collaborators and conversation state"""
    state: Mapping[str, Any]
    settings: SettingsSource
    extractor: ParameterExtractor
    signer_factory: Optional[SignerFactory] = None
    payload: bytes = b""


@dataclass(frozen=True)
class TransferRun:
    """Terminal record of one orchestration run"""
    state: TransferState
    outcome: Outcome
    amount: Optional[str] = None
    to_address: Optional[str] = None

    @property
    def success(self) -> bool:
        return isinstance(self.outcome, Success)


def notification_text(run: TransferRun) -> str:
    """
    Render the user-facing message for a run

    Args:
        run: Completed run

    Returns:
        Message naming the amount and destination
    """
    amount = run.amount or UNSPECIFIED_AMOUNT
    to_address = run.to_address or UNSPECIFIED_ADDRESS

    if isinstance(run.outcome, Success):
        return f"{amount} sent to {to_address}. Transaction hash: {run.outcome.result.id}"

    return f"Failed to send {amount} to {to_address}: {run.outcome.error}"


class TransferOrchestrator:
    """
    Drives a transfer request from extraction to a single acknowledgement

    Stateless across runs: concurrent runs share only read-only configuration.
    """

    def __init__(
        self,
        executor: Optional[TransferExecutor] = None,
        chains: Optional[Dict[SupportedChain, ChainConfig]] = None,
        template: str = TRANSFER_TEMPLATE,
        submission_timeout: Optional[float] = None
    ):
        """
        Initialize orchestrator

        Args:
            executor: Transfer executor (default: new TransferExecutor)
            chains: Chain configs (default: resolved per request from context.settings)
            template: Extraction prompt template
            submission_timeout: Optional outer timeout for submission, in seconds
        """
        self.executor = executor or TransferExecutor()
        self.chains = chains
        self.template = template
        self.submission_timeout = submission_timeout

    def _chains_for(self, context: TransferRequestContext) -> Dict[SupportedChain, ChainConfig]:
        if self.chains is not None:
            return self.chains
        return context.settings.chain_configs()

    def authorize(self, context: TransferRequestContext) -> bool:
        """True when the private key carries the key prefix of every configured chain"""
        private_key = context.settings.get_setting(PRIVATE_KEY_SETTING)
        if not isinstance(private_key, str):
            return False

        prefixes = {chain.key_prefix for chain in self._chains_for(context).values()}
        return bool(prefixes) and all(private_key.startswith(prefix) for prefix in prefixes)

    async def _extract(
        self,
        context: TransferRequestContext
    ) -> Tuple[Optional[TransferFields], Optional[ExtractionError]]:
        try:
            response = await context.extractor.generate(context.state, self.template)
        except ExtractionError as e:
            return None, e
        except Exception as e:
            return None, ExtractionError(f"extractor failed: {e}")

        try:
            return parse_transfer_fields(response), None
        except ExtractionError as e:
            return None, e

    def _signer_for(
        self,
        context: TransferRequestContext,
        chain: ChainConfig
    ) -> Tuple[Optional[SigningCapability], Optional[SubmissionError]]:
        factory = context.signer_factory or (lambda c: WalletProvider.from_settings(context.settings, c))
        try:
            return factory(chain), None
        except Exception as e:
            return None, SubmissionError(e)

    def _fail(
        self,
        error: TransferError,
        amount: Optional[str],
        to_address: Optional[str]
    ) -> TransferRun:
        logger.error(f"❌ Transfer failed ({type(error).__name__}): {error}")
        return TransferRun(
            state=TransferState.FAILED,
            outcome=Failure(error),
            amount=amount,
            to_address=to_address,
        )

    async def execute(self, context: TransferRequestContext) -> TransferRun:
        """
        Run the state machine to a terminal state

        Args:
            context: Request context with its own collaborators

        Returns:
            TransferRun in SUCCEEDED or FAILED state
        """
        # Step 1: Extract
        logger.info(f"Transfer state: {TransferState.EXTRACTING.value}")
        fields, extraction_error = await self._extract(context)
        if extraction_error:
            return self._fail(
                extraction_error,
                extraction_error.partial.get('amount'),
                extraction_error.partial.get('to_address'),
            )

        logger.info(f"Extracted transfer: {fields.amount} to {fields.to_address} on {fields.source_chain}")

        # Step 2: Validate
        logger.info(f"Transfer state: {TransferState.VALIDATING.value}")
        chains = self._chains_for(context)
        params, validation_error = validate_transfer(
            fields.source_chain,
            fields.amount,
            fields.to_address,
            chains,
            context.payload,
        )
        if validation_error:
            return self._fail(validation_error, fields.amount, fields.to_address)

        logger.info("✓ Validation passed")

        # Step 3: Submit
        logger.info(f"Transfer state: {TransferState.SUBMITTING.value}")
        signer, signer_error = self._signer_for(context, params.source_chain)
        if signer_error:
            return self._fail(signer_error, fields.amount, fields.to_address)

        try:
            outcome = await submit_with_timeout(self.executor, params, signer, self.submission_timeout)
        except Exception as e:
            outcome = Failure(SubmissionError(e))

        if isinstance(outcome, Failure):
            return self._fail(outcome.error, fields.amount, fields.to_address)

        logger.info(f"✅ Transfer submitted: {outcome.result.id}")
        return TransferRun(
            state=TransferState.SUCCEEDED,
            outcome=outcome,
            amount=fields.amount,
            to_address=fields.to_address,
        )

    async def run(
        self,
        context: TransferRequestContext,
        notify: Optional[NotificationSink] = None
    ) -> Tuple[bool, str]:
        """
        Execute a transfer request and acknowledge it

        Args:
            context: Request context
            notify: Optional sink called once with {"text": ...}

        Returns:
            Tuple of (success, notification_text)
        """
        transfer_run = await self.execute(context)
        text = notification_text(transfer_run)

        if notify is not None:
            try:
                result = notify({'text': text})
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(f"Notification sink failed: {e}")

        return transfer_run.success, text

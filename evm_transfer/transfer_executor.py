"""
Transfer Executor

Submits exactly one native-asset transfer and reports the real outcome:
1. Resolve the signer's source address
2. Convert the amount to the smallest unit (exact)
3. Ask the signer to build, sign and broadcast
4. Return the submission id without waiting for confirmation

No retries. Every collaborator failure comes back as Failure(SubmissionError).
"""

import asyncio
from typing import Optional

from loguru import logger

from .models import (
    Failure,
    Outcome,
    SubmissionError,
    Success,
    TransactionResult,
    TransactionSpec,
    TransferParams,
)
from .validation import to_smallest_unit
from .wallet_provider import SigningCapability


class TransferExecutor:
    """Single-shot transfer submission"""

    async def submit(self, params: TransferParams, signer: SigningCapability) -> Outcome:
        """
        Submit one transfer

        Args:
            params: Validated transfer parameters
            signer: Signing capability bound to the sending account

        Returns:
            Success(TransactionResult) or Failure(SubmissionError)
        """
        chain_name = params.source_chain.name.value
        logger.info(f"Submitting transfer on {chain_name}: {params.amount} to {params.destination_address}")

        try:
            addresses = await signer.resolve_addresses()
            if not addresses:
                raise ValueError("signer resolved no addresses")
            from_address = addresses[0]

            value = to_smallest_unit(params.amount, params.source_chain.decimals)

            spec = TransactionSpec(
                to=params.destination_address,
                value=value,
                data=params.payload,
                account=from_address,
            )

            tx_hash = await signer.send_transaction(spec)

            if not isinstance(tx_hash, str) or not tx_hash:
                raise ValueError(f"malformed submission id from signer: {tx_hash!r}")

        except Exception as e:
            logger.error(f"✗ Submission failed on {chain_name}: {e}")
            return Failure(SubmissionError(e))

        result = TransactionResult(
            id=tx_hash,
            from_address=from_address,
            to_address=params.destination_address,
            amount=value,
            payload=params.payload,
        )

        logger.info(f"✓ Transfer accepted: {result.to_dict()}")
        return Success(result)


async def submit_with_timeout(
    executor: TransferExecutor,
    params: TransferParams,
    signer: SigningCapability,
    timeout: Optional[float]
) -> Outcome:
    """
    Run `executor.submit` with an outer timeout

    A timeout is reported as Failure(SubmissionError(TimeoutError)); the
    broadcast may already have happened on-chain.

    Args:
        executor: Executor to call
        params: Validated transfer parameters
        signer: Signing capability
        timeout: Seconds to wait (None for no limit)

    Returns:
        Outcome
    """
    if timeout is None:
        return await executor.submit(params, signer)

    try:
        return await asyncio.wait_for(executor.submit(params, signer), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning(f"⚠ Submission timed out after {timeout}s; transaction may still be broadcast")
        return Failure(SubmissionError(TimeoutError(f"no submission result within {timeout}s")))

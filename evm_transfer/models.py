"""
Transfer Models

Value objects and the error taxonomy shared by the executor and orchestrator.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from .chains import ChainConfig


class TransferError(Exception):
    """Base class for every terminal transfer failure"""


class ExtractionError(TransferError):
    """The extraction collaborator could not produce the required fields"""

    def __init__(self, reason: str, partial: Optional[Dict[str, str]] = None):
        super().__init__(reason)
        self.reason = reason
        self.partial = dict(partial or {})

    def __str__(self):
        return f"Could not extract transfer details: {self.reason}"


class ValidationError(TransferError, ValueError):
    """A transfer field failed a local check"""

    def __init__(self, field_name: str, reason: str):
        super().__init__(f"{field_name}: {reason}")
        self.field = field_name
        self.reason = reason

    def __str__(self):
        return f"Invalid {self.field}: {self.reason}"


class SubmissionError(TransferError):
    """Signer refusal, network rejection, timeout or malformed chain response"""

    def __init__(self, cause):
        super().__init__(str(cause))
        self.cause = cause

    @property
    def is_timeout(self) -> bool:
        return isinstance(self.cause, TimeoutError)

    def __str__(self):
        if self.is_timeout:
            return "Transfer failed: timed out waiting for submission (it may still have been broadcast)"
        return f"Transfer failed: {self.cause}"


@dataclass(frozen=True)
class TransferParams:
    """
    Validated transfer request

    `source_chain` carries the resolved ChainConfig of the supported chain
    (its `name` is the SupportedChain member) so the executor has the
    unit decimals without a second lookup.
    """
    source_chain: ChainConfig
    amount: str
    destination_address: str
    payload: bytes = b""


@dataclass(frozen=True)
class TransactionSpec:
    """What the signer is asked to build, sign and broadcast"""
    to: str
    value: int
    data: bytes
    account: str


@dataclass(frozen=True)
class TransactionResult:
    """Accepted (not yet confirmed) submission"""
    id: str
    from_address: str
    to_address: str
    amount: int
    payload: bytes = b""

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'from': self.from_address,
            'to': self.to_address,
            'amount': self.amount,
            'payload': '0x' + self.payload.hex(),
        }


@dataclass(frozen=True)
class Success:
    result: TransactionResult
    ok: bool = field(default=True, init=False)


@dataclass(frozen=True)
class Failure:
    error: TransferError
    ok: bool = field(default=False, init=False)


Outcome = Union[Success, Failure]

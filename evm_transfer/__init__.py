"""
EVM Transfer

Single native-asset transfer driven by language-model extracted parameters.

Components:
- transfer_orchestrator: Extraction -> validation -> submission state machine
- transfer_executor: One-shot transaction submission
- extraction: Prompt template and typed parsing of model output
- validation: Chain, amount and address checks
- wallet_provider: web3-backed signing capability
- chains: Supported chain table and address rules
- settings: dotenv / YAML settings lookup
- actions: Static action registry
"""

from .actions import (
    ActionRecord,
    build_transfer_action,
    get_action,
    init_registry,
    list_actions,
    register_action,
)
from .chains import (
    ChainConfig,
    SupportedChain,
    load_chain_configs,
    resolve_chain,
    validate_address,
)
from .extraction import (
    TRANSFER_TEMPLATE,
    ModelExtractor,
    TransferFields,
    compose_context,
    parse_transfer_fields,
)
from .models import (
    ExtractionError,
    Failure,
    SubmissionError,
    Success,
    TransactionResult,
    TransactionSpec,
    TransferError,
    TransferParams,
    ValidationError,
)
from .settings import Settings
from .transfer_executor import TransferExecutor, submit_with_timeout
from .transfer_orchestrator import (
    TransferOrchestrator,
    TransferRequestContext,
    TransferRun,
    TransferState,
    notification_text,
)
from .validation import to_smallest_unit, validate_transfer
from .wallet_provider import WalletProvider

__all__ = [
    # Orchestration
    'TransferOrchestrator',
    'TransferRequestContext',
    'TransferRun',
    'TransferState',
    'notification_text',

    # Execution
    'TransferExecutor',
    'submit_with_timeout',
    'WalletProvider',

    # Models
    'TransferParams',
    'TransactionSpec',
    'TransactionResult',
    'Success',
    'Failure',
    'TransferError',
    'ExtractionError',
    'ValidationError',
    'SubmissionError',

    # Extraction
    'TRANSFER_TEMPLATE',
    'ModelExtractor',
    'TransferFields',
    'compose_context',
    'parse_transfer_fields',

    # Validation
    'to_smallest_unit',
    'validate_transfer',

    # Chains & settings
    'ChainConfig',
    'SupportedChain',
    'load_chain_configs',
    'resolve_chain',
    'validate_address',
    'Settings',

    # Registry
    'ActionRecord',
    'build_transfer_action',
    'get_action',
    'init_registry',
    'list_actions',
    'register_action',
]

__version__ = '1.0.0'

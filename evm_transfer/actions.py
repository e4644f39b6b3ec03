"""
Action Registry

Static registration records describing actions to a host dispatcher.
The registry is process-wide and populated explicitly by init_registry().
"""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, List, Optional, Tuple

from loguru import logger

from .transfer_orchestrator import NotificationSink, TransferOrchestrator, TransferRequestContext

Validator = Callable[[Any], bool]
Handler = Callable[[Any, Optional[NotificationSink]], Awaitable[Tuple[bool, str]]]


@dataclass(frozen=True)
class ActionRecord:
    """Capability description for one action"""
    name: str
    description: str
    validate: Validator
    handler: Handler
    similes: Tuple[str, ...] = ()
    examples: Tuple[Tuple[dict, ...], ...] = field(default_factory=tuple)

    async def invoke(self, context, notify: Optional[NotificationSink] = None) -> Tuple[bool, str]:
        """
        Re-check the validator and run the handler

        Returns:
            Tuple of (success, text); the handler is skipped when validation fails
        """
        if not self.validate(context):
            logger.warning(f"Action {self.name} not authorized for this request")
            return False, f"Action {self.name} is not available: missing or malformed credentials"
        return await self.handler(context, notify)


TRANSFER_EXAMPLES = (
    (
        {
            'user': 'user',
            'content': {
                'text': 'Transfer 1 ETH to 0x742d35Cc6634C0532925a3b844Bc454e4438f44e',
                'action': 'SEND_TOKENS',
            },
        },
        {
            'user': 'assistant',
            'content': {
                'text': "I'll help you transfer 1 ETH to 0x742d35Cc6634C0532925a3b844Bc454e4438f44e",
                'action': 'SEND_TOKENS',
            },
        },
    ),
)

_REGISTRY: List[ActionRecord] = []


def register_action(record: ActionRecord) -> None:
    """Add an action, replacing any existing record with the same name"""
    _REGISTRY[:] = [existing for existing in _REGISTRY if existing.name != record.name]
    _REGISTRY.append(record)
    logger.debug(f"Registered action {record.name}")


def get_action(name: str) -> Optional[ActionRecord]:
    return next((record for record in _REGISTRY if record.name == name), None)


def list_actions() -> List[ActionRecord]:
    return list(_REGISTRY)


def clear_registry() -> None:
    _REGISTRY.clear()


def build_transfer_action(orchestrator: TransferOrchestrator) -> ActionRecord:
    """Registration record for the native-asset transfer action"""

    async def handler(context: TransferRequestContext, notify: Optional[NotificationSink] = None):
        return await orchestrator.run(context, notify)

    return ActionRecord(
        name="transfer",
        description="Transfer native tokens between addresses on the same chain",
        validate=orchestrator.authorize,
        handler=handler,
        similes=("SEND_TOKENS", "TOKEN_TRANSFER", "MOVE_TOKENS"),
        examples=TRANSFER_EXAMPLES,
    )


def init_registry(orchestrator: Optional[TransferOrchestrator] = None) -> List[ActionRecord]:
    """
    Populate the registry with the built-in actions

    Args:
        orchestrator: Orchestrator backing the transfer action (default: new one)

    Returns:
        Registered actions
    """
    register_action(build_transfer_action(orchestrator or TransferOrchestrator()))
    logger.info(f"Action registry initialized with {len(_REGISTRY)} action(s)")
    return list_actions()

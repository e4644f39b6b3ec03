"""
Transfer Parameter Extraction

Contract with the language-model collaborator that turns a conversation
into structured transfer fields:
- Prompt template and context composition
- Typed parse-or-fail of the model response
- Model-backed extractor
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Mapping, Protocol

from loguru import logger

from .chains import SupportedChain
from .models import ExtractionError

TRANSFER_TEMPLATE = """Given the recent messages and wallet information below:

{{recentMessages}}

{{walletInfo}}

Extract the following information about the requested transfer:
- Chain to execute on (one of: """ + ", ".join(chain.value for chain in SupportedChain) + """)
- Amount to transfer, in the chain's native unit, as a decimal string
- Recipient address

Respond with a JSON markdown block containing only the extracted values:

```json
{
    "fromChain": string | null,
    "amount": string | null,
    "toAddress": string | null
}
```
"""

_PLACEHOLDER = re.compile(r"\{\{\s*(\w+)\s*\}\}")
_JSON_FENCE = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL)

# Response key -> accepted spellings
_FIELD_KEYS = {
    'source_chain': ('sourceChain', 'fromChain', 'source_chain'),
    'amount': ('amount',),
    'to_address': ('toAddress', 'to_address'),
}


class ParameterExtractor(Protocol):
    async def generate(self, state: Mapping[str, Any], template: str) -> Any:
        ...


@dataclass(frozen=True)
class TransferFields:
    """Raw transfer fields as produced by the extractor (not yet validated)"""
    source_chain: str
    amount: str
    to_address: str


def compose_context(state: Mapping[str, Any], template: str) -> str:
    """
    Fill `{{key}}` placeholders in a template

    Args:
        state: Values for the placeholders
        template: Template text

    Returns:
        Template with placeholders substituted (missing keys become empty)
    """
    def _substitute(match):
        value = state.get(match.group(1))
        return "" if value is None else str(value)

    return _PLACEHOLDER.sub(_substitute, template)


def _decode_response(response: Any) -> Dict[str, Any]:
    if isinstance(response, Mapping):
        return dict(response)

    if isinstance(response, str):
        fenced = _JSON_FENCE.search(response)
        text = fenced.group(1) if fenced else response.strip()
        try:
            decoded = json.loads(text)
        except json.JSONDecodeError as e:
            raise ExtractionError(f"response is not valid JSON ({e.msg})") from e
        if not isinstance(decoded, dict):
            raise ExtractionError("response JSON is not an object")
        return decoded

    raise ExtractionError(f"unexpected response type {type(response).__name__}")


def parse_transfer_fields(response: Any) -> TransferFields:
    """
    Parse a model response into TransferFields

    Args:
        response: Mapping, or text containing a JSON object (optionally fenced)

    Returns:
        TransferFields

    Raises:
        ExtractionError: If a field is missing or not a string
    """
    data = _decode_response(response)

    found: Dict[str, str] = {}
    missing = []
    for name, keys in _FIELD_KEYS.items():
        value = next((data[key] for key in keys if data.get(key) is not None), None)
        if isinstance(value, str):
            found[name] = value
        elif value is None:
            missing.append(name)
        else:
            missing.append(f"{name} (expected string, got {type(value).__name__})")

    if missing:
        raise ExtractionError(f"missing fields: {', '.join(missing)}", partial=found)

    return TransferFields(**found)


class ModelExtractor:
    """
    Extractor backed by a text-completion callable

    The callable receives the composed prompt and returns the model text.
    """

    def __init__(self, complete: Callable[[str], Awaitable[str]]):
        self.complete = complete

    async def generate(self, state: Mapping[str, Any], template: str) -> str:
        context = compose_context(state, template)
        logger.debug(f"Requesting transfer extraction ({len(context)} chars of context)")
        response = await self.complete(context)
        logger.debug(f"Extraction response: {response!r}")
        return response

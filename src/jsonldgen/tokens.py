"""Input-token estimation and output-token ceilings.

Pure business logic: no I/O beyond a warning log when the input leaves less
than ``MIN_OUTPUT_TOKENS`` of room in the context window.
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from collections.abc import Sequence

    from jsonldgen.models.payload import Message
    from jsonldgen.models.provider import ModelConfig

log = structlog.get_logger()

CHARS_PER_TOKEN = 3.5
MESSAGE_OVERHEAD_CHARS = 10
SAFETY_BUFFER = 2000
MIN_OUTPUT_TOKENS = 1000


def estimate_tokens(messages: Sequence[Message], chars_per_token: float = CHARS_PER_TOKEN) -> int:
    """Estimate the prompt size in tokens.

    Deliberately pessimistic: JSON and markup tokenise denser than prose.
    """
    total_chars = sum(len(message.content) + MESSAGE_OVERHEAD_CHARS for message in messages)
    return math.ceil(total_chars / chars_per_token)


def safe_max_tokens(
    messages: Sequence[Message],
    requested: int,
    model_config: ModelConfig,
) -> int:
    """Return an output-token ceiling that keeps input + output inside the window.

    Never exceeds ``requested`` or the model's ``max_output``. When the input
    is so large that fewer than ``MIN_OUTPUT_TOKENS`` remain, returns
    ``MIN_OUTPUT_TOKENS`` anyway and accepts a possibly truncated response.
    """
    input_tokens = estimate_tokens(messages, model_config.chars_per_token)
    available = model_config.context_window - input_tokens - model_config.safety_buffer

    if available < MIN_OUTPUT_TOKENS:
        log.warning(
            "token_budget_exhausted",
            model=model_config.name,
            input_tokens=input_tokens,
            available=available,
            granted=min(MIN_OUTPUT_TOKENS, requested),
        )
        return min(MIN_OUTPUT_TOKENS, requested)

    return min(requested, model_config.max_output, available)

from __future__ import annotations

from jsonldgen.providers.base import ProviderSupport, extract_error_message
from jsonldgen.providers.deepseek import DeepSeekProvider

__all__ = [
    "DeepSeekProvider",
    "ProviderSupport",
    "extract_error_message",
]

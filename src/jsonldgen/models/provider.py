from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, ConfigDict, model_validator

from jsonldgen.errors import ErrorCode
from jsonldgen.tokens import CHARS_PER_TOKEN, SAFETY_BUFFER

if TYPE_CHECKING:
    from jsonldgen.errors import ProviderError


class ModelConfig(BaseModel):
    """Context-window limits for one model of one provider."""

    model_config = ConfigDict(frozen=True)

    name: str
    context_window: int  # Total tokens (input + output)
    max_output: int  # Hard output limit of the model
    max_content_chars: int  # Page content characters sent in Direct mode
    chars_per_token: float = CHARS_PER_TOKEN  # Tokenizer heuristic for this model family
    safety_buffer: int = SAFETY_BUFFER  # Tokens held back from the output budget

    @model_validator(mode="after")
    def check_limits(self) -> ModelConfig:
        if self.max_output > self.context_window:
            raise ValueError(
                f"max_output ({self.max_output}) exceeds context_window ({self.context_window})"
            )
        if self.chars_per_token <= 0:
            raise ValueError("chars_per_token must be positive")
        return self


class SettingsField(BaseModel):
    """One provider-contributed settings field, for host settings screens."""

    key: str
    label: str
    type: Literal["password", "text"] = "text"
    description: str = ""
    required: bool = False
    default: str | None = None


@dataclass
class TransportResponse:
    """Result of one outbound request made through the transport collaborator."""

    success: bool
    body: str | None = None
    status_code: int = 0
    headers: dict[str, str] = field(default_factory=dict)
    error: str | None = None


@dataclass
class GenerationResult:
    """Outcome of one generation attempt. Failures are values, never raised."""

    success: bool
    schema: str = ""
    status_code: int = 0
    error: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    error_code: ErrorCode | None = None
    cached: bool = False
    fingerprint: str = ""
    generated_at: datetime | None = None
    retry_after: int | None = None

    @classmethod
    def failure(
        cls,
        code: ErrorCode,
        message: str,
        *,
        status_code: int = 0,
        headers: dict[str, str] | None = None,
        retry_after: int | None = None,
    ) -> GenerationResult:
        return cls(
            success=False,
            status_code=status_code,
            error=message,
            headers=headers or {},
            error_code=code,
            retry_after=retry_after,
        )

    @classmethod
    def from_error(cls, exc: ProviderError) -> GenerationResult:
        return cls.failure(
            exc.code,
            exc.message,
            status_code=exc.status_code,
            headers=exc.headers,
            retry_after=exc.retry_after,
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["generated_at"] = self.generated_at.isoformat() if self.generated_at else None
        return data


@dataclass
class ConnectionResult:
    success: bool
    message: str = ""
    error: str = ""

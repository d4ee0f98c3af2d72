"""Domain models for text generation."""

from dataclasses import dataclass, field

from bytebuddy.domain.chat import Citation


@dataclass(frozen=True)
class GenerationResult:
    """Raw output of one generation call."""

    text: str
    citations: list[Citation] = field(default_factory=list)

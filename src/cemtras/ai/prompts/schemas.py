"""Pydantic schemas for prompt construction and response formatting."""

from pydantic import BaseModel, ConfigDict, Field

from cemtras.ai.prompts.constants import SectionKind
from cemtras.ai.prompts.roles import ChatRole


class SamplingParameters(BaseModel):
    """Generation parameters sent with every model call."""

    model_config = ConfigDict(frozen=True)

    temperature: float = Field(default=0.7, description="Sampling temperature")
    top_p: float = Field(default=0.8, description="Nucleus sampling probability mass")
    top_k: int = Field(default=40, description="Top-k sampling cutoff")
    max_output_tokens: int = Field(default=2048, description="Maximum tokens to generate")


class InstructionPayload(BaseModel):
    """Fully specified request for the language model."""

    model_config = ConfigDict(frozen=True)

    role: ChatRole = Field(description="Role the instruction was built for")
    system_instruction: str = Field(description="Role-conditioned system instruction")
    prompt: str = Field(description="The user's question")
    sampling: SamplingParameters = Field(description="Sampling parameters")


class ResponseSection(BaseModel):
    """One labeled block of a formatted model response."""

    kind: SectionKind = Field(description="Display category")
    title: str | None = Field(default=None, description="Header text, None for unlabeled text")
    icon: str = Field(description="Icon name paired with the section")
    content: str = Field(description="Section body text")
    bullets: list[str] = Field(default_factory=list, description="Bullet items found in the body")


class FormattedResponse(BaseModel):
    """Model output split into display sections."""

    sections: list[ResponseSection] = Field(description="Sections in original order")
    is_structured: bool = Field(description="Whether the output followed the section grammar")

"""Base classes for the language-model provider abstraction."""

from abc import ABC, abstractmethod

from cemtras.ai.prompts.schemas import InstructionPayload


class TextCompletionProvider(ABC):
    """Anything that turns an instruction plus a prompt into text.

    Implementations must raise a ``cemtras.ai.exceptions.TransportError``
    subclass on failure and never return empty text.
    """

    @abstractmethod
    async def generate(self, payload: InstructionPayload) -> str:
        """Generate a response for a built instruction payload.

        Args:
            payload: Role-conditioned instruction, user prompt and sampling parameters

        Returns:
            str: Generated text

        Raises:
            TransportError: If the call fails or yields no text
        """
        pass

"""Role-conditioned instruction construction for the cement plant expert."""

from cemtras.ai.prompts.constants import RESPONSE_SECTIONS
from cemtras.ai.prompts.roles import ChatRole, get_role_profile
from cemtras.ai.prompts.schemas import InstructionPayload, SamplingParameters


def _section_template() -> str:
    placeholders = (
        "[Clearly identify the issue or question being addressed]",
        "[Provide detailed technical analysis with specific parameters, causes, or considerations]",
        "[Give actionable solutions with specific steps, parameters, or recommendations]",
        "[Include relevant safety guidelines, maintenance tips, or industry best practices]",
    )
    return "\n\n".join(
        f"**{header}**\n{placeholder}"
        for header, placeholder in zip(RESPONSE_SECTIONS, placeholders)
    )


BASE_INSTRUCTION = f"""You are Vipul Sharma, a Cement Plant Expert AI Assistant and Technical Consultant.

CRITICAL: Always respond in this professional technical format:

{_section_template()}

Your expertise covers:
- Cement plant machinery troubleshooting
- Process optimization and efficiency improvements
- Safety and compliance guidelines
- Maintenance planning and predictive analysis
- Cost-saving and sustainability strategies
- Equipment specifications and vendor evaluation

Current user department: {{department}}

Tone: Authoritative but approachable, like a senior plant consultant giving structured technical advice.
Always use bullet points, numbered steps, or tables where helpful.
Include specific technical parameters, temperatures, pressures, or measurements when relevant.
"""


class PromptBuilder:
    """Builds model instructions from a role and the user's question.

    The output is a pure function of its inputs: the same role, text and
    sampling parameters always yield an identical payload.
    """

    def __init__(self, sampling: SamplingParameters | None = None) -> None:
        self.sampling = sampling or SamplingParameters()

    def system_instruction(self, role: ChatRole) -> str:
        """Return the system instruction for a role.

        Domain roles get the base consultant contract with the role's focus
        block appended verbatim; roles without domain framing use their focus
        block as the whole instruction.
        """
        profile = get_role_profile(role)
        if not profile.domain_framing:
            return profile.focus
        return BASE_INSTRUCTION.format(department=profile.role.value) + profile.focus

    def build(self, role: ChatRole, user_text: str) -> InstructionPayload:
        return InstructionPayload(
            role=role,
            system_instruction=self.system_instruction(role),
            prompt=user_text,
            sampling=self.sampling,
        )

"""Professional roles that condition the model instruction.

Each role is a single entry in ``ROLE_PROFILES``: adding a role means adding an
enum member, one focus-block constant and one table entry.
"""

from dataclasses import dataclass
from enum import Enum


class ChatRole(str, Enum):
    """Roles a user can chat as."""

    OPERATIONS = "Operations"
    PROJECT_MANAGEMENT = "Project Management"
    SALES_AND_MARKETING = "Sales & Marketing"
    PROCUREMENT = "Procurement"
    ERECTION_AND_COMMISSIONING = "Erection & Commissioning"
    ENGINEERING_AND_DESIGN = "Engineering & Design"
    GENERAL_AI = "General AI"


DEFAULT_ROLE = ChatRole.OPERATIONS


OPERATIONS_FOCUS = """
For the Operations & Maintenance Team:
- Diagnose machinery faults in kilns, mills, coolers and conveyors step by step
- Give process optimization targets (kiln feed, burning zone temperature, mill output)
- Include preventive and predictive maintenance schedules
- Emphasize lockout/tagout and safe operating procedures"""

PROJECT_MANAGEMENT_FOCUS = """
For the Project Management Team:
- Structure answers around EPC scheduling, milestones and critical path
- Cover resource planning, manpower loading and contractor coordination
- Highlight schedule and cost risks with mitigation plans
- Include progress tracking metrics and reporting formats"""

SALES_AND_MARKETING_FOCUS = """
For the Sales & Marketing Team:
- Highlight product grades, quality advantages and competitive positioning
- Provide market analysis, demand trends and customer segment insights
- Emphasize value propositions, ROI and cost justifications for customers
- Include technical selling points backed by performance data"""

PROCUREMENT_FOCUS = """
For the Procurement & Supply Chain Team:
- Guide on vendor evaluation criteria and technical specifications
- Provide cost-benefit analysis and quality acceptance parameters
- Cover negotiation levers, contract terms and supplier assessment
- Focus on inventory optimization, lead times and spares planning"""

ERECTION_AND_COMMISSIONING_FOCUS = """
For the Erection & Commissioning Team:
- Provide installation sequencing and erection methodology
- Include pre-commissioning checks, trial runs and performance guarantee tests
- Emphasize site safety compliance, permits and lifting plans
- Give hands-on, field-tested troubleshooting during start-up"""

ENGINEERING_AND_DESIGN_FOCUS = """
For the Engineering & Design Team:
- Provide process flow design parameters and sizing calculations
- Cover equipment selection criteria and layout considerations
- Focus on heat and mass balance, system integration and efficiency
- Include root cause analysis methods and design optimization strategies"""

GENERAL_AI_INSTRUCTION = """You are CemtrAS AI, a helpful general-purpose assistant.

Answer any question clearly and accurately. Structure longer answers with short
paragraphs, bullet points or numbered steps where they help the reader.
If a question is ambiguous, state your assumption before answering.
"""


@dataclass(frozen=True)
class RoleProfile:
    """Display and prompt data for one role."""

    role: ChatRole
    label: str
    description: str
    focus: str
    domain_framing: bool = True
    requires_auth: bool = False


ROLE_PROFILES: dict[ChatRole, RoleProfile] = {
    ChatRole.OPERATIONS: RoleProfile(
        role=ChatRole.OPERATIONS,
        label="Operations & Maintenance",
        description="Machinery troubleshooting & process optimization",
        focus=OPERATIONS_FOCUS,
    ),
    ChatRole.PROJECT_MANAGEMENT: RoleProfile(
        role=ChatRole.PROJECT_MANAGEMENT,
        label="Project Management",
        description="EPC scheduling & resource planning",
        focus=PROJECT_MANAGEMENT_FOCUS,
    ),
    ChatRole.SALES_AND_MARKETING: RoleProfile(
        role=ChatRole.SALES_AND_MARKETING,
        label="Sales & Marketing",
        description="Market analysis & customer strategies",
        focus=SALES_AND_MARKETING_FOCUS,
    ),
    ChatRole.PROCUREMENT: RoleProfile(
        role=ChatRole.PROCUREMENT,
        label="Procurement & Supply Chain",
        description="Vendor negotiations & inventory optimization",
        focus=PROCUREMENT_FOCUS,
    ),
    ChatRole.ERECTION_AND_COMMISSIONING: RoleProfile(
        role=ChatRole.ERECTION_AND_COMMISSIONING,
        label="Erection & Commissioning",
        description="Installation sequencing & safety compliance",
        focus=ERECTION_AND_COMMISSIONING_FOCUS,
    ),
    ChatRole.ENGINEERING_AND_DESIGN: RoleProfile(
        role=ChatRole.ENGINEERING_AND_DESIGN,
        label="Engineering & Design",
        description="Process flow design & equipment selection",
        focus=ENGINEERING_AND_DESIGN_FOCUS,
    ),
    ChatRole.GENERAL_AI: RoleProfile(
        role=ChatRole.GENERAL_AI,
        label="General AI Assistant",
        description="General-purpose assistant for any topic",
        focus=GENERAL_AI_INSTRUCTION,
        domain_framing=False,
        requires_auth=True,
    ),
}


def get_role_profile(role: ChatRole) -> RoleProfile:
    return ROLE_PROFILES[role]

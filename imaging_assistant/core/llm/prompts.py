"""
Prompt Templates

Fixed templates for image analysis, imaging chat and the connection check.
Placeholders are `{name}` tokens, filled in a single regex pass: values are
inserted as-is and never scanned again, so a question that itself contains
`{clinical_context}` stays literal.

The analysis disclaimer is part of the template text, not a slot, and the
rendered analysis prompt always ends with it.
"""
from dataclasses import dataclass
from typing import FrozenSet, Optional
import re

_PLACEHOLDER = re.compile(r"\{([a-z_]+)\}")

DISCLAIMER_TEXT = (
    "⚠️ DISCLAIMER: This AI analysis is for educational and assistance purposes only. "
    "It is not a substitute for professional medical diagnosis by qualified healthcare providers. "
    "Always consult with licensed medical professionals for accurate diagnosis and treatment decisions."
)

DEFAULT_QUESTION = "Please analyze this medical image"
DEFAULT_CLINICAL_CONTEXT = "No specific clinical context provided"

CONNECTION_ACK_PHRASE = "connection successful"
CONNECTION_CHECK_PROMPT = 'Respond with "Connection successful" if you can read this message.'


@dataclass(frozen=True)
class PromptTemplate:
    """A named template with `{slot}` placeholders."""
    name: str
    text: str

    @property
    def placeholders(self) -> FrozenSet[str]:
        return frozenset(_PLACEHOLDER.findall(self.text))

    def render(self, **values: str) -> str:
        """
        Substitute every placeholder.

        Raises:
            KeyError: if a placeholder has no value
        """
        missing = self.placeholders - values.keys()
        if missing:
            raise KeyError(f"Template '{self.name}' missing values for: {sorted(missing)}")
        return _PLACEHOLDER.sub(lambda m: values[m.group(1)], self.text)


MEDICAL_ANALYSIS_TEMPLATE = PromptTemplate(
    name="medical_analysis",
    text=(
        "You are a specialized Medical Imaging AI Assistant. "
        "Analyze the provided medical imaging context and provide:\n"
        "\n"
        "1. **Clinical Findings**: Detailed description of visible anatomical structures "
        "and potential abnormalities\n"
        "2. **Differential Diagnosis**: Possible conditions based on imaging findings\n"
        "3. **Recommendations**: Next steps for further evaluation or treatment\n"
        "4. **Urgency Level**: Low, Medium, or High priority for clinical review\n"
        "\n"
        "Context: {clinical_context}\n"
        "Question: {question}\n"
        "\n"
        "IMPORTANT: Always include this disclaimer:\n"
        + DISCLAIMER_TEXT
    ),
)

MEDICAL_CHAT_TEMPLATE = PromptTemplate(
    name="medical_chat",
    text=(
        "You are a Medical Imaging Specialist AI. Provide accurate, educational information "
        "about medical imaging techniques, interpretations, and related healthcare topics.\n"
        "\n"
        "Guidelines:\n"
        "- Be precise and evidence-based\n"
        "- Explain medical concepts clearly\n"
        "- Include appropriate disclaimers\n"
        "- Focus on imaging modalities (X-ray, CT, MRI, Ultrasound, etc.)\n"
        "- Discuss common findings and their significance\n"
        "- Remember to include an educational disclaimer\n"
        "\n"
        "User question: {message}"
    ),
)


def build_analysis_prompt(question: Optional[str] = None, clinical_context: Optional[str] = None) -> str:
    """Render the four-section analysis prompt, filling defaults for empty slots."""
    return MEDICAL_ANALYSIS_TEMPLATE.render(
        question=question or DEFAULT_QUESTION,
        clinical_context=clinical_context or DEFAULT_CLINICAL_CONTEXT,
    )


def build_chat_prompt(message: str) -> str:
    """Wrap a chat message in the imaging-specialist preamble."""
    return MEDICAL_CHAT_TEMPLATE.render(message=message)

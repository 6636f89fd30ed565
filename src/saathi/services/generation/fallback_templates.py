"""
Fallback Reply Templates

Deterministic replies keyed by InterventionStrategy, used whenever the
response generator fails, times out or returns output that does not
decode.

SAFETY CRITICAL: Crisis templates always carry professional contacts
when the turn produced a crisis event.

CLINICAL_VALIDATION_REQUIRED: Wording needs clinical and language
review for every supported language.
"""

from typing import Sequence

from saathi.domain.enums import InterventionStrategy, LanguagePreference
from saathi.domain.models import ProfessionalContact

# Guidance handed to the generator alongside each directive
STRATEGY_GUIDELINES: dict[InterventionStrategy, str] = {
    InterventionStrategy.VALIDATION:
        "Acknowledge their feelings and normalize their experience. Show understanding.",
    InterventionStrategy.COGNITIVE_RESTRUCTURING:
        "Help identify negative thought patterns and suggest balanced perspectives.",
    InterventionStrategy.MINDFULNESS:
        "Suggest grounding techniques and present-moment awareness practices.",
    InterventionStrategy.CRISIS_INTERVENTION:
        "Prioritize safety. Be direct but compassionate. Provide immediate resources.",
    InterventionStrategy.BEHAVIORAL_ACTIVATION:
        "Encourage small, manageable activities that can improve mood.",
    InterventionStrategy.PSYCHOEDUCATION:
        "Provide helpful information about mental health in an accessible way.",
}


FALLBACK_RESPONSES: dict[InterventionStrategy, str] = {
    InterventionStrategy.VALIDATION:
        "Thank you for sharing this with me. What you're feeling makes sense, "
        "and I'm here to listen.",
    InterventionStrategy.COGNITIVE_RESTRUCTURING:
        "It sounds like a lot is weighing on you. Let's look at one thought at a time "
        "and see if there's a kinder way to see it.",
    InterventionStrategy.MINDFULNESS:
        "Let's slow down together. Try a slow breath in for four counts, "
        "and out for six.",
    InterventionStrategy.CRISIS_INTERVENTION:
        "I'm really glad you told me. Your safety matters most right now, "
        "and you don't have to go through this alone.",
    InterventionStrategy.BEHAVIORAL_ACTIVATION:
        "When things feel heavy, one small step can help. Is there something gentle "
        "you could do for yourself today?",
    InterventionStrategy.PSYCHOEDUCATION:
        "What you're experiencing is something many people go through, "
        "and there are ways to feel better.",
}

FALLBACK_RESPONSES_HINDI: dict[InterventionStrategy, str] = {
    InterventionStrategy.VALIDATION:
        "आपने यह बताया, इसके लिए धन्यवाद। आप जो महसूस कर रहे हैं वह समझ में आता है, "
        "मैं आपकी बात सुन रहा हूँ।",
    InterventionStrategy.COGNITIVE_RESTRUCTURING:
        "लगता है आप पर बहुत बोझ है। चलिए एक-एक विचार को धीरे से देखते हैं।",
    InterventionStrategy.MINDFULNESS:
        "चलिए साथ में थोड़ा रुकते हैं। चार गिनती तक साँस लीजिए, छह गिनती तक छोड़िए।",
    InterventionStrategy.CRISIS_INTERVENTION:
        "मुझे खुशी है कि आपने मुझे बताया। अभी आपकी सुरक्षा सबसे ज़रूरी है, "
        "आप अकेले नहीं हैं।",
    InterventionStrategy.BEHAVIORAL_ACTIVATION:
        "जब मन भारी हो, तो एक छोटा कदम मदद कर सकता है। आज अपने लिए कुछ छोटा सा करें?",
    InterventionStrategy.PSYCHOEDUCATION:
        "आप जो अनुभव कर रहे हैं, वह कई लोग अनुभव करते हैं, और बेहतर महसूस करने के रास्ते हैं।",
}

DEFAULT_FALLBACK = "I'm here with you."


def format_contacts(contacts: Sequence[ProfessionalContact], limit: int = 3) -> str:
    """One line per contact: ``name: contact``."""
    return "\n".join(f"{c.name}: {c.contact}" for c in list(contacts)[:limit])


def get_fallback_response(
    strategy: InterventionStrategy,
    language: LanguagePreference = LanguagePreference.ENGLISH,
    contacts: Sequence[ProfessionalContact] = (),
) -> str:
    """
    Get the fallback reply for a strategy.

    Args:
        strategy: Strategy of the turn's directive
        language: Reply language; mixed uses the English template
        contacts: Professional contacts from the turn's crisis event

    Returns:
        Static fallback reply
    """
    table = FALLBACK_RESPONSES_HINDI if language == LanguagePreference.HINDI else FALLBACK_RESPONSES
    text = table.get(strategy, DEFAULT_FALLBACK)

    if contacts:
        header = "अभी इनसे संपर्क करें:" if language == LanguagePreference.HINDI else "Please reach out now:"
        text = f"{text}\n\n{header}\n{format_contacts(contacts)}"
    return text


def get_strategy_guidelines(strategy: InterventionStrategy) -> str:
    return STRATEGY_GUIDELINES.get(strategy, STRATEGY_GUIDELINES[InterventionStrategy.VALIDATION])

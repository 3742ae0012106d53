from typing import Dict, List, Optional

DISCLAIMER_TEXT = (
    "Disclaimer: VeriHow uses AI to analyze information. Results are probabilistic and may vary. "
    "This report should be used as a reference tool, not absolute legal or factual proof. "
    "Always cross-reference with primary sources."
)

SUPPORTED_LANGUAGES: List[str] = [
    "English", "Hindi", "Bengali", "Telugu", "Marathi", "Tamil", "Urdu", "Gujarati",
    "Kannada", "Odia", "Malayalam", "Punjabi", "Assamese", "Maithili", "Santali",
    "Kashmiri", "Nepali", "Konkani", "Sindhi", "Dogri", "Manipuri", "Bodo", "Sanskrit",
]

SAMPLE_TEXTS: List[Dict[str, str]] = [
    {
        "label": "Suspicious Health (English)",
        "text": (
            "Doctors are hiding this one weird trick! Drinking 5 gallons of lemon water daily cures "
            "all known diseases instantly and reverses aging by 20 years. Big Pharma hates this!"
        ),
    },
    {
        "label": "Fake News (Hindi)",
        "text": (
            "ब्रेकिंग न्यूज़: सरकार ने कल से सभी 500 रुपये के नोटों को बंद करने का ऐलान किया है। "
            "अब सिर्फ 2000 के नोट चलेंगे। आरबीआई ने अभी-अभी पुष्टि की है।"
        ),
    },
    {
        "label": "Historical Fact",
        "text": (
            "The Apollo 11 mission successfully landed humans on the Moon on July 20, 1969. "
            "Neil Armstrong and Buzz Aldrin were the first two humans to walk on the lunar surface."
        ),
    },
]

PROGRESS_STEPS: Dict[str, List[str]] = {
    "FACT_CHECK_TEXT": [
        "Initializing Hybrid Investigation Protocol...",
        "Aggregating global news sources...",
        "Performing deep logic stress-tests...",
        "Triangulating primary evidence...",
        "Synthesizing comprehensive verdict...",
    ],
    "FACT_CHECK_WITH_IMAGE": [
        "Extracting visual vectors...",
        "Cross-referencing media with news reports...",
        "Analyzing physical & logical consistency...",
        "Verifying geolocation & timestamps...",
        "Synthesizing forensic verdict...",
    ],
    "AI_DETECTION": [
        "Initializing forensic engine...",
        "Mapping noise distribution...",
        "Scanning for diffusion artifacts...",
        "Analyzing lighting physics...",
        "Calculating probability score...",
    ],
}


def resolve_language(value: str) -> Optional[str]:
    """Case-insensitive lookup in SUPPORTED_LANGUAGES."""
    token = (value or "").strip().lower()
    for language in SUPPORTED_LANGUAGES:
        if language.lower() == token:
            return language
    return None

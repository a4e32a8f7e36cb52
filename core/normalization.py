import re
from typing import Optional

# Harakat, sukun, shadda, hamza above/below and the small Quranic annotation marks.
# Superscript alef (U+0670) is not here: it is an alef form and handled below.
_DIACRITICS = re.compile(r'[\u0610-\u061A\u064B-\u065F\u06D6-\u06DC\u06DF-\u06E8\u06EA-\u06ED]')

# Alef with madda / hamza above / hamza below, alef wasla, superscript alef → bare alef
_ALEF_VARIANTS = re.compile(r'[\u0622\u0623\u0625\u0671\u0670]')
# Hamza on waw / on ya are dropped; ASR output rarely agrees on them
_HAMZA_SEATS = re.compile(r'[\u0624\u0626]')
_WHITESPACE = re.compile(r'\s+')


def normalize_arabic(text: Optional[str]) -> str:
    """
    Canonicalize Arabic/Quranic text for comparison.
    Order matters: diacritics, alef forms, alef maksura → ya, teh marbuta → heh,
    tatweel, hamza seats, then whitespace and case. Total over any input; idempotent.
    """
    if not text:
        return ""

    text = _DIACRITICS.sub('', text)
    text = _ALEF_VARIANTS.sub('\u0627', text)
    # Alef maksura → ya
    text = text.replace('\u0649', '\u064A')
    # Teh marbuta → heh
    text = text.replace('\u0629', '\u0647')
    # Tatweel
    text = text.replace('\u0640', '')
    text = _HAMZA_SEATS.sub('', text)
    text = _WHITESPACE.sub(' ', text)

    return text.strip().lower()

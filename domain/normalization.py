"""Domain normalization — pure functions, zero external dependencies.

Only stdlib imports allowed.
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

_CURRENCY = re.compile(r"\s*(FCFA|F\s*CFA|XOF|F)\s*$", re.IGNORECASE)
_SPACES = re.compile(r"[\s  ]+")
_LEGAL_SUFFIXES = re.compile(
    r"\b(SA|SARL|SAS|SASU|SUARL|GIE|EURL|SNC)\b\.?",
    re.IGNORECASE,
)


def parse_montant(text):
    """Parse an FCFA amount typed by a user: "150 000 FCFA" -> Decimal("150000").

    Accepts space/nbsp thousands separators and a comma decimal separator.
    Returns None for empty or unparseable input.
    """
    if text is None:
        return None
    if isinstance(text, Decimal):
        return text
    raw = _CURRENCY.sub("", str(text))
    raw = _SPACES.sub("", raw).replace(",", ".")
    if not raw:
        return None
    try:
        return Decimal(raw)
    except InvalidOperation:
        return None


def format_montant(montant):
    """Format an amount for display: Decimal("150000") -> "150 000 FCFA"."""
    if montant is None:
        return "0 FCFA"
    montant = Decimal(montant).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    entier, _, centimes = f"{abs(montant):.2f}".partition(".")
    texte = f"{int(entier):,}".replace(",", " ")
    if centimes != "00":
        texte += "," + centimes
    if montant < 0:
        texte = "-" + texte
    return f"{texte} FCFA"


def normalize_name(name):
    """Normalize a contrevenant name: strip legal suffixes, collapse whitespace, uppercase."""
    result = _LEGAL_SUFFIXES.sub("", name)
    return " ".join(result.split()).strip().upper()

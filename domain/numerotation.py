"""Document numbering — pure functions, zero external dependencies.

Numbers restart every month:
    affaires        YYMM00001
    encaissements   YYMMR00001
    mandats         YYMMM0001

Only stdlib and domain imports allowed.
"""

from domain.errors import NumberingExhausted


def _yymm(jour):
    return jour.strftime("%y%m")


def prefixe_affaire(jour):
    return _yymm(jour)


def prefixe_encaissement(jour):
    return _yymm(jour) + "R"


def prefixe_mandat(jour):
    return _yymm(jour) + "M"


def prochain_numero(dernier, prefixe, largeur):
    """Return the number following *dernier* within *prefixe*.

    A missing last number, one from another month, or a malformed one
    restarts the sequence at 1.
    """
    premier = prefixe + "1".zfill(largeur)
    if not dernier or not dernier.startswith(prefixe):
        return premier
    suffixe = dernier[len(prefixe):]
    if len(suffixe) != largeur or not suffixe.isdigit():
        return premier
    sequence = int(suffixe) + 1
    if sequence >= 10 ** largeur:
        raise NumberingExhausted(
            f"Limite de numérotation atteinte pour {prefixe} ({10 ** largeur - 1})"
        )
    return prefixe + str(sequence).zfill(largeur)


def prochain_numero_affaire(dernier, jour):
    return prochain_numero(dernier, prefixe_affaire(jour), 5)


def prochain_numero_encaissement(dernier, jour):
    return prochain_numero(dernier, prefixe_encaissement(jour), 5)


def prochain_numero_mandat(dernier, jour):
    return prochain_numero(dernier, prefixe_mandat(jour), 4)

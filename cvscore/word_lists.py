"""Static word lists used by the section checkers.

Verb sets hold lower-cased first words of bullet points. A bullet whose first
word is in neither set is treated as strong by the experience checker.
"""

import re

from .models import Locale, normalize_locale

STRONG_VERBS_EN = frozenset(
    {
        "accelerated", "achieved", "acquired", "analyzed", "architected", "automated",
        "boosted", "built", "championed", "coached", "consolidated", "created",
        "cut", "decreased", "defined", "delivered", "deployed", "designed",
        "developed", "devised", "directed", "doubled", "drove", "eliminated",
        "engineered", "established", "expanded", "founded", "generated", "grew",
        "headed", "implemented", "improved", "increased", "initiated", "introduced",
        "launched", "led", "managed", "maximized", "mentored", "migrated",
        "modernized", "negotiated", "optimized", "orchestrated", "overhauled", "pioneered",
        "reduced", "redesigned", "refactored", "resolved", "restructured", "revamped",
        "saved", "scaled", "secured", "shipped", "simplified", "spearheaded",
        "standardized", "streamlined", "strengthened", "tripled", "transformed", "won",
    }
)

WEAK_VERBS_EN = frozenset(
    {
        "assisted", "attempted", "contributed", "did", "dealt", "got",
        "handled", "helped", "involved", "made", "participated", "responsible",
        "supported", "tried", "used", "was", "were", "worked",
    }
)

STRONG_VERBS_PT = frozenset(
    {
        # primeira pessoa do pretérito
        "aumentei", "automatizei", "conduzi", "construí", "coordenei", "criei",
        "desenvolvi", "dirigi", "eliminei", "entreguei", "escalei", "estruturei",
        "fundei", "gerenciei", "idealizei", "implantei", "implementei", "lancei",
        "liderei", "migrei", "modernizei", "negociei", "otimizei", "padronizei",
        "projetei", "reduzi", "reestruturei", "refatorei", "resolvi", "simplifiquei",
        "transformei",
        # terceira pessoa do pretérito
        "aumentou", "automatizou", "conduziu", "construiu", "coordenou", "criou",
        "desenvolveu", "entregou", "gerenciou", "implantou", "implementou", "lançou",
        "liderou", "otimizou", "projetou", "reduziu", "transformou",
        # infinitivo
        "aumentar", "automatizar", "construir", "coordenar", "criar", "desenvolver",
        "gerenciar", "implementar", "liderar", "otimizar", "projetar", "reduzir",
    }
)

WEAK_VERBS_PT = frozenset(
    {
        "ajudei", "ajudou", "apoiei", "apoiou", "auxiliei", "auxiliou",
        "colaborei", "colaborou", "estive", "fiz", "fui", "participei",
        "participou", "responsável", "tentei", "trabalhei", "trabalhou", "usei",
        "utilizei",
    }
)

_VERBS: dict[Locale, tuple[frozenset[str], frozenset[str]]] = {
    "en": (STRONG_VERBS_EN, WEAK_VERBS_EN),
    "pt": (STRONG_VERBS_PT, WEAK_VERBS_PT),
}

PRONOUN_PATTERNS: dict[Locale, re.Pattern[str]] = {
    "en": re.compile(r"\b(I|me|my|mine|myself|we|us|our|ours|ourselves)\b", re.IGNORECASE),
    "pt": re.compile(r"\b(eu|meu|minha|meus|minhas|me|nos|nosso|nossa|nossos|nossas)\b", re.IGNORECASE),
}


def action_verbs(locale: str) -> tuple[frozenset[str], frozenset[str]]:
    """Return the (strong, weak) verb sets for *locale*."""
    return _VERBS[normalize_locale(locale)]


def pronoun_pattern(locale: str) -> re.Pattern[str]:
    """Return the whole-word first-person pronoun pattern for *locale*."""
    return PRONOUN_PATTERNS[normalize_locale(locale)]

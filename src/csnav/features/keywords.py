"""Gherkin keywords per locale.

Order within each table matters: the first keyword a line starts with wins.
Locales covered: English, Portuguese, French, Spanish, German, Italian,
Japanese, Korean, Russian and Ukrainian.
"""

from typing import Optional, Sequence

FEATURE_KEYWORDS = (
    "Feature:",
    "Funcionalidade:",
    "Característica:",
    "Caracteristica:",
    "Fonctionnalité:",
    "Función:",
    "Funcion:",
    "Funktionalität:",
    "Funzionalità:",
    "機能:",
    "기능:",
    "Функция:",
    "Функціонал:",
)

SCENARIO_KEYWORDS = (
    "Scenario:",
    "Cenário:",
    "Cenario:",
    "Exemplo:",
    "Scénario:",
    "Escenario:",
    "Szenario:",
    "Scenario:",
    "シナリオ:",
    "시나리오:",
    "Сценарий:",
    "Сценарій:",
)

# Checked before SCENARIO_KEYWORDS
SCENARIO_OUTLINE_KEYWORDS = (
    "Scenario Outline:",
    "Scenario Template:",
    "Esquema do Cenário:",
    "Esquema do Cenario:",
    "Delineação do Cenário:",
    "Esquema del escenario:",
    "Plan du Scénario:",
    "Szenariovorlage:",
    "Schema dello scenario:",
    "シナリオアウトライン:",
    "시나리오 개요:",
    "Структура сценария:",
    "Структура сценарію:",
)


def match_keyword(line: str, keywords: Sequence[str]) -> Optional[str]:
    """First keyword that ``line`` starts with, compared case-insensitively."""
    for keyword in keywords:
        if line[: len(keyword)].casefold() == keyword.casefold():
            return keyword
    return None

"""BDD feature file scanning."""

from .keywords import FEATURE_KEYWORDS, SCENARIO_KEYWORDS, SCENARIO_OUTLINE_KEYWORDS, match_keyword
from .scanner import FeatureScanner, parse_feature

__all__ = [
    "FEATURE_KEYWORDS",
    "SCENARIO_KEYWORDS",
    "SCENARIO_OUTLINE_KEYWORDS",
    "FeatureScanner",
    "match_keyword",
    "parse_feature",
]

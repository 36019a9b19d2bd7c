"""Scan BDD feature files for features and scenarios."""

import logging
from pathlib import Path
from typing import List, Optional

from ..config import Config
from ..errors import SymbolNotFoundError
from ..models import FeatureInfo, FeatureScenariosResult, FeatureSummary, ScenarioInfo
from ..workspace.discovery import FileDiscovery
from .keywords import FEATURE_KEYWORDS, SCENARIO_KEYWORDS, SCENARIO_OUTLINE_KEYWORDS, match_keyword

logger = logging.getLogger(__name__)


def parse_feature(text: str, file: str) -> Optional[FeatureInfo]:
    """Feature name and scenarios of one file's text, or None when it has no feature line.

    Scenario outlines and plain scenarios are both reported as scenarios,
    at the 1-based line of their keyword. A later feature line replaces
    the name of an earlier one.
    """
    feature_name = None
    scenarios: List[ScenarioInfo] = []

    for number, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()

        keyword = match_keyword(line, FEATURE_KEYWORDS)
        if keyword:
            feature_name = line[len(keyword):].strip()
            continue

        keyword = match_keyword(line, SCENARIO_OUTLINE_KEYWORDS) or match_keyword(line, SCENARIO_KEYWORDS)
        if keyword:
            scenarios.append(ScenarioInfo(line=number, name=line[len(keyword):].strip()))

    if feature_name is None:
        return None
    return FeatureInfo(file=file, name=feature_name, scenarios=scenarios)


class FeatureScanner:
    """Collects features from every feature file under a directory."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        self.discovery = FileDiscovery(self.config)

    def scan(self, path: str) -> FeatureScenariosResult:
        """Scan ``path`` recursively.

        Raises:
            SymbolNotFoundError: If ``path`` is not a directory.
        """
        root = Path(path)
        if not root.is_dir():
            raise SymbolNotFoundError(f"Directory not found: {path}", query=path)

        features: List[FeatureInfo] = []
        for file_path in self.discovery.find_files(root, [self.config.feature_extension]):
            try:
                text = file_path.read_text(encoding="utf-8-sig", errors="replace")
            except OSError as exc:
                logger.debug("Skipping unreadable feature file %s: %s", file_path, exc)
                continue
            relative = file_path.relative_to(root.resolve()).as_posix()
            feature = parse_feature(text, relative)
            if feature is None:
                logger.debug("No feature line in %s", file_path)
                continue
            features.append(feature)

        logger.info("Scanned %d features under %s", len(features), path)
        return FeatureScenariosResult(
            path=path,
            features=features,
            summary=FeatureSummary(
                total_features=len(features),
                total_scenarios=sum(len(feature.scenarios) for feature in features),
            ),
        )

"""Tests for feature file scanning."""

import pytest

from csnav.config import Config
from csnav.errors import SymbolNotFoundError
from csnav.features import (
    FEATURE_KEYWORDS,
    SCENARIO_KEYWORDS,
    SCENARIO_OUTLINE_KEYWORDS,
    FeatureScanner,
    match_keyword,
    parse_feature,
)


@pytest.fixture
def features_dir(sample_solution):
    return sample_solution.parent / "SampleProject" / "Features"


class TestParseFeature:
    """Keyword recognition within one file."""

    def test_english_feature(self):
        text = "Feature: Login\n\n  Scenario: Valid user\n    Given a user\n  Scenario: Locked user\n"

        feature = parse_feature(text, "login.feature")

        assert feature.name == "Login"
        assert feature.file == "login.feature"
        assert [(s.line, s.name) for s in feature.scenarios] == [(3, "Valid user"), (5, "Locked user")]

    def test_outline_reported_once(self):
        """An outline line is a scenario, named without the outline keyword."""
        feature = parse_feature("Feature: Math\nScenario Outline: Add <a>\n", "math.feature")

        assert [(s.line, s.name) for s in feature.scenarios] == [(2, "Add <a>")]

    def test_no_feature_line(self):
        assert parse_feature("Scenario: orphan\n", "orphan.feature") is None

    def test_keywords_case_insensitive(self):
        feature = parse_feature("feature: lower\nSCENARIO: upper\n", "case.feature")

        assert feature.name == "lower"
        assert [s.name for s in feature.scenarios] == ["upper"]

    def test_japanese_keywords(self):
        feature = parse_feature("機能: 電卓\n  シナリオアウトライン: 足し算\n  シナリオ: 引き算\n", "calc.feature")

        assert feature.name == "電卓"
        assert [(s.line, s.name) for s in feature.scenarios] == [(2, "足し算"), (3, "引き算")]

    def test_russian_keywords(self):
        feature = parse_feature("Функция: Вход\nСтруктура сценария: Пароль\nСценарий: Выход\n", "ru.feature")

        assert feature.name == "Вход"
        assert [s.name for s in feature.scenarios] == ["Пароль", "Выход"]

    def test_later_feature_line_renames(self):
        feature = parse_feature("Feature: First\nScenario: A\nFeature: Second\n", "two.feature")

        assert feature.name == "Second"
        assert len(feature.scenarios) == 1


class TestKeywordTables:
    """Locale keyword tables."""

    def test_every_keyword_ends_with_colon(self):
        for keyword in FEATURE_KEYWORDS + SCENARIO_KEYWORDS + SCENARIO_OUTLINE_KEYWORDS:
            assert keyword.endswith(":")

    def test_first_match_wins(self):
        assert match_keyword("Cenário: x", SCENARIO_KEYWORDS) == "Cenário:"
        assert match_keyword("Given something", SCENARIO_KEYWORDS) is None

    def test_outline_not_a_plain_scenario(self):
        assert match_keyword("Scenario Outline: x", SCENARIO_KEYWORDS) is None
        assert match_keyword("Esquema do Cenário: x", SCENARIO_OUTLINE_KEYWORDS) == "Esquema do Cenário:"


class TestFeatureScanner:
    """Directory scans."""

    def test_scan_directory(self, features_dir):
        result = FeatureScanner(Config()).scan(str(features_dir))

        assert [(f.file, f.name) for f in result.features] == [
            ("Calculator.feature", "Calculator"),
            ("pt/Usuario.feature", "Cadastro de usuário"),
        ]
        assert [(s.line, s.name) for s in result.features[0].scenarios] == [
            (4, "Add two numbers"),
            (9, "Subtract numbers"),
        ]
        assert [(s.line, s.name) for s in result.features[1].scenarios] == [
            (4, "Criar usuário"),
            (7, "Remover usuário"),
        ]
        assert result.summary.total_features == 2
        assert result.summary.total_scenarios == 4
        assert result.path == str(features_dir)

    def test_custom_extension(self, tmp_path):
        (tmp_path / "spec.story").write_text("Feature: Story\nScenario: One\n", encoding="utf-8")
        (tmp_path / "other.feature").write_text("Feature: Skipped\n", encoding="utf-8")

        result = FeatureScanner(Config(feature_extension=".story")).scan(str(tmp_path))

        assert [f.name for f in result.features] == ["Story"]

    def test_ignored_directories_skipped(self, tmp_path):
        (tmp_path / "bin").mkdir()
        (tmp_path / "bin" / "copy.feature").write_text("Feature: Copy\n", encoding="utf-8")
        (tmp_path / "real.feature").write_text("Feature: Real\n", encoding="utf-8")

        result = FeatureScanner().scan(str(tmp_path))

        assert [f.file for f in result.features] == ["real.feature"]

    def test_symlinked_feature_outside_root(self, tmp_path):
        """A linked feature file is reported under its link path."""
        (tmp_path / "shared").mkdir()
        (tmp_path / "shared" / "Shared.feature").write_text("Feature: Shared\nScenario: Reused\n", encoding="utf-8")
        features = tmp_path / "features"
        features.mkdir()
        (features / "Shared.feature").symlink_to(tmp_path / "shared" / "Shared.feature")

        result = FeatureScanner().scan(str(features))

        assert [(f.file, f.name) for f in result.features] == [("Shared.feature", "Shared")]
        assert result.summary.total_scenarios == 1

    def test_empty_directory(self, tmp_path):
        result = FeatureScanner().scan(str(tmp_path))

        assert result.features == []
        assert result.summary.total_scenarios == 0

    def test_missing_directory(self, tmp_path):
        with pytest.raises(SymbolNotFoundError, match="Directory not found"):
            FeatureScanner().scan(str(tmp_path / "nope"))

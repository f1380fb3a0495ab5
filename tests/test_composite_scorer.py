"""Tests for park_linking — composite scorer module."""

import os
import tempfile

import pytest
import yaml

from park_linking.algorithms.composite_scorer import (
    DEFAULT_CONFIG_PATH,
    LinkerConfig,
    overall_score,
    score_pair,
)
from park_linking.algorithms.records import CandidateRecord, SourceRecord


# ---- overall_score ----------------------------------------------------------


class TestOverallScore:
    def test_both_perfect(self):
        assert overall_score(1.0, 1.0) == 1.0

    def test_both_zero(self):
        assert overall_score(0.0, 0.0) == 0.0

    def test_name_weighted_higher_than_location(self):
        assert overall_score(1.0, 0.0) > overall_score(0.0, 1.0)

    def test_default_weights(self):
        assert overall_score(1.0, 0.0) == pytest.approx(0.7)
        assert overall_score(0.5, 1.0) == pytest.approx(0.65)

    def test_custom_weights(self):
        weights = {"name": 0.6, "location": 0.4}
        assert overall_score(1.0, 0.0, weights=weights) == pytest.approx(0.6)
        assert overall_score(1.0, 1.0, weights=weights) == 1.0

    def test_unnormalised_weights_are_averaged(self):
        weights = {"name": 3.0, "location": 1.0}
        assert overall_score(1.0, 0.0, weights=weights) == pytest.approx(0.75)
        assert overall_score(1.0, 1.0, weights=weights) == 1.0

    @pytest.mark.parametrize(
        "weights", [{"name": 0, "location": 0}, {"name": 0.5, "location": -0.5}]
    )
    def test_non_positive_weight_sum_rejected(self, weights):
        with pytest.raises(ValueError):
            overall_score(1.0, 1.0, weights=weights)


# ---- LinkerConfig -----------------------------------------------------------


class TestLinkerConfig:
    def test_defaults(self):
        config = LinkerConfig()
        assert config.weights == {"name": 0.7, "location": 0.3}
        assert config.threshold == 0.8
        assert config.max_distance_km is None
        assert config.match_method == "name_location_similarity"
        assert config.unique_candidates is False

    def test_rejects_location_outweighing_name(self):
        with pytest.raises(ValueError):
            LinkerConfig(weights={"name": 0.3, "location": 0.7})

    def test_rejects_equal_weights(self):
        with pytest.raises(ValueError):
            LinkerConfig(weights={"name": 0.5, "location": 0.5})

    def test_rejects_missing_weight(self):
        with pytest.raises(ValueError):
            LinkerConfig(weights={"name": 1.0})

    def test_rejects_threshold_out_of_range(self):
        with pytest.raises(ValueError):
            LinkerConfig(threshold=1.5)

    def test_rejects_non_positive_decay(self):
        with pytest.raises(ValueError):
            LinkerConfig(decay_km=0.0)

    def test_with_overrides_ignores_none(self):
        config = LinkerConfig()
        assert config.with_overrides(threshold=None) is config

    def test_with_overrides_applies_values(self):
        config = LinkerConfig().with_overrides(threshold=0.9, max_distance_km=25.0)
        assert config.threshold == 0.9
        assert config.max_distance_km == 25.0

    def test_with_overrides_validates(self):
        with pytest.raises(ValueError):
            LinkerConfig().with_overrides(threshold=-0.1)

    def test_from_yaml(self):
        data = {
            "match_method": "custom_method",
            "weights": {"name": 0.8, "location": 0.2},
            "thresholds": {"min_confidence": 0.75},
            "geo_proximity": {"decay_km": 5.0, "max_distance_km": 40.0},
            "assignment": {"unique_candidates": True},
        }
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            yaml.dump(data, f)
            path = f.name

        try:
            config = LinkerConfig.from_yaml(path)
            assert config.weights == {"name": 0.8, "location": 0.2}
            assert config.threshold == 0.75
            assert config.decay_km == 5.0
            assert config.max_distance_km == 40.0
            assert config.match_method == "custom_method"
            assert config.unique_candidates is True
        finally:
            os.unlink(path)

    def test_from_yaml_partial_falls_back_to_defaults(self):
        with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
            yaml.dump({"thresholds": {"min_confidence": 0.6}}, f)
            path = f.name

        try:
            config = LinkerConfig.from_yaml(path)
            assert config.threshold == 0.6
            assert config.weights == {"name": 0.7, "location": 0.3}
            assert config.decay_km == 10.0
        finally:
            os.unlink(path)

    def test_from_project_yaml(self):
        """The bundled link_rules.yaml should load and match the defaults."""
        config = LinkerConfig.from_yaml(DEFAULT_CONFIG_PATH)
        assert sum(config.weights.values()) == pytest.approx(1.0)
        assert config == LinkerConfig()

    def test_default_uses_bundled_rules(self):
        assert LinkerConfig.default() == LinkerConfig()


# ---- score_pair -------------------------------------------------------------


def _source(name="Yellowstone National Park", lat=44.428, lon=-110.5885):
    return SourceRecord.from_dict({"id": "1", "full_name": name, "latitude": lat, "longitude": lon})


def _candidate(name="Yellowstone National Park", lat=44.428, lon=-110.5885):
    return CandidateRecord.from_dict(
        {"id": "w1", "wikidata_id": "Q180402", "label": name, "latitude": lat, "longitude": lon}
    )


class TestScorePair:
    def test_identical_records(self):
        pair = score_pair(_source(), _candidate())
        assert pair.name_similarity == 1.0
        assert pair.location_similarity == 1.0
        assert pair.distance_km == 0.0
        assert pair.score == 1.0

    def test_missing_location_caps_score_at_name_weight(self):
        pair = score_pair(_source(lat=None, lon=None), _candidate())
        assert pair.distance_km is None
        assert pair.location_similarity == 0.0
        assert pair.score == pytest.approx(0.7)

    def test_far_apart_same_name(self):
        pair = score_pair(_source(), _candidate(lat=37.8488, lon=-119.5572))
        assert pair.distance_km > 900.0
        assert pair.score == pytest.approx(0.7, abs=0.01)

    def test_uses_config_decay(self):
        tight = score_pair(_source(), _candidate(lat=44.47), LinkerConfig(decay_km=1.0))
        loose = score_pair(_source(), _candidate(lat=44.47), LinkerConfig(decay_km=100.0))
        assert tight.location_similarity < loose.location_similarity

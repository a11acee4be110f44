"""Tests for weighting profiles and the profile registry."""

import json
import math

import pytest
from pydantic import ValidationError

from streetflow.domain.errors import ConfigurationError, UnknownProfileError
from streetflow.graph.profiles import ProfileRegistry, WeightProfile


class TestWeightProfile:
    def test_listed_class_uses_its_factor(self):
        profile = WeightProfile(name="p", cost_factors={"residential": 1.5})
        assert profile.cost_factor({"highway": "residential"}) == 1.5

    def test_unlisted_class_without_default_is_excluded(self):
        profile = WeightProfile(name="p", cost_factors={"residential": 1.5})
        assert profile.cost_factor({"highway": "primary"}) is None
        assert profile.cost_factor({}) is None

    def test_unlisted_class_uses_default(self):
        profile = WeightProfile(name="p", default_factor=3.0)
        assert profile.cost_factor({"highway": "primary"}) == 3.0

    def test_excluded_wins_over_default(self):
        profile = WeightProfile(name="p", default_factor=1.0, excluded={"motorway"})
        assert profile.cost_factor({"highway": "motorway"}) is None

    def test_custom_tag_key(self):
        profile = WeightProfile(name="p", tag_key="surface", cost_factors={"gravel": 2.0})
        assert profile.cost_factor({"surface": "gravel", "highway": "x"}) == 2.0

    @pytest.mark.parametrize("factor", [0.0, -1.0, math.inf, math.nan])
    def test_non_positive_or_non_finite_factor_is_rejected(self, factor):
        with pytest.raises(ValidationError):
            WeightProfile(name="p", cost_factors={"residential": factor})
        with pytest.raises(ValidationError):
            WeightProfile(name="p", default_factor=factor)

    def test_directions(self):
        profile = WeightProfile(name="p", respect_oneway=True)
        assert profile.directions({"oneway": "yes"}) == (True, False)
        assert profile.directions({"oneway": "-1"}) == (False, True)
        assert profile.directions({"oneway": "no"}) == (True, True)
        relaxed = WeightProfile(name="q", respect_oneway=False)
        assert relaxed.directions({"oneway": "yes"}) == (True, True)


class TestProfileRegistry:
    def test_builtin_profiles(self):
        registry = ProfileRegistry()
        assert registry.names == ("bicycle", "car", "foot")
        assert "foot" in registry

    def test_every_builtin_factor_is_positive(self):
        registry = ProfileRegistry()
        for name in registry.names:
            profile = registry.get(name)
            assert all(f > 0 for f in profile.cost_factors.values())

    def test_unknown_profile(self):
        with pytest.raises(UnknownProfileError) as exc:
            ProfileRegistry().get("jetpack")
        assert exc.value.profile == "jetpack"
        assert exc.value.available == ("bicycle", "car", "foot")

    def test_load_file_mapping(self, tmp_path):
        path = tmp_path / "profiles.json"
        path.write_text(
            json.dumps(
                {"wheelchair": {"cost_factors": {"footway": 1.0}, "excluded": ["steps"]}}
            ),
            encoding="utf-8",
        )
        registry = ProfileRegistry()
        registry.load_file(path)

        profile = registry.get("wheelchair")
        assert profile.cost_factor({"highway": "footway"}) == 1.0
        assert profile.cost_factor({"highway": "steps"}) is None

    def test_load_file_list(self, tmp_path):
        path = tmp_path / "profiles.json"
        path.write_text(json.dumps([{"name": "bus", "default_factor": 1.2}]), encoding="utf-8")
        registry = ProfileRegistry()
        registry.load_file(path)
        assert registry.get("bus").default_factor == 1.2

    def test_load_file_invalid_factor(self, tmp_path):
        path = tmp_path / "profiles.json"
        path.write_text(json.dumps([{"name": "bad", "default_factor": -1}]), encoding="utf-8")
        with pytest.raises(ConfigurationError) as exc:
            ProfileRegistry().load_file(path)
        assert exc.value.setting_name == "profiles_file"

    def test_load_file_missing(self, tmp_path):
        with pytest.raises(ConfigurationError):
            ProfileRegistry().load_file(tmp_path / "missing.json")

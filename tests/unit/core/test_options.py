"""Tests for CropOptions and BoostRegion."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from salcrop.config import Settings
from salcrop.core import BoostRegion, CropOptions, HeuristicTuning
from salcrop.exceptions import InvalidBoostRegionError, InvalidConfigError
from salcrop.geometry import Region


class TestBoostRegion:
    """Tests for the BoostRegion model."""

    def test_defaults_to_unit_weight(self) -> None:
        boost = BoostRegion(x=1, y=2, width=3, height=4)
        assert boost.weight == 1.0
        assert boost.region == Region(x=1, y=2, width=3, height=4)

    @pytest.mark.parametrize("weight", [0.0, -1.0])
    def test_rejects_non_positive_weight(self, weight: float) -> None:
        with pytest.raises(ValidationError):
            BoostRegion(x=0, y=0, width=1, height=1, weight=weight)

    def test_rejects_empty_rectangle(self) -> None:
        with pytest.raises(ValidationError):
            BoostRegion(x=0, y=0, width=0, height=1)


class TestCropOptionsDefaults:
    """Tests for CropOptions default values."""

    def test_defaults(self) -> None:
        options = CropOptions()
        assert options.working_resolution_limit == 256
        assert options.edge_weight == 0.2
        assert options.skin_weight == 1.8
        assert options.saturation_weight == 0.3
        assert options.boost_weight == 2.0
        assert options.outside_penalty_weight == 0.5
        assert options.rule_of_thirds_weight == 1.0
        assert options.crop_edge_weight == 1.0
        assert options.centre_weight == 0.0
        assert options.detail_coupling is False
        assert options.min_scale == 0.5
        assert options.max_scale == 1.0
        assert options.scale_step == 0.1
        assert options.position_step == 8
        assert options.top_k == 1
        assert options.aspect_tolerance == 0.01
        assert options.max_workers == 1
        assert options.boost_regions == ()
        assert options.tuning == HeuristicTuning()

    def test_is_frozen(self) -> None:
        options = CropOptions()
        with pytest.raises(ValidationError):
            options.top_k = 5  # type: ignore[misc]

    def test_boost_regions_accept_dicts(self) -> None:
        options = CropOptions(
            boost_regions=[{"x": 0, "y": 0, "width": 5, "height": 5, "weight": 3.0}]
        )
        assert options.boost_regions == (BoostRegion(x=0, y=0, width=5, height=5, weight=3.0),)


class TestCropOptionsBuild:
    """Tests for CropOptions.build error mapping."""

    def test_build_valid(self) -> None:
        assert CropOptions.build(top_k=3).top_k == 3

    def test_negative_scale_step_is_invalid_config(self) -> None:
        with pytest.raises(InvalidConfigError) as exc_info:
            CropOptions.build(scale_step=-0.1)
        assert "scale_step" in str(exc_info.value)
        assert exc_info.value.errors

    def test_inverted_scale_range_is_invalid_config(self) -> None:
        with pytest.raises(InvalidConfigError, match="Invalid crop options"):
            CropOptions.build(min_scale=0.9, max_scale=0.5)

    def test_working_resolution_floor(self) -> None:
        with pytest.raises(InvalidConfigError, match="working_resolution_limit"):
            CropOptions.build(working_resolution_limit=4)

    def test_edge_radius_out_of_range_is_invalid_config(self) -> None:
        with pytest.raises(InvalidConfigError, match="tuning.edge_radius"):
            CropOptions.build(tuning={"edge_radius": 1.5})

    def test_negative_weight_is_invalid_config(self) -> None:
        with pytest.raises(InvalidConfigError, match="skin_weight"):
            CropOptions.build(skin_weight=-1.0)

    def test_bad_boost_region_is_invalid_boost_region(self) -> None:
        bad = {"x": 0, "y": 0, "width": 10, "height": 10, "weight": -1.0}
        with pytest.raises(InvalidBoostRegionError) as exc_info:
            CropOptions.build(boost_regions=[bad])
        assert exc_info.value.region == bad

    def test_boost_error_wins_over_config_error(self) -> None:
        bad = {"x": -1, "y": 0, "width": 10, "height": 10}
        with pytest.raises(InvalidBoostRegionError):
            CropOptions.build(top_k=0, boost_regions=[bad])


class TestCropOptionsFromSettings:
    """Tests for CropOptions.from_settings."""

    def test_seeds_from_settings(self) -> None:
        settings = Settings(
            _env_file=None,  # type: ignore[call-arg]
            WORKING_RESOLUTION_LIMIT=128,
            TOP_K=4,
            MAX_WORKERS=2,
        )
        options = CropOptions.from_settings(settings)
        assert options.working_resolution_limit == 128
        assert options.top_k == 4
        assert options.max_workers == 2

    def test_overrides_win(self, test_settings: Settings) -> None:
        options = CropOptions.from_settings(test_settings, top_k=7, min_scale=0.3)
        assert options.top_k == 7
        assert options.min_scale == 0.3

    def test_invalid_settings_raise_invalid_config(self) -> None:
        settings = Settings(_env_file=None, TOP_K=0)  # type: ignore[call-arg]
        with pytest.raises(InvalidConfigError, match="top_k"):
            CropOptions.from_settings(settings)

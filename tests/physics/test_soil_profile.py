"""
Tests for texture parameters, the texture table and soil profile geometry.
"""
import numpy as np
import pandas as pd
import pytest

from soilflow.core.exceptions import ConfigurationError
from soilflow.physics.soil_profile import SoilProfile
from soilflow.physics.texture import (
    TextureParameters,
    available_textures,
    get_texture,
    load_texture_table,
    normalize_texture_name,
)


class TestTextureTable:
    """Bundled Clapp & Hornberger table"""

    def test_table_contents(self):
        table = load_texture_table()

        assert len(table) == 11
        assert {"sand", "loamy_sand", "loam", "clay"} <= set(available_textures(table))

    def test_loamy_sand_row(self):
        texture = get_texture("loamy_sand")

        assert texture.k_sat == pytest.approx(1.563e-4)
        assert texture.theta_sat == pytest.approx(0.410)
        assert texture.b == pytest.approx(4.38)
        assert texture.psi_sat == pytest.approx(0.090)
        assert texture.theta_dry == pytest.approx(0.055)

    @pytest.mark.parametrize("name", ["Loamy Sand", "loamy-sand", "  LOAMY_SAND "])
    def test_name_normalization(self, name):
        assert normalize_texture_name(name) == "loamy_sand"
        assert get_texture(name).name == "loamy_sand"

    def test_unknown_texture(self):
        with pytest.raises(ConfigurationError, match="Unknown texture"):
            get_texture("peat")

    def test_every_row_is_valid(self):
        for name in available_textures():
            texture = get_texture(name)
            assert texture.theta_dry < texture.theta_sat

    def test_custom_table(self, tmp_path):
        path = tmp_path / "textures.csv"
        pd.DataFrame(
            {
                "texture": ["Test Soil"],
                "psi_sat_m": [0.2],
                "theta_sat": [0.4],
                "k_sat_m_s": [1e-5],
                "b": [5.0],
                "theta_dry": [0.1],
            }
        ).to_csv(path, index=False)

        table = load_texture_table(path)
        assert get_texture("test_soil", table).k_sat == pytest.approx(1e-5)

    def test_table_missing_column(self, tmp_path):
        path = tmp_path / "broken.csv"
        pd.DataFrame({"texture": ["x"], "theta_sat": [0.4]}).to_csv(path, index=False)

        with pytest.raises(ConfigurationError, match="missing columns"):
            load_texture_table(path)

    def test_table_not_found(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_texture_table(tmp_path / "absent.csv")


class TestTextureParameters:
    """Validation of texture scalars"""

    def _params(self, **overrides):
        values = dict(name="t", k_sat=1e-5, theta_sat=0.4, b=5.0, psi_sat=0.2, theta_dry=0.1)
        values.update(overrides)
        return TextureParameters(**values)

    def test_valid(self):
        texture = self._params()
        assert texture.conductivity_exponent == pytest.approx(13.0)

    @pytest.mark.parametrize("field_name", ["k_sat", "theta_sat", "b", "psi_sat", "theta_dry"])
    def test_non_positive_rejected(self, field_name):
        with pytest.raises(ConfigurationError):
            self._params(**{field_name: 0.0})
        with pytest.raises(ConfigurationError):
            self._params(**{field_name: -1.0})

    def test_dry_above_saturation(self):
        with pytest.raises(ConfigurationError):
            self._params(theta_dry=0.4)

    def test_non_finite(self):
        with pytest.raises(ConfigurationError):
            self._params(k_sat=float("inf"))


class TestSoilProfile:
    """Column geometry"""

    def test_from_texture_name_defaults_dz(self):
        profile = SoilProfile.from_texture_name("loamy_sand", depth_m=2.0, n_layers=8)

        assert profile.layer_thickness_m == pytest.approx(0.25)
        assert profile.n_rows == 9

    def test_gravitational_potential(self):
        profile = SoilProfile.from_texture_name("loam", depth_m=1.0, n_layers=4)

        np.testing.assert_allclose(profile.layer_depths_m, [0, 0.25, 0.5, 0.75, 1.0])
        np.testing.assert_allclose(profile.gravitational_potential, [0, -0.25, -0.5, -0.75, -1.0])

    def test_inconsistent_geometry(self):
        texture = get_texture("loam")
        with pytest.raises(ConfigurationError, match="Inconsistent geometry"):
            SoilProfile(depth_m=2.0, n_layers=8, layer_thickness_m=0.2, texture=texture)

    @pytest.mark.parametrize("n_layers", [0, -2, 2.0])
    def test_invalid_layer_count(self, n_layers):
        texture = get_texture("loam")
        with pytest.raises(ConfigurationError):
            SoilProfile(depth_m=0.5, n_layers=n_layers, layer_thickness_m=0.25, texture=texture)

    def test_non_positive_thickness(self):
        texture = get_texture("loam")
        with pytest.raises(ConfigurationError):
            SoilProfile(depth_m=0.0, n_layers=1, layer_thickness_m=0.0, texture=texture)

    def test_describe(self):
        profile = SoilProfile.from_texture_name("clay", depth_m=1.0, n_layers=2)
        info = profile.describe()

        assert info["texture"] == "clay"
        assert info["n_layers"] == 2

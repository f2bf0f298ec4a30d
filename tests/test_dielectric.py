"""Unit tests for the dielectric (glass) material.

Tests cover:
- Attenuation is always white
- Fresnel-weighted choice between reflection and refraction
- Total internal reflection when leaving the medium at a grazing angle
- Parameter validation
"""

import numpy as np
import pytest
import taichi as ti


def _scatter_many(refractive_index, incident, normal, n=2000, seed=11):
    from tiletrace.materials.dielectric import scatter_dielectric, vec3

    did = ti.field(dtype=ti.i32, shape=n)
    attenuation = ti.Vector.field(3, dtype=ti.f32, shape=n)
    directions = ti.Vector.field(3, dtype=ti.f32, shape=n)

    @ti.kernel
    def test_kernel(
        ri: ti.f32,
        ix: ti.f32, iy: ti.f32, iz: ti.f32,
        nx: ti.f32, ny: ti.f32, nz: ti.f32,
        s: ti.i64,
    ):
        for _ in range(1):
            state = ti.cast(s, ti.u32)
            for i in range(n):
                d, a, out, state = scatter_dielectric(
                    ri, vec3(ix, iy, iz).normalized(), vec3(nx, ny, nz), state
                )
                did[i] = d
                attenuation[i] = a
                directions[i] = out

    test_kernel(refractive_index, *incident, *normal, seed)
    return did.to_numpy(), attenuation.to_numpy(), directions.to_numpy()


class TestDielectricScatter:
    """Tests for scatter_dielectric."""

    def test_always_scatters_white(self):
        did, attenuation, directions = _scatter_many(1.5, (0.3, -1.0, 0.2), (0.0, 1.0, 0.0))

        assert np.all(did == 1)
        np.testing.assert_allclose(attenuation, 1.0, atol=1e-6)
        np.testing.assert_allclose(np.linalg.norm(directions, axis=1), 1.0, atol=1e-5)

    def test_normal_incidence_mostly_refracts(self):
        """Entering glass head-on reflects with probability r0 = 0.04."""
        _, _, directions = _scatter_many(1.5, (0.0, 0.0, -1.0), (0.0, 0.0, 1.0), n=4000)

        refracted = directions[:, 2] < 0.0
        reflected = directions[:, 2] > 0.0
        assert np.all(refracted | reflected)
        # Refraction continues straight through
        np.testing.assert_allclose(
            directions[refracted], np.tile([0.0, 0.0, -1.0], (int(refracted.sum()), 1)), atol=1e-5
        )
        np.testing.assert_allclose(
            directions[reflected], np.tile([0.0, 0.0, 1.0], (int(reflected.sum()), 1)), atol=1e-5
        )
        assert 0.02 < reflected.mean() < 0.07

    def test_entering_refraction_bends_toward_normal(self):
        s = 0.5**0.5
        _, _, directions = _scatter_many(1.5, (s, -s, 0.0), (0.0, 1.0, 0.0))

        refracted = directions[directions[:, 1] < 0.0]
        assert len(refracted) > 0
        # sin(theta_t) = sin(theta_i) / 1.5
        np.testing.assert_allclose(refracted[:, 0], s / 1.5, atol=1e-4)

    def test_total_internal_reflection(self):
        """A grazing ray leaving the glass is always reflected back inside."""
        incident = np.array([1.0, 0.2, 0.0])
        _, _, directions = _scatter_many(1.5, tuple(incident), (0.0, 1.0, 0.0), n=500)

        inc = incident / np.linalg.norm(incident)
        expected = np.array([inc[0], -inc[1], 0.0])
        np.testing.assert_allclose(directions, np.tile(expected, (500, 1)), atol=1e-5)

    def test_index_one_passes_straight_through(self):
        """With eta = 1 refraction does not bend the ray."""
        s = 0.5**0.5
        _, _, directions = _scatter_many(1.0, (s, -s, 0.0), (0.0, 1.0, 0.0), n=200)

        refracted = directions[directions[:, 1] < 0.0]
        # Schlick reflectance at 45 degrees with eta = 1 is about 0.2%
        assert len(refracted) > 190
        np.testing.assert_allclose(refracted, np.tile([s, -s, 0.0], (len(refracted), 1)), atol=1e-5)


class TestCheckRefractiveIndex:
    """Tests for refractive index validation."""

    @pytest.mark.parametrize("ri", [1.0, 1.33, 1.5, 2.4, 0.5])
    def test_valid(self, ri):
        from tiletrace.materials.dielectric import check_refractive_index

        check_refractive_index(ri)

    @pytest.mark.parametrize("ri", [0.0, -1.5])
    def test_invalid(self, ri):
        from tiletrace.materials.dielectric import check_refractive_index

        with pytest.raises(ValueError):
            check_refractive_index(ri)

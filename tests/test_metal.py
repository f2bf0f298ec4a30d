"""Unit tests for the metal (specular) material."""

import math

import numpy as np
import pytest
import taichi as ti


def _scatter(albedo, fuzz, incident, normal, seed=7):
    from tiletrace.materials.metal import scatter_metal, vec3

    did = ti.field(dtype=ti.i32, shape=())
    attenuation = ti.field(dtype=ti.math.vec3, shape=())
    direction = ti.field(dtype=ti.math.vec3, shape=())

    @ti.kernel
    def test_kernel(
        ar: ti.f32, ag: ti.f32, ab: ti.f32, f: ti.f32,
        ix: ti.f32, iy: ti.f32, iz: ti.f32,
        nx: ti.f32, ny: ti.f32, nz: ti.f32,
        s: ti.i64,
    ):
        d, a, out, _ = scatter_metal(
            vec3(ar, ag, ab),
            f,
            vec3(ix, iy, iz).normalized(),
            vec3(nx, ny, nz),
            ti.cast(s, ti.u32),
        )
        did[None] = d
        attenuation[None] = a
        direction[None] = out

    test_kernel(*albedo, fuzz, *incident, *normal, seed)
    return did[None], np.array(attenuation[None].to_numpy()), np.array(direction[None].to_numpy())


class TestMetalScatter:
    """Tests for scatter_metal."""

    def test_perfect_mirror_reflection(self):
        """With fuzz 0, dot(incoming, n) = -dot(reflected, n)."""
        incident = (1.0, -2.0, 0.5)
        normal = (0.0, 1.0, 0.0)
        did, attenuation, reflected = _scatter((0.9, 0.8, 0.7), 0.0, incident, normal)

        assert did == 1
        np.testing.assert_allclose(attenuation, [0.9, 0.8, 0.7], atol=1e-6)

        inc = np.array(incident) / np.linalg.norm(incident)
        n = np.array(normal)
        assert abs(np.dot(inc, n) + np.dot(reflected, n)) < 1e-5
        # Tangential component is preserved
        np.testing.assert_allclose(reflected[[0, 2]], inc[[0, 2]], atol=1e-5)

    def test_mirror_at_45_degrees(self):
        _, _, reflected = _scatter((1.0, 1.0, 1.0), 0.0, (1.0, -1.0, 0.0), (0.0, 1.0, 0.0))
        s = 1.0 / math.sqrt(2.0)
        np.testing.assert_allclose(reflected, [s, s, 0.0], atol=1e-5)

    def test_ray_leaving_through_surface_is_absorbed(self):
        """A reflection that points below the surface is absorbed."""
        did, _, _ = _scatter((1.0, 1.0, 1.0), 0.0, (0.0, 1.0, 0.0), (0.0, 1.0, 0.0))
        assert did == 0

    def test_fuzz_perturbs_reflection(self):
        _, _, sharp = _scatter((1.0, 1.0, 1.0), 0.0, (0.0, -1.0, 0.0), (0.0, 1.0, 0.0), seed=3)
        _, _, fuzzy = _scatter((1.0, 1.0, 1.0), 0.5, (0.0, -1.0, 0.0), (0.0, 1.0, 0.0), seed=3)

        assert abs(np.linalg.norm(fuzzy) - 1.0) < 1e-5
        assert not np.allclose(sharp, fuzzy)


class TestCheckMetalParams:
    """Tests for metal parameter validation."""

    @pytest.mark.parametrize("fuzz", [0.0, 0.5, 1.0])
    def test_valid(self, fuzz):
        from tiletrace.materials.metal import check_metal_params

        check_metal_params((0.8, 0.8, 0.8), fuzz)

    @pytest.mark.parametrize(
        "albedo, fuzz",
        [((0.8, 0.8, 0.8), -0.1), ((0.8, 0.8, 0.8), 1.5), ((1.2, 0.8, 0.8), 0.1)],
    )
    def test_invalid(self, albedo, fuzz):
        from tiletrace.materials.metal import check_metal_params

        with pytest.raises(ValueError):
            check_metal_params(albedo, fuzz)

"""Unit tests for the Lambertian (diffuse) material."""

import numpy as np
import pytest
import taichi as ti


class TestLambertianScatter:
    """Tests for scatter_lambertian."""

    def test_always_scatters_with_albedo(self):
        from tiletrace.materials.lambertian import scatter_lambertian, vec3

        n = 512
        did = ti.field(dtype=ti.i32, shape=n)
        attenuation = ti.Vector.field(3, dtype=ti.f32, shape=n)
        directions = ti.Vector.field(3, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for _ in range(1):
                state = ti.cast(2024, ti.u32)
                for i in range(n):
                    d, a, direction, state = scatter_lambertian(
                        vec3(0.8, 0.3, 0.1), vec3(0.0, 1.0, 0.0), state
                    )
                    did[i] = d
                    attenuation[i] = a
                    directions[i] = direction

        test_kernel()
        assert np.all(did.to_numpy() == 1)
        np.testing.assert_allclose(attenuation.to_numpy(), np.tile([0.8, 0.3, 0.1], (n, 1)), atol=1e-6)

        dirs = directions.to_numpy()
        np.testing.assert_allclose(np.linalg.norm(dirs, axis=1), 1.0, atol=1e-5)
        # Scattered directions stay in the hemisphere of the normal
        assert dirs[:, 1].min() >= -1e-5
        # ...and are spread out
        assert dirs[:, 0].std() > 0.2
        assert dirs[:, 2].std() > 0.2

    def test_different_states_give_different_directions(self):
        from tiletrace.materials.lambertian import scatter_lambertian, vec3

        directions = ti.Vector.field(3, dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            for i in range(2):
                _, _, direction, _ = scatter_lambertian(
                    vec3(0.5, 0.5, 0.5), vec3(0.0, 0.0, 1.0), ti.cast(i * 7919 + 1, ti.u32)
                )
                directions[i] = direction

        test_kernel()
        d = directions.to_numpy()
        assert not np.allclose(d[0], d[1])


class TestCheckAlbedo:
    """Tests for albedo validation."""

    @pytest.mark.parametrize("albedo", [(0.0, 0.0, 0.0), (1.0, 1.0, 1.0), (0.8, 0.8, 0.0)])
    def test_valid(self, albedo):
        from tiletrace.materials.lambertian import check_albedo

        check_albedo(albedo)

    @pytest.mark.parametrize("albedo", [(1.1, 0.5, 0.5), (0.5, -0.1, 0.5), (0.5, 0.5)])
    def test_invalid(self, albedo):
        from tiletrace.materials.lambertian import check_albedo

        with pytest.raises(ValueError):
            check_albedo(albedo)

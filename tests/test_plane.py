"""Unit tests for infinite plane intersection."""

import taichi as ti


def _hit(origin, direction, normal, offset):
    from tiletrace.geometry.plane import Plane, hit_plane, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    point = ti.field(dtype=ti.math.vec3, shape=())
    hit_normal = ti.field(dtype=ti.math.vec3, shape=())

    @ti.kernel
    def test_kernel(
        ox: ti.f32, oy: ti.f32, oz: ti.f32,
        dx: ti.f32, dy: ti.f32, dz: ti.f32,
        nx: ti.f32, ny: ti.f32, nz: ti.f32,
        d: ti.f32,
    ):
        plane = Plane(normal=vec3(nx, ny, nz), offset=d)
        record = hit_plane(vec3(ox, oy, oz), vec3(dx, dy, dz), plane)
        hit[None] = record.hit
        t_val[None] = record.t
        point[None] = record.point
        hit_normal[None] = record.normal

    test_kernel(*origin, *direction, *normal, offset)
    return hit[None], t_val[None], point[None], hit_normal[None]


class TestPlaneIntersection:
    """Tests for ray-plane intersection."""

    def test_ray_down_hits_ground(self):
        """A ray pointing down hits the ground plane y = -1."""
        hit, t, p, n = _hit((0.0, 0.0, 0.0), (0.0, -1.0, 0.0), (0.0, 1.0, 0.0), -1.0)

        assert hit == 1
        assert abs(t - 1.0) < 1e-6
        assert abs(p[1] + 1.0) < 1e-6
        assert abs(n[1] - 1.0) < 1e-6

    def test_oblique_ray(self):
        s = 0.5**0.5
        hit, t, p, _ = _hit((0.0, 0.0, 0.0), (s, -s, 0.0), (0.0, 1.0, 0.0), -1.0)

        assert hit == 1
        assert abs(t - 2.0**0.5) < 1e-5
        assert abs(p[0] - 1.0) < 1e-5

    def test_parallel_ray_misses(self):
        hit, _, _, _ = _hit((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0), -1.0)
        assert hit == 0

    def test_plane_behind_ray_misses(self):
        hit, _, _, _ = _hit((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 1.0, 0.0), -1.0)
        assert hit == 0

    def test_hit_from_below_keeps_plane_normal(self):
        """The normal is never flipped toward the ray."""
        hit, _, _, n = _hit((0.0, -3.0, 0.0), (0.0, 1.0, 0.0), (0.0, 1.0, 0.0), -1.0)

        assert hit == 1
        assert abs(n[1] - 1.0) < 1e-6

    def test_origin_on_plane_does_not_self_hit(self):
        hit, _, _, _ = _hit((0.0, -1.0, 0.0), (0.0, -1.0, 0.0), (0.0, 1.0, 0.0), -1.0)
        assert hit == 0

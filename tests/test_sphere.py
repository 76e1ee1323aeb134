"""Unit tests for ray-sphere intersection.

Tests cover:
- Head-on hits at t = distance - radius
- Misses and spheres behind the ray
- Rays starting inside the sphere
- The shadow-acne tolerance
- Outward normals
"""

import pytest
import taichi as ti


def _intersect(origin, direction, centre, radius):
    from src.pathtracer.geometry.sphere import Sphere, intersect_sphere
    from src.pathtracer.core.vector import vec3

    hit = ti.field(dtype=ti.i32, shape=())
    t_out = ti.field(dtype=ti.f64, shape=())

    @ti.kernel
    def test_kernel(
        ox: ti.f64, oy: ti.f64, oz: ti.f64,
        dx: ti.f64, dy: ti.f64, dz: ti.f64,
        cx: ti.f64, cy: ti.f64, cz: ti.f64,
        r: ti.f64,
    ):
        sphere = Sphere(centre=vec3(cx, cy, cz), radius=r)
        did_hit, t = intersect_sphere(vec3(ox, oy, oz), vec3(dx, dy, dz), sphere)
        hit[None] = did_hit
        t_out[None] = t

    test_kernel(*origin, *direction, *centre, radius)
    return hit[None], t_out[None]


class TestSphereIntersection:
    """Tests for intersect_sphere."""

    def test_head_on_hit(self):
        """Test that a ray towards the centre hits at distance - radius."""
        hit, t = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -1.0), 0.5)
        assert hit == 1
        assert t == pytest.approx(0.5)

    def test_unnormalized_direction(self):
        """Test that t is measured in units of the direction length."""
        hit, t = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -2.0), (0.0, 0.0, -3.0), 1.0)
        assert hit == 1
        assert t == pytest.approx(1.0)

    def test_miss(self):
        """Test that a ray passing beside the sphere misses."""
        hit, _ = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (2.0, 0.0, -1.0), 0.5)
        assert hit == 0

    def test_sphere_behind_ray(self):
        """Test that a sphere behind the origin is not hit."""
        hit, _ = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, 5.0), 1.0)
        assert hit == 0

    def test_ray_inside_sphere_hits_far_side(self):
        """Test that a ray starting at the centre hits at t = radius."""
        hit, t = _intersect((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 0.0, 0.0), 2.0)
        assert hit == 1
        assert t == pytest.approx(2.0)

    def test_ray_on_surface_ignores_own_surface(self):
        """Test that a ray leaving the surface outward does not re-hit it."""
        hit, _ = _intersect((0.0, 0.0, -0.5), (0.0, 0.0, 1.0), (0.0, 0.0, -1.0), 0.5)
        assert hit == 0

    def test_ray_on_surface_going_inward_hits_far_side(self):
        """Test that a ray entering at the surface skips the near root."""
        hit, t = _intersect((0.0, 0.0, -0.5), (0.0, 0.0, -1.0), (0.0, 0.0, -1.0), 0.5)
        assert hit == 1
        assert t == pytest.approx(1.0)

    def test_hit_below_tolerance_is_ignored(self):
        """Test that a root closer than the acne tolerance is skipped."""
        from src.pathtracer.geometry.sphere import SHADOW_ACNE_TOLERANCE

        gap = SHADOW_ACNE_TOLERANCE / 2.0
        hit, t = _intersect(
            (0.0, 0.0, -0.5 + gap), (0.0, 0.0, -1.0), (0.0, 0.0, -1.0), 0.5
        )
        # Only the far root counts
        assert hit == 1
        assert t == pytest.approx(1.0 + gap)

    def test_tangent_ray(self):
        """Test that a ray grazing the sphere registers a hit."""
        hit, t = _intersect((0.0, 1.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, -4.0), 1.0)
        assert hit == 1
        assert t == pytest.approx(4.0)


class TestSphereNormal:
    """Tests for sphere_normal."""

    @pytest.mark.parametrize(
        "point, expected",
        [
            ((0.0, 0.0, -0.5), (0.0, 0.0, 1.0)),
            ((0.5, 0.0, -1.0), (1.0, 0.0, 0.0)),
            ((0.0, -0.5, -1.0), (0.0, -1.0, 0.0)),
        ],
    )
    def test_outward_unit_normal(self, point, expected):
        """Test that normals point away from the centre with unit length."""
        from src.pathtracer.core.vector import vec3
        from src.pathtracer.geometry.sphere import make_sphere, sphere_normal

        result = ti.field(dtype=vec3, shape=())

        @ti.kernel
        def test_kernel(px: ti.f64, py: ti.f64, pz: ti.f64):
            sphere = make_sphere(vec3(0.0, 0.0, -1.0), 0.5)
            result[None] = sphere_normal(sphere, vec3(px, py, pz))

        test_kernel(*point)
        assert tuple(result[None].to_numpy()) == pytest.approx(expected)

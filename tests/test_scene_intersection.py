"""Unit tests for scene-level intersection.

Tests cover:
- SceneHitRecord miss values
- Surface storage and clearing
- Nearest-hit selection across spheres and planes
- Insertion-order tie breaking
- Bounced rays not re-hitting the surface they left
"""

import pytest
import taichi as ti


def _query(origin, direction):
    """Intersect one ray with the scene and return the record as a dict."""
    from src.pathtracer.core.vector import vec3
    from src.pathtracer.scene.intersection import intersect_scene

    hit = ti.field(dtype=ti.i32, shape=())
    t_out = ti.field(dtype=ti.f64, shape=())
    point = ti.field(dtype=vec3, shape=())
    normal = ti.field(dtype=vec3, shape=())
    material_id = ti.field(dtype=ti.i32, shape=())
    surface_index = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(ox: ti.f64, oy: ti.f64, oz: ti.f64, dx: ti.f64, dy: ti.f64, dz: ti.f64):
        rec = intersect_scene(vec3(ox, oy, oz), vec3(dx, dy, dz))
        hit[None] = rec.hit
        t_out[None] = rec.t
        point[None] = rec.point
        normal[None] = rec.normal
        material_id[None] = rec.material_id
        surface_index[None] = rec.surface_index

    test_kernel(*origin, *direction)
    return {
        "hit": hit[None],
        "t": t_out[None],
        "point": tuple(point[None].to_numpy()),
        "normal": tuple(normal[None].to_numpy()),
        "material_id": material_id[None],
        "surface_index": surface_index[None],
    }


class TestSceneHitRecordBasics:
    """Tests for SceneHitRecord."""

    def test_miss_record(self):
        """Test that miss records have hit = 0 and material_id = -1."""
        from src.pathtracer.scene.intersection import _make_miss_record

        result = ti.field(dtype=ti.i32, shape=3)

        @ti.kernel
        def test_kernel():
            rec = _make_miss_record()
            result[0] = rec.hit
            result[1] = rec.material_id
            result[2] = rec.surface_index

        test_kernel()
        assert result[0] == 0
        assert result[1] == -1
        assert result[2] == -1

    def test_empty_scene_misses(self):
        """Test that every ray misses an empty scene."""
        rec = _query((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert rec["hit"] == 0
        assert rec["material_id"] == -1


class TestSurfaceStorage:
    """Tests for adding and clearing surfaces."""

    def test_rows_are_sequential(self):
        """Test that spheres and planes share one ordered table."""
        from src.pathtracer.scene.intersection import (
            SurfaceKind,
            add_plane,
            add_sphere,
            get_surface_count,
            surface_kinds,
        )

        assert get_surface_count() == 0
        assert add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0) == 0
        assert add_plane((0.0, 1.0, 0.0), -1.0, material_id=1) == 1
        assert add_sphere((1.0, 0.0, -1.0), 0.5, material_id=2) == 2
        assert get_surface_count() == 3
        assert surface_kinds[1] == int(SurfaceKind.PLANE)

    def test_clear_scene(self):
        """Test that clearing resets the table."""
        from src.pathtracer.scene.intersection import add_sphere, clear_scene, get_surface_count

        add_sphere((0.0, 0.0, -1.0), 0.5)
        clear_scene()
        assert get_surface_count() == 0
        assert _query((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))["hit"] == 0

    @pytest.mark.parametrize("radius", [0.0, -0.5])
    def test_non_positive_radius_rejected(self, radius):
        """Test that degenerate spheres are rejected."""
        from src.pathtracer.scene.intersection import add_sphere, get_surface_count

        with pytest.raises(ValueError, match="radius"):
            add_sphere((0.0, 0.0, -1.0), radius)
        assert get_surface_count() == 0

    @pytest.mark.parametrize(
        "unit_normal",
        [(0.0, 2.0, 0.0), (0.0, 0.0, 0.0), (1.0, 1.0, 0.0), (0.0, 1.0 + 1e-6, 0.0)],
    )
    def test_non_unit_plane_normal_rejected(self, unit_normal):
        """Test that plane normals must be unit length."""
        from src.pathtracer.scene.intersection import add_plane, get_surface_count

        with pytest.raises(ValueError, match="unit length"):
            add_plane(unit_normal, -1.0)
        assert get_surface_count() == 0

    def test_normalized_plane_normal_accepted(self):
        """Test that a normal normalized in floating point is accepted."""
        from src.pathtracer.scene.intersection import add_plane, get_surface_count

        k = 1.0 / 3.0**0.5
        add_plane((k, k, k), 0.0)
        assert get_surface_count() == 1


class TestNearestHit:
    """Tests for intersect_scene."""

    def test_single_sphere(self):
        """Test the classic sphere in front of the camera."""
        from src.pathtracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -1.0), 0.5, material_id=7)
        rec = _query((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(0.5)
        assert rec["point"] == pytest.approx((0.0, 0.0, -0.5))
        assert rec["normal"] == pytest.approx((0.0, 0.0, 1.0))
        assert rec["material_id"] == 7
        assert rec["surface_index"] == 0

    def test_nearer_surface_wins_regardless_of_order(self):
        """Test that the closest hit is returned even when added last."""
        from src.pathtracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -5.0), 0.5, material_id=0)
        add_sphere((0.0, 0.0, -2.0), 0.5, material_id=1)
        rec = _query((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert rec["material_id"] == 1
        assert rec["t"] == pytest.approx(1.5)

    def test_sphere_in_front_of_plane(self):
        """Test a sphere resting on the ground, viewed from above."""
        from src.pathtracer.scene.intersection import add_plane, add_sphere

        add_plane((0.0, 1.0, 0.0), -1.0, material_id=0)
        add_sphere((0.0, -0.5, 0.0), 0.5, material_id=1)

        rec = _query((0.0, 2.0, 0.0), (0.0, -1.0, 0.0))
        assert rec["material_id"] == 1
        assert rec["t"] == pytest.approx(2.0)

        beside = _query((3.0, 2.0, 0.0), (0.0, -1.0, 0.0))
        assert beside["material_id"] == 0
        assert beside["t"] == pytest.approx(3.0)
        assert beside["normal"] == pytest.approx((0.0, 1.0, 0.0))

    def test_equal_distance_keeps_first_added(self):
        """Test that of two surfaces at the same t, the earlier one wins."""
        from src.pathtracer.scene.intersection import add_plane, add_sphere

        # Sphere top and plane both at y = 0
        add_plane((0.0, 1.0, 0.0), 0.0, material_id=4)
        add_sphere((0.0, -1.0, 0.0), 1.0, material_id=5)

        rec = _query((0.0, 1.0, 0.0), (0.0, -1.0, 0.0))
        assert rec["t"] == pytest.approx(1.0)
        assert rec["material_id"] == 4
        assert rec["surface_index"] == 0

    def test_equal_distance_reversed_order(self):
        """Test the tie-break again with the insertion order swapped."""
        from src.pathtracer.scene.intersection import add_plane, add_sphere

        add_sphere((0.0, -1.0, 0.0), 1.0, material_id=5)
        add_plane((0.0, 1.0, 0.0), 0.0, material_id=4)

        rec = _query((0.0, 1.0, 0.0), (0.0, -1.0, 0.0))
        assert rec["material_id"] == 5
        assert rec["surface_index"] == 0


class TestShadowAcne:
    """Tests for rays leaving a surface."""

    def test_ray_leaving_sphere_surface(self):
        """Test that a ray starting on a sphere and going out misses it."""
        from src.pathtracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -1.0), 0.5, material_id=0)
        rec = _query((0.0, 0.0, -0.5), (0.3, 0.2, 1.0))
        assert rec["hit"] == 0

    def test_ray_leaving_plane(self):
        """Test that a ray starting on the ground does not hit it again."""
        from src.pathtracer.scene.intersection import add_plane

        add_plane((0.0, 1.0, 0.0), -1.0, material_id=0)
        rec = _query((0.5, -1.0, 0.5), (0.2, 1.0, 0.1))
        assert rec["hit"] == 0

    def test_ray_leaving_sphere_hits_neighbour(self):
        """Test that a bounced ray still finds other surfaces."""
        from src.pathtracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, 0.0), 0.5, material_id=0)
        add_sphere((2.0, 0.0, 0.0), 0.5, material_id=1)
        rec = _query((0.5, 0.0, 0.0), (1.0, 0.0, 0.0))
        assert rec["material_id"] == 1
        assert rec["t"] == pytest.approx(1.0)

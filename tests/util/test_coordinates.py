"""Tests for Rect."""

from __future__ import annotations

from tilecity.util.coordinates import Rect


class TestRect:
    """Tests for cell rectangles."""

    def test_exclusive_max(self) -> None:
        """x2/z2 lie one past the last covered cell."""
        r = Rect(2, 3, 4, 5)
        assert (r.x1, r.z1, r.x2, r.z2) == (2, 3, 6, 8)
        assert r.width == 4
        assert r.height == 5
        assert r.area == 20

    def test_from_bounds(self) -> None:
        assert Rect.from_bounds(1, 1, 4, 3) == Rect(1, 1, 3, 2)

    def test_bounding(self) -> None:
        r = Rect.bounding([(3, 1), (1, 4), (2, 2)])
        assert r == Rect.from_bounds(1, 1, 4, 5)

    def test_contains_point(self) -> None:
        r = Rect(0, 0, 3, 3)
        assert r.contains_point(0, 0)
        assert r.contains_point(2, 2)
        assert not r.contains_point(3, 0)
        assert not r.contains_point(-1, 1)

    def test_contains_rect(self) -> None:
        outer = Rect(0, 0, 10, 10)
        assert outer.contains_rect(Rect(2, 2, 3, 3))
        assert outer.contains_rect(outer)
        assert not outer.contains_rect(Rect(8, 8, 3, 3))

    def test_intersects_needs_shared_cell(self) -> None:
        """Touching edges do not count as overlap."""
        a = Rect(0, 0, 2, 2)
        assert a.intersects(Rect(1, 1, 2, 2))
        assert not a.intersects(Rect(2, 0, 2, 2))

    def test_shrink(self) -> None:
        assert Rect(0, 0, 10, 8).shrink(2) == Rect(2, 2, 6, 4)
        assert Rect(0, 0, 3, 3).shrink(2).is_empty()

    def test_cells_raster_order(self) -> None:
        """z outer, x inner."""
        assert list(Rect(1, 1, 2, 2).cells()) == [(1, 1), (2, 1), (1, 2), (2, 2)]

    def test_hashable(self) -> None:
        assert len({Rect(0, 0, 1, 1), Rect(0, 0, 1, 1), Rect(1, 0, 1, 1)}) == 2

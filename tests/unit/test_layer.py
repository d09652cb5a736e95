"""Unit tests for Layer scan ordering and deferred geometry."""

import pytest

from slmio.domain import (
    ContourGeometry,
    HatchGeometry,
    Layer,
    LayerGeometryType,
    PointsGeometry,
    ScanMode,
)


def make_mixed_layer():
    """Layer with interleaved contours, hatches and points."""
    layer = Layer(layer_id=1, z=40)
    layer.append_geometry(HatchGeometry(mid=1, bid=2, coords=[[0, 0], [1, 0]], extras={"i": 0}))
    layer.append_geometry(ContourGeometry(mid=1, bid=1, coords=[[0, 0], [1, 1]], extras={"i": 1}))
    layer.append_geometry(PointsGeometry(mid=1, bid=3, coords=[[5, 5]], extras={"i": 2}))
    layer.append_geometry(ContourGeometry(mid=1, bid=1, coords=[[2, 2], [3, 3]], extras={"i": 3}))
    layer.append_geometry(HatchGeometry(mid=1, bid=2, coords=[[0, 1], [1, 1]], extras={"i": 4}))
    return layer


def order_of(geometry):
    return [geom.extras["i"] for geom in geometry]


class TestScanOrdering:
    """Tests for Layer.get_geometry scan modes."""

    def test_default_keeps_insertion_order(self):
        """Test DEFAULT returns items exactly as appended."""
        layer = make_mixed_layer()
        assert order_of(layer.get_geometry()) == [0, 1, 2, 3, 4]
        assert order_of(layer.get_geometry(ScanMode.DEFAULT)) == [0, 1, 2, 3, 4]

    def test_contour_first(self):
        """Test contours come first, each group in insertion order."""
        layer = make_mixed_layer()
        assert order_of(layer.get_geometry(ScanMode.CONTOUR_FIRST)) == [1, 3, 0, 2, 4]

    def test_hatch_first(self):
        """Test hatches come first, each group in insertion order."""
        layer = make_mixed_layer()
        assert order_of(layer.get_geometry(ScanMode.HATCH_FIRST)) == [0, 4, 1, 2, 3]

    def test_scan_order_does_not_mutate_layer(self):
        """Test reordering returns a new list."""
        layer = make_mixed_layer()
        reordered = layer.get_geometry(ScanMode.CONTOUR_FIRST)
        reordered.clear()
        assert order_of(layer.geometry) == [0, 1, 2, 3, 4]

    def test_empty_layer(self):
        """Test every scan mode on an empty layer."""
        layer = Layer()
        for mode in ScanMode:
            assert layer.get_geometry(mode) == []


class TestGeometryFilters:
    """Tests for the per-type geometry accessors."""

    def test_filters(self):
        """Test each filter returns only its type, in order."""
        layer = make_mixed_layer()
        assert order_of(layer.get_contour_geometry()) == [1, 3]
        assert order_of(layer.get_hatch_geometry()) == [0, 4]
        assert order_of(layer.get_points_geometry()) == [2]

    def test_filters_partition_layer(self):
        """Test the three filters together cover every item."""
        layer = make_mixed_layer()
        total = (
            len(layer.get_contour_geometry())
            + len(layer.get_hatch_geometry())
            + len(layer.get_points_geometry())
        )
        assert total == len(layer)

    def test_append_does_not_validate_references(self):
        """Test that dangling mid/bid are accepted at append time."""
        layer = Layer()
        layer.append_geometry(ContourGeometry(mid=99, bid=99))
        assert len(layer) == 1

    def test_set_geometry_replaces(self):
        """Test set_geometry and the geometry setter replace the sequence."""
        layer = make_mixed_layer()
        layer.set_geometry([PointsGeometry()])
        assert [g.type for g in layer.geometry] == [LayerGeometryType.PNTS]

        layer.geometry = []
        assert len(layer) == 0

    def test_snapshot_round_trip(self):
        """Test layer serialization keeps order and variants."""
        layer = make_mixed_layer()
        restored = Layer.from_dict(layer.to_dict())
        assert restored.layer_id == 1
        assert restored.z == 40
        assert [g.type for g in restored.geometry] == [g.type for g in layer.geometry]


class TestDeferredLayer:
    """Tests for lazy layer hydration."""

    def _deferred(self, calls, position=128):
        def loader(layer):
            calls.append(layer.layer_id)
            return [
                ContourGeometry(mid=1, bid=1, coords=[[0, 0], [1, 0], [1, 1]]),
                HatchGeometry(mid=1, bid=2, coords=[[0, 0], [1, 1]]),
            ]

        layer = Layer(layer_id=3, z=120)
        layer.defer(position, loader)
        return layer

    def test_deferred_layer_not_loaded(self):
        """Test a deferred layer reports its state without loading."""
        calls = []
        layer = self._deferred(calls)
        assert not layer.is_loaded()
        assert layer.layer_file_position == 128
        assert "deferred" in repr(layer)
        assert calls == []

    def test_first_access_hydrates(self):
        """Test geometry access loads the layer exactly once."""
        calls = []
        layer = self._deferred(calls)

        assert len(layer.get_contour_geometry()) == 1
        assert layer.is_loaded()
        assert len(layer.get_geometry(ScanMode.HATCH_FIRST)) == 2
        assert len(layer) == 2
        assert calls == [3]

    def test_append_hydrates_before_appending(self):
        """Test appending to a deferred layer keeps the stored geometry."""
        calls = []
        layer = self._deferred(calls)
        layer.append_geometry(PointsGeometry(mid=1, bid=1))
        assert len(layer) == 3
        assert layer.geometry[-1].type == LayerGeometryType.PNTS
        assert calls == [3]

    def test_set_geometry_discards_deferred_read(self):
        """Test replacing geometry of a deferred layer never calls the loader."""
        calls = []
        layer = self._deferred(calls)
        layer.set_geometry([])
        assert layer.is_loaded()
        assert len(layer) == 0
        assert calls == []

    def test_load_is_idempotent(self):
        """Test explicit load on a loaded layer does nothing."""
        calls = []
        layer = self._deferred(calls)
        layer.load()
        layer.load()
        assert calls == [3]

    def test_loader_failure_keeps_layer_deferred(self):
        """Test a failed load can be retried."""
        attempts = []

        def loader(layer):
            attempts.append(layer.layer_id)
            if len(attempts) == 1:
                raise OSError("disk gone")
            return [PointsGeometry(mid=1, bid=1, coords=[[1, 1]])]

        layer = Layer(layer_id=7)
        layer.defer(64, loader)

        with pytest.raises(OSError, match="disk gone"):
            layer.load()
        assert not layer.is_loaded()

        assert len(layer.get_points_geometry()) == 1
        assert attempts == [7, 7]

    def test_undeferred_layer_has_no_position(self):
        """Test in-memory layers report position 0."""
        layer = Layer(layer_id=0)
        assert layer.is_loaded()
        assert layer.layer_file_position == 0

"""Tests for the candidate search."""

import pytest
from conftest import make_node, make_point_feature, make_way

from fastmatcher.matching.engine import find_candidates
from fastmatcher.models import CandidateSet, Feature, PointStore

# Roughly 111 m per 0.001 degree of latitude
ORIGIN = (52.0, 21.0)


class TestFindCandidates:
    """Tests for near/mid bucketing."""

    def test_near_and_mid_buckets(self) -> None:
        """Test features are split by radius and twice the radius."""
        elements = [make_node(1, *ORIGIN)]
        features = [
            make_point_feature(52.0005, 21.0),  # ~56 m
            make_point_feature(52.0015, 21.0),  # ~167 m
            make_point_feature(52.0030, 21.0),  # ~334 m
        ]

        (candidates,) = find_candidates(elements, features, radius_km=0.1)

        assert candidates.near == (0,)
        assert candidates.mid == (1,)

    def test_coincident_points_are_near(self) -> None:
        """Test a feature at distance zero counts as near for any radius."""
        elements = [make_node(1, 0.0, 0.0)]
        features = [make_point_feature(0.0, 0.0)]

        (candidates,) = find_candidates(elements, features, radius_km=1e-9)

        assert candidates.near == (0,)

    def test_length_matches_elements(self, point_store: PointStore) -> None:
        """Test every element gets a set, unpositioned ones an empty one."""
        elements = [
            make_node(1, *ORIGIN),
            make_way(10, [101, 102, 103, 101]),
            make_way(11, [999]),
            make_node(2, 10.0, 10.0),
        ]
        features = [make_point_feature(52.2401, 21.0201)]

        results = find_candidates(elements, features, 0.05, point_store)

        assert len(results) == len(elements)
        assert results[0] == CandidateSet()
        assert results[1].near == (0,)
        assert results[2].is_empty
        assert results[3].is_empty

    def test_feature_order_preserved(self) -> None:
        """Test candidate indices follow feature order."""
        elements = [make_node(1, *ORIGIN)]
        features = [
            make_point_feature(52.0002, 21.0),
            make_point_feature(52.0001, 21.0),
        ]

        (candidates,) = find_candidates(elements, features, radius_km=0.1)

        assert candidates.near == (0, 1)

    def test_unpositioned_features_skipped(self) -> None:
        """Test features without geometry never become candidates."""
        elements = [make_node(1, *ORIGIN)]
        features = [
            Feature.from_geojson({"type": "Feature", "geometry": None}),
            make_point_feature(*ORIGIN),
        ]

        (candidates,) = find_candidates(elements, features, radius_km=0.1)

        assert candidates.near == (1,)

    @pytest.mark.parametrize("radius_km", [0.0, -1.0])
    def test_non_positive_radius(self, radius_km: float) -> None:
        """Test that a non-positive radius raises error."""
        with pytest.raises(ValueError, match="positive"):
            find_candidates([], [], radius_km)

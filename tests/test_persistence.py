"""Tests for Rips persistence and the PersistenceDiagram container."""
import numpy as np
import pytest

from tdaclust.errors import DegenerateCloudError
from tdaclust.topology.persistence import PersistenceDiagram, compute_persistence
from tdaclust.topology.point_cloud import embed


def circle(n=40, radius=1.0):
    theta = np.linspace(0, 2 * np.pi, n, endpoint=False)
    return radius * np.column_stack([np.cos(theta), np.sin(theta)])


class TestDiagram:
    def test_from_triples(self):
        dgm = PersistenceDiagram.from_triples([(0, 0.0, 1.0), (1, 0.5, 2.0), (1, 0.2, 0.3)])
        assert dgm.n_features == 3
        assert dgm.homology_dimensions == (0, 1)
        np.testing.assert_allclose(dgm.persistence, [1.0, 1.5, 0.1])

    def test_select(self):
        dgm = PersistenceDiagram.from_triples([(0, 0.0, 1.0), (1, 0.5, 2.0)])
        h1 = dgm.select(1)
        assert h1.n_features == 1
        assert h1.birth_times[0] == 0.5
        assert dgm.select(2).n_features == 0

    def test_filter_by_persistence(self):
        dgm = PersistenceDiagram.from_triples([(1, 0.0, 1.0), (1, 0.0, 0.1)])
        assert dgm.filter_by_persistence(0.5).n_features == 1

    def test_empty(self):
        dgm = PersistenceDiagram.empty()
        assert len(dgm) == 0
        assert dgm.to_array().shape == (0, 3)
        assert 'empty' in repr(dgm)

    def test_immutable(self):
        dgm = PersistenceDiagram.from_triples([(0, 0.0, 1.0)])
        with pytest.raises(ValueError):
            dgm.birth_times[0] = 5.0
        with pytest.raises(AttributeError):
            dgm.birth_times = np.array([1.0])

    def test_rejects_death_before_birth(self):
        with pytest.raises(ValueError):
            PersistenceDiagram.from_triples([(0, 2.0, 1.0)])

    def test_rejects_ragged(self):
        with pytest.raises(ValueError):
            PersistenceDiagram(np.array([0, 1]), np.array([0.0]), np.array([1.0]))

    def test_to_array_roundtrip(self):
        triples = [(0, 0.0, 1.0), (1, 0.5, 2.0)]
        dgm = PersistenceDiagram.from_triples(triples)
        np.testing.assert_allclose(dgm.to_array(), triples)


class TestComputePersistence:
    def test_circle_has_one_loop(self):
        dgm = compute_persistence(circle(), max_dimension=1)
        h1 = dgm.select(1)
        assert h1.n_features >= 1
        pers = np.sort(h1.persistence)[::-1]
        assert pers[0] > 1.0
        if len(pers) > 1:
            assert pers[0] > 5 * pers[1]

    def test_h0_essential_class_dropped(self):
        dgm = compute_persistence(circle(), max_dimension=0)
        assert dgm.homology_dimensions == (0,)
        # n points -> n - 1 finite H0 deaths
        assert dgm.select(0).n_features == 39
        assert np.all(np.isfinite(dgm.death_times))

    def test_threshold_truncates_infinite_deaths(self):
        dgm = compute_persistence(circle(), max_dimension=1, distance_threshold=0.5)
        assert np.all(dgm.death_times <= 0.5)
        assert np.all(np.isfinite(dgm.death_times))
        # the loop is alive at the threshold and truncated there
        assert np.any((dgm.dimensions == 1) & (dgm.death_times == 0.5))

    def test_birth_le_death(self):
        cloud = np.random.default_rng(0).normal(size=(60, 3))
        dgm = compute_persistence(cloud, max_dimension=2)
        assert np.all(dgm.birth_times <= dgm.death_times)
        assert set(dgm.homology_dimensions) <= {0, 1, 2}

    def test_deterministic(self):
        cloud = np.random.default_rng(3).normal(size=(50, 2))
        a = compute_persistence(cloud)
        b = compute_persistence(cloud)
        np.testing.assert_array_equal(a.to_array(), b.to_array())

    def test_landmarks_deterministic(self):
        cloud = np.random.default_rng(4).normal(size=(120, 2))
        a = compute_persistence(cloud, n_landmarks=40)
        b = compute_persistence(cloud, n_landmarks=40)
        np.testing.assert_array_equal(a.to_array(), b.to_array())
        assert a.select(0).n_features == 39

    def test_two_points(self):
        dgm = compute_persistence(np.array([[0.0, 0.0], [3.0, 4.0]]))
        np.testing.assert_allclose(dgm.to_array(), [[0, 0.0, 5.0]])

    @pytest.mark.parametrize("cloud", [np.zeros((1, 3)), np.zeros((0, 2))])
    def test_degenerate(self, cloud):
        with pytest.raises(DegenerateCloudError):
            compute_persistence(cloud)

    def test_square_cloud_is_point_cloud(self, recwarn):
        # 19 samples, d=3, tau=5 -> 4 points in R^4
        cloud = embed(np.sin(np.arange(19) / 3.0), dim_lag=3, sample_lag=5)
        assert cloud.shape == (4, 4)

        dgm = compute_persistence(cloud, max_dimension=0)

        assert dgm.select(0).n_features == 3
        assert not [w for w in recwarn if 'square' in str(w.message)]

    def test_1d_input(self):
        dgm = compute_persistence(np.array([0.0, 1.0, 3.0]), max_dimension=0)
        np.testing.assert_allclose(np.sort(dgm.death_times), [1.0, 2.0])

    def test_invalid_threshold(self):
        with pytest.raises(ValueError):
            compute_persistence(circle(), distance_threshold=0.0)

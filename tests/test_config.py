"""Tests for PipelineConfig and YAML loading."""
import math

import pytest

from tdaclust.config import PipelineConfig, load_pipeline_config
from tdaclust.errors import ConfigurationError, InvalidMetricError


class TestDefaults:
    def test_values(self):
        cfg = PipelineConfig()
        assert (cfg.dim_lag, cfg.sample_lag) == (3, 5)
        assert cfg.max_homology_dimension == 1
        assert math.isinf(cfg.distance_threshold)
        assert cfg.homology_dimension == 1
        assert cfg.landscape_resolution == 500
        assert cfg.distance_metric == 'euclidean'
        assert cfg.linkage == 'ward'
        assert cfg.on_error == 'abort'

    def test_no_fixed_domain_by_default(self):
        assert PipelineConfig().resolved_landscape_domain() is None

    def test_threshold_gives_domain(self):
        assert PipelineConfig(distance_threshold=3.0).resolved_landscape_domain() == (0.0, 3.0)

    def test_explicit_domain_wins(self):
        cfg = PipelineConfig(distance_threshold=3.0, landscape_domain=(0.5, 1.5))
        assert cfg.resolved_landscape_domain() == (0.5, 1.5)


class TestValidation:
    @pytest.mark.parametrize("kwargs", [
        {'dim_lag': 0},
        {'sample_lag': 0},
        {'max_homology_dimension': -1},
        {'distance_threshold': 0.0},
        {'landscape_resolution': 0},
        {'landscape_level': 0},
        {'homology_dimension': 2},
        {'n_landmarks': 1},
        {'n_jobs': 0},
        {'on_error': 'ignore'},
        {'landscape_domain': (2.0, 1.0)},
    ])
    def test_bad_values(self, kwargs):
        with pytest.raises(ConfigurationError):
            PipelineConfig(**kwargs)

    def test_bad_metric(self):
        with pytest.raises(InvalidMetricError):
            PipelineConfig(distance_metric='hamming')

    def test_bad_linkage(self):
        with pytest.raises(InvalidMetricError):
            PipelineConfig(linkage='centroid')

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            PipelineConfig(dim_lag=-3)


class TestOverrides:
    def test_none_ignored(self):
        cfg = PipelineConfig().with_overrides(linkage='single', sample_lag=None)
        assert cfg.linkage == 'single'
        assert cfg.sample_lag == 5

    def test_validated(self):
        with pytest.raises(ConfigurationError):
            PipelineConfig().with_overrides(dim_lag=0)

    def test_unknown_field(self):
        with pytest.raises(ConfigurationError):
            PipelineConfig().with_overrides(window=10)


class TestFromDict:
    def test_flat(self):
        cfg = PipelineConfig.from_dict({'dim_lag': 2, 'linkage': 'complete'})
        assert cfg.dim_lag == 2
        assert cfg.linkage == 'complete'

    def test_nested(self):
        cfg = PipelineConfig.from_dict({'pipeline': {'sample_lag': 7}})
        assert cfg.sample_lag == 7

    def test_empty(self):
        assert PipelineConfig.from_dict(None) == PipelineConfig()

    def test_unknown_key(self):
        with pytest.raises(ConfigurationError, match='windw'):
            PipelineConfig.from_dict({'windw': 3})

    def test_casts(self):
        cfg = PipelineConfig.from_dict({'distance_threshold': 2, 'landscape_domain': [0, 4]})
        assert cfg.distance_threshold == 2.0
        assert cfg.landscape_domain == (0.0, 4.0)

    def test_to_dict_roundtrip(self):
        cfg = PipelineConfig(landscape_domain=(0.0, 1.0), linkage='average')
        assert PipelineConfig.from_dict(cfg.to_dict()) == cfg


class TestLoadYaml:
    def test_load(self, tmp_path):
        path = tmp_path / 'pipeline.yaml'
        path.write_text(
            "pipeline:\n"
            "  dim_lag: 2\n"
            "  sample_lag: 3\n"
            "  distance_threshold: .inf\n"
            "  linkage: average\n"
            "  on_error: exclude\n"
        )
        cfg = load_pipeline_config(path)
        assert (cfg.dim_lag, cfg.sample_lag) == (2, 3)
        assert math.isinf(cfg.distance_threshold)
        assert cfg.linkage == 'average'
        assert cfg.on_error == 'exclude'

    def test_empty_file(self, tmp_path):
        path = tmp_path / 'empty.yaml'
        path.write_text("")
        assert load_pipeline_config(path) == PipelineConfig()

    def test_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_pipeline_config(tmp_path / 'nope.yaml')

    def test_malformed(self, tmp_path):
        path = tmp_path / 'bad.yaml'
        path.write_text("pipeline: [unclosed\n")
        with pytest.raises(ConfigurationError):
            load_pipeline_config(path)


class TestSerialization:
    def test_infinite_threshold_is_null(self):
        data = PipelineConfig().to_dict()
        assert data['distance_threshold'] is None
        assert PipelineConfig(distance_threshold=2.5).to_dict()['distance_threshold'] == 2.5

    def test_null_threshold_means_no_cutoff(self):
        cfg = PipelineConfig.from_dict({'distance_threshold': None})
        assert math.isinf(cfg.distance_threshold)

    def test_hashable(self):
        assert hash(PipelineConfig()) == hash(PipelineConfig())
        assert len({PipelineConfig(), PipelineConfig(linkage='single')}) == 2

    def test_roundtrip_default_threshold(self):
        assert PipelineConfig.from_dict(PipelineConfig().to_dict()) == PipelineConfig()

"""
Tests for the command line interface.
"""

import json

import numpy as np
import polars as pl
import pytest

from tdaclust.cli import main
from tdaclust.datasets import sine_wave, white_noise


@pytest.fixture
def wide_csv(tmp_path):
    path = tmp_path / 'series.csv'
    pl.DataFrame({
        'time': np.arange(120),
        'sine_a': sine_wave(120, period=20.0),
        'sine_b': sine_wave(120, period=20.0, phase=0.7),
        'noise': white_noise(120, seed=1),
    }).write_csv(path)
    return path


class TestCli:
    def test_no_command(self, capsys):
        assert main([]) == 0
        assert 'tdaclust' in capsys.readouterr().out

    def test_cluster(self, wide_csv, tmp_path, capsys):
        out = tmp_path / 'result.json'
        dist = tmp_path / 'distances.csv'
        code = main([
            'cluster', str(wide_csv),
            '--linkage', 'average',
            '-k', '2',
            '-o', str(out),
            '--distances', str(dist),
        ])
        assert code == 0

        data = json.loads(out.read_text())
        assert data['labels'] == ['sine_a', 'sine_b', 'noise']
        assert data['dendrogram']['method'] == 'average'
        assert len(set(data['assignments'].values())) == 2

        frame = pl.read_csv(dist)
        assert frame.columns == ['label', 'sine_a', 'sine_b', 'noise']
        assert 'Dendrogram' in capsys.readouterr().out

    def test_cluster_missing_input(self, tmp_path, capsys):
        assert main(['cluster', str(tmp_path / 'missing.csv')]) == 1
        assert 'ERROR' in capsys.readouterr().out

    def test_cluster_short_series_aborts(self, tmp_path, capsys):
        path = tmp_path / 'short.csv'
        path.write_text("time,a,b\n" + ''.join(f"{i},{i % 3},{i % 4}\n" for i in range(10)))
        assert main(['cluster', str(path)]) == 1
        assert 'InsufficientLengthError' in capsys.readouterr().out

    def test_config_file(self, wide_csv, tmp_path):
        cfg = tmp_path / 'pipeline.yaml'
        cfg.write_text("pipeline:\n  sample_lag: 2\n  linkage: single\n")
        out = tmp_path / 'result.json'
        assert main(['cluster', str(wide_csv), '-c', str(cfg), '-o', str(out)]) == 0
        data = json.loads(out.read_text())
        assert data['config']['sample_lag'] == 2
        assert data['dendrogram']['method'] == 'single'

    def test_landscape(self, wide_csv, capsys):
        assert main(['landscape', str(wide_csv), '--series', 'sine_a', '--sample-lag', '2']) == 0
        out = capsys.readouterr().out
        assert '114 points' in out
        assert 'Landscape H1' in out

    def test_landscape_unknown_series(self, wide_csv, capsys):
        assert main(['landscape', str(wide_csv), '-s', 'nope']) == 1

    def test_demo(self, tmp_path):
        out = tmp_path / 'demo.json'
        assert main(['demo', '--n-samples', '120', '--resolution', '100', '-o', str(out)]) == 0
        data = json.loads(out.read_text())
        assert len(data['labels']) == 8

    def test_output_is_strict_json(self, tmp_path):
        def reject(token):
            raise ValueError(f"non-standard JSON constant {token}")

        out = tmp_path / 'demo.json'
        assert main(['demo', '--n-samples', '80', '--resolution', '50', '-o', str(out)]) == 0
        data = json.loads(out.read_text(), parse_constant=reject)
        assert data['config']['distance_threshold'] is None

"""Pipeline configuration module."""

from tdaclust.config.pipeline import (
    ERROR_POLICIES,
    PipelineConfig,
    load_pipeline_config,
)

__all__ = [
    'ERROR_POLICIES',
    'PipelineConfig',
    'load_pipeline_config',
]

"""Build pipeline: parameters, per-target stages, artifact hand-over, release."""

from .artifacts import collect_artifacts, list_assets
from .errors import ArtifactMissing, InvalidParameter, PipelineError
from .params import BuildParameters, resolve_parameters
from .runner import PipelineReport, StageOutcome, StageStatus, run_pipeline
from .stages import Stage, build_step, can_run_on, default_stages, select_stages

__all__ = [
    "ArtifactMissing",
    "BuildParameters",
    "InvalidParameter",
    "PipelineError",
    "PipelineReport",
    "Stage",
    "StageOutcome",
    "StageStatus",
    "build_step",
    "can_run_on",
    "collect_artifacts",
    "default_stages",
    "list_assets",
    "resolve_parameters",
    "run_pipeline",
    "select_stages",
]

"""Utilities for defining Dagster asset jobs consistently."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from dagster import AssetSelection, define_asset_job


@dataclass(frozen=True)
class JobSpec:
    """Declarative description of an asset job."""

    name: str
    description: str
    asset_keys: Sequence[str] | None = None
    asset_groups: Sequence[str] | None = None


def build_job_from_spec(spec: JobSpec):
    """Create a Dagster asset job from a JobSpec."""
    if spec.asset_keys:
        selection = AssetSelection.keys(*spec.asset_keys)
    elif spec.asset_groups:
        selection = AssetSelection.groups(*spec.asset_groups)
    else:
        raise ValueError(f"Job '{spec.name}' must define asset_keys or asset_groups for selection")

    return define_asset_job(name=spec.name, selection=selection, description=spec.description)

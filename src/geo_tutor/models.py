"""Shape of the solution document produced by the extractor.

These are typing aids only. The extractor checks that the top-level
fields are present but does not validate or coerce nested values, so
consumers should treat optional keys as possibly missing.
"""

from __future__ import annotations

from typing import TypedDict


class Vector3D(TypedDict):
    x: float
    y: float
    z: float


class _Point3DBase(TypedDict):
    x: float
    y: float
    z: float
    label: str


class Point3D(_Point3DBase, total=False):
    color: str  # Hex code


# "from" is a keyword, so this one needs the functional syntax
_Line3DBase = TypedDict("_Line3DBase", {"from": str, "to": str})


class Line3D(_Line3DBase, total=False):
    label: str
    color: str
    dashed: bool


class _Polygon3DBase(TypedDict):
    points: list[str]  # Point labels


class Polygon3D(_Polygon3DBase, total=False):
    color: str
    opacity: float


class _VisualizationBase(TypedDict):
    points: list[Point3D]
    lines: list[Line3D]


class VisualizationState(_VisualizationBase, total=False):
    polygons: list[Polygon3D]
    cameraLookAt: Vector3D


class _SolveStepBase(TypedDict):
    stepId: int
    title: str
    description: str
    visuals: VisualizationState


class SolveStep(_SolveStepBase, total=False):
    mathExpression: str


class MathSolution(TypedDict):
    problemSummary: str
    steps: list[SolveStep]
    finalAnswer: str

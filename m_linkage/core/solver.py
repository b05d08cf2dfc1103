# -*- coding: utf-8 -*-
"""Closed-form kinematics of the two-motor "M" linkage.

The fixed points are the motor pivots on the baseboard: the bottom ends of a
capital M, ``span`` apart. The active arms (length ``active_length``) run from
each motor to a passive joint; the passive arms (length ``passive_length``)
run from the passive joints to the shared end effector.

``angle_a`` is the angle between the baseboard and the left active arm,
``angle_b`` the one between the baseboard and the right active arm. The line
between the passive joints (length ``c``) is the base of an isosceles triangle
with the end effector; its equal base angles are ``delta``. ``gamma`` is the
angle between that base and a line parallel to the baseboard.

The passive arms never straighten into a "^": the inner angle at the effector
stays reflex, so the effector is always below both passive joints. This keeps
the mechanism away from its singularity.

``{x = 0, y = 0}`` is the left motor pivot and positive y points into the
workspace. Angles are in degrees at the API and radians internally.

This keeps the math side independent from Qt UI code.
"""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from .geometry import Point2, cap_degrees, degrees, radians, triangle_angle
from .parameters import ARM_LENGTH_TOLERANCE, ResolvedMechanism, MechanismConfig

logger = logging.getLogger(__name__)


class KinematicsError(ValueError):
    """A solve attempt that produced no valid pose."""


class DomainError(KinematicsError):
    """A trigonometric step got an argument outside its domain."""


class GeometricInvalidError(KinematicsError):
    """The candidate pose is well formed but mechanically impossible."""


class SolverState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    POSED = "posed"


@dataclass(frozen=True)
class Pose:
    angle_a: float
    angle_b: float
    joint_a: Point2
    joint_b: Point2
    gamma: float
    delta: float
    end_effector: Point2

    @property
    def end_angle(self) -> float:
        """Inner angle between the passive arms at the effector (degrees)."""
        return 360.0 - (180.0 - 2.0 * self.delta)


@dataclass(frozen=True)
class SolveResult:
    pose: Optional[Pose] = None
    error: Optional[KinematicsError] = None

    def __post_init__(self):
        if (self.pose is None) == (self.error is None):
            raise ValueError("SolveResult needs exactly one of pose or error")

    @property
    def ok(self) -> bool:
        return self.error is None

    def __bool__(self) -> bool:
        return self.ok

    def unwrap(self) -> Pose:
        if self.error is not None:
            raise self.error
        return self.pose


def joint_positions(span: float, active_length: float, angle_a: float, angle_b: float) -> Tuple[Point2, Point2]:
    """Passive joint positions for motor angles in degrees."""
    a = radians(angle_a)
    b = radians(angle_b)
    return (
        Point2(active_length * math.cos(a), active_length * math.sin(a)),
        Point2(span + active_length * math.cos(b), active_length * math.sin(b)),
    )


def select_lower_branch(joint_a: Point2, joint_b: Point2, e: float, f: float) -> Point2:
    """Lower-joint selection.

    Of the two points at ``passive_length`` from both joints, walk down from
    the higher joint by (e, f). That is always the lower of the two, which is
    the M-shaped branch the physical linkage is built to stay on.
    """
    if joint_b.y > joint_a.y:
        return Point2(joint_b.x - e, joint_b.y - f)
    return Point2(joint_a.x + e, joint_a.y - f)


def check_pose(
    effector: Point2,
    joint_a: Point2,
    joint_b: Point2,
    span: float,
    passive_length: float,
    tolerance: float = ARM_LENGTH_TOLERANCE,
) -> Optional[KinematicsError]:
    """Return the first violated constraint of a candidate pose, or None."""
    if math.isnan(effector.x) or math.isnan(effector.y):
        return DomainError("end effector is not a number")
    if effector.x < 0.0 or effector.x > span:
        return GeometricInvalidError(f"end effector x={effector.x:.6g} outside [0, {span:g}]")
    # keep the end effector below the passive joints
    if effector.y >= joint_a.y or effector.y >= joint_b.y:
        return GeometricInvalidError("end effector is not below both passive joints")
    if joint_a.x > joint_b.x:
        return GeometricInvalidError("passive joints are crossed")
    for name, joint in (("a", joint_a), ("b", joint_b)):
        length = joint.distance_to(effector)
        if abs(length - passive_length) > tolerance:
            return GeometricInvalidError(
                f"passive arm {name} would be {length:.6g} long instead of {passive_length:g}"
            )
    return None


class KinematicsSolver:
    """Forward/inverse kinematics with a single committed pose.

    The pose is None until the first successful solve. Each successful solve
    replaces it with a new immutable ``Pose``; a failed one leaves it as it was.
    Not thread-safe: use one solver per owner.
    """

    def __init__(
        self,
        span: float,
        active_length: float,
        passive_length: float,
        arm_length_tolerance: float = ARM_LENGTH_TOLERANCE,
    ):
        for name, val in (("span", span), ("active_length", active_length), ("passive_length", passive_length)):
            if not math.isfinite(val) or val <= 0.0:
                raise ValueError(f"{name} must be a positive finite length, got {val!r}")
        if not math.isfinite(arm_length_tolerance) or arm_length_tolerance < 0.0:
            raise ValueError(f"arm_length_tolerance must be non-negative, got {arm_length_tolerance!r}")
        self._span = float(span)
        self._active_length = float(active_length)
        self._passive_length = float(passive_length)
        self._arm_length_tolerance = float(arm_length_tolerance)
        self._pose: Optional[Pose] = None

    @classmethod
    def from_config(cls, config: MechanismConfig | ResolvedMechanism) -> "KinematicsSolver":
        mech = config.resolve() if isinstance(config, MechanismConfig) else config
        return cls(mech.span, mech.active_length, mech.passive_length, mech.arm_length_tolerance)

    @property
    def span(self) -> float:
        return self._span

    @property
    def active_length(self) -> float:
        return self._active_length

    @property
    def passive_length(self) -> float:
        return self._passive_length

    @property
    def arm_length_tolerance(self) -> float:
        return self._arm_length_tolerance

    @property
    def pose(self) -> Optional[Pose]:
        return self._pose

    @property
    def state(self) -> SolverState:
        return SolverState.UNINITIALIZED if self._pose is None else SolverState.POSED

    @property
    def is_posed(self) -> bool:
        return self._pose is not None

    def __repr__(self) -> str:
        return (
            f"KinematicsSolver(span={self._span:g}, active_length={self._active_length:g}, "
            f"passive_length={self._passive_length:g}, state={self.state.value})"
        )

    def _forward(self, angle_a: float, angle_b: float) -> Pose:
        if not (math.isfinite(angle_a) and math.isfinite(angle_b)):
            raise DomainError(f"motor angles must be finite, got ({angle_a!r}, {angle_b!r})")

        l2 = self._passive_length
        joint_a, joint_b = joint_positions(self._span, self._active_length, angle_a, angle_b)
        dx = joint_b.x - joint_a.x
        dy = joint_b.y - joint_a.y
        if dx == 0.0:
            raise DomainError("passive joints share an x coordinate; gamma is undefined")
        c = math.hypot(dx, dy)
        if c > 2.0 * l2:
            raise DomainError(f"passive arms cannot reach each other (c={c:.6g} > {2.0 * l2:g})")

        gamma_r = math.atan(abs(dy) / abs(dx))
        delta_r = math.acos(c / (2.0 * l2))
        e = l2 * math.cos(gamma_r + delta_r)
        f = l2 * math.sin(gamma_r + delta_r)
        effector = select_lower_branch(joint_a, joint_b, e, f)

        err = check_pose(effector, joint_a, joint_b, self._span, l2, self._arm_length_tolerance)
        if err is not None:
            raise err
        return Pose(
            angle_a=cap_degrees(angle_a),
            angle_b=cap_degrees(angle_b),
            joint_a=joint_a,
            joint_b=joint_b,
            gamma=degrees(gamma_r),
            delta=degrees(delta_r),
            end_effector=effector,
        )

    def _inverse_angles(self, x: float, y: float) -> Tuple[float, float]:
        if not (math.isfinite(x) and math.isfinite(y)):
            raise DomainError(f"target must be finite, got ({x!r}, {y!r})")
        d = self._span
        if x < 0.0 or x > d:
            raise GeometricInvalidError(f"target x={x:.6g} outside [0, {d:g}]")
        if x == 0.0 or x == d:
            raise DomainError("target sits above a motor pivot; the radius angle is undefined")

        l1 = self._active_length
        l2 = self._passive_length
        c = math.hypot(x, y)
        e = math.hypot(d - x, y)
        try:
            # angles at the left pivot between the radius and the active arm, and
            # at the right pivot between its radius and the right active arm
            inner_a = triangle_angle(l2, c, l1)
            inner_b = triangle_angle(l2, e, l1)
        except ValueError as exc:
            raise DomainError(f"target out of reach: {exc}") from exc
        # x is in (0, span) here, so the principal atan equals the four-quadrant angle
        radius_a = math.atan(y / x)
        radius_b = math.atan(y / (d - x))
        angle_a = degrees(radius_a + inner_a)
        angle_b = cap_degrees(180.0 - degrees(inner_b) - degrees(radius_b))
        return angle_a, angle_b

    def _commit(self, pose: Pose) -> SolveResult:
        self._pose = pose
        return SolveResult(pose=pose)

    def _reject(self, op: str, exc: KinematicsError) -> SolveResult:
        logger.debug("%s rejected (%s): %s", op, type(exc).__name__, exc)
        return SolveResult(error=exc)

    def solve_forward(self, angle_a: float, angle_b: float) -> SolveResult:
        """Place the effector for the given motor angles (degrees)."""
        try:
            pose = self._forward(float(angle_a), float(angle_b))
        except KinematicsError as exc:
            return self._reject("solve_forward", exc)
        return self._commit(pose)

    def solve_inverse(self, point: Tuple[float, float], match_tolerance: Optional[float] = None) -> SolveResult:
        """Find motor angles that put the effector at ``point``.

        The committed effector is recomputed by the forward solve and can differ
        from ``point`` by rounding. Pass ``match_tolerance`` to reject solutions
        further than that from the request; by default no match is enforced.
        """
        try:
            x, y = float(point[0]), float(point[1])
            angle_a, angle_b = self._inverse_angles(x, y)
            pose = self._forward(angle_a, angle_b)
            if match_tolerance is not None:
                miss = pose.end_effector.distance_to((x, y))
                if miss > match_tolerance:
                    raise GeometricInvalidError(
                        f"solved effector is {miss:.6g} from the target (tolerance {match_tolerance:g})"
                    )
        except KinematicsError as exc:
            return self._reject("solve_inverse", exc)
        return self._commit(pose)

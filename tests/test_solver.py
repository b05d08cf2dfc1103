import dataclasses
import math

import pytest

from m_linkage.core.geometry import Point2, angle_difference
from m_linkage.core.solver import (
    DomainError,
    GeometricInvalidError,
    KinematicsError,
    KinematicsSolver,
    SolveResult,
    SolverState,
    check_pose,
    joint_positions,
    select_lower_branch,
)

M_SHAPED_POSES = [(72, 108), (60, 120), (100, 120), (80, 100), (70, 130)]
# Effector below the baseboard (y < 0), centred and off-centre.
BELOW_BASEBOARD_POSES = [(50, 130), (40, 130)]


@pytest.fixture
def solver():
    return KinematicsSolver(600, 300, 300)


def test_new_solver_is_uninitialized(solver):
    assert solver.pose is None
    assert solver.state is SolverState.UNINITIALIZED
    assert not solver.is_posed


@pytest.mark.parametrize("bad", [0, -1, float("nan"), float("inf")])
def test_rejects_non_positive_parameters(bad):
    with pytest.raises(ValueError):
        KinematicsSolver(bad, 300, 300)
    with pytest.raises(ValueError):
        KinematicsSolver(600, bad, 300)
    with pytest.raises(ValueError):
        KinematicsSolver(600, 300, bad)


def test_inverse_at_baseboard_midpoint(solver):
    res = solver.solve_inverse((300, 0))
    assert res.ok
    pose = res.unwrap()
    assert pose.angle_a == pytest.approx(60.0, abs=1e-9)
    assert pose.angle_b == pytest.approx(120.0, abs=1e-9)
    assert pose.angle_a + pose.angle_b == pytest.approx(180.0, abs=1e-9)
    assert pose.delta == pytest.approx(60.0, abs=1e-9)
    assert pose.gamma == pytest.approx(0.0, abs=1e-6)
    assert pose.end_effector.x == pytest.approx(300.0, abs=1e-9)
    assert pose.end_effector.y == pytest.approx(0.0, abs=1e-9)
    assert pose.end_angle == pytest.approx(300.0, abs=1e-9)
    assert solver.pose is pose
    assert solver.state is SolverState.POSED


def test_inverse_below_baseboard(solver):
    pose = solver.solve_inverse((300, -50.39362225740834)).unwrap()
    assert pose.angle_a == pytest.approx(50.0, abs=1e-6)
    assert pose.angle_b == pytest.approx(130.0, abs=1e-6)
    assert pose.end_effector.x == pytest.approx(300.0, abs=1e-6)
    assert pose.end_effector.y == pytest.approx(-50.39362225740834, abs=1e-6)
    assert pose.end_effector.y < 0.0


def test_forward_symmetric_m_pose(solver):
    pose = solver.solve_forward(72, 108).unwrap()
    assert pose.end_effector.x == pytest.approx(300.0, abs=1e-6)
    assert pose.end_effector.y == pytest.approx(68.4557, abs=1e-3)
    assert pose.joint_a.x == pytest.approx(92.7051, abs=1e-3)
    assert pose.joint_b.x == pytest.approx(507.2949, abs=1e-3)


def test_forward_outward_arms_cannot_reach(solver):
    # joints land at x=-92.7 and x=692.7, further apart than two passive arms
    res = solver.solve_forward(108, 72)
    assert not res
    assert isinstance(res.error, DomainError)
    assert solver.pose is None


def test_forward_parallel_arms_too_far_apart():
    s = KinematicsSolver(600, 300, 250)
    res = s.solve_forward(10, 10)
    assert isinstance(res.error, DomainError)


@pytest.mark.parametrize("angle", [0, 10, 90])
def test_forward_equal_angles_fail(solver, angle):
    res = solver.solve_forward(angle, angle)
    assert not res.ok
    assert isinstance(res.error, (DomainError, GeometricInvalidError))


def test_forward_vertically_aligned_joints_is_domain_error(solver):
    res = solver.solve_forward(0, 180)
    assert isinstance(res.error, DomainError)


@pytest.mark.parametrize("a, b", [(float("nan"), 90), (90, float("inf"))])
def test_forward_non_finite_angles(solver, a, b):
    assert isinstance(solver.solve_forward(a, b).error, DomainError)


def test_forward_effector_above_lower_joint(solver):
    res = solver.solve_forward(90, 200)
    assert isinstance(res.error, GeometricInvalidError)
    assert "below" in str(res.error)


def test_forward_crossed_joints():
    s = KinematicsSolver(100, 300, 300)
    res = s.solve_forward(60, 120)
    assert isinstance(res.error, GeometricInvalidError)


def test_forward_normalizes_angles(solver):
    pose = solver.solve_forward(72 + 360, 108 - 720).unwrap()
    assert pose.angle_a == pytest.approx(72.0)
    assert pose.angle_b == pytest.approx(108.0)
    assert pose.end_effector.x == pytest.approx(300.0, abs=1e-6)


@pytest.mark.parametrize(
    "point, kind",
    [
        ((0, 0), DomainError),
        ((600, 0), DomainError),
        ((0, 150), DomainError),
        ((float("nan"), 10), DomainError),
        ((300, 700), DomainError),
        ((-1, 50), GeometricInvalidError),
        ((601, 10), GeometricInvalidError),
    ],
)
def test_inverse_failures(solver, point, kind):
    res = solver.solve_inverse(point)
    assert isinstance(res.error, kind)
    assert solver.pose is None
    with pytest.raises(kind):
        res.unwrap()


def test_failed_solve_keeps_previous_pose(solver):
    pose = solver.solve_forward(72, 108).unwrap()
    assert not solver.solve_forward(108, 72)
    assert not solver.solve_inverse((0, 0))
    assert solver.pose is pose
    assert solver.state is SolverState.POSED


def test_successful_solve_replaces_pose(solver):
    first = solver.solve_forward(72, 108).unwrap()
    second = solver.solve_forward(60, 120).unwrap()
    assert solver.pose is second
    assert first.angle_a == pytest.approx(72.0)


@pytest.mark.parametrize("a, b", M_SHAPED_POSES + BELOW_BASEBOARD_POSES)
def test_round_trip(solver, a, b):
    target = solver.solve_forward(a, b).unwrap().end_effector
    pose = solver.solve_inverse(target).unwrap()
    assert pose.end_effector.distance_to(target) <= 1e-3
    assert angle_difference(pose.angle_a, a) <= 1e-3
    assert angle_difference(pose.angle_b, b) <= 1e-3


def test_match_tolerance_accepts_close_solution(solver):
    target = solver.solve_forward(80, 100).unwrap().end_effector
    fresh = KinematicsSolver(600, 300, 300)
    assert fresh.solve_inverse(target, match_tolerance=1e-3).ok


class _OffsetSolver(KinematicsSolver):
    # The closed-form solve is exact to rounding, so a miss has to be injected.
    def _forward(self, angle_a, angle_b):
        pose = super()._forward(angle_a, angle_b)
        moved = Point2(pose.end_effector.x + 0.5, pose.end_effector.y)
        return dataclasses.replace(pose, end_effector=moved)


def test_match_tolerance_rejects_far_solution():
    solver = _OffsetSolver(600, 300, 300)
    res = solver.solve_inverse((300, 68.4557), match_tolerance=0.1)
    assert isinstance(res.error, GeometricInvalidError)
    assert solver.pose is None
    assert solver.solve_inverse((300, 68.4557)).ok


def test_invariants_over_angle_grid(solver):
    successes = 0
    for a in range(0, 360, 10):
        for b in range(0, 360, 10):
            res = solver.solve_forward(a, b)
            if not res:
                assert isinstance(res.error, KinematicsError)
                continue
            successes += 1
            pose = res.pose
            p = pose.end_effector
            assert 0.0 <= p.x <= solver.span
            assert p.y < pose.joint_a.y
            assert p.y < pose.joint_b.y
            assert abs(pose.joint_a.distance_to(p) - solver.passive_length) <= solver.arm_length_tolerance
            assert abs(pose.joint_b.distance_to(p) - solver.passive_length) <= solver.arm_length_tolerance
            assert pose.joint_a.x <= pose.joint_b.x
    assert successes > 0


def test_joint_positions():
    ja, jb = joint_positions(600, 300, 90, 90)
    assert ja.x == pytest.approx(0.0, abs=1e-9)
    assert ja.y == pytest.approx(300.0)
    assert jb.x == pytest.approx(600.0)
    assert jb.y == pytest.approx(300.0)


def test_select_lower_branch_walks_down_from_higher_joint():
    low = Point2(0.0, 0.0)
    high = Point2(10.0, 5.0)
    assert select_lower_branch(low, high, 2.0, 3.0) == Point2(8.0, 2.0)
    assert select_lower_branch(high, low, 2.0, 3.0) == Point2(12.0, 2.0)


def test_check_pose():
    h = 300.0 * math.sin(math.pi / 3)
    ja, jb = Point2(150.0, h), Point2(450.0, h)
    assert check_pose(Point2(300.0, 0.0), ja, jb, 600, 300) is None

    err = check_pose(Point2(300.0, 0.0), Point2(100.0, 300.0), Point2(500.0, 300.0), 600, 300)
    assert isinstance(err, GeometricInvalidError)
    assert "passive arm" in str(err)

    assert isinstance(check_pose(Point2(float("nan"), 0.0), ja, jb, 600, 300), DomainError)
    assert isinstance(check_pose(Point2(-1.0, 0.0), ja, jb, 600, 300), GeometricInvalidError)
    assert isinstance(check_pose(Point2(300.0, h), ja, jb, 600, 300), GeometricInvalidError)
    assert isinstance(check_pose(Point2(300.0, 0.0), jb, ja, 600, 300), GeometricInvalidError)


def test_solve_result_needs_exactly_one_side():
    with pytest.raises(ValueError):
        SolveResult()
    err = DomainError("x")
    res = SolveResult(error=err)
    assert not res
    with pytest.raises(DomainError):
        res.unwrap()


def test_kinematics_errors_are_value_errors():
    assert issubclass(DomainError, ValueError)
    assert issubclass(GeometricInvalidError, KinematicsError)

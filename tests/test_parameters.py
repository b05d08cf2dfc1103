import json

import pytest

from m_linkage.core.parameters import (
    ARM_LENGTH_TOLERANCE,
    EFFECTOR_MATCH_TOLERANCE,
    ConfigError,
    MechanismConfig,
    ParameterRegistry,
    config_from_dict,
    eval_param_expression,
    load_config,
    save_config,
)
from m_linkage.core.solver import KinematicsSolver


def test_default_mechanism():
    mech = MechanismConfig().resolve()
    assert (mech.span, mech.active_length, mech.passive_length) == (600.0, 300.0, 300.0)
    assert mech.arm_length_tolerance == ARM_LENGTH_TOLERANCE
    assert mech.effector_match_tolerance == EFFECTOR_MATCH_TOLERANCE


def test_expressions_over_parameters():
    cfg = config_from_dict(
        {
            "parameters": [{"name": "scale", "value": 100}, {"name": "k", "value": 1.5}],
            "span": "2*scale",
            "active_length": "k*scale",
            "passive_length": "sqrt(scale**2)",
        }
    )
    mech = cfg.resolve()
    assert mech.span == pytest.approx(200.0)
    assert mech.active_length == pytest.approx(150.0)
    assert mech.passive_length == pytest.approx(100.0)


def test_numeric_fields_and_default_scale():
    mech = config_from_dict({"span": 500, "active_length": "scale"}).resolve()
    assert mech.span == 500.0
    assert mech.active_length == 300.0


@pytest.mark.parametrize(
    "data",
    [
        {"span": "2*unknown"},
        {"span": "2*"},
        {"span": "scale.foo"},
        {"span": "-scale"},
        {"span": 0},
        {"span": True},
        {"span": [1, 2]},
        {"arm_length_tolerance": -1.0},
        {"arm_length_tolerance": "tight"},
        {"parameters": [{"name": "1bad", "value": 1}]},
        {"parameters": [{"name": "ok", "value": "x"}]},
        {"parameters": 5},
    ],
)
def test_bad_config(data):
    with pytest.raises(ConfigError):
        config_from_dict(data).resolve()


def test_eval_param_expression_errors():
    val, err = eval_param_expression("", {})
    assert val is None and err
    val, err = eval_param_expression("a + b", {"a": 1.0})
    assert val is None and "b" in err
    val, err = eval_param_expression("scale.foo", {"scale": 300.0})
    assert val is None and err
    val, err = eval_param_expression("a + 1", {"a": 1.0})
    assert err is None and val == pytest.approx(2.0)


def test_registry():
    reg = ParameterRegistry()
    reg.set_param("b", 2)
    reg.set_param("a", 1)
    assert reg.to_list() == [{"name": "a", "value": 1.0}, {"name": "b", "value": 2.0}]
    reg.delete_param("a")
    assert reg.eval_expr("b*3") == (pytest.approx(6.0), None)
    with pytest.raises(ConfigError):
        reg.set_param("sin", 1)


def test_save_and_load(tmp_path):
    path = tmp_path / "mech.json"
    cfg = config_from_dict({"parameters": [{"name": "scale", "value": 250}], "passive_length": 275})
    save_config(cfg, path)
    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["span"] == "2*scale"
    loaded = load_config(path)
    assert loaded.resolve() == cfg.resolve()


def test_load_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(path)


def test_load_non_utf8_file(tmp_path):
    path = tmp_path / "latin1.json"
    path.write_bytes(b'{"span": "\xff\xfe"}')
    with pytest.raises(ConfigError):
        load_config(path)


def test_solver_from_config():
    cfg = config_from_dict({"span": 400, "active_length": 200, "passive_length": 220, "arm_length_tolerance": 0.5})
    solver = KinematicsSolver.from_config(cfg)
    assert solver.span == 400.0
    assert solver.passive_length == 220.0
    assert solver.arm_length_tolerance == 0.5
    assert KinematicsSolver.from_config(cfg.resolve()).active_length == 200.0

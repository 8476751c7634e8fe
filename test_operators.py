"""Tests for the operator rule table."""

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from stochastic_aad import AADConfig, ArityError, OperatorKind, UnknownOperatorError
from stochastic_aad.aad.ops import TABLE, forward, partial, rule_for
from stochastic_aad.testing import NOT_DIFFERENTIATED, central_difference, check_partials

X = np.array([0.7, 1.3, 2.1, 0.4])
Y = np.array([1.9, 0.6, 1.1, 2.4])
Z = np.array([1.2, 2.2, 0.8, 1.7])
SIGNED = np.array([-0.7, 1.3, -2.1, 0.4])
CENTERED = np.array([-1.5, 0.5, 2.0, -1.0])      # mean 0
TRIGGER = np.array([-0.3, 0.8, 0.2, -1.1])
PROBABILITIES = np.array([0.9, 1.2, 0.7, 1.2])   # path probabilities times N

FD_CASES = {
    OperatorKind.SQUARED: [SIGNED],
    OperatorKind.SQRT: [X],
    OperatorKind.LOG: [X],
    OperatorKind.SIN: [SIGNED],
    OperatorKind.COS: [SIGNED],
    OperatorKind.EXP: [SIGNED],
    OperatorKind.INVERT: [X],
    OperatorKind.ABS: [SIGNED],
    OperatorKind.AVERAGE: [X],
    # the variance-family rules are exact at zero mean
    OperatorKind.VARIANCE: [CENTERED],
    OperatorKind.STDEV: [CENTERED],
    OperatorKind.STDERROR: [CENTERED],
    OperatorKind.SVARIANCE: [CENTERED],
    OperatorKind.MIN: [X],
    OperatorKind.MAX: [X],
    OperatorKind.ADD: [X, Y],
    OperatorKind.SUB: [X, Y],
    OperatorKind.MULT: [X, Y],
    OperatorKind.DIV: [X, Y],
    OperatorKind.POW: [X, 2.5],
    OperatorKind.CAP: [X, Y],
    OperatorKind.FLOOR: [X, Y],
    OperatorKind.WEIGHTED_AVERAGE: [X, PROBABILITIES],
    OperatorKind.WEIGHTED_VARIANCE: [X, PROBABILITIES],
    OperatorKind.WEIGHTED_STDEV: [X, PROBABILITIES],
    OperatorKind.WEIGHTED_STDERROR: [X, PROBABILITIES],
    OperatorKind.ADDPRODUCT: [X, Y, Z],
    OperatorKind.ADDRATIO: [X, Y, Z],
    OperatorKind.SUBRATIO: [X, Y, Z],
    OperatorKind.ACCRUE: [X, 0.03, Z],
    OperatorKind.DISCOUNT: [X, Y, 0.5],
    OperatorKind.BARRIER: [TRIGGER, Y, Z],
}


class TestTable:
    def test_every_kind_has_a_rule(self):
        assert set(TABLE) == set(OperatorKind)

    def test_rule_arity_matches_kind(self):
        for kind, rule in TABLE.items():
            assert rule.arity == kind.arity

    def test_fd_cases_cover_every_kind(self):
        assert set(FD_CASES) == set(OperatorKind)

    def test_reductions(self):
        reductions = {k for k in OperatorKind if k.is_reduction}
        assert reductions == {
            OperatorKind.AVERAGE, OperatorKind.VARIANCE, OperatorKind.STDEV,
            OperatorKind.STDERROR, OperatorKind.SVARIANCE, OperatorKind.MIN, OperatorKind.MAX,
            OperatorKind.WEIGHTED_AVERAGE, OperatorKind.WEIGHTED_VARIANCE,
            OperatorKind.WEIGHTED_STDEV, OperatorKind.WEIGHTED_STDERROR,
        }
        for kind in reductions:
            args = [X, PROBABILITIES][:kind.arity]
            assert np.ndim(forward(kind, args)) == 0

    def test_unknown_operator(self):
        with pytest.raises(UnknownOperatorError):
            rule_for("add")

    def test_wrong_arity(self):
        with pytest.raises(ArityError):
            forward(OperatorKind.ADD, [X])
        with pytest.raises(ArityError):
            forward(OperatorKind.SQRT, [X, Y])

    def test_partial_position_out_of_range(self):
        result = forward(OperatorKind.MULT, [X, Y])
        with pytest.raises(ArityError):
            partial(OperatorKind.MULT, 2, [X, Y], result)


@pytest.mark.parametrize("kind", list(OperatorKind), ids=lambda k: k.name)
def test_partials_match_central_difference(kind):
    check_partials(kind, FD_CASES[kind])


@pytest.mark.parametrize("kind", [k for k in OperatorKind if not k.is_reduction],
                         ids=lambda k: k.name)
def test_partials_with_deterministic_arguments(kind):
    args = [np.float64(a[1]) if isinstance(a, np.ndarray) else a for a in FD_CASES[kind]]
    check_partials(kind, args)


class TestForwardValues:
    def test_elementwise(self):
        assert_allclose(forward(OperatorKind.ADDPRODUCT, [X, Y, Z]), X + Y * Z)
        assert_allclose(forward(OperatorKind.ADDRATIO, [X, Y, Z]), X + Y / Z)
        assert_allclose(forward(OperatorKind.SUBRATIO, [X, Y, Z]), X - Y / Z)
        assert_allclose(forward(OperatorKind.ACCRUE, [X, 0.03, Z]), X * (1 + 0.03 * Z))
        assert_allclose(forward(OperatorKind.DISCOUNT, [X, Y, 0.5]), X / (1 + Y * 0.5))
        assert_allclose(forward(OperatorKind.CAP, [X, 1.0]), np.minimum(X, 1.0))
        assert_allclose(forward(OperatorKind.FLOOR, [X, 1.0]), np.maximum(X, 1.0))

    def test_reductions(self):
        assert forward(OperatorKind.AVERAGE, [X]) == pytest.approx(np.mean(X))
        assert forward(OperatorKind.VARIANCE, [X]) == pytest.approx(np.var(X))
        assert forward(OperatorKind.SVARIANCE, [X]) == pytest.approx(np.var(X, ddof=1))
        assert forward(OperatorKind.STDEV, [X]) == pytest.approx(np.std(X))
        assert forward(OperatorKind.STDERROR, [X]) == pytest.approx(np.std(X) / 2.0)
        assert forward(OperatorKind.MIN, [X]) == 0.4
        assert forward(OperatorKind.MAX, [X]) == 2.1

    def test_weighted_reductions(self):
        p = PROBABILITIES
        a = np.mean(X * p)
        v = np.sum((X - a) ** 2 * p)
        assert forward(OperatorKind.WEIGHTED_AVERAGE, [X, p]) == pytest.approx(a)
        assert forward(OperatorKind.WEIGHTED_VARIANCE, [X, p]) == pytest.approx(v)
        assert forward(OperatorKind.WEIGHTED_STDEV, [X, p]) == pytest.approx(np.sqrt(v))
        assert forward(OperatorKind.WEIGHTED_STDERROR, [X, p]) == pytest.approx(np.sqrt(v / 4))

    def test_uniform_weights_match_plain_average(self):
        ones = np.ones(4)
        assert forward(OperatorKind.WEIGHTED_AVERAGE, [X, ones]) == pytest.approx(np.mean(X))
        assert forward(OperatorKind.WEIGHTED_AVERAGE, [X, 1.0]) == pytest.approx(np.mean(X))
        assert forward(OperatorKind.WEIGHTED_AVERAGE, [2.0, ones]) == pytest.approx(2.0)


    def test_barrier_selects_on_trigger_sign(self):
        assert_array_equal(forward(OperatorKind.BARRIER, [TRIGGER, Y, Z]), np.where(TRIGGER >= 0, Y, Z))
        assert forward(OperatorKind.BARRIER, [0.0, 1.0, 2.0]) == 1.0

    def test_results_are_read_only(self):
        out = forward(OperatorKind.ADD, [X, Y])
        with pytest.raises(ValueError):
            out[0] = 1.0


class TestNumericEdgeCases:
    def test_division_by_zero_is_inf(self):
        assert forward(OperatorKind.DIV, [1.0, 0.0]) == np.inf
        assert partial(OperatorKind.DIV, 0, [np.float64(1.0), np.float64(0.0)], np.inf) == np.inf

    def test_log_of_negative_is_nan(self):
        assert np.isnan(forward(OperatorKind.LOG, [-1.0]))
        assert np.isnan(forward(OperatorKind.SQRT, [-1.0]))

    def test_addratio_partials(self):
        result = forward(OperatorKind.ADDRATIO, [X, Y, Z])
        assert_allclose(partial(OperatorKind.ADDRATIO, 1, [X, Y, Z], result), 1.0 / Z)
        assert_allclose(partial(OperatorKind.ADDRATIO, 2, [X, Y, Z], result), -Y / Z ** 2)

    def test_pow_exponent_gets_no_derivative(self):
        assert (OperatorKind.POW, 1) in NOT_DIFFERENTIATED
        result = forward(OperatorKind.POW, [X, 2.5])
        assert partial(OperatorKind.POW, 1, [X, 2.5], result) == 0.0


class TestExtremaTies:
    def test_every_tied_path_gets_a_unit(self):
        x = np.array([3.0, 1.0, 3.0, 2.0])
        result = forward(OperatorKind.MAX, [x])
        assert_array_equal(partial(OperatorKind.MAX, 0, [x], result), [1.0, 0.0, 1.0, 0.0])

    def test_min_ties(self):
        x = np.array([1.0, 1.0, 3.0])
        result = forward(OperatorKind.MIN, [x])
        assert_array_equal(partial(OperatorKind.MIN, 0, [x], result), [1.0, 1.0, 0.0])


class TestBarrierTrigger:
    def test_dirac_at_zero(self):
        trigger = np.array([-1.0, 0.0, 1.0])
        y, z = np.array([5.0, 5.0, 5.0]), np.array([2.0, 2.0, 2.0])
        result = forward(OperatorKind.BARRIER, [trigger, y, z])
        assert_array_equal(partial(OperatorKind.BARRIER, 0, [trigger, y, z], result), [0.0, np.inf, 0.0])
        assert_array_equal(partial(OperatorKind.BARRIER, 1, [trigger, y, z], result), [0.0, 1.0, 1.0])
        assert_array_equal(partial(OperatorKind.BARRIER, 2, [trigger, y, z], result), [1.0, 0.0, 0.0])

    def test_smoothed_dirac(self):
        trigger = np.array([-2.0, -0.1, 0.05, 2.0])
        y, z = np.full(4, 5.0), np.full(4, 2.0)
        config = AADConfig(barrier_dirac_width=0.2)
        eps = 0.2 * np.std(trigger)
        result = forward(OperatorKind.BARRIER, [trigger, y, z])
        d = partial(OperatorKind.BARRIER, 0, [trigger, y, z], result, config)
        inside = (trigger + eps / 2 >= 0) & (trigger - eps / 2 < 0)
        assert_allclose(d, np.where(inside, 3.0 / eps, 0.0))
        assert inside.tolist() == [False, True, True, False]

    def test_smoothed_dirac_without_spread_is_zero(self):
        config = AADConfig(barrier_dirac_width=0.5)
        result = forward(OperatorKind.BARRIER, [0.0, 1.0, 2.0])
        assert partial(OperatorKind.BARRIER, 0, [0.0, 1.0, 2.0], result, config) == 0.0

    def test_smoothed_dirac_without_spread_keeps_path_shape(self):
        trigger = np.zeros(3)
        config = AADConfig(barrier_dirac_width=0.5)
        result = forward(OperatorKind.BARRIER, [trigger, Y[:3], Z[:3]])
        d = partial(OperatorKind.BARRIER, 0, [trigger, Y[:3], Z[:3]], result, config)
        assert_array_equal(d, np.zeros(3))

    def test_infinite_width_is_the_jump(self):
        config = AADConfig(barrier_dirac_width=np.inf)
        result = forward(OperatorKind.BARRIER, [TRIGGER, Y, Z])
        d = partial(OperatorKind.BARRIER, 0, [TRIGGER, Y, Z], result, config)
        assert_allclose(d, Y - Z)

    def test_one_and_zero_methods(self):
        result = forward(OperatorKind.BARRIER, [TRIGGER, Y, 1.0])
        one = partial(OperatorKind.BARRIER, 0, [TRIGGER, Y, 1.0], result,
                      AADConfig(barrier_dirac_method="one"))
        assert_allclose(one, Y - 1.0)
        zero = partial(OperatorKind.BARRIER, 0, [TRIGGER, Y, 1.0], result,
                       AADConfig(barrier_dirac_method="zero"))
        assert_array_equal(zero, np.zeros(4))

    def test_method_discrete_delta_with_zero_width(self):
        config = AADConfig(barrier_dirac_method="discrete_delta")
        result = forward(OperatorKind.BARRIER, [TRIGGER, Y, Z])
        d = partial(OperatorKind.BARRIER, 0, [TRIGGER, Y, Z], result, config)
        assert_array_equal(d, np.zeros(4))


def test_central_difference_of_reduction_bumps_each_path():
    d = central_difference(OperatorKind.AVERAGE, [X], 0)
    assert_allclose(d, np.full(4, 0.25), rtol=1e-6)

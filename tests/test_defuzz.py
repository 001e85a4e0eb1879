import logging

import pytest
import numpy as np

from fislib import Universe, ConeFunc, GaussianFunc, FuzzySet, defuzzify, EmptySetError


@pytest.fixture
def universe():
    return Universe(0.0, 100.0, 1.0)


@pytest.fixture
def symmetric_set(universe):
    degrees = np.fmin(0.75, ConeFunc(50.0, 8.0).get_array(universe))
    return FuzzySet(universe, degrees)


# two plateaus of equal height
@pytest.fixture
def tied_set(universe):
    degrees = np.fmax(np.fmin(0.7, ConeFunc(20.0, 5.0).get_array(universe)),
                      np.fmin(0.7, ConeFunc(60.0, 5.0).get_array(universe)))
    return FuzzySet(universe, degrees)


@pytest.fixture
def empty_set(universe):
    return FuzzySet(universe, np.zeros(len(universe)))


def test_centroid(universe, symmetric_set):
    """ test the degree weighted average of the universe """

    assert defuzzify(symmetric_set, 'centroid') == pytest.approx(50.0)

    for center in [30.0, 47.5, 71.0]:
        fuzzy_set = FuzzySet(universe, GaussianFunc(center, 4.0).get_array(universe))
        assert defuzzify(fuzzy_set) == pytest.approx(center, abs=1e-6)

    # Test result by manual calculation on a lopsided set
    degrees = np.zeros(len(universe))
    degrees[[10, 20, 40]] = [1.0, 0.5, 0.25]
    test = (10.0 * 1.0 + 20.0 * 0.5 + 40.0 * 0.25) / 1.75
    assert defuzzify(FuzzySet(universe, degrees), 'centroid') == pytest.approx(test)


def test_largest_of_max(symmetric_set, tied_set):
    """ test that ties resolve to the largest point of maximum degree """

    # plateau of the clipped cone spans 48 to 52
    assert defuzzify(symmetric_set, 'largestofmax') == 52.0

    value = defuzzify(tied_set, 'largestofmax')
    assert value == 61.0
    assert tied_set.interp(value) == tied_set.max()


def test_skfuzzy_methods(symmetric_set, tied_set):
    """ test the methods delegated to scikit-fuzzy """

    assert defuzzify(symmetric_set, 'smallestofmax') == 48.0
    assert defuzzify(symmetric_set, 'meanofmax') == pytest.approx(50.0)
    assert defuzzify(symmetric_set, 'bisector') == pytest.approx(50.0, abs=0.5)

    assert defuzzify(tied_set, 'smallestofmax') == 19.0


def test_empty_set(empty_set, caplog):
    """ test the policy for a set that is zero everywhere """

    with pytest.raises(EmptySetError):
        defuzzify(empty_set, 'centroid')

    for method in ['smallestofmax', 'meanofmax', 'bisector']:
        with pytest.raises(EmptySetError):
            defuzzify(empty_set, method)

    with caplog.at_level(logging.WARNING, logger='fislib'):
        assert defuzzify(empty_set, 'centroid', default=-1.0) == -1.0
    assert 'empty fuzzy set' in caplog.text

    # every point attains the maximum of zero
    assert defuzzify(empty_set, 'largestofmax') == 100.0


def test_unknown_method(symmetric_set):
    with pytest.raises(ValueError):
        defuzzify(symmetric_set, 'median')


def test_fuzzy_set_shortcut(symmetric_set):
    assert symmetric_set.defuzzify() == defuzzify(symmetric_set, 'centroid')
    assert symmetric_set.defuzzify('largestofmax') == 52.0

import pytest
import numpy as np

from fislib import Universe, GaussianFunc, ConeFunc, LinguisticVariable, fuzzy_partition, FuzzySet, \
    MembershipModel, ConfigurationError


@pytest.fixture
def universe():
    return Universe(1.0, 100.0, 0.5)


@pytest.fixture
def temperature():
    return fuzzy_partition('temperature', {'cold': 30, 'good': 70, 'hot': 90}, sd=5.0)


@pytest.fixture
def weather():
    return fuzzy_partition('weather', {'bad': 40, 'ok': 65, 'perfect': 80}, radius=10.0)


def test_universe(universe):
    """ test the discretized universe of discourse """

    points = universe.points

    assert len(universe) == 199
    assert points[0] == 1.0
    assert points[-1] == 100.0
    assert np.allclose(np.diff(points), 0.5)

    # upper end is dropped when not on the grid
    assert Universe(0.0, 1.0, 0.3).points[-1] == pytest.approx(0.9)

    # the universe cannot be changed through its points
    points[0] = -10.0
    assert universe.points[0] == 1.0


@pytest.mark.parametrize('lb,ub,step', [(0.0, 10.0, 0.0), (0.0, 10.0, -1.0), (10.0, 0.0, 1.0), (np.nan, 10.0, 1.0),
                                         (0.0, np.inf, 1.0), (-np.inf, 0.0, 1.0), ('zero', 10.0, 1.0)])
def test_universe_invalid(lb, ub, step):
    with pytest.raises(ConfigurationError):
        Universe(lb, ub, step)


@pytest.mark.parametrize('center,sd', [(30.0, 5.0), (60.0, 3.0), (47.25, 7.5)])
def test_gaussian(universe, center, sd):
    """ test gaussian membership function object """

    function = GaussianFunc(center, sd, 'test')
    array = function.get_array(universe)

    # degrees are in [0,1] with full membership at the center
    assert ((array >= 0.0) & (array <= 1.0)).all()
    assert function.degree(center) == 1.0

    # symmetric about the center
    offsets = np.linspace(0.0, 25.0, 51)
    assert np.allclose(function.degree(center + offsets), function.degree(center - offsets))

    # sampled curve matches the analytic degree
    test = np.exp(-(universe.points - center) ** 2 / (2 * sd ** 2))
    assert np.allclose(array, test)
    assert function.degree(center + sd) == pytest.approx(np.exp(-0.5))


@pytest.mark.parametrize('center,radius', [(40.0, 10.0), (65.0, 10.0), (12.5, 3.0)])
def test_cone(universe, center, radius):
    """ test cone membership function object """

    function = ConeFunc(center, radius, 'test')
    points = universe.points
    array = function.get_array(universe)

    assert ((array >= 0.0) & (array <= 1.0)).all()
    assert function.degree(center) == 1.0
    assert (array[np.abs(points - center) >= radius] == 0.0).all()
    assert function.degree(center + radius / 2) == pytest.approx(0.5)
    assert function.degree(center - radius / 2) == pytest.approx(0.5)

    # any real value gives a degree, including far outside the universe
    assert function.degree(-1e6) == 0.0


def test_degree_array_input():
    """ test that membership is evaluated elementwise on arrays """

    function = ConeFunc(5.0, 2.0)
    output = function.degree(np.array([3.0, 4.0, 5.0, 6.0, 7.0]))
    test = np.array([0.0, 0.5, 1.0, 0.5, 0.0])

    assert (output == test).all()
    assert isinstance(function.degree(4.0), float)


@pytest.mark.parametrize('function', [lambda: GaussianFunc(0.0, 0.0), lambda: GaussianFunc(0.0, -1.0),
                                      lambda: ConeFunc(0.0, 0.0), lambda: ConeFunc(0.0, -2.0)])
def test_function_invalid(function):
    with pytest.raises(ConfigurationError):
        function()


def test_linguistic_variable(temperature):
    """ test fuzzification of a crisp value over all labels """

    assert temperature.name == 'temperature'
    assert temperature.labels == ['cold', 'good', 'hot']
    assert temperature['good'].label == 'good'

    levels = temperature.interp(75.0)
    assert levels['good'] == pytest.approx(np.exp(-0.5))
    assert levels['hot'] == pytest.approx(np.exp(-4.5))
    assert levels['cold'] == pytest.approx(np.exp(-40.5))

    # labels cannot be added after construction
    with pytest.raises(TypeError):
        temperature.terms['warm'] = GaussianFunc(80.0, 5.0)

    with pytest.raises(ConfigurationError):
        temperature['warm']


def test_function_immutable(temperature):
    """ test that shapes and labels cannot change once a variable holds them """

    function = GaussianFunc(50.0, 5.0)
    variable = LinguisticVariable('test', {'mid': function})

    # the variable stores a relabelled copy
    assert function.label == ''
    assert variable['mid'].label == 'mid'
    assert variable['mid'] == function

    for name in ['center', 'sd', 'label']:
        with pytest.raises(AttributeError):
            setattr(temperature['good'], name, 1.0)

    with pytest.raises(AttributeError):
        ConeFunc(5.0, 2.0).radius = 3.0

    assert temperature['good'].params() == {'center': 70.0, 'sd': 5.0}


def test_linguistic_variable_invalid():
    with pytest.raises(ConfigurationError):
        LinguisticVariable('empty', {})

    with pytest.raises(ConfigurationError):
        LinguisticVariable('twice', [GaussianFunc(1.0, 1.0, 'a'), ConeFunc(2.0, 1.0, 'a')])

    with pytest.raises(ConfigurationError):
        fuzzy_partition('both', {'a': 1.0}, sd=1.0, radius=1.0)

    with pytest.raises(ConfigurationError):
        fuzzy_partition('neither', {'a': 1.0})


def test_membership_model(universe, temperature, weather):
    """ test lookup of membership degrees through the model """

    model = MembershipModel(universe, [temperature, ], weather)

    assert model.input_names == ['temperature']
    assert model.degree_of('temperature', 'good', 70.0) == 1.0
    assert model.degree_of('weather', 'bad', 35.0) == pytest.approx(0.5)
    assert (model.get_array('weather', 'ok') == weather['ok'].get_array(universe)).all()

    with pytest.raises(ConfigurationError):
        model.degree_of('humidity', 'dry', 10.0)

    with pytest.raises(ConfigurationError):
        model.degree_of('temperature', 'warm', 10.0)

    with pytest.raises(ConfigurationError):
        MembershipModel(universe, [temperature, temperature], weather)


def test_curves(universe, temperature, weather):
    """ test read access to sampled curves for renderers """

    model = MembershipModel(universe, [temperature, ], weather)
    curves = list(model.curves())

    assert len(curves) == 6 * len(universe)
    assert curves[0] == ('temperature', 'cold', 1.0, pytest.approx(np.exp(-29 ** 2 / 50)))

    peak = [degree for variable, label, u, degree in curves if (variable, label, u) == ('weather', 'ok', 65.0)]
    assert peak == [1.0]


def test_fuzzy_set(universe, weather):
    """ test the pointwise fuzzy set """

    degrees = np.fmin(0.5, weather['ok'].get_array(universe))
    fuzzy_set = FuzzySet(universe, degrees, 'weather')

    assert fuzzy_set.max() == 0.5
    assert not fuzzy_set.is_empty()
    assert len(list(fuzzy_set.points())) == len(universe)
    assert fuzzy_set.interp(65.0) == pytest.approx(0.5)
    assert fuzzy_set.interp(56.25) == pytest.approx(0.125)

    with pytest.raises(ValueError):
        fuzzy_set.degrees[0] = 1.0

    assert FuzzySet(universe, np.zeros(len(universe))).is_empty()

    with pytest.raises(ValueError):
        FuzzySet(universe, np.zeros(10))

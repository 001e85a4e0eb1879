import logging
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Optional, Tuple, Union

import numpy as np
import skfuzzy as fuzz

from .exceptions import ConfigurationError

"""
Fuzzy Library for membership functions, linguistic variables and fuzzy sets
"""

logger = logging.getLogger(__name__)


class Universe:
    def __init__(self, lb: float, ub: float, step: float):
        """
        Universe of discourse shared by all variables of a model,
        an ordered, evenly spaced sequence of points from lb to ub

        Parameters
        ----------
        lb : float
            first point of the universe
        ub : float
            upper end of the universe, included when (ub - lb) is
            a multiple of step
        step : float
            spacing between consecutive points

        Raises
        ------
        ConfigurationError
            if a bound or the step is not a finite number,
            step is not positive or ub < lb
        """

        try:
            lb, ub, step = float(lb), float(ub), float(step)
        except (TypeError, ValueError) as e:
            raise ConfigurationError('universe bounds and step must be numbers, got %r, %r, %r'
                                     % (lb, ub, step)) from e
        if not np.isfinite([lb, ub, step]).all():
            raise ConfigurationError('universe bounds and step must be finite, got %g, %g, %g' % (lb, ub, step))
        if not step > 0:
            raise ConfigurationError('universe step must be positive, got %s' % str(step))
        if ub < lb:
            raise ConfigurationError('universe upper bound %s is below lower bound %s' % (str(ub), str(lb)))

        self.lb = lb
        self.ub = ub
        self.step = step

        n = int(np.floor((self.ub - self.lb) / self.step + 1e-9)) + 1
        self._points = self.lb + self.step * np.arange(n)
        self._points.flags.writeable = False

    @property
    def points(self) -> np.ndarray:
        """
        Returns a copy of the universe points

        Returns
        -------
        np.ndarray
            1d array of universe points
        """
        return self._points.copy()

    def __len__(self) -> int:
        return len(self._points)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Universe):
            return NotImplemented
        return (self.lb, self.ub, self.step) == (other.lb, other.ub, other.step)

    def __hash__(self):
        return hash((self.lb, self.ub, self.step))

    def __repr__(self):
        return 'Universe(%g, %g, %g)' % (self.lb, self.ub, self.step)


class FuzzyFunction:
    kind = ''

    def __init__(self, label: str = ''):
        """
        Contains description and implementation of
        different fuzzy membership functions

        Parameters
        ----------
        label : str, optional
            name of the linguistic label described by the function, by default ''
        """

        self._label = label

    @property
    def label(self) -> str:
        return self._label

    def degree(self, x: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """
        Membership degree of x

        Parameters
        ----------
        x : Union[float,np.ndarray]
            value(s) at which membership is to be evaluated

        Returns
        -------
        Union[float,np.ndarray]
            membership degree(s) in [0,1]
        """
        raise NotImplementedError

    def get_array(self, universe: Universe) -> np.ndarray:
        """
        Sample an array of values from membership function

        Parameters
        ----------
        universe : Universe
            universe to sample the function on

        Returns
        -------
        array : np.ndarray
            1d array of length universe
        """
        return np.asarray(self.degree(universe.points), dtype=float)

    def params(self) -> Dict[str, float]:
        """Shape parameters of the function"""
        raise NotImplementedError

    def relabel(self, label: str) -> 'FuzzyFunction':
        """Copy of the function under another label"""
        return type(self)(label=label, **self.params())

    def __eq__(self, other) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return self.params() == other.params()

    def __repr__(self):
        args = ', '.join('%s=%g' % item for item in self.params().items())
        return '%s(%s)' % (type(self).__name__, args)


class GaussianFunc(FuzzyFunction):
    kind = 'gaussian'

    def __init__(self, center: float, sd: float, label: str = ''):
        """
        Gaussian shaped membership function with unit height

        Parameters
        ----------
        center : float
            point of full membership
        sd : float
            spread (standard deviation) of the curve, must be positive
        label : str, optional
            string to tag instance with, by default ''
        """
        super().__init__(label)

        if not sd > 0:
            raise ConfigurationError('gaussian membership needs sd > 0, got %s' % str(sd))

        self._center = float(center)
        self._sd = float(sd)

    @property
    def center(self) -> float:
        return self._center

    @property
    def sd(self) -> float:
        return self._sd

    def degree(self, x: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        level = np.exp(-((np.asarray(x, dtype=float) - self.center) ** 2) / (2.0 * self.sd ** 2))
        return level if np.ndim(level) else float(level)

    def get_array(self, universe: Universe) -> np.ndarray:
        return fuzz.gaussmf(universe.points, self.center, self.sd)

    def params(self) -> Dict[str, float]:
        return {'center': self.center, 'sd': self.sd}


class ConeFunc(FuzzyFunction):
    kind = 'cone'

    def __init__(self, center: float, radius: float, label: str = ''):
        """
        Cone shaped membership function, linear falloff from 1 at the
        center to 0 at the given radius and zero beyond

        Parameters
        ----------
        center : float
            point of full membership
        radius : float
            half width of the support, must be positive
        label : str, optional
            string to tag instance with, by default ''
        """
        super().__init__(label)

        if not radius > 0:
            raise ConfigurationError('cone membership needs radius > 0, got %s' % str(radius))

        self._center = float(center)
        self._radius = float(radius)

    @property
    def center(self) -> float:
        return self._center

    @property
    def radius(self) -> float:
        return self._radius

    def degree(self, x: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        level = np.fmax(0.0, 1.0 - np.abs(np.asarray(x, dtype=float) - self.center) / self.radius)
        return level if np.ndim(level) else float(level)

    def params(self) -> Dict[str, float]:
        return {'center': self.center, 'radius': self.radius}


FUNCTIONS = {
    GaussianFunc.kind: GaussianFunc,
    ConeFunc.kind: ConeFunc,
}


def make_function(kind: str, label: str = '', **params) -> FuzzyFunction:
    """
    Construct a membership function by its kind name

    Parameters
    ----------
    kind : str
        one of 'gaussian' or 'cone'
    label : str, optional
        label of the function, by default ''
    **params
        shape parameters (center, sd) or (center, radius)

    Returns
    -------
    FuzzyFunction
        the membership function

    Raises
    ------
    ConfigurationError
        if the kind is unknown or the parameters do not match it
    """

    if not isinstance(kind, str) or kind not in FUNCTIONS:
        raise ConfigurationError('unknown membership function kind "%s", expected one of %s'
                                 % (kind, ', '.join(FUNCTIONS)))
    try:
        return FUNCTIONS[kind](label=label, **params)
    except ConfigurationError:
        raise
    except (TypeError, ValueError) as e:
        raise ConfigurationError('invalid parameters %s for %s membership of label "%s"'
                                 % (str(params), kind, label)) from e


class LinguisticVariable:

    def __init__(self, name: str, functions: Union[Mapping[str, FuzzyFunction], List[FuzzyFunction]]):
        """
        Named variable partitioned into labelled membership functions

        Parameters
        ----------
        name : str
            name of the variable, e.g. 'temperature'
        functions : Union[Mapping[str,FuzzyFunction],List[FuzzyFunction]]
            label -> membership function, or a list of labelled functions

        Raises
        ------
        ConfigurationError
            if no labels are given or a label is repeated
        """

        if not name:
            raise ConfigurationError('a linguistic variable needs a name')

        terms = {}
        if isinstance(functions, Mapping):
            items = list(functions.items())
        else:
            items = [(function.label, function) for function in functions]

        for label, function in items:
            if not label:
                raise ConfigurationError('membership function of variable "%s" has no label' % name)
            if label in terms:
                raise ConfigurationError('duplicate label "%s" in variable "%s"' % (label, name))
            if function.label != label:
                function = function.relabel(label)
            terms[label] = function

        if not terms:
            raise ConfigurationError('variable "%s" has no labels' % name)

        self._name = name
        self._terms = terms

    @property
    def name(self) -> str:
        return self._name

    @property
    def terms(self) -> Mapping[str, FuzzyFunction]:
        """Read-only mapping of label to membership function"""
        return MappingProxyType(self._terms)

    @property
    def labels(self) -> List[str]:
        return list(self._terms)

    def __getitem__(self, label: str) -> FuzzyFunction:
        try:
            return self._terms[label]
        except KeyError:
            raise ConfigurationError('variable "%s" has no label "%s"' % (self._name, label)) from None

    def __contains__(self, label: str) -> bool:
        return label in self._terms

    def interp(self, x: Union[float, np.ndarray]) -> Dict[str, Union[float, np.ndarray]]:
        """
        Fuzzify a crisp value over all labels of the variable

        Parameters
        ----------
        x : Union[float,np.ndarray]
            the input(s) at which membership is to be interpreted

        Returns
        -------
        Dict[str,Union[float,np.ndarray]]
            membership degree(s) of the input(s) for each label
        """
        return {label: function.degree(x) for label, function in self._terms.items()}

    def __repr__(self):
        return 'LinguisticVariable(%r, %s)' % (self._name, ', '.join(self._terms))


def fuzzy_partition(name: str, centers: Mapping[str, float], sd: Optional[float] = None,
                    radius: Optional[float] = None) -> LinguisticVariable:
    """
    Build a variable whose labels share one membership shape

    Parameters
    ----------
    name : str
        name of the variable
    centers : Mapping[str,float]
        label -> center of its membership function
    sd : float, optional
        spread of Gaussian shaped labels
    radius : float, optional
        radius of cone shaped labels

    Returns
    -------
    LinguisticVariable
        the partitioned variable

    Raises
    ------
    ConfigurationError
        unless exactly one of sd or radius is given
    """

    if (sd is None) == (radius is None):
        raise ConfigurationError('fuzzy partition "%s" needs exactly one of sd or radius' % name)

    if sd is not None:
        functions = {label: GaussianFunc(center, sd, label) for label, center in centers.items()}
    else:
        functions = {label: ConeFunc(center, radius, label) for label, center in centers.items()}

    return LinguisticVariable(name, functions)


class FuzzySet:

    def __init__(self, universe: Universe, degrees: np.ndarray, label: str = ''):
        """
        Pointwise membership over a universe, the outcome of
        rule evaluation and aggregation

        Parameters
        ----------
        universe : Universe
            the universe the degrees are defined on
        degrees : np.ndarray
            1d array of length universe holding degrees in [0,1]
        label : str, optional
            string to tag instance with, by default ''
        """

        degrees = np.array(degrees, dtype=float)
        if degrees.shape != (len(universe),):
            raise ValueError('expected %d degrees, got array of shape %s' % (len(universe), str(degrees.shape)))

        degrees.flags.writeable = False

        self.universe = universe
        self.label = label
        self._degrees = degrees

    @property
    def degrees(self) -> np.ndarray:
        """Read-only 1d array of membership degrees"""
        return self._degrees

    def max(self) -> float:
        """Largest membership degree of the set"""
        return float(self._degrees.max())

    def is_empty(self) -> bool:
        """True if every degree is zero"""
        return not np.any(self._degrees > 0.0)

    def points(self) -> Iterator[Tuple[float, float]]:
        """
        Iterate over (universe point, degree) pairs

        Yields
        ------
        Tuple[float,float]
            universe point and its degree
        """
        for u, mu in zip(self.universe.points, self._degrees):
            yield float(u), float(mu)

    def interp(self, x: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """
        Membership of x linearly interpolated between universe points

        Parameters
        ----------
        x : Union[float,np.ndarray]
            value(s) at which membership is to be interpreted

        Returns
        -------
        Union[float,np.ndarray]
            interpreted membership level(s)
        """
        return fuzz.interp_membership(self.universe.points, self._degrees, x)

    def defuzzify(self, method: str = 'centroid', default: Optional[float] = None) -> float:
        """Shortcut for `defuzzLib.defuzzify` on this set"""
        from .defuzzLib import defuzzify
        return defuzzify(self, method, default=default)

    def __len__(self) -> int:
        return len(self._degrees)

    def __eq__(self, other) -> bool:
        if not isinstance(other, FuzzySet):
            return NotImplemented
        return self.universe == other.universe and bool((self._degrees == other._degrees).all())

    def __repr__(self):
        return 'FuzzySet(%s, max=%.3f)' % (repr(self.universe), self.max())


class MembershipModel:

    def __init__(self, universe: Universe, inputs: List[LinguisticVariable], output: LinguisticVariable):
        """
        Contains all linguistic variables of a system
        evaluated over one shared universe

        Parameters
        ----------
        universe : Universe
            universe of discourse of every variable
        inputs : List[LinguisticVariable]
            input variables, order defines the column order of batch inputs
        output : LinguisticVariable
            output variable

        Raises
        ------
        ConfigurationError
            if a variable name is used twice
        """

        variables = {}
        for variable in list(inputs) + [output, ]:
            if variable.name in variables:
                raise ConfigurationError('duplicate variable "%s"' % variable.name)
            variables[variable.name] = variable

        if not inputs:
            raise ConfigurationError('a membership model needs at least one input variable')

        self.universe = universe
        self.inputs = tuple(inputs)
        self.output = output
        self._variables = variables

        logger.info('membership model with inputs %s and output %s over %s',
                    ', '.join(self.input_names), output.name, repr(universe))

    @property
    def input_names(self) -> List[str]:
        return [variable.name for variable in self.inputs]

    @property
    def variables(self) -> Mapping[str, LinguisticVariable]:
        """Read-only mapping of name to variable, inputs and output"""
        return MappingProxyType(self._variables)

    def variable(self, name: str) -> LinguisticVariable:
        """
        Look up a variable by name

        Raises
        ------
        ConfigurationError
            if the variable is not defined
        """
        try:
            return self._variables[name]
        except KeyError:
            raise ConfigurationError('undefined variable "%s"' % name) from None

    def degree_of(self, variable: str, label: str, x: Union[float, np.ndarray]) -> Union[float, np.ndarray]:
        """
        Membership degree of x in a label of a variable

        Parameters
        ----------
        variable : str
            variable name
        label : str
            label name
        x : Union[float,np.ndarray]
            crisp value(s)

        Returns
        -------
        Union[float,np.ndarray]
            degree(s) in [0,1]
        """
        return self.variable(variable)[label].degree(x)

    def get_array(self, variable: str, label: str) -> np.ndarray:
        """
        Membership curve of a label sampled on the universe

        Returns
        -------
        np.ndarray
            1d array of length universe
        """
        return self.variable(variable)[label].get_array(self.universe)

    def curves(self) -> Iterator[Tuple[str, str, float, float]]:
        """
        Iterate over every sampled membership curve of the model,
        for renderers that draw the variables

        Yields
        ------
        Tuple[str,str,float,float]
            variable name, label, universe point and degree
        """
        points = self.universe.points
        for name, variable in self._variables.items():
            for label, function in variable.terms.items():
                for u, mu in zip(points, function.get_array(self.universe)):
                    yield name, label, float(u), float(mu)

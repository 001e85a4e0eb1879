import logging
from typing import Optional

import numpy as np
import skfuzzy as fuzz

from .exceptions import EmptySetError
from .fuzzyLib import FuzzySet

"""
Defuzzification Library for reducing a fuzzy set to a crisp value
"""

logger = logging.getLogger(__name__)


def centroid(universe: np.ndarray, degrees: np.ndarray) -> float:
    """
    Degree weighted average of the universe points

    Parameters
    ----------
    universe : np.ndarray
        1d array of universe points
    degrees : np.ndarray
        1d array of membership degrees, same length as universe

    Returns
    -------
    float
        sum(u * mu(u)) / sum(mu(u))

    Raises
    ------
    EmptySetError
        if all degrees are zero
    """

    total = np.sum(degrees)
    if not total > 0.0:
        raise EmptySetError('centroid of a fuzzy set that is zero everywhere is undefined')

    return float(np.sum(universe * degrees) / total)


def largest_of_max(universe: np.ndarray, degrees: np.ndarray) -> float:
    """
    Largest universe point whose degree equals the maximum degree

    Parameters
    ----------
    universe : np.ndarray
        1d array of universe points
    degrees : np.ndarray
        1d array of membership degrees, same length as universe

    Returns
    -------
    float
        the largest point attaining the maximum degree
    """
    return float(np.max(universe[degrees == degrees.max()]))


def _skfuzzy_method(mode: str):
    """Wrap a `skfuzzy.defuzz` mode"""

    def method(universe: np.ndarray, degrees: np.ndarray) -> float:
        if not np.any(degrees > 0.0):
            raise EmptySetError('%s of a fuzzy set that is zero everywhere is undefined' % mode)
        return float(fuzz.defuzz(universe, degrees, mode))

    method.__name__ = mode
    method.__doc__ = '`skfuzzy.defuzz` in %s mode' % mode
    return method


METHODS = {
    'centroid': centroid,
    'largestofmax': largest_of_max,
    'smallestofmax': _skfuzzy_method('som'),
    'meanofmax': _skfuzzy_method('mom'),
    'bisector': _skfuzzy_method('bisector'),
}


def defuzzify(fuzzy_set: FuzzySet, method: str = 'centroid', default: Optional[float] = None) -> float:
    """
    Reduce a fuzzy set to a single crisp number

    Parameters
    ----------
    fuzzy_set : FuzzySet
        the set to defuzzify
    method : str, optional
        one of 'centroid', 'largestofmax', 'smallestofmax',
        'meanofmax' or 'bisector', by default 'centroid'
    default : float, optional
        value returned in place of raising EmptySetError
        when the set is zero everywhere, by default None

    Returns
    -------
    float
        crisp value

    Raises
    ------
    ValueError
        if the method is unknown
    EmptySetError
        if the set is zero everywhere, the method needs a non-empty
        set and no default is given
    """

    if method not in METHODS:
        raise ValueError('unknown defuzzification method "%s", expected one of %s'
                         % (method, ', '.join(METHODS)))

    try:
        value = METHODS[method](fuzzy_set.universe.points, fuzzy_set.degrees)
    except EmptySetError:
        if default is None:
            raise
        logger.warning('%s of an empty fuzzy set replaced by default %g', method, default)
        return float(default)

    logger.debug('%s defuzzification gives %g', method, value)
    return value

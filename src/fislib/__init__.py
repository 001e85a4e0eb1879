"""
Fuzzy Inference System Library
------------------------------

A library for building Mamdani fuzzy inference systems from
linguistic variables and rules, and reducing their fuzzy
conclusions to crisp values

"""

import logging

__version__ = '0.1.0'
__all__ = ['Universe', 'FuzzyFunction', 'GaussianFunc', 'ConeFunc', 'LinguisticVariable', 'fuzzy_partition',
           'FuzzySet', 'MembershipModel', 'Term', 'And', 'Or', 'FuzzyRule', 'RuleSet', 'parse_rule', 'FuzzySystem',
           'defuzzify', 'Design', 'system_from_dict', 'system_to_dict', 'save_system', 'load_system',
           'get_system', 'weather_system', 'FuzzyError', 'ConfigurationError', 'MissingInputError', 'InvalidInputError',
           'EmptySetError']

from .exceptions import FuzzyError, ConfigurationError, MissingInputError, InvalidInputError, EmptySetError
from .fuzzyLib import Universe, FuzzyFunction, GaussianFunc, ConeFunc, LinguisticVariable, fuzzy_partition, \
    FuzzySet, MembershipModel
from .ruleLib import Term, And, Or, FuzzyRule, RuleSet, parse_rule
from .defuzzLib import defuzzify
from .inferenceLib import FuzzySystem
from .DOELib import Design
from .configLib import system_from_dict, system_to_dict, save_system, load_system, get_system
from .weather import weather_system

logging.getLogger(__name__).addHandler(logging.NullHandler())

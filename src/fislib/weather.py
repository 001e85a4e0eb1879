from .fuzzyLib import MembershipModel, Universe, fuzzy_partition
from .inferenceLib import FuzzySystem
from .ruleLib import parse_rule

"""
Weather assessment system from the fuzzy inference tutorial: three
inputs rated against an output scale running from bad to perfect
"""

RULES = [
    'IF temperature IS good AND humidity IS dry AND precipitation IS no.rain THEN weather IS perfect',
    'IF temperature IS hot AND humidity IS wet AND precipitation IS rain THEN weather IS bad',
    'IF temperature IS cold THEN weather IS bad',
    'IF temperature IS good OR humidity IS good OR precipitation IS little.rain THEN weather IS ok',
    'IF temperature IS hot AND precipitation IS little.rain THEN weather IS ok',
    'IF temperature IS hot AND humidity IS dry AND precipitation IS little.rain THEN weather IS ok',
]


def weather_model(universe: Universe = None) -> MembershipModel:
    """
    Linguistic variables of the weather system

    Parameters
    ----------
    universe : Universe, optional
        universe of discourse, by default 1 to 100 in steps of 0.5

    Returns
    -------
    MembershipModel
        temperature, humidity and precipitation inputs and the weather output
    """

    if universe is None:
        universe = Universe(1.0, 100.0, 0.5)

    temperature = fuzzy_partition('temperature', {'cold': 30, 'good': 70, 'hot': 90}, sd=5.0)
    humidity = fuzzy_partition('humidity', {'dry': 30, 'good': 60, 'wet': 80}, sd=3.0)
    precipitation = fuzzy_partition('precipitation', {'no.rain': 30, 'little.rain': 60, 'rain': 90}, sd=7.5)
    weather = fuzzy_partition('weather', {'bad': 40, 'ok': 65, 'perfect': 80}, radius=10.0)

    return MembershipModel(universe, [temperature, humidity, precipitation], weather)


def weather_system(universe: Universe = None) -> FuzzySystem:
    """Weather model with its six rules"""
    rules = [parse_rule(text, 'R%i' % (i + 1)) for i, text in enumerate(RULES)]
    return FuzzySystem(weather_model(universe), rules, label='weather')

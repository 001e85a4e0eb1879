import json
import logging
import os
from typing import Any, Dict, Mapping

from .exceptions import ConfigurationError
from .fuzzyLib import LinguisticVariable, MembershipModel, Universe, make_function
from .inferenceLib import FuzzySystem
from .ruleLib import FuzzyRule, Term, expression_from_dict, expression_to_dict, parse_rule
from .utilities import check_folder, serialize

"""Configuration Library for saving and loading fuzzy systems as json"""

logger = logging.getLogger(__name__)

SETTINGS_FILE = 'settings.json'


def _variable_from_dict(name: str, labels: Mapping[str, Mapping[str, Any]]) -> LinguisticVariable:
    if not isinstance(labels, Mapping):
        raise ConfigurationError('variable "%s" must map labels to membership definitions' % name)

    functions = {}
    for label, definition in labels.items():
        if not isinstance(definition, Mapping):
            raise ConfigurationError('membership of label "%s" in variable "%s" must be a dict, got %r'
                                     % (label, name, definition))
        params = dict(definition)
        kind = params.pop('type', None)
        if kind is None:
            raise ConfigurationError('membership of label "%s" in variable "%s" has no type' % (label, name))
        functions[label] = make_function(kind, label, **params)

    return LinguisticVariable(name, functions)


def _variable_to_dict(variable: LinguisticVariable) -> Dict[str, Dict[str, Any]]:
    return {label: dict(type=function.kind, **function.params()) for label, function in variable.terms.items()}


def _rule_from_dict(definition: Any, index: int) -> FuzzyRule:
    if isinstance(definition, str):
        return parse_rule(definition)
    if not isinstance(definition, Mapping):
        raise ConfigurationError('rule %i must be a string or a dict, got %r' % (index + 1, definition))

    definition = dict(definition)
    label = str(definition.pop('label', ''))
    then = definition.pop('then', None)
    if not isinstance(then, (list, tuple)) or len(then) != 2:
        raise ConfigurationError('rule %i needs "then": [variable, label]' % (index + 1))

    return FuzzyRule(expression_from_dict(definition), Term(str(then[0]), str(then[1])), label)


def _rule_to_dict(rule: FuzzyRule) -> Dict[str, Any]:
    definition = expression_to_dict(rule.antecedent)
    definition['then'] = [rule.consequent.variable, rule.consequent.label]
    definition['label'] = rule.label
    return definition


def system_from_dict(settings: Mapping[str, Any]) -> FuzzySystem:
    """
    Build a fuzzy system from its settings

    Parameters
    ----------
    settings : Mapping[str,Any]
        dict of structure
        {

        'label': str, optional

        'universe': {'lb': float, 'ub': float, 'step': float}

        'inputs': {variable: {label: {'type': 'gaussian'|'cone', **params}}}

        'output': {variable: {label: {...}}} with exactly one variable

        'rules': [str or dict, ...]

        }

    Returns
    -------
    FuzzySystem
        the validated system

    Raises
    ------
    ConfigurationError
        if any part of the settings is missing or malformed
    """

    if not isinstance(settings, Mapping):
        raise ConfigurationError('settings must be a dict, got %r' % (settings, ))

    for key in ('universe', 'inputs', 'output', 'rules'):
        if key not in settings:
            raise ConfigurationError('settings have no "%s" entry' % key)
    for key in ('universe', 'inputs', 'output'):
        if not isinstance(settings[key], Mapping):
            raise ConfigurationError('settings entry "%s" must be a dict, got %r' % (key, settings[key]))
    if not isinstance(settings['rules'], list):
        raise ConfigurationError('settings entry "rules" must be a list, got %r' % (settings['rules'], ))

    try:
        universe = Universe(**settings['universe'])
    except TypeError as e:
        raise ConfigurationError('universe needs lb, ub and step, got %r' % (settings['universe'], )) from e

    inputs = [_variable_from_dict(name, labels) for name, labels in settings['inputs'].items()]

    if len(settings['output']) != 1:
        raise ConfigurationError('exactly one output variable is required, got %i' % len(settings['output']))
    [(name, labels)] = settings['output'].items()
    output = _variable_from_dict(name, labels)

    rules = [_rule_from_dict(definition, i) for i, definition in enumerate(settings['rules'])]

    model = MembershipModel(universe, inputs, output)
    return FuzzySystem(model, rules, label=settings.get('label', ''))


def system_to_dict(system: FuzzySystem) -> Dict[str, Any]:
    """
    Settings of a fuzzy system, the inverse of `system_from_dict`

    Parameters
    ----------
    system : FuzzySystem
        system to describe

    Returns
    -------
    Dict[str,Any]
        json compatible settings
    """

    model = system.model
    settings = {
        'label': system.label,
        'universe': {'lb': model.universe.lb, 'ub': model.universe.ub, 'step': model.universe.step},
        'inputs': {variable.name: _variable_to_dict(variable) for variable in model.inputs},
        'output': {model.output.name: _variable_to_dict(model.output)},
        'rules': [_rule_to_dict(rule) for rule in system.rules],
    }
    return serialize(settings)


def save_system(system: FuzzySystem, name: str) -> None:
    """
    saves the settings of a fuzzy system to a folder

    Parameters
    ----------
    system : FuzzySystem
        system to save
    name : str
        the folder name to be used to save the data which includes
        * settings.json
    """

    exists = check_folder(name)

    if exists:
        logger.warning('folder %s already exists, overwriting %s', name, SETTINGS_FILE)

    with open(os.path.join(name, SETTINGS_FILE), 'w') as f:
        json.dump(system_to_dict(system), f, indent=4)

    logger.info('saved fuzzy system %s to %s', system.label, name)


def get_system(name: str) -> FuzzySystem:
    """
    returns a FuzzySystem initialized using the input folder

    Parameters
    ----------
    name : str
        the folder name to be used to load the data which includes
        * settings.json

    Raises
    ------
    AssertionError
        if the folder or settings file does not exist
    ConfigurationError
        if the settings are malformed
    """

    assert os.path.isdir(name), 'directory %s does not exist!' % name
    path = os.path.join(name, SETTINGS_FILE)
    assert os.path.isfile(path), 'file %s/%s does not exist!' % (name, SETTINGS_FILE)

    return load_system(path)


def load_system(path: str) -> FuzzySystem:
    """
    returns a FuzzySystem initialized from a json settings file

    Parameters
    ----------
    path : str
        path of the json file

    Raises
    ------
    ConfigurationError
        if the file is not valid json or the settings are malformed
    """

    with open(path, 'r') as f:
        try:
            settings = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError('%s is not valid json: %s' % (path, str(e))) from e

    logger.info('loading fuzzy system from %s', path)
    logger.debug(json.dumps(settings, indent=4))

    return system_from_dict(settings)

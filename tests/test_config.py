import json
import os

import pytest
import numpy as np

from fislib import system_from_dict, system_to_dict, save_system, load_system, get_system, weather_system, \
    ConfigurationError

EXAMPLE = os.path.join(os.path.dirname(__file__), '..', 'examples', 'weather.json')


@pytest.fixture
def settings():
    return {
        'label': 'test',
        'universe': {'lb': 0.0, 'ub': 10.0, 'step': 0.5},
        'inputs': {
            'input_1': {
                'lo': {'type': 'cone', 'center': 0.0, 'radius': 5.0},
                'hi': {'type': 'cone', 'center': 10.0, 'radius': 5.0},
            },
            'input_2': {
                'lo': {'type': 'gaussian', 'center': 0.0, 'sd': 2.0},
                'hi': {'type': 'gaussian', 'center': 10.0, 'sd': 2.0},
            },
        },
        'output': {
            'output': {
                'lo': {'type': 'cone', 'center': 0.0, 'radius': 5.0},
                'hi': {'type': 'cone', 'center': 10.0, 'radius': 5.0},
            },
        },
        'rules': [
            'IF input_1 IS lo OR input_2 IS lo THEN output IS lo',
            {'and': [{'is': ['input_1', 'hi']}, {'is': ['input_2', 'hi']}], 'then': ['output', 'hi'],
             'label': 'both_hi'},
        ],
    }


def test_system_from_dict(settings):
    """ test building a system from its settings """

    sim = system_from_dict(settings)

    assert sim.label == 'test'
    assert sim.model.input_names == ['input_1', 'input_2']
    assert sim.model.output.name == 'output'
    assert [rule.label for rule in sim.rules] == ['R1', 'both_hi']
    assert str(sim.rules.rules[1]) == 'IF input_1 IS hi AND input_2 IS hi THEN output IS hi'

    value, _, _ = sim.compute({'input_1': 10.0, 'input_2': 10.0}, method='largestofmax')
    assert value == 10.0


def test_round_trip(settings):
    """ test that settings survive conversion to and from a system """

    sim = system_from_dict(settings)
    sim_2 = system_from_dict(system_to_dict(sim))

    assert system_to_dict(sim_2) == system_to_dict(sim)
    assert json.loads(json.dumps(system_to_dict(sim))) == system_to_dict(sim)

    inputs = {'input_1': 3.0, 'input_2': 6.5}
    assert sim_2.infer(inputs) == sim.infer(inputs)


def test_example_file():
    """ test that the shipped example matches the built-in weather system """

    sim = load_system(EXAMPLE)

    assert system_to_dict(sim) == system_to_dict(weather_system())

    value, _, _ = sim.compute({'temperature': 75.0, 'humidity': 0.0, 'precipitation': 70.0})
    assert value == pytest.approx(65.0, abs=0.01)


def test_save_load(tmp_path):
    """ test the save/load functionality """

    directory = tmp_path / "test_save"

    sim = weather_system()
    save_system(sim, directory)
    assert os.path.isfile(directory / 'settings.json')

    # saving again overwrites
    save_system(sim, directory)

    loaded = get_system(directory)

    inputs = {'temperature': 30.0, 'humidity': 0.0, 'precipitation': 70.0}
    assert np.allclose(loaded.infer(inputs).degrees, sim.infer(inputs).degrees)
    assert loaded.compute(inputs, method='largestofmax')[0] == 40.0


def test_load_missing(tmp_path):
    with pytest.raises(AssertionError):
        get_system(tmp_path / "nowhere")

    with pytest.raises(AssertionError):
        get_system(tmp_path)


def test_load_invalid_json(tmp_path):
    path = tmp_path / 'settings.json'
    path.write_text('{"universe": ')

    with pytest.raises(ConfigurationError):
        load_system(path)


@pytest.mark.parametrize('change', [
    lambda s: s.pop('rules'),
    lambda s: s.update(universe={'lb': 0.0, 'ub': 10.0}),
    lambda s: s.update(universe={'lb': 0.0, 'ub': 10.0, 'step': 0.0}),
    lambda s: s['inputs']['input_1']['lo'].update(type='triangle'),
    lambda s: s['inputs']['input_1']['lo'].pop('type'),
    lambda s: s['inputs']['input_1']['lo'].update(sd=1.0),
    lambda s: s['output'].update(extra=s['output']['output']),
    lambda s: s['rules'].append('IF input_3 IS lo THEN output IS lo'),
    lambda s: s['rules'].append('IF input_1 IS lo THEN'),
    lambda s: s['rules'].append({'or': [{'is': ['input_1', 'lo']}], 'then': ['output', 'lo']}),
    lambda s: s['rules'].append({'xor': [{'is': ['input_1', 'lo']}, {'is': ['input_2', 'lo']}],
                                 'then': ['output', 'lo']}),
    lambda s: s['rules'].append({'is': ['input_1', 'lo']}),
    lambda s: s.update(universe={'lb': 'zero', 'ub': 10.0, 'step': 0.5}),
    lambda s: s.update(universe={'lb': 0.0, 'ub': float('nan'), 'step': 0.5}),
    lambda s: s.update(inputs=[s['inputs']['input_1']]),
    lambda s: s.update(rules={'R1': s['rules'][0]}),
    lambda s: s['inputs']['input_1'].update(lo=30),
    lambda s: s['inputs']['input_1']['lo'].update(center='abc'),
    lambda s: s['inputs']['input_1']['lo'].update(type=['cone']),
    lambda s: s['rules'].append({'is': 5, 'then': ['output', 'lo']}),
    lambda s: s['rules'].append({'and': {'is': ['input_1', 'lo']}, 'then': ['output', 'lo']}),
    lambda s: s['rules'].append({'is': ['input_1', 'lo'], 'then': 7}),
])
def test_invalid_settings(settings, change):
    """ test that malformed settings are rejected """

    change(settings)

    with pytest.raises(ConfigurationError):
        system_from_dict(settings)

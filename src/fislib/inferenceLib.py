import logging
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union

import numpy as np
import skfuzzy as fuzz

from .DOELib import Design
from .defuzzLib import defuzzify
from .exceptions import ConfigurationError
from .fuzzyLib import FuzzySet, MembershipModel
from .ruleLib import FuzzyRule, RuleSet
from .utilities import parallel_sampling

"""
Inference Library for Mamdani max-min composition of fuzzy rules
"""

logger = logging.getLogger(__name__)


def _compute_chunk(system: 'FuzzySystem', samples: np.ndarray, method: str,
                   default: Optional[float]) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Evaluate one chunk of samples, used by parallel batch computation"""
    return system._compute_array(samples, method, default)


class FuzzySystem:

    def __init__(self, model: MembershipModel, rules: Union[RuleSet, Iterable[FuzzyRule]], label: str = ''):
        """
        Contains all fuzzy inputs, outputs, rules,
        and fuzzy logic interpreter

        Parameters
        ----------
        model : MembershipModel
            linguistic variables defining the inputs and the output
        rules : Union[RuleSet,Iterable[FuzzyRule]]
            rule set, or fuzzy rules validated against the model
        label: str, optional
            string to tag instance with
        """

        if not isinstance(rules, RuleSet):
            rules = RuleSet(model, rules)
        elif rules.model is not model:
            raise ConfigurationError('rule set was validated against a different membership model')

        self.model = model
        self.rules = rules
        self.label = label

        # clipped consequents only ever read these curves
        self._consequents = {}
        for term in model.output.labels:
            curve = model.get_array(model.output.name, term)
            curve.flags.writeable = False
            self._consequents[term] = curve

        logger.info('fuzzy system %s with %i rules on output %s', label or '<unnamed>', len(rules),
                    model.output.name)

    @property
    def universe(self):
        return self.model.universe

    def fire(self, inputs: Mapping[str, Union[float, np.ndarray]]) -> Dict[str, Union[float, np.ndarray]]:
        """
        Firing strength of every rule

        Parameters
        ----------
        inputs : Mapping[str,Union[float,np.ndarray]]
            input variable name -> crisp value(s)

        Returns
        -------
        Dict[str,Union[float,np.ndarray]]
            rule label -> firing strength(s)

        Raises
        ------
        MissingInputError
            if a rule refers to a variable absent from inputs
        """
        return {rule.label: self.rules.evaluate_antecedent(rule, inputs) for rule in self.rules}

    def _aggregate(self, inputs: Mapping[str, Union[float, np.ndarray]]) -> np.ndarray:
        """
        Clip each rule consequent at its firing strength with `np.fmin`
        and take the pointwise maximum over all rules with `np.fmax`

        Returns
        -------
        np.ndarray
            array of shape [len universe] for scalar inputs or
            [n, len universe] for inputs of n values each
        """

        strengths = self.fire(inputs)
        logger.debug('firing strengths %s', strengths)

        aggregate = None
        for rule in self.rules:
            strength = np.asarray(strengths[rule.label], dtype=float)
            strength = strength.reshape(strength.shape + (1,))

            # strength = [1] or [n, 1]

            activation = np.fmin(strength, self._consequents[rule.consequent.label])

            # activation = [len universe] or [n, len universe]

            aggregate = activation if aggregate is None else np.fmax(aggregate, activation)

        return aggregate

    def infer(self, inputs: Mapping[str, float]) -> FuzzySet:
        """
        Evaluate the rules for one set of crisp inputs

        Parameters
        ----------
        inputs : Mapping[str,float]
            input variable name -> crisp value

        Returns
        -------
        FuzzySet
            aggregated fuzzy conclusion over the output universe

        Raises
        ------
        MissingInputError
            if a rule refers to a variable absent from inputs
        InvalidInputError
            if a rule refers to a variable whose value is NaN or infinite
        """

        values = {name: float(value) for name, value in inputs.items()}
        return FuzzySet(self.universe, self._aggregate(values).reshape(len(self.universe)),
                        label=self.model.output.name)

    def compute(self, inputs: Mapping[str, float], method: str = 'centroid',
                default: Optional[float] = None) -> Tuple[float, FuzzySet, float]:
        """
        Compute the crisp output of the system

        Parameters
        ----------
        inputs : Mapping[str,float]
            input variable name -> crisp value
        method : str, optional
            defuzzification method, by default 'centroid'
        default : float, optional
            crisp value used when the aggregate is zero everywhere,
            by default None which raises EmptySetError instead

        Returns
        -------
        output : float
            defuzzified crisp value
        aggregate : FuzzySet
            aggregated fuzzy conclusion
        output_activation : float
            membership of the aggregate at the crisp value (for plot)
        """

        aggregate = self.infer(inputs)
        output = defuzzify(aggregate, method, default=default)
        output_activation = float(aggregate.interp(output))

        logger.debug('inputs %s give %s %g', dict(inputs), self.model.output.name, output)

        return output, aggregate, output_activation

    def _compute_array(self, samples: np.ndarray, method: str,
                       default: Optional[float]) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        inputs = {name: samples[:, i] for i, name in enumerate(self.model.input_names)}
        aggregate = self._aggregate(inputs)

        # aggregate = [n, len universe]

        universe = self.universe.points
        output = np.zeros(samples.shape[0])
        output_activation = np.zeros(samples.shape[0])
        for i, membership in enumerate(aggregate):
            output[i] = defuzzify(FuzzySet(self.universe, membership), method, default=default)
            output_activation[i] = fuzz.interp_membership(universe, membership, output[i])

        return output, aggregate, output_activation

    def compute_batch(self, samples: np.ndarray, method: str = 'centroid', default: Optional[float] = None,
                      num_threads: int = 1) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Compute the crisp output for many independent sets of inputs

        Parameters
        ----------
        samples : np.ndarray
            2d array of inputs of shape [n, n_inputs]
            n = number of data points to be computed and
            n_inputs = number of input variables, in model order
        method : str, optional
            defuzzification method, by default 'centroid'
        default : float, optional
            crisp value used for samples whose aggregate is zero
            everywhere, by default None which raises EmptySetError
        num_threads : int, optional
            number of parallel processes, by default 1

        Returns
        -------
        output : np.ndarray
            1d array of n defuzzified crisp values
        aggregate : np.ndarray
            array of shape [n, len universe]
        output_activation : np.ndarray
            1d array of n activation values for defuzzified outputs
        """

        samples = np.asarray(samples, dtype=float)
        if samples.ndim == 1:
            samples = samples.reshape((1, len(samples)))  # reshape 1D arrays to 2D

        # samples = [n, n_inputs]

        n_inputs = len(self.model.inputs)
        if samples.ndim != 2 or samples.shape[1] != n_inputs:
            raise ValueError('expected samples of shape [n, %i] for inputs %s, got %s'
                             % (n_inputs, ', '.join(self.model.input_names), str(samples.shape)))

        if samples.shape[0] == 0:
            return np.zeros(0), np.zeros((0, len(self.universe))), np.zeros(0)

        if num_threads > 1 and samples.shape[0] > 1:
            chunks = np.array_split(samples, min(num_threads, samples.shape[0]))
            results = parallel_sampling(_compute_chunk, [[self, chunk] for chunk in chunks],
                                        fargs=[method, default], num_threads=num_threads)
            output = np.concatenate([result[0] for result in results])
            aggregate = np.concatenate([result[1] for result in results])
            output_activation = np.concatenate([result[2] for result in results])
        else:
            output, aggregate, output_activation = self._compute_array(samples, method, default)

        return output, aggregate, output_activation

    def sweep(self, lb: Union[List[float], np.ndarray], ub: Union[List[float], np.ndarray],
              n_levels: Union[int, List[int]], method: str = 'centroid', default: Optional[float] = None,
              num_threads: int = 1) -> Tuple[np.ndarray, np.ndarray]:
        """
        Crisp output over a full factorial grid of the inputs,
        i.e. the control surface of the system

        Parameters
        ----------
        lb : Union[List[float],np.ndarray]
            lower value of each input, in model order
        ub : Union[List[float],np.ndarray]
            upper value of each input, in model order
        n_levels : Union[int,List[int]]
            number of grid levels, per input or for all of them
        method : str, optional
            defuzzification method, by default 'centroid'
        default : float, optional
            crisp value for grid points whose aggregate is zero
            everywhere, by default None
        num_threads : int, optional
            number of parallel processes, by default 1

        Returns
        -------
        grid : np.ndarray
            array of shape [n, n_inputs] of grid points
        output : np.ndarray
            1d array of n crisp values
        """

        design = Design(lb, ub, n_levels, 'fullfact')
        logger.info('sweeping %s over %i grid points', self.model.output.name, design.nsamples)

        grid = design.unscale()
        output, _, _ = self.compute_batch(grid, method, default=default, num_threads=num_threads)
        return grid, output

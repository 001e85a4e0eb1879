"""Exceptions raised by the fuzzy inference library"""


class FuzzyError(Exception):
    """Base class for all fuzzy inference errors"""


class ConfigurationError(FuzzyError, ValueError):
    """
    Raised when a variable, membership function or rule definition
    is malformed, e.g. a rule refers to an undefined variable or label.
    Detected when the model is constructed, before any inference runs.
    """


class MissingInputError(FuzzyError, KeyError):
    """
    Raised when an inference call omits the value of a variable
    referenced by at least one rule
    """

    def __init__(self, missing, rule: str = ''):
        self.missing = sorted(missing) if not isinstance(missing, str) else [missing, ]
        self.rule = rule
        msg = 'no input value given for variable(s) %s' % ', '.join(self.missing)
        if rule:
            msg += ' required by rule %s' % rule
        super().__init__(msg)

    def __str__(self):
        return self.args[0]


class EmptySetError(FuzzyError, ArithmeticError):
    """Raised when defuzzifying a fuzzy set that is zero everywhere"""


class InvalidInputError(FuzzyError, ValueError):
    """
    Raised when an inference call gives a variable a value that is
    not a finite number, e.g. NaN or infinity
    """

    def __init__(self, variables, rule: str = ''):
        self.variables = sorted(variables) if not isinstance(variables, str) else [variables, ]
        self.rule = rule
        msg = 'input value of variable(s) %s is not a finite number' % ', '.join(self.variables)
        if rule:
            msg += ' in rule %s' % rule
        super().__init__(msg)

import logging
import re
from typing import Dict, Iterable, List, Mapping, Set, Union

import numpy as np

from .exceptions import ConfigurationError, InvalidInputError, MissingInputError
from .fuzzyLib import MembershipModel

"""
Rule Library for defining fuzzy rules and evaluating their antecedents
"""

logger = logging.getLogger(__name__)

Degree = Union[float, np.ndarray]


class Expression:
    """
    Node of an antecedent expression tree, combine
    nodes with `&` (fuzzy AND) and `|` (fuzzy OR)
    """

    def __and__(self, other: 'Expression') -> 'And':
        return And(self, other)

    def __or__(self, other: 'Expression') -> 'Or':
        return Or(self, other)

    def evaluate(self, model: MembershipModel, inputs: Mapping[str, Degree]) -> Degree:
        raise NotImplementedError

    def variables(self) -> Set[str]:
        """Names of all variables referenced by the expression"""
        raise NotImplementedError

    def terms(self) -> List['Term']:
        """All leaf terms of the expression, left to right"""
        raise NotImplementedError


class Term(Expression):

    def __init__(self, variable: str, label: str):
        """
        Leaf statement `variable IS label`

        Parameters
        ----------
        variable : str
            variable name
        label : str
            label of the variable
        """

        self.variable = variable
        self.label = label

    def evaluate(self, model: MembershipModel, inputs: Mapping[str, Degree]) -> Degree:
        return model.degree_of(self.variable, self.label, inputs[self.variable])

    def variables(self) -> Set[str]:
        return {self.variable, }

    def terms(self) -> List['Term']:
        return [self, ]

    def __eq__(self, other) -> bool:
        if not isinstance(other, Term):
            return NotImplemented
        return (self.variable, self.label) == (other.variable, other.label)

    def __hash__(self):
        return hash((self.variable, self.label))

    def __str__(self):
        return '%s IS %s' % (self.variable, self.label)

    def __repr__(self):
        return 'Term(%r, %r)' % (self.variable, self.label)


class _Connective(Expression):
    keyword = ''

    def __init__(self, left: Expression, right: Expression):
        self.left = left
        self.right = right

    def variables(self) -> Set[str]:
        return self.left.variables() | self.right.variables()

    def terms(self) -> List[Term]:
        return self.left.terms() + self.right.terms()

    def __eq__(self, other) -> bool:
        if type(self) is not type(other):
            return NotImplemented
        return self.left == other.left and self.right == other.right

    def __hash__(self):
        return hash((self.keyword, self.left, self.right))

    def _operand(self, node: Expression, right: bool = False) -> str:
        # OR under AND needs brackets, as does a right operand of the same
        # keyword (parsed chains nest to the left)
        if isinstance(node, _Connective) and ((node.keyword != self.keyword and self.keyword == 'AND')
                                              or (right and node.keyword == self.keyword)):
            return '(%s)' % str(node)
        return str(node)

    def __str__(self):
        return '%s %s %s' % (self._operand(self.left), self.keyword, self._operand(self.right, right=True))

    def __repr__(self):
        return '%s(%r, %r)' % (type(self).__name__, self.left, self.right)


class And(_Connective):
    """Fuzzy conjunction, the minimum of both degrees"""
    keyword = 'AND'

    def evaluate(self, model: MembershipModel, inputs: Mapping[str, Degree]) -> Degree:
        return np.fmin(self.left.evaluate(model, inputs), self.right.evaluate(model, inputs))


class Or(_Connective):
    """Fuzzy disjunction, the maximum of both degrees"""
    keyword = 'OR'

    def evaluate(self, model: MembershipModel, inputs: Mapping[str, Degree]) -> Degree:
        return np.fmax(self.left.evaluate(model, inputs), self.right.evaluate(model, inputs))


class FuzzyRule:

    def __init__(self, antecedent: Expression, consequent: Term, label: str = ''):
        """
        Defines a fuzzy rule by connecting a combination of
        fuzzy input statements to a label of the output

        Parameters
        ----------
        antecedent : Expression
            expression tree of Term, And and Or nodes
        consequent : Term
            output variable and the label the rule concludes
        label : str, optional
            string to tag instance with, by default ''
        """

        if not isinstance(antecedent, Expression):
            raise ConfigurationError('rule antecedent must be an expression, got %r' % (antecedent, ))
        if not isinstance(consequent, Term):
            raise ConfigurationError('rule consequent must be a term, got %r' % (consequent, ))

        self._antecedent = antecedent
        self._consequent = consequent
        self._label = label

    @property
    def antecedent(self) -> Expression:
        return self._antecedent

    @property
    def consequent(self) -> Term:
        return self._consequent

    @property
    def label(self) -> str:
        return self._label

    def relabel(self, label: str) -> 'FuzzyRule':
        """Copy of the rule under another label"""
        return FuzzyRule(self._antecedent, self._consequent, label)

    def __eq__(self, other) -> bool:
        if not isinstance(other, FuzzyRule):
            return NotImplemented
        return self._antecedent == other._antecedent and self._consequent == other._consequent

    def __hash__(self):
        return hash((self._antecedent, self._consequent))

    def __str__(self):
        return 'IF %s THEN %s' % (str(self._antecedent), str(self._consequent))

    def __repr__(self):
        return 'FuzzyRule(%r, %r, label=%r)' % (self._antecedent, self._consequent, self._label)


class RuleSet:

    def __init__(self, model: MembershipModel, rules: Iterable[FuzzyRule]):
        """
        Unordered collection of rules validated against a membership model

        Parameters
        ----------
        model : MembershipModel
            variables the rules refer to
        rules : Iterable[FuzzyRule]
            fuzzy rules, unlabelled rules are tagged R1, R2, ...

        Raises
        ------
        ConfigurationError
            if a rule refers to an undefined variable or label, concludes
            on a variable other than the output, or no rules are given
        """

        self.model = model

        labelled = []
        for i, rule in enumerate(rules):
            if not rule.label:
                rule = rule.relabel('R%i' % (i + 1))
            self._validate(rule)
            labelled.append(rule)

        if not labelled:
            raise ConfigurationError('a rule set needs at least one rule')

        names = [rule.label for rule in labelled]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ConfigurationError('duplicate rule label(s) %s' % ', '.join(duplicates))

        self._rules = tuple(labelled)

    def _validate(self, rule: FuzzyRule):
        inputs = self.model.input_names

        for term in rule.antecedent.terms():
            if term.variable not in inputs:
                raise ConfigurationError('rule %s refers to undefined input variable "%s"'
                                         % (rule.label, term.variable))
            if term.label not in self.model.variable(term.variable):
                raise ConfigurationError('rule %s refers to undefined label "%s" of variable "%s"'
                                         % (rule.label, term.label, term.variable))

        consequent = rule.consequent
        if consequent.variable != self.model.output.name:
            raise ConfigurationError('rule %s concludes on "%s" which is not the output variable "%s"'
                                     % (rule.label, consequent.variable, self.model.output.name))
        if consequent.label not in self.model.output:
            raise ConfigurationError('rule %s concludes on undefined label "%s" of output "%s"'
                                     % (rule.label, consequent.label, consequent.variable))

    @property
    def rules(self) -> tuple:
        return self._rules

    def variables(self) -> Set[str]:
        """Input variables referenced by at least one rule"""
        names = set()
        for rule in self._rules:
            names |= rule.antecedent.variables()
        return names

    def __iter__(self):
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)

    def evaluate_antecedent(self, rule: FuzzyRule, inputs: Mapping[str, Degree]) -> Degree:
        """
        Firing strength of a rule for the given inputs

        Parameters
        ----------
        rule : FuzzyRule
            the rule to evaluate
        inputs : Mapping[str,Degree]
            variable name -> crisp value, or equal length 1d arrays of values

        Returns
        -------
        Degree
            firing strength(s) in [0,1]

        Raises
        ------
        MissingInputError
            if inputs omit a variable referenced by the rule
        InvalidInputError
            if a referenced variable has a NaN or infinite value
        """

        missing = rule.antecedent.variables() - set(inputs)
        if missing:
            raise MissingInputError(missing, rule.label)

        invalid = {name for name in rule.antecedent.variables() if not np.isfinite(inputs[name]).all()}
        if invalid:
            raise InvalidInputError(invalid, rule.label)

        return rule.antecedent.evaluate(self.model, inputs)


# Rule text parser
############################################################

_TOKEN = re.compile(r'\s*(?:(\()|(\))|([^\s()]+))')
_KEYWORDS = {'IF', 'THEN', 'IS', 'AND', 'OR'}


def _tokenize(text: str) -> List[str]:
    tokens = []
    pos = 0
    text = text.strip()
    while pos < len(text):
        match = _TOKEN.match(text, pos)
        if match is None:
            raise ConfigurationError('cannot parse rule "%s" at position %i' % (text, pos))
        tokens.append(match.group(match.lastindex))
        pos = match.end()
    return tokens


class _RuleParser:
    """
    Recursive descent parser for

    rule   := IF expr THEN term
    expr   := conj (OR conj)*
    conj   := factor (AND factor)*
    factor := term | '(' expr ')'
    term   := NAME IS NAME
    """

    def __init__(self, text: str):
        self.text = text
        self.tokens = _tokenize(text)
        self.pos = 0

    def error(self, msg: str):
        raise ConfigurationError('invalid rule "%s": %s' % (self.text, msg))

    def peek(self) -> str:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else ''

    def keyword(self) -> str:
        return self.peek().upper()

    def expect(self, keyword: str):
        if self.keyword() != keyword:
            self.error('expected %s but found "%s"' % (keyword, self.peek() or 'end of rule'))
        self.pos += 1

    def name(self) -> str:
        token = self.peek()
        if not token or token in '()' or token.upper() in _KEYWORDS:
            self.error('expected a name but found "%s"' % (token or 'end of rule'))
        self.pos += 1
        return token

    def rule(self, label: str = '') -> FuzzyRule:
        self.expect('IF')
        antecedent = self.expr()
        self.expect('THEN')
        consequent = self.term()
        if self.pos != len(self.tokens):
            self.error('unexpected "%s" after consequent' % self.peek())
        return FuzzyRule(antecedent, consequent, label)

    def expr(self) -> Expression:
        node = self.conj()
        while self.keyword() == 'OR':
            self.pos += 1
            node = Or(node, self.conj())
        return node

    def conj(self) -> Expression:
        node = self.factor()
        while self.keyword() == 'AND':
            self.pos += 1
            node = And(node, self.factor())
        return node

    def factor(self) -> Expression:
        if self.peek() == '(':
            self.pos += 1
            node = self.expr()
            if self.peek() != ')':
                self.error('missing closing bracket')
            self.pos += 1
            return node
        return self.term()

    def term(self) -> Term:
        variable = self.name()
        self.expect('IS')
        return Term(variable, self.name())


def parse_rule(text: str, label: str = '') -> FuzzyRule:
    """
    Parse a rule written as text, e.g.

    `IF temperature IS good AND (humidity IS dry OR humidity IS good) THEN weather IS ok`

    Keywords are case-insensitive, AND binds tighter than OR.

    Parameters
    ----------
    text : str
        the rule
    label : str, optional
        string to tag the rule with, by default ''

    Returns
    -------
    FuzzyRule
        the parsed rule

    Raises
    ------
    ConfigurationError
        if the text is not a valid rule
    """
    return _RuleParser(text).rule(label)


def expression_from_dict(node: Union[Dict, List]) -> Expression:
    """
    Build an expression from its nested dict form,
    {'is': [variable, label]}, {'and': [...]} or {'or': [...]}
    where 'and' / 'or' take two or more operands

    Raises
    ------
    ConfigurationError
        if the structure is malformed
    """

    if not isinstance(node, Mapping) or len(node) != 1:
        raise ConfigurationError('expression must be a dict with one key, got %r' % (node, ))

    [(key, value)] = node.items()
    key = str(key).lower()

    if key == 'is':
        if not isinstance(value, (list, tuple)) or len(value) != 2:
            raise ConfigurationError('"is" needs [variable, label], got %r' % (value, ))
        return Term(str(value[0]), str(value[1]))
    elif key in ('and', 'or'):
        if not isinstance(value, (list, tuple)) or len(value) < 2:
            raise ConfigurationError('"%s" needs at least two operands, got %r' % (key, value))
        operands = [expression_from_dict(item) for item in value]
        node = operands[0]
        for operand in operands[1:]:
            node = And(node, operand) if key == 'and' else Or(node, operand)
        return node
    else:
        raise ConfigurationError('unknown expression operator "%s"' % key)


def expression_to_dict(node: Expression) -> Dict:
    """Inverse of `expression_from_dict`"""

    if isinstance(node, Term):
        return {'is': [node.variable, node.label]}
    key = 'and' if isinstance(node, And) else 'or'
    return {key: [expression_to_dict(node.left), expression_to_dict(node.right)]}

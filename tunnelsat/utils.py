"""
Various util functions on top of z3
"""
import itertools

import z3


def conj(constraints):
    """Conjunction of a list of constraints, True when the list is empty"""
    constraints = list(constraints)
    if not constraints:
        return z3.BoolVal(True)
    if len(constraints) == 1:
        return constraints[0]
    return z3.And(constraints)


def disj(constraints):
    """Disjunction of a list of constraints, False when the list is empty"""
    constraints = list(constraints)
    if not constraints:
        return z3.BoolVal(False)
    if len(constraints) == 1:
        return constraints[0]
    return z3.Or(constraints)


def iff(left, right):
    return left == right


def at_most_one(variables):
    """Pairwise mutual exclusion over the given variables"""
    return conj([z3.Or(z3.Not(a), z3.Not(b)) for a, b in itertools.combinations(variables, 2)])


def value_of_var_in_model(model, var):
    """
    Truth value of var in model.

    Variables the solver never had to assign are completed to False.
    """
    return z3.is_true(model.eval(var, model_completion=True))

"""
Reduction of the tunnel routing problem to SAT.

reduction(network, bound) returns a formula that is satisfiable if and
only if there is a well-formed path of exactly bound steps from the
initial node to the final node of the network. A well-formed path starts
and ends with the single cell stack [4], and every step performs an
action that the current node supports and that agrees with the stack.

Variables (see tunnelsat.variables):
  x_{u,i,h}  the path is at node u on position i with a stack of height h
  y_{i,h,p}  on position i, the stack cell at height h holds protocol p

The caller is responsible for the preconditions (see
TunnelNetwork.check): a non negative bound, exactly one initial and one
final node. Nothing is checked here.
"""

import itertools

import z3

from tunnelsat.common import POP
from tunnelsat.common import PROTOCOLS
from tunnelsat.common import PUSH
from tunnelsat.common import TRANSMIT
from tunnelsat.common import Action
from tunnelsat.common import actions_with
from tunnelsat.common import stack_size
from tunnelsat.utils import at_most_one
from tunnelsat.utils import conj
from tunnelsat.utils import disj
from tunnelsat.utils import iff
from tunnelsat.variables import content_variable
from tunnelsat.variables import p4_variable
from tunnelsat.variables import p6_variable
from tunnelsat.variables import path_variable


def _supports(network, node, height_delta, before, after):
    """z3 constant: can node perform the action with this effect"""
    action = Action.from_effect(height_delta, before, after)
    return z3.BoolVal(network.has_action(node, action))


def _active_at(network, pos, height):
    """Some node is on position pos with a stack of the given height"""
    return disj([path_variable(node, pos, height) for node in network.nodes])


def _unchanged(pos, heights):
    """Cells at the given heights hold the same protocol on pos and pos + 1"""
    constraints = []
    for height in heights:
        for protocol in PROTOCOLS:
            constraints.append(iff(content_variable(pos, height, protocol),
                                   content_variable(pos + 1, height, protocol)))
    return conj(constraints)


def exist_unique_op_unique_height(network, bound):
    """
    φ1: on every position, exactly one pair (node, height) holds.
    """
    size = stack_size(bound)
    constraints = []
    for pos in range(bound + 1):
        pairs = [path_variable(node, pos, height)
                 for node in network.nodes for height in range(size)]
        constraints.append(disj(pairs))
        constraints.append(at_most_one(pairs))
    return conj(constraints)


def init_final_stack(network, bound):
    """
    φ2: the path starts on the initial node and ends on the final node,
    both times with the stack [4].
    """
    return conj([path_variable(network.initial, 0, 0),
                 p4_variable(0, 0),
                 path_variable(network.final, bound, 0),
                 p4_variable(bound, 0)])


def transmission_stack_height(network, bound, pos):
    """
    φ3: if the height stays the same between pos and pos + 1, the node
    must be able to transmit the protocol on top of the stack.
    """
    size = stack_size(bound)
    constraints = []
    for node in network.nodes:
        for height in range(size):
            moves = conj([path_variable(node, pos, height),
                          _active_at(network, pos + 1, height)])
            allowed = []
            for top in PROTOCOLS:
                allowed.append(z3.Implies(content_variable(pos, height, top),
                                          _supports(network, node, TRANSMIT, top, top)))
            constraints.append(z3.Implies(moves, conj(allowed)))
    return conj(constraints)


def encapsulation_stack_height(network, bound, pos):
    """
    φ4: if the height grows by one between pos and pos + 1, the node must
    be able to push the new top over the current one.
    """
    size = stack_size(bound)
    constraints = []
    for node in network.nodes:
        for height in range(size - 1):
            moves = conj([path_variable(node, pos, height),
                          _active_at(network, pos + 1, height + 1)])
            allowed = []
            for before, after in itertools.product(PROTOCOLS, PROTOCOLS):
                contents = conj([content_variable(pos, height, before),
                                 content_variable(pos + 1, height + 1, after)])
                allowed.append(z3.Implies(contents,
                                          _supports(network, node, PUSH, before, after)))
            constraints.append(z3.Implies(moves, conj(allowed)))
    return conj(constraints)


def decapsulation_stack_height(network, bound, pos):
    """
    φ5: if the height shrinks by one between pos and pos + 1, the node must
    be able to pop the current top, revealing the cell underneath.
    """
    size = stack_size(bound)
    constraints = []
    for node in network.nodes:
        for height in range(1, size):
            moves = conj([path_variable(node, pos, height),
                          _active_at(network, pos + 1, height - 1)])
            allowed = []
            for top, under in itertools.product(PROTOCOLS, PROTOCOLS):
                contents = conj([content_variable(pos, height, top),
                                 content_variable(pos, height - 1, under)])
                allowed.append(z3.Implies(contents,
                                          _supports(network, node, POP, top, under)))
            constraints.append(z3.Implies(moves, conj(allowed)))
    return conj(constraints)


def stack_content_coherence(bound, pos):
    """
    φ6: every cell holds exactly one protocol.
    """
    return conj([z3.Xor(p4_variable(pos, height), p6_variable(pos, height))
                 for height in range(stack_size(bound))])


def operation_feasibility(network, bound, pos):
    """
    φ7: a node cannot be reached with a top it has no action for.
    """
    size = stack_size(bound)
    constraints = []
    for node in network.nodes:
        for top in PROTOCOLS:
            if network.actions(node).intersection(actions_with(before=top)):
                continue
            for height in range(size):
                constraints.append(z3.Not(z3.And(path_variable(node, pos, height),
                                                 content_variable(pos, height, top))))
    return conj(constraints)


def stack_preservation_logic(network, bound):
    """
    φ8, φ9, φ10: what the action does not touch is copied to the next
    position. A transmission keeps the whole stack, an encapsulation keeps
    every cell up to the old top and a decapsulation every cell under the
    removed top.
    """
    size = stack_size(bound)
    constraints = []
    for pos in range(bound):
        for height in range(size):
            here = _active_at(network, pos, height)
            # φ8 transmission
            constraints.append(z3.Implies(
                conj([here, _active_at(network, pos + 1, height)]),
                _unchanged(pos, range(height + 1))))
            # φ9 encapsulation
            if height + 1 < size:
                constraints.append(z3.Implies(
                    conj([here, _active_at(network, pos + 1, height + 1)]),
                    _unchanged(pos, range(height + 1))))
            # φ10 decapsulation
            if height >= 1:
                constraints.append(z3.Implies(
                    conj([here, _active_at(network, pos + 1, height - 1)]),
                    _unchanged(pos, range(height))))
    return conj(constraints)


def edge_constraints(network, bound):
    """
    φ11: from (u, pos, h) the path goes to a successor of u on pos + 1,
    with a height of h - 1, h or h + 1.
    """
    size = stack_size(bound)
    constraints = []
    for pos in range(bound):
        for node in network.nodes:
            successors = network.successors(node)
            for height in range(size):
                current = path_variable(node, pos, height)
                if not successors:
                    constraints.append(z3.Not(current))
                    continue
                nexts = []
                for succ in successors:
                    for next_height in (height - 1, height, height + 1):
                        if 0 <= next_height < size:
                            nexts.append(path_variable(succ, pos + 1, next_height))
                constraints.append(z3.Implies(current, disj(nexts)))
    return conj(constraints)


def reduction_parts(network, bound):
    """
    Every conjunct of the reduction, as a list of (name, formula).
    Transition constraints are generated for positions 0 to bound - 1,
    the last node of the path does not act.
    """
    parts = [('exist_unique', exist_unique_op_unique_height(network, bound)),
             ('init_final', init_final_stack(network, bound))]
    for pos in range(bound):
        parts.append(('transmission_%d' % pos, transmission_stack_height(network, bound, pos)))
        parts.append(('encapsulation_%d' % pos, encapsulation_stack_height(network, bound, pos)))
        parts.append(('decapsulation_%d' % pos, decapsulation_stack_height(network, bound, pos)))
        parts.append(('feasibility_%d' % pos, operation_feasibility(network, bound, pos)))
    for pos in range(bound + 1):
        parts.append(('coherence_%d' % pos, stack_content_coherence(bound, pos)))
    parts.append(('preservation', stack_preservation_logic(network, bound)))
    parts.append(('edges', edge_constraints(network, bound)))
    return parts


def reduction(network, bound):
    """The formula of the reduction for network and bound"""
    return conj([formula for _, formula in reduction_parts(network, bound)])

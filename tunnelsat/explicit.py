"""
Explicit semantics of tunnel routing.

Stacks are tuples of Protocol, bottom first. These functions replay a
path step by step and enumerate paths exhaustively; they are exponential
in the bound and only meant for small networks, to cross-check the SAT
reduction.
"""

from tunnelsat.common import POP
from tunnelsat.common import PUSH
from tunnelsat.common import PathStep
from tunnelsat.common import Protocol


INITIAL_STACK = (Protocol.P4,)


def apply_action(stack, action):
    """
    Returns the stack after performing action on stack.
    Raises ValueError if the action does not apply.
    """
    if not stack:
        raise ValueError("Cannot apply %s on an empty stack" % action)
    if stack[-1] != action.before:
        raise ValueError("%s expects %s on top, found %s" % (action, action.before, stack[-1]))
    if action.height_delta == PUSH:
        return stack + (action.after,)
    if action.height_delta == POP:
        if len(stack) < 2:
            raise ValueError("%s would empty the stack" % action)
        if stack[-2] != action.after:
            raise ValueError("%s reveals %s, found %s" % (action, action.after, stack[-2]))
        return stack[:-1]
    return stack


def simulate(network, steps, stack=INITIAL_STACK):
    """
    Replay steps on network starting from stack.

    Checks that every step follows an edge, uses an action of its source
    node and agrees with the stack. Returns the list of the len(steps) + 1
    stacks met along the way.
    """
    stacks = [stack]
    for i, step in enumerate(steps):
        if i > 0 and steps[i - 1].dst != step.src:
            raise ValueError("Step %d starts on %s, previous step ended on %s" % (
                i, network.node_name(step.src), network.node_name(steps[i - 1].dst)))
        if not network.is_edge(step.src, step.dst):
            raise ValueError("Step %d: no edge from %s to %s" % (
                i, network.node_name(step.src), network.node_name(step.dst)))
        if not network.has_action(step.src, step.action):
            raise ValueError("Step %d: %s cannot perform %s" % (
                i, network.node_name(step.src), step.action))
        stack = apply_action(stack, step.action)
        stacks.append(stack)
    return stacks


def is_well_formed(network, steps):
    """A path from the initial node to the final node ending with the stack [4]"""
    if not steps:
        return network.initial == network.final
    if steps[0].src != network.initial or steps[-1].dst != network.final:
        return False
    try:
        stacks = simulate(network, steps)
    except ValueError:
        return False
    return stacks[-1] == INITIAL_STACK


def find_path_explicit(network, bound):
    """
    Depth first enumeration of the well-formed paths of length bound.
    Returns the first one found as a list of PathStep, None if there is none.
    """
    if network.initial is None or network.final is None:
        return None

    def _search(node, stack, remaining):
        if remaining == 0:
            if node == network.final and stack == INITIAL_STACK:
                return []
            return None
        # The stack has to come back to a single cell in the remaining steps
        if len(stack) - 1 > remaining:
            return None
        for action in sorted(network.actions(node), key=lambda a: a.value):
            try:
                next_stack = apply_action(stack, action)
            except ValueError:
                continue
            for succ in network.successors(node):
                rest = _search(succ, next_stack, remaining - 1)
                if rest is not None:
                    return [PathStep(action, node, succ)] + rest
        return None

    return _search(network.initial, INITIAL_STACK, bound)

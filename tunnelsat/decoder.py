"""
Read back a path from a model of the reduction.

Decoding relies on the model respecting the uniqueness constraint: one
pair (node, height) per position and one protocol per occupied cell.
Models that do not are reported as ill-defined instead of being turned
into a path.
"""

from collections import namedtuple

from tunnelsat.common import TRANSMIT
from tunnelsat.common import Action
from tunnelsat.common import PathStep
from tunnelsat.common import Protocol
from tunnelsat.common import stack_size
from tunnelsat.utils import value_of_var_in_model
from tunnelsat.variables import p4_variable
from tunnelsat.variables import p6_variable
from tunnelsat.variables import path_variable


IllDefinedPosition = namedtuple('IllDefinedPosition', ['pos', 'reason'])

PositionReport = namedtuple('PositionReport', ['pos', 'active', 'stack', 'warnings'])

NO_NODE = 'No node at that position !'
SEVERAL_PAIRS = 'Several pair node,height!'
ILL_DEFINED_STACK = 'Warning: ill-defined stack'


class DecodedPath(namedtuple('DecodedPath', ['steps', 'errors'])):
    """
    Outcome of decoding a model.

    steps is the list of PathStep (empty when the model is ill-defined),
    errors the list of IllDefinedPosition found.
    """

    @property
    def is_valid(self):
        return not self.errors


def active_pairs(network, model, pos, bound):
    """All the (node, height) such that x_{node,pos,height} holds in model"""
    pairs = []
    for node in network.nodes:
        for height in range(stack_size(bound)):
            if value_of_var_in_model(model, path_variable(node, pos, height)):
                pairs.append((node, height))
    return pairs


def cell_content(model, pos, height):
    """Protocol held by a cell, None if the cell holds both or neither"""
    is_4 = value_of_var_in_model(model, p4_variable(pos, height))
    is_6 = value_of_var_in_model(model, p6_variable(pos, height))
    if is_4 and not is_6:
        return Protocol.P4
    if is_6 and not is_4:
        return Protocol.P6
    return None


def get_path_from_model(network, bound, model):
    """
    Decode the bound steps of the path encoded in model.
    Returns a DecodedPath.
    """
    errors = []
    pairs = []
    for pos in range(bound + 1):
        active = active_pairs(network, model, pos, bound)
        if not active:
            errors.append(IllDefinedPosition(pos, 'no pair (node, height)'))
        elif len(active) > 1:
            names = ['(%s,%d)' % (network.node_name(n), h) for n, h in active]
            errors.append(IllDefinedPosition(pos, 'several pairs %s' % ' '.join(names)))
        pairs.append(active)
    if errors:
        return DecodedPath([], errors)

    steps = []
    for pos in range(bound):
        src, src_height = pairs[pos][0]
        tgt, tgt_height = pairs[pos + 1][0]
        height_delta = tgt_height - src_height
        if abs(height_delta) > 1:
            errors.append(IllDefinedPosition(
                pos, 'height jumps from %d to %d' % (src_height, tgt_height)))
            continue
        before = cell_content(model, pos, src_height)
        if height_delta == TRANSMIT:
            after = before
        else:
            # Top after a push, or the cell revealed by a pop
            after = cell_content(model, pos + 1, tgt_height)
        if before is None:
            errors.append(IllDefinedPosition(
                pos, 'cell %d holds no single protocol' % src_height))
            continue
        if after is None:
            errors.append(IllDefinedPosition(
                pos + 1, 'cell %d holds no single protocol' % tgt_height))
            continue
        action = Action.from_effect(height_delta, before, after)
        steps.append(PathStep(action, src, tgt))
    if errors:
        return DecodedPath([], errors)
    return DecodedPath(steps, [])


def stack_trace(network, bound, model):
    """
    For each position, the (height, stack) read from model, the stack being
    the tuple of protocols from the bottom to the top.
    Assumes the model is well defined.
    """
    trace = []
    for pos in range(bound + 1):
        (_, height), = active_pairs(network, model, pos, bound)
        trace.append((height, tuple(cell_content(model, pos, h) for h in range(height + 1))))
    return trace


def model_report(network, bound, model):
    """Per position: the active pairs, the stack symbols and the warnings"""
    reports = []
    for pos in range(bound + 1):
        active = active_pairs(network, model, pos, bound)
        warnings = []
        if not active:
            warnings.append(NO_NODE)
        elif len(active) > 1:
            warnings.append(SEVERAL_PAIRS)
        top = active[0][1] if len(active) == 1 else None
        stack = []
        misdefined = False
        above_top = False
        for height in range(stack_size(bound)):
            is_4 = value_of_var_in_model(model, p4_variable(pos, height))
            is_6 = value_of_var_in_model(model, p6_variable(pos, height))
            if top is not None and height > top:
                stack.append(' ')
            elif is_4 and is_6:
                stack.append('X')
                misdefined = True
            elif is_4 or is_6:
                stack.append('4' if is_4 else '6')
                if above_top:
                    misdefined = True
            else:
                stack.append(' ')
                if top is not None:
                    misdefined = True
                above_top = True
        if misdefined:
            warnings.append(ILL_DEFINED_STACK)
        named = [(network.node_name(node), height) for node, height in active]
        reports.append(PositionReport(pos, named, stack, warnings))
    return reports


def format_model(network, bound, model):
    lines = []
    for report in model_report(network, bound, model):
        lines.append('At pos %d:' % report.pos)
        if report.active:
            lines.append('State: ' + ' '.join('(%s,%d)' % pair for pair in report.active))
        else:
            lines.append('State: ' + NO_NODE)
        if SEVERAL_PAIRS in report.warnings:
            lines.append(SEVERAL_PAIRS)
        lines.append('Stack: ' + ''.join('|' + symbol for symbol in report.stack))
        if ILL_DEFINED_STACK in report.warnings:
            lines.append(ILL_DEFINED_STACK)
    return '\n'.join(lines)


def print_model(network, bound, model):
    """Prints (in pretty format) the variables of the reduction true in model"""
    print(format_model(network, bound, model))

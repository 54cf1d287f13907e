"""
Common definitions for the tunnel routing reduction
"""


from collections import namedtuple
from enum import Enum

from networkx.drawing import nx_pydot


# Keys for annotations used in nx graphs
ACTIONS_ATTR = 'actions'
INITIAL_ATTR = 'initial'
FINAL_ATTR = 'final'
PATH_EDGE = 'path_step'


class Protocol(Enum):
    """Content of a stack cell"""
    P4 = 4
    P6 = 6

    def __str__(self):
        return str(self.value)


PROTOCOLS = (Protocol.P4, Protocol.P6)


# height_delta: how the stack height changes
# before: protocol on top of the stack before the action
# after: protocol on top of the stack after the action
ActionInfo = namedtuple('ActionInfo', ['height_delta', 'before', 'after'])


class Action(Enum):
    """
    The ten stack operations a node may perform.

    Names read kind_inner_outer: push_4_6 encapsulates an IPv4 packet in an
    IPv6 tunnel (top P4 before, P6 pushed) and pop_4_6 leaves that tunnel
    (top P6 removed, P4 revealed underneath).
    """
    transmit_4 = 0
    transmit_6 = 1
    push_4_4 = 2
    push_4_6 = 3
    push_6_4 = 4
    push_6_6 = 5
    pop_4_4 = 6
    pop_6_4 = 7
    pop_4_6 = 8
    pop_6_6 = 9

    @property
    def info(self):
        return ACTIONS[self]

    @property
    def height_delta(self):
        return ACTIONS[self].height_delta

    @property
    def before(self):
        return ACTIONS[self].before

    @property
    def after(self):
        return ACTIONS[self].after

    @classmethod
    def parse(cls, name):
        """Takes an action name (e.g. 'push_4_6') and returns the Action"""
        name = name.strip().strip('"').strip()
        if name not in cls.__members__:
            raise ValueError("Unknown action '%s'" % name)
        return cls[name]

    @classmethod
    def from_effect(cls, height_delta, before, after):
        """Returns the unique action with the given effect on the stack"""
        return EFFECT_TO_ACTION[(height_delta, before, after)]

    def __str__(self):
        return self.name


P4, P6 = PROTOCOLS

ACTIONS = {
    Action.transmit_4: ActionInfo(0, P4, P4),
    Action.transmit_6: ActionInfo(0, P6, P6),
    Action.push_4_4: ActionInfo(1, P4, P4),
    Action.push_4_6: ActionInfo(1, P4, P6),
    Action.push_6_4: ActionInfo(1, P6, P4),
    Action.push_6_6: ActionInfo(1, P6, P6),
    Action.pop_4_4: ActionInfo(-1, P4, P4),
    Action.pop_6_4: ActionInfo(-1, P4, P6),
    Action.pop_4_6: ActionInfo(-1, P6, P4),
    Action.pop_6_6: ActionInfo(-1, P6, P6),
}

EFFECT_TO_ACTION = dict((info, action) for action, info in ACTIONS.items())

TRANSMIT = 0
PUSH = 1
POP = -1


def actions_with(height_delta=None, before=None):
    """All actions matching the given height delta and/or top protocol"""
    ret = []
    for action in Action:
        if height_delta is not None and action.height_delta != height_delta:
            continue
        if before is not None and action.before != before:
            continue
        ret.append(action)
    return ret


def stack_size(bound):
    """
    Number of representable stack cells for a path of length bound.

    Every push has to be matched by a pop before the end of the path,
    so the height never exceeds bound / 2.
    """
    return bound // 2 + 1


# One decoded transition of the path
PathStep = namedtuple('PathStep', ['action', 'src', 'dst'])


def draw(g, out):
    """
    Write the graph in a dot file.

    This function creates a shallow copy of the graph and keeps only
    the attributes dot understands (shape, style, color and label).
    """
    def _allowed_attrs(attrs):
        new_attrs = {}
        if attrs.get('shape', None):
            new_attrs['shape'] = attrs['shape']
        if attrs.get('style', None):
            new_attrs['style'] = attrs['style']
        if attrs.get('color', None):
            new_attrs['color'] = attrs['color']
        if attrs.get('label', None):
            new_attrs['label'] = attrs['label']
        return new_attrs
    clean_g = g.copy()
    for n, attrs in g.nodes(data=True):
        clean_g.nodes[n].clear()
        clean_g.nodes[n].update(_allowed_attrs(attrs))
    for src, dst, attrs in g.edges(data=True):
        clean_g.edges[src, dst].clear()
        clean_g.edges[src, dst].update(_allowed_attrs(attrs))
    nx_pydot.write_dot(clean_g, out)

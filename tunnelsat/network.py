"""
Tunnel network: a directed graph whose nodes carry the stack operations
they are able to perform.
"""

import networkx as nx

from tunnelsat.common import ACTIONS_ATTR
from tunnelsat.common import FINAL_ATTR
from tunnelsat.common import INITIAL_ATTR
from tunnelsat.common import Action


class TunnelNetwork(object):
    """
    Read-only view of a tunnel network.

    Nodes are numbered from 0 to num_nodes - 1 following the insertion
    order of the underlying graph. The reduction only needs these ids.
    """

    def __init__(self, graph):
        assert isinstance(graph, nx.DiGraph), type(graph)
        self.graph = graph
        self._names = list(graph.nodes())
        self._ids = dict((name, i) for i, name in enumerate(self._names))
        self._actions = []
        self._successors = []
        initials = []
        finals = []
        for i, name in enumerate(self._names):
            attrs = graph.nodes[name]
            actions = attrs.get(ACTIONS_ATTR, [])
            self._actions.append(frozenset(Action.parse(a) if isinstance(a, str) else a
                                           for a in actions))
            self._successors.append(tuple(sorted(self._ids[v] for v in graph.successors(name))))
            if attrs.get(INITIAL_ATTR, False):
                initials.append(i)
            if attrs.get(FINAL_ATTR, False):
                finals.append(i)
        self._initials = initials
        self._finals = finals

    @classmethod
    def from_graph(cls, graph):
        return cls(graph)

    @classmethod
    def build(cls, nodes, edges, initial=None, final=None):
        """
        Build a network from plain python data.

        nodes maps each node name to its list of actions (names or Action),
        edges is a list of (src, dst) names.
        """
        g = nx.DiGraph()
        for name, actions in nodes.items():
            parsed = [Action.parse(a) if isinstance(a, str) else a for a in actions]
            g.add_node(name, **{ACTIONS_ATTR: parsed,
                                INITIAL_ATTR: name == initial,
                                FINAL_ATTR: name == final})
        for src, dst in edges:
            assert src in g and dst in g, "Unknown node in edge (%s, %s)" % (src, dst)
            g.add_edge(src, dst)
        return cls(g)

    @property
    def num_nodes(self):
        return len(self._names)

    @property
    def nodes(self):
        return range(len(self._names))

    @property
    def initial(self):
        """Id of the initial node, None if there is none"""
        return self._initials[0] if self._initials else None

    @property
    def final(self):
        """Id of the final node, None if there is none"""
        return self._finals[0] if self._finals else None

    def node_name(self, node):
        return self._names[node]

    def node_id(self, name):
        return self._ids[name]

    def actions(self, node):
        return self._actions[node]

    def has_action(self, node, action):
        return action in self._actions[node]

    def is_edge(self, src, dst):
        return dst in self._successors[src]

    def successors(self, node):
        return self._successors[node]

    def check(self, bound):
        """
        Validate what the reduction assumes about its inputs.
        Raises ValueError describing the first violation found.
        """
        if bound < 0:
            raise ValueError("The bound must be non negative, got %d" % bound)
        if not self._initials:
            raise ValueError("The network has no initial node")
        if not self._finals:
            raise ValueError("The network has no final node")
        if len(self._initials) > 1:
            raise ValueError("Several initial nodes: %s" % [self._names[i] for i in self._initials])
        if len(self._finals) > 1:
            raise ValueError("Several final nodes: %s" % [self._names[i] for i in self._finals])

    def __repr__(self):
        return "TunnelNetwork(%d nodes, %d edges)" % (self.num_nodes, self.graph.number_of_edges())

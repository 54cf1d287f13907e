"""
Various functions to read, write and generate tunnel networks
"""

import os
import random

import networkx as nx
from networkx.drawing import nx_pydot

from tunnelsat.common import ACTIONS_ATTR
from tunnelsat.common import FINAL_ATTR
from tunnelsat.common import INITIAL_ATTR
from tunnelsat.common import PATH_EDGE
from tunnelsat.common import Action
from tunnelsat.common import draw
from tunnelsat.grammar import parse_facts
from tunnelsat.grammar import parse_facts_file
from tunnelsat.network import TunnelNetwork


DOT_EXTENSIONS = ('.dot', '.gv')
FACTS_EXTENSIONS = ('.logic', '.facts')

TRUE_VALUES = ('1', 'true', 'yes')


def _unquote(value):
    return str(value).strip().strip('"').strip()


def _parse_actions(value):
    """'transmit_4, push_4_6' -> [Action.transmit_4, Action.push_4_6]"""
    names = [a for a in _unquote(value).replace(';', ',').split(',') if a.strip()]
    return [Action.parse(a) for a in names]


def facts_to_network(parsed_facts):
    """Build a TunnelNetwork from a list of grammar.Fact"""
    g = nx.DiGraph()

    def _add_node(name):
        if name not in g:
            g.add_node(name, **{ACTIONS_ATTR: [], INITIAL_ATTR: False, FINAL_ATTR: False})

    for fact in parsed_facts:
        args = fact.args
        if fact.name == 'SetNode':
            _add_node(args[0])
        elif fact.name == 'SetAction':
            _add_node(args[0])
            action = Action.parse(args[1])
            if action not in g.nodes[args[0]][ACTIONS_ATTR]:
                g.nodes[args[0]][ACTIONS_ATTR].append(action)
        elif fact.name == 'SetLink':
            _add_node(args[0])
            _add_node(args[1])
            g.add_edge(args[0], args[1])
        elif fact.name == 'SetInitial':
            _add_node(args[0])
            g.nodes[args[0]][INITIAL_ATTR] = True
        elif fact.name == 'SetFinal':
            _add_node(args[0])
            g.nodes[args[0]][FINAL_ATTR] = True
        else:
            raise ValueError("Unknown fact '%s'" % fact.name)
    return TunnelNetwork(g)


def read_facts(filename):
    return facts_to_network(parse_facts_file(filename))


def read_facts_string(text):
    return facts_to_network(parse_facts(text))


def dot_to_network(dot_graph):
    """
    Build a TunnelNetwork from a graph read by nx_pydot.
    Node attributes: actions="transmit_4,push_4_6", initial=1, final=1
    """
    g = nx.DiGraph()
    for node, attrs in dot_graph.nodes(data=True):
        name = _unquote(node)
        if not name or name in ('node', 'graph', 'edge'):
            continue
        g.add_node(name, **{
            ACTIONS_ATTR: _parse_actions(attrs.get(ACTIONS_ATTR, '')),
            INITIAL_ATTR: _unquote(attrs.get(INITIAL_ATTR, '0')).lower() in TRUE_VALUES,
            FINAL_ATTR: _unquote(attrs.get(FINAL_ATTR, '0')).lower() in TRUE_VALUES,
        })
    for src, dst in dot_graph.edges():
        src, dst = _unquote(src), _unquote(dst)
        for name in (src, dst):
            if name not in g:
                g.add_node(name, **{ACTIONS_ATTR: [], INITIAL_ATTR: False, FINAL_ATTR: False})
        g.add_edge(src, dst)
    return TunnelNetwork(g)


def read_dot(filename):
    return dot_to_network(nx_pydot.read_dot(filename))


def read_network(filename):
    """Read a network, the format is chosen from the file extension"""
    ext = os.path.splitext(filename)[1].lower()
    if ext in DOT_EXTENSIONS:
        return read_dot(filename)
    if ext in FACTS_EXTENSIONS:
        return read_facts(filename)
    raise NameError("Unknown network format '%s' for %s" % (ext, filename))


def network_to_facts(network):
    """Render network in the fact format"""
    lines = []
    for node in network.nodes:
        lines.append('+SetNode("%s").' % network.node_name(node))
    for node in network.nodes:
        for action in sorted(network.actions(node), key=lambda a: a.value):
            lines.append('+SetAction("%s", "%s").' % (network.node_name(node), action))
    for node in network.nodes:
        for succ in network.successors(node):
            lines.append('+SetLink("%s", "%s").' % (network.node_name(node), network.node_name(succ)))
    if network.initial is not None:
        lines.append('+SetInitial("%s").' % network.node_name(network.initial))
    if network.final is not None:
        lines.append('+SetFinal("%s").' % network.node_name(network.final))
    return '\n'.join(lines) + '\n'


def network_to_dot_graph(network):
    """A DiGraph with the attributes read back by dot_to_network"""
    g = nx.DiGraph()
    for node in network.nodes:
        attrs = {}
        if network.actions(node):
            attrs[ACTIONS_ATTR] = ','.join(
                str(a) for a in sorted(network.actions(node), key=lambda a: a.value))
        if node == network.initial:
            attrs[INITIAL_ATTR] = 1
        if node == network.final:
            attrs[FINAL_ATTR] = 1
        g.add_node(network.node_name(node), **attrs)
    for node in network.nodes:
        for succ in network.successors(node):
            g.add_edge(network.node_name(node), network.node_name(succ))
    return g


def write_dot(network, out):
    nx_pydot.write_dot(network_to_dot_graph(network), out)


def draw_path(network, steps, out):
    """
    Write the network in a dot file with the path highlighted,
    every edge of the path labeled with its position and action.
    """
    g = nx.DiGraph()
    for node in network.nodes:
        attrs = {'label': network.node_name(node)}
        if node == network.initial:
            attrs['shape'] = 'box'
        if node == network.final:
            attrs['shape'] = 'doublecircle'
        g.add_node(network.node_name(node), **attrs)
    for node in network.nodes:
        for succ in network.successors(node):
            g.add_edge(network.node_name(node), network.node_name(succ), style='dotted')
    for pos, step in enumerate(steps):
        src = network.node_name(step.src)
        dst = network.node_name(step.dst)
        attrs = g.edges[src, dst]
        labels = [attrs['label']] if attrs.get(PATH_EDGE) else []
        labels.append('%d %s' % (pos, step.action))
        attrs.update({PATH_EDGE: True, 'style': 'bold', 'color': 'red',
                      'label': ' '.join(labels)})
    draw(g, out)


def random_network(num_nodes, edge_prob=0.5, action_prob=0.3, seed=None):
    """
    Random network on nodes R0 .. R{num_nodes - 1}, R0 being the initial
    node and R{num_nodes - 1} the final one.
    """
    rnd = random.Random(seed)
    g = nx.DiGraph()
    names = ['R%d' % i for i in range(num_nodes)]
    for i, name in enumerate(names):
        actions = [a for a in Action if rnd.random() < action_prob]
        g.add_node(name, **{ACTIONS_ATTR: actions,
                            INITIAL_ATTR: i == 0,
                            FINAL_ATTR: i == num_nodes - 1})
    for src in names:
        for dst in names:
            if src != dst and rnd.random() < edge_prob:
                g.add_edge(src, dst)
    return TunnelNetwork(g)


def grid_network(n, actions=None):
    """
    n x n grid with links in both directions, from the top left corner
    R11 to the bottom right corner R{n}{n}. Every router gets actions
    (default: all of them).
    """
    if actions is None:
        actions = list(Action)
    g = nx.DiGraph()
    for x in range(1, n + 1):
        for y in range(1, n + 1):
            g.add_node('R%d%d' % (x, y), **{ACTIONS_ATTR: list(actions),
                                            INITIAL_ATTR: (x, y) == (1, 1),
                                            FINAL_ATTR: (x, y) == (n, n)})
    for x in range(1, n + 1):
        for y in range(1, n + 1):
            if x < n:
                g.add_edge('R%d%d' % (x, y), 'R%d%d' % (x + 1, y))
                g.add_edge('R%d%d' % (x + 1, y), 'R%d%d' % (x, y))
            if y < n:
                g.add_edge('R%d%d' % (x, y), 'R%d%d' % (x, y + 1))
                g.add_edge('R%d%d' % (x, y + 1), 'R%d%d' % (x, y))
    return TunnelNetwork(g)

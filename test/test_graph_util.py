import os
import shutil
import tempfile
import unittest

from pyparsing import ParseException

from tunnelsat.common import Action
from tunnelsat.common import PathStep
from tunnelsat.explicit import find_path_explicit
from tunnelsat.grammar import parse_facts
from tunnelsat.graph_util import draw_path
from tunnelsat.graph_util import grid_network
from tunnelsat.graph_util import network_to_facts
from tunnelsat.graph_util import random_network
from tunnelsat.graph_util import read_dot
from tunnelsat.graph_util import read_facts_string
from tunnelsat.graph_util import read_network
from tunnelsat.graph_util import write_dot

from scenarios import tunnel_line


TUNNEL_FACTS = """
// 6in4 tunnel between B and D
+SetNode("A").
+SetAction("A", "transmit_4").
+SetAction("B", "push_4_6").
+SetAction("C", "transmit_6").
+SetAction("D", "pop_4_6").
+SetNode("E").
+SetLink("A", "B").
+SetLink("B", "C").
+SetLink("C", "D").
+SetLink("D", "E").
+SetInitial("A").
+SetFinal("E").
"""

TUNNEL_DOT = """digraph tunnel {
  A [actions="transmit_4", initial=1];
  B [actions="push_4_6"];
  C [actions="transmit_6"];
  D [actions="pop_4_6"];
  E [final=1];
  A -> B;
  B -> C;
  C -> D;
  D -> E;
}
"""


def same_network(test, first, second):
    test.assertEqual(first.num_nodes, second.num_nodes)
    for node in first.nodes:
        name = first.node_name(node)
        other = second.node_id(name)
        test.assertEqual(first.actions(node), second.actions(other), name)
        test.assertEqual(set(first.node_name(s) for s in first.successors(node)),
                         set(second.node_name(s) for s in second.successors(other)), name)
    test.assertEqual(first.node_name(first.initial), second.node_name(second.initial))
    test.assertEqual(first.node_name(first.final), second.node_name(second.final))


class TestGrammar(unittest.TestCase):
    def test_parse(self):
        facts = parse_facts(TUNNEL_FACTS)
        self.assertEqual(len(facts), 12)
        self.assertEqual(facts[1].name, 'SetAction')
        self.assertEqual(facts[1].args, ('A', 'transmit_4'))

    def test_bare_names(self):
        facts = parse_facts('+SetLink(R1, R2).')
        self.assertEqual(facts[0].args, ('R1', 'R2'))

    def test_unknown_fact(self):
        with self.assertRaises(ValueError):
            parse_facts('+SetCost("A", "1").')

    def test_wrong_arity(self):
        with self.assertRaises(ValueError):
            parse_facts('+SetLink("A").')

    def test_syntax_error(self):
        with self.assertRaises(ParseException):
            parse_facts('+SetNode("A")')


class TestReadWrite(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmpdir)

    def test_facts(self):
        same_network(self, read_facts_string(TUNNEL_FACTS), tunnel_line())

    def test_unknown_action(self):
        with self.assertRaises(ValueError):
            read_facts_string('+SetAction("A", "tunnel_4").')

    def test_dot(self):
        filename = os.path.join(self.tmpdir, 'tunnel.dot')
        with open(filename, 'w') as f:
            f.write(TUNNEL_DOT)
        same_network(self, read_network(filename), tunnel_line())

    def test_dot_unknown_action(self):
        filename = os.path.join(self.tmpdir, 'bad.dot')
        with open(filename, 'w') as f:
            f.write('digraph { A [actions="push_4_8"]; }\n')
        with self.assertRaises(ValueError):
            read_dot(filename)

    def test_unknown_extension(self):
        with self.assertRaises(NameError):
            read_network(os.path.join(self.tmpdir, 'tunnel.json'))

    def test_facts_round_trip(self):
        network = random_network(4, seed=3)
        filename = os.path.join(self.tmpdir, 'random.logic')
        with open(filename, 'w') as f:
            f.write(network_to_facts(network))
        same_network(self, read_network(filename), network)

    def test_dot_round_trip(self):
        network = random_network(4, action_prob=0.5, seed=7)
        filename = os.path.join(self.tmpdir, 'random.dot')
        write_dot(network, filename)
        same_network(self, read_network(filename), network)

    def test_draw_path(self):
        network = tunnel_line()
        steps = [PathStep(Action.transmit_4, 0, 1), PathStep(Action.push_4_6, 1, 2),
                 PathStep(Action.transmit_6, 2, 3), PathStep(Action.pop_4_6, 3, 4)]
        filename = os.path.join(self.tmpdir, 'path.dot')
        draw_path(network, steps, filename)
        with open(filename) as f:
            content = f.read()
        self.assertIn('push_4_6', content)
        self.assertIn('red', content)


class TestGenerators(unittest.TestCase):
    def test_random_is_deterministic(self):
        first = random_network(4, seed=11)
        second = random_network(4, seed=11)
        same_network(self, first, second)
        self.assertEqual(first.node_name(first.initial), 'R0')
        self.assertEqual(first.node_name(first.final), 'R3')

    def test_grid(self):
        network = grid_network(3, actions=[Action.transmit_4])
        self.assertEqual(network.num_nodes, 9)
        self.assertEqual(network.graph.number_of_edges(), 24)
        self.assertEqual(network.node_name(network.initial), 'R11')
        self.assertEqual(network.node_name(network.final), 'R33')
        self.assertEqual(network.actions(4), frozenset([Action.transmit_4]))


EXAMPLES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), '..', 'examples', 'tunnels')


class TestExampleFiles(unittest.TestCase):
    def shortest(self, filename, max_bound=6, min_bound=0):
        network = read_network(os.path.join(EXAMPLES_DIR, filename))
        for bound in range(min_bound, max_bound + 1):
            if find_path_explicit(network, bound) is not None:
                return bound
        return None

    def test_six_in_four(self):
        self.assertEqual(self.shortest('six_in_four.logic'), 4)
        same_network(self, read_network(os.path.join(EXAMPLES_DIR, 'six_in_four.logic')),
                     tunnel_line())

    def test_push_pop(self):
        self.assertEqual(self.shortest('push_pop.logic'), 0)
        self.assertEqual(self.shortest('push_pop.logic', min_bound=1), 2)

    def test_nested(self):
        network = read_network(os.path.join(EXAMPLES_DIR, 'nested.dot'))
        self.assertEqual(network.num_nodes, 5)
        self.assertEqual(self.shortest('nested.dot'), 2)
        self.assertIsNotNone(find_path_explicit(network, 5))

    def test_dead_end(self):
        self.assertIsNone(self.shortest('dead_end.dot'))

import unittest

import z3

from tunnelsat.common import Action
from tunnelsat.common import PathStep
from tunnelsat.common import Protocol
from tunnelsat.decoder import ILL_DEFINED_STACK
from tunnelsat.decoder import NO_NODE
from tunnelsat.decoder import SEVERAL_PAIRS
from tunnelsat.decoder import cell_content
from tunnelsat.decoder import format_model
from tunnelsat.decoder import get_path_from_model
from tunnelsat.decoder import model_report
from tunnelsat.reduction import reduction
from tunnelsat.variables import p4_variable
from tunnelsat.variables import p6_variable
from tunnelsat.variables import path_variable

from scenarios import scenario_a
from scenarios import scenario_c


def model_of(*constraints):
    """A model where exactly the given constraints are forced"""
    solver = z3.Solver()
    solver.add(*constraints)
    assert solver.check() == z3.sat
    return solver.model()


class TestDecoder(unittest.TestCase):
    def test_handmade_model(self):
        network = scenario_c()
        model = model_of(path_variable(0, 0, 0), p4_variable(0, 0),
                         path_variable(1, 1, 1), p4_variable(1, 0), p6_variable(1, 1),
                         path_variable(0, 2, 0), p4_variable(2, 0))
        decoded = get_path_from_model(network, 2, model)
        self.assertTrue(decoded.is_valid)
        self.assertEqual(decoded.steps, [PathStep(Action.push_4_6, 0, 1),
                                         PathStep(Action.pop_4_6, 1, 0)])

    def test_several_pairs(self):
        network = scenario_a()
        model = model_of(path_variable(0, 0, 0), p4_variable(0, 0),
                         path_variable(0, 1, 0), path_variable(1, 1, 0), p4_variable(1, 0))
        decoded = get_path_from_model(network, 1, model)
        self.assertFalse(decoded.is_valid)
        self.assertEqual(decoded.steps, [])
        self.assertEqual([e.pos for e in decoded.errors], [1])
        self.assertIn('several pairs', decoded.errors[0].reason)

    def test_no_pair(self):
        network = scenario_a()
        model = model_of(path_variable(1, 1, 0), p4_variable(1, 0))
        decoded = get_path_from_model(network, 1, model)
        self.assertEqual([e.pos for e in decoded.errors], [0])

    def test_contradicting_cell(self):
        network = scenario_a()
        model = model_of(path_variable(0, 0, 0), p4_variable(0, 0), p6_variable(0, 0),
                         path_variable(1, 1, 0), p4_variable(1, 0))
        decoded = get_path_from_model(network, 1, model)
        self.assertFalse(decoded.is_valid)
        self.assertEqual(decoded.errors[0].pos, 0)
        self.assertIsNone(cell_content(model, 0, 0))
        self.assertEqual(cell_content(model, 1, 0), Protocol.P4)


class TestReport(unittest.TestCase):
    def test_clean_model(self):
        network = scenario_c()
        solver = z3.Solver()
        solver.add(reduction(network, 2))
        self.assertEqual(solver.check(), z3.sat)
        reports = model_report(network, 2, solver.model())
        self.assertEqual([r.active for r in reports], [[('A', 0)], [('B', 1)], [('A', 0)]])
        self.assertEqual([r.stack for r in reports], [['4', ' '], ['4', '4'], ['4', ' ']])
        for report in reports:
            self.assertEqual(report.warnings, [])

    def test_warnings(self):
        network = scenario_a()
        model = model_of(path_variable(0, 0, 0), path_variable(1, 0, 0),
                         p4_variable(0, 0), p6_variable(0, 0))
        first, second = model_report(network, 1, model)
        self.assertIn(SEVERAL_PAIRS, first.warnings)
        self.assertIn(ILL_DEFINED_STACK, first.warnings)
        self.assertEqual(first.stack, ['X'])
        self.assertIn(NO_NODE, second.warnings)

    def test_format(self):
        network = scenario_c()
        model = model_of(path_variable(0, 0, 0), p4_variable(0, 0),
                         path_variable(1, 1, 1), p4_variable(1, 0), p6_variable(1, 1),
                         path_variable(0, 2, 0), p4_variable(2, 0))
        text = format_model(network, 2, model)
        self.assertEqual(text.splitlines(), [
            'At pos 0:', 'State: (A,0)', 'Stack: |4| ',
            'At pos 1:', 'State: (B,1)', 'Stack: |4|6',
            'At pos 2:', 'State: (A,0)', 'Stack: |4| ',
        ])

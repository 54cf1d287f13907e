"""
Drive z3 on the tunnel routing reduction
"""

from collections import namedtuple
from enum import Enum

import z3

from tunnelsat.common import stack_size
from tunnelsat.decoder import get_path_from_model
from tunnelsat.decoder import print_model
from tunnelsat.reduction import reduction
from tunnelsat.reduction import reduction_parts


class SolveStatus(Enum):
    PATH_FOUND = 1
    NO_PATH = 2
    ILL_DEFINED = 3
    UNKNOWN = 4


SolveResult = namedtuple('SolveResult', ['status', 'bound', 'path', 'errors', 'model'])


class TunnelSolver(object):
    def __init__(self, network, timeout=None, verbose=False):
        """
        :param network: a TunnelNetwork
        :param timeout: z3 timeout in milliseconds, None for no limit
        :param verbose: print progress
        """
        self.network = network
        self.timeout = timeout
        self.verbose = verbose

    def _log(self, *args):
        if self.verbose:
            print(*args)

    def formula(self, bound):
        """Check the inputs and build the formula for bound"""
        self.network.check(bound)
        self._log("Building formula for bound %d (stack size %d)" % (bound, stack_size(bound)))
        return reduction(self.network, bound)

    def solve(self, bound):
        """Look for a path of exactly bound steps, returns a SolveResult"""
        formula = self.formula(bound)
        solver = z3.Solver()
        if self.timeout is not None:
            solver.set(timeout=self.timeout)
        solver.add(formula)
        self._log("Solving...")
        result = solver.check()
        if result == z3.unsat:
            self._log("No path of length %d" % bound)
            return SolveResult(SolveStatus.NO_PATH, bound, [], [], None)
        if result == z3.unknown:
            self._log("z3 gave up:", solver.reason_unknown())
            return SolveResult(SolveStatus.UNKNOWN, bound, [], [], None)
        model = solver.model()
        decoded = get_path_from_model(self.network, bound, model)
        if not decoded.is_valid:
            self._log("Ill-defined model:")
            for error in decoded.errors:
                self._log("  pos %d: %s" % (error.pos, error.reason))
            if self.verbose:
                print_model(self.network, bound, model)
            return SolveResult(SolveStatus.ILL_DEFINED, bound, [], decoded.errors, model)
        self._log("Found a path of length %d" % bound)
        return SolveResult(SolveStatus.PATH_FOUND, bound, decoded.steps, [], model)

    def find_shortest(self, max_bound, min_bound=0):
        """
        Try every bound from min_bound to max_bound, returns the first
        result with a path, or the last result if there is none.
        """
        result = None
        for bound in range(min_bound, max_bound + 1):
            result = self.solve(bound)
            if result.status == SolveStatus.PATH_FOUND:
                break
        return result

    def unsat_core(self, bound):
        """
        Names of the conjuncts of the reduction (see reduction_parts) that
        are enough to rule out a path of length bound. Empty if there is
        a path.
        """
        self.network.check(bound)
        solver = z3.Solver()
        solver.set(unsat_core=True)
        if self.timeout is not None:
            solver.set(timeout=self.timeout)
        for name, formula in reduction_parts(self.network, bound):
            solver.assert_and_track(formula, 'part:%s' % name)
        if solver.check() != z3.unsat:
            return []
        return sorted(c.decl().name()[len('part:'):] for c in solver.unsat_core())

    def to_smt2(self, bound):
        """The formula for bound in the SMT-LIB 2 format"""
        solver = z3.Solver()
        solver.add(self.formula(bound))
        return solver.to_smt2()

    def format_path(self, steps):
        lines = []
        for pos, step in enumerate(steps):
            lines.append("%d: %s --%s--> %s" % (
                pos, self.network.node_name(step.src), step.action,
                self.network.node_name(step.dst)))
        return '\n'.join(lines)

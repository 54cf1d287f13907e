#!/usr/bin/env python

import argparse
import time

from tunnelsat.decoder import print_model
from tunnelsat.explicit import find_path_explicit
from tunnelsat.explicit import simulate
from tunnelsat.graph_util import draw_path
from tunnelsat.graph_util import read_network
from tunnelsat.solver import SolveStatus
from tunnelsat.solver import TunnelSolver


def main():
    parser = argparse.ArgumentParser(description='Find a well-formed tunnel path with z3.')
    parser.add_argument("network", help="Network file (.dot or .logic)")
    parser.add_argument("-b", dest="bound", default=None, type=int,
                        help="Length of the path")
    parser.add_argument("-a", "--all", dest="search", action="store_true",
                        help="Look for the shortest path up to the max length")
    parser.add_argument("-m", "--max", dest="max_bound", default=10, type=int,
                        help="Max length when looking for the shortest path")
    parser.add_argument("-p", dest="print_model", action="store_true",
                        help="Print the model found")
    parser.add_argument("-s", dest="smt2", default=None,
                        help="Write the formula in SMT-LIB 2 to this file")
    parser.add_argument("-o", dest="out", default=None,
                        help="Write the network with the path to this dot file")
    parser.add_argument("-c", dest="check", action="store_true",
                        help="Cross-check the answer with an explicit search")
    parser.add_argument("-u", dest="core", action="store_true",
                        help="When there is no path, print the constraints ruling it out")
    parser.add_argument("-t", dest="timeout", default=None, type=int,
                        help="z3 timeout in milliseconds")
    parser.add_argument("-v", dest="verbose", action="store_true")
    args = parser.parse_args()

    network = read_network(args.network)
    print("Read", args.network, network)
    solver = TunnelSolver(network, timeout=args.timeout, verbose=args.verbose)

    start = time.time()
    if args.search:
        result = solver.find_shortest(args.max_bound)
    elif args.bound is not None:
        result = solver.solve(args.bound)
    else:
        parser.error("Either give a length (-b) or look for the shortest path (-a)")
    end = time.time()
    print("Solving time for length %d is %s" % (result.bound, end - start))

    if args.smt2:
        with open(args.smt2, 'w') as f:
            f.write(solver.to_smt2(result.bound))
        print("Formula written to", args.smt2)

    if result.status == SolveStatus.PATH_FOUND:
        print("There is a path of length %d:" % result.bound)
        print(solver.format_path(result.path))
        stacks = simulate(network, result.path)
        print("Stack at the end:", ''.join(str(p) for p in stacks[-1]))
        if args.out:
            draw_path(network, result.path, args.out)
            print("Path drawn to", args.out)
    elif result.status == SolveStatus.NO_PATH:
        print("No path of length %d" % result.bound)
        if args.core:
            print("Ruled out by:", ', '.join(solver.unsat_core(result.bound)))
    elif result.status == SolveStatus.ILL_DEFINED:
        print("The model is ill-defined at positions",
              ', '.join(str(e.pos) for e in result.errors))
    else:
        print("z3 could not decide length %d" % result.bound)

    if args.print_model and result.model is not None:
        print_model(network, result.bound, result.model)

    if args.check:
        explicit = find_path_explicit(network, result.bound)
        found = result.status == SolveStatus.PATH_FOUND
        if (explicit is not None) != found:
            raise AssertionError("SAT answer and explicit search disagree for length %d" % result.bound)
        print("Explicit search agrees")


if __name__ == '__main__':
    main()

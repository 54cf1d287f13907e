#!/usr/bin/env python
"""
Generate tunnel networks (random ones and grids) in the fact
and dot formats.
"""

import argparse
import os

from tunnelsat.graph_util import grid_network
from tunnelsat.graph_util import network_to_facts
from tunnelsat.graph_util import random_network
from tunnelsat.graph_util import write_dot


def main():
    parser = argparse.ArgumentParser(description='Generate tunnel networks.')
    parser.add_argument("-o", dest="outdir", default="examples/generated",
                        help="Output directory")
    parser.add_argument("-n", dest="sizes", default=[3, 4, 5], type=int, nargs='+',
                        help="Number of nodes (grid side for grids)")
    parser.add_argument("-k", dest="count", default=3, type=int,
                        help="Random networks per size")
    parser.add_argument("--edge-prob", dest="edge_prob", default=0.5, type=float)
    parser.add_argument("--action-prob", dest="action_prob", default=0.3, type=float)
    parser.add_argument("--seed", dest="seed", default=0, type=int)
    parser.add_argument("--grid", dest="grid", action="store_true",
                        help="Generate grids instead of random networks")
    args = parser.parse_args()

    if not os.path.exists(args.outdir):
        os.makedirs(args.outdir)

    for size in args.sizes:
        if args.grid:
            networks = [('grid%d' % size, grid_network(size))]
        else:
            networks = []
            for i in range(args.count):
                seed = args.seed + 1000 * size + i
                network = random_network(size, args.edge_prob, args.action_prob, seed=seed)
                networks.append(('random%d-%d' % (size, i), network))
        for name, network in networks:
            print(name, network)
            with open(os.path.join(args.outdir, name + '.logic'), 'w') as f:
                f.write(network_to_facts(network))
            write_dot(network, os.path.join(args.outdir, name + '.dot'))


if __name__ == '__main__':
    main()

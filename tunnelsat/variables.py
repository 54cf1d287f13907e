"""
Boolean variables of the tunnel routing reduction.

z3 identifies a Bool by its name, so calling these functions twice with
the same arguments returns the same variable.
"""
import z3

from tunnelsat.common import Protocol


def path_variable(node, pos, height):
    """x_{node,pos,height}: the path is at node on pos with a stack of that height"""
    return z3.Bool('node %d,pos %d, height %d' % (node, pos, height))


def content_variable(pos, height, protocol):
    """y_{pos,height,protocol}: the stack cell at height holds protocol on pos"""
    return z3.Bool('%d at height %d on pos %d' % (Protocol(protocol).value, height, pos))


def p4_variable(pos, height):
    return content_variable(pos, height, Protocol.P4)


def p6_variable(pos, height):
    return content_variable(pos, height, Protocol.P6)

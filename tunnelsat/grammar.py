"""
Grammar of the fact format describing tunnel networks.

One fact per line, e.g.:

  // A pushes IPv6 over IPv4
  +SetNode("A").
  +SetAction("A", "push_4_6").
  +SetLink("A", "B").
  +SetInitial("A").
  +SetFinal("B").
"""

from collections import namedtuple

from pyparsing import Group
from pyparsing import Literal
from pyparsing import Optional
from pyparsing import QuotedString
from pyparsing import Regex
from pyparsing import ZeroOrMore
from pyparsing import rest_of_line


Fact = namedtuple('Fact', ['op', 'name', 'args'])

# Arity of every known fact
FACTS_SIG = {
    'SetNode': 1,
    'SetAction': 2,
    'SetLink': 2,
    'SetInitial': 1,
    'SetFinal': 1,
}


def parse_fact(parsed_tokens):
    return Fact(parsed_tokens[0], parsed_tokens[1], tuple(parsed_tokens[2]))


fact_name = Regex(r'[a-zA-Z][a-zA-Z0-9_]*')
quoted = QuotedString('"')
bare = Regex(r'[a-zA-Z0-9_\-\.]+')
term = quoted | bare
op = Literal('+')
leftbracket = Literal('(').suppress()
rightbracket = Literal(')').suppress()
comma = Literal(',').suppress()
dot = Literal('.').suppress()
comment = Group(Literal('//') + rest_of_line).suppress()

fact = (op + fact_name + leftbracket + Group(Optional(term) + ZeroOrMore(comma + term)) +
        rightbracket + dot).set_parse_action(parse_fact)
facts = ZeroOrMore(comment | fact)


def _check(parsed):
    for f in parsed:
        if f.name not in FACTS_SIG:
            raise ValueError("Unknown fact '%s'" % f.name)
        if FACTS_SIG[f.name] != len(f.args):
            raise ValueError("%s expects %d arguments, got %s" % (f.name, FACTS_SIG[f.name], f.args))
    return list(parsed)


def parse_facts(text):
    """Parse the facts in text, returns a list of Fact"""
    return _check(facts.parse_string(text, parse_all=True))


def parse_facts_file(filename):
    return _check(facts.parse_file(filename, parse_all=True))

"""
The well-known types: the ones the evaluator itself must be able to name,
and the typeclass heads the standard preamble hangs its instances on.
"""

from .algebra import Constructor, MuType, Render

def _simple(name:str) -> Constructor:
	return Constructor(name)

NOTHING = _simple("Nothing")
UNIT = _simple("Unit")
BOOLEAN = _simple("Boolean")
STRING = _simple("String")
INT = _simple("Int")
BIG_INT = _simple("BigInt")
RATIONAL = _simple("Rational")
DOUBLE = _simple("Double")

# Source literals get their own types until something says what they should become.
LIT_INT = _simple("LitInt")
LIT_STRING = _simple("LitString")

# Quoted source code, as passed to parameters which ask for it.
EXPR = _simple("Expr")

# Types are values too, at least by name.
TYPE = _simple("Type")

LIST = "List"
MAP = "Map"
PAIR = "Pair"
SET = "Set"
UNION2 = "Union2"

UPCAST = "Upcast"
GROUP = "Group"
MONOID = "Monoid"

def list_of(element: MuType) -> Constructor: return Constructor(LIST, [element])
def map_of(key: MuType, value: MuType) -> Constructor: return Constructor(MAP, [key, value])
def pair_of(first: MuType, second: MuType) -> Constructor: return Constructor(PAIR, [first, second])
def set_of(element: MuType) -> Constructor: return Constructor(SET, [element])
def union2_of(first: MuType, second: MuType) -> Constructor: return Constructor(UNION2, [first, second])
def upcast(source: MuType, target: MuType) -> Constructor: return Constructor(UPCAST, [source, target])
def group(t: MuType) -> Constructor: return Constructor(GROUP, [t])
def monoid(t: MuType) -> Constructor: return Constructor(MONOID, [t])

Render.infix[UPCAST] = "<:"

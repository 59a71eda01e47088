"""
The standard preamble: a small library of instances and functions, registered by hand.

Payload conventions: BigInt and integer literals are Python ints; Int is an int
that fits in 32 bits; Rational is a Fraction; Double is a float; strings are str.
Upcasts are plain one-argument callables.
"""
import math
from fractions import Fraction
from typing import Callable, NamedTuple

from .algebra import Use, nullable
from .primitive import (
	NOTHING, UNIT, BOOLEAN, STRING, INT, BIG_INT, RATIONAL, DOUBLE, LIT_INT, LIT_STRING, EXPR, TYPE,
	list_of, map_of, pair_of, set_of, union2_of, upcast, group, monoid,
)
from .resolution import Instance, InstanceRegistry
from .binding import Arg, REQUIRED, ZERO_OR_MORE
from . import syntax
from .runtime import Value, Function, Scope, EvaluationError, MalformedDefinition, coerce
from .unification import Typer

INT_MIN, INT_MAX = -2**31, 2**31 - 1

A, B, C, R = (Use(v) for v in "ABCR")

class Group(NamedTuple):
	empty: object
	combine: Callable
	invert: Callable

class Monoid(NamedTuple):
	empty: object
	combine: Callable

class Union2(NamedTuple):
	""" A value of one of two types. The index says which: 0 for the first, 1 for the second. """
	index: int
	value: object

	def map(self, index: int, fn: Callable) -> "Union2":
		return Union2(index, fn(self.value)) if index == self.index else self

def _narrow_int(n: int) -> int:
	if not INT_MIN <= n <= INT_MAX:
		raise EvaluationError("Integer literal %d is too large for Int." % n)
	return n

def _cast(source, target, fn) -> Instance:
	return Instance((), (), upcast(source, target), lambda: fn)

def _identity(x): return x

def standard_instances(*, unions=False) -> InstanceRegistry:
	"""
	The standard instances. Union2 upcasts are left out unless asked for:
	with them, any two types have a common supertype, so mixed lists always lift.
	"""
	registry = InstanceRegistry()
	register = registry.register
	register(Instance("A", (), upcast(A, A), lambda: _identity))
	register(Instance("A", (), upcast(NOTHING, A), lambda: _identity))
	register(Instance("A", (), upcast(A, nullable(A)), lambda: _identity))

	register(_cast(LIT_INT, BIG_INT, int))
	register(_cast(LIT_INT, INT, _narrow_int))
	register(_cast(LIT_INT, RATIONAL, Fraction))
	register(_cast(LIT_INT, DOUBLE, float))
	register(_cast(LIT_STRING, STRING, str))

	register(_cast(INT, BIG_INT, int))
	register(_cast(BIG_INT, RATIONAL, Fraction))
	register(_cast(RATIONAL, DOUBLE, float))

	register(Instance("AB", (upcast(A, B),), upcast(list_of(A), list_of(B)), lambda ab: lambda xs: [ab(x) for x in xs]))
	register(Instance("ABC", (upcast(A, B), upcast(B, C)), upcast(A, C), lambda ab, bc: lambda x: bc(ab(x))))

	def add(a, b): return a + b
	def negate(a): return -a
	register(Instance((), (), group(BIG_INT), lambda: Group(0, add, negate)))
	register(Instance((), (), group(RATIONAL), lambda: Group(Fraction(0), add, negate)))
	register(Instance((), (), group(DOUBLE), lambda: Group(0.0, add, negate)))
	register(Instance("A", (group(A),), monoid(A), lambda g: Monoid(g.empty, g.combine)))
	if unions: register_unions(registry)
	return registry

def register_unions(registry: InstanceRegistry):
	register = registry.register
	register(Instance("AB", (), upcast(A, union2_of(A, B)), lambda: lambda x: Union2(0, x)))
	register(Instance("AB", (), upcast(A, union2_of(B, A)), lambda: lambda x: Union2(1, x)))
	register(Instance("ABC", (upcast(A, B),), upcast(union2_of(A, C), union2_of(B, C)), lambda ab: lambda u: u.map(0, ab)))
	register(Instance("ABC", (upcast(A, B),), upcast(union2_of(C, A), union2_of(C, B)), lambda ab: lambda u: u.map(1, ab)))

#########################

def _plus(evaluator, scope, args, implicits):
	a2r, b2r, m = implicits
	return m.combine(a2r(args["a"].payload), b2r(args["b"].payload))

def _list(evaluator, scope, args, implicits):
	return list(args["items"].payload)

def _pair(evaluator, scope, args, implicits):
	return args["first"].payload, args["second"].payload

def _map(evaluator, scope, args, implicits):
	return dict(args["entries"].payload)

def _set(evaluator, scope, args, implicits):
	return set(args["items"].payload)

def _quote(evaluator, scope, args, implicits):
	return args["expr"].payload

def _type_named(evaluator, scope, expr):
	it = evaluator.evaluate(expr, scope)
	if it.type != TYPE:
		raise MalformedDefinition("%s does not name a type." % expr)
	return it.payload

def _define(evaluator, scope, args, implicits):
	"""
	(define name body) binds the value of body.
	(define (name (param Type) ... Result) body) binds a function.
	"""
	head, body = args["name"].payload, args["body"].payload
	if isinstance(head, syntax.Atom) and not head.is_keyword():
		scope.assign(head.name, evaluator.evaluate(body, scope))
		return None
	if not isinstance(head, syntax.Seq) or len(head.items) < 2 or not isinstance(head.items[0], syntax.Atom):
		raise MalformedDefinition("Cannot define %s: expected a name or a (name (param Type) ... Result) signature." % head)
	name, *params, result = head.items
	formals = []
	for p in params:
		if not (isinstance(p, syntax.Seq) and len(p.items) == 2 and isinstance(p.items[0], syntax.Atom)):
			raise MalformedDefinition("In %s, expected (param Type) but got %s." % (name, p))
		formals.append(Arg(p.items[0].name, _type_named(evaluator, scope, p.items[1])))
	result_type = _type_named(evaluator, scope, result)

	def run(caller, call_scope, actuals, implicits):
		inner = scope.child()
		for key, value in actuals.items(): inner.assign(key, value)
		outcome = caller.evaluate(body, inner)
		return coerce(Typer(inner.registry, report=caller.report), outcome, result_type, "result").payload

	fn = Function(name.name, (), formals, result_type, run)
	scope.assign(name.name, fn.as_value())
	return None

def standard_functions() -> list[Function]:
	return [
		Function("+", "ABR", [Arg("a", A), Arg("b", B)], R, _plus, [upcast(A, R), upcast(B, R), monoid(R)]),
		Function("list", "A", [Arg("items", list_of(A), ZERO_OR_MORE)], list_of(A), _list),
		Function("pair", "AB", [Arg("first", A), Arg("second", B)], pair_of(A, B), _pair),
		Function("map", "AB", [Arg("entries", list_of(pair_of(A, B)), ZERO_OR_MORE)], map_of(A, B), _map),
		Function("set", "A", [Arg("items", list_of(A), ZERO_OR_MORE)], set_of(A), _set),
		Function("define", (), [Arg("name", EXPR, REQUIRED, True), Arg("body", EXPR, REQUIRED, True)], UNIT, _define),
		Function("quote", (), [Arg("expr", EXPR, REQUIRED, True)], EXPR, _quote),
	]

def standard_scope(*, unions=False) -> Scope:
	""" A fresh root scope with the standard preamble in it. """
	scope = Scope(registry=standard_instances(unions=unions))
	for fn in standard_functions():
		scope.assign(fn.name, fn.as_value())
	for t in (NOTHING, UNIT, BOOLEAN, STRING, INT, BIG_INT, RATIONAL, DOUBLE):
		scope.assign(t.head, Value(t, TYPE))
	scope.assign("true", Value(True, BOOLEAN))
	scope.assign("false", Value(False, BOOLEAN))
	scope.assign("pi", Value(math.pi, DOUBLE))
	return scope

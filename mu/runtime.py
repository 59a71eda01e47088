"""
Run-time objects: values that know their types, functions the evaluator can call,
and the chain of scopes names are looked up in.

Also the two places where the type engine meets actual values:
coercing one value toward a declared type, and lifting a bunch of values into one list.
"""
from typing import Callable, NamedTuple, Optional, Sequence

from .diagnostics import MuError, Report
from .algebra import MuType, Constructor, Func, Use, TypeVariable, render
from .primitive import NOTHING, list_of, upcast
from .unification import Typer, UnificationFailed
from .resolution import NoInstanceFound
from .binding import Arg, validate_args

SIMILAR_NAMES = 5
SIMILARITY_THRESHOLD = 10

class EvaluationError(MuError):
	pass

class UnboundVariable(EvaluationError):
	def __init__(self, name: str, similar: Sequence[str] = ()):
		self.name, self.similar = name, list(similar)
		text = "Unbound variable %r." % name
		if self.similar: text += " Did you mean: %s?" % ", ".join(self.similar)
		super().__init__(text)

class EmptyApplication(EvaluationError):
	def __init__(self, expr):
		self.expr = expr
		super().__init__("Cannot apply an empty form.")

class HeadIsNotAFunction(EvaluationError):
	def __init__(self, expr, value: "Value"):
		self.expr, self.value = expr, value
		super().__init__("%s is not a function; it is %s." % (expr, value))

class ArgumentTypeMismatch(EvaluationError):
	def __init__(self, name: str, expected: MuType, actual: MuType):
		self.name, self.expected, self.actual = name, expected, actual
		super().__init__("Argument %r wants %s but got %s." % (name, render(expected), render(actual)))

class MalformedDefinition(EvaluationError):
	pass

class Value(NamedTuple):
	payload: object
	type: MuType
	def __str__(self): return "%s : %s" % (self.payload, render(self.type))

class Function:
	"""
	Everything the evaluator needs to know to call something:
		type_params are the function's own type variables, freshly instantiated per call.
		args are the declared parameters, in order.
		implicits are goals resolved per call; their values go to `run` in the same order.
		run(evaluator, scope, args, implicits) returns the payload of the result.
	Absent optional arguments arrive as None. Variadic ones arrive as a list Value.
	"""
	def __init__(self, name: str, type_params: Sequence, args: Sequence[Arg], result: MuType, run: Callable, implicits: Sequence[Constructor] = ()):
		self.name = name
		self.type_params = tuple(v if isinstance(v, TypeVariable) else TypeVariable(v) for v in type_params)
		self.args = tuple(validate_args(args))
		self.result = result
		self.implicits = tuple(implicits)
		self.run = run

	def type(self) -> Func:
		return Func(self.type_params, [a.type for a in self.args], self.result)

	def as_value(self) -> Value:
		return Value(self, self.type())

	def __repr__(self):
		return "<fn %s(%s)>" % (self.name, " ".join(map(str, self.args)))

class Scope:
	""" Nested local bindings. The instance registry is shared along the whole chain. """
	def __init__(self, parent: Optional["Scope"] = None, registry=None):
		self.parent = parent
		self.registry = registry if registry is not None or parent is None else parent.registry
		self._names = {}

	def child(self) -> "Scope":
		return Scope(self)

	def assign(self, name: str, value: Value):
		self._names[name] = value

	def fetch(self, name: str) -> Value:
		scope = self
		while scope is not None:
			if name in scope._names: return scope._names[name]
			scope = scope.parent
		raise UnboundVariable(name, similar_names(name, self.visible_names()))

	def visible_names(self) -> set[str]:
		names = set()
		scope = self
		while scope is not None:
			names.update(scope._names)
			scope = scope.parent
		return names

def edit_distance(a: str, b: str) -> int:
	""" Levenshtein, one row at a time. """
	if len(a) < len(b): a, b = b, a
	row = list(range(len(b) + 1))
	for i, x in enumerate(a, 1):
		prior, row[0] = row[0], i
		for j, y in enumerate(b, 1):
			prior, row[j] = row[j], min(row[j] + 1, row[j - 1] + 1, prior + (x != y))
	return row[-1]

def similar_names(name: str, candidates, limit=SIMILAR_NAMES, threshold=SIMILARITY_THRESHOLD) -> list[str]:
	ranked = sorted((edit_distance(name, c), c) for c in candidates)
	return [c for d, c in ranked if d < threshold][:limit]

def coerce(typer: Typer, value: Value, expected: MuType, name: str) -> Value:
	"""
	Make the value acceptable where `expected` is wanted, teaching the typer whatever that takes.
	Unification comes first. Failing that, an Upcast from the value's type does the job.
	"""
	trial = typer.copy()
	try:
		trial.unify(expected, value.type)
	except UnificationFailed:
		pass
	else:
		typer.adopt(trial)
		return value
	target = typer.subst(expected)
	try:
		branch, (cast,) = typer.resolve([upcast(value.type, target)])
	except NoInstanceFound:
		raise ArgumentTypeMismatch(name, target, value.type) from None
	typer.adopt(branch)
	typer.report.info("upcast", name, "from", render(value.type), "to", render(typer.subst(target)))
	return Value(cast(value.payload), typer.subst(target))

def lift_list(values: Sequence[Value], registry=None, *, report: Report = None) -> Value:
	""" One list value from several, at the least type they can all be upcast to. """
	if not values:
		return Value([], list_of(NOTHING))
	first = values[0].type
	if all(v.type == first for v in values):
		return Value([v.payload for v in values], list_of(first))
	typer = Typer(registry, report=report)
	element = Use(typer.fresh_unification_var())
	branch, casts = typer.resolve([upcast(v.type, element) for v in values])
	return Value([cast(v.payload) for cast, v in zip(casts, values)], list_of(branch.subst(element)))

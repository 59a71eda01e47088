"""
Binding the actual arguments at a call site to the declared parameters.

Arguments arrive as a flat sequence in which Keyword markers (written `:name` in source)
introduce named arguments, and everything else is a value. Parameters are (arity, name) pairs.
The result maps every parameter name to the list of values it received.

This is a search, not a scan. Wherever an optional or variadic parameter could take
more or fewer of the values on offer, each possibility is explored. Exactly one complete
assignment is a success. Two different complete assignments mean the call is ambiguous,
and that gets reported rather than guessed at. If nothing works, the most severe of the
failures found along the way is the one reported.

A cursor tracks where positional values go next. It starts out Positional at the first
parameter. A named argument may move it forward over parameters that can be empty.
Going backward, or skipping something required, puts the cursor in Named mode for good,
and from then on a bare positional value is an error.
"""
from itertools import takewhile
from typing import NamedTuple, Optional, Sequence

from .diagnostics import MuError
from .algebra import MuType

class Arity:
	""" How many values a parameter accepts: (minimum, maximum), where a maximum of None means unbounded. """
	def __init__(self, minimum: int, maximum: Optional[int]):
		if minimum < 0:
			raise ValueError("An arity's minimum cannot be negative.")
		if maximum is not None and maximum < minimum:
			raise ValueError("An arity's maximum cannot be less than its minimum.")
		self.minimum, self.maximum = minimum, maximum

	def __eq__(self, other): return isinstance(other, Arity) and self._key() == other._key()
	def __hash__(self): return hash(self._key())
	def _key(self): return self.minimum, self.maximum

	def is_nullable(self) -> bool: return self.minimum == 0
	def is_vararg(self) -> bool: return self.maximum is None or self.maximum > 1

	def consume(self, n: int) -> "Arity":
		""" What is left of this arity after n values have been taken. """
		if n < 0: raise ValueError(n)
		if not n: return self
		if self.maximum is None:
			return Arity(max(0, self.minimum - n), None)
		if n > self.maximum:
			raise ValueError("Cannot take %d values from %s." % (n, self))
		return Arity(max(0, self.minimum - n), self.maximum - n)

	def suffix(self) -> str:
		""" The conventional mark for this arity after a parameter's name. """
		lo, hi = self._key()
		if (lo, hi) == (1, 1): return ""
		if (lo, hi) == (0, 1): return "?"
		if (lo, hi) == (1, None): return "+"
		if (lo, hi) == (0, None): return "*"
		if hi is None: return "{%d,}" % lo
		return "{%d..%d}" % (lo, hi)

	def __repr__(self):
		return "[%d..%s]" % (self.minimum, "*" if self.maximum is None else self.maximum)

REQUIRED = Arity(1, 1)
OPTIONAL = Arity(0, 1)
ZERO_OR_MORE = Arity(0, None)
ONE_OR_MORE = Arity(1, None)

class Arg(NamedTuple):
	""" A declared parameter. A quoted parameter receives its argument unevaluated. """
	name: str
	type: MuType
	arity: Arity = REQUIRED
	quote: bool = False

	def __str__(self): return self.name + self.arity.suffix()

class Keyword(NamedTuple):
	""" Marks a named argument in the sequence of actuals. """
	name: str
	def __str__(self): return ":" + self.name

class InvalidSignature(MuError, ValueError):
	pass

def validate_args(args: Sequence[Arg]) -> Sequence[Arg]:
	seen = set()
	for a in args:
		if a.name in seen:
			raise InvalidSignature("Parameter %r is declared more than once." % a.name)
		seen.add(a.name)
	return args

#########################

class MatchArgsError(MuError):
	pass

class MissingArgument(MatchArgsError):
	def __init__(self, names):
		self.names = list(names)
		super().__init__("Missing required argument: %s" % ", ".join(map(str, self.names)))

class TooManyArguments(MatchArgsError):
	def __init__(self, values):
		self.values = list(values)
		super().__init__("Too many arguments provided. Extra: %s" % ", ".join(map(str, self.values)))

class DuplicateArgument(MatchArgsError):
	def __init__(self, name):
		self.name = name
		super().__init__("Duplicate argument provided for %r." % name)

class UnknownArgument(MatchArgsError):
	def __init__(self, names):
		self.names = list(names)
		super().__init__("Unknown named argument: %s" % ", ".join(map(str, self.names)))

class AmbiguousPositionalArgument(MatchArgsError):
	def __init__(self, name):
		self.name = name
		super().__init__("Ambiguous assignment of positional arguments around parameter %r." % name)

class PositionalArgumentAfterOutOfOrderNamedArgument(MatchArgsError):
	def __init__(self, value):
		self.value = value
		super().__init__("Positional argument %s cannot follow an out-of-order named argument." % (value,))

class NamedArgumentRequiresValue(MatchArgsError):
	def __init__(self, names):
		self.names = list(names)
		super().__init__("Named argument needs at least one value: %s" % ", ".join(map(str, self.names)))

#########################

# Possible outcomes of a (partial) search. Higher severity wins the right to be reported.

class Success(NamedTuple):
	assignment: dict
	severity = 0

class Missing(NamedTuple):
	names: tuple
	severity = 1

class TooMany(NamedTuple):
	name: str
	extra: tuple
	is_duplicate: bool
	severity = 2

class PositionalInNamedMode(NamedTuple):
	value: object
	due_to_out_of_order: bool
	severity = 5

class UnknownPositional(NamedTuple):
	value: object
	severity = 5

class Ambiguous(NamedTuple):
	name: str
	severity = 10

class Positional(NamedTuple):
	index: int
	def advance(self): return Positional(self.index + 1)

class Named(NamedTuple):
	due_to_out_of_order: bool
	def advance(self): return self

#########################

def match_args(parameters: Sequence[tuple[Arity, str]], arguments: Sequence) -> dict[str, list]:
	"""
	Assign arguments to parameters, or raise the appropriate MatchArgsError.
	Every parameter appears in the result, possibly with an empty list.
	"""
	matcher = _Matcher(parameters, arguments)
	outcome = matcher.go(0, Positional(0), 0, {name: () for _, name in matcher.parameters})
	if isinstance(outcome, Success):
		return {name: list(values) for name, values in outcome.assignment.items()}
	if isinstance(outcome, Missing):
		raise MissingArgument(outcome.names)
	if isinstance(outcome, UnknownPositional):
		raise UnknownArgument([outcome.value])
	if isinstance(outcome, TooMany):
		if outcome.is_duplicate: raise DuplicateArgument(outcome.name)
		raise TooManyArguments(outcome.extra)
	if isinstance(outcome, Ambiguous):
		raise AmbiguousPositionalArgument(outcome.name)
	if isinstance(outcome, PositionalInNamedMode):
		if outcome.due_to_out_of_order: raise PositionalArgumentAfterOutOfOrderNamedArgument(outcome.value)
		raise TooManyArguments([outcome.value])
	raise TypeError(outcome)

class _Matcher:
	def __init__(self, parameters: Sequence[tuple[Arity, str]], arguments: Sequence):
		self.parameters = list(parameters)
		self.arguments = list(arguments)
		names = [name for _, name in self.parameters]
		if len(set(names)) != len(names):
			raise InvalidSignature("Duplicate parameter names: %s" % ", ".join(names))
		self.arity_of = {name: arity for arity, name in self.parameters}
		self.index_of = {name: i for i, name in enumerate(names)}
		self.limit = len(self.parameters) + len(self.arguments)

		unknown = [a.name for a in self.arguments if isinstance(a, Keyword) and a.name not in self.arity_of]
		if unknown: raise UnknownArgument(unknown)

		empty = [
			a.name for i, a in enumerate(self.arguments)
			if isinstance(a, Keyword) and (i + 1 == len(self.arguments) or isinstance(self.arguments[i + 1], Keyword))
		]
		if empty: raise NamedArgumentRequiresValue(empty)

	def go(self, depth: int, position, index: int, result: dict):
		assert depth <= self.limit, "Argument matching recursed too deeply."
		if index >= len(self.arguments):
			missing = tuple(name for arity, name in self.parameters if arity.consume(len(result[name])).minimum > 0)
			return Missing(missing) if missing else Success(result)

		if isinstance(position, Positional) and position.index >= len(self.parameters):
			# Out of positional parameters, but not out of arguments.
			return self.go(depth + 1, Named(False), index, result)

		arg = self.arguments[index]
		if not isinstance(arg, Keyword):
			if isinstance(position, Named):
				return PositionalInNamedMode(arg, position.due_to_out_of_order)
			_, name = self.parameters[position.index]
			return self.consume(depth, result, index, position, name, 0, False, 0, [arg])

		values = list(takewhile(lambda a: not isinstance(a, Keyword), self.arguments[index + 1:]))
		if isinstance(position, Positional):
			target = self.index_of[arg.name]
			if target > position.index:
				skipped = self.parameters[position.index:target]
				# Declared arity, not what is left of it.
				if all(arity.is_nullable() for arity, _ in skipped):
					position = Positional(target)
				else:
					position = Named(True)
			elif target < position.index:
				position = Named(True)
		return self.consume(depth, result, index, position, arg.name, 1, True, 1, values)

	def consume(self, depth, result, index, position, name, least, greedy, skip, values):
		declared = self.arity_of[name]
		already = result[name]
		effective = declared.consume(len(already))
		if effective.maximum == 0:
			return TooMany(name, tuple(values), declared.maximum == 1)

		n = len(values)
		lo = max(least, min(effective.minimum, n))
		hi = n if effective.maximum is None else min(effective.maximum, n)
		if greedy: lo = max(lo, hi)

		best = None
		for i in range(lo, hi + 1):
			taken = dict(result)
			taken[name] = already + tuple(values[:i])
			onward = [position.advance()]
			if i and effective.consume(i).maximum != 0:
				onward.append(position)
			for p in onward:
				case = self.go(depth + 1, p, index + skip + i, taken)
				if isinstance(case, Ambiguous):
					return case
				if isinstance(best, Success):
					if isinstance(case, Success) and case != best:
						return Ambiguous(name)
				elif best is None or isinstance(case, Success) or best.severity < case.severity:
					best = case
		return best

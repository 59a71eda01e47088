"""
The type-terms of Mu, and the few things one does with them directly.

Terms are value objects: structurally equal terms are equal and hash alike,
so they can serve as dictionary keys (which the instance solver relies on).
There are exactly five kinds of term:

	Constructor -- a named type applied to arguments, like List[Int].
	Forall      -- universal quantification over a body.
	Exists      -- existential quantification over a body.
	Use         -- a mention of a type variable.
	Func        -- a function type, carrying its own local type parameters.

Anything wanting to walk a term does so with a TypeVisitor.
Substitution is a visitor (Rewrite) and so is printing (Render).

Design Note:
-------------
A substitution is anything with a `.get(variable)` method returning a term or None.
That covers plain dictionaries and also the equivalence lattice,
so the same rewriter serves both for instantiation and for reading back solutions.
"""
from typing import Iterable, NamedTuple, Optional, Sequence
from .diagnostics import MuError

NULLABLE = "?"
UNIFICATION_PREFIX = "ξ"
EXISTENTIAL_PREFIX = "φ"

class MalformedType(MuError, ValueError):
	""" A term was constructed in violation of its invariants. This is a programming error. """

class TypeVariable(NamedTuple):
	name: str
	def __str__(self): return self.name
	def is_unification(self) -> bool: return self.name.startswith(UNIFICATION_PREFIX)
	def is_existential(self) -> bool: return self.name.startswith(EXISTENTIAL_PREFIX)

def _binder(variables: Iterable) -> tuple[TypeVariable, ...]:
	them = tuple(v if isinstance(v, TypeVariable) else TypeVariable(v) for v in variables)
	if not them:
		raise MalformedType("A quantifier must bind at least one variable.")
	if len(set(them)) != len(them):
		raise MalformedType("A quantifier may not bind the same name twice: %s" % ", ".join(map(str, them)))
	return them

class MuType:
	""" Value objects, so they can play well as dictionary keys. """
	def __init__(self, *key):
		self._key = key
		self._hash = hash(key)
	def __hash__(self): return self._hash
	def __eq__(self, other): return type(self) is type(other) and self._key == other._key
	def __repr__(self) -> str: return self.visit(Render())

	def visit(self, visitor: "TypeVisitor"): raise NotImplementedError(type(self))

	def subst(self, gamma) -> "MuType":
		""" Replace free variables according to gamma, which must support `.get(variable)` """
		return self.visit(Rewrite(gamma))

	def free_variables(self) -> frozenset:
		return frozenset(self.visit(FreeVariables()))

	def is_known_nullable(self) -> bool: return False
	def remove_known_nullability(self) -> "MuType": return self

class Constructor(MuType):
	def __init__(self, head: str, args: Sequence[MuType] = ()):
		args = tuple(args)
		if head == NULLABLE:
			if len(args) != 1:
				raise MalformedType("The nullable marker takes exactly one argument, not %d." % len(args))
			if args[0].is_known_nullable():
				raise MalformedType("%r is already nullable." % args[0])
		self.head, self.args = head, args
		super().__init__(head, args)
	def visit(self, visitor: "TypeVisitor"): return visitor.on_constructor(self)
	def arity(self) -> int: return len(self.args)
	def is_known_nullable(self) -> bool: return self.head == NULLABLE
	def remove_known_nullability(self) -> MuType:
		return self.args[0] if self.head == NULLABLE else self

class Forall(MuType):
	def __init__(self, variables: Iterable, body: MuType):
		self.vars, self.body = _binder(variables), body
		super().__init__(self.vars, body)
	def visit(self, visitor: "TypeVisitor"): return visitor.on_forall(self)
	def is_known_nullable(self) -> bool: return self.body.is_known_nullable()
	def remove_known_nullability(self) -> MuType:
		return Forall(self.vars, self.body.remove_known_nullability())

class Exists(MuType):
	def __init__(self, variables: Iterable, body: MuType):
		self.vars, self.body = _binder(variables), body
		super().__init__(self.vars, body)
	def visit(self, visitor: "TypeVisitor"): return visitor.on_exists(self)
	def is_known_nullable(self) -> bool: return self.body.is_known_nullable()
	def remove_known_nullability(self) -> MuType:
		return Exists(self.vars, self.body.remove_known_nullability())

class Use(MuType):
	def __init__(self, name):
		self.name = name if isinstance(name, TypeVariable) else TypeVariable(name)
		super().__init__(self.name)
	def visit(self, visitor: "TypeVisitor"): return visitor.on_use(self)

class Func(MuType):
	def __init__(self, type_params: Iterable, params: Sequence[MuType], result: MuType):
		self.type_params = tuple(v if isinstance(v, TypeVariable) else TypeVariable(v) for v in type_params)
		if len(set(self.type_params)) != len(self.type_params):
			raise MalformedType("A function may not bind the same type parameter twice.")
		self.params, self.result = tuple(params), result
		super().__init__(self.type_params, self.params, result)
	def visit(self, visitor: "TypeVisitor"): return visitor.on_func(self)

def nullable(t: MuType) -> MuType:
	""" Wrap in the nullable marker, unless that would say the same thing twice. """
	if isinstance(t, Forall):
		return Forall(t.vars, nullable(t.body))
	if isinstance(t, Exists):
		return Exists(t.vars, nullable(t.body))
	if t.is_known_nullable():
		return t
	return Constructor(NULLABLE, [t])

#########################

class TypeVisitor:
	def on_constructor(self, c: Constructor): pass
	def on_forall(self, q: Forall): pass
	def on_exists(self, q: Exists): pass
	def on_use(self, u: Use): pass
	def on_func(self, f: Func): pass

class Rewrite(TypeVisitor):
	"""
	Capture-avoiding substitution. Names bound by a quantifier or a function's
	type parameters are shadowed inside that binder. Whatever a variable maps to
	gets rewritten again in turn, so chains of bindings come out fully resolved.
	"""
	def __init__(self, gamma, shadow: frozenset = frozenset(), root: "Rewrite" = None):
		self.gamma = gamma
		self.shadow = shadow
		self.root = root or self

	def _under(self, bound: Iterable[TypeVariable]) -> "Rewrite":
		return Rewrite(self.gamma, self.shadow.union(bound), self.root)

	def on_constructor(self, c: Constructor):
		if not c.args: return c
		args = [a.visit(self) for a in c.args]
		if c.head == NULLABLE:
			return nullable(args[0])
		return Constructor(c.head, args)

	def on_forall(self, q: Forall):
		return Forall(q.vars, q.body.visit(self._under(q.vars)))

	def on_exists(self, q: Exists):
		return Exists(q.vars, q.body.visit(self._under(q.vars)))

	def on_use(self, u: Use):
		if u.name in self.shadow: return u
		it = self.gamma.get(u.name)
		if it is None: return u
		return it.visit(self.root)

	def on_func(self, f: Func):
		inner = self._under(f.type_params)
		return Func(f.type_params, [p.visit(inner) for p in f.params], f.result.visit(inner))

class FreeVariables(TypeVisitor):
	""" Yields the free variables of a term, possibly with repeats. """
	def on_constructor(self, c: Constructor):
		for a in c.args: yield from a.visit(self)
	def on_forall(self, q: Forall):
		for v in q.body.visit(self):
			if v not in q.vars: yield v
	on_exists = on_forall
	def on_use(self, u: Use):
		yield u.name
	def on_func(self, f: Func):
		for t in (*f.params, f.result):
			for v in t.visit(self):
				if v not in f.type_params: yield v

class Render(TypeVisitor):
	""" Return a string representation of the term. """

	# Some heads read better as operators. The primitive module fills this in.
	infix: dict[str, str] = {}

	def on_constructor(self, c: Constructor):
		if c.head == NULLABLE:
			inner = c.args[0]
			text = inner.visit(self)
			if isinstance(inner, (Func, Forall, Exists)): text = "(%s)" % text
			return text + "?"
		if c.head in self.infix and len(c.args) == 2:
			return "(%s %s %s)" % (c.args[0].visit(self), self.infix[c.head], c.args[1].visit(self))
		if c.args:
			return "%s[%s]" % (c.head, ", ".join(a.visit(self) for a in c.args))
		return c.head

	def on_forall(self, q: Forall):
		return "∀%s. %s" % (", ".join(map(str, q.vars)), q.body.visit(self))

	def on_exists(self, q: Exists):
		return "∃%s. %s" % (", ".join(map(str, q.vars)), q.body.visit(self))

	def on_use(self, u: Use):
		return u.name.name

	def on_func(self, f: Func):
		prefix = "[%s]" % ", ".join(map(str, f.type_params)) if f.type_params else ""
		return "%s(%s) -> %s" % (prefix, ", ".join(p.visit(self) for p in f.params), f.result.visit(self))

def render(t: Optional[MuType]) -> str:
	return "nothing" if t is None else t.visit(Render())

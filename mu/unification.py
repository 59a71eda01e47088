"""
Structural unification of type-terms against an equivalence lattice.

A Typer is the state of one type-checking attempt: the lattice of what is known so far,
a supply of fresh variable names, and the instance registry that resolution will consult.
Unification either succeeds (having taught the lattice something) or raises UnificationFailed.
A failed unification may leave partial knowledge behind, so anybody wanting to
try something speculatively should work on a copy and adopt it only on success.

Fresh names come in two families from one counter:
	ξ<n> are unification variables, made when opening an Exists or a Func's type parameters.
	φ<n> are the stand-ins made when opening a Forall.

Comparing two Forall schemes needs a bit more care than opening both sides.
One side's variables become rigid (they may be aliased to other variables, but never
bound to a concrete term) while the other side's are opened as usual. Both orientations
are tried; the first that works is kept. That is what makes alpha-equivalent schemes
unify while refusing to equate ∀a. a → Int with ∀b. b → b.
"""
from typing import Callable, Sequence
from boozetools.support.foundation import transitive_closure

from .diagnostics import MuError, Report
from .algebra import (
	MuType, TypeVariable, Constructor, Forall, Exists, Use, Func,
	UNIFICATION_PREFIX, EXISTENTIAL_PREFIX, render,
)
from .lattice import EqLattice

class UnificationFailed(MuError):
	gripe = "Cannot unify %s with %s."
	def __init__(self, prior: MuType, term: MuType):
		self.prior, self.term = prior, term
		super().__init__(self.gripe % (render(prior), render(term)))
class HeadMismatch(UnificationFailed):
	gripe = "This tries to be both %s and also %s, which cannot happen."
class ArityMismatch(UnificationFailed):
	gripe = "%s and %s apply the same constructor to different numbers of arguments."
class ParameterCountMismatch(UnificationFailed):
	gripe = "The functions %s and %s take different numbers of parameters."
class TypeMismatch(UnificationFailed):
	gripe = "%s is a function type, but %s is not."
class RecursiveTypeError(UnificationFailed):
	gripe = "This tries to equate %s with %s which contains it, but a type cannot be part of itself."
class RigidVariable(UnificationFailed):
	gripe = "%s stands for any type at all, so it cannot be made to agree with %s."
class SkolemEscape(UnificationFailed):
	gripe = "Equating %s with %s would let a quantified variable leak out of its scheme."

class Typer:
	def __init__(self, registry=None, *, verbose=False, report:Report=None):
		self.registry = registry
		self.lattice = EqLattice()
		self.rigid = frozenset()
		self._counter = 0
		self._report = report or Report(verbose=verbose)

	@property
	def report(self) -> Report: return self._report

	def copy(self) -> "Typer":
		twin = Typer(self.registry, report=self._report)
		twin.lattice = self.lattice.copy()
		twin.rigid = self.rigid
		twin._counter = self._counter
		return twin

	def adopt(self, other: "Typer"):
		""" Take on the knowledge of a successful speculative copy. """
		self.lattice, self.rigid, self._counter = other.lattice, other.rigid, other._counter

	def _fresh(self, prefix:str) -> TypeVariable:
		self._counter += 1
		return TypeVariable(prefix + str(self._counter))

	def fresh_unification_var(self) -> TypeVariable:
		return self._fresh(UNIFICATION_PREFIX)

	def fresh_existential_var(self) -> TypeVariable:
		return self._fresh(EXISTENTIAL_PREFIX)

	def instantiate(self, variables: Sequence[TypeVariable], terms: Sequence[MuType], fresh: Callable[[], TypeVariable]=None) -> list[MuType]:
		""" Replace the given variables with fresh ones throughout the given terms. """
		fresh = fresh or self.fresh_unification_var
		gamma = {v: Use(fresh()) for v in variables}
		return [t.subst(gamma) for t in terms]

	def subst(self, t: MuType) -> MuType:
		""" Read a term back through everything the lattice knows. """
		return t.subst(self.lattice)

	def resolve(self, goals, **kwargs):
		from .resolution import resolve
		return resolve(self, goals, **kwargs)

	def unify(self, a: MuType, b: MuType):
		if a == b: return
		if isinstance(b, Use) and not isinstance(a, Use): a, b = b, a
		if isinstance(a, Use): return self._unify_variable(a.name, b)
		if isinstance(b, (Forall, Exists)) and not isinstance(a, (Forall, Exists)): a, b = b, a
		if isinstance(a, Forall):
			if isinstance(b, Forall): return self._unify_schemes(a, b)
			opened, = self.instantiate(a.vars, [a.body], self.fresh_existential_var)
			return self.unify(b, opened)
		if isinstance(a, Exists):
			opened, = self.instantiate(a.vars, [a.body], self.fresh_unification_var)
			return self.unify(b, opened)
		if isinstance(b, Func) and not isinstance(a, Func): a, b = b, a
		if isinstance(a, Func):
			if not isinstance(b, Func): raise TypeMismatch(a, b)
			return self._unify_functions(a, b)
		assert isinstance(a, Constructor) and isinstance(b, Constructor), (a, b)
		if a.head != b.head: raise HeadMismatch(a, b)
		if len(a.args) != len(b.args): raise ArityMismatch(a, b)
		for x, y in zip(a.args, b.args):
			self.unify(x, y)

	def _unify_functions(self, a: Func, b: Func):
		if len(a.params) != len(b.params): raise ParameterCountMismatch(a, b)
		lhs = self.instantiate(a.type_params, [*a.params, a.result])
		rhs = self.instantiate(b.type_params, [*b.params, b.result])
		for x, y in zip(lhs, rhs):
			self.unify(x, y)

	def _unify_schemes(self, a: Forall, b: Forall):
		# Skolems must not end up in anything visible from outside the two schemes.
		outside = set(a.free_variables() | b.free_variables())
		for members, bound in self.lattice.classes():
			outside.update(members)
			if bound is not None: outside.update(bound.free_variables())
		failure = None
		for rigid, flexible in ((a, b), (b, a)):
			trial = self.copy()
			skolems = [trial.fresh_existential_var() for _ in rigid.vars]
			trial.rigid = trial.rigid.union(skolems)
			lhs = rigid.body.subst({v: Use(s) for v, s in zip(rigid.vars, skolems)})
			rhs, = trial.instantiate(flexible.vars, [flexible.body], trial.fresh_existential_var)
			try:
				trial.unify(lhs, rhs)
				if trial._escapes(skolems, outside): raise SkolemEscape(a, b)
			except UnificationFailed as ex:
				failure = failure or ex
			else:
				trial.rigid = self.rigid
				self.adopt(trial)
				return
		raise failure

	def _escapes(self, skolems: Sequence[TypeVariable], outside) -> bool:
		for w in outside:
			seen = {w}.union(self.subst(Use(w)).free_variables())
			if any(self.lattice.compare(s, x) for s in skolems for x in seen): return True
		return False

	def _is_rigid(self, v: TypeVariable) -> bool:
		return any(self.lattice.compare(v, r) for r in self.rigid)

	def _occurs(self, v: TypeVariable, t: MuType) -> bool:
		def successors(w):
			bound = self.lattice.get(w)
			return None if bound is None else bound.free_variables()
		reachable = transitive_closure(t.free_variables(), successors)
		return any(self.lattice.compare(v, w) for w in reachable)

	def _admit(self, v: TypeVariable, t: MuType):
		""" Check that v's class may be bound to (non-variable) term t. """
		if self._is_rigid(v): raise RigidVariable(Use(v), t)
		if self._occurs(v, t): raise RecursiveTypeError(Use(v), t)

	def _unify_variable(self, v: TypeVariable, t: MuType):
		bound = self.lattice.get(v)
		if bound is not None:
			return self.unify(bound, t)
		if isinstance(t, Use):
			w = t.name
			if self.lattice.compare(v, w): return
			target = self.lattice.get(w)
			if target is not None:
				self._admit(v, target)
			elif self._is_rigid(v) and self._is_rigid(w):
				raise RigidVariable(Use(v), t)
			self._report.info("join", v, w)
			self.lattice.join(v, w)
		else:
			self._admit(v, t)
			self._report.info("bind", v, ":=", render(t))
			self.lattice.set(v, t)

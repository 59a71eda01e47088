"""
The tree-walker. It does very little on its own account:
at each application it asks the argument matcher which expressions go to which parameter,
evaluates (or quotes) them, and then lets the unifier and the instance solver
settle the types and find whatever implicit values the callee wants.
"""
from boozetools.support.foundation import Visitor

from . import syntax
from .diagnostics import Report
from .algebra import Use, render
from .primitive import LIT_INT, LIT_STRING, DOUBLE, RATIONAL, EXPR
from .unification import Typer
from .binding import Keyword, match_args
from .runtime import (
	Value, Function, Scope, EvaluationError, EmptyApplication, HeadIsNotAFunction,
	coerce, lift_list,
)

class Evaluator(Visitor):
	def __init__(self, *, verbose=False, report: Report = None):
		self._report = report or Report(verbose=verbose)

	@property
	def report(self) -> Report: return self._report

	def evaluate(self, expr, scope: Scope) -> Value:
		return self.visit(expr, scope)

	def visit_Integer(self, expr: syntax.Integer, scope: Scope): return Value(expr.value, LIT_INT)
	def visit_Decimal(self, expr: syntax.Decimal, scope: Scope): return Value(float(expr.value), DOUBLE)
	def visit_Rational(self, expr: syntax.Rational, scope: Scope): return Value(expr.value, RATIONAL)
	def visit_String(self, expr: syntax.String, scope: Scope): return Value(expr.value, LIT_STRING)

	def visit_Atom(self, expr: syntax.Atom, scope: Scope):
		if expr.is_keyword():
			raise EvaluationError("%s names an argument; it has no value of its own." % expr)
		return scope.fetch(expr.name)

	def visit_Seq(self, expr: syntax.Seq, scope: Scope):
		if not expr.items: raise EmptyApplication(expr)
		head, *rest = expr.items
		callee = self.evaluate(head, scope)
		if not isinstance(callee.payload, Function):
			raise HeadIsNotAFunction(head, callee)
		fn = callee.payload
		actuals = [Keyword(a.keyword()) if isinstance(a, syntax.Atom) and a.is_keyword() else a for a in rest]
		slots = match_args([(a.arity, a.name) for a in fn.args], actuals)
		args = {}
		for a in fn.args:
			if a.quote: values = [Value(e, EXPR) for e in slots[a.name]]
			else: values = [self.evaluate(e, scope) for e in slots[a.name]]
			if a.arity.is_vararg(): args[a.name] = lift_list(values, scope.registry, report=self._report)
			else: args[a.name] = values[0] if values else None
		return self.call(fn, args, scope)

	def call(self, fn: Function, args: dict, scope: Scope) -> Value:
		"""
		Check the (already bound) arguments against the declared parameter types,
		upcasting where need be, resolve the implicits, and run the function.
		"""
		self._report.info("call", fn.name)
		self._report.nest()
		try:
			typer = Typer(scope.registry, report=self._report)
			gamma = {v: Use(typer.fresh_unification_var()) for v in fn.type_params}
			for a in fn.args:
				if args[a.name] is not None:
					args[a.name] = coerce(typer, args[a.name], a.type.subst(gamma), a.name)
			goals = [typer.subst(g.subst(gamma)) for g in fn.implicits]
			if goals:
				branch, implicits = typer.resolve(goals)
				typer.adopt(branch)
			else:
				implicits = []
			result_type = typer.subst(fn.result.subst(gamma))
			payload = fn.run(self, scope, args, implicits)
		finally:
			self._report.unnest()
		self._report.info("=>", payload, ":", render(result_type))
		return Value(payload, result_type)

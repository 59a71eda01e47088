"""
Typeclass-style instance resolution: best-first backtracking search.

Given a batch of goals (each a Constructor, such as Upcast[BigInt, Double]),
find an instance for every goal, and for every dependency those instances have in turn,
such that all the types agree. Then build the values bottom-up.

The search state is (depth, outstanding goals, typer, accumulated choices).
States pop in order of depth plus outstanding-goal count, ties going to whichever
was pushed first. Every outstanding goal is tried against every instance registered
under its head, simplest goals and instances first. Each candidate works on its own
copy of the typer, so a rejected candidate leaves no trace.

The first state to run out of goals wins. Nobody checks for a second solution.

A goal is identified by the term it was created with, so two goals created
with structurally equal terms share one slot in the accumulated choices.
A candidate which would make some goal equal to one of its own ancestors
is pruned, because any solution through it could skip the detour.
"""
import heapq
from itertools import count
from typing import Callable, NamedTuple, Sequence
from boozetools.support.foundation import strongly_connected_components_hashable

from .diagnostics import MuError
from .algebra import Constructor, TypeVariable, render
from .unification import Typer, UnificationFailed

MAX_EXPANSIONS = 300

class InstanceResolutionError(MuError):
	pass

class NoInstanceFound(InstanceResolutionError):
	def __init__(self, goals: Sequence[Constructor]):
		self.goals = list(goals)
		super().__init__("No instance found for %s." % ", ".join(map(render, self.goals)))

class CyclicInstanceDependency(NoInstanceFound):
	def __init__(self, goals: Sequence[Constructor], path: Sequence[Constructor]):
		super().__init__(goals)
		self.path = list(path)
		self.args = ("Every way to satisfy %s depends on itself: %s." % (
			", ".join(map(render, self.goals)), " <- ".join(map(render, self.path)),
		),)

class AmbiguousInstance(InstanceResolutionError):
	def __init__(self, goal: Constructor, instances: Sequence["Instance"]):
		self.goal, self.instances = goal, list(instances)
		super().__init__("Several instances could satisfy %s: %s" % (render(goal), "; ".join(map(str, instances))))

class Instance:
	"""
	One way to satisfy goals shaped like `returns`, given values for each of `dependencies`.
	The builder receives the dependency values, in order, and returns the implementation.
	"""
	def __init__(self, type_params: Sequence, dependencies: Sequence[Constructor], returns: Constructor, build: Callable[..., object]):
		assert isinstance(returns, Constructor), returns
		assert all(isinstance(d, Constructor) for d in dependencies), dependencies
		self.type_params = tuple(v if isinstance(v, TypeVariable) else TypeVariable(v) for v in type_params)
		self.dependencies = tuple(dependencies)
		self.returns = returns
		self.build = build

	@property
	def head(self) -> str: return self.returns.head

	def __repr__(self):
		text = ""
		if self.type_params: text += "∀ %s. " % ", ".join(map(str, self.type_params))
		if self.dependencies: text += "%s -> " % ", ".join(map(render, self.dependencies))
		return text + render(self.returns)

class InstanceRegistry:
	""" Instances indexed by the head of what they return, in order of registration. """
	def __init__(self, instances: Sequence[Instance] = ()):
		self._by_head = {}
		for i in instances: self.register(i)

	def register(self, instance: Instance) -> Instance:
		self._by_head.setdefault(instance.head, []).append(instance)
		return instance

	def candidates(self, head: str) -> list[Instance]:
		return self._by_head.get(head, [])

	def __iter__(self):
		for them in self._by_head.values(): yield from them

	def __len__(self): return sum(map(len, self._by_head.values()))

class _Goal(NamedTuple):
	key: Constructor     # As created; this is the goal's identity.
	current: Constructor # As refined by what the branch has learned since.
	path: tuple          # Ancestor goals, nearest last.

class _Choice(NamedTuple):
	instance: Instance
	subgoals: tuple

class _State(NamedTuple):
	depth: int
	goals: tuple
	typer: Typer
	accumulated: dict

	def score(self) -> int: return self.depth + len(self.goals)

def resolve(typer: Typer, goals: Sequence[Constructor], *, max_expansions: int = MAX_EXPANSIONS):
	"""
	Returns (typer, values): the typer of the winning branch, and one value per goal.
	The given typer is not modified.
	"""
	goals = list(goals)
	if not goals: return typer, []
	report = typer.report
	report.info("resolve", ", ".join(map(render, goals)))
	registry = typer.registry
	tie_breaker = count()
	queue = []
	def push(state: _State):
		heapq.heappush(queue, (state.score(), next(tie_breaker), state))
	push(_State(0, tuple(_Goal(g, g, ()) for g in goals), typer, {}))
	cycle, dead_end = None, False
	expansions = 0
	while queue and expansions < max_expansions:
		expansions += 1
		_, _, state = heapq.heappop(queue)
		if not state.goals:
			report.info("solved after", expansions, "expansions")
			return state.typer, _build(goals, state.accumulated)
		ordered = sorted(state.goals, key=lambda g: len(g.current.args))
		for index, goal in enumerate(ordered):
			rest = ordered[:index] + ordered[index + 1:]
			viable = 0
			candidates = sorted(registry.candidates(goal.current.head) if registry else (), key=lambda i: len(i.dependencies))
			for instance in candidates:
				branch = state.typer.copy()
				*dependencies, returns = branch.instantiate(instance.type_params, [*instance.dependencies, instance.returns])
				try:
					branch.unify(goal.current, returns)
				except UnificationFailed:
					continue
				viable += 1
				lineage = goal.path + (goal.current,)
				subgoals = [_Goal(d, d, lineage) for d in map(branch.subst, dependencies)]
				refreshed = [_Goal(g.key, branch.subst(g.current), g.path) for g in rest]
				looping = _find_cycle(branch, refreshed + subgoals)
				if looping is not None:
					report.info("prune", instance, "for", render(goal.current), "(cycle)")
					cycle = cycle or looping
					continue
				report.info("try", instance, "for", render(goal.current))
				accumulated = dict(state.accumulated)
				accumulated[goal.key] = _Choice(instance, tuple(g.key for g in subgoals))
				push(_State(state.depth + 1, tuple(refreshed + subgoals), branch, accumulated))
			if not viable: dead_end = True
	if queue:
		report.info("gave up after", expansions, "expansions")
	elif cycle is not None and not dead_end:
		raise CyclicInstanceDependency(goals, cycle)
	raise NoInstanceFound(goals)

def _find_cycle(typer: Typer, goals: Sequence[_Goal]):
	for g in goals:
		for i, ancestor in enumerate(g.path):
			if typer.subst(ancestor) == g.current:
				return list(g.path[i:]) + [g.current]
	return None

def _build(goals: Sequence[Constructor], accumulated: dict) -> list:
	graph = {key: list(choice.subgoals) for key, choice in accumulated.items()}
	built = {}
	for component in strongly_connected_components_hashable(graph):
		if len(component) > 1 or component[0] in graph[component[0]]:
			raise CyclicInstanceDependency(goals, component)
		key = component[0]
		choice = accumulated[key]
		built[key] = choice.instance.build(*(built[k] for k in choice.subgoals))
	return [built[g] for g in goals]

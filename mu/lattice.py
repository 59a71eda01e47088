"""
Which type variables are known to be the same, and what (if anything) they stand for.

This is union-find over an arena of integer class numbers. Each element
maps to the class it joined; each class points at the class it merged into
(or at itself, if it is still a root); and each root may carry one bound term.

There is deliberately no rank balancing. When two classes merge,
the one allocated later survives. The instance solver's search order
depends on that, so do not "improve" it.
"""

from typing import Hashable, Optional
from boozetools.support.foundation import allocate

class EqLattice:
	def __init__(self):
		self._class_of = {}   # element -> class number; possibly stale until _find refreshes it.
		self._parent = []     # class number -> class number it merged into.
		self._bound = []      # class number -> bound term or None. Only meaningful at roots.

	def copy(self) -> "EqLattice":
		twin = EqLattice()
		twin._class_of = dict(self._class_of)
		twin._parent = list(self._parent)
		twin._bound = list(self._bound)
		return twin

	def _new_class(self) -> int:
		allocate(self._bound, None)
		return allocate(self._parent, len(self._parent))

	def _root(self, c:int) -> int:
		while self._parent[c] != c:
			self._parent[c] = c = self._parent[self._parent[c]]
		return c

	def _find(self, e:Hashable) -> Optional[int]:
		c = self._class_of.get(e)
		if c is None: return None
		r = self._root(c)
		if r != c: self._class_of[e] = r
		return r

	def _find_or_make(self, e:Hashable) -> int:
		c = self._find(e)
		if c is None:
			c = self._class_of[e] = self._new_class()
		return c

	def __contains__(self, e:Hashable) -> bool:
		return e in self._class_of

	def get(self, e:Hashable):
		c = self._find(e)
		return None if c is None else self._bound[c]

	def set(self, e:Hashable, value):
		""" Bind e's class to value, replacing whatever was there. """
		self._bound[self._find_or_make(e)] = value

	def join(self, a:Hashable, b:Hashable):
		ca, cb = self._find(a), self._find(b)
		if ca is None and cb is None:
			self._class_of[a] = self._class_of[b] = self._new_class()
		elif ca is None:
			self._class_of[a] = cb
		elif cb is None:
			self._class_of[b] = ca
		elif ca != cb:
			loser, winner = min(ca, cb), max(ca, cb)
			self._parent[loser] = winner
			if self._bound[winner] is None:
				self._bound[winner] = self._bound[loser]
			self._bound[loser] = None

	def compare(self, a:Hashable, b:Hashable) -> bool:
		if a == b: return True
		ca, cb = self._find(a), self._find(b)
		return ca is not None and ca == cb

	def members(self, e:Hashable) -> list:
		""" Everything known to be the same as e, including e itself. """
		c = self._find(e)
		if c is None: return [e]
		return [x for x in list(self._class_of) if self._find(x) == c]

	def classes(self) -> list[tuple[list, object]]:
		""" (members, bound term) for each class, in order of class number. """
		groups = {}
		for e in list(self._class_of):
			groups.setdefault(self._find(e), []).append(e)
		return [(groups[c], self._bound[c]) for c in sorted(groups)]

	def __repr__(self):
		def show(members, bound):
			text = "[%s]" % ", ".join(map(str, members))
			return text if bound is None else "%s -> %s" % (text, bound)
		return "EqMap(%s)" % "; ".join(show(*pair) for pair in self.classes())

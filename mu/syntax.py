"""
The parse-nodes the evaluator walks.

Whatever reads source text hands over trees of these. There is one compound form, Seq,
used uniformly for application. Bracketed list and map literals are sugar over Seq,
calling `list` and `map` from the preamble.

An atom spelled with a leading colon, like `:name`, marks a named argument
when it appears in argument position.
"""
from fractions import Fraction
from typing import NamedTuple, Sequence

KEYWORD_MARK = ":"

class Integer(NamedTuple):
	value: int
	def __str__(self): return str(self.value)

class Decimal(NamedTuple):
	value: float
	def __str__(self): return repr(self.value)

class Rational(NamedTuple):
	value: Fraction
	def __str__(self): return "%d/%d" % (self.value.numerator, self.value.denominator)

class String(NamedTuple):
	value: str
	def __str__(self): return '"%s"' % self.value.replace("\\", "\\\\").replace('"', '\\"')

class Atom(NamedTuple):
	name: str
	def __str__(self): return self.name
	def is_keyword(self) -> bool:
		return len(self.name) > len(KEYWORD_MARK) and self.name.startswith(KEYWORD_MARK)
	def keyword(self) -> str: return self.name[len(KEYWORD_MARK):]

class Seq(NamedTuple):
	items: tuple
	def __str__(self): return "(%s)" % " ".join(map(str, self.items))

def seq(*items) -> Seq:
	return Seq(tuple(items))

def list_literal(items: Sequence) -> Seq:
	return seq(Atom("list"), *items)

def map_literal(pairs: Sequence[tuple]) -> Seq:
	return seq(Atom("map"), *(seq(Atom("pair"), k, v) for k, v in pairs))

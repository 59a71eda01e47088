import unittest

from mu.diagnostics import MuError
from mu.binding import (
	Arity, Arg, Keyword, REQUIRED, OPTIONAL, ZERO_OR_MORE, ONE_OR_MORE,
	match_args, validate_args, InvalidSignature,
	MissingArgument, TooManyArguments, DuplicateArgument, UnknownArgument,
	AmbiguousPositionalArgument, PositionalArgumentAfterOutOfOrderNamedArgument, NamedArgumentRequiresValue,
)
from mu.primitive import INT

SUFFIX = {"?": OPTIONAL, "*": ZERO_OR_MORE, "+": ONE_OR_MORE}

def params(text):
	""" "x y? z*" -> [(REQUIRED, 'x'), (OPTIONAL, 'y'), (ZERO_OR_MORE, 'z')] """
	result = []
	for word in text.split():
		if word[-1] in SUFFIX: result.append((SUFFIX[word[-1]], word[:-1]))
		else: result.append((REQUIRED, word))
	return result

def actuals(text):
	""" ":x a b" -> [Keyword('x'), 'a', 'b'] """
	return [Keyword(w[1:]) if w.startswith(":") else w for w in text.split()]

def expect(text):
	""" "x=a y= z=b,c" -> {'x': ['a'], 'y': [], 'z': ['b', 'c']} """
	result = {}
	for item in text.split():
		name, values = item.split("=")
		result[name] = values.split(",") if values else []
	return result

class ArityTests(unittest.TestCase):

	def test_predicates(self):
		self.assertFalse(REQUIRED.is_nullable())
		self.assertTrue(OPTIONAL.is_nullable())
		self.assertFalse(OPTIONAL.is_vararg())
		self.assertTrue(ZERO_OR_MORE.is_vararg())
		self.assertTrue(ONE_OR_MORE.is_vararg())
		self.assertTrue(Arity(2, 3).is_vararg())

	def test_consume(self):
		self.assertEqual(Arity(0, 0), REQUIRED.consume(1))
		self.assertIs(OPTIONAL, OPTIONAL.consume(0))
		self.assertEqual(ZERO_OR_MORE, ONE_OR_MORE.consume(1))
		self.assertEqual(Arity(0, 1), Arity(2, 3).consume(2))
		with self.assertRaises(ValueError):
			REQUIRED.consume(2)

	def test_bad_arity(self):
		with self.assertRaises(ValueError):
			Arity(-1, 1)
		with self.assertRaises(ValueError):
			Arity(2, 1)

	def test_suffix(self):
		for arity, suffix in [
			(REQUIRED, ""), (OPTIONAL, "?"), (ZERO_OR_MORE, "*"), (ONE_OR_MORE, "+"),
			(Arity(2, None), "{2,}"), (Arity(2, 4), "{2..4}"),
		]:
			with self.subTest(suffix):
				self.assertEqual(suffix, arity.suffix())
		self.assertEqual("xs*", str(Arg("xs", INT, ZERO_OR_MORE)))
		self.assertEqual("[0..*]", repr(ZERO_OR_MORE))

	def test_signature_validation(self):
		validate_args([Arg("a", INT), Arg("b", INT)])
		with self.assertRaises(InvalidSignature):
			validate_args([Arg("a", INT), Arg("a", INT, OPTIONAL)])
		with self.assertRaises(InvalidSignature):
			match_args(params("a a"), [])

class MatcherTestCase(unittest.TestCase):
	def match(self, signature, call, expected):
		with self.subTest(signature=signature, call=call):
			self.assertEqual(expect(expected), match_args(params(signature), actuals(call)))

	def fails(self, signature, call, kind, check=None):
		with self.subTest(signature=signature, call=call, kind=kind.__name__):
			with self.assertRaises(kind) as cm:
				match_args(params(signature), actuals(call))
			if check is not None:
				self.assertTrue(check(cm.exception), cm.exception)

class SimpleSignatures(MatcherTestCase):

	def test_empty(self):
		self.match("", "", "")
		self.fails("", "a", TooManyArguments, lambda ex: ex.values == ["a"])
		self.fails("", ":a a", UnknownArgument, lambda ex: ex.names == ["a"])
		self.match("x?", "", "x=")
		self.match("x*", "", "x=")
		self.fails("x", "", MissingArgument, lambda ex: ex.names == ["x"])
		self.fails("x+", "", MissingArgument, lambda ex: ex.names == ["x"])
		self.fails("x y", "", MissingArgument, lambda ex: ex.names == ["x", "y"])

	def test_duplicates(self):
		self.fails("x y", "a :x b", DuplicateArgument, lambda ex: ex.name == "x")
		self.fails("x y", ":x a b c", TooManyArguments, lambda ex: ex.values == ["c"])
		self.match("x y*", "a :y b :y c", "x=a y=b,c")

	def test_all_required(self):
		sig = "x y z w"
		everything = "x=x y=y z=z w=w"
		self.match(sig, "x y z w", everything)
		self.match(sig, ":x x :y y :z z :w w", everything)
		self.match(sig, ":y y :x x :z z :w w", everything)
		self.match(sig, ":x x y z w", everything)
		self.match(sig, ":x x y :w w :z z", everything)
		for call in [":y y x z w", "x :z z y w", "x y :w w z", ":x x y :w w z"]:
			self.fails(sig, call, PositionalArgumentAfterOutOfOrderNamedArgument)
		self.fails(sig, "x y z w extra", TooManyArguments, lambda ex: ex.values == ["extra"])
		self.fails(sig, "x y z", MissingArgument, lambda ex: ex.names == ["w"])
		self.fails(sig, ":x x :y y z", MissingArgument, lambda ex: ex.names == ["w"])
		self.fails(sig, "x y z w :x extra", DuplicateArgument, lambda ex: ex.name == "x")
		self.fails(sig, "x y z :unknown u", UnknownArgument, lambda ex: ex.names == ["unknown"])
		self.fails(sig, "x y z :w", NamedArgumentRequiresValue, lambda ex: ex.names == ["w"])

	def test_required_then_star(self):
		self.match("x y z*", "x y", "x=x y=y z=")
		self.match("x y z*", "x y z", "x=x y=y z=z")
		self.match("x y z*", "x y z1 z2 z3", "x=x y=y z=z1,z2,z3")
		self.fails("x y z*", "x", MissingArgument, lambda ex: ex.names == ["y"])

	def test_required_then_plus(self):
		sig = "x y z+"
		self.match(sig, "x y z1", "x=x y=y z=z1")
		self.match(sig, "x y z1 z2 z3", "x=x y=y z=z1,z2,z3")
		self.match(sig, ":y y :x x :z z1 z2", "x=x y=y z=z1,z2")
		self.fails(sig, "x y", MissingArgument, lambda ex: ex.names == ["z"])
		self.fails(sig, ":x x :y y", MissingArgument, lambda ex: ex.names == ["z"])
		self.fails(sig, ":x x :y y :z", NamedArgumentRequiresValue, lambda ex: ex.names == ["z"])

	def test_required_then_optional(self):
		sig = "x y z?"
		self.match(sig, "x y", "x=x y=y z=")
		self.match(sig, "x y z1", "x=x y=y z=z1")
		self.match(sig, ":x x :y y", "x=x y=y z=")
		self.match(sig, ":y y :x x :z z1", "x=x y=y z=z1")
		self.match(sig, ":z z1 :y y :x x", "x=x y=y z=z1")
		self.fails(sig, "x y z1 z2", TooManyArguments)
		self.fails(sig, "x y :z z1 :z z2", DuplicateArgument, lambda ex: ex.name == "z")

	def test_regression_optional_parameters_by_name(self):
		self.match(
			"from preceded-by? not-preceded-by? to probability min-alcohol?",
			":from x :to y :probability 6 :min-alcohol 80",
			"from=x preceded-by= not-preceded-by= to=y probability=6 min-alcohol=80",
		)

class VariadicMiddles(MatcherTestCase):

	def test_required_star_required(self):
		sig = "x y* z"
		self.match(sig, "x z", "x=x y= z=z")
		self.match(sig, "x y1 z", "x=x y=y1 z=z")
		self.match(sig, "x y1 y2 y3 z", "x=x y=y1,y2,y3 z=z")
		self.match(sig, ":x x :z z", "x=x y= z=z")
		self.match(sig, "x :z z", "x=x y= z=z")
		self.match(sig, "x :y y1 :z z", "x=x y=y1 z=z")
		self.match(sig, ":x x :y y :z z", "x=x y=y z=z")
		self.match(sig, ":y y :x x :z z", "x=x y=y z=z")
		self.match(sig, ":x x :y y1 y2 y3 :z z", "x=x y=y1,y2,y3 z=z")
		self.match(sig, ":x x :y y1 :y y2 :z z", "x=x y=y1,y2 z=z")
		self.match(sig, ":x x :z z :y y1 y2 y3", "x=x y=y1,y2,y3 z=z")
		self.match(sig, "x y1 :z z", "x=x y=y1 z=z")
		self.fails(sig, ":y a", MissingArgument, lambda ex: ex.names == ["x", "z"])
		self.fails(sig, ":x a :y b", MissingArgument, lambda ex: ex.names == ["z"])
		self.fails(sig, ":y b :z c", MissingArgument, lambda ex: ex.names == ["x"])

	def test_required_star_star(self):
		sig = "x y* z*"
		self.match(sig, "x", "x=x y= z=")
		for call in ["x a", "x a b", "x a b c", "x y1 :z z1"]:
			self.fails(sig, call, AmbiguousPositionalArgument)
		self.match(sig, ":x x", "x=x y= z=")
		self.match(sig, "x :y y1", "x=x y=y1 z=")
		self.match(sig, "x :z z1", "x=x y= z=z1")
		self.match(sig, "x :y y1 :z z1", "x=x y=y1 z=z1")
		self.match(sig, "x :y y1 y2 :z z1 z2 z3", "x=x y=y1,y2 z=z1,z2,z3")
		self.match(sig, "x :y y1 :y y2 :y y3 :z z1 z2 z3", "x=x y=y1,y2,y3 z=z1,z2,z3")
		self.match(sig, "x :y y1 :y y2 :z z1 :z z2 :z z3", "x=x y=y1,y2 z=z1,z2,z3")
		self.match(sig, "x :y y1 y2", "x=x y=y1,y2 z=")

	def test_required_star_star_required_required(self):
		sig = "x y* z* w a"
		self.fails(sig, "x y1 z1 w a", AmbiguousPositionalArgument)
		self.match(sig, "x :y y1 :z z1 :w w :a a", "x=x y=y1 z=z1 w=w a=a")
		self.match(sig, "x :w w :a a", "x=x y= z= w=w a=a")
		self.match(sig, "x :y y1 y2 :w w :a a", "x=x y=y1,y2 z= w=w a=a")
		self.match(sig, "x :z z1 z2 :w w :a a", "x=x y= z=z1,z2 w=w a=a")
		self.fails(sig, "a :y b :z c d e", MissingArgument)
		self.fails(sig, "a :y b c d", MissingArgument)

	def test_required_optional_required(self):
		sig = "x y? z"
		self.match(sig, "x z", "x=x y= z=z")
		self.match(sig, "x y z", "x=x y=y z=z")
		self.match(sig, "x :z z", "x=x y= z=z")
		self.match(sig, "x :y y :z z", "x=x y=y z=z")
		for call in [":z z x", ":z z x y", ":y y :z z x"]:
			self.fails(sig, call, PositionalArgumentAfterOutOfOrderNamedArgument)
		self.fails(sig, "x :z z y", TooManyArguments)
		self.fails(sig, "x y z extra", TooManyArguments)
		self.fails(sig, "x", MissingArgument, lambda ex: ex.names == ["z"])
		self.fails(sig, ":y y", MissingArgument, lambda ex: ex.names == ["x", "z"])

	def test_required_optional_star_required(self):
		sig = "x y? z* w"
		self.match(sig, "a b", "x=a y= z= w=b")
		self.fails(sig, "a b c", AmbiguousPositionalArgument)
		self.match(sig, ":w a :x b", "x=b y= z= w=a")
		self.fails(sig, ":w a b", PositionalArgumentAfterOutOfOrderNamedArgument)
		self.match(sig, "a :w b", "x=a y= z= w=b")
		self.fails(sig, ":w a b c", PositionalArgumentAfterOutOfOrderNamedArgument)

	def test_required_plus_optional_required(self):
		sig = "x y+ z? w"
		self.fails(sig, "", MissingArgument)
		self.match(sig, "a b c", "x=a y=b z= w=c")
		self.fails(sig, "a b c d", AmbiguousPositionalArgument)
		self.fails(sig, "a b c d e", AmbiguousPositionalArgument)
		self.match(sig, ":x a :y b :w d", "x=a y=b z= w=d")
		self.match(sig, ":x a :y b :z c :w d", "x=a y=b z=c w=d")
		self.fails(sig, ":x a :y b", MissingArgument, lambda ex: ex.names == ["w"])
		self.fails(sig, ":x a :w d", MissingArgument, lambda ex: ex.names == ["y"])

class LeadingVariadics(MatcherTestCase):

	def test_optional_star(self):
		sig = "x? y*"
		self.match(sig, "", "x= y=")
		for call in ["a", "a b", "a b c"]:
			self.fails(sig, call, AmbiguousPositionalArgument)
		self.match(sig, ":x vx", "x=vx y=")
		self.match(sig, ":y vy1", "x= y=vy1")
		self.match(sig, ":y y1 y2", "x= y=y1,y2")
		self.match(sig, ":x vx :y vy1 vy2", "x=vx y=vy1,vy2")
		self.match(sig, ":y vy1 vy2 :x vx", "x=vx y=vy1,vy2")

	def test_plus_required(self):
		sig = "x+ y"
		self.match(sig, "a b", "x=a y=b")
		self.match(sig, "a b c", "x=a,b y=c")
		self.match(sig, ":y a :x b c", "x=b,c y=a")
		self.match(sig, ":x a b :y c", "x=a,b y=c")
		self.fails(sig, "a", MuError)
		self.fails(sig, ":y a", MissingArgument, lambda ex: ex.names == ["x"])
		self.fails(sig, ":x a", MissingArgument, lambda ex: ex.names == ["y"])
		self.fails(sig, ":y a :x", NamedArgumentRequiresValue, lambda ex: ex.names == ["x"])
		self.fails(sig, ":x :y a", NamedArgumentRequiresValue, lambda ex: ex.names == ["x"])

	def test_plus_star(self):
		sig = "a+ b*"
		self.match(sig, "x", "a=x b=")
		self.fails(sig, "x y", AmbiguousPositionalArgument)
		self.fails(sig, "x y z w", AmbiguousPositionalArgument)
		self.match(sig, ":a x :b y", "a=x b=y")
		self.match(sig, ":b x y :a z w", "a=z,w b=x,y")
		self.fails(sig, "", MissingArgument, lambda ex: ex.names == ["a"])

	def test_plus_optional(self):
		sig = "a+ b?"
		self.match(sig, "x", "a=x b=")
		self.fails(sig, "x y", AmbiguousPositionalArgument)
		self.fails(sig, "x y z", AmbiguousPositionalArgument)
		self.match(sig, ":a x :b y", "a=x b=y")
		self.match(sig, ":b x :a y z", "a=y,z b=x")
		self.fails(sig, "", MissingArgument, lambda ex: ex.names == ["a"])

	def test_plus_plus(self):
		sig = "x+ y+"
		self.fails(sig, "", MissingArgument, lambda ex: ex.names == ["x", "y"])
		self.fails(sig, "a", MissingArgument)
		self.match(sig, "a b", "x=a y=b")
		self.fails(sig, "a b c", AmbiguousPositionalArgument)
		self.match(sig, ":x a :y b", "x=a y=b")
		self.match(sig, ":x a b :y c d", "x=a,b y=c,d")
		self.match(sig, ":y c d :x a b", "x=a,b y=c,d")
		self.fails(sig, ":x a", MissingArgument, lambda ex: ex.names == ["y"])
		self.fails(sig, ":y b", MissingArgument, lambda ex: ex.names == ["x"])

	def test_star_plus(self):
		sig = "x* y+"
		self.fails(sig, "", MissingArgument, lambda ex: ex.names == ["y"])
		self.match(sig, "a", "x= y=a")
		self.fails(sig, "a b", AmbiguousPositionalArgument)
		self.match(sig, ":y a", "x= y=a")
		self.match(sig, ":x a :y b", "x=a y=b")
		self.match(sig, ":x a b :y c d", "x=a,b y=c,d")
		self.fails(sig, ":x a", MissingArgument, lambda ex: ex.names == ["y"])

	def test_plus_star_plus(self):
		sig = "x+ y* z+"
		self.fails(sig, "", MissingArgument)
		self.fails(sig, "a", MissingArgument)
		self.match(sig, "a b", "x=a y= z=b")
		self.fails(sig, "a b c", AmbiguousPositionalArgument)
		self.fails(sig, "a b c d", AmbiguousPositionalArgument)
		self.match(sig, ":x a :z b", "x=a y= z=b")
		self.match(sig, ":x a :y b :z c", "x=a y=b z=c")
		self.match(sig, ":x a d :y b e :z c f", "x=a,d y=b,e z=c,f")

	def test_plus_optional_required(self):
		sig = "x+ y? z"
		self.fails(sig, "", MissingArgument)
		self.match(sig, "a b", "x=a y= z=b")
		self.fails(sig, "a b c", AmbiguousPositionalArgument)
		self.fails(sig, "a b c d", AmbiguousPositionalArgument)
		self.match(sig, ":x a :z c", "x=a y= z=c")
		self.match(sig, ":x a :y b :z c", "x=a y=b z=c")
		self.fails(sig, ":x a", MissingArgument, lambda ex: ex.names == ["z"])
		self.fails(sig, ":z c", MissingArgument, lambda ex: ex.names == ["x"])
		self.fails(sig, ":y a", MissingArgument, lambda ex: ex.names == ["x", "z"])

	def test_optional_plus_required(self):
		sig = "x? y+ z"
		self.fails(sig, "", MissingArgument)
		self.match(sig, "a b", "x= y=a z=b")
		self.fails(sig, "a b c", AmbiguousPositionalArgument)
		self.fails(sig, "a b c d", AmbiguousPositionalArgument)
		self.match(sig, ":y b :z c", "x= y=b z=c")
		self.match(sig, ":x a :y b :z c", "x=a y=b z=c")
		self.fails(sig, ":y b", MissingArgument, lambda ex: ex.names == ["z"])
		self.fails(sig, ":x a :z c", MissingArgument, lambda ex: ex.names == ["y"])

	def test_optional_required(self):
		self.match("x? y", "b", "x= y=b")
		self.match("x? y", "a b", "x=a y=b")
		self.match("x? y", ":y b", "x= y=b")
		self.match("x? y", ":x a :y b", "x=a y=b")
		self.fails("x? y", ":x a", MissingArgument, lambda ex: ex.names == ["y"])

	def test_star_optional(self):
		self.match("x* y?", "", "x= y=")
		self.fails("x* y?", "a", AmbiguousPositionalArgument)
		self.fails("x* y?", "a b", AmbiguousPositionalArgument)
		self.match("x* y?", ":x a", "x=a y=")
		self.match("x* y?", ":y b", "x= y=b")
		self.match("x* y?", ":x a b :y c", "x=a,b y=c")

	def test_star_required_star(self):
		sig = "x* y z*"
		self.fails(sig, "", MissingArgument)
		self.match(sig, "a", "x= y=a z=")
		for call in ["a b", "a b c", "a b c d"]:
			self.fails(sig, call, AmbiguousPositionalArgument)
		self.match(sig, ":y b :z c", "x= y=b z=c")
		self.match(sig, ":x a :y b :z c", "x=a y=b z=c")
		self.match(sig, ":y b", "x= y=b z=")
		self.fails(sig, ":x a :z c", MissingArgument, lambda ex: ex.names == ["y"])

	def test_star_required_required_star(self):
		sig = "x* y z w*"
		self.fails(sig, "", MissingArgument)
		self.fails(sig, "a", MissingArgument)
		self.match(sig, "a b", "x= y=a z=b w=")
		self.fails(sig, "a b c", AmbiguousPositionalArgument)
		self.fails(sig, "a b c d", AmbiguousPositionalArgument)

class ErrorMessages(unittest.TestCase):

	def test_messages_carry_the_particulars(self):
		with self.assertRaises(MissingArgument) as cm:
			match_args(params("x y"), [])
		self.assertIn("x, y", str(cm.exception))
		with self.assertRaises(DuplicateArgument) as cm:
			match_args(params("x"), actuals("a :x b"))
		self.assertIn("'x'", str(cm.exception))

	def test_values_pass_through_untouched(self):
		things = [object(), object(), object()]
		result = match_args(params("first rest*"), things)
		self.assertIs(things[0], result["first"][0])
		self.assertEqual(things[1:], result["rest"])

if __name__ == '__main__':
	unittest.main()

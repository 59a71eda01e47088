"""
Where things go when they go wrong, or when somebody asked to watch.

Mu has no log files. A Report carries the verbosity flag around,
and anything worth tracing gets printed to standard error only when asked.
Errors are ordinary exceptions, all descended from MuError,
so that a host can catch everything Mu-related in one place.
"""
import sys

class MuError(Exception):
	""" Root of everything the Mu core raises on purpose. """

class Report:
	""" The verbosity knob, plus a place to remember what was said. """
	def __init__(self, *, verbose=0, indent="  "):
		self._verbose = verbose or 0   # Because None is incomparable.
		self._indent = indent
		self._depth = 0
	
	@property
	def verbose(self) -> int: return self._verbose
	
	def info(self, *args):
		if self._verbose:
			print(self._indent * self._depth + " ".join(map(str, args)), file=sys.stderr)
	
	def nest(self):
		self._depth += 1
	
	def unnest(self):
		self._depth = max(0, self._depth - 1)

QUIET = Report(verbose=0)

#!/usr/bin/env python3

from vidspeclib.core import utils

#============================================

class InputRegistry():
	"""
	Ordered list of media inputs addressed by position.

	The compiler registers a file at the moment it emits the statement that
	reads it, so the index in the statement and the position in the input
	list cannot drift apart.
	"""
	def __init__(self, base_path: str):
		self.base_path = base_path
		self._paths = []

	#============================
	def register(self, src: str) -> int:
		if not src:
			raise utils.StructuralError("media reference requires a source path")
		self._paths.append(utils.resolve_path(src, self.base_path))
		return len(self._paths) - 1

	#============================
	def paths(self) -> tuple:
		return tuple(self._paths)

	#============================
	def __len__(self) -> int:
		return len(self._paths)

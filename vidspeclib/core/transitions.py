#!/usr/bin/env python3

from decimal import Decimal
from vidspeclib.core import labels
from vidspeclib.core import model
from vidspeclib.core import utils

#============================================

XFADE_TRANSITIONS = {
	'none': 'fade',
	'crossfade': 'fade',
	'wipe-left': 'wipeleft',
	'wipe-right': 'wiperight',
	'wipe-up': 'wipeup',
	'wipe-down': 'wipedown',
	'fade-black': 'fadeblack',
}
DEFAULT_XFADE = 'fade'

#============================================

def map_transition_type(transition_type: str) -> str:
	"""
	Map a spec transition name to an xfade transition, falling back to fade.
	"""
	return XFADE_TRANSITIONS.get(transition_type, DEFAULT_XFADE)

#============================================

class TransitionCompiler():
	def __init__(self, scenes: tuple):
		self.scenes = scenes

	#============================
	def chain(self, scene_pads: list) -> tuple:
		"""
		Join scene output pads with xfade statements.

		Args:
			scene_pads: one output pad per scene, in scene order.

		Returns:
			(nodes, video_pad)
		"""
		if len(scene_pads) != len(self.scenes):
			raise utils.StructuralError("scene pad count does not match scene count")
		if len(scene_pads) == 0:
			raise utils.StructuralError("at least one scene is required")
		if len(scene_pads) == 1:
			return ([], scene_pads[0])
		nodes = []
		chain_pad = scene_pads[0]
		running_offset = utils.to_decimal(self.scenes[0].duration)
		for index in range(1, len(scene_pads)):
			transition = self.scenes[index - 1].transition
			transition_duration = utils.to_decimal(transition.duration)
			offset = max(Decimal(0), running_offset - transition_duration)
			out_pad = labels.transition(index)
			xfade = utils.format_filter('xfade',
				('transition', map_transition_type(transition.type)),
				('duration', transition_duration),
				('offset', offset))
			nodes.append(model.FilterNode((chain_pad, scene_pads[index]),
				(xfade,), out_pad))
			chain_pad = out_pad
			running_offset += utils.to_decimal(self.scenes[index].duration)
			running_offset -= transition_duration
		return (nodes, chain_pad)

#!/usr/bin/env python3

from vidspeclib.core import labels
from vidspeclib.core import model
from vidspeclib.core import utils

#============================================

FADE_OUT_ANCHORS = ('start', 'end')
SILENCE_SECONDS = 1

#============================================

def track_trim_window(track: model.AudioTrack) -> tuple:
	"""
	Return (start, end) of the source window; end is None when open.
	"""
	trim_start = utils.to_decimal(track.trim.start)
	trim_end = None
	if track.trim.end is not None:
		trim_end = utils.to_decimal(track.trim.end)
	elif track.duration is not None:
		trim_end = trim_start + utils.to_decimal(track.duration)
	return (trim_start, trim_end)

#============================================

class AudioMixer():
	def __init__(self, registry, sample_rate: int = 44100,
		fade_out_anchor: str = 'start'):
		if fade_out_anchor not in FADE_OUT_ANCHORS:
			raise RuntimeError("fade_out_anchor must be start or end")
		self.registry = registry
		self.sample_rate = sample_rate
		self.fade_out_anchor = fade_out_anchor

	#============================
	def compile_track(self, track: model.AudioTrack,
		track_index: int) -> model.FilterNode:
		input_index = self.registry.register(track.src)
		(trim_start, trim_end) = track_trim_window(track)
		filters = []
		if trim_start > 0 or trim_end is not None:
			options = [('start', trim_start)]
			if trim_end is not None:
				options.append(('end', trim_end))
			filters.append(utils.format_filter('atrim', *options))
			filters.append('asetpts=PTS-STARTPTS')
		volume = utils.to_decimal(track.volume)
		if volume != 1:
			filters.append(utils.format_filter('volume', volume))
		fade_in = utils.to_decimal(track.fade_in)
		if fade_in > 0:
			filters.append(utils.format_filter('afade', ('t', 'in'), ('d', fade_in)))
		fade_out = utils.to_decimal(track.fade_out)
		if fade_out > 0:
			fade_start = self._fade_out_start(fade_out, trim_start, trim_end)
			filters.append(utils.format_filter('afade', ('t', 'out'),
				('d', fade_out), ('st', fade_start)))
		start = utils.to_decimal(track.start)
		if start > 0:
			delay_ms = utils.milliseconds_from_seconds(start)
			filters.append(utils.format_filter('adelay', ('delays', delay_ms),
				('all', 1)))
		if len(filters) == 0:
			filters.append('anull')
		return model.FilterNode((labels.input_audio(input_index),),
			tuple(filters), labels.audio_track(track_index))

	#============================
	def _fade_out_start(self, fade_out, trim_start, trim_end):
		if self.fade_out_anchor == 'start' or trim_end is None:
			return 0
		length = trim_end - trim_start
		return max(0, length - fade_out)

	#============================
	def mix(self, tracks: tuple) -> tuple:
		"""
		Compile every track and mix them down to one pad.

		Returns:
			(nodes, audio_pad)
		"""
		nodes = []
		for track_index, track in enumerate(tracks):
			nodes.append(self.compile_track(track, track_index))
		if len(nodes) == 0:
			silence = [
				utils.format_filter('anullsrc', ('r', self.sample_rate),
					('cl', 'stereo')),
				utils.format_filter('atrim', ('duration', SILENCE_SECONDS)),
			]
			nodes.append(model.FilterNode((), tuple(silence), labels.audio_silence()))
			return (nodes, labels.audio_silence())
		if len(nodes) == 1:
			return (nodes, nodes[0].output)
		track_pads = tuple(node.output for node in nodes)
		amix = utils.format_filter('amix', ('inputs', len(track_pads)),
			('dropout_transition', 0))
		nodes.append(model.FilterNode(track_pads, (amix,), labels.audio_mix()))
		return (nodes, labels.audio_mix())

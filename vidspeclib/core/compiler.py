#!/usr/bin/env python3

"""
Spec-to-filtergraph compiler.

A single walk over the specification registers every media input and emits
the statements that read it, then joins the scenes with transitions and
mixes the audio tracks.
"""

from vidspeclib.core import model
from vidspeclib.core import utils
from vidspeclib.core.audio import AudioMixer
from vidspeclib.core.registry import InputRegistry
from vidspeclib.core.scene import SceneCompiler
from vidspeclib.core.transitions import TransitionCompiler

#============================================

class GraphCompiler():
	def __init__(self, fade_out_anchor: str = 'start'):
		self.fade_out_anchor = fade_out_anchor

	#============================
	def compile(self, spec: model.Specification,
		base_path: str = '.') -> model.CompiledGraph:
		if spec is None or len(spec.scenes) == 0:
			raise utils.StructuralError("at least one scene is required")
		registry = InputRegistry(base_path)
		scene_compiler = SceneCompiler(spec.output, registry, base_path)
		nodes = []
		scene_pads = []
		for scene_index, scene in enumerate(spec.scenes):
			(scene_nodes, scene_pad) = scene_compiler.compile_scene(scene, scene_index)
			nodes.extend(scene_nodes)
			scene_pads.append(scene_pad)
		(transition_nodes, video_pad) = TransitionCompiler(spec.scenes).chain(scene_pads)
		nodes.extend(transition_nodes)
		mixer = AudioMixer(registry, sample_rate=spec.output.sample_rate,
			fade_out_anchor=self.fade_out_anchor)
		(audio_nodes, audio_pad) = mixer.mix(spec.audio.tracks)
		nodes.extend(audio_nodes)
		return model.CompiledGraph(
			inputs=registry.paths(),
			nodes=tuple(nodes),
			video_pad=video_pad,
			audio_pad=audio_pad,
		)

#============================================

def compile_spec(spec: model.Specification, base_path: str = '.',
	fade_out_anchor: str = 'start') -> model.CompiledGraph:
	compiler = GraphCompiler(fade_out_anchor=fade_out_anchor)
	return compiler.compile(spec, base_path)

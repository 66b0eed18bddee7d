#!/usr/bin/env python3

"""
Tests for reading spec files into the data model.
"""

# Standard Library
import json
import os
import sys
import tempfile
import unittest
from fractions import Fraction

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

# tests helpers
TESTS_DIR = os.path.abspath(os.path.dirname(__file__))
if TESTS_DIR not in sys.path:
	sys.path.insert(0, TESTS_DIR)
from spec_utils import write_text_file

# local repo modules
from vidspeclib.core import model
from vidspeclib.core import utils
from vidspeclib.core.loader import SpecLoader

#============================================

def _write_spec_yaml(path: str) -> None:
	"""Write a two-scene yaml spec with audio.

	Args:
		path: YAML output path.
	"""
	lines = []
	lines.append("version: \"1.0\"")
	lines.append("title: Demo")
	lines.append("output: {width: 1280, height: 720, fps: 25, format: webm,")
	lines.append("  codec: libvpx-vp9, crf: 30}")
	lines.append("")
	lines.append("scenes:")
	lines.append("  - id: intro")
	lines.append("    duration: 5")
	lines.append("    background: {type: color, value: \"#1a1a2e\"}")
	lines.append("    layers:")
	lines.append("      - type: text")
	lines.append("        content: Hello")
	lines.append("        duration: 5")
	lines.append("        style: {size: 64, outlineColor: \"#222222\"}")
	lines.append("        position: {x: center, y: 100}")
	lines.append("      - type: shape")
	lines.append("        shape: rect")
	lines.append("        size: {width: 400, height: auto}")
	lines.append("    transition: {type: crossfade, duration: 0.5}")
	lines.append("  - id: outro")
	lines.append("    duration: 4")
	lines.append("    background: {type: image, src: images/end.png}")
	lines.append("")
	lines.append("audio:")
	lines.append("  tracks:")
	lines.append("    - {type: bgm, src: music.mp3, volume: 0.6, fadeIn: 1,")
	lines.append("       trim: {from: 2, to: 20}}")
	lines.append("")
	lines.append("subtitles:")
	lines.append("  - {start: 0, end: 2, text: Hi}")
	lines.append("")
	lines.append("thumbnail:")
	lines.append("  source: {type: scene, sceneId: outro, timestamp: 1}")
	with open(path, "w") as yaml_file:
		yaml_file.write("\n".join(lines))
		yaml_file.write("\n")

#============================================

class SpecLoaderTest(unittest.TestCase):
	#============================================
	def setUp(self) -> None:
		utils.set_quiet_mode(True)

	#============================================
	def tearDown(self) -> None:
		utils.set_quiet_mode(False)

	#============================================
	def test_load_yaml_spec(self) -> None:
		"""Ensure a yaml spec loads with defaults applied."""
		with tempfile.TemporaryDirectory() as temp_dir:
			yaml_path = os.path.join(temp_dir, "spec.yaml")
			_write_spec_yaml(yaml_path)
			spec = SpecLoader(yaml_path).load()
		self.assertEqual(spec.title, "Demo")
		self.assertEqual(spec.output.width, 1280)
		self.assertEqual(spec.output.codec, 'libvpx-vp9')
		self.assertEqual(spec.output.preset, 'medium')
		self.assertEqual(len(spec.scenes), 2)
		intro = spec.scenes[0]
		self.assertEqual(intro.background, model.ColorBackground('#1a1a2e'))
		text = intro.layers[0]
		self.assertIsInstance(text, model.TextLayer)
		self.assertEqual(text.style.size, 64)
		self.assertEqual(text.style.outline_color, '#222222')
		self.assertEqual(text.style.color, '#FFFFFF')
		self.assertEqual(text.position, model.Position('center', 100))
		shape = intro.layers[1]
		self.assertEqual(shape.size, model.Size(400, 'auto'))
		self.assertEqual(shape.opacity, 0.5)
		self.assertEqual(intro.transition, model.Transition('crossfade', 0.5))
		outro = spec.scenes[1]
		self.assertEqual(outro.background, model.ImageBackground('images/end.png'))
		self.assertEqual(outro.transition, model.Transition())
		track = spec.audio.tracks[0]
		self.assertEqual(track.fade_in, 1)
		self.assertEqual(track.trim, model.Trim(2, 20))
		self.assertEqual(spec.subtitles[0].style.position, 'bottom')
		self.assertEqual(spec.thumbnail.source,
			model.SceneFrameSource('outro', 1))
		self.assertEqual(str(spec.total_duration), '9')

	#============================================
	def test_load_json_spec(self) -> None:
		"""Ensure json specs load through the same path."""
		data = {
			'scenes': [{
				'id': 'only',
				'duration': 2.5,
				'background': {'type': 'gradient', 'colors': ['#000000', 'white']},
				'layers': [{'type': 'video', 'src': 'clip.mp4',
					'trim': {'from': 1}, 'size': {'width': 640, 'height': 360}}],
			}],
			'thumbnail': {'enabled': False},
		}
		with tempfile.TemporaryDirectory() as temp_dir:
			json_path = os.path.join(temp_dir, "spec.json")
			write_text_file(json_path, json.dumps(data))
			spec = SpecLoader(json_path).load()
		scene = spec.scenes[0]
		self.assertEqual(scene.background.colors, ('#000000', 'white'))
		self.assertEqual(scene.background.direction, 'vertical')
		self.assertEqual(scene.layers[0].trim, model.Trim(1, None))
		self.assertTrue(scene.layers[0].mute)
		self.assertFalse(spec.thumbnail.enabled)
		self.assertEqual(spec.audio.tracks, ())

	#============================================
	def test_invalid_specs_raise(self) -> None:
		"""Ensure range and shape violations are rejected."""
		base_scene = {'id': 'a', 'duration': 1}
		bad_specs = [
			{'scenes': []},
			{'scenes': [{'id': 'a', 'duration': 0}]},
			{'scenes': [base_scene, {'id': 'a', 'duration': 2}]},
			{'scenes': [dict(base_scene, background={'type': 'color',
				'value': 'not-a-color'})]},
			{'scenes': [dict(base_scene, layers=[{'type': 'sticker'}])]},
			{'scenes': [dict(base_scene, layers=[{'type': 'shape',
				'shape': 'rect'}])]},
			{'scenes': [dict(base_scene, transition={'type': 'spin'})]},
			{'scenes': [base_scene], 'output': {'crf': 60}},
			{'scenes': [base_scene], 'audio': {'tracks': [{'type': 'bgm',
				'src': 'a.mp3', 'volume': 3}]}},
			{'scenes': [base_scene], 'subtitles': [{'start': 3, 'end': 2,
				'text': 'x'}]},
		]
		loader = SpecLoader()
		for data in bad_specs:
			with self.assertRaises(RuntimeError):
				loader.parse(data)

	#============================================
	def test_non_mapping_file_raises(self) -> None:
		"""Ensure a top-level list is rejected."""
		with tempfile.TemporaryDirectory() as temp_dir:
			yaml_path = os.path.join(temp_dir, "spec.yaml")
			write_text_file(yaml_path, "- 1\n- 2\n")
			with self.assertRaises(RuntimeError):
				SpecLoader(yaml_path).load()

	#============================================
	def test_fraction_frame_rate(self) -> None:
		"""Ensure fraction strings load as exact rates and numbers stay numbers."""
		loader = SpecLoader()
		scenes = [{'id': 'a', 'duration': 2}]
		spec = loader.parse({'scenes': scenes, 'output': {'fps': '30000/1001'}})
		self.assertEqual(spec.output.fps, Fraction(30000, 1001))
		self.assertEqual(utils.format_value(spec.output.fps), '30000/1001')
		spec = loader.parse({'scenes': scenes, 'output': {'fps': '24'}})
		self.assertEqual(utils.format_value(spec.output.fps), '24')
		spec = loader.parse({'scenes': scenes, 'output': {'fps': 25}})
		self.assertEqual(spec.output.fps, 25)
		for value in ('30/0', 'fast', '-30/1', True):
			with self.assertRaises(RuntimeError):
				loader.parse({'scenes': scenes, 'output': {'fps': value}})

	#============================================
	def test_colors_limited_to_filter_syntax(self) -> None:
		"""Ensure only names and full hex colors reach the filtergraph."""
		loader = SpecLoader()
		for value in ('red', 'DarkSlateGray', '#1a1a2e', '#1A1A2E80',
			'0xff8800', '0xff8800cc'):
			spec = loader.parse({'scenes': [{'id': 'a', 'duration': 2,
				'background': {'type': 'color', 'value': value}}]})
			self.assertEqual(spec.scenes[0].background.value, value)
		for value in ('rgb(255,0,0)', 'hsl(0,100%,50%)', '#abc', '#abcd',
			'0xabc', 'ff8800', 'not-a-color'):
			with self.assertRaises(RuntimeError):
				loader.parse({'scenes': [{'id': 'a', 'duration': 2,
					'background': {'type': 'color', 'value': value}}]})
		layer = {'type': 'shape', 'shape': 'rect', 'size': {'width': 10,
			'height': 10}, 'color': 'rgb(0,0,0)'}
		with self.assertRaises(RuntimeError):
			loader.parse({'scenes': [{'id': 'a', 'duration': 2,
				'layers': [layer]}]})
		gradient = {'type': 'gradient', 'colors': ['#000000', '#fff']}
		with self.assertRaises(RuntimeError):
			loader.parse({'scenes': [{'id': 'a', 'duration': 2,
				'background': gradient}]})

#============================================

def main() -> None:
	"""Run the unit tests."""
	unittest.main()

#============================================

if __name__ == "__main__":
	main()

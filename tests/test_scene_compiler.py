#!/usr/bin/env python3

"""
Pytest coverage for scene backgrounds, layer chains, and positions.
"""

# Standard Library
import os
import sys

# PIP3 modules
import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

# tests helpers
TESTS_DIR = os.path.abspath(os.path.dirname(__file__))
if TESTS_DIR not in sys.path:
	sys.path.insert(0, TESTS_DIR)
from spec_utils import make_scene

# local repo modules
from vidspeclib.core import model
from vidspeclib.core import scene as scene_module
from vidspeclib.core import utils
from vidspeclib.core.registry import InputRegistry
from vidspeclib.core.scene import SceneCompiler

#============================================

def _compile(scene: model.Scene, scene_index: int = 0,
	output: model.OutputConfig = None) -> tuple:
	"""
	Compile one scene and return (nodes, pad, registry).
	"""
	if output is None:
		output = model.OutputConfig(width=1280, height=720, fps=25)
	registry = InputRegistry('/job')
	compiler = SceneCompiler(output, registry, '/job')
	(nodes, pad) = compiler.compile_scene(scene, scene_index)
	return (nodes, pad, registry)

#============================================

@pytest.mark.parametrize("value, expected", [
	(12, '12'),
	(7.5, '7.5'),
	('center', '(W-overlay_w)/2'),
	('left', '0'),
	('top', '0'),
	('right', 'W-overlay_w'),
])
def test_resolve_axis_x(value, expected) -> None:
	"""
	Ensure numbers pass through and keywords resolve against the canvas.
	"""
	assert scene_module.resolve_axis(value, 'W', 'overlay_w') == expected

#============================================

def test_resolve_position_center_and_edges() -> None:
	"""
	Ensure center, right, and bottom resolve on both axes.
	"""
	center = scene_module.resolve_position(model.Position('center', 'center'))
	assert center == ('(W-overlay_w)/2', '(H-overlay_h)/2')
	corner = scene_module.resolve_position(model.Position('right', 'bottom'))
	assert corner == ('W-overlay_w', 'H-overlay_h')
	origin = scene_module.resolve_position(model.Position('left', 'top'))
	assert origin == ('0', '0')

#============================================

def test_visibility_window_bounded() -> None:
	"""
	Ensure start=2 duration=3 is visible for t in [2, 5).
	"""
	assert scene_module.visibility_window(2, 3) == "'gte(t,2)*lt(t,5)'"

#============================================

def test_visibility_window_unbounded() -> None:
	"""
	Ensure layers without a duration from t=0 carry no predicate.
	"""
	assert scene_module.visibility_window(0, None) is None
	assert scene_module.visibility_window(1.5, None) == "'gte(t,1.5)'"

#============================================

def test_color_background() -> None:
	"""
	Ensure color backgrounds become a sized, timed color source.
	"""
	scene = make_scene("s", 4, background=model.ColorBackground('#ff0000'))
	(nodes, pad, registry) = _compile(scene, 2)
	assert pad == 'scene2_bg'
	assert len(registry) == 0
	assert nodes[0].render() == (
		'color=c=#ff0000:s=1280x720:d=4:r=25,format=yuva420p[scene2_bg]')

#============================================

def test_gradient_background_uses_first_stop() -> None:
	"""
	Ensure gradients degrade to a color source with the first color.
	"""
	background = model.GradientBackground(('#112233', '#445566'))
	(nodes, pad, registry) = _compile(make_scene("g", 2, background=background))
	assert nodes[0].filters[0] == 'color=c=#112233:s=1280x720:d=2:r=25'
	assert len(registry) == 0

#============================================

def test_empty_gradient_raises() -> None:
	"""
	Ensure a gradient with no stops is a structural error.
	"""
	background = model.GradientBackground(())
	with pytest.raises(utils.StructuralError):
		_compile(make_scene("g", 2, background=background))

#============================================

def test_image_background_letterbox() -> None:
	"""
	Ensure still images loop, letterbox, and trim to the scene duration.
	"""
	background = model.ImageBackground('still.png')
	(nodes, pad, registry) = _compile(make_scene("i", 3, background=background))
	assert registry.paths() == ('/job/still.png',)
	node = nodes[0]
	assert node.inputs == ('0:v',)
	assert node.filters == (
		'loop=loop=-1:size=1:start=0',
		'setpts=PTS-STARTPTS',
		'scale=1280:720:force_original_aspect_ratio=decrease',
		'pad=1280:720:(ow-iw)/2:(oh-ih)/2',
		'trim=duration=3',
		'setpts=PTS-STARTPTS',
		'fps=25',
		'format=yuva420p',
	)

#============================================

def test_video_background_trim_window() -> None:
	"""
	Ensure video backgrounds trim [from, from + duration).
	"""
	background = model.VideoBackground('clip.mp4', model.Trim(start=1.5))
	(nodes, pad, registry) = _compile(make_scene("v", 4, background=background))
	assert nodes[0].filters[0] == 'trim=start=1.5:end=5.5'
	assert 'pad' in nodes[0].filter_names

#============================================

def test_layers_form_linear_chain() -> None:
	"""
	Ensure each layer consumes the previous layer output.
	"""
	layers = [
		model.TextLayer(content="one"),
		model.ShapeLayer(size=model.Size(10, 10)),
		model.ImageLayer(src='logo.png'),
		model.TextLayer(content="two"),
	]
	(nodes, pad, registry) = _compile(make_scene("c", 5, layers=layers))
	assert pad == 'scene0_layer3'
	chain = [node for node in nodes if node.output.startswith('scene0_layer')]
	assert chain[0].inputs == ('scene0_bg',)
	assert chain[1].inputs == ('scene0_layer0',)
	assert chain[2].inputs == ('scene0_layer1', 'scene0_media2')
	assert chain[3].inputs == ('scene0_layer2',)

#============================================

def test_image_layer_overlay() -> None:
	"""
	Ensure image layers scale into a media pad and overlay with a window.
	"""
	layer = model.ImageLayer(src='logo.png', position=model.Position('right', 40),
		size=model.Size(200, 'auto'), start=2, duration=3)
	(nodes, pad, registry) = _compile(make_scene("c", 5, layers=[layer]))
	media = nodes[1]
	assert media.output == 'scene0_media0'
	assert media.inputs == ('0:v',)
	assert media.filters == ('scale=200:-1', 'format=yuva420p')
	overlay = nodes[2]
	assert overlay.render() == (
		"[scene0_bg][scene0_media0]overlay=x=W-overlay_w:y=40"
		":enable='gte(t,2)*lt(t,5)'[scene0_layer0]")

#============================================

def test_image_layer_opacity() -> None:
	"""
	Ensure translucent layers scale their alpha channel.
	"""
	layer = model.ImageLayer(src='logo.png', opacity=0.75)
	(nodes, pad, registry) = _compile(make_scene("c", 5, layers=[layer]))
	assert 'colorchannelmixer=aa=0.75' in nodes[1].filters

#============================================

def test_video_layer_trim_and_shift() -> None:
	"""
	Ensure video layers trim their source and start at the layer offset.
	"""
	layer = model.VideoLayer(src='pip.mp4', trim=model.Trim(start=4), start=1,
		duration=2)
	(nodes, pad, registry) = _compile(make_scene("c", 5, layers=[layer]))
	media = nodes[1]
	assert media.filters[0] == 'trim=start=4:end=6'
	assert media.filters[1] == 'setpts=PTS-STARTPTS+1/TB'
	layer = model.VideoLayer(src='pip.mp4', trim=model.Trim(start=1, end=9))
	(nodes, pad, registry) = _compile(make_scene("c", 5, layers=[layer]))
	assert nodes[1].filters[0] == 'trim=start=1:end=9'
	layer = model.VideoLayer(src='pip.mp4')
	(nodes, pad, registry) = _compile(make_scene("c", 5, layers=[layer]))
	assert nodes[1].filters[0] == 'trim=start=0:end=5'
	assert 'enable' not in nodes[2].chain

#============================================

def test_text_layer_drawtext() -> None:
	"""
	Ensure text layers draw directly on the current pad.
	"""
	style = model.TextStyle(font='fonts/Title.ttf', size=64, color='#FFCC00',
		outline=3, outline_color='#000000', shadow=2)
	layer = model.TextLayer(content="It's 50%: done", style=style,
		position=model.Position('center', 'bottom'))
	(nodes, pad, registry) = _compile(make_scene("t", 5, layers=[layer]))
	assert len(nodes) == 2
	assert len(registry) == 0
	chain = nodes[1].chain
	assert chain.startswith("drawtext=text='It'\\\\\\''s 50\\\\%\\\\: done':")
	assert ':fontfile=/job/fonts/Title.ttf:' in chain
	assert ':fontsize=64:fontcolor=#FFCC00:borderw=3:bordercolor=#000000:' in chain
	assert ':shadowx=2:shadowy=2:' in chain
	assert chain.endswith(':x=(W-text_w)/2:y=H-text_h')

#============================================

def test_font_option_for_names() -> None:
	"""
	Ensure bare font names select a fontconfig family.
	"""
	assert scene_module.font_option('NotoSansKR', '/job') == ('font', 'NotoSansKR')
	assert scene_module.font_option('/fonts/a.otf', '/job') == (
		'fontfile', '/fonts/a.otf')

#============================================

def test_shape_layer_drawbox() -> None:
	"""
	Ensure shapes draw a filled, alpha-blended box.
	"""
	layer = model.ShapeLayer(shape='rounded-rect', size=model.Size(300, 'auto'),
		position=model.Position('center', 20), color='#336699', opacity=0.5,
		start=1, duration=2)
	(nodes, pad, registry) = _compile(make_scene("s", 5, layers=[layer]))
	assert nodes[1].render() == (
		"[scene0_bg]drawbox=x=(iw-w)/2:y=20:w=300:h=100:color=#336699@0.5:t=fill"
		":enable='gte(t,1)*lt(t,3)'[scene0_layer0]")

#!/usr/bin/env python3

"""
Compile one scene into filtergraph statements: a fixed-size background
stream followed by a linear chain of layer overlays.
"""

import os
from vidspeclib.core import labels
from vidspeclib.core import model
from vidspeclib.core import utils

#============================================

PIXEL_FORMAT = 'yuva420p'
FONT_FILE_SUFFIXES = ('.ttf', '.otf', '.ttc')
DEFAULT_SHAPE_SIZE = 100

#============================================

def resolve_axis(value, canvas_dim: str, overlay_dim: str) -> str:
	"""
	Resolve one coordinate to a filter expression.

	Args:
		value: number or keyword (center/left/right/top/bottom).
		canvas_dim: expression for the canvas size on this axis.
		overlay_dim: expression for the overlay size on this axis.
	"""
	if isinstance(value, (int, float)) and not isinstance(value, bool):
		return utils.format_number(value)
	if value == 'center':
		return f"({canvas_dim}-{overlay_dim})/2"
	if value in ('left', 'top'):
		return '0'
	if value == 'right' or value == 'bottom':
		return f"{canvas_dim}-{overlay_dim}"
	return '0'

#============================================

def resolve_position(position: model.Position, canvas: tuple = ('W', 'H'),
	overlay: tuple = ('overlay_w', 'overlay_h')) -> tuple:
	x_expr = resolve_axis(position.x, canvas[0], overlay[0])
	y_expr = resolve_axis(position.y, canvas[1], overlay[1])
	return (x_expr, y_expr)

#============================================

def visibility_window(start, duration):
	"""
	Return the enable expression for a layer, or None when always visible.
	"""
	start_value = utils.to_decimal(start)
	if duration is None:
		if start_value <= 0:
			return None
		return f"'gte(t,{utils.format_number(start_value)})'"
	end_value = start_value + utils.to_decimal(duration)
	return (f"'gte(t,{utils.format_number(start_value)})"
		f"*lt(t,{utils.format_number(end_value)})'")

#============================================

def scale_dimension(value) -> str:
	if value == 'auto':
		return '-1'
	return utils.format_number(value)

#============================================

class SceneCompiler():
	def __init__(self, output: model.OutputConfig, registry, base_path: str = ''):
		self.output = output
		self.registry = registry
		self.base_path = base_path

	#============================
	def compile_scene(self, scene: model.Scene, scene_index: int) -> tuple:
		"""
		Emit the statements for one scene.

		Returns:
			(nodes, output_pad) where output_pad is the last layer output or
			the background pad.
		"""
		nodes = []
		background_node = self._compile_background(scene, scene_index)
		nodes.append(background_node)
		current_pad = background_node.output
		for layer_index, layer in enumerate(scene.layers):
			layer_nodes = self._compile_layer(scene, scene_index, layer_index,
				layer, current_pad)
			nodes.extend(layer_nodes)
			current_pad = layer_nodes[-1].output
		return (nodes, current_pad)

	#============================
	def _canvas_size(self) -> str:
		return f"{self.output.width}x{self.output.height}"

	#============================
	def _letterbox_filters(self) -> list:
		width = self.output.width
		height = self.output.height
		return [
			utils.format_filter('scale', width, height,
				('force_original_aspect_ratio', 'decrease')),
			utils.format_filter('pad', width, height, '(ow-iw)/2', '(oh-ih)/2'),
		]

	#============================
	def _color_source(self, color: str, duration) -> str:
		return utils.format_filter('color', ('c', color), ('s', self._canvas_size()),
			('d', duration), ('r', self.output.fps))

	#============================
	def _compile_background(self, scene: model.Scene,
		scene_index: int) -> model.FilterNode:
		background = scene.background
		out_pad = labels.scene_background(scene_index)
		pixel_filter = utils.format_filter('format', PIXEL_FORMAT)
		fps_filter = utils.format_filter('fps', self.output.fps)
		if isinstance(background, model.ColorBackground):
			filters = [self._color_source(background.value, scene.duration), pixel_filter]
			return model.FilterNode((), tuple(filters), out_pad)
		if isinstance(background, model.GradientBackground):
			if len(background.colors) == 0:
				raise utils.StructuralError(
					f"scene {scene.id}: gradient background requires at least one color")
			# gradients collapse to their first stop
			filters = [self._color_source(background.colors[0], scene.duration),
				pixel_filter]
			return model.FilterNode((), tuple(filters), out_pad)
		if isinstance(background, model.ImageBackground):
			input_index = self.registry.register(background.src)
			filters = [
				utils.format_filter('loop', ('loop', -1), ('size', 1), ('start', 0)),
				'setpts=PTS-STARTPTS',
			]
			filters += self._letterbox_filters()
			filters += [
				utils.format_filter('trim', ('duration', scene.duration)),
				'setpts=PTS-STARTPTS',
				fps_filter,
				pixel_filter,
			]
			return model.FilterNode((labels.input_video(input_index),),
				tuple(filters), out_pad)
		if isinstance(background, model.VideoBackground):
			input_index = self.registry.register(background.src)
			trim_start = utils.to_decimal(background.trim.start)
			trim_end = trim_start + utils.to_decimal(scene.duration)
			filters = [
				utils.format_filter('trim', ('start', trim_start), ('end', trim_end)),
				'setpts=PTS-STARTPTS',
			]
			filters += self._letterbox_filters()
			filters += [fps_filter, pixel_filter]
			return model.FilterNode((labels.input_video(input_index),),
				tuple(filters), out_pad)
		raise utils.StructuralError(
			f"scene {scene.id}: unsupported background {type(background).__name__}")

	#============================
	def _compile_layer(self, scene: model.Scene, scene_index: int,
		layer_index: int, layer, current_pad: str) -> list:
		out_pad = labels.scene_layer(scene_index, layer_index)
		if isinstance(layer, model.TextLayer):
			return [self._compile_text(layer, current_pad, out_pad)]
		if isinstance(layer, model.ImageLayer):
			input_index = self.registry.register(layer.src)
			media_filters = [self._scale_filter(layer.size)]
			media_filters += self._opacity_filters(layer.opacity)
			return self._compile_media_overlay(scene_index, layer_index, layer,
				input_index, media_filters, current_pad, out_pad)
		if isinstance(layer, model.VideoLayer):
			input_index = self.registry.register(layer.src)
			trim_start = utils.to_decimal(layer.trim.start)
			if layer.trim.end is not None:
				trim_end = utils.to_decimal(layer.trim.end)
			elif layer.duration is not None:
				trim_end = trim_start + utils.to_decimal(layer.duration)
			else:
				trim_end = trim_start + utils.to_decimal(scene.duration)
			media_filters = [
				utils.format_filter('trim', ('start', trim_start), ('end', trim_end)),
				self._setpts_filter(layer.start),
				self._scale_filter(layer.size),
			]
			media_filters += self._opacity_filters(layer.opacity)
			return self._compile_media_overlay(scene_index, layer_index, layer,
				input_index, media_filters, current_pad, out_pad)
		if isinstance(layer, model.ShapeLayer):
			return [self._compile_shape(layer, current_pad, out_pad)]
		raise utils.StructuralError(
			f"scene {scene.id}: unsupported layer {type(layer).__name__}")

	#============================
	def _compile_media_overlay(self, scene_index: int, layer_index: int, layer,
		input_index: int, media_filters: list, current_pad: str,
		out_pad: str) -> list:
		media_pad = labels.scene_media(scene_index, layer_index)
		media_node = model.FilterNode((labels.input_video(input_index),),
			tuple(media_filters), media_pad)
		(x_expr, y_expr) = resolve_position(layer.position)
		options = [('x', x_expr), ('y', y_expr)]
		enable = visibility_window(layer.start, layer.duration)
		if enable is not None:
			options.append(('enable', enable))
		overlay_node = model.FilterNode((current_pad, media_pad),
			(utils.format_filter('overlay', *options),), out_pad)
		return [media_node, overlay_node]

	#============================
	def _scale_filter(self, size: model.Size) -> str:
		return utils.format_filter('scale', scale_dimension(size.width),
			scale_dimension(size.height))

	#============================
	def _setpts_filter(self, start) -> str:
		start_value = utils.to_decimal(start)
		if start_value <= 0:
			return 'setpts=PTS-STARTPTS'
		return f"setpts=PTS-STARTPTS+{utils.format_number(start_value)}/TB"

	#============================
	def _opacity_filters(self, opacity) -> list:
		if opacity is None or utils.to_decimal(opacity) >= 1:
			return [utils.format_filter('format', PIXEL_FORMAT)]
		return [
			utils.format_filter('format', 'rgba'),
			utils.format_filter('colorchannelmixer', ('aa', opacity)),
			utils.format_filter('format', PIXEL_FORMAT),
		]

	#============================
	def _compile_text(self, layer: model.TextLayer, current_pad: str,
		out_pad: str) -> model.FilterNode:
		return model.FilterNode((current_pad,),
			(text_filter(layer, self.base_path),), out_pad)

	#============================
	def _compile_shape(self, layer: model.ShapeLayer, current_pad: str,
		out_pad: str) -> model.FilterNode:
		return model.FilterNode((current_pad,), (shape_filter(layer),), out_pad)

#============================================

def font_option(font: str, base_path: str = '') -> tuple:
	"""
	Use fontfile= for values that look like font files, font= otherwise.
	"""
	if font.lower().endswith(FONT_FILE_SUFFIXES) or '/' in font or os.sep in font:
		font_path = utils.resolve_path(font, base_path)
		return ('fontfile', utils.escape_filter_value(font_path))
	return ('font', utils.escape_filter_value(font))

#============================================

def text_filter(layer: model.TextLayer, base_path: str = '') -> str:
	style = layer.style
	(x_expr, y_expr) = resolve_position(layer.position,
		overlay=('text_w', 'text_h'))
	options = [
		('text', f"'{utils.escape_drawtext(layer.content)}'"),
		font_option(style.font, base_path),
		('fontsize', style.size),
		('fontcolor', style.color),
		('borderw', style.outline),
		('bordercolor', style.outline_color),
	]
	if utils.to_decimal(style.shadow) > 0:
		options.append(('shadowx', style.shadow))
		options.append(('shadowy', style.shadow))
	options.append(('x', x_expr))
	options.append(('y', y_expr))
	enable = visibility_window(layer.start, layer.duration)
	if enable is not None:
		options.append(('enable', enable))
	return utils.format_filter('drawtext', *options)

#============================================

def shape_filter(layer: model.ShapeLayer) -> str:
	# every shape kind is drawn as a filled rectangle
	(x_expr, y_expr) = resolve_position(layer.position, canvas=('iw', 'ih'),
		overlay=('w', 'h'))
	width = layer.size.width
	if width == 'auto':
		width = DEFAULT_SHAPE_SIZE
	height = layer.size.height
	if height == 'auto':
		height = DEFAULT_SHAPE_SIZE
	color = f"{layer.color}@{utils.format_number(layer.opacity)}"
	options = [
		('x', x_expr),
		('y', y_expr),
		('w', width),
		('h', height),
		('color', color),
		('t', 'fill'),
	]
	enable = visibility_window(layer.start, layer.duration)
	if enable is not None:
		options.append(('enable', enable))
	return utils.format_filter('drawbox', *options)

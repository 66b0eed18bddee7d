#!/usr/bin/env python3

import os
import re
import yaml
import PIL.ImageColor
from vidspeclib.core import model
from vidspeclib.core import utils

#============================================

OUTPUT_FORMATS = ('mp4', 'webm', 'mov')
OUTPUT_CODECS = ('libx264', 'libx265', 'libvpx-vp9')
OUTPUT_PRESETS = ('ultrafast', 'superfast', 'veryfast', 'faster', 'fast',
	'medium', 'slow', 'slower', 'veryslow')
SHAPE_KINDS = ('rect', 'circle', 'rounded-rect')
GRADIENT_DIRECTIONS = ('horizontal', 'vertical', 'diagonal')
TEXT_ALIGNMENTS = ('left', 'center', 'right')
ENTER_ANIMATIONS = ('fadeIn', 'slideUp', 'slideDown', 'slideLeft', 'slideRight',
	'zoomIn', 'none')
EXIT_ANIMATIONS = ('fadeOut', 'slideUp', 'slideDown', 'slideLeft', 'slideRight',
	'zoomOut', 'none')
SUBTITLE_POSITIONS = ('bottom', 'top', 'center')
# ffmpeg color syntax: #RRGGBB[AA] or 0xRRGGBB[AA]; names are checked separately
HEX_COLOR_RE = re.compile(r'^(#|0x)([0-9a-fA-F]{6}|[0-9a-fA-F]{8})$')

#============================================

def _pick(data: dict, key: str, alias: str = None, default=None):
	"""
	Read a key, accepting its camelCase alias from JSON specs.
	"""
	if key in data:
		return data[key]
	if alias is not None and alias in data:
		return data[alias]
	return default

#============================================

class SpecLoader():
	"""
	Read a YAML or JSON spec file into an immutable Specification.

	All defaults and range checks live here; the compiler trusts its input.
	"""
	def __init__(self, spec_file: str = None):
		self.spec_file = spec_file

	#============================
	def load(self) -> model.Specification:
		if self.spec_file is None:
			raise RuntimeError("spec file is required")
		data = self._load_yaml()
		spec = self.parse(data)
		utils.log(f"loaded {len(spec.scenes)} scene(s), "
			f"{len(spec.audio.tracks)} audio track(s) from {self.spec_file}")
		return spec

	#============================
	def _load_yaml(self) -> dict:
		file_size = os.path.getsize(self.spec_file)
		if file_size > 10 ** 7:
			raise RuntimeError("spec file is larger than 10MB")
		with open(self.spec_file, 'r', encoding='utf-8') as data_file:
			data = yaml.safe_load(data_file)
		if not isinstance(data, dict):
			raise RuntimeError("spec must be a mapping at the top level")
		return data

	#============================
	def parse(self, data: dict) -> model.Specification:
		if not isinstance(data, dict):
			raise RuntimeError("spec must be a mapping at the top level")
		scenes_data = data.get('scenes')
		if not isinstance(scenes_data, list) or len(scenes_data) == 0:
			raise RuntimeError("scenes must be a non-empty list")
		scenes = []
		seen_ids = set()
		for index, scene_data in enumerate(scenes_data):
			scene = self._parse_scene(scene_data, f"scenes[{index}]")
			if scene.id in seen_ids:
				raise RuntimeError(f"scenes[{index}].id duplicates {scene.id}")
			seen_ids.add(scene.id)
			scenes.append(scene)
		title = data.get('title')
		if title is not None:
			title = str(title)
		return model.Specification(
			scenes=tuple(scenes),
			output=self._parse_output(data.get('output', {}) or {}),
			audio=self._parse_audio(data.get('audio', {}) or {}),
			subtitles=self._parse_subtitles(data.get('subtitles', []) or []),
			thumbnail=self._parse_thumbnail(data.get('thumbnail', {}) or {}),
			version=str(data.get('version', '1.0')),
			title=title,
		)

	#============================
	# scalar helpers
	#============================

	def _mapping(self, value, where: str) -> dict:
		if not isinstance(value, dict):
			raise RuntimeError(f"{where} must be a mapping")
		return value

	#============================
	def _number(self, value, where: str, minimum=None, maximum=None,
		positive: bool = False):
		if isinstance(value, bool) or not isinstance(value, (int, float)):
			raise RuntimeError(f"{where} must be a number")
		if positive and value <= 0:
			raise RuntimeError(f"{where} must be positive")
		if minimum is not None and value < minimum:
			raise RuntimeError(f"{where} must be >= {minimum}")
		if maximum is not None and value > maximum:
			raise RuntimeError(f"{where} must be <= {maximum}")
		return value

	#============================
	def _optional_number(self, value, where: str, minimum=None, maximum=None,
		positive: bool = False):
		if value is None:
			return None
		return self._number(value, where, minimum=minimum, maximum=maximum,
			positive=positive)

	#============================
	def _integer(self, value, where: str, minimum=None, maximum=None,
		positive: bool = False) -> int:
		number = self._number(value, where, minimum=minimum, maximum=maximum,
			positive=positive)
		if int(number) != number:
			raise RuntimeError(f"{where} must be an integer")
		return int(number)

	#============================
	def _fps(self, value):
		# "30000/1001" style strings keep ntsc rates exact
		if isinstance(value, str):
			rate = utils.parse_fps(value)
			if rate <= 0:
				raise RuntimeError('output.fps must be positive')
			return rate
		return self._number(value, 'output.fps', positive=True)

	#============================
	def _string(self, value, where: str) -> str:
		if not isinstance(value, str) or value == '':
			raise RuntimeError(f"{where} must be a non-empty string")
		return value

	#============================
	def _choice(self, value, choices: tuple, where: str) -> str:
		if value not in choices:
			raise RuntimeError(f"{where} must be one of {', '.join(choices)}")
		return value

	#============================
	def _boolean(self, value, where: str) -> bool:
		if not isinstance(value, bool):
			raise RuntimeError(f"{where} must be true or false")
		return value

	#============================
	def _color(self, value, where: str) -> str:
		if not isinstance(value, str) or value == '':
			raise RuntimeError(f"{where} must be a color string")
		if HEX_COLOR_RE.match(value):
			return value
		# css names, no rgb()/hsl() forms: their commas would split a filter chain
		if value.lower() in PIL.ImageColor.colormap:
			return value
		raise RuntimeError(f"{where} is not a valid color: {value}"
			" (use a color name, #RRGGBB[AA], or 0xRRGGBB[AA])")

	#============================
	# sections
	#============================

	def _parse_output(self, data) -> model.OutputConfig:
		data = self._mapping(data, 'output')
		defaults = model.OutputConfig()
		return model.OutputConfig(
			width=self._integer(data.get('width', defaults.width), 'output.width',
				positive=True),
			height=self._integer(data.get('height', defaults.height), 'output.height',
				positive=True),
			fps=self._fps(data.get('fps', defaults.fps)),
			format=self._choice(data.get('format', defaults.format), OUTPUT_FORMATS,
				'output.format'),
			codec=self._choice(data.get('codec', defaults.codec), OUTPUT_CODECS,
				'output.codec'),
			crf=self._integer(data.get('crf', defaults.crf), 'output.crf',
				minimum=0, maximum=51),
			preset=self._choice(data.get('preset', defaults.preset), OUTPUT_PRESETS,
				'output.preset'),
			sample_rate=self._integer(_pick(data, 'sample_rate', 'sampleRate',
				defaults.sample_rate), 'output.sample_rate', positive=True),
		)

	#============================
	def _parse_trim(self, data, where: str) -> model.Trim:
		if data is None:
			return model.Trim()
		data = self._mapping(data, where)
		start = self._number(data.get('from', 0), f"{where}.from", minimum=0)
		end = self._optional_number(data.get('to'), f"{where}.to", positive=True)
		return model.Trim(start=start, end=end)

	#============================
	def _parse_position(self, data, where: str) -> model.Position:
		if data is None:
			return model.Position()
		data = self._mapping(data, where)
		x_value = data.get('x', 'center')
		y_value = data.get('y', 'center')
		if isinstance(x_value, str):
			self._choice(x_value, model.POSITION_KEYWORDS_X, f"{where}.x")
		else:
			self._number(x_value, f"{where}.x")
		if isinstance(y_value, str):
			self._choice(y_value, model.POSITION_KEYWORDS_Y, f"{where}.y")
		else:
			self._number(y_value, f"{where}.y")
		return model.Position(x=x_value, y=y_value)

	#============================
	def _parse_size(self, data, where: str) -> model.Size:
		if data is None:
			return model.Size()
		data = self._mapping(data, where)
		values = []
		for key in ('width', 'height'):
			value = data.get(key, 'auto')
			if value != 'auto':
				self._number(value, f"{where}.{key}", positive=True)
			values.append(value)
		return model.Size(width=values[0], height=values[1])

	#============================
	def _parse_animation(self, data, where: str) -> model.Animation:
		if data is None:
			return model.Animation()
		data = self._mapping(data, where)
		return model.Animation(
			enter=self._choice(data.get('enter', 'none'), ENTER_ANIMATIONS,
				f"{where}.enter"),
			exit=self._choice(data.get('exit', 'none'), EXIT_ANIMATIONS,
				f"{where}.exit"),
			enter_duration=self._number(_pick(data, 'enter_duration', 'enterDuration',
				0.5), f"{where}.enterDuration", positive=True),
			exit_duration=self._number(_pick(data, 'exit_duration', 'exitDuration',
				0.5), f"{where}.exitDuration", positive=True),
		)

	#============================
	def _parse_timing(self, data: dict, where: str) -> tuple:
		start = self._number(data.get('start', 0), f"{where}.start", minimum=0)
		duration = self._optional_number(data.get('duration'), f"{where}.duration",
			positive=True)
		return (start, duration)

	#============================
	def _parse_scene(self, data, where: str) -> model.Scene:
		data = self._mapping(data, where)
		scene_id = self._string(data.get('id'), f"{where}.id")
		duration = self._number(data.get('duration'), f"{where}.duration",
			positive=True)
		background = self._parse_background(data.get('background'),
			f"{where}.background")
		layers_data = data.get('layers', []) or []
		if not isinstance(layers_data, list):
			raise RuntimeError(f"{where}.layers must be a list")
		layers = []
		for index, layer_data in enumerate(layers_data):
			layers.append(self._parse_layer(layer_data, f"{where}.layers[{index}]"))
		transition = self._parse_transition(data.get('transition'),
			f"{where}.transition")
		return model.Scene(id=scene_id, duration=duration, background=background,
			layers=tuple(layers), transition=transition)

	#============================
	def _parse_transition(self, data, where: str) -> model.Transition:
		if data is None:
			return model.Transition()
		data = self._mapping(data, where)
		return model.Transition(
			type=self._choice(data.get('type', 'none'), model.TRANSITION_TYPES,
				f"{where}.type"),
			duration=self._number(data.get('duration', 0.5), f"{where}.duration",
				positive=True),
		)

	#============================
	def _parse_background(self, data, where: str):
		if data is None:
			return model.ColorBackground()
		data = self._mapping(data, where)
		bg_kind = data.get('type')
		if bg_kind == 'color':
			return model.ColorBackground(value=self._color(data.get('value'),
				f"{where}.value"))
		if bg_kind == 'image':
			return model.ImageBackground(src=self._string(data.get('src'),
				f"{where}.src"))
		if bg_kind == 'video':
			return model.VideoBackground(
				src=self._string(data.get('src'), f"{where}.src"),
				trim=self._parse_trim(data.get('trim'), f"{where}.trim"),
			)
		if bg_kind == 'gradient':
			colors = data.get('colors')
			if not isinstance(colors, list) or len(colors) < 2:
				raise RuntimeError(f"{where}.colors must list at least two colors")
			checked = tuple(self._color(color, f"{where}.colors[{index}]")
				for index, color in enumerate(colors))
			return model.GradientBackground(colors=checked,
				direction=self._choice(data.get('direction', 'vertical'),
					GRADIENT_DIRECTIONS, f"{where}.direction"))
		raise RuntimeError(f"unsupported background type {bg_kind} at {where}")

	#============================
	def _parse_layer(self, data, where: str):
		data = self._mapping(data, where)
		layer_kind = data.get('type')
		(start, duration) = self._parse_timing(data, where)
		if layer_kind == 'text':
			return model.TextLayer(
				content=self._string(data.get('content'), f"{where}.content"),
				style=self._parse_text_style(data.get('style'), f"{where}.style"),
				position=self._parse_position(data.get('position'), f"{where}.position"),
				start=start,
				duration=duration,
				animation=self._parse_animation(data.get('animation'),
					f"{where}.animation"),
			)
		if layer_kind == 'image':
			return model.ImageLayer(
				src=self._string(data.get('src'), f"{where}.src"),
				position=self._parse_position(data.get('position'), f"{where}.position"),
				size=self._parse_size(data.get('size'), f"{where}.size"),
				opacity=self._number(data.get('opacity', 1), f"{where}.opacity",
					minimum=0, maximum=1),
				start=start,
				duration=duration,
				animation=self._parse_animation(data.get('animation'),
					f"{where}.animation"),
			)
		if layer_kind == 'video':
			return model.VideoLayer(
				src=self._string(data.get('src'), f"{where}.src"),
				trim=self._parse_trim(data.get('trim'), f"{where}.trim"),
				position=self._parse_position(data.get('position'), f"{where}.position"),
				size=self._parse_size(data.get('size'), f"{where}.size"),
				opacity=self._number(data.get('opacity', 1), f"{where}.opacity",
					minimum=0, maximum=1),
				mute=self._boolean(data.get('mute', True), f"{where}.mute"),
				start=start,
				duration=duration,
			)
		if layer_kind == 'shape':
			if data.get('size') is None:
				raise RuntimeError(f"{where}.size is required for shapes")
			return model.ShapeLayer(
				shape=self._choice(data.get('shape'), SHAPE_KINDS, f"{where}.shape"),
				size=self._parse_size(data.get('size'), f"{where}.size"),
				position=self._parse_position(data.get('position'), f"{where}.position"),
				color=self._color(data.get('color', '#000000'), f"{where}.color"),
				opacity=self._number(data.get('opacity', 0.5), f"{where}.opacity",
					minimum=0, maximum=1),
				border_radius=self._number(_pick(data, 'border_radius', 'borderRadius',
					0), f"{where}.borderRadius", minimum=0),
				start=start,
				duration=duration,
			)
		raise RuntimeError(f"unsupported layer type {layer_kind} at {where}")

	#============================
	def _parse_text_style(self, data, where: str) -> model.TextStyle:
		if data is None:
			return model.TextStyle()
		data = self._mapping(data, where)
		defaults = model.TextStyle()
		return model.TextStyle(
			font=self._string(data.get('font', defaults.font), f"{where}.font"),
			size=self._number(data.get('size', defaults.size), f"{where}.size",
				positive=True),
			color=self._color(data.get('color', defaults.color), f"{where}.color"),
			outline=self._number(data.get('outline', defaults.outline),
				f"{where}.outline", minimum=0),
			outline_color=self._color(_pick(data, 'outline_color', 'outlineColor',
				defaults.outline_color), f"{where}.outlineColor"),
			shadow=self._number(data.get('shadow', defaults.shadow),
				f"{where}.shadow", minimum=0),
			bold=self._boolean(data.get('bold', defaults.bold), f"{where}.bold"),
			italic=self._boolean(data.get('italic', defaults.italic),
				f"{where}.italic"),
			line_spacing=self._number(_pick(data, 'line_spacing', 'lineSpacing',
				defaults.line_spacing), f"{where}.lineSpacing"),
			align=self._choice(data.get('align', defaults.align), TEXT_ALIGNMENTS,
				f"{where}.align"),
		)

	#============================
	def _parse_audio(self, data) -> model.Audio:
		data = self._mapping(data, 'audio')
		tracks_data = data.get('tracks', []) or []
		if not isinstance(tracks_data, list):
			raise RuntimeError("audio.tracks must be a list")
		tracks = []
		for index, track_data in enumerate(tracks_data):
			tracks.append(self._parse_audio_track(track_data,
				f"audio.tracks[{index}]"))
		master_data = self._mapping(data.get('master', {}) or {}, 'audio.master')
		master = model.AudioMaster(
			volume=self._number(master_data.get('volume', 1), 'audio.master.volume',
				minimum=0, maximum=2),
			normalize=self._boolean(master_data.get('normalize', False),
				'audio.master.normalize'),
		)
		return model.Audio(tracks=tuple(tracks), master=master)

	#============================
	def _parse_audio_track(self, data, where: str) -> model.AudioTrack:
		data = self._mapping(data, where)
		(start, duration) = self._parse_timing(data, where)
		track_id = data.get('id')
		if track_id is not None:
			track_id = str(track_id)
		return model.AudioTrack(
			src=self._string(data.get('src'), f"{where}.src"),
			category=self._choice(data.get('type'), model.AUDIO_CATEGORIES,
				f"{where}.type"),
			start=start,
			duration=duration,
			volume=self._number(data.get('volume', 1), f"{where}.volume",
				minimum=0, maximum=2),
			fade_in=self._number(_pick(data, 'fade_in', 'fadeIn', 0),
				f"{where}.fadeIn", minimum=0),
			fade_out=self._number(_pick(data, 'fade_out', 'fadeOut', 0),
				f"{where}.fadeOut", minimum=0),
			loop=self._boolean(data.get('loop', False), f"{where}.loop"),
			trim=self._parse_trim(data.get('trim'), f"{where}.trim"),
			id=track_id,
		)

	#============================
	def _parse_subtitles(self, data) -> tuple:
		if not isinstance(data, list):
			raise RuntimeError("subtitles must be a list")
		entries = []
		for index, entry_data in enumerate(data):
			where = f"subtitles[{index}]"
			entry_data = self._mapping(entry_data, where)
			start = self._number(entry_data.get('start'), f"{where}.start", minimum=0)
			end = self._number(entry_data.get('end'), f"{where}.end", positive=True)
			if end <= start:
				raise RuntimeError(f"{where}.end must be after start")
			entries.append(model.SubtitleEntry(
				start=start,
				end=end,
				text=self._string(entry_data.get('text'), f"{where}.text"),
				style=self._parse_subtitle_style(entry_data.get('style'),
					f"{where}.style"),
			))
		return tuple(entries)

	#============================
	def _parse_subtitle_style(self, data, where: str) -> model.SubtitleStyle:
		if data is None:
			return model.SubtitleStyle()
		data = self._mapping(data, where)
		defaults = model.SubtitleStyle()
		return model.SubtitleStyle(
			font=self._string(data.get('font', defaults.font), f"{where}.font"),
			size=self._number(data.get('size', defaults.size), f"{where}.size",
				positive=True),
			color=self._color(data.get('color', defaults.color), f"{where}.color"),
			outline=self._number(data.get('outline', defaults.outline),
				f"{where}.outline", minimum=0),
			outline_color=self._color(_pick(data, 'outline_color', 'outlineColor',
				defaults.outline_color), f"{where}.outlineColor"),
			shadow=self._number(data.get('shadow', defaults.shadow),
				f"{where}.shadow", minimum=0),
			position=self._choice(data.get('position', defaults.position),
				SUBTITLE_POSITIONS, f"{where}.position"),
			margin_v=self._number(_pick(data, 'margin_v', 'marginV',
				defaults.margin_v), f"{where}.marginV"),
		)

	#============================
	def _parse_thumbnail(self, data) -> model.Thumbnail:
		data = self._mapping(data, 'thumbnail')
		defaults = model.Thumbnail()
		source = self._parse_thumbnail_source(data.get('source'), 'thumbnail.source')
		overlays_data = data.get('overlays', []) or []
		if not isinstance(overlays_data, list):
			raise RuntimeError("thumbnail.overlays must be a list")
		overlays = tuple(
			self._parse_layer(layer_data, f"thumbnail.overlays[{index}]")
			for index, layer_data in enumerate(overlays_data)
		)
		return model.Thumbnail(
			enabled=self._boolean(data.get('enabled', defaults.enabled),
				'thumbnail.enabled'),
			width=self._integer(data.get('width', defaults.width), 'thumbnail.width',
				positive=True),
			height=self._integer(data.get('height', defaults.height),
				'thumbnail.height', positive=True),
			source=source,
			overlays=overlays,
		)

	#============================
	def _parse_thumbnail_source(self, data, where: str):
		if data is None:
			return model.SceneFrameSource()
		data = self._mapping(data, where)
		source_kind = data.get('type')
		if source_kind == 'scene':
			scene_id = _pick(data, 'scene_id', 'sceneId', '')
			if not isinstance(scene_id, str):
				raise RuntimeError(f"{where}.sceneId must be a string")
			return model.SceneFrameSource(scene_id=scene_id,
				timestamp=self._number(data.get('timestamp', 0), f"{where}.timestamp",
					minimum=0))
		if source_kind == 'custom':
			background = self._parse_background(data.get('background'),
				f"{where}.background")
			if not isinstance(background, (model.ColorBackground,
				model.ImageBackground)):
				raise RuntimeError(f"{where}.background must be color or image")
			return model.CustomSource(background=background)
		raise RuntimeError(f"unsupported thumbnail source type {source_kind} at {where}")

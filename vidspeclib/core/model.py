#!/usr/bin/env python3

"""
Immutable data model for video specifications and compiled filtergraphs.

Backgrounds and layers are closed variant sets: every consumer dispatches
on the concrete class and raises StructuralError for anything else.
"""

import dataclasses
from decimal import Decimal
from fractions import Fraction
from typing import Optional, Tuple, Union

#============================================

POSITION_KEYWORDS_X = ('center', 'left', 'right')
POSITION_KEYWORDS_Y = ('center', 'top', 'bottom')
TRANSITION_TYPES = ('none', 'crossfade', 'wipe-left', 'wipe-right',
	'wipe-up', 'wipe-down', 'fade-black')
AUDIO_CATEGORIES = ('bgm', 'tts', 'sfx', 'voiceover')

#============================================

@dataclasses.dataclass(frozen=True)
class OutputConfig():
	width: int = 1920
	height: int = 1080
	# whole or float rates, or an exact Fraction such as 30000/1001
	fps: Union[float, Fraction] = 30
	format: str = 'mp4'
	codec: str = 'libx264'
	crf: int = 23
	preset: str = 'medium'
	sample_rate: int = 44100

#============================================

@dataclasses.dataclass(frozen=True)
class Position():
	x: Union[float, str] = 'center'
	y: Union[float, str] = 'center'

#============================================

@dataclasses.dataclass(frozen=True)
class Size():
	width: Union[float, str] = 'auto'
	height: Union[float, str] = 'auto'

#============================================

@dataclasses.dataclass(frozen=True)
class Trim():
	start: float = 0
	end: Optional[float] = None

#============================================

@dataclasses.dataclass(frozen=True)
class Animation():
	enter: str = 'none'
	exit: str = 'none'
	enter_duration: float = 0.5
	exit_duration: float = 0.5

#============================================
# backgrounds
#============================================

@dataclasses.dataclass(frozen=True)
class ColorBackground():
	value: str = '#000000'

@dataclasses.dataclass(frozen=True)
class ImageBackground():
	src: str

@dataclasses.dataclass(frozen=True)
class VideoBackground():
	src: str
	trim: Trim = Trim()

@dataclasses.dataclass(frozen=True)
class GradientBackground():
	colors: Tuple[str, ...]
	direction: str = 'vertical'

Background = Union[ColorBackground, ImageBackground, VideoBackground,
	GradientBackground]

#============================================
# layers
#============================================

@dataclasses.dataclass(frozen=True)
class TextStyle():
	font: str = 'NotoSansKR'
	size: float = 48
	color: str = '#FFFFFF'
	outline: float = 0
	outline_color: str = '#000000'
	shadow: float = 0
	bold: bool = False
	italic: bool = False
	line_spacing: float = 1.2
	align: str = 'center'

@dataclasses.dataclass(frozen=True)
class TextLayer():
	content: str
	style: TextStyle = TextStyle()
	position: Position = Position()
	start: float = 0
	duration: Optional[float] = None
	animation: Animation = Animation()

@dataclasses.dataclass(frozen=True)
class ImageLayer():
	src: str
	position: Position = Position()
	size: Size = Size()
	opacity: float = 1
	start: float = 0
	duration: Optional[float] = None
	animation: Animation = Animation()

@dataclasses.dataclass(frozen=True)
class VideoLayer():
	src: str
	trim: Trim = Trim()
	position: Position = Position()
	size: Size = Size()
	opacity: float = 1
	mute: bool = True
	start: float = 0
	duration: Optional[float] = None

@dataclasses.dataclass(frozen=True)
class ShapeLayer():
	shape: str = 'rect'
	size: Size = Size()
	position: Position = Position()
	color: str = '#000000'
	opacity: float = 0.5
	border_radius: float = 0
	start: float = 0
	duration: Optional[float] = None

Layer = Union[TextLayer, ImageLayer, VideoLayer, ShapeLayer]

#============================================

@dataclasses.dataclass(frozen=True)
class Transition():
	type: str = 'none'
	duration: float = 0.5

#============================================

@dataclasses.dataclass(frozen=True)
class Scene():
	id: str
	duration: float
	background: Background = ColorBackground()
	layers: Tuple[Layer, ...] = ()
	transition: Transition = Transition()

#============================================
# audio
#============================================

@dataclasses.dataclass(frozen=True)
class AudioTrack():
	src: str
	category: str = 'bgm'
	start: float = 0
	duration: Optional[float] = None
	volume: float = 1
	fade_in: float = 0
	fade_out: float = 0
	loop: bool = False
	trim: Trim = Trim()
	id: Optional[str] = None

@dataclasses.dataclass(frozen=True)
class AudioMaster():
	volume: float = 1
	normalize: bool = False

@dataclasses.dataclass(frozen=True)
class Audio():
	tracks: Tuple[AudioTrack, ...] = ()
	master: AudioMaster = AudioMaster()

#============================================
# subtitles and thumbnail
#============================================

@dataclasses.dataclass(frozen=True)
class SubtitleStyle():
	font: str = '../../assets/fonts/NotoSansKR-Regular.ttf'
	size: float = 32
	color: str = '#FFFFFF'
	outline: float = 2
	outline_color: str = '#000000'
	shadow: float = 1
	position: str = 'bottom'
	margin_v: float = 40

@dataclasses.dataclass(frozen=True)
class SubtitleEntry():
	start: float
	end: float
	text: str
	style: SubtitleStyle = SubtitleStyle()

@dataclasses.dataclass(frozen=True)
class SceneFrameSource():
	scene_id: str = ''
	timestamp: float = 0

@dataclasses.dataclass(frozen=True)
class CustomSource():
	background: Union[ColorBackground, ImageBackground]

@dataclasses.dataclass(frozen=True)
class Thumbnail():
	enabled: bool = True
	width: int = 1280
	height: int = 720
	source: Union[SceneFrameSource, CustomSource] = SceneFrameSource()
	overlays: Tuple[Layer, ...] = ()

#============================================

@dataclasses.dataclass(frozen=True)
class Specification():
	scenes: Tuple[Scene, ...]
	output: OutputConfig = OutputConfig()
	audio: Audio = Audio()
	subtitles: Tuple[SubtitleEntry, ...] = ()
	thumbnail: Thumbnail = Thumbnail()
	version: str = '1.0'
	title: Optional[str] = None

	#============================
	@property
	def total_duration(self) -> Decimal:
		total = Decimal(0)
		for scene in self.scenes:
			total += Decimal(str(scene.duration))
		return total

	#============================
	def find_scene(self, scene_id: str) -> Optional[Scene]:
		for scene in self.scenes:
			if scene.id == scene_id:
				return scene
		return None

	#============================
	def scene_start(self, scene_id: str) -> Decimal:
		"""
		Start of a scene on the output timeline, after transition overlaps.
		"""
		start = Decimal(0)
		for index, scene in enumerate(self.scenes):
			if scene.id == scene_id:
				return start
			start += Decimal(str(scene.duration))
			if index + 1 < len(self.scenes):
				start -= Decimal(str(scene.transition.duration))
		raise RuntimeError(f"scene {scene_id} not found")

#============================================
# compiled output
#============================================

@dataclasses.dataclass(frozen=True)
class FilterNode():
	"""
	One filtergraph statement: input pads, a comma-joined filter chain,
	and a single output pad.
	"""
	inputs: Tuple[str, ...]
	filters: Tuple[str, ...]
	output: str

	#============================
	@property
	def chain(self) -> str:
		return ','.join(self.filters)

	#============================
	@property
	def filter_names(self) -> Tuple[str, ...]:
		return tuple(item.split('=', 1)[0] for item in self.filters)

	#============================
	def render(self) -> str:
		in_pads = ''.join(f"[{pad}]" for pad in self.inputs)
		return f"{in_pads}{self.chain}[{self.output}]"

#============================================

@dataclasses.dataclass(frozen=True)
class CompiledGraph():
	inputs: Tuple[str, ...]
	nodes: Tuple[FilterNode, ...]
	video_pad: str
	audio_pad: str

	#============================
	def statements(self) -> list:
		return [node.render() for node in self.nodes]

	#============================
	def filter_complex(self) -> str:
		return ";\n".join(self.statements())

	#============================
	def find_node(self, output: str) -> Optional[FilterNode]:
		for node in self.nodes:
			if node.output == output:
				return node
		return None

	#============================
	def to_dict(self) -> dict:
		return {
			'inputs': list(self.inputs),
			'statements': self.statements(),
			'video_pad': self.video_pad,
			'audio_pad': self.audio_pad,
		}

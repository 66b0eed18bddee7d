#!/usr/bin/env python3

"""
Thumbnail command lines and backgrounds.

A scene-frame thumbnail is a frame pulled from the rendered video and then
decorated with text and shape overlays; a custom thumbnail starts from an
image or a Pillow-rendered color card.
"""

import os
import PIL.Image
import PIL.ImageColor
from vidspeclib.core import model
from vidspeclib.core import scene
from vidspeclib.core import utils
from vidspeclib.media import ffmpeg_command

#============================================

TIMESTAMP_MODES = ('absolute', 'scene')

#============================================

def resolveThumbnailTimestamp(spec: model.Specification,
	timestamp_mode: str = 'absolute'):
	"""
	Timestamp in the rendered video for a scene-frame thumbnail.

	In 'absolute' mode the source timestamp is a time in the rendered video
	and the scene id is informational. In 'scene' mode it counts from the
	start of the named scene; an empty or unknown scene id falls back to
	absolute time.
	"""
	if timestamp_mode not in TIMESTAMP_MODES:
		raise RuntimeError("timestamp_mode must be absolute or scene")
	source = spec.thumbnail.source
	if not isinstance(source, model.SceneFrameSource):
		raise RuntimeError("thumbnail source is not a scene frame")
	timestamp = utils.to_decimal(source.timestamp)
	if timestamp_mode == 'absolute':
		return timestamp
	if source.scene_id == '' or spec.find_scene(source.scene_id) is None:
		return timestamp
	return spec.scene_start(source.scene_id) + timestamp

#============================================

def buildThumbnailFilter(thumbnail: model.Thumbnail, base_path: str = '') -> str:
	"""
	Filter chain that scales the base image and draws the overlays.
	"""
	filters = [utils.format_filter('scale', thumbnail.width, thumbnail.height)]
	for layer in thumbnail.overlays:
		if isinstance(layer, model.TextLayer):
			filters.append(scene.text_filter(layer, base_path))
		elif isinstance(layer, model.ShapeLayer):
			filters.append(scene.shape_filter(layer))
		else:
			utils.log(f"thumbnail overlay {type(layer).__name__} skipped")
	return ','.join(filters)

#============================================

def buildThumbnailArgs(thumbnail: model.Thumbnail, base_image: str,
	outfile: str, base_path: str = '') -> list:
	args = ["ffmpeg", "-y"]
	args += ["-i", base_image]
	args += ["-vf", buildThumbnailFilter(thumbnail, base_path)]
	args += ["-frames:v", "1"]
	args.append(outfile)
	return args

#============================================

def makeColorBackground(outfile: str, color: str, width: int,
	height: int) -> str:
	# Pillow reads #RRGGBB, ffmpeg also allows 0xRRGGBB
	if color.startswith("0x"):
		color = "#" + color[2:]
	rgb = PIL.ImageColor.getrgb(color)
	image = PIL.Image.new("RGB", (width, height), color=rgb[:3])
	image.save(outfile)
	utils.log(f"thumbnail background {width}x{height} {color} -> {outfile}")
	return outfile

#============================================

def planThumbnail(spec: model.Specification, video_file: str, outfile: str,
	base_path: str = '', timestamp_mode: str = 'absolute') -> list:
	"""
	Command lines that produce the thumbnail, in run order.

	Color-card sources are drawn with Pillow here, next to the output,
	because ffmpeg needs an image to decorate.
	"""
	thumb = spec.thumbnail
	if not thumb.enabled:
		raise RuntimeError("thumbnail is disabled")
	(stem, _ext) = os.path.splitext(outfile)
	source = thumb.source
	if isinstance(source, model.SceneFrameSource):
		if video_file is None:
			raise RuntimeError("scene frame thumbnails need the rendered video file")
		frame_file = stem + '_frame.png'
		timestamp = resolveThumbnailTimestamp(spec, timestamp_mode)
		frame_args = ffmpeg_command.buildFrameArgs(video_file, timestamp,
			frame_file, thumb.width, thumb.height)
		return [frame_args, buildThumbnailArgs(thumb, frame_file, outfile, base_path)]
	background = source.background
	if isinstance(background, model.ImageBackground):
		base_image = utils.resolve_path(background.src, base_path)
	elif isinstance(background, model.ColorBackground):
		base_image = makeColorBackground(stem + '_bg.png', background.value,
			thumb.width, thumb.height)
	else:
		raise RuntimeError(f"unsupported thumbnail background {type(background).__name__}")
	return [buildThumbnailArgs(thumb, base_image, outfile, base_path)]

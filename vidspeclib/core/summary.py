#!/usr/bin/env python3

"""
Human-readable spec summaries and the meta.json record written next to a
render.
"""

import os
import json
import datetime
from fractions import Fraction
from vidspeclib.core import model
from vidspeclib.core import utils

#============================================

LAYER_KINDS = {
	model.TextLayer: 'text',
	model.ImageLayer: 'image',
	model.VideoLayer: 'video',
	model.ShapeLayer: 'shape',
}

#============================================

def layer_kind(layer) -> str:
	kind = LAYER_KINDS.get(type(layer))
	if kind is None:
		raise utils.StructuralError(f"unknown layer kind {type(layer).__name__}")
	return kind

#============================================

def json_number(value):
	"""
	Decimal seconds as a JSON number: int when whole, float otherwise.
	"""
	number = utils.to_decimal(value)
	if number == number.to_integral_value():
		return int(number)
	return float(number)

#============================================

def spec_info_lines(spec: model.Specification) -> list:
	"""
	Summary lines for a loaded spec.

	Args:
		spec: Loaded specification.

	Returns:
		list: Lines ready to print.
	"""
	total = spec.total_duration
	minutes = int(total // 60)
	seconds = utils.round_half_up_fraction(Fraction(str(total % 60)))
	output = spec.output
	title = spec.title if spec.title is not None else '(untitled)'
	lines = []
	lines.append("Video Spec Info")
	lines.append("-" * 40)
	lines.append(f"Title:       {title}")
	lines.append(f"Duration:    {minutes}m {seconds}s ({utils.format_number(total)}s)")
	lines.append(f"Resolution:  {output.width}x{output.height}")
	lines.append(f"FPS:         {utils.format_rate(output.fps)}")
	lines.append(f"Codec:       {output.codec} (CRF {output.crf}, {output.preset})")
	lines.append(f"Scenes:      {len(spec.scenes)}")
	for index, scene in enumerate(spec.scenes, start=1):
		kinds = ', '.join(layer_kind(layer) for layer in scene.layers) or 'none'
		lines.append(f"  {index}. [{scene.id}] {utils.format_number(scene.duration)}s"
			f" - layers: {kinds}")
	lines.append(f"Audio:       {len(spec.audio.tracks)} track(s)")
	for index, track in enumerate(spec.audio.tracks, start=1):
		lines.append(f"  {index}. [{track.category}] {track.src}"
			f" vol={utils.format_number(track.volume)}")
	lines.append(f"Subtitles:   {len(spec.subtitles)} entry/entries")
	state = 'enabled' if spec.thumbnail.enabled else 'disabled'
	lines.append(f"Thumbnail:   {state}")
	return lines

#============================================

def build_metadata(spec: model.Specification, existing: dict = None,
	video_file: str = None, thumbnail_file: str = None,
	created_at: str = None) -> dict:
	"""
	Metadata record for a render.

	User-edited title, description, and tags in an existing record win
	over the spec file.
	"""
	if existing is None:
		existing = {}
	if created_at is None:
		created_at = datetime.datetime.now(datetime.timezone.utc).isoformat()
	title = existing.get('title')
	if title is None:
		title = spec.title if spec.title is not None else 'Untitled'
	files = {'video': os.path.basename(video_file) if video_file else ''}
	if thumbnail_file:
		files['thumbnail'] = os.path.basename(thumbnail_file)
	meta = {
		'title': title,
		'description': existing.get('description', ''),
		'tags': existing.get('tags', []),
		'duration': json_number(spec.total_duration),
		'resolution': f"{spec.output.width}x{spec.output.height}",
		'createdAt': created_at,
		'files': files,
	}
	return meta

#============================================

def write_metadata(meta_path: str, spec: model.Specification,
	video_file: str = None, thumbnail_file: str = None) -> dict:
	existing = {}
	if os.path.isfile(meta_path):
		with open(meta_path, 'r', encoding='utf-8') as handle:
			existing = json.load(handle)
		if not isinstance(existing, dict):
			raise RuntimeError(f"{meta_path} must hold a json object")
	meta = build_metadata(spec, existing, video_file, thumbnail_file)
	os.makedirs(os.path.dirname(meta_path) or ".", exist_ok=True)
	text = json.dumps(meta, indent=2, ensure_ascii=False) + "\n"
	with open(meta_path, 'w', encoding='utf-8') as handle:
		handle.write(text)
	utils.log(f"metadata written to {meta_path}")
	return meta

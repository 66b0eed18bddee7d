#!/usr/bin/env python3

"""
Pytest coverage for spec summaries and metadata records.
"""

# Standard Library
import os
import sys

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

# tests helpers
TESTS_DIR = os.path.abspath(os.path.dirname(__file__))
if TESTS_DIR not in sys.path:
	sys.path.insert(0, TESTS_DIR)
from spec_utils import make_scene
from spec_utils import make_spec

# local repo modules
from vidspeclib.core import model
from vidspeclib.core import summary

#============================================

def _spec() -> model.Specification:
	"""
	A 95.5 second spec with mixed layers and one track.
	"""
	scenes = [
		make_scene("intro", 60, layers=[model.TextLayer(content="Hi"),
			model.ShapeLayer(size=model.Size(10, 10))]),
		make_scene("body", 35.5),
	]
	tracks = [model.AudioTrack(src='music.mp3', volume=0.6)]
	output = model.OutputConfig(width=1280, height=720)
	return make_spec(scenes, tracks, output=output)

#============================================

def test_info_lines() -> None:
	"""
	Ensure the summary lists timing, scenes, and tracks.
	"""
	lines = summary.spec_info_lines(_spec())
	assert "Duration:    1m 36s (95.5s)" in lines
	assert "Resolution:  1280x720" in lines
	assert "Codec:       libx264 (CRF 23, medium)" in lines
	assert "  1. [intro] 60s - layers: text, shape" in lines
	assert "  2. [body] 35.5s - layers: none" in lines
	assert "  1. [bgm] music.mp3 vol=0.6" in lines
	assert "Subtitles:   0 entry/entries" in lines

#============================================

def test_metadata_defaults() -> None:
	"""
	Ensure metadata falls back to Untitled and carries file basenames.
	"""
	meta = summary.build_metadata(_spec(), video_file='/out/render.mp4',
		thumbnail_file='/out/thumb.png', created_at='2024-01-01T00:00:00+00:00')
	assert meta == {
		'title': 'Untitled',
		'description': '',
		'tags': [],
		'duration': 95.5,
		'resolution': '1280x720',
		'createdAt': '2024-01-01T00:00:00+00:00',
		'files': {'video': 'render.mp4', 'thumbnail': 'thumb.png'},
	}

#!/usr/bin/env python3

"""
Engine command lines for a compiled graph.

These functions only build argument lists; running ffmpeg belongs to the
caller.
"""

import shlex
from vidspeclib.core import model
from vidspeclib.core import utils

#============================================

FASTSTART_FORMATS = ('mp4', 'mov')

#============================================

def buildRenderArgs(graph: model.CompiledGraph, output: model.OutputConfig,
	outfile: str) -> list:
	args = ["ffmpeg", "-y"]
	for input_path in graph.inputs:
		args += ["-i", input_path]
	args += ["-filter_complex", graph.filter_complex()]
	args += ["-map", f"[{graph.video_pad}]", "-map", f"[{graph.audio_pad}]"]
	args += [
		"-c:v", output.codec,
		"-preset", output.preset,
		"-crf", str(output.crf),
		"-c:a", "aac",
		"-b:a", "192k",
		"-ar", str(output.sample_rate),
		"-r", utils.format_rate(output.fps),
		"-s", f"{output.width}x{output.height}",
		"-pix_fmt", "yuv420p",
	]
	if output.format in FASTSTART_FORMATS:
		args += ["-movflags", "+faststart"]
	args.append(outfile)
	return args

#============================================

def buildFrameArgs(movfile: str, timestamp, outfile: str, width: int = 1280,
	height: int = 720) -> list:
	args = ["ffmpeg", "-y"]
	args += ["-ss", utils.format_number(timestamp)]
	args += ["-i", movfile]
	args += ["-vframes", "1"]
	args += ["-s", f"{width}x{height}"]
	args.append(outfile)
	return args

#============================================

def formatCommand(args: list) -> str:
	return shlex.join(args)

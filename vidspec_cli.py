#!/usr/bin/env python3

import argparse
import os
import yaml
from vidspeclib.core import summary
from vidspeclib.core import utils
from vidspeclib.core.compiler import GraphCompiler
from vidspeclib.core.loader import SpecLoader
from vidspeclib.media import ffmpeg_command
from vidspeclib.media import thumbnail

#============================================

def parse_args():
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(description="Compile a video spec to an ffmpeg filtergraph")
	parser.add_argument('-y', '--yaml', dest='specfile', required=True,
		help='yaml or json spec that describes the video')
	parser.add_argument('-b', '--base-dir', dest='base_dir',
		help='directory for relative media paths, default is the spec directory')
	parser.add_argument('-o', '--output', dest='output_file',
		help='print the ffmpeg render command for this output file')
	parser.add_argument('-t', '--thumbnail', dest='thumbnail_file',
		help='print the ffmpeg thumbnail commands for this image file')
	parser.add_argument('-r', '--scene-relative-thumbnail', dest='timestamp_mode',
		action='store_const', const='scene', default='absolute',
		help='count the thumbnail timestamp from the start of its scene')
	parser.add_argument('-m', '--meta', dest='meta_file',
		help='write a meta.json record (title, duration, resolution, files)')
	parser.add_argument('-i', '--info', dest='info', action='store_true',
		help='print a summary of the spec file and exit')
	parser.add_argument('-n', '--dry-run', dest='dry_run', action='store_true',
		help='validate only, do not compile')
	parser.add_argument('-p', '--dump-plan', dest='dump_plan', action='store_true',
		help='print the compiled graph as yaml')
	parser.add_argument('-f', '--fade-out-anchor', dest='fade_out_anchor',
		choices=('start', 'end'), default='start',
		help='anchor audio fade-outs at the track start or end')
	parser.add_argument('-q', '--quiet', dest='quiet', action='store_true',
		help='suppress status messages')
	args = parser.parse_args()
	return args

#============================================

def main():
	args = parse_args()
	utils.set_quiet_mode(args.quiet)
	spec = SpecLoader(args.specfile).load()
	if args.info:
		for line in summary.spec_info_lines(spec):
			print(line)
		return
	if args.dry_run:
		utils.log(f"dry run: validation complete, {spec.total_duration}s total")
		return
	base_dir = args.base_dir
	if base_dir is None:
		base_dir = os.path.dirname(os.path.abspath(args.specfile))
	compiler = GraphCompiler(fade_out_anchor=args.fade_out_anchor)
	graph = compiler.compile(spec, base_dir)
	if args.dump_plan:
		print(yaml.safe_dump(graph.to_dict(), sort_keys=False))
	if args.output_file is not None:
		cmd = ffmpeg_command.buildRenderArgs(graph, spec.output, args.output_file)
		print(ffmpeg_command.formatCommand(cmd))
	if args.thumbnail_file is not None:
		commands = thumbnail.planThumbnail(spec, args.output_file,
			args.thumbnail_file, base_dir, args.timestamp_mode)
		for cmd in commands:
			print(ffmpeg_command.formatCommand(cmd))
	if args.meta_file is not None:
		summary.write_metadata(args.meta_file, spec, args.output_file,
			args.thumbnail_file)
	if not args.dump_plan and args.output_file is None and args.thumbnail_file is None:
		print(graph.filter_complex())


if __name__ == '__main__':
	main()

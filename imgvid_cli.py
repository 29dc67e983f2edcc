#!/usr/bin/env python3

import argparse
import json
import sys
import yaml
from imgvidlib.core import utils
from imgvidlib.core.loader import FRAME_EFFECTS
from imgvidlib.core.loader import FRAME_EFFECT_SHAPES
from imgvidlib.core.loader import FRAME_SMOOTHING_OPTIONS
from imgvidlib.core.project import ImageVideoProject
from imgvidlib.exporters.mlt import MltExporter

#============================================

def parse_args():
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(description="Turn a folder of still images into a short video")
	parser.add_argument('-i', '--image', dest='image_path', required=True,
		help='seed image, siblings with the same extension and size are used')
	parser.add_argument('-e', '--effect', dest='frame_effect',
		help=f"frame effect: {', '.join(FRAME_EFFECTS)}")
	parser.add_argument('-s', '--shape', dest='frame_effect_shape',
		help=f"frame effect shape: {', '.join(FRAME_EFFECT_SHAPES)}")
	parser.add_argument('-m', '--smoothing', dest='frame_smoothing',
		help=f"frame smoothing: {', '.join(FRAME_SMOOTHING_OPTIONS)}")
	parser.add_argument('-t', '--duration', dest='duration',
		help='video duration in seconds or as a timecode')
	parser.add_argument('-r', '--fps', dest='fps',
		help='output frame rate, for example 30000/1001')
	parser.add_argument('-o', '--output', dest='output_file',
		help='output video file')
	parser.add_argument('-R', '--root', dest='output_root',
		help='served root directory, the reported video path is relative to it')
	parser.add_argument('-y', '--settings', dest='settings_file',
		help='yaml settings file with defaults and encoder options')
	parser.add_argument('-n', '--dry-run', dest='dry_run', action='store_true',
		help='validate and schedule only, do not render')
	parser.add_argument('-c', '--cache-dir', dest='cache_dir',
		help='directory for temporary render files')
	parser.add_argument('-k', '--keep-temp', dest='keep_temp',
		help='keep temporary render files', action='store_true')
	parser.add_argument('-K', '--no-keep-temp', dest='keep_temp',
		help='remove temporary render files', action='store_false')
	parser.add_argument('-p', '--dump-plan', dest='dump_plan', action='store_true',
		help='print the frame schedule as yaml and exit')
	parser.add_argument('-x', '--export-mlt', dest='mlt_file',
		help='write the frame schedule as MLT XML and exit')
	parser.add_argument('-q', '--quiet', dest='quiet', action='store_true',
		help='only print the json response')
	parser.set_defaults(keep_temp=False)
	args = parser.parse_args()
	return args

#============================================

def main():
	args = parse_args()
	utils.set_quiet_mode(args.quiet)
	project = ImageVideoProject(args.image_path,
		frame_effect=args.frame_effect,
		frame_effect_shape=args.frame_effect_shape,
		frame_smoothing=args.frame_smoothing,
		duration=args.duration,
		fps=args.fps,
		output_file=args.output_file,
		output_root=args.output_root,
		settings_file=args.settings_file,
		dry_run=args.dry_run or args.dump_plan or args.mlt_file is not None,
		keep_temp=args.keep_temp,
		cache_dir=args.cache_dir)
	if args.dump_plan or args.mlt_file is not None:
		try:
			if args.dump_plan:
				print(yaml.safe_dump(project.plan(), sort_keys=False))
			if args.mlt_file is not None:
				exporter = MltExporter(project, args.mlt_file)
				exporter.export()
				utils.log(f"wrote {exporter.output_file}")
		except (RuntimeError, OSError, ValueError) as exc:
			print(json.dumps({'error': str(exc)}))
			sys.exit(1)
		return
	response = project.run()
	print(json.dumps(response))
	if response.get('error') is not None:
		sys.exit(1)


if __name__ == '__main__':
	main()

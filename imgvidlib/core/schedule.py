#!/usr/bin/env python3

from fractions import Fraction
from imgvidlib.core import utils

#============================================

def linear_scalar(index: float, count: int) -> float:
	return 1.0

#============================================

def rounded_scalar(index: float, count: int) -> float:
	"""
	Inverted bell curve: 1.5 at both ends of the pass, 0.5 at the middle.
	"""
	# map the index onto [-1, 1] with 0 at the middle of the pass
	norm_x = ((index / count) * 2) - 1
	return -1 * (norm_x ** 4 - (2 * norm_x ** 2)) + 0.5

#============================================

SHAPE_SCALARS = {
	'linear': linear_scalar,
	'rounded': rounded_scalar,
}

#============================================

def scalar_for_shape(shape: str):
	scalar_fn = SHAPE_SCALARS.get(shape)
	if scalar_fn is None:
		raise RuntimeError(f"unsupported frame effect shape: {shape}")
	return scalar_fn

#============================================

def build_schedule(files: list, duration: float, fps: Fraction, scalar_fn) -> list:
	"""
	Assign each image a number of video frames.

	Each image gets (duration / n) * scalar_fn(i, n) seconds, rounded to
	whole frames. The last image absorbs the rounding error so the counts add
	up to round(fps * duration). When the earlier images already overshoot,
	frames are taken back from the end of the list.
	"""
	count = len(files)
	if count == 0:
		raise RuntimeError("cannot schedule an empty image list")
	target_frames = utils.frames_from_seconds(duration, fps)
	average_duration = float(duration) / count
	schedule = []
	for index, image_file in enumerate(files):
		scalar = scalar_fn(index, count)
		file_duration = average_duration * scalar
		frame_count = utils.round_half_up_fraction(Fraction(repr(file_duration)) * fps)
		schedule.append({
			'index': index,
			'file': image_file,
			'scalar': scalar,
			'duration': file_duration,
			'frame_count': max(frame_count, 0),
		})
	_balance_last(schedule, target_frames)
	return schedule

#============================================

def _balance_last(schedule: list, target_frames: int) -> None:
	before_last = total_frames(schedule[:-1])
	schedule[-1]['frame_count'] = max(target_frames - before_last, 0)
	excess = total_frames(schedule) - target_frames
	position = len(schedule) - 2
	while excess > 0 and position >= 0:
		entry = schedule[position]
		taken = min(entry['frame_count'], excess)
		entry['frame_count'] -= taken
		excess -= taken
		position -= 1

#============================================

def total_frames(schedule: list) -> int:
	return sum(entry['frame_count'] for entry in schedule)

#============================================

def plan_passes(files: list, frame_effect: str, duration: float) -> list:
	"""
	Split a render into forward and reversed passes.

	ping plays the images once forward, pong once in reverse, and ping-pong
	plays forward then reverse with each pass taking half the duration.
	"""
	duration = float(duration)
	if frame_effect == 'ping':
		return [{'name': 'ping', 'files': list(files), 'duration': duration}]
	if frame_effect == 'pong':
		return [{'name': 'pong', 'files': list(reversed(files)), 'duration': duration}]
	if frame_effect == 'ping-pong':
		half = duration * 0.5
		return [
			{'name': 'ping', 'files': list(files), 'duration': half},
			{'name': 'pong', 'files': list(reversed(files)), 'duration': half},
		]
	raise RuntimeError(f"unsupported frame effect: {frame_effect}")

#============================================

def schedule_passes(passes: list, fps: Fraction, shape: str) -> list:
	scalar_fn = scalar_for_shape(shape)
	for render_pass in passes:
		render_pass['schedule'] = build_schedule(render_pass['files'],
			render_pass['duration'], fps, scalar_fn)
	return passes

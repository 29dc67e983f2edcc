"""
Pytest coverage for the frame scheduler.
"""

# Standard Library
import os
import sys
from fractions import Fraction

# PIP3 modules
import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

# local repo modules
from imgvidlib.core import schedule
from imgvidlib.core import utils

#============================================

NTSC_FPS = Fraction(30000, 1001)

def _files(count: int) -> list:
	return [f"image-{index:03d}.png" for index in range(count)]

#============================================

@pytest.mark.parametrize("shape", ["linear", "rounded"])
@pytest.mark.parametrize("fps", [NTSC_FPS, Fraction(24), Fraction(60), Fraction(25, 2)])
def test_frame_total_matches_target(shape: str, fps: Fraction) -> None:
	"""
	Ensure scheduled frame counts add up to round(fps * duration).
	"""
	scalar_fn = schedule.scalar_for_shape(shape)
	for count in (2, 3, 7, 12, 30, 150):
		for duration in (0.5, 1.0, 2.5, 5.0, 10.0, 17.0):
			if count > int(duration * float(fps)):
				continue
			result = schedule.build_schedule(_files(count), duration, fps, scalar_fn)
			expected = utils.frames_from_seconds(duration, fps)
			assert schedule.total_frames(result) == expected
			assert all(entry['frame_count'] >= 0 for entry in result)

#============================================

def test_rounded_scalar_shape() -> None:
	"""
	Ensure the rounded curve is 1.5 at the ends and 0.5 in the middle.
	"""
	assert schedule.rounded_scalar(0, 10) == pytest.approx(1.5)
	assert schedule.rounded_scalar(5, 10) == pytest.approx(0.5)
	assert schedule.rounded_scalar(9, 10) == pytest.approx(1.5, abs=0.2)
	assert schedule.rounded_scalar(2, 10) > schedule.rounded_scalar(4, 10)

#============================================

def test_linear_schedule_is_even() -> None:
	"""
	Ensure linear timing gives every image the same share.
	"""
	result = schedule.build_schedule(_files(5), 5.0, Fraction(30), schedule.linear_scalar)
	assert [entry['frame_count'] for entry in result] == [30, 30, 30, 30, 30]

#============================================

def test_rounded_schedule_lingers_on_ends() -> None:
	"""
	Ensure rounded timing holds the first image longer than the middle one.
	"""
	result = schedule.build_schedule(_files(9), 9.0, Fraction(30), schedule.rounded_scalar)
	counts = [entry['frame_count'] for entry in result]
	assert counts[0] == 45
	assert counts[0] > counts[4]
	assert sum(counts) == 270

#============================================

def test_overshoot_is_trimmed_from_the_end() -> None:
	"""
	Ensure rounding overshoot is taken back from the last images.
	"""
	# 1.5 frames per image rounds up to 2, so nine images already use 18 of 15
	result = schedule.build_schedule(_files(10), 1.0, Fraction(15), schedule.linear_scalar)
	counts = [entry['frame_count'] for entry in result]
	assert sum(counts) == 15
	assert counts[:7] == [2] * 7
	assert counts[7] == 1
	assert counts[8:] == [0, 0]
	assert len(result) == 10

#============================================

def test_plan_passes_ping_pong() -> None:
	"""
	Ensure ping-pong plays forward then reverse at half duration each.
	"""
	files = _files(4)
	passes = schedule.plan_passes(files, 'ping-pong', 10)
	assert [render_pass['name'] for render_pass in passes] == ['ping', 'pong']
	assert passes[0]['files'] == files
	assert passes[1]['files'] == list(reversed(files))
	assert passes[0]['duration'] == 5.0
	assert passes[1]['duration'] == 5.0

#============================================

def test_plan_passes_single_direction() -> None:
	"""
	Ensure ping and pong plan a single pass over the full duration.
	"""
	files = _files(3)
	ping = schedule.plan_passes(files, 'ping', 4)
	pong = schedule.plan_passes(files, 'pong', 4)
	assert len(ping) == 1 and len(pong) == 1
	assert ping[0]['files'] == files
	assert pong[0]['files'] == list(reversed(files))
	assert pong[0]['duration'] == 4.0

#============================================

def test_unknown_effect_raises() -> None:
	"""
	Ensure unknown effects and shapes raise RuntimeError.
	"""
	with pytest.raises(RuntimeError):
		schedule.plan_passes(_files(3), 'bounce', 4)
	with pytest.raises(RuntimeError):
		schedule.scalar_for_shape('square')

#============================================

def test_schedule_passes_attaches_schedules() -> None:
	"""
	Ensure every pass gets a schedule matching its own duration.
	"""
	passes = schedule.plan_passes(_files(6), 'ping-pong', 4)
	schedule.schedule_passes(passes, NTSC_FPS, 'rounded')
	for render_pass in passes:
		assert len(render_pass['schedule']) == 6
		assert schedule.total_frames(render_pass['schedule']) == 60

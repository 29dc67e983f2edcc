#!/usr/bin/env python3

"""
Integration tests for the render pipeline.
"""

# Standard Library
import json
import os
import shutil
import subprocess
import sys
import tempfile
import unittest

import PIL.Image

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

from imgvidlib.core import utils
from imgvidlib.core.project import ImageVideoProject

#============================================

REQUIRED_TOOLS = ("ffmpeg", "ffprobe")
MISSING_TOOLS = [tool for tool in REQUIRED_TOOLS if shutil.which(tool) is None]
HAVE_TOOLS = len(MISSING_TOOLS) == 0
SKIP_TOOLS_REASON = f"missing tools: {', '.join(MISSING_TOOLS)}"

#============================================

def _write_images(folder: str, count: int, size: tuple) -> list:
	paths = []
	for index in range(count):
		color = ((index * 50) % 256, 200 - index * 20, 90)
		path = os.path.join(folder, f"frame{index:02d}.png")
		PIL.Image.new('RGB', size, color).save(path)
		paths.append(path)
	return paths

#============================================

def _probe_duration(path: str) -> float:
	cmd = f"ffprobe -v error -show_entries format=duration -of json \"{path}\""
	payload = subprocess.check_output(cmd, shell=True).decode("utf-8")
	data = json.loads(payload)
	duration = data.get("format", {}).get("duration")
	return float(duration) if duration is not None else 0.0

#============================================

def _probe_size(path: str) -> tuple:
	cmd = f"ffprobe -v error -select_streams v:0 -show_entries stream=width,height -of json \"{path}\""
	payload = subprocess.check_output(cmd, shell=True).decode("utf-8")
	stream = json.loads(payload).get("streams", [{}])[0]
	return (stream.get("width"), stream.get("height"))

#============================================

@unittest.skipUnless(HAVE_TOOLS, SKIP_TOOLS_REASON)
class RenderIntegrationTest(unittest.TestCase):
	#============================================
	def setUp(self) -> None:
		utils.set_quiet_mode(True)

	#============================================
	def tearDown(self) -> None:
		utils.set_quiet_mode(False)

	#============================================
	def test_ping_pong_render(self) -> None:
		"""Render a ping-pong clip and check duration and size."""
		with tempfile.TemporaryDirectory() as temp_dir:
			images = _write_images(temp_dir, 5, (64, 48))
			output_path = os.path.join(temp_dir, "out", "clip.mp4")
			response = ImageVideoProject(images[0], frame_effect='ping-pong',
				frame_effect_shape='rounded', frame_smoothing='off', duration=2,
				output_file=output_path, output_root=temp_dir).run()
			self.assertEqual(response, {'video': 'out/clip.mp4'})
			self.assertTrue(os.path.isfile(output_path))
			self.assertAlmostEqual(_probe_duration(output_path), 2.0, delta=0.35)
			self.assertEqual(_probe_size(output_path), (64, 48))

	#============================================
	def test_fast_smoothing_render(self) -> None:
		"""Render with blend smoothing enabled."""
		with tempfile.TemporaryDirectory() as temp_dir:
			images = _write_images(temp_dir, 4, (64, 48))
			output_path = os.path.join(temp_dir, "smooth.mp4")
			response = ImageVideoProject(images[0], frame_effect='ping',
				frame_smoothing='fast', duration=1, output_file=output_path).run()
			self.assertNotIn('error', response)
			self.assertTrue(os.path.isfile(output_path))

#============================================

def main() -> None:
	"""Run the unit tests."""
	unittest.main()

#============================================

if __name__ == "__main__":
	main()

#!/usr/bin/env python3

import os
from tqdm import tqdm
import PIL.Image
from imgvidlib.core import utils
from imgvidlib.media import ffmpeg

#============================================

class Renderer():
	def __init__(self, request, passes: list, size: tuple):
		self.request = request
		self.passes = passes
		(self.width, self.height) = size
		self.cache_dir = None
		self.temp_counter = 0

	#============================
	def render(self, cache_dir: str) -> str:
		self.cache_dir = cache_dir
		self.temp_counter = 0
		pass_files = []
		for index, render_pass in enumerate(self.passes, start=1):
			pass_file = self._make_temp_path(f"pass-{index:02d}-{render_pass['name']}.ts")
			self._render_pass(render_pass, pass_file)
			pass_files.append(pass_file)
		output_file = self.request.output_file
		self._finalize_output(pass_files, output_file)
		if not self.request.keep_temp:
			self._cleanup_temp(pass_files)
		return output_file

	#============================
	def estimate_command_total(self) -> int:
		# one pipe per pass plus the final encode
		return len(self.passes) + 1

	#============================
	def _render_pass(self, render_pass: dict, pass_file: str) -> None:
		cmd = ffmpeg.rawPipeCommand(pass_file, self.width, self.height,
			self._fps_text(), self.request.bitrate_kbps)
		log_file = self._make_temp_path(f"ffmpeg-{render_pass['name']}.log")
		schedule = render_pass['schedule']
		count = len(schedule)
		quiet_mode = utils.is_quiet_mode()
		if quiet_mode:
			entries = schedule
		else:
			entries = tqdm(schedule, desc=render_pass['name'], unit='image')
		with ffmpeg.FramePipe(cmd, log_file) as pipe:
			for entry in entries:
				if entry['frame_count'] <= 0:
					utils.log(f"{entry['index'] + 1}/{count} skipped, no frames")
					continue
				frame_bytes = self._decode_frame(entry['file'])
				pipe.write(frame_bytes, repeat=entry['frame_count'])
		utils.ensure_file_exists(pass_file)
		if not self.request.keep_temp:
			self._cleanup_temp([log_file])

	#============================
	def _decode_frame(self, image_file: str) -> bytes:
		with PIL.Image.open(image_file) as image:
			rgb_image = image.convert('RGB')
		if rgb_image.size != (self.width, self.height):
			raise RuntimeError(f"image size changed during render: {image_file}")
		return rgb_image.tobytes()

	#============================
	def _finalize_output(self, pass_files: list, output_file: str) -> None:
		output_dir = os.path.dirname(output_file)
		if output_dir and not os.path.isdir(output_dir):
			os.makedirs(output_dir)
		if os.path.exists(output_file):
			os.remove(output_file)
		cmd = ffmpeg.finalizeCommand(pass_files, output_file, self._fps_text(),
			frame_smoothing=self.request.frame_smoothing,
			codec=self.request.video_codec, preset=self.request.preset,
			pixel_format=self.request.pixel_format)
		returncode = utils.runCmd(cmd)
		if returncode != 0 or not os.path.isfile(output_file):
			utils.warn("Failed to generate video from images.")
			raise RuntimeError("Failed to generate video.")

	#============================
	def _fps_text(self) -> str:
		fps = self.request.fps
		return f"{fps.numerator}/{fps.denominator}"

	#============================
	def _make_temp_path(self, name: str) -> str:
		self.temp_counter += 1
		return os.path.join(self.cache_dir, f"{self.temp_counter:03d}-{name}")

	#============================
	def _cleanup_temp(self, files: list) -> None:
		for path in files:
			if path is None:
				continue
			if os.path.exists(path):
				os.remove(path)

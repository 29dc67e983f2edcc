#!/usr/bin/env python3

import os
import shutil
import tempfile
from imgvidlib.core import gather
from imgvidlib.core import schedule
from imgvidlib.core import utils
from imgvidlib.core.loader import RequestLoader
from imgvidlib.core.renderer import Renderer

#============================================

def relative_video_path(output_file: str, output_root: str = None) -> str:
	"""
	Express output_file relative to the served root, with forward slashes.
	"""
	video_path = output_file.replace('\\', '/')
	if output_root:
		root = output_root.replace('\\', '/')
		video_path = video_path.replace(root, '')
	return video_path.lstrip('/')

#============================================

class ImageVideoProject():
	def __init__(self, image_path: str, frame_effect: str = None,
		frame_effect_shape: str = None, frame_smoothing: str = None,
		duration=None, fps=None, output_file: str = None,
		output_root: str = None, settings_file: str = None,
		dry_run: bool = False, keep_temp: bool = False, cache_dir: str = None):
		self._loader = RequestLoader(image_path, frame_effect=frame_effect,
			frame_effect_shape=frame_effect_shape,
			frame_smoothing=frame_smoothing, duration=duration, fps=fps,
			output_file=output_file, output_root=output_root,
			settings_file=settings_file, dry_run=dry_run, keep_temp=keep_temp,
			cache_dir=cache_dir)
		self.request = None
		self.size = None
		self.files = []
		self.passes = []
		self._renderer = None
		self._cache_dir = None
		self._cache_dir_created = False

	#============================
	def prepare(self) -> None:
		"""
		Validate the request, gather images and compute every pass schedule.

		Raises RuntimeError on bad input; run() turns that into a response.
		Nothing is kept and nothing is written to disk when a step fails.
		"""
		if self._renderer is not None:
			return
		request = self._loader.load()
		size = gather.image_size(request.image_path)
		candidates = gather.gather_candidates(request.image_path)
		limit = gather.max_images(request.period_duration(), request.fps_float)
		files = gather.downselect(candidates, limit)
		if len(files) < 2:
			raise RuntimeError("duration is too short to show more than one image")
		if len(files) < len(candidates):
			utils.log(f"using {len(files)} of {len(candidates)} images")
		passes = schedule.plan_passes(files, request.frame_effect, request.duration)
		passes = schedule.schedule_passes(passes, request.fps,
			request.frame_effect_shape)
		self.request = request
		self.size = size
		self.files = files
		self.passes = passes
		self._renderer = Renderer(request, passes, size)

	#============================
	def plan(self) -> dict:
		self.prepare()
		plan = self.request.as_dict()
		plan['size'] = list(self.size)
		plan['passes'] = []
		for render_pass in self.passes:
			plan['passes'].append({
				'name': render_pass['name'],
				'duration': render_pass['duration'],
				'frames': schedule.total_frames(render_pass['schedule']),
				'images': [
					{'file': entry['file'], 'frames': entry['frame_count']}
					for entry in render_pass['schedule']
				],
			})
		return plan

	#============================
	def estimate_command_total(self) -> int:
		self.prepare()
		return self._renderer.estimate_command_total()

	#============================
	def run(self) -> dict:
		"""
		Render the video and return {'video': path} or {'error': message}.
		"""
		try:
			self.prepare()
			if self.request.dry_run:
				utils.log("dry run: validation complete")
				return {'video': None, 'plan': self.plan()}
			cache_dir = self._open_cache_dir()
			output_file = self._renderer.render(cache_dir)
		except (RuntimeError, OSError, ValueError) as exc:
			utils.warn(str(exc))
			return {'error': str(exc)}
		finally:
			self._close_cache_dir()
		return {'video': relative_video_path(output_file, self.request.output_root)}

	#============================
	def _open_cache_dir(self) -> str:
		# one directory per run; a named cache dir is never removed
		if self.request.cache_dir is None:
			self._cache_dir = tempfile.mkdtemp(prefix="imgvid-run-")
			self._cache_dir_created = True
		else:
			self._cache_dir = self.request.cache_dir
			os.makedirs(self._cache_dir, exist_ok=True)
		return self._cache_dir

	#============================
	def _close_cache_dir(self) -> None:
		if self._cache_dir is None:
			return
		if self._cache_dir_created and not self.request.keep_temp:
			shutil.rmtree(self._cache_dir, ignore_errors=True)
		self._cache_dir = None
		self._cache_dir_created = False

#============================================

def image_as_video(image_path: str, frame_effect: str = None,
	frame_effect_shape: str = None, frame_smoothing: str = None,
	duration=None, **kwargs) -> dict:
	project = ImageVideoProject(image_path, frame_effect=frame_effect,
		frame_effect_shape=frame_effect_shape, frame_smoothing=frame_smoothing,
		duration=duration, **kwargs)
	return project.run()

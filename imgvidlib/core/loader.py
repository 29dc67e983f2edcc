#!/usr/bin/env python3

import os
import yaml
from fractions import Fraction
from imgvidlib.core import utils

#============================================

FRAME_EFFECTS = ('ping', 'pong', 'ping-pong')
FRAME_EFFECT_SHAPES = ('linear', 'rounded')
FRAME_SMOOTHING_OPTIONS = ('off', 'fast', 'quality')

# 29.97 fps, the usual rate for mp4 delivery
DEFAULT_FPS = Fraction(30000, 1001)
# 8 Mbps for 1080p streaming, plus 1 Mbps for the irregular change between stills
DEFAULT_BITRATE_KBPS = 8192 + 1024

DEFAULTS = {
	'frame_effect': 'ping-pong',
	'frame_effect_shape': 'linear',
	'frame_smoothing': 'off',
	'duration': 10,
}

#============================================

class RenderRequest():
	def __init__(self):
		self.image_path = None
		self.frame_effect = None
		self.frame_effect_shape = None
		self.frame_smoothing = None
		self.duration = None
		self.fps = DEFAULT_FPS
		self.fps_float = float(DEFAULT_FPS)
		self.output_file = None
		self.output_root = None
		self.settings_file = None
		self.dry_run = False
		self.keep_temp = False
		self.cache_dir = None
		self.bitrate_kbps = DEFAULT_BITRATE_KBPS
		self.video_codec = 'libx264'
		self.preset = 'medium'
		self.pixel_format = 'yuv420p'

	#============================
	def period_duration(self) -> float:
		duration = float(self.duration)
		if self.frame_effect == 'ping-pong':
			duration *= 0.5
		return duration

	#============================
	def as_dict(self) -> dict:
		return {
			'image': self.image_path,
			'frame_effect': self.frame_effect,
			'frame_effect_shape': self.frame_effect_shape,
			'frame_smoothing': self.frame_smoothing,
			'duration': float(self.duration),
			'fps': f"{self.fps.numerator}/{self.fps.denominator}",
			'output': self.output_file,
		}

#============================================

class RequestLoader():
	def __init__(self, image_path: str, frame_effect: str = None,
		frame_effect_shape: str = None, frame_smoothing: str = None,
		duration=None, fps=None, output_file: str = None,
		output_root: str = None, settings_file: str = None,
		dry_run: bool = False, keep_temp: bool = False, cache_dir: str = None):
		self.image_path = image_path
		self.frame_effect = frame_effect
		self.frame_effect_shape = frame_effect_shape
		self.frame_smoothing = frame_smoothing
		self.duration = duration
		self.fps = fps
		self.output_file = output_file
		self.output_root = output_root
		self.settings_file = settings_file
		self.dry_run = dry_run
		self.keep_temp = keep_temp
		self.cache_dir = cache_dir

	#============================
	def load(self) -> RenderRequest:
		"""
		Validate the request and return a RenderRequest.

		Values given to the loader override the settings file, which in turn
		overrides the built-in defaults. Raises RuntimeError on any invalid
		value.
		"""
		settings = {}
		if self.settings_file is not None:
			settings = self._load_settings()
		defaults = dict(DEFAULTS)
		defaults.update(settings.get('defaults') or {})
		output_settings = settings.get('output') or {}
		request = RenderRequest()
		request.settings_file = self.settings_file
		request.dry_run = self.dry_run
		request.keep_temp = self.keep_temp
		request.image_path = self._validate_image_path(self.image_path)
		request.frame_effect = self._pick_choice('frame effect',
			self.frame_effect, defaults.get('frame_effect'), FRAME_EFFECTS)
		request.frame_effect_shape = self._pick_choice('frame effect shape',
			self.frame_effect_shape, defaults.get('frame_effect_shape'),
			FRAME_EFFECT_SHAPES)
		request.frame_smoothing = self._pick_choice('frame smoothing',
			self.frame_smoothing, defaults.get('frame_smoothing'),
			FRAME_SMOOTHING_OPTIONS)
		request.duration = self._parse_duration(self.duration, defaults.get('duration'))
		raw_fps = self.fps if self.fps is not None else settings.get('fps')
		if raw_fps is not None:
			request.fps = utils.parse_fps(raw_fps)
			request.fps_float = float(request.fps)
		request.bitrate_kbps = self._output_setting(output_settings, 'bitrate_kbps',
			int, DEFAULT_BITRATE_KBPS)
		if request.bitrate_kbps <= 0:
			raise RuntimeError("output.bitrate_kbps must be greater than 0")
		for key in ('video_codec', 'preset', 'pixel_format'):
			setattr(request, key, self._output_setting(output_settings, key, str,
				getattr(request, key)))
		request.output_root = self.output_root or self._output_setting(
			output_settings, 'root', str, None)
		request.output_file = self._resolve_output_file(request,
			self._output_setting(output_settings, 'dir', str, None))
		request.cache_dir = self.cache_dir
		return request

	#============================
	def _output_setting(self, output_settings: dict, key: str, value_type, default):
		if key not in output_settings:
			return default
		value = output_settings[key]
		# bool is an int subclass, reject it explicitly
		if isinstance(value, bool) or not isinstance(value, value_type):
			raise RuntimeError(f"output.{key} must be a {value_type.__name__}")
		return value

	#============================
	def _load_settings(self) -> dict:
		if not os.path.isfile(self.settings_file):
			raise RuntimeError(f"settings file not found: {self.settings_file}")
		file_size = os.path.getsize(self.settings_file)
		if file_size > 10 ** 7:
			raise RuntimeError("settings file is larger than 10MB")
		with open(self.settings_file, 'r') as data_file:
			data = yaml.safe_load(data_file)
		if data is None:
			return {}
		if not isinstance(data, dict):
			raise RuntimeError("settings yaml must be a mapping at the top level")
		if data.get('imgvid', 1) != 1:
			raise RuntimeError("imgvid must be set to 1 in the settings file")
		for key in ('defaults', 'output'):
			if data.get(key) is not None and not isinstance(data.get(key), dict):
				raise RuntimeError(f"settings key {key} must be a mapping")
		return data

	#============================
	def _validate_image_path(self, image_path: str) -> str:
		if image_path is None or not os.path.isfile(image_path):
			utils.warn(f"The provided path '{image_path}' does not exist.")
			raise RuntimeError("The provided path does not exist.")
		return image_path

	#============================
	def _pick_choice(self, label: str, value, default, choices: tuple) -> str:
		if value is None:
			value = default
		allowed = ", ".join(choices)
		if value not in choices:
			utils.warn(f"The {label} '{value}' is invalid. "
				f"It must be one of the following: {allowed}.")
			raise RuntimeError(f"The {label} must be one of the following: {allowed}.")
		return value

	#============================
	def _parse_duration(self, value, default):
		if value is None:
			value = default
		duration = utils.parse_timecode(value)
		if duration <= 0:
			utils.warn(f"The duration '{value}' must be greater than 0.")
			raise RuntimeError("The duration must be greater than 0.")
		return duration

	#============================
	def _resolve_output_file(self, request: RenderRequest, output_dir: str) -> str:
		if self.output_file is not None:
			return self.output_file
		folder = os.path.dirname(request.image_path)
		if output_dir is not None:
			folder = output_dir
			if request.output_root is not None and not os.path.isabs(folder):
				folder = os.path.join(request.output_root, folder)
		stem = os.path.splitext(os.path.basename(request.image_path))[0]
		return os.path.join(folder, f"{stem}-{utils.make_timestamp()}.mp4")


import os
import re
import time
import subprocess
from imgvidlib.core import utils

#============================================

def _quote(path: str) -> str:
	return "'" + path.replace("'", "'\\''") + "'"

#============================================

def smoothing_filter(frame_smoothing: str, fps_text: str) -> str:
	if frame_smoothing == 'fast':
		return f"minterpolate='fps={fps_text}:mi_mode=blend'"
	if frame_smoothing == 'quality':
		return f"minterpolate='fps={fps_text}:mi_mode=mci'"
	if frame_smoothing in (None, 'off'):
		return None
	raise RuntimeError(f"unsupported frame smoothing: {frame_smoothing}")

#============================================

def rawPipeCommand(outfile: str, width: int, height: int, fps_text: str,
	bitrate_kbps: int, codec: str = 'libx264') -> str:
	cmd = "ffmpeg -y -loglevel error "
	cmd += f" -f rawvideo -pix_fmt rgb24 -s {width}x{height} -framerate {fps_text} "
	cmd += " -i - "
	cmd += f" -codec:v {codec} -preset ultrafast -b:v {bitrate_kbps}k "
	cmd += " -pix_fmt yuv420p -f mpegts "
	cmd += f" {_quote(outfile)} "
	return cmd

#============================================

def finalizeCommand(pass_files: list, outfile: str, fps_text: str,
	frame_smoothing: str = 'off', codec: str = 'libx264', preset: str = 'medium',
	pixel_format: str = 'yuv420p') -> str:
	cmd = "ffmpeg -y -loglevel error "
	cmd += " -f mpegts "
	cmd += f" -i {_quote('concat:' + '|'.join(pass_files))} "
	vfilter = smoothing_filter(frame_smoothing, fps_text)
	if vfilter is not None:
		cmd += f" -vf \"{vfilter}\" "
	cmd += f" -codec:v {codec} -preset {preset} -pix_fmt {pixel_format} "
	cmd += " -threads 0 -movflags +faststart "
	cmd += f" {_quote(outfile)} "
	return cmd

#============================================

class FramePipe():
	"""
	Raw RGB frame sink backed by an ffmpeg process reading stdin.

	Usage mirrors a file handle:

		with FramePipe(cmd, log_file) as pipe:
			pipe.write(frame_bytes, repeat=12)

	Leaving the block closes stdin, waits for ffmpeg and raises RuntimeError
	if the encoder exited with an error.
	"""
	def __init__(self, cmd: str, log_file: str):
		self.showcmd = re.sub("  *", " ", cmd.strip())
		self.log_file = log_file
		self.proc = None
		self.log_handle = None
		self.frames_written = 0
		self.t0 = None

	#============================
	def __enter__(self):
		utils.report_command_start(self.showcmd)
		self.t0 = time.time()
		self.log_handle = open(self.log_file, 'wb')
		self.proc = subprocess.Popen(self.showcmd, shell=True,
			stdin=subprocess.PIPE, stdout=subprocess.DEVNULL,
			stderr=self.log_handle)
		return self

	#============================
	def write(self, frame_bytes: bytes, repeat: int = 1) -> None:
		try:
			for _ in range(repeat):
				self.proc.stdin.write(frame_bytes)
				self.frames_written += 1
		except BrokenPipeError:
			raise RuntimeError(f"encoder closed the frame pipe early: {self._log_tail()}")

	#============================
	def __exit__(self, exc_type, exc_value, traceback) -> bool:
		try:
			self.proc.stdin.close()
		except BrokenPipeError:
			pass
		returncode = self.proc.wait()
		self.log_handle.close()
		utils.report_command_end(self.showcmd, returncode, time.time() - self.t0)
		if exc_type is None and returncode != 0:
			raise RuntimeError(f"ffmpeg exited with code {returncode}: {self._log_tail()}")
		return False

	#============================
	def _log_tail(self) -> str:
		if not os.path.isfile(self.log_file):
			return ""
		with open(self.log_file, 'r', errors='replace') as handle:
			lines = handle.read().strip().splitlines()
		return " ".join(lines[-3:])

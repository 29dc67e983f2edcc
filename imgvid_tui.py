#!/usr/bin/env python3

"""
Textual TUI wrapper for imgvid renders.
"""

# Standard Library
import argparse
import json
import os
import re
import shlex
import sys
import threading
import time
import traceback

script_dir = os.path.dirname(os.path.abspath(__file__))
if script_dir not in sys.path:
	sys.path.insert(0, script_dir)

# PIP3 modules
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import RichLog, Static
from rich.text import Text

# local repo modules
from imgvidlib.core.project import ImageVideoProject
from imgvidlib.core import schedule
from imgvidlib.core import utils

#============================================

NORD_COLORS = {
	'background': "#2E3440",
	'foreground': "#D8DEE9",
	'dim': "#4C566A",
	'header': "#88C0D0",
	'command': "#ECEFF4",
	'flags': "#81A1C1",
	'numbers': "#B48EAD",
	'paths': "#A3BE8C",
	'strings': "#EBCB8B",
	'error': "#BF616A",
}

#============================================

def parse_args():
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(description="imgvid TUI wrapper")
	parser.add_argument('-i', '--image', dest='image_path', required=True,
		help='seed image, siblings with the same extension and size are used')
	parser.add_argument('-e', '--effect', dest='frame_effect',
		help='frame effect: ping, pong or ping-pong')
	parser.add_argument('-s', '--shape', dest='frame_effect_shape',
		help='frame effect shape: linear or rounded')
	parser.add_argument('-m', '--smoothing', dest='frame_smoothing',
		help='frame smoothing: off, fast or quality')
	parser.add_argument('-t', '--duration', dest='duration',
		help='video duration in seconds or as a timecode')
	parser.add_argument('-o', '--output', dest='output_file',
		help='output video file')
	parser.add_argument('-y', '--settings', dest='settings_file',
		help='yaml settings file with defaults and encoder options')
	parser.add_argument('-c', '--cache-dir', dest='cache_dir',
		help='directory for temporary render files')
	parser.add_argument('-k', '--keep-temp', dest='keep_temp',
		help='keep temporary render files', action='store_true')
	parser.add_argument('-K', '--no-keep-temp', dest='keep_temp',
		help='remove temporary render files', action='store_false')
	parser.add_argument('-d', '--debug', dest='debug_log', action='store_true',
		help='write debug log to imgvid_tui.log in the current directory')
	parser.set_defaults(keep_temp=False)
	args = parser.parse_args()
	return args

#============================================

class ImgvidTuiApp(App):
	BINDINGS = [
		("q", "quit", "Quit"),
	]

	CSS = """
	#root {
		height: 1fr;
	}

	#top_row {
		height: 40%;
		min-height: 9;
	}

	#left_panel {
		width: 40%;
		height: 1fr;
		border: solid gray;
	}

	#right_panel {
		width: 60%;
		height: 1fr;
		border: solid gray;
	}

	#metrics_title, #request_title {
		height: 1;
		color: #88C0D0;
	}

	#metrics, #request_info {
		height: 1fr;
	}

	#footer_note {
		height: 1;
		color: #4C566A;
	}

	#log {
		height: 1fr;
		border: solid gray;
	}
	"""

	def __init__(self, project_args: dict, debug_log: bool = False):
		super().__init__()
		self.project_args = project_args
		self.project = None
		self.command_count = 0
		self.command_total = None
		self.current_summary = ""
		self.start_time = None
		self.finish_time = None
		self.error_text = None
		self.response = None
		self.pass_summary = []
		self.metrics_widget = None
		self.request_widget = None
		self.log_widget = None
		self.finished = False
		self.command_styles = self._build_command_styles()
		self.debug_mode = debug_log
		self.log_path = None
		self.log_lock = threading.Lock()
		if self.debug_mode:
			self.log_path = os.path.join(os.getcwd(), "imgvid_tui.log")
			self._reset_log()
			self._write_log(f"debug log: {self.log_path}")

	#============================
	def compose(self) -> ComposeResult:
		yield Static("IMGVID TUI", id="header")
		with Vertical(id="root"):
			with Horizontal(id="top_row"):
				with Vertical(id="left_panel"):
					yield Static("Dashboard", id="metrics_title")
					yield Static("", id="metrics")
					yield Static("Press q to quit", id="footer_note")
				with Vertical(id="right_panel"):
					yield Static("Request", id="request_title")
					yield Static("", id="request_info")
			yield RichLog(id="log", wrap=True, highlight=False)

	#============================
	def on_mount(self) -> None:
		self.metrics_widget = self.query_one("#metrics", Static)
		self.request_widget = self.query_one("#request_info", Static)
		self.log_widget = self.query_one(RichLog)
		self.start_time = time.time()
		self._update_request_info()
		thread = threading.Thread(target=self._run_project, daemon=True)
		thread.start()
		self.set_interval(0.5, self._update_metrics)

	#============================
	def _run_project(self) -> None:
		utils.set_quiet_mode(True)
		utils.set_command_reporter(self._report_command)
		try:
			self.project = ImageVideoProject(**self.project_args)
			self.command_total = self.project.estimate_command_total()
			utils.set_command_total(self.command_total)
			self.pass_summary = [
				(render_pass['name'], len(render_pass['files']),
					schedule.total_frames(render_pass['schedule']))
				for render_pass in self.project.passes
			]
			self.call_from_thread(self._update_request_info)
			self.response = self.project.run()
			if self.response.get('error') is not None:
				self.call_from_thread(self._set_error, self.response['error'])
		except Exception as exc:
			self.call_from_thread(self._set_error, str(exc), traceback.format_exc())
		finally:
			utils.set_command_total(None)
			utils.clear_command_reporter()
			utils.set_quiet_mode(False)
			self.call_from_thread(self._finish)

	#============================
	def _set_error(self, text: str, trace_text: str = None) -> None:
		self.error_text = text
		if trace_text:
			self._write_log(trace_text)
		if self.log_widget is not None:
			self.log_widget.write(
				Text(f"error: {text}", style=f"bold {NORD_COLORS['error']}")
			)

	#============================
	def _finish(self) -> None:
		if self.log_widget is None or self.metrics_widget is None:
			return
		self.finished = True
		if self.start_time is not None and self.finish_time is None:
			self.finish_time = time.time() - self.start_time
		if self.error_text is None and self.response is not None:
			self.log_widget.write(json.dumps(self.response))
			self._write_log(f"complete: {json.dumps(self.response)}")
		else:
			self.log_widget.write("complete with errors")
			self._write_log("complete with errors")
		self._update_metrics()

	#============================
	def _report_command(self, event: dict) -> None:
		self.call_from_thread(self._handle_command_event, event)

	#============================
	def _handle_command_event(self, event: dict) -> None:
		if self.log_widget is None:
			return
		event_type = event.get('event')
		command = event.get('command', '')
		summary = self._summarize_command(command)
		if event_type == 'start':
			self.command_count = event.get('index', self.command_count + 1)
			self.command_total = event.get('total', self.command_total)
			self.current_summary = summary
			prefix = utils.command_prefix(self.command_count, self.command_total)
			if prefix:
				self.log_widget.write("")
				self.log_widget.write(Text(prefix, style=f"bold {NORD_COLORS['header']}"))
			self.log_widget.write(self._highlight_command(command))
			self._write_log(f"start: {command}")
		if event_type == 'end':
			code = event.get('returncode', 0)
			seconds = event.get('seconds', 0.0)
			if code != 0:
				self.log_widget.write(
					Text(f"error ({code}): {summary}", style=f"bold {NORD_COLORS['error']}")
				)
				self._write_log(f"error ({code}): {command}")
			else:
				self._write_log(f"end ({seconds:.3f}s): {command}")
		self._update_metrics()

	#============================
	def _write_log(self, message: str) -> None:
		if not self.debug_mode or self.log_path is None:
			return
		timestamp = time.strftime("%Y-%m-%d %H:%M:%S")
		line = f"[{timestamp}] {message}\n"
		with self.log_lock:
			with open(self.log_path, "a", encoding="utf-8") as handle:
				handle.write(line)

	#============================
	def _reset_log(self) -> None:
		if not self.debug_mode or self.log_path is None:
			return
		with self.log_lock:
			with open(self.log_path, "w", encoding="utf-8"):
				return

	#============================
	def _summarize_command(self, command: str) -> str:
		if command is None or command == "":
			return "command"
		try:
			parts = shlex.split(command)
		except ValueError:
			return command
		if len(parts) == 0:
			return command
		tool = os.path.basename(parts[0])
		if tool == "ffmpeg" and len(parts) > 1:
			return f"{tool}: {os.path.basename(parts[-1])}"
		return f"{tool}: {command}"

	#============================
	def _update_metrics(self) -> None:
		if self.metrics_widget is None:
			return
		if self.start_time is None:
			elapsed = 0.0
		elif self.finished:
			elapsed = self.finish_time or (time.time() - self.start_time)
		else:
			elapsed = time.time() - self.start_time
		if self.error_text is not None:
			status = "failed"
		elif self.finished:
			status = "done"
		else:
			status = "running"
		status_style = NORD_COLORS['foreground']
		if status == "failed":
			status_style = NORD_COLORS['error']
		elif status == "done":
			status_style = NORD_COLORS['paths']
		metrics = Text()
		metrics.append("Status: ", style=NORD_COLORS['dim'])
		metrics.append(status, style=status_style)
		metrics.append("\n")
		metrics.append("Elapsed: ", style=NORD_COLORS['dim'])
		metrics.append(self._format_duration(elapsed), style=NORD_COLORS['numbers'])
		metrics.append("\n")
		metrics.append("Commands: ", style=NORD_COLORS['dim'])
		metrics.append(f"{self.command_count}", style=NORD_COLORS['numbers'])
		if self.command_total:
			metrics.append(f"/{self.command_total}", style=NORD_COLORS['numbers'])
		metrics.append("\n")
		metrics.append("Current: ", style=NORD_COLORS['dim'])
		metrics.append(self.current_summary, style=NORD_COLORS['foreground'])
		self.metrics_widget.update(metrics)

	#============================
	def _update_request_info(self) -> None:
		if self.request_widget is None:
			return
		info = Text()
		rows = [
			("Image", self.project_args.get('image_path')),
			("Effect", self.project_args.get('frame_effect') or "default"),
			("Shape", self.project_args.get('frame_effect_shape') or "default"),
			("Smoothing", self.project_args.get('frame_smoothing') or "default"),
			("Duration", self.project_args.get('duration') or "default"),
		]
		if self.project is not None and self.project.request is not None:
			rows.append(("Output", self.project.request.output_file))
		for label, value in rows:
			info.append(f"{label}: ", style=NORD_COLORS['dim'])
			info.append(str(value), style=NORD_COLORS['paths'])
			info.append("\n")
		for (name, image_count, frame_count) in self.pass_summary:
			info.append(f"Pass {name}: ", style=NORD_COLORS['dim'])
			info.append(f"{image_count}", style=NORD_COLORS['numbers'])
			info.append(" images, ", style=NORD_COLORS['dim'])
			info.append(f"{frame_count}", style=NORD_COLORS['numbers'])
			info.append(" frames\n", style=NORD_COLORS['dim'])
		if self.debug_mode and self.log_path is not None:
			info.append("Debug log: ", style=NORD_COLORS['dim'])
			info.append(self.log_path, style=NORD_COLORS['paths'])
		self.request_widget.update(info)

	#============================
	def _build_command_styles(self) -> list:
		return [
			(re.compile(r"\blibx265\b|\blibx264\b|\brawvideo\b|\bmpegts\b|\bminterpolate\b"),
				NORD_COLORS['foreground']),
			(re.compile(r"--?[A-Za-z0-9][A-Za-z0-9_-]*"), NORD_COLORS['flags']),
			(re.compile(r"\b\d+\.\d+\b"), NORD_COLORS['numbers']),
			(re.compile(r"\b\d+\b(?!\.\d)"), NORD_COLORS['numbers']),
			(re.compile(r"'[^']*'|\"[^\"]*\""), NORD_COLORS['strings']),
			(re.compile(r"(?:/|~|\./|\.\./)[^\s'\"`]+"), NORD_COLORS['paths']),
		]

	#============================
	def _highlight_command(self, command: str):
		if command is None or command == "":
			return ""
		text = Text(command, style=f"bold {NORD_COLORS['command']}")
		for pattern, style in self.command_styles:
			for match in pattern.finditer(command):
				text.stylize(style, match.start(), match.end())
		return text

	#============================
	def _format_duration(self, seconds: float) -> str:
		if seconds < 60:
			return f"{seconds:.1f}s"
		minutes = int(seconds // 60)
		remaining = seconds - (minutes * 60)
		seconds_text = f"{remaining:04.1f}"
		if minutes < 60:
			return f"{minutes}m {seconds_text}s"
		hours = int(minutes // 60)
		minutes = minutes - (hours * 60)
		return f"{hours}h {minutes:02d}m {seconds_text}s"

#============================================

def main():
	args = parse_args()
	project_args = {
		'image_path': args.image_path,
		'frame_effect': args.frame_effect,
		'frame_effect_shape': args.frame_effect_shape,
		'frame_smoothing': args.frame_smoothing,
		'duration': args.duration,
		'output_file': args.output_file,
		'settings_file': args.settings_file,
		'keep_temp': args.keep_temp,
		'cache_dir': args.cache_dir,
	}
	app = ImgvidTuiApp(project_args, debug_log=args.debug_log)
	app.run()

#============================================

if __name__ == '__main__':
	main()

#!/usr/bin/env python3

import math
import os
import re
import subprocess
import sys
import time
from decimal import Decimal
from fractions import Fraction

#============================================

_QUIET_MODE = False
_COMMAND_REPORTER = None
_COMMAND_TOTAL = None
_COMMAND_INDEX = 0

#============================================

def set_quiet_mode(quiet: bool) -> None:
	global _QUIET_MODE
	_QUIET_MODE = bool(quiet)

#============================================

def is_quiet_mode() -> bool:
	return _QUIET_MODE

#============================================

def set_command_reporter(reporter) -> None:
	global _COMMAND_REPORTER
	global _COMMAND_INDEX
	_COMMAND_REPORTER = reporter
	_COMMAND_INDEX = 0

#============================================

def clear_command_reporter() -> None:
	global _COMMAND_REPORTER
	_COMMAND_REPORTER = None

#============================================

def set_command_total(total) -> None:
	global _COMMAND_TOTAL
	_COMMAND_TOTAL = total

#============================================

def command_prefix(index: int, total) -> str:
	if index is None or index <= 0:
		return ""
	if total is None or total <= 0:
		return f"[{index}]"
	return f"[{index}/{total}]"

#============================================

def log(message: str) -> None:
	if _QUIET_MODE:
		return
	print(message)

#============================================

def warn(message: str) -> None:
	if _QUIET_MODE:
		return
	sys.stderr.write(f"WARNING: {message}\n")

#============================================

def report_command_start(showcmd: str) -> int:
	"""
	Announce a command to the console and the registered reporter.
	"""
	global _COMMAND_INDEX
	_COMMAND_INDEX += 1
	if not _QUIET_MODE:
		prefix = command_prefix(_COMMAND_INDEX, _COMMAND_TOTAL)
		if prefix:
			print(f"{prefix} CMD: '{showcmd}'")
		else:
			print(f"CMD: '{showcmd}'")
	if _COMMAND_REPORTER is not None:
		_COMMAND_REPORTER({
			'event': 'start',
			'command': showcmd,
			'index': _COMMAND_INDEX,
			'total': _COMMAND_TOTAL,
		})
	return _COMMAND_INDEX

#============================================

def report_command_end(showcmd: str, returncode: int, seconds: float) -> None:
	if _COMMAND_REPORTER is None:
		return
	_COMMAND_REPORTER({
		'event': 'end',
		'command': showcmd,
		'index': _COMMAND_INDEX,
		'total': _COMMAND_TOTAL,
		'returncode': returncode,
		'seconds': seconds,
	})

#============================================

def runCmd(cmd: str) -> int:
	showcmd = cmd.strip()
	showcmd = re.sub("  *", " ", showcmd)
	report_command_start(showcmd)
	t0 = time.time()
	proc = subprocess.Popen(showcmd, shell=True, stderr=subprocess.PIPE,
		stdout=subprocess.PIPE)
	proc.communicate()
	report_command_end(showcmd, proc.returncode, time.time() - t0)
	return proc.returncode

#============================================

def parse_fps(raw_fps) -> Fraction:
	if raw_fps is None:
		raise RuntimeError("fps is required")
	if isinstance(raw_fps, Fraction):
		fps = raw_fps
	elif isinstance(raw_fps, int):
		fps = Fraction(raw_fps, 1)
	elif isinstance(raw_fps, float):
		if math.isnan(raw_fps) or math.isinf(raw_fps):
			raise RuntimeError(f"invalid fps value: {raw_fps}")
		fps = Fraction(str(raw_fps))
	elif isinstance(raw_fps, str):
		try:
			if '/' in raw_fps:
				parts = raw_fps.split('/')
				fps = Fraction(int(parts[0]), int(parts[1]))
			else:
				fps = Fraction(raw_fps)
		except (ValueError, ZeroDivisionError):
			raise RuntimeError(f"invalid fps value: {raw_fps}")
	else:
		raise RuntimeError("fps must be int, float, or fraction string")
	if fps <= 0:
		raise RuntimeError("fps must be greater than 0")
	return fps

#============================================

def parse_timecode(raw_time) -> Decimal:
	value = _parse_timecode_value(raw_time)
	if not value.is_finite():
		raise RuntimeError(f"invalid time value: {raw_time}")
	return value

#============================================

def _parse_timecode_value(raw_time) -> Decimal:
	if raw_time is None:
		raise RuntimeError("time value is required")
	if isinstance(raw_time, bool):
		raise RuntimeError("time values must be int, float, or timecode string")
	if isinstance(raw_time, Decimal):
		return raw_time
	if isinstance(raw_time, int):
		return Decimal(raw_time)
	if isinstance(raw_time, float):
		return Decimal(str(raw_time))
	if isinstance(raw_time, str):
		value = raw_time.strip()
		if value == "":
			raise RuntimeError("time value is required")
		try:
			if ':' not in value:
				return Decimal(value)
			parts = value.split(':')
			seconds = Decimal(parts.pop())
			minutes = Decimal(parts.pop())
			hours = Decimal(0)
			if len(parts) > 0:
				hours = Decimal(parts.pop())
			return hours * Decimal(3600) + minutes * Decimal(60) + seconds
		except ArithmeticError:
			raise RuntimeError(f"invalid time value: {raw_time}")
	raise RuntimeError("time values must be int, float, or timecode string")

#============================================

def round_half_up_fraction(value: Fraction) -> int:
	numerator = value.numerator
	denominator = value.denominator
	whole = numerator // denominator
	remainder = numerator - (whole * denominator)
	if remainder * 2 >= denominator:
		return whole + 1
	return whole

#============================================

def frames_from_seconds(seconds, fps: Fraction) -> int:
	seconds_fraction = Fraction(str(seconds))
	frame_fraction = seconds_fraction * fps
	return round_half_up_fraction(frame_fraction)

#============================================

def ensure_file_exists(filepath: str) -> None:
	if not os.path.exists(filepath):
		raise RuntimeError(f"file not found: {filepath}")
	return

#============================================

def make_timestamp() -> str:
	datestamp = time.strftime("%y%b%d").lower()
	uppercase = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
	hourstamp = uppercase[(time.localtime()[3]) % 26]
	minstamp = f"{time.localtime()[4]:02d}"
	secstamp = uppercase[(time.localtime()[5]) % 26]
	timestamp = datestamp + hourstamp + minstamp + secstamp
	return timestamp

#!/usr/bin/env python3

"""
Unit tests for imgvid_tui helpers.
"""

# Standard Library
import os
import sys
import types

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

from imgvid_tui import ImgvidTuiApp
from imgvidlib.core import utils

#============================================

def test_format_duration_boundaries() -> None:
	"""
	Ensure duration formatting switches at minute/hour boundaries.
	"""
	stub = types.SimpleNamespace()
	assert ImgvidTuiApp._format_duration(stub, 12.4) == "12.4s"
	assert ImgvidTuiApp._format_duration(stub, 60.0) == "1m 00.0s"
	assert ImgvidTuiApp._format_duration(stub, 3661.2) == "1h 01m 01.2s"

#============================================

def test_summarize_ffmpeg_command() -> None:
	"""
	Ensure ffmpeg commands are summarized by their output file.
	"""
	stub = types.SimpleNamespace()
	cmd = "ffmpeg -y -f mpegts -i 'concat:/tmp/a.ts|/tmp/b.ts' '/tmp/out dir/clip.mp4'"
	assert ImgvidTuiApp._summarize_command(stub, cmd) == "ffmpeg: clip.mp4"
	assert ImgvidTuiApp._summarize_command(stub, "") == "command"

#============================================

def test_command_prefix() -> None:
	"""
	Ensure command prefixes show the index and the total when known.
	"""
	assert utils.command_prefix(2, 3) == "[2/3]"
	assert utils.command_prefix(2, None) == "[2]"
	assert utils.command_prefix(0, 3) == ""

#!/usr/bin/env python3

from imgvidlib.media.ffmpeg_render import smoothing_filter
from imgvidlib.media.ffmpeg_render import rawPipeCommand
from imgvidlib.media.ffmpeg_render import finalizeCommand
from imgvidlib.media.ffmpeg_render import FramePipe

__all__ = [
	'smoothing_filter',
	'rawPipeCommand',
	'finalizeCommand',
	'FramePipe',
]

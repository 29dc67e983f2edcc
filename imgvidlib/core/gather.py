#!/usr/bin/env python3

import os
import PIL.Image
from imgvidlib.core import utils

#============================================

def image_size(image_file: str) -> tuple:
	# Pillow reads the header only, pixel data stays undecoded
	with PIL.Image.open(image_file) as image:
		return image.size

#============================================

def creation_time(image_file: str) -> float:
	stat = os.stat(image_file)
	birth_time = getattr(stat, 'st_birthtime', None)
	if birth_time is not None:
		return birth_time
	return stat.st_mtime

#============================================

def sort_by_creation(files: list) -> list:
	return sorted(files, key=lambda path: (creation_time(path), os.path.basename(path)))

#============================================

def gather_candidates(seed_file: str) -> list:
	"""
	Collect the images next to seed_file that share its extension and size.

	Only the top level of the seed's folder is scanned. Files Pillow cannot
	read are left out. The returned list is ordered by creation time.
	"""
	extension = os.path.splitext(seed_file)[1].lower()
	folder = os.path.dirname(os.path.abspath(seed_file))
	(width, height) = image_size(seed_file)
	files = []
	for name in sorted(os.listdir(folder)):
		path = os.path.join(folder, name)
		if not os.path.isfile(path):
			continue
		if os.path.splitext(name)[1].lower() != extension:
			continue
		try:
			size = image_size(path)
		except OSError:
			utils.log(f"skipping unreadable image {name}")
			continue
		if size == (width, height):
			files.append(path)
	if len(files) < 2:
		utils.warn(f"Not enough images with extension {extension} and resolution "
			f"{width}x{height} in the folder '{folder}' to generate a video.")
		raise RuntimeError("There are not enough images of that extension and "
			"resolution in the current folder to generate a video.")
	return sort_by_creation(files)

#============================================

def max_images(period_duration: float, fps_value: float) -> int:
	return int(period_duration * fps_value)

#============================================

def downselect(files: list, limit: int) -> list:
	"""
	Thin files down to at most limit entries, keeping the order.

	First every n-th file is kept, then any leftover excess is cut from the
	middle of the list.
	"""
	if limit < 1:
		raise RuntimeError("duration and fps leave room for no images")
	if len(files) <= limit:
		return list(files)
	step = len(files) // limit
	kept = [path for index, path in enumerate(files) if index % step == 0]
	if len(kept) > limit:
		mid = len(kept) // 2
		mid_step = int(round(max(1, (len(kept) - limit) / 2.0)))
		kept = [path for index, path in enumerate(kept)
			if index < mid - mid_step or index > mid + mid_step]
	return kept

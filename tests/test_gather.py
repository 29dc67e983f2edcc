"""
Pytest coverage for candidate gathering and downselection.
"""

# Standard Library
import os
import sys

# PIP3 modules
import pytest
import PIL.Image

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

# local repo modules
from imgvidlib.core import gather

#============================================

def _write_image(path, size: tuple, color: tuple = (40, 80, 120)) -> str:
	image = PIL.Image.new('RGB', size, color)
	image.save(str(path))
	return str(path)

#============================================

def test_downselect_respects_budget() -> None:
	"""
	Ensure downselection never keeps more images than the budget.
	"""
	for count in range(2, 260, 3):
		files = [f"f{index:04d}.png" for index in range(count)]
		for limit in range(1, 70):
			kept = gather.downselect(files, limit)
			assert len(kept) <= limit
			# order is preserved
			positions = [files.index(path) for path in kept]
			assert positions == sorted(positions)

#============================================

def test_downselect_stride_then_middle() -> None:
	"""
	Ensure stride thinning keeps the ends and the middle trim closes the gap.
	"""
	files = [f"f{index:03d}.png" for index in range(100)]
	kept = gather.downselect(files, 30)
	assert len(kept) == 29
	assert kept[0] == files[0]
	assert kept[-1] == files[99]
	assert files[48] not in kept

#============================================

def test_downselect_under_budget_is_unchanged() -> None:
	"""
	Ensure short lists pass through untouched.
	"""
	files = ["a.png", "b.png", "c.png"]
	assert gather.downselect(files, 10) == files

#============================================

def test_downselect_zero_budget_raises() -> None:
	"""
	Ensure an empty budget is rejected.
	"""
	with pytest.raises(RuntimeError):
		gather.downselect(["a.png", "b.png"], 0)

#============================================

def test_max_images() -> None:
	"""
	Ensure the budget truncates fps times duration.
	"""
	assert gather.max_images(5.0, 30000 / 1001) == 149
	assert gather.max_images(0.5, 24.0) == 12

#============================================

def test_gather_filters_extension_and_size(tmp_path, monkeypatch) -> None:
	"""
	Ensure only same-extension, same-size siblings are gathered.
	"""
	seed = _write_image(tmp_path / "b.png", (32, 24))
	_write_image(tmp_path / "a.png", (32, 24))
	_write_image(tmp_path / "c.PNG", (32, 24))
	_write_image(tmp_path / "small.png", (16, 16))
	_write_image(tmp_path / "other.jpg", (32, 24))
	(tmp_path / "notes.png").write_text("not an image")
	(tmp_path / "sub").mkdir()
	_write_image(tmp_path / "sub" / "d.png", (32, 24))
	order = {"c.PNG": 1.0, "a.png": 2.0, "b.png": 3.0}
	monkeypatch.setattr(gather, "creation_time",
		lambda path: order[os.path.basename(path)])
	files = gather.gather_candidates(seed)
	assert [os.path.basename(path) for path in files] == ["c.PNG", "a.png", "b.png"]

#============================================

def test_gather_not_enough_images(tmp_path) -> None:
	"""
	Ensure a lone image is rejected.
	"""
	seed = _write_image(tmp_path / "only.png", (32, 24))
	_write_image(tmp_path / "other.png", (64, 48))
	with pytest.raises(RuntimeError):
		gather.gather_candidates(seed)

#============================================

def test_sort_by_creation_uses_file_times(tmp_path) -> None:
	"""
	Ensure files come back oldest first.
	"""
	first = _write_image(tmp_path / "z.png", (8, 8))
	second = _write_image(tmp_path / "a.png", (8, 8))
	os.utime(first, (1000000000, 1000000000))
	os.utime(second, (1000000500, 1000000500))
	if hasattr(os.stat(first), 'st_birthtime'):
		pytest.skip("platform reports birth time, mtime ordering not applicable")
	assert gather.sort_by_creation([second, first]) == [first, second]

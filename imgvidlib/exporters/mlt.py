import argparse
import math
import os
import lxml.etree
from imgvidlib.core.project import ImageVideoProject

#============================================

def parse_args():
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(description="Export an image-as-video schedule to MLT XML")
	parser.add_argument('-i', '--image', dest='image_path', required=True,
		help='seed image, its siblings are gathered from the same folder')
	parser.add_argument('-e', '--effect', dest='frame_effect',
		help='frame effect: ping, pong or ping-pong')
	parser.add_argument('-s', '--shape', dest='frame_effect_shape',
		help='frame effect shape: linear or rounded')
	parser.add_argument('-t', '--duration', dest='duration',
		help='video duration in seconds')
	parser.add_argument('-y', '--settings', dest='settings_file',
		help='yaml settings file')
	parser.add_argument('-o', '--output', dest='output_file',
		help='output MLT XML file path')
	args = parser.parse_args()
	return args

#============================================

def reduce_fraction(num: int, den: int) -> tuple:
	if den == 0:
		return (num, den)
	gcd = math.gcd(num, den) or 1
	return (num // gcd, den // gcd)

#============================================
class MltExporter():
	def __init__(self, project: ImageVideoProject, output_file: str = None):
		self.project = project
		self.project.prepare()
		self.output_file = output_file or self._default_output_path()
		self.producer_counter = 0
		self.root = None
		self.producer_ids = {}

	#============================
	def _default_output_path(self) -> str:
		base, _ = os.path.splitext(self.project.request.output_file)
		return base + ".mlt"

	#============================
	def export(self) -> None:
		self.root = lxml.etree.Element('mlt')
		self._emit_profile()
		self._emit_playlist('stills')
		self._emit_tractor('stills')
		self._write_output()

	#============================
	def _emit_profile(self) -> None:
		fps = self.project.request.fps
		(width, height) = self.project.size
		(display_num, display_den) = reduce_fraction(width, height)
		profile = lxml.etree.SubElement(self.root, 'profile')
		profile.set('description', 'imgvid')
		profile.set('width', str(width))
		profile.set('height', str(height))
		profile.set('progressive', '1')
		profile.set('sample_aspect_num', '1')
		profile.set('sample_aspect_den', '1')
		profile.set('display_aspect_num', str(display_num))
		profile.set('display_aspect_den', str(display_den))
		profile.set('frame_rate_num', str(fps.numerator))
		profile.set('frame_rate_den', str(fps.denominator))
		profile.set('colorspace', '709')

	#============================
	def _emit_playlist(self, playlist_id: str) -> None:
		entries = []
		for render_pass in self.project.passes:
			for entry in render_pass['schedule']:
				if entry['frame_count'] <= 0:
					continue
				entries.append(entry)
		# a still shown in both passes needs the longer of its two lengths
		lengths = {}
		for entry in entries:
			lengths[entry['file']] = max(lengths.get(entry['file'], 0),
				entry['frame_count'])
		# producers must precede the playlist that references them
		for entry in entries:
			self._emit_image_producer(entry['file'], lengths[entry['file']])
		playlist_elem = lxml.etree.SubElement(self.root, 'playlist')
		playlist_elem.set('id', playlist_id)
		for entry in entries:
			playlist_entry = lxml.etree.SubElement(playlist_elem, 'entry')
			playlist_entry.set('producer', self.producer_ids[entry['file']])
			playlist_entry.set('in', '0')
			playlist_entry.set('out', str(entry['frame_count'] - 1))

	#============================
	def _emit_image_producer(self, image_file: str, length: int) -> str:
		if image_file in self.producer_ids:
			return self.producer_ids[image_file]
		producer_id = self._next_producer_id('still')
		producer = lxml.etree.SubElement(self.root, 'producer')
		producer.set('id', producer_id)
		self._set_property(producer, 'mlt_service', 'qimage')
		self._set_property(producer, 'resource', os.path.abspath(image_file))
		self._set_property(producer, 'ttl', '1')
		self._set_property(producer, 'length', str(length))
		producer.set('in', '0')
		producer.set('out', str(length - 1))
		self.producer_ids[image_file] = producer_id
		return producer_id

	#============================
	def _emit_tractor(self, playlist_id: str) -> None:
		tractor = lxml.etree.SubElement(self.root, 'tractor')
		tractor.set('id', 'tractor0')
		self._set_property(tractor, 'imgvid:frame_effect',
			self.project.request.frame_effect)
		self._set_property(tractor, 'imgvid:frame_effect_shape',
			self.project.request.frame_effect_shape)
		multitrack = lxml.etree.SubElement(tractor, 'multitrack')
		track_elem = lxml.etree.SubElement(multitrack, 'track')
		track_elem.set('producer', playlist_id)

	#============================
	def _set_property(self, parent, name: str, value: str) -> None:
		prop = lxml.etree.SubElement(parent, 'property')
		prop.set('name', name)
		prop.text = value

	#============================
	def _next_producer_id(self, prefix: str) -> str:
		self.producer_counter += 1
		return f"{prefix}_{self.producer_counter:04d}"

	#============================
	def _write_output(self) -> None:
		os.makedirs(os.path.dirname(self.output_file) or '.', exist_ok=True)
		tree = lxml.etree.ElementTree(self.root)
		tree.write(self.output_file, encoding='utf-8', xml_declaration=True,
			pretty_print=True)

#============================================
#============================================
#============================================


def main():
	args = parse_args()
	project = ImageVideoProject(args.image_path, frame_effect=args.frame_effect,
		frame_effect_shape=args.frame_effect_shape, duration=args.duration,
		settings_file=args.settings_file, dry_run=True)
	exporter = MltExporter(project, args.output_file)
	exporter.export()
	print(f"wrote {exporter.output_file}")


if __name__ == '__main__':
	main()
